"""Recursive evaluation of documents against a compiled schema tree.

Traversal never stops at the first problem: every reachable node is visited
so that one call reports every defect of a document. Object properties are
visited in schema declaration order, array elements in document order.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, List, Mapping, Tuple

from .nodes import (
    AllOfNode,
    AnyNode,
    AnyOfNode,
    ArrayNode,
    BooleanNode,
    EnumNode,
    NullNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
    TypeGuardNode,
    UnknownPropertyPolicy,
    type_label,
)
from .violations import PathToken, ViolationKind, ViolationRecord


Path = Tuple[PathToken, ...]
FormatMap = Mapping[str, Callable[[str], bool]]
SemanticCheck = Callable[[Any], Iterable[ViolationRecord]]


def describe(value: Any) -> str:
    """JSON type name of a Python value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def matches_json_type(value: Any, type_name: str) -> bool:
    if type_name == "object":
        return isinstance(value, dict)
    if type_name == "array":
        return isinstance(value, list)
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "number":
        return is_number(value)
    if type_name == "integer":
        return is_integral(value)
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "null":
        return value is None
    return False


def json_equal(a: Any, b: Any) -> bool:
    """Equality with JSON semantics: booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(json_equal(a[k], b[k]) for k in a)
    return type(a) is type(b) and a == b


def _type_mismatch(node: SchemaNode, value: Any, path: Path) -> List[ViolationRecord]:
    return [
        ViolationRecord(
            path=path,
            kind=ViolationKind.TYPE_MISMATCH,
            message=f"Invalid type: expected {type_label(node)}, got {describe(value)}",
            value=value,
        )
    ]


def _validate_object(node: ObjectNode, value: Any, path: Path, formats: FormatMap) -> List[ViolationRecord]:
    if not isinstance(value, dict):
        return _type_mismatch(node, value, path)

    issues: List[ViolationRecord] = []
    for name, child in node.properties.items():
        if name in value:
            issues.extend(_validate_node(child, value[name], path + (name,), formats))
        elif name in node.required:
            issues.append(
                ViolationRecord(
                    path=path + (name,),
                    kind=ViolationKind.MISSING_REQUIRED,
                    message=f"Missing required property '{name}'",
                )
            )

    for name in node.required_order:
        if name not in node.properties and name not in value:
            issues.append(
                ViolationRecord(
                    path=path + (name,),
                    kind=ViolationKind.MISSING_REQUIRED,
                    message=f"Missing required property '{name}'",
                )
            )

    for name, item in value.items():
        if name in node.properties:
            continue
        if node.unknown_policy is UnknownPropertyPolicy.REJECT:
            issues.append(
                ViolationRecord(
                    path=path + (str(name),),
                    kind=ViolationKind.UNEXPECTED_PROPERTY,
                    message=f"Unexpected property '{name}'",
                    value=item,
                )
            )
        elif node.unknown_policy is UnknownPropertyPolicy.ALLOW and node.additional is not None:
            issues.extend(_validate_node(node.additional, item, path + (str(name),), formats))
    return issues


def _validate_array(node: ArrayNode, value: Any, path: Path, formats: FormatMap) -> List[ViolationRecord]:
    if not isinstance(value, list):
        return _type_mismatch(node, value, path)

    length = len(value)
    if node.min_items is not None and length < node.min_items:
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.LENGTH_OUT_OF_RANGE,
                message=f"Array has {length} item(s), expected at least {node.min_items}",
                value=length,
            )
        ]
    if node.max_items is not None and length > node.max_items:
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.LENGTH_OUT_OF_RANGE,
                message=f"Array has {length} item(s), expected at most {node.max_items}",
                value=length,
            )
        ]

    issues: List[ViolationRecord] = []
    for idx, item in enumerate(value):
        if node.items is not None:
            issues.extend(_validate_node(node.items, item, path + (idx,), formats))
        if node.unique_items:
            for prev_idx in range(idx):
                if json_equal(value[prev_idx], item):
                    issues.append(
                        ViolationRecord(
                            path=path + (idx,),
                            kind=ViolationKind.UNIQUE_ITEMS_VIOLATION,
                            message=f"Duplicate item {item!r} (first seen at index {prev_idx})",
                            value=item,
                        )
                    )
                    break
    return issues


def _validate_string(node: StringNode, value: Any, path: Path, formats: FormatMap) -> List[ViolationRecord]:
    if not isinstance(value, str):
        return _type_mismatch(node, value, path)

    if node.format is not None and not formats[node.format](value):
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.FORMAT_VIOLATION,
                message=f"'{value}' is not a valid '{node.format}'",
                value=value,
            )
        ]
    if node.pattern is not None and node.pattern.search(value) is None:
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.PATTERN_MISMATCH,
                message=f"'{value}' does not match pattern '{node.pattern.pattern}'",
                value=value,
            )
        ]
    return []


def _validate_number(node: NumberNode, value: Any, path: Path) -> List[ViolationRecord]:
    if not is_number(value):
        return _type_mismatch(node, value, path)
    if isinstance(value, float) and not math.isfinite(value):
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.TYPE_MISMATCH,
                message=f"Invalid type: expected finite {type_label(node)}, got {value}",
                value=value,
            )
        ]
    if node.integer and not is_integral(value):
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.TYPE_MISMATCH,
                message=f"Invalid type: expected integer, got non-integral number {value}",
                value=value,
            )
        ]

    if node.minimum is not None and value < node.minimum:
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.RANGE_VIOLATION,
                message=f"{value} is less than the minimum of {node.minimum}",
                value=value,
            )
        ]
    if node.maximum is not None and value > node.maximum:
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.RANGE_VIOLATION,
                message=f"{value} is greater than the maximum of {node.maximum}",
                value=value,
            )
        ]
    return []


def _validate_any_of(node: AnyOfNode, value: Any, path: Path, formats: FormatMap) -> List[ViolationRecord]:
    # Keep the violations of the closest alternative to explain the failure.
    best = None
    for option in node.options:
        errs = _validate_node(option, value, path, formats)
        if not errs:
            return []
        if best is None or len(errs) < len(best):
            best = errs
    return [
        ViolationRecord(
            path=path,
            kind=ViolationKind.NO_ALTERNATIVE_MATCHED,
            message=f"Value does not match any allowed schema ({type_label(node)})",
            value=value,
            causes=tuple(best or ()),
        )
    ]


def _validate_node(node: SchemaNode, value: Any, path: Path, formats: FormatMap) -> List[ViolationRecord]:
    if isinstance(node, ObjectNode):
        return _validate_object(node, value, path, formats)

    if isinstance(node, ArrayNode):
        return _validate_array(node, value, path, formats)

    if isinstance(node, StringNode):
        return _validate_string(node, value, path, formats)

    if isinstance(node, NumberNode):
        return _validate_number(node, value, path)

    if isinstance(node, BooleanNode):
        return [] if isinstance(value, bool) else _type_mismatch(node, value, path)

    if isinstance(node, NullNode):
        return [] if value is None else _type_mismatch(node, value, path)

    if isinstance(node, EnumNode):
        if any(json_equal(value, allowed) for allowed in node.values):
            return []
        allowed = ", ".join(repr(v) for v in node.values)
        return [
            ViolationRecord(
                path=path,
                kind=ViolationKind.ENUM_VIOLATION,
                message=f"{value!r} is not one of [{allowed}]",
                value=value,
            )
        ]

    if isinstance(node, AnyOfNode):
        return _validate_any_of(node, value, path, formats)

    if isinstance(node, AllOfNode):
        issues: List[ViolationRecord] = []
        for part in node.parts:
            issues.extend(_validate_node(part, value, path, formats))
        return issues

    if isinstance(node, TypeGuardNode):
        for type_name, branch in node.branches:
            if matches_json_type(value, type_name):
                return _validate_node(branch, value, path, formats)
        return []

    if isinstance(node, AnyNode):
        return []

    raise TypeError(f"Unknown schema node: {type(node).__name__}")


def validate(compiled, document: Any) -> List[ViolationRecord]:
    """Validate ``document`` and return every violation, in traversal order.

    Schema violations come first, followed by those reported by the compiled
    validator's semantic checks. An empty list means the document is valid.
    """
    violations = _validate_node(compiled.root, document, (), compiled.formats)
    for check in compiled.semantic_checks:
        violations.extend(check(document))
    return violations


def is_valid(compiled, document: Any) -> bool:
    return not validate(compiled, document)
