# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Compilation of raw schema documents into executable validators."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..exceptions import CompileError
from .evaluator import SemanticCheck, is_valid, validate
from .formats import FormatChecker, FormatRegistry, default_registry
from .meta_validator import parse_ref, validate_schema
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
)
from .violations import ViolationRecord

logger = logging.getLogger(__name__)


# Keywords that only apply to values of a given JSON type.
TYPE_KEYWORDS: Dict[str, frozenset] = {
    "object": frozenset({"properties", "required", "additionalProperties"}),
    "array": frozenset({"items", "minItems", "maxItems", "uniqueItems"}),
    "string": frozenset({"pattern", "format"}),
    "number": frozenset({"minimum", "maximum"}),
    "integer": frozenset({"minimum", "maximum"}),
    "boolean": frozenset(),
    "null": frozenset(),
}

_ALL_TYPE_KEYWORDS = frozenset().union(*TYPE_KEYWORDS.values())

# Types a typeless schema can constrain; "number" also covers integers.
_GUARDED_TYPES = ("object", "array", "string", "number")


@dataclass(frozen=True)
class CompiledValidator:
    """Executable form of a schema.

    Immutable after compilation; one instance can serve any number of
    validation calls, including concurrent ones.
    """

    root: SchemaNode
    formats: Mapping[str, FormatChecker] = field(default_factory=lambda: MappingProxyType({}))
    semantic_checks: Tuple[SemanticCheck, ...] = ()

    def validate(self, document: Any) -> List[ViolationRecord]:
        return validate(self, document)

    def is_valid(self, document: Any) -> bool:
        return is_valid(self, document)

    def with_semantic_checks(self, *checks: SemanticCheck) -> "CompiledValidator":
        """Return a copy that also runs ``checks`` after the schema pass."""
        return replace(self, semantic_checks=self.semantic_checks + tuple(checks))


class _SchemaCompiler:
    """Depth-first translation of one meta-valid schema document.

    Keywords that sit side by side in one schema object are independent
    assertions: ``$ref``, the typed keywords, ``enum``/``const`` and
    ``anyOf`` each compile to one part, and several parts are joined with
    :class:`AllOfNode`.
    """

    def __init__(self, root: Any, registry: FormatRegistry):
        self.root = root
        self.registry = registry
        self.used_formats: Set[str] = set()
        self._definitions: Dict[str, SchemaNode] = {}

    def compile_node(self, raw: Any, path: str) -> SchemaNode:
        if raw is True:
            return AnyNode()

        parts: List[SchemaNode] = []
        if "$ref" in raw:
            parts.append(self._compile_ref(raw["$ref"], path))

        typed = self._compile_typed_part(raw, path)
        if typed is not None:
            parts.append(typed)

        if "enum" in raw:
            parts.append(EnumNode(values=tuple(raw["enum"])))
        if "const" in raw:
            parts.append(EnumNode(values=(raw["const"],)))

        if "anyOf" in raw:
            parts.append(
                AnyOfNode(
                    options=tuple(
                        self.compile_node(option, f"{path}/anyOf/{idx}")
                        for idx, option in enumerate(raw["anyOf"])
                    )
                )
            )

        if not parts:
            return AnyNode()
        if len(parts) == 1:
            return parts[0]
        return AllOfNode(parts=tuple(parts))

    def _compile_typed_part(self, raw: Dict[str, Any], path: str) -> Optional[SchemaNode]:
        types = self._declared_types(raw)
        constrained = any(k in raw for k in _ALL_TYPE_KEYWORDS)

        if not types:
            if not constrained:
                return None
            branches = tuple(
                (type_name, self._compile_typed(type_name, raw, path))
                for type_name in _GUARDED_TYPES
                if any(k in raw for k in TYPE_KEYWORDS[type_name])
            )
            return TypeGuardNode(branches=branches)

        # Allowed values already match the declared type; the type check
        # only adds something when other typed keywords are present.
        if ("enum" in raw or "const" in raw) and not constrained:
            return None

        if len(types) == 1:
            return self._compile_typed(types[0], raw, path)
        return AnyOfNode(options=tuple(self._compile_typed(t, raw, path) for t in types))

    @staticmethod
    def _declared_types(raw: Dict[str, Any]) -> List[str]:
        declared = raw.get("type")
        if declared is None:
            return []
        if isinstance(declared, str):
            return [declared]
        return list(declared)

    def _compile_ref(self, ref: str, path: str) -> SchemaNode:
        if ref in self._definitions:
            return self._definitions[ref]
        keyword, name = parse_ref(ref)
        node = self.compile_node(self.root[keyword][name], ref[1:])
        self._definitions[ref] = node
        return node

    def _compile_typed(self, type_name: str, raw: Dict[str, Any], path: str) -> SchemaNode:
        if type_name == "object":
            return self._compile_object(raw, path)
        if type_name == "array":
            return self._compile_array(raw, path)
        if type_name == "string":
            return self._compile_string(raw, path)
        if type_name in ("number", "integer"):
            return NumberNode(
                minimum=raw.get("minimum"),
                maximum=raw.get("maximum"),
                integer=type_name == "integer",
            )
        if type_name == "boolean":
            return BooleanNode()
        return NullNode()

    def _compile_object(self, raw: Dict[str, Any], path: str) -> ObjectNode:
        properties = {
            name: self.compile_node(child, f"{path}/properties/{name}")
            for name, child in raw.get("properties", {}).items()
        }
        required_order = tuple(dict.fromkeys(raw.get("required", ())))

        additional = raw.get("additionalProperties", True)
        if additional is False:
            policy, additional_node = UnknownPropertyPolicy.REJECT, None
        elif isinstance(additional, dict):
            policy = UnknownPropertyPolicy.ALLOW
            additional_node = self.compile_node(additional, f"{path}/additionalProperties")
        else:
            policy, additional_node = UnknownPropertyPolicy.IGNORE, None

        return ObjectNode(
            properties=MappingProxyType(properties),
            required=frozenset(required_order),
            required_order=required_order,
            unknown_policy=policy,
            additional=additional_node,
        )

    def _compile_array(self, raw: Dict[str, Any], path: str) -> ArrayNode:
        items = raw.get("items")
        return ArrayNode(
            items=self.compile_node(items, f"{path}/items") if items is not None else None,
            min_items=raw.get("minItems"),
            max_items=raw.get("maxItems"),
            unique_items=bool(raw.get("uniqueItems", False)),
        )

    def _compile_string(self, raw: Dict[str, Any], path: str) -> StringNode:
        format_name = raw.get("format")
        if format_name is not None:
            if format_name not in self.registry:
                raise CompileError(
                    f"Unknown format '{format_name}'. Registered formats: {', '.join(self.registry.names())}",
                    f"{path}/format",
                )
            self.used_formats.add(format_name)

        pattern = re.compile(raw["pattern"]) if "pattern" in raw else None
        return StringNode(format=format_name, pattern=pattern)


def compile_schema(
    schema_doc: Any,
    registry: Optional[FormatRegistry] = None,
    semantic_checks: Sequence[SemanticCheck] = (),
) -> CompiledValidator:
    """Meta-validate and compile a raw schema document.

    Args:
        schema_doc: Parsed schema document (dict or ``True``)
        registry: Format registry to bind ``format`` names against.
            Defaults to :func:`default_registry`.
        semantic_checks: Cross-field checks run after the schema pass

    Returns:
        An immutable :class:`CompiledValidator`

    Raises:
        MetaSchemaError: If the document violates the meta-schema, including
            contradictory keyword values and invalid patterns
        CompileError: If a format name is not registered in ``registry``
    """
    validate_schema(schema_doc)

    if registry is None:
        registry = default_registry()

    compiler = _SchemaCompiler(schema_doc, registry)
    root = compiler.compile_node(schema_doc, "")
    formats = MappingProxyType({name: registry.get(name) for name in sorted(compiler.used_formats)})

    schema_id = schema_doc.get("$id", "<anonymous>") if isinstance(schema_doc, dict) else "<boolean>"
    logger.debug(f"Compiled schema {schema_id} with formats {list(formats)}")
    return CompiledValidator(root=root, formats=formats, semantic_checks=tuple(semantic_checks))
