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

"""Meta-validation of raw schema documents.

A schema document must pass this gate before it is compiled. The check is in
two layers:

* the JSON Schema Draft 7 meta-schema (keyword value types), evaluated with
  the ``jsonschema`` library on the document and on every ``$defs`` entry,
  and
* the engine's own rules: only keywords the engine implements, local
  ``$ref`` targets that exist, no reference cycles, compilable patterns,
  ordered bounds and ``enum``/``const`` values of the declared type.

A document that passes compiles whenever its format names are registered.

Every problem found is collected into a single :class:`MetaSchemaError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from jsonschema import Draft7Validator

from ..exceptions import MetaSchemaError
from .evaluator import matches_json_type


ANNOTATION_KEYWORDS = frozenset({
    "$schema",
    "$id",
    "$comment",
    "title",
    "description",
    "default",
    "examples",
    "readOnly",
    "writeOnly",
    "definitions",
    "$defs",
})

ASSERTION_KEYWORDS = frozenset({
    "$ref",
    "type",
    "properties",
    "required",
    "additionalProperties",
    "items",
    "minItems",
    "maxItems",
    "uniqueItems",
    "pattern",
    "format",
    "enum",
    "const",
    "minimum",
    "maximum",
    "anyOf",
})

RECOGNIZED_KEYWORDS = ANNOTATION_KEYWORDS | ASSERTION_KEYWORDS

DEFINITION_KEYWORDS = ("definitions", "$defs")

_REF_RE = re.compile(r"^#/(definitions|\$defs)/([^/]+)$")

_META_VALIDATOR = Draft7Validator(Draft7Validator.META_SCHEMA)


@dataclass(frozen=True)
class MetaSchemaIssue:
    message: str
    schema_path: str = ""

    def __str__(self) -> str:
        if self.schema_path:
            return f"{self.message} (schema_path={self.schema_path})"
        return self.message


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _join_path(base: str, token: Any) -> str:
    return f"{base}/{_jp_escape(str(token))}"


def parse_ref(ref: str) -> Optional[Tuple[str, str]]:
    """Split a local reference into (definitions keyword, name)."""
    m = _REF_RE.match(ref)
    if m is None:
        return None
    return m.group(1), m.group(2).replace("~1", "/").replace("~0", "~")


def iter_subschemas(node: Dict[str, Any], path: str) -> Iterator[Tuple[Any, str]]:
    """Yield (subschema, schema_path) for every direct child schema of a node."""
    properties = node.get("properties")
    if isinstance(properties, dict):
        for name, child in properties.items():
            yield child, _join_path(_join_path(path, "properties"), name)

    additional = node.get("additionalProperties")
    if isinstance(additional, dict):
        yield additional, _join_path(path, "additionalProperties")

    items = node.get("items")
    if isinstance(items, (dict, bool)):
        yield items, _join_path(path, "items")

    any_of = node.get("anyOf")
    if isinstance(any_of, list):
        for idx, child in enumerate(any_of):
            yield child, _join_path(_join_path(path, "anyOf"), idx)

    for keyword in DEFINITION_KEYWORDS:
        definitions = node.get(keyword)
        if isinstance(definitions, dict):
            for name, child in definitions.items():
                yield child, _join_path(_join_path(path, keyword), name)


def _draft7_errors(schema_doc: Any, base: str) -> Iterator[MetaSchemaIssue]:
    for error in _META_VALIDATOR.iter_errors(schema_doc):
        path = base + "".join(f"/{_jp_escape(str(p))}" for p in error.absolute_path)
        yield MetaSchemaIssue(message=error.message, schema_path=path)


def _defs_entries(node: Any, path: str) -> Iterator[Tuple[Any, str]]:
    """Yield every ``$defs`` entry in the document, at any depth."""
    if not isinstance(node, dict):
        return
    for child, child_path in iter_subschemas(node, path):
        if child_path.startswith(_join_path(path, "$defs") + "/"):
            yield child, child_path
        yield from _defs_entries(child, child_path)


def _draft7_issues(schema_doc: Any) -> List[MetaSchemaIssue]:
    # "$defs" is not a Draft 7 keyword, so its entries are checked one by one.
    issues = list(_draft7_errors(schema_doc, ""))
    for definition, def_path in _defs_entries(schema_doc, ""):
        issues.extend(_draft7_errors(definition, def_path))
    issues.sort(key=lambda issue: issue.schema_path)
    return issues


def _collect_refs(node: Any, path: str, refs: List[Tuple[str, str]]) -> None:
    if not isinstance(node, dict):
        return
    ref = node.get("$ref")
    if isinstance(ref, str):
        refs.append((ref, _join_path(path, "$ref")))
    for child, child_path in iter_subschemas(node, path):
        _collect_refs(child, child_path, refs)


def _declared_types(node: Dict[str, Any]) -> List[str]:
    declared = node.get("type")
    if isinstance(declared, str):
        return [declared]
    if isinstance(declared, list):
        return [t for t in declared if isinstance(t, str)]
    return []


def _is_bound(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _value_issues(node: Dict[str, Any], path: str) -> Iterator[MetaSchemaIssue]:
    """Well-typed keyword values that contradict each other or cannot be compiled."""
    pattern = node.get("pattern")
    if isinstance(pattern, str):
        try:
            re.compile(pattern)
        except re.error as exc:
            yield MetaSchemaIssue(f"Invalid pattern '{pattern}': {exc}", _join_path(path, "pattern"))

    for low_keyword, high_keyword in (("minimum", "maximum"), ("minItems", "maxItems")):
        low, high = node.get(low_keyword), node.get(high_keyword)
        if _is_bound(low) and _is_bound(high) and low > high:
            yield MetaSchemaIssue(
                f"'{low_keyword}' {low} is greater than '{high_keyword}' {high}",
                _join_path(path, low_keyword),
            )

    types = _declared_types(node)
    if not types:
        return
    allowed: List[Tuple[Any, str]] = []
    if isinstance(node.get("enum"), list):
        allowed.extend(
            (value, _join_path(_join_path(path, "enum"), idx)) for idx, value in enumerate(node["enum"])
        )
    if "const" in node:
        allowed.append((node["const"], _join_path(path, "const")))
    for value, value_path in allowed:
        if not any(matches_json_type(value, t) for t in types):
            yield MetaSchemaIssue(
                f"Allowed value {value!r} does not match declared type {' | '.join(types)}",
                value_path,
            )


def _engine_issues(root: Dict[str, Any]) -> List[MetaSchemaIssue]:
    issues: List[MetaSchemaIssue] = []

    for keyword in DEFINITION_KEYWORDS:
        if keyword in root and not isinstance(root[keyword], dict):
            issues.append(MetaSchemaIssue(f"'{keyword}' must be an object", f"/{_jp_escape(keyword)}"))

    def _walk(node: Any, path: str) -> None:
        if isinstance(node, bool):
            if not node:
                issues.append(MetaSchemaIssue("Boolean schema 'false' is not supported", path))
            return
        if not isinstance(node, dict):
            # Reported by the Draft 7 layer.
            return
        for keyword in node:
            if keyword not in RECOGNIZED_KEYWORDS:
                issues.append(
                    MetaSchemaIssue(f"Unrecognized keyword '{keyword}'", _join_path(path, keyword))
                )
        if isinstance(node.get("items"), list):
            issues.append(
                MetaSchemaIssue("Tuple-form 'items' is not supported", _join_path(path, "items"))
            )
        issues.extend(_value_issues(node, path))
        for child, child_path in iter_subschemas(node, path):
            _walk(child, child_path)

    _walk(root, "")

    refs: List[Tuple[str, str]] = []
    _collect_refs(root, "", refs)
    for ref, ref_path in refs:
        target = parse_ref(ref)
        if target is None:
            issues.append(
                MetaSchemaIssue(
                    f"Unsupported reference '{ref}': only '#/definitions/<name>' and '#/$defs/<name>' are allowed",
                    ref_path,
                )
            )
            continue
        keyword, name = target
        definitions = root.get(keyword)
        if not isinstance(definitions, dict) or name not in definitions:
            issues.append(MetaSchemaIssue(f"Unresolvable reference '{ref}'", ref_path))

    issues.extend(_cycle_issues(root))
    return issues


def _cycle_issues(root: Dict[str, Any]) -> List[MetaSchemaIssue]:
    """Report every reference cycle between root-level definitions."""
    graph: Dict[str, List[str]] = {}
    for keyword in DEFINITION_KEYWORDS:
        definitions = root.get(keyword)
        if not isinstance(definitions, dict):
            continue
        for name, definition in definitions.items():
            node_id = f"#/{keyword}/{_jp_escape(name)}"
            refs: List[Tuple[str, str]] = []
            _collect_refs(definition, node_id[1:], refs)
            graph[node_id] = [ref for ref, _ in refs]

    issues: List[MetaSchemaIssue] = []
    reported: Set[frozenset] = set()
    done: Set[str] = set()

    def _visit(node_id: str, stack: List[str]) -> None:
        if node_id in stack:
            cycle = stack[stack.index(node_id):] + [node_id]
            key = frozenset(cycle)
            if key not in reported:
                reported.add(key)
                issues.append(
                    MetaSchemaIssue(
                        "Self-referential schema: " + " -> ".join(cycle),
                        cycle[0][1:],
                    )
                )
            return
        if node_id in done or node_id not in graph:
            return
        stack.append(node_id)
        for target in graph[node_id]:
            _visit(target, stack)
        stack.pop()
        done.add(node_id)

    for node_id in graph:
        _visit(node_id, [])
    return issues


def check_schema(schema_doc: Any) -> List[MetaSchemaIssue]:
    """Return every meta-schema issue of ``schema_doc`` (empty when valid)."""
    issues = _draft7_issues(schema_doc)
    if isinstance(schema_doc, dict):
        issues.extend(_engine_issues(schema_doc))
    elif schema_doc is False:
        issues.append(MetaSchemaIssue("Boolean schema 'false' is not supported", ""))
    return issues


def validate_schema(schema_doc: Any) -> None:
    """Validate a raw schema document against the meta-schema.

    Raises:
        MetaSchemaError: Listing every violated meta-constraint.
    """
    issues = check_schema(schema_doc)
    if issues:
        raise MetaSchemaError(issues)
