"""In-memory schema model.

Nodes are built once by the compiler and never mutated afterwards, so a
compiled tree can be shared freely between validation calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Tuple, Union


class UnknownPropertyPolicy(str, Enum):
    # additionalProperties: false
    REJECT = "reject"
    # additionalProperties: {schema}
    ALLOW = "allow"
    # additionalProperties absent or true
    IGNORE = "ignore"


@dataclass(frozen=True)
class ObjectNode:
    properties: Mapping[str, "SchemaNode"] = field(default_factory=lambda: MappingProxyType({}))
    required: FrozenSet[str] = frozenset()
    # Required names in declaration order, used for deterministic reporting.
    required_order: Tuple[str, ...] = ()
    unknown_policy: UnknownPropertyPolicy = UnknownPropertyPolicy.IGNORE
    additional: Optional["SchemaNode"] = None


@dataclass(frozen=True)
class ArrayNode:
    items: Optional["SchemaNode"] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False


@dataclass(frozen=True)
class StringNode:
    format: Optional[str] = None
    pattern: Optional[re.Pattern] = None


@dataclass(frozen=True)
class NumberNode:
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    integer: bool = False


@dataclass(frozen=True)
class BooleanNode:
    pass


@dataclass(frozen=True)
class NullNode:
    pass


@dataclass(frozen=True)
class EnumNode:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class AnyOfNode:
    options: Tuple["SchemaNode", ...]


@dataclass(frozen=True)
class AllOfNode:
    """Several independent assertions on one value, e.g. ``type`` next to ``anyOf``."""

    parts: Tuple["SchemaNode", ...]


@dataclass(frozen=True)
class TypeGuardNode:
    """Type-specific keywords without a declared ``type``.

    Each branch applies only to values of its JSON type; values of any other
    type pass.
    """

    branches: Tuple[Tuple[str, "SchemaNode"], ...]


@dataclass(frozen=True)
class AnyNode:
    """The empty schema ``{}``: every value is accepted."""


SchemaNode = Union[
    ObjectNode,
    ArrayNode,
    StringNode,
    NumberNode,
    BooleanNode,
    NullNode,
    EnumNode,
    AnyOfNode,
    AllOfNode,
    TypeGuardNode,
    AnyNode,
]


def type_label(node: SchemaNode) -> str:
    """JSON type name a node expects, for messages."""
    if isinstance(node, ObjectNode):
        return "object"
    if isinstance(node, ArrayNode):
        return "array"
    if isinstance(node, StringNode):
        return "string"
    if isinstance(node, NumberNode):
        return "integer" if node.integer else "number"
    if isinstance(node, BooleanNode):
        return "boolean"
    if isinstance(node, NullNode):
        return "null"
    if isinstance(node, EnumNode):
        return "enum"
    if isinstance(node, AnyOfNode):
        return " | ".join(type_label(opt) for opt in node.options)
    if isinstance(node, AllOfNode):
        return " & ".join(type_label(part) for part in node.parts)
    return "any"
