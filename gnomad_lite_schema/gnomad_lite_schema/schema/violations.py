"""Violation records produced by the evaluation engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union


PathToken = Union[str, int]


class ViolationKind(str, Enum):
    TYPE_MISMATCH = "TypeMismatch"
    MISSING_REQUIRED = "MissingRequired"
    UNEXPECTED_PROPERTY = "UnexpectedProperty"
    LENGTH_OUT_OF_RANGE = "LengthOutOfRange"
    PATTERN_MISMATCH = "PatternMismatch"
    FORMAT_VIOLATION = "FormatViolation"
    RANGE_VIOLATION = "RangeViolation"
    ENUM_VIOLATION = "EnumViolation"
    NO_ALTERNATIVE_MATCHED = "NoAlternativeMatched"
    UNIQUE_ITEMS_VIOLATION = "UniqueItemsViolation"

    def __str__(self) -> str:
        return self.value


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def format_path(path: Tuple[PathToken, ...]) -> str:
    """Render a path as ``genes[0].ensembl_id``; the root renders as ``$``."""
    if not path:
        return "$"
    parts = []
    for token in path:
        if isinstance(token, int):
            parts.append(f"[{token}]")
        elif parts:
            parts.append(f".{token}")
        else:
            parts.append(token)
    return "".join(parts)


def json_pointer(path: Tuple[PathToken, ...]) -> str:
    """Render a path as an RFC 6901 JSON pointer (``/genes/0/ensembl_id``)."""
    return "".join(f"/{_jp_escape(str(token))}" for token in path)


@dataclass(frozen=True)
class ViolationRecord:
    path: Tuple[PathToken, ...]
    kind: ViolationKind
    message: str
    value: Any = None
    # Sub-violations of the closest alternative for NoAlternativeMatched.
    causes: Tuple["ViolationRecord", ...] = ()

    @property
    def location(self) -> str:
        return format_path(self.path)

    @property
    def pointer(self) -> str:
        return json_pointer(self.path)

    def to_dict(self) -> dict:
        data = {
            "path": self.location,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.causes:
            data["causes"] = [cause.to_dict() for cause in self.causes]
        return data

    def __str__(self) -> str:
        return f"{self.location}: {self.kind.value}: {self.message}"
