"""gnomAD record rules that JSON Schema cannot express, and the factory for
the bundled gnomad-lite validator.

Semantic checks are cross-field constraints evaluated after the schema pass.
They only look at values the schema pass accepts as integers, so a mistyped
field is reported once, as a TypeMismatch.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

from ..config import validator_config
from ..schema.compiler import CompiledValidator, compile_schema
from ..schema.evaluator import SemanticCheck, is_integral
from ..schema.formats import FormatRegistry
from ..schema.violations import PathToken, ViolationKind, ViolationRecord
from .json_schema_loader import load_schema


GNOMAD_LITE_SCHEMA = "gnomad_lite"

FREQUENCY_SOURCES = ("exome", "genome")


def _records(document: Any, key: str) -> Iterable[Tuple[int, Dict[str, Any]]]:
    if not isinstance(document, dict):
        return
    records = document.get(key)
    if not isinstance(records, list):
        return
    for idx, record in enumerate(records):
        if isinstance(record, dict):
            yield idx, record


def _count_issue(counts: Any, path: Tuple[PathToken, ...]) -> Optional[ViolationRecord]:
    if not isinstance(counts, dict):
        return None
    ac, an = counts.get("ac"), counts.get("an")
    if not (is_integral(ac) and is_integral(an)):
        return None
    if ac > an:
        return ViolationRecord(
            path=path + ("ac",),
            kind=ViolationKind.RANGE_VIOLATION,
            message=f"Allele count {ac} exceeds allele number {an}",
            value=ac,
        )
    return None


def gene_region_semantics(document: Any) -> Iterable[ViolationRecord]:
    """Every gene must start at or before its stop position."""
    for idx, gene in _records(document, "genes"):
        start, stop = gene.get("start"), gene.get("stop")
        if not (is_integral(start) and is_integral(stop)):
            continue
        if start > stop:
            yield ViolationRecord(
                path=("genes", idx, "stop"),
                kind=ViolationKind.RANGE_VIOLATION,
                message=f"Gene stop {stop} is before start {start}",
                value=stop,
            )


def allele_count_semantics(document: Any) -> Iterable[ViolationRecord]:
    """AC can never exceed AN, overall or within an ancestry group."""
    for idx, variant in _records(document, "variants"):
        for source in FREQUENCY_SOURCES:
            data = variant.get(source)
            if not isinstance(data, dict):
                continue
            base = ("variants", idx, source)
            issue = _count_issue(data, base)
            if issue is not None:
                yield issue

            groups = data.get("ancestry_groups")
            if not isinstance(groups, dict):
                continue
            for group, counts in groups.items():
                issue = _count_issue(counts, base + ("ancestry_groups", str(group)))
                if issue is not None:
                    yield issue


def get_semantic_checks() -> Tuple[SemanticCheck, ...]:
    return (gene_region_semantics, allele_count_semantics)


def build_gnomad_validator(
    version: Optional[str] = None,
    registry: Optional[FormatRegistry] = None,
) -> CompiledValidator:
    """Compile the bundled gnomad-lite schema together with its record rules.

    Args:
        version: Schema version, defaults to the configured schema version
        registry: Format registry, defaults to the built-in gnomAD formats
    """
    schema = load_schema(
        GNOMAD_LITE_SCHEMA,
        version or validator_config.schema_version,
        use_cache=validator_config.cache_enabled,
    )
    return compile_schema(schema, registry=registry, semantic_checks=get_semantic_checks())
