"""Tests for the evaluation engine in gnomad_lite_schema.schema.evaluator."""

import threading

import pytest

from gnomad_lite_schema.schema import ViolationKind, compile_schema, is_valid, validate
from gnomad_lite_schema.schema.evaluator import json_equal
from gnomad_lite_schema.schema.violations import ViolationRecord, format_path, json_pointer


def _kinds(violations):
    return [v.kind for v in violations]


def _locations(violations):
    return [v.location for v in violations]


PAIR_SCHEMA = {
    "type": "object",
    "properties": {
        "ac": {"type": "integer", "minimum": 0},
        "an": {"type": "integer", "minimum": 0},
    },
    "required": ["ac", "an"],
    "additionalProperties": False,
}


class TestObjects:
    def test_valid_object(self):
        compiled = compile_schema(PAIR_SCHEMA)
        assert validate(compiled, {"ac": 1, "an": 2}) == []
        assert is_valid(compiled, {"ac": 1, "an": 2})

    def test_missing_required_in_schema_order(self):
        violations = compile_schema(PAIR_SCHEMA).validate({})
        assert _kinds(violations) == [ViolationKind.MISSING_REQUIRED] * 2
        assert _locations(violations) == ["ac", "an"]

    def test_required_without_property_schema(self):
        compiled = compile_schema({"type": "object", "required": ["id"]})
        violations = compiled.validate({"other": 1})
        assert _kinds(violations) == [ViolationKind.MISSING_REQUIRED]
        assert violations[0].path == ("id",)

    def test_unexpected_property_rejected(self):
        violations = compile_schema(PAIR_SCHEMA).validate({"ac": 1, "an": 2, "af": 0.5})
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_PROPERTY]
        assert violations[0].path == ("af",)
        assert violations[0].value == 0.5

    def test_unknown_properties_ignored_by_default(self):
        compiled = compile_schema({"type": "object", "properties": {"a": {"type": "string"}}})
        assert compiled.validate({"a": "x", "b": [1, 2]}) == []

    def test_unknown_properties_checked_against_additional_schema(self):
        compiled = compile_schema({
            "type": "object",
            "additionalProperties": {"type": "integer", "minimum": 0},
        })
        violations = compiled.validate({"afr": 3, "nfe": -1, "amr": "x"})
        assert _kinds(violations) == [ViolationKind.RANGE_VIOLATION, ViolationKind.TYPE_MISMATCH]
        assert _locations(violations) == ["nfe", "amr"]

    def test_not_an_object(self):
        violations = compile_schema(PAIR_SCHEMA).validate([1, 2])
        assert _kinds(violations) == [ViolationKind.TYPE_MISMATCH]
        assert violations[0].path == ()
        assert "expected object, got array" in violations[0].message


class TestArrays:
    def test_items_visited_with_index(self):
        compiled = compile_schema({"type": "array", "items": {"type": "string"}})
        violations = compiled.validate(["a", 1, "b", None])
        assert _locations(violations) == ["[1]", "[3]"]

    def test_length_bounds_stop_item_checks(self):
        compiled = compile_schema({"type": "array", "items": {"type": "string"}, "minItems": 3})
        violations = compiled.validate([1, 2])
        assert _kinds(violations) == [ViolationKind.LENGTH_OUT_OF_RANGE]

    def test_max_items(self):
        compiled = compile_schema({"type": "array", "maxItems": 1})
        assert _kinds(compiled.validate([1, 2])) == [ViolationKind.LENGTH_OUT_OF_RANGE]
        assert compiled.validate([1]) == []

    def test_unique_items(self):
        compiled = compile_schema({"type": "array", "items": {"type": "string"}, "uniqueItems": True})
        violations = compiled.validate(["AC0", "RF", "AC0"])
        assert _kinds(violations) == [ViolationKind.UNIQUE_ITEMS_VIOLATION]
        assert violations[0].path == (2,)

    def test_unique_items_uses_json_equality(self):
        compiled = compile_schema({"type": "array", "uniqueItems": True})
        assert compiled.validate([1, True]) == []
        assert len(compiled.validate([1, 1.0])) == 1


class TestScalars:
    def test_string_type(self):
        violations = compile_schema({"type": "string"}).validate(42)
        assert _kinds(violations) == [ViolationKind.TYPE_MISMATCH]

    def test_format_violation(self):
        compiled = compile_schema({"type": "string", "format": "ensembl-gene-id"})
        violations = compiled.validate("ENSQ0101010101")
        assert _kinds(violations) == [ViolationKind.FORMAT_VIOLATION]
        assert "ensembl-gene-id" in violations[0].message

    def test_pattern_is_searched(self):
        compiled = compile_schema({"type": "string", "pattern": "[0-9]"})
        assert compiled.validate("abc1") == []
        assert _kinds(compiled.validate("abc")) == [ViolationKind.PATTERN_MISMATCH]

    def test_format_reported_before_pattern(self):
        compiled = compile_schema({"type": "string", "format": "variant-id", "pattern": "^X-"})
        assert _kinds(compiled.validate("bad")) == [ViolationKind.FORMAT_VIOLATION]
        assert _kinds(compiled.validate("1-234-A-C")) == [ViolationKind.PATTERN_MISMATCH]
        assert compiled.validate("X-234-A-C") == []

    @pytest.mark.parametrize("value", [True, "1", None, float("nan"), float("inf")])
    def test_number_type_mismatch(self, value):
        violations = compile_schema({"type": "number"}).validate(value)
        assert _kinds(violations) == [ViolationKind.TYPE_MISMATCH]

    def test_integer_rejects_non_integral(self):
        compiled = compile_schema({"type": "integer"})
        assert compiled.validate(3) == []
        assert compiled.validate(3.0) == []
        assert _kinds(compiled.validate(3.5)) == [ViolationKind.TYPE_MISMATCH]
        assert _kinds(compiled.validate(False)) == [ViolationKind.TYPE_MISMATCH]

    @pytest.mark.parametrize("value, ok", [(0.0, True), (1.0, True), (0, True), (1, True), (-0.0001, False), (1.0001, False)])
    def test_inclusive_bounds(self, value, ok):
        violations = compile_schema({"type": "number", "minimum": 0, "maximum": 1}).validate(value)
        if ok:
            assert violations == []
        else:
            assert _kinds(violations) == [ViolationKind.RANGE_VIOLATION]

    def test_boolean_and_null(self):
        assert compile_schema({"type": "boolean"}).validate(False) == []
        assert _kinds(compile_schema({"type": "boolean"}).validate(0)) == [ViolationKind.TYPE_MISMATCH]
        assert compile_schema({"type": "null"}).validate(None) == []
        assert _kinds(compile_schema({"type": "null"}).validate("")) == [ViolationKind.TYPE_MISMATCH]

    def test_enum(self):
        compiled = compile_schema({"enum": ["HC", "LC", None]})
        assert compiled.validate("HC") == []
        assert compiled.validate(None) == []
        violations = compiled.validate("OS")
        assert _kinds(violations) == [ViolationKind.ENUM_VIOLATION]
        assert "'OS'" in violations[0].message

    def test_enum_does_not_confuse_booleans_and_numbers(self):
        compiled = compile_schema({"enum": [1, 0]})
        assert _kinds(compiled.validate(True)) == [ViolationKind.ENUM_VIOLATION]
        assert compiled.validate(1.0) == []


class TestAnyOf:
    SCHEMA = {
        "anyOf": [
            {"type": "object", "properties": {"ac": {"type": "integer"}, "an": {"type": "integer"}}, "required": ["ac", "an"]},
            {"type": "null"},
        ]
    }

    def test_any_alternative_passes(self):
        compiled = compile_schema(self.SCHEMA)
        assert compiled.validate(None) == []
        assert compiled.validate({"ac": 1, "an": 2}) == []

    def test_no_alternative_reports_closest(self):
        violations = compile_schema(self.SCHEMA).validate({"ac": "one", "an": 2})
        assert _kinds(violations) == [ViolationKind.NO_ALTERNATIVE_MATCHED]
        causes = violations[0].causes
        assert [c.kind for c in causes] == [ViolationKind.TYPE_MISMATCH]
        assert causes[0].path == ("ac",)

    def test_ties_keep_first_alternative(self):
        compiled = compile_schema({"anyOf": [{"type": "string"}, {"type": "integer"}]})
        violations = compiled.validate(1.5)
        assert "expected string" in violations[0].causes[0].message


class TestTraversal:
    SCHEMA = {
        "type": "object",
        "properties": {
            "variant_id": {"type": "string", "format": "variant-id"},
            "counts": PAIR_SCHEMA,
            "filters": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["variant_id", "counts"],
    }

    def test_collects_every_defect_in_schema_order(self):
        document = {"filters": ["PASS", 3], "counts": {"an": -1}, "variant_id": "1-0-A-C"}
        violations = compile_schema(self.SCHEMA).validate(document)
        assert _locations(violations) == ["variant_id", "counts.ac", "counts.an", "filters[1]"]
        assert _kinds(violations) == [
            ViolationKind.FORMAT_VIOLATION,
            ViolationKind.MISSING_REQUIRED,
            ViolationKind.RANGE_VIOLATION,
            ViolationKind.TYPE_MISMATCH,
        ]

    def test_validation_is_idempotent(self):
        compiled = compile_schema(self.SCHEMA)
        document = {"counts": {"ac": "x"}, "filters": [None]}
        assert compiled.validate(document) == compiled.validate(document)

    def test_document_is_not_modified(self):
        document = {"variant_id": "1-234-A-C", "counts": {"ac": 1, "an": 2}}
        compile_schema(self.SCHEMA).validate(document)
        assert document == {"variant_id": "1-234-A-C", "counts": {"ac": 1, "an": 2}}

    def test_concurrent_validations_do_not_interfere(self):
        compiled = compile_schema(self.SCHEMA)
        good = {"variant_id": "1-234-A-C", "counts": {"ac": 1, "an": 2}}
        bad = {"variant_id": "bad", "counts": {}}
        expected_bad = compiled.validate(bad)
        failures = []

        def worker(document, expected):
            for _ in range(200):
                if compiled.validate(document) != expected:
                    failures.append(document)

        threads = [threading.Thread(target=worker, args=(good, [])) for _ in range(4)]
        threads += [threading.Thread(target=worker, args=(bad, expected_bad)) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert failures == []

    def test_semantic_checks_run_after_schema_pass(self):
        def no_empty_filters(document):
            if document.get("filters") == []:
                yield ViolationRecord(path=("filters",), kind=ViolationKind.LENGTH_OUT_OF_RANGE, message="empty")

        compiled = compile_schema(self.SCHEMA, semantic_checks=[no_empty_filters])
        violations = compiled.validate({"variant_id": "bad", "counts": {"ac": 1, "an": 1}, "filters": []})
        assert _kinds(violations) == [ViolationKind.FORMAT_VIOLATION, ViolationKind.LENGTH_OUT_OF_RANGE]


class TestPaths:
    def test_format_path(self):
        assert format_path(("genes", 0, "ensembl_id")) == "genes[0].ensembl_id"
        assert format_path(()) == "$"
        assert format_path((2,)) == "[2]"

    def test_json_pointer(self):
        assert json_pointer(("genes", 0, "a/b")) == "/genes/0/a~1b"

    def test_to_dict_includes_causes(self):
        cause = ViolationRecord(path=("x",), kind=ViolationKind.TYPE_MISMATCH, message="m")
        record = ViolationRecord(path=(), kind=ViolationKind.NO_ALTERNATIVE_MATCHED, message="n", causes=(cause,))
        assert record.to_dict()["causes"] == [{"path": "x", "kind": "TypeMismatch", "message": "m"}]
        assert str(cause) == "x: TypeMismatch: m"


class TestJsonEqual:
    def test_nested(self):
        assert json_equal({"a": [1, {"b": None}]}, {"a": [1.0, {"b": None}]})
        assert not json_equal({"a": [True]}, {"a": [1]})
        assert not json_equal("1", 1)
