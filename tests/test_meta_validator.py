"""Tests for gnomad_lite_schema.schema.meta_validator."""

import pytest

from gnomad_lite_schema.exceptions import MetaSchemaError
from gnomad_lite_schema.models.json_schema_loader import load_schema
from gnomad_lite_schema.schema.compiler import compile_schema
from gnomad_lite_schema.schema.meta_validator import check_schema, validate_schema


def _paths(issues):
    return [issue.schema_path for issue in issues]


class TestWellFormedSchemas:
    def test_bundled_schema_passes(self):
        validate_schema(load_schema("gnomad_lite", "1.0.0", use_cache=False))

    def test_minimal_schemas_pass(self):
        validate_schema({})
        validate_schema(True)
        validate_schema({"type": "string", "title": "name", "description": "free text"})

    def test_defs_reference_passes(self):
        schema = {
            "$defs": {"count": {"type": "integer", "minimum": 0}},
            "type": "object",
            "properties": {"ac": {"$ref": "#/$defs/count"}},
        }
        assert check_schema(schema) == []


class TestKeywordTypes:
    def test_required_must_be_array_of_strings(self):
        issues = check_schema({"type": "object", "required": "ac"})
        assert "/required" in _paths(issues)

    def test_properties_must_be_object(self):
        issues = check_schema({"type": "object", "properties": ["ac"]})
        assert "/properties" in _paths(issues)

    def test_unknown_type_name(self):
        issues = check_schema({"type": "variant"})
        assert "/type" in _paths(issues)

    def test_nested_keyword_type_error_located(self):
        issues = check_schema({"type": "object", "properties": {"ac": {"minimum": "zero"}}})
        assert "/properties/ac/minimum" in _paths(issues)


class TestEngineRules:
    def test_unrecognized_keyword(self):
        issues = check_schema({"type": "string", "minLength": 1})
        assert [i.schema_path for i in issues] == ["/minLength"]
        assert "Unrecognized keyword 'minLength'" in issues[0].message

    def test_unrecognized_keyword_in_definition(self):
        issues = check_schema({"definitions": {"x": {"type": "string", "maxLength": 3}}})
        assert "/definitions/x/maxLength" in _paths(issues)

    def test_tuple_items_rejected(self):
        issues = check_schema({"type": "array", "items": [{"type": "string"}]})
        assert "/items" in _paths(issues)

    def test_false_subschema_rejected(self):
        issues = check_schema({"type": "array", "items": False})
        assert "/items" in _paths(issues)

    def test_additional_properties_false_is_allowed(self):
        assert check_schema({"type": "object", "additionalProperties": False}) == []

    def test_remote_reference_rejected(self):
        issues = check_schema({"$ref": "http://example.com/schema.json"})
        assert "/$ref" in _paths(issues)

    def test_unresolvable_reference(self):
        issues = check_schema({"properties": {"a": {"$ref": "#/definitions/missing"}}})
        assert _paths(issues) == ["/properties/a/$ref"]
        assert "Unresolvable" in issues[0].message

    def test_self_reference_rejected(self):
        schema = {
            "definitions": {"node": {"type": "object", "properties": {"child": {"$ref": "#/definitions/node"}}}},
            "$ref": "#/definitions/node",
        }
        issues = check_schema(schema)
        assert any("Self-referential" in issue.message for issue in issues)

    def test_indirect_cycle_reported_once(self):
        schema = {
            "definitions": {
                "a": {"type": "array", "items": {"$ref": "#/definitions/b"}},
                "b": {"anyOf": [{"$ref": "#/definitions/a"}, {"type": "null"}]},
            },
        }
        issues = [i for i in check_schema(schema) if "Self-referential" in i.message]
        assert len(issues) == 1
        assert "#/definitions/a" in issues[0].message and "#/definitions/b" in issues[0].message

    def test_shared_reference_is_not_a_cycle(self):
        schema = {
            "definitions": {
                "count": {"type": "integer"},
                "pair": {"type": "object", "properties": {"ac": {"$ref": "#/definitions/count"}, "an": {"$ref": "#/definitions/count"}}},
            },
            "$ref": "#/definitions/pair",
        }
        assert check_schema(schema) == []


class TestDefsEntries:
    @staticmethod
    def _schema(definition):
        return {
            "$defs": {"a": definition},
            "type": "object",
            "properties": {"x": {"$ref": "#/$defs/a"}},
        }

    @pytest.mark.parametrize(
        "definition, path",
        [
            ({"type": "object", "required": 5}, "/$defs/a/required"),
            ({"type": "string", "pattern": 5}, "/$defs/a/pattern"),
            ({"type": "object", "properties": ["x"]}, "/$defs/a/properties"),
            ({"type": "number", "minimum": "0"}, "/$defs/a/minimum"),
            (5, "/$defs/a"),
        ],
    )
    def test_keyword_types_checked(self, definition, path):
        with pytest.raises(MetaSchemaError) as excinfo:
            compile_schema(self._schema(definition))
        assert _paths(excinfo.value.issues) == [path]

    def test_nested_defs_checked(self):
        schema = {"$defs": {"outer": {"$defs": {"inner": {"type": "object", "required": 5}}}}}
        assert _paths(check_schema(schema)) == ["/$defs/outer/$defs/inner/required"]

    def test_same_checks_as_definitions(self):
        bad = {"type": "object", "required": 5}
        with_defs = check_schema({"$defs": {"a": bad}})
        with_definitions = check_schema({"definitions": {"a": bad}})
        assert [issue.message for issue in with_defs] == [issue.message for issue in with_definitions]


class TestValueRules:
    @pytest.mark.parametrize(
        "schema, path",
        [
            ({"type": "string", "pattern": "(unclosed"}, "/pattern"),
            ({"type": "number", "minimum": 2, "maximum": 1}, "/minimum"),
            ({"minimum": 2, "maximum": 1}, "/minimum"),
            ({"type": "array", "minItems": 3, "maxItems": 1}, "/minItems"),
            ({"type": "string", "enum": ["A", 1]}, "/enum/1"),
            ({"type": ["integer", "null"], "const": 1.5}, "/const"),
            ({"type": "object", "properties": {"lof": {"type": "string", "enum": ["HC", True]}}}, "/properties/lof/enum/1"),
        ],
    )
    def test_contradiction_reported(self, schema, path):
        assert _paths(check_schema(schema)) == [path]

    def test_consistent_values_pass(self):
        assert check_schema({"type": ["string", "null"], "enum": ["HC", "LC", None]}) == []
        assert check_schema({"type": "integer", "enum": [1, 2.0], "minimum": 1, "maximum": 1}) == []


class TestAggregation:
    def test_all_issues_reported_together(self):
        schema = {
            "type": "object",
            "required": "ac",
            "properties": {
                "ac": {"type": "integer", "exclusiveMinimum": 0},
                "id": {"$ref": "#/definitions/nope"},
            },
        }
        with pytest.raises(MetaSchemaError) as excinfo:
            validate_schema(schema)
        paths = _paths(excinfo.value.issues)
        assert "/required" in paths
        assert "/properties/ac/exclusiveMinimum" in paths
        assert "/properties/id/$ref" in paths
        assert "schema_path=/required" in str(excinfo.value)

    def test_non_object_root(self):
        with pytest.raises(MetaSchemaError):
            validate_schema(["type", "object"])

    def test_false_root(self):
        with pytest.raises(MetaSchemaError):
            validate_schema(False)
