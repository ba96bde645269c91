"""Unit tests for the schema model.

Tests cover:
- Parsing schema documents into nodes
- Rejection of malformed documents with parse_error
- Serialization back to the dictionary form
- Immutability of schema nodes
"""

import dataclasses

import pytest

from formshape.errors import SchemaParseError
from formshape.schema import (
    BooleanSchema,
    NumberMessages,
    NumberSchema,
    ObjectMessages,
    ObjectSchema,
    StringMessages,
    StringSchema,
    UiConfig,
    parse_schema,
    schema_to_dict,
)
from formshape.types import ErrorCode, SchemaKind


SIGNUP_DOCUMENT = {
    "type": "object",
    "shape": {
        "email": {
            "type": "string",
            "min": 3,
            "email": True,
            "ui": {"label": "Email", "placeholder": "you@example.com"},
            "messages": {"email": "Please enter a valid email"},
        },
        "age": {"type": "number", "min": 18, "integer": True, "messages": {"min": "Too young"}},
        "terms": {"type": "boolean", "ui": {"description": "Accept the terms"}},
        "website": {"type": "string", "url": True, "pattern": "^https://"},
    },
    "messages": {"required": "Mandatory"},
}


class TestParseSchema:
    """Parsing well-formed documents."""

    def test_parse_nested_document(self):
        schema = parse_schema(SIGNUP_DOCUMENT)

        assert isinstance(schema, ObjectSchema)
        assert schema.kind == SchemaKind.OBJECT
        assert set(schema.shape) == {"email", "age", "terms", "website"}
        assert schema.messages == ObjectMessages(required="Mandatory")

        email = schema.shape["email"]
        assert email == StringSchema(
            min=3,
            email=True,
            ui=UiConfig(label="Email", placeholder="you@example.com"),
            messages=StringMessages(email="Please enter a valid email"),
        )
        assert schema.shape["age"] == NumberSchema(min=18, integer=True, messages=NumberMessages(min="Too young"))
        assert schema.shape["terms"] == BooleanSchema(ui=UiConfig(description="Accept the terms"))
        assert schema.shape["website"].pattern == "^https://"

    def test_integral_float_length_is_normalized(self):
        schema = parse_schema({"type": "string", "min": 3.0})

        assert schema.min == 3
        assert isinstance(schema.min, int)

    def test_null_constraints_are_absent(self):
        schema = parse_schema({"type": "number", "min": None, "ui": None})

        assert schema == NumberSchema()

    def test_variant_from_dict(self):
        assert StringSchema.from_dict({"type": "string", "max": 4}) == StringSchema(max=4)

    def test_variant_from_dict_rejects_other_kind(self):
        with pytest.raises(SchemaParseError, match="Expected a number schema, got string"):
            NumberSchema.from_dict({"type": "string"})


class TestParseErrors:
    """Malformed documents are rejected with parse_error."""

    @pytest.mark.parametrize("document", [
        {"type": "list"},
        {"min": 3},
        {"type": None},
        {"type": ["string"]},
    ])
    def test_unknown_or_missing_type(self, document):
        with pytest.raises(SchemaParseError, match="Unknown schema type") as exc_info:
            parse_schema(document)

        assert exc_info.value.code == ErrorCode.PARSE_ERROR
        assert exc_info.value.location == ("type",)

    @pytest.mark.parametrize("document", [
        {"type": "string", "min": -1},
        {"type": "string", "min": "3"},
        {"type": "string", "max": 2.5},
        {"type": "string", "email": "yes"},
        {"type": "string", "pattern": "("},
        {"type": "string", "minLength": 3},
        {"type": "number", "min": "0"},
        {"type": "number", "integer": 1},
        {"type": "boolean", "min": 1},
        {"type": "object"},
        {"type": "object", "shape": []},
        {"type": "object", "shape": {"a": "string"}},
        {"type": "string", "ui": {"label": 3}},
        {"type": "string", "ui": {"colour": "red"}},
        {"type": "number", "messages": {"email": "not a number message"}},
    ])
    def test_malformed_node(self, document):
        with pytest.raises(SchemaParseError):
            parse_schema(document)

    def test_non_mapping_document(self):
        with pytest.raises(SchemaParseError, match="must be a mapping, got list"):
            parse_schema(["string"])

    def test_error_location_points_into_nested_shape(self):
        document = {
            "type": "object",
            "shape": {"user": {"type": "object", "shape": {"age": {"type": "number", "min": "x"}}}},
        }

        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema(document)

        assert exc_info.value.location == ("shape", "user", "shape", "age", "min")
        assert "shape/user/shape/age/min" in str(exc_info.value)

    def test_to_validation_error(self):
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema({"type": "date"})

        error = exc_info.value.to_validation_error(prefix="Invalid schema JSON: ")
        assert error.path == ()
        assert error.code == ErrorCode.PARSE_ERROR
        assert error.message.startswith("Invalid schema JSON: Unknown schema type 'date'")


class TestSerialization:
    """Dictionary form of schema nodes."""

    def test_absent_fields_are_omitted(self):
        assert StringSchema().to_dict() == {"type": "string"}
        assert NumberSchema(positive=True).to_dict() == {"type": "number", "positive": True}
        assert BooleanSchema().to_dict() == {"type": "boolean"}
        assert ObjectSchema().to_dict() == {"type": "object", "shape": {}}

    def test_ui_and_messages_are_serialized(self):
        schema = StringSchema(
            max=10,
            ui=UiConfig(label="Name"),
            messages=StringMessages(max="Too long"),
        )

        assert schema_to_dict(schema) == {
            "type": "string",
            "max": 10,
            "ui": {"label": "Name"},
            "messages": {"max": "Too long"},
        }

    def test_document_survives_parse_and_serialize(self):
        assert schema_to_dict(parse_schema(SIGNUP_DOCUMENT)) == SIGNUP_DOCUMENT


class TestImmutability:
    """Schema nodes are read-only."""

    def test_nodes_are_frozen(self):
        schema = StringSchema(min=1)

        with pytest.raises(dataclasses.FrozenInstanceError):
            schema.min = 2

    def test_shape_is_read_only(self):
        shape = {"a": StringSchema()}
        schema = ObjectSchema(shape=shape)

        with pytest.raises(TypeError):
            schema.shape["b"] = BooleanSchema()

        shape["b"] = BooleanSchema()
        assert "b" not in schema.shape

    def test_equal_shapes_compare_equal(self):
        assert ObjectSchema(shape={"a": BooleanSchema()}) == ObjectSchema(shape={"a": BooleanSchema()})
