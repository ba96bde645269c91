"""Unit tests for the fluent schema builders."""

import pytest

from formshape.builders import ObjectBuilder, StringBuilder, s
from formshape.schema import (
    BooleanSchema,
    NumberMessages,
    NumberSchema,
    ObjectMessages,
    ObjectSchema,
    StringMessages,
    StringSchema,
    UiConfig,
)
from formshape.types import ErrorCode
from formshape.validation import ValidationEngine, validate, validate_at_path


class TestLeafBuilders:
    """String, number and boolean builders."""

    def test_string_builder(self):
        schema = s.string().min(3).max(20).email().url().pattern("^a").build()

        assert schema == StringSchema(min=3, max=20, email=True, url=True, pattern="^a")

    def test_number_builder(self):
        schema = s.number().min(0).max(100).integer().positive().build()

        assert schema == NumberSchema(min=0, max=100, integer=True, positive=True)

    def test_boolean_builder(self):
        assert s.boolean().build() == BooleanSchema()

    def test_ui_from_keywords_or_config(self):
        by_keywords = s.string().ui(label="Email", placeholder="you@example.com").build()
        by_mapping = s.boolean().ui({"description": "Accept terms"}).build()

        assert by_keywords.ui == UiConfig(label="Email", placeholder="you@example.com")
        assert by_mapping.ui == UiConfig(description="Accept terms")

    def test_messages_from_keywords_or_instance(self):
        string = s.string().min(5).messages(min="Username must be at least 5 characters long").build()
        number = s.number().messages(NumberMessages(invalid_type="Age must be a number")).build()

        assert string.messages == StringMessages(min="Username must be at least 5 characters long")
        assert number.messages == NumberMessages(invalid_type="Age must be a number")

    def test_unknown_message_key_is_rejected(self):
        with pytest.raises(TypeError):
            s.boolean().messages(min="nope")

    def test_builders_are_chainable_in_any_order(self):
        assert isinstance(s.string().ui(label="x").min(1), StringBuilder)

    def test_to_dict(self):
        assert s.string().min(3).email().to_dict() == {"type": "string", "min": 3, "email": True}


class TestObjectBuilder:
    """Object builder and nesting."""

    def test_nested_objects(self):
        schema = s.object({
            "user": s.object({
                "email": s.string().email(),
                "age": s.number().min(18),
            }),
            "terms": s.boolean(),
        }).messages(required="Required").build()

        assert isinstance(schema, ObjectSchema)
        assert schema.messages == ObjectMessages(required="Required")
        assert schema.shape["user"].shape["age"] == NumberSchema(min=18)
        assert schema.shape["terms"] == BooleanSchema()

    def test_shape_accepts_built_nodes(self):
        schema = s.object({"name": StringSchema(min=1)}).build()

        assert schema.shape["name"] == StringSchema(min=1)

    def test_invalid_shape_entry(self):
        with pytest.raises(TypeError, match="Shape entry 'name'"):
            ObjectBuilder({"name": "string"}).build()


class TestBuildersWithEngine:
    """Builders are accepted wherever a schema is."""

    def test_validate_with_builder(self):
        schema = s.object({
            "email": s.string().email().messages(email="Invalid email format for user registration"),
            "age": s.number().min(18).messages(min="You must be 18 or older to register"),
        })

        result = validate(schema, {"email": "bad", "age": 12})

        assert {e.message for e in result.errors} == {
            "Invalid email format for user registration",
            "You must be 18 or older to register",
        }

    def test_validate_at_path_with_builder(self):
        schema = s.object({"email": s.string().min(3).email()})

        assert validate_at_path(schema, {"email": "test@example.com"}, ["email"]).success
        assert not validate_at_path(schema, {"email": "invalid"}, ["email"]).success

    def test_engine_with_builder(self):
        engine = ValidationEngine(s.string().url())

        assert engine.validate("notaurl").errors[0].code == ErrorCode.STRING_URL
