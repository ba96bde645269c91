"""Unit tests for the form runtime.

Tests cover:
- Initial state and field updates
- Blur and change validation
- Whole-form validation and submission
- Reset, subscriptions and emitted events
"""

import logging

import pytest

from formshape.builders import s
from formshape.errors import SchemaParseError
from formshape.form import Form, FormState
from formshape.types import ErrorCode, FormEventType


@pytest.fixture
def schema():
    return s.object({
        "email": s.string().email(),
        "age": s.number().min(18).messages(min="You must be 18 or older"),
    })


@pytest.fixture
def submitted():
    return []


@pytest.fixture
def form(schema, submitted):
    return Form(
        schema=schema,
        default_values={"email": "", "age": 0},
        on_submit=submitted.append,
        form_id="signup",
    )


class TestInitialState:
    """State of a fresh form."""

    def test_defaults(self, form):
        assert form.values == {"email": "", "age": 0}
        assert form.touched == {"email": False, "age": False}
        assert form.errors == {"email": None, "age": None}
        assert form.is_submitting is False
        assert form.is_valid is True

    def test_generated_form_id(self, schema):
        form = Form(schema, {"email": ""}, on_submit=lambda values: None)

        assert form.form_id.startswith("form_")

    def test_schema_document_is_parsed(self):
        form = Form({"type": "object", "shape": {"ok": {"type": "boolean"}}}, {"ok": False}, print)

        assert form.validate_field("ok") is None

    def test_malformed_schema_document(self):
        with pytest.raises(SchemaParseError):
            Form({"type": "object"}, {}, print)

    def test_state_is_a_snapshot(self, form):
        state = form.state
        form.set_value("email", "a@b")

        assert isinstance(state, FormState)
        assert state.values["email"] == ""


class TestFieldValidation:
    """Blur and change validation."""

    def test_blur_validates_field(self, form):
        form.handle_blur("email")

        assert form.touched["email"] is True
        assert form.errors["email"].code == ErrorCode.STRING_EMAIL
        assert form.errors["email"].path == ("email",)
        assert form.is_valid is False

    def test_change_does_not_validate_by_default(self, form):
        form.handle_change("age", 5)

        assert form.values["age"] == 5
        assert form.errors["age"] is None

    def test_validate_on_change(self, schema):
        form = Form(schema, {"email": "", "age": 0}, print, validate_on_change=True)

        form.set_value("age", 12)
        assert form.errors["age"].message == "You must be 18 or older"

        form.set_value("age", 21)
        assert form.errors["age"] is None
        assert form.is_valid is True

    def test_blur_without_validation(self, schema):
        form = Form(schema, {"email": ""}, print, validate_on_blur=False)

        form.handle_blur("email")

        assert form.touched["email"] is True
        assert form.errors["email"] is None

    def test_validate_field_returns_first_error(self, form):
        form.set_value("email", "x")

        error = form.validate_field("email")

        assert error.code == ErrorCode.STRING_EMAIL

    def test_undeclared_field_is_invalid_path(self, form):
        form.set_value("nickname", "Ada")

        assert form.validate_field("nickname").code == ErrorCode.INVALID_PATH

    def test_set_touched(self, form):
        form.set_touched("age")
        form.set_touched("email", False)

        assert form.touched == {"email": False, "age": True}


class TestSubmission:
    """validate_form and handle_submit."""

    def test_validate_form_maps_errors_to_fields(self, form):
        errors = form.validate_form()

        assert errors["email"].code == ErrorCode.STRING_EMAIL
        assert errors["age"].code == ErrorCode.NUMBER_MIN

    def test_validate_form_ignores_fields_outside_the_form(self, schema):
        form = Form(schema, {"email": "a@b"}, print)

        errors = form.validate_form()

        assert errors == {"email": None}

    def test_invalid_submit(self, form, submitted):
        assert form.handle_submit() is False

        assert submitted == []
        assert form.touched == {"email": True, "age": True}
        assert form.is_valid is False
        assert form.is_submitting is False

    def test_valid_submit(self, form, submitted):
        form.set_value("email", "ada@example.com")
        form.set_value("age", 36)

        assert form.handle_submit() is True

        assert submitted == [{"email": "ada@example.com", "age": 36}]
        assert form.errors == {"email": None, "age": None}

    def test_submit_handler_receives_a_copy(self, schema):
        received = []
        form = Form(schema, {"email": "a@b", "age": 20}, received.append)

        form.handle_submit()
        received[0]["email"] = "changed"

        assert form.values["email"] == "a@b"

    def test_submit_handler_failure_is_logged(self, schema, caplog):
        def failing(values):
            raise RuntimeError("backend down")

        form = Form(schema, {"email": "a@b", "age": 20}, failing, form_id="f1")
        failures = []
        form.events.on(FormEventType.FORM_SUBMIT_FAILED, failures.append)

        with caplog.at_level(logging.ERROR, logger="formshape.form"):
            assert form.handle_submit() is True

        assert form.is_submitting is False
        assert failures[0].payload == {"error": "backend down"}
        assert "Submit handler failed for form f1" in caplog.text

    def test_is_submitting_during_handler(self, schema):
        seen = []
        form = Form(schema, {"email": "a@b", "age": 20}, lambda values: seen.append(form.is_submitting))

        form.handle_submit()

        assert seen == [True]


class TestResetAndSubscriptions:
    """reset, subscribe and events."""

    def test_reset(self, form):
        form.set_value("email", "x")
        form.handle_blur("email")

        form.reset()

        assert form.values == {"email": "", "age": 0}
        assert form.touched == {"email": False, "age": False}
        assert form.errors == {"email": None, "age": None}
        assert form.is_valid is True

    def test_subscribe_and_unsubscribe(self, form):
        states = []
        unsubscribe = form.subscribe(states.append)

        form.set_value("email", "a@b")
        unsubscribe()
        form.set_value("email", "c@d")

        assert len(states) == 1
        assert states[0].values["email"] == "a@b"

    def test_submit_notifies_twice(self, form):
        states = []
        form.subscribe(states.append)

        form.handle_submit()

        assert [state.is_submitting for state in states] == [True, False]

    def test_failing_subscriber_does_not_break_others(self, form):
        states = []

        def broken(state):
            raise ValueError("nope")

        form.subscribe(broken)
        form.subscribe(states.append)
        form.reset()

        assert len(states) == 1

    def test_events_are_emitted(self, form):
        events = []
        form.events.on_any(events.append)

        form.set_value("email", "a@b")
        form.handle_blur("email")
        form.handle_submit()
        form.reset()

        assert [e.type for e in events] == [
            FormEventType.FIELD_CHANGED,
            FormEventType.FIELD_TOUCHED,
            FormEventType.FIELD_VALIDATED,
            FormEventType.FORM_VALIDATED,
            FormEventType.FORM_RESET,
        ]
        assert all(e.form_id == "signup" for e in events)
        assert events[0].field == "email"
        assert events[2].payload == {"error": None}
        assert events[3].payload["success"] is False
