"""Form runtime for FormShape.

A Form holds the editable state of one form instance: field values, which
fields were touched, the current error of each top-level field, and whether a
submission is in progress. Single fields are checked with
``validate_at_path`` (on blur or on change, as configured); submission
checks the whole value with ``validate``.

Usage:
    >>> from formshape.builders import s
    >>> submitted = []
    >>> form = Form(
    ...     schema=s.object({"email": s.string().email()}),
    ...     default_values={"email": ""},
    ...     on_submit=submitted.append,
    ... )
    >>> form.handle_blur("email")
    >>> form.errors["email"].code
    <ErrorCode.STRING_EMAIL: 'string.email'>
    >>> form.set_value("email", "ada@example.com")
    >>> form.handle_submit()
    True
    >>> submitted
    [{'email': 'ada@example.com'}]
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from formshape.errors import ValidationError
from formshape.events import EventEmitter, FormEvent
from formshape.types import FormEventType
from formshape.validation import EngineConfig, SchemaLike, ValidationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormState:
    """Snapshot of a form's state, handed to subscribers.

    Attributes:
        values: Current field values
        touched: Whether each field has been touched
        errors: Current error of each field, None when the field is valid
        is_submitting: Whether a submission is in progress
        is_valid: Whether no field currently has an error
    """
    values: Dict[str, Any]
    touched: Dict[str, bool]
    errors: Dict[str, Optional[ValidationError]]
    is_submitting: bool
    is_valid: bool


StateListener = Callable[[FormState], None]
SubmitHandler = Callable[[Dict[str, Any]], Any]


class Form:
    """Stateful form bound to a schema.

    Not thread-safe; use one instance per form being edited.

    Attributes:
        form_id: Identifier carried by every emitted FormEvent
        engine: ValidationEngine for the form's schema
        events: EventEmitter receiving every FormEvent
    """

    def __init__(
        self,
        schema: SchemaLike,
        default_values: Mapping[str, Any],
        on_submit: SubmitHandler,
        validate_on_blur: bool = True,
        validate_on_change: bool = False,
        form_id: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ):
        """Initialize the form.

        Args:
            schema: Schema node, builder or schema document for the values
            default_values: Initial values; their keys are the form's fields
            on_submit: Called with the values when a submission is valid
            validate_on_blur: Validate a field when it loses focus
            validate_on_change: Validate a field whenever its value changes
            form_id: Optional identifier; generated when omitted
            config: Engine options

        Raises:
            SchemaParseError: If ``schema`` is a malformed document
        """
        self.engine = ValidationEngine(schema, config)
        self.form_id = form_id or f"form_{uuid.uuid4().hex[:16]}"
        self.events = EventEmitter()
        self._defaults = dict(default_values)
        self._on_submit = on_submit
        self._validate_on_blur = validate_on_blur
        self._validate_on_change = validate_on_change
        self._subscribers: List[StateListener] = []
        self._init_state()

    def _init_state(self) -> None:
        self._values: Dict[str, Any] = dict(self._defaults)
        self._touched: Dict[str, bool] = {key: False for key in self._defaults}
        self._errors: Dict[str, Optional[ValidationError]] = {key: None for key in self._defaults}
        self._is_submitting = False
        self._is_valid = True

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def touched(self) -> Dict[str, bool]:
        return dict(self._touched)

    @property
    def errors(self) -> Dict[str, Optional[ValidationError]]:
        return dict(self._errors)

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def state(self) -> FormState:
        """Current state snapshot."""
        return FormState(
            values=self.values,
            touched=self.touched,
            errors=self.errors,
            is_submitting=self._is_submitting,
            is_valid=self._is_valid,
        )

    def set_value(self, field: str, value: Any) -> None:
        """Store ``value`` for ``field``; validate it if ``validate_on_change``."""
        self._values[field] = value
        self._emit(FormEventType.FIELD_CHANGED, field)
        if self._validate_on_change:
            self._errors[field] = self.validate_field(field)
            self._update_validity()
        self._notify()

    def handle_change(self, field: str, value: Any) -> None:
        """Alias of :meth:`set_value` for input change handlers."""
        self.set_value(field, value)

    def set_touched(self, field: str, touched: bool = True) -> None:
        self._touched[field] = touched
        self._emit(FormEventType.FIELD_TOUCHED, field, {"touched": touched})
        self._notify()

    def handle_blur(self, field: str) -> None:
        """Mark ``field`` touched; validate it if ``validate_on_blur``."""
        self._touched[field] = True
        self._emit(FormEventType.FIELD_TOUCHED, field, {"touched": True})
        if self._validate_on_blur:
            self._errors[field] = self.validate_field(field)
            self._update_validity()
        self._notify()

    def validate_field(self, field: str) -> Optional[ValidationError]:
        """Validate one top-level field against the current values.

        Returns:
            The first error for the field, or None if it is valid. A field
            the schema does not declare yields an ``invalid_path`` error.
        """
        result = self.engine.validate_at_path(self._values, [field])
        error = result.errors[0] if result.errors else None
        self._emit(
            FormEventType.FIELD_VALIDATED,
            field,
            {"error": error.to_dict() if error is not None else None},
        )
        return error

    def validate_form(self) -> Dict[str, Optional[ValidationError]]:
        """Validate all values and map errors to their top-level fields.

        Returns:
            Field -> first error found for it (or None). Errors for fields
            that are not part of the form are not included.
        """
        result = self.engine.validate(self._values)
        field_errors: Dict[str, Optional[ValidationError]] = {key: None for key in self._errors}
        for error in result.errors:
            if not error.path:
                continue
            name = error.path[0]
            if name in field_errors and field_errors[name] is None:
                field_errors[name] = error
        self._emit(FormEventType.FORM_VALIDATED, payload=result.to_dict())
        return field_errors

    def handle_submit(self) -> bool:
        """Touch every field, validate the form and submit if valid.

        ``on_submit`` receives a copy of the values. An exception raised by
        it is logged and reported as a ``form.submit_failed`` event.

        Returns:
            Whether the form was valid
        """
        for key in self._values:
            self._touched[key] = True
        self._errors = self.validate_form()
        self._update_validity()
        self._is_submitting = True
        self._notify()

        try:
            if self._is_valid:
                try:
                    self._on_submit(dict(self._values))
                except Exception as exc:
                    logger.exception("Submit handler failed for form %s", self.form_id)
                    self._emit(FormEventType.FORM_SUBMIT_FAILED, payload={"error": str(exc)})
                else:
                    self._emit(FormEventType.FORM_SUBMITTED)
        finally:
            self._is_submitting = False
            self._notify()
        return self._is_valid

    def reset(self) -> None:
        """Restore default values and clear touched flags and errors."""
        self._init_state()
        self._emit(FormEventType.FORM_RESET)
        self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with a FormState after every change.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def _update_validity(self) -> None:
        self._is_valid = all(error is None for error in self._errors.values())

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._subscribers):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener %r failed for form %s", listener, self.form_id)

    def _emit(
        self,
        event_type: FormEventType,
        field: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.events.emit(FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            form_id=self.form_id,
            ts=datetime.now(timezone.utc),
            field=field,
            payload=payload,
        ))


__all__ = [
    "Form",
    "FormState",
    "StateListener",
    "SubmitHandler",
]
