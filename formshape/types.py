"""Core type definitions for FormShape.

This module defines the fundamental enumerations used throughout FormShape:
- SchemaKind: Discriminator for the four schema variants
- ErrorCode: Stable machine-readable codes carried by ValidationError
- PatternMode: How the string ``pattern`` constraint is interpreted
- FormEventType: Events emitted by the form runtime

All enums subclass ``str`` so their members compare equal to, and serialize
as, their plain string values.
"""

from enum import Enum


class SchemaKind(str, Enum):
    """Schema variant tag, serialized as the ``"type"`` key of a schema node."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"


class ErrorCode(str, Enum):
    """Validation error codes.

    Data-validity codes (``invalid_type``, ``required`` and the
    ``{kind}.{constraint}`` family) are accumulated by the engine.
    ``invalid_path`` and ``parse_error`` abort the call with a single error.
    """
    INVALID_TYPE = "invalid_type"
    REQUIRED = "required"

    STRING_MIN = "string.min"
    STRING_MAX = "string.max"
    STRING_EMAIL = "string.email"
    STRING_URL = "string.url"
    STRING_PATTERN = "string.pattern"

    NUMBER_MIN = "number.min"
    NUMBER_MAX = "number.max"
    NUMBER_INTEGER = "number.integer"
    NUMBER_POSITIVE = "number.positive"

    INVALID_PATH = "invalid_path"
    PARSE_ERROR = "parse_error"


class PatternMode(str, Enum):
    """Interpretation of the string ``pattern`` constraint.

    REGEX treats the pattern as a regular expression searched anywhere in
    the value. SUBSTRING treats it as a literal needle.
    """
    REGEX = "regex"
    SUBSTRING = "substring"


class FormEventType(str, Enum):
    """Event types emitted by the form runtime."""
    FIELD_CHANGED = "field.changed"
    FIELD_TOUCHED = "field.touched"
    FIELD_VALIDATED = "field.validated"
    FORM_VALIDATED = "form.validated"
    FORM_SUBMITTED = "form.submitted"
    FORM_SUBMIT_FAILED = "form.submit_failed"
    FORM_RESET = "form.reset"


__all__ = [
    "SchemaKind",
    "ErrorCode",
    "PatternMode",
    "FormEventType",
]
