"""JSON text interface to the validation engine.

Two operations take JSON text and return JSON text:

- ``validate_json(schema_text, value_text)``
- ``validate_at_path_json(schema_text, value_text, path_text)``

The result is ``{"success":true}`` or
``{"success":false,"errors":[{"path":[...],"code":"...","message":"..."}]}``.

Malformed input never raises: invalid JSON, a schema document that
``parse_schema`` rejects, or a path that is not an array of strings is
reported as a single ``parse_error`` with an empty path.
"""

import json
import logging
from typing import Any, List, Optional, Union

from formshape.errors import SchemaParseError, ValidationError
from formshape.schema import Schema, parse_schema
from formshape.types import ErrorCode
from formshape.validation import EngineConfig, ValidationResult, validate, validate_at_path

logger = logging.getLogger(__name__)

TextInput = Union[str, bytes, bytearray]


class _InputRejected(Exception):
    """Carries the parse_error record for a rejected input."""

    def __init__(self, error: ValidationError):
        self.error = error
        super().__init__(error.message)


def validate_json(schema_text: TextInput, value_text: TextInput, config: Optional[EngineConfig] = None) -> str:
    """Validate JSON-encoded ``value_text`` against JSON-encoded ``schema_text``.

    Examples:
        >>> validate_json('{"type":"string","min":3}', '"hello"')
        '{"success":true}'
        >>> validate_json('{"type":"string","min":5}', '"hi"')
        '{"success":false,"errors":[{"path":[],"code":"string.min","message":"String must be at least 5 characters"}]}'
    """
    try:
        schema = _decode_schema(schema_text)
        value = _decode(value_text, "value")
    except _InputRejected as exc:
        return encode_result(ValidationResult(errors=(exc.error,)))
    return encode_result(validate(schema, value, config))


def validate_at_path_json(
    schema_text: TextInput,
    value_text: TextInput,
    path_text: TextInput,
    config: Optional[EngineConfig] = None,
) -> str:
    """Validate the field at the JSON-encoded ``path_text`` (an array of strings)."""
    try:
        schema = _decode_schema(schema_text)
        value = _decode(value_text, "value")
        path = _decode_path(path_text)
    except _InputRejected as exc:
        return encode_result(ValidationResult(errors=(exc.error,)))
    return encode_result(validate_at_path(schema, value, path, config))


def encode_result(result: ValidationResult) -> str:
    """Encode a ValidationResult as compact JSON text."""
    return json.dumps(result.to_dict(), separators=(",", ":"), ensure_ascii=False)


def decode_result(text: TextInput) -> ValidationResult:
    """Decode result text produced by :func:`encode_result`."""
    return ValidationResult.from_dict(json.loads(text))


def _parse_error(label: str, detail: Any) -> _InputRejected:
    logger.debug("Rejected %s input: %s", label, detail)
    return _InputRejected(ValidationError(
        path=(),
        code=ErrorCode.PARSE_ERROR,
        message=f"Invalid {label} JSON: {detail}",
    ))


def _decode(text: TextInput, label: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError) as exc:
        raise _parse_error(label, exc) from exc


def _decode_schema(text: TextInput) -> Schema:
    document = _decode(text, "schema")
    try:
        return parse_schema(document)
    except SchemaParseError as exc:
        raise _parse_error("schema", exc) from exc
    except RecursionError as exc:
        raise _parse_error("schema", "schema nesting is too deep") from exc


def _decode_path(text: TextInput) -> List[str]:
    path = _decode(text, "path")
    if not isinstance(path, list) or not all(isinstance(segment, str) for segment in path):
        raise _parse_error("path", "expected an array of strings")
    return path


__all__ = [
    "validate_json",
    "validate_at_path_json",
    "encode_result",
    "decode_result",
]
