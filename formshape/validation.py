"""Validation engine for FormShape.

This module walks a value against a Schema tree and produces a
ValidationResult holding every violation found, each tagged with the path of
the failing field.

The walk never stops at the first failure:
- a value of the wrong runtime type yields exactly one ``invalid_type`` error
  and its constraints are not evaluated;
- a value of the right type has every declared constraint checked
  independently;
- an object value has every field declared in the schema's shape checked,
  and missing fields are reported as ``required``.

``validate_at_path`` validates a single field of a larger value. The path is
resolved against the schema (a missing field is an ``invalid_path`` failure)
and against the value (a missing field resolves to ``None``), and errors keep
their absolute paths.

Usage:
    >>> from formshape.schema import ObjectSchema, StringSchema
    >>> schema = ObjectSchema(shape={"email": StringSchema(email=True)})
    >>> validate(schema, {"email": "a@b.co"}).success
    True
    >>> result = validate_at_path(schema, {"email": "bad"}, ["email"])
    >>> result.errors[0].code, result.errors[0].path
    (<ErrorCode.STRING_EMAIL: 'string.email'>, ('email',))
"""

import logging
import math
import numbers
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from formshape.errors import ValidationError, ValidationException
from formshape.schema import (
    SCHEMA_TYPES,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
    parse_schema,
)
from formshape.types import ErrorCode, PatternMode

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]


@dataclass(frozen=True)
class EngineConfig:
    """Options for the validation engine.

    Attributes:
        pattern_mode: How the string ``pattern`` constraint is matched.
            REGEX (default) searches for a regular-expression match anywhere
            in the value; SUBSTRING checks for literal containment.
    """
    pattern_mode: PatternMode = PatternMode.REGEX


DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a value.

    ``success`` is True exactly when ``errors`` is empty.

    Attributes:
        errors: Every violation found, in walk order. The order carries no
            meaning; compare errors as a set.

    Examples:
        >>> ValidationResult().to_dict()
        {'success': True}
    """
    errors: Tuple[ValidationError, ...] = ()

    def __post_init__(self):
        if not isinstance(self.errors, tuple):
            object.__setattr__(self, "errors", tuple(self.errors))

    @property
    def success(self) -> bool:
        """Whether the value passed every check."""
        return not self.errors

    def __bool__(self) -> bool:
        return self.success

    def errors_at(self, path: Sequence[str]) -> List[ValidationError]:
        """Errors reported exactly at ``path``."""
        target = tuple(path)
        return [e for e in self.errors if e.path == target]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        if self.success:
            return {"success": True}
        return {"success": False, "errors": [e.to_dict() for e in self.errors]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationResult":
        """Create ValidationResult from dict."""
        return cls(errors=tuple(ValidationError.from_dict(e) for e in data.get("errors") or ()))


SchemaLike = Union[Schema, Mapping[str, Any], Any]


def coerce_schema(schema: SchemaLike) -> Schema:
    """Accept a schema node, a builder or a schema document.

    Raises:
        SchemaParseError: If a document is malformed
        TypeError: For anything else
    """
    if isinstance(schema, SCHEMA_TYPES):
        return schema
    if isinstance(schema, Mapping):
        return parse_schema(schema)
    build = getattr(schema, "build", None)
    if callable(build):
        return build()
    raise TypeError(f"Expected a schema, builder or schema document, got {type(schema).__name__}")


def validate(
    schema: SchemaLike,
    value: Any,
    config: Optional[EngineConfig] = None,
) -> ValidationResult:
    """Validate ``value`` against ``schema`` from the root.

    Args:
        schema: Schema node, builder or schema document
        value: Parsed value (dicts, strings, numbers, booleans, None)
        config: Engine options; defaults to EngineConfig()

    Returns:
        ValidationResult listing every violation
    """
    errors: List[ValidationError] = []
    _validate_node(coerce_schema(schema), value, (), config or DEFAULT_CONFIG, errors)
    return ValidationResult(errors=tuple(errors))


def validate_at_path(
    schema: SchemaLike,
    value: Any,
    path: Sequence[str],
    config: Optional[EngineConfig] = None,
) -> ValidationResult:
    """Validate only the field of ``value`` found at ``path``.

    The path is resolved against the schema and the value independently.
    Each segment must name a field of an object schema; otherwise the call
    fails with a single ``invalid_path`` error. On the value side, a missing
    field or a non-mapping intermediate resolves to ``None``, which the leaf
    schema then rejects as ``invalid_type``.

    Errors are reported with absolute paths (prefixed by ``path``). An empty
    path is the same as :func:`validate`.

    Args:
        schema: Schema node, builder or schema document
        value: The complete value
        path: Field names leading to the field to validate
        config: Engine options; defaults to EngineConfig()

    Returns:
        ValidationResult for the field

    Examples:
        >>> from formshape.schema import ObjectSchema, NumberSchema
        >>> schema = ObjectSchema(shape={"age": NumberSchema(min=18)})
        >>> validate_at_path(schema, {"age": 12}, ["age"]).errors[0].message
        'Number must be at least 18'
        >>> validate_at_path(schema, {}, ["name"]).errors[0].code
        <ErrorCode.INVALID_PATH: 'invalid_path'>
    """
    if isinstance(path, str):
        raise TypeError("path must be a sequence of field names, not a string")
    path = tuple(path)
    root = coerce_schema(schema)
    if not path:
        return validate(root, value, config)

    target, failure = _resolve_schema_path(root, path)
    if failure is not None:
        logger.debug("Cannot resolve path %r against schema: %s", path, failure.message)
        return ValidationResult(errors=(failure,))

    errors: List[ValidationError] = []
    _validate_node(target, _resolve_value_path(value, path), path, config or DEFAULT_CONFIG, errors)
    return ValidationResult(errors=tuple(errors))


def _resolve_schema_path(schema: Schema, path: Path) -> Tuple[Optional[Schema], Optional[ValidationError]]:
    current = schema
    for segment in path:
        if not isinstance(current, ObjectSchema):
            return None, ValidationError(
                path=(segment,),
                code=ErrorCode.INVALID_PATH,
                message="Cannot navigate non-object schema",
            )
        if segment not in current.shape:
            return None, ValidationError(
                path=(segment,),
                code=ErrorCode.INVALID_PATH,
                message=f"Path segment '{segment}' not found in schema",
            )
        current = current.shape[segment]
    return current, None


def _resolve_value_path(value: Any, path: Path) -> Any:
    current = value
    for segment in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment)
    return current


def _validate_node(
    schema: Schema,
    value: Any,
    path: Path,
    config: EngineConfig,
    errors: List[ValidationError],
) -> None:
    if isinstance(schema, StringSchema):
        if isinstance(value, str):
            _check_string(schema, value, path, config, errors)
            return
    elif isinstance(schema, NumberSchema):
        if _is_number(value):
            _check_number(schema, value, path, errors)
            return
    elif isinstance(schema, BooleanSchema):
        if isinstance(value, bool):
            return
    elif isinstance(schema, ObjectSchema):
        if isinstance(value, Mapping):
            _check_object(schema, value, path, config, errors)
            return
    else:
        raise TypeError(f"Unsupported schema node: {type(schema).__name__}")

    errors.append(ValidationError(
        path=path,
        code=ErrorCode.INVALID_TYPE,
        message=_message(schema.messages, "invalid_type", f"Expected {schema.kind.value}"),
    ))


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_string(
    schema: StringSchema,
    value: str,
    path: Path,
    config: EngineConfig,
    errors: List[ValidationError],
) -> None:
    messages = schema.messages
    length = len(value)

    if schema.min is not None and length < schema.min:
        errors.append(ValidationError(
            path, ErrorCode.STRING_MIN,
            _message(messages, "min", f"String must be at least {schema.min} characters"),
        ))

    if schema.max is not None and length > schema.max:
        errors.append(ValidationError(
            path, ErrorCode.STRING_MAX,
            _message(messages, "max", f"String must be at most {schema.max} characters"),
        ))

    if schema.email and not is_email(value):
        errors.append(ValidationError(
            path, ErrorCode.STRING_EMAIL,
            _message(messages, "email", "Invalid email address"),
        ))

    if schema.url and not is_url(value):
        errors.append(ValidationError(
            path, ErrorCode.STRING_URL,
            _message(messages, "url", "Invalid URL"),
        ))

    if schema.pattern is not None and not matches_pattern(value, schema.pattern, config.pattern_mode):
        errors.append(ValidationError(
            path, ErrorCode.STRING_PATTERN,
            _message(messages, "pattern", f"String does not match pattern: {schema.pattern}"),
        ))


def _check_number(
    schema: NumberSchema,
    value: numbers.Real,
    path: Path,
    errors: List[ValidationError],
) -> None:
    messages = schema.messages

    if schema.min is not None and value < schema.min:
        errors.append(ValidationError(
            path, ErrorCode.NUMBER_MIN,
            _message(messages, "min", f"Number must be at least {format_number(schema.min)}"),
        ))

    if schema.max is not None and value > schema.max:
        errors.append(ValidationError(
            path, ErrorCode.NUMBER_MAX,
            _message(messages, "max", f"Number must be at most {format_number(schema.max)}"),
        ))

    if schema.integer and not _is_whole(value):
        errors.append(ValidationError(
            path, ErrorCode.NUMBER_INTEGER,
            _message(messages, "integer", "Number must be an integer"),
        ))

    if schema.positive and not value > 0:
        errors.append(ValidationError(
            path, ErrorCode.NUMBER_POSITIVE,
            _message(messages, "positive", "Number must be positive"),
        ))


def _check_object(
    schema: ObjectSchema,
    value: Mapping[str, Any],
    path: Path,
    config: EngineConfig,
    errors: List[ValidationError],
) -> None:
    for key, child in schema.shape.items():
        child_path = path + (key,)
        if key not in value:
            errors.append(ValidationError(
                child_path, ErrorCode.REQUIRED,
                _message(schema.messages, "required", f"Field '{key}' is required"),
            ))
            continue
        _validate_node(child, value[key], child_path, config, errors)


def _message(messages: Any, kind: str, default: str) -> str:
    if messages is None:
        return default
    override = getattr(messages, kind, None)
    return override if override is not None else default


def _is_whole(value: numbers.Real) -> bool:
    if isinstance(value, numbers.Integral):
        return True
    return math.isfinite(value) and value == math.floor(value)


def format_number(value: numbers.Real) -> str:
    """Render a bound for messages; whole floats drop their fraction.

    Examples:
        >>> format_number(18.0), format_number(0.5), format_number(3)
        ('18', '0.5', '3')
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_email(value: str) -> bool:
    """Minimal email shape: exactly one '@', neither first nor last."""
    return value.count("@") == 1 and not value.startswith("@") and not value.endswith("@")


def is_url(value: str) -> bool:
    """Whether ``value`` starts with an HTTP(S) scheme."""
    return value.startswith(("http://", "https://"))


def matches_pattern(value: str, pattern: str, mode: PatternMode = PatternMode.REGEX) -> bool:
    """Whether ``value`` satisfies ``pattern`` under ``mode``.

    Raises:
        re.error: In REGEX mode, if ``pattern`` does not compile
    """
    if mode is PatternMode.SUBSTRING:
        return pattern in value
    return re.search(pattern, value) is not None


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``ValidationEngine.safe_parse``.

    Attributes:
        success: Whether the value is valid
        data: The value itself when valid, otherwise None
        errors: Validation errors when invalid
    """
    success: bool
    data: Any = None
    errors: Tuple[ValidationError, ...] = field(default_factory=tuple)


class ValidationEngine:
    """A schema bound to engine options.

    Accepts a schema node, a builder or a schema document; documents are
    parsed once at construction.

    Attributes:
        schema: The root schema node
        config: Engine options

    Examples:
        >>> engine = ValidationEngine({
        ...     "type": "object",
        ...     "shape": {"name": {"type": "string", "min": 1}},
        ... })
        >>> engine.validate({"name": "Ada"}).success
        True
        >>> engine.safe_parse({"name": ""}).errors[0].code
        <ErrorCode.STRING_MIN: 'string.min'>
    """

    def __init__(self, schema: SchemaLike, config: Optional[EngineConfig] = None) -> None:
        """Initialize the engine.

        Raises:
            SchemaParseError: If ``schema`` is a malformed document
        """
        self.schema: Schema = coerce_schema(schema)
        self.config = config or DEFAULT_CONFIG

    def validate(self, value: Any) -> ValidationResult:
        """Validate the whole value."""
        return validate(self.schema, value, self.config)

    def validate_at_path(self, value: Any, path: Sequence[str]) -> ValidationResult:
        """Validate the field of ``value`` at ``path``."""
        return validate_at_path(self.schema, value, path, self.config)

    def parse(self, value: Any) -> Any:
        """Return ``value`` unchanged if valid.

        Raises:
            ValidationException: Carrying every error, if invalid
        """
        result = self.validate(value)
        if not result.success:
            raise ValidationException(result.errors)
        return value

    def safe_parse(self, value: Any) -> ParseResult:
        """Like :meth:`parse`, but report failure as a ParseResult."""
        result = self.validate(value)
        if result.success:
            return ParseResult(success=True, data=value)
        return ParseResult(success=False, errors=result.errors)


__all__ = [
    "EngineConfig",
    "DEFAULT_CONFIG",
    "ValidationResult",
    "ParseResult",
    "ValidationEngine",
    "coerce_schema",
    "validate",
    "validate_at_path",
    "format_number",
    "is_email",
    "is_url",
    "matches_pattern",
]
