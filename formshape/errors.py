"""Structured error types for FormShape.

Validation failures are ordinary data: the engine returns a list of
ValidationError records, each tagged with the path of the failing field, a
stable error code and a human-readable message.

Exceptions are reserved for contract violations: a malformed schema document
(SchemaParseError) and the opt-in ``ValidationEngine.parse`` API
(ValidationException).
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from formshape.types import ErrorCode


@dataclass(frozen=True)
class ValidationError:
    """A single validation failure.

    Attributes:
        path: Field names from the root of the value down to the failing
            field. The root itself is the empty tuple.
        code: Stable error code (an ErrorCode member or its string value)
        message: Human-readable description, possibly a schema override

    Examples:
        >>> err = ValidationError(
        ...     path=("user", "email"),
        ...     code=ErrorCode.STRING_EMAIL,
        ...     message="Invalid email address",
        ... )
        >>> err.dotted_path
        'user.email'
        >>> err.to_dict()["path"]
        ['user', 'email']
    """
    path: Tuple[str, ...]
    code: Union[ErrorCode, str]
    message: str

    def __post_init__(self):
        """Normalize path to a tuple and code to ErrorCode where known."""
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if not isinstance(self.code, ErrorCode):
            try:
                object.__setattr__(self, "code", ErrorCode(self.code))
            except ValueError:
                pass  # Codes from other producers are kept verbatim

    @property
    def dotted_path(self) -> str:
        """Path joined with dots, empty string for the root."""
        return ".".join(self.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "path": list(self.path),
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationError":
        """Create ValidationError from dict."""
        return cls(
            path=tuple(data.get("path", ())),
            code=data["code"],
            message=data["message"],
        )


class FormShapeError(Exception):
    """Base class for exceptions raised by FormShape."""


class SchemaParseError(FormShapeError):
    """Raised when a schema document cannot be parsed into a Schema tree.

    Attributes:
        code: Always ``ErrorCode.PARSE_ERROR``
        reason: Human-readable description of what was wrong
        location: Position inside the schema document where parsing failed
    """

    code = ErrorCode.PARSE_ERROR

    def __init__(self, reason: str, location: Sequence[Any] = ()):
        self.reason = reason
        self.location = tuple(location)
        where = "/".join(str(p) for p in self.location)
        message = f"{reason} (at '{where}')" if where else reason
        super().__init__(message)

    def to_validation_error(self, prefix: str = "") -> ValidationError:
        """Represent this failure as a root-level ``parse_error`` record."""
        return ValidationError(path=(), code=self.code, message=f"{prefix}{self}")


class ValidationException(FormShapeError):
    """Raised by ``ValidationEngine.parse`` when the value is invalid.

    Attributes:
        errors: The complete list of validation errors

    Examples:
        >>> exc = ValidationException([
        ...     ValidationError(("age",), ErrorCode.NUMBER_MIN, "Too young"),
        ... ])
        >>> print(exc)
        Validation failed:
          - age: Too young
    """

    def __init__(self, errors: Iterable[ValidationError]):
        self.errors: List[ValidationError] = list(errors)
        lines = [f"  - {e.dotted_path}: {e.message}" for e in self.errors]
        super().__init__("\n".join(["Validation failed:"] + lines))


__all__ = [
    "ValidationError",
    "FormShapeError",
    "SchemaParseError",
    "ValidationException",
]
