"""FormShape schema and form validation.

FormShape validates JSON-like values against a declarative schema and
reports every violation with the path of the failing field:
- A closed schema model: string, number, boolean and object nodes, with
  optional UI metadata and per-node message overrides
- A validation engine that collects all errors instead of stopping at the
  first one, and can validate a single field of a larger value
- Fluent schema builders, a JSON text interface and a form runtime

Basic usage:
    >>> from formshape import s, validate
    >>> schema = s.object({
    ...     "name": s.string().min(1),
    ...     "age": s.number().integer().positive(),
    ... })
    >>> result = validate(schema, {"name": "John"})
    >>> [(e.code.value, e.path) for e in result.errors]
    [('required', ('age',))]
"""

__version__ = "0.1.0"
__author__ = "FormShape Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formshape.builders import s
from formshape.errors import FormShapeError, SchemaParseError, ValidationError, ValidationException
from formshape.form import Form
from formshape.schema import (
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
    UiConfig,
    parse_schema,
    schema_to_dict,
)
from formshape.types import ErrorCode, PatternMode
from formshape.validation import (
    EngineConfig,
    ValidationEngine,
    ValidationResult,
    validate,
    validate_at_path,
)

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "s",
    "Form",
    "Schema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "ObjectSchema",
    "UiConfig",
    "parse_schema",
    "schema_to_dict",
    "ErrorCode",
    "PatternMode",
    "EngineConfig",
    "ValidationEngine",
    "ValidationResult",
    "validate",
    "validate_at_path",
    "FormShapeError",
    "SchemaParseError",
    "ValidationError",
    "ValidationException",
]
