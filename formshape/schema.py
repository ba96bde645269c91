"""Schema model for FormShape.

A schema is a closed tagged union of four immutable node types:

- StringSchema: length bounds, email/url flags, regular-expression pattern
- NumberSchema: inclusive bounds, integer and positive flags
- BooleanSchema: type check only
- ObjectSchema: a shape mapping field names to nested schema nodes; every
  declared field is required

Every node optionally carries presentational ``ui`` metadata (never used by
validation) and per-failure ``messages`` overrides.

Schemas are usually built in code (directly or with ``formshape.builders``)
or parsed from a plain dictionary with :func:`parse_schema`. The dictionary
form uses a ``"type"`` discriminator::

    {
        "type": "object",
        "shape": {
            "email": {"type": "string", "email": True},
            "age": {"type": "number", "min": 18, "integer": True},
        },
    }

Schema documents are checked against a Draft 7 JSON Schema for their
variant before any node is constructed, so malformed input is rejected with
a SchemaParseError that points at the offending location.
"""

import logging
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import best_match
from typing_extensions import TypeAlias

from formshape.errors import SchemaParseError
from formshape.types import SchemaKind

logger = logging.getLogger(__name__)


def _compact(obj: Any) -> Dict[str, Any]:
    """Dataclass fields as a dict, skipping the ones left as None."""
    return {f.name: getattr(obj, f.name) for f in fields(obj) if getattr(obj, f.name) is not None}


@dataclass(frozen=True)
class UiConfig:
    """Presentational metadata for form rendering.

    Passed through unchanged; has no effect on validation.

    Attributes:
        label: Field label
        placeholder: Input placeholder text
        description: Help text shown with the field
    """
    label: Optional[str] = None
    placeholder: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return _compact(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UiConfig":
        """Create UiConfig from dict."""
        return cls(
            label=data.get("label"),
            placeholder=data.get("placeholder"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class StringMessages:
    """Message overrides for string failures."""
    invalid_type: Optional[str] = None
    min: Optional[str] = None
    max: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    pattern: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class NumberMessages:
    """Message overrides for number failures."""
    invalid_type: Optional[str] = None
    min: Optional[str] = None
    max: Optional[str] = None
    integer: Optional[str] = None
    positive: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class BooleanMessages:
    """Message overrides for boolean failures."""
    invalid_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class ObjectMessages:
    """Message overrides for object failures.

    ``required`` applies to every missing field declared in this object's
    shape.
    """
    invalid_type: Optional[str] = None
    required: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(self)


class _SchemaNode:
    """Shared parsing entry point for the schema node dataclasses."""

    kind: ClassVar[SchemaKind]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """Parse ``data`` and check that it describes this variant.

        Raises:
            SchemaParseError: If ``data`` is malformed or of another kind
        """
        node = parse_schema(data)
        if not isinstance(node, cls):
            raise SchemaParseError(
                f"Expected a {cls.kind.value} schema, got {node.kind.value}",
                ("type",),
            )
        return node


@dataclass(frozen=True)
class StringSchema(_SchemaNode):
    """String node.

    Attributes:
        min: Minimum length in characters (inclusive)
        max: Maximum length in characters (inclusive)
        email: Require a minimal email shape (one '@', not at either end)
        url: Require an ``http://`` or ``https://`` prefix
        pattern: Regular expression the value must contain a match for
        ui: Presentational metadata
        messages: Message overrides

    Examples:
        >>> StringSchema(min=3, email=True).to_dict()
        {'type': 'string', 'min': 3, 'email': True}
    """
    kind: ClassVar[SchemaKind] = SchemaKind.STRING

    min: Optional[int] = None
    max: Optional[int] = None
    email: Optional[bool] = None
    url: Optional[bool] = None
    pattern: Optional[str] = None
    ui: Optional[UiConfig] = None
    messages: Optional[StringMessages] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"type": self.kind.value}
        for name in ("min", "max", "email", "url", "pattern"):
            if getattr(self, name) is not None:
                result[name] = getattr(self, name)
        return _with_extras(result, self.ui, self.messages)


@dataclass(frozen=True)
class NumberSchema(_SchemaNode):
    """Number node.

    Attributes:
        min: Inclusive lower bound
        max: Inclusive upper bound
        integer: Require a value with no fractional part
        positive: Require a value strictly greater than zero
        ui: Presentational metadata
        messages: Message overrides
    """
    kind: ClassVar[SchemaKind] = SchemaKind.NUMBER

    min: Optional[float] = None
    max: Optional[float] = None
    integer: Optional[bool] = None
    positive: Optional[bool] = None
    ui: Optional[UiConfig] = None
    messages: Optional[NumberMessages] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"type": self.kind.value}
        for name in ("min", "max", "integer", "positive"):
            if getattr(self, name) is not None:
                result[name] = getattr(self, name)
        return _with_extras(result, self.ui, self.messages)


@dataclass(frozen=True)
class BooleanSchema(_SchemaNode):
    """Boolean node. Only checks the value's type."""
    kind: ClassVar[SchemaKind] = SchemaKind.BOOLEAN

    ui: Optional[UiConfig] = None
    messages: Optional[BooleanMessages] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return _with_extras({"type": self.kind.value}, self.ui, self.messages)


@dataclass(frozen=True)
class ObjectSchema(_SchemaNode):
    """Object node.

    Every key of ``shape`` is a required field of the validated value. Keys
    present in the value but absent from ``shape`` are ignored.

    Attributes:
        shape: Field name -> nested schema node (stored read-only)
        ui: Presentational metadata
        messages: Message overrides

    Examples:
        >>> schema = ObjectSchema(shape={"name": StringSchema(min=1)})
        >>> sorted(schema.shape)
        ['name']
    """
    kind: ClassVar[SchemaKind] = SchemaKind.OBJECT

    shape: Mapping[str, "Schema"] = field(default_factory=dict)
    ui: Optional[UiConfig] = None
    messages: Optional[ObjectMessages] = None

    def __post_init__(self):
        """Freeze the shape mapping."""
        if not isinstance(self.shape, MappingProxyType):
            object.__setattr__(self, "shape", MappingProxyType(dict(self.shape)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "type": self.kind.value,
            "shape": {key: child.to_dict() for key, child in self.shape.items()},
        }
        return _with_extras(result, self.ui, self.messages)


Schema: TypeAlias = Union[StringSchema, NumberSchema, BooleanSchema, ObjectSchema]

SCHEMA_TYPES: Tuple[type, ...] = (StringSchema, NumberSchema, BooleanSchema, ObjectSchema)


def _with_extras(result: Dict[str, Any], ui: Optional[UiConfig], messages: Any) -> Dict[str, Any]:
    if ui is not None:
        result["ui"] = ui.to_dict()
    if messages is not None:
        result["messages"] = messages.to_dict()
    return result


# Draft 7 documents describing one schema node of each kind. Nested shape
# entries are only checked to be mappings here; _parse_node recurses into them.

def _nullable(type_name: str, **extra: Any) -> Dict[str, Any]:
    return {"type": [type_name, "null"], **extra}


def _messages_document(*names: str) -> Dict[str, Any]:
    return {
        "type": ["object", "null"],
        "properties": {name: _nullable("string") for name in names},
        "additionalProperties": False,
    }


_UI_DOCUMENT: Dict[str, Any] = {
    "type": ["object", "null"],
    "properties": {
        "label": _nullable("string"),
        "placeholder": _nullable("string"),
        "description": _nullable("string"),
    },
    "additionalProperties": False,
}

NODE_DOCUMENTS: Dict[SchemaKind, Dict[str, Any]] = {
    SchemaKind.STRING: {
        "type": "object",
        "required": ["type"],
        "properties": {
            "type": {"const": "string"},
            "min": _nullable("integer", minimum=0),
            "max": _nullable("integer", minimum=0),
            "email": _nullable("boolean"),
            "url": _nullable("boolean"),
            "pattern": _nullable("string", format="regex"),
            "ui": _UI_DOCUMENT,
            "messages": _messages_document("invalid_type", "min", "max", "email", "url", "pattern"),
        },
        "additionalProperties": False,
    },
    SchemaKind.NUMBER: {
        "type": "object",
        "required": ["type"],
        "properties": {
            "type": {"const": "number"},
            "min": _nullable("number"),
            "max": _nullable("number"),
            "integer": _nullable("boolean"),
            "positive": _nullable("boolean"),
            "ui": _UI_DOCUMENT,
            "messages": _messages_document("invalid_type", "min", "max", "integer", "positive"),
        },
        "additionalProperties": False,
    },
    SchemaKind.BOOLEAN: {
        "type": "object",
        "required": ["type"],
        "properties": {
            "type": {"const": "boolean"},
            "ui": _UI_DOCUMENT,
            "messages": _messages_document("invalid_type"),
        },
        "additionalProperties": False,
    },
    SchemaKind.OBJECT: {
        "type": "object",
        "required": ["type", "shape"],
        "properties": {
            "type": {"const": "object"},
            "shape": {"type": "object", "additionalProperties": {"type": "object"}},
            "ui": _UI_DOCUMENT,
            "messages": _messages_document("invalid_type", "required"),
        },
        "additionalProperties": False,
    },
}

_FORMAT_CHECKER = FormatChecker()

_NODE_VALIDATORS: Dict[SchemaKind, Draft7Validator] = {}
for _kind, _document in NODE_DOCUMENTS.items():
    Draft7Validator.check_schema(_document)
    _NODE_VALIDATORS[_kind] = Draft7Validator(_document, format_checker=_FORMAT_CHECKER)


def parse_schema(data: Mapping[str, Any]) -> Schema:
    """Parse a schema document into a Schema tree.

    Args:
        data: A mapping in the dictionary form described in the module docs

    Returns:
        The root schema node

    Raises:
        SchemaParseError: If any node has an unknown type, an unknown key,
            a constraint of the wrong type, a negative length bound or a
            pattern that is not a valid regular expression

    Examples:
        >>> parse_schema({"type": "string", "min": 3})
        StringSchema(min=3, max=None, email=None, url=None, pattern=None, ui=None, messages=None)
        >>> parse_schema({"type": "list"})
        Traceback (most recent call last):
        ...
        formshape.errors.SchemaParseError: Unknown schema type 'list'; expected one of: string, number, boolean, object (at 'type')
    """
    try:
        return _parse_node(data, ())
    except SchemaParseError as exc:
        logger.debug("Rejected schema document: %s", exc)
        raise


def _parse_node(data: Any, location: Tuple[Any, ...]) -> Schema:
    if not isinstance(data, Mapping):
        raise SchemaParseError(
            f"Schema node must be a mapping, got {type(data).__name__}", location
        )
    data = dict(data)

    raw_kind = data.get("type")
    try:
        kind = SchemaKind(raw_kind)
    except ValueError:
        expected = ", ".join(k.value for k in SchemaKind)
        raise SchemaParseError(
            f"Unknown schema type {raw_kind!r}; expected one of: {expected}",
            location + ("type",),
        ) from None

    error = best_match(_NODE_VALIDATORS[kind].iter_errors(data))
    if error is not None:
        raise SchemaParseError(error.message, location + tuple(error.absolute_path))

    ui = UiConfig.from_dict(data["ui"]) if data.get("ui") is not None else None
    messages = data.get("messages")

    if kind is SchemaKind.STRING:
        return StringSchema(
            min=_as_int(data.get("min")),
            max=_as_int(data.get("max")),
            email=data.get("email"),
            url=data.get("url"),
            pattern=data.get("pattern"),
            ui=ui,
            messages=StringMessages(**messages) if messages is not None else None,
        )
    if kind is SchemaKind.NUMBER:
        return NumberSchema(
            min=data.get("min"),
            max=data.get("max"),
            integer=data.get("integer"),
            positive=data.get("positive"),
            ui=ui,
            messages=NumberMessages(**messages) if messages is not None else None,
        )
    if kind is SchemaKind.BOOLEAN:
        return BooleanSchema(
            ui=ui,
            messages=BooleanMessages(**messages) if messages is not None else None,
        )
    shape = {
        key: _parse_node(child, location + ("shape", key))
        for key, child in data["shape"].items()
    }
    return ObjectSchema(
        shape=shape,
        ui=ui,
        messages=ObjectMessages(**messages) if messages is not None else None,
    )


def _as_int(value: Optional[float]) -> Optional[int]:
    # JSON Schema "integer" admits 3.0
    return int(value) if value is not None else None


def schema_to_dict(schema: Schema) -> Dict[str, Any]:
    """Serialize a Schema tree to its dictionary form.

    Absent constraints, ``ui`` and ``messages`` are omitted, so the result
    round-trips through :func:`parse_schema`.
    """
    return schema.to_dict()


__all__ = [
    "UiConfig",
    "StringMessages",
    "NumberMessages",
    "BooleanMessages",
    "ObjectMessages",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "ObjectSchema",
    "Schema",
    "SCHEMA_TYPES",
    "NODE_DOCUMENTS",
    "parse_schema",
    "schema_to_dict",
]
