"""Fluent schema builders.

Usage:
    >>> from formshape.builders import s
    >>> schema = s.object({
    ...     "email": s.string().min(3).email(),
    ...     "age": s.number().min(0).integer(),
    ... }).build()
    >>> schema.shape["age"].integer
    True

Builders are mutable; ``build()`` returns an immutable schema node. The
engine accepts builders wherever it accepts a schema.
"""

from typing import Any, Dict, Generic, Mapping, Optional, TypeVar, Union

from formshape.schema import (
    SCHEMA_TYPES,
    BooleanMessages,
    BooleanSchema,
    NumberMessages,
    NumberSchema,
    ObjectMessages,
    ObjectSchema,
    Schema,
    StringMessages,
    StringSchema,
    UiConfig,
)

S = TypeVar("S")
B = TypeVar("B", bound="SchemaBuilder")


class SchemaBuilder(Generic[S]):
    """Base class for all builders.

    Subclasses collect constraints through chainable methods and produce an
    immutable schema node from :meth:`build`.
    """

    def __init__(self) -> None:
        """Initialize a builder with no UI metadata and no message overrides."""
        self._ui: Optional[UiConfig] = None
        self._messages: Any = None

    def ui(self: B, config: Union[UiConfig, Mapping[str, Any], None] = None, **kwargs: Any) -> B:
        """Attach form rendering metadata.

        Args:
            config: A UiConfig or a mapping with ``label``, ``placeholder``
                and ``description`` keys. When omitted, ``kwargs`` are used.
            **kwargs: UiConfig fields, e.g. ``label="Email"``

        Returns:
            This builder, for chaining

        Examples:
            >>> s.string().ui(label="Email").build().ui
            UiConfig(label='Email', placeholder=None, description=None)
        """
        if config is None:
            config = UiConfig(**kwargs)
        elif not isinstance(config, UiConfig):
            config = UiConfig.from_dict(config)
        self._ui = config
        return self

    def build(self) -> S:
        """Create the immutable schema node.

        Returns:
            The schema node described by this builder
        """
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        """Dictionary form of the built schema.

        Returns:
            The result of ``build().to_dict()``, accepted by ``parse_schema``
        """
        return self.build().to_dict()


class StringBuilder(SchemaBuilder[StringSchema]):
    """Builder for StringSchema.

    Examples:
        >>> s.string().min(3).email().to_dict()
        {'type': 'string', 'min': 3, 'email': True}
    """

    def __init__(self) -> None:
        """Initialize a string builder with no constraints."""
        super().__init__()
        self._constraints: Dict[str, Any] = {}

    def min(self, length: int) -> "StringBuilder":
        """Set the minimum length.

        Args:
            length: Minimum number of characters (inclusive)

        Returns:
            This builder, for chaining
        """
        self._constraints["min"] = length
        return self

    def max(self, length: int) -> "StringBuilder":
        """Set the maximum length.

        Args:
            length: Maximum number of characters (inclusive)

        Returns:
            This builder, for chaining
        """
        self._constraints["max"] = length
        return self

    def email(self) -> "StringBuilder":
        """Require a minimal email shape: one '@', neither first nor last.

        Returns:
            This builder, for chaining
        """
        self._constraints["email"] = True
        return self

    def url(self) -> "StringBuilder":
        """Require an ``http://`` or ``https://`` prefix.

        Returns:
            This builder, for chaining
        """
        self._constraints["url"] = True
        return self

    def pattern(self, regex: str) -> "StringBuilder":
        """Require a match of ``regex`` somewhere in the value.

        Args:
            regex: Regular expression, searched without implicit anchors

        Returns:
            This builder, for chaining
        """
        self._constraints["pattern"] = regex
        return self

    def messages(self, messages: Optional[StringMessages] = None, **kwargs: str) -> "StringBuilder":
        """Override failure messages.

        Args:
            messages: A StringMessages instance. When omitted, ``kwargs`` are used.
            **kwargs: StringMessages fields, e.g. ``min="Too short"``

        Returns:
            This builder, for chaining

        Raises:
            TypeError: If a keyword is not a string failure kind
        """
        self._messages = messages if messages is not None else StringMessages(**kwargs)
        return self

    def build(self) -> StringSchema:
        """Create the StringSchema.

        Returns:
            A StringSchema with the collected constraints, UI and messages
        """
        return StringSchema(ui=self._ui, messages=self._messages, **self._constraints)


class NumberBuilder(SchemaBuilder[NumberSchema]):
    """Builder for NumberSchema.

    Examples:
        >>> s.number().min(0).integer().build()
        NumberSchema(min=0, max=None, integer=True, positive=None, ui=None, messages=None)
    """

    def __init__(self) -> None:
        """Initialize a number builder with no constraints."""
        super().__init__()
        self._constraints: Dict[str, Any] = {}

    def min(self, value: float) -> "NumberBuilder":
        """Set the inclusive lower bound.

        Args:
            value: Smallest accepted number

        Returns:
            This builder, for chaining
        """
        self._constraints["min"] = value
        return self

    def max(self, value: float) -> "NumberBuilder":
        """Set the inclusive upper bound.

        Args:
            value: Largest accepted number

        Returns:
            This builder, for chaining
        """
        self._constraints["max"] = value
        return self

    def integer(self) -> "NumberBuilder":
        """Require a value with no fractional part.

        Returns:
            This builder, for chaining
        """
        self._constraints["integer"] = True
        return self

    def positive(self) -> "NumberBuilder":
        """Require a value strictly greater than zero.

        Returns:
            This builder, for chaining
        """
        self._constraints["positive"] = True
        return self

    def messages(self, messages: Optional[NumberMessages] = None, **kwargs: str) -> "NumberBuilder":
        """Override failure messages.

        Args:
            messages: A NumberMessages instance. When omitted, ``kwargs`` are used.
            **kwargs: NumberMessages fields, e.g. ``min="Too young"``

        Returns:
            This builder, for chaining

        Raises:
            TypeError: If a keyword is not a number failure kind
        """
        self._messages = messages if messages is not None else NumberMessages(**kwargs)
        return self

    def build(self) -> NumberSchema:
        """Create the NumberSchema.

        Returns:
            A NumberSchema with the collected constraints, UI and messages
        """
        return NumberSchema(ui=self._ui, messages=self._messages, **self._constraints)


class BooleanBuilder(SchemaBuilder[BooleanSchema]):
    """Builder for BooleanSchema."""

    def messages(self, messages: Optional[BooleanMessages] = None, **kwargs: str) -> "BooleanBuilder":
        """Override the ``invalid_type`` message.

        Args:
            messages: A BooleanMessages instance. When omitted, ``kwargs`` are used.
            **kwargs: BooleanMessages fields, i.e. ``invalid_type``

        Returns:
            This builder, for chaining

        Raises:
            TypeError: If a keyword is not ``invalid_type``
        """
        self._messages = messages if messages is not None else BooleanMessages(**kwargs)
        return self

    def build(self) -> BooleanSchema:
        """Create the BooleanSchema.

        Returns:
            A BooleanSchema with the collected UI and messages
        """
        return BooleanSchema(ui=self._ui, messages=self._messages)


class ObjectBuilder(SchemaBuilder[ObjectSchema]):
    """Builder for ObjectSchema.

    Shape values may be builders or already-built schema nodes.
    """

    def __init__(self, shape: Mapping[str, Union[SchemaBuilder, Schema]]) -> None:
        """Initialize an object builder.

        Args:
            shape: Field name -> builder or schema node. Every field is required.
        """
        super().__init__()
        self._shape = dict(shape)

    def messages(self, messages: Optional[ObjectMessages] = None, **kwargs: str) -> "ObjectBuilder":
        """Override failure messages.

        Args:
            messages: An ObjectMessages instance. When omitted, ``kwargs`` are used.
            **kwargs: ObjectMessages fields, e.g. ``required="Mandatory"``

        Returns:
            This builder, for chaining

        Raises:
            TypeError: If a keyword is not an object failure kind
        """
        self._messages = messages if messages is not None else ObjectMessages(**kwargs)
        return self

    def build(self) -> ObjectSchema:
        """Create the ObjectSchema, building nested builders first.

        Returns:
            An ObjectSchema whose shape holds only schema nodes

        Raises:
            TypeError: If a shape entry is neither a builder nor a schema node
        """
        shape: Dict[str, Schema] = {}
        for key, child in self._shape.items():
            if isinstance(child, SchemaBuilder):
                shape[key] = child.build()
            elif isinstance(child, SCHEMA_TYPES):
                shape[key] = child
            else:
                raise TypeError(
                    f"Shape entry '{key}' must be a builder or schema node, got {type(child).__name__}"
                )
        return ObjectSchema(shape=shape, ui=self._ui, messages=self._messages)


class _Builders:
    """Entry points: ``s.string()``, ``s.number()``, ``s.boolean()``, ``s.object()``."""

    @staticmethod
    def string() -> StringBuilder:
        """Start a string schema."""
        return StringBuilder()

    @staticmethod
    def number() -> NumberBuilder:
        """Start a number schema."""
        return NumberBuilder()

    @staticmethod
    def boolean() -> BooleanBuilder:
        """Start a boolean schema."""
        return BooleanBuilder()

    @staticmethod
    def object(shape: Mapping[str, Union[SchemaBuilder, Schema]]) -> ObjectBuilder:
        """Start an object schema.

        Args:
            shape: Field name -> builder or schema node

        Returns:
            An ObjectBuilder over ``shape``

        Examples:
            >>> s.object({"ok": s.boolean()}).to_dict()
            {'type': 'object', 'shape': {'ok': {'type': 'boolean'}}}
        """
        return ObjectBuilder(shape)


s = _Builders()


__all__ = [
    "SchemaBuilder",
    "StringBuilder",
    "NumberBuilder",
    "BooleanBuilder",
    "ObjectBuilder",
    "s",
]
