"""
Flagbind schema descriptors.

Overview
- Kinds (tagged variant, matched with ``match``):
  • Integer(bits, signed): base-10 integer, unbounded when bits is None.
  • Float(): floating point number.
  • Boolean(): presence-only switch.
  • Text(): immutable ``str`` value stored verbatim.
  • Unsupported(reason): anything else; reported when a flag targets it.

- Integer aliases
  • i8/i16/i32/i64 and u8/u16/u32/u64 are ``Annotated[int, Integer(...)]``
    markers, so annotated classes keep plain ``int`` values at runtime.

- describe(cls, factory="init")
  • Validates the factory contract (exists, takes no arguments, declares the
    class itself as its return type) before any token is read.
  • Builds one FieldDescriptor per annotated field, in declaration order.

Annotation mapping
    int                      -> Integer()
    u8 / Annotated[int, ...] -> Integer(8, signed=False)
    float                    -> Float()
    bool                     -> Boolean()
    str                      -> Text()
    T | None / Optional[T]   -> kind of T, optional=True
    bytes, list, dict, ...   -> Unsupported(...)

Quick example
    >>> class Args:
    ...     port: u16
    ...     host: str | None = None
    ...     @classmethod
    ...     def init(cls) -> "Args":
    ...         return cls()
    >>> [field.name for field in describe(Args)]
    ['port', 'host']
"""
import inspect
import types
import typing
from dataclasses import InitVar, dataclass
from typing import Annotated, ClassVar, Self, Union

from .faults import (
    SchemaFactoryHasArguments,
    SchemaFactoryWrongReturnType,
    SchemaMissingFactory,
    UnsupportedFieldType,
)


@dataclass(frozen=True, slots=True)
class Integer:
    bits: int | None = None
    signed: bool = True

    def __post_init__(self):
        if self.bits is not None and (not isinstance(self.bits, int) or self.bits < 1):
            raise ValueError("integer 'bits' must be a positive integer")

    @property
    def bounds(self):
        """
        inclusive (lower, upper) range, or (None, None) when unbounded.
        """
        if self.bits is None:
            return (None, None) if self.signed else (0, None)
        if self.signed:
            return -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        return 0, (1 << self.bits) - 1

    def __str__(self):
        if self.bits is None:
            return "integer" if self.signed else "unsigned integer"
        return "%s%d" % ("i" if self.signed else "u", self.bits)


@dataclass(frozen=True, slots=True)
class Float:
    def __str__(self):
        return "float"


@dataclass(frozen=True, slots=True)
class Boolean:
    def __str__(self):
        return "bool"


@dataclass(frozen=True, slots=True)
class Text:
    def __str__(self):
        return "string"


@dataclass(frozen=True, slots=True)
class Unsupported:
    reason: str

    def __str__(self):
        return "unsupported"


i8 = Annotated[int, Integer(8, signed=True)]
i16 = Annotated[int, Integer(16, signed=True)]
i32 = Annotated[int, Integer(32, signed=True)]
i64 = Annotated[int, Integer(64, signed=True)]
u8 = Annotated[int, Integer(8, signed=False)]
u16 = Annotated[int, Integer(16, signed=False)]
u32 = Annotated[int, Integer(32, signed=False)]
u64 = Annotated[int, Integer(64, signed=False)]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """
    Read-only view of one configuration field.

    Attributes
    - name: attribute name, also the flag name (``--<name>``).
    - kind: Integer | Float | Boolean | Text | Unsupported.
    - optional: True for ``T | None`` fields; a flag without a value then
      leaves the default in place instead of failing.
    - annotation: the annotation the descriptor was derived from.
    """
    name: str
    kind: Integer | Float | Boolean | Text | Unsupported
    optional: bool = False
    annotation: typing.Any = None


# Sequence and buffer types a text field could be confused with.
_POINTERS = (bytes, bytearray, memoryview, list, tuple, set, frozenset, dict)


def _classify(annotation, /):
    """
    Map an annotation to (kind, optional).
    """
    origin = typing.get_origin(annotation)

    if origin is Union or origin is types.UnionType:
        members = typing.get_args(annotation)
        present = [member for member in members if member is not type(None)]
        optional = len(present) != len(members)
        if len(present) != 1:
            return Unsupported("union of %d types" % len(present)), optional
        kind, nested = _classify(present[0])
        return kind, optional or nested

    if origin is Annotated:
        base, *metadata = typing.get_args(annotation)
        kind, optional = _classify(base)
        markers = [marker for marker in metadata if isinstance(marker, Integer)]
        if markers and isinstance(kind, Integer):
            kind = markers[-1]
        return kind, optional

    if annotation is bool:
        return Boolean(), False
    if annotation is int:
        return Integer(), False
    if annotation is float:
        return Float(), False
    if annotation is str:
        return Text(), False
    if annotation in _POINTERS or origin in _POINTERS:
        name = getattr(origin or annotation, "__name__", repr(annotation))
        return Unsupported("%s is not an immutable text type" % name), False
    return Unsupported("%r is not a supported field type" % (annotation,)), False


def _hints(object, cls, /, **options):
    return typing.get_type_hints(object, localns={cls.__name__: cls}, **options)


def _check_factory(cls, factory, /):
    """
    Validate the zero-argument factory contract of ``cls``.
    """
    function = getattr(cls, factory, None)
    if function is None or not callable(function):
        raise SchemaMissingFactory(
            "type %r has no %r factory" % (cls.__qualname__, factory),
            hint="add a zero-argument classmethod '%s' returning %s" % (factory, cls.__qualname__),
            type=cls,
        )

    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        raise SchemaMissingFactory(
            "factory %s.%s cannot be inspected" % (cls.__qualname__, factory),
            hint="define '%s' in python as a classmethod or staticmethod" % factory,
            type=cls,
        ) from None

    if parameters := list(signature.parameters):
        raise SchemaFactoryHasArguments(
            "factory %s.%s takes %s" % (cls.__qualname__, factory, ", ".join(map(repr, parameters))),
            hint="remove every parameter from '%s' (use a classmethod, not an instance method)" % factory,
            type=cls,
        )

    try:
        returns = _hints(function, cls).get("return")
    except NameError:
        returns = signature.return_annotation

    if returns is not cls and returns is not Self:
        raise SchemaFactoryWrongReturnType(
            "factory %s.%s must return %s, not %s" % (
                cls.__qualname__,
                factory,
                cls.__qualname__,
                "an undeclared type" if returns in (None, inspect.Signature.empty) else repr(returns),
            ),
            hint="annotate it as 'def %s(cls) -> %s' or '-> Self'" % (factory, cls.__qualname__),
            type=cls,
        )


class Schema:
    """
    Field table of a configuration type, validated once and then read-only.

    Attributes
    - type: the configuration type.
    - factory: name of its zero-argument factory.
    - fields: tuple of FieldDescriptor in declaration order.
    """

    def __init__(self, type, factory, fields, /):
        self.type = type
        self.factory = factory
        self.fields = tuple(fields)

    def find(self, name, /):
        """
        return the first field called ``name``, or None.
        """
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def create(self):
        """
        invoke the factory and check the runtime type of what it built.
        """
        instance = getattr(self.type, self.factory)()
        if type(instance) is not self.type:
            raise SchemaFactoryWrongReturnType(
                "factory %s.%s returned a %s instance" % (
                    self.type.__qualname__, self.factory, type(instance).__qualname__
                ),
                hint="return an instance of exactly %s" % self.type.__qualname__,
                type=self.type,
            )
        return instance

    def __iter__(self):
        return iter(self.fields)

    def __len__(self):
        return len(self.fields)

    def __rich_repr__(self):
        yield "type", self.type
        yield "factory", self.factory
        yield "fields", self.fields

    def __repr__(self):
        return "schema(type=%s, factory=%r, fields=%r)" % (
            self.type.__qualname__, self.factory, [field.name for field in self.fields]
        )


def describe(cls, /, factory="init"):
    """
    Build the Schema of ``cls``.

    Raises
    - TypeError: cls is not a class, or factory is not a non-empty string.
    - SchemaMissingFactory / SchemaFactoryHasArguments /
      SchemaFactoryWrongReturnType: the factory contract is broken.
    - UnsupportedFieldType: a field annotation names an undefined type.
    """
    if not isinstance(cls, type):
        raise TypeError("describe() argument must be a class")
    if not isinstance(factory, str) or not factory.strip():
        raise TypeError("describe() 'factory' must be a non-empty string")

    _check_factory(cls, factory)

    try:
        hints = _hints(cls, cls, include_extras=True)
    except NameError as error:
        raise UnsupportedFieldType(
            "type %r has a field annotation that cannot be resolved: %s" % (cls.__qualname__, error),
            hint="import or define %r before describing %s" % (error.name, cls.__qualname__),
            type=cls,
            field=error.name,
        ) from None

    fields = []
    for name, annotation in hints.items():
        if typing.get_origin(annotation) is ClassVar or annotation is ClassVar or isinstance(annotation, InitVar):
            continue
        kind, optional = _classify(annotation)
        fields.append(FieldDescriptor(name, kind, optional, annotation))

    return Schema(cls, factory, fields)


__all__ = (
    "Integer",
    "Float",
    "Boolean",
    "Text",
    "Unsupported",
    "FieldDescriptor",
    "Schema",
    "describe",
    "i8",
    "i16",
    "i32",
    "i64",
    "u8",
    "u16",
    "u32",
    "u64",
)
