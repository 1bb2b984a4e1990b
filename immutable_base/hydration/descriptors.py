"""Type descriptors for record fields.

A type descriptor describes the shape a field accepts. Descriptors are
built once, when a record kind is compiled, from the class annotations:

- ``str``, ``int``, ``float``, ``bool``, ``list``, ``dict``, ``Any``
  become :class:`BuiltinType`
- record classes become :class:`RecordType`
- ``Enum`` subclasses become :class:`EnumType`
- any other class becomes :class:`InstanceType`
- ``Union[...]`` becomes :class:`UnionType`, alternatives kept in the
  order they were written
- ``Optional[...]`` / ``X | None`` set the ``nullable`` flag

Collection-of fields are declared with ``Annotated[list, ArrayOf(Tag)]``
or simply ``List[Tag]`` when ``Tag`` is a record kind or an enum.
"""

import collections.abc
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Tuple, Type, Union

from immutable_base.exceptions import SchemaException
from immutable_base.hydration.api import is_record_class


class BuiltinKind(IntEnum):
    """Builtin value kinds accepted by :class:`BuiltinType`."""

    STRING = 0
    INT = 1
    FLOAT = 2
    BOOL = 3
    ARRAY = 4
    OBJECT = 5
    ANY = 6

    def matches(self, value: Any) -> bool:
        """Check if ``value`` is exactly of this kind."""
        if self is BuiltinKind.STRING:
            return isinstance(value, str)
        if self is BuiltinKind.INT:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is BuiltinKind.FLOAT:
            return isinstance(value, float)
        if self is BuiltinKind.BOOL:
            return isinstance(value, bool)
        if self is BuiltinKind.ARRAY:
            return isinstance(value, (list, tuple))
        if self is BuiltinKind.OBJECT:
            return isinstance(value, Mapping)
        return value is not None


BUILTIN_KIND_MAP: Dict[Any, BuiltinKind] = {
    str: BuiltinKind.STRING,
    int: BuiltinKind.INT,
    float: BuiltinKind.FLOAT,
    bool: BuiltinKind.BOOL,
    list: BuiltinKind.ARRAY,
    tuple: BuiltinKind.ARRAY,
    dict: BuiltinKind.OBJECT,
    object: BuiltinKind.ANY,
    Any: BuiltinKind.ANY,
}


BUILTIN_KIND_NAMES: Dict[BuiltinKind, str] = {
    BuiltinKind.STRING: "str",
    BuiltinKind.INT: "int",
    BuiltinKind.FLOAT: "float",
    BuiltinKind.BOOL: "bool",
    BuiltinKind.ARRAY: "list",
    BuiltinKind.OBJECT: "dict",
    BuiltinKind.ANY: "Any",
}


SCALAR_KINDS = frozenset(
    {BuiltinKind.STRING, BuiltinKind.INT, BuiltinKind.FLOAT, BuiltinKind.BOOL}
)

# Kinds that accept a loose list or dict inside a union.
COLLECTION_KINDS = frozenset({BuiltinKind.ARRAY, BuiltinKind.OBJECT, BuiltinKind.ANY})

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)

_MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def type_name_of(value: Any) -> str:
    """Get the runtime type name used in error messages."""
    if value is None:
        return "None"
    return type(value).__name__


class TypeDescriptor(ABC):
    """Base class of all type descriptors.

    Every descriptor carries its own ``nullable`` flag, independent of
    the field that owns it.
    """

    nullable: bool

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the display name of the accepted type."""
        pass

    def describe(self) -> str:
        """Get the display name including nullability."""
        if self.nullable:
            return f"?{self.name}"
        return self.name

    def admits_strings(self) -> bool:
        """Check whether a plain string can satisfy this descriptor."""
        return False

    def as_nullable(self) -> "TypeDescriptor":
        """Get a copy of this descriptor that admits None."""
        return replace(self, nullable=True)


@dataclass(frozen=True)
class BuiltinType(TypeDescriptor):
    """A builtin scalar or collection kind."""

    kind: BuiltinKind
    nullable: bool = False

    @property
    def name(self) -> str:
        return BUILTIN_KIND_NAMES[self.kind]

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    def admits_strings(self) -> bool:
        return self.kind in (BuiltinKind.STRING, BuiltinKind.ANY)


@dataclass(frozen=True)
class RecordType(TypeDescriptor):
    """A reference to another record kind."""

    record: type
    nullable: bool = False

    @property
    def name(self) -> str:
        return self.record.__name__


@dataclass(frozen=True)
class EnumType(TypeDescriptor):
    """A reference to an enumeration.

    The name and value lookup tables are built once with the descriptor.
    """

    enum: Type[Enum]
    nullable: bool = False
    by_name: Mapping[str, Enum] = field(default=None, init=False, repr=False, compare=False)
    by_value: Mapping[Any, Enum] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        by_value = {}
        for member in self.enum:
            try:
                by_value.setdefault(member.value, member)
            except TypeError:
                # unhashable member values can only be matched by name
                continue
        object.__setattr__(self, "by_name", dict(self.enum.__members__))
        object.__setattr__(self, "by_value", by_value)

    @property
    def name(self) -> str:
        return self.enum.__name__

    def admits_strings(self) -> bool:
        return True


@dataclass(frozen=True)
class InstanceType(TypeDescriptor):
    """Any other class; values must already be instances of it."""

    cls: type
    nullable: bool = False

    @property
    def name(self) -> str:
        return self.cls.__name__

    def admits_strings(self) -> bool:
        return issubclass(str, self.cls)


@dataclass(frozen=True)
class UnionType(TypeDescriptor):
    """An ordered list of alternatives; the first one that accepts wins."""

    alternatives: Tuple[TypeDescriptor, ...]
    nullable: bool = False

    @property
    def name(self) -> str:
        return "|".join(alternative.name for alternative in self.alternatives)

    @property
    def accepts_collections(self) -> bool:
        """Whether one alternative is a builtin accepting lists or dicts."""
        return any(
            isinstance(alternative, BuiltinType) and alternative.kind in COLLECTION_KINDS
            for alternative in self.alternatives
        )

    def admits_strings(self) -> bool:
        return any(alternative.admits_strings() for alternative in self.alternatives)


class ArrayOf:
    """Marks a list field as a homogeneous collection of a record kind.

    The element kind may be given as a class or as the name of a class
    defined in the same module as the record, which allows forward and
    self references.

    Example:
        >>> class Order(DataTransferObject):
        ...     lines: Annotated[list, ArrayOf(OrderLine)]
        ...     children: Annotated[list, ArrayOf("Order")]
    """

    __slots__ = ("_element",)

    def __init__(self, element: Union[type, str, None] = ""):
        self._element = element

    @property
    def element(self) -> Union[type, str, None]:
        """Get the element kind, or its name."""
        return self._element

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayOf):
            return False
        return self._element == other._element

    def __hash__(self) -> int:
        return hash(self._element)

    def __repr__(self) -> str:
        return f"ArrayOf({self._element!r})"


NO_ELEMENT = object()


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def _is_element_kind(obj: Any) -> bool:
    return is_record_class(obj) or (isinstance(obj, type) and issubclass(obj, Enum))


def to_descriptor(annotation: Any) -> TypeDescriptor:
    """Translate a resolved type annotation into a descriptor.

    Args:
        annotation: A type hint as returned by ``typing.get_type_hints``.

    Returns:
        The matching type descriptor.

    Raises:
        SchemaException: If the annotation cannot describe a field.
    """
    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        return to_descriptor(typing.get_args(annotation)[0])

    if _is_union(origin):
        args = typing.get_args(annotation)
        nullable = type(None) in args
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1:
            descriptor = to_descriptor(members[0])
            return descriptor.as_nullable() if nullable else descriptor
        return UnionType(tuple(to_descriptor(member) for member in members), nullable)

    if origin is not None:
        if origin in _SEQUENCE_ORIGINS:
            return BuiltinType(BuiltinKind.ARRAY)
        if origin in _MAPPING_ORIGINS:
            return BuiltinType(BuiltinKind.OBJECT)
        raise SchemaException(f"Unsupported field annotation {annotation!r}")

    if annotation in BUILTIN_KIND_MAP:
        return BuiltinType(BUILTIN_KIND_MAP[annotation])

    if isinstance(annotation, type) and annotation is not type(None):
        if is_record_class(annotation):
            return RecordType(annotation)
        if issubclass(annotation, Enum):
            return EnumType(annotation)
        return InstanceType(annotation)

    raise SchemaException(f"Unsupported field annotation {annotation!r}")


def collection_element(annotation: Any) -> Any:
    """Find the collection-of element declared by an annotation.

    An explicit :class:`ArrayOf` marker wins; otherwise a list annotation
    whose item type is a record kind or an enum declares one implicitly.

    Returns:
        The element class or name, or ``NO_ELEMENT``.
    """
    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        args = typing.get_args(annotation)
        for metadata in annotation.__metadata__:
            if isinstance(metadata, ArrayOf):
                return metadata.element
        return collection_element(args[0])

    if _is_union(origin):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return collection_element(members[0])
        return NO_ELEMENT

    if origin in _SEQUENCE_ORIGINS:
        args = typing.get_args(annotation)
        if args and _is_element_kind(args[0]):
            return args[0]

    return NO_ELEMENT
