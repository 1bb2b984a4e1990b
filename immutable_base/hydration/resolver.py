"""Type resolution of raw input values.

:func:`resolve` maps a raw value onto a :class:`TypeDescriptor`: it
either returns the value to store or raises a
:class:`~immutable_base.exceptions.HydrationException` describing why
the value is not acceptable. Nested records are hydrated through their
own ``from_dict``.
"""

import functools
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Tuple, Type

from immutable_base.exceptions import (
    ArrayElementException,
    EnumMismatchException,
    HydrationException,
    InvalidCollectionValueException,
    InvalidJsonException,
    TypeMismatchException,
    UnionMismatchException,
    UnionRequiresInstanceException,
)
from immutable_base.hydration.descriptors import (
    BuiltinType,
    EnumType,
    InstanceType,
    RecordType,
    TypeDescriptor,
    UnionType,
    type_name_of,
)
from immutable_base.hydration.serializer import decode_json_object


def _resolve_builtin(descriptor: BuiltinType, value: Any) -> Any:
    if descriptor.kind.matches(value):
        return value
    raise TypeMismatchException(
        f"expected {descriptor.describe()}, got {type_name_of(value)}"
    )


def _resolve_record(descriptor: RecordType, value: Any) -> Any:
    if isinstance(value, descriptor.record):
        return value
    if isinstance(value, Mapping):
        return descriptor.record.from_dict(value)
    raise TypeMismatchException(
        f"expected {descriptor.describe()} or a mapping, got {type_name_of(value)}"
    )


def _resolve_enum(descriptor: EnumType, value: Any) -> Any:
    if isinstance(value, descriptor.enum):
        return value
    if not isinstance(value, (str, int, float)):
        raise TypeMismatchException(
            f"expected {descriptor.describe()}, got {type_name_of(value)}"
        )
    if isinstance(value, str):
        member = descriptor.by_name.get(value)
        if member is not None:
            return member
    member = descriptor.by_value.get(value)
    if member is not None:
        return member
    raise EnumMismatchException(
        f"{value!r} is not a valid {descriptor.name}, expected one of "
        f"{', '.join(descriptor.by_name)}"
    )


def _resolve_instance(descriptor: InstanceType, value: Any) -> Any:
    if isinstance(value, descriptor.cls):
        return value
    raise TypeMismatchException(
        f"expected {descriptor.describe()}, got {type_name_of(value)}"
    )


def _resolve_union(descriptor: UnionType, value: Any) -> Any:
    if not descriptor.accepts_collections and isinstance(value, (list, tuple, Mapping)):
        raise UnionRequiresInstanceException(
            f"{descriptor.describe()} only accepts constructed values, "
            f"got {type_name_of(value)}"
        )
    for alternative in descriptor.alternatives:
        try:
            return resolve(alternative, value)
        except HydrationException:
            continue
    raise UnionMismatchException(
        f"expected one of {', '.join(a.describe() for a in descriptor.alternatives)}, "
        f"got {type_name_of(value)}"
    )


_RESOLVERS: Dict[type, Callable[[Any, Any], Any]] = {
    BuiltinType: _resolve_builtin,
    RecordType: _resolve_record,
    EnumType: _resolve_enum,
    InstanceType: _resolve_instance,
    UnionType: _resolve_union,
}


def resolve(descriptor: TypeDescriptor, value: Any) -> Any:
    """Resolve a raw value against a type descriptor.

    Alternatives of a union are tried in declaration order and the first
    one that accepts the value wins.

    Args:
        descriptor: The declared type.
        value: The raw input value.

    Returns:
        The value to store.

    Raises:
        HydrationException: If the value is not acceptable.
    """
    if value is None:
        if descriptor.nullable:
            return None
        raise TypeMismatchException(f"expected {descriptor.describe()}, got None")
    return _RESOLVERS[type(descriptor)](descriptor, value)


@functools.lru_cache(maxsize=None)
def _enum_descriptor(enum: Type[Enum]) -> EnumType:
    return EnumType(enum)


def resolve_element(element_kind: type, element: Any) -> Any:
    """Resolve one element of a collection-of field.

    Record elements may be instances, mappings, or JSON object text.
    Enum elements follow the enum rules of :func:`resolve`.
    """
    if issubclass(element_kind, Enum):
        try:
            return _resolve_enum(_enum_descriptor(element_kind), element)
        except TypeMismatchException as e:
            raise ArrayElementException(
                f"expected {element_kind.__name__}, got {type_name_of(element)}",
                cause=e,
            )
    if isinstance(element, element_kind):
        return element
    if isinstance(element, Mapping):
        return element_kind.from_dict(element)
    if isinstance(element, str):
        try:
            data = decode_json_object(element)
        except InvalidJsonException as e:
            raise ArrayElementException(
                f"expected {element_kind.__name__} or a mapping, got text that is "
                f"not a JSON object",
                cause=e,
            )
        return element_kind.from_dict(data)
    raise ArrayElementException(
        f"expected {element_kind.__name__} or a mapping, got {type_name_of(element)}"
    )


def resolve_collection(element_kind: type, value: Any) -> Tuple[Any, ...]:
    """Resolve every element of a collection-of field.

    Args:
        element_kind: The record kind or enum of the elements.
        value: The raw sequence.

    Returns:
        The resolved elements, as a tuple.

    Raises:
        InvalidCollectionValueException: If ``value`` is not a list or tuple.
        HydrationException: If an element is rejected; its path carries
            the element index.
    """
    if not isinstance(value, (list, tuple)):
        raise InvalidCollectionValueException(
            f"expected a list of {element_kind.__name__}, got {type_name_of(value)}"
        )
    items = []
    for index, element in enumerate(value):
        try:
            items.append(resolve_element(element_kind, element))
        except HydrationException as e:
            e.add_index(index)
            raise
    return tuple(items)
