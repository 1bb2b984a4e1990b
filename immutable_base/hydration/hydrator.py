"""Hydration of record instances from mappings."""

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from immutable_base.exceptions import (
    HydrationException,
    MissingRequiredFieldException,
    TypeMismatchException,
)
from immutable_base.hydration.descriptors import BuiltinKind, BuiltinType, type_name_of
from immutable_base.hydration.resolver import resolve, resolve_collection
from immutable_base.hydration.schema import FieldDescriptor, Schema
from immutable_base.logging import HYDRATOR, get_logger

_logger = get_logger(HYDRATOR)

_ABSENT = object()


def _frozen(value: Any) -> Any:
    if type(value) in (list, tuple):
        return tuple(_frozen(item) for item in value)
    if type(value) in (dict, MappingProxyType):
        return MappingProxyType({key: _frozen(item) for key, item in value.items()})
    return value


def _store(field: FieldDescriptor, value: Any) -> Any:
    descriptor = field.descriptor
    if value is not None and isinstance(descriptor, BuiltinType):
        if descriptor.kind is BuiltinKind.ARRAY:
            return tuple(_frozen(item) for item in value)
        if descriptor.kind is BuiltinKind.OBJECT:
            return MappingProxyType({key: _frozen(item) for key, item in value.items()})
    return _frozen(value)


def hydrate_field(field: FieldDescriptor, raw: Any = _ABSENT) -> Any:
    """Compute the stored value of one field from its raw input.

    Raises:
        MissingRequiredFieldException: If a non-nullable field is absent
            or None.
        HydrationException: If the value is rejected.
    """
    if raw is _ABSENT or raw is None:
        if not field.nullable:
            if raw is _ABSENT:
                raise MissingRequiredFieldException("required field is missing")
            raise MissingRequiredFieldException("required field must not be None")
        if raw is _ABSENT and field.has_default:
            raw = field.default
        if raw is None:
            return None
    if field.is_collection:
        return resolve_collection(field.array_of, raw)
    return _store(field, resolve(field.descriptor, raw))


def hydrate(
    instance: Any,
    schema: Schema,
    data: Mapping[str, Any],
    prefilled: Optional[Mapping[str, Any]] = None,
) -> None:
    """Fill the fields of a fresh instance from a mapping.

    Fields are processed in schema order. Values given in ``prefilled``
    take precedence over ``data`` and are type-checked the same way.
    Keys that name no field are ignored. Nothing is assigned unless
    every field resolves.

    Args:
        instance: The instance being constructed.
        schema: The schema of the instance's kind.
        data: Raw field values keyed by logical field name.
        prefilled: Values already fixed by the kind's constructor.

    Raises:
        TypeMismatchException: If ``data`` is not a mapping.
        HydrationException: If a field is rejected; the path of the
            error starts with the kind and field name.
    """
    if not isinstance(data, Mapping):
        raise TypeMismatchException(
            f"{schema.type_name} expects a mapping, got {type_name_of(data)}"
        )
    prefilled = prefilled or {}

    values: Dict[str, Any] = {}
    for field in schema.fields:
        if field.name in prefilled:
            raw = prefilled[field.name]
        else:
            raw = data.get(field.name, _ABSENT)
        try:
            values[field.attribute] = hydrate_field(field, raw)
        except HydrationException as e:
            e.add_field(schema.type_name, field.name)
            _logger.debug("Hydration of %s failed: %s", schema.type_name, e)
            raise

    for attribute, value in values.items():
        object.__setattr__(instance, attribute, value)
