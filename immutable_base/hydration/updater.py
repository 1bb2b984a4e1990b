"""Immutable updates: deriving a new record from an existing one.

:func:`update` merges a patch into the current field values and builds a
new instance of the same kind through the regular construction path,
so a derived record is validated exactly like one built from scratch.
"""

from typing import Any, Dict, Mapping, Optional

from immutable_base.config import get_config
from immutable_base.exceptions import HydrationException, TypeMismatchException
from immutable_base.hydration.api import Record
from immutable_base.hydration.descriptors import (
    RecordType,
    TypeDescriptor,
    UnionType,
    type_name_of,
)
from immutable_base.hydration.resolver import resolve, resolve_collection
from immutable_base.hydration.schema import FieldDescriptor, Schema, get_schema
from immutable_base.hydration.serializer import decode_json_object, decode_structured
from immutable_base.logging import UPDATER, get_logger

_logger = get_logger(UPDATER)


def normalize_patch(schema: Schema, patch: Any) -> Dict[str, Any]:
    """Turn a patch into a dictionary keyed by logical field name.

    Args:
        schema: The schema of the record being updated.
        patch: None, a mapping, JSON object text, or a record instance.

    Raises:
        InvalidJsonException: If ``patch`` is text that is not a JSON object.
        TypeMismatchException: If ``patch`` is of any other type.
    """
    if patch is None:
        return {}
    if isinstance(patch, Record):
        source = get_schema(type(patch))
        return {f.name: getattr(patch, f.attribute) for f in source.fields}
    if isinstance(patch, str):
        return decode_json_object(patch)
    if isinstance(patch, Mapping):
        return dict(patch)
    raise TypeMismatchException(
        f"{schema.type_name} patch must be a mapping, JSON text or a record, "
        f"got {type_name_of(patch)}"
    )


def _holds_nested(descriptor: TypeDescriptor, current: Record) -> bool:
    if isinstance(descriptor, RecordType):
        return isinstance(current, descriptor.record)
    if isinstance(descriptor, UnionType):
        return any(_holds_nested(a, current) for a in descriptor.alternatives)
    return False


def _patched_value(field: FieldDescriptor, current: Any, raw: Any) -> Any:
    value = raw
    if (
        isinstance(value, str)
        and get_config().decode_json_patch_values
        and not field.descriptor.admits_strings()
    ):
        value = decode_structured(value)

    if value is None:
        return None
    if (
        isinstance(current, Record)
        and isinstance(value, Mapping)
        and _holds_nested(field.descriptor, current)
    ):
        return current.with_(value)
    if field.is_collection:
        return resolve_collection(field.array_of, value)
    return resolve(field.descriptor, value)


def update(
    instance: Record,
    schema: Schema,
    patch: Any = None,
    changes: Optional[Mapping[str, Any]] = None,
) -> Record:
    """Derive a new instance with some fields replaced.

    Fields missing from the patch keep their current value. A nested
    record patched with a mapping is updated through its own
    ``with_()``, which keeps its unpatched fields. Collection-of fields
    are replaced as a whole.

    Args:
        instance: The record to derive from; it is never modified.
        schema: The schema of the record's kind.
        patch: A mapping, JSON object text, or another record.
        changes: Extra field values, applied after ``patch``.

    Returns:
        A new, fully validated instance of the same kind.

    Raises:
        HydrationException: If a patched value is rejected.
    """
    patched = normalize_patch(schema, patch)
    if changes:
        patched.update(changes)

    data: Dict[str, Any] = {}
    for field in schema.fields:
        current = getattr(instance, field.attribute)
        if field.name not in patched:
            data[field.name] = current
            continue
        try:
            data[field.name] = _patched_value(field, current, patched[field.name])
        except HydrationException as e:
            e.add_field(schema.type_name, field.name)
            raise

    _logger.debug(
        "Updating %s (%s)",
        schema.type_name,
        ", ".join(name for name in patched if schema.has_field(name)),
    )
    return type(instance).from_dict(data)
