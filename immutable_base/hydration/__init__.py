"""ImmutableBase hydration engine.

The engine modules (``hydrator``, ``updater``, ``validation`` and
``serializer``) are imported by :mod:`immutable_base.base` and are not
re-exported here.
"""

from immutable_base.hydration.api import (
    Category,
    Record,
    ValidationOrder,
    is_record_class,
)
from immutable_base.hydration.descriptors import (
    ArrayOf,
    BuiltinKind,
    BuiltinType,
    EnumType,
    InstanceType,
    RecordType,
    TypeDescriptor,
    UnionType,
)
from immutable_base.hydration.schema import (
    FieldDescriptor,
    Schema,
    SchemaRegistry,
    get_registry,
    get_schema,
    reset_registry,
)

__all__ = [
    "Category",
    "Record",
    "ValidationOrder",
    "is_record_class",
    "ArrayOf",
    "BuiltinKind",
    "BuiltinType",
    "EnumType",
    "InstanceType",
    "RecordType",
    "TypeDescriptor",
    "UnionType",
    "FieldDescriptor",
    "Schema",
    "SchemaRegistry",
    "get_registry",
    "get_schema",
    "reset_registry",
]
