"""Record schemas and the process-wide schema registry.

A :class:`Schema` is the compiled form of a record kind: its category,
its lineage and the ordered list of its fields. Schemas are compiled
lazily, once per kind, by :class:`SchemaRegistry` and then shared by
every hydration, update and serialization of that kind.

Example:
    >>> from immutable_base.hydration.schema import get_schema
    >>> schema = get_schema(Order)
    >>> [f.name for f in schema.fields]
    ['id', 'customer', 'lines']
"""

import inspect
import sys
import threading
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from immutable_base.exceptions import (
    ArrayOfSchemaException,
    SchemaCategoryException,
    SchemaException,
    SchemaVisibilityException,
)
from immutable_base.hydration.api import Category, Record, is_record_class
from immutable_base.hydration.descriptors import (
    NO_ELEMENT,
    BuiltinKind,
    BuiltinType,
    TypeDescriptor,
    collection_element,
    to_descriptor,
)
from immutable_base.logging import SCHEMA, get_logger

_logger = get_logger(SCHEMA)

_MISSING = object()


@dataclass(frozen=True)
class FieldDescriptor:
    """Describes a field of a record kind.

    Attributes:
        name: The logical field name, used as key in input and output.
        attribute: The instance attribute holding the value.
        descriptor: The accepted type.
        index: Position of the field in the schema.
        declaring_class: The class whose annotation declared the field.
        default: The declared default, or None.
        has_default: Whether a default was declared.
        array_of: Element kind of a collection-of field, or None.
    """

    name: str
    attribute: str
    descriptor: TypeDescriptor
    index: int
    declaring_class: type
    default: Any = None
    has_default: bool = False
    array_of: Optional[type] = None

    @property
    def nullable(self) -> bool:
        """Whether the field accepts None."""
        return self.descriptor.nullable

    @property
    def is_collection(self) -> bool:
        """Whether the field is a collection-of field."""
        return self.array_of is not None


@dataclass(frozen=True)
class Schema:
    """Compiled schema of a record kind."""

    kind: type
    category: Category
    fields: Tuple[FieldDescriptor, ...]
    lineage: Tuple[type, ...]
    _by_name: Dict[str, FieldDescriptor] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "_by_name", {f.name: f for f in self.fields})

    @property
    def type_name(self) -> str:
        """Get the name of the record kind."""
        return self.kind.__name__

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Get a field descriptor by its logical name."""
        return self._by_name.get(name)

    def has_field(self, name: str) -> bool:
        """Check if the schema declares a field."""
        return name in self._by_name

    def field_names(self) -> List[str]:
        """Get the logical field names in schema order."""
        return [f.name for f in self.fields]


def _lineage(kind: type) -> Tuple[type, ...]:
    return tuple(
        klass
        for klass in reversed(kind.__mro__)
        if is_record_class(klass) and klass is not Record
    )


def _category(kind: type) -> Category:
    declared = [
        klass.__dict__["__category__"]
        for klass in kind.__mro__
        if klass.__dict__.get("__category__") is not None
    ]
    if not declared:
        raise SchemaCategoryException(
            f"{kind.__qualname__} must declare one of the categories "
            f"DataTransferObject, ValueObject, Entity or SingleValue"
        )
    category = declared[0]
    for other in declared[1:]:
        if not category.refines(other):
            raise SchemaCategoryException(
                f"{kind.__qualname__} declares conflicting categories "
                f"{category.value} and {other.value}"
            )
    return category


def _is_class_var(hint: Any) -> bool:
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


def _resolve_hints(kind: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(kind, include_extras=True)
    except (NameError, TypeError) as e:
        raise SchemaException(
            f"Cannot resolve field annotations of {kind.__qualname__}: {e}", cause=e
        )


def _logical_name(category: Category, klass: type, attribute: str) -> str:
    if category.requires_public_fields:
        if attribute.startswith("_"):
            raise SchemaVisibilityException(
                f"{klass.__qualname__}.{attribute} must be public in a "
                f"{category.value}"
            )
        return attribute
    if not attribute.startswith("_") or len(attribute) < 2:
        raise SchemaVisibilityException(
            f"{klass.__qualname__}.{attribute} must be private (prefixed with "
            f"an underscore) in a {category.value}"
        )
    return attribute[1:]


def _resolve_element(klass: type, attribute: str, element: Any) -> type:
    where = f"{klass.__qualname__}.{attribute}"
    if element is None or (isinstance(element, str) and not element.strip()):
        raise ArrayOfSchemaException(f"ArrayOf element kind of {where} cannot be empty")
    if isinstance(element, str):
        name = element.strip()
        if name == klass.__name__:
            resolved = klass
        else:
            module = sys.modules.get(klass.__module__)
            resolved = getattr(module, name, None) if module is not None else None
        if resolved is None:
            raise ArrayOfSchemaException(
                f"ArrayOf element kind {name!r} of {where} does not exist"
            )
        element = resolved
    if not (is_record_class(element) or (isinstance(element, type) and issubclass(element, Enum))):
        raise ArrayOfSchemaException(
            f"ArrayOf element kind of {where} must be a record kind or an enum, "
            f"got {element!r}"
        )
    return element


def compile_schema(kind: type) -> Schema:
    """Compile the schema of a record kind.

    Fields are collected from the root-most ancestor down to ``kind``,
    each class contributing its own annotations in declaration order.
    A field re-annotated by a subclass keeps its original position.

    Args:
        kind: The record class.

    Returns:
        The compiled schema.

    Raises:
        SchemaCategoryException: If the category is missing or ambiguous.
        SchemaVisibilityException: If a field's visibility is wrong.
        ArrayOfSchemaException: If a collection-of marker is unusable.
        SchemaException: If an annotation cannot be resolved.
    """
    if not is_record_class(kind):
        raise SchemaCategoryException(f"{kind!r} is not a record kind")

    category = _category(kind)
    lineage = _lineage(kind)
    hints = _resolve_hints(kind)

    collected: Dict[str, FieldDescriptor] = {}
    for klass in lineage:
        for attribute in inspect.get_annotations(klass):
            if attribute.startswith("__") and attribute.endswith("__"):
                continue
            hint = hints.get(attribute)
            if hint is None or _is_class_var(hint):
                continue
            name = _logical_name(category, klass, attribute)
            descriptor = to_descriptor(hint)

            array_of = None
            element = collection_element(hint)
            if element is not NO_ELEMENT:
                array_of = _resolve_element(klass, attribute, element)
                if not (
                    isinstance(descriptor, BuiltinType)
                    and descriptor.kind is BuiltinKind.ARRAY
                ):
                    raise ArrayOfSchemaException(
                        f"{klass.__qualname__}.{attribute} is marked ArrayOf but is "
                        f"declared as {descriptor.describe()}, not a list"
                    )

            default = _MISSING
            for owner in kind.__mro__:
                if attribute in owner.__dict__:
                    default = owner.__dict__[attribute]
                    break

            previous = collected.get(name)
            collected[name] = FieldDescriptor(
                name=name,
                attribute=attribute,
                descriptor=descriptor,
                index=previous.index if previous is not None else len(collected),
                declaring_class=klass,
                default=None if default is _MISSING else default,
                has_default=default is not _MISSING,
                array_of=array_of,
            )

    fields = tuple(sorted(collected.values(), key=lambda f: f.index))

    if category is Category.SINGLE_VALUE:
        if (
            len(fields) != 1
            or fields[0].name != "value"
            or not isinstance(fields[0].descriptor, BuiltinType)
            or not fields[0].descriptor.is_scalar
        ):
            raise SchemaCategoryException(
                f"{kind.__qualname__} must declare exactly one scalar field "
                f"named 'value' (as '_value')"
            )

    return Schema(kind=kind, category=category, fields=fields, lineage=lineage)


class SchemaRegistry:
    """Thread-safe cache of compiled schemas.

    Schemas are compiled on first use and published atomically: readers
    either see no schema or a complete one. A failed compilation is
    remembered and re-raised for every later use of the kind.
    """

    def __init__(self):
        self._schemas: Dict[type, Schema] = {}
        self._failures: Dict[type, SchemaException] = {}
        self._lock = threading.RLock()

    def compile(self, kind: type) -> Schema:
        """Get the schema of a kind, compiling it on first use.

        Raises:
            SchemaException: If the kind's declaration is invalid.
        """
        schema = self._schemas.get(kind)
        if schema is not None:
            return schema

        with self._lock:
            schema = self._schemas.get(kind)
            if schema is not None:
                return schema
            failure = self._failures.get(kind)
            if failure is not None:
                raise failure
            try:
                schema = compile_schema(kind)
            except SchemaException as e:
                self._failures[kind] = e
                _logger.warning("Schema compilation failed for %r: %s", kind, e)
                raise
            self._schemas[kind] = schema

        _logger.debug(
            "Compiled schema for %s (%s, %d fields)",
            schema.type_name,
            schema.category.value,
            len(schema.fields),
        )
        return schema

    def is_compiled(self, kind: type) -> bool:
        """Check if a kind has a published schema."""
        return kind in self._schemas

    def all_schemas(self) -> List[Schema]:
        """Get all compiled schemas."""
        return list(self._schemas.values())

    def reset(self) -> None:
        """Forget every compiled schema and remembered failure."""
        with self._lock:
            self._schemas = {}
            self._failures = {}
        _logger.debug("Schema registry reset")


_registry = SchemaRegistry()


def get_registry() -> SchemaRegistry:
    """Get the process-wide schema registry."""
    return _registry


def get_schema(kind: type) -> Schema:
    """Get the schema of a kind from the process-wide registry."""
    return _registry.compile(kind)


def reset_registry() -> None:
    """Reset the process-wide registry (testing hook)."""
    _registry.reset()
