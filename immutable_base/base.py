"""The immutable record base class.

:class:`ImmutableBase` implements the :class:`Record` interface on top
of the hydration engine. Concrete kinds normally derive from one of the
category classes in :mod:`immutable_base.objects`; a kind may also
derive from :class:`ImmutableBase` directly and name its category with
a class keyword::

    class Point(ImmutableBase, category=Category.VALUE_OBJECT):
        _x: int
        _y: int
"""

from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar, Union

from immutable_base.exceptions import (
    ImmutableInstanceException,
    InvalidComparisonTargetException,
    SchemaCategoryException,
)
from immutable_base.hydration.api import Category, Record, ValidationOrder
from immutable_base.hydration.descriptors import type_name_of
from immutable_base.hydration.hydrator import hydrate
from immutable_base.hydration.schema import get_schema
from immutable_base.hydration.serializer import decode_json_object, to_dict, to_json
from immutable_base.hydration.updater import update
from immutable_base.hydration.validation import run_validation_chain

T = TypeVar("T", bound="ImmutableBase")

_HASHABLE_CATEGORIES = frozenset({Category.VALUE_OBJECT, Category.SINGLE_VALUE})


def _coerce_category(category: Union[Category, str], cls: type) -> Category:
    if isinstance(category, Category):
        return category
    for member in Category:
        if category in (member.name, member.value):
            return member
    raise SchemaCategoryException(
        f"{cls.__qualname__} declares unknown category {category!r}"
    )


def _values_equal(left: Any, right: Any) -> bool:
    if isinstance(left, ImmutableBase) and type(left) is type(right):
        return left.equals(right)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(
            _values_equal(a, b) for a, b in zip(left, right)
        )
    return left == right


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, Mapping):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    return value


class ImmutableBase(Record):
    """Base class of all immutable records.

    Instances are built by hydrating a mapping against the kind's
    schema and, for validated categories, running the validation chain.
    Once built, fields cannot be assigned or deleted.

    Attributes:
        validation_order: Walk order of the validation chain for this
            kind, or None for the configured default.
        validate_error_message: Explanation added to the error raised
            when this level's ``validate()`` returns False.
    """

    validation_order: ClassVar[Optional[ValidationOrder]] = None
    validate_error_message: ClassVar[Optional[str]] = None

    def __init_subclass__(cls, category: Union[Category, str, None] = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if category is not None:
            cls.__category__ = _coerce_category(category, cls)

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        *,
        prefilled: Optional[Mapping[str, Any]] = None,
    ):
        """Build a validated instance.

        Args:
            data: Field values keyed by logical field name.
            prefilled: Field values fixed by a subclass constructor; they
                win over ``data`` and are still type-checked.

        Raises:
            SchemaException: If the kind's declaration is invalid.
            HydrationException: If the input is rejected.
        """
        schema = get_schema(type(self))
        hydrate(self, schema, {} if data is None else data, prefilled)
        run_validation_chain(self, schema)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        return cls(data)

    @classmethod
    def from_json(cls: Type[T], text: str) -> T:
        """Build a validated instance from JSON object text.

        Raises:
            InvalidJsonException: If the text is malformed or not an object.
        """
        return cls.from_dict(decode_json_object(text))

    def with_(self: T, patch: Any = None, /, **changes: Any) -> T:
        return update(self, get_schema(type(self)), patch, changes)

    def to_dict(self) -> Dict[str, Any]:
        return to_dict(self)

    def to_json(self) -> str:
        """Encode the record as JSON text using the configured options."""
        return to_json(self)

    def equals(self, other: Any) -> bool:
        """Compare field by field with another instance of the same kind.

        Nested records are compared through their own ``equals()``.

        Raises:
            InvalidComparisonTargetException: If ``other`` is not an
                instance of exactly this kind.
        """
        if type(other) is not type(self):
            raise InvalidComparisonTargetException(
                f"equals() expects an instance of {type(self).__name__}, "
                f"got {type_name_of(other)}"
            )
        if other is self:
            return True
        return all(
            _values_equal(getattr(self, f.attribute), getattr(other, f.attribute))
            for f in get_schema(type(self)).fields
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        schema = get_schema(type(self))
        if schema.category not in _HASHABLE_CATEGORIES:
            raise TypeError(f"unhashable type: '{type(self).__name__}'")
        return hash(
            (type(self),)
            + tuple(_freeze(getattr(self, f.attribute)) for f in schema.fields)
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutableInstanceException(
            f"{type(self).__name__} is immutable, cannot set {name!r}"
        )

    def __delattr__(self, name: str) -> None:
        raise ImmutableInstanceException(
            f"{type(self).__name__} is immutable, cannot delete {name!r}"
        )

    def __repr__(self) -> str:
        schema = get_schema(type(self))
        fields = ", ".join(
            f"{f.name}={getattr(self, f.attribute)!r}" for f in schema.fields
        )
        return f"{type(self).__name__}({fields})"
