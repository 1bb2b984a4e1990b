"""The four record categories.

Example:
    >>> class Tag(DataTransferObject):
    ...     label: str
    >>> class Basic(DataTransferObject):
    ...     name: str
    ...     age: int
    ...     tags: List[Tag]
    >>> basic = Basic.from_dict({"name": "Kip", "age": 30, "tags": [{"label": "x"}]})
    >>> basic.with_(age=31).to_dict()
    {'name': 'Kip', 'age': 31, 'tags': [{'label': 'x'}]}
"""

from typing import Any, Type, TypeVar

from immutable_base.base import ImmutableBase
from immutable_base.hydration.api import Category

S = TypeVar("S", bound="SingleValueObject")


class DataTransferObject(ImmutableBase):
    """A record with public fields and no validation chain."""

    __category__ = Category.DATA_TRANSFER_OBJECT


class ValueObject(ImmutableBase):
    """A record with private fields, compared and hashed by value.

    Subclasses may define ``validate()`` to constrain their values.
    """

    __category__ = Category.VALUE_OBJECT


class Entity(ImmutableBase):
    """A record with private fields and a validation chain."""

    __category__ = Category.ENTITY


class SingleValueObject(ValueObject):
    """A value object wrapping exactly one scalar, declared as ``_value``.

    Example:
        >>> class Email(SingleValueObject):
        ...     _value: str
        ...
        ...     def validate(self):
        ...         return "@" in self.value
        >>> Email.from_value("a@b.com").value
        'a@b.com'
    """

    __category__ = Category.SINGLE_VALUE

    @classmethod
    def from_value(cls: Type[S], value: Any) -> S:
        """Build a validated instance wrapping ``value``."""
        return cls.from_dict({"value": value})

    @property
    def value(self) -> Any:
        return self._value

    def __call__(self) -> Any:
        return self._value

    def __str__(self) -> str:
        return str(self._value)
