"""Hydration API interfaces.

This module defines the abstractions shared by every layer of the
hydration engine: the :class:`Record` interface implemented by all
immutable records, the :class:`Category` a record kind belongs to, and
the :class:`ValidationOrder` of the validation chain.

The engine modules only depend on this interface, never on the concrete
base classes, so they can build and inspect records without importing
:mod:`immutable_base.base`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar

R = TypeVar("R", bound="Record")


class Category(Enum):
    """The kind of record a class declares itself to be."""

    DATA_TRANSFER_OBJECT = "DataTransferObject"
    VALUE_OBJECT = "ValueObject"
    ENTITY = "Entity"
    SINGLE_VALUE = "SingleValue"

    @property
    def requires_public_fields(self) -> bool:
        """Transfer objects expose public fields, every other category hides them."""
        return self is Category.DATA_TRANSFER_OBJECT

    @property
    def is_validated(self) -> bool:
        """Whether instances run the validation chain after hydration."""
        return self is not Category.DATA_TRANSFER_OBJECT

    def refines(self, other: "Category") -> bool:
        """Check whether this category is a specialization of ``other``."""
        return self is other or (
            self is Category.SINGLE_VALUE and other is Category.VALUE_OBJECT
        )


class ValidationOrder(Enum):
    """Direction in which the validation chain walks a kind's lineage."""

    ROOT_FIRST = "ROOT_FIRST"
    LEAF_FIRST = "LEAF_FIRST"


class Record(ABC):
    """Interface for schema-backed immutable records.

    A record kind is a subclass that declares a :class:`Category` and a
    set of annotated fields. Instances are created by hydration and are
    never mutated; updates derive new instances.

    Attributes:
        __category__: The category declared by this class, or None when
            the category is inherited or missing.
    """

    __category__: ClassVar[Optional[Category]] = None

    @classmethod
    @abstractmethod
    def from_dict(cls: Type[R], data: Mapping[str, Any]) -> R:
        """Build a validated instance from a mapping.

        Args:
            data: Field values keyed by field name.

        Returns:
            A new instance of the record kind.
        """
        pass

    @abstractmethod
    def with_(self: R, patch: Any = None, /, **changes: Any) -> R:
        """Derive a new validated instance with some fields replaced.

        Args:
            patch: A mapping, JSON text, or another record.
            **changes: Additional field values.

        Returns:
            A new instance; this one is left untouched.
        """
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a plain dictionary.

        Returns:
            Field values keyed by field name, nested records converted.
        """
        pass


def is_record_class(obj: Any) -> bool:
    """Check if ``obj`` is a record kind (a Record subclass)."""
    return isinstance(obj, type) and issubclass(obj, Record)
