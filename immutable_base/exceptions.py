"""ImmutableBase exceptions.

This module defines the exception hierarchy for immutable records.
All exceptions inherit from :class:`ImmutableBaseException`.

Schema-time errors (:class:`SchemaException` and its subclasses) signal a
broken record declaration and are never retried. Value-time errors
(:class:`HydrationException` and its subclasses) describe a single bad
input and carry the dotted path of the offending field.

Example:
    Handling hydration errors::

        from immutable_base.exceptions import (
            HydrationException,
            MissingRequiredFieldException,
        )

        try:
            order = Order.from_dict(payload)
        except MissingRequiredFieldException as e:
            print(f"Missing field: {e.path}")
        except HydrationException as e:
            print(f"Invalid input: {e}")
"""

from typing import List, Optional


class ImmutableBaseException(Exception):
    """Base class for all ImmutableBase exceptions.

    Args:
        message: The error message describing the exception.
        cause: The underlying exception that caused this error, if any.

    Attributes:
        cause: The underlying cause of this exception, if any.
    """

    def __init__(self, message: str = "", cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationException(ImmutableBaseException):
    """Raised when the hydration configuration is invalid.

    Example:
        - Unknown validation order
        - Negative JSON indent
        - Unreadable YAML configuration file
    """
    pass


class SerializationException(ImmutableBaseException):
    """Raised when a record cannot be encoded as JSON.

    This happens when a field holds a value the JSON encoder does not
    understand, such as an arbitrary object stored in an ``Any`` field.
    """
    pass


class ImmutableInstanceException(ImmutableBaseException, AttributeError):
    """Raised when code tries to assign or delete a field of a record.

    Records are immutable once constructed. Use ``with_()`` to derive a
    new instance instead.

    Example:
        >>> user.name = "other"
        Traceback (most recent call last):
        ...
        ImmutableInstanceException: User is immutable, cannot set 'name'
    """
    pass


class InvalidComparisonTargetException(ImmutableBaseException):
    """Raised when ``equals()`` receives something other than the same kind.

    Example:
        >>> Email.from_value("a@b.c").equals("a@b.c")
        Traceback (most recent call last):
        ...
        InvalidComparisonTargetException: equals() expects an instance of Email
    """
    pass


class SchemaException(ImmutableBaseException):
    """Base class for errors in a record declaration.

    Schema errors are detected once, when the record kind is first
    compiled, and are re-raised for every later use of that kind.
    """
    pass


class SchemaCategoryException(SchemaException):
    """Raised when a record kind does not declare exactly one category.

    Example:
        - Subclassing ``ImmutableBase`` without ``category=``
        - Mixing ``DataTransferObject`` and ``ValueObject`` bases
        - A single value object without exactly one ``value`` field
    """
    pass


class SchemaVisibilityException(SchemaException):
    """Raised when a field's visibility contradicts its kind's category.

    Transfer object fields must be public; value object, entity and
    single value object fields must be private (leading underscore).
    """
    pass


class ArrayOfSchemaException(SchemaException):
    """Raised when a collection-of marker names an unusable element kind.

    Example:
        - ``ArrayOf("")``
        - ``ArrayOf("NotAClass")``
        - ``ArrayOf(int)``
    """
    pass


class HydrationException(ImmutableBaseException):
    """Base class for errors caused by a bad input value.

    The exception keeps the record kind and the field path where the
    error happened. As the error unwinds through nested records, each
    level prefixes its own field, so the message of a deeply nested
    failure reads like ``Order.customer.email: expected str, got int``.

    Args:
        reason: What is wrong with the value.
        cause: The underlying exception, if any.

    Attributes:
        reason: The error description without the path.
    """

    def __init__(self, reason: str = "", cause: Exception = None):
        super().__init__(reason, cause)
        self.reason = reason
        self._kind: Optional[str] = None
        self._fields: List[str] = []

    @property
    def kind(self) -> Optional[str]:
        """Get the name of the outermost record kind reached so far."""
        return self._kind

    @property
    def fields(self) -> List[str]:
        """Get the field names from the outermost kind to the failing leaf."""
        return list(self._fields)

    @property
    def path(self) -> str:
        """Get the dotted path of the failing field."""
        parts = [self._kind] if self._kind else []
        for name in self._fields:
            if name.startswith("[") and parts:
                parts[-1] += name
            else:
                parts.append(name)
        return ".".join(parts)

    def add_field(self, kind: str, field_name: str) -> "HydrationException":
        """Prefix the path with the field of the enclosing record kind.

        The previous kind name is dropped because the new field already
        identifies it.

        Args:
            kind: Name of the enclosing record kind.
            field_name: Name of the field that held the failing value.

        Returns:
            This exception, for re-raising.
        """
        self._fields.insert(0, field_name)
        self._kind = kind
        self._refresh()
        return self

    def add_index(self, index: int) -> "HydrationException":
        """Prefix the path with a collection element index."""
        self._fields.insert(0, f"[{index}]")
        self._kind = None
        self._refresh()
        return self

    def _refresh(self) -> None:
        path = self.path
        self.args = (f"{path}: {self.reason}" if path else self.reason,)


class MissingRequiredFieldException(HydrationException):
    """Raised when a non-nullable field is absent or null."""
    pass


class TypeMismatchException(HydrationException):
    """Raised when a value does not match the field's declared type."""
    pass


class EnumMismatchException(HydrationException):
    """Raised when a value names no member of the target enumeration."""
    pass


class UnionMismatchException(HydrationException):
    """Raised when no alternative of a union type accepts the value."""
    pass


class UnionRequiresInstanceException(HydrationException):
    """Raised when a list or dict is given to a union without collections.

    Unions that do not list an array or object builtin only accept
    already constructed values; a loose structure is never hydrated into
    one of their record alternatives.
    """
    pass


class InvalidCollectionValueException(HydrationException):
    """Raised when a collection-of field receives a non-sequence value."""
    pass


class ArrayElementException(HydrationException):
    """Raised when a collection element is neither an instance nor a mapping."""
    pass


class InvalidJsonException(HydrationException):
    """Raised when JSON input cannot be decoded into a mapping."""
    pass


class ValidationChainException(HydrationException):
    """Raised when a ``validate()`` level of a value object returns False.

    Args:
        reason: The error description.
        level: Name of the class whose ``validate()`` failed.

    Attributes:
        level: Name of the class whose ``validate()`` failed.
    """

    def __init__(self, reason: str = "", level: str = "", cause: Exception = None):
        super().__init__(reason, cause)
        self.level = level
