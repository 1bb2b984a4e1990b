"""The validation chain of value objects, entities and single values.

Each class of a kind's lineage may define its own ``validate()``
predicate and an optional ``validate_error_message``. After hydration,
the chain calls the predicate of every level that defines one, in the
order given by the kind's ``validation_order`` (or the configured
default), and stops at the first level returning False.

Example:
    >>> class Email(SingleValueObject):
    ...     _value: str
    ...     validate_error_message = "an email needs an @"
    ...
    ...     def validate(self):
    ...         return "@" in self.value
"""

from typing import Any, List, Optional

from immutable_base.config import get_config
from immutable_base.exceptions import SchemaException, ValidationChainException
from immutable_base.hydration.api import Category, ValidationOrder
from immutable_base.hydration.schema import Schema
from immutable_base.logging import VALIDATION, get_logger

_logger = get_logger(VALIDATION)


def validation_order_of(schema: Schema) -> ValidationOrder:
    """Get the lineage walk order of a kind."""
    order = getattr(schema.kind, "validation_order", None)
    if order is None:
        return get_config().validation_order
    if isinstance(order, ValidationOrder):
        return order
    try:
        return ValidationOrder(str(order).upper())
    except ValueError as e:
        raise SchemaException(
            f"{schema.type_name}.validation_order must be ROOT_FIRST or LEAF_FIRST, "
            f"got {order!r}",
            cause=e,
        )


def validation_levels(schema: Schema, order: Optional[ValidationOrder] = None) -> List[type]:
    """Get the lineage classes that define their own ``validate()``, in walk order."""
    order = order or validation_order_of(schema)
    lineage = schema.lineage
    if order is ValidationOrder.LEAF_FIRST:
        lineage = tuple(reversed(lineage))
    return [level for level in lineage if "validate" in level.__dict__]


def _failure_reason(instance: Any, schema: Schema, level: type) -> str:
    if schema.category is Category.SINGLE_VALUE:
        value = getattr(instance, schema.fields[0].attribute)
        subject = f"{schema.type_name} {value!r}"
    else:
        subject = schema.type_name
    reason = f"{subject} did not pass validation for {level.__name__}"
    message = level.__dict__.get("validate_error_message")
    if message:
        reason = f"{reason}. Reason: {message}"
    return reason


def run_validation_chain(instance: Any, schema: Schema) -> None:
    """Run the validation chain of a freshly hydrated instance.

    Transfer objects are not validated.

    Raises:
        ValidationChainException: If a level's ``validate()`` returns False.
    """
    if not schema.category.is_validated:
        return
    for level in validation_levels(schema):
        predicate = level.__dict__["validate"].__get__(instance, level)
        if not predicate():
            reason = _failure_reason(instance, schema, level)
            _logger.debug("Validation failed: %s", reason)
            raise ValidationChainException(reason, level=level.__name__)
