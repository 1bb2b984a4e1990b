#!/usr/bin/env python3
"""ImmutableBase basic usage example.

Demonstrates how to declare record kinds and work with their instances:
- Transfer objects with nested records and collections
- Value objects and single value objects with validation
- Immutable updates with with_()
- Conversion to dictionaries and JSON
- Error reporting with field paths
"""

import enum
import logging
from typing import Annotated, Optional, Union

from immutable_base import (
    ArrayOf,
    DataTransferObject,
    Entity,
    SingleValueObject,
    ValueObject,
    configure_logging,
)
from immutable_base.exceptions import (
    HydrationException,
    ImmutableInstanceException,
    ValidationChainException,
)


# -----------------------------------------------------------------------------
# Record Kinds
# -----------------------------------------------------------------------------


class Priority(enum.Enum):
    LOW = 1
    HIGH = 2


class Email(SingleValueObject):
    """An email address; must contain an @."""

    _value: str
    validate_error_message = "an email address needs an @"

    def validate(self):
        return "@" in self.value


class Money(ValueObject):
    """An amount in a currency."""

    _amount: int
    _currency: str

    def validate(self):
        return self._amount >= 0 and len(self._currency) == 3

    @property
    def amount(self):
        return self._amount


class Customer(Entity):
    _id: int
    _email: Email
    _nickname: Optional[str] = None

    @property
    def email(self):
        return self._email


class Line(DataTransferObject):
    label: str
    price: Money


class Order(DataTransferObject):
    id: int
    customer: Customer
    lines: Annotated[list, ArrayOf("Line")]
    reference: Union[int, str]
    priority: Optional[Priority] = Priority.LOW


# -----------------------------------------------------------------------------
# Examples
# -----------------------------------------------------------------------------

ORDER = {
    "id": 1,
    "customer": {"id": 7, "email": {"value": "kip@example.com"}},
    "lines": [
        {"label": "pen", "price": {"amount": 150, "currency": "EUR"}},
        {"label": "ink", "price": {"amount": 400, "currency": "EUR"}},
    ],
    "priority": "HIGH",
    "reference": "A-17",
}


def hydration_example():
    """Build an order from a dictionary."""
    print("=== Hydration ===")

    order = Order.from_dict(ORDER)
    print(f"  Order: {order}")
    print(f"  Customer email: {order.customer.email}")
    print(f"  Lines: {[line.label for line in order.lines]}")
    print(f"  Priority: {order.priority}")


def update_example():
    """Derive new orders without touching the original."""
    print("\n=== Immutable Updates ===")

    order = Order.from_dict(ORDER)
    relabeled = order.with_({"customer": {"nickname": "kip"}})
    print(f"  Nickname added, email kept: {relabeled.customer.email}")

    cheaper = order.with_(lines=[{"label": "pen", "price": {"amount": 99, "currency": "EUR"}}])
    print(f"  Lines replaced: {[line.price.amount for line in cheaper.lines]}")
    print(f"  Original untouched: {[line.price.amount for line in order.lines]}")

    try:
        order.id = 2
    except ImmutableInstanceException as e:
        print(f"  Assignment rejected: {e}")


def serialization_example():
    """Convert records back to plain structures."""
    print("\n=== Serialization ===")

    order = Order.from_dict(ORDER)
    print(f"  As dict: {order.to_dict()}")
    text = order.to_json()
    print(f"  As JSON: {text}")
    print(f"  JSON round trip equal: {Order.from_json(text) == order}")


def validation_example():
    """Show the errors raised for invalid input."""
    print("\n=== Validation Errors ===")

    try:
        Email.from_value("not-an-email")
    except ValidationChainException as e:
        print(f"  {e}")

    broken = dict(ORDER, lines=[{"label": "pen", "price": {"amount": "free", "currency": "EUR"}}])
    try:
        Order.from_dict(broken)
    except HydrationException as e:
        print(f"  {type(e).__name__} at {e.path}: {e.reason}")


def main():
    configure_logging(level=logging.WARNING)

    hydration_example()
    update_example()
    serialization_example()
    validation_example()

    print("\n=== Examples Complete ===")


if __name__ == "__main__":
    main()
