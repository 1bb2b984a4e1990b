"""Unit tests for immutable_base.hydration.schema module."""

import enum
import threading
import pytest
from typing import Annotated, ClassVar, List, Optional

from immutable_base import (
    DataTransferObject,
    Entity,
    ImmutableBase,
    SingleValueObject,
    ValueObject,
)
from immutable_base.exceptions import (
    ArrayOfSchemaException,
    SchemaCategoryException,
    SchemaException,
    SchemaVisibilityException,
)
from immutable_base.hydration.api import Category
from immutable_base.hydration.descriptors import ArrayOf, BuiltinKind, BuiltinType
from immutable_base.hydration.schema import (
    SchemaRegistry,
    compile_schema,
    get_registry,
    get_schema,
    reset_registry,
)


class Status(enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class Tag(DataTransferObject):
    label: str


class Article(DataTransferObject):
    title: str
    subtitle: Optional[str] = None
    tags: Annotated[list, ArrayOf(Tag)]
    statuses: List[Status]
    counter: ClassVar[int] = 0


class Node(DataTransferObject):
    name: str
    children: Annotated[list, ArrayOf("Node")]


class Money(ValueObject):
    _amount: int
    _currency: str


class Price(Money):
    _amount: float
    _net: bool


class Account(Entity):
    _id: str


class Email(SingleValueObject):
    _value: str


class Point(ImmutableBase, category=Category.VALUE_OBJECT):
    _x: int


class Named(ImmutableBase, category="DataTransferObject"):
    name: str


class NoCategory(ImmutableBase):
    name: str


class Mixed(DataTransferObject, ValueObject):
    name: str


class PrivateTransfer(DataTransferObject):
    _secret: str


class PublicValue(ValueObject):
    amount: int


class EmptyArrayOf(DataTransferObject):
    items: Annotated[list, ArrayOf("")]


class UnknownArrayOf(DataTransferObject):
    items: Annotated[list, ArrayOf("DoesNotExist")]


class ScalarArrayOf(DataTransferObject):
    items: Annotated[list, ArrayOf(int)]


class ArrayOfOnString(DataTransferObject):
    items: Annotated[str, ArrayOf(Tag)]


class TwoValues(SingleValueObject):
    _value: str
    _other: str


class ListValue(SingleValueObject):
    _value: list


class Broken(DataTransferObject):
    item: "Missing"  # noqa: F821


class TestCompileSchema:
    """Tests for schema compilation."""

    def test_fields_in_declaration_order(self):
        schema = get_schema(Article)
        assert schema.field_names() == ["title", "subtitle", "tags", "statuses"]
        assert schema.category is Category.DATA_TRANSFER_OBJECT
        assert schema.type_name == "Article"

    def test_class_var_is_not_a_field(self):
        assert not get_schema(Article).has_field("counter")

    def test_default(self):
        field = get_schema(Article).get_field("subtitle")
        assert field.nullable
        assert field.has_default
        assert field.default is None

    def test_required_field(self):
        field = get_schema(Article).get_field("title")
        assert not field.nullable
        assert not field.has_default
        assert field.descriptor == BuiltinType(BuiltinKind.STRING)

    def test_collection_fields(self):
        schema = get_schema(Article)
        assert schema.get_field("tags").array_of is Tag
        assert schema.get_field("statuses").array_of is Status
        assert schema.get_field("tags").is_collection
        assert not schema.get_field("title").is_collection

    def test_self_reference_by_name(self):
        assert get_schema(Node).get_field("children").array_of is Node

    def test_private_fields_use_logical_names(self):
        schema = get_schema(Money)
        assert schema.field_names() == ["amount", "currency"]
        assert schema.get_field("amount").attribute == "_amount"

    def test_inherited_fields_root_first(self):
        schema = get_schema(Price)
        assert schema.field_names() == ["amount", "currency", "net"]
        assert [f.index for f in schema.fields] == [0, 1, 2]

    def test_redeclared_field_keeps_position(self):
        field = get_schema(Price).get_field("amount")
        assert field.index == 0
        assert field.declaring_class is Price
        assert field.descriptor == BuiltinType(BuiltinKind.FLOAT)

    def test_lineage(self):
        lineage = get_schema(Price).lineage
        assert lineage[-2:] == (Money, Price)
        assert lineage[0] is ImmutableBase

    def test_categories(self):
        assert get_schema(Account).category is Category.ENTITY
        assert get_schema(Email).category is Category.SINGLE_VALUE
        assert get_schema(Point).category is Category.VALUE_OBJECT
        assert get_schema(Named).category is Category.DATA_TRANSFER_OBJECT

    def test_single_value_field(self):
        schema = get_schema(Email)
        assert schema.field_names() == ["value"]
        assert schema.get_field("value").attribute == "_value"

    def test_not_a_record(self):
        with pytest.raises(SchemaCategoryException):
            compile_schema(dict)


class TestSchemaErrors:
    """Tests for invalid declarations."""

    def test_missing_category(self):
        with pytest.raises(SchemaCategoryException):
            get_schema(NoCategory)

    def test_conflicting_categories(self):
        with pytest.raises(SchemaCategoryException) as exc_info:
            get_schema(Mixed)
        assert "conflicting" in str(exc_info.value)

    def test_private_transfer_field(self):
        with pytest.raises(SchemaVisibilityException) as exc_info:
            get_schema(PrivateTransfer)
        assert "_secret" in str(exc_info.value)

    def test_public_value_field(self):
        with pytest.raises(SchemaVisibilityException):
            get_schema(PublicValue)

    def test_empty_array_of(self):
        with pytest.raises(ArrayOfSchemaException) as exc_info:
            get_schema(EmptyArrayOf)
        assert "cannot be empty" in str(exc_info.value)

    def test_unknown_array_of(self):
        with pytest.raises(ArrayOfSchemaException) as exc_info:
            get_schema(UnknownArrayOf)
        assert "DoesNotExist" in str(exc_info.value)

    def test_scalar_array_of(self):
        with pytest.raises(ArrayOfSchemaException):
            get_schema(ScalarArrayOf)

    def test_array_of_on_non_list(self):
        with pytest.raises(ArrayOfSchemaException):
            get_schema(ArrayOfOnString)

    def test_single_value_with_two_fields(self):
        with pytest.raises(SchemaCategoryException):
            get_schema(TwoValues)

    def test_single_value_not_scalar(self):
        with pytest.raises(SchemaCategoryException):
            get_schema(ListValue)

    def test_unresolvable_annotation(self):
        with pytest.raises(SchemaException) as exc_info:
            get_schema(Broken)
        assert isinstance(exc_info.value.cause, NameError)

    def test_failure_is_cached(self):
        with pytest.raises(SchemaCategoryException) as first:
            get_schema(NoCategory)
        with pytest.raises(SchemaCategoryException) as second:
            get_schema(NoCategory)
        assert first.value is second.value

    def test_constructing_invalid_kind_raises(self):
        with pytest.raises(SchemaVisibilityException):
            PrivateTransfer({"_secret": "x"})


class TestSchemaRegistry:
    """Tests for SchemaRegistry."""

    def test_compile_is_cached(self):
        registry = SchemaRegistry()
        assert registry.compile(Tag) is registry.compile(Tag)
        assert registry.is_compiled(Tag)

    def test_reset(self):
        registry = SchemaRegistry()
        first = registry.compile(Tag)
        registry.reset()
        assert not registry.is_compiled(Tag)
        assert registry.compile(Tag) is not first

    def test_reset_forgets_failures(self):
        registry = SchemaRegistry()
        with pytest.raises(SchemaCategoryException) as first:
            registry.compile(NoCategory)
        registry.reset()
        with pytest.raises(SchemaCategoryException) as second:
            registry.compile(NoCategory)
        assert first.value is not second.value

    def test_all_schemas(self):
        registry = SchemaRegistry()
        registry.compile(Tag)
        registry.compile(Money)
        assert {s.kind for s in registry.all_schemas()} == {Tag, Money}

    def test_process_registry(self):
        schema = get_schema(Tag)
        assert get_registry().is_compiled(Tag)
        reset_registry()
        assert not get_registry().is_compiled(Tag)
        assert get_schema(Tag) == schema

    def test_concurrent_first_use(self):
        registry = SchemaRegistry()
        results = []
        barrier = threading.Barrier(8)

        def compile_article():
            barrier.wait()
            results.append(registry.compile(Article))

        threads = [threading.Thread(target=compile_article) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(schema is results[0] for schema in results)
