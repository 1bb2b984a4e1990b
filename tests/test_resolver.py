"""Unit tests for immutable_base.hydration.resolver module."""

import enum
import pytest
from typing import Any, Optional, Union

from immutable_base import DataTransferObject, ValueObject
from immutable_base.exceptions import (
    ArrayElementException,
    EnumMismatchException,
    InvalidCollectionValueException,
    MissingRequiredFieldException,
    TypeMismatchException,
    UnionMismatchException,
    UnionRequiresInstanceException,
)
from immutable_base.hydration.descriptors import to_descriptor
from immutable_base.hydration.resolver import (
    resolve,
    resolve_collection,
    resolve_element,
)


class Number(enum.Enum):
    ONE = 1
    TWO = 2


class Suit(enum.Enum):
    HEARTS = "H"
    SPADES = "S"


class Plain(enum.Enum):
    A = "B"
    B = "A"


class Tag(DataTransferObject):
    label: str


class Label(DataTransferObject):
    label: str


class Amount(ValueObject):
    _value: int


class Clock:
    pass


class TestBuiltinResolution:
    """Tests for builtin kinds."""

    def test_exact_match(self):
        assert resolve(to_descriptor(str), "abc") == "abc"
        assert resolve(to_descriptor(int), 3) == 3
        assert resolve(to_descriptor(float), 1.5) == 1.5
        assert resolve(to_descriptor(bool), True) is True

    def test_no_coercion(self):
        with pytest.raises(TypeMismatchException) as exc_info:
            resolve(to_descriptor(int), "3")
        assert str(exc_info.value) == "expected int, got str"

    def test_bool_is_not_int(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(int), True)

    def test_int_is_not_float(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(float), 1)

    def test_none_when_nullable(self):
        assert resolve(to_descriptor(Optional[int]), None) is None

    def test_none_when_not_nullable(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(int), None)

    def test_any(self):
        value = object()
        assert resolve(to_descriptor(Any), value) is value


class TestRecordResolution:
    """Tests for record references."""

    def test_mapping_is_hydrated(self):
        tag = resolve(to_descriptor(Tag), {"label": "x"})
        assert isinstance(tag, Tag)
        assert tag.label == "x"

    def test_instance_is_kept(self):
        tag = Tag.from_dict({"label": "x"})
        assert resolve(to_descriptor(Tag), tag) is tag

    def test_other_value(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(Tag), "x")

    def test_other_record_kind(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(Tag), Label.from_dict({"label": "x"}))

    def test_nested_error_keeps_type(self):
        with pytest.raises(MissingRequiredFieldException) as exc_info:
            resolve(to_descriptor(Tag), {})
        assert exc_info.value.path == "Tag.label"


class TestEnumResolution:
    """Tests for enum references."""

    def test_member(self):
        assert resolve(to_descriptor(Number), Number.ONE) is Number.ONE

    def test_by_name(self):
        assert resolve(to_descriptor(Number), "ONE") is Number.ONE

    def test_by_value(self):
        assert resolve(to_descriptor(Number), 1) is Number.ONE
        assert resolve(to_descriptor(Suit), "S") is Suit.SPADES

    def test_name_wins_over_value(self):
        assert resolve(to_descriptor(Plain), "A") is Plain.A

    def test_unknown(self):
        with pytest.raises(EnumMismatchException) as exc_info:
            resolve(to_descriptor(Number), "THREE")
        assert "ONE, TWO" in str(exc_info.value)

    def test_unknown_value(self):
        with pytest.raises(EnumMismatchException):
            resolve(to_descriptor(Number), 3)

    def test_wrong_type(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(Number), [1])


class TestInstanceResolution:
    """Tests for foreign class references."""

    def test_instance(self):
        clock = Clock()
        assert resolve(to_descriptor(Clock), clock) is clock

    def test_other(self):
        with pytest.raises(TypeMismatchException):
            resolve(to_descriptor(Clock), "clock")


class TestUnionResolution:
    """Tests for unions."""

    def test_first_alternative_wins(self):
        tag = Tag.from_dict({"label": "x"})
        assert resolve(to_descriptor(Union[Tag, Any]), tag) is tag

    def test_first_match_in_declared_order(self):
        assert resolve(to_descriptor(Union[int, Any]), 3) == 3
        assert resolve(to_descriptor(Union[Number, str]), "ONE") is Number.ONE
        assert resolve(to_descriptor(Union[str, Number]), "ONE") == "ONE"

    def test_later_alternative(self):
        assert resolve(to_descriptor(Union[int, str]), "x") == "x"

    def test_no_alternative(self):
        with pytest.raises(UnionMismatchException) as exc_info:
            resolve(to_descriptor(Union[int, str]), 1.5)
        assert "int, str" in str(exc_info.value)
        assert "float" in str(exc_info.value)

    def test_collection_requires_instance(self):
        with pytest.raises(UnionRequiresInstanceException):
            resolve(to_descriptor(Union[Tag, Label]), {"label": "x"})
        with pytest.raises(UnionRequiresInstanceException):
            resolve(to_descriptor(Union[Tag, str]), ["x"])

    def test_collection_alternative(self):
        tag = resolve(to_descriptor(Union[Tag, dict]), {"label": "x"})
        assert isinstance(tag, Tag)
        assert resolve(to_descriptor(Union[Tag, dict]), {"other": 1}) == {"other": 1}

    def test_nullable_union(self):
        assert resolve(to_descriptor(Optional[Union[int, str]]), None) is None


class TestCollectionResolution:
    """Tests for collection-of resolution."""

    def test_mappings_are_hydrated(self):
        tags = resolve_collection(Tag, [{"label": "a"}, {"label": "b"}])
        assert isinstance(tags, tuple)
        assert [t.label for t in tags] == ["a", "b"]

    def test_instances_are_kept(self):
        tag = Tag.from_dict({"label": "a"})
        assert resolve_collection(Tag, (tag,))[0] is tag

    def test_json_text_elements(self):
        tags = resolve_collection(Tag, ['{"label": "a"}'])
        assert tags[0].label == "a"

    def test_malformed_json_element(self):
        with pytest.raises(ArrayElementException) as exc_info:
            resolve_collection(Tag, ["not json"])
        assert exc_info.value.cause is not None
        assert exc_info.value.path == "[0]"

    def test_invalid_element(self):
        with pytest.raises(ArrayElementException) as exc_info:
            resolve_collection(Tag, [{"label": "a"}, 5])
        assert exc_info.value.path == "[1]"

    def test_not_a_sequence(self):
        with pytest.raises(InvalidCollectionValueException):
            resolve_collection(Tag, {"label": "a"})

    def test_enum_elements(self):
        assert resolve_collection(Number, ["ONE", 2, Number.ONE]) == (
            Number.ONE,
            Number.TWO,
            Number.ONE,
        )

    def test_enum_element_mismatch(self):
        with pytest.raises(EnumMismatchException):
            resolve_element(Number, "THREE")

    def test_non_scalar_enum_element(self):
        with pytest.raises(ArrayElementException) as exc_info:
            resolve_collection(Number, ["ONE", {"a": 1}])
        assert exc_info.value.path == "[1]"
        assert isinstance(exc_info.value.cause, TypeMismatchException)

    def test_nested_element_error_path(self):
        with pytest.raises(TypeMismatchException) as exc_info:
            resolve_collection(Tag, [{"label": "a"}, {"label": 3}])
        assert exc_info.value.fields == ["[1]", "label"]

    def test_value_object_elements(self):
        amounts = resolve_collection(Amount, [{"value": 1}])
        assert amounts[0] == Amount.from_dict({"value": 1})
