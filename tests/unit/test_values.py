"""Unit tests for the value model and shared code tables."""

from datetime import date, datetime, timedelta, timezone

import pytest

from collection_service.core.errors import TypeMismatchError
from collection_service.core.values import (
    FilterKind,
    SortDirection,
    Value,
    ValueType,
    code_table,
    from_code,
    to_code,
)


@pytest.mark.unit
class TestCoercion:
    """Form and native input coerced to typed values"""

    @pytest.mark.parametrize("raw,expected", [
        ("on", True), ("true", True), ("1", True), ("off", False), (" no ", False), (True, True),
    ])
    def test_bool_form_strings(self, raw, expected):
        assert Value.coerce(raw, ValueType.BOOL).payload is expected

    def test_int_rejects_bool_and_garbage(self):
        assert Value.coerce(" 42 ", ValueType.INT).payload == 42
        with pytest.raises(TypeMismatchError):
            Value.coerce(True, ValueType.INT)
        with pytest.raises(TypeMismatchError):
            Value.coerce("4.5", ValueType.INT)

    def test_bool_rejects_unknown_strings(self):
        with pytest.raises(TypeMismatchError):
            Value.coerce("maybe", ValueType.BOOL)

    def test_int_bounded_to_64_bits(self):
        assert Value.coerce(2**63 - 1, ValueType.INT).payload == 2**63 - 1
        assert Value.coerce(-2**63, ValueType.INT).payload == -2**63
        with pytest.raises(TypeMismatchError):
            Value.coerce(2**63, ValueType.INT)
        with pytest.raises(TypeMismatchError):
            Value.coerce(str(-2**63 - 1), ValueType.INT)

    @pytest.mark.parametrize("raw", ["nan", "inf", float("nan"), float("-inf")])
    def test_float_rejects_non_finite(self, raw):
        with pytest.raises(TypeMismatchError):
            Value.coerce(raw, ValueType.FLOAT)

    def test_float_accepts_ints(self):
        value = Value.coerce(3, ValueType.FLOAT)
        assert value.payload == 3.0
        assert isinstance(value.payload, float)

    def test_string_length_limit(self):
        assert Value.coerce("x" * 511, ValueType.STR).payload == "x" * 511
        with pytest.raises(TypeMismatchError):
            Value.coerce("x" * 512, ValueType.STR)

    def test_multistr_from_comma_string(self):
        value = Value.coerce("red, green,,blue", ValueType.MULTISTR)
        assert value.payload == ("red", "green", "blue")

    def test_date_from_iso_string(self):
        assert Value.coerce("2024-03-01", ValueType.DATE).payload == date(2024, 3, 1)

    def test_datetime_normalized_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        value = Value.coerce(datetime(2024, 3, 1, 12, 0, tzinfo=plus_two), ValueType.DATETIME)
        assert value.payload == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert value.payload.tzinfo == timezone.utc

    def test_datetime_z_suffix_and_naive(self):
        zulu = Value.coerce("2024-03-01T10:00:00Z", ValueType.DATETIME)
        naive = Value.coerce("2024-03-01T10:00:00", ValueType.DATETIME)
        assert zulu == naive

    def test_none_is_rejected(self):
        with pytest.raises(TypeMismatchError):
            Value.coerce(None, ValueType.STR)

    def test_value_of_other_type_is_rejected(self):
        with pytest.raises(TypeMismatchError):
            Value.coerce(Value(ValueType.INT, 1), ValueType.FLOAT)


@pytest.mark.unit
class TestValueSemantics:

    def test_defaults(self):
        assert Value.default(ValueType.BOOL).payload is False
        assert Value.default(ValueType.INT).payload == 0
        assert Value.default(ValueType.FLOAT).payload == 0.0
        assert Value.default(ValueType.STR).payload == ""
        assert Value.default(ValueType.MULTISTR).payload == ()
        assert Value.default(ValueType.DATE).is_empty
        assert Value.default(ValueType.DATETIME).is_empty

    def test_ordering_within_type(self):
        assert Value(ValueType.INT, 1) < Value(ValueType.INT, 2)
        assert Value.default(ValueType.DATE) < Value(ValueType.DATE, date(2000, 1, 1))

    def test_ordering_across_types_is_a_programming_error(self):
        with pytest.raises(TypeError):
            Value(ValueType.INT, 1) < Value(ValueType.FLOAT, 2.0)

    def test_equality(self):
        assert Value(ValueType.STR, "a") == Value.coerce("a", ValueType.STR)
        assert Value(ValueType.INT, 1) != Value(ValueType.FLOAT, 1.0)

    def test_json_form(self):
        assert Value(ValueType.DATE, date(2024, 3, 1)).to_json() == "2024-03-01"
        assert Value(ValueType.MULTISTR, ("a", "b")).to_json() == ["a", "b"]
        assert Value.default(ValueType.DATETIME).to_json() is None


@pytest.mark.unit
class TestCodeTables:

    def test_codes_are_stable(self):
        assert to_code(ValueType.BOOL) == 1
        assert to_code(ValueType.DATETIME) == 7
        assert to_code(FilterKind.EQUALS) == 1
        assert to_code(FilterKind.IS_EMPTY) == 7
        assert to_code(SortDirection.DESCENDING) == 2

    def test_round_trip_every_member(self):
        for enum_cls in (ValueType, FilterKind, SortDirection):
            for member in enum_cls:
                assert from_code(enum_cls, to_code(member)) is member

    def test_unknown_code(self):
        with pytest.raises(ValueError):
            from_code(ValueType, 99)

    def test_code_table_names(self):
        assert dict(code_table(SortDirection)) == {1: "Ascending", 2: "Descending"}
        assert dict(code_table(ValueType))[5] == "multi-string"
        assert dict(code_table(FilterKind))[7] == "Is Empty"
