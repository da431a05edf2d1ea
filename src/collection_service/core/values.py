"""Property value model.

A ``Value`` is a tagged union over the seven property types. Every value that
flows through the core, whether it is a page's property value or the operand
of a filter, is built by ``Value.coerce`` (or ``Value.default``) so that the
payload always matches the tag.

The integer codes persisted in ``property.type_id``, ``filter_*.type_id`` and
``collection.sort_type_id`` are all defined in ``_CODES`` below.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Annotated, Any, Iterable, Tuple, Type, TypeVar

from pydantic import Field, TypeAdapter, ValidationError

from .errors import TypeMismatchError

STR_MAX_LENGTH = 511


class ValueType(str, Enum):
    """Declared type of a property."""
    BOOL = "boolean"
    INT = "int"
    FLOAT = "float"
    STR = "string"
    MULTISTR = "multi-string"
    DATE = "date"
    DATETIME = "datetime"


class FilterKind(str, Enum):
    """Comparison applied by a filter."""
    EQUALS = "eq"
    NOT_EQUALS = "neq"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    INSIDE_RANGE = "in_range"
    NOT_INSIDE_RANGE = "not_in_range"
    IS_EMPTY = "is_empty"

    @property
    def is_range(self) -> bool:
        return self in (FilterKind.INSIDE_RANGE, FilterKind.NOT_INSIDE_RANGE)

    @property
    def display_name(self) -> str:
        return _FILTER_DISPLAY_NAMES[self]


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class ReorderDirection(str, Enum):
    UP = "up"
    DOWN = "down"


_FILTER_DISPLAY_NAMES = {
    FilterKind.EQUALS: "Exactly Equals",
    FilterKind.NOT_EQUALS: "Does not Equal",
    FilterKind.GREATER_THAN: "Is Greater Than",
    FilterKind.LESS_THAN: "Is Less Than",
    FilterKind.INSIDE_RANGE: "Is Inside Range",
    FilterKind.NOT_INSIDE_RANGE: "Is Not Inside Range",
    FilterKind.IS_EMPTY: "Is Empty",
}

_CODES = {
    ValueType: {
        ValueType.BOOL: 1,
        ValueType.INT: 2,
        ValueType.FLOAT: 3,
        ValueType.STR: 4,
        ValueType.MULTISTR: 5,
        ValueType.DATE: 6,
        ValueType.DATETIME: 7,
    },
    FilterKind: {
        FilterKind.EQUALS: 1,
        FilterKind.NOT_EQUALS: 2,
        FilterKind.GREATER_THAN: 3,
        FilterKind.LESS_THAN: 4,
        FilterKind.INSIDE_RANGE: 5,
        FilterKind.NOT_INSIDE_RANGE: 6,
        FilterKind.IS_EMPTY: 7,
    },
    SortDirection: {
        SortDirection.ASCENDING: 1,
        SortDirection.DESCENDING: 2,
    },
}

E = TypeVar("E", ValueType, FilterKind, SortDirection)


def to_code(member: Enum) -> int:
    """Integer code persisted for an enum member."""
    return _CODES[type(member)][member]


def from_code(enum_cls: Type[E], code: int) -> E:
    """Inverse of ``to_code``; raises ``ValueError`` for unknown codes."""
    for member, member_code in _CODES[enum_cls].items():
        if member_code == code:
            return member
    raise ValueError(f"{code} is not a valid {enum_cls.__name__} code")


def code_table(enum_cls: Type[Enum]) -> Iterable[Tuple[int, str]]:
    """(code, name) rows used to seed the lookup tables."""
    for member, code in _CODES[enum_cls].items():
        if enum_cls is FilterKind:
            yield code, member.display_name
        elif enum_cls is SortDirection:
            yield code, member.name.title()
        else:
            yield code, member.value


INT_MIN = -2**63
INT_MAX = 2**63 - 1

_ADAPTERS = {
    ValueType.BOOL: TypeAdapter(bool),
    ValueType.INT: TypeAdapter(Annotated[int, Field(ge=INT_MIN, le=INT_MAX)]),
    ValueType.FLOAT: TypeAdapter(Annotated[float, Field(allow_inf_nan=False)]),
    ValueType.STR: TypeAdapter(Annotated[str, Field(strict=True, max_length=STR_MAX_LENGTH)]),
    ValueType.DATE: TypeAdapter(date),
    ValueType.DATETIME: TypeAdapter(datetime),
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _validate(value_type: ValueType, raw: Any) -> Any:
    try:
        return _ADAPTERS[value_type].validate_python(raw)
    except ValidationError as e:
        reason = e.errors()[0]["msg"]
        raise TypeMismatchError(f"{raw!r} is not a valid {value_type.value}: {reason}") from e


def _coerce_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        raw = raw.strip()
    return _validate(ValueType.BOOL, raw)


def _coerce_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeMismatchError(f"{raw!r} is not a valid int")
    if isinstance(raw, str):
        raw = raw.strip()
    return _validate(ValueType.INT, raw)


def _coerce_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise TypeMismatchError(f"{raw!r} is not a valid float")
    if isinstance(raw, str):
        raw = raw.strip()
    return float(_validate(ValueType.FLOAT, raw))


def _coerce_str(raw: Any) -> str:
    return _validate(ValueType.STR, raw)


def _coerce_multistr(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str):
        items = [part.strip() for part in raw.split(",")]
    elif isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        raise TypeMismatchError(f"{raw!r} is not a list of strings")
    return tuple(_coerce_str(item) for item in items if item != "")


def _coerce_date(raw: Any) -> date:
    # a full timestamp keeps only its calendar day
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, str):
        raw = raw.strip()
    return _validate(ValueType.DATE, raw)


def _coerce_datetime(raw: Any) -> datetime:
    if isinstance(raw, str):
        raw = raw.strip()
    return _as_utc(_validate(ValueType.DATETIME, raw))


_COERCERS = {
    ValueType.BOOL: _coerce_bool,
    ValueType.INT: _coerce_int,
    ValueType.FLOAT: _coerce_float,
    ValueType.STR: _coerce_str,
    ValueType.MULTISTR: _coerce_multistr,
    ValueType.DATE: _coerce_date,
    ValueType.DATETIME: _coerce_datetime,
}

_DEFAULTS = {
    ValueType.BOOL: False,
    ValueType.INT: 0,
    ValueType.FLOAT: 0.0,
    ValueType.STR: "",
    ValueType.MULTISTR: (),
    ValueType.DATE: None,
    ValueType.DATETIME: None,
}


@total_ordering
@dataclass(frozen=True)
class Value:
    """A property value of exactly one type.

    ``payload`` is ``None`` only for the empty date/datetime default.
    Multi-string payloads are tuples so that values stay hashable.
    """
    type: ValueType
    payload: Any

    @classmethod
    def coerce(cls, raw: Any, value_type: ValueType) -> "Value":
        """Build a value of ``value_type`` from native or form input.

        Raises:
            TypeMismatchError: if ``raw`` cannot be read as ``value_type``
        """
        if isinstance(raw, Value):
            if raw.type is not value_type:
                raise TypeMismatchError(
                    f"expected a {value_type.value} value, got {raw.type.value}"
                )
            return raw
        if raw is None:
            raise TypeMismatchError(f"a {value_type.value} value is required")
        return cls(value_type, _COERCERS[value_type](raw))

    @classmethod
    def default(cls, value_type: ValueType) -> "Value":
        return cls(value_type, _DEFAULTS[value_type])

    @classmethod
    def from_db(cls, value_type: ValueType, raw: Any) -> "Value":
        """Wrap a column value read back from the store."""
        if value_type is ValueType.DATETIME and raw is not None:
            raw = _as_utc(raw)
        elif value_type is ValueType.MULTISTR:
            raw = tuple(raw)
        elif value_type is ValueType.FLOAT and raw is not None:
            raw = float(raw)
        elif value_type is ValueType.BOOL and raw is not None:
            raw = bool(raw)
        return cls(value_type, raw)

    @property
    def is_empty(self) -> bool:
        return self.payload is None

    def __lt__(self, other: "Value") -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if other.type is not self.type:
            raise TypeError(
                f"cannot order {self.type.value} against {other.type.value}"
            )
        if self.payload is None or other.payload is None:
            return self.payload is None and other.payload is not None
        return self.payload < other.payload

    def to_json(self) -> Any:
        """JSON-compatible payload."""
        if self.payload is None:
            return None
        if self.type in (ValueType.DATE, ValueType.DATETIME):
            return self.payload.isoformat()
        if self.type is ValueType.MULTISTR:
            return list(self.payload)
        return self.payload
