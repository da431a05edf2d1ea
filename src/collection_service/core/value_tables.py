"""Per-type table registry.

Maps each ``ValueType`` to the ORM classes that store its property values and
its filters, plus the filter kinds the type supports. The property-value
store, the filter store and the query builder are written once against this
registry instead of once per type.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, FrozenSet, Optional, Tuple, Type, Union

from ..infrastructure.database import models
from .errors import TypeMismatchError
from .values import FilterKind, Value, ValueType

_ALL_KINDS = frozenset(FilterKind)
_SCALAR_KINDS = frozenset({
    FilterKind.EQUALS,
    FilterKind.NOT_EQUALS,
    FilterKind.GREATER_THAN,
    FilterKind.LESS_THAN,
    FilterKind.IS_EMPTY,
})
_EQUALITY_KINDS = frozenset({FilterKind.EQUALS, FilterKind.NOT_EQUALS, FilterKind.IS_EMPTY})


@dataclass(frozen=True)
class ValueTables:
    """Storage layout of one value type."""
    value_type: ValueType
    propval: Type[models.Base]
    filter: Type[models.Base]
    range_filter: Optional[Type[models.Base]]
    filter_kinds: FrozenSet[FilterKind]
    sortable: bool = True

    def filter_table(self, ranged: bool) -> Type[models.Base]:
        if not ranged:
            return self.filter
        if self.range_filter is None:
            raise TypeMismatchError(f"{self.value_type.value} properties have no range filters")
        return self.range_filter

    def check_kind(self, kind: FilterKind) -> None:
        if kind not in self.filter_kinds:
            raise TypeMismatchError(
                f"{kind.display_name!r} is not supported for {self.value_type.value} properties"
            )


_REGISTRY: Dict[ValueType, ValueTables] = {
    ValueType.BOOL: ValueTables(
        ValueType.BOOL, models.PropValBoolModel, models.FilterBoolModel, None, _EQUALITY_KINDS
    ),
    ValueType.INT: ValueTables(
        ValueType.INT, models.PropValIntModel, models.FilterIntModel,
        models.FilterIntRangeModel, _ALL_KINDS,
    ),
    ValueType.FLOAT: ValueTables(
        ValueType.FLOAT, models.PropValFloatModel, models.FilterFloatModel,
        models.FilterFloatRangeModel, _ALL_KINDS,
    ),
    ValueType.STR: ValueTables(
        ValueType.STR, models.PropValStrModel, models.FilterStrModel, None, _SCALAR_KINDS
    ),
    ValueType.MULTISTR: ValueTables(
        ValueType.MULTISTR, models.PropValMultiStrModel, models.FilterMultiStrModel, None,
        _EQUALITY_KINDS, sortable=False,
    ),
    ValueType.DATE: ValueTables(
        ValueType.DATE, models.PropValDateModel, models.FilterDateModel,
        models.FilterDateRangeModel, _ALL_KINDS,
    ),
    ValueType.DATETIME: ValueTables(
        ValueType.DATETIME, models.PropValDatetimeModel, models.FilterDatetimeModel,
        models.FilterDatetimeRangeModel, _ALL_KINDS,
    ),
}


def tables_for(value_type: ValueType) -> ValueTables:
    return _REGISTRY[value_type]


def all_tables():
    return _REGISTRY.values()


def filter_operand_type(value_type: ValueType) -> ValueType:
    """Type of a filter operand; a multi-string filter compares one member."""
    return ValueType.STR if value_type is ValueType.MULTISTR else value_type


def starter_operand(value_type: ValueType, kind: FilterKind) -> Union[Value, Tuple[Value, Value]]:
    """Operand given to a filter created without one."""
    operand_type = filter_operand_type(value_type)
    if kind.is_range:
        if operand_type is ValueType.INT:
            return Value(operand_type, 0), Value(operand_type, 10)
        if operand_type is ValueType.FLOAT:
            return Value(operand_type, 0.0), Value(operand_type, 10.0)
        if operand_type is ValueType.DATE:
            today = date.today()
            return Value(operand_type, today - timedelta(days=10)), Value(operand_type, today)
        now = Value.coerce(_utc_now(), operand_type)
        return Value.coerce(now.payload - timedelta(days=10), operand_type), now
    if operand_type is ValueType.DATE:
        return Value(operand_type, date.today())
    if operand_type is ValueType.DATETIME:
        return Value.coerce(_utc_now(), operand_type)
    return Value.default(operand_type)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)
