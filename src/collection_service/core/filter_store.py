"""Filter store.

Each value type has a single-operand filter table and, where ranges make
sense, a range table. A property carries at most one filter across both: the
unique constraint on ``prop_id`` covers each table, and ``create`` checks the
sibling table before inserting. Range semantics therefore live in one row
with an explicit InsideRange / NotInsideRange kind rather than in a pair of
independent ``>`` / ``<`` filters.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import func, not_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import PropertyModel
from .auth import AuthContext
from .errors import ConflictError, NotFoundError, TypeMismatchError
from .records import Filter
from .value_tables import all_tables, filter_operand_type, starter_operand, tables_for
from .values import FilterKind, Value, ValueType, from_code, to_code

logger = logging.getLogger(__name__)


def _to_filter(row, value_type: ValueType, ranged: bool) -> Filter:
    operand_type = filter_operand_type(value_type)
    record = Filter(
        id=row.id,
        prop_id=row.prop_id,
        value_type=value_type,
        kind=from_code(FilterKind, row.type_id),
    )
    if ranged:
        record.start = Value.from_db(operand_type, row.start)
        record.end = Value.from_db(operand_type, row.end)
    else:
        record.value = Value.from_db(operand_type, row.value)
    return record


def _operand_columns(
    value_type: ValueType,
    kind: FilterKind,
    value: Any = None,
    start: Any = None,
    end: Any = None,
) -> dict:
    """Column values for a filter's operand, coerced to the operand type.

    A missing operand falls back to the starter operand for the type.
    """
    operand_type = filter_operand_type(value_type)
    if kind.is_range:
        if start is None and end is None:
            start_value, end_value = starter_operand(value_type, kind)
        elif start is None or end is None:
            raise TypeMismatchError("a range filter needs both start and end")
        else:
            start_value = Value.coerce(start, operand_type)
            end_value = Value.coerce(end, operand_type)
        return {"start": start_value.payload, "end": end_value.payload}

    if value is None:
        operand = starter_operand(value_type, kind)
    else:
        operand = Value.coerce(value, operand_type)
    return {"value": operand.payload}


class FilterStore:
    """CRUD for the filters of a collection, for every value type."""

    def __init__(self, db_client: DatabaseClient):
        self.db = db_client

    @staticmethod
    def supported_kinds(value_type: ValueType) -> List[FilterKind]:
        kinds = tables_for(value_type).filter_kinds
        return sorted(kinds, key=to_code)

    async def _get_property(self, session: AsyncSession, prop_id: int) -> PropertyModel:
        prop = await session.get(PropertyModel, prop_id)
        if prop is None:
            raise NotFoundError("property", prop_id)
        return prop

    async def _get_row(self, session: AsyncSession, value_type: ValueType, filter_id: int, ranged: bool):
        row = await session.get(tables_for(value_type).filter_table(ranged), filter_id)
        if row is None:
            raise NotFoundError("filter", filter_id)
        return row

    async def list_for_collection(self, ctx: AuthContext, collection_id: int) -> List[Filter]:
        """All filters on the properties of a collection."""
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            return await self.list_in_session(session, collection_id)

    async def list_in_session(self, session: AsyncSession, collection_id: int) -> List[Filter]:
        filters: List[Filter] = []
        for tables in all_tables():
            for ranged, table in ((False, tables.filter), (True, tables.range_filter)):
                if table is None:
                    continue
                result = await session.execute(
                    select(table)
                    .join(PropertyModel, PropertyModel.id == table.prop_id)
                    .where(PropertyModel.collection_id == collection_id)
                )
                filters.extend(
                    _to_filter(row, tables.value_type, ranged) for row in result.scalars().all()
                )
        filters.sort(key=lambda f: (f.prop_id, f.id))
        return filters

    async def get(
        self, ctx: AuthContext, value_type: ValueType, filter_id: int, ranged: bool = False
    ) -> Filter:
        async with self.db.session() as session:
            row = await self._get_row(session, value_type, filter_id, ranged)
            prop = await self._get_property(session, row.prop_id)
            ctx.authorize_collection(prop.collection_id)
            return _to_filter(row, value_type, ranged)

    async def _insert(
        self, session: AsyncSession, value_type: ValueType, prop_id: int, kind: FilterKind, columns: dict
    ) -> Filter:
        table = tables_for(value_type).filter_table(kind.is_range)
        row = table(prop_id=prop_id, type_id=to_code(kind), **columns)
        session.add(row)
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError(f"property {prop_id} already has a filter") from e
        return _to_filter(row, value_type, kind.is_range)

    async def create(
        self,
        ctx: AuthContext,
        prop_id: int,
        kind: FilterKind,
        value: Any = None,
        start: Any = None,
        end: Any = None,
        collection_id: Optional[int] = None,
    ) -> Filter:
        """Create the filter of a property.

        Args:
            collection_id: When given, the property must belong to this collection

        Raises:
            NotFoundError: if the property does not exist
            TypeMismatchError: if the kind or operand does not fit the property type
            ConflictError: if the property already has a filter
        """
        async with self.db.session() as session:
            prop = await self._get_property(session, prop_id)
            if collection_id is not None and prop.collection_id != collection_id:
                raise NotFoundError("property", prop_id)
            ctx.authorize_collection(prop.collection_id)
            value_type = from_code(ValueType, prop.type_id)
            tables = tables_for(value_type)
            tables.check_kind(kind)

            for table in (tables.filter, tables.range_filter):
                if table is None:
                    continue
                existing = await session.scalar(select(table.id).where(table.prop_id == prop_id))
                if existing is not None:
                    raise ConflictError(f"property {prop_id} already has a filter")

            columns = _operand_columns(value_type, kind, value, start, end)
            record = await self._insert(session, value_type, prop_id, kind, columns)

        logger.info(f"Created {kind.value} filter {record.id} on property {prop_id}")
        return record

    async def update(
        self,
        ctx: AuthContext,
        value_type: ValueType,
        filter_id: int,
        ranged: bool,
        kind: FilterKind,
        value: Any = None,
        start: Any = None,
        end: Any = None,
    ) -> Filter:
        """Change the kind and/or operand of a filter.

        Switching between a single-operand kind and a range kind moves the
        filter to the other table, so the returned filter has a new id.
        Omitted operands keep their stored value when the table does not change.
        """
        async with self.db.session() as session:
            row = await self._get_row(session, value_type, filter_id, ranged)
            prop = await self._get_property(session, row.prop_id)
            ctx.authorize_collection(prop.collection_id)
            tables_for(value_type).check_kind(kind)

            if kind.is_range == ranged:
                operand_given = (start is not None or end is not None) if ranged else value is not None
                if operand_given:
                    for name, column_value in _operand_columns(value_type, kind, value, start, end).items():
                        setattr(row, name, column_value)
                row.type_id = to_code(kind)
                await session.flush()
                record = _to_filter(row, value_type, ranged)
            else:
                prop_id = row.prop_id
                columns = _operand_columns(value_type, kind, value, start, end)
                await session.delete(row)
                await session.flush()
                record = await self._insert(session, value_type, prop_id, kind, columns)

        logger.info(f"Updated filter {filter_id} -> {record.id} ({kind.value})")
        return record

    async def delete(
        self, ctx: AuthContext, value_type: ValueType, filter_id: int, ranged: bool = False
    ) -> None:
        async with self.db.session() as session:
            row = await self._get_row(session, value_type, filter_id, ranged)
            prop = await self._get_property(session, row.prop_id)
            ctx.authorize_collection(prop.collection_id)
            await session.delete(row)

        logger.info(f"Deleted filter {filter_id}")

    async def has_capacity(self, ctx: AuthContext, collection_id: int) -> bool:
        """Whether some property of the collection still has no filter."""
        ctx.authorize_collection(collection_id)
        conditions = [PropertyModel.collection_id == collection_id]
        for tables in all_tables():
            for table in (tables.filter, tables.range_filter):
                if table is not None:
                    conditions.append(
                        not_(select(table.id).where(table.prop_id == PropertyModel.id).exists())
                    )
        async with self.db.session() as session:
            count = await session.scalar(
                select(func.count(PropertyModel.id)).where(*conditions)
            )
        return bool(count)

