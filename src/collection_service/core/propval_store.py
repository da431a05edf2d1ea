"""Property-value store.

Values are kept in one table per type, keyed by (page_id, prop_id). A page has
no value rows until one is written; reads of a missing row yield the type's
default, which is only persisted when asked to (``materialize=True``) or when
a value is written.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import (
    PageModel,
    PropertyModel,
    PropValMultiStrItemModel,
    PropValMultiStrModel,
)
from .auth import AuthContext
from .errors import NotFoundError
from .value_tables import tables_for
from .values import Value, ValueType, from_code

logger = logging.getLogger(__name__)

PropValKey = Tuple[int, int]


async def fetch_multistr_members(
    session: AsyncSession, page_ids: Iterable[int], prop_ids: Optional[Iterable[int]] = None
) -> Dict[PropValKey, Tuple[str, ...]]:
    """Members of every materialized multi-string value of the given pages.

    One query regardless of how many pages or properties are involved.
    """
    page_ids = list(page_ids)
    if not page_ids:
        return {}
    query = (
        select(
            PropValMultiStrModel.page_id,
            PropValMultiStrModel.prop_id,
            PropValMultiStrItemModel.value,
        )
        .outerjoin(
            PropValMultiStrItemModel,
            PropValMultiStrItemModel.propval_multistr_id == PropValMultiStrModel.id,
        )
        .where(PropValMultiStrModel.page_id.in_(page_ids))
        .order_by(PropValMultiStrItemModel.position, PropValMultiStrItemModel.id)
    )
    if prop_ids is not None:
        query = query.where(PropValMultiStrModel.prop_id.in_(list(prop_ids)))

    members: Dict[PropValKey, List[str]] = defaultdict(list)
    for page_id, prop_id, value in (await session.execute(query)).all():
        bucket = members[(page_id, prop_id)]
        if value is not None:
            bucket.append(value)
    return {key: tuple(values) for key, values in members.items()}


class PropValStore:
    """Reads and writes property values through the per-type table registry."""

    def __init__(self, db_client: DatabaseClient):
        self.db = db_client

    async def _load_pair(
        self, session: AsyncSession, page_id: int, prop_id: int
    ) -> Tuple[PageModel, PropertyModel]:
        page = await session.get(PageModel, page_id)
        if page is None:
            raise NotFoundError("page", page_id)
        prop = await session.get(PropertyModel, prop_id)
        if prop is None or prop.collection_id != page.collection_id:
            raise NotFoundError("property", prop_id)
        return page, prop

    async def _read(
        self, session: AsyncSession, page_id: int, prop_id: int, value_type: ValueType
    ) -> Optional[Value]:
        if value_type is ValueType.MULTISTR:
            members = await fetch_multistr_members(session, [page_id], [prop_id])
            if (page_id, prop_id) not in members:
                return None
            return Value.from_db(value_type, members[(page_id, prop_id)])

        table = tables_for(value_type).propval
        raw = await session.scalar(
            select(table.value).where(table.page_id == page_id, table.prop_id == prop_id)
        )
        return None if raw is None else Value.from_db(value_type, raw)

    async def _write(self, session: AsyncSession, page_id: int, prop_id: int, value: Value):
        if value.type is ValueType.MULTISTR:
            await self.db.insert_ignore(
                session,
                PropValMultiStrModel,
                [{"page_id": page_id, "prop_id": prop_id}],
                index_elements=["page_id", "prop_id"],
            )
            parent_id = await session.scalar(
                select(PropValMultiStrModel.id).where(
                    PropValMultiStrModel.page_id == page_id,
                    PropValMultiStrModel.prop_id == prop_id,
                )
            )
            await session.execute(
                delete(PropValMultiStrItemModel).where(
                    PropValMultiStrItemModel.propval_multistr_id == parent_id
                )
            )
            for position, member in enumerate(value.payload):
                session.add(PropValMultiStrItemModel(
                    propval_multistr_id=parent_id, position=position, value=member
                ))
            await session.flush()
            return

        await self.db.upsert(
            session,
            tables_for(value.type).propval,
            {"page_id": page_id, "prop_id": prop_id, "value": value.payload},
            index_elements=["page_id", "prop_id"],
        )

    async def get(
        self,
        ctx: AuthContext,
        page_id: int,
        prop_id: int,
        materialize: bool = False,
    ) -> Value:
        """Value of one property on one page.

        A page that never received a value gets the type default. Empty
        date/datetime defaults are never persisted.
        """
        async with self.db.session() as session:
            page, prop = await self._load_pair(session, page_id, prop_id)
            ctx.authorize_collection(page.collection_id)
            value_type = from_code(ValueType, prop.type_id)

            value = await self._read(session, page_id, prop_id, value_type)
            if value is not None:
                return value

            value = Value.default(value_type)
            if materialize and not value.is_empty:
                await self._write(session, page_id, prop_id, value)
                logger.info(f"Materialized default for page {page_id} property {prop_id}")
            return value

    async def upsert(self, ctx: AuthContext, page_id: int, prop_id: int, raw) -> Value:
        """Insert or overwrite the value of one property on one page.

        Raises:
            NotFoundError: if the page or property does not exist
            TypeMismatchError: if ``raw`` does not fit the property type
        """
        async with self.db.session() as session:
            page, prop = await self._load_pair(session, page_id, prop_id)
            ctx.authorize_collection(page.collection_id)
            value = Value.coerce(raw, from_code(ValueType, prop.type_id))
            await self._write(session, page_id, prop_id, value)

        logger.info(f"Saved {value.type.value} value for page {page_id} property {prop_id}")
        return value

    async def delete(self, ctx: AuthContext, page_id: int, prop_id: int) -> bool:
        """Drop a materialized value, returning the page to the default."""
        async with self.db.session() as session:
            page, prop = await self._load_pair(session, page_id, prop_id)
            ctx.authorize_collection(page.collection_id)
            table = tables_for(from_code(ValueType, prop.type_id)).propval
            result = await session.execute(
                delete(table).where(table.page_id == page_id, table.prop_id == prop_id)
            )
            return result.rowcount > 0
