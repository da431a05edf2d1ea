"""Property registry: the ordered, typed property set of each collection."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import CollectionModel, PropertyModel
from .auth import AuthContext
from .errors import NotFoundError, StoreError
from .records import Property
from .values import ReorderDirection, ValueType, from_code, to_code

logger = logging.getLogger(__name__)


def _to_property(row: PropertyModel) -> Property:
    return Property(
        id=row.id,
        collection_id=row.collection_id,
        name=row.name,
        type=from_code(ValueType, row.type_id),
        order=row.order,
    )


class PropertyRegistry:
    """Lists, creates and reorders the properties of a collection."""

    def __init__(self, db_client: DatabaseClient, prop_set_max: int = 5000):
        self.db = db_client
        self.prop_set_max = prop_set_max

    async def list(
        self,
        ctx: AuthContext,
        collection_id: int,
        order_in: Optional[Sequence[int]] = None,
        exact_ids: Optional[Sequence[int]] = None,
    ) -> List[Property]:
        """List properties ordered by (order, nulls last), then id.

        Args:
            ctx: Caller's authorization context
            collection_id: Collection to list
            order_in: Only return properties whose ``order`` is in this set
            exact_ids: Only return these properties (still scoped to the collection)

        Raises:
            StoreError: if the collection holds more than ``prop_set_max`` properties
        """
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            return await self.list_in_session(session, collection_id, order_in, exact_ids)

    async def list_in_session(
        self,
        session: AsyncSession,
        collection_id: int,
        order_in: Optional[Sequence[int]] = None,
        exact_ids: Optional[Sequence[int]] = None,
    ) -> List[Property]:
        query = select(PropertyModel).where(PropertyModel.collection_id == collection_id)
        if exact_ids is not None:
            query = query.where(PropertyModel.id.in_(list(exact_ids)))
        if order_in is not None:
            query = query.where(PropertyModel.order.in_(list(order_in)))
        result = await session.execute(query)
        props = [_to_property(row) for row in result.scalars().all()]

        if len(props) > self.prop_set_max:
            raise StoreError(f"Collection {collection_id} has too many properties")

        props.sort(key=Property.sort_key)
        return props

    async def get(self, ctx: AuthContext, prop_id: int) -> Property:
        async with self.db.session() as session:
            prop = await self.get_in_session(session, prop_id)
        ctx.authorize_collection(prop.collection_id)
        return prop

    async def get_in_session(self, session: AsyncSession, prop_id: int) -> Property:
        row = await session.get(PropertyModel, prop_id)
        if row is None:
            raise NotFoundError("property", prop_id)
        return _to_property(row)

    async def create(
        self,
        ctx: AuthContext,
        collection_id: int,
        name: str,
        value_type: ValueType,
        order: Optional[int] = None,
    ) -> Property:
        """Add a property to a collection; new properties start unordered."""
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            if await session.get(CollectionModel, collection_id) is None:
                raise NotFoundError("collection", collection_id)
            row = PropertyModel(
                collection_id=collection_id,
                name=name,
                type_id=to_code(value_type),
                order=order,
            )
            session.add(row)
            await session.flush()
            prop = _to_property(row)

        logger.info(f"Created {value_type.value} property {prop.id} in collection {collection_id}")
        return prop

    async def rename(self, ctx: AuthContext, prop_id: int, name: str) -> Property:
        async with self.db.session() as session:
            row = await session.get(PropertyModel, prop_id)
            if row is None:
                raise NotFoundError("property", prop_id)
            ctx.authorize_collection(row.collection_id)
            row.name = name
            return _to_property(row)

    async def delete(self, ctx: AuthContext, prop_id: int) -> None:
        """Delete a property with its values and filters.

        A sort directive on the property is cleared as well.
        """
        async with self.db.session() as session:
            row = await session.get(PropertyModel, prop_id)
            if row is None:
                raise NotFoundError("property", prop_id)
            ctx.authorize_collection(row.collection_id)
            await session.execute(
                update(CollectionModel)
                .where(CollectionModel.sort_by_prop_id == prop_id)
                .values(sort_by_prop_id=None, sort_type_id=None)
            )
            await session.execute(delete(PropertyModel).where(PropertyModel.id == prop_id))

        logger.info(f"Deleted property {prop_id}")

    async def reorder(
        self, ctx: AuthContext, prop_id: int, direction: ReorderDirection
    ) -> List[Property]:
        """Swap a property with its neighbour in the current order.

        Null or duplicate orders are first rewritten to ``1..n`` following the
        current observable order. Moving past either end is a no-op.

        Returns:
            The collection's properties in their new order
        """
        async with self.db.session() as session:
            target = await self.get_in_session(session, prop_id)
            ctx.authorize_collection(target.collection_id)

            result = await session.execute(
                select(PropertyModel).where(PropertyModel.collection_id == target.collection_id)
            )
            rows = sorted(result.scalars().all(), key=lambda r: _to_property(r).sort_key())

            orders = [row.order for row in rows]
            if None in orders or len(set(orders)) != len(orders):
                for position, row in enumerate(rows, start=1):
                    row.order = position

            index = next(i for i, row in enumerate(rows) if row.id == prop_id)
            neighbour = index - 1 if direction is ReorderDirection.UP else index + 1
            if 0 <= neighbour < len(rows):
                rows[index].order, rows[neighbour].order = rows[neighbour].order, rows[index].order
                logger.info(f"Moved property {prop_id} {direction.value}")

            await session.flush()
            return sorted((_to_property(row) for row in rows), key=Property.sort_key)
