"""Sort directive: the single (property, direction) ordering of a collection."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import CollectionModel, PropertyModel
from .auth import AuthContext
from .errors import NotFoundError, TypeMismatchError
from .records import SortDirective
from .value_tables import tables_for
from .values import SortDirection, ValueType, from_code, to_code

logger = logging.getLogger(__name__)


class SortStore:
    """Reads and overwrites the sort columns of the collection row."""

    def __init__(self, db_client: DatabaseClient):
        self.db = db_client

    async def _get_collection(self, session: AsyncSession, collection_id: int) -> CollectionModel:
        collection = await session.get(CollectionModel, collection_id)
        if collection is None:
            raise NotFoundError("collection", collection_id)
        return collection

    async def get(self, ctx: AuthContext, collection_id: int) -> Optional[SortDirective]:
        """The collection's sort directive, or ``None`` when sorting is off."""
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            return await self.get_in_session(session, collection_id)

    async def get_in_session(self, session: AsyncSession, collection_id: int) -> Optional[SortDirective]:
        collection = await self._get_collection(session, collection_id)
        if collection.sort_by_prop_id is None or collection.sort_type_id is None:
            return None
        return SortDirective(
            collection_id=collection_id,
            prop_id=collection.sort_by_prop_id,
            direction=from_code(SortDirection, collection.sort_type_id),
        )

    async def set(
        self, ctx: AuthContext, collection_id: int, prop_id: int, direction: SortDirection
    ) -> SortDirective:
        """Overwrite the sort directive.

        Raises:
            NotFoundError: if the collection does not exist or the property is not one of its own
            TypeMismatchError: if the property's type cannot be sorted
        """
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            collection = await self._get_collection(session, collection_id)
            prop = await session.get(PropertyModel, prop_id)
            if prop is None or prop.collection_id != collection_id:
                raise NotFoundError("property", prop_id)
            value_type = from_code(ValueType, prop.type_id)
            if not tables_for(value_type).sortable:
                raise TypeMismatchError(f"{value_type.value} properties cannot be sorted")

            collection.sort_by_prop_id = prop_id
            collection.sort_type_id = to_code(direction)

        logger.info(f"Collection {collection_id} sorted by property {prop_id} {direction.value}")
        return SortDirective(collection_id=collection_id, prop_id=prop_id, direction=direction)

    async def clear(self, ctx: AuthContext, collection_id: int) -> None:
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            collection = await self._get_collection(session, collection_id)
            collection.sort_by_prop_id = None
            collection.sort_type_id = None

        logger.info(f"Cleared sort for collection {collection_id}")
