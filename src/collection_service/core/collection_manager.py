"""Collection management business logic."""

import logging
from typing import List

from sqlalchemy import delete, select

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import CollectionModel
from .auth import AuthContext
from .errors import NotFoundError
from .records import Collection

logger = logging.getLogger(__name__)


class CollectionManager:
    """Business logic for collection CRUD operations."""

    def __init__(self, db_client: DatabaseClient):
        self.db = db_client

    async def create(self, ctx: AuthContext, name: str) -> Collection:
        async with self.db.session() as session:
            row = CollectionModel(name=name)
            session.add(row)
            await session.flush()
            collection = Collection(id=row.id, name=row.name)

        logger.info(f"Created collection {collection.id} for user {ctx.user_id}")
        return collection

    async def get(self, ctx: AuthContext, collection_id: int) -> Collection:
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            row = await session.get(CollectionModel, collection_id)
            if row is None:
                raise NotFoundError("collection", collection_id)
            return Collection(id=row.id, name=row.name)

    async def list(self, ctx: AuthContext) -> List[Collection]:
        async with self.db.session() as session:
            result = await session.execute(select(CollectionModel).order_by(CollectionModel.id))
            return [Collection(id=row.id, name=row.name) for row in result.scalars().all()]

    async def rename(self, ctx: AuthContext, collection_id: int, name: str) -> Collection:
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            row = await session.get(CollectionModel, collection_id)
            if row is None:
                raise NotFoundError("collection", collection_id)
            row.name = name
            collection = Collection(id=row.id, name=name)

        logger.info(f"Renamed collection {collection_id}")
        return collection

    async def delete(self, ctx: AuthContext, collection_id: int) -> None:
        """Delete a collection with all of its pages, properties and filters."""
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            row = await session.get(CollectionModel, collection_id)
            if row is None:
                raise NotFoundError("collection", collection_id)
            # The sort column points back at a property of this collection
            row.sort_by_prop_id = None
            row.sort_type_id = None
            await session.flush()
            await session.execute(delete(CollectionModel).where(CollectionModel.id == collection_id))

        logger.info(f"Deleted collection {collection_id}")
