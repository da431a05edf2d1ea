"""Page listing and page management business logic."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.database.client import DatabaseClient
from ..infrastructure.database.models import CollectionModel, PageContentModel, PageModel
from .auth import AuthContext
from .errors import NotFoundError
from .filter_store import FilterStore
from .property_registry import PropertyRegistry
from .propval_store import fetch_multistr_members
from .query_builder import PageQueryBuilder
from .records import Page, Property
from .sort_store import SortStore
from .values import Value, ValueType

logger = logging.getLogger(__name__)


class PageManager:
    """Composes page listings and handles page CRUD."""

    def __init__(
        self,
        db_client: DatabaseClient,
        registry: PropertyRegistry,
        filter_store: FilterStore,
        sort_store: SortStore,
        page_size: int = 100,
    ):
        """Initialize page manager.

        Args:
            db_client: Database client
            registry: Property registry
            filter_store: Filter store
            sort_store: Sort directive store
            page_size: Pages per listing page when paginating
        """
        self.db = db_client
        self.registry = registry
        self.filters = filter_store
        self.sorts = sort_store
        self.page_size = page_size

    async def list_pages(
        self, ctx: AuthContext, collection_id: int, page_number: Optional[int] = None
    ) -> List[Page]:
        """List the pages of a collection with their full property maps.

        Active filters are AND-ed and the sort directive applied. Filters or
        a sort whose property has disappeared from the collection are dropped
        rather than failing the listing.

        Args:
            ctx: Caller's authorization context
            collection_id: Collection to list
            page_number: Zero-based page of ``page_size`` results; all pages when omitted

        Returns:
            Pages in listing order, each with a value for every property

        Raises:
            NotFoundError: if the collection does not exist
            StoreError: if the database fails
        """
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            if await session.get(CollectionModel, collection_id) is None:
                raise NotFoundError("collection", collection_id)

            # The join structure depends on these, so they are read first
            props = await self.registry.list_in_session(session, collection_id)
            filters = await self.filters.list_in_session(session, collection_id)
            sort = await self.sorts.get_in_session(session, collection_id)

            builder = PageQueryBuilder(collection_id)
            for prop in props:
                builder.join_property(prop)
            for record in filters:
                if not builder.add_filter(record):
                    logger.warning(
                        f"Skipping stale filter {record.id} on property {record.prop_id} "
                        f"in collection {collection_id}"
                    )
            if not builder.sort_by(sort):
                logger.warning(
                    f"Ignoring sort on property {sort.prop_id} in collection {collection_id}"
                )
            if page_number is not None:
                builder.paginate(self.page_size, page_number * self.page_size)

            pages = await self._execute(session, builder, props)

        logger.info(
            f"Listed {len(pages)} pages of collection {collection_id} "
            f"({len(props)} properties, {len(filters)} filters)"
        )
        return pages

    async def _execute(
        self, session: AsyncSession, builder: PageQueryBuilder, props: List[Property]
    ) -> List[Page]:
        rows = (await session.execute(builder.build())).all()

        multistr_ids = [p.id for p in props if p.type is ValueType.MULTISTR]
        members = {}
        if multistr_ids and rows:
            members = await fetch_multistr_members(
                session, [row.id for row in rows], multistr_ids
            )

        pages = []
        for row in rows:
            mapping = row._mapping
            properties = {}
            for joined in builder.joined:
                prop = joined.prop
                raw = mapping[joined.label]
                if raw is None:
                    properties[prop.id] = Value.default(prop.type)
                elif prop.type is ValueType.MULTISTR:
                    properties[prop.id] = Value.from_db(prop.type, members.get((row.id, prop.id), ()))
                else:
                    properties[prop.id] = Value.from_db(prop.type, raw)
            pages.append(Page(
                id=row.id,
                collection_id=row.collection_id,
                title=row.title,
                properties=properties,
            ))
        return pages

    async def _get_page_row(self, session: AsyncSession, page_id: int) -> PageModel:
        row = await session.get(PageModel, page_id)
        if row is None:
            raise NotFoundError("page", page_id)
        return row

    async def create_page(self, ctx: AuthContext, collection_id: int, title: str) -> Page:
        """Create a page; it has no property value rows yet."""
        ctx.authorize_collection(collection_id)
        async with self.db.session() as session:
            if await session.get(CollectionModel, collection_id) is None:
                raise NotFoundError("collection", collection_id)
            row = PageModel(collection_id=collection_id, title=title)
            session.add(row)
            await session.flush()
            page = Page(id=row.id, collection_id=collection_id, title=title)

        logger.info(f"Created page {page.id} in collection {collection_id}")
        return page

    async def get_page(self, ctx: AuthContext, page_id: int) -> Page:
        """One page with its property map and content."""
        async with self.db.session() as session:
            row = await self._get_page_row(session, page_id)
            ctx.authorize_collection(row.collection_id)
            props = await self.registry.list_in_session(session, row.collection_id)

            builder = PageQueryBuilder(row.collection_id)
            for prop in props:
                builder.join_property(prop)
            builder.restrict_to_page(page_id)
            pages = await self._execute(session, builder, props)

            content = await session.get(PageContentModel, page_id)

        page = pages[0]
        page.content = content.content if content is not None else None
        return page

    async def get_page_properties(self, ctx: AuthContext, page_id: int) -> Dict[int, Value]:
        """Full property map of one page, defaults filled in."""
        page = await self.get_page(ctx, page_id)
        return page.properties

    async def update_page_title(self, ctx: AuthContext, page_id: int, title: str) -> Page:
        async with self.db.session() as session:
            row = await self._get_page_row(session, page_id)
            ctx.authorize_collection(row.collection_id)
            row.title = title
            page = Page(id=row.id, collection_id=row.collection_id, title=title)

        logger.info(f"Renamed page {page_id}")
        return page

    async def delete_page(self, ctx: AuthContext, page_id: int) -> None:
        """Delete a page together with its content and property values."""
        async with self.db.session() as session:
            row = await self._get_page_row(session, page_id)
            ctx.authorize_collection(row.collection_id)
            await session.execute(delete(PageModel).where(PageModel.id == page_id))

        logger.info(f"Deleted page {page_id}")

    async def get_content(self, ctx: AuthContext, page_id: int) -> Optional[str]:
        async with self.db.session() as session:
            row = await self._get_page_row(session, page_id)
            ctx.authorize_collection(row.collection_id)
            return await session.scalar(
                select(PageContentModel.content).where(PageContentModel.page_id == page_id)
            )

    async def save_content(self, ctx: AuthContext, page_id: int, content: str) -> None:
        """Insert or overwrite the markdown body of a page."""
        async with self.db.session() as session:
            row = await self._get_page_row(session, page_id)
            ctx.authorize_collection(row.collection_id)
            await self.db.upsert(
                session,
                PageContentModel,
                {"page_id": page_id, "content": content},
                index_elements=["page_id"],
            )

        logger.info(f"Saved content for page {page_id}")
