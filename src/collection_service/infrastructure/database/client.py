"""Database client for collection storage."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional, Sequence

from sqlalchemy import event, func, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from ...core.errors import StoreError
from ...core.values import FilterKind, SortDirection, ValueType, code_table
from .models import (
    Base,
    CollectionModel,
    FilterTypeModel,
    PropertyTypeModel,
    SortTypeModel,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "Default Collection"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseClient:
    """Async database client shared by every store.

    Owns the engine (and so the connection pool). Stores open one session per
    operation through ``session()``, which commits on success and turns any
    SQLAlchemy failure into ``StoreError``.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize database client.

        Args:
            database_url: SQLAlchemy database URL (e.g., sqlite+aiosqlite:///./db.sqlite)
            echo: Log every emitted statement
        """
        self.engine = create_async_engine(database_url, echo=echo)
        self.async_session = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        if self.dialect_name == "sqlite":
            # Cascades are declared in the schema but SQLite only honours them per connection
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def verify_connection(self):
        """Verify the database answers before creating tables."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def initialize(self, seed_default_collection: bool = False):
        """Create database tables and fill the code lookup tables."""
        await self.verify_connection()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.session() as session:
            for model, enum_cls in (
                (PropertyTypeModel, ValueType),
                (FilterTypeModel, FilterKind),
                (SortTypeModel, SortDirection),
            ):
                rows = [{"id": code, "name": name} for code, name in code_table(enum_cls)]
                await self.insert_ignore(session, model, rows, index_elements=["id"])

            if seed_default_collection:
                count = await session.scalar(select(func.count()).select_from(CollectionModel))
                if not count:
                    session.add(CollectionModel(name=DEFAULT_COLLECTION_NAME))
                    logger.info(f"Seeded '{DEFAULT_COLLECTION_NAME}'")

        logger.info("Database initialized successfully")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session inside one transaction.

        Raises:
            StoreError: if the database fails while the session is open
        """
        try:
            async with self.async_session() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error(f"Database operation failed: {e}")
            raise StoreError(str(e)) from e

    def _insert(self, model):
        if self.dialect_name == "postgresql":
            return postgresql.insert(model)
        if self.dialect_name == "sqlite":
            return sqlite.insert(model)
        raise StoreError(f"upsert is not supported on {self.dialect_name}")

    async def upsert(
        self,
        session: AsyncSession,
        model,
        values: dict,
        index_elements: Sequence[str],
        update_columns: Optional[Iterable[str]] = None,
    ):
        """INSERT ... ON CONFLICT DO UPDATE for one row."""
        stmt = self._insert(model).values(**values)
        columns = update_columns if update_columns is not None else [
            name for name in values if name not in index_elements
        ]
        stmt = stmt.on_conflict_do_update(
            index_elements=list(index_elements),
            set_={name: stmt.excluded[name] for name in columns},
        )
        await session.execute(stmt)

    async def insert_ignore(
        self,
        session: AsyncSession,
        model,
        rows: Sequence[dict],
        index_elements: Sequence[str],
    ):
        """INSERT ... ON CONFLICT DO NOTHING for a batch of rows."""
        if not rows:
            return
        stmt = self._insert(model).values(list(rows))
        stmt = stmt.on_conflict_do_nothing(index_elements=list(index_elements))
        await session.execute(stmt)

    async def close(self):
        """Close database connections."""
        await self.engine.dispose()
