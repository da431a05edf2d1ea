"""Shared fixtures: a fresh SQLite database and the core services on top of it."""

from dataclasses import dataclass

import pytest
import pytest_asyncio

from collection_service.core.auth import SYSTEM_CONTEXT
from collection_service.core.collection_manager import CollectionManager
from collection_service.core.filter_store import FilterStore
from collection_service.core.page_manager import PageManager
from collection_service.core.property_registry import PropertyRegistry
from collection_service.core.propval_store import PropValStore
from collection_service.core.sort_store import SortStore
from collection_service.infrastructure.database.client import DatabaseClient


@dataclass
class Services:
    db: DatabaseClient
    collections: CollectionManager
    registry: PropertyRegistry
    propvals: PropValStore
    filters: FilterStore
    sorts: SortStore
    pages: PageManager


@pytest.fixture
def ctx():
    return SYSTEM_CONTEXT


@pytest_asyncio.fixture
async def db_client(tmp_path):
    client = DatabaseClient(f"sqlite+aiosqlite:///{tmp_path / 'collections.db'}")
    await client.initialize()
    yield client
    await client.close()


@pytest_asyncio.fixture
async def services(db_client):
    registry = PropertyRegistry(db_client, prop_set_max=50)
    filters = FilterStore(db_client)
    sorts = SortStore(db_client)
    return Services(
        db=db_client,
        collections=CollectionManager(db_client),
        registry=registry,
        propvals=PropValStore(db_client),
        filters=filters,
        sorts=sorts,
        pages=PageManager(db_client, registry, filters, sorts, page_size=2),
    )


@pytest_asyncio.fixture
async def collection(services, ctx):
    return await services.collections.create(ctx, "Tasks")


@pytest.fixture
def api_client(tmp_path, monkeypatch):
    """TestClient over the full app, backed by its own SQLite file."""
    from fastapi.testclient import TestClient

    from collection_service.config import get_settings
    from collection_service.main import app

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("SEED_DEFAULT_COLLECTION", "false")
    get_settings.cache_clear()
    with TestClient(app) as client:
        yield client
    get_settings.cache_clear()
