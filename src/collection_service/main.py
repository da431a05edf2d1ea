"""Main FastAPI application for Collection Service."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from .config.settings import get_settings
from .infrastructure.database.client import DatabaseClient
from .core.collection_manager import CollectionManager
from .core.filter_store import FilterStore
from .core.page_manager import PageManager
from .core.property_registry import PropertyRegistry
from .core.propval_store import PropValStore
from .core.sort_store import SortStore
from .api.routes import collections, filters, pages, properties, sort
from .models.requests import HealthResponse

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Global instances
db_client: DatabaseClient = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    global db_client

    settings = get_settings()
    logger.info(f"Starting {settings.service_name} v1.0.0")

    # Initialize components
    logger.info("Initializing database...")
    db_client = DatabaseClient(settings.database_url, echo=settings.echo_sql)
    await db_client.initialize(seed_default_collection=settings.seed_default_collection)

    registry = PropertyRegistry(db_client, prop_set_max=settings.prop_set_max)
    filter_store = FilterStore(db_client)
    sort_store = SortStore(db_client)
    propval_store = PropValStore(db_client)
    collection_mgr = CollectionManager(db_client)
    page_mgr = PageManager(db_client, registry, filter_store, sort_store, page_size=settings.page_size)

    # Set managers in route modules
    collections.set_managers(collection_mgr, page_mgr, registry)
    pages.set_managers(page_mgr, propval_store)
    properties.set_managers(registry)
    filters.set_managers(filter_store)
    sort.set_managers(sort_store)

    logger.info(f"{settings.service_name} is ready")

    yield

    # Cleanup
    logger.info("Shutting down...")
    await db_client.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Collection Service",
    description="Collections of pages with typed properties, filters and sorting",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(collections.router)
app.include_router(pages.router)
app.include_router(properties.router)
app.include_router(filters.router)
app.include_router(sort.router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    settings = get_settings()

    db_connected = False
    if db_client is not None:
        try:
            await db_client.verify_connection()
            db_connected = True
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {e}")

    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        service=settings.service_name,
        version="1.0.0",
        database_connected=db_connected
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "collection-service",
        "version": "1.0.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "collection_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
