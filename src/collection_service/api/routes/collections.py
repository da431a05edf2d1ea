"""Collection CRUD and page listing endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_auth_context
from ...api.errors import http_error
from ...core.auth import AuthContext
from ...core.collection_manager import CollectionManager
from ...core.errors import CollectionServiceError
from ...core.page_manager import PageManager
from ...core.property_registry import PropertyRegistry
from ...models import (
    CollectionCreate,
    CollectionResponse,
    PageCreate,
    PageListResponse,
    PageResponse,
    PropertyResponse,
)

router = APIRouter(prefix="/api/v1/collections", tags=["collections"])
logger = logging.getLogger(__name__)

# These will be set by main.py after creating the app
collection_manager: CollectionManager = None
page_manager: PageManager = None
registry: PropertyRegistry = None


def set_managers(collection_mgr: CollectionManager, page_mgr: PageManager, property_registry: PropertyRegistry):
    """Set the manager instances (called from main.py)."""
    globals()['collection_manager'] = collection_mgr
    globals()['page_manager'] = page_mgr
    globals()['registry'] = property_registry


@router.get("", response_model=List[CollectionResponse], summary="List Collections")
async def list_collections(ctx: AuthContext = Depends(get_auth_context)):
    try:
        collections = await collection_manager.list(ctx)
    except CollectionServiceError as e:
        raise http_error(e, "list collections")
    return [CollectionResponse.from_record(c) for c in collections]


@router.post("", response_model=CollectionResponse, status_code=201, summary="Create Collection")
async def create_collection(data: CollectionCreate, ctx: AuthContext = Depends(get_auth_context)):
    try:
        collection = await collection_manager.create(ctx, data.name)
    except CollectionServiceError as e:
        raise http_error(e, "create collection")
    return CollectionResponse.from_record(collection)


@router.get("/{collection_id}", response_model=CollectionResponse, summary="Get Collection")
async def get_collection(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        collection = await collection_manager.get(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get collection {collection_id}")
    return CollectionResponse.from_record(collection)


@router.patch("/{collection_id}", response_model=CollectionResponse, summary="Rename Collection")
async def rename_collection(
    collection_id: int, data: CollectionCreate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        collection = await collection_manager.rename(ctx, collection_id, data.name)
    except CollectionServiceError as e:
        raise http_error(e, f"rename collection {collection_id}")
    return CollectionResponse.from_record(collection)


@router.delete(
    "/{collection_id}",
    status_code=204,
    summary="Delete Collection",
    description="Delete a collection with all of its pages, properties, values and filters.",
)
async def delete_collection(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        await collection_manager.delete(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"delete collection {collection_id}")


@router.get(
    "/{collection_id}/pages",
    response_model=PageListResponse,
    summary="List Pages",
    description="""
List the pages of a collection with a value for every property.

**Workflow**:
1. Load the collection's properties, filters and sort directive
2. Build one statement joining each property's value table
3. Apply every filter (AND) and the sort directive, ties broken by page id
4. Fill properties that were never written with their type default

Filters or a sort left behind by a deleted property are skipped.

**Pagination**: pass `page` (zero-based) to receive one page of results;
omit it to receive every page.

**Response Example**:
```json
{
  "collection_id": 1,
  "properties": [{"id": 2, "name": "Sprint", "type": "int", "order": 1}],
  "pages": [{"id": 7, "title": "Fix login", "properties": {"2": {"type": "int", "value": 3}}}],
  "page_number": null,
  "returned": 1
}
```
    """,
    responses={
        200: {"description": "Pages listed successfully"},
        404: {"description": "Collection not found"},
        500: {"description": "Internal server error"}
    }
)
async def list_pages(
    collection_id: int,
    page: Optional[int] = Query(None, ge=0, description="Zero-based result page"),
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        pages = await page_manager.list_pages(ctx, collection_id, page_number=page)
        props = await registry.list(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"list pages of collection {collection_id}")

    return PageListResponse(
        collection_id=collection_id,
        properties=[PropertyResponse.from_record(p) for p in props],
        pages=[PageResponse.from_page(p) for p in pages],
        page_number=page,
        returned=len(pages),
    )


@router.post(
    "/{collection_id}/pages",
    response_model=PageResponse,
    status_code=201,
    summary="Create Page",
)
async def create_page(
    collection_id: int, data: PageCreate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        page = await page_manager.create_page(ctx, collection_id, data.title)
    except CollectionServiceError as e:
        raise http_error(e, f"create page in collection {collection_id}")
    return PageResponse.from_page(page)
