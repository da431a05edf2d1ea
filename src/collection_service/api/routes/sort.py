"""Sort directive endpoints."""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_auth_context
from ...api.errors import http_error
from ...core.auth import AuthContext
from ...core.errors import CollectionServiceError
from ...core.sort_store import SortStore
from ...models import SortResponse, SortUpdate

router = APIRouter(prefix="/api/v1/collections", tags=["sort"])
logger = logging.getLogger(__name__)

# Set by main.py after creating the app
sort_store: SortStore = None


def set_managers(sorts: SortStore):
    """Set the manager instances (called from main.py)."""
    globals()['sort_store'] = sorts


@router.get("/{collection_id}/sort", response_model=SortResponse, summary="Get Sort")
async def get_sort(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        directive = await sort_store.get(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get sort of collection {collection_id}")
    return SortResponse.from_directive(collection_id, directive)


@router.put(
    "/{collection_id}/sort",
    response_model=SortResponse,
    summary="Set Sort",
    description="""
Sort the collection's pages by one property. Pages without a value sort last
in either direction; ties are broken by page id. Multi-string properties
cannot be sorted.

**Request Example**:
```json
{"prop_id": 3, "direction": "desc"}
```
    """,
    responses={
        200: {"description": "Sort saved"},
        404: {"description": "Collection or property not found"},
        422: {"description": "Property type cannot be sorted"},
    }
)
async def set_sort(
    collection_id: int, data: SortUpdate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        directive = await sort_store.set(ctx, collection_id, data.prop_id, data.direction)
    except CollectionServiceError as e:
        raise http_error(e, f"set sort of collection {collection_id}")
    return SortResponse.from_directive(collection_id, directive)


@router.delete("/{collection_id}/sort", status_code=204, summary="Clear Sort")
async def clear_sort(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        await sort_store.clear(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"clear sort of collection {collection_id}")
