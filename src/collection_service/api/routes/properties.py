"""Property definition endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies import get_auth_context
from ...api.errors import http_error
from ...core.auth import AuthContext
from ...core.errors import CollectionServiceError
from ...core.property_registry import PropertyRegistry
from ...models import PropertyCreate, PropertyResponse, PropertyUpdate, ReorderRequest

router = APIRouter(prefix="/api/v1", tags=["properties"])
logger = logging.getLogger(__name__)

# Set by main.py after creating the app
registry: PropertyRegistry = None


def set_managers(property_registry: PropertyRegistry):
    """Set the manager instances (called from main.py)."""
    globals()['registry'] = property_registry


@router.get(
    "/collections/{collection_id}/properties",
    response_model=List[PropertyResponse],
    summary="List Properties",
    description="Properties of a collection ordered by `order` (unordered last), then id.",
)
async def list_properties(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        props = await registry.list(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"list properties of collection {collection_id}")
    return [PropertyResponse.from_record(p) for p in props]


@router.post(
    "/collections/{collection_id}/properties",
    response_model=PropertyResponse,
    status_code=201,
    summary="Create Property",
)
async def create_property(
    collection_id: int, data: PropertyCreate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        prop = await registry.create(ctx, collection_id, data.name, data.type, order=data.order)
    except CollectionServiceError as e:
        raise http_error(e, f"create property in collection {collection_id}")
    return PropertyResponse.from_record(prop)


@router.get("/properties/{prop_id}", response_model=PropertyResponse, summary="Get Property")
async def get_property(prop_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        prop = await registry.get(ctx, prop_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get property {prop_id}")
    return PropertyResponse.from_record(prop)


@router.patch("/properties/{prop_id}", response_model=PropertyResponse, summary="Rename Property")
async def rename_property(
    prop_id: int, data: PropertyUpdate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        prop = await registry.rename(ctx, prop_id, data.name)
    except CollectionServiceError as e:
        raise http_error(e, f"rename property {prop_id}")
    return PropertyResponse.from_record(prop)


@router.delete(
    "/properties/{prop_id}",
    status_code=204,
    summary="Delete Property",
    description="Delete a property with its values and filters; a sort on it is cleared.",
)
async def delete_property(prop_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        await registry.delete(ctx, prop_id)
    except CollectionServiceError as e:
        raise http_error(e, f"delete property {prop_id}")


@router.post(
    "/properties/{prop_id}/reorder",
    response_model=List[PropertyResponse],
    summary="Reorder Property",
    description="""
Move a property one position up or down, swapping it with its neighbour.

Moving the first property up or the last one down leaves the order unchanged.
Returns the collection's properties in their new order.

**Request Example**:
```json
{"direction": "up"}
```
    """,
)
async def reorder_property(
    prop_id: int, data: ReorderRequest, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        props = await registry.reorder(ctx, prop_id, data.direction)
    except CollectionServiceError as e:
        raise http_error(e, f"reorder property {prop_id}")
    return [PropertyResponse.from_record(p) for p in props]
