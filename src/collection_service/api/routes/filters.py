"""Filter endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_auth_context
from ...api.errors import http_error
from ...core.auth import AuthContext
from ...core.errors import CollectionServiceError
from ...core.filter_store import FilterStore
from ...core.values import FilterKind, ValueType
from ...models import FilterCapacityResponse, FilterCreate, FilterResponse, FilterUpdate

router = APIRouter(prefix="/api/v1", tags=["filters"])
logger = logging.getLogger(__name__)

# Set by main.py after creating the app
filter_store: FilterStore = None


def set_managers(filters: FilterStore):
    """Set the manager instances (called from main.py)."""
    globals()['filter_store'] = filters


@router.get(
    "/collections/{collection_id}/filters",
    response_model=List[FilterResponse],
    summary="List Filters",
    description="All filters of a collection. Pages must match every one of them.",
)
async def list_filters(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        filters = await filter_store.list_for_collection(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"list filters of collection {collection_id}")
    return [FilterResponse.from_record(f) for f in filters]


@router.post(
    "/collections/{collection_id}/filters",
    response_model=FilterResponse,
    status_code=201,
    summary="Create Filter",
    description="""
Create the filter of a property. A property has at most one filter.

**Kinds**: `eq`, `neq`, `gt`, `lt`, `in_range`, `not_in_range`, `is_empty`.
Not every kind applies to every type; booleans and multi-strings only support
`eq`, `neq` and `is_empty`, and strings have no range kinds. For
multi-strings `eq` means "contains" and `neq` "does not contain".

**Request Example**:
```json
{"prop_id": 4, "kind": "in_range", "start": "2024-01-01", "end": "2024-03-31"}
```
    """,
    responses={
        201: {"description": "Filter created"},
        404: {"description": "Property not found"},
        409: {"description": "Property already has a filter"},
        422: {"description": "Kind or operand does not fit the property type"},
    }
)
async def create_filter(
    collection_id: int, data: FilterCreate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        record = await filter_store.create(
            ctx, data.prop_id, data.kind,
            value=data.value, start=data.start, end=data.end,
            collection_id=collection_id,
        )
    except CollectionServiceError as e:
        raise http_error(e, f"create filter on property {data.prop_id}")
    return FilterResponse.from_record(record)


@router.get(
    "/collections/{collection_id}/filters/capacity",
    response_model=FilterCapacityResponse,
    summary="Filter Capacity",
    description="Whether some property of the collection can still receive a filter.",
)
async def filter_capacity(collection_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        has_capacity = await filter_store.has_capacity(ctx, collection_id)
    except CollectionServiceError as e:
        raise http_error(e, f"check filter capacity of collection {collection_id}")
    return FilterCapacityResponse(collection_id=collection_id, has_capacity=has_capacity)


@router.get("/filters/kinds/{value_type}", response_model=List[FilterKind], summary="Supported Filter Kinds")
async def supported_kinds(value_type: ValueType):
    return filter_store.supported_kinds(value_type)


@router.get("/filters/{value_type}/{filter_id}", response_model=FilterResponse, summary="Get Filter")
async def get_filter(
    value_type: ValueType,
    filter_id: int,
    ranged: bool = Query(False, description="Whether the filter is a range filter"),
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        record = await filter_store.get(ctx, value_type, filter_id, ranged=ranged)
    except CollectionServiceError as e:
        raise http_error(e, f"get filter {filter_id}")
    return FilterResponse.from_record(record)


@router.patch(
    "/filters/{value_type}/{filter_id}",
    response_model=FilterResponse,
    summary="Update Filter",
    description="""
Change the kind and/or operand of a filter.

Switching between a single-operand kind and a range kind replaces the filter,
so the response carries a new id.
    """,
)
async def update_filter(
    value_type: ValueType,
    filter_id: int,
    data: FilterUpdate,
    ranged: bool = Query(False, description="Whether the filter is currently a range filter"),
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        record = await filter_store.update(
            ctx, value_type, filter_id, ranged, data.kind,
            value=data.value, start=data.start, end=data.end,
        )
    except CollectionServiceError as e:
        raise http_error(e, f"update filter {filter_id}")
    return FilterResponse.from_record(record)


@router.delete("/filters/{value_type}/{filter_id}", status_code=204, summary="Delete Filter")
async def delete_filter(
    value_type: ValueType,
    filter_id: int,
    ranged: bool = Query(False),
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        await filter_store.delete(ctx, value_type, filter_id, ranged=ranged)
    except CollectionServiceError as e:
        raise http_error(e, f"delete filter {filter_id}")
