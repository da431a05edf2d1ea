"""Page, page content and property value endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_auth_context
from ...api.errors import http_error
from ...core.auth import AuthContext
from ...core.errors import CollectionServiceError
from ...core.page_manager import PageManager
from ...core.propval_store import PropValStore
from ...models import (
    PageContentResponse,
    PageContentUpdate,
    PageResponse,
    PageUpdate,
    PropertyValueResponse,
    PropertyValueUpdate,
)

router = APIRouter(prefix="/api/v1/pages", tags=["pages"])
logger = logging.getLogger(__name__)

# These will be set by main.py after creating the app
page_manager: PageManager = None
propval_store: PropValStore = None


def set_managers(page_mgr: PageManager, propval: PropValStore):
    """Set the manager instances (called from main.py)."""
    globals()['page_manager'] = page_mgr
    globals()['propval_store'] = propval


@router.get(
    "/{page_id}",
    response_model=PageResponse,
    summary="Get Page",
    description="Retrieve a page with every property value and its markdown content.",
    responses={
        200: {"description": "Page retrieved successfully"},
        404: {"description": "Page not found"},
    }
)
async def get_page(page_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        page = await page_manager.get_page(ctx, page_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get page {page_id}")
    return PageResponse.from_page(page)


@router.patch("/{page_id}", response_model=PageResponse, summary="Rename Page")
async def update_page(page_id: int, data: PageUpdate, ctx: AuthContext = Depends(get_auth_context)):
    try:
        page = await page_manager.update_page_title(ctx, page_id, data.title)
    except CollectionServiceError as e:
        raise http_error(e, f"rename page {page_id}")
    return PageResponse.from_page(page)


@router.delete("/{page_id}", status_code=204, summary="Delete Page")
async def delete_page(page_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        await page_manager.delete_page(ctx, page_id)
    except CollectionServiceError as e:
        raise http_error(e, f"delete page {page_id}")


@router.get("/{page_id}/content", response_model=PageContentResponse, summary="Get Page Content")
async def get_content(page_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        content = await page_manager.get_content(ctx, page_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get content of page {page_id}")
    return PageContentResponse(page_id=page_id, content=content)


@router.put("/{page_id}/content", response_model=PageContentResponse, summary="Save Page Content")
async def save_content(
    page_id: int, data: PageContentUpdate, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        await page_manager.save_content(ctx, page_id, data.content)
    except CollectionServiceError as e:
        raise http_error(e, f"save content of page {page_id}")
    return PageContentResponse(page_id=page_id, content=data.content)


@router.get(
    "/{page_id}/properties",
    response_model=List[PropertyValueResponse],
    summary="Get Page Properties",
)
async def get_page_properties(page_id: int, ctx: AuthContext = Depends(get_auth_context)):
    try:
        properties = await page_manager.get_page_properties(ctx, page_id)
    except CollectionServiceError as e:
        raise http_error(e, f"get properties of page {page_id}")
    return [
        PropertyValueResponse(page_id=page_id, prop_id=prop_id, type=value.type, value=value.to_json())
        for prop_id, value in properties.items()
    ]


@router.get(
    "/{page_id}/properties/{prop_id}",
    response_model=PropertyValueResponse,
    summary="Get Property Value",
    description="""
Value of one property on one page.

A page that never received a value for the property returns the type default
(`false`, `0`, `0.0`, `""`, `[]`; `null` for dates). Pass `materialize=true`
to persist that default.
    """,
)
async def get_property_value(
    page_id: int,
    prop_id: int,
    materialize: bool = Query(False),
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        value = await propval_store.get(ctx, page_id, prop_id, materialize=materialize)
    except CollectionServiceError as e:
        raise http_error(e, f"get property {prop_id} of page {page_id}")
    return PropertyValueResponse(page_id=page_id, prop_id=prop_id, type=value.type, value=value.to_json())


@router.put(
    "/{page_id}/properties/{prop_id}",
    response_model=PropertyValueResponse,
    summary="Set Property Value",
    description="""
Insert or overwrite the value of one property on one page.

The raw value is coerced to the property type: booleans accept
`true/false/on/off/yes/no/1/0`, multi-strings accept a list or a
comma-separated string, dates and datetimes accept ISO-8601 strings.

**Request Example**:
```json
{"value": "2024-03-01"}
```
    """,
    responses={
        200: {"description": "Value saved"},
        404: {"description": "Page or property not found"},
        422: {"description": "Value does not fit the property type"},
    }
)
async def set_property_value(
    page_id: int,
    prop_id: int,
    data: PropertyValueUpdate,
    ctx: AuthContext = Depends(get_auth_context),
):
    try:
        value = await propval_store.upsert(ctx, page_id, prop_id, data.value)
    except CollectionServiceError as e:
        raise http_error(e, f"set property {prop_id} of page {page_id}")
    return PropertyValueResponse(page_id=page_id, prop_id=prop_id, type=value.type, value=value.to_json())


@router.delete("/{page_id}/properties/{prop_id}", status_code=204, summary="Clear Property Value")
async def clear_property_value(
    page_id: int, prop_id: int, ctx: AuthContext = Depends(get_auth_context)
):
    try:
        await propval_store.delete(ctx, page_id, prop_id)
    except CollectionServiceError as e:
        raise http_error(e, f"clear property {prop_id} of page {page_id}")
