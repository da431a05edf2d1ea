"""Data models for Collection Service."""

from .collection import (
    CollectionResponse,
    FilterCapacityResponse,
    FilterResponse,
    PageContentResponse,
    PageListResponse,
    PageResponse,
    PropertyResponse,
    PropertyValueResponse,
    SortResponse,
    ValueResponse,
)
from .requests import (
    CollectionCreate,
    FilterCreate,
    FilterUpdate,
    HealthResponse,
    PageContentUpdate,
    PageCreate,
    PageUpdate,
    PropertyCreate,
    PropertyUpdate,
    PropertyValueUpdate,
    ReorderRequest,
    SortUpdate,
)

__all__ = [
    "CollectionResponse",
    "FilterCapacityResponse",
    "FilterResponse",
    "PageContentResponse",
    "PageListResponse",
    "PageResponse",
    "PropertyResponse",
    "PropertyValueResponse",
    "SortResponse",
    "ValueResponse",
    "CollectionCreate",
    "FilterCreate",
    "FilterUpdate",
    "HealthResponse",
    "PageContentUpdate",
    "PageCreate",
    "PageUpdate",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyValueUpdate",
    "ReorderRequest",
    "SortUpdate",
]
