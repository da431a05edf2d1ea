"""Request models for API endpoints."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from ..core.values import FilterKind, ReorderDirection, SortDirection, ValueType


class CollectionCreate(BaseModel):
    """Model for creating or renaming a collection."""
    name: str = Field(..., min_length=1, max_length=255)


class PropertyCreate(BaseModel):
    """Model for adding a property to a collection."""
    name: str = Field(..., min_length=1, max_length=255)
    type: ValueType
    order: Optional[int] = Field(None, ge=0, le=32767)


class PropertyUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class ReorderRequest(BaseModel):
    direction: ReorderDirection


class PageCreate(BaseModel):
    """Model for creating a page."""
    title: str = Field(..., min_length=1, max_length=255)


class PageUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class PageContentUpdate(BaseModel):
    """Markdown body of a page, stored as raw text."""
    content: str = ""


class PropertyValueUpdate(BaseModel):
    """A raw value; it is coerced to the property's type on write."""
    value: Any = None


class FilterCreate(BaseModel):
    """Model for creating a filter.

    Single-operand kinds take ``value``; range kinds take ``start`` and ``end``.
    Omitted operands fall back to the starter operand for the property type.
    """
    prop_id: int
    kind: FilterKind
    value: Any = None
    start: Any = None
    end: Any = None


class FilterUpdate(BaseModel):
    """Model for changing the kind and/or operand of a filter."""
    kind: FilterKind
    value: Any = None
    start: Any = None
    end: Any = None


class SortUpdate(BaseModel):
    prop_id: int
    direction: SortDirection = SortDirection.ASCENDING


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: str
    version: str
    database_connected: bool
