"""Collection, property, page and filter response models."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..core.records import Collection, Filter, Page, Property, SortDirective
from ..core.values import FilterKind, SortDirection, Value, ValueType


class CollectionResponse(BaseModel):
    """API response model for a collection."""
    id: int
    name: str

    @classmethod
    def from_record(cls, collection: Collection):
        return cls(id=collection.id, name=collection.name)


class PropertyResponse(BaseModel):
    """API response model for a property definition."""
    id: int
    collection_id: int
    name: str
    type: ValueType
    order: Optional[int] = None

    @classmethod
    def from_record(cls, prop: Property):
        return cls(
            id=prop.id,
            collection_id=prop.collection_id,
            name=prop.name,
            type=prop.type,
            order=prop.order,
        )


class ValueResponse(BaseModel):
    """A typed property value; dates are ISO-8601 strings."""
    type: ValueType
    value: Any = None

    @classmethod
    def from_value(cls, value: Value):
        return cls(type=value.type, value=value.to_json())


class PropertyValueResponse(BaseModel):
    """Value of one property on one page."""
    page_id: int
    prop_id: int
    type: ValueType
    value: Any = None


class PageResponse(BaseModel):
    """API response model for a page.

    ``properties`` is keyed by property id, in property order.
    """
    id: int
    collection_id: int
    title: str
    properties: Dict[int, ValueResponse] = Field(default_factory=dict)
    content: Optional[str] = None

    @classmethod
    def from_page(cls, page: Page):
        return cls(
            id=page.id,
            collection_id=page.collection_id,
            title=page.title,
            properties={
                prop_id: ValueResponse.from_value(value)
                for prop_id, value in page.properties.items()
            },
            content=page.content,
        )


class PageListResponse(BaseModel):
    """Response model for a page listing."""
    collection_id: int
    properties: List[PropertyResponse]
    pages: List[PageResponse]
    page_number: Optional[int] = None
    returned: int


class PageContentResponse(BaseModel):
    page_id: int
    content: Optional[str] = None


class FilterResponse(BaseModel):
    """API response model for a filter."""
    id: int
    prop_id: int
    value_type: ValueType
    kind: FilterKind
    ranged: bool
    value: Any = None
    start: Any = None
    end: Any = None

    @classmethod
    def from_record(cls, record: Filter):
        return cls(
            id=record.id,
            prop_id=record.prop_id,
            value_type=record.value_type,
            kind=record.kind,
            ranged=record.ranged,
            value=record.value.to_json() if record.value is not None else None,
            start=record.start.to_json() if record.start is not None else None,
            end=record.end.to_json() if record.end is not None else None,
        )


class FilterCapacityResponse(BaseModel):
    collection_id: int
    has_capacity: bool


class SortResponse(BaseModel):
    """Sort directive of a collection; both fields are null when unsorted."""
    collection_id: int
    prop_id: Optional[int] = None
    direction: Optional[SortDirection] = None

    @classmethod
    def from_directive(cls, collection_id: int, directive: Optional[SortDirective]):
        if directive is None:
            return cls(collection_id=collection_id)
        return cls(
            collection_id=collection_id,
            prop_id=directive.prop_id,
            direction=directive.direction,
        )
