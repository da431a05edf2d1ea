"""Domain records returned by the core."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .values import FilterKind, SortDirection, Value, ValueType


@dataclass
class Collection:
    id: int
    name: str


@dataclass
class Property:
    """A typed, named attribute of every page in a collection.

    ``order`` is ``None`` until the collection is first reordered; unordered
    properties sort after ordered ones, by id.
    """
    id: int
    collection_id: int
    name: str
    type: ValueType
    order: Optional[int] = None

    def sort_key(self):
        return (self.order is None, self.order if self.order is not None else 0, self.id)


@dataclass
class Page:
    """A page with its property map, keyed by property id in registry order."""
    id: int
    collection_id: int
    title: str
    properties: Dict[int, Value] = field(default_factory=dict)
    content: Optional[str] = None


@dataclass
class Filter:
    """A predicate over one property.

    Range kinds carry ``start``/``end``; ``IS_EMPTY`` keeps whatever operand
    was stored with it but ignores it.
    """
    id: int
    prop_id: int
    value_type: ValueType
    kind: FilterKind
    value: Optional[Value] = None
    start: Optional[Value] = None
    end: Optional[Value] = None

    @property
    def ranged(self) -> bool:
        return self.kind.is_range


@dataclass
class SortDirective:
    collection_id: int
    prop_id: int
    direction: SortDirection
