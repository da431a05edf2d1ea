"""Page-list statement builder.

The statement selects every page of a collection with one column per
property. Each property contributes a ``LEFT JOIN`` of its type's value table
under the alias ``prop<id>``; filters become ``WHERE`` predicates on those
aliases and the sort directive becomes the ``ORDER BY``.

The set of joins is only known at run time, so the builder accepts typed
fragments (``Property``, ``Filter``, ``SortDirective``) and never raw text:
alias names are formatted from integer primary keys and every operand is a
bound parameter.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import Select, and_, exists, not_, select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.selectable import Alias

from ..infrastructure.database.models import PageModel, PropValMultiStrItemModel
from .records import Filter, Property, SortDirective
from .value_tables import tables_for
from .values import FilterKind, SortDirection, ValueType

page_table = PageModel.__table__
multistr_items = PropValMultiStrItemModel.__table__


def alias_name(prop_id: int) -> str:
    """Alias of a property's value table; only ever built from the integer id."""
    return f"prop{int(prop_id)}"


@dataclass
class JoinedProperty:
    prop: Property
    alias: Alias

    @property
    def label(self) -> str:
        return self.alias.name

    @property
    def column(self) -> ColumnElement:
        """Column that is NULL exactly when the page has no value row."""
        if self.prop.type is ValueType.MULTISTR:
            return self.alias.c.id
        return self.alias.c.value


class PageQueryBuilder:
    """Accumulates joins, predicates and ordering for one page listing."""

    def __init__(self, collection_id: int):
        self.collection_id = collection_id
        self._joined: Dict[int, JoinedProperty] = {}
        self._predicates: List[ColumnElement] = []
        self._order_by: List[ColumnElement] = []
        self._page_id: Optional[int] = None
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    @property
    def joined(self) -> List[JoinedProperty]:
        return list(self._joined.values())

    def join_property(self, prop: Property) -> JoinedProperty:
        if prop.collection_id != self.collection_id:
            raise ValueError(f"property {prop.id} belongs to another collection")
        table = tables_for(prop.type).propval.__table__
        joined = JoinedProperty(prop, table.alias(alias_name(prop.id)))
        self._joined[prop.id] = joined
        return joined

    def add_filter(self, record: Filter) -> bool:
        """Add a filter predicate.

        Returns:
            False when the filter's property is not joined (or no longer has
            the filter's type); the filter is then left out.
        """
        joined = self._joined.get(record.prop_id)
        if joined is None or joined.prop.type is not record.value_type:
            return False
        self._predicates.append(self._predicate(joined, record))
        return True

    def _predicate(self, joined: JoinedProperty, record: Filter) -> ColumnElement:
        kind = record.kind
        if kind is FilterKind.IS_EMPTY:
            return joined.column.is_(None)

        if joined.prop.type is ValueType.MULTISTR:
            contains = exists(
                select(multistr_items.c.id).where(
                    multistr_items.c.propval_multistr_id == joined.alias.c.id,
                    multistr_items.c.value == record.value.payload,
                )
            )
            if kind is FilterKind.EQUALS:
                return contains
            if kind is FilterKind.NOT_EQUALS:
                # unwritten values never match, as with the scalar columns
                return and_(joined.column.isnot(None), not_(contains))
            raise ValueError(f"{kind.value} is not a multi-string filter")

        column = joined.column
        if kind is FilterKind.EQUALS:
            return column == record.value.payload
        if kind is FilterKind.NOT_EQUALS:
            return column != record.value.payload
        if kind is FilterKind.GREATER_THAN:
            return column > record.value.payload
        if kind is FilterKind.LESS_THAN:
            return column < record.value.payload
        between = column.between(record.start.payload, record.end.payload)
        if kind is FilterKind.INSIDE_RANGE:
            return between
        return not_(between)

    def sort_by(self, directive: Optional[SortDirective]) -> bool:
        """Order by the directive's property, ties broken by page id.

        Returns:
            False when the directive's property is not joined or not sortable;
            pages are then ordered by id only.
        """
        if directive is None:
            return True
        joined = self._joined.get(directive.prop_id)
        if joined is None or not tables_for(joined.prop.type).sortable:
            return False
        column = joined.column
        ordered = column.desc() if directive.direction is SortDirection.DESCENDING else column.asc()
        self._order_by = [ordered.nulls_last()]
        return True

    def restrict_to_page(self, page_id: int) -> None:
        self._page_id = page_id

    def paginate(self, limit: int, offset: int) -> None:
        self._limit = limit
        self._offset = offset

    def build(self) -> Select:
        columns = [page_table.c.id, page_table.c.title, page_table.c.collection_id]
        source = page_table
        for joined in self._joined.values():
            columns.append(joined.column.label(joined.label))
            source = source.outerjoin(
                joined.alias,
                and_(
                    joined.alias.c.page_id == page_table.c.id,
                    joined.alias.c.prop_id == joined.prop.id,
                ),
            )

        query = (
            select(*columns)
            .select_from(source)
            .where(page_table.c.collection_id == self.collection_id, *self._predicates)
            .order_by(*self._order_by, page_table.c.id.asc())
        )
        if self._page_id is not None:
            query = query.where(page_table.c.id == self._page_id)
        if self._limit is not None:
            query = query.limit(self._limit).offset(self._offset or 0)
        return query
