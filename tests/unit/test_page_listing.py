"""Unit tests for page listing and page CRUD

Covers the composed listing query end to end against SQLite: full property
maps, filters, sorting, stale filters and pagination.
"""

import logging

import pytest
import pytest_asyncio

from collection_service.core.errors import NotFoundError
from collection_service.core.records import Filter
from collection_service.core.values import FilterKind, SortDirection, Value, ValueType


@pytest_asyncio.fixture
async def sprint_board(services, ctx, collection):
    """Sprint:Int and Completed:Bool with pages A(3, true) and B(2, false)."""
    sprint = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    completed = await services.registry.create(ctx, collection.id, "Completed", ValueType.BOOL)
    a = await services.pages.create_page(ctx, collection.id, "A")
    b = await services.pages.create_page(ctx, collection.id, "B")
    await services.propvals.upsert(ctx, a.id, sprint.id, 3)
    await services.propvals.upsert(ctx, a.id, completed.id, True)
    await services.propvals.upsert(ctx, b.id, sprint.id, 2)
    await services.propvals.upsert(ctx, b.id, completed.id, False)
    return {"sprint": sprint, "completed": completed, "a": a, "b": b}


def _titles(pages):
    return [page.title for page in pages]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_every_page_carries_every_property(services, ctx, collection):
    sprint = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    due = await services.registry.create(ctx, collection.id, "Due", ValueType.DATE)
    tags = await services.registry.create(ctx, collection.id, "Tags", ValueType.MULTISTR)
    page = await services.pages.create_page(ctx, collection.id, "Untouched")
    other = await services.collections.create(ctx, "Other")
    await services.pages.create_page(ctx, other.id, "Elsewhere")

    pages = await services.pages.list_pages(ctx, collection.id)

    assert [p.id for p in pages] == [page.id]
    assert list(pages[0].properties) == [sprint.id, due.id, tags.id]
    assert pages[0].properties[sprint.id] == Value(ValueType.INT, 0)
    assert pages[0].properties[due.id].is_empty
    assert pages[0].properties[tags.id] == Value(ValueType.MULTISTR, ())


@pytest.mark.unit
@pytest.mark.asyncio
async def test_equality_filter(services, ctx, collection, sprint_board):
    await services.filters.create(ctx, sprint_board["completed"].id, FilterKind.EQUALS, value=True)

    pages = await services.pages.list_pages(ctx, collection.id)

    assert _titles(pages) == ["A"]
    assert pages[0].properties[sprint_board["sprint"].id] == Value(ValueType.INT, 3)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sort_ascending(services, ctx, collection, sprint_board):
    await services.sorts.set(ctx, collection.id, sprint_board["sprint"].id, SortDirection.ASCENDING)

    assert _titles(await services.pages.list_pages(ctx, collection.id)) == ["B", "A"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_range_filter_with_descending_sort(services, ctx, collection, sprint_board):
    sprint = sprint_board["sprint"]
    await services.filters.create(ctx, sprint.id, FilterKind.INSIDE_RANGE, start=0, end=10)
    await services.sorts.set(ctx, collection.id, sprint.id, SortDirection.DESCENDING)

    assert _titles(await services.pages.list_pages(ctx, collection.id)) == ["A", "B"]

    await services.registry.delete(ctx, sprint.id)
    pages = await services.pages.list_pages(ctx, collection.id)

    assert _titles(pages) == ["A", "B"]
    assert list(pages[0].properties) == [sprint_board["completed"].id]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_range_bounds_are_inclusive(services, ctx, collection, sprint_board):
    await services.filters.create(
        ctx, sprint_board["sprint"].id, FilterKind.NOT_INSIDE_RANGE, start=2, end=2
    )

    assert _titles(await services.pages.list_pages(ctx, collection.id)) == ["A"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_is_empty_matches_pages_without_a_value_row(services, ctx, collection, sprint_board):
    c = await services.pages.create_page(ctx, collection.id, "C")
    await services.filters.create(ctx, sprint_board["sprint"].id, FilterKind.IS_EMPTY)

    pages = await services.pages.list_pages(ctx, collection.id)

    assert [p.id for p in pages] == [c.id]
    assert pages[0].properties[sprint_board["sprint"].id] == Value(ValueType.INT, 0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unwritten_values_do_not_match_comparisons(services, ctx, collection, sprint_board):
    await services.pages.create_page(ctx, collection.id, "C")
    await services.filters.create(ctx, sprint_board["completed"].id, FilterKind.EQUALS, value=False)

    assert _titles(await services.pages.list_pages(ctx, collection.id)) == ["B"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_not_equals_skips_unwritten_pages_for_every_type(services, ctx, collection, sprint_board):
    tags = await services.registry.create(ctx, collection.id, "Tags", ValueType.MULTISTR)
    await services.propvals.upsert(ctx, sprint_board["a"].id, tags.id, ["docs"])
    await services.pages.create_page(ctx, collection.id, "C")

    await services.filters.create(ctx, sprint_board["sprint"].id, FilterKind.NOT_EQUALS, value=3)
    by_sprint = _titles(await services.pages.list_pages(ctx, collection.id))
    await services.registry.delete(ctx, sprint_board["sprint"].id)
    await services.filters.create(ctx, tags.id, FilterKind.NOT_EQUALS, value="urgent")
    by_tags = _titles(await services.pages.list_pages(ctx, collection.id))

    assert by_sprint == ["B"]
    assert by_tags == ["A"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_pages_without_a_value_sort_last(services, ctx, collection, sprint_board):
    c = await services.pages.create_page(ctx, collection.id, "C")
    await services.sorts.set(ctx, collection.id, sprint_board["sprint"].id, SortDirection.DESCENDING)

    pages = await services.pages.list_pages(ctx, collection.id)

    assert [p.title for p in pages] == ["A", "B", "C"]
    assert pages[-1].id == c.id


@pytest.mark.unit
@pytest.mark.asyncio
async def test_multistr_contains_filter_skips_unwritten_pages(services, ctx, collection):
    tags = await services.registry.create(ctx, collection.id, "Tags", ValueType.MULTISTR)
    urgent = await services.pages.create_page(ctx, collection.id, "urgent")
    calm = await services.pages.create_page(ctx, collection.id, "calm")
    await services.pages.create_page(ctx, collection.id, "untagged")
    await services.propvals.upsert(ctx, urgent.id, tags.id, ["bug", "urgent"])
    await services.propvals.upsert(ctx, calm.id, tags.id, ["docs"])

    created = await services.filters.create(ctx, tags.id, FilterKind.EQUALS, value="urgent")
    contains = await services.pages.list_pages(ctx, collection.id)
    await services.filters.update(ctx, ValueType.MULTISTR, created.id, False, FilterKind.NOT_EQUALS)
    lacks = await services.pages.list_pages(ctx, collection.id)

    assert _titles(contains) == ["urgent"]
    assert contains[0].properties[tags.id].payload == ("bug", "urgent")
    assert _titles(lacks) == ["calm"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stale_filter_is_dropped_with_a_warning(services, ctx, collection, sprint_board, monkeypatch, caplog):
    stale = Filter(
        id=77, prop_id=999, value_type=ValueType.INT, kind=FilterKind.EQUALS,
        value=Value(ValueType.INT, 1),
    )
    original = services.filters.list_in_session

    async def with_stale_filter(session, collection_id):
        return await original(session, collection_id) + [stale]

    monkeypatch.setattr(services.filters, "list_in_session", with_stale_filter)

    with caplog.at_level(logging.WARNING, logger="collection_service.core.page_manager"):
        pages = await services.pages.list_pages(ctx, collection.id)

    assert _titles(pages) == ["A", "B"]
    assert "stale filter 77" in caplog.text


@pytest.mark.unit
@pytest.mark.asyncio
async def test_pagination(services, ctx, collection, sprint_board):
    await services.pages.create_page(ctx, collection.id, "C")

    first = await services.pages.list_pages(ctx, collection.id, page_number=0)
    second = await services.pages.list_pages(ctx, collection.id, page_number=1)

    assert _titles(first) == ["A", "B"]
    assert _titles(second) == ["C"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_collection(services, ctx):
    with pytest.raises(NotFoundError):
        await services.pages.list_pages(ctx, 999)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_page_crud_and_content(services, ctx, collection, sprint_board):
    page = sprint_board["a"]

    await services.pages.update_page_title(ctx, page.id, "A renamed")
    assert await services.pages.get_content(ctx, page.id) is None
    await services.pages.save_content(ctx, page.id, "# Notes")
    await services.pages.save_content(ctx, page.id, "# Notes\n\nmore")

    fetched = await services.pages.get_page(ctx, page.id)
    assert fetched.title == "A renamed"
    assert fetched.content == "# Notes\n\nmore"
    assert fetched.properties == await services.pages.get_page_properties(ctx, page.id)
    assert fetched.properties[sprint_board["completed"].id] == Value(ValueType.BOOL, True)

    await services.pages.delete_page(ctx, page.id)
    with pytest.raises(NotFoundError):
        await services.pages.get_page(ctx, page.id)
    assert _titles(await services.pages.list_pages(ctx, collection.id)) == ["B"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_deleting_collection_removes_its_pages(services, ctx, collection, sprint_board):
    await services.sorts.set(ctx, collection.id, sprint_board["sprint"].id, SortDirection.ASCENDING)

    await services.collections.delete(ctx, collection.id)

    assert await services.collections.list(ctx) == []
    with pytest.raises(NotFoundError):
        await services.pages.get_page(ctx, sprint_board["a"].id)
