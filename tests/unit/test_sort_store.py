"""Unit tests for the sort directive"""

import pytest

from collection_service.core.errors import NotFoundError, TypeMismatchError
from collection_service.core.records import SortDirective
from collection_service.core.values import SortDirection, ValueType


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsorted_by_default(services, ctx, collection):
    assert await services.sorts.get(ctx, collection.id) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_set_overwrites(services, ctx, collection):
    sprint = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    due = await services.registry.create(ctx, collection.id, "Due", ValueType.DATE)

    await services.sorts.set(ctx, collection.id, sprint.id, SortDirection.ASCENDING)
    await services.sorts.set(ctx, collection.id, due.id, SortDirection.DESCENDING)

    assert await services.sorts.get(ctx, collection.id) == SortDirective(
        collection_id=collection.id, prop_id=due.id, direction=SortDirection.DESCENDING
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_clear(services, ctx, collection):
    sprint = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    await services.sorts.set(ctx, collection.id, sprint.id, SortDirection.ASCENDING)

    await services.sorts.clear(ctx, collection.id)

    assert await services.sorts.get(ctx, collection.id) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_multistr_cannot_be_sorted(services, ctx, collection):
    tags = await services.registry.create(ctx, collection.id, "Tags", ValueType.MULTISTR)

    with pytest.raises(TypeMismatchError):
        await services.sorts.set(ctx, collection.id, tags.id, SortDirection.ASCENDING)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_property_must_belong_to_collection(services, ctx, collection):
    other = await services.collections.create(ctx, "Other")
    prop = await services.registry.create(ctx, other.id, "Sprint", ValueType.INT)

    with pytest.raises(NotFoundError):
        await services.sorts.set(ctx, collection.id, prop.id, SortDirection.ASCENDING)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_collection(services, ctx):
    with pytest.raises(NotFoundError):
        await services.sorts.get(ctx, 999)
