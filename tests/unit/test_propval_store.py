"""Unit tests for the property-value store"""

from datetime import date, datetime, timezone

import pytest

from collection_service.core.errors import NotFoundError, TypeMismatchError
from collection_service.core.values import Value, ValueType


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_value_reads_as_default(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Done", ValueType.BOOL)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    value = await services.propvals.get(ctx, page.id, prop.id)

    assert value == Value(ValueType.BOOL, False)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_materialize_persists_default(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Points", ValueType.INT)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    await services.propvals.get(ctx, page.id, prop.id, materialize=True)

    assert await services.propvals.delete(ctx, page.id, prop.id) is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_date_default_is_never_persisted(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Due", ValueType.DATE)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    value = await services.propvals.get(ctx, page.id, prop.id, materialize=True)

    assert value.is_empty
    assert await services.propvals.delete(ctx, page.id, prop.id) is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upsert_twice_keeps_last_value(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    await services.propvals.upsert(ctx, page.id, prop.id, 3)
    await services.propvals.upsert(ctx, page.id, prop.id, "4")

    assert await services.propvals.get(ctx, page.id, prop.id) == Value(ValueType.INT, 4)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upsert_rejects_wrong_type(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    with pytest.raises(TypeMismatchError):
        await services.propvals.upsert(ctx, page.id, prop.id, "next week")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upsert_rejects_values_the_column_cannot_hold(services, ctx, collection):
    points = await services.registry.create(ctx, collection.id, "Points", ValueType.INT)
    ratio = await services.registry.create(ctx, collection.id, "Ratio", ValueType.FLOAT)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    with pytest.raises(TypeMismatchError):
        await services.propvals.upsert(ctx, page.id, points.id, 2**63)
    with pytest.raises(TypeMismatchError):
        await services.propvals.upsert(ctx, page.id, ratio.id, "nan")

    assert await services.propvals.get(ctx, page.id, points.id) == Value(ValueType.INT, 0)
    assert await services.propvals.get(ctx, page.id, ratio.id) == Value(ValueType.FLOAT, 0.0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_multistr_members_keep_their_order(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Tags", ValueType.MULTISTR)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    await services.propvals.upsert(ctx, page.id, prop.id, ["zeta", "alpha"])
    first = await services.propvals.get(ctx, page.id, prop.id)
    await services.propvals.upsert(ctx, page.id, prop.id, "beta")
    second = await services.propvals.get(ctx, page.id, prop.id)

    assert first.payload == ("zeta", "alpha")
    assert second.payload == ("beta",)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_date_and_datetime_round_trip(services, ctx, collection):
    due = await services.registry.create(ctx, collection.id, "Due", ValueType.DATE)
    seen = await services.registry.create(ctx, collection.id, "Seen", ValueType.DATETIME)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    await services.propvals.upsert(ctx, page.id, due.id, "2024-03-01")
    await services.propvals.upsert(ctx, page.id, seen.id, "2024-03-01T10:30:00+02:00")

    assert (await services.propvals.get(ctx, page.id, due.id)).payload == date(2024, 3, 1)
    assert (await services.propvals.get(ctx, page.id, seen.id)).payload == datetime(
        2024, 3, 1, 8, 30, tzinfo=timezone.utc
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_property_from_another_collection(services, ctx, collection):
    other = await services.collections.create(ctx, "Other")
    prop = await services.registry.create(ctx, other.id, "Foreign", ValueType.INT)
    page = await services.pages.create_page(ctx, collection.id, "Write tests")

    with pytest.raises(NotFoundError):
        await services.propvals.upsert(ctx, page.id, prop.id, 1)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_page(services, ctx, collection):
    prop = await services.registry.create(ctx, collection.id, "Sprint", ValueType.INT)

    with pytest.raises(NotFoundError):
        await services.propvals.get(ctx, 999, prop.id)
