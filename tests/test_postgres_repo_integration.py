"""Order Store queries against a real PostgreSQL (requires Docker)."""
import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

from domain.menu import MenuItem
from domain.order import LineItem, Order
from infrastructure import db


pytestmark = pytest.mark.integration

BASE = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def postgres_container():
    """Start PostgreSQL container once for all tests."""
    with PostgresContainer("postgres:15-alpine") as postgres:
        yield postgres


@pytest_asyncio.fixture
async def pg_engine(postgres_container):
    """Fresh schema per test on the shared container."""
    dsn = postgres_container.get_connection_url(driver="asyncpg")
    schema_name = f"test_{uuid.uuid4().hex[:8]}"

    engine = create_async_engine(dsn, future=True, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.execute(text(f"CREATE SCHEMA {schema_name}"))
    await engine.dispose()

    engine = create_async_engine(
        dsn,
        future=True,
        poolclass=NullPool,
        connect_args={"server_settings": {"search_path": schema_name}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(db.metadata.create_all)

    yield engine

    await engine.dispose()


def make_order(vendors, minutes=0):
    return Order.create(
        customer_name="Ada",
        phone="555-0100",
        items=[LineItem(name=f"dish-{v}", price=3.0, quantity=1, vendor_id=v) for v in vendors],
        total=3.0 * len(vendors),
        now=BASE + timedelta(minutes=minutes),
    )


@pytest.mark.asyncio
async def test_vendor_query_and_status_update(pg_engine):
    mixed, only_b = make_order(["A", "B"]), make_order(["B"], minutes=1)
    uow = db.SqlAlchemyUnitOfWork(pg_engine)
    async with uow:
        await uow.orders.add(mixed)
        await uow.orders.add(only_b)
        await uow.commit()

    async with uow:
        loaded = await uow.orders.get(mixed.order_id)
        loaded.change_status("ready", now=BASE + timedelta(hours=1))
        await uow.orders.update_status(loaded)
        await uow.commit()

    async with uow:
        for_a = await uow.orders.find_by_vendor("A")
        for_b_ready = await uow.orders.find_by_vendor("B", status="ready")
        everything = await uow.orders.find_all()

    assert [o.order_id for o in for_a] == [mixed.order_id]
    assert [i.vendor_id for i in for_a[0].items] == ["A", "B"]
    assert for_a[0].status == "ready"
    assert for_a[0].created_at == BASE
    assert [o.order_id for o in for_b_ready] == [mixed.order_id]
    assert [o.order_id for o in everything] == [only_b.order_id, mixed.order_id]


@pytest.mark.asyncio
async def test_concurrent_catalog_lookups(pg_engine):
    items = [
        MenuItem.create(name=f"dish-{n}", price=float(n), category="Mains", vendor_id=f"V{n}", now=BASE)
        for n in range(5)
    ]
    uow = db.SqlAlchemyUnitOfWork(pg_engine)
    async with uow:
        for item in items:
            await uow.menu.add(item)
        await uow.commit()

    catalog = db.SqlCatalogLookup(pg_engine)
    entries = await asyncio.gather(*(catalog.get(item.item_id) for item in items), catalog.get("missing"))

    assert [e.vendor_id for e in entries[:-1]] == [f"V{n}" for n in range(5)]
    assert entries[-1] is None
