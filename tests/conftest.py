"""
Pytest fixtures for orderdesk tests
"""
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio

from orderdesk.database import Customer, Database, Product, Store
from orderdesk.repositories import CatalogRepository, OrderRepository, OverrideRepository
from orderdesk.services import ServiceFactory


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[Database, None]:
    """
    In-memory test database with the schema created
    """
    database = Database(":memory:")
    await database.connect()
    await database.init_db()
    yield database
    await database.disconnect()


@pytest.fixture
def services(db: Database) -> ServiceFactory:
    return db.services


@pytest.fixture
def catalog_repo(db: Database) -> CatalogRepository:
    return CatalogRepository(db.get_connection())


@pytest.fixture
def override_repo(db: Database) -> OverrideRepository:
    return OverrideRepository(db.get_connection())


@pytest.fixture
def order_repo(db: Database) -> OrderRepository:
    return OrderRepository(db.get_connection())


@pytest_asyncio.fixture
async def store(catalog_repo: CatalogRepository) -> Store:
    """Store with a 20% operation cost"""
    return await catalog_repo.create_store("Central Distributors", operation_cost_percentage=20)


@pytest_asyncio.fixture
async def customer(catalog_repo: CatalogRepository, store: Store) -> Customer:
    return await catalog_repo.create_customer(store.id, "Sharma Traders")


@pytest_asyncio.fixture
async def products(catalog_repo: CatalogRepository, store: Store) -> list[Product]:
    """Three products priced 100, 50 and 30"""
    return [
        await catalog_repo.create_product(store.id, "Steel Bolt", Decimal("100"), sku="SB-100"),
        await catalog_repo.create_product(store.id, "Hex Nut", Decimal("50"), sku="HN-050"),
        await catalog_repo.create_product(store.id, "Washer", Decimal("30")),
    ]
