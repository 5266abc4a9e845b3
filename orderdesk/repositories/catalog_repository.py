"""
Repository for stores, customers and products
"""

import logging
from decimal import Decimal

import aiosqlite

from orderdesk.core.config import Config
from orderdesk.database.models import Customer, Product, Store
from orderdesk.domain.exceptions import InvalidPricingInput
from orderdesk.domain.pricing import to_decimal
from orderdesk.repositories.base import BaseRepository
from orderdesk.repositories.exceptions import EntityNotFoundError
from orderdesk.utils.helpers import parse_datetime


logger = logging.getLogger(__name__)


def _non_negative(value, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount < 0:
        raise InvalidPricingInput(field, value, "must be non-negative")
    return amount


class CatalogRepository(BaseRepository[Product]):
    """Catalog data: stores, their customers and products"""

    # ===== STORES =====

    async def create_store(
        self,
        name: str,
        operation_cost_percentage=None,
        currency: str | None = None,
    ) -> Store:
        """
        Create a store

        Args:
            name: Store name
            operation_cost_percentage: Markup in percent, Config default when omitted
            currency: Currency code, Config.CURRENCY when omitted

        Returns:
            Created Store

        Raises:
            InvalidPricingInput: Negative or non-numeric percentage
        """
        if operation_cost_percentage is None:
            operation_cost_percentage = Config.DEFAULT_OPERATION_COST_PERCENTAGE
        percentage = _non_negative(operation_cost_percentage, "operation_cost_percentage")
        currency = currency or Config.CURRENCY

        store_id = await self._execute_commit(
            "INSERT INTO stores (name, operation_cost_percentage, currency) VALUES (?, ?, ?)",
            (name, str(percentage), currency),
        )
        logger.info(f"Store #{store_id} created: {name}")
        return Store(id=store_id, name=name, operation_cost_percentage=percentage, currency=currency)

    async def get_store(self, store_id: int) -> Store | None:
        row = await self._fetch_one("SELECT * FROM stores WHERE id = ?", (store_id,))
        return self._row_to_store(row) if row else None

    async def get_store_operation_cost_percentage(self, store_id: int) -> Decimal:
        """
        Current operation-cost percentage of a store

        Raises:
            EntityNotFoundError: Unknown store
        """
        row = await self._fetch_one(
            "SELECT operation_cost_percentage FROM stores WHERE id = ?", (store_id,)
        )
        if not row:
            raise EntityNotFoundError("Store", store_id)
        return Decimal(row["operation_cost_percentage"])

    async def update_operation_cost_percentage(self, store_id: int, percentage) -> Decimal:
        """
        Change the store markup

        Existing orders keep their locked prices, only later quotes and orders
        see the new value.

        Returns:
            The stored percentage

        Raises:
            InvalidPricingInput: Negative or non-numeric percentage
            EntityNotFoundError: Unknown store
        """
        value = _non_negative(percentage, "operation_cost_percentage")
        cursor = await self._execute(
            "UPDATE stores SET operation_cost_percentage = ? WHERE id = ?",
            (str(value), store_id),
        )
        await self.db.commit()
        if cursor.rowcount == 0:
            raise EntityNotFoundError("Store", store_id)

        logger.info(f"Store #{store_id} operation cost set to {value}%")
        return value

    # ===== CUSTOMERS =====

    async def create_customer(self, store_id: int, name: str) -> Customer:
        customer_id = await self._execute_commit(
            "INSERT INTO customers (store_id, name) VALUES (?, ?)", (store_id, name)
        )
        logger.info(f"Customer #{customer_id} created in store #{store_id}")
        return Customer(id=customer_id, store_id=store_id, name=name)

    async def get_customer(self, customer_id: int) -> Customer | None:
        row = await self._fetch_one("SELECT * FROM customers WHERE id = ?", (customer_id,))
        if not row:
            return None
        return Customer(
            id=row["id"],
            store_id=row["store_id"],
            name=row["name"],
            created_at=parse_datetime(row["created_at"]),
        )

    # ===== PRODUCTS =====

    async def create_product(
        self, store_id: int, name: str, base_price, sku: str | None = None
    ) -> Product:
        """
        Add a product to the store catalog

        Raises:
            InvalidPricingInput: Negative or non-numeric base price
        """
        price = _non_negative(base_price, "base_price")
        product_id = await self._execute_commit(
            "INSERT INTO products (store_id, name, sku, base_price) VALUES (?, ?, ?, ?)",
            (store_id, name, sku, str(price)),
        )
        logger.info(f"Product #{product_id} created: {name} at {price}")
        return Product(id=product_id, store_id=store_id, name=name, base_price=price, sku=sku)

    async def get_product(self, product_id: int) -> Product | None:
        row = await self._fetch_one("SELECT * FROM products WHERE id = ?", (product_id,))
        return self._row_to_product(row) if row else None

    async def get_products(self, store_id: int) -> list[Product]:
        """All products of a store, ordered by name"""
        rows = await self._fetch_all(
            "SELECT * FROM products WHERE store_id = ? ORDER BY name, id", (store_id,)
        )
        return [self._row_to_product(row) for row in rows]

    async def get_products_by_ids(self, product_ids: list[int]) -> dict[int, Product]:
        """Products keyed by ID, unknown IDs are left out"""
        if not product_ids:
            return {}
        placeholders = ", ".join("?" for _ in product_ids)
        rows = await self._fetch_all(
            f"SELECT * FROM products WHERE id IN ({placeholders})", tuple(product_ids)
        )
        return {row["id"]: self._row_to_product(row) for row in rows}

    # ===== HELPERS =====

    def _row_to_store(self, row: aiosqlite.Row) -> Store:
        return Store(
            id=row["id"],
            name=row["name"],
            operation_cost_percentage=Decimal(row["operation_cost_percentage"]),
            currency=row["currency"],
            created_at=parse_datetime(row["created_at"]),
        )

    def _row_to_product(self, row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            store_id=row["store_id"],
            name=row["name"],
            base_price=Decimal(row["base_price"]),
            sku=row["sku"],
            created_at=parse_datetime(row["created_at"]),
        )
