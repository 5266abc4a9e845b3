"""
Contracts of the data access the services rely on

Implemented by the aiosqlite repositories in orderdesk.repositories; any other
store (HTTP API client, ORM) can be plugged into PricingService and
OrderService as long as it provides these coroutines.
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable

from orderdesk.database.models import Customer, Product
from orderdesk.domain.order import Order
from orderdesk.domain.pricing import PricingOverride


@runtime_checkable
class CatalogReader(Protocol):
    async def get_customer(self, customer_id: int) -> Customer | None: ...

    async def get_product(self, product_id: int) -> Product | None: ...

    async def get_products(self, store_id: int) -> list[Product]: ...

    async def get_products_by_ids(self, product_ids: list[int]) -> dict[int, Product]: ...

    async def get_store_operation_cost_percentage(self, store_id: int) -> Decimal: ...


@runtime_checkable
class CatalogStore(CatalogReader, Protocol):
    """Catalog access that may also change the store markup"""

    async def update_operation_cost_percentage(self, store_id: int, percentage) -> Decimal: ...


@runtime_checkable
class PricingOverrideStore(Protocol):
    async def get_override(self, customer_id: int, product_id: int) -> PricingOverride | None: ...

    async def get_active_override(
        self, customer_id: int, product_id: int, at: datetime | None = None
    ) -> PricingOverride | None: ...

    async def list_overrides(
        self, customer_id: int, active_only: bool = False, at: datetime | None = None
    ) -> list[PricingOverride]: ...

    async def save_override(
        self, override: PricingOverride, replace_active: bool = False
    ) -> PricingOverride: ...

    async def delete_override(self, customer_id: int, product_id: int) -> bool: ...


@runtime_checkable
class OrderStore(Protocol):
    async def add(self, order: Order) -> Order: ...

    async def get_by_id(self, order_id: int) -> Order | None: ...

    async def load_order(self, order_id: int) -> Order: ...

    async def save_order(self, order: Order) -> Order: ...

    async def list_orders(
        self,
        store_id: int | None = None,
        customer_id: int | None = None,
        open_only: bool = False,
        limit: int | None = None,
    ) -> list[Order]: ...
