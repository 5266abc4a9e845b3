"""
Order service: creation and lifecycle changes on stored orders
"""

import logging
from collections.abc import Sequence

from orderdesk.core.constants import OrderStatus
from orderdesk.domain.exceptions import EmptyOrder, InvalidPricingInput
from orderdesk.domain.order import Order, OrderLineRequest, create_order
from orderdesk.domain.order_state_machine import OrderStateMachine
from orderdesk.domain.ports import CatalogReader, OrderStore, PricingOverrideStore
from orderdesk.repositories import EntityNotFoundError
from orderdesk.utils.helpers import get_now
from orderdesk.utils.retry import retry_on_conflict


logger = logging.getLogger(__name__)


class OrderService:
    """
    Order management
    Loads catalog data, runs the domain rules and persists the result
    """

    def __init__(
        self,
        order_repo: OrderStore,
        catalog_repo: CatalogReader,
        override_repo: PricingOverrideStore,
        state_machine: OrderStateMachine | None = None,
        max_attempts: int | None = None,
    ):
        """
        Args:
            order_repo: Order repository
            catalog_repo: Catalog repository
            override_repo: Override repository
            state_machine: Lifecycle rules
            max_attempts: Attempts on version conflicts, Config default when None
        """
        self.order_repo = order_repo
        self.catalog_repo = catalog_repo
        self.override_repo = override_repo
        self.state_machine = state_machine or OrderStateMachine()
        self.max_attempts = max_attempts

    async def create_order(
        self,
        customer_id: int,
        line_items: Sequence[OrderLineRequest],
        placed_by: int | None = None,
    ) -> Order:
        """
        Price and store a new order in REQUESTED status

        Unit prices are resolved with the store markup and the customer's
        overrides in effect now, and never change afterwards.

        Args:
            customer_id: Customer ID
            line_items: Requested products and quantities
            placed_by: ID of the submitting user

        Returns:
            Saved order

        Raises:
            EmptyOrder: No line items
            InvalidQuantity: A quantity is not a positive integer
            InvalidPricingInput: Product unknown in the customer's store or hidden
                from the customer by an active override
            EntityNotFoundError: Unknown customer
        """
        if not line_items:
            raise EmptyOrder(customer_id)

        customer = await self.catalog_repo.get_customer(customer_id)
        if not customer:
            raise EntityNotFoundError("Customer", customer_id)

        now = get_now()
        product_ids = list(dict.fromkeys(item.product_id for item in line_items))
        products = await self.catalog_repo.get_products_by_ids(product_ids)
        base_prices = {
            product_id: product.base_price
            for product_id, product in products.items()
            if product.store_id == customer.store_id
        }

        overrides = {}
        for product_id in base_prices:
            override = await self.override_repo.get_active_override(customer_id, product_id, now)
            if override is None:
                continue
            if not override.visible:
                raise InvalidPricingInput(
                    "product_id", product_id, "product is not offered to this customer"
                )
            overrides[product_id] = override

        percentage = await self.catalog_repo.get_store_operation_cost_percentage(customer.store_id)

        order = create_order(
            customer.store_id,
            customer_id,
            line_items,
            base_prices=base_prices,
            operation_cost_percentage=percentage,
            overrides=overrides,
            placed_by=placed_by,
            now=now,
        )
        return await self.order_repo.add(order)

    async def get_order(self, order_id: int) -> Order | None:
        return await self.order_repo.get_by_id(order_id)

    async def list_orders(
        self, store_id: int, open_only: bool = False, limit: int | None = None
    ) -> list[Order]:
        """
        Orders of a store, newest first

        Args:
            store_id: Store ID
            open_only: Only orders that are not COMPLETED or CANCELLED
            limit: Maximum number of orders
        """
        return await self.order_repo.list_orders(store_id=store_id, open_only=open_only, limit=limit)

    async def list_customer_orders(self, customer_id: int, open_only: bool = False) -> list[Order]:
        return await self.order_repo.list_orders(customer_id=customer_id, open_only=open_only)

    async def get_available_transitions(self, order_id: int) -> list[OrderStatus]:
        """
        Statuses a stored order may move to next

        Raises:
            EntityNotFoundError: Unknown order
        """
        order = await self.order_repo.load_order(order_id)
        return self.state_machine.get_available_transitions(order.status)

    async def advance_status(
        self,
        order_id: int,
        target: OrderStatus | int | str,
        changed_by: int | None = None,
        notes: str | None = None,
    ) -> Order:
        """
        Move a stored order to the next status

        On a version conflict the order is reloaded and the change re-applied.

        Args:
            order_id: Order ID
            target: Target status, enum member, code or name
            changed_by: ID of the user making the change
            notes: Free text for the history entry

        Returns:
            Saved order

        Raises:
            IllegalTransition: Lifecycle does not allow the change
            EntityNotFoundError: Unknown order
            ConcurrencyConflict: Conflicts persisted through every attempt
        """
        target_status = OrderStatus.parse(target)

        @retry_on_conflict(max_attempts=self.max_attempts)
        async def _apply() -> Order:
            order = await self.order_repo.load_order(order_id)
            order.advance_status(target_status, changed_by=changed_by, notes=notes)
            return await self.order_repo.save_order(order)

        order = await _apply()
        logger.info(f"Order #{order_id} moved to {target_status.name} by {changed_by}")
        return order

    async def cancel(
        self, order_id: int, changed_by: int | None = None, reason: str | None = None
    ) -> Order:
        """
        Cancel a stored order

        Raises:
            IllegalTransition: Order is COMPLETED or CANCELLED
            EntityNotFoundError: Unknown order
            ConcurrencyConflict: Conflicts persisted through every attempt
        """

        @retry_on_conflict(max_attempts=self.max_attempts)
        async def _apply() -> Order:
            order = await self.order_repo.load_order(order_id)
            order.cancel(changed_by=changed_by, reason=reason)
            return await self.order_repo.save_order(order)

        order = await _apply()
        logger.info(f"Order #{order_id} cancelled by {changed_by}. Reason: {reason or 'Not specified'}")
        return order
