"""
Integration tests for OrderService
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from orderdesk.core.constants import OrderStatus
from orderdesk.domain import EmptyOrder, IllegalTransition, InvalidPricingInput, InvalidQuantity, OrderLineRequest
from orderdesk.repositories import ConcurrencyConflict, EntityNotFoundError
from orderdesk.services import OrderService, ServiceFactory


@pytest.fixture
def order_service(services: ServiceFactory) -> OrderService:
    return services.order_service


@pytest.fixture
async def flat_store(services: ServiceFactory, store):
    """Store without markup"""
    await services.pricing_service.update_operation_cost(store.id, 0)
    return store


@pytest.fixture
async def order(order_service: OrderService, flat_store, customer, products):
    """2 x Hex Nut at 50 + 1 x Washer at 30"""
    return await order_service.create_order(
        customer.id,
        [OrderLineRequest(products[1].id, 2), OrderLineRequest(products[2].id, 1)],
        placed_by=77,
    )


async def bump_version(db, order_id: int) -> None:
    """Simulate a concurrent writer"""
    await db.connection.execute("UPDATE orders SET version = version + 1 WHERE id = ?", (order_id,))
    await db.connection.commit()


class TestCreateOrder:
    """Tests for order creation"""

    async def test_total(self, order):
        """2 x 50.00 + 1 x 30.00 = 130.00"""
        assert order.id is not None
        assert order.status == OrderStatus.REQUESTED
        assert order.total == Decimal("130.00")

    async def test_uses_active_overrides(self, order_service: OrderService, services, customer, products):
        await services.pricing_service.assign_override(customer.id, products[0].id, discount_percent=10)

        created = await order_service.create_order(customer.id, [OrderLineRequest(products[0].id, 1)])

        assert created.line_items[0].unit_price == Decimal("108.00")
        assert created.line_items[0].price_source == "discount"

    async def test_empty_order(self, order_service: OrderService, customer):
        with pytest.raises(EmptyOrder):
            await order_service.create_order(customer.id, [])

    async def test_invalid_quantity(self, order_service: OrderService, customer, products):
        with pytest.raises(InvalidQuantity):
            await order_service.create_order(customer.id, [OrderLineRequest(products[0].id, 0)])

    async def test_unknown_customer(self, order_service: OrderService, products):
        with pytest.raises(EntityNotFoundError):
            await order_service.create_order(999, [OrderLineRequest(products[0].id, 1)])

    async def test_product_from_other_store(self, order_service: OrderService, catalog_repo, customer):
        other_store = await catalog_repo.create_store("Other Depot")
        foreign = await catalog_repo.create_product(other_store.id, "Foreign Item", Decimal("10"))

        with pytest.raises(InvalidPricingInput):
            await order_service.create_order(customer.id, [OrderLineRequest(foreign.id, 1)])
        assert await order_service.list_orders(customer.store_id) == []

    async def test_hidden_product_rejected(self, order_service: OrderService, services, customer, products):
        """A product hidden from the customer cannot be ordered at its hidden price"""
        await services.pricing_service.assign_override(
            customer.id, products[0].id, fixed_price=5, visible=False
        )
        catalog = await services.pricing_service.get_customer_catalog(customer.id)
        assert products[0].id not in [entry.product.id for entry in catalog]

        with pytest.raises(InvalidPricingInput) as exc_info:
            await order_service.create_order(
                customer.id, [OrderLineRequest(products[1].id, 1), OrderLineRequest(products[0].id, 3)]
            )
        assert exc_info.value.field == "product_id"
        assert exc_info.value.value == products[0].id
        assert await order_service.list_orders(customer.store_id) == []

    async def test_expired_hidden_override_no_longer_hides(
        self, order_service: OrderService, services, customer, products
    ):
        await services.pricing_service.assign_override(
            customer.id,
            products[0].id,
            fixed_price=5,
            visible=False,
            effective_to=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )

        created = await order_service.create_order(customer.id, [OrderLineRequest(products[0].id, 1)])

        assert created.line_items[0].unit_price == Decimal("120.00")
        assert created.line_items[0].price_source == "markup"


class TestLifecycle:
    """Tests for status changes on stored orders"""

    async def test_skip_rejected_then_steps(self, order_service: OrderService, order):
        """PENDING -> SHIPPED fails, PROCESSING -> SHIPPED succeeds"""
        await order_service.advance_status(order.id, OrderStatus.PENDING)

        with pytest.raises(IllegalTransition):
            await order_service.advance_status(order.id, OrderStatus.SHIPPED)
        assert (await order_service.get_order(order.id)).status == OrderStatus.PENDING

        await order_service.advance_status(order.id, "processing")
        shipped = await order_service.advance_status(order.id, 3, changed_by=12, notes="Truck 4")

        assert shipped.status == OrderStatus.SHIPPED
        stored = await order_service.get_order(order.id)
        assert stored.status == OrderStatus.SHIPPED
        assert stored.status_history[-1].notes == "Truck 4"
        assert len(stored.status_history) == 4

    async def test_cancel_from_processing_is_final(self, order_service: OrderService, order):
        await order_service.advance_status(order.id, OrderStatus.PENDING)
        await order_service.advance_status(order.id, OrderStatus.PROCESSING)

        cancelled = await order_service.cancel(order.id, changed_by=3, reason="Out of stock")

        assert cancelled.status == OrderStatus.CANCELLED
        for target in OrderStatus.all_statuses():
            with pytest.raises(IllegalTransition):
                await order_service.advance_status(order.id, target)
        with pytest.raises(IllegalTransition):
            await order_service.cancel(order.id)

    async def test_full_path_to_completed(self, order_service: OrderService, order):
        for target in ["PENDING", "PROCESSING", "SHIPPED", "PI", "COMPLETED"]:
            await order_service.advance_status(order.id, target)

        stored = await order_service.get_order(order.id)
        assert stored.is_terminal
        assert await order_service.get_available_transitions(order.id) == []

    async def test_available_transitions(self, order_service: OrderService, order):
        assert await order_service.get_available_transitions(order.id) == [
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
        ]

    async def test_unknown_order(self, order_service: OrderService):
        with pytest.raises(EntityNotFoundError):
            await order_service.advance_status(404, OrderStatus.PENDING)

    async def test_list_orders(self, order_service: OrderService, order, customer, products):
        other = await order_service.create_order(customer.id, [OrderLineRequest(products[0].id, 1)])
        await order_service.cancel(other.id)

        all_orders = await order_service.list_orders(customer.store_id)
        open_orders = await order_service.list_orders(customer.store_id, open_only=True)
        customer_orders = await order_service.list_customer_orders(customer.id, open_only=True)

        assert {o.id for o in all_orders} == {order.id, other.id}
        assert [o.id for o in open_orders] == [order.id]
        assert [o.id for o in customer_orders] == [order.id]


class TestLockedPrices:
    """Locked prices survive later pricing changes"""

    async def test_pricing_edits_do_not_touch_existing_orders(
        self, order_service: OrderService, services, order, customer, products, flat_store
    ):
        confirmed = await order_service.advance_status(order.id, OrderStatus.PENDING)
        assert confirmed.pricing_locked_at is not None

        await services.pricing_service.update_operation_cost(flat_store.id, Decimal("50"))
        await services.pricing_service.assign_override(customer.id, products[1].id, fixed_price=Decimal("1"))

        stored = await order_service.get_order(order.id)
        assert [item.unit_price for item in stored.line_items] == [Decimal("50.00"), Decimal("30.00")]
        assert stored.total == Decimal("130.00")

        fresh = await order_service.create_order(
            customer.id, [OrderLineRequest(products[1].id, 2), OrderLineRequest(products[2].id, 1)]
        )
        assert fresh.total == Decimal("2.00") + Decimal("45.00")


class TestConflictRetry:
    """Optimistic locking retries in the service"""

    async def test_retry_reapplies_after_reload(self, order_service: OrderService, db, order, monkeypatch):
        repo = order_service.order_repo
        real_load = repo.load_order
        calls = []

        async def racing_load(order_id):
            loaded = await real_load(order_id)
            calls.append(order_id)
            if len(calls) == 1:
                await bump_version(db, order_id)
            return loaded

        monkeypatch.setattr(repo, "load_order", racing_load)

        saved = await order_service.advance_status(order.id, OrderStatus.PENDING)

        assert len(calls) == 2
        assert saved.status == OrderStatus.PENDING
        stored = await real_load(order.id)
        assert stored.version == 3
        assert [h.new_status for h in stored.status_history] == [OrderStatus.REQUESTED, OrderStatus.PENDING]

    async def test_illegal_transition_after_reload(
        self, order_service: OrderService, order, monkeypatch
    ):
        """A concurrent cancel wins, the retried advance is illegal"""
        repo = order_service.order_repo
        real_load = repo.load_order
        calls = []

        async def racing_load(order_id):
            loaded = await real_load(order_id)
            calls.append(order_id)
            if len(calls) == 1:
                competitor = await real_load(order_id)
                competitor.cancel(reason="Cancelled by customer")
                await repo.save_order(competitor)
            return loaded

        monkeypatch.setattr(repo, "load_order", racing_load)

        with pytest.raises(IllegalTransition):
            await order_service.advance_status(order.id, OrderStatus.PENDING)

        stored = await real_load(order.id)
        assert stored.status == OrderStatus.CANCELLED

    async def test_conflict_after_all_attempts(self, services: ServiceFactory, db, order, monkeypatch):
        service = OrderService(
            services.order_repository,
            services.catalog_repository,
            services.override_repository,
            max_attempts=2,
        )
        repo = service.order_repo
        real_load = repo.load_order

        async def always_racing_load(order_id):
            loaded = await real_load(order_id)
            await bump_version(db, order_id)
            return loaded

        monkeypatch.setattr(repo, "load_order", always_racing_load)

        with pytest.raises(ConcurrencyConflict):
            await service.advance_status(order.id, OrderStatus.PENDING)
