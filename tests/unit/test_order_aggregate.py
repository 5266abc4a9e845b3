"""
Tests for the Order aggregate
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from orderdesk.core.constants import OrderStatus
from orderdesk.domain import (
    DiscountOverride,
    EmptyOrder,
    FixedPriceOverride,
    IllegalTransition,
    InvalidPricingInput,
    InvalidQuantity,
    OrderLineRequest,
    advance_status,
    cancel,
    create_order,
)


NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

BASE_PRICES = {1: Decimal("50"), 2: Decimal("30"), 3: Decimal("100")}


def make_order(items=None, **kwargs):
    items = items if items is not None else [OrderLineRequest(1, 2), OrderLineRequest(2, 1)]
    kwargs.setdefault("base_prices", BASE_PRICES)
    kwargs.setdefault("operation_cost_percentage", Decimal("0"))
    kwargs.setdefault("now", NOW)
    return create_order(10, 20, items, **kwargs)


def advance_to(order, *statuses):
    for status in statuses:
        advance_status(order, status)
    return order


class TestCreateOrder:
    """Tests for create_order"""

    def test_total_from_locked_prices(self):
        """2 x 50.00 + 1 x 30.00 = 130.00"""
        order = make_order()

        assert order.status == OrderStatus.REQUESTED
        assert [item.unit_price for item in order.line_items] == [Decimal("50.00"), Decimal("30.00")]
        assert order.total == Decimal("130.00")

    def test_initial_history_entry(self):
        order = make_order(placed_by=7)

        assert len(order.status_history) == 1
        entry = order.status_history[0]
        assert entry.old_status is None
        assert entry.new_status == OrderStatus.REQUESTED
        assert entry.changed_at == NOW
        assert entry.changed_by == 7
        assert order.created_at == NOW

    def test_markup_and_overrides_per_line(self):
        """Each line resolves with the customer's override for its product"""
        overrides = {
            1: DiscountOverride(customer_id=20, product_id=1, percentage=Decimal("10")),
            3: FixedPriceOverride(customer_id=20, product_id=3, price=Decimal("99.50")),
        }
        order = make_order(
            [OrderLineRequest(1, 1), OrderLineRequest(2, 3), OrderLineRequest(3, 2)],
            operation_cost_percentage=Decimal("20"),
            overrides=overrides,
        )

        prices = [(item.unit_price, item.price_source) for item in order.line_items]
        assert prices == [
            (Decimal("54.00"), "discount"),
            (Decimal("36.00"), "markup"),
            (Decimal("99.50"), "fixed"),
        ]
        assert order.total == Decimal("54.00") + Decimal("108.00") + Decimal("199.00")

    def test_empty_order(self):
        with pytest.raises(EmptyOrder):
            make_order([])

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True])
    def test_invalid_quantity(self, quantity):
        """Quantity must be a positive integer"""
        with pytest.raises(InvalidQuantity) as exc_info:
            make_order([OrderLineRequest(1, 1), OrderLineRequest(2, quantity)])
        assert exc_info.value.product_id == 2

    def test_unknown_product(self):
        with pytest.raises(InvalidPricingInput) as exc_info:
            make_order([OrderLineRequest(99, 1)])
        assert exc_info.value.field == "product_id"

    def test_line_items_are_immutable(self):
        order = make_order()
        with pytest.raises(AttributeError):
            order.line_items[0].unit_price = Decimal("1")


class TestAdvanceStatus:
    """Tests for advance_status and cancel"""

    def test_skip_rejected_then_step_allowed(self):
        """PENDING -> SHIPPED fails, PROCESSING -> SHIPPED succeeds"""
        order = advance_to(make_order(), OrderStatus.PENDING)

        with pytest.raises(IllegalTransition):
            advance_status(order, OrderStatus.SHIPPED)
        assert order.status == OrderStatus.PENDING

        advance_to(order, OrderStatus.PROCESSING, OrderStatus.SHIPPED)
        assert order.status == OrderStatus.SHIPPED

    def test_full_path_records_history(self):
        order = advance_to(
            make_order(),
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.PI,
            OrderStatus.COMPLETED,
        )

        assert order.is_terminal
        assert [entry.new_status.code for entry in order.status_history] == [0, 1, 2, 3, 4, 5]

    def test_accepts_code_and_name(self):
        """Targets may be given as a numeric code or a status name"""
        order = make_order()

        order.advance_status(1)
        assert order.status == OrderStatus.PENDING
        assert order.status_history[-1].new_status is OrderStatus.PENDING

        order.advance_status("processing")
        assert order.status == OrderStatus.PROCESSING

    def test_unknown_target_leaves_order_untouched(self):
        order = make_order()

        with pytest.raises(ValueError):
            order.advance_status(9)
        assert order.status == OrderStatus.REQUESTED
        assert len(order.status_history) == 1
        assert order.available_transitions() == []

    def test_rejected_transition_leaves_order_unchanged(self):
        order = make_order()
        history_before = list(order.status_history)

        with pytest.raises(IllegalTransition):
            advance_status(order, OrderStatus.PROCESSING)

        assert order.status == OrderStatus.REQUESTED
        assert order.status_history == history_before
        assert order.pricing_locked_at is None

    def test_confirmation_locks_pricing(self):
        """REQUESTED -> PENDING stamps pricing_locked_at, prices unchanged"""
        order = make_order()
        total = order.total
        locked_at = NOW + timedelta(hours=1)

        order.advance_status(OrderStatus.PENDING, changed_by=3, notes="Confirmed by phone", now=locked_at)

        assert order.prices_locked
        assert order.pricing_locked_at == locked_at
        assert order.total == total
        entry = order.status_history[-1]
        assert (entry.old_status, entry.new_status) == (OrderStatus.REQUESTED, OrderStatus.PENDING)
        assert entry.notes == "Confirmed by phone"

    def test_same_status_rejected(self):
        order = advance_to(make_order(), OrderStatus.PENDING)
        with pytest.raises(IllegalTransition):
            advance_status(order, OrderStatus.PENDING)

    def test_cancel_from_processing_is_final(self):
        """After cancelling, every advance fails"""
        order = advance_to(make_order(), OrderStatus.PENDING, OrderStatus.PROCESSING)

        cancel(order, changed_by=5, reason="Customer withdrew")

        assert order.status == OrderStatus.CANCELLED
        assert order.status_history[-1].notes == "Customer withdrew"
        for target in OrderStatus.all_statuses():
            with pytest.raises(IllegalTransition):
                advance_status(order, target)

    def test_cancel_completed_rejected(self):
        order = advance_to(
            make_order(),
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.PI,
            OrderStatus.COMPLETED,
        )
        with pytest.raises(IllegalTransition, match="terminal"):
            cancel(order)
        assert order.status == OrderStatus.COMPLETED

    def test_cancel_twice_rejected(self):
        order = cancel(make_order())
        with pytest.raises(IllegalTransition):
            cancel(order)
