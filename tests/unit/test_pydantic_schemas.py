"""
Tests for pydantic schemas
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from orderdesk.core.constants import OrderStatus
from orderdesk.database.models import Product
from orderdesk.domain import DiscountOverride, FixedPriceOverride, OrderLineRequest, create_order
from orderdesk.domain.pricing import resolve_price
from orderdesk.schemas import (
    OrderCreateSchema,
    OrderSchema,
    OrderStatusUpdateSchema,
    PriceQuoteSchema,
    PricingOverrideSchema,
    ProductSchema,
)


class TestPricingOverrideSchema:
    """Tests for PricingOverrideSchema"""

    def test_fixed_price(self):
        schema = PricingOverrideSchema(customer_id=1, product_id=2, fixed_price="95.50")
        override = schema.to_override()

        assert isinstance(override, FixedPriceOverride)
        assert override.price == Decimal("95.50")
        assert override.visible is True

    def test_discount(self):
        schema = PricingOverrideSchema(customer_id=1, product_id=2, discount_percent=15, visible=False)
        override = schema.to_override()

        assert isinstance(override, DiscountOverride)
        assert override.percentage == Decimal("15")
        assert override.visible is False

    def test_both_modes_rejected(self):
        with pytest.raises(ValidationError, match="Exactly one"):
            PricingOverrideSchema(customer_id=1, product_id=2, fixed_price=10, discount_percent=5)

    def test_no_mode_rejected(self):
        with pytest.raises(ValidationError, match="Exactly one"):
            PricingOverrideSchema(customer_id=1, product_id=2)

    @pytest.mark.parametrize("field,value", [("fixed_price", -1), ("discount_percent", 101)])
    def test_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            PricingOverrideSchema(customer_id=1, product_id=2, **{field: value})

    def test_from_override(self):
        expiry = datetime(2026, 12, 31, tzinfo=timezone.utc)
        override = DiscountOverride(
            customer_id=3, product_id=4, percentage=Decimal("7.5"), effective_to=expiry
        )

        schema = PricingOverrideSchema.from_override(override)

        assert schema.discount_percent == Decimal("7.5")
        assert schema.fixed_price is None
        assert schema.effective_to == expiry


class TestPriceQuoteSchema:
    def test_from_breakdown(self):
        breakdown = resolve_price(Decimal("100"), Decimal("20"))
        quote = PriceQuoteSchema.from_breakdown(5, breakdown)

        assert quote.product_id == 5
        assert quote.final_price == Decimal("120.00")
        assert quote.price_source == "markup"


class TestOrderCreateSchema:
    """Tests for OrderCreateSchema"""

    def test_valid_cart(self):
        schema = OrderCreateSchema(
            customer_id=1,
            line_items=[{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}],
        )
        assert schema.to_requests() == [OrderLineRequest(1, 2), OrderLineRequest(2, 1)]

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreateSchema(customer_id=1, line_items=[])

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError):
            OrderCreateSchema(customer_id=1, line_items=[{"product_id": 1, "quantity": quantity}])


class TestOrderStatusUpdateSchema:
    """Tests for OrderStatusUpdateSchema"""

    @pytest.mark.parametrize("value", ["SHIPPED", "shipped", 3, "3"])
    def test_status_by_name_or_code(self, value):
        assert OrderStatusUpdateSchema(status=value).status == OrderStatus.SHIPPED

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            OrderStatusUpdateSchema(status="archived")

    def test_blank_notes_dropped(self):
        assert OrderStatusUpdateSchema(status="PI", notes="   ").notes is None


class TestOrderSchema:
    def test_from_order(self):
        now = datetime(2026, 2, 1, tzinfo=timezone.utc)
        order = create_order(
            1,
            2,
            [OrderLineRequest(7, 3)],
            base_prices={7: Decimal("10")},
            operation_cost_percentage=Decimal("10"),
            now=now,
        )

        schema = OrderSchema.from_order(order)

        assert schema.status == "REQUESTED"
        assert schema.status_code == 0
        assert schema.status_label == "Requested"
        assert schema.total == Decimal("33.00")
        assert schema.line_items[0].unit_price == Decimal("11.00")
        assert schema.line_items[0].subtotal == Decimal("33.00")
        assert schema.status_history[0].new_status == "REQUESTED"
        assert schema.created_at == now


class TestProductSchema:
    def test_from_product(self):
        product = Product(id=4, store_id=1, name="Hex Nut", base_price=Decimal("50"), sku="HN")
        schema = ProductSchema.from_product(product)

        assert schema.base_price == Decimal("50")
        assert schema.sku == "HN"
