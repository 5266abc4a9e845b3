"""Pydantic schemas for products, price overrides and price quotes"""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from orderdesk.database.models import Product
from orderdesk.domain.pricing import (
    DiscountOverride,
    FixedPriceOverride,
    PriceBreakdown,
    PricingOverride,
)


class ProductSchema(BaseModel):
    """Product record"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: int
    name: str
    sku: str | None = None
    base_price: Decimal = Field(..., ge=0, description="Base unit price")

    @classmethod
    def from_product(cls, product: Product) -> "ProductSchema":
        return cls.model_validate(product)


class PricingOverrideSchema(BaseModel):
    """
    Override input and output record

    Exactly one of fixed_price and discount_percent is set.
    """

    customer_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    fixed_price: Decimal | None = Field(None, ge=0, description="Fixed unit price")
    discount_percent: Decimal | None = Field(
        None, ge=0, le=100, description="Discount off the marked-up price, in percent"
    )
    visible: bool = Field(True, description="Offer the product in the customer catalog")
    effective_to: datetime | None = Field(None, description="Expiry, none means no expiry")

    @model_validator(mode="after")
    def validate_exactly_one_price(self) -> "PricingOverrideSchema":
        """One pricing mode per override"""
        has_fixed = self.fixed_price is not None
        has_discount = self.discount_percent is not None
        if has_fixed == has_discount:
            raise ValueError("Exactly one of fixed_price or discount_percent must be set")
        return self

    def to_override(self) -> PricingOverride:
        if self.fixed_price is not None:
            return FixedPriceOverride(
                customer_id=self.customer_id,
                product_id=self.product_id,
                price=self.fixed_price,
                visible=self.visible,
                effective_to=self.effective_to,
            )
        return DiscountOverride(
            customer_id=self.customer_id,
            product_id=self.product_id,
            percentage=self.discount_percent,
            visible=self.visible,
            effective_to=self.effective_to,
        )

    @classmethod
    def from_override(cls, override: PricingOverride) -> "PricingOverrideSchema":
        if isinstance(override, FixedPriceOverride):
            return cls(
                customer_id=override.customer_id,
                product_id=override.product_id,
                fixed_price=override.price,
                visible=override.visible,
                effective_to=override.effective_to,
            )
        return cls(
            customer_id=override.customer_id,
            product_id=override.product_id,
            discount_percent=override.percentage,
            visible=override.visible,
            effective_to=override.effective_to,
        )


class PriceQuoteSchema(BaseModel):
    """Resolved price of a product for a customer"""

    product_id: int
    base_price: Decimal
    operation_cost_percentage: Decimal
    markup_amount: Decimal
    marked_up_price: Decimal
    final_price: Decimal
    override_applied: bool
    override_type: str | None = None
    price_source: str

    @classmethod
    def from_breakdown(cls, product_id: int, breakdown: PriceBreakdown) -> "PriceQuoteSchema":
        return cls(
            product_id=product_id,
            base_price=breakdown.base_price,
            operation_cost_percentage=breakdown.operation_cost_percentage,
            markup_amount=breakdown.markup_amount,
            marked_up_price=breakdown.marked_up_price,
            final_price=breakdown.final_price,
            override_applied=breakdown.override_applied,
            override_type=breakdown.override_type,
            price_source=breakdown.price_source,
        )
