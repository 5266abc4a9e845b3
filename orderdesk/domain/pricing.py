"""
Customer-specific price resolution

effective price = base price + store operation cost markup, then replaced by a
fixed-price override or reduced by a discount override. The result is rounded
half-up to the store's currency precision.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import ClassVar, Union

from orderdesk.core.config import Config
from orderdesk.core.constants import PriceSource
from orderdesk.domain.exceptions import InvalidPricingInput


HUNDRED = Decimal("100")


@dataclass(frozen=True)
class _OverrideBase:
    customer_id: int
    product_id: int

    def is_active(self, at: datetime | None = None) -> bool:
        """
        Check whether the override is still in effect

        Args:
            at: Moment to check, defaults to now; naive values are taken as UTC

        Returns:
            True if the override has no expiry or expires after `at`
        """
        effective_to = getattr(self, "effective_to", None)
        if effective_to is None:
            return True
        if at is None:
            at = datetime.now(timezone.utc)
        # naive values are UTC, as stored timestamps
        if effective_to.tzinfo is None:
            effective_to = effective_to.replace(tzinfo=timezone.utc)
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        return effective_to > at


@dataclass(frozen=True)
class FixedPriceOverride(_OverrideBase):
    """Customer pays exactly `price`, the store markup is not applied"""

    kind: ClassVar[str] = PriceSource.FIXED

    price: Decimal
    visible: bool = True
    effective_to: datetime | None = None


@dataclass(frozen=True)
class DiscountOverride(_OverrideBase):
    """Customer gets `percentage` off the marked-up price"""

    kind: ClassVar[str] = PriceSource.DISCOUNT

    percentage: Decimal
    visible: bool = True
    effective_to: datetime | None = None


PricingOverride = Union[FixedPriceOverride, DiscountOverride]


@dataclass(frozen=True)
class PriceBreakdown:
    """Audit record of a resolved price"""

    base_price: Decimal
    operation_cost_percentage: Decimal
    markup_amount: Decimal
    marked_up_price: Decimal
    final_price: Decimal
    override_applied: bool = False
    override_type: str | None = None

    @property
    def price_source(self) -> str:
        """PriceSource value for the line item snapshot"""
        return self.override_type or PriceSource.MARKUP


def to_decimal(value, field: str) -> Decimal:
    """
    Convert a numeric input to Decimal

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        InvalidPricingInput: Value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidPricingInput(field, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidPricingInput(field, value, "must be a number") from None
    else:
        raise InvalidPricingInput(field, value, "must be a number")

    if not result.is_finite():
        raise InvalidPricingInput(field, value, "must be a finite number")
    return result


def quantize_money(amount: Decimal, precision: int | None = None) -> Decimal:
    """Round half-up to `precision` decimal places (Config.CURRENCY_PRECISION by default)"""
    if precision is None:
        precision = Config.CURRENCY_PRECISION
    with localcontext() as ctx:
        # quantize needs every integer digit plus the fractional ones
        ctx.prec = max(ctx.prec, amount.adjusted() + precision + 2)
        return amount.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def validate_override(override: PricingOverride) -> None:
    """
    Check override values

    Raises:
        InvalidPricingInput: Negative fixed price or discount outside [0, 100]
    """
    if isinstance(override, FixedPriceOverride):
        price = to_decimal(override.price, "fixed_price")
        if price < 0:
            raise InvalidPricingInput("fixed_price", override.price, "must be non-negative")
    elif isinstance(override, DiscountOverride):
        percentage = to_decimal(override.percentage, "discount_percent")
        if percentage < 0 or percentage > HUNDRED:
            raise InvalidPricingInput(
                "discount_percent", override.percentage, "must be between 0 and 100"
            )
    else:
        raise InvalidPricingInput("override", override, "unsupported override type")


def resolve_price(
    base_price,
    operation_cost_percentage,
    override: PricingOverride | None = None,
    precision: int | None = None,
) -> PriceBreakdown:
    """
    Resolve the unit price a customer pays

    Args:
        base_price: Product base price, >= 0
        operation_cost_percentage: Store markup in percent (15 means +15%), >= 0
        override: Customer override or None
        precision: Decimal places of the store currency

    Returns:
        PriceBreakdown with the final price

    Raises:
        InvalidPricingInput: Negative inputs or discount outside [0, 100]
    """
    base = to_decimal(base_price, "base_price")
    if base < 0:
        raise InvalidPricingInput("base_price", base_price, "must be non-negative")

    percentage = to_decimal(operation_cost_percentage, "operation_cost_percentage")
    if percentage < 0:
        raise InvalidPricingInput(
            "operation_cost_percentage", operation_cost_percentage, "must be non-negative"
        )

    if override is not None:
        validate_override(override)

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, base.adjusted() + max(percentage.adjusted(), 0) + 30)
        marked_up = base * (1 + percentage / HUNDRED)
        markup_amount = marked_up - base

        if override is None:
            final = marked_up
        elif isinstance(override, FixedPriceOverride):
            final = to_decimal(override.price, "fixed_price")
        else:
            discount = to_decimal(override.percentage, "discount_percent")
            final = marked_up * (1 - discount / HUNDRED)

    marked_up_rounded = quantize_money(marked_up, precision)
    return PriceBreakdown(
        base_price=base,
        operation_cost_percentage=percentage,
        markup_amount=quantize_money(markup_amount, precision),
        marked_up_price=marked_up_rounded,
        final_price=quantize_money(final, precision),
        override_applied=override is not None,
        override_type=override.kind if override is not None else None,
    )
