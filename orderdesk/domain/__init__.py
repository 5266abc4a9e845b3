"""
Domain layer: pricing rules and the order lifecycle
"""

from orderdesk.domain.exceptions import (
    DuplicateOverride,
    EmptyOrder,
    IllegalTransition,
    InvalidPricingInput,
    InvalidQuantity,
    OrderDeskError,
)
from orderdesk.domain.order import (
    LineItem,
    Order,
    OrderLineRequest,
    StatusHistoryEntry,
    advance_status,
    cancel,
    create_order,
)
from orderdesk.domain.order_state_machine import OrderStateMachine, OrderStateTransitionResult
from orderdesk.domain.pricing import (
    DiscountOverride,
    FixedPriceOverride,
    PriceBreakdown,
    PricingOverride,
    resolve_price,
)


__all__ = [
    "DiscountOverride",
    "DuplicateOverride",
    "EmptyOrder",
    "FixedPriceOverride",
    "IllegalTransition",
    "InvalidPricingInput",
    "InvalidQuantity",
    "LineItem",
    "Order",
    "OrderDeskError",
    "OrderLineRequest",
    "OrderStateMachine",
    "OrderStateTransitionResult",
    "PriceBreakdown",
    "PricingOverride",
    "StatusHistoryEntry",
    "advance_status",
    "cancel",
    "create_order",
    "resolve_price",
]
