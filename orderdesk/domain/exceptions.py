"""
Domain exceptions

Raised synchronously at the call that violated a business rule. Each one keeps
the offending field or transition as attributes so the calling layer can build
an actionable message.
"""

from typing import Any

from orderdesk.core.constants import OrderStatus


class OrderDeskError(Exception):
    """Base class for every orderdesk error"""


class InvalidPricingInput(OrderDeskError):
    """Bad numeric input to the pricing resolver"""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid pricing input '{field}'={value!r}: {reason}")


class DuplicateOverride(OrderDeskError):
    """An active override already exists for the (customer, product) pair"""

    def __init__(self, customer_id: int, product_id: int):
        self.customer_id = customer_id
        self.product_id = product_id
        super().__init__(
            f"Customer #{customer_id} already has an active price override "
            f"for product #{product_id}"
        )


class IllegalTransition(OrderDeskError):
    """Order status change not allowed by the lifecycle"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, reason: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        message = f"Illegal transition from '{from_status.name}' to '{to_status.name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EmptyOrder(OrderDeskError):
    """Order submitted without line items"""

    def __init__(self, customer_id: int | None = None):
        self.customer_id = customer_id
        super().__init__("Order must contain at least one line item")


class InvalidQuantity(OrderDeskError):
    """Line item quantity is not a positive integer"""

    def __init__(self, product_id: int, quantity: Any):
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(
            f"Quantity for product #{product_id} must be a positive integer, got {quantity!r}"
        )
