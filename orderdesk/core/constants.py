"""
Application constants - order statuses and price sources
"""

from enum import Enum


class OrderStatus(Enum):
    """Order lifecycle statuses (value is the numeric code stored in the DB)"""

    REQUESTED = 0  # Submitted by the customer, awaiting confirmation
    PENDING = 1  # Confirmed by the operator, prices locked
    PROCESSING = 2  # Fulfillment started
    SHIPPED = 3  # Goods dispatched
    PI = 4  # Proforma / invoice stage
    COMPLETED = 5  # Invoice settled
    CANCELLED = 6  # Cancelled from any open state

    @property
    def code(self) -> int:
        """Numeric status code"""
        return self.value

    @property
    def label(self) -> str:
        """Human readable label"""
        return STATUS_LABELS[self]

    @property
    def variant(self) -> str:
        """Badge variant used by the dashboard"""
        return STATUS_VARIANTS[self]

    @classmethod
    def all_statuses(cls) -> list["OrderStatus"]:
        """List of all statuses ordered by code"""
        return sorted(cls, key=lambda status: status.code)

    @classmethod
    def from_code(cls, code: int) -> "OrderStatus":
        """
        Status by numeric code

        Raises:
            ValueError: Unknown code
        """
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown order status code: {code!r}") from None

    @classmethod
    def parse(cls, value: "OrderStatus | int | str") -> "OrderStatus":
        """
        Parse a status from an enum member, a numeric code or a name

        Accepts "PENDING", "pending", 1 and "1".

        Raises:
            ValueError: Value does not name a status
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown order status: {value!r}")
        if isinstance(value, int):
            return cls.from_code(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.from_code(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown order status: {value!r}")

    @classmethod
    def get_status_name(cls, status: "OrderStatus | int | str") -> str:
        """Label for a status, falls back to the raw value"""
        try:
            return cls.parse(status).label
        except ValueError:
            return str(status)


STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.REQUESTED: "Requested",
    OrderStatus.PENDING: "Pending",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.PI: "PI",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.CANCELLED: "Cancelled",
}

STATUS_VARIANTS: dict[OrderStatus, str] = {
    OrderStatus.REQUESTED: "warning",
    OrderStatus.PENDING: "secondary",
    OrderStatus.PROCESSING: "info",
    OrderStatus.SHIPPED: "purple",
    OrderStatus.PI: "indigo",
    OrderStatus.COMPLETED: "success",
    OrderStatus.CANCELLED: "destructive",
}

COMPLETED_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class PriceSource:
    """Where a line item's locked unit price came from"""

    MARKUP = "markup"  # Base price + store operation cost
    FIXED = "fixed"  # Customer fixed-price override
    DISCOUNT = "discount"  # Customer discount override on the marked-up price

    @classmethod
    def all_sources(cls) -> list[str]:
        """List of all price sources"""
        return [cls.MARKUP, cls.FIXED, cls.DISCOUNT]
