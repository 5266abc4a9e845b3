"""Pydantic schemas for order input and output records"""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from orderdesk.core.constants import OrderStatus
from orderdesk.domain.order import LineItem, Order, OrderLineRequest, StatusHistoryEntry


MAX_NOTES_LENGTH = 1000


class LineItemCreateSchema(BaseModel):
    """Requested line item"""

    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity, positive integer")

    def to_request(self) -> OrderLineRequest:
        return OrderLineRequest(product_id=self.product_id, quantity=self.quantity)


class OrderCreateSchema(BaseModel):
    """Cart submitted by a customer"""

    customer_id: int = Field(..., gt=0, description="Customer ID")
    line_items: list[LineItemCreateSchema] = Field(..., min_length=1)
    placed_by: int | None = Field(None, gt=0, description="ID of the submitting user")

    def to_requests(self) -> list[OrderLineRequest]:
        return [item.to_request() for item in self.line_items]


class OrderStatusUpdateSchema(BaseModel):
    """Status change request, status given as name or numeric code"""

    status: OrderStatus
    changed_by: int | None = Field(None, gt=0)
    notes: str | None = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Accept "SHIPPED", "shipped", 3 or "3" """
        return OrderStatus.parse(v)

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class LineItemSchema(BaseModel):
    """Line item with its locked price"""

    id: int | None = None
    product_id: int
    quantity: int
    unit_price: Decimal
    price_source: str
    subtotal: Decimal

    @classmethod
    def from_line_item(cls, item: LineItem) -> "LineItemSchema":
        return cls(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            price_source=item.price_source,
            subtotal=item.subtotal,
        )


class StatusHistorySchema(BaseModel):
    old_status: str | None = None
    new_status: str
    changed_at: datetime
    changed_by: int | None = None
    notes: str | None = None

    @classmethod
    def from_entry(cls, entry: StatusHistoryEntry) -> "StatusHistorySchema":
        return cls(
            old_status=entry.old_status.name if entry.old_status is not None else None,
            new_status=entry.new_status.name,
            changed_at=entry.changed_at,
            changed_by=entry.changed_by,
            notes=entry.notes,
        )


class OrderSchema(BaseModel):
    """Order record returned to callers"""

    id: int | None = None
    store_id: int
    customer_id: int
    status: str
    status_code: int
    status_label: str
    line_items: list[LineItemSchema]
    total: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pricing_locked_at: datetime | None = None
    status_history: list[StatusHistorySchema] = Field(default_factory=list)
    version: int

    @classmethod
    def from_order(cls, order: Order) -> "OrderSchema":
        return cls(
            id=order.id,
            store_id=order.store_id,
            customer_id=order.customer_id,
            status=order.status.name,
            status_code=order.status.code,
            status_label=order.status.label,
            line_items=[LineItemSchema.from_line_item(item) for item in order.line_items],
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
            pricing_locked_at=order.pricing_locked_at,
            status_history=[StatusHistorySchema.from_entry(e) for e in order.status_history],
            version=order.version,
        )
