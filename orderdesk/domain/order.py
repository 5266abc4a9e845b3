"""
Order aggregate: line items priced at creation plus the lifecycle status
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from orderdesk.core.constants import OrderStatus, PriceSource
from orderdesk.domain.exceptions import EmptyOrder, IllegalTransition, InvalidPricingInput, InvalidQuantity
from orderdesk.domain.order_state_machine import OrderStateMachine
from orderdesk.domain.pricing import PricingOverride, resolve_price
from orderdesk.utils.helpers import get_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLineRequest:
    """Requested product and quantity, before pricing"""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class LineItem:
    """Line item with a unit price locked at order creation"""

    product_id: int
    quantity: int
    unit_price: Decimal
    price_source: str = PriceSource.MARKUP
    id: int | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One status change, the first entry has no old status"""

    new_status: OrderStatus
    changed_at: datetime
    old_status: OrderStatus | None = None
    changed_by: int | None = None
    notes: str | None = None


@dataclass
class Order:
    """Order aggregate"""

    store_id: int
    customer_id: int
    line_items: tuple[LineItem, ...]
    status: OrderStatus = OrderStatus.REQUESTED
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pricing_locked_at: datetime | None = None
    placed_by: int | None = None
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    version: int = 1

    @property
    def total(self) -> Decimal:
        """Sum of line item subtotals"""
        return sum((item.subtotal for item in self.line_items), Decimal("0"))

    @property
    def is_terminal(self) -> bool:
        return OrderStateMachine.is_terminal_state(self.status)

    @property
    def prices_locked(self) -> bool:
        return self.pricing_locked_at is not None

    def available_transitions(self) -> list[OrderStatus]:
        """Statuses the order may move to next"""
        return OrderStateMachine.get_available_transitions(self.status)

    def advance_status(
        self,
        target: OrderStatus | int | str,
        changed_by: int | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> "Order":
        """
        Move the order to `target`

        The state is untouched when the transition is rejected.

        Args:
            target: Target status, enum member, code or name
            changed_by: ID of the operator or customer user
            notes: Free text stored in the history entry
            now: Transition timestamp

        Returns:
            The same order, updated

        Raises:
            IllegalTransition: If the lifecycle does not allow the change
            ValueError: `target` does not name a status
        """
        target = OrderStatus.parse(target)
        result = OrderStateMachine.validate_transition(self.status, target)

        now = now or get_now()
        old_status = self.status

        if result.locks_pricing and self.pricing_locked_at is None:
            self.pricing_locked_at = now
            logger.info(f"Order #{self.id}: prices locked, total {self.total}")

        self.status = target
        self.updated_at = now
        self.status_history.append(
            StatusHistoryEntry(
                old_status=old_status,
                new_status=target,
                changed_at=now,
                changed_by=changed_by,
                notes=notes,
            )
        )

        logger.info(f"Order #{self.id} status changed: {old_status.name} → {target.name}")
        return self

    def cancel(
        self,
        changed_by: int | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> "Order":
        """
        Cancel an open order

        Raises:
            IllegalTransition: If the order is already COMPLETED or CANCELLED
        """
        if self.is_terminal:
            raise IllegalTransition(
                self.status, OrderStatus.CANCELLED, f"status '{self.status.name}' is terminal"
            )
        return self.advance_status(OrderStatus.CANCELLED, changed_by=changed_by, notes=reason, now=now)


def _validate_quantity(request: OrderLineRequest) -> None:
    quantity = request.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(request.product_id, quantity)


def create_order(
    store_id: int,
    customer_id: int,
    line_items: Sequence[OrderLineRequest],
    *,
    base_prices: Mapping[int, Decimal],
    operation_cost_percentage,
    overrides: Mapping[int, PricingOverride] | None = None,
    precision: int | None = None,
    placed_by: int | None = None,
    now: datetime | None = None,
) -> Order:
    """
    Create an order in REQUESTED status with every unit price locked

    Args:
        store_id: Store ID
        customer_id: Customer ID
        line_items: Requested products and quantities
        base_prices: Product ID -> base price
        operation_cost_percentage: Store markup in percent
        overrides: Product ID -> customer override in effect right now
        precision: Currency precision
        placed_by: ID of the user submitting the cart
        now: Creation timestamp

    Returns:
        New, unsaved Order

    Raises:
        EmptyOrder: No line items
        InvalidQuantity: A quantity is not a positive integer
        InvalidPricingInput: Unknown product or bad price inputs
    """
    if not line_items:
        raise EmptyOrder(customer_id)

    for request in line_items:
        _validate_quantity(request)

    overrides = overrides or {}
    priced: list[LineItem] = []
    for request in line_items:
        if request.product_id not in base_prices:
            raise InvalidPricingInput("product_id", request.product_id, "no base price known")

        breakdown = resolve_price(
            base_prices[request.product_id],
            operation_cost_percentage,
            overrides.get(request.product_id),
            precision=precision,
        )
        priced.append(
            LineItem(
                product_id=request.product_id,
                quantity=request.quantity,
                unit_price=breakdown.final_price,
                price_source=breakdown.price_source,
            )
        )

    now = now or get_now()
    initial = OrderStateMachine.INITIAL_STATE
    order = Order(
        store_id=store_id,
        customer_id=customer_id,
        line_items=tuple(priced),
        status=initial,
        created_at=now,
        updated_at=now,
        placed_by=placed_by,
        status_history=[
            StatusHistoryEntry(new_status=initial, changed_at=now, changed_by=placed_by)
        ],
    )

    logger.debug(f"Order for customer #{customer_id} priced: {len(priced)} items, total {order.total}")
    return order


def advance_status(
    order: Order,
    target: OrderStatus | int | str,
    changed_by: int | None = None,
    notes: str | None = None,
) -> Order:
    """Move `order` to `target` under the lifecycle rules (see Order.advance_status)"""
    return order.advance_status(target, changed_by=changed_by, notes=notes)


def cancel(order: Order, changed_by: int | None = None, reason: str | None = None) -> Order:
    """Cancellation escape from any open status (see Order.cancel)"""
    return order.cancel(changed_by=changed_by, reason=reason)
