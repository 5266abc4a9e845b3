"""
State machine validating order status transitions
"""

from dataclasses import dataclass

from orderdesk.core.constants import OrderStatus
from orderdesk.domain.exceptions import IllegalTransition


@dataclass
class OrderStateTransitionResult:
    """Result of a transition check"""

    is_valid: bool
    error_message: str | None = None
    locks_pricing: bool = False


class OrderStateMachine:
    """
    Order lifecycle

    Transition graph:

    REQUESTED → PENDING → PROCESSING → SHIPPED → PI → COMPLETED
        ↓          ↓           ↓          ↓       ↓
                          CANCELLED

    Every forward step is explicit, no skipping. COMPLETED and CANCELLED are
    terminal.
    """

    TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
        OrderStatus.REQUESTED: frozenset(
            {
                OrderStatus.PENDING,  # Operator confirms, prices locked
                OrderStatus.CANCELLED,
            }
        ),
        OrderStatus.PENDING: frozenset(
            {
                OrderStatus.PROCESSING,  # Fulfillment begins
                OrderStatus.CANCELLED,
            }
        ),
        OrderStatus.PROCESSING: frozenset(
            {
                OrderStatus.SHIPPED,  # Goods dispatched
                OrderStatus.CANCELLED,
            }
        ),
        OrderStatus.SHIPPED: frozenset(
            {
                OrderStatus.PI,  # Proforma / invoice issued
                OrderStatus.CANCELLED,
            }
        ),
        OrderStatus.PI: frozenset(
            {
                OrderStatus.COMPLETED,  # Invoice settled
                OrderStatus.CANCELLED,
            }
        ),
        OrderStatus.COMPLETED: frozenset(),  # Terminal
        OrderStatus.CANCELLED: frozenset(),  # Terminal
    }

    # Edge on which line item prices are locked in
    PRICING_LOCK_TRANSITION: tuple[OrderStatus, OrderStatus] = (
        OrderStatus.REQUESTED,
        OrderStatus.PENDING,
    )

    INITIAL_STATE = OrderStatus.REQUESTED

    DESCRIPTIONS: dict[tuple[OrderStatus, OrderStatus], str] = {
        (OrderStatus.REQUESTED, OrderStatus.PENDING): "Order confirmed, prices locked",
        (OrderStatus.PENDING, OrderStatus.PROCESSING): "Fulfillment started",
        (OrderStatus.PROCESSING, OrderStatus.SHIPPED): "Goods dispatched",
        (OrderStatus.SHIPPED, OrderStatus.PI): "Proforma invoice issued",
        (OrderStatus.PI, OrderStatus.COMPLETED): "Invoice settled, order closed",
    }

    @classmethod
    def can_transition(cls, from_state: OrderStatus, to_state: OrderStatus) -> bool:
        """
        Check whether a single step from one status to another is allowed

        Args:
            from_state: Current status
            to_state: Target status

        Returns:
            True if the adjacency map has the edge. Re-requesting the current
            status is not an edge.
        """
        return to_state in cls.TRANSITIONS.get(from_state, frozenset())

    @classmethod
    def validate_transition(
        cls,
        from_state: OrderStatus,
        to_state: OrderStatus,
        raise_exception: bool = True,
    ) -> OrderStateTransitionResult:
        """
        Validate a status change

        Args:
            from_state: Current status
            to_state: Target status
            raise_exception: Raise instead of returning an invalid result

        Returns:
            OrderStateTransitionResult

        Raises:
            IllegalTransition: If the change is not allowed and raise_exception=True
        """
        if cls.can_transition(from_state, to_state):
            return OrderStateTransitionResult(
                is_valid=True,
                locks_pricing=cls.locks_pricing(from_state, to_state),
            )

        if from_state == to_state:
            reason = f"order is already '{from_state.name}'"
        elif cls.is_terminal_state(from_state):
            reason = f"status '{from_state.name}' is terminal"
        else:
            allowed = ", ".join(s.name for s in cls.get_available_transitions(from_state))
            reason = f"allowed transitions: {allowed}"

        if raise_exception:
            raise IllegalTransition(from_state, to_state, reason)

        return OrderStateTransitionResult(
            is_valid=False,
            error_message=str(IllegalTransition(from_state, to_state, reason)),
        )

    @classmethod
    def get_available_transitions(cls, from_state: OrderStatus) -> list[OrderStatus]:
        """
        Legal targets from a status, ordered by status code

        Args:
            from_state: Current status

        Returns:
            List of statuses
        """
        return sorted(cls.TRANSITIONS.get(from_state, frozenset()), key=lambda s: s.code)

    @classmethod
    def is_terminal_state(cls, state: OrderStatus) -> bool:
        """True if no transition leaves this status"""
        return len(cls.TRANSITIONS.get(state, frozenset())) == 0

    @classmethod
    def locks_pricing(cls, from_state: OrderStatus, to_state: OrderStatus) -> bool:
        """True if this edge carries the pricing-lock side effect"""
        return (from_state, to_state) == cls.PRICING_LOCK_TRANSITION

    @classmethod
    def get_transition_description(cls, from_state: OrderStatus, to_state: OrderStatus) -> str:
        """
        Human readable description of an edge

        Args:
            from_state: Initial status
            to_state: Target status

        Returns:
            Description
        """
        if to_state == OrderStatus.CANCELLED:
            return f"Order cancelled while {from_state.label.lower()}"
        return cls.DESCRIPTIONS.get(
            (from_state, to_state),
            f"Transition from {from_state.label} to {to_state.label}",
        )

    @classmethod
    def transition(cls, from_state: OrderStatus, to_state: OrderStatus) -> OrderStateTransitionResult:
        """
        Alias for validate_transition that always raises

        Raises:
            IllegalTransition: If the change is not allowed
        """
        return cls.validate_transition(from_state, to_state, raise_exception=True)
