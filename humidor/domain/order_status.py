# humidor/domain/order_status.py
"""
Order status state machine.

ALLOWED_TRANSITIONS is the only copy of the transition table. The API serves
it to clients (GET /orders/status-transitions), so admin screens never keep
their own version.
"""
from enum import Enum
from typing import Dict, FrozenSet, List

from humidor.domain.errors import InvalidTransitionError


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    try:
        current_status = OrderStatus(current)
        new_status = OrderStatus(new)
    except ValueError:
        return False
    return new_status in ALLOWED_TRANSITIONS[current_status]


def next_statuses(current: str) -> List[str]:
    """Statuses reachable from ``current`` in declaration order."""
    try:
        allowed = ALLOWED_TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return []
    return [s.value for s in OrderStatus if s in allowed]


def is_terminal(current: str) -> bool:
    return not ALLOWED_TRANSITIONS[OrderStatus(current)]


def transition_table() -> Dict[str, List[str]]:
    return {s.value: next_statuses(s.value) for s in OrderStatus}


def ensure_transition(current: str, new: str) -> None:
    """Raise InvalidTransitionError unless ``current -> new`` is in the table."""
    current = current.value if isinstance(current, Enum) else current
    new = new.value if isinstance(new, Enum) else new
    if not can_transition(current, new):
        raise InvalidTransitionError(
            f"Cannot change order status from {current} to {new}",
            current_status=current,
            requested_status=new,
            allowed=next_statuses(current),
        )
