# backend/services/order_status.py
r"""
Order lifecycle: the fixed set of statuses, their ordering on the tracking
ladder and the rule deciding which transitions a seller may request.

    pending -> confirmed -> processing -> shipped -> delivered
         \__________\___________\___________\-----> cancelled

delivered and cancelled are terminal.
"""

from enum import Enum
from typing import Optional

from services.errors import ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


FORWARD_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
INITIAL_STATUS = OrderStatus.PENDING

POLICY_GUARDED = "guarded"
POLICY_PERMISSIVE = "permissive"
TRANSITION_POLICIES = (POLICY_GUARDED, POLICY_PERMISSIVE)


def parse_status(value) -> OrderStatus:
    """Normalise a raw value to an OrderStatus or raise ValidationError."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status '{value}'. Allowed: {allowed}")


def ordinal(status) -> Optional[int]:
    """Position on the forward ladder (pending=0 ... delivered=4); None for cancelled."""
    status = parse_status(status)
    if status in FORWARD_STATUSES:
        return FORWARD_STATUSES.index(status)
    return None


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_transition(current, target, policy: str = POLICY_GUARDED) -> bool:
    current = parse_status(current)
    target = parse_status(target)
    if current == target:
        return True
    if policy == POLICY_PERMISSIVE:
        return True
    if current in TERMINAL_STATUSES:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    # forward jumps are allowed (pending -> shipped), backward moves are not
    return ordinal(target) > ordinal(current)


def check_transition(current, target, policy: str = POLICY_GUARDED) -> OrderStatus:
    """Validate a requested transition and return the parsed target status."""
    if policy not in TRANSITION_POLICIES:
        raise ValueError(f"Unknown transition policy: {policy}")
    target = parse_status(target)
    if not can_transition(current, target, policy):
        raise ValidationError(
            f"Cannot change order status from '{parse_status(current).value}' to '{target.value}'"
        )
    return target
