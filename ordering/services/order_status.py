"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from ordering.core.errors import InvalidStatusError, InvalidTransitionError
from ordering.models.order import ORDER_STATUSES, Order

TERMINAL_STATUSES: frozenset[str] = frozenset({"DELIVERED", "CANCELLED", "REFUNDED"})
ACTIVE_STATUSES: tuple[str, ...] = tuple(status for status in ORDER_STATUSES if status not in TERMINAL_STATUSES)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "PENDING": {"CONFIRMED", "CANCELLED", "REFUNDED"},
    # CONFIRMED -> CONFIRMED re-accepts with a new estimate.
    "CONFIRMED": {"CONFIRMED", "PREPARING", "READY", "CANCELLED", "REFUNDED"},
    "PREPARING": {"READY", "CANCELLED", "REFUNDED"},
    "READY": {"OUT_FOR_DELIVERY", "DELIVERED", "CANCELLED", "REFUNDED"},
    "OUT_FOR_DELIVERY": {"DELIVERED", "CANCELLED", "REFUNDED"},
    "DELIVERED": set(),
    "CANCELLED": set(),
    "REFUNDED": set(),
}

STATUS_TIMESTAMPS: dict[str, str] = {
    "CONFIRMED": "confirmed_at",
    "PREPARING": "preparing_at",
    "READY": "ready_at",
    "OUT_FOR_DELIVERY": "out_for_delivery_at",
    "DELIVERED": "delivered_at",
    "CANCELLED": "cancelled_at",
    "REFUNDED": "refunded_at",
}


def can_transition(current: str, new: str, *, order_type: str | None = None) -> bool:
    """Return whether order can move from current to new status."""
    if new == "OUT_FOR_DELIVERY" and order_type is not None and order_type != "DELIVERY":
        return False
    return new in ALLOWED_TRANSITIONS.get(current, set())


def validate_status(value: str) -> str:
    if value not in ORDER_STATUSES:
        raise InvalidStatusError(value)
    return value


def ensure_transition(order: Order, new_status: str) -> None:
    """Raise unless ``order`` may move to ``new_status``; never mutates."""
    validate_status(new_status)
    if not can_transition(order.status, new_status, order_type=order.order_type):
        raise InvalidTransitionError(order.status, new_status)


def set_status(order: Order, new_status: str, now: datetime) -> str | None:
    """Set status and update corresponding timestamps.

    Returns the name of the stamped timestamp attribute.
    """
    order.status = new_status
    order.status_updated_at = now

    timestamp_field = STATUS_TIMESTAMPS.get(new_status)
    if timestamp_field is not None:
        setattr(order, timestamp_field, now)
    return timestamp_field
