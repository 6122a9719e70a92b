from datetime import datetime, timezone

import pytest

from ordering.core.errors import InvalidStatusError, InvalidTransitionError
from ordering.models.order import Order
from ordering.services.order_status import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
    ensure_transition,
    set_status,
)


def test_status_transition_rules() -> None:
    assert can_transition("PENDING", "CONFIRMED")
    assert can_transition("CONFIRMED", "CONFIRMED")
    assert can_transition("CONFIRMED", "READY")
    assert can_transition("READY", "DELIVERED")
    assert not can_transition("PENDING", "READY")
    assert not can_transition("PREPARING", "CONFIRMED")


def test_terminal_statuses_have_no_exits() -> None:
    for status in TERMINAL_STATUSES:
        for target in ("PENDING", "CONFIRMED", "CANCELLED", "REFUNDED", "DELIVERED"):
            assert not can_transition(status, target)
    assert set(ACTIVE_STATUSES).isdisjoint(TERMINAL_STATUSES)


def test_out_for_delivery_only_for_delivery_orders() -> None:
    assert can_transition("READY", "OUT_FOR_DELIVERY", order_type="DELIVERY")
    assert not can_transition("READY", "OUT_FOR_DELIVERY", order_type="PICKUP")


def test_ensure_transition_raises_without_mutating() -> None:
    order = Order(status="PENDING", order_type="PICKUP")

    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(order, "DELIVERED")
    assert exc_info.value.message == "Cannot change order status from PENDING to DELIVERED"
    assert order.status == "PENDING"

    with pytest.raises(InvalidStatusError):
        ensure_transition(order, "LOST")


def test_set_status_stamps_matching_timestamp() -> None:
    order = Order(status="CONFIRMED", order_type="DELIVERY")
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    stamped = set_status(order, "PREPARING", now)

    assert stamped == "preparing_at"
    assert order.status == "PREPARING"
    assert order.preparing_at == now
    assert order.status_updated_at == now
