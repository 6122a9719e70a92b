"""Domain exceptions raised by ordering services.

Each exception carries the HTTP status code the API layer answers with, so
services stay free of FastAPI imports.
"""

from __future__ import annotations

from decimal import Decimal


class OrderingError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(OrderingError):
    """Request is missing required data or carries invalid values."""

    status_code = 400


class InvalidStatusError(ValidationError):
    """Unknown order status value."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Invalid status: {status}")
        self.status = status


class InvalidEstimateError(ValidationError):
    """Estimated preparation time is missing or not positive."""

    def __init__(self) -> None:
        super().__init__("Valid estimated time is required")


class NotFoundError(OrderingError):
    status_code = 404


class InvalidMenuItemError(NotFoundError):
    """Cart references a menu item that does not exist or cannot be ordered."""

    def __init__(self, menu_item_id: int) -> None:
        super().__init__(f"Menu item with ID {menu_item_id} not found")
        self.menu_item_id = menu_item_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, reference: int | str) -> None:
        super().__init__(f"Order {reference} not found")
        self.reference = reference


class InvalidTransitionError(OrderingError):
    """Requested status change is not allowed from the current status."""

    status_code = 409

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot change order status from {current} to {requested}")
        self.current = current
        self.requested = requested


class ConcurrencyError(OrderingError):
    """Invoice counter could not be incremented after retries."""

    status_code = 503


class NotificationError(OrderingError):
    """Rendering or sending a notification failed."""

    status_code = 502


class PaymentMismatchError(OrderingError):
    """Captured payment amount does not match the computed order total."""

    status_code = 422

    def __init__(self, captured: Decimal, expected: Decimal) -> None:
        super().__init__(f"Captured amount {captured} does not match order total {expected}")
        self.captured = captured
        self.expected = expected


class MenuItemNotFoundError(NotFoundError):
    def __init__(self, menu_item_id: int) -> None:
        super().__init__(f"Menu item {menu_item_id} not found")
        self.menu_item_id = menu_item_id


class ConflictError(OrderingError):
    """Write would violate a uniqueness rule."""

    status_code = 409
