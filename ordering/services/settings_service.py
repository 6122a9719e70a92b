"""Restaurant settings helpers."""

from decimal import Decimal

from sqlalchemy.orm import Session

from ordering.models.restaurant import Restaurant

RESTAURANT_ID: int = 1


def get_restaurant(db: Session) -> Restaurant | None:
    return db.get(Restaurant, RESTAURANT_ID)


def get_delivery_fee(db: Session, *, default: Decimal) -> Decimal:
    """Delivery fee from the restaurant row, falling back to configuration."""
    restaurant = get_restaurant(db)
    if restaurant is None or restaurant.delivery_fee is None:
        return default
    return restaurant.delivery_fee
