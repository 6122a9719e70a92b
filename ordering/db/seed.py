"""Database seeding helpers."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ordering.core.config import settings
from ordering.core.security import get_password_hash
from ordering.models.admin_user import AdminUser
from ordering.models.menu import FriesOption, SauceOption
from ordering.models.restaurant import Restaurant
from ordering.services.settings_service import RESTAURANT_ID

logger = logging.getLogger(__name__)

DEFAULT_SAUCES: tuple[tuple[str, str, bool], ...] = (
    ("ketchup", "Ketchup", True),
    ("mayonnaise", "Majonéza", False),
    ("bbq", "BBQ", False),
    ("garlic", "Cesnaková", False),
)
DEFAULT_FRIES: tuple[tuple[str, str, Decimal, bool], ...] = (
    ("regular", "Hranolky", Decimal("0.00"), True),
    ("sweet-potato", "Batátové hranolky", Decimal("1.30"), False),
    ("cheese-fries", "Syrové hranolky", Decimal("1.80"), False),
)


def ensure_restaurant(session: Session) -> None:
    if session.get(Restaurant, RESTAURANT_ID) is not None:
        return
    session.add(
        Restaurant(
            id=RESTAURANT_ID,
            name=settings.from_name,
            address=settings.company_address,
            city=settings.company_city,
            email=settings.reply_to_email,
            delivery_fee=settings.default_delivery_fee,
        )
    )
    session.commit()


def ensure_customization_options(session: Session) -> None:
    """Insert default sauces and fries when the tables are empty."""
    if session.scalar(select(func.count(SauceOption.id))) == 0:
        for slug, name, is_default in DEFAULT_SAUCES:
            session.add(SauceOption(slug=slug, name=name, is_default=is_default))
    if session.scalar(select(func.count(FriesOption.id))) == 0:
        for slug, name, price_addon, is_default in DEFAULT_FRIES:
            session.add(FriesOption(slug=slug, name=name, price_addon=price_addon, is_default=is_default))
    session.commit()


def ensure_admin_user(session: Session) -> bool:
    """Ensure a default admin exists in development only. Returns whether one is present."""
    existing = session.scalar(select(AdminUser).where(AdminUser.email == settings.admin_email))
    if existing is not None:
        return True
    if settings.app_env != "dev":
        return False

    session.add(
        AdminUser(
            email=settings.admin_email,
            first_name="Admin",
            password_hash=get_password_hash(settings.admin_password),
            role="SUPER_ADMIN",
        )
    )
    session.commit()
    logger.info("[BOOTSTRAP] Created default admin %s", settings.admin_email)
    return True


def ensure_seed_data(session: Session) -> bool:
    ensure_restaurant(session)
    ensure_customization_options(session)
    return ensure_admin_user(session)
