"""Menu catalog service helpers shared by public and admin routes."""

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ordering.core.errors import ConflictError, MenuItemNotFoundError, ValidationError
from ordering.models.menu import FriesOption, MenuItem, SauceOption

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"slug", "name", "description", "category", "price", "includes_sides", "is_available"}
)


def validate_slug(slug: str) -> str:
    """Return slug when it is lowercase words joined by single hyphens."""
    if not SLUG_PATTERN.match(slug or ""):
        raise ValidationError("Slug must contain only lowercase letters, numbers and hyphens")
    return slug


def list_public_menu(db: Session) -> dict[str, list[MenuItem]]:
    """Return orderable items grouped by category."""
    items = db.scalars(
        select(MenuItem)
        .where(MenuItem.is_available.is_(True), MenuItem.is_deleted.is_(False))
        .order_by(MenuItem.category.asc(), MenuItem.name.asc())
    ).all()
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def list_customization_options(db: Session) -> tuple[list[SauceOption], list[FriesOption]]:
    sauces = db.scalars(select(SauceOption).where(SauceOption.is_active.is_(True)).order_by(SauceOption.id)).all()
    fries = db.scalars(select(FriesOption).where(FriesOption.is_active.is_(True)).order_by(FriesOption.id)).all()
    return list(sauces), list(fries)


def sauce_names(db: Session) -> dict[str, str]:
    return {row.slug: row.name for row in db.scalars(select(SauceOption))}


def fries_names(db: Session) -> dict[str, str]:
    return {row.slug: row.name for row in db.scalars(select(FriesOption))}


def list_menu_items(db: Session, *, include_deleted: bool = False, category: str | None = None) -> list[MenuItem]:
    """Return complete catalog for admins, optionally with soft-deleted rows."""
    stmt = select(MenuItem)
    if not include_deleted:
        stmt = stmt.where(MenuItem.is_deleted.is_(False))
    if category:
        stmt = stmt.where(MenuItem.category == category)
    return list(db.scalars(stmt.order_by(MenuItem.category.asc(), MenuItem.id.asc())))


def get_menu_item(db: Session, menu_item_id: int) -> MenuItem:
    item: MenuItem | None = db.get(MenuItem, menu_item_id)
    if item is None:
        raise MenuItemNotFoundError(menu_item_id)
    return item


def _commit_item(db: Session, item: MenuItem) -> MenuItem:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Menu item with slug '{item.slug}' already exists") from exc
    db.refresh(item)
    return item


def create_menu_item(
    db: Session,
    *,
    slug: str,
    name: str,
    price: Decimal,
    description: str | None = None,
    category: str = "Other",
    includes_sides: bool = False,
    is_available: bool = True,
) -> MenuItem:
    """Create and persist a menu item."""
    item = MenuItem(
        slug=validate_slug(slug),
        name=name,
        description=description,
        category=category,
        price=price,
        includes_sides=includes_sides,
        is_available=is_available,
    )
    db.add(item)
    item = _commit_item(db, item)
    logger.info("[MENU] Created menu item %s (%s)", item.id, item.slug)
    return item


def update_menu_item(db: Session, menu_item_id: int, changes: dict[str, Any]) -> MenuItem:
    """Apply a partial update. Existing order lines keep their snapshot prices."""
    item = get_menu_item(db, menu_item_id)
    for field_name, value in changes.items():
        if field_name not in EDITABLE_FIELDS:
            continue
        if field_name == "slug":
            value = validate_slug(value)
        setattr(item, field_name, value)
    return _commit_item(db, item)


def set_availability(db: Session, menu_item_id: int, is_available: bool) -> MenuItem:
    item = get_menu_item(db, menu_item_id)
    item.is_available = is_available
    db.commit()
    db.refresh(item)
    return item


def bulk_set_availability(db: Session, menu_item_ids: Iterable[int], is_available: bool) -> int:
    """Toggle availability for many items; returns the number of rows changed."""
    ids = sorted(set(menu_item_ids))
    if not ids:
        return 0
    result = db.execute(
        update(MenuItem)
        .where(MenuItem.id.in_(ids), MenuItem.is_deleted.is_(False))
        .values(is_available=is_available, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


def soft_delete_menu_item(db: Session, menu_item_id: int) -> MenuItem:
    """Hide an item from the menu without breaking historical order lines."""
    item = get_menu_item(db, menu_item_id)
    item.is_deleted = True
    item.is_available = False
    item.deleted_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(item)
    logger.info("[MENU] Soft-deleted menu item %s", item.id)
    return item


def restore_menu_item(db: Session, menu_item_id: int) -> MenuItem:
    item = get_menu_item(db, menu_item_id)
    item.is_deleted = False
    item.deleted_at = None
    db.commit()
    db.refresh(item)
    return item
