"""Authoritative pricing of carts against the menu catalog."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from ordering.core.errors import InvalidMenuItemError
from ordering.models.menu import FriesOption, MenuItem, SauceOption

logger = logging.getLogger(__name__)

EXTRA_UNIT_PRICE: Decimal = Decimal("0.30")
REGULAR_FRIES_SLUGS: frozenset[str] = frozenset({"regular", "regular-fries"})
ZERO: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class CatalogMenuItem:
    id: int
    price: Decimal
    includes_sides: bool
    name: str = ""


@dataclass(frozen=True)
class CatalogOption:
    slug: str
    name: str
    price_addon: Decimal = ZERO


class CatalogLookup(Protocol):
    """Read-only view of the menu used while pricing."""

    def find_menu_item(self, menu_item_id: int) -> CatalogMenuItem | None: ...

    def find_sauce(self, slug: str) -> CatalogOption | None: ...

    def find_fries_option(self, slug: str) -> CatalogOption | None: ...


@dataclass(frozen=True)
class OrderLineRequest:
    menu_item_id: int
    quantity: int
    selected_sauce: str | None = None
    fries_upgrade: str | None = None
    extras: tuple[str, ...] = ()
    remove_items: tuple[str, ...] = ()
    special_notes: str | None = None


@dataclass(frozen=True)
class ResolvedAddon:
    slug: str
    name: str
    charge: Decimal


@dataclass(frozen=True)
class PricedOrderLine:
    menu_item_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    selected_sauce: str | None = None
    fries_upgrade: str | None = None
    extras: tuple[str, ...] = ()
    remove_items: tuple[str, ...] = ()
    special_notes: str | None = None
    name: str = ""


@dataclass(frozen=True)
class PricedOrder:
    items: list[PricedOrderLine] = field(default_factory=list)
    subtotal: Decimal = ZERO


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


class SqlCatalog:
    """CatalogLookup backed by the menu tables."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_menu_item(self, menu_item_id: int) -> CatalogMenuItem | None:
        item: MenuItem | None = self.db.get(MenuItem, menu_item_id)
        if item is None or item.is_deleted or not item.is_available:
            return None
        return CatalogMenuItem(id=item.id, price=item.price, includes_sides=item.includes_sides, name=item.name)

    def find_sauce(self, slug: str) -> CatalogOption | None:
        sauce = self.db.scalar(select(SauceOption).where(SauceOption.slug == slug).limit(1))
        if sauce is None:
            return None
        return CatalogOption(slug=sauce.slug, name=sauce.name, price_addon=sauce.price)

    def find_fries_option(self, slug: str) -> CatalogOption | None:
        option = self.db.scalar(select(FriesOption).where(FriesOption.slug == slug).limit(1))
        if option is None:
            return None
        return CatalogOption(slug=option.slug, name=option.name, price_addon=option.price_addon)


def resolve_fries_addon(
    slug: str | None,
    *,
    includes_sides: bool,
    quantity: int,
    catalog: CatalogLookup,
) -> ResolvedAddon | None:
    """Return the fries charge for a line, or None when the slug is unknown.

    Unknown slugs are ignored on purpose; only unknown menu items abort pricing.
    """
    if not slug:
        return None
    option = catalog.find_fries_option(slug)
    if option is None:
        logger.info("[PRICING] Ignoring unknown fries option %r", slug)
        return None
    if includes_sides and option.slug in REGULAR_FRIES_SLUGS:
        return ResolvedAddon(slug=option.slug, name=option.name, charge=ZERO)
    return ResolvedAddon(slug=option.slug, name=option.name, charge=option.price_addon * quantity)


def price_line(line: OrderLineRequest, catalog: CatalogLookup) -> PricedOrderLine:
    menu_item = catalog.find_menu_item(line.menu_item_id)
    if menu_item is None:
        raise InvalidMenuItemError(line.menu_item_id)

    item_total: Decimal = menu_item.price * line.quantity
    fries = resolve_fries_addon(
        line.fries_upgrade,
        includes_sides=menu_item.includes_sides,
        quantity=line.quantity,
        catalog=catalog,
    )
    if fries is not None:
        item_total += fries.charge
    if line.extras:
        item_total += len(line.extras) * EXTRA_UNIT_PRICE * line.quantity

    return PricedOrderLine(
        menu_item_id=menu_item.id,
        quantity=line.quantity,
        unit_price=menu_item.price,
        total_price=item_total,
        selected_sauce=line.selected_sauce or None,
        fries_upgrade=line.fries_upgrade or None,
        extras=tuple(line.extras),
        remove_items=tuple(line.remove_items),
        special_notes=line.special_notes or None,
        name=menu_item.name,
    )


def price_order(lines: Sequence[OrderLineRequest], catalog: CatalogLookup) -> PricedOrder:
    """Price every line; any unknown menu item fails the whole cart."""
    items: list[PricedOrderLine] = []
    subtotal = ZERO
    for line in lines:
        priced = price_line(line, catalog)
        subtotal += priced.total_price
        items.append(priced)
    return PricedOrder(items=items, subtotal=subtotal)


def order_totals(subtotal: Decimal, order_type: str, configured_delivery_fee: Decimal) -> OrderTotals:
    """Apply the delivery fee for DELIVERY orders. No minimum order is enforced here."""
    delivery_fee = configured_delivery_fee if order_type == "DELIVERY" else ZERO
    return OrderTotals(subtotal=subtotal, delivery_fee=delivery_fee, total=subtotal + delivery_fee)
