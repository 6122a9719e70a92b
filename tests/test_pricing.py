from decimal import Decimal

import pytest

from ordering.core.errors import InvalidMenuItemError
from ordering.services.pricing import (
    CatalogMenuItem,
    CatalogOption,
    OrderLineRequest,
    order_totals,
    price_line,
    price_order,
)


class FakeCatalog:
    def __init__(self) -> None:
        self.items = {
            1: CatalogMenuItem(id=1, price=Decimal("8.90"), includes_sides=True, name="Classic Burger"),
            2: CatalogMenuItem(id=2, price=Decimal("5.00"), includes_sides=False, name="Chicken Wrap"),
        }
        self.fries = {
            "regular": CatalogOption(slug="regular", name="Hranolky", price_addon=Decimal("0.00")),
            "regular-fries": CatalogOption(slug="regular-fries", name="Hranolky", price_addon=Decimal("1.00")),
            "sweet-potato": CatalogOption(slug="sweet-potato", name="Batátové hranolky", price_addon=Decimal("1.30")),
        }

    def find_menu_item(self, menu_item_id: int) -> CatalogMenuItem | None:
        return self.items.get(menu_item_id)

    def find_sauce(self, slug: str) -> CatalogOption | None:
        return None

    def find_fries_option(self, slug: str) -> CatalogOption | None:
        return self.fries.get(slug)


def test_fries_upgrade_is_charged_per_unit() -> None:
    line = price_line(OrderLineRequest(menu_item_id=1, quantity=2, fries_upgrade="sweet-potato"), FakeCatalog())

    assert line.unit_price == Decimal("8.90")
    assert line.total_price == Decimal("20.40")
    assert line.name == "Classic Burger"


def test_regular_fries_are_free_when_item_includes_sides() -> None:
    line = price_line(OrderLineRequest(menu_item_id=1, quantity=3, fries_upgrade="regular-fries"), FakeCatalog())

    assert line.total_price == Decimal("26.70")


def test_regular_fries_are_charged_when_item_has_no_sides() -> None:
    line = price_line(OrderLineRequest(menu_item_id=2, quantity=2, fries_upgrade="regular-fries"), FakeCatalog())

    assert line.total_price == Decimal("12.00")


def test_unknown_fries_option_is_ignored() -> None:
    line = price_line(OrderLineRequest(menu_item_id=2, quantity=1, fries_upgrade="truffle"), FakeCatalog())

    assert line.total_price == Decimal("5.00")
    assert line.fries_upgrade == "truffle"


def test_extras_cost_thirty_cents_each_per_unit() -> None:
    line = price_line(
        OrderLineRequest(menu_item_id=2, quantity=2, extras=("bacon", "cheese"), remove_items=("onion",)),
        FakeCatalog(),
    )

    assert line.total_price == Decimal("11.20")
    assert line.remove_items == ("onion",)


def test_unknown_menu_item_fails_the_whole_cart() -> None:
    lines = [OrderLineRequest(menu_item_id=1, quantity=1), OrderLineRequest(menu_item_id=99, quantity=1)]

    with pytest.raises(InvalidMenuItemError) as exc_info:
        price_order(lines, FakeCatalog())

    assert exc_info.value.message == "Menu item with ID 99 not found"


def test_price_order_sums_lines_and_delivery_fee_applies_only_to_delivery() -> None:
    priced = price_order(
        [
            OrderLineRequest(menu_item_id=1, quantity=2, fries_upgrade="sweet-potato"),
            OrderLineRequest(menu_item_id=2, quantity=1, extras=("bacon",)),
        ],
        FakeCatalog(),
    )

    assert priced.subtotal == Decimal("25.70")
    assert len(priced.items) == 2

    delivery = order_totals(priced.subtotal, "DELIVERY", Decimal("2.50"))
    assert delivery.delivery_fee == Decimal("2.50")
    assert delivery.total == Decimal("28.20")

    pickup = order_totals(priced.subtotal, "PICKUP", Decimal("2.50"))
    assert pickup.delivery_fee == Decimal("0.00")
    assert pickup.total == Decimal("25.70")


def test_pricing_the_same_cart_twice_gives_equal_results() -> None:
    catalog = FakeCatalog()
    cart = [
        OrderLineRequest(menu_item_id=1, quantity=3, fries_upgrade="sweet-potato", extras=("bacon", "cheese")),
        OrderLineRequest(menu_item_id=2, quantity=1, fries_upgrade="regular-fries", remove_items=("onion",)),
    ]

    first = price_order(cart, catalog)
    second = price_order(list(cart), catalog)

    assert first == second
    assert first.subtotal == second.subtotal
