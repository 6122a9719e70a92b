from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from ordering.models.invoice import Invoice
from ordering.services.invoice_builder import (
    DELIVERY_LINE_NAME,
    CompanyInfo,
    build_invoice,
    describe_customizations,
    document_from_invoice,
    lines_to_snapshot,
)

COMPANY = CompanyInfo(name="Restaurant s.r.o.", address="Hlavná 1", city="945 01 Komárno", ico="12345678")
SAUCES = {"bbq": "BBQ", "garlic": "Cesnaková"}
FRIES = {"regular": "Hranolky", "sweet-potato": "Batátové hranolky"}


@dataclass
class _Line:
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    selected_sauce: str | None = None
    fries_upgrade: str | None = None
    extras: list[str] = field(default_factory=list)
    remove_items: list[str] = field(default_factory=list)
    special_notes: str | None = None
    includes_sides: bool = True


@dataclass
class _Order:
    order_number: str
    order_type: str
    payment_method: str
    customer_name: str
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    customer_email: str | None = None
    customer_phone: str | None = None
    delivery_address: str | None = None


def test_describe_customizations_uses_names_and_skips_regular_fries() -> None:
    text = describe_customizations(
        selected_sauce="bbq",
        fries_upgrade="regular",
        extras=["bacon", "cheese"],
        remove_items=["onion"],
        special_notes="well done",
        sauce_names=SAUCES,
        fries_names=FRIES,
    )

    assert text == "Szósz: BBQ • Extrák: bacon, cheese • Elhagyva: onion • Megjegyzés: well done"


def test_regular_fries_are_listed_when_item_has_no_sides() -> None:
    text = describe_customizations(
        selected_sauce=None,
        fries_upgrade="regular",
        extras=None,
        remove_items=None,
        special_notes=None,
        sauce_names=SAUCES,
        fries_names=FRIES,
        includes_sides=False,
    )

    assert text == "Krumpli: Hranolky"


def test_describe_customizations_falls_back_to_slug() -> None:
    text = describe_customizations(
        selected_sauce="mystery",
        fries_upgrade="sweet-potato",
        extras=None,
        remove_items=None,
        special_notes=None,
        sauce_names=SAUCES,
        fries_names=FRIES,
    )

    assert text == "Szósz: mystery • Krumpli: Batátové hranolky"


def test_build_invoice_adds_delivery_line_and_vat_on_total() -> None:
    order = _Order(
        order_number="PCB-20260301-120000-001",
        order_type="DELIVERY",
        payment_method="CARD",
        customer_name="Ján Novák",
        customer_email="jan@example.com",
        delivery_address="Dunajská 5",
        subtotal=Decimal("17.90"),
        delivery_fee=Decimal("2.50"),
        total=Decimal("20.40"),
    )
    lines = [_Line(name="Classic Burger", quantity=2, unit_price=Decimal("8.95"), total_price=Decimal("17.90"), selected_sauce="garlic")]

    document = build_invoice(order, lines, "22500007", company=COMPANY, sauce_names=SAUCES, fries_names=FRIES)

    assert document.invoice_number == "22500007"
    assert [line.name for line in document.lines] == ["Classic Burger", DELIVERY_LINE_NAME]
    assert document.lines[0].customizations == "Szósz: Cesnaková"
    assert document.lines[1].total_price == Decimal("2.50")
    assert document.vat.vat_amount == Decimal("3.88")
    assert document.vat.net_amount == Decimal("16.52")
    assert document.total_gross == Decimal("20.40")
    assert document.payment_method_label == "Karta / Kártya"
    assert document.customer.address == "Dunajská 5"


def test_pickup_invoice_has_no_delivery_line() -> None:
    order = _Order(
        order_number="PCB-20260301-120000-002",
        order_type="PICKUP",
        payment_method="CASH",
        customer_name="Eva",
        subtotal=Decimal("5.00"),
        delivery_fee=Decimal("0.00"),
        total=Decimal("5.00"),
    )
    lines = [_Line(name="Chicken Wrap", quantity=1, unit_price=Decimal("5.00"), total_price=Decimal("5.00"))]

    document = build_invoice(order, lines, "12500001", company=COMPANY, sauce_names=SAUCES, fries_names=FRIES)

    assert len(document.lines) == 1
    assert document.order_type_label == "Vyzdvihnutie / Átvétel"


def test_document_from_invoice_uses_stored_values() -> None:
    issued_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    order = _Order(
        order_number="PCB-20260301-120000-003",
        order_type="PICKUP",
        payment_method="CASH",
        customer_name="Eva",
        subtotal=Decimal("5.00"),
        delivery_fee=Decimal("0.00"),
        total=Decimal("5.00"),
    )
    lines = [_Line(name="Chicken Wrap", quantity=1, unit_price=Decimal("5.00"), total_price=Decimal("5.00"), extras=["bacon"])]
    document = build_invoice(
        order, lines, "12500003", company=COMPANY, sauce_names=SAUCES, fries_names=FRIES, issued_at=issued_at
    )

    invoice = Invoice(
        invoice_number=document.invoice_number,
        order_number=document.order_number,
        order_type=document.order_type,
        customer_name=document.customer.name,
        subtotal=document.subtotal,
        delivery_fee=document.delivery_fee,
        total_net=document.vat.net_amount,
        vat_amount=document.vat.vat_amount,
        total_gross=document.vat.gross_amount,
        payment_method=document.payment_method,
        items_snapshot=lines_to_snapshot(document.lines),
        issued_at=issued_at,
    )

    restored = document_from_invoice(invoice, COMPANY)

    assert restored.lines == document.lines
    assert restored.vat == document.vat
    assert restored.issued_at == issued_at


def test_invoice_line_shows_charged_regular_fries_on_item_without_sides() -> None:
    order = _Order(
        order_number="PCB-20260301-120000-004",
        order_type="PICKUP",
        payment_method="TRANSFER",
        customer_name="Eva",
        subtotal=Decimal("10.40"),
        delivery_fee=Decimal("0.00"),
        total=Decimal("10.40"),
    )
    lines = [
        _Line(
            name="Grilled Chicken",
            quantity=1,
            unit_price=Decimal("10.40"),
            total_price=Decimal("10.40"),
            fries_upgrade="regular",
            includes_sides=False,
        )
    ]

    document = build_invoice(order, lines, "42500001", company=COMPANY, sauce_names=SAUCES, fries_names=FRIES)

    assert document.lines[0].customizations == "Krumpli: Hranolky"
    assert document.payment_method_label == "Bankový prevod / Banki átutalás"
