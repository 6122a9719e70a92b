"""Builds the printable invoice model from an order and its priced lines."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol

from ordering.core.config import Settings
from ordering.models.invoice import Invoice
from ordering.services.money import VatBreakdown, round2, to_money, vat_breakdown
from ordering.services.pricing import REGULAR_FRIES_SLUGS

CUSTOMIZATION_SEPARATOR: str = " • "
CUSTOMIZATION_LABELS: dict[str, str] = {
    "sauce": "Szósz",
    "fries": "Krumpli",
    "extras": "Extrák",
    "removed": "Elhagyva",
    "note": "Megjegyzés",
}
DELIVERY_LINE_NAME: str = "Poplatok za doručenie / Szállítási díj"
PAYMENT_METHOD_LABELS: dict[str, str] = {
    "CASH": "Hotovosť / Készpénz",
    "CARD": "Karta / Kártya",
    "ONLINE": "Online platba / Online fizetés",
    "TRANSFER": "Bankový prevod / Banki átutalás",
}
ORDER_TYPE_LABELS: dict[str, str] = {
    "DELIVERY": "Doručenie / Szállítás",
    "PICKUP": "Vyzdvihnutie / Átvétel",
}


class InvoiceSourceLine(Protocol):
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    selected_sauce: str | None
    fries_upgrade: str | None
    extras: Sequence[str]
    remove_items: Sequence[str]
    special_notes: str | None
    includes_sides: bool


@dataclass(frozen=True)
class CompanyInfo:
    name: str
    address: str
    city: str
    ico: str = ""
    dic: str = ""
    vat_number: str = ""

    @classmethod
    def from_settings(cls, config: Settings) -> "CompanyInfo":
        return cls(
            name=config.company_name,
            address=config.company_address,
            city=config.company_city,
            ico=config.company_ico,
            dic=config.company_dic,
            vat_number=config.company_vat_number,
        )


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class InvoiceLine:
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    customizations: str = ""


@dataclass(frozen=True)
class InvoiceDocument:
    invoice_number: str
    issued_at: datetime
    order_number: str
    order_type: str
    payment_method: str
    company: CompanyInfo
    customer: CustomerInfo
    subtotal: Decimal
    delivery_fee: Decimal
    vat: VatBreakdown
    lines: tuple[InvoiceLine, ...] = field(default_factory=tuple)

    @property
    def total_gross(self) -> Decimal:
        return self.vat.gross_amount

    @property
    def payment_method_label(self) -> str:
        return PAYMENT_METHOD_LABELS.get(self.payment_method, self.payment_method)

    @property
    def order_type_label(self) -> str:
        return ORDER_TYPE_LABELS.get(self.order_type, self.order_type)


def describe_customizations(
    *,
    selected_sauce: str | None,
    fries_upgrade: str | None,
    extras: Sequence[str] | None,
    remove_items: Sequence[str] | None,
    special_notes: str | None,
    sauce_names: Mapping[str, str],
    fries_names: Mapping[str, str],
    includes_sides: bool = True,
) -> str:
    """Human readable customization text, e.g. ``Szósz: BBQ • Extrák: bacon``.

    Regular fries are left out only when the item bundles them; on items
    without sides they are charged and listed. Unknown slugs fall back to the slug.
    """
    parts: list[str] = []
    if selected_sauce:
        parts.append(f"{CUSTOMIZATION_LABELS['sauce']}: {sauce_names.get(selected_sauce, selected_sauce)}")
    if fries_upgrade and not (includes_sides and fries_upgrade in REGULAR_FRIES_SLUGS):
        parts.append(f"{CUSTOMIZATION_LABELS['fries']}: {fries_names.get(fries_upgrade, fries_upgrade)}")
    if extras:
        parts.append(f"{CUSTOMIZATION_LABELS['extras']}: {', '.join(extras)}")
    if remove_items:
        parts.append(f"{CUSTOMIZATION_LABELS['removed']}: {', '.join(remove_items)}")
    if special_notes:
        parts.append(f"{CUSTOMIZATION_LABELS['note']}: {special_notes}")
    return CUSTOMIZATION_SEPARATOR.join(parts)


def build_invoice(
    order: Any,
    priced_lines: Sequence[InvoiceSourceLine],
    invoice_number: str,
    *,
    company: CompanyInfo,
    sauce_names: Mapping[str, str],
    fries_names: Mapping[str, str],
    issued_at: datetime | None = None,
) -> InvoiceDocument:
    """Assemble an InvoiceDocument. VAT is computed on ``order.total``."""
    lines: list[InvoiceLine] = [
        InvoiceLine(
            name=line.name,
            quantity=line.quantity,
            unit_price=round2(line.unit_price),
            total_price=round2(line.total_price),
            customizations=describe_customizations(
                selected_sauce=line.selected_sauce,
                fries_upgrade=line.fries_upgrade,
                extras=line.extras,
                remove_items=line.remove_items,
                special_notes=line.special_notes,
                sauce_names=sauce_names,
                fries_names=fries_names,
                includes_sides=line.includes_sides,
            ),
        )
        for line in priced_lines
    ]

    delivery_fee = round2(order.delivery_fee or 0)
    if delivery_fee > 0:
        lines.append(
            InvoiceLine(name=DELIVERY_LINE_NAME, quantity=1, unit_price=delivery_fee, total_price=delivery_fee)
        )

    return InvoiceDocument(
        invoice_number=invoice_number,
        issued_at=issued_at or datetime.now(timezone.utc),
        order_number=order.order_number,
        order_type=order.order_type,
        payment_method=order.payment_method,
        company=company,
        customer=CustomerInfo(
            name=order.customer_name,
            email=order.customer_email,
            phone=order.customer_phone,
            address=order.delivery_address,
        ),
        subtotal=round2(order.subtotal),
        delivery_fee=delivery_fee,
        vat=vat_breakdown(order.total),
        lines=tuple(lines),
    )


def lines_to_snapshot(lines: Sequence[InvoiceLine]) -> list[dict[str, Any]]:
    return [
        {
            "name": line.name,
            "quantity": line.quantity,
            "unit_price": str(line.unit_price),
            "total_price": str(line.total_price),
            "customizations": line.customizations,
        }
        for line in lines
    ]


def document_from_invoice(invoice: Invoice, company: CompanyInfo) -> InvoiceDocument:
    """Rebuild the document from a stored invoice; numbers and lines never change."""
    lines = tuple(
        InvoiceLine(
            name=row["name"],
            quantity=int(row["quantity"]),
            unit_price=to_money(row["unit_price"]),
            total_price=to_money(row["total_price"]),
            customizations=row.get("customizations") or "",
        )
        for row in invoice.items_snapshot or []
    )
    delivery_address = invoice.order.delivery_address if invoice.order is not None else None
    return InvoiceDocument(
        invoice_number=invoice.invoice_number,
        issued_at=invoice.issued_at,
        order_number=invoice.order_number,
        order_type=invoice.order_type,
        payment_method=invoice.payment_method,
        company=company,
        customer=CustomerInfo(
            name=invoice.customer_name,
            email=invoice.customer_email,
            phone=invoice.customer_phone,
            address=delivery_address,
        ),
        subtotal=invoice.subtotal,
        delivery_fee=invoice.delivery_fee,
        vat=VatBreakdown(
            net_amount=invoice.total_net,
            vat_amount=invoice.vat_amount,
            gross_amount=invoice.total_gross,
        ),
        lines=lines,
    )
