"""Money helpers and the VAT breakdown used on invoices."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

VAT_RATE: Decimal = Decimal("0.19")
TWOPLACES: Decimal = Decimal("0.01")


@dataclass(frozen=True)
class VatBreakdown:
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce input to a Decimal; floats go through str to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(amount: Decimal | int | float | str) -> Decimal:
    """Round to the cent, ties away from zero."""
    return to_money(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def vat_breakdown(gross_amount: Decimal | int | float | str) -> VatBreakdown:
    """Split a gross amount into net and VAT.

    VAT is taken as a straight 19 % of the gross and net is the remainder.
    This is the house method and is not the usual ``gross / 1.19`` split.
    """
    gross = to_money(gross_amount)
    vat = round2(gross * VAT_RATE)
    net = round2(gross - vat)
    return VatBreakdown(net_amount=net, vat_amount=vat, gross_amount=round2(gross))


def format_currency(amount: Decimal | int | float | str) -> str:
    """Format an amount the way Slovak invoices show EUR, e.g. ``1 234,50 €``."""
    rounded = round2(amount)
    sign = "-" if rounded < 0 else ""
    whole, cents = f"{abs(rounded):.2f}".split(".")
    groups: list[str] = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    return f"{sign}{' '.join(groups)},{cents} €"
