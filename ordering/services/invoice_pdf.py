"""Invoice PDF rendering with ReportLab."""

from __future__ import annotations

import re
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from ordering.services.invoice_builder import InvoiceDocument
from ordering.services.money import format_currency
from ordering.utils.pdf_fonts import register_pdf_fonts

BRAND_RED = "#38141A"
BRAND_GREEN = "#1D665D"


def _reportlab():
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "A4": A4,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def invoice_filename(invoice_number: str) -> str:
    safe = re.sub(r"[^0-9A-Za-z_-]+", "_", invoice_number or "").strip("_")
    return f"faktura-{safe or 'invoice'}.pdf"


def _build_styles() -> dict[str, Any]:
    font_name, bold_font = register_pdf_fonts()
    rl = _reportlab()
    styles = rl["getSampleStyleSheet"]()
    colors = rl["colors"]
    return {
        "font_name": font_name,
        "bold_font": bold_font,
        "title": rl["ParagraphStyle"](
            "InvoiceTitle", parent=styles["Title"], fontName=bold_font, textColor=colors.HexColor(BRAND_RED)
        ),
        "heading": rl["ParagraphStyle"](
            "InvoiceHeading", parent=styles["Heading4"], fontName=bold_font, textColor=colors.HexColor(BRAND_GREEN)
        ),
        "normal": rl["ParagraphStyle"]("InvoiceNormal", parent=styles["Normal"], fontName=font_name, fontSize=9),
        "small": rl["ParagraphStyle"](
            "InvoiceSmall", parent=styles["Normal"], fontName=font_name, fontSize=7, textColor=colors.grey
        ),
    }


def _text(value: object) -> str:
    return escape(str(value or ""))


def _party_table(document: InvoiceDocument, styles: dict[str, Any]) -> Any:
    rl = _reportlab()
    company = document.company
    supplier = [
        "<b>Dodávateľ / Szállító</b>",
        _text(company.name),
        _text(company.address),
        _text(company.city),
    ]
    if company.ico:
        supplier.append(f"IČO: {_text(company.ico)}")
    if company.dic:
        supplier.append(f"DIČ: {_text(company.dic)}")
    if company.vat_number:
        supplier.append(f"IČ DPH: {_text(company.vat_number)}")

    customer = document.customer
    buyer = ["<b>Odberateľ / Vevő</b>", _text(customer.name)]
    for extra in (customer.address, customer.phone, customer.email):
        if extra:
            buyer.append(_text(extra))

    table = rl["Table"](
        [[rl["Paragraph"]("<br/>".join(supplier), styles["normal"]), rl["Paragraph"]("<br/>".join(buyer), styles["normal"])]],
        colWidths=[250, 250],
    )
    table.setStyle(rl["TableStyle"]([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return table


def _lines_table(document: InvoiceDocument, styles: dict[str, Any]) -> Any:
    rl = _reportlab()
    colors = rl["colors"]
    rows: list[list[Any]] = [["Položka / Tétel", "Množstvo", "Jedn. cena", "Celkom"]]
    for line in document.lines:
        label = f"<b>{_text(line.name)}</b>"
        if line.customizations:
            label += f"<br/><font size=7>• {_text(line.customizations)}</font>"
        rows.append(
            [
                rl["Paragraph"](label, styles["normal"]),
                str(line.quantity),
                format_currency(line.unit_price),
                format_currency(line.total_price),
            ]
        )

    table = rl["Table"](rows, colWidths=[260, 60, 90, 90], repeatRows=1)
    table.setStyle(
        rl["TableStyle"](
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(BRAND_GREEN)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), styles["bold_font"]),
                ("FONTNAME", (0, 1), (-1, -1), styles["font_name"]),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ]
        )
    )
    return table


def _totals_table(document: InvoiceDocument, styles: dict[str, Any]) -> Any:
    rl = _reportlab()
    colors = rl["colors"]
    rows = [
        ["Medzisúčet / Részösszeg:", format_currency(document.subtotal)],
    ]
    if document.delivery_fee > 0:
        rows.append(["Poplatok za doručenie / Szállítási díj:", format_currency(document.delivery_fee)])
    rows.extend(
        [
            ["Základ DPH 19% / ÁFA alap 19%:", format_currency(document.vat.net_amount)],
            ["DPH 19% / ÁFA 19%:", format_currency(document.vat.vat_amount)],
            ["CELKOM / VÉGÖSSZEG:", format_currency(document.total_gross)],
        ]
    )
    table = rl["Table"](rows, colWidths=[380, 120])
    table.setStyle(
        rl["TableStyle"](
            [
                ("FONTNAME", (0, 0), (-1, -2), styles["font_name"]),
                ("FONTNAME", (0, -1), (-1, -1), styles["bold_font"]),
                ("TEXTCOLOR", (0, -1), (-1, -1), colors.HexColor(BRAND_RED)),
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("LINEABOVE", (0, -1), (-1, -1), 1, colors.HexColor(BRAND_GREEN)),
            ]
        )
    )
    return table


def render_invoice_pdf(document: InvoiceDocument) -> bytes:
    """Render one invoice and return the PDF bytes."""
    styles = _build_styles()
    rl = _reportlab()

    buffer = BytesIO()
    doc = rl["SimpleDocTemplate"](
        buffer,
        pagesize=rl["A4"],
        title=f"Faktúra {document.invoice_number}",
        author=document.company.name,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    story: list[Any] = [
        rl["Paragraph"]("FAKTÚRA / SZÁMLA", styles["title"]),
        rl["Paragraph"]("Daňový doklad / Adóbizonylat", styles["normal"]),
        rl["Spacer"](1, 8),
        rl["Paragraph"](f"Číslo faktúry / Számla száma: <b>{_text(document.invoice_number)}</b>", styles["normal"]),
        rl["Paragraph"](f"Číslo objednávky / Rendelés száma: {_text(document.order_number)}", styles["normal"]),
        rl["Paragraph"](f"Typ objednávky / Rendelés típusa: {_text(document.order_type_label)}", styles["normal"]),
        rl["Paragraph"](
            f"Dátum vystavenia / Kiállítás dátuma: {document.issued_at.strftime('%d.%m.%Y')}", styles["normal"]
        ),
        rl["Spacer"](1, 12),
        _party_table(document, styles),
        rl["Spacer"](1, 12),
        _lines_table(document, styles),
        rl["Spacer"](1, 12),
        _totals_table(document, styles),
        rl["Spacer"](1, 16),
        rl["Paragraph"]("Spôsob platby / Fizetési mód", styles["heading"]),
        rl["Paragraph"](_text(document.payment_method_label), styles["normal"]),
        rl["Paragraph"]("UHRADENÉ / KIFIZETVE", styles["heading"]),
        rl["Spacer"](1, 16),
        rl["Paragraph"]("Ďakujeme za vašu návštevu! / Köszönjük a látogatást!", styles["small"]),
    ]
    doc.build(story)
    return buffer.getvalue()
