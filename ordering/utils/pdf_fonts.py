"""Unicode font registration for ReportLab invoices (Slovak/Hungarian diacritics)."""

from __future__ import annotations

import logging
from os import getenv
from pathlib import Path

logger = logging.getLogger(__name__)

INVOICE_FONT: str = "InvoiceUnicode"
INVOICE_FONT_BOLD: str = "InvoiceUnicode-Bold"

FONT_CANDIDATES: tuple[tuple[str, str | None], ...] = (
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    (
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    ),
    ("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf", "/usr/share/fonts/truetype/noto/NotoSans-Bold.ttf"),
    (r"C:\\Windows\\Fonts\\arial.ttf", r"C:\\Windows\\Fonts\\arialbd.ttf"),
    ("/System/Library/Fonts/Supplemental/Arial.ttf", "/System/Library/Fonts/Supplemental/Arial Bold.ttf"),
)

_fallback_logged = False


def find_unicode_ttf() -> tuple[str, str | None] | None:
    """Return (regular, bold) font paths; PDF_FONT_PATH overrides discovery."""
    override = getenv("PDF_FONT_PATH")
    if override and Path(override).exists():
        return override, None
    for regular, bold in FONT_CANDIDATES:
        if Path(regular).exists():
            return regular, bold if bold and Path(bold).exists() else None
    return None


def register_pdf_fonts() -> tuple[str, str]:
    """Register fonts with ReportLab and return (regular, bold) font names."""
    global _fallback_logged

    paths = find_unicode_ttf()
    if paths is None:
        if not _fallback_logged:
            logger.warning("[INVOICE] No Unicode TTF font found; diacritics may render incorrectly.")
            _fallback_logged = True
        return "Helvetica", "Helvetica-Bold"

    from reportlab.lib.fonts import addMapping
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    regular_path, bold_path = paths
    registered = set(pdfmetrics.getRegisteredFontNames())
    if INVOICE_FONT not in registered:
        pdfmetrics.registerFont(TTFont(INVOICE_FONT, regular_path))
    bold_font = INVOICE_FONT
    if bold_path is not None:
        if INVOICE_FONT_BOLD not in registered:
            pdfmetrics.registerFont(TTFont(INVOICE_FONT_BOLD, bold_path))
        bold_font = INVOICE_FONT_BOLD

    # Paragraph <b> markup resolves bold through the family mapping.
    addMapping(INVOICE_FONT, 0, 0, INVOICE_FONT)
    addMapping(INVOICE_FONT, 1, 0, bold_font)
    addMapping(INVOICE_FONT, 0, 1, INVOICE_FONT)
    addMapping(INVOICE_FONT, 1, 1, bold_font)
    return INVOICE_FONT, bold_font
