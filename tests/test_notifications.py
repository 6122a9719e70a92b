from datetime import datetime, timezone
from decimal import Decimal
from smtplib import SMTPException

from ordering.core.config import Settings
from ordering.services.invoice_builder import CompanyInfo, CustomerInfo, InvoiceDocument
from ordering.services.money import vat_breakdown
from ordering.services.notifications import (
    NotificationDispatcher,
    NullEmailTransport,
    OrderSummary,
    SummaryLine,
)


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, to, subject, html, attachment=None) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html, "attachment": attachment})


class BrokenTransport:
    def send(self, to, subject, html, attachment=None) -> None:
        raise SMTPException("connection refused")


CONFIG = Settings(from_name="Pizzeria Komárno")


def _summary(status: str = "PENDING") -> OrderSummary:
    return OrderSummary(
        order_number="PCB-20260301-120000-001",
        customer_name="Ján",
        status=status,
        order_type="PICKUP",
        total=Decimal("20.40"),
        payment_method="CASH",
        lines=(SummaryLine(name="Classic Burger", quantity=2, total_price=Decimal("20.40"), customizations="Szósz: BBQ"),),
    )


def _invoice() -> InvoiceDocument:
    return InvoiceDocument(
        invoice_number="12500001",
        issued_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        order_number="PCB-20260301-120000-001",
        order_type="PICKUP",
        payment_method="CASH",
        company=CompanyInfo(name="Restaurant s.r.o.", address="Hlavná 1", city="Komárno"),
        customer=CustomerInfo(name="Ján", email="jan@example.com"),
        subtotal=Decimal("20.40"),
        delivery_fee=Decimal("0.00"),
        vat=vat_breakdown(Decimal("20.40")),
    )


def test_confirmation_email_renders_lines_and_total() -> None:
    transport = RecordingTransport()
    dispatcher = NotificationDispatcher(transport, CONFIG)

    result = dispatcher.send_order_confirmation(_summary(), "jan@example.com")

    assert result.success is True
    message = transport.sent[0]
    assert message["subject"] == "Potvrdenie objednávky #PCB-20260301-120000-001 - Pizzeria Komárno"
    assert "2x Classic Burger" in message["html"]
    assert "20,40 €" in message["html"]
    assert "Szósz: BBQ" in message["html"]


def test_invoice_email_carries_pdf_attachment() -> None:
    transport = RecordingTransport()
    dispatcher = NotificationDispatcher(transport, CONFIG)

    result = dispatcher.send_invoice(_invoice(), b"%PDF-fake", "jan@example.com")

    assert result.success is True
    attachment = transport.sent[0]["attachment"]
    assert attachment.filename == "faktura-12500001.pdf"
    assert attachment.content == b"%PDF-fake"
    assert attachment.mime_type == "application/pdf"


def test_status_email_only_for_ready_and_out_for_delivery() -> None:
    transport = RecordingTransport()
    dispatcher = NotificationDispatcher(transport, CONFIG)

    ready = dispatcher.send_status_notification(_summary("READY"), "jan@example.com")
    preparing = dispatcher.send_status_notification(_summary("PREPARING"), "jan@example.com")

    assert ready.success is True
    assert transport.sent[0]["subject"].startswith("Objednávka PCB-20260301-120000-001 je pripravená")
    assert preparing.success is False
    assert len(transport.sent) == 1


def test_failures_are_reported_not_raised() -> None:
    unconfigured = NotificationDispatcher(NullEmailTransport(), CONFIG)
    broken = NotificationDispatcher(BrokenTransport(), CONFIG)

    not_configured = unconfigured.send_order_confirmation(_summary(), "jan@example.com")
    invalid_address = unconfigured.send_order_confirmation(_summary(), "not-an-address")
    smtp_failure = broken.send_invoice(_invoice(), b"%PDF-fake", "jan@example.com")

    assert not_configured.success is False
    assert not_configured.error == "Email service not configured"
    assert invalid_address.error == "Invalid email address"
    assert smtp_failure.success is False
    assert smtp_failure.error == "connection refused"
