"""Customer emails: invoice, order confirmation and status updates."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from decimal import Decimal
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Protocol

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ordering.core.config import Settings
from ordering.core.errors import NotificationError
from ordering.services.invoice_builder import InvoiceDocument
from ordering.services.money import format_currency

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"
NOT_CONFIGURED_ERROR: str = "Email service not configured"

STATUS_EMAIL_CONTENT: dict[str, dict[str, str]] = {
    "READY": {
        "subject": "Objednávka {order_number} je pripravená",
        "header": "Objednávka pripravená / Rendelés elkészült",
        "message": "Vaša objednávka je pripravená na vyzdvihnutie!",
        "sub_message": "Az Ön rendelése készen áll az átvételre!",
    },
    "OUT_FOR_DELIVERY": {
        "subject": "Objednávka {order_number} je na ceste",
        "header": "Objednávka je na ceste / Rendelés úton van",
        "message": "Vaša objednávka je na ceste k vám!",
        "sub_message": "Az Ön rendelése úton van!",
    },
}


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: bytes
    mime_type: str = "application/pdf"


@dataclass(frozen=True)
class SummaryLine:
    name: str
    quantity: int
    total_price: Decimal
    customizations: str = ""


@dataclass(frozen=True)
class OrderSummary:
    """What the confirmation and status emails need to know about an order."""

    order_number: str
    customer_name: str
    status: str
    order_type: str
    total: Decimal
    payment_method: str
    estimated_time: str | None = None
    lines: tuple[SummaryLine, ...] = field(default_factory=tuple)


class EmailTransport(Protocol):
    def send(self, to: str, subject: str, html: str, attachment: EmailAttachment | None = None) -> None: ...


class NullEmailTransport:
    """Used when no SMTP host is configured."""

    def send(self, to: str, subject: str, html: str, attachment: EmailAttachment | None = None) -> None:
        raise NotificationError(NOT_CONFIGURED_ERROR)


class SmtpEmailTransport:
    def __init__(self, config: Settings, timeout: float = 15.0) -> None:
        self.config = config
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str, attachment: EmailAttachment | None = None) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.config.from_name, self.config.from_email))
        message["To"] = to
        message["Reply-To"] = self.config.reply_to_email
        message.set_content("Tento e-mail vyžaduje HTML klienta.")
        message.add_alternative(html, subtype="html")
        if attachment is not None:
            maintype, subtype = attachment.mime_type.split("/", 1)
            message.add_attachment(attachment.content, maintype=maintype, subtype=subtype, filename=attachment.filename)

        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=self.timeout) as smtp:
            if self.config.smtp_use_tls:
                smtp.starttls()
            if self.config.smtp_user:
                smtp.login(self.config.smtp_user, self.config.smtp_password)
            smtp.send_message(message)


def build_template_environment() -> Environment:
    environment = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    environment.filters["currency"] = format_currency
    return environment


def _valid_address(address: str | None) -> bool:
    return bool(address) and "@" in str(address)


class NotificationDispatcher:
    """Renders customer emails and hands them to the transport.

    Every method returns a NotificationResult; failures are logged and
    reported, never raised to the caller.
    """

    def __init__(self, transport: EmailTransport, config: Settings, environment: Environment | None = None) -> None:
        self.transport = transport
        self.config = config
        self.environment = environment or build_template_environment()

    def _deliver(
        self,
        kind: str,
        to: str | None,
        subject: str,
        template_name: str,
        context: dict,
        attachment: EmailAttachment | None = None,
    ) -> NotificationResult:
        if not _valid_address(to):
            logger.info("[EMAIL] Skipping %s email: invalid address %r", kind, to)
            return NotificationResult(success=False, error="Invalid email address")
        try:
            html = self.environment.get_template(template_name).render(brand=self.config.from_name, **context)
            self.transport.send(to, subject, html, attachment)
        except NotificationError as exc:
            logger.warning("[EMAIL] %s email to %s not sent: %s", kind, to, exc.message)
            return NotificationResult(success=False, error=exc.message)
        except (TemplateError, smtplib.SMTPException, OSError) as exc:
            logger.exception("[EMAIL] %s email to %s failed", kind, to)
            return NotificationResult(success=False, error=str(exc) or exc.__class__.__name__)
        logger.info("[EMAIL] %s email sent to %s", kind, to)
        return NotificationResult(success=True)

    def send_invoice(self, document: InvoiceDocument, pdf_bytes: bytes, to: str | None) -> NotificationResult:
        return self._deliver(
            "invoice",
            to,
            f"Faktúra {document.invoice_number} - {self.config.from_name}",
            "invoice.html",
            {"invoice": document},
            EmailAttachment(filename=f"faktura-{document.invoice_number}.pdf", content=pdf_bytes),
        )

    def send_order_confirmation(self, summary: OrderSummary, to: str | None) -> NotificationResult:
        return self._deliver(
            "confirmation",
            to,
            f"Potvrdenie objednávky #{summary.order_number} - {self.config.from_name}",
            "order_confirmation.html",
            {"order": summary},
        )

    def send_status_notification(self, summary: OrderSummary, to: str | None) -> NotificationResult:
        content = STATUS_EMAIL_CONTENT.get(summary.status)
        if content is None:
            return NotificationResult(success=False, error=f"No email for status {summary.status}")
        return self._deliver(
            "status",
            to,
            f"{content['subject'].format(order_number=summary.order_number)} - {self.config.from_name}",
            "order_status.html",
            {"order": summary, "content": content},
        )
