"""Invoice issuance, delivery and resend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ordering.core.errors import NotFoundError, OrderNotFoundError
from ordering.models.invoice import Invoice
from ordering.models.order import Order, OrderItem
from ordering.services import menu_service
from ordering.services.invoice_builder import (
    CompanyInfo,
    InvoiceDocument,
    build_invoice,
    document_from_invoice,
    lines_to_snapshot,
)
from ordering.services.invoice_numbering import InvoiceNumberAuthority, run_in_transaction
from ordering.services.invoice_pdf import invoice_filename, render_invoice_pdf
from ordering.services.notifications import NotificationDispatcher, NotificationResult

logger = logging.getLogger(__name__)

PdfRenderer = Callable[[InvoiceDocument], bytes]


class InvoiceService:
    """Issues exactly one invoice per order and mails it to the customer."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        authority: InvoiceNumberAuthority,
        dispatcher: NotificationDispatcher,
        company: CompanyInfo,
        *,
        renderer: PdfRenderer = render_invoice_pdf,
        retry_attempts: int = 5,
        retry_base_delay: float = 0.05,
    ) -> None:
        self.session_factory = session_factory
        self.authority = authority
        self.dispatcher = dispatcher
        self.company = company
        self.renderer = renderer
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay

    def _issue(self, db: Session, order_id: int) -> int:
        existing_id = db.scalar(select(Invoice.id).where(Invoice.order_id == order_id))
        if existing_id is not None:
            return existing_id

        order = db.scalar(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .where(Order.id == order_id)
        )
        if order is None:
            raise OrderNotFoundError(order_id)

        invoice_number = self.authority.next_invoice_number(db, order.payment_method, order.created_at.year)
        document = build_invoice(
            order,
            order.items,
            invoice_number,
            company=self.company,
            sauce_names=menu_service.sauce_names(db),
            fries_names=menu_service.fries_names(db),
        )
        invoice = Invoice(
            invoice_number=document.invoice_number,
            order_id=order.id,
            order_number=document.order_number,
            order_type=document.order_type,
            customer_name=document.customer.name,
            customer_email=document.customer.email,
            customer_phone=document.customer.phone,
            subtotal=document.subtotal,
            delivery_fee=document.delivery_fee,
            total_net=document.vat.net_amount,
            vat_amount=document.vat.vat_amount,
            total_gross=document.vat.gross_amount,
            payment_method=document.payment_method,
            items_snapshot=lines_to_snapshot(document.lines),
            issued_at=document.issued_at,
        )
        db.add(invoice)
        db.flush()
        return invoice.id

    def issue_for_order(self, order_id: int) -> int:
        """Return the id of the order's invoice, creating it on first call.

        Number allocation and the invoice insert share one transaction, so a
        failed insert never consumes a number.
        """
        try:
            invoice_id = run_in_transaction(
                self.session_factory,
                lambda db: self._issue(db, order_id),
                attempts=self.retry_attempts,
                base_delay=self.retry_base_delay,
            )
        except IntegrityError:
            # Another request issued the invoice first.
            with self.session_factory() as db:
                invoice_id = db.scalar(select(Invoice.id).where(Invoice.order_id == order_id))
            if invoice_id is None:
                raise
        logger.info("[INVOICE] Order %s has invoice id=%s", order_id, invoice_id)
        return invoice_id

    def _load_invoice(self, db: Session, order_id: int) -> Invoice:
        invoice = db.scalar(select(Invoice).where(Invoice.order_id == order_id))
        if invoice is None:
            raise NotFoundError(f"Invoice for order {order_id} not found")
        return invoice

    def get_invoice(self, db: Session, order_id: int) -> Invoice:
        if db.get(Order, order_id) is None:
            raise OrderNotFoundError(order_id)
        return self._load_invoice(db, order_id)

    def get_document(self, db: Session, order_id: int) -> InvoiceDocument:
        return document_from_invoice(self.get_invoice(db, order_id), self.company)

    def render_pdf(self, db: Session, order_id: int) -> tuple[str, bytes]:
        document = self.get_document(db, order_id)
        return invoice_filename(document.invoice_number), self.renderer(document)

    def deliver(self, invoice_id: int, to: str | None = None) -> NotificationResult:
        """Render and email an invoice, recording the attempt on the invoice row."""
        with self.session_factory() as db:
            invoice = db.get(Invoice, invoice_id)
            if invoice is None:
                logger.warning("[INVOICE] Invoice id=%s disappeared before delivery", invoice_id)
                return NotificationResult(success=False, error="Invoice not found")

            recipient = to or invoice.customer_email
            document = document_from_invoice(invoice, self.company)
            try:
                pdf_bytes = self.renderer(document)
            except Exception as exc:
                logger.exception("[INVOICE] PDF rendering failed for %s", invoice.invoice_number)
                result = NotificationResult(success=False, error=f"PDF rendering failed: {exc}")
            else:
                result = self.dispatcher.send_invoice(document, pdf_bytes, recipient)

            invoice.email_attempts = (invoice.email_attempts or 0) + 1
            if result.success:
                invoice.email_sent = True
                invoice.email_sent_at = datetime.now(timezone.utc)
                invoice.last_email_error = None
            else:
                invoice.last_email_error = result.error
            db.commit()
        return result

    def resend(self, order_id: int, to: str | None = None) -> tuple[str, NotificationResult]:
        """Email the stored invoice again; number, totals and lines stay as issued."""
        invoice_id = self.issue_for_order(order_id)
        result = self.deliver(invoice_id, to)
        with self.session_factory() as db:
            invoice_number = db.scalar(select(Invoice.invoice_number).where(Invoice.id == invoice_id))
        return invoice_number or "", result
