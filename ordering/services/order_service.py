"""Order placement and lifecycle transitions with their side effects."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ordering.core.config import Settings
from ordering.core.errors import (
    ConcurrencyError,
    InvalidEstimateError,
    OrderNotFoundError,
    PaymentMismatchError,
    ValidationError,
)
from ordering.models.order import Order, OrderItem, Payment
from ordering.services import menu_service, settings_service
from ordering.services.events import NEW_ORDER, ORDER_COMPLETED, ORDER_STATUS_UPDATE, EventBroadcaster
from ordering.services.invoice_builder import describe_customizations
from ordering.services.invoice_service import InvoiceService
from ordering.services.money import round2, to_money
from ordering.services.notifications import NotificationDispatcher, NotificationResult, OrderSummary, SummaryLine
from ordering.services.order_status import ACTIVE_STATUSES, ensure_transition, set_status, validate_status
from ordering.services.pricing import OrderLineRequest, PricedOrder, SqlCatalog, order_totals, price_order
from ordering.utils.time import period_window, utcnow

logger = logging.getLogger(__name__)

PAYMENT_TOLERANCE: Decimal = Decimal("0.01")
STATUS_EMAIL_STATUSES: frozenset[str] = frozenset({"READY", "OUT_FOR_DELIVERY"})
ARCHIVED_STATUSES: tuple[str, ...] = ("DELIVERED", "CANCELLED")

Scheduler = Callable[..., Any]


def run_now(func_: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Scheduler used when no background runner is provided."""
    func_(*args, **kwargs)


@dataclass(frozen=True)
class OrderRequest:
    order_type: str
    customer_name: str
    customer_phone: str
    items: Sequence[OrderLineRequest]
    payment_method: str = "CASH"
    customer_email: str | None = None
    delivery_address: str | None = None
    delivery_notes: str | None = None
    special_notes: str | None = None
    scheduled_for: datetime | None = None


@dataclass(frozen=True)
class CapturedPayment:
    amount: Decimal
    transaction_id: str | None = None
    gateway_response: dict[str, Any] = field(default_factory=dict)


def generate_order_number(db: Session, prefix: str, now: datetime | None = None) -> str:
    """``PREFIX-YYYYMMDD-HHMMSS-NNN`` with a random suffix, unique in the table."""
    now = now or utcnow()
    stamp = now.strftime("%Y%m%d-%H%M%S")
    for _ in range(10):
        candidate = f"{prefix}-{stamp}-{secrets.randbelow(1000):03d}"
        if db.scalar(select(Order.id).where(Order.order_number == candidate)) is None:
            return candidate
    raise ConcurrencyError("Could not generate a unique order number")


def status_payload(order: Order, stamped_field: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": order.id,
        "orderNumber": order.order_number,
        "status": order.status,
        "statusUpdatedAt": order.status_updated_at.isoformat() if order.status_updated_at else None,
    }
    if stamped_field is not None:
        value = getattr(order, stamped_field)
        payload[stamped_field] = value.isoformat() if value else None
    if order.estimated_time is not None:
        payload["estimatedTime"] = order.estimated_time.isoformat()
    return payload


class OrderService:
    """Places orders and moves them through the status table.

    Every mutation commits before side effects run. Side effects are
    best-effort: a failed email or listener never undoes a committed change.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        invoices: InvoiceService,
        dispatcher: NotificationDispatcher,
        events: EventBroadcaster,
        config: Settings,
    ) -> None:
        self.session_factory = session_factory
        self.invoices = invoices
        self.dispatcher = dispatcher
        self.events = events
        self.config = config

    # Placement

    def _validate(self, request: OrderRequest) -> None:
        if not request.items:
            raise ValidationError("Order must contain at least one item")
        if not request.customer_name.strip() or not request.customer_phone.strip():
            raise ValidationError("Customer name and phone are required")
        if request.order_type == "DELIVERY" and not (request.delivery_address or "").strip():
            raise ValidationError("Delivery address is required for delivery orders")

    def _price(self, db: Session, request: OrderRequest) -> tuple[PricedOrder, Decimal, Decimal]:
        self._validate(request)
        priced = price_order(request.items, SqlCatalog(db))
        configured_fee = settings_service.get_delivery_fee(db, default=self.config.default_delivery_fee)
        totals = order_totals(priced.subtotal, request.order_type, configured_fee)
        return priced, totals.delivery_fee, totals.total

    def _persist(
        self,
        db: Session,
        request: OrderRequest,
        priced: PricedOrder,
        delivery_fee: Decimal,
        total: Decimal,
        *,
        payment: CapturedPayment | None = None,
    ) -> Order:
        now = utcnow()
        order = Order(
            order_number=generate_order_number(db, self.config.order_number_prefix, now),
            status="PENDING",
            order_type=request.order_type,
            payment_method=request.payment_method,
            payment_status="COMPLETED" if payment is not None else "PENDING",
            customer_name=request.customer_name.strip(),
            customer_phone=request.customer_phone.strip(),
            customer_email=request.customer_email or None,
            delivery_address=request.delivery_address if request.order_type == "DELIVERY" else None,
            delivery_notes=request.delivery_notes or None,
            special_notes=request.special_notes or None,
            subtotal=round2(priced.subtotal),
            delivery_fee=round2(delivery_fee),
            discount=Decimal("0.00"),
            total=round2(total),
            scheduled_for=request.scheduled_for,
            created_at=now,
            status_updated_at=now,
        )
        order.items = [
            OrderItem(
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=round2(line.total_price),
                selected_sauce=line.selected_sauce,
                fries_upgrade=line.fries_upgrade,
                extras=list(line.extras),
                remove_items=list(line.remove_items),
                special_notes=line.special_notes,
            )
            for line in priced.items
        ]
        if payment is not None:
            order.payments.append(
                Payment(
                    payment_method=request.payment_method,
                    status="COMPLETED",
                    amount=round2(payment.amount),
                    transaction_id=payment.transaction_id,
                    gateway_response=payment.gateway_response or None,
                )
            )
        db.add(order)
        db.commit()
        db.refresh(order)
        logger.info("[ORDER] Placed %s total=%s type=%s", order.order_number, order.total, order.order_type)
        return order

    def _after_placement(self, order: Order, schedule: Scheduler) -> None:
        invoice_id: int | None = None
        try:
            invoice_id = self.invoices.issue_for_order(order.id)
        except Exception:
            logger.exception("[ORDER] Invoice not issued for %s; it can be issued on resend", order.order_number)

        self.events.publish(
            NEW_ORDER,
            {
                "id": order.id,
                "orderNumber": order.order_number,
                "status": order.status,
                "orderType": order.order_type,
                "customerName": order.customer_name,
                "total": str(order.total),
                "createdAt": order.created_at.isoformat(),
            },
        )

        if order.customer_email:
            if invoice_id is not None:
                schedule(self.invoices.deliver, invoice_id)
            schedule(self.send_confirmation_email, order.id)

    def place_order(self, db: Session, request: OrderRequest, *, schedule: Scheduler = run_now) -> Order:
        """Price, persist, issue the invoice, announce, then queue customer emails."""
        priced, delivery_fee, total = self._price(db, request)
        order = self._persist(db, request, priced, delivery_fee, total)
        self._after_placement(order, schedule)
        return order

    def place_paid_order(
        self,
        db: Session,
        request: OrderRequest,
        payment: CapturedPayment,
        *,
        schedule: Scheduler = run_now,
    ) -> Order:
        """Place an order whose payment was already captured by the processor.

        The captured amount must match the computed total within one cent,
        otherwise nothing is stored.
        """
        priced, delivery_fee, total = self._price(db, request)
        captured = to_money(payment.amount)
        if abs(captured - total) > PAYMENT_TOLERANCE:
            logger.warning("[ORDER] Payment mismatch: captured=%s expected=%s", captured, total)
            raise PaymentMismatchError(captured, round2(total))
        order = self._persist(db, request, priced, delivery_fee, total, payment=payment)
        self._after_placement(order, schedule)
        return order

    # Lifecycle

    def get_order(self, db: Session, order_id: int) -> Order:
        order = db.scalar(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .where(Order.id == order_id)
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get_by_number(self, db: Session, order_number: str) -> Order:
        order = db.scalar(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .where(Order.order_number == order_number)
        )
        if order is None:
            raise OrderNotFoundError(order_number)
        return order

    def _transition(
        self,
        db: Session,
        order_id: int,
        new_status: str,
        *,
        estimated_time: datetime | None = None,
        schedule: Scheduler = run_now,
    ) -> Order:
        order = self.get_order(db, order_id)
        ensure_transition(order, new_status)

        previous = order.status
        stamped = set_status(order, new_status, utcnow())
        if estimated_time is not None:
            order.estimated_time = estimated_time
        db.commit()
        db.refresh(order)
        logger.info("[ORDER] %s: %s -> %s", order.order_number, previous, new_status)

        payload = status_payload(order, stamped)
        self.events.publish(ORDER_STATUS_UPDATE, payload)
        if new_status == "DELIVERED":
            self.events.publish(ORDER_COMPLETED, payload)
        if new_status in STATUS_EMAIL_STATUSES and order.customer_email:
            schedule(self.send_status_email, order.id)
        return order

    def accept(
        self,
        db: Session,
        order_id: int,
        estimated_minutes: int | None,
        *,
        schedule: Scheduler = run_now,
    ) -> Order:
        if estimated_minutes is None or estimated_minutes <= 0:
            raise InvalidEstimateError()
        estimated_time = utcnow() + timedelta(minutes=estimated_minutes)
        return self._transition(db, order_id, "CONFIRMED", estimated_time=estimated_time, schedule=schedule)

    def mark_preparing(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        return self._transition(db, order_id, "PREPARING", schedule=schedule)

    def mark_ready(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        return self._transition(db, order_id, "READY", schedule=schedule)

    def mark_out_for_delivery(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        return self._transition(db, order_id, "OUT_FOR_DELIVERY", schedule=schedule)

    def complete(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        return self._transition(db, order_id, "DELIVERED", schedule=schedule)

    def cancel(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        return self._transition(db, order_id, "CANCELLED", schedule=schedule)

    def refund(self, db: Session, order_id: int, *, schedule: Scheduler = run_now) -> Order:
        order = self._transition(db, order_id, "REFUNDED", schedule=schedule)
        if order.payment_status == "COMPLETED":
            order.payment_status = "REFUNDED"
            db.commit()
            db.refresh(order)
        return order

    def set_status(
        self,
        db: Session,
        order_id: int,
        status: str,
        *,
        estimated_time: datetime | None = None,
        schedule: Scheduler = run_now,
    ) -> Order:
        """Direct status change; same transition rules as the named operations."""
        validate_status(status)
        if status == "REFUNDED":
            return self.refund(db, order_id, schedule=schedule)
        return self._transition(db, order_id, status, estimated_time=estimated_time, schedule=schedule)

    # Listings

    def list_orders(
        self,
        db: Session,
        *,
        status: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == validate_status(status))
        if date_from is not None:
            stmt = stmt.where(Order.created_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(Order.created_at < date_to)
        total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        orders = db.scalars(
            stmt.options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return list(orders), total

    def list_active(self, db: Session) -> list[Order]:
        """Orders still moving through the kitchen, oldest first."""
        return list(
            db.scalars(
                select(Order)
                .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
                .where(Order.status.in_(ACTIVE_STATUSES))
                .order_by(Order.created_at.asc(), Order.id.asc())
            )
        )

    def list_archived(self, db: Session, *, period: str = "today", page: int = 1, limit: int = 20) -> tuple[list[Order], int]:
        start, end = period_window(period)
        stmt = select(Order).where(Order.status.in_(ARCHIVED_STATUSES))
        if start is not None:
            stmt = stmt.where(Order.created_at >= start)
        if end is not None:
            stmt = stmt.where(Order.created_at < end)
        total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        orders = db.scalars(
            stmt.options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return list(orders), total

    # Customer emails

    def build_summary(self, db: Session, order: Order) -> OrderSummary:
        sauces = menu_service.sauce_names(db)
        fries = menu_service.fries_names(db)
        return OrderSummary(
            order_number=order.order_number,
            customer_name=order.customer_name,
            status=order.status,
            order_type=order.order_type,
            total=order.total,
            payment_method=order.payment_method,
            estimated_time=order.estimated_time.isoformat() if order.estimated_time else None,
            lines=tuple(
                SummaryLine(
                    name=item.name,
                    quantity=item.quantity,
                    total_price=item.total_price,
                    customizations=describe_customizations(
                        selected_sauce=item.selected_sauce,
                        fries_upgrade=item.fries_upgrade,
                        extras=item.extras,
                        remove_items=item.remove_items,
                        special_notes=item.special_notes,
                        sauce_names=sauces,
                        fries_names=fries,
                        includes_sides=item.includes_sides,
                    ),
                )
                for item in order.items
            ),
        )

    def send_confirmation_email(self, order_id: int) -> NotificationResult:
        with self.session_factory() as db:
            order = self.get_order(db, order_id)
            summary = self.build_summary(db, order)
            recipient = order.customer_email
        return self.dispatcher.send_order_confirmation(summary, recipient)

    def send_status_email(self, order_id: int) -> NotificationResult:
        with self.session_factory() as db:
            order = self.get_order(db, order_id)
            summary = self.build_summary(db, order)
            recipient = order.customer_email
        return self.dispatcher.send_status_notification(summary, recipient)
