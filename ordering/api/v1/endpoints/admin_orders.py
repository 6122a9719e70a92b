"""Admin order management endpoints."""

from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ordering.api.deps import get_invoice_service, get_order_service
from ordering.core.security import get_current_admin
from ordering.db.session import get_db
from ordering.models.invoice import Invoice
from ordering.schemas.invoice import (
    InvoiceLineResponse,
    InvoiceResendRequest,
    InvoiceResendResponse,
    InvoiceResponse,
)
from ordering.schemas.order import AcceptOrderRequest, OrderListResponse, OrderResponse, StatusUpdateRequest
from ordering.services.invoice_service import InvoiceService
from ordering.services.order_service import OrderService

router: APIRouter = APIRouter(dependencies=[Depends(get_current_admin)])


def _invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        invoice_number=invoice.invoice_number,
        order_id=invoice.order_id,
        order_number=invoice.order_number,
        order_type=invoice.order_type,
        customer_name=invoice.customer_name,
        customer_email=invoice.customer_email,
        subtotal=invoice.subtotal,
        delivery_fee=invoice.delivery_fee,
        total_net=invoice.total_net,
        vat_amount=invoice.vat_amount,
        total_gross=invoice.total_gross,
        payment_method=invoice.payment_method,
        issued_at=invoice.issued_at,
        email_sent=invoice.email_sent,
        email_sent_at=invoice.email_sent_at,
        email_attempts=invoice.email_attempts,
        last_email_error=invoice.last_email_error,
        items=[InvoiceLineResponse(**row) for row in invoice.items_snapshot or []],
    )


@router.get("", response_model=OrderListResponse)
def list_orders(
    status: str | None = None,
    day: date | None = Query(default=None, alias="date", description="UTC calendar day"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    date_from = date_to = None
    if day is not None:
        date_from = datetime.combine(day, time.min, tzinfo=timezone.utc)
        date_to = date_from + timedelta(days=1)
    rows, total = orders.list_orders(db, status=status, date_from=date_from, date_to=date_to, page=page, limit=limit)
    return OrderListResponse(items=[OrderResponse.from_order(order) for order in rows], total=total, page=page, limit=limit)


@router.get("/active", response_model=list[OrderResponse])
def list_active_orders(
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in orders.list_active(db)]


@router.get("/archived", response_model=OrderListResponse)
def list_archived_orders(
    period: str = "today",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    rows, total = orders.list_archived(db, period=period, page=page, limit=limit)
    return OrderListResponse(items=[OrderResponse.from_order(order) for order in rows], total=total, page=page, limit=limit)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.get_order(db, order_id))


@router.put("/{order_id}/accept", response_model=OrderResponse)
def accept_order(
    order_id: int,
    payload: AcceptOrderRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = orders.accept(db, order_id, payload.estimated_minutes, schedule=background_tasks.add_task)
    return OrderResponse.from_order(order)


@router.put("/{order_id}/preparing", response_model=OrderResponse)
def mark_preparing(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_preparing(db, order_id, schedule=background_tasks.add_task))


@router.put("/{order_id}/ready", response_model=OrderResponse)
def mark_ready(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_ready(db, order_id, schedule=background_tasks.add_task))


@router.put("/{order_id}/delivery", response_model=OrderResponse)
def mark_out_for_delivery(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.mark_out_for_delivery(db, order_id, schedule=background_tasks.add_task))


@router.put("/{order_id}/complete", response_model=OrderResponse)
def complete_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.complete(db, order_id, schedule=background_tasks.add_task))


@router.put("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.cancel(db, order_id, schedule=background_tasks.add_task))


@router.put("/{order_id}/refund", response_model=OrderResponse)
def refund_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.from_order(orders.refund(db, order_id, schedule=background_tasks.add_task))


@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_status(
    order_id: int,
    payload: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
) -> OrderResponse:
    estimated_time = None
    if payload.estimated_minutes is not None:
        estimated_time = datetime.now(timezone.utc) + timedelta(minutes=payload.estimated_minutes)
    order = orders.set_status(
        db,
        order_id,
        payload.status,
        estimated_time=estimated_time,
        schedule=background_tasks.add_task,
    )
    return OrderResponse.from_order(order)


@router.get("/{order_id}/invoice", response_model=InvoiceResponse)
def get_invoice(
    order_id: int,
    db: Session = Depends(get_db),
    invoices: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    return _invoice_response(invoices.get_invoice(db, order_id))


@router.get("/{order_id}/invoice.pdf")
def download_invoice_pdf(
    order_id: int,
    db: Session = Depends(get_db),
    invoices: InvoiceService = Depends(get_invoice_service),
) -> Response:
    filename, pdf_bytes = invoices.render_pdf(db, order_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{order_id}/invoice/resend", response_model=InvoiceResendResponse)
def resend_invoice(
    order_id: int,
    payload: InvoiceResendRequest | None = None,
    invoices: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResendResponse:
    """Send the stored invoice again. Number and totals are never recomputed."""
    invoice_number, result = invoices.resend(order_id, payload.email if payload else None)
    return InvoiceResendResponse(success=result.success, invoice_number=invoice_number, error=result.error)
