"""Dependencies resolving the services built at startup."""

from fastapi import Request

from ordering.services.invoice_service import InvoiceService
from ordering.services.order_service import OrderService


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_invoice_service(request: Request) -> InvoiceService:
    return request.app.state.invoice_service