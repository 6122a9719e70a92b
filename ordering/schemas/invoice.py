"""Invoice API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class InvoiceLineResponse(BaseModel):
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    customizations: str


class InvoiceResponse(BaseModel):
    """Stored invoice with delivery bookkeeping."""

    invoice_number: str
    order_id: int
    order_number: str
    order_type: str
    customer_name: str
    customer_email: str | None
    subtotal: Decimal
    delivery_fee: Decimal
    total_net: Decimal
    vat_amount: Decimal
    total_gross: Decimal
    payment_method: str
    issued_at: datetime
    email_sent: bool
    email_sent_at: datetime | None
    email_attempts: int
    last_email_error: str | None
    items: list[InvoiceLineResponse]

    model_config = ConfigDict(from_attributes=True)


class InvoiceResendRequest(BaseModel):
    email: str | None = None


class InvoiceResendResponse(BaseModel):
    success: bool
    invoice_number: str
    error: str | None = None
