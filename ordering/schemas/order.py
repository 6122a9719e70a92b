"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ordering.models.order import Order
from ordering.services.order_service import CapturedPayment, OrderRequest
from ordering.services.pricing import OrderLineRequest

SLUG_FIELD = Field(default=None, max_length=120, pattern=r"^[a-z0-9-]+$")


class OrderItemPayload(BaseModel):
    """Single cart line with its customizations."""

    menu_item_id: int
    quantity: int = Field(default=1, ge=1, le=99)
    selected_sauce: str | None = SLUG_FIELD
    fries_upgrade: str | None = SLUG_FIELD
    extras: list[str] = Field(default_factory=list, max_length=20)
    remove_items: list[str] = Field(default_factory=list, max_length=20)
    special_notes: str | None = Field(default=None, max_length=500)

    def to_line(self) -> OrderLineRequest:
        return OrderLineRequest(
            menu_item_id=self.menu_item_id,
            quantity=self.quantity,
            selected_sauce=self.selected_sauce,
            fries_upgrade=self.fries_upgrade,
            extras=tuple(self.extras),
            remove_items=tuple(self.remove_items),
            special_notes=self.special_notes,
        )


class OrderCreate(BaseModel):
    """Public order placement payload."""

    order_type: Literal["DELIVERY", "PICKUP"]
    payment_method: Literal["CASH", "CARD", "ONLINE", "TRANSFER"] = "CASH"
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=3, max_length=64)
    customer_email: str | None = Field(default=None, max_length=255)
    delivery_address: str | None = None
    delivery_notes: str | None = Field(default=None, max_length=500)
    special_notes: str | None = Field(default=None, max_length=500)
    scheduled_for: datetime | None = None
    items: list[OrderItemPayload] = Field(min_length=1)

    def to_request(self) -> OrderRequest:
        return OrderRequest(
            order_type=self.order_type,
            payment_method=self.payment_method,
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            customer_email=self.customer_email,
            delivery_address=self.delivery_address,
            delivery_notes=self.delivery_notes,
            special_notes=self.special_notes,
            scheduled_for=self.scheduled_for,
            items=[item.to_line() for item in self.items],
        )


class PaidOrderCreate(OrderCreate):
    """Order whose payment the processor already captured."""

    payment_method: Literal["CARD", "ONLINE"] = "ONLINE"
    amount_paid: Decimal = Field(ge=0)
    transaction_id: str | None = Field(default=None, max_length=255)
    gateway_response: dict = Field(default_factory=dict)

    def to_payment(self) -> CapturedPayment:
        return CapturedPayment(
            amount=self.amount_paid,
            transaction_id=self.transaction_id,
            gateway_response=self.gateway_response,
        )


class OrderItemResponse(BaseModel):
    """Serialized order line."""

    id: int
    menu_item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    selected_sauce: str | None
    fries_upgrade: str | None
    extras: list[str]
    remove_items: list[str]
    special_notes: str | None

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order for admins and the placement response."""

    id: int
    order_number: str
    status: str
    order_type: str
    payment_method: str
    payment_status: str
    customer_name: str
    customer_phone: str
    customer_email: str | None
    delivery_address: str | None
    delivery_notes: str | None
    special_notes: str | None
    subtotal: Decimal
    delivery_fee: Decimal
    discount: Decimal
    total: Decimal
    scheduled_for: datetime | None
    estimated_time: datetime | None
    created_at: datetime
    status_updated_at: datetime | None
    confirmed_at: datetime | None
    preparing_at: datetime | None
    ready_at: datetime | None
    out_for_delivery_at: datetime | None
    delivered_at: datetime | None
    cancelled_at: datetime | None
    refunded_at: datetime | None
    invoice_number: str | None = None
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        response = cls.model_validate(order)
        if order.invoice is not None:
            response.invoice_number = order.invoice.invoice_number
        return response


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int


class OrderTrackingItem(BaseModel):
    name: str
    quantity: int
    total_price: Decimal
    display_customizations: str


class OrderTrackingResponse(BaseModel):
    """Public order status view, looked up by order number."""

    order_number: str
    status: str
    order_type: str
    total: Decimal
    created_at: datetime
    status_updated_at: datetime | None
    estimated_time: datetime | None
    items: list[OrderTrackingItem]


class AcceptOrderRequest(BaseModel):
    estimated_minutes: int | None = None


class StatusUpdateRequest(BaseModel):
    status: str
    estimated_minutes: int | None = Field(default=None, gt=0)
