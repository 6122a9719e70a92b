"""Order models for placed customer orders."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ordering.db.base import Base

ORDER_STATUSES = (
    "PENDING",
    "CONFIRMED",
    "PREPARING",
    "READY",
    "OUT_FOR_DELIVERY",
    "DELIVERED",
    "CANCELLED",
    "REFUNDED",
)
ORDER_TYPES = ("DELIVERY", "PICKUP")
PAYMENT_METHODS = ("CASH", "CARD", "ONLINE", "TRANSFER")
PAYMENT_STATUSES = ("PENDING", "COMPLETED", "FAILED", "REFUNDED")

payment_method_enum = Enum(*PAYMENT_METHODS, name="payment_method")
payment_status_enum = Enum(*PAYMENT_STATUSES, name="payment_status")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Customer order; mutated only through status transitions."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(String(40), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(Enum(*ORDER_STATUSES, name="order_status"), nullable=False, default="PENDING")
    order_type: Mapped[str] = mapped_column(Enum(*ORDER_TYPES, name="order_type"), nullable=False)
    payment_method: Mapped[str] = mapped_column(payment_method_enum, nullable=False)
    payment_status: Mapped[str] = mapped_column(
        payment_status_enum,
        nullable=False,
        default="PENDING",
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    delivery_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    preparing_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ready_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    out_for_delivery_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    invoice: Mapped["Invoice | None"] = relationship(back_populates="order", uselist=False)
    payments: Mapped[list["Payment"]] = relationship(back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """Priced order line snapshot."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id: Mapped[int] = mapped_column(ForeignKey("menu_items.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    selected_sauce: Mapped[str | None] = mapped_column(String(120), nullable=True)
    fries_upgrade: Mapped[str | None] = mapped_column(String(120), nullable=True)
    extras: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    remove_items: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()

    @property
    def name(self) -> str:
        return self.menu_item.name if self.menu_item is not None else f"#{self.menu_item_id}"

    @property
    def includes_sides(self) -> bool:
        return self.menu_item.includes_sides if self.menu_item is not None else False


class Payment(Base):
    """Captured payment recorded for the paid-order flow."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    payment_method: Mapped[str] = mapped_column(payment_method_enum, nullable=False)
    status: Mapped[str] = mapped_column(payment_status_enum, nullable=False, default="PENDING")
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gateway_response: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    order: Mapped[Order] = relationship(back_populates="payments")
