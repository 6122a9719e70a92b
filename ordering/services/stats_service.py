"""Sales analytics over placed orders. Cancelled orders never count as revenue."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ordering.models.menu import MenuItem
from ordering.models.order import Order, OrderItem
from ordering.services.money import round2
from ordering.utils.time import period_window

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class GroupTotal:
    key: str
    count: int
    revenue: Decimal = ZERO


@dataclass(frozen=True)
class StatsOverview:
    period: str
    total_revenue: Decimal
    total_orders: int
    avg_order_value: Decimal
    revenue_by_type: list[GroupTotal] = field(default_factory=list)
    orders_by_status: list[GroupTotal] = field(default_factory=list)


@dataclass(frozen=True)
class TopItem:
    menu_item_id: int
    name: str
    total_quantity: int
    total_revenue: Decimal
    order_count: int


def _in_period(stmt: Select, period: str) -> Select:
    start, end = period_window(period)
    if start is not None:
        stmt = stmt.where(Order.created_at >= start)
    if end is not None:
        stmt = stmt.where(Order.created_at < end)
    return stmt


def _as_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    return round2(Decimal(str(value)))


def overview(db: Session, period: str = "today") -> StatsOverview:
    not_cancelled = Order.status != "CANCELLED"

    totals = db.execute(
        _in_period(select(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).where(not_cancelled), period)
    ).one()
    total_revenue = _as_decimal(totals[0])
    total_orders = int(totals[1] or 0)
    avg_value = round2(total_revenue / total_orders) if total_orders else ZERO

    by_type = db.execute(
        _in_period(
            select(Order.order_type, func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
            .where(not_cancelled)
            .group_by(Order.order_type),
            period,
        )
    ).all()
    by_status = db.execute(
        _in_period(select(Order.status, func.count(Order.id)).group_by(Order.status), period)
    ).all()

    return StatsOverview(
        period=period,
        total_revenue=total_revenue,
        total_orders=total_orders,
        avg_order_value=avg_value,
        revenue_by_type=[GroupTotal(key=row[0], count=int(row[1]), revenue=_as_decimal(row[2])) for row in by_type],
        orders_by_status=[GroupTotal(key=row[0], count=int(row[1])) for row in by_status],
    )


def payment_methods(db: Session, period: str = "month") -> list[GroupTotal]:
    rows = db.execute(
        _in_period(
            select(Order.payment_method, func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
            .where(Order.status != "CANCELLED")
            .group_by(Order.payment_method),
            period,
        )
    ).all()
    return [GroupTotal(key=row[0], count=int(row[1]), revenue=_as_decimal(row[2])) for row in rows]


def top_items(db: Session, period: str = "month", *, limit: int = 10, sort_by: str = "revenue") -> list[TopItem]:
    revenue = func.coalesce(func.sum(OrderItem.total_price), 0)
    quantity = func.coalesce(func.sum(OrderItem.quantity), 0)
    stmt = (
        select(OrderItem.menu_item_id, MenuItem.name, quantity, revenue, func.count(func.distinct(OrderItem.order_id)))
        .join(Order, Order.id == OrderItem.order_id)
        .join(MenuItem, MenuItem.id == OrderItem.menu_item_id)
        .where(Order.status != "CANCELLED")
        .group_by(OrderItem.menu_item_id, MenuItem.name)
        .order_by((quantity if sort_by == "quantity" else revenue).desc(), OrderItem.menu_item_id.asc())
        .limit(limit)
    )
    rows = db.execute(_in_period(stmt, period)).all()
    return [
        TopItem(
            menu_item_id=row[0],
            name=row[1],
            total_quantity=int(row[2]),
            total_revenue=_as_decimal(row[3]),
            order_count=int(row[4]),
        )
        for row in rows
    ]
