"""Analytics response schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class GroupTotalResponse(BaseModel):
    key: str
    count: int
    revenue: Decimal

    model_config = ConfigDict(from_attributes=True)


class StatsOverviewResponse(BaseModel):
    period: str
    total_revenue: Decimal
    total_orders: int
    avg_order_value: Decimal
    revenue_by_type: list[GroupTotalResponse]
    orders_by_status: list[GroupTotalResponse]

    model_config = ConfigDict(from_attributes=True)


class TopItemResponse(BaseModel):
    menu_item_id: int
    name: str
    total_quantity: int
    total_revenue: Decimal
    order_count: int

    model_config = ConfigDict(from_attributes=True)
