"""Schema exports."""

from ordering.schemas.auth import AdminResponse, LoginRequest, TokenResponse
from ordering.schemas.invoice import InvoiceResendRequest, InvoiceResendResponse, InvoiceResponse
from ordering.schemas.menu import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from ordering.schemas.order import OrderCreate, OrderItemPayload, OrderResponse, PaidOrderCreate
from ordering.schemas.stats import StatsOverviewResponse, TopItemResponse

__all__ = [
    "AdminResponse",
    "LoginRequest",
    "TokenResponse",
    "InvoiceResendRequest",
    "InvoiceResendResponse",
    "InvoiceResponse",
    "MenuItemCreate",
    "MenuItemResponse",
    "MenuItemUpdate",
    "OrderCreate",
    "OrderItemPayload",
    "OrderResponse",
    "PaidOrderCreate",
    "StatsOverviewResponse",
    "TopItemResponse",
]
