"""Application models package."""

from ordering.models.admin_user import AdminUser
from ordering.models.app_setting import AppSetting
from ordering.models.invoice import Invoice
from ordering.models.menu import FriesOption, MenuItem, SauceOption
from ordering.models.order import Order, OrderItem, Payment
from ordering.models.restaurant import Restaurant

__all__ = [
    "AdminUser", "AppSetting", "Invoice", "MenuItem", "SauceOption", "FriesOption", "Order", "OrderItem", "Payment",
    "Restaurant",
]
