"""API v1 router composition."""

from fastapi import APIRouter

from ordering.api.v1.endpoints import admin_auth, admin_menu, admin_orders, orders, public, stats

api_router: APIRouter = APIRouter()
api_router.include_router(public.router, tags=["public"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(admin_auth.router, prefix="/admin/auth", tags=["admin-auth"])
api_router.include_router(admin_orders.router, prefix="/admin/orders", tags=["admin-orders"])
api_router.include_router(admin_menu.router, prefix="/admin/menu", tags=["admin-menu"])
api_router.include_router(stats.router, prefix="/admin/stats", tags=["admin-stats"])
