"""
API v1 Router

Notification routes are split between /notifications (by notification id)
and /users/{user_id}/notifications (by recipient).
"""

from fastapi import APIRouter
from . import admin, notifications, rush_orders

router = APIRouter()

router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(
    notifications.user_router,
    prefix="/users/{user_id}/notifications",
    tags=["Notifications"],
)
router.include_router(rush_orders.router, prefix="/rush-orders", tags=["Rush Orders"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/notifications",
            "/users/{user_id}/notifications",
            "/rush-orders",
            "/rush-orders/{rush_order_id}/messages",
            "/admin/storage/buckets",
            "/admin/init-database",
        ],
    }
