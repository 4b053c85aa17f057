from .admin import router as admin_router
from .coupons import router as coupons_router
from .health import router as health_router
from .notifications import router as notifications_router
from .orders import router as orders_router
from .payments import router as payments_router

__all__ = [
    "admin_router",
    "coupons_router",
    "health_router",
    "notifications_router",
    "orders_router",
    "payments_router",
]
