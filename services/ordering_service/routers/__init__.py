"""Ordering service routers package."""

from services.ordering_service.routers.admin import router as admin_router
from services.ordering_service.routers.catalog import router as catalog_router
from services.ordering_service.routers.checkout import router as checkout_router
from services.ordering_service.routers.points import router as points_router
from services.ordering_service.routers.store import router as store_router

__all__ = [
    "admin_router",
    "catalog_router",
    "checkout_router",
    "points_router",
    "store_router",
]
