"""Ordering Service models package."""

from services.ordering_service.models.catalog import (
    Category,
    OptionCategory,
    Product,
    ProductAvailableOption,
    ProductOption,
)
from services.ordering_service.models.commerce import (
    Order,
    OrderItem,
    OrderItemCustomization,
)
from services.ordering_service.models.enums import OrderStatus, PointsHistoryType
from services.ordering_service.models.loyalty import PointsHistory, User
from services.ordering_service.models.settings import StoreSettings

__all__ = [
    "Category",
    "OptionCategory",
    "Order",
    "OrderItem",
    "OrderItemCustomization",
    "OrderStatus",
    "PointsHistory",
    "PointsHistoryType",
    "Product",
    "ProductAvailableOption",
    "ProductOption",
    "StoreSettings",
    "User",
]
