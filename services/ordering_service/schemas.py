"""Pydantic schemas for the ordering service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import Currency
from pydantic import BaseModel, ConfigDict, Field
from services.ordering_service.availability import WeeklySchedule
from services.ordering_service.customization import CategoryWithOptions
from services.ordering_service.models import PointsHistoryType

# ============================================================================
# STORE SCHEMAS
# ============================================================================


class StoreStatusResponse(BaseModel):
    is_open: bool
    auto_close_enabled: bool
    working_hours: WeeklySchedule
    open_now: bool


class StoreStatusUpdate(BaseModel):
    is_open: Optional[bool] = None
    auto_close_enabled: Optional[bool] = None


class WorkingHoursUpdate(BaseModel):
    working_hours: WeeklySchedule
    auto_close_enabled: Optional[bool] = None


# ============================================================================
# CURRENCY SCHEMAS
# ============================================================================


class CurrencyRatesResponse(BaseModel):
    base: Currency
    rates: dict[str, Decimal]


class CurrencyRateUpdate(BaseModel):
    # Range is checked by the rate service so the response carries its reason
    rate: Decimal


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================


class ProductCustomizationsResponse(BaseModel):
    product_id: str
    product_name: str
    base_price: Decimal
    categories: list[CategoryWithOptions] = []


# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class CheckoutLine(BaseModel):
    product_id: str
    option_ids: list[str] = []
    quantity: int = Field(1, ge=1, le=99)
    special_instructions: Optional[str] = Field(None, max_length=500)


class QuoteRequest(BaseModel):
    lines: list[CheckoutLine] = []
    points_to_use: Decimal = Decimal("0")
    # Display currency; falls back to the one implied by ``language``
    currency: Optional[Currency] = None
    language: Optional[str] = Field(None, max_length=10)


class CheckoutRequestBody(QuoteRequest):
    delivery_address: Optional[str] = Field(None, max_length=1000)
    address_id: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)


class CustomizationResponse(BaseModel):
    option_id: str
    option_name: str
    option_price: Decimal


class QuoteLineResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    customizations: list[CustomizationResponse] = []
    special_instructions: Optional[str] = None
    display_unit_price: str
    display_line_total: str


class QuoteResponse(BaseModel):
    lines: list[QuoteLineResponse]
    item_count: int
    subtotal: Decimal
    points_balance: Decimal
    points_requested: Decimal
    points_applied: Decimal
    points_clamped: bool
    final_total: Decimal
    points_to_earn: Decimal

    currency: Currency
    display_subtotal: str
    display_discount: str
    display_final_total: str


class PlacedOrderResponse(BaseModel):
    order_id: uuid.UUID
    order_number: str
    status: str
    subtotal: Decimal
    points_used: Decimal
    final_total: Decimal
    points_balance: Decimal
    points_to_earn: Decimal
    created_at: datetime
    warnings: list[str] = []


# ============================================================================
# POINTS SCHEMAS
# ============================================================================


class PointsHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    points: Decimal
    type: PointsHistoryType
    description: Optional[str] = None
    created_at: datetime


class PointsSummaryResponse(BaseModel):
    balance: Decimal
    history: list[PointsHistoryResponse] = []
