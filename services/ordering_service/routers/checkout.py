"""Checkout router: server-side quotes and order placement."""

from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.common.currency import (
    BASE_CURRENCY,
    Currency,
    ExchangeRates,
    currency_for_language,
)
from libs.common.logging import get_logger
from libs.common.rejections import Rejection, raise_for_rejection
from libs.db.session import get_async_db
from services.ordering_service.checkout import (
    CatalogLookup,
    CheckoutRequest,
    LineRequest,
    OrderSink,
    PricedOrder,
    StoreStatusSource,
    place_order,
    quote_order,
)
from services.ordering_service.dependencies import (
    get_catalog,
    get_earning_rule,
    get_exchange_rates,
    get_now,
    get_order_sink,
    get_points_ledger,
    get_store_status_source,
    get_store_tz,
)
from services.ordering_service.loyalty import POINT_VALUE, PointsLedger, points_to_earn
from services.ordering_service.schemas import (
    CheckoutRequestBody,
    CustomizationResponse,
    PlacedOrderResponse,
    QuoteLineResponse,
    QuoteRequest,
    QuoteResponse,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])


def _display_currency(payload: QuoteRequest) -> Currency:
    if payload.currency is not None:
        return payload.currency
    if payload.language:
        return currency_for_language(payload.language)
    return BASE_CURRENCY


def _to_checkout_request(
    payload: QuoteRequest, current_user: Optional[AuthUser]
) -> CheckoutRequest:
    extra = {}
    if isinstance(payload, CheckoutRequestBody):
        extra = {
            "delivery_address": payload.delivery_address,
            "address_id": payload.address_id,
            "phone": payload.phone,
            "notes": payload.notes,
        }
    return CheckoutRequest(
        user_id=current_user.user_id if current_user else None,
        lines=tuple(
            LineRequest(
                product_id=line.product_id,
                option_ids=tuple(line.option_ids),
                quantity=line.quantity,
                special_instructions=line.special_instructions,
            )
            for line in payload.lines
        ),
        points_to_use=payload.points_to_use,
        **extra,
    )


def _quote_response(
    priced: PricedOrder,
    currency: Currency,
    rates: ExchangeRates,
    earning_rule: tuple[Decimal, Decimal],
) -> QuoteResponse:
    redemption = priced.redemption
    return QuoteResponse(
        lines=[
            QuoteLineResponse(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
                customizations=[
                    CustomizationResponse(
                        option_id=c.option_id,
                        option_name=c.option_name,
                        option_price=c.option_price,
                    )
                    for c in line.customizations
                ],
                special_instructions=line.special_instructions,
                display_unit_price=rates.display(line.unit_price, currency),
                display_line_total=rates.display(line.line_total, currency),
            )
            for line in priced.cart.lines
        ],
        item_count=priced.cart.item_count(),
        subtotal=priced.subtotal,
        points_balance=priced.points_balance,
        points_requested=redemption.requested,
        points_applied=redemption.accepted,
        points_clamped=redemption.clamped,
        final_total=priced.final_total,
        points_to_earn=points_to_earn(priced.final_total, *earning_rule),
        currency=currency,
        display_subtotal=rates.display(priced.subtotal, currency),
        display_discount=rates.display(redemption.accepted * POINT_VALUE, currency),
        display_final_total=rates.display(priced.final_total, currency),
    )


# ============================================================================
# QUOTE
# ============================================================================


@router.post("/checkout/quote", response_model=QuoteResponse)
async def quote_checkout(
    payload: QuoteRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    catalog: CatalogLookup = Depends(get_catalog),
    ledger: PointsLedger = Depends(get_points_ledger),
    rates: ExchangeRates = Depends(get_exchange_rates),
    earning_rule: tuple[Decimal, Decimal] = Depends(get_earning_rule),
):
    """Price a cart from live catalog data. Nothing is persisted."""
    request = _to_checkout_request(payload, current_user)
    priced = await quote_order(request, catalog=catalog, ledger=ledger)
    if isinstance(priced, Rejection):
        raise_for_rejection(priced)

    return _quote_response(priced, _display_currency(payload), rates, earning_rule)


# ============================================================================
# PLACE ORDER
# ============================================================================


@router.post(
    "/checkout",
    response_model=PlacedOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_checkout(
    payload: CheckoutRequestBody,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
    catalog: CatalogLookup = Depends(get_catalog),
    ledger: PointsLedger = Depends(get_points_ledger),
    status_source: StoreStatusSource = Depends(get_store_status_source),
    order_sink: OrderSink = Depends(get_order_sink),
    now: datetime = Depends(get_now),
    tz: tzinfo = Depends(get_store_tz),
    earning_rule: tuple[Decimal, Decimal] = Depends(get_earning_rule),
):
    """Place an order: preconditions, repricing, order row and points debit.

    The order and the points debit are committed together; any rejection
    after the order was staged rolls both back.
    """
    request = _to_checkout_request(payload, current_user)
    result = await place_order(
        request,
        catalog=catalog,
        ledger=ledger,
        status_source=status_source,
        order_sink=order_sink,
        now=now,
        tz=tz,
    )
    if isinstance(result, Rejection):
        await db.rollback()
        raise_for_rejection(result)

    await db.commit()

    order = result.order
    return PlacedOrderResponse(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        subtotal=order.subtotal,
        points_used=order.points_used,
        final_total=order.final_total,
        points_balance=result.debit.balance_after,
        points_to_earn=points_to_earn(order.final_total, *earning_rule),
        created_at=order.created_at,
        warnings=result.warnings,
    )
