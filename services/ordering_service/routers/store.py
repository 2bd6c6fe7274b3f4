"""Public store router: availability and exchange rates."""

from datetime import datetime, tzinfo

from fastapi import APIRouter, Depends
from libs.common.currency import BASE_CURRENCY, ExchangeRates
from services.ordering_service.availability import is_open_now
from services.ordering_service.checkout import StoreStatusSource
from services.ordering_service.dependencies import (
    get_exchange_rates,
    get_now,
    get_store_status_source,
    get_store_tz,
)
from services.ordering_service.schemas import CurrencyRatesResponse, StoreStatusResponse

router = APIRouter(tags=["store"])


@router.get("/store/status", response_model=StoreStatusResponse)
async def get_store_status(
    status_source: StoreStatusSource = Depends(get_store_status_source),
    now: datetime = Depends(get_now),
    tz: tzinfo = Depends(get_store_tz),
):
    store_status = await status_source.get_store_status()
    return StoreStatusResponse(
        is_open=store_status.is_open,
        auto_close_enabled=store_status.auto_close_enabled,
        working_hours=store_status.working_hours,
        open_now=is_open_now(store_status, now, tz),
    )


@router.get("/currency/rates", response_model=CurrencyRatesResponse)
async def get_currency_rates(rates: ExchangeRates = Depends(get_exchange_rates)):
    return CurrencyRatesResponse(base=BASE_CURRENCY, rates=rates.table.as_dict())
