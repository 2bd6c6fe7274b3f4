"""Admin router: store availability and exchange rates."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.currency import BASE_CURRENCY, Currency, ExchangeRates, InvalidRate
from libs.common.logging import get_logger
from libs.common.rejections import raise_for_rejection
from libs.db.session import get_async_db
from services.ordering_service.availability import is_open_now
from services.ordering_service.dependencies import (
    get_exchange_rates,
    get_now,
    get_store_tz,
)
from services.ordering_service.schemas import (
    CurrencyRatesResponse,
    CurrencyRateUpdate,
    StoreStatusResponse,
    StoreStatusUpdate,
    WorkingHoursUpdate,
)
from services.ordering_service.services.settings_ops import (
    save_currency_rates,
    update_store_status,
    update_working_hours,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["admin-ordering"])


@router.put("/store/status", response_model=StoreStatusResponse)
async def set_store_status(
    payload: StoreStatusUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    now=Depends(get_now),
    tz=Depends(get_store_tz),
):
    """Flip the manual open/closed switch and/or the auto-close flag."""
    store_status = await update_store_status(
        db,
        is_open=payload.is_open,
        auto_close_enabled=payload.auto_close_enabled,
        updated_by=current_user.user_id,
    )
    await db.commit()
    return StoreStatusResponse(
        **store_status.model_dump(), open_now=is_open_now(store_status, now, tz)
    )


@router.put("/store/working-hours", response_model=StoreStatusResponse)
async def set_working_hours(
    payload: WorkingHoursUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    now=Depends(get_now),
    tz=Depends(get_store_tz),
):
    """Replace the weekly schedule. All seven days are required."""
    store_status = await update_working_hours(
        db,
        payload.working_hours,
        auto_close_enabled=payload.auto_close_enabled,
        updated_by=current_user.user_id,
    )
    await db.commit()
    return StoreStatusResponse(
        **store_status.model_dump(), open_now=is_open_now(store_status, now, tz)
    )


@router.put("/currency/rates/{currency}", response_model=CurrencyRatesResponse)
async def set_currency_rate(
    currency: Currency,
    payload: CurrencyRateUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    rates: ExchangeRates = Depends(get_exchange_rates),
):
    """Update one rate; later display formatting uses it immediately."""
    table = rates.table.with_rate(currency, payload.rate)
    if isinstance(table, InvalidRate):
        raise_for_rejection(table)

    await save_currency_rates(db, table, updated_by=current_user.user_id)
    await db.commit()
    # Only a committed table is served
    rates.install(table)
    logger.info(
        "Admin %s set %s rate to %s", current_user.user_id, currency.value, payload.rate
    )
    return CurrencyRatesResponse(base=BASE_CURRENCY, rates=table.as_dict())
