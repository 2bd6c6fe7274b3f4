"""FastAPI dependencies wiring the checkout core to its collaborators.

Tests override these with in-memory fakes via ``app.dependency_overrides``.
"""

from datetime import datetime, tzinfo
from decimal import Decimal

from fastapi import Depends, Request
from libs.common.currency import ExchangeRates
from libs.common.datetime_utils import store_timezone, utc_now
from libs.db.session import get_async_db
from services.ordering_service.services.catalog_ops import SqlCatalog
from services.ordering_service.services.order_ops import SqlOrderSink
from services.ordering_service.services.points_ops import SqlPointsLedger
from services.ordering_service.services.settings_ops import (
    SqlStoreStatusSource,
    get_loyalty_rates,
)
from sqlalchemy.ext.asyncio import AsyncSession


def get_exchange_rates(request: Request) -> ExchangeRates:
    return request.app.state.exchange_rates


def get_catalog(db: AsyncSession = Depends(get_async_db)) -> SqlCatalog:
    return SqlCatalog(db)


def get_points_ledger(db: AsyncSession = Depends(get_async_db)) -> SqlPointsLedger:
    return SqlPointsLedger(db)


def get_store_status_source(
    db: AsyncSession = Depends(get_async_db),
) -> SqlStoreStatusSource:
    return SqlStoreStatusSource(db)


def get_order_sink(db: AsyncSession = Depends(get_async_db)) -> SqlOrderSink:
    return SqlOrderSink(db)


async def get_earning_rule(
    db: AsyncSession = Depends(get_async_db),
) -> tuple[Decimal, Decimal]:
    """(points per 100 spent, minimum order) from the store settings."""
    return await get_loyalty_rates(db)


def get_now() -> datetime:
    return utc_now()


def get_store_tz() -> tzinfo:
    return store_timezone()
