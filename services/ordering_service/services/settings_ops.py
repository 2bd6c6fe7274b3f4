"""Store settings: availability status, working hours and persisted rates."""

from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import RateTable
from libs.common.logging import get_logger
from services.ordering_service.availability import (
    DEFAULT_WORKING_HOURS,
    InvalidStoreData,
    StoreStatus,
    WeeklySchedule,
    load_store_status,
)
from services.ordering_service.models import StoreSettings
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_or_create_settings(db: AsyncSession) -> StoreSettings:
    """Return the settings row, creating it with defaults on first use."""
    result = await db.execute(
        select(StoreSettings).order_by(StoreSettings.created_at).limit(1)
    )
    row = result.scalar_one_or_none()
    if row is not None:
        return row

    config = get_settings()
    row = StoreSettings(
        is_open=True,
        auto_close_enabled=False,
        working_hours=DEFAULT_WORKING_HOURS.model_dump(),
        points_rate=config.POINTS_RATE,
        points_min_order=config.POINTS_MIN_ORDER,
    )
    db.add(row)
    await db.flush()
    logger.info("Created default store settings row %s", row.id)
    return row


def status_from_row(row: StoreSettings) -> StoreStatus:
    """Validate a settings row. Malformed working hours raise InvalidStoreData."""
    return load_store_status(
        {
            "is_open": row.is_open,
            "auto_close_enabled": row.auto_close_enabled,
            "working_hours": row.working_hours,
        }
    )


class SqlStoreStatusSource:
    """StoreStatusSource reading the settings row on every call."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_store_status(self) -> StoreStatus:
        return status_from_row(await get_or_create_settings(self.db))


async def update_store_status(
    db: AsyncSession,
    *,
    is_open: Optional[bool] = None,
    auto_close_enabled: Optional[bool] = None,
    updated_by: Optional[str] = None,
) -> StoreStatus:
    row = await get_or_create_settings(db)
    if is_open is not None:
        row.is_open = is_open
    if auto_close_enabled is not None:
        row.auto_close_enabled = auto_close_enabled
    row.updated_by = updated_by
    await db.flush()
    logger.info(
        "Store status updated by %s: is_open=%s auto_close=%s",
        updated_by,
        row.is_open,
        row.auto_close_enabled,
    )
    return status_from_row(row)


async def update_working_hours(
    db: AsyncSession,
    working_hours: WeeklySchedule,
    *,
    auto_close_enabled: Optional[bool] = None,
    updated_by: Optional[str] = None,
) -> StoreStatus:
    row = await get_or_create_settings(db)
    row.working_hours = working_hours.model_dump()
    if auto_close_enabled is not None:
        row.auto_close_enabled = auto_close_enabled
    row.updated_by = updated_by
    await db.flush()
    logger.info("Working hours updated by %s", updated_by)
    return status_from_row(row)


async def load_currency_rates(db: AsyncSession) -> Optional[dict[str, Decimal]]:
    """Rates saved by an admin, or None if none were ever saved."""
    row = await get_or_create_settings(db)
    if not row.currency_rates:
        return None
    if not isinstance(row.currency_rates, dict):
        raise InvalidStoreData(f"currency_rates is not a mapping: {row.currency_rates!r}")
    try:
        return {code: Decimal(str(rate)) for code, rate in row.currency_rates.items()}
    except ArithmeticError as exc:
        raise InvalidStoreData(f"invalid saved rate in {row.currency_rates!r}") from exc


async def save_currency_rates(
    db: AsyncSession, table: RateTable, *, updated_by: Optional[str] = None
) -> None:
    row = await get_or_create_settings(db)
    row.currency_rates = table.as_dict()
    row.updated_by = updated_by
    await db.flush()


async def get_loyalty_rates(db: AsyncSession) -> tuple[Decimal, Decimal]:
    """(points per 100 spent, minimum order amount) for earning points."""
    row = await get_or_create_settings(db)
    return row.points_rate, row.points_min_order
