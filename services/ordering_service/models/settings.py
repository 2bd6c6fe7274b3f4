"""Store-wide settings: availability switches, working hours, rates, loyalty."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, DateTime, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column


class StoreSettings(Base):
    """Single-row settings table edited from the admin back-office."""

    __tablename__ = "store_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Manual switch; closed always wins
    is_open: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    # When on, the weekly schedule decides as well
    auto_close_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    working_hours: Mapped[dict] = mapped_column(JSONB, nullable=False)

    # {"CAD": "0.04"}; base currency is implicit
    currency_rates: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)

    points_rate: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), default=Decimal("5"), server_default="5"
    )
    points_min_order: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("50"), server_default="50"
    )

    updated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<StoreSettings open={self.is_open} auto_close={self.auto_close_enabled}>"
