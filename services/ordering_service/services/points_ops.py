"""Points ledger on Postgres: balance reads and atomic conditional debits."""

import uuid
from decimal import Decimal
from typing import Union

from libs.common.logging import get_logger
from services.ordering_service.loyalty import InsufficientPoints, PointsDebit
from services.ordering_service.models import PointsHistory, PointsHistoryType, User
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SqlPointsLedger:
    """PointsLedger backed by ``users.points`` and ``points_history``.

    Writes are flushed, not committed: the caller commits them together with
    the order they pay for.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_balance(self, user_id: str) -> Decimal:
        result = await self.db.execute(select(User.points).where(User.auth_id == user_id))
        balance = result.scalar_one_or_none()
        return balance if balance is not None else Decimal("0")

    async def debit(
        self, user_id: str, order_id: uuid.UUID, amount: Decimal
    ) -> Union[PointsDebit, InsufficientPoints]:
        """Decrease the balance by ``amount`` only if it covers it.

        The check and the decrement are one UPDATE statement, so two devices
        redeeming at once cannot both succeed against the same points.
        """
        result = await self.db.execute(
            update(User)
            .where(User.auth_id == user_id, User.points >= amount)
            .values(points=User.points - amount)
            .returning(User.points)
        )
        balance_after = result.scalar_one_or_none()
        if balance_after is None:
            return InsufficientPoints(
                requested=amount, available=await self.get_balance(user_id)
            )

        entry = PointsHistory(
            user_id=user_id,
            order_id=order_id,
            points=-amount,
            type=PointsHistoryType.USED,
            description="Points used for order",
        )
        self.db.add(entry)
        await self.db.flush()

        logger.info(
            "Debited %s points from user %s for order %s, balance now %s",
            amount,
            user_id,
            order_id,
            balance_after,
        )
        return PointsDebit(
            user_id=user_id,
            order_id=order_id,
            points=amount,
            balance_after=balance_after,
            history_id=entry.id,
        )

    async def list_history(self, user_id: str, limit: int = 50) -> list[PointsHistory]:
        result = await self.db.execute(
            select(PointsHistory)
            .where(PointsHistory.user_id == user_id)
            .order_by(PointsHistory.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
