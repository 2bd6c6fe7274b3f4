"""Loyalty points: redemption math and the commit against the points ledger.

1 point = 1 base-currency unit of discount (``POINT_VALUE``). All amounts keep
full Decimal precision here; rounding happens only when formatting.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional, Protocol, Union

from fastapi import status
from libs.common.logging import get_logger
from libs.common.rejections import Rejection

logger = get_logger(__name__)

ZERO = Decimal("0")
POINT_VALUE = Decimal("1")


# ============================================================================
# RESULTS
# ============================================================================


@dataclass(frozen=True)
class RedemptionQuote:
    subtotal: Decimal
    requested: Decimal
    accepted: Decimal
    final_total: Decimal
    clamped: bool


@dataclass(frozen=True)
class PointsDebit:
    """A committed redemption as recorded by the ledger."""

    user_id: str
    order_id: uuid.UUID
    points: Decimal
    balance_after: Decimal
    history_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class InsufficientPoints(Rejection):
    requested: Decimal
    available: Decimal

    code = "insufficient_points"
    status_code = status.HTTP_409_CONFLICT

    @property
    def message(self) -> str:
        return (
            f"Not enough points. You tried to use {self.requested} "
            f"but have {self.available}."
        )


class PointsLedger(Protocol):
    """Owner of users' points balances.

    ``debit`` must be an atomic conditional decrement: it only succeeds when
    the live balance covers ``amount``.
    """

    async def get_balance(self, user_id: str) -> Decimal: ...

    async def debit(
        self, user_id: str, order_id: uuid.UUID, amount: Decimal
    ) -> Union[PointsDebit, InsufficientPoints]: ...


# ============================================================================
# REDEMPTION
# ============================================================================


def max_redeemable(subtotal: Decimal, points_balance: Decimal) -> Decimal:
    """Never more than the user owns, never more than the order costs."""
    return max(min(Decimal(points_balance), Decimal(subtotal)), ZERO)


def apply_redemption(
    subtotal: Decimal, requested_points: Decimal, points_balance: Decimal
) -> RedemptionQuote:
    subtotal = Decimal(subtotal)
    requested = Decimal(requested_points)
    ceiling = max_redeemable(subtotal, points_balance)

    accepted = min(max(requested, ZERO), ceiling)
    clamped = requested < ZERO or requested > ceiling
    final_total = max(subtotal - accepted * POINT_VALUE, ZERO)

    return RedemptionQuote(
        subtotal=subtotal,
        requested=requested,
        accepted=accepted,
        final_total=final_total,
        clamped=clamped,
    )


async def commit_redemption(
    ledger: PointsLedger,
    user_id: str,
    order_id: uuid.UUID,
    points: Decimal,
) -> Union[PointsDebit, InsufficientPoints]:
    """Deduct redeemed points for an order.

    The ledger re-checks the live balance, so a redemption computed earlier
    in the session cannot overdraw when another device spent points since.
    """
    points = Decimal(points)
    if points <= ZERO:
        balance = await ledger.get_balance(user_id)
        return PointsDebit(
            user_id=user_id, order_id=order_id, points=ZERO, balance_after=balance
        )

    result = await ledger.debit(user_id, order_id, points)
    if isinstance(result, InsufficientPoints):
        logger.warning(
            "Redemption of %s points for order %s rejected: balance %s",
            points,
            order_id,
            result.available,
        )
    return result


# ============================================================================
# EARNING
# ============================================================================


def points_to_earn(
    order_amount: Decimal, points_rate: Decimal, min_order_amount: Decimal
) -> Decimal:
    """Points an order will earn: ``points_rate`` per 100 spent, floored to 0.01.

    Orders below ``min_order_amount`` earn nothing.
    """
    order_amount = Decimal(order_amount)
    if order_amount < Decimal(min_order_amount):
        return ZERO
    earned = order_amount / Decimal(100) * Decimal(points_rate)
    return max(earned.quantize(Decimal("0.01"), rounding=ROUND_FLOOR), ZERO)
