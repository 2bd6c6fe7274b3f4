"""Member points router."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.ordering_service.dependencies import get_points_ledger
from services.ordering_service.schemas import PointsHistoryResponse, PointsSummaryResponse
from services.ordering_service.services.points_ops import SqlPointsLedger

router = APIRouter(tags=["points"])


@router.get("/points/me", response_model=PointsSummaryResponse)
async def get_my_points(
    limit: int = Query(50, ge=1, le=200),
    current_user: AuthUser = Depends(get_current_user),
    ledger: SqlPointsLedger = Depends(get_points_ledger),
):
    """Current balance plus the most recent balance changes."""
    balance = await ledger.get_balance(current_user.user_id)
    history = await ledger.list_history(current_user.user_id, limit=limit)
    return PointsSummaryResponse(
        balance=balance,
        history=[PointsHistoryResponse.model_validate(h) for h in history],
    )
