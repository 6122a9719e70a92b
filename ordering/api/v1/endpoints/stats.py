"""Admin analytics endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ordering.core.security import get_current_admin
from ordering.db.session import get_db
from ordering.schemas.stats import GroupTotalResponse, StatsOverviewResponse, TopItemResponse
from ordering.services import stats_service

router: APIRouter = APIRouter(dependencies=[Depends(get_current_admin)])

Period = Literal["today", "week", "month", "all"]


@router.get("/overview", response_model=StatsOverviewResponse)
def overview(period: Period = "today", db: Session = Depends(get_db)) -> StatsOverviewResponse:
    return StatsOverviewResponse.model_validate(stats_service.overview(db, period))


@router.get("/payment-methods", response_model=list[GroupTotalResponse])
def payment_methods(period: Period = "month", db: Session = Depends(get_db)) -> list[GroupTotalResponse]:
    return [GroupTotalResponse.model_validate(row) for row in stats_service.payment_methods(db, period)]


@router.get("/top-items", response_model=list[TopItemResponse])
def top_items(
    period: Period = "month",
    limit: int = Query(default=10, ge=1, le=50),
    sort_by: Literal["revenue", "quantity"] = "revenue",
    db: Session = Depends(get_db),
) -> list[TopItemResponse]:
    rows = stats_service.top_items(db, period, limit=limit, sort_by=sort_by)
    return [TopItemResponse.model_validate(row) for row in rows]
