"""Operational reporting routes."""

from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.security import require_admin
from queue_desk.db.session import get_db
from queue_desk.schemas.admin import AnalyticsResponse, DailyRevenuePoint
from queue_desk.schemas.common import APIResponse
from queue_desk.services.auth_service import SessionInfo
from queue_desk.services.report_service import get_daily_summary, get_monthly_analytics


router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/analytics", response_model=APIResponse[AnalyticsResponse])
def monthly_analytics(
    month: date | None = Query(
        default=None,
        description="Any date in the target month, YYYY-MM-DD",
    ),
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    report = get_monthly_analytics(db=db, variant=ctx.variant, target_date=month)
    return APIResponse(
        success=True,
        data=AnalyticsResponse(
            period_start=report.period_start,
            period_end=report.period_end,
            total_revenue=report.total_revenue,
            total_bookings=report.total_bookings,
            completed_bookings=report.completed_bookings,
            revenue_by_payment=report.revenue_by_payment,
            bookings_by_service=report.bookings_by_service,
            bookings_by_branch=report.bookings_by_branch,
            daily_revenue=[
                DailyRevenuePoint(day=day, revenue=revenue)
                for day, revenue in report.daily_revenue
            ],
        ),
    )


@router.get("/daily", response_model=APIResponse[dict])
def daily_report(
    report_date: date | None = Query(
        default=None,
        description="Date in YYYY-MM-DD format",
    ),
    branch_id: int | None = None,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return APIResponse(
        success=True,
        data=get_daily_summary(db=db, branch_id=branch_id, target_date=report_date),
    )
