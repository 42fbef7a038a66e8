"""Business logic for operational reporting."""

import calendar
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from queue_desk.catalog import VariantConfig
from queue_desk.db.models import Booking
from queue_desk.services.listing_service import count_by, sum_by


@dataclass
class AnalyticsReport:
    period_start: date
    period_end: date
    total_revenue: float = 0.0
    total_bookings: int = 0
    completed_bookings: int = 0
    revenue_by_payment: dict[str, float] = field(default_factory=dict)
    bookings_by_service: dict[str, int] = field(default_factory=dict)
    bookings_by_branch: dict[str, int] = field(default_factory=dict)
    daily_revenue: list[tuple[date, float]] = field(default_factory=list)


def month_bounds(target: date) -> tuple[date, date]:
    last_day = calendar.monthrange(target.year, target.month)[1]
    return target.replace(day=1), target.replace(day=last_day)


def summarize_bookings(
    bookings: list[Booking],
    variant: VariantConfig,
    period_start: date,
    period_end: date,
) -> AnalyticsReport:
    """Aggregate an already-fetched booking list into dashboard figures."""
    return AnalyticsReport(
        period_start=period_start,
        period_end=period_end,
        total_revenue=sum(float(booking.total_cost) for booking in bookings),
        total_bookings=len(bookings),
        completed_bookings=sum(1 for booking in bookings if booking.status == "completed"),
        revenue_by_payment=sum_by(
            bookings,
            key=lambda booking: variant.payment_methods.get(booking.payment_method, booking.payment_method),
            value=lambda booking: booking.total_cost,
        ),
        bookings_by_service=count_by(
            bookings,
            key=lambda booking: variant.service_name(booking.service_type),
        ),
        bookings_by_branch=count_by(
            bookings,
            key=lambda booking: booking.branch.name if booking.branch is not None else "Unknown",
        ),
        daily_revenue=sorted(
            sum_by(
                bookings,
                key=lambda booking: booking.booking_date,
                value=lambda booking: booking.total_cost,
            ).items()
        ),
    )


def get_monthly_analytics(
    db: Session,
    variant: VariantConfig,
    target_date: date | None = None,
) -> AnalyticsReport:
    """Return analytics for the calendar month containing ``target_date``."""
    period_start, period_end = month_bounds(target_date or date.today())
    bookings = list(
        db.scalars(
            select(Booking)
            .options(joinedload(Booking.branch))
            .where(Booking.booking_date >= period_start)
            .where(Booking.booking_date <= period_end)
            .order_by(Booking.booking_date.asc(), Booking.id.asc())
        )
        .unique()
        .all()
    )
    return summarize_bookings(bookings, variant, period_start, period_end)


def get_daily_summary(
    db: Session,
    branch_id: int | None = None,
    target_date: date | None = None,
) -> dict:
    """Return operational summary for a given date."""
    if target_date is None:
        target_date = date.today()

    query = (
        select(Booking.status, func.count(Booking.id), func.sum(Booking.total_cost))
        .where(Booking.booking_date == target_date)
        .group_by(Booking.status)
    )
    if branch_id is not None:
        query = query.where(Booking.branch_id == branch_id)

    counts = {"pending": 0, "confirmed": 0, "in_progress": 0, "completed": 0, "cancelled": 0}
    completed_revenue = 0.0
    for status, count, revenue in db.execute(query).all():
        counts[status] = int(count)
        if status == "completed":
            completed_revenue = float(revenue or 0)

    return {
        "date": str(target_date),
        "branch_id": branch_id,
        "total_bookings": sum(counts.values()),
        **counts,
        "completed_revenue": completed_revenue,
    }


def get_branch_booking_counts(db: Session) -> dict[int, int]:
    rows = db.execute(
        select(Booking.branch_id, func.count(Booking.id)).group_by(Booking.branch_id)
    ).all()
    return {int(branch_id): int(count) for branch_id, count in rows}
