from datetime import date, datetime

from pydantic import BaseModel


class BranchCreate(BaseModel):
    name: str
    address: str
    phone: str | None = None
    is_active: bool = True


class BranchUpdate(BaseModel):
    name: str | None = None
    address: str | None = None
    phone: str | None = None
    is_active: bool | None = None


class BranchItem(BaseModel):
    id: int
    name: str
    address: str
    phone: str | None = None
    is_active: bool
    booking_count: int = 0


class ProfileItem(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str | None = None
    role: str
    created_at: datetime | None = None


class DailyRevenuePoint(BaseModel):
    day: date
    revenue: float


class AnalyticsResponse(BaseModel):
    period_start: date
    period_end: date
    total_revenue: float
    total_bookings: int
    completed_bookings: int
    revenue_by_payment: dict[str, float]
    bookings_by_service: dict[str, int]
    bookings_by_branch: dict[str, int]
    daily_revenue: list[DailyRevenuePoint]
