from typing import Dict, List
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field


class StatusBreakdown(BaseModel):
    total: int = Field(..., description="All records")
    by_status: Dict[str, int] = Field(..., description="Record count per status")


class InvoiceBucket(BaseModel):
    count: int
    total: float


class InvoiceStats(BaseModel):
    pending: InvoiceBucket
    overdue: InvoiceBucket


class RentalStats(BaseModel):
    active: int


class DashboardResponse(BaseModel):
    vehicles: StatusBreakdown
    drivers: StatusBreakdown
    rentals: RentalStats
    invoices: InvoiceStats
    alerts: int = Field(..., description="Unresolved compliance alerts")


class WeeklyEarnings(BaseModel):
    driver_id: UUID
    week_starting: datetime
    gross_earnings: float
    net_earnings: float
    trips: int
    hours_online: int
    avg_earnings_per_trip: float
    platform: str


class DriverAnalytics(BaseModel):
    driver_id: UUID
    lifetime_earnings: float
    lifetime_trips: int
    average_weekly_earnings: float
    average_trips_per_week: float
    rating: float
    acceptance_rate: float
    completion_rate: float


class DriverEarningsResponse(BaseModel):
    current: WeeklyEarnings
    history: List[WeeklyEarnings]
    analytics: DriverAnalytics


class RoiItem(BaseModel):
    rental_id: UUID
    vehicle_id: UUID
    plate: str
    driver_id: UUID
    driver_name: str
    weekly_rate: float
    driver_earnings: float
    net_earnings: float
    trips: int
    profit_margin: float = Field(..., description="Share of gross earnings left after the weekly rate, in percent")
