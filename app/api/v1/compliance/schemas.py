from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel

from app.models.enums import ComplianceLight


class ComplianceSweepItem(BaseModel):
    vehicle_id: UUID
    plate: str
    issues: List[str]
    alerts_created: int
    status: str


class ComplianceSweepError(BaseModel):
    vehicle_id: UUID
    plate: Optional[str] = None
    error: str


class ComplianceSweepResponse(BaseModel):
    checked_count: int
    suspended_count: int
    details: List[ComplianceSweepItem]
    errors: List[ComplianceSweepError] = []


class AlertVehicle(BaseModel):
    id: UUID
    plate: str
    make: str
    model: str
    status: str

    class Config:
        from_attributes = True


class AlertResponse(BaseModel):
    id: UUID
    vehicle_id: UUID
    type: str
    message: str
    resolved: bool
    resolved_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class AlertWithVehicleResponse(AlertResponse):
    vehicle: AlertVehicle


class UpcomingExpiry(BaseModel):
    document: str
    label: str
    expiry_date: date
    days_remaining: int
    status: ComplianceLight


class UpcomingExpiryVehicle(BaseModel):
    vehicle_id: UUID
    plate: str
    make: str
    model: str
    status: str
    upcoming_expiries: List[UpcomingExpiry]
