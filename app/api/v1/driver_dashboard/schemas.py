from typing import Any, List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field


class DashboardVehicle(BaseModel):
    id: UUID
    make: str
    model: str
    plate: str
    vin: str
    color: Optional[str]
    year: int
    image_url: str


class DashboardDocuments(BaseModel):
    rego_url: str
    ctp_url: str
    pink_slip_url: str
    rental_agreement_url: str


class ActiveRentalResponse(BaseModel):
    has_active_rental: bool
    rental_id: Optional[UUID] = None
    vehicle: Optional[DashboardVehicle] = None
    documents: Optional[DashboardDocuments] = None
    shift_id: Optional[UUID] = None
    shift_status: Optional[str] = None
    started_at: Optional[datetime] = None
    last_condition_report: Optional[datetime] = None


class DamageMarker(BaseModel):
    x: float
    y: float
    note: Optional[str] = None


class StartShiftRequest(BaseModel):
    shift_id: UUID = Field(..., description="Today's shift from the active-rental endpoint")
    damage_markers: Optional[List[DamageMarker]] = Field(None, description="Damage marked on the vehicle diagram")
    notes: Optional[str] = None
    photos: List[str] = Field(default_factory=list, description="Walk-around photo URLs")


class EndShiftRequest(BaseModel):
    shift_id: UUID


class ReturnVehicleRequest(BaseModel):
    shift_id: Optional[UUID] = Field(None, description="Shift to close before the return")


class AccidentReportRequest(BaseModel):
    is_safe: bool = True
    emergency_called: bool = False
    scene_photos: List[str] = Field(default_factory=list)
    third_party_name: Optional[str] = None
    third_party_phone: Optional[str] = None
    third_party_plate: Optional[str] = None
    third_party_insurer: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    occurred_at: Optional[datetime] = Field(None, description="When it happened; defaults to now for reports captured live")


class ShiftResponse(BaseModel):
    id: UUID
    rental_id: UUID
    driver_id: UUID
    status: str
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class ConditionReportResponse(BaseModel):
    id: UUID
    shift_id: UUID
    vehicle_id: UUID
    driver_id: UUID
    damage_markers: Optional[List[Any]]
    notes: Optional[str]
    photos: List[str]
    verified_at: datetime

    class Config:
        from_attributes = True


class StartShiftResponse(BaseModel):
    success: bool = True
    shift: ShiftResponse
    condition_report: ConditionReportResponse


class EndShiftResponse(BaseModel):
    success: bool = True
    shift: ShiftResponse


class ReturnVehicleResponse(BaseModel):
    success: bool = True
    message: str


class AccidentReportResponse(BaseModel):
    id: UUID
    rental_id: UUID
    driver_id: UUID
    vehicle_id: UUID
    is_safe: bool
    emergency_called: bool
    scene_photos: List[str]
    third_party_name: Optional[str]
    third_party_phone: Optional[str]
    third_party_plate: Optional[str]
    third_party_insurer: Optional[str]
    description: Optional[str]
    location: Optional[str]
    occurred_at: datetime
    synced_at: datetime

    class Config:
        from_attributes = True


class AccidentReportCreatedResponse(BaseModel):
    success: bool = True
    report: AccidentReportResponse
