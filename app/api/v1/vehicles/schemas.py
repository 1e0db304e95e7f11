from typing import Dict, List, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.enums import ComplianceLight


class CreateVehicleRequest(BaseModel):
    vin: str = Field(..., min_length=1, description="Vehicle Identification Number")
    plate: str = Field(..., min_length=1, description="Registration plate")
    make: str = Field(..., description="Vehicle manufacturer")
    model: str = Field(..., description="Vehicle model")
    year: int = Field(..., ge=1900, le=2100, description="Vehicle year")
    color: Optional[str] = Field(None, description="Vehicle color")
    rego_expiry: date = Field(..., description="Registration expiry date")
    ctp_expiry: date = Field(..., description="CTP (green slip) expiry date")
    pink_slip_expiry: date = Field(..., description="Pink slip (safety check) expiry date")
    weekly_rate: float = Field(0.0, ge=0, description="Listed weekly rental rate")
    bond_amount: float = Field(0.0, ge=0, description="Listed bond amount")
    status: Optional[str] = Field(None, description="Ignored; new vehicles always start as DRAFT")


class UpdateVehicleRequest(BaseModel):
    vin: Optional[str] = Field(None, min_length=1, description="Vehicle Identification Number")
    plate: Optional[str] = Field(None, min_length=1, description="Registration plate")
    make: Optional[str] = Field(None, description="Vehicle manufacturer")
    model: Optional[str] = Field(None, description="Vehicle model")
    year: Optional[int] = Field(None, ge=1900, le=2100, description="Vehicle year")
    color: Optional[str] = Field(None, description="Vehicle color")
    rego_expiry: Optional[date] = Field(None, description="Registration expiry date")
    ctp_expiry: Optional[date] = Field(None, description="CTP (green slip) expiry date")
    pink_slip_expiry: Optional[date] = Field(None, description="Pink slip (safety check) expiry date")
    weekly_rate: Optional[float] = Field(None, ge=0, description="Listed weekly rental rate")
    bond_amount: Optional[float] = Field(None, ge=0, description="Listed bond amount")
    status: Optional[str] = Field(None, description="DRAFT, AVAILABLE or SUSPENDED")


class VehicleResponse(BaseModel):
    id: UUID
    vin: str
    plate: str
    make: str
    model: str
    year: int
    color: Optional[str]
    rego_expiry: date
    ctp_expiry: date
    pink_slip_expiry: date
    weekly_rate: float
    bond_amount: float
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CurrentDriver(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    rental_id: UUID


class VehicleAlertResponse(BaseModel):
    id: UUID
    type: str
    message: str
    resolved: bool
    created_at: datetime

    class Config:
        from_attributes = True


class VehicleWithComplianceResponse(VehicleResponse):
    compliance: Dict[str, ComplianceLight]
    current_driver: Optional[CurrentDriver] = None


class VehicleDetailResponse(VehicleWithComplianceResponse):
    alerts: List[VehicleAlertResponse] = []
    rental_count: int = 0


class ComplianceCheckResponse(BaseModel):
    is_compliant: bool
    issues: List[str]
    vehicle: VehicleResponse


class MessageResponse(BaseModel):
    message: str
