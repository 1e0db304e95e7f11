from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field


class CreateRentalRequest(BaseModel):
    driver_id: UUID = Field(..., description="Driver receiving the vehicle")
    vehicle_id: UUID = Field(..., description="Vehicle being rented")
    weekly_rate: float = Field(..., ge=0, description="Agreed weekly rate for this rental")
    bond_amount: float = Field(..., ge=0, description="Bond held for this rental")
    start_date: Optional[datetime] = Field(None, description="Rental start; defaults to now")


class RentalDriver(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str]
    status: str

    class Config:
        from_attributes = True


class RentalVehicle(BaseModel):
    id: UUID
    plate: str
    make: str
    model: str
    year: int
    status: str

    class Config:
        from_attributes = True


class RentalInvoice(BaseModel):
    id: UUID
    weekly_rate: float
    tolls: float
    fines: float
    credits: float
    amount: float
    due_date: datetime
    status: str
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True


class RentalResponse(BaseModel):
    id: UUID
    driver_id: UUID
    vehicle_id: UUID
    start_date: datetime
    end_date: Optional[datetime]
    weekly_rate: float
    bond_amount: float
    status: str
    next_payment_date: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RentalDetailResponse(RentalResponse):
    driver: RentalDriver
    vehicle: RentalVehicle
    invoices: List[RentalInvoice] = []
