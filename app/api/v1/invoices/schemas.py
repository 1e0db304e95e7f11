from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field

from app.api.v1.rentals.schemas import RentalDriver, RentalVehicle


class GenerateInvoiceRequest(BaseModel):
    rental_id: UUID = Field(..., description="Rental to invoice")
    tolls: float = Field(0.0, ge=0, description="Toll charges for the period")
    fines: float = Field(0.0, ge=0, description="Traffic fines for the period")
    credits: float = Field(0.0, ge=0, description="Credits deducted from the total")


class InvoiceResponse(BaseModel):
    id: UUID
    rental_id: UUID
    weekly_rate: float
    tolls: float
    fines: float
    credits: float
    amount: float
    due_date: datetime
    status: str
    paid_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceTollCharge(BaseModel):
    id: UUID
    plate: str
    date: datetime
    amount: float
    location: Optional[str]

    class Config:
        from_attributes = True


class InvoiceRental(BaseModel):
    id: UUID
    status: str
    driver: RentalDriver
    vehicle: RentalVehicle

    class Config:
        from_attributes = True


class InvoiceDetailResponse(InvoiceResponse):
    rental: InvoiceRental
    toll_charges: List[InvoiceTollCharge] = []


class BillingCycleItem(BaseModel):
    rental_id: UUID
    status: str = Field(..., description="generated, already_exists or error")
    invoice_id: Optional[UUID] = None
    amount: Optional[float] = None
    error: Optional[str] = None


class BillingCycleResponse(BaseModel):
    message: str
    generated: int
    already_exists: int
    errors: int
    results: List[BillingCycleItem]


class OverdueCheckResponse(BaseModel):
    message: str
    count: int
