from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel


class TollChargeResponse(BaseModel):
    id: UUID
    plate: str
    date: datetime
    amount: float
    location: Optional[str]
    invoice_id: Optional[UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class TollUploadResult(BaseModel):
    row: int
    plate: str
    date: datetime
    amount: float
    toll_charge_id: UUID
    invoice_id: Optional[UUID] = None
    linked_to_invoice: bool


class TollUploadError(BaseModel):
    row: int
    record: Dict[str, Any]
    error: str


class TollUploadResponse(BaseModel):
    message: str
    processed: int
    errors: int
    results: List[TollUploadResult]
    error_details: List[TollUploadError]
