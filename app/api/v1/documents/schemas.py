from typing import Dict, List, Optional
from datetime import date

from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    title: str
    type: str
    document_no: str
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    compliance: Optional[str] = Field(None, description="GREEN / AMBER / RED for vehicle documents")
    status: Optional[str] = None
    details: Dict[str, str]
    terms: List[str] = []
