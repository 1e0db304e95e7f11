import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.enums import InvoiceStatus


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rental_id = Column(UUID(as_uuid=True), ForeignKey("rentals.id"), nullable=False, index=True)
    weekly_rate = Column(Float, nullable=False)
    tolls = Column(Float, default=0.0, nullable=False)
    fines = Column(Float, default=0.0, nullable=False)
    credits = Column(Float, default=0.0, nullable=False)
    # weekly_rate + tolls + fines - credits
    amount = Column(Float, nullable=False)
    due_date = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), default=InvoiceStatus.PENDING.value, nullable=False, index=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rental = relationship("Rental", back_populates="invoices")
    toll_charges = relationship("TollCharge", back_populates="invoice")
