import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.enums import DriverStatus, VevoStatus


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    license_no = Column(String, unique=True, index=True, nullable=False)
    license_expiry = Column(Date, nullable=True)
    passport_no = Column(String, nullable=True)
    vevo_status = Column(String, default=VevoStatus.PENDING.value, nullable=False)
    vevo_checked_at = Column(DateTime, nullable=True)
    status = Column(String, default=DriverStatus.PENDING_APPROVAL.value, nullable=False, index=True)
    # Negative balance = driver owes money
    balance = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rentals = relationship("Rental", back_populates="driver")
