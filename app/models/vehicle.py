import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.enums import VehicleStatus


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vin = Column(String, unique=True, index=True, nullable=False)
    plate = Column(String, unique=True, index=True, nullable=False)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String, nullable=True)
    # NSW compliance documents
    rego_expiry = Column(Date, nullable=False)
    ctp_expiry = Column(Date, nullable=False)
    pink_slip_expiry = Column(Date, nullable=False)
    weekly_rate = Column(Float, default=0.0, nullable=False)
    bond_amount = Column(Float, default=0.0, nullable=False)
    status = Column(String, default=VehicleStatus.DRAFT.value, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rentals = relationship("Rental", back_populates="vehicle")
    alerts = relationship("Alert", back_populates="vehicle", cascade="all, delete-orphan")
