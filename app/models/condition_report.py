import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import relationship

from app.core.database import Base


class ConditionReport(Base):
    """Pre-shift vehicle walk-around submitted by the driver."""
    __tablename__ = "condition_reports"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shift_id = Column(UUID(as_uuid=True), ForeignKey("shifts.id"), unique=True, nullable=False)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=False)
    damage_markers = Column(JSON, nullable=True)  # [{x, y, note}] on the vehicle diagram
    notes = Column(Text, nullable=True)
    photos = Column(JSON, nullable=False, default=list)
    verified_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    shift = relationship("Shift", back_populates="condition_report")
