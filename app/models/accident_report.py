import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID

from app.core.database import Base


class AccidentReport(Base):
    __tablename__ = "accident_reports"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rental_id = Column(UUID(as_uuid=True), ForeignKey("rentals.id"), nullable=False, index=True)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=False)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False)
    is_safe = Column(Boolean, default=True, nullable=False)
    emergency_called = Column(Boolean, default=False, nullable=False)
    scene_photos = Column(JSON, nullable=False, default=list)
    third_party_name = Column(String, nullable=True)
    third_party_phone = Column(String, nullable=True)
    third_party_plate = Column(String, nullable=True)
    third_party_insurer = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    occurred_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    # Reports may be captured offline and uploaded later
    synced_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
