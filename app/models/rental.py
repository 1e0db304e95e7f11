import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.enums import RentalStatus


class Rental(Base):
    __tablename__ = "rentals"
    # At most one ACTIVE rental per driver and per vehicle
    __table_args__ = (
        Index(
            "uq_rentals_active_driver", "driver_id", unique=True,
            postgresql_where=text("status = 'ACTIVE'"), sqlite_where=text("status = 'ACTIVE'"),
        ),
        Index(
            "uq_rentals_active_vehicle", "vehicle_id", unique=True,
            postgresql_where=text("status = 'ACTIVE'"), sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False, index=True)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime, nullable=True)
    # Snapshot of the agreed terms; independent of the vehicle's listed rate
    weekly_rate = Column(Float, nullable=False)
    bond_amount = Column(Float, nullable=False)
    status = Column(String(20), default=RentalStatus.ACTIVE.value, nullable=False, index=True)
    next_payment_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    driver = relationship("Driver", back_populates="rentals")
    vehicle = relationship("Vehicle", back_populates="rentals")
    invoices = relationship("Invoice", back_populates="rental", cascade="all, delete-orphan")
