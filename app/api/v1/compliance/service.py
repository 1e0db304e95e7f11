"""
Fleet-wide compliance watchdog.

The sweep looks at every AVAILABLE or RENTED vehicle, suspends any whose rego, CTP or pink slip
has passed, and raises one unresolved alert per (vehicle, document). Alerts are acknowledged by an
admin; resolving one never changes the vehicle.
"""
from typing import List
from datetime import datetime
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select

from app.core.compliance import (
    days_until,
    expired_documents,
    expiring_documents,
    expiry_message,
    get_compliance_status,
)
from app.core.exceptions import AppException, error_message
from app.core.utils import today
from app.models.alert import Alert
from app.models.vehicle import Vehicle
from app.models.enums import VehicleStatus


class ComplianceService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def _has_unresolved_alert(self, vehicle_id: uuid.UUID, alert_type: str) -> bool:
        result = await self.db.execute(
            select(Alert.id).where(
                Alert.vehicle_id == vehicle_id,
                Alert.type == alert_type,
                Alert.resolved.is_(False),
            )
        )
        return result.first() is not None

    async def check_expiries(self) -> dict:
        current_day = today()
        result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.status.in_([VehicleStatus.AVAILABLE.value, VehicleStatus.RENTED.value]))
            .order_by(Vehicle.plate)
        )
        # Snapshot before the loop: a rollback expires loaded rows
        snapshots = []
        for vehicle in result.scalars().all():
            docs = expired_documents(vehicle, current_day)
            snapshots.append((vehicle.id, vehicle.plate, docs, [expiry_message(vehicle, doc) for doc in docs]))

        details = []
        errors = []
        for vehicle_id, plate, docs, messages in snapshots:
            if not docs:
                continue
            try:
                vehicle = await self.db.get(Vehicle, vehicle_id)
                vehicle.status = VehicleStatus.SUSPENDED.value

                alerts_created = 0
                for doc, message in zip(docs, messages):
                    if await self._has_unresolved_alert(vehicle_id, doc.alert_type.value):
                        continue
                    self.db.add(Alert(
                        id=uuid.uuid4(),
                        vehicle_id=vehicle_id,
                        type=doc.alert_type.value,
                        message=f"{plate}: {message}",
                        resolved=False,
                    ))
                    alerts_created += 1

                await self.db.commit()
                self.logger.info(
                    "Vehicle %s suspended by compliance sweep (%s); %d new alert(s)",
                    plate, ", ".join(doc.alert_type.value for doc in docs), alerts_created,
                )
                details.append({
                    "vehicle_id": vehicle_id,
                    "plate": plate,
                    "issues": [doc.alert_type.value for doc in docs],
                    "alerts_created": alerts_created,
                    "status": "suspended",
                })
            except Exception as e:
                await self.db.rollback()
                self.logger.exception("Compliance sweep failed for vehicle %s", plate)
                errors.append({"vehicle_id": vehicle_id, "plate": plate, "error": error_message(e)})

        self.logger.info(
            "Compliance sweep: %d checked, %d suspended, %d errors",
            len(snapshots), len(details), len(errors),
        )
        return {
            "checked_count": len(snapshots),
            "suspended_count": len(details),
            "details": details,
            "errors": errors,
        }

    async def get_unresolved_alerts(self) -> List[Alert]:
        result = await self.db.execute(
            select(Alert)
            .where(Alert.resolved.is_(False))
            .options(selectinload(Alert.vehicle))
            .order_by(Alert.created_at.desc())
        )
        return list(result.scalars().all())

    async def resolve_alert(self, alert_id: uuid.UUID) -> Alert:
        alert = await self.db.get(Alert, alert_id)
        if not alert:
            AppException().raise_not_found("Alert", alert_id)
        if not alert.resolved:
            alert.resolved = True
            alert.resolved_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(alert)
            self.logger.info("Alert %s (%s) resolved", alert.id, alert.type)
        return alert

    async def get_upcoming_expiries(self) -> List[dict]:
        """Non-suspended vehicles with a document expiring within 30 days (or already expired)."""
        current_day = today()
        result = await self.db.execute(
            select(Vehicle).where(Vehicle.status != VehicleStatus.SUSPENDED.value)
        )

        report = []
        for vehicle in result.scalars().all():
            docs = expiring_documents(vehicle, current_day)
            if not docs:
                continue
            report.append({
                "vehicle_id": vehicle.id,
                "plate": vehicle.plate,
                "make": vehicle.make,
                "model": vehicle.model,
                "status": vehicle.status,
                "upcoming_expiries": [
                    {
                        "document": doc.key,
                        "label": doc.label,
                        "expiry_date": getattr(vehicle, doc.field),
                        "days_remaining": days_until(getattr(vehicle, doc.field), current_day),
                        "status": get_compliance_status(getattr(vehicle, doc.field), current_day),
                    }
                    for doc in docs
                ],
            })

        report.sort(key=lambda item: min(e["days_remaining"] for e in item["upcoming_expiries"]))
        return report
