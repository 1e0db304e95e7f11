"""Compliance traffic lights for the three NSW vehicle documents (rego, CTP green slip, pink slip)."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from app.core.utils import today as _today
from app.models.enums import AlertType, ComplianceLight

COMPLIANCE_WARNING_DAYS = 30


@dataclass(frozen=True)
class ComplianceDocument:
    field: str
    alert_type: AlertType
    key: str
    label: str


COMPLIANCE_DOCUMENTS = (
    ComplianceDocument("rego_expiry", AlertType.REGO_EXPIRY, "rego", "Registration"),
    ComplianceDocument("ctp_expiry", AlertType.CTP_EXPIRY, "ctp", "CTP (Green Slip)"),
    ComplianceDocument("pink_slip_expiry", AlertType.PINK_SLIP_EXPIRY, "pink_slip", "Pink Slip (Safety Check)"),
)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(expiry_date, today: Optional[date] = None) -> int:
    """Whole days from today (midnight) to expiry_date. Negative once expired."""
    return (_as_date(expiry_date) - (today or _today())).days


def get_compliance_status(expiry_date, today: Optional[date] = None) -> ComplianceLight:
    """
    GREEN: more than 30 days left. AMBER: 0-30 days left (inclusive). RED: already passed.
    """
    remaining = days_until(expiry_date, today)
    if remaining < 0:
        return ComplianceLight.RED
    if remaining <= COMPLIANCE_WARNING_DAYS:
        return ComplianceLight.AMBER
    return ComplianceLight.GREEN


def compliance_lights(vehicle, today: Optional[date] = None) -> dict:
    """{"rego": light, "ctp": light, "pink_slip": light} for a vehicle."""
    return {
        doc.key: get_compliance_status(getattr(vehicle, doc.field), today)
        for doc in COMPLIANCE_DOCUMENTS
    }


def expired_documents(vehicle, today: Optional[date] = None) -> List[ComplianceDocument]:
    return [
        doc for doc in COMPLIANCE_DOCUMENTS
        if get_compliance_status(getattr(vehicle, doc.field), today) == ComplianceLight.RED
    ]


def expiring_documents(vehicle, today: Optional[date] = None) -> List[ComplianceDocument]:
    """Documents expiring within the warning window, expired ones included."""
    return [
        doc for doc in COMPLIANCE_DOCUMENTS
        if days_until(getattr(vehicle, doc.field), today) <= COMPLIANCE_WARNING_DAYS
    ]


def is_compliant(vehicle, today: Optional[date] = None) -> bool:
    return not expired_documents(vehicle, today)


def expiry_message(vehicle, doc: ComplianceDocument) -> str:
    """e.g. "Registration expired on 18/10/2026" """
    return f"{doc.label} expired on {_as_date(getattr(vehicle, doc.field)).strftime('%d/%m/%Y')}"
