from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    DRIVER = "DRIVER"


class VehicleStatus(str, Enum):
    DRAFT = "DRAFT"
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    SUSPENDED = "SUSPENDED"


class ComplianceLight(str, Enum):
    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"


class VevoStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    RESTRICTED = "RESTRICTED"


class DriverStatus(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    INACTIVE = "INACTIVE"


class RentalStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class AlertType(str, Enum):
    REGO_EXPIRY = "REGO_EXPIRY"
    CTP_EXPIRY = "CTP_EXPIRY"
    PINK_SLIP_EXPIRY = "PINK_SLIP_EXPIRY"


class ShiftStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"
