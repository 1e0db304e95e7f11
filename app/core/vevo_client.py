"""
Work-rights (VEVO) verification.
Only a deterministic mock exists: a passport number whose last four characters are "0000" is DENIED,
anything else is APPROVED. Test fixtures and the demo seed data depend on this rule.
"""
import logging
from typing import Protocol

from app.core.config import settings
from app.models.enums import VevoStatus

logger = logging.getLogger(__name__)

DENIED_PASSPORT_SUFFIX = "0000"


class VevoClient(Protocol):
    def check(self, passport_no: str) -> VevoStatus:
        ...


class MockVevoClient:
    """Stand-in for the Department of Home Affairs VEVO lookup."""

    def check(self, passport_no: str) -> VevoStatus:
        if passport_no[-4:] == DENIED_PASSPORT_SUFFIX:
            logger.info("VEVO mock: passport ending %s denied", DENIED_PASSPORT_SUFFIX)
            return VevoStatus.DENIED
        return VevoStatus.APPROVED


def get_vevo_client() -> VevoClient:
    provider = (settings.VEVO_PROVIDER or "mock").strip().lower()
    if provider != "mock":
        raise ValueError(f"Unsupported VEVO provider: {settings.VEVO_PROVIDER}")
    return MockVevoClient()
