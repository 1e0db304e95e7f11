"""Weekly billing schedule shared by rentals, the billing cycle and the periodic jobs."""
from datetime import date, datetime, time, timedelta
from typing import Optional

from app.core.utils import today as _today

BILLING_PERIOD_DAYS = 7
INVOICE_DUE_DAYS = 7
# Rentals whose next payment falls within this many days are invoiced by the cycle
INVOICING_LOOKAHEAD_DAYS = 3


def first_payment_date(start_date: datetime) -> datetime:
    return start_date + timedelta(days=BILLING_PERIOD_DAYS)


def advance_payment_date(next_payment_date: datetime) -> datetime:
    """One period after the previous payment date (not after now)."""
    return next_payment_date + timedelta(days=BILLING_PERIOD_DAYS)


def invoice_due_date(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(days=INVOICE_DUE_DAYS)


def invoicing_horizon(today: Optional[date] = None) -> datetime:
    """Last instant considered 'due' by the billing cycle: end of the day three days out."""
    horizon_day = (today or _today()) + timedelta(days=INVOICING_LOOKAHEAD_DAYS)
    return datetime.combine(horizon_day, time.max)
