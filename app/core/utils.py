"""Shared utilities used across the app."""
from datetime import date, datetime, time, timezone
from typing import Optional


def today() -> date:
    """The current UTC date, matching the naive UTC timestamps stored in the database."""
    return datetime.utcnow().date()


def start_of_today() -> datetime:
    """Today (UTC) at midnight. Compliance and overdue checks compare against this."""
    return datetime.combine(today(), time.min)


def round_money(amount: Optional[float]) -> float:
    return round(float(amount or 0.0), 2)


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_flexible_date(value: str) -> Optional[datetime]:
    """Parse ISO dates/datetimes and Australian dd/mm/yyyy dates. Returns None when unparseable."""
    s = (value or "").strip()
    if not s:
        return None
    try:
        return to_naive_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in ("%d/%m/%Y %H:%M", "%d/%m/%Y"):
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None
