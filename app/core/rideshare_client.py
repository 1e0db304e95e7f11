"""
Mocked rideshare supplier analytics (modelled on the Uber Supplier Platform earnings query).
Figures are random within realistic AUD ranges; pass a seeded random.Random for repeatable output.
"""
import random
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from uuid import UUID

from app.core.utils import today as utc_today

PLATFORM = "uber"
# Platform commission, driver keeps the rest
COMMISSION_RATE = 0.25


def _week_starting(day: date) -> datetime:
    """Monday 00:00 of the week containing day."""
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


class MockRideshareClient:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _week(self, driver_id: UUID, week_starting: datetime) -> dict:
        gross = self.rng.randint(800, 1499)
        trips = self.rng.randint(40, 79)
        return {
            "driver_id": driver_id,
            "week_starting": week_starting,
            "gross_earnings": float(gross),
            "net_earnings": round(gross * (1 - COMMISSION_RATE), 2),
            "trips": trips,
            "hours_online": self.rng.randint(25, 49),
            "avg_earnings_per_trip": round(gross / trips, 2),
            "platform": PLATFORM,
        }

    def fetch_weekly_earnings(self, driver_id: UUID) -> dict:
        return self._week(driver_id, _week_starting(utc_today()))

    def fetch_historical_earnings(self, driver_id: UUID, weeks: int = 4) -> List[dict]:
        today = utc_today()
        return [
            self._week(driver_id, _week_starting(today - timedelta(days=7 * i)))
            for i in range(weeks)
        ]

    def fetch_driver_analytics(self, driver_id: UUID) -> dict:
        lifetime_trips = self.rng.randint(500, 2499)
        avg_per_trip = self.rng.randint(15, 24)
        lifetime_earnings = lifetime_trips * avg_per_trip
        weeks = lifetime_trips // 50 or 1
        return {
            "driver_id": driver_id,
            "lifetime_earnings": float(lifetime_earnings),
            "lifetime_trips": lifetime_trips,
            "average_weekly_earnings": round(lifetime_earnings / weeks),
            "average_trips_per_week": round(lifetime_trips / weeks),
            "rating": round(self.rng.uniform(4.5, 5.0), 2),
            "acceptance_rate": round(self.rng.uniform(85, 100), 2),
            "completion_rate": round(self.rng.uniform(95, 100), 2),
        }


def get_rideshare_client() -> MockRideshareClient:
    return MockRideshareClient()
