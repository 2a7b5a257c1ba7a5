import uuid
from datetime import date, datetime, timezone
from typing import Optional

# Average Gregorian year (365.2425 days) in seconds
AVERAGE_GREGORIAN_YEAR_SECONDS = 31556952


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_age(date_of_birth: date, now: Optional[datetime] = None) -> int:
    """Whole years elapsed since date_of_birth (midnight UTC)."""
    now = now or utc_now()
    born = datetime(date_of_birth.year, date_of_birth.month, date_of_birth.day, tzinfo=timezone.utc)
    elapsed = (now - born).total_seconds()
    return int(elapsed // AVERAGE_GREGORIAN_YEAR_SECONDS)
