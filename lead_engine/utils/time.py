from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return the current UTC calendar date (the default lead-queue run date)."""
    return utc_now().date()


def days_since(moment: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days elapsed since ``moment``; naive datetimes are treated as UTC."""
    if moment is None:
        return None
    now = now or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return max(0, (now - moment).days)
