# utils/helpers.py
from datetime import date, datetime
from typing import Optional


def today_str(now: Optional[datetime] = None) -> str:
    """Return the calendar date as ISO string (YYYY-MM-DD), local wall clock."""
    return (now.date() if now is not None else date.today()).isoformat()


def now_time_str(now: Optional[datetime] = None) -> str:
    """Return the local time of day as HH:MM:SS."""
    return (now or datetime.now()).strftime("%H:%M:%S")


def to_float(x, default: float = 0.0) -> float:
    """float(x), or `default` for None/unparseable values (aggregates, legacy rows)."""
    if x is None:
        return default
    try:
        return float(x)
    except (TypeError, ValueError):
        return default
