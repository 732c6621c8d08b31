from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    return parse_iso_date(v) if v else None


def now_local() -> datetime:
    """Current local time.

    Note: Services take this as their default clock so tests can inject a fixed one.
    """
    return datetime.now()


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
