from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_minutes
from ..core.constants import HOURS_UNDEFINED


def worked_minutes(check_in: Optional[datetime], check_out: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole minutes between check-in and check-out (or ``now`` while still checked in).

    Uses full datetimes, so a session crossing midnight is counted correctly.
    Clock skew never yields a negative value.
    """

    if check_in is None:
        return None
    end = check_out or now
    minutes = int((end - check_in).total_seconds() // 60)
    return max(minutes, 0)


def hours_worked(check_in: Optional[datetime], check_out: Optional[datetime], now: datetime) -> str:
    """``HH:MM`` worked, or ``--:--`` when there is no check-in."""

    minutes = worked_minutes(check_in, check_out, now)
    if minutes is None:
        return HOURS_UNDEFINED
    return format_minutes(minutes)
