"""Human-readable labels for report and activity views."""

from __future__ import annotations

import calendar
from datetime import datetime


def time_ago(now: datetime, timestamp: datetime) -> str:
    """Coarse relative phrase for `timestamp` as seen at `now`.

    < 1 min "just now", < 1 h minutes, < 1 day hours, < 30 days days,
    < 365 days months (days // 30), otherwise years (days // 365).
    Future timestamps read as "just now".
    """
    seconds = (now - timestamp).total_seconds()
    if seconds < 60:
        return "just now"

    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes} minutes ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days < 30:
        return f"{days} days ago"
    if days < 365:
        return f"{days // 30} months ago"
    return f"{days // 365} years ago"


def month_label(year: int, month: int) -> str:
    """(2025, 3) -> "March 2025"."""
    return f"{calendar.month_name[month]} {year}"
