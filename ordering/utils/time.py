"""Reporting period windows for order listings and statistics."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ordering.core.errors import ValidationError

PERIODS: tuple[str, ...] = ("today", "week", "month", "all")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_window(period: str, now: datetime | None = None) -> tuple[datetime | None, datetime | None]:
    """Return UTC (start, end) boundaries for a named period.

    Orders are stored with UTC timestamps, so windows use UTC too. ``week``
    starts on Monday; ``all`` is unbounded.
    """
    if period not in PERIODS:
        raise ValidationError(f"Unknown period: {period}")
    now = now or utcnow()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "today":
        return today_start, today_start + timedelta(days=1)
    if period == "week":
        return today_start - timedelta(days=today_start.weekday()), None
    if period == "month":
        return today_start.replace(day=1), None
    return None, None
