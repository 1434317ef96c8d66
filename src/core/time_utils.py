"""
Date and time helpers shared by the block builder, criteria and reports.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo

DATE_RANGE_LABELS = ("today", "tomorrow", "week")


def civil_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant as seen in tz."""
    return instant.astimezone(tz).date()


def workday_window(day: date, config) -> tuple[datetime, datetime]:
    """Absolute [work_start, work_end) instants for a date under a WorkdayConfig."""
    tz = config.tz
    work_start = datetime.combine(day, config.start, tzinfo=tz)
    work_end = datetime.combine(day, config.end, tzinfo=tz)
    return work_start, work_end


def format_clock(instant: datetime, tz: tzinfo) -> str:
    """Format as HH:MM in tz."""
    return instant.astimezone(tz).strftime("%H:%M")


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative if end is earlier)."""
    # Same-tzinfo subtraction ignores offset changes, so compare in UTC
    return (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds() / 60


def format_minutes(minutes: float) -> str:
    """Render a duration without a trailing '.0' for whole minutes."""
    if float(minutes).is_integer():
        return str(int(minutes))
    return f"{minutes:.2f}".rstrip("0").rstrip(".")


def format_percent(value: float) -> str:
    """Render a percentage with one decimal."""
    return f"{value:.1f}"


def get_date_range(label: str, today: date | None = None) -> tuple[date, date]:
    """
    Resolve a date range preset.

    Args:
        label: 'today', 'tomorrow' or 'week' (Monday to Sunday of the current week)
        today: Reference date. Uses today if None.

    Returns:
        Tuple of (first_date, last_date), both inclusive
    """
    today = today or date.today()
    if label == "today":
        return today, today
    if label == "tomorrow":
        tomorrow = today + timedelta(days=1)
        return tomorrow, tomorrow
    if label == "week":
        monday = today - timedelta(days=today.weekday())
        return monday, monday + timedelta(days=6)
    raise ValueError(f"Unknown date range {label!r}, expected one of {', '.join(DATE_RANGE_LABELS)}")


def fetch_window(first: date, last: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Instant range [first 00:00, (last + 1 day) 00:00) in tz to request from the calendar."""
    start = datetime.combine(first, datetime.min.time(), tzinfo=tz)
    end = datetime.combine(last + timedelta(days=1), datetime.min.time(), tzinfo=tz)
    return start, end
