"""
Input validation for events, workday settings and target dates.
"""

import re
from datetime import date, datetime, time, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class CalendarAnalysisError(ValueError):
    """Base class for errors raised by the block builder and criteria evaluator."""

    code = "VALIDATION_ERROR"


class InvalidTimestamp(CalendarAnalysisError):
    """An event start/end cannot be read as an absolute instant."""

    code = "INVALID_TIMESTAMP"

    def __init__(self, value, owner_id: str = "", reason: str = "cannot be parsed"):
        self.value = value
        self.owner_id = owner_id
        who = f" for {owner_id}" if owner_id else ""
        super().__init__(f"Invalid timestamp {value!r}{who}: {reason}")


class InvalidWorkdayConfig(CalendarAnalysisError):
    """Workday settings that cannot define a workday window."""

    code = "INVALID_WORKDAY_CONFIG"


class MissingTargetDate(CalendarAnalysisError):
    """Two-day evaluation without two distinct target dates."""

    code = "MISSING_TARGET_DATE"


class InvalidDate(CalendarAnalysisError):
    """A target date that is not a YYYY-MM-DD calendar date."""

    code = "INVALID_DATE"


def parse_timestamp(value, default_tz: tzinfo, owner_id: str = "") -> datetime:
    """
    Parse an ISO-8601 string (or datetime) into an aware datetime.

    Naive values are interpreted in default_tz. A trailing 'Z' is accepted.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidTimestamp(value, owner_id) from None
    else:
        raise InvalidTimestamp(value, owner_id, "missing")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def parse_clock_time(value: str, field_name: str = "time") -> time:
    """Parse 'HH:MM' (24h) into a time."""
    if not isinstance(value, str) or not CLOCK_PATTERN.match(value.strip()):
        raise InvalidWorkdayConfig(f"{field_name} must use HH:MM format, got {value!r}")
    hours, minutes = value.strip().split(":")
    return time(int(hours), int(minutes))


def parse_target_date(value) -> date:
    """Parse a 'YYYY-MM-DD' target date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDate(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def get_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA zone name."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidWorkdayConfig(f"Unknown timezone {name!r}") from None


def validate_workday_settings(settings: dict) -> list[str]:
    """
    Validate a workday settings dict.

    Returns a list of error messages (empty when valid).
    """
    errors = []
    start = end = None

    try:
        start = parse_clock_time(settings.get("workday_start"), "workday_start")
    except InvalidWorkdayConfig as e:
        errors.append(str(e))
    try:
        end = parse_clock_time(settings.get("workday_end"), "workday_end")
    except InvalidWorkdayConfig as e:
        errors.append(str(e))
    if start is not None and end is not None and start >= end:
        errors.append(
            f"workday_start ({settings['workday_start']}) must be before "
            f"workday_end ({settings['workday_end']})"
        )

    for key in ("max_standard_block_minutes", "min_block_minutes"):
        value = settings.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            errors.append(f"{key} must be a positive integer, got {value!r}")

    try:
        get_timezone(settings.get("timezone") or "")
    except InvalidWorkdayConfig as e:
        errors.append(str(e))

    return errors
