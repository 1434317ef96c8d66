"""
Workday configuration, blocks and per-day timelines.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from zoneinfo import ZoneInfo

from core.config import (
    DEFAULT_MAX_STANDARD_BLOCK_MINUTES,
    DEFAULT_WORKDAY_END,
    DEFAULT_WORKDAY_START,
    REPORT_TIMEZONE,
)
from core.validation import InvalidWorkdayConfig, get_timezone, parse_clock_time


@dataclass(frozen=True)
class WorkdayConfig:
    """Workday window and long-block threshold used to build timelines."""

    day_start_time: str = DEFAULT_WORKDAY_START
    day_end_time: str = DEFAULT_WORKDAY_END
    long_block_threshold_minutes: int = DEFAULT_MAX_STANDARD_BLOCK_MINUTES
    timezone: str = REPORT_TIMEZONE

    def __post_init__(self):
        start = parse_clock_time(self.day_start_time, "day_start_time")
        end = parse_clock_time(self.day_end_time, "day_end_time")
        if start >= end:
            raise InvalidWorkdayConfig(
                f"Workday start {self.day_start_time} must be before end {self.day_end_time}"
            )
        threshold = self.long_block_threshold_minutes
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0:
            raise InvalidWorkdayConfig(
                f"Long block threshold must be a positive integer, got {threshold!r}"
            )
        get_timezone(self.timezone)

    @property
    def tz(self) -> ZoneInfo:
        return get_timezone(self.timezone)

    @property
    def start(self) -> time:
        return parse_clock_time(self.day_start_time)

    @property
    def end(self) -> time:
        return parse_clock_time(self.day_end_time)

    @classmethod
    def from_settings(cls, settings: dict) -> "WorkdayConfig":
        """Build from a persisted settings dict (see core.database)."""
        return cls(
            day_start_time=settings["workday_start"],
            day_end_time=settings["workday_end"],
            long_block_threshold_minutes=settings["max_standard_block_minutes"],
            timezone=settings.get("timezone") or REPORT_TIMEZONE,
        )


class BlockKind(str, Enum):
    BUSY = "busy"
    FREE = "free"


@dataclass(frozen=True)
class Block:
    """
    One contiguous slice of a workday.

    start/end are the absolute instants; start_time/end_time are their
    HH:MM rendering in the report time zone.
    """

    kind: BlockKind
    start: datetime
    end: datetime
    start_time: str
    end_time: str
    duration_minutes: float
    title: str = ""
    is_long: bool = False

    @property
    def is_busy(self) -> bool:
        return self.kind is BlockKind.BUSY


@dataclass(frozen=True)
class DayTimeline:
    """Ordered blocks for one user on one civil date."""

    owner_id: str
    date: date
    blocks: tuple[Block, ...]

    @property
    def busy_blocks(self) -> list[Block]:
        return [b for b in self.blocks if b.is_busy]

    @property
    def busy_minutes(self) -> float:
        return sum(b.duration_minutes for b in self.blocks if b.is_busy)

    @property
    def free_minutes(self) -> float:
        return sum(b.duration_minutes for b in self.blocks if not b.is_busy)

    @property
    def long_blocks(self) -> list[Block]:
        return [b for b in self.blocks if b.is_busy and b.is_long]
