"""
Per-user criteria outcomes.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Verdict:
    owner_id: str
    passed: bool
    passed_reasons: tuple[str, ...]
    failed_reasons: tuple[str, ...]
    message: str


@dataclass(frozen=True)
class DayVerdict(Verdict):
    """Single-day occupancy criteria result."""

    date: date
    busy_minutes: float
    busy_percent: float


@dataclass(frozen=True)
class ComparisonVerdict(Verdict):
    """Two-day availability criteria result (day1 is always the earlier date)."""

    day1: date
    day2: date
    day1_busy_minutes: float
    day1_available_percent: float
    day2_busy_minutes: float
    day2_available_percent: float
