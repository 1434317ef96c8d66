"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src (and tests, for the fixtures helpers) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from models.events import Event  # noqa: E402
from models.timeline import WorkdayConfig  # noqa: E402

OWNER = "ana@example.com"
DAY = date(2025, 11, 3)


@pytest.fixture
def config():
    """Default workday: 07:00-17:00 UTC, long blocks over 60 minutes."""
    return WorkdayConfig(
        day_start_time="07:00",
        day_end_time="17:00",
        long_block_threshold_minutes=60,
        timezone="UTC",
    )


@pytest.fixture
def make_event():
    """Factory for events on 2025-11-03 (UTC) given HH:MM start/end."""

    def _make(start: str, end: str, title: str = "Meeting", owner_id: str = OWNER,
              day: str = "2025-11-03", is_all_day: bool = False) -> Event:
        return Event(
            owner_id=owner_id,
            start=f"{day}T{start}:00Z",
            end=f"{day}T{end}:00Z",
            is_all_day=is_all_day,
            title=title,
        )

    return _make


@pytest.fixture
def sample_events(make_event):
    """Two users, one overlapping pair and an all-day event."""
    return [
        make_event("09:00", "09:30", "Sync"),
        make_event("10:00", "11:30", "Planning"),
        make_event("11:00", "11:45", "Overlap"),
        make_event("00:00", "23:59", "Holiday", is_all_day=True),
        make_event("13:00", "14:00", "1:1", owner_id="ben@example.com"),
    ]


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the SQLite layer at a temporary database file."""
    db_path = tmp_path / "calendar-analytics-test.db"
    monkeypatch.setattr("core.database.DB_PATH", db_path)
    return db_path
