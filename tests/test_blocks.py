"""
Tests for the busy/free block builder.
"""

from datetime import date, datetime, timedelta

import pytest

from conftest import DAY, OWNER
from core.time_utils import workday_window
from core.validation import InvalidTimestamp
from fixtures.generate_events import generate_events
from models.events import Event
from models.timeline import BlockKind, WorkdayConfig
from services.blocks import analyze_calendar, build_day_timeline, group_events_by_user_and_day


def summarize(timeline):
    return [
        (b.kind.value, b.title, b.start_time, b.end_time, b.duration_minutes, b.is_long)
        for b in timeline.blocks
    ]


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenarios:
    def test_empty_day_is_one_free_block(self, config):
        timeline = build_day_timeline(OWNER, DAY, [], config)

        assert summarize(timeline) == [("free", "", "07:00", "17:00", 600, False)]

    def test_no_events_returns_no_timelines(self, config):
        assert analyze_calendar([], config) == []

    def test_single_mid_day_meeting(self, config, make_event):
        [timeline] = analyze_calendar([make_event("09:00", "09:30", "Sync")], config)

        assert timeline.owner_id == OWNER
        assert timeline.date == DAY
        assert summarize(timeline) == [
            ("free", "", "07:00", "09:00", 120, False),
            ("busy", "Sync", "09:00", "09:30", 30, False),
            ("free", "", "09:30", "17:00", 450, False),
        ]

    def test_long_block_flag(self, config, make_event):
        [timeline] = analyze_calendar([make_event("10:00", "11:30", "Workshop")], config)

        [busy] = timeline.busy_blocks
        assert busy.duration_minutes == 90
        assert busy.is_long is True

    def test_block_at_threshold_is_not_long(self, config, make_event):
        [timeline] = analyze_calendar([make_event("10:00", "11:00")], config)

        assert timeline.busy_blocks[0].is_long is False

    def test_event_outside_window(self, config, make_event):
        [timeline] = analyze_calendar([make_event("18:00", "19:00", "Dinner")], config)

        assert timeline.busy_blocks == []
        assert summarize(timeline) == [("free", "", "07:00", "17:00", 600, False)]

    def test_event_ending_at_work_start_is_outside(self, config, make_event):
        [timeline] = analyze_calendar([make_event("06:00", "07:00", "Gym")], config)

        assert timeline.busy_blocks == []

    def test_events_are_clipped_to_workday(self, config, make_event):
        events = [make_event("06:00", "08:00", "Early"), make_event("16:30", "18:00", "Late")]

        [timeline] = analyze_calendar(events, config)

        assert summarize(timeline) == [
            ("busy", "Early", "07:00", "08:00", 60, False),
            ("free", "", "08:00", "16:30", 510, False),
            ("busy", "Late", "16:30", "17:00", 30, False),
        ]

    def test_back_to_back_events_have_no_free_gap(self, config, make_event):
        events = [make_event("09:00", "10:00", "A"), make_event("10:00", "10:30", "B")]

        [timeline] = analyze_calendar(events, config)

        kinds = [b.kind for b in timeline.blocks]
        assert kinds == [BlockKind.FREE, BlockKind.BUSY, BlockKind.BUSY, BlockKind.FREE]

    def test_all_day_events_are_ignored(self, config, make_event):
        events = [make_event("00:00", "23:59", "Holiday", is_all_day=True)]

        [timeline] = analyze_calendar(events, config)

        assert summarize(timeline) == [("free", "", "07:00", "17:00", 600, False)]

    def test_zero_length_event_is_suppressed(self, config, make_event):
        [timeline] = analyze_calendar([make_event("09:00", "09:00", "Reminder")], config)

        assert timeline.busy_blocks == []
        assert summarize(timeline) == [
            ("free", "", "07:00", "09:00", 120, False),
            ("free", "", "09:00", "17:00", 480, False),
        ]

    def test_missing_title_becomes_empty(self, config):
        event = Event(OWNER, "2025-11-03T09:00:00Z", "2025-11-03T10:00:00Z", title="")

        [timeline] = analyze_calendar([event], config)

        assert timeline.busy_blocks[0].title == ""


# =============================================================================
# OVERLAPS
# =============================================================================


class TestOverlaps:
    def test_overlapping_events_are_not_merged(self, config, make_event):
        events = [make_event("10:00", "11:30", "Planning"), make_event("11:00", "11:45", "Overlap")]

        [timeline] = analyze_calendar(events, config)

        assert summarize(timeline) == [
            ("free", "", "07:00", "10:00", 180, False),
            ("busy", "Planning", "10:00", "11:30", 90, True),
            ("busy", "Overlap", "11:00", "11:45", 45, False),
            ("free", "", "11:45", "17:00", 315, False),
        ]

    def test_contained_event_does_not_move_cursor_back(self, config, make_event):
        events = [make_event("09:00", "12:00", "Offsite"), make_event("10:00", "10:30", "Call")]

        [timeline] = analyze_calendar(events, config)

        free = [(b.start_time, b.end_time) for b in timeline.blocks if not b.is_busy]
        # No free block between 10:30 and 12:00
        assert free == [("07:00", "09:00"), ("12:00", "17:00")]


# =============================================================================
# GROUPING AND ORDERING
# =============================================================================


class TestGrouping:
    def test_groups_by_owner_and_date(self, config, make_event):
        events = [
            make_event("09:00", "10:00", "Mon A"),
            make_event("09:00", "10:00", "Tue A", day="2025-11-04"),
            make_event("13:00", "14:00", "Mon B", owner_id="ben@example.com"),
        ]

        timelines = analyze_calendar(events, config)

        assert [(t.owner_id, t.date) for t in timelines] == [
            (OWNER, date(2025, 11, 3)),
            (OWNER, date(2025, 11, 4)),
            ("ben@example.com", date(2025, 11, 3)),
        ]

    def test_events_sorted_by_start(self, config, make_event):
        events = [make_event("14:00", "15:00", "Later"), make_event("09:00", "10:00", "Earlier")]

        [timeline] = analyze_calendar(events, config)

        assert [b.title for b in timeline.busy_blocks] == ["Earlier", "Later"]

    def test_equal_starts_keep_input_order(self, config, make_event):
        events = [make_event("09:00", "09:30", "First"), make_event("09:00", "10:00", "Second")]

        [timeline] = analyze_calendar(events, config)

        assert [b.title for b in timeline.busy_blocks] == ["First", "Second"]

    def test_owner_with_separator_in_id(self, config, make_event):
        events = [make_event("09:00", "10:00", owner_id="odd__name@example.com")]

        [timeline] = analyze_calendar(events, config)

        assert timeline.owner_id == "odd__name@example.com"
        assert timeline.date == DAY

    def test_civil_date_follows_report_timezone(self, make_event):
        config = WorkdayConfig("07:00", "17:00", 60, "America/New_York")
        # 02:00Z on Nov 4 is 21:00 on Nov 3 in New York
        event = Event(OWNER, "2025-11-04T02:00:00Z", "2025-11-04T03:00:00Z", title="Late call")

        grouped = group_events_by_user_and_day([event], config)

        assert list(grouped) == [(OWNER, date(2025, 11, 3))]

    def test_times_rendered_in_report_timezone(self):
        config = WorkdayConfig("09:00", "17:00", 60, "Europe/Madrid")
        event = Event(OWNER, "2025-11-03T09:00:00Z", "2025-11-03T09:30:00Z", title="Standup")

        [timeline] = analyze_calendar([event], config)

        busy = timeline.busy_blocks[0]
        assert (busy.start_time, busy.end_time) == ("10:00", "10:30")

    def test_naive_timestamps_use_report_timezone(self, config):
        event = Event(OWNER, "2025-11-03T09:00:00", "2025-11-03T09:30:00", title="Naive")

        [timeline] = analyze_calendar([event], config)

        assert timeline.busy_blocks[0].start_time == "09:00"

    def test_window_across_dst_start_uses_elapsed_minutes(self):
        # Clocks jump from 02:00 to 03:00 in New York on 2025-03-09
        config = WorkdayConfig("01:00", "05:00", 60, "America/New_York")
        day = date(2025, 3, 9)

        timeline = build_day_timeline(OWNER, day, [], config)

        assert summarize(timeline) == [("free", "", "01:00", "05:00", 180, False)]

    def test_dst_total_does_not_depend_on_events(self):
        config = WorkdayConfig("01:00", "05:00", 60, "America/New_York")
        event = Event(OWNER, "2025-03-09T07:00:00Z", "2025-03-09T07:30:00Z", title="Call")

        [timeline] = analyze_calendar([event], config)

        assert summarize(timeline) == [
            ("free", "", "01:00", "03:00", 60, False),
            ("busy", "Call", "03:00", "03:30", 30, False),
            ("free", "", "03:30", "05:00", 90, False),
        ]
        assert timeline.busy_minutes + timeline.free_minutes == 180


# =============================================================================
# INVALID INPUT
# =============================================================================


class TestInvalidTimestamps:
    def test_unparseable_start_raises(self, config):
        event = Event(OWNER, "not-a-date", "2025-11-03T10:00:00Z", title="Broken")

        with pytest.raises(InvalidTimestamp) as exc_info:
            analyze_calendar([event], config)

        assert exc_info.value.owner_id == OWNER
        assert exc_info.value.value == "not-a-date"

    def test_missing_end_raises(self, config):
        event = Event(OWNER, "2025-11-03T09:00:00Z", "", title="Open")

        with pytest.raises(InvalidTimestamp):
            analyze_calendar([event], config)

    def test_end_before_start_raises(self, config):
        event = Event(OWNER, "2025-11-03T10:00:00Z", "2025-11-03T09:00:00Z", title="Backwards")

        with pytest.raises(InvalidTimestamp):
            analyze_calendar([event], config)

    def test_skip_invalid_drops_only_the_bad_event(self, config, make_event):
        events = [
            Event(OWNER, "garbage", "2025-11-03T10:00:00Z", title="Broken"),
            make_event("09:00", "09:30", "Sync"),
        ]

        [timeline] = analyze_calendar(events, config, skip_invalid=True)

        assert [b.title for b in timeline.busy_blocks] == ["Sync"]


# =============================================================================
# PROPERTIES
# =============================================================================

PROPERTY_DAYS = [date(2025, 11, 3), date(2025, 11, 4), date(2025, 11, 5)]


@pytest.mark.parametrize("seed", range(10))
def test_blocks_cover_the_workday(seed, config):
    events = generate_events(["a@example.com", "b@example.com"], PROPERTY_DAYS, seed=seed)

    for timeline in analyze_calendar(events, config):
        work_start, work_end = workday_window(timeline.date, config)
        blocks = timeline.blocks

        assert blocks, "every timeline has at least one block"
        assert blocks[0].start == work_start
        assert max(b.end for b in blocks) == work_end
        assert all(b.duration_minutes > 0 for b in blocks)
        assert all(work_start <= b.start < b.end <= work_end for b in blocks)

        # Walking the blocks in order never leaves a gap
        covered_until = work_start
        for block in blocks:
            assert block.start <= covered_until
            covered_until = max(covered_until, block.end)
        assert covered_until == work_end


@pytest.mark.parametrize("seed", range(10))
def test_free_blocks_never_overlap_other_blocks(seed, config):
    events = generate_events(["a@example.com"], PROPERTY_DAYS, seed=seed)

    for timeline in analyze_calendar(events, config):
        for free in (b for b in timeline.blocks if not b.is_busy):
            for other in timeline.blocks:
                if other is free:
                    continue
                assert other.end <= free.start or other.start >= free.end


def test_without_overlaps_blocks_tile_exactly(config):
    events = [
        Event(OWNER, f"2025-11-03T{h:02d}:00:00Z", f"2025-11-03T{h:02d}:45:00Z", title=f"Slot {h}")
        for h in range(6, 18, 2)
    ]

    [timeline] = analyze_calendar(events, config)

    for previous, current in zip(timeline.blocks, timeline.blocks[1:]):
        assert previous.end == current.start
    assert sum(b.duration_minutes for b in timeline.blocks) == 600


@pytest.mark.parametrize("seed", range(5))
def test_long_flag_matches_threshold(seed, config):
    events = generate_events(["a@example.com"], PROPERTY_DAYS, seed=seed)

    for timeline in analyze_calendar(events, config):
        for block in timeline.busy_blocks:
            assert block.is_long == (block.duration_minutes > config.long_block_threshold_minutes)


def test_rebuilding_gives_identical_output(config):
    events = generate_events(["a@example.com", "b@example.com"], PROPERTY_DAYS, seed=42)

    assert analyze_calendar(events, config) == analyze_calendar(events, config)


def test_input_events_are_not_modified(config, sample_events):
    before = list(sample_events)

    analyze_calendar(sample_events, config)

    assert sample_events == before


def test_durations_are_exact_minutes(config):
    event = Event(
        OWNER,
        datetime(2025, 11, 3, 9, 0, 30).isoformat() + "Z",
        (datetime(2025, 11, 3, 9, 0, 30) + timedelta(minutes=10)).isoformat() + "Z",
        title="Odd start",
    )

    [timeline] = analyze_calendar([event], config)

    assert timeline.blocks[0].duration_minutes == 120.5
    assert timeline.busy_blocks[0].duration_minutes == 10
