"""
Busy/free block construction from calendar events.

Events are grouped per (owner, civil date) and each group is turned into a
gap-filled sequence of blocks that exactly covers the configured workday.
"""

from collections import defaultdict
from datetime import date, datetime

from core.time_utils import civil_date, format_clock, minutes_between, workday_window
from core.validation import InvalidTimestamp, parse_timestamp
from models.events import Event
from models.timeline import Block, BlockKind, DayTimeline, WorkdayConfig


def analyze_calendar(
    events: list[Event], config: WorkdayConfig, skip_invalid: bool = False
) -> list[DayTimeline]:
    """
    Build one DayTimeline per (owner, date) present in events.

    Args:
        events: Normalized events, any number of users and days
        config: Workday window and long-block threshold
        skip_invalid: Drop events with unreadable timestamps instead of raising

    Returns:
        Timelines in order of first appearance of each (owner, date)
    """
    if not events:
        return []

    grouped = group_events_by_user_and_day(events, config, skip_invalid=skip_invalid)

    return [
        build_day_timeline(owner_id, day, day_events, config)
        for (owner_id, day), day_events in grouped.items()
    ]


def group_events_by_user_and_day(
    events: list[Event], config: WorkdayConfig, skip_invalid: bool = False
) -> dict[tuple[str, date], list[tuple[Event, datetime, datetime]]]:
    """
    Partition events by (owner_id, civil date of start).

    Each entry carries the parsed start/end instants. Partitions are sorted
    by start; equal starts keep input order.
    """
    tz = config.tz
    grouped: dict[tuple[str, date], list] = defaultdict(list)

    for event in events:
        try:
            start, end = parse_event_times(event, config)
        except InvalidTimestamp as e:
            if not skip_invalid:
                raise
            print(f"  Skipping event '{event.title}': {e}")
            continue
        grouped[(event.owner_id, civil_date(start, tz))].append((event, start, end))

    for key in grouped:
        grouped[key].sort(key=lambda item: item[1])

    return dict(grouped)


def parse_event_times(event: Event, config: WorkdayConfig) -> tuple[datetime, datetime]:
    """Parse an event's start/end; end before start is rejected."""
    tz = config.tz
    start = parse_timestamp(event.start, tz, event.owner_id)
    end = parse_timestamp(event.end, tz, event.owner_id)
    if end < start:
        raise InvalidTimestamp(event.end, event.owner_id, f"ends before it starts ({event.start})")
    return start, end


def build_day_timeline(
    owner_id: str,
    day: date,
    day_events: list[tuple[Event, datetime, datetime]],
    config: WorkdayConfig,
) -> DayTimeline:
    """
    Build the block sequence for one user/day.

    Overlapping events are not merged: each becomes its own busy block. The
    gap cursor only moves forward, so no free block is emitted inside time
    already covered by an earlier event.
    """
    work_start, work_end = workday_window(day, config)

    busy = []
    for event, start, end in day_events:
        if event.is_all_day:
            continue
        if end <= work_start or start >= work_end:
            continue
        busy.append((event.title or "", max(start, work_start), min(end, work_end)))

    blocks = []
    cursor = work_start

    for title, start, end in busy:
        if start > cursor:
            _append_block(blocks, build_free_block(cursor, start, config))
        _append_block(blocks, build_busy_block(title, start, end, config))
        cursor = max(cursor, end)

    if cursor < work_end:
        _append_block(blocks, build_free_block(cursor, work_end, config))

    return DayTimeline(owner_id=owner_id, date=day, blocks=tuple(blocks))


def build_busy_block(title: str, start: datetime, end: datetime, config: WorkdayConfig) -> Block:
    duration = minutes_between(start, end)
    return Block(
        kind=BlockKind.BUSY,
        start=start,
        end=end,
        start_time=format_clock(start, config.tz),
        end_time=format_clock(end, config.tz),
        duration_minutes=duration,
        title=title,
        is_long=duration > config.long_block_threshold_minutes,
    )


def build_free_block(start: datetime, end: datetime, config: WorkdayConfig) -> Block:
    return Block(
        kind=BlockKind.FREE,
        start=start,
        end=end,
        start_time=format_clock(start, config.tz),
        end_time=format_clock(end, config.tz),
        duration_minutes=minutes_between(start, end),
    )


def _append_block(blocks: list[Block], block: Block):
    # Zero-length blocks only come from boundary equality
    if block.duration_minutes > 0:
        blocks.append(block)
