"""
Calendar hygiene criteria evaluated over day timelines.

Two rule sets:
- Single day: no long blocks, and enough of the nominal workday booked.
- Two days: no long blocks on either day, the earlier day mostly booked
  and the later day at least partly booked.

Evaluation is a pure function of (timelines, target dates, config). A user
with no timeline for a date counts as completely free on that date.
"""

from collections import defaultdict
from datetime import date

from core.config import (
    HIGH_DAY_AVAILABILITY_CEILING,
    LOW_DAY_AVAILABILITY_CEILING,
    OCCUPANCY_THRESHOLD_PERCENT,
    TOTAL_WORKDAY_MINUTES,
)
from core.time_utils import format_percent
from core.validation import MissingTargetDate, parse_target_date
from models.timeline import DayTimeline, WorkdayConfig
from models.verdicts import ComparisonVerdict, DayVerdict

# =============================================================================
# REASONS AND MESSAGES
# =============================================================================

REASON_NO_LONG_BLOCKS = "No blocks longer than {threshold} minutes"
REASON_OCCUPANCY = "At least {occupancy}% of the workday booked"
REASON_DAY1_AVAILABILITY = "Day 1 ({day}) availability at most {ceiling}%"
REASON_DAY2_AVAILABILITY = "Day 2 ({day}) availability at most {ceiling}%"

FRAGMENT_LONG_BLOCKS = "split any block longer than {threshold} minutes into shorter sessions"
FRAGMENT_OCCUPANCY = "plan more of your day ({busy}% booked, the target is {occupancy}%)"
FRAGMENT_DAY1 = "book more of {day} (currently {available}% available, at most {ceiling}% expected)"
FRAGMENT_DAY2 = "start planning {day} (currently {available}% available, at most {ceiling}% expected)"

MESSAGE_GREETING = "Hi! We reviewed your calendar for {dates}."
MESSAGE_CLOSING = "Thanks for keeping your calendar up to date!"
MESSAGE_CONNECTOR = " and "
MESSAGE_ALL_PASSED = (
    "Hi! We reviewed your calendar for {dates} and it meets every planning criterion. "
    "Great job, keep it up!"
)
MESSAGE_GENERIC = (
    "Hi! We reviewed your calendar for {dates} and it needs some attention. "
    "Please review your schedule and adjust your blocks. " + MESSAGE_CLOSING
)


def render_message(passed: bool, fragments: list[str], dates_label: str) -> str:
    """Compose the notification text from the remediation fragments of failing rules."""
    if passed:
        return MESSAGE_ALL_PASSED.format(dates=dates_label)
    if not fragments:
        return MESSAGE_GENERIC.format(dates=dates_label)
    greeting = MESSAGE_GREETING.format(dates=dates_label)
    return f"{greeting} Please {MESSAGE_CONNECTOR.join(fragments)}. {MESSAGE_CLOSING}"


# =============================================================================
# AGGREGATION
# =============================================================================


def index_timelines(timelines: list[DayTimeline]) -> dict[tuple[str, date], list[DayTimeline]]:
    """Map (owner_id, date) to the timelines for it."""
    index: dict[tuple[str, date], list[DayTimeline]] = defaultdict(list)
    for timeline in timelines:
        index[(timeline.owner_id, timeline.date)].append(timeline)
    return index


def owners_in(timelines: list[DayTimeline]) -> list[str]:
    """Owner ids in order of first appearance."""
    return list(dict.fromkeys(t.owner_id for t in timelines))


def busy_minutes_for(index, owner_id: str, day: date) -> float:
    return sum(t.busy_minutes for t in index.get((owner_id, day), []))


def has_long_block(index, owner_id: str, day: date) -> bool:
    return any(t.long_blocks for t in index.get((owner_id, day), []))


def _record(rule_passed: bool, reason: str, passed_reasons: list, failed_reasons: list):
    (passed_reasons if rule_passed else failed_reasons).append(reason)


# =============================================================================
# SINGLE-DAY MODE
# =============================================================================


def evaluate_day_criteria(
    timelines: list[DayTimeline],
    target_date,
    config: WorkdayConfig,
    owner_ids: list[str] | None = None,
    total_minutes: int = TOTAL_WORKDAY_MINUTES,
    occupancy_threshold: float = OCCUPANCY_THRESHOLD_PERCENT,
) -> list[DayVerdict]:
    """
    Evaluate the single-day criteria for every user.

    Args:
        timelines: Output of analyze_calendar (any dates; only target_date is used)
        target_date: date or 'YYYY-MM-DD'
        config: Supplies the long-block threshold used in reason phrases
        owner_ids: Users to evaluate. Defaults to the owners found in timelines.
    """
    day = parse_target_date(target_date)
    index = index_timelines(timelines)
    owners = owner_ids if owner_ids is not None else owners_in(timelines)
    threshold = config.long_block_threshold_minutes

    verdicts = []
    for owner_id in owners:
        busy = busy_minutes_for(index, owner_id, day)
        busy_percent = busy / total_minutes * 100

        no_long_blocks = not has_long_block(index, owner_id, day)
        enough_booked = busy_percent >= occupancy_threshold

        passed_reasons, failed_reasons, fragments = [], [], []
        _record(no_long_blocks, REASON_NO_LONG_BLOCKS.format(threshold=threshold),
                passed_reasons, failed_reasons)
        _record(enough_booked, REASON_OCCUPANCY.format(occupancy=occupancy_threshold),
                passed_reasons, failed_reasons)

        if not no_long_blocks:
            fragments.append(FRAGMENT_LONG_BLOCKS.format(threshold=threshold))
        if not enough_booked:
            fragments.append(FRAGMENT_OCCUPANCY.format(
                busy=format_percent(busy_percent), occupancy=occupancy_threshold
            ))

        passed = no_long_blocks and enough_booked
        verdicts.append(DayVerdict(
            owner_id=owner_id,
            passed=passed,
            passed_reasons=tuple(passed_reasons),
            failed_reasons=tuple(failed_reasons),
            message=render_message(passed, fragments, day.isoformat()),
            date=day,
            busy_minutes=busy,
            busy_percent=busy_percent,
        ))

    return verdicts


# =============================================================================
# TWO-DAY MODE
# =============================================================================


def order_target_dates(target_dates) -> tuple[date, date]:
    """Return (day1, day2) with day1 the earlier date, whatever the input order."""
    days = sorted({parse_target_date(d) for d in target_dates})
    if len(days) != 2:
        raise MissingTargetDate(
            f"Two distinct target dates are required, got {len(days)}"
        )
    return days[0], days[1]


def evaluate_comparison_criteria(
    timelines: list[DayTimeline],
    target_dates,
    config: WorkdayConfig,
    owner_ids: list[str] | None = None,
    total_minutes: int = TOTAL_WORKDAY_MINUTES,
    low_day_ceiling: float = LOW_DAY_AVAILABILITY_CEILING,
    high_day_ceiling: float = HIGH_DAY_AVAILABILITY_CEILING,
) -> list[ComparisonVerdict]:
    """
    Evaluate the two-day criteria for every user.

    The earlier date must be mostly booked (availability <= low_day_ceiling)
    and the later one at least partly booked (availability <= high_day_ceiling).
    """
    day1, day2 = order_target_dates(target_dates)
    index = index_timelines(timelines)
    owners = owner_ids if owner_ids is not None else owners_in(timelines)
    threshold = config.long_block_threshold_minutes
    dates_label = f"{day1.isoformat()} and {day2.isoformat()}"

    verdicts = []
    for owner_id in owners:
        busy1 = busy_minutes_for(index, owner_id, day1)
        busy2 = busy_minutes_for(index, owner_id, day2)
        available1 = (total_minutes - busy1) / total_minutes * 100
        available2 = (total_minutes - busy2) / total_minutes * 100

        no_long_blocks = not (
            has_long_block(index, owner_id, day1) or has_long_block(index, owner_id, day2)
        )
        day1_ok = available1 <= low_day_ceiling
        day2_ok = available2 <= high_day_ceiling

        passed_reasons, failed_reasons, fragments = [], [], []
        _record(no_long_blocks, REASON_NO_LONG_BLOCKS.format(threshold=threshold),
                passed_reasons, failed_reasons)
        _record(day1_ok, REASON_DAY1_AVAILABILITY.format(day=day1, ceiling=low_day_ceiling),
                passed_reasons, failed_reasons)
        _record(day2_ok, REASON_DAY2_AVAILABILITY.format(day=day2, ceiling=high_day_ceiling),
                passed_reasons, failed_reasons)

        if not no_long_blocks:
            fragments.append(FRAGMENT_LONG_BLOCKS.format(threshold=threshold))
        if not day1_ok:
            fragments.append(FRAGMENT_DAY1.format(
                day=day1, available=format_percent(available1), ceiling=low_day_ceiling
            ))
        if not day2_ok:
            fragments.append(FRAGMENT_DAY2.format(
                day=day2, available=format_percent(available2), ceiling=high_day_ceiling
            ))

        passed = no_long_blocks and day1_ok and day2_ok
        verdicts.append(ComparisonVerdict(
            owner_id=owner_id,
            passed=passed,
            passed_reasons=tuple(passed_reasons),
            failed_reasons=tuple(failed_reasons),
            message=render_message(passed, fragments, dates_label),
            day1=day1,
            day2=day2,
            day1_busy_minutes=busy1,
            day1_available_percent=available1,
            day2_busy_minutes=busy2,
            day2_available_percent=available2,
        ))

    return verdicts
