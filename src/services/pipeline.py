"""
Report pipelines: fetch events, build timelines, evaluate criteria.
"""

from dataclasses import dataclass
from datetime import date

from core.time_utils import fetch_window
from models.events import FetchFailure
from models.timeline import DayTimeline, WorkdayConfig
from models.verdicts import ComparisonVerdict, DayVerdict
from services.blocks import analyze_calendar
from services.calendar import fetch_events_for_users
from services.criteria import (
    evaluate_comparison_criteria,
    evaluate_day_criteria,
    order_target_dates,
)


@dataclass
class BlocksReport:
    timelines: list[DayTimeline]
    failures: list[FetchFailure]
    owner_ids: list[str]


@dataclass
class CriteriaReport:
    verdicts: list[DayVerdict] | list[ComparisonVerdict]
    failures: list[FetchFailure]
    dates: list[date]


async def collect_timelines(
    owner_ids: list[str], first: date, last: date, config: WorkdayConfig
) -> BlocksReport:
    """Fetch [first, last] for every user and build their day timelines."""
    start, end = fetch_window(first, last, config.tz)
    print(f"Fetching events for {len(owner_ids)} calendar(s), {first} to {last}...")
    fetched = await fetch_events_for_users(owner_ids, start, end)
    print(f"Total events fetched: {len(fetched.events)} ({len(fetched.failures)} failed calendar(s))")

    timelines = [
        t for t in analyze_calendar(list(fetched.events), config, skip_invalid=True)
        if first <= t.date <= last
    ]
    return BlocksReport(
        timelines=timelines, failures=list(fetched.failures), owner_ids=fetched.succeeded
    )


async def run_day_criteria(owner_ids: list[str], day: date, config: WorkdayConfig) -> CriteriaReport:
    report = await collect_timelines(owner_ids, day, day, config)
    verdicts = evaluate_day_criteria(report.timelines, day, config, owner_ids=report.owner_ids)
    return CriteriaReport(verdicts=verdicts, failures=report.failures, dates=[day])


async def run_comparison_criteria(
    owner_ids: list[str], target_dates: list, config: WorkdayConfig
) -> CriteriaReport:
    day1, day2 = order_target_dates(target_dates)
    report = await collect_timelines(owner_ids, day1, day2, config)
    verdicts = evaluate_comparison_criteria(
        report.timelines, [day1, day2], config, owner_ids=report.owner_ids
    )
    return CriteriaReport(verdicts=verdicts, failures=report.failures, dates=[day1, day2])
