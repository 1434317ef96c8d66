#!/usr/bin/env python3
"""
Evaluate calendar hygiene criteria for a roster and write a CSV verdict report.

Single-day mode checks one date; comparison mode checks two dates (given in
any order, the earlier one is treated as day 1).

Usage:
    uv run python src/scripts/create_criteria_report.py --roster team.csv --date 2025-11-07
    uv run python src/scripts/create_criteria_report.py --roster team.csv --compare 2025-11-07 2025-11-10
"""

import argparse
import asyncio
import sys
import traceback
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DEFAULT_COMPARISON_FILENAME, DEFAULT_CRITERIA_FILENAME, OUTPUT_DIR
from core.database import load_workday_config, record_report
from core.validation import parse_target_date
from services.email import format_report_summary, send_error_email, send_report_email
from services.pipeline import run_comparison_criteria, run_day_criteria
from services.reports import (
    build_comparison_csv,
    build_day_criteria_csv,
    report_filename,
    save_text_report,
)
from services.roster import read_roster


async def main(args):
    """Main entry point."""
    try:
        config = load_workday_config()

        emails = read_roster(args.roster)
        if not emails:
            print("No valid emails found in the roster!")
            return
        print(f"Loaded {len(emails)} email(s) from {args.roster}")

        if args.compare:
            report = await run_comparison_criteria(emails, args.compare, config)
            report_type = "criteria_comparison_report"
            content = build_comparison_csv(report.verdicts, report.failures)
            base = DEFAULT_COMPARISON_FILENAME
            title = f"Calendar criteria {report.dates[0]} vs {report.dates[1]}"
        else:
            day = parse_target_date(args.date) if args.date else date.today()
            report = await run_day_criteria(emails, day, config)
            report_type = "criteria_report"
            content = build_day_criteria_csv(report.verdicts, report.failures)
            base = DEFAULT_CRITERIA_FILENAME
            title = f"Calendar criteria {day}"

        passed = sum(1 for v in report.verdicts if v.passed)
        print(f"\n{passed}/{len(report.verdicts)} user(s) passed, {len(report.failures)} calendar(s) failed")

        output_dir = Path(args.output) if args.output else OUTPUT_DIR / "reports" / "criteria"
        output_path = output_dir / report_filename(base, report.dates)
        save_text_report(content, output_path)

        name = record_report(
            report_type, max(report.dates), len(report.verdicts), len(report.failures),
            len(report.verdicts),
        )
        print(f"Recorded report: {name}")

        if args.email:
            body = format_report_summary(title, report.verdicts, report.failures)
            await send_report_email(title, output_path, body, args.email)

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        if args.email:
            await send_error_email(e)
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate calendar criteria report")
    parser.add_argument("--roster", required=True, help="CSV file with an 'email' column or one email per line")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--date", help="Date to evaluate (YYYY-MM-DD). Defaults to today.")
    mode.add_argument("--compare", nargs=2, metavar=("DAY1", "DAY2"), help="Two dates to compare")
    parser.add_argument("--output", help="Output directory")
    parser.add_argument("--email", help="Send the report to this address")
    args = parser.parse_args()

    asyncio.run(main(args))
