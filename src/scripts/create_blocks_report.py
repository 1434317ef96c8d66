#!/usr/bin/env python3
"""
Create a busy/free blocks report from MS365 calendars.

Reads a roster of emails, fetches each calendar for the date range, builds
the per-day timelines and writes a CSV (or Excel) report. Optionally emails
the report.

Usage:
    uv run python src/scripts/create_blocks_report.py --roster team.csv --range week
    uv run python src/scripts/create_blocks_report.py --roster team.csv --start 2025-11-03 --end 2025-11-07 --format xlsx
"""

import argparse
import asyncio
import sys
import traceback
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DEFAULT_BLOCKS_FILENAME, OUTPUT_DIR
from core.database import load_workday_config, record_report
from core.time_utils import DATE_RANGE_LABELS, get_date_range
from core.validation import parse_target_date
from services.email import send_error_email, send_report_email
from services.pipeline import collect_timelines
from services.reports import (
    build_blocks_csv,
    create_blocks_excel_report,
    report_filename,
    save_text_report,
)
from services.roster import read_roster


async def main(args):
    """Main entry point."""
    try:
        # 1. Resolve dates and settings
        if args.start:
            first = parse_target_date(args.start)
            last = parse_target_date(args.end) if args.end else first
        else:
            first, last = get_date_range(args.range)
        config = load_workday_config()
        print(
            f"Generating blocks report for {first} to {last} "
            f"(workday {config.day_start_time}-{config.day_end_time} {config.timezone})"
        )

        # 2. Read roster
        emails = read_roster(args.roster)
        if not emails:
            print("No valid emails found in the roster!")
            return
        print(f"Loaded {len(emails)} email(s) from {args.roster}")

        # 3. Fetch events and build timelines
        report = await collect_timelines(emails, first, last, config)
        block_count = sum(len(t.blocks) for t in report.timelines)
        print(f"Built {len(report.timelines)} day timeline(s), {block_count} block(s)")

        # 4. Write report
        output_dir = Path(args.output) if args.output else OUTPUT_DIR / "reports" / "blocks"
        output_path = output_dir / report_filename(DEFAULT_BLOCKS_FILENAME, [first, last], args.format)
        if args.format == "xlsx":
            create_blocks_excel_report(report.timelines, report.failures, output_path)
        else:
            save_text_report(build_blocks_csv(report.timelines, report.failures), output_path)

        name = record_report(
            "blocks_report", last, len(report.owner_ids), len(report.failures), block_count
        )
        print(f"\nRecorded report: {name}")

        # 5. Email if requested
        if args.email:
            body = f"Calendar blocks report {first} to {last}\n"
            if report.failures:
                body += "\nCalendars that could not be read:\n" + "\n".join(
                    f"  - {f.owner_id}: {f.display_message}" for f in report.failures
                )
            await send_report_email(f"Calendar Blocks {first} - {last}", output_path, body, args.email)

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        if args.email:
            await send_error_email(e)
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate busy/free calendar blocks report")
    parser.add_argument("--roster", required=True, help="CSV file with an 'email' column or one email per line")
    parser.add_argument("--range", choices=DATE_RANGE_LABELS, default="today", help="Date range preset")
    parser.add_argument("--start", help="First date (YYYY-MM-DD). Overrides --range.")
    parser.add_argument("--end", help="Last date (YYYY-MM-DD). Defaults to --start.")
    parser.add_argument("--format", choices=("csv", "xlsx"), default="csv")
    parser.add_argument("--output", help="Output directory")
    parser.add_argument("--email", help="Send the report to this address")
    args = parser.parse_args()
    if args.end and not args.start:
        parser.error("--end requires --start")

    asyncio.run(main(args))
