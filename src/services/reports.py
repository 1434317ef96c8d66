"""
Report generation: CSV and Excel renderings of timelines and verdicts.
"""

import csv
import io
from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import (
    BLOCKS_HEADERS,
    COMPARISON_HEADERS,
    DAY_CRITERIA_HEADERS,
    REASON_SEPARATOR,
    SUMMARY_HEADERS,
)
from core.time_utils import format_minutes, format_percent
from models.events import FetchFailure
from models.timeline import DayTimeline
from models.verdicts import ComparisonVerdict, DayVerdict


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def report_filename(base: str, dates: list[date], extension: str = "csv") -> str:
    """e.g. calendar-report_2025-11-03.csv or calendar-report_2025-11-03_2025-11-09.csv"""
    unique = sorted(set(dates))
    if not unique:
        return f"{base}.{extension}"
    if len(unique) == 1:
        return f"{base}_{unique[0].isoformat()}.{extension}"
    return f"{base}_{unique[0].isoformat()}_{unique[-1].isoformat()}.{extension}"


def rows_to_csv(rows: list[list[str]]) -> str:
    """Serialize rows; fields holding a comma, quote or newline are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def error_row(failure: FetchFailure, width: int, message_column: int) -> list[str]:
    """One row per failed calendar: email, 'error' marker and message, rest empty."""
    row = [""] * width
    row[0] = failure.owner_id
    row[message_column] = failure.display_message
    return row


# =============================================================================
# BLOCKS REPORT
# =============================================================================


def build_blocks_rows(
    timelines: list[DayTimeline], failures: list[FetchFailure] = ()
) -> list[list[str]]:
    """Header, one row per busy/free block, then one error row per failed calendar."""
    rows = [list(BLOCKS_HEADERS)]

    for timeline in timelines:
        day = timeline.date.isoformat()
        for block in timeline.blocks:
            if block.is_busy:
                rows.append([
                    timeline.owner_id,
                    day,
                    "busy",
                    block.title or "",
                    block.start_time,
                    block.end_time,
                    format_minutes(block.duration_minutes),
                    format_bool(block.is_long),
                ])
            else:
                rows.append([
                    timeline.owner_id,
                    day,
                    "free",
                    "",
                    block.start_time,
                    block.end_time,
                    format_minutes(block.duration_minutes),
                    "",
                ])

    for failure in failures:
        row = error_row(failure, len(BLOCKS_HEADERS), message_column=3)
        row[2] = "error"
        rows.append(row)

    return rows


def build_blocks_csv(timelines: list[DayTimeline], failures: list[FetchFailure] = ()) -> str:
    return rows_to_csv(build_blocks_rows(timelines, failures))


# =============================================================================
# CRITERIA REPORTS
# =============================================================================


def _verdict_columns(verdict) -> list[str]:
    return [
        verdict.owner_id,
        format_bool(verdict.passed),
        REASON_SEPARATOR.join(verdict.passed_reasons),
        REASON_SEPARATOR.join(verdict.failed_reasons),
        verdict.message,
    ]


def _criteria_error_row(failure: FetchFailure, width: int) -> list[str]:
    # passed=false, message in the criteria_failed column
    row = error_row(failure, width, message_column=3)
    row[1] = "false"
    return row


def build_day_criteria_rows(
    verdicts: list[DayVerdict], failures: list[FetchFailure] = ()
) -> list[list[str]]:
    rows = [list(DAY_CRITERIA_HEADERS)]
    for verdict in verdicts:
        rows.append(_verdict_columns(verdict) + [
            verdict.date.isoformat(),
            format_minutes(verdict.busy_minutes),
            format_percent(verdict.busy_percent),
        ])
    for failure in failures:
        rows.append(_criteria_error_row(failure, len(DAY_CRITERIA_HEADERS)))
    return rows


def build_day_criteria_csv(verdicts: list[DayVerdict], failures: list[FetchFailure] = ()) -> str:
    return rows_to_csv(build_day_criteria_rows(verdicts, failures))


def build_comparison_rows(
    verdicts: list[ComparisonVerdict], failures: list[FetchFailure] = ()
) -> list[list[str]]:
    rows = [list(COMPARISON_HEADERS)]
    for verdict in verdicts:
        rows.append(_verdict_columns(verdict) + [
            verdict.day1.isoformat(),
            verdict.day2.isoformat(),
            format_minutes(verdict.day1_busy_minutes),
            format_percent(verdict.day1_available_percent),
            format_minutes(verdict.day2_busy_minutes),
            format_percent(verdict.day2_available_percent),
        ])
    for failure in failures:
        rows.append(_criteria_error_row(failure, len(COMPARISON_HEADERS)))
    return rows


def build_comparison_csv(
    verdicts: list[ComparisonVerdict], failures: list[FetchFailure] = ()
) -> str:
    return rows_to_csv(build_comparison_rows(verdicts, failures))


# =============================================================================
# EXCEL REPORT GENERATION
# =============================================================================


def write_excel_rows(ws, rows: list[list]):
    """Write rows starting at A1 with a bold header row."""
    for row_idx, row in enumerate(rows, start=1):
        for col_idx, value in enumerate(row, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if row_idx == 1:
                cell.font = Font(bold=True)

    # Rough column widths so emails and titles are readable
    for col_idx in range(1, len(rows[0]) + 1):
        width = max(len(str(row[col_idx - 1] or "")) for row in rows)
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(width + 2, 10), 60)


def write_excel_blocks_sheet(ws, timelines: list[DayTimeline], failures: list[FetchFailure]):
    """
    Write the block listing.

    Same columns as the CSV, with durations as numbers and is_long as a boolean.
    """
    rows = [list(BLOCKS_HEADERS)]
    for timeline in timelines:
        for block in timeline.blocks:
            rows.append([
                timeline.owner_id,
                timeline.date.isoformat(),
                block.kind.value,
                block.title if block.is_busy else None,
                block.start_time,
                block.end_time,
                block.duration_minutes,
                block.is_long if block.is_busy else None,
            ])
    for failure in failures:
        rows.append([failure.owner_id, None, "error", failure.display_message, None, None, None, None])
    write_excel_rows(ws, rows)


def write_excel_summary_sheet(ws, timelines: list[DayTimeline]):
    """One row per user/day: busy minutes, free minutes, long block count."""
    rows = [list(SUMMARY_HEADERS)]
    for timeline in timelines:
        rows.append([
            timeline.owner_id,
            timeline.date.isoformat(),
            timeline.busy_minutes,
            timeline.free_minutes,
            len(timeline.long_blocks),
        ])
    write_excel_rows(ws, rows)


def build_blocks_workbook(timelines: list[DayTimeline], failures: list[FetchFailure] = ()) -> Workbook:
    wb = Workbook()

    ws_blocks = wb.active
    ws_blocks.title = "Calendar Blocks"
    write_excel_blocks_sheet(ws_blocks, timelines, list(failures))

    ws_summary = wb.create_sheet(title="Summary")
    write_excel_summary_sheet(ws_summary, timelines)

    return wb


def create_blocks_excel_report(
    timelines: list[DayTimeline], failures: list[FetchFailure], output_path: Path
):
    """Save the blocks workbook to disk."""
    wb = build_blocks_workbook(timelines, failures)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved Excel report to: {output_path}")


def create_blocks_excel_bytes(
    timelines: list[DayTimeline], failures: list[FetchFailure] = ()
) -> bytes:
    buffer = io.BytesIO()
    build_blocks_workbook(timelines, failures).save(buffer)
    return buffer.getvalue()


def save_text_report(content: str, output_path: Path):
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    print(f"Saved CSV report to: {output_path}")
