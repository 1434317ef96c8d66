"""Report generation endpoints."""

import time
from datetime import date
from typing import Annotated, Awaitable, Callable

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import Response

from api.dependencies import get_workday_config, verify_api_key
from api.logging import RequestLog, log_request
from api.models.responses import ErrorCodes
from core.config import (
    DEFAULT_BLOCKS_FILENAME,
    DEFAULT_COMPARISON_FILENAME,
    DEFAULT_CRITERIA_FILENAME,
    MAX_ROSTER_SIZE_BYTES,
)
from core.database import record_report
from core.time_utils import DATE_RANGE_LABELS, get_date_range
from core.validation import CalendarAnalysisError, parse_target_date
from models.timeline import WorkdayConfig
from services.pipeline import collect_timelines, run_comparison_criteria, run_day_criteria
from services.reports import (
    build_blocks_csv,
    build_comparison_csv,
    build_day_criteria_csv,
    create_blocks_excel_bytes,
    report_filename,
)
from services.roster import parse_emails_from_csv_text

router = APIRouter(prefix="/v1/reports")

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def bad_request(error: str, code: str, details: list[str] | None = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error, "code": code, "details": details or []},
    )


def parse_date_field(value: str, field_name: str) -> date:
    try:
        return parse_target_date(value)
    except CalendarAnalysisError:
        raise bad_request(
            f"Invalid {field_name} format", ErrorCodes.INVALID_DATE, ["Expected format: YYYY-MM-DD"]
        )


async def read_roster(roster: UploadFile) -> list[str]:
    """Read and parse the uploaded roster CSV."""
    if not roster or not roster.filename:
        raise bad_request("No roster file provided", ErrorCodes.INVALID_REQUEST)

    content = await roster.read()
    if len(content) > MAX_ROSTER_SIZE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": f"Roster exceeds maximum size of {MAX_ROSTER_SIZE_BYTES // 1024} KB",
                "code": ErrorCodes.FILE_TOO_LARGE,
                "details": [f"File size: {len(content) / 1024:.1f} KB"],
            },
        )

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise bad_request("Roster must be UTF-8 text", ErrorCodes.INVALID_REQUEST)

    emails = parse_emails_from_csv_text(text)
    if not emails:
        raise bad_request("No valid emails found in the roster", ErrorCodes.EMPTY_ROSTER)
    return emails


# Builds (content, media_type, filename, users_analyzed, failures) from the roster emails
ReportBuilder = Callable[[list[str]], Awaitable[tuple[bytes, str, str, int, list]]]


async def generate_report(
    request: Request,
    roster: UploadFile,
    report_type: str,
    build: ReportBuilder,
) -> Response:
    """Shared request flow: read roster, build the report, log the request."""
    start_time = time.time()

    request_log = RequestLog(
        endpoint=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
        report_type=report_type,
    )

    try:
        emails = await read_roster(roster)
        request_log.roster_size = len(emails)

        content, media_type, filename, users_analyzed, failures = await build(emails)

        request_log.status_code = 200
        request_log.users_analyzed = users_analyzed
        request_log.failure_count = len(failures)
        for failure in failures:
            request_log.details.append(
                ("fetch_failure", f"{failure.owner_id}: {failure.display_message}")
            )
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
            for detail in e.detail.get("details", []):
                request_log.details.append(("validation_error", detail))
        else:
            request_log.error_message = str(e.detail)
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        raise

    except CalendarAnalysisError as e:
        request_log.status_code = 400
        request_log.error_code = e.code
        request_log.error_message = str(e)
        request_log.details.append(("validation_error", str(e)))
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Calendar analysis failed", "code": e.code, "details": [str(e)]},
        )

    except Exception as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    finally:
        # Don't fail the request if logging fails
        try:
            log_request(request_log)
        except Exception as log_error:
            print(f"Failed to log request {request_log.request_id}: {log_error}")


def resolve_blocks_range(
    range_label: str | None, start_date: str | None, end_date: str | None
) -> tuple[date, date]:
    if range_label:
        if range_label not in DATE_RANGE_LABELS:
            raise bad_request(
                "Invalid range", ErrorCodes.INVALID_REQUEST,
                [f"Expected one of: {', '.join(DATE_RANGE_LABELS)}"],
            )
        return get_date_range(range_label)
    if end_date and not start_date:
        raise bad_request("end_date requires start_date", ErrorCodes.INVALID_REQUEST)
    if start_date:
        first = parse_date_field(start_date, "start_date")
        last = parse_date_field(end_date, "end_date") if end_date else first
        if last < first:
            raise bad_request("end_date must not be before start_date", ErrorCodes.INVALID_REQUEST)
        return first, last
    return get_date_range("today")


@router.post("/blocks")
async def blocks_report_endpoint(
    request: Request,
    roster: Annotated[UploadFile, File(description="CSV with an 'email' column or one email per line")],
    range_label: Annotated[
        str | None, Form(alias="range", description="today, tomorrow or week")
    ] = None,
    start_date: Annotated[str | None, Form(description="First date (YYYY-MM-DD)")] = None,
    end_date: Annotated[str | None, Form(description="Last date (YYYY-MM-DD)")] = None,
    output_format: Annotated[str, Form(alias="format", description="csv or xlsx")] = "csv",
    config: WorkdayConfig = Depends(get_workday_config),
    _api_key: str = Depends(verify_api_key),
):
    """Busy/free blocks per user and day as CSV or Excel."""
    if output_format not in ("csv", "xlsx"):
        raise bad_request("Invalid format", ErrorCodes.INVALID_REQUEST, ["Expected csv or xlsx"])
    first, last = resolve_blocks_range(range_label, start_date, end_date)

    async def build(emails: list[str]):
        report = await collect_timelines(emails, first, last, config)
        if output_format == "xlsx":
            content = create_blocks_excel_bytes(report.timelines, report.failures)
            media_type = XLSX_MEDIA_TYPE
        else:
            content = build_blocks_csv(report.timelines, report.failures).encode("utf-8")
            media_type = CSV_MEDIA_TYPE
        record_report(
            "blocks_report", last, len(report.owner_ids), len(report.failures),
            sum(len(t.blocks) for t in report.timelines),
        )
        filename = report_filename(DEFAULT_BLOCKS_FILENAME, [first, last], output_format)
        return content, media_type, filename, len(report.owner_ids), report.failures

    return await generate_report(request, roster, "blocks_report", build)


@router.post("/criteria")
async def criteria_report_endpoint(
    request: Request,
    roster: Annotated[UploadFile, File(description="CSV with an 'email' column or one email per line")],
    target_date: Annotated[str, Form(alias="date", description="Date to evaluate (YYYY-MM-DD)")],
    config: WorkdayConfig = Depends(get_workday_config),
    _api_key: str = Depends(verify_api_key),
):
    """Single-day criteria verdict per user as CSV."""
    day = parse_date_field(target_date, "date")

    async def build(emails: list[str]):
        report = await run_day_criteria(emails, day, config)
        content = build_day_criteria_csv(report.verdicts, report.failures).encode("utf-8")
        record_report(
            "criteria_report", day, len(report.verdicts), len(report.failures), len(report.verdicts)
        )
        filename = report_filename(DEFAULT_CRITERIA_FILENAME, report.dates)
        return content, CSV_MEDIA_TYPE, filename, len(report.verdicts), report.failures

    return await generate_report(request, roster, "criteria_report", build)


@router.post("/criteria/comparison")
async def comparison_report_endpoint(
    request: Request,
    roster: Annotated[UploadFile, File(description="CSV with an 'email' column or one email per line")],
    day1: Annotated[str, Form(description="First date (YYYY-MM-DD)")],
    day2: Annotated[str, Form(description="Second date (YYYY-MM-DD)")],
    config: WorkdayConfig = Depends(get_workday_config),
    _api_key: str = Depends(verify_api_key),
):
    """Two-day criteria verdict per user as CSV. Dates may be given in either order."""
    dates = [parse_date_field(day1, "day1"), parse_date_field(day2, "day2")]

    async def build(emails: list[str]):
        report = await run_comparison_criteria(emails, dates, config)
        content = build_comparison_csv(report.verdicts, report.failures).encode("utf-8")
        record_report(
            "criteria_comparison_report", max(report.dates), len(report.verdicts),
            len(report.failures), len(report.verdicts),
        )
        filename = report_filename(DEFAULT_COMPARISON_FILENAME, report.dates)
        return content, CSV_MEDIA_TYPE, filename, len(report.verdicts), report.failures

    return await generate_report(request, roster, "criteria_comparison_report", build)
