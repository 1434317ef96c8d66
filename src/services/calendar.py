"""
Calendar event fetching from MS Graph.

Produces normalized Event records for the block builder and reports users
whose calendars cannot be read as FetchFailure records.
"""

import asyncio
import re
from datetime import datetime, timezone

from core.config import GRAPH_PAGE_SIZE
from core.graph_client import get_graph_client
from models.events import Event, FailureReason, FetchFailure, FetchResult

NOT_FOUND_CODES = {
    "ErrorItemNotFound",
    "ErrorInvalidUser",
    "MailboxNotEnabledForRESTAPI",
    "ResourceNotFound",
    "Request_ResourceNotFound",
}
FORBIDDEN_CODES = {"ErrorAccessDenied", "Authorization_RequestDenied", "AccessDenied"}
OFFSET_PATTERN = re.compile(r"(Z|[+-]\d{2}:\d{2})$")


async def discover_users() -> list[str]:
    """Email addresses of all users in the organization."""
    graph = get_graph_client()
    users_response = await graph.users.get()
    users = users_response.value if users_response.value else []
    return [user.mail or user.user_principal_name for user in users]


async def fetch_events_for_user(
    owner_id: str, start: datetime, end: datetime
) -> list[Event]:
    """
    Fetch all events of a user's calendar view within [start, end).

    Follows @odata.nextLink pagination and drops cancelled events.
    Graph errors propagate to the caller.
    """
    from kiota_abstractions.base_request_configuration import RequestConfiguration
    from msgraph.generated.users.item.calendar.calendar_view.calendar_view_request_builder import (
        CalendarViewRequestBuilder,
    )

    graph = get_graph_client()
    calendar_view = graph.users.by_user_id(owner_id).calendar.calendar_view

    query_params = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetQueryParameters(
        start_date_time=_graph_datetime(start),
        end_date_time=_graph_datetime(end),
        orderby=["start/dateTime"],
        select=["subject", "start", "end", "isAllDay", "isCancelled"],
        top=GRAPH_PAGE_SIZE,
    )
    config = RequestConfiguration(query_parameters=query_params)
    # Ask for every dateTime in UTC so offsets are unambiguous
    config.headers.add("Prefer", 'outlook.timezone="UTC"')

    events = []
    response = await calendar_view.get(request_configuration=config)
    while response is not None:
        for raw in response.value or []:
            if raw.is_cancelled:
                continue
            events.append(normalize_event(raw, owner_id))

        next_link = response.odata_next_link
        if not next_link:
            break
        response = await calendar_view.with_url(next_link).get()

    return events


async def fetch_events_for_users(
    owner_ids: list[str], start: datetime, end: datetime
) -> FetchResult:
    """
    Fetch events for several users concurrently.

    A user whose calendar cannot be read becomes a FetchFailure; the other
    users' events are still returned.
    """

    async def fetch_one(owner_id: str):
        try:
            events = await fetch_events_for_user(owner_id, start, end)
            print(f"  {owner_id}: {len(events)} events")
            return events, None
        except Exception as e:
            failure = classify_fetch_error(owner_id, e)
            print(f"  Error fetching {owner_id} ({failure.reason.value}): {e}")
            return [], failure

    results = await asyncio.gather(*(fetch_one(owner_id) for owner_id in owner_ids))

    events = [event for owner_events, _ in results for event in owner_events]
    failures = [failure for _, failure in results if failure is not None]
    return FetchResult(events=tuple(events), failures=tuple(failures), owner_ids=tuple(owner_ids))


def classify_fetch_error(owner_id: str, error: Exception) -> FetchFailure:
    """Map a Graph error to a FetchFailure reason."""
    status = getattr(error, "response_status_code", None)
    error_code = getattr(getattr(error, "error", None), "code", None)
    error_message = getattr(getattr(error, "error", None), "message", None)

    if status == 404 or error_code in NOT_FOUND_CODES:
        reason = FailureReason.NOT_FOUND_OR_NO_ACCESS
    elif status == 403 or error_code in FORBIDDEN_CODES:
        reason = FailureReason.FORBIDDEN
    else:
        reason = FailureReason.OTHER

    return FetchFailure(owner_id=owner_id, reason=reason, message=error_message or "")


def normalize_event(event, owner_id: str) -> Event:
    """Convert a Graph event into an Event."""
    return Event(
        owner_id=owner_id,
        start=_event_timestamp(event.start),
        end=_event_timestamp(event.end),
        is_all_day=bool(event.is_all_day),
        title=event.subject or "",
    )


def _event_timestamp(value) -> str:
    """
    ISO string for a Graph dateTimeTimeZone.

    Graph returns e.g. '2025-11-03T09:00:00.0000000' with time_zone 'UTC';
    the fractional part is trimmed to microseconds.
    """
    if value is None or not value.date_time:
        return ""
    raw = re.sub(r"\.(\d{6})\d+", r".\1", value.date_time)
    if (value.time_zone or "UTC").upper() == "UTC" and not OFFSET_PATTERN.search(raw):
        raw += "+00:00"
    return raw


def _graph_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
