"""
Data models for calendar events and fetch outcomes.

Frozen dataclasses so nothing downstream of the fetch stage can mutate them.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Event:
    """Normalized calendar event handed to the block builder."""

    owner_id: str
    start: str  # ISO-8601
    end: str  # ISO-8601
    is_all_day: bool = False
    title: str = ""


class FailureReason(str, Enum):
    NOT_FOUND_OR_NO_ACCESS = "not_found_or_no_access"
    FORBIDDEN = "forbidden"
    OTHER = "other"


FAILURE_DEFAULT_MESSAGES = {
    FailureReason.NOT_FOUND_OR_NO_ACCESS: "Calendar not found or not accessible",
    FailureReason.FORBIDDEN: "Calendar could not be read",
    FailureReason.OTHER: "Calendar could not be read",
}


@dataclass(frozen=True)
class FetchFailure:
    """A user whose calendar could not be fetched."""

    owner_id: str
    reason: FailureReason = FailureReason.OTHER
    message: str = ""

    @property
    def display_message(self) -> str:
        return self.message or FAILURE_DEFAULT_MESSAGES[self.reason]


@dataclass(frozen=True)
class FetchResult:
    """Events for every user that could be read, plus the users that could not."""

    events: tuple[Event, ...] = ()
    failures: tuple[FetchFailure, ...] = ()
    owner_ids: tuple[str, ...] = field(default=())

    @property
    def succeeded(self) -> list[str]:
        """Requested users whose calendars were read, in request order."""
        failed = {f.owner_id for f in self.failures}
        return [owner for owner in self.owner_ids if owner not in failed]
