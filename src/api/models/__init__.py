"""API Pydantic models."""

from .responses import (
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    WorkdaySettings,
    WorkdaySettingsUpdate,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "WorkdaySettings",
    "WorkdaySettingsUpdate",
]
