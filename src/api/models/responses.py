"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    graph_configured: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class WorkdaySettings(BaseModel):
    """Persisted workday settings."""

    workday_start: str = Field(description="HH:MM")
    workday_end: str = Field(description="HH:MM")
    min_block_minutes: int
    max_standard_block_minutes: int
    timezone: str


class WorkdaySettingsUpdate(BaseModel):
    """Partial settings update; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    workday_start: str | None = None
    workday_end: str | None = None
    min_block_minutes: int | None = None
    max_standard_block_minutes: int | None = None
    timezone: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    EMPTY_ROSTER = "EMPTY_ROSTER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_WORKDAY_CONFIG = "INVALID_WORKDAY_CONFIG"
    MISSING_TARGET_DATE = "MISSING_TARGET_DATE"
    INVALID_DATE = "INVALID_DATE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
