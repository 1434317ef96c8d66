"""FastAPI dependencies for authentication and shared resources."""

import secrets

from fastapi import Header, HTTPException, status

from core import config
from core.database import load_workday_config
from core.validation import InvalidWorkdayConfig
from models.timeline import WorkdayConfig


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    expected = config.CALENDAR_ANALYTICS_API_KEY
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Constant-time comparison
    if not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


def get_workday_config() -> WorkdayConfig:
    """Current persisted workday configuration."""
    try:
        return load_workday_config()
    except InvalidWorkdayConfig as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Stored workday settings are invalid",
                "code": InvalidWorkdayConfig.code,
                "details": [str(e)],
            },
        )
