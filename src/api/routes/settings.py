"""Workday settings endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import verify_api_key
from api.models.responses import ErrorCodes, WorkdaySettings, WorkdaySettingsUpdate
from core.database import get_workday_settings, reset_workday_settings, save_workday_settings
from core.validation import InvalidWorkdayConfig

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.get("/config", response_model=WorkdaySettings)
async def read_settings():
    """Current settings (stored values merged over defaults)."""
    return get_workday_settings()


@router.put("/config", response_model=WorkdaySettings)
async def update_settings(update: WorkdaySettingsUpdate):
    """Save a partial update; omitted fields keep their stored value."""
    try:
        return save_workday_settings(update.model_dump(exclude_none=True))
    except InvalidWorkdayConfig as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid workday settings",
                "code": ErrorCodes.INVALID_WORKDAY_CONFIG,
                "details": str(e).split("; "),
            },
        )


@router.delete("/config", response_model=WorkdaySettings)
async def reset_settings():
    """Restore the defaults."""
    return reset_workday_settings()
