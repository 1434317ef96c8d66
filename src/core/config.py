"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("CALENDAR_ANALYTICS_DB", PROJECT_ROOT / "data" / "db" / "calendar-analytics.db")
)
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# WORKDAY CONFIGURATION (defaults, overridable through the settings table)
# =============================================================================

DEFAULT_WORKDAY_START = "07:00"
DEFAULT_WORKDAY_END = "17:00"
DEFAULT_MAX_STANDARD_BLOCK_MINUTES = 60
DEFAULT_MIN_BLOCK_MINUTES = 30  # Stored with the settings, not used to build blocks

# Civil dates, workday windows and HH:MM strings are computed in this zone
REPORT_TIMEZONE = os.environ.get("REPORT_TIMEZONE", "UTC")

DEFAULT_SETTINGS = {
    "workday_start": DEFAULT_WORKDAY_START,
    "workday_end": DEFAULT_WORKDAY_END,
    "min_block_minutes": DEFAULT_MIN_BLOCK_MINUTES,
    "max_standard_block_minutes": DEFAULT_MAX_STANDARD_BLOCK_MINUTES,
    "timezone": REPORT_TIMEZONE,
}

# =============================================================================
# CRITERIA CONFIGURATION
# =============================================================================

# Nominal workday length used for every percentage, regardless of the
# configured start/end times
TOTAL_WORKDAY_MINUTES = 540

OCCUPANCY_THRESHOLD_PERCENT = 85
LOW_DAY_AVAILABILITY_CEILING = 30
HIGH_DAY_AVAILABILITY_CEILING = 70

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

BLOCKS_HEADERS = [
    "email", "date", "type", "title", "from", "to", "duration_minutes", "is_long"
]
DAY_CRITERIA_HEADERS = [
    "email", "passed", "criteria_passed", "criteria_failed", "slack_message",
    "date", "busy_minutes", "busy_percent",
]
COMPARISON_HEADERS = [
    "email", "passed", "criteria_passed", "criteria_failed", "slack_message",
    "day1", "day2",
    "day1_busy_minutes", "day1_available_percent",
    "day2_busy_minutes", "day2_available_percent",
]
SUMMARY_HEADERS = ["email", "date", "busy_minutes", "free_minutes", "long_blocks"]

DEFAULT_BLOCKS_FILENAME = "calendar-report"
DEFAULT_CRITERIA_FILENAME = "calendar-criteria"
DEFAULT_COMPARISON_FILENAME = "calendar-criteria-comparison"

REASON_SEPARATOR = "; "

# =============================================================================
# EMAIL CONFIGURATION
# =============================================================================

FROM_EMAIL = os.environ.get("REPORT_FROM_EMAIL", "")
TO_EMAIL = os.environ.get("REPORT_TO_EMAIL", "")
ERROR_EMAIL = os.environ.get("REPORT_ERROR_EMAIL", "")

# =============================================================================
# MS GRAPH CREDENTIALS (from environment)
# =============================================================================

GRAPH_TENANT_ID = os.environ.get("MICROSOFT_GRAPH_TENANT_ID", "")
GRAPH_APP_ID = os.environ.get("MICROSOFT_GRAPH_APP_ID", "")
GRAPH_CLIENT_SECRET = os.environ.get("MICROSOFT_GRAPH_CLIENT_SECRET", "")
GRAPH_PAGE_SIZE = 100

# =============================================================================
# API CONFIGURATION
# =============================================================================

CALENDAR_ANALYTICS_API_KEY = os.environ.get("CALENDAR_ANALYTICS_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
MAX_ROSTER_SIZE_KB = int(os.environ.get("MAX_ROSTER_SIZE_KB", "512"))
MAX_ROSTER_SIZE_BYTES = MAX_ROSTER_SIZE_KB * 1024
API_VERSION = "1.0.0"
