"""
SQLite persistence: workday settings and generated report records.
"""

import json
import sqlite3
from datetime import date

from core.config import DB_PATH, DEFAULT_SETTINGS
from core.validation import InvalidWorkdayConfig, validate_workday_settings
from models.timeline import WorkdayConfig

SETTINGS_KEY = "calendar-analytics_config"

REPORT_TYPES = ("blocks_report", "criteria_report", "criteria_comparison_report")

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reports (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL CHECK(type IN ('blocks_report', 'criteria_report', 'criteria_comparison_report')),
        name TEXT UNIQUE NOT NULL,
        user_count INTEGER NOT NULL DEFAULT 0,
        failure_count INTEGER NOT NULL DEFAULT 0,
        row_count INTEGER NOT NULL DEFAULT 0,
        create_date TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        report_type TEXT,
        roster_size INTEGER,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        users_analyzed INTEGER,
        failure_count INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'fetch_failure', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
    "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)",
]


def get_connection() -> sqlite3.Connection:
    """Get a database connection, creating the file and schema if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    create_schema(conn)
    return conn


def create_schema(conn: sqlite3.Connection):
    """Create all tables if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()
    for statement in SCHEMA:
        cursor.execute(statement)
    conn.commit()


# =============================================================================
# WORKDAY SETTINGS
# =============================================================================


def _read_stored_settings(conn: sqlite3.Connection) -> dict:
    cursor = conn.cursor()
    cursor.execute("SELECT value FROM settings WHERE key = ?", (SETTINGS_KEY,))
    row = cursor.fetchone()
    return json.loads(row[0]) if row else {}


def _write_settings(conn: sqlite3.Connection, settings: dict):
    conn.execute(
        """
        INSERT INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (SETTINGS_KEY, json.dumps(settings)),
    )
    conn.commit()


def get_workday_settings() -> dict:
    """Stored settings merged over the defaults (unknown keys are dropped)."""
    conn = get_connection()
    try:
        stored = _read_stored_settings(conn)
    finally:
        conn.close()
    return {key: stored.get(key, default) for key, default in DEFAULT_SETTINGS.items()}


def save_workday_settings(partial: dict) -> dict:
    """
    Merge a partial update into the stored settings.

    Raises:
        InvalidWorkdayConfig: if the merged settings are invalid (nothing is saved)
    """
    unknown = set(partial) - set(DEFAULT_SETTINGS)
    if unknown:
        raise InvalidWorkdayConfig(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    merged = {**get_workday_settings(), **partial}
    errors = validate_workday_settings(merged)
    if errors:
        raise InvalidWorkdayConfig("; ".join(errors))

    conn = get_connection()
    try:
        _write_settings(conn, merged)
    finally:
        conn.close()
    return merged


def reset_workday_settings() -> dict:
    """Restore the default settings."""
    defaults = dict(DEFAULT_SETTINGS)
    conn = get_connection()
    try:
        _write_settings(conn, defaults)
    finally:
        conn.close()
    return defaults


def load_workday_config() -> WorkdayConfig:
    """Current settings as a WorkdayConfig."""
    return WorkdayConfig.from_settings(get_workday_settings())


# =============================================================================
# REPORT RECORDS
# =============================================================================


def generate_report_name(report_type: str, as_of_date: date, conn: sqlite3.Connection) -> str:
    """
    Generate unique report name with auto-incremented suffix.

    Example: blocks_report_2025_11_07_a, blocks_report_2025_11_07_b, ...
    After _z the suffix continues with _aa, _ab.
    """
    base_pattern = f"{report_type}_{as_of_date.strftime('%Y_%m_%d')}_"

    cursor = conn.cursor()
    cursor.execute(
        "SELECT name FROM reports WHERE name LIKE ? ORDER BY name DESC",
        (f"{base_pattern}%",),
    )
    existing = cursor.fetchall()

    if not existing:
        return f"{base_pattern}a"

    highest = 0
    for (name,) in existing:
        suffix = name[len(base_pattern):]
        if suffix.isascii() and suffix.isalpha() and suffix.islower():
            highest = max(highest, suffix_to_number(suffix))

    return f"{base_pattern}{number_to_suffix(highest + 1)}"


def suffix_to_number(suffix: str) -> int:
    """a=1 ... z=26, aa=27 (spreadsheet-column style)."""
    number = 0
    for letter in suffix:
        number = number * 26 + (ord(letter) - ord("a") + 1)
    return number


def number_to_suffix(number: int) -> str:
    letters = []
    while number > 0:
        number, remainder = divmod(number - 1, 26)
        letters.append(chr(ord("a") + remainder))
    return "".join(reversed(letters))


def create_report_record(
    conn: sqlite3.Connection,
    report_type: str,
    report_name: str,
    user_count: int = 0,
    failure_count: int = 0,
    row_count: int = 0,
) -> int:
    """Create report record and return report_id."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO reports (type, name, user_count, failure_count, row_count)
        VALUES (?, ?, ?, ?, ?)
        """,
        (report_type, report_name, user_count, failure_count, row_count),
    )
    conn.commit()
    return cursor.lastrowid


def record_report(
    report_type: str, as_of_date: date, user_count: int, failure_count: int, row_count: int
) -> str:
    """Create a report record under a fresh name and return the name."""
    conn = get_connection()
    try:
        name = generate_report_name(report_type, as_of_date, conn)
        create_report_record(conn, report_type, name, user_count, failure_count, row_count)
    finally:
        conn.close()
    return name
