#!/usr/bin/env python3
"""Create the calendar-analytics SQLite3 database (settings, reports, API logs)."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection, reset_workday_settings


def create_database(reset_settings: bool = False):
    """Create the database and tables if they don't exist."""
    conn = get_connection()
    conn.close()

    if reset_settings:
        reset_workday_settings()
        print("Workday settings reset to defaults")

    print(f"Database created successfully at: {DB_PATH}")


if __name__ == "__main__":
    create_database(reset_settings="--reset-settings" in sys.argv[1:])
