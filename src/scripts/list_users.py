#!/usr/bin/env python3
"""
List all users in the MS365 organization, one email per line.

The output can be redirected into a roster file:
    uv run python src/scripts/list_users.py > roster.csv
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.calendar import discover_users


async def main():
    emails = await discover_users()
    print("email")
    for email in emails:
        if email:
            print(email)
    print(f"Found {len(emails)} users", file=sys.stderr)


if __name__ == "__main__":
    asyncio.run(main())
