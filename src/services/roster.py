"""
Roster parsing: the list of calendars (user emails) to analyse.
"""

import csv
import io


def parse_emails_from_csv_text(text: str) -> list[str]:
    """
    Read emails from CSV text.

    A first line containing 'email' (case-insensitive) is a header and the
    'email' column is used; without a header each line is one email.
    Duplicates are dropped, first occurrence wins.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return []

    if "email" in lines[0].lower():
        reader = csv.reader(io.StringIO("\n".join(lines)))
        headers = [h.strip().lower() for h in next(reader)]
        if "email" not in headers:
            return []
        email_index = headers.index("email")
        emails = []
        for row in reader:
            value = row[email_index].strip() if email_index < len(row) else ""
            if value:
                emails.append(value)
    else:
        emails = lines

    return list(dict.fromkeys(emails))


def read_roster(path) -> list[str]:
    """Read a roster CSV file from disk."""
    with open(path, encoding="utf-8-sig") as f:
        return parse_emails_from_csv_text(f.read())
