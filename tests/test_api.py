"""
Tests for the FastAPI endpoints, with the calendar fetch replaced by canned data.
"""

import csv
import io

import pytest
from fastapi.testclient import TestClient

from api.main import app
from models.events import Event, FailureReason, FetchFailure, FetchResult

API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}


@pytest.fixture
def client(temp_db, monkeypatch):
    monkeypatch.setattr("core.config.CALENDAR_ANALYTICS_API_KEY", API_KEY)
    return TestClient(app)


@pytest.fixture
def fake_fetch(monkeypatch):
    """Replace the Graph fetch; ana has events, gone@ cannot be read."""
    calls = []

    async def _fetch(owner_ids, start, end):
        calls.append((list(owner_ids), start, end))
        events = [
            Event("ana@example.com", "2025-11-03T09:00:00Z", "2025-11-03T09:30:00Z", title="Sync"),
            Event("ana@example.com", "2025-11-04T10:00:00Z", "2025-11-04T11:30:00Z", title="Workshop"),
        ]
        failures = [
            FetchFailure(o, FailureReason.NOT_FOUND_OR_NO_ACCESS) for o in owner_ids if o.startswith("gone")
        ]
        return FetchResult(
            events=tuple(e for e in events if e.owner_id in owner_ids),
            failures=tuple(failures),
            owner_ids=tuple(owner_ids),
        )

    monkeypatch.setattr("services.pipeline.fetch_events_for_users", _fetch)
    return calls


def roster_file(*emails):
    content = "email\n" + "\n".join(emails)
    return {"roster": ("roster.csv", content.encode("utf-8"), "text/csv")}


def read_csv(response):
    return list(csv.reader(io.StringIO(response.text)))


class TestAuth:
    def test_missing_key_is_rejected(self, client):
        response = client.get("/v1/config")

        assert response.status_code == 422

    def test_wrong_key_is_rejected(self, client):
        response = client.get("/v1/config", headers={"X-API-Key": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database_available"] is True


class TestSettings:
    def test_get_update_reset(self, client):
        assert client.get("/v1/config", headers=HEADERS).json()["workday_start"] == "07:00"

        updated = client.put("/v1/config", json={"workday_start": "08:00"}, headers=HEADERS)
        assert updated.status_code == 200
        assert updated.json()["workday_start"] == "08:00"
        assert client.get("/v1/config", headers=HEADERS).json()["workday_start"] == "08:00"

        reset = client.delete("/v1/config", headers=HEADERS)
        assert reset.json()["workday_start"] == "07:00"

    def test_invalid_update(self, client):
        response = client.put("/v1/config", json={"workday_end": "06:00"}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_WORKDAY_CONFIG"

    def test_unknown_field_rejected(self, client):
        response = client.put("/v1/config", json={"googleClientId": "x"}, headers=HEADERS)

        assert response.status_code == 422


class TestBlocksReport:
    def test_csv_download(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/blocks",
            files=roster_file("ana@example.com", "gone@example.com"),
            data={"start_date": "2025-11-03"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="calendar-report_2025-11-03.csv"' in response.headers["content-disposition"]

        rows = read_csv(response)
        assert rows[0][0] == "email"
        assert ["ana@example.com", "2025-11-03", "busy", "Sync", "09:00", "09:30", "30", "false"] in rows
        assert rows[-1][:4] == ["gone@example.com", "", "error", "Calendar not found or not accessible"]
        # Only the requested date is reported
        assert all(row[1] in ("2025-11-03", "") for row in rows[1:])

    def test_xlsx_download(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/blocks",
            files=roster_file("ana@example.com"),
            data={"start_date": "2025-11-03", "end_date": "2025-11-04", "format": "xlsx"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response.content[:2] == b"PK"

    def test_empty_roster(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/blocks",
            files={"roster": ("roster.csv", b"email\n", "text/csv")},
            data={"start_date": "2025-11-03"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "EMPTY_ROSTER"
        assert fake_fetch == []

    def test_bad_range(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/blocks",
            files=roster_file("ana@example.com"),
            data={"range": "fortnight"},
            headers=HEADERS,
        )

        assert response.status_code == 400

    def test_end_date_without_start_date(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/blocks",
            files=roster_file("ana@example.com"),
            data={"end_date": "2025-11-04"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_REQUEST"
        assert fake_fetch == []

    def test_request_is_logged(self, client, fake_fetch, temp_db):
        client.post(
            "/v1/reports/blocks",
            files=roster_file("ana@example.com", "gone@example.com"),
            data={"start_date": "2025-11-03"},
            headers=HEADERS,
        )

        from core.database import get_connection

        conn = get_connection()
        logged = conn.execute(
            "SELECT status_code, roster_size, users_analyzed, failure_count FROM api_requests"
        ).fetchone()
        details = conn.execute("SELECT detail_type FROM api_request_details").fetchall()
        conn.close()

        assert logged == (200, 2, 1, 1)
        assert details == [("fetch_failure",)]


class TestCriteriaReports:
    def test_single_day(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/criteria",
            files=roster_file("ana@example.com"),
            data={"date": "2025-11-03"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        rows = read_csv(response)
        assert rows[1][0] == "ana@example.com"
        assert rows[1][1] == "false"
        assert rows[1][5:] == ["2025-11-03", "30", "5.6"]

    def test_invalid_date(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/criteria",
            files=roster_file("ana@example.com"),
            data={"date": "11/03/2025"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_DATE"

    def test_comparison_orders_dates(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/criteria/comparison",
            files=roster_file("ana@example.com"),
            data={"day1": "2025-11-04", "day2": "2025-11-03"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        rows = read_csv(response)
        assert rows[1][5:7] == ["2025-11-03", "2025-11-04"]
        # Workshop on the later day is a long block
        assert "No blocks longer than 60 minutes" in rows[1][3]

    def test_comparison_same_date(self, client, fake_fetch):
        response = client.post(
            "/v1/reports/criteria/comparison",
            files=roster_file("ana@example.com"),
            data={"day1": "2025-11-03", "day2": "2025-11-03"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "MISSING_TARGET_DATE"
