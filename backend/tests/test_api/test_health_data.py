"""Tests for health data endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TestSampleUpload:
    """Test quantity sample ingestion."""

    def test_upload_steps(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "stepCount", "value": 4200},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["metric"] == "steps"
        assert data["unit"] == "count"
        assert data["value"] == 4200

    def test_upload_converts_metric_units(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "dietaryWater", "value": 500, "unit": "ml"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["metric"] == "water"
        assert data["value"] == pytest.approx(16.907, rel=1e-3)

    def test_upload_unknown_metric(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "blood_glucose", "value": 90},
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "metric"

    def test_upload_negative_value(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "steps", "value": -5},
        )
        assert response.status_code == 422

    def test_upload_requires_auth(self, client: TestClient):
        response = client.post("/api/health-data/samples", json={"metric": "steps", "value": 10})
        assert response.status_code == 401


class TestTodaySnapshot:
    """Test the daily metrics snapshot."""

    def test_empty_snapshot(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/health-data/today", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["steps"] == 0
        assert data["sleep_hours"] == 0
        assert data["bmi"] is None
        assert data["steps_progress"] == 0

    def test_samples_are_summed(self, client: TestClient, auth_headers: dict):
        for value in (3000, 2500):
            client.post(
                "/api/health-data/samples",
                headers=auth_headers,
                json={"metric": "steps", "value": value},
            )
        client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "active_energy", "value": 250},
        )

        data = client.get("/api/health-data/today", headers=auth_headers).json()
        assert data["steps"] == 5500
        assert data["active_calories"] == 250
        assert data["steps_progress"] == pytest.approx(0.55)
        assert data["exercise_progress"] == pytest.approx(0.5)

    def test_sleep_session(self, client: TestClient, auth_headers: dict):
        end = _now() - timedelta(hours=1)
        start = end - timedelta(hours=7, minutes=30)
        response = client.post(
            "/api/health-data/sleep",
            headers=auth_headers,
            json={"start": start.isoformat(), "end": end.isoformat(), "stage": "core"},
        )
        assert response.status_code == 201

        data = client.get("/api/health-data/today", headers=auth_headers).json()
        assert data["sleep_hours"] == pytest.approx(7.5, abs=0.01)

    def test_awake_time_is_not_sleep(self, client: TestClient, auth_headers: dict):
        end = _now() - timedelta(hours=1)
        client.post(
            "/api/health-data/sleep",
            headers=auth_headers,
            json={
                "start": (end - timedelta(hours=1)).isoformat(),
                "end": end.isoformat(),
                "stage": "awake",
            },
        )
        data = client.get("/api/health-data/today", headers=auth_headers).json()
        assert data["sleep_hours"] == 0

    def test_sleep_end_before_start(self, client: TestClient, auth_headers: dict):
        start = _now() - timedelta(hours=2)
        response = client.post(
            "/api/health-data/sleep",
            headers=auth_headers,
            json={"start": start.isoformat(), "end": (start - timedelta(hours=1)).isoformat()},
        )
        assert response.status_code == 422

    def test_sleep_mixed_naive_and_aware_times(self, client: TestClient, auth_headers: dict):
        """A naive start is read as UTC and compared against an aware end."""
        end = (_now() - timedelta(hours=1)).replace(microsecond=0)
        start = (end - timedelta(hours=6)).replace(tzinfo=None)
        response = client.post(
            "/api/health-data/sleep",
            headers=auth_headers,
            json={"start": start.isoformat(), "end": end.isoformat()},
        )
        assert response.status_code == 201

        data = client.get("/api/health-data/today", headers=auth_headers).json()
        assert data["sleep_hours"] == pytest.approx(6.0, abs=0.01)

    def test_sleep_mixed_times_out_of_order(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/health-data/sleep",
            headers=auth_headers,
            json={"start": "2025-03-14T07:00:00", "end": "2025-03-14T06:00:00Z"},
        )
        assert response.status_code == 422

    def test_summary_lists_recorded_metrics(self, client: TestClient, auth_headers: dict):
        client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "heart_rate", "value": 64},
        )
        data = client.get("/api/health-data/summary", headers=auth_headers).json()
        assert data["summary"] == "Heart Rate: 64 bpm"
        assert data["metrics"]["heart_rate_bpm"] == 64


class TestWater:
    def test_add_water_returns_running_total(self, client: TestClient, auth_headers: dict):
        client.post("/api/health-data/water", headers=auth_headers, json={"ounces": 16})
        response = client.post("/api/health-data/water", headers=auth_headers, json={"ounces": 16})
        assert response.status_code == 200
        data = response.json()
        assert data["todays_intake_oz"] == 32
        assert data["goal_oz"] == 64
        assert data["progress"] == pytest.approx(0.5)

    def test_add_water_rejects_zero(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/health-data/water", headers=auth_headers, json={"ounces": 0})
        assert response.status_code == 422


class TestWeeklySteps:
    def test_weekly_steps_for_today(self, client: TestClient, auth_headers: dict):
        client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={"metric": "steps", "value": 1234},
        )
        response = client.get("/api/health-data/weekly-steps", headers=auth_headers)
        assert response.status_code == 200
        days = response.json()["days"]
        assert len(days) == 1
        assert days[0]["steps"] == 1234

    def test_old_samples_are_excluded(self, client: TestClient, auth_headers: dict):
        client.post(
            "/api/health-data/samples",
            headers=auth_headers,
            json={
                "metric": "steps",
                "value": 999,
                "recorded_at": (_now() - timedelta(days=10)).isoformat(),
            },
        )
        days = client.get("/api/health-data/weekly-steps", headers=auth_headers).json()["days"]
        assert days == []
