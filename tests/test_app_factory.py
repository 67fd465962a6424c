"""Tests for the app factory: health, correlation IDs and storage failures."""

from unittest.mock import patch

import psycopg2
from fastapi.testclient import TestClient

from courtly.api.auth import get_current_user
from courtly.api.factory import create_app
from courtly.infra.db import StorageError
from helpers import make_user


def _client() -> TestClient:
    return TestClient(create_app())


class TestHealth:
    def test_health_available(self):
        response = _client().get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_docs_not_mounted(self):
        assert _client().get("/docs").status_code == 404


class TestCorrelationId:
    def test_generated_when_missing(self):
        response = _client().get("/health")
        assert response.headers["X-Correlation-ID"]

    def test_inbound_value_echoed(self):
        response = _client().get("/health", headers={"X-Correlation-ID": "req-abc"})
        assert response.headers["X-Correlation-ID"] == "req-abc"

    def test_unsafe_inbound_value_replaced(self):
        response = _client().get("/health", headers={"X-Correlation-ID": "x" * 500})
        assert response.headers["X-Correlation-ID"] != "x" * 500


class TestStorageFailure:
    def test_storage_error_maps_to_503(self):
        err = StorageError("get_venue_slots", psycopg2.OperationalError("down"))
        with patch("courtly.api.routes.slots.get_venue_slots", side_effect=err):
            response = _client().get("/venues/venue-1/slots", params={"date": "2025-03-10"})

        assert response.status_code == 503
        assert response.json() == {"detail": "storage_unavailable"}

    def test_driver_error_on_public_read_maps_to_503(self):
        with patch(
            "courtly.api.routes.schedule.weekly_schedule",
            side_effect=psycopg2.OperationalError("connection refused"),
        ):
            response = _client().get("/venues/venue-1/hours")

        assert response.status_code == 503
        assert response.json() == {"detail": "storage_unavailable"}

    def test_driver_error_in_owner_guard_maps_to_503(self):
        app = create_app()
        app.dependency_overrides[get_current_user] = lambda: make_user("user-1", "sub-1")
        with patch(
            "courtly.api.ownership._load_venue",
            side_effect=psycopg2.OperationalError("server closed the connection"),
        ):
            response = TestClient(app).post("/venues/venue-1/bookings/bk-1/cancel")

        assert response.status_code == 503
        assert response.json() == {"detail": "storage_unavailable"}

    def test_driver_error_on_quote_maps_to_503(self):
        with patch(
            "courtly.api.routes.quotes.quote_booking",
            side_effect=psycopg2.InterfaceError("connection already closed"),
        ):
            response = _client().post("/venues/venue-1/quote", json={"duration_hours": "1"})

        assert response.status_code == 503
