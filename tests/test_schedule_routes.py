"""Tests for the opening-hours and blocked-dates endpoints."""

from datetime import date
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from courtly.api.auth import get_current_user
from courtly.api.factory import create_app
from courtly.domain.models import BlockedDate, OperatingHours
from courtly.domain.schedule import BlockedDateNotFound, ScheduleValidationError
from courtly.domain.venues import VenueNotFound
from helpers import make_user, make_venue

_OWNER = make_user()
_VENUE = make_venue()


@pytest.fixture
def client():
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: _OWNER
    with patch("courtly.api.ownership._load_venue", return_value=_VENUE):
        yield TestClient(app)


class TestHours:
    def test_get_hours_is_public(self):
        week = [OperatingHours(1, 540, 1320), OperatingHours(0, 0, 0, is_closed=True)]
        with patch("courtly.api.routes.schedule.weekly_schedule", return_value=week):
            response = TestClient(create_app()).get("/venues/venue-1/hours")

        assert response.status_code == 200
        assert response.json()[0] == {
            "day_of_week": 1,
            "open_time": "09:00",
            "close_time": "22:00",
            "is_closed": False,
        }

    def test_put_hours_parses_times(self, client):
        with patch(
            "courtly.api.routes.schedule.save_operating_hours",
            side_effect=lambda venue_id, hours: hours,
        ) as save:
            response = client.put(
                "/venues/venue-1/hours",
                json={
                    "hours": [
                        {"day_of_week": 5, "open_time": "18:00", "close_time": "24:00"},
                        {"day_of_week": 0, "is_closed": True},
                    ]
                },
            )

        assert response.status_code == 200
        hours = save.call_args[0][1]
        assert hours[0] == OperatingHours(day_of_week=5, open_time=1080, close_time=1440)
        assert hours[1].is_closed is True

    def test_put_hours_bad_time_format(self, client):
        response = client.put(
            "/venues/venue-1/hours",
            json={"hours": [{"day_of_week": 1, "open_time": "9.30", "close_time": "22:00"}]},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "invalid_time"

    def test_put_hours_validation_error(self, client):
        with patch(
            "courtly.api.routes.schedule.save_operating_hours",
            side_effect=ScheduleValidationError("duplicate_day_of_week"),
        ):
            response = client.put(
                "/venues/venue-1/hours",
                json={"hours": [{"day_of_week": 1}, {"day_of_week": 1}]},
            )
        assert response.status_code == 422
        assert response.json()["detail"] == "duplicate_day_of_week"

    def test_put_hours_requires_login(self):
        response = TestClient(create_app()).put("/venues/venue-1/hours", json={"hours": []})
        assert response.status_code == 401


class TestBlockedDates:
    def test_list_from_date(self):
        rows = [BlockedDate(id="bd-1", blocked_date=date(2025, 12, 25), reason="Christmas")]
        with patch(
            "courtly.api.routes.schedule.upcoming_blocked_dates", return_value=rows
        ) as upcoming:
            response = TestClient(create_app()).get(
                "/venues/venue-1/blocked-dates", params={"from": "2025-12-01"}
            )

        assert response.json() == [{"id": "bd-1", "date": "2025-12-25", "reason": "Christmas"}]
        upcoming.assert_called_once_with("venue-1", from_date=date(2025, 12, 1))

    def test_block_date(self, client):
        row = BlockedDate(id="bd-1", blocked_date=date(2025, 12, 25), reason="Christmas")
        with patch("courtly.api.routes.schedule.add_blocked_date", return_value=row) as add:
            response = client.post(
                "/venues/venue-1/blocked-dates",
                json={"date": "2025-12-25", "reason": "Christmas"},
            )

        assert response.status_code == 201
        assert response.json()["id"] == "bd-1"
        add.assert_called_once_with("venue-1", date(2025, 12, 25), "Christmas")

    def test_block_date_reason_too_long(self, client):
        with patch(
            "courtly.api.routes.schedule.add_blocked_date",
            side_effect=ScheduleValidationError("reason_too_long"),
        ):
            response = client.post("/venues/venue-1/blocked-dates", json={"date": "2025-12-25"})
        assert response.status_code == 422

    def test_unblock(self, client):
        with patch("courtly.api.routes.schedule.remove_blocked_date") as remove:
            response = client.delete("/venues/venue-1/blocked-dates/bd-1")
        assert response.status_code == 204
        remove.assert_called_once_with("venue-1", "bd-1")

    def test_unblock_missing(self, client):
        with patch(
            "courtly.api.routes.schedule.remove_blocked_date",
            side_effect=BlockedDateNotFound("bd-404"),
        ):
            response = client.delete("/venues/venue-1/blocked-dates/bd-404")
        assert response.status_code == 404


class TestUnknownVenue:
    def test_hours_404(self):
        with patch(
            "courtly.api.routes.schedule.weekly_schedule", side_effect=VenueNotFound("nope")
        ):
            response = TestClient(create_app()).get("/venues/nope/hours")
        assert response.status_code == 404
        assert response.json()["detail"] == "Venue not found"

    def test_blocked_dates_404(self):
        with patch(
            "courtly.api.routes.schedule.upcoming_blocked_dates", side_effect=VenueNotFound("nope")
        ):
            response = TestClient(create_app()).get("/venues/nope/blocked-dates")
        assert response.status_code == 404
