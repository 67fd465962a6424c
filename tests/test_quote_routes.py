"""Tests for POST /venues/{venue_id}/quote."""

from decimal import Decimal
from unittest.mock import patch

from fastapi.testclient import TestClient

from courtly.api.factory import create_app
from courtly.domain.pricing import EquipmentSelection, PriceBreakdown, PriceValidationError
from courtly.domain.venues import VenueNotFound

URL = "/venues/venue-1/quote"


def _client() -> TestClient:
    return TestClient(create_app())


class TestQuote:
    def test_breakdown_returned(self):
        breakdown = PriceBreakdown(
            customer_rate=10500, venue_subtotal=15750, equipment_subtotal=4000, total=19750
        )
        with patch("courtly.api.routes.quotes.quote_booking", return_value=breakdown) as quote:
            response = _client().post(
                URL,
                json={"duration_hours": "1.5", "equipment": [{"equipment_id": "racket", "quantity": 2}]},
            )

        assert response.status_code == 200
        assert response.json()["total"] == 19750
        kwargs = quote.call_args.kwargs
        assert kwargs["duration_hours"] == Decimal("1.5")
        assert kwargs["equipment_selections"] == [EquipmentSelection("racket", 2)]

    def test_zero_quantity_rejected_by_schema(self):
        response = _client().post(
            URL, json={"duration_hours": 1, "equipment": [{"equipment_id": "racket", "quantity": 0}]}
        )
        assert response.status_code == 422

    def test_unknown_equipment(self):
        with patch(
            "courtly.api.routes.quotes.quote_booking",
            side_effect=PriceValidationError("unknown_equipment"),
        ):
            response = _client().post(URL, json={"duration_hours": 1})
        assert response.status_code == 422
        assert response.json()["detail"] == "unknown_equipment"

    def test_unknown_venue(self):
        with patch("courtly.api.routes.quotes.quote_booking", side_effect=VenueNotFound("venue-1")):
            response = _client().post(URL, json={"duration_hours": 1})
        assert response.status_code == 404
