"""
Shared fixtures for the trip planner test suite.
"""
import json
from datetime import date

import httpx
import pytest

from tebitrip.config.settings import PhotoSettings, RateLimitSettings
from tebitrip.core.storage import InMemoryKeyValueStore
from tebitrip.schemas.trip import TripRequest

TODAY = date(2026, 3, 1)


def _slot(kind: str, day: int) -> dict:
    return {"description": f"{kind} plans for day {day}", "placeName": f"{kind} Spot {day}"}


def build_trip_payload(days: int = 3, hotels: int = 3, weather_days: int = None) -> dict:
    weather_days = days if weather_days is None else weather_days
    return {
        "itinerary": [
            {
                "day": n,
                "date": f"Day {n}",
                "morning": _slot("Morning", n),
                "afternoon": _slot("Afternoon", n),
                "evening": _slot("Evening", n),
                "imageUrl": "placeholder",
                "locationName": f"District {n}",
            }
            for n in range(1, days + 1)
        ],
        "hotels": [
            {
                "name": f"Hotel {n}",
                "description": "Central and quiet",
                "location": "Old Town",
                "estimatedPrice": "$100-200/night",
            }
            for n in range(1, hotels + 1)
        ],
        "packingList": {
            "essentials": ["Passport", "Phone charger"],
            "clothing": ["Light jacket"],
            "extras": ["Camera"],
        },
        "weather": [
            {
                "date": f"Day {n}",
                "condition": "Sunny",
                "icon": "sun",
                "tempHigh": 68,
                "tempLow": 52,
                "summary": "Clear skies.",
            }
            for n in range(1, weather_days + 1)
        ],
    }


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_trip_payload():
    return build_trip_payload


@pytest.fixture
def trip_payload() -> dict:
    return build_trip_payload()


@pytest.fixture
def trip_text(trip_payload) -> str:
    return json.dumps(trip_payload)


@pytest.fixture
def paris_request() -> TripRequest:
    return TripRequest(
        destination="Paris, France",
        start_date=date(2026, 4, 3),
        end_date=date(2026, 4, 5),
        budget="Mid",
        travel_styles=["Relax"],
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings(max_generations_per_day=10, storage_key="@rate_limit")


@pytest.fixture
def photo_settings() -> PhotoSettings:
    return PhotoSettings(
        endpoint_url="https://photos.test/",
        timeout_seconds=0.5,
        max_retries=2,
        backoff_base_seconds=0,
        backoff_max_seconds=0,
    )


@pytest.fixture
def chat_transport(trip_text):
    """Generation endpoint that answers every prompt with the same trip and counts calls."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        return httpx.Response(200, json={"text": trip_text})

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport
