"""
Unit tests for the generation prompt
"""
from datetime import date

from tebitrip.schemas.trip import TripRequest
from tebitrip.services.prompt_builder import build_trip_prompt, long_label, short_label


def test_paris_scenario_requests_three_days(paris_request):
    assert paris_request.day_count == 3

    prompt = build_trip_prompt(paris_request)

    assert prompt.startswith("Create a trip plan for Paris, France (3 days, Apr 3 - Apr 5, Mid budget, Relax style).")
    assert "Exactly 3 itinerary entries" in prompt
    assert "exactly 3 daily weather entries" in prompt
    assert "from Friday, April 3, 2026 to Sunday, April 5, 2026" in prompt


def test_budget_bands_are_listed(paris_request):
    prompt = build_trip_prompt(paris_request)
    assert "3 hotels for Mid budget (Low=$50-100, Mid=$100-200, High=$200-400, Luxe=$400+)" in prompt


def test_styles_joined_in_submitted_order():
    request = TripRequest(
        destination="Kyoto, Japan",
        start_date=date(2026, 11, 2),
        end_date=date(2026, 11, 2),
        budget="Luxe",
        travel_styles=["Food Trip", "Aesthetic"],
    )

    prompt = build_trip_prompt(request)

    assert "(1 days, Nov 2 - Nov 2, Luxe budget, Food Trip, Aesthetic style)" in prompt
    assert "Match Food Trip, Aesthetic style" in prompt


def test_prompt_is_deterministic(paris_request):
    same = TripRequest(**paris_request.model_dump())
    assert build_trip_prompt(paris_request) == build_trip_prompt(same)


def test_prompt_contains_json_template(paris_request):
    prompt = build_trip_prompt(paris_request)
    assert '"packingList": {' in prompt
    assert '"tempHigh": 75' in prompt
    assert prompt.rstrip().endswith("JSON only, no markdown.")


def test_date_labels():
    assert short_label(date(2026, 4, 3)) == "Apr 3"
    assert long_label(date(2026, 4, 3)) == "Friday, April 3, 2026"
