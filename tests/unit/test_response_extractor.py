"""
Unit tests for extracting trips from generated text
"""
import json
import logging

import pytest

from tebitrip.core.exceptions import ErrorCode, GenerationParseError
from tebitrip.schemas.trip import TripContent, WeatherIcon
from tebitrip.services.response_extractor import (
    extract_json_object,
    extract_trip_content,
    parse_trip_content,
    strip_code_fence,
)


class TestExtractJsonObject:

    def test_fenced_prose_and_raw_forms_agree(self, trip_payload):
        body = json.dumps(trip_payload, indent=2)
        fenced = f"```json\n{body}\n```"
        prose = f"Here is your trip plan! {body} Have a great time."
        raw = body

        assert extract_json_object(fenced) == trip_payload
        assert extract_json_object(prose) == trip_payload
        assert extract_json_object(raw) == trip_payload

    def test_fence_without_language_tag(self):
        assert extract_json_object('```\n{"a": 1}\n```') == {"a": 1}

    def test_surrounding_whitespace(self):
        assert extract_json_object('\n\n   {"a": {"b": [1, 2]}}  \n') == {"a": {"b": [1, 2]}}

    def test_strip_code_fence_keeps_plain_text(self):
        assert strip_code_fence("  plain  ") == "plain"
        assert strip_code_fence("```javascript\n{}\n```") == "{}"

    @pytest.mark.parametrize("text", ["", "no braces here", "} backwards {", "```json\n```"])
    def test_no_object_found(self, text):
        with pytest.raises(GenerationParseError) as exc_info:
            extract_json_object(text)
        assert exc_info.value.error_code == ErrorCode.GENERATION_PARSE_FAILED
        assert exc_info.value.raw_text == text

    def test_malformed_json_keeps_raw_text(self):
        text = 'Sure! {"itinerary": [1, 2,, 3]}'
        with pytest.raises(GenerationParseError) as exc_info:
            extract_json_object(text)
        assert exc_info.value.raw_text == text
        assert "line" in exc_info.value.details


class TestParseTripContent:

    def test_valid_payload(self, trip_payload):
        content = parse_trip_content(trip_payload, expected_days=3)

        assert isinstance(content, TripContent)
        assert len(content.itinerary) == 3
        assert content.itinerary[0].morning.place_name == "Morning Spot 1"
        assert content.weather[0].icon == WeatherIcon.SUN
        assert content.packing_list.essentials == ["Passport", "Phone charger"]

    @pytest.mark.parametrize("key", ["itinerary", "hotels", "packingList", "weather"])
    def test_missing_required_key_fails(self, trip_payload, key):
        del trip_payload[key]
        with pytest.raises(GenerationParseError) as exc_info:
            parse_trip_content(trip_payload, expected_days=3)
        assert exc_info.value.details["missing_keys"] == [key]

    def test_short_itinerary_is_accepted(self, make_trip_payload, caplog):
        payload = make_trip_payload(days=2, hotels=2, weather_days=1)

        with caplog.at_level(logging.WARNING):
            content = parse_trip_content(payload, expected_days=3)

        assert len(content.itinerary) == 2
        assert len(content.weather) == 1
        assert "expected 3" in caplog.text

    def test_malformed_entry_fails_whole_result(self, trip_payload):
        trip_payload["weather"][0]["icon"] = "tornado"
        with pytest.raises(GenerationParseError) as exc_info:
            parse_trip_content(trip_payload)
        assert exc_info.value.details["errors"]

    def test_extra_keys_are_ignored(self, trip_payload):
        trip_payload["notes"] = "Bring an umbrella"
        trip_payload["itinerary"][0]["morning"]["rating"] = 5
        content = parse_trip_content(trip_payload)
        assert len(content.itinerary) == 3


def test_extract_trip_content_end_to_end(trip_payload):
    text = "```json\n" + json.dumps(trip_payload) + "\n```"
    content = extract_trip_content(text, expected_days=3)
    assert content.hotels[2].name == "Hotel 3"
    assert content.to_wire()["packingList"]["extras"] == ["Camera"]
