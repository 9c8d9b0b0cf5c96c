"""
Turns free-text generator output into a validated TripContent.

The generator is not under our control: it may wrap the JSON in markdown
fences or surround it with prose. Anything that cannot be turned into a
trip raises GenerationParseError; nothing untyped leaves this module.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from tebitrip.core.exceptions import GenerationParseError
from tebitrip.schemas.trip import TripContent

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("itinerary", "hotels", "packingList", "weather")
EXPECTED_HOTELS = 3

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the JSON object embedded in generated text.

    Args:
        text: Raw generator output

    Returns:
        The parsed object

    Raises:
        GenerationParseError: If no JSON object can be found or parsed
    """
    cleaned = strip_code_fence(text or "")
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise GenerationParseError("No JSON object found in generated text", raw_text=text or "")

    try:
        payload = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise GenerationParseError(
            f"Generated JSON is malformed: {e.msg}",
            raw_text=text,
            details={"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(payload, dict):
        raise GenerationParseError("Generated JSON is not an object", raw_text=text)
    return payload


def parse_trip_content(
    payload: Dict[str, Any],
    expected_days: Optional[int] = None,
    raw_text: str = "",
) -> TripContent:
    """
    Validate a parsed payload against the trip schema.

    Missing top-level keys or malformed entries fail the whole result.
    Length mismatches are tolerated and only logged: a short itinerary is
    still worth showing.

    Raises:
        GenerationParseError: If required keys are missing or entries are malformed
    """
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        raise GenerationParseError(
            f"Generated trip is missing required keys: {', '.join(missing)}",
            raw_text=raw_text,
            details={"missing_keys": missing},
        )

    try:
        content = TripContent.model_validate(payload)
    except PydanticValidationError as e:
        raise GenerationParseError(
            "Generated trip does not match the expected shape",
            raw_text=raw_text,
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e

    if expected_days is not None:
        if len(content.itinerary) != expected_days:
            logger.warning(
                f"Itinerary has {len(content.itinerary)} days, expected {expected_days}; accepting as returned"
            )
        if len(content.weather) != expected_days:
            logger.warning(
                f"Weather has {len(content.weather)} entries, expected {expected_days}; accepting as returned"
            )
    if len(content.hotels) != EXPECTED_HOTELS:
        logger.warning(f"Generator returned {len(content.hotels)} hotels instead of {EXPECTED_HOTELS}")

    return content


def extract_trip_content(text: str, expected_days: Optional[int] = None) -> TripContent:
    """Extract and validate in one step."""
    payload = extract_json_object(text)
    return parse_trip_content(payload, expected_days=expected_days, raw_text=text)
