"""
Builds the generation prompt for a trip request.

The prompt is a pure function of the request so identical requests always
send identical prompts.
"""
import textwrap
from datetime import date

from tebitrip.schemas.trip import Budget, TripRequest


def short_label(d: date) -> str:
    """e.g. Apr 3"""
    return f"{d:%b} {d.day}"


def long_label(d: date) -> str:
    """e.g. Friday, April 3, 2026"""
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def budget_bands() -> str:
    return ", ".join(f"{b.value}={b.price_band}" for b in Budget)


_PROMPT_TEMPLATE = textwrap.dedent(
    """\
    Create a trip plan for {destination} ({days} days, {start_short} - {end_short}, {budget} budget, {styles} style).

    Return ONLY valid JSON:
    {{
      "itinerary": [{{
        "day": 1,
        "date": "Monday, April 3",
        "morning": {{"description": "Visit...", "placeName": "Specific Place Name"}},
        "afternoon": {{"description": "Explore...", "placeName": "Specific Place Name"}},
        "evening": {{"description": "Dine at...", "placeName": "Specific Place Name"}},
        "imageUrl": "placeholder",
        "locationName": "Main Area"
      }}],
      "hotels": [{{"name": "Hotel", "description": "Why recommended", "location": "Area", "estimatedPrice": "$XX-YY/night"}}],
      "packingList": {{
        "essentials": ["Passport", "Phone charger", "Medications"],
        "clothing": ["Light jacket", "Comfortable shoes"],
        "extras": ["Camera", "Travel adapter"]
      }},
      "weather": [{{
        "date": "Mon, Apr 3",
        "condition": "Sunny",
        "icon": "sun",
        "tempHigh": 75,
        "tempLow": 65,
        "summary": "Clear skies, perfect for sightseeing."
      }}]
    }}

    Rules:
    - Exactly {days} itinerary entries, one per day, numbered 1 to {days}
    - 3 hotels for {budget} budget ({bands})
    - Packing list organized into essentials (4-5 items), clothing (4-5 items), extras (3-4 items)
    - REAL placeName that exists on Google Maps in {destination}
    - Match {styles} style
    - Images will be fetched separately
    - Format dates: "Weekday, Month Day"
    - Weather: exactly {days} daily weather entries for {destination} from {start_long} to {end_long}. Each entry should have:
      * date (short format: "Mon, Apr 3")
      * condition ("Sunny", "Cloudy", "Rainy", "Partly Cloudy")
      * icon ("sun" for sunny/clear, "cloud" for cloudy/overcast, "rain" for rainy, "partly-cloudy" for partly cloudy)
      * tempHigh (number in Fahrenheit)
      * tempLow (number in Fahrenheit)
      * summary (1-2 sentences about the weather and how it affects activities)

    JSON only, no markdown."""
)


def build_trip_prompt(request: TripRequest) -> str:
    """Return the generation prompt for request."""
    return _PROMPT_TEMPLATE.format(
        destination=request.destination,
        days=request.day_count,
        start_short=short_label(request.start_date),
        end_short=short_label(request.end_date),
        start_long=long_label(request.start_date),
        end_long=long_label(request.end_date),
        budget=request.budget.value,
        bands=budget_bands(),
        styles=", ".join(s.value for s in request.travel_styles),
    )
