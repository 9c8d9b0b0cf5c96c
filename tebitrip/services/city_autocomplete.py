"""
Destination suggestions for the request form.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

MAX_SUGGESTIONS = 10

POPULAR_CITIES = (
    "Amsterdam, Netherlands",
    "Athens, Greece",
    "Auckland, New Zealand",
    "Bali, Indonesia",
    "Bangkok, Thailand",
    "Barcelona, Spain",
    "Berlin, Germany",
    "Boston, USA",
    "Budapest, Hungary",
    "Buenos Aires, Argentina",
    "Cairo, Egypt",
    "Cape Town, South Africa",
    "Chicago, USA",
    "Copenhagen, Denmark",
    "Dubai, United Arab Emirates",
    "Dublin, Ireland",
    "Edinburgh, United Kingdom",
    "Florence, Italy",
    "Hanoi, Vietnam",
    "Havana, Cuba",
    "Ho Chi Minh City, Vietnam",
    "Hong Kong, China",
    "Honolulu, USA",
    "Istanbul, Turkey",
    "Kyoto, Japan",
    "Las Vegas, USA",
    "Lisbon, Portugal",
    "London, United Kingdom",
    "Los Angeles, USA",
    "Madrid, Spain",
    "Marrakech, Morocco",
    "Melbourne, Australia",
    "Mexico City, Mexico",
    "Miami, USA",
    "Milan, Italy",
    "Montreal, Canada",
    "Munich, Germany",
    "New Orleans, USA",
    "New York City, USA",
    "Osaka, Japan",
    "Paris, France",
    "Prague, Czech Republic",
    "Reykjavik, Iceland",
    "Rio de Janeiro, Brazil",
    "Rome, Italy",
    "San Francisco, USA",
    "Santorini, Greece",
    "Seoul, South Korea",
    "Singapore, Singapore",
    "Stockholm, Sweden",
    "Sydney, Australia",
    "Taipei, Taiwan",
    "Tokyo, Japan",
    "Toronto, Canada",
    "Vancouver, Canada",
    "Venice, Italy",
    "Vienna, Austria",
    "Zurich, Switzerland",
)


@dataclass(frozen=True)
class CitySuggestion:
    id: str
    city_name: str
    full_text: str


def suggest_cities(
    query: str,
    cities: Optional[Sequence[str]] = None,
    limit: int = MAX_SUGGESTIONS,
) -> List[CitySuggestion]:
    """
    Case-insensitive substring match over the known cities.

    An empty or blank query yields no suggestions.
    """
    needle = query.strip().lower()
    if not needle:
        return []

    matches = [c for c in (cities or POPULAR_CITIES) if needle in c.lower()][:limit]
    suggestions = []
    for index, city in enumerate(matches):
        city_name = city.split(", ")[0]
        suggestions.append(CitySuggestion(id=f"{city_name}-{index}", city_name=city_name, full_text=city))
    return suggestions
