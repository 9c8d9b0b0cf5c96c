# Business logic services

from .date_validation import validate_trip_dates, MAX_TRIP_DAYS
from .rate_limiter import RateLimiter
from .response_extractor import extract_json_object, parse_trip_content, extract_trip_content
from .prompt_builder import build_trip_prompt
from .generation_client import GenerationClient
from .trip_generation_cache import TripGenerationCache
from .place_photo_resolver import PlacePhotoResolver, PhotoCacheEntry
from .saved_trip_store import SavedTripStore
from .city_autocomplete import CitySuggestion, suggest_cities
from .trip_planner import TripPlanner, TripView, SubmissionResult, parse_trip_request

__all__ = [
    "validate_trip_dates",
    "MAX_TRIP_DAYS",
    "RateLimiter",
    "extract_json_object",
    "parse_trip_content",
    "extract_trip_content",
    "build_trip_prompt",
    "GenerationClient",
    "TripGenerationCache",
    "PlacePhotoResolver",
    "PhotoCacheEntry",
    "SavedTripStore",
    "CitySuggestion",
    "suggest_cities",
    "TripPlanner",
    "TripView",
    "SubmissionResult",
    "parse_trip_request",
]
