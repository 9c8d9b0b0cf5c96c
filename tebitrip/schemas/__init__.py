from .trip import (
    Budget,
    TravelStyle,
    WeatherIcon,
    TripRequest,
    TimeSlot,
    DayPlan,
    HotelRecommendation,
    DailyWeather,
    PackingList,
    TripContent,
    RateLimitState,
    SavedTrip,
    TripRouteParams,
)

__all__ = [
    "Budget",
    "TravelStyle",
    "WeatherIcon",
    "TripRequest",
    "TimeSlot",
    "DayPlan",
    "HotelRecommendation",
    "DailyWeather",
    "PackingList",
    "TripContent",
    "RateLimitState",
    "SavedTrip",
    "TripRouteParams",
]
