"""
Trip schemas: requests, generated content, saved trips and route parameters.

Wire JSON uses camelCase keys (the generator and the persisted state both
speak camelCase); Python attributes are snake_case.
"""
import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Budget(str, Enum):
    """Budget tiers with their nightly hotel price bands"""
    LOW = "Low"
    MID = "Mid"
    HIGH = "High"
    LUXE = "Luxe"

    @property
    def price_band(self) -> str:
        return _PRICE_BANDS[self]

    @property
    def symbol(self) -> str:
        return "$" * (list(Budget).index(self) + 1)


_PRICE_BANDS = {
    Budget.LOW: "$50-100",
    Budget.MID: "$100-200",
    Budget.HIGH: "$200-400",
    Budget.LUXE: "$400+",
}


class TravelStyle(str, Enum):
    RELAX = "Relax"
    ADVENTURE = "Adventure"
    FOOD_TRIP = "Food Trip"
    AESTHETIC = "Aesthetic"
    NIGHTLIFE = "Nightlife"
    NATURE = "Nature"


MAX_TRAVEL_STYLES = 2


class WireModel(BaseModel):
    """Base for models exchanged as camelCase JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TripRequest(WireModel):
    """An immutable trip request; its fields are its identity"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    destination: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    budget: Budget
    travel_styles: Tuple[TravelStyle, ...] = Field(..., min_length=1, max_length=MAX_TRAVEL_STYLES)

    @field_validator("destination", mode="before")
    @classmethod
    def strip_destination(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("travel_styles", mode="before")
    @classmethod
    def split_travel_styles(cls, v):
        """Accept the comma-joined form used between screens"""
        if isinstance(v, str):
            return tuple(s.strip() for s in v.split(",") if s.strip())
        return v

    @field_validator("travel_styles")
    @classmethod
    def distinct_travel_styles(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("travel styles must not repeat")
        return v

    @property
    def day_count(self) -> int:
        """Inclusive number of calendar days in the trip"""
        return (self.end_date - self.start_date).days + 1

    @property
    def fingerprint(self) -> str:
        """
        Deterministic cache key for this request.

        Style order is kept as submitted, so ("Relax", "Nature") and
        ("Nature", "Relax") are different requests.
        """
        parts = [
            self.destination,
            self.start_date.isoformat(),
            self.end_date.isoformat(),
            self.budget.value,
            [s.value for s in self.travel_styles],
        ]
        digest = hashlib.sha256(json.dumps(parts, ensure_ascii=False).encode("utf-8")).hexdigest()
        return f"trip:{digest}"


class TimeSlot(WireModel):
    description: str
    place_name: str
    photo_url: Optional[str] = None


class DayPlan(WireModel):
    day: int = Field(..., ge=1)
    date: str
    morning: TimeSlot
    afternoon: TimeSlot
    evening: TimeSlot
    location_name: str
    image_url: Optional[str] = None


class HotelRecommendation(WireModel):
    name: str
    description: str
    location: str
    estimated_price: str


class WeatherIcon(str, Enum):
    SUN = "sun"
    CLOUD = "cloud"
    RAIN = "rain"
    PARTLY_CLOUDY = "partly-cloudy"


class DailyWeather(WireModel):
    date: str
    condition: str
    icon: WeatherIcon
    temp_high: int
    temp_low: int
    summary: str


class PackingList(WireModel):
    essentials: List[str] = Field(default_factory=list)
    clothing: List[str] = Field(default_factory=list)
    extras: List[str] = Field(default_factory=list)


class TripContent(WireModel):
    """Validated generator output for one request"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    itinerary: List[DayPlan]
    hotels: List[HotelRecommendation]
    packing_list: PackingList
    weather: List[DailyWeather]

    def place_names(self) -> List[str]:
        """Every place referenced by the itinerary, in display order"""
        names = []
        for day in self.itinerary:
            for slot in (day.morning, day.afternoon, day.evening):
                if slot.place_name:
                    names.append(slot.place_name)
        return names


class RateLimitState(BaseModel):
    count: int = Field(..., ge=0)
    date: str


class SavedTrip(WireModel):
    id: str
    destination: str
    start_date: date
    end_date: date
    budget: Budget
    travel_styles: Tuple[TravelStyle, ...]
    trip_content: TripContent
    saved_at: datetime

    def to_request(self) -> TripRequest:
        return TripRequest(
            destination=self.destination,
            start_date=self.start_date,
            end_date=self.end_date,
            budget=self.budget,
            travel_styles=self.travel_styles,
        )


class TripRouteParams(WireModel):
    """
    Parameters passed from the request form to the results view.

    trip_id set means "show this saved trip"; unset means "generate".
    """
    destination: str
    start_date: str
    end_date: str
    budget: str
    travel_styles: str
    trip_id: Optional[str] = None

    @classmethod
    def from_request(cls, request: TripRequest, trip_id: Optional[str] = None) -> "TripRouteParams":
        return cls(
            destination=request.destination,
            start_date=request.start_date.isoformat(),
            end_date=request.end_date.isoformat(),
            budget=request.budget.value,
            travel_styles=",".join(s.value for s in request.travel_styles),
            trip_id=trip_id,
        )

    @classmethod
    def from_saved_trip(cls, trip: SavedTrip) -> "TripRouteParams":
        return cls.from_request(trip.to_request(), trip_id=trip.id)

    def to_request(self) -> TripRequest:
        """
        Rebuild the request. ISO datetimes are truncated to their date part.

        Raises:
            pydantic.ValidationError: If any field is malformed
        """
        return TripRequest(
            destination=self.destination,
            start_date=self.start_date[:10],
            end_date=self.end_date[:10],
            budget=self.budget,
            travel_styles=self.travel_styles,
        )
