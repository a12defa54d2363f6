"""
schemas/itinerary.py
--------------------
Dataclass definitions for the skeleton and itinerary structures, plus the
camelCase wire format consumed by the front-end.

Skeleton records come from the language model (categories only). The time-slot
engine turns them into ResolvedActivity records, which enrichment then fills in
place with real place data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Any, Optional


class ActivityKind(str, Enum):
    """Semantic role of a slot, independent of its category text."""
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    attraction = "attraction"
    night = "night activity"
    hotel = "hotel"

    @property
    def is_meal(self) -> bool:
        return self in (ActivityKind.breakfast, ActivityKind.lunch, ActivityKind.dinner)

    @property
    def display_type(self) -> str:
        if self.is_meal:
            return "restaurant"
        if self is ActivityKind.hotel:
            return "hotel"
        return "attraction"

    @classmethod
    def parse(cls, value: Any) -> "ActivityKind":
        """Total mapping from free model text to a kind; unknown -> attraction."""
        if isinstance(value, ActivityKind):
            return value
        text = str(value or "").strip().lower().replace("_", " ").replace("-", " ")
        for meal in (cls.breakfast, cls.lunch, cls.dinner):
            if meal.value in text:
                return meal
        if "brunch" in text:
            return cls.breakfast
        if text.startswith("night") or "nightlife" in text or text.startswith("evening"):
            return cls.night
        if text in ("hotel", "accommodation", "lodging"):
            return cls.hotel
        return cls.attraction


# ── Skeleton (model output, before enrichment) ─────────────────────────────────

@dataclass
class ActivitySkeleton:
    kind: ActivityKind
    category: str
    notes: str = ""


@dataclass
class DaySkeleton:
    number: int
    area: Optional[str] = None
    activities: list[ActivitySkeleton] = field(default_factory=list)


@dataclass
class Skeleton:
    """
    Repaired model output.

    raw_text is only set when the response could not be parsed at all; notices
    carries repair remarks that must reach the user (e.g. surplus days).
    """
    days: list[DaySkeleton] = field(default_factory=list)
    summary: Optional[str] = None
    raw_text: Optional[str] = None
    notices: list[str] = field(default_factory=list)


# ── Enriched itinerary ─────────────────────────────────────────────────────────

@dataclass
class ResolvedActivity:
    """
    A scheduled slot. Starts with name == category and no place data; the place
    resolver and geo sequencer fill the optional fields in place.
    """
    name: str
    kind: ActivityKind
    category: str = ""
    notes: str = ""
    time: Optional[time] = None
    address: str = ""
    rating: Optional[float] = None
    review_count: Optional[int] = None
    photo_url: str = ""
    opening_hours: list[str] = field(default_factory=list)
    maps_url: str = ""
    website: str = ""
    phone: str = ""
    description: str = ""
    place_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    travel: Optional[str] = None        # "walking ≈ 12 mins (0.9 km) from previous stop"

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def display_type(self) -> str:
        return self.kind.display_type


@dataclass
class DayPlan:
    """One day's scheduled activities."""
    number: int
    area: Optional[str] = None
    activities: list[ResolvedActivity] = field(default_factory=list)


@dataclass
class Itinerary:
    """Top-level artefact stored per user and returned to the front-end."""
    destination: str = ""
    days: list[DayPlan] = field(default_factory=list)
    summary: Optional[str] = None
    hotel: Optional[ResolvedActivity] = None
    notices: list[str] = field(default_factory=list)
    raw_response: Optional[str] = None
    generated_at: str = ""                 # ISO-8601 timestamp

    def place_ids(self) -> list[str]:
        ids = [a.place_id for d in self.days for a in d.activities if a.place_id]
        if self.hotel and self.hotel.place_id:
            ids.append(self.hotel.place_id)
        return ids


# ── Wire format ────────────────────────────────────────────────────────────────

def _ser_time(t: Optional[time]) -> Optional[str]:
    return t.strftime("%H:%M") if t else None


def _display_time(t: Optional[time]) -> Optional[str]:
    if not t:
        return None
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


def activity_to_dict(a: ResolvedActivity) -> dict:
    return {
        "activity":           a.name,
        "activityType":       a.kind.value,
        "placeCategory":      a.category,
        "notes":              a.notes,
        "type":               a.display_type,
        "time":               _ser_time(a.time),
        "displayTime":        _display_time(a.time),
        "location":           a.address,
        "rating":             a.rating,
        "reviewCount":        a.review_count,
        "imageUrl":           a.photo_url,
        "openingHours":       list(a.opening_hours),
        "googleMapsLink":     a.maps_url,
        "website":            a.website,
        "phone":              a.phone,
        "description":        a.description,
        "placeId":            a.place_id,
        "lat":                a.lat,
        "lng":                a.lng,
        "travelFromPrevious": a.travel,
    }


def activity_from_dict(data: dict) -> ResolvedActivity:
    return ResolvedActivity(
        name=data.get("activity") or data.get("placeCategory") or "Activity",
        kind=ActivityKind.parse(data.get("activityType")),
        category=data.get("placeCategory") or "",
        notes=data.get("notes") or "",
        time=_parse_time(data.get("time")),
        address=data.get("location") or "",
        rating=data.get("rating"),
        review_count=data.get("reviewCount"),
        photo_url=data.get("imageUrl") or "",
        opening_hours=list(data.get("openingHours") or []),
        maps_url=data.get("googleMapsLink") or "",
        website=data.get("website") or "",
        phone=data.get("phone") or "",
        description=data.get("description") or "",
        place_id=data.get("placeId"),
        lat=data.get("lat"),
        lng=data.get("lng"),
        travel=data.get("travelFromPrevious"),
    )


def itinerary_to_dict(it: Itinerary) -> dict:
    return {
        "destination": it.destination,
        "summary":     it.summary,
        "generatedAt": it.generated_at,
        "notices":     list(it.notices),
        "rawResponse": it.raw_response,
        "hotel":       activity_to_dict(it.hotel) if it.hotel else None,
        "days": [
            {
                "day":        d.number,
                "area":       d.area,
                "activities": [activity_to_dict(a) for a in d.activities],
            }
            for d in it.days
        ],
    }


def itinerary_from_dict(data: dict) -> Itinerary:
    hotel = data.get("hotel")
    return Itinerary(
        destination=data.get("destination") or "",
        summary=data.get("summary"),
        generated_at=data.get("generatedAt") or "",
        notices=list(data.get("notices") or []),
        raw_response=data.get("rawResponse"),
        hotel=activity_from_dict(hotel) if hotel else None,
        days=[
            DayPlan(
                number=int(d.get("day") or i + 1),
                area=d.get("area"),
                activities=[activity_from_dict(a) for a in d.get("activities") or []],
            )
            for i, d in enumerate(data.get("days") or [])
        ],
    )
