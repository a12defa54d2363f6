"""
google_places_client.py
-----------------------
Google Places (legacy web service) + Directions client.

Endpoints:
    GET https://maps.googleapis.com/maps/api/place/textsearch/json
    GET https://maps.googleapis.com/maps/api/place/details/json
    GET https://maps.googleapis.com/maps/api/directions/json

Every call degrades to "no data" ([] / None) on network errors, HTTP errors
and non-OK API statuses. The failure is logged with the endpoint and status.
Photo and Maps links are pure string formatting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote_plus

import requests

from tipi import config

logger = logging.getLogger(__name__)

TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"
MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="

_DETAIL_FIELDS = (
    "place_id,name,formatted_address,geometry,photos,rating,user_ratings_total,"
    "website,international_phone_number,types,opening_hours,url"
)

# Statuses that mean "nothing found" rather than a provider failure
_EMPTY_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})


@dataclass
class PlaceRecord:
    """A place as returned by text search, optionally merged with details."""
    place_id: str
    name: str
    address: str = ""
    rating: Optional[float] = None
    review_count: int = 0
    photo_reference: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    types: list[str] = field(default_factory=list)
    opening_hours: list[str] = field(default_factory=list)
    website: str = ""
    phone: str = ""
    maps_url: str = ""

    @property
    def needs_details(self) -> bool:
        return not (self.photo_reference and self.opening_hours and (self.website or self.phone))

    def merged_with(self, other: "PlaceRecord") -> "PlaceRecord":
        """Return a copy where every non-empty field of ``other`` wins."""
        return PlaceRecord(
            place_id=self.place_id,
            name=other.name or self.name,
            address=other.address or self.address,
            rating=other.rating if other.rating is not None else self.rating,
            review_count=other.review_count or self.review_count,
            photo_reference=other.photo_reference or self.photo_reference,
            lat=other.lat if other.lat is not None else self.lat,
            lng=other.lng if other.lng is not None else self.lng,
            types=other.types or self.types,
            opening_hours=other.opening_hours or self.opening_hours,
            website=other.website or self.website,
            phone=other.phone or self.phone,
            maps_url=other.maps_url or self.maps_url,
        )


@dataclass
class RouteLeg:
    duration_text: str
    distance_text: str
    duration_s: int = 0
    distance_m: int = 0


def _parse_place(item: dict) -> Optional[PlaceRecord]:
    place_id = item.get("place_id")
    if not place_id:
        return None
    location = (item.get("geometry") or {}).get("location") or {}
    photos = item.get("photos") or []
    return PlaceRecord(
        place_id=place_id,
        name=item.get("name") or "",
        address=item.get("formatted_address") or item.get("vicinity") or "",
        rating=item.get("rating"),
        review_count=int(item.get("user_ratings_total") or 0),
        photo_reference=photos[0].get("photo_reference") if photos else None,
        lat=location.get("lat"),
        lng=location.get("lng"),
        types=list(item.get("types") or []),
        opening_hours=list((item.get("opening_hours") or {}).get("weekday_text") or []),
        website=item.get("website") or "",
        phone=item.get("international_phone_number") or "",
        maps_url=item.get("url") or "",
    )


def photo_url(photo_reference: Optional[str], api_key: Optional[str] = None) -> str:
    """Build a Places Photo URL; "" when there is no photo."""
    if not photo_reference:
        return ""
    key = api_key if api_key is not None else config.GOOGLE_PLACES_API_KEY
    return (
        f"{PHOTO_URL}?maxwidth={config.PHOTO_MAX_WIDTH}"
        f"&photo_reference={photo_reference}&key={key}"
    )


def maps_link(name: str, address: str = "") -> str:
    """Google Maps search link for a place name + address."""
    query = f"{name} {address}".strip()
    return MAPS_SEARCH_URL + quote_plus(query)


class GooglePlacesClient:
    """
    Places provider: text search, place details and route summaries.

    A missing API key makes every call return "no data" without any HTTP
    request.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout_s: Optional[int] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.GOOGLE_PLACES_API_KEY
        self._session = session or requests.Session()
        self._timeout_s = timeout_s or config.PROVIDER_TIMEOUT_S

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    # ── public API ────────────────────────────────────────────────────────

    def text_search(self, query: str, max_results: Optional[int] = None) -> list[PlaceRecord]:
        if not self.enabled or not query.strip():
            return []
        data = self._get(TEXT_SEARCH_URL, {"query": query}, label="textsearch")
        if not data:
            return []
        results = []
        for item in (data.get("results") or [])[: max_results or config.PLACES_MAX_RESULTS]:
            place = _parse_place(item)
            if place:
                results.append(place)
        return results

    def details(self, place_id: str) -> Optional[PlaceRecord]:
        if not self.enabled or not place_id:
            return None
        data = self._get(
            DETAILS_URL,
            {"place_id": place_id, "fields": _DETAIL_FIELDS},
            label="details",
        )
        if not data or not data.get("result"):
            return None
        result = dict(data["result"])
        result.setdefault("place_id", place_id)
        return _parse_place(result)

    def route(
        self,
        origin: tuple[float, float],
        destination: tuple[float, float],
        mode: str = "driving",
    ) -> Optional[RouteLeg]:
        if not self.enabled:
            return None
        params = {
            "origin":      f"{origin[0]},{origin[1]}",
            "destination": f"{destination[0]},{destination[1]}",
            "mode":        mode,
        }
        data = self._get(DIRECTIONS_URL, params, label="directions")
        if not data or not data.get("routes"):
            return None
        legs = data["routes"][0].get("legs") or []
        if not legs:
            return None
        leg = legs[0]
        duration = leg.get("duration") or {}
        distance = leg.get("distance") or {}
        if not duration.get("text") or not distance.get("text"):
            return None
        return RouteLeg(
            duration_text=duration["text"],
            distance_text=distance["text"],
            duration_s=int(duration.get("value") or 0),
            distance_m=int(distance.get("value") or 0),
        )

    # ── internals ─────────────────────────────────────────────────────────

    def _get(self, url: str, params: dict, label: str) -> Optional[dict]:
        try:
            res = self._session.get(
                url, params={**params, "key": self.api_key}, timeout=self._timeout_s
            )
            res.raise_for_status()
            data = res.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Google %s request failed: %s", label, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Google %s returned a non-object body: %s", label, type(data).__name__)
            return None
        status = data.get("status", "OK")
        if status == "OK":
            return data
        if status in _EMPTY_STATUSES:
            logger.info("Google %s returned %s for %s", label, status, _redact(params))
        else:
            logger.warning(
                "Google %s status=%s (%s) for %s",
                label, status, data.get("error_message", ""), _redact(params),
            )
        return None


def _redact(params: dict) -> dict:
    return {k: v for k, v in params.items() if k != "key"}
