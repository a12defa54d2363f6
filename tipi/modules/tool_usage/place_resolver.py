"""
modules/tool_usage/place_resolver.py
-------------------------------------
Turns a skeleton slot ("vegan breakfast café", "art museum") into a real
place from Google Places.

Resolution for one activity:
  1. Build a text query from kind / category + the profile.
  2. Text search; drop candidates already used in this generation.
  3. Rank by (rating desc, review count desc) and take the top candidate.
  4. Mark it used *before* any further I/O.
  5. Fetch details when the search result lacks photos / hours / contact.

Absence is expected: every "nothing usable" path returns None.
"""

from __future__ import annotations

import logging
import time as _time_mod
from typing import Optional

from tipi import config
from tipi.google_places_client import GooglePlacesClient, PlaceRecord, maps_link, photo_url
from tipi.schemas.itinerary import ActivityKind, ResolvedActivity
from tipi.schemas.profile import TravelProfile

logger = logging.getLogger(__name__)


def build_query(kind: ActivityKind, category: str, profile: TravelProfile) -> str:
    """Search text for one slot; "" when there is nothing to search for."""
    destination = profile.destination.strip()
    if not destination:
        return ""
    if kind.is_meal:
        parts = [profile.dietary_tag, kind.value, "restaurants"]
    elif kind is ActivityKind.hotel:
        parts = [profile.accommodation, profile.budget, "hotel"]
    else:
        if not category.strip():
            return ""
        parts = [category]
    head = " ".join(p.strip() for p in parts if p and p.strip())
    return f"{head} in {destination}"


def rank_candidates(candidates: list[PlaceRecord]) -> list[PlaceRecord]:
    """Best first: rating, then review count as the tie-break."""
    return sorted(
        candidates,
        key=lambda p: (p.rating or 0.0, p.review_count or 0),
        reverse=True,
    )


def describe(place: PlaceRecord) -> str:
    name = place.name or "This location"
    kind = place.types[0].replace("_", " ") if place.types else "place"
    rating = f" ({place.rating}★)" if place.rating else ""
    return f"{name} is a popular {kind} often praised by visitors{rating}."


def apply_place(activity: ResolvedActivity, place: PlaceRecord) -> ResolvedActivity:
    """Copy resolved place data onto ``activity`` in place."""
    activity.name = place.name or activity.category or activity.name
    activity.place_id = place.place_id
    activity.address = place.address
    activity.rating = place.rating
    activity.review_count = place.review_count or None
    activity.photo_url = photo_url(place.photo_reference)
    activity.opening_hours = list(place.opening_hours)
    activity.website = place.website
    activity.phone = place.phone
    activity.lat = place.lat
    activity.lng = place.lng
    activity.maps_url = maps_link(activity.name, place.address)
    activity.description = describe(place)
    return activity


class PlaceResolver:
    """
    Resolves slots against a places provider, sharing a caller-owned
    ``used`` set so a venue is assigned at most once per generation.
    """

    def __init__(
        self,
        places: GooglePlacesClient,
        delay_s: Optional[float] = None,
        fetch_details: bool = True,
    ) -> None:
        self._places = places
        self._delay_s = config.PLACES_REQUEST_DELAY_S if delay_s is None else delay_s
        self._fetch_details = fetch_details

    def resolve(
        self,
        activity: ResolvedActivity,
        profile: TravelProfile,
        used: set[str],
    ) -> Optional[PlaceRecord]:
        if not self._places.enabled:
            return None
        query = build_query(activity.kind, activity.category, profile)
        if not query:
            return None

        candidates = [p for p in self._places.text_search(query) if p.place_id not in used]
        if not candidates:
            logger.info("No unused candidates for %r", query)
            return None

        best = rank_candidates(candidates)[0]
        used.add(best.place_id)

        if self._fetch_details and best.needs_details:
            self._pause()
            details = self._places.details(best.place_id)
            if details:
                best = best.merged_with(details)
        return best

    def enrich(
        self,
        activity: ResolvedActivity,
        profile: TravelProfile,
        used: set[str],
    ) -> bool:
        """Resolve and apply; True when the activity received a real place."""
        place = self.resolve(activity, profile, used)
        if place is None:
            return False
        apply_place(activity, place)
        return True

    def _pause(self) -> None:
        if self._delay_s > 0:
            _time_mod.sleep(self._delay_s)
