"""
modules/planning/geo_sequencer.py
----------------------------------
Reorders one day's activities to cut backtracking, then stitches travel
summaries between consecutive stops.

Ordering:
  1. Split into activities with coordinates and without.
  2. Greedy nearest neighbour over the coordinate set (Haversine), starting
     from the first coordinate-bearing activity in original order.
  3. Activities without coordinates follow, in their original order.

O(n^2) per day; n is single-digit.
"""

from __future__ import annotations

import logging
import time as _time_mod
from typing import Optional

from tipi import config
from tipi.google_places_client import GooglePlacesClient
from tipi.modules.tool_usage.distance_tool import nearest_index
from tipi.schemas.itinerary import ResolvedActivity

logger = logging.getLogger(__name__)

_TRANSIT_WORDS = ("transit", "public", "metro", "subway", "bus", "train", "tram")
_BIKE_WORDS = ("bike", "bicycl", "cycl")


def routing_mode(transportation: Optional[str]) -> str:
    """Map the profile's free-text transportation to a Directions mode."""
    text = (transportation or "").lower()
    if "walk" in text or "foot" in text:
        return "walking"
    if any(w in text for w in _TRANSIT_WORDS):
        return "transit"
    if any(w in text for w in _BIKE_WORDS):
        return "bicycling"
    return "driving"


def nearest_neighbour_order(activities: list[ResolvedActivity]) -> list[ResolvedActivity]:
    """Greedy walk over coordinate-bearing activities; the rest go last."""
    located = [a for a in activities if a.has_coordinates]
    others = [a for a in activities if not a.has_coordinates]
    if len(located) < 2:
        return located + others

    ordered = [located.pop(0)]
    while located:
        here = (ordered[-1].lat, ordered[-1].lng)
        i = nearest_index(here, [(a.lat, a.lng) for a in located])
        ordered.append(located.pop(i))
    return ordered + others


def _retimed(run: list[ResolvedActivity]) -> list[ResolvedActivity]:
    slots = sorted(a.time for a in run if a.time is not None)
    ordered = nearest_neighbour_order(run)
    if len(slots) == len(ordered):
        for activity, slot in zip(ordered, slots):
            activity.time = slot
    return ordered


def travel_summary(mode: str, duration_text: str, distance_text: str) -> str:
    return f"{mode} ≈ {duration_text} ({distance_text}) from previous stop"


class GeoSequencer:
    """Day-level reorder plus travel stitching via the provider's routing."""

    def __init__(self, places: Optional[GooglePlacesClient] = None, delay_s: Optional[float] = None) -> None:
        self._places = places
        self._delay_s = config.PLACES_REQUEST_DELAY_S if delay_s is None else delay_s

    def sequence(
        self,
        activities: list[ResolvedActivity],
        transportation: Optional[str] = None,
    ) -> list[ResolvedActivity]:
        ordered = nearest_neighbour_order(activities)
        self.attach_travel(ordered, routing_mode(transportation))
        return ordered

    def sequence_day(
        self,
        activities: list[ResolvedActivity],
        transportation: Optional[str] = None,
    ) -> list[ResolvedActivity]:
        """
        Timed-day variant: meals stay where the slot table put them, each run
        of non-meal stops between two meals is reordered on its own and takes
        back that run's clock times in ascending order. Travel summaries are
        then stitched across the whole day.
        """
        ordered: list[ResolvedActivity] = []
        run: list[ResolvedActivity] = []
        for activity in activities:
            if activity.kind.is_meal:
                ordered.extend(_retimed(run))
                run = []
                ordered.append(activity)
            else:
                run.append(activity)
        ordered.extend(_retimed(run))
        self.attach_travel(ordered, routing_mode(transportation))
        return ordered

    def attach_travel(self, ordered: list[ResolvedActivity], mode: str) -> None:
        """Set ``travel`` on each coordinate-bearing stop after the first."""
        if self._places is None or not self._places.enabled:
            return
        previous: Optional[ResolvedActivity] = None
        for activity in ordered:
            if not activity.has_coordinates:
                continue
            if previous is not None:
                self._pause()
                leg = self._places.route(
                    (previous.lat, previous.lng), (activity.lat, activity.lng), mode
                )
                if leg is None:
                    logger.info("No %s route to %s; travel summary left empty", mode, activity.name)
                else:
                    activity.travel = travel_summary(mode, leg.duration_text, leg.distance_text)
            previous = activity

    def _pause(self) -> None:
        if self._delay_s > 0:
            _time_mod.sleep(self._delay_s)
