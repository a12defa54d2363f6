from __future__ import annotations

import json
from typing import Optional

import pytest

from tipi.db.store import build_stores
from tipi.google_places_client import PlaceRecord, RouteLeg
from tipi.llm import LLMError
from tipi.modules.observability.logger import StructuredLogger
from tipi.schemas.profile import TravelProfile


class FakeLLM:
    """Scripted LLM: returns queued replies in order, or raises when told to."""

    def __init__(self, *replies: str, error: Optional[Exception] = None) -> None:
        self.replies = list(replies)
        self.error = error
        self.calls: list[dict] = []

    def complete(self, prompt, *, system=None, temperature=None, max_output_tokens=None):
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        })
        if self.error is not None:
            raise self.error
        if not self.replies:
            raise LLMError("no scripted reply left")
        return self.replies.pop(0)


class FakePlaces:
    """
    In-memory places provider.

    ``results`` maps a query substring to the candidate list. With ``auto`` on,
    a query that matches nothing gets three fresh records numbered per query;
    with it off, it gets no results.
    """

    def __init__(self, results=None, details=None, routes=True, enabled=True, auto=True) -> None:
        self.results: dict[str, list[PlaceRecord]] = results or {}
        self.detail_records: dict[str, PlaceRecord] = details or {}
        self.routes = routes
        self.enabled = enabled
        self.auto = auto
        self.queries: list[str] = []
        self.detail_calls: list[str] = []
        self.route_calls: list[tuple] = []
        self._counter = 0

    def text_search(self, query, max_results=None):
        self.queries.append(query)
        for key, records in self.results.items():
            if key in query:
                return list(records)
        if not self.auto:
            return []
        self._counter += 1
        n = self._counter
        return [
            PlaceRecord(
                place_id=f"auto-{n}-{i}",
                name=f"Place {n}.{i}",
                address=f"{i} Main St",
                rating=4.0 + i / 10,
                review_count=100 * i,
                lat=38.70 + n * 0.01,
                lng=-9.14 - i * 0.001,
            )
            for i in range(1, 4)
        ]

    def details(self, place_id):
        self.detail_calls.append(place_id)
        return self.detail_records.get(place_id)

    def route(self, origin, destination, mode="driving"):
        self.route_calls.append((origin, destination, mode))
        if not self.routes:
            return None
        return RouteLeg(duration_text="10 mins", distance_text="1.2 km", duration_s=600, distance_m=1200)


def skeleton_json(days: int, *, nightlife: bool = True, summary: str = "A fine trip") -> str:
    """A well-formed model reply with ``days`` full days."""
    day_list = []
    for n in range(1, days + 1):
        activities = [
            {"activityType": "breakfast", "placeCategory": "vegan breakfast café", "notes": "start"},
            {"activityType": "attraction", "placeCategory": "art museum", "notes": "culture"},
            {"activityType": "attraction", "placeCategory": "historic landmark", "notes": "culture"},
            {"activityType": "lunch", "placeCategory": "vegan lunch spot", "notes": "diet"},
            {"activityType": "attraction", "placeCategory": "scenic viewpoint", "notes": "views"},
            {"activityType": "attraction", "placeCategory": "local market", "notes": "shopping"},
            {"activityType": "dinner", "placeCategory": "vegan dinner restaurant", "notes": "diet"},
        ]
        if nightlife:
            activities.append({"activityType": "night activity", "placeCategory": "rooftop bar", "notes": "nightlife"})
        day_list.append({"day": n, "area": f"Area {n}", "activities": activities})
    return json.dumps({"days": day_list, "summary": summary})


@pytest.fixture
def profile() -> TravelProfile:
    return TravelProfile.from_request(
        user_id="user-1",
        destination="Lisbon",
        days=2,
        experiences=["nightlife", "culture"],
        dietary="vegan",
        transportation="walking",
        accommodation="boutique",
        budget="moderate",
        pacing="balanced",
    )


@pytest.fixture
def stores():
    return build_stores("in_memory")


@pytest.fixture
def events(tmp_path) -> StructuredLogger:
    return StructuredLogger(logs_dir=tmp_path / "logs", enabled=True)
