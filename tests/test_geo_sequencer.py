from collections import Counter
from datetime import time

import pytest

from conftest import FakePlaces
from tipi.modules.planning.geo_sequencer import (
    GeoSequencer,
    nearest_neighbour_order,
    routing_mode,
    travel_summary,
)
from tipi.modules.tool_usage.distance_tool import haversine_km, nearest_index
from tipi.schemas.itinerary import ActivityKind, ResolvedActivity


def _stop(name, lat=None, lng=None, kind=ActivityKind.attraction, at=None):
    return ResolvedActivity(name=name, kind=kind, category=name, lat=lat, lng=lng, time=at)


def _names(activities):
    return [a.name for a in activities]


# ── distance ──────────────────────────────────────────────────────────────────

def test_haversine_known_distance():
    # Lisbon -> Porto, roughly 274 km
    assert haversine_km(38.7223, -9.1393, 41.1579, -8.6291) == pytest.approx(274, abs=5)


def test_nearest_index_prefers_lowest_index_on_ties():
    assert nearest_index((0.0, 0.0), [(0.0, 2.0), (0.0, 1.0), (0.0, 1.0)]) == 1
    assert nearest_index((0.0, 0.0), []) == -1


# ── ordering ──────────────────────────────────────────────────────────────────

def test_greedy_walk_starts_from_first_located_stop():
    stops = [_stop("A", 0.0, 0.0), _stop("far", 0.0, 3.0), _stop("near", 0.0, 1.0), _stop("mid", 0.0, 2.0)]
    assert _names(nearest_neighbour_order(stops)) == ["A", "near", "mid", "far"]


def test_stops_without_coordinates_go_last_in_original_order():
    stops = [_stop("x"), _stop("A", 0.0, 0.0), _stop("y"), _stop("B", 0.0, 0.5)]
    assert _names(nearest_neighbour_order(stops)) == ["A", "B", "x", "y"]


def test_multiset_is_preserved():
    stops = [_stop("A", 0.0, 0.0), _stop("x"), _stop("B", 1.0, 1.0), _stop("C", 0.1, 0.1), _stop("y")]
    out = nearest_neighbour_order(stops)
    assert Counter(id(a) for a in out) == Counter(id(a) for a in stops)


def test_single_located_stop_keeps_order():
    stops = [_stop("A", 0.0, 0.0), _stop("x")]
    assert _names(nearest_neighbour_order(stops)) == ["A", "x"]


# ── routing mode ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("text, mode", [
    ("Walking", "walking"),
    ("public transport", "transit"),
    ("Metro", "transit"),
    ("bus", "transit"),
    ("Bicycle", "bicycling"),
    ("cycling", "bicycling"),
    ("car", "driving"),
    ("", "driving"),
    (None, "driving"),
])
def test_routing_mode(text, mode):
    assert routing_mode(text) == mode


# ── travel stitching ──────────────────────────────────────────────────────────

def test_travel_is_stitched_between_located_stops():
    places = FakePlaces()
    stops = [_stop("A", 0.0, 0.0), _stop("x"), _stop("B", 0.0, 0.1)]
    out = GeoSequencer(places, delay_s=0).sequence(stops, "walking")
    assert out[0].travel is None
    assert out[1].travel == travel_summary("walking", "10 mins", "1.2 km")
    assert out[1].travel == "walking ≈ 10 mins (1.2 km) from previous stop"
    assert out[2].travel is None
    assert places.route_calls == [((0.0, 0.0), (0.0, 0.1), "walking")]


def test_routing_failure_leaves_travel_empty():
    places = FakePlaces(routes=False)
    out = GeoSequencer(places, delay_s=0).sequence([_stop("A", 0.0, 0.0), _stop("B", 0.0, 0.1)], "car")
    assert [a.travel for a in out] == [None, None]
    assert places.route_calls[0][2] == "driving"


def test_no_provider_means_reorder_only():
    out = GeoSequencer(None, delay_s=0).sequence([_stop("A", 0.0, 0.0), _stop("C", 0.0, 2.0), _stop("B", 0.0, 1.0)])
    assert _names(out) == ["A", "B", "C"]
    assert all(a.travel is None for a in out)


def test_disabled_provider_makes_no_route_calls():
    places = FakePlaces(enabled=False)
    GeoSequencer(places, delay_s=0).sequence([_stop("A", 0.0, 0.0), _stop("B", 0.0, 1.0)])
    assert places.route_calls == []


# ── timed days ────────────────────────────────────────────────────────────────

def test_timed_day_keeps_meals_and_reassigns_run_times():
    day = [
        _stop("breakfast", 0.0, 0.0, ActivityKind.breakfast, time(8, 0)),
        _stop("far", 0.0, 2.0, at=time(9, 30)),
        _stop("near", 0.0, 0.5, at=time(11, 0)),
        _stop("lunch", 0.0, 2.1, ActivityKind.lunch, time(12, 30)),
        _stop("bar", 0.0, 2.2, ActivityKind.night, time(20, 0)),
    ]
    out = GeoSequencer(None, delay_s=0).sequence_day(day, "walking")
    assert _names(out) == ["breakfast", "far", "near", "lunch", "bar"]
    assert [a.kind for a in out if a.kind.is_meal] == [ActivityKind.breakfast, ActivityKind.lunch]
    assert out[0].name == "breakfast" and out[3].name == "lunch"
    times = [a.time for a in out]
    assert times == sorted(times)
    assert Counter(id(a) for a in out) == Counter(id(a) for a in day)


def test_timed_day_reorders_within_a_run():
    day = [
        _stop("breakfast", 0.0, 0.0, ActivityKind.breakfast, time(8, 0)),
        _stop("A", 0.0, 1.0, at=time(9, 30)),
        _stop("C", 0.0, 3.0, at=time(11, 0)),
        _stop("B", 0.0, 1.5, at=time(12, 0)),
        _stop("lunch", 0.0, 0.0, ActivityKind.lunch, time(12, 30)),
    ]
    out = GeoSequencer(None, delay_s=0).sequence_day(day)
    assert _names(out) == ["breakfast", "A", "B", "C", "lunch"]
    assert [a.time for a in out[1:4]] == [time(9, 30), time(11, 0), time(12, 0)]


def test_timed_day_stitches_travel_across_meals():
    places = FakePlaces()
    day = [
        _stop("breakfast", 0.0, 0.0, ActivityKind.breakfast, time(8, 0)),
        _stop("A", 0.0, 1.0, at=time(9, 30)),
        _stop("lunch", 0.0, 2.0, ActivityKind.lunch, time(12, 30)),
    ]
    out = GeoSequencer(places, delay_s=0).sequence_day(day, "metro")
    assert out[0].travel is None
    assert out[1].travel and out[2].travel
    assert {call[2] for call in places.route_calls} == {"transit"}
