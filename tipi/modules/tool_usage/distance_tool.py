"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distance helpers (Haversine formula).
No external HTTP calls are made; road travel times come from the places
provider's routing endpoint.
"""

from __future__ import annotations

import math
from typing import Sequence

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(math.sqrt(a))


def nearest_index(
    origin: tuple[float, float],
    candidates: Sequence[tuple[float, float]],
) -> int:
    """
    Index of the candidate closest to ``origin``; -1 when there are none.
    Ties resolve to the lowest index.
    """
    best, best_km = -1, math.inf
    for i, (lat, lon) in enumerate(candidates):
        km = haversine_km(origin[0], origin[1], lat, lon)
        if km < best_km:
            best, best_km = i, km
    return best
