"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def mean_distance_km(point: tuple[float, float], others: Iterable[tuple[float, float]]) -> float:
    """Mean haversine distance from ``point`` to each of ``others`` (0.0 when empty)."""

    distances = [haversine_km(point[0], point[1], lat, lon) for lat, lon in others]
    if not distances:
        return 0.0
    return sum(distances) / len(distances)
