"""Polar sampling grids around a search center.

Offsets are converted to degrees with a local equirectangular approximation
(111.32 km per degree of latitude, scaled by cos(latitude) for longitude).
That is accurate to well under a percent at the tens-of-kilometres radii used
here; it degrades near the poles and at very large radii.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from .entities import GeoPoint

KM_PER_DEGREE = 111.32
DEFAULT_RING_SCHEDULE: Tuple[int, ...] = (1, 8, 16, 24, 32)
REFINE_RING_SCHEDULE: Tuple[int, ...] = (1, 6, 12, 18)

_DISTANCE_TOLERANCE_KM = 1e-9


def offset(center_lat: float, center_lon: float, distance_km: float, angle: float) -> Tuple[float, float]:
    lat_offset = distance_km / KM_PER_DEGREE
    lon_offset = distance_km / (KM_PER_DEGREE * math.cos(math.radians(center_lat)))
    return center_lat + lat_offset * math.sin(angle), center_lon + lon_offset * math.cos(angle)


def distance_km(origin_lat: float, origin_lon: float, lat: float, lon: float) -> float:
    dy = (lat - origin_lat) * KM_PER_DEGREE
    dx = (lon - origin_lon) * KM_PER_DEGREE * math.cos(math.radians(origin_lat))
    return math.hypot(dx, dy)


def generate_grid(
    center_lat: float,
    center_lon: float,
    radius_km: float,
    ring_schedule: Sequence[int] = DEFAULT_RING_SCHEDULE,
) -> List[GeoPoint]:
    """Return the grid points ring by ring, center first.

    Ring ``i`` lies at ``i / (len(ring_schedule) - 1) * radius_km``. Ring 0 is
    always the single center point, whatever its schedule entry says.
    """
    if not ring_schedule:
        return []
    points = [GeoPoint(lat=center_lat, lon=center_lon, ring=0, index=0)]
    ring_count = len(ring_schedule)
    for ring in range(1, ring_count):
        ring_radius = ring / (ring_count - 1) * radius_km
        count = ring_schedule[ring]
        for index in range(count):
            angle = 2 * math.pi * index / count
            lat, lon = offset(center_lat, center_lon, ring_radius, angle)
            points.append(GeoPoint(lat=lat, lon=lon, ring=ring, index=index))
    return points


def generate_refinement_grid(
    center_lat: float,
    center_lon: float,
    radius_km: float,
    iteration: int,
    origin: Optional[Tuple[float, float]] = None,
    max_radius_km: Optional[float] = None,
) -> List[GeoPoint]:
    """Grid for one pass of the iterative refinement search.

    Each iteration uses one ring fewer (never below two), skips the center
    after the first pass and drops points outside ``max_radius_km`` of
    ``origin``. The first pass has 37 points.
    """
    ring_count = max(2, len(REFINE_RING_SCHEDULE) - iteration)
    points = generate_grid(center_lat, center_lon, radius_km, REFINE_RING_SCHEDULE[:ring_count])
    if iteration > 0:
        points = [p for p in points if p.ring != 0]
    if origin is not None and max_radius_km is not None:
        limit = max_radius_km + _DISTANCE_TOLERANCE_KM
        points = [p for p in points if distance_km(origin[0], origin[1], p.lat, p.lon) <= limit]
    return points


__all__ = [
    "KM_PER_DEGREE",
    "DEFAULT_RING_SCHEDULE",
    "REFINE_RING_SCHEDULE",
    "offset",
    "distance_km",
    "generate_grid",
    "generate_refinement_grid",
]
