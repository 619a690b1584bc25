"""
Geometry
========
Flat-earth distance, robust centres and the small bits of derived geometry
(bearing, compass labels, circle polygons, bounding boxes) shared by the
zone calculator, the outlier filters and the day-trip clusterer.

The planar approximation scales the longitude delta by the cosine of the
mean latitude. It is accurate at city / regional scale, which is all the
engine ever works at.
"""
import math
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..config import settings

METERS_PER_DEGREE = 111320.0

COMPASS_LABELS = (
    "East", "North-East", "North", "North-West",
    "West", "South-West", "South", "South-East",
)
CENTRAL_LABEL = "Central"


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


def as_geo_point(item: Any) -> GeoPoint:
    """
    Read coordinates off anything point-shaped.

    Accepts a GeoPoint, an object with ``latitude``/``longitude`` attributes,
    or a mapping keyed by ``latitude``/``longitude`` or ``lat``/``lng``.
    """
    if isinstance(item, GeoPoint):
        return item
    if isinstance(item, Mapping):
        if "latitude" in item:
            return GeoPoint(float(item["latitude"]), float(item["longitude"]))
        return GeoPoint(float(item["lat"]), float(item["lng"]))
    return GeoPoint(float(item.latitude), float(item.longitude))


CoordKey = Callable[[Any], GeoPoint]


# ── Distance ──────────────────────────────────────────────────────────────────

def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Planar distance in meters between two points."""
    d_lat = (a.latitude - b.latitude) * METERS_PER_DEGREE
    d_lng = (
        (a.longitude - b.longitude)
        * METERS_PER_DEGREE
        * math.cos(math.radians((a.latitude + b.latitude) / 2))
    )
    return math.sqrt(d_lat * d_lat + d_lng * d_lng)


def distance_matrix(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Vectorised ``distance_meters``.

    Args:
        a: (n, 2) array of [lat, lng] rows.
        b: (m, 2) array of [lat, lng] rows.

    Returns:
        (n, m) array of distances in meters.
    """
    lat_a, lng_a = a[:, None, 0], a[:, None, 1]
    lat_b, lng_b = b[None, :, 0], b[None, :, 1]
    d_lat = (lat_a - lat_b) * METERS_PER_DEGREE
    d_lng = (lng_a - lng_b) * METERS_PER_DEGREE * np.cos(np.radians((lat_a + lat_b) / 2))
    return np.sqrt(d_lat * d_lat + d_lng * d_lng)


def max_distance(center: GeoPoint, points: Sequence[GeoPoint]) -> float:
    return max((distance_meters(center, p) for p in points), default=0.0)


# ── Centres ───────────────────────────────────────────────────────────────────

def spatial_median(points: Sequence[GeoPoint]) -> GeoPoint:
    """
    Component-wise median. Each axis is sorted and halved on its own, so the
    result is usually not one of the input points. A single far outlier moves
    it by at most one slot, where the mean would be dragged towards it.
    """
    return GeoPoint(
        float(np.median([p.latitude for p in points])),
        float(np.median([p.longitude for p in points])),
    )


def mean_center(points: Sequence[GeoPoint]) -> GeoPoint:
    return GeoPoint(
        float(np.mean([p.latitude for p in points])),
        float(np.mean([p.longitude for p in points])),
    )


# ── Direction ─────────────────────────────────────────────────────────────────

def bearing_degrees(origin: GeoPoint, target: GeoPoint) -> float:
    """Angle of the coordinate delta, counter-clockwise from due east, in (-180, 180]."""
    return math.degrees(math.atan2(
        target.latitude - origin.latitude,
        target.longitude - origin.longitude,
    ))


def compass_index(angle: float) -> int:
    """45° bins with East centred on 0°: East is [-22.5, 22.5)."""
    return int(((angle + 22.5) % 360.0) // 45.0) % len(COMPASS_LABELS)


def compass_label(angle: float) -> str:
    return COMPASS_LABELS[compass_index(angle)]


# ── Shapes ────────────────────────────────────────────────────────────────────

def circle_polygon(
    center: GeoPoint,
    radius_meters: float,
    num_points: Optional[int] = None,
) -> List[GeoPoint]:
    """
    Evenly spaced vertices around ``center``, inverting the meters-per-degree
    scale used by ``distance_meters``. First vertex is due east, then
    counter-clockwise. The ring is not closed.
    """
    n = num_points or settings.circle_vertices
    d_lat = radius_meters / METERS_PER_DEGREE
    d_lng = radius_meters / (METERS_PER_DEGREE * math.cos(math.radians(center.latitude)))
    return [
        GeoPoint(
            center.latitude + d_lat * math.sin(2 * math.pi * i / n),
            center.longitude + d_lng * math.cos(2 * math.pi * i / n),
        )
        for i in range(n)
    ]


def bounding_box(points: Sequence[GeoPoint]) -> Optional[Tuple[float, float, float, float]]:
    """(south, west, north, east), or None for an empty set."""
    if not points:
        return None
    lats = [p.latitude for p in points]
    lngs = [p.longitude for p in points]
    return (min(lats), min(lngs), max(lats), max(lngs))


def round_half_up(value: float) -> int:
    """Halves round towards +inf (``round`` would send 2.5 to 2)."""
    return math.floor(value + 0.5)


def walking_minutes(meters: float) -> int:
    return max(1, round_half_up(meters / settings.walking_speed_m_per_min))
