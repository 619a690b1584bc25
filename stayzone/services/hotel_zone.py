"""
Hotel Zone
==========
Turns a traveller's favourited POIs into one "ideal stay zone": a centre
and radius that a hotel search can be restricted to.

A single far-away favourite would otherwise stretch the zone across half
the city, so the main cluster is found first (spatial median + IQR filter)
and only its members shape the zone.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import settings
from .geometry import GeoPoint, max_distance, mean_center, spatial_median
from .outliers import filter_outliers

logger = logging.getLogger(__name__)


@dataclass
class ZoneResult:
    center_lat: float
    center_lng: float
    radius_meters: float
    cluster_points: List[GeoPoint]
    outlier_points: List[GeoPoint]
    clustering_applied: bool

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(self.center_lat, self.center_lng)

    @property
    def radius_km(self) -> float:
        return self.radius_meters / 1000.0


def calculate_hotel_zone(favorites: Sequence[GeoPoint]) -> Optional[ZoneResult]:
    """
    Compute the ideal hotel zone.

    Args:
        favorites: Favourited POI locations, in any order.

    Returns:
        ZoneResult, or None for fewer than two points (a zone around a
        single point means nothing).
    """
    if len(favorites) < 2:
        return None

    median = spatial_median(favorites)
    split = filter_outliers(favorites, median)

    # Mean is safe once the outliers are gone
    center = mean_center(split.inliers)

    radius = min(
        settings.zone_max_radius_m,
        max(settings.zone_min_radius_m, max_distance(center, split.inliers) * settings.zone_padding),
    )

    logger.debug(
        "Hotel zone: %d inliers, %d outliers, radius %.0fm",
        len(split.inliers), len(split.outliers), radius,
    )

    return ZoneResult(
        center_lat=center.latitude,
        center_lng=center.longitude,
        radius_meters=radius,
        cluster_points=split.inliers,
        outlier_points=split.outliers,
        clustering_applied=len(split.outliers) > 0,
    )
