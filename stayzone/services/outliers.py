"""
Outlier Filters
===============
IQR test on distance-from-centre, used three ways:

  filter_outliers()           – bare GeoPoints against a given centre
  filter_proximity_outliers() – any coordinate-bearing records, also returns
                                the threshold and a re-centred median so new
                                candidates can be tested against the cluster
  main_cluster_bounds()       – "what to fit on screen" for map consumers

A point is an outlier when it lies further than
``max(Q3 + 1.5·IQR, 2 km)`` from the centre. If that would leave fewer than
half the points, the filtering is rolled back.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from ..config import settings
from .geometry import (
    CoordKey,
    GeoPoint,
    as_geo_point,
    bounding_box,
    distance_meters,
    spatial_median,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OutlierSplit:
    inliers: List[GeoPoint]
    outliers: List[GeoPoint] = field(default_factory=list)


@dataclass
class ProximityResult(Generic[T]):
    inliers: List[T]
    outliers: List[T]
    cluster_center: GeoPoint
    threshold_meters: float

    def accepts(self, candidate) -> bool:
        """True if ``candidate`` would sit inside the established cluster."""
        return distance_meters(as_geo_point(candidate), self.cluster_center) <= self.threshold_meters


@dataclass
class MainClusterBounds:
    inliers: List[GeoPoint]
    outlier_count: int

    @property
    def bbox(self) -> Optional[Tuple[float, float, float, float]]:
        return bounding_box(self.inliers)


# ── Core IQR rule ─────────────────────────────────────────────────────────────

def iqr_threshold(distances: Sequence[float]) -> float:
    """
    Q3 + k·IQR over the sorted distances, floored at the configured minimum.
    Quartiles use the nearest-lower index: ``floor(n·0.25)``, ``floor(n·0.75)``.
    """
    ordered = sorted(distances)
    n = len(ordered)
    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    return max(q3 + settings.iqr_multiplier * (q3 - q1), settings.iqr_min_threshold_m)


def _split(
    items: Sequence[T],
    points: Sequence[GeoPoint],
    center: GeoPoint,
) -> Tuple[List[T], List[T], float, bool]:
    """
    Returns (inliers, outliers, threshold, rolled_back). Both lists keep
    the input order.
    """
    distances = [distance_meters(p, center) for p in points]
    threshold = iqr_threshold(distances)

    inliers: List[T] = []
    outliers: List[T] = []
    for item, dist in zip(items, distances):
        if dist <= threshold:
            inliers.append(item)
        else:
            outliers.append(item)

    if len(inliers) < math.ceil(len(items) * settings.min_inlier_fraction):
        logger.debug(
            "IQR filter would keep %d of %d points; rolling back",
            len(inliers), len(items),
        )
        return list(items), [], threshold, True

    return inliers, outliers, threshold, False


# ── Public interface ──────────────────────────────────────────────────────────

def filter_outliers(points: Sequence[GeoPoint], center: GeoPoint) -> OutlierSplit:
    """Split ``points`` into inliers/outliers by distance from ``center``."""
    if len(points) <= settings.small_sample_size:
        return OutlierSplit(inliers=list(points))

    inliers, outliers, threshold, _ = _split(points, points, center)
    logger.debug(
        "IQR filter: %d inliers, %d outliers (threshold %.0fm)",
        len(inliers), len(outliers), threshold,
    )
    return OutlierSplit(inliers=inliers, outliers=outliers)


def filter_proximity_outliers(
    items: Sequence[T],
    key: Optional[CoordKey] = None,
) -> ProximityResult[T]:
    """
    Type-preserving IQR filter for arbitrary records.

    Args:
        items: Records carrying coordinates (POI dicts, stop objects, ...).
        key:   Extracts a GeoPoint from a record. Defaults to ``as_geo_point``.

    Returns:
        ProximityResult holding the original records. ``threshold_meters`` is
        infinite when there are too few items to judge, so nothing is ever
        rejected against a tiny cluster.
    """
    key = key or as_geo_point
    points = [key(item) for item in items]

    if len(items) <= settings.small_sample_size:
        center = spatial_median(points) if points else GeoPoint(0.0, 0.0)
        return ProximityResult(
            inliers=list(items),
            outliers=[],
            cluster_center=center,
            threshold_meters=math.inf,
        )

    median = spatial_median(points)
    inliers, outliers, threshold, rolled_back = _split(items, points, median)

    if rolled_back:
        return ProximityResult(inliers, outliers, median, threshold)

    # Re-centre on the inliers so candidates are tested against the real cluster
    center = spatial_median([key(item) for item in inliers])
    return ProximityResult(inliers, outliers, center, threshold)


def main_cluster_bounds(points: Sequence[GeoPoint]) -> MainClusterBounds:
    """
    Main cluster for map bounds fitting: drops far-flung points (offshore
    islands, a day trip across the border) so the map zooms to where the
    activity is.
    """
    if len(points) <= settings.small_sample_size:
        return MainClusterBounds(inliers=list(points), outlier_count=0)

    split = filter_outliers(points, spatial_median(points))
    return MainClusterBounds(inliers=split.inliers, outlier_count=len(split.outliers))
