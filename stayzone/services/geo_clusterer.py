"""
Geographic Clusterer
====================
Splits a trip's stops into a handful of day-trip areas with a K-Means
variant, then names each area by compass direction from the trip's centre.

Seeding is deterministic (median-anchored, then farthest-first), so the
same input always yields the same clusters, labels and colours.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import settings
from .geometry import (
    CENTRAL_LABEL,
    COMPASS_LABELS,
    GeoPoint,
    bearing_degrees,
    compass_index,
    distance_matrix,
    distance_meters,
    max_distance,
    spatial_median,
)

logger = logging.getLogger(__name__)

CLUSTER_COLORS = ["#E8335D", "#3498DB", "#2ECC71", "#9B59B6"]


@dataclass
class GeoCluster:
    id: int
    center: GeoPoint
    points: List[GeoPoint]
    radius_meters: float
    label: str
    color: str


class GeographicClusterer:
    """
    K-Means based day-trip grouping.

    cluster()         – main entry; 2..max_clusters labelled clusters
    visiting_order()  – nearest-neighbour walking order inside one cluster
    """

    def cluster(
        self,
        points: Sequence[GeoPoint],
        max_clusters: Optional[int] = None,
    ) -> List[GeoCluster]:
        """
        Partition ``points`` into geographic clusters.

        Args:
            points:       Stops to group. Order only matters for tie-breaks.
            max_clusters: Upper bound on k (default from settings).

        Returns:
            Clusters sorted by descending size, ids 0..k-1 in that order.
            Every input point lands in exactly one cluster.
        """
        if not points:
            return []

        if len(points) <= settings.small_sample_size:
            center = spatial_median(points)
            return [GeoCluster(
                id=0,
                center=center,
                points=list(points),
                radius_meters=self._radius(center, points),
                label=CENTRAL_LABEL,
                color=CLUSTER_COLORS[0],
            )]

        if max_clusters is None:
            max_clusters = settings.max_clusters
        k = max(2, min(max_clusters, math.ceil(len(points) / settings.points_per_cluster)))

        coords = np.array([[p.latitude, p.longitude] for p in points], dtype=float)
        median = spatial_median(points)

        seeds = self._seed(coords, median, k)
        centroids, assignments = self._lloyd(coords, coords[seeds].copy())

        raw = []
        for j in range(k):
            members = [points[i] for i in np.flatnonzero(assignments == j)]
            if not members:
                continue
            center = GeoPoint(float(centroids[j, 0]), float(centroids[j, 1]))
            raw.append((center, members))

        # Stable: equal sizes keep discovery order
        raw.sort(key=lambda c: -len(c[1]))

        labels = self._label(median, [center for center, _ in raw])

        return [
            GeoCluster(
                id=i,
                center=center,
                points=members,
                radius_meters=self._radius(center, members),
                label=labels[i],
                color=CLUSTER_COLORS[i % len(CLUSTER_COLORS)],
            )
            for i, (center, members) in enumerate(raw)
        ]

    def visiting_order(self, points: Sequence[GeoPoint]) -> List[GeoPoint]:
        """
        Order stops with a greedy nearest-neighbour heuristic.
        Starts from the northernmost stop (natural 'morning start').
        """
        if len(points) <= 1:
            return list(points)

        remaining = sorted(points, key=lambda p: -p.latitude)
        ordered = [remaining.pop(0)]

        while remaining:
            cur = ordered[-1]
            nearest = min(remaining, key=lambda p: distance_meters(cur, p))
            ordered.append(nearest)
            remaining.remove(nearest)

        return ordered

    # ── Internal helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _seed(coords: np.ndarray, median: GeoPoint, k: int) -> List[int]:
        """
        First seed: the input point nearest the global median, so one cluster
        is anchored on the trip's centre. The rest by farthest-first traversal.
        argmin/argmax return the first occurrence, which is the tie-break.
        """
        to_median = distance_matrix(coords, np.array([[median.latitude, median.longitude]]))[:, 0]
        seeds = [int(np.argmin(to_median))]

        nearest_seed = distance_matrix(coords, coords[seeds])[:, 0]
        while len(seeds) < k:
            idx = int(np.argmax(nearest_seed))
            seeds.append(idx)
            nearest_seed = np.minimum(nearest_seed, distance_matrix(coords, coords[[idx]])[:, 0])

        return seeds

    @staticmethod
    def _lloyd(coords: np.ndarray, centroids: np.ndarray):
        """
        Lloyd's iteration over an indexed centroid array. A centroid that
        loses all its members stays where it is.
        """
        assignments = None
        rounds = 0
        for rounds in range(1, settings.kmeans_max_iterations + 1):
            nearest = np.argmin(distance_matrix(coords, centroids), axis=1)
            if assignments is not None and np.array_equal(nearest, assignments):
                break
            assignments = nearest

            for j in range(len(centroids)):
                members = coords[assignments == j]
                if len(members):
                    centroids[j] = members.mean(axis=0)

        logger.debug("K-Means: k=%d settled after %d rounds", len(centroids), rounds)
        return centroids, assignments

    @staticmethod
    def _label(median: GeoPoint, centers: List[GeoPoint]) -> List[str]:
        """
        The cluster nearest the global median is "Central"; the others are
        named by the fixed 45° compass bin of their bearing from the median.
        Two clusters in the same direction share a label.
        """
        central = min(range(len(centers)), key=lambda i: distance_meters(centers[i], median))
        labels = []

        for i, center in enumerate(centers):
            if i == central:
                labels.append(CENTRAL_LABEL)
                continue
            labels.append(COMPASS_LABELS[compass_index(bearing_degrees(median, center))])

        return labels

    @staticmethod
    def _radius(center: GeoPoint, members: Sequence[GeoPoint]) -> float:
        return max(settings.cluster_min_radius_m, max_distance(center, members) * settings.cluster_padding)
