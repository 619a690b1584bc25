"""
Stops overview: which itinerary stops belong to which day-trip cluster,
how far each is from the hotel, and what else is within walking distance.

Stops are plain dicts (``name``, ``category``/``type``, coordinates under
``latitude``/``longitude`` or ``lat``/``lng``), the same shape the
itinerary collaborator hands over.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from .geo_clusterer import GeoCluster
from .geometry import GeoPoint, as_geo_point, distance_meters, round_half_up, walking_minutes


@dataclass
class StopBrief:
    name: str
    category: str
    distance_from_hotel_m: Optional[int] = None
    is_favorite: bool = False


@dataclass
class ClusterSummary:
    label: str
    stops: List[StopBrief] = field(default_factory=list)
    walk_from_hotel_minutes: Optional[int] = None


def _coord_key(point: GeoPoint) -> Tuple[str, str]:
    return (f"{point.latitude:.5f}", f"{point.longitude:.5f}")


def stops_in_cluster(stops: Sequence[Dict], cluster: GeoCluster) -> List[Dict]:
    """Stops whose coordinates (to 5 decimals, ~1 m) match a cluster member."""
    members = {_coord_key(p) for p in cluster.points}
    return [s for s in stops if _coord_key(as_geo_point(s)) in members]


def stops_overview(
    stops: Sequence[Dict],
    clusters: Sequence[GeoCluster],
    hotel: Optional[Dict] = None,
    favorite_names: Iterable[str] = (),
) -> List[ClusterSummary]:
    """One summary per cluster, in cluster order."""
    favorites = {n.lower() for n in favorite_names}
    hotel_pt = as_geo_point(hotel) if hotel else None

    overview = []
    for cluster in clusters:
        walk = None
        if hotel_pt:
            walk = walking_minutes(distance_meters(hotel_pt, cluster.center))

        briefs = []
        for stop in stops_in_cluster(stops, cluster):
            dist = None
            if hotel_pt:
                dist = round_half_up(distance_meters(hotel_pt, as_geo_point(stop)))
            briefs.append(StopBrief(
                name=stop.get("name", ""),
                category=stop.get("category") or stop.get("type") or "activity",
                distance_from_hotel_m=dist,
                is_favorite=stop.get("name", "").lower() in favorites,
            ))

        overview.append(ClusterSummary(
            label=cluster.label,
            stops=briefs,
            walk_from_hotel_minutes=walk,
        ))

    return overview


def nearby_stops(
    current: Dict,
    stops: Sequence[Dict],
    max_distance: Optional[float] = None,
    limit: Optional[int] = None,
) -> List[Tuple[Dict, float]]:
    """
    Other stops within walking distance of ``current``, nearest first.
    ``current`` itself is skipped (by identity, or by ``id`` when present).
    """
    max_distance = settings.nearby_radius_m if max_distance is None else max_distance
    limit = settings.nearby_limit if limit is None else limit
    here = as_geo_point(current)

    found = []
    for stop in stops:
        if stop is current or (stop.get("id") is not None and stop.get("id") == current.get("id")):
            continue
        dist = distance_meters(here, as_geo_point(stop))
        if dist <= max_distance:
            found.append((stop, dist))

    found.sort(key=lambda item: item[1])
    return found[:limit]
