"""
Zones Router
============
POST /api/v1/zone        – ideal hotel zone from favourited POIs
POST /api/v1/zone/map    – the same zone as an HTML map (or ?format=geojson)
POST /api/v1/clusters    – day-trip clusters with compass labels
POST /api/v1/bounds      – main-cluster points for map bounds fitting
POST /api/v1/proximity   – IQR proximity split + candidate checks
POST /api/v1/stops/overview – stops per day-trip area, walk times from hotel
POST /api/v1/stops/nearby   – other stops within walking distance
"""
import logging
import math
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse

from ..schemas import (
    BoundsResponse,
    CandidateVerdict,
    ClusterRequest,
    ClusterResponse,
    ClusterSchema,
    ClusterSummarySchema,
    GeoPointSchema,
    NearbyRequest,
    NearbyResponse,
    NearbyStop,
    PointsRequest,
    ProximityRequest,
    ProximityResponse,
    StopsOverviewRequest,
    StopsOverviewResponse,
    ZoneResponse,
    ZoneSchema,
)
from ..services.geo_clusterer import GeographicClusterer
from ..services.geometry import circle_polygon
from ..services.hotel_zone import calculate_hotel_zone
from ..services.outliers import filter_proximity_outliers, main_cluster_bounds
from ..services.stops import nearby_stops, stops_overview
from ..tools.zone_map import ZoneMapRenderer

logger = logging.getLogger(__name__)

router = APIRouter()


def _points(points):
    return [GeoPointSchema.from_point(p) for p in points]


@router.post("/zone", response_model=ZoneResponse)
async def hotel_zone(request: PointsRequest):
    """Centre + radius a hotel should sit in. ``zone`` is null for < 2 points."""
    zone = calculate_hotel_zone(request.to_points())
    if zone is None:
        return ZoneResponse()

    logger.info(
        "Zone for %d points: radius %.0fm, %d outliers",
        len(request.points), zone.radius_meters, len(zone.outlier_points),
    )
    return ZoneResponse(
        zone=ZoneSchema(
            center_lat=zone.center_lat,
            center_lng=zone.center_lng,
            radius_meters=zone.radius_meters,
            cluster_points=_points(zone.cluster_points),
            outlier_points=_points(zone.outlier_points),
            clustering_applied=zone.clustering_applied,
        ),
        circle=_points(circle_polygon(zone.center, zone.radius_meters)),
    )


@router.post("/zone/map", response_class=HTMLResponse)
async def hotel_zone_map(request: PointsRequest, format: Literal["html", "geojson"] = "html"):
    """Zone + its day-trip clusters as an HTML map, or ``?format=geojson``."""
    points = request.to_points()
    zone = calculate_hotel_zone(points)
    if zone is None:
        raise HTTPException(status_code=422, detail="At least two points are needed for a zone")

    clusters = GeographicClusterer().cluster(zone.cluster_points)
    renderer = ZoneMapRenderer()
    if format == "geojson":
        return JSONResponse(renderer.to_geojson(zone, clusters), media_type="application/geo+json")
    return HTMLResponse(renderer.render_html(zone, clusters))


@router.post("/clusters", response_model=ClusterResponse)
async def day_clusters(request: ClusterRequest):
    """Group stops into day-trip areas, largest first."""
    clusterer = GeographicClusterer()
    clusters = clusterer.cluster(request.to_points(), max_clusters=request.max_clusters)

    logger.info("Clustered %d points into %d areas", len(request.points), len(clusters))
    return ClusterResponse(clusters=[
        ClusterSchema(
            id=c.id,
            label=c.label,
            color=c.color,
            center=GeoPointSchema.from_point(c.center),
            radius_meters=c.radius_meters,
            points=_points(c.points),
            route=_points(clusterer.visiting_order(c.points)),
        )
        for c in clusters
    ])


@router.post("/bounds", response_model=BoundsResponse)
async def map_bounds(request: PointsRequest):
    bounds = main_cluster_bounds(request.to_points())
    return BoundsResponse(
        inliers=_points(bounds.inliers),
        outlier_count=bounds.outlier_count,
        bbox=bounds.bbox,
    )


@router.post("/proximity", response_model=ProximityResponse)
async def proximity(request: ProximityRequest):
    """
    Split records into main cluster / outliers and test candidates against
    the cluster. ``threshold_meters`` is null when the cluster is too small
    to reject anything.
    """
    result = filter_proximity_outliers(request.items)

    return ProximityResponse(
        inliers=[item.model_dump() for item in result.inliers],
        outliers=[item.model_dump() for item in result.outliers],
        cluster_center=GeoPointSchema.from_point(result.cluster_center),
        threshold_meters=None if math.isinf(result.threshold_meters) else result.threshold_meters,
        candidates=[
            CandidateVerdict(latitude=c.latitude, longitude=c.longitude, accepted=result.accepts(c))
            for c in request.candidates
        ],
    )


@router.post("/stops/overview", response_model=StopsOverviewResponse)
async def stops_by_cluster(request: StopsOverviewRequest):
    """
    Cluster the itinerary's stops into day-trip areas and summarise each:
    its stops, their distance from the hotel and the walk to the area.
    """
    stops = [s.model_dump() for s in request.stops]
    clusters = GeographicClusterer().cluster(
        [s.to_point() for s in request.stops],
        max_clusters=request.max_clusters,
    )
    overview = stops_overview(
        stops,
        clusters,
        hotel=request.hotel.model_dump() if request.hotel else None,
        favorite_names=request.favorite_names,
    )
    return StopsOverviewResponse(
        clusters=[ClusterSummarySchema.model_validate(asdict(summary)) for summary in overview],
    )


@router.post("/stops/nearby", response_model=NearbyResponse)
async def stops_nearby(request: NearbyRequest):
    found = nearby_stops(
        request.current.model_dump(),
        [s.model_dump() for s in request.stops],
        max_distance=request.max_distance_m,
    )
    return NearbyResponse(nearby=[NearbyStop(stop=stop, distance_meters=dist) for stop, dist in found])
