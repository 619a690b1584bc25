from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .services.geometry import GeoPoint


class GeoPointSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @classmethod
    def from_point(cls, p: GeoPoint) -> "GeoPointSchema":
        return cls(latitude=p.latitude, longitude=p.longitude)


class PointsRequest(BaseModel):
    points: List[GeoPointSchema] = Field(default_factory=list, description="Favourited POIs or itinerary stops")

    def to_points(self) -> List[GeoPoint]:
        return [p.to_point() for p in self.points]


class ClusterRequest(PointsRequest):
    max_clusters: int = Field(4, ge=2, le=8, description="Upper bound on day-trip areas")


class ProximityItem(GeoPointSchema):
    """Any record with coordinates; extra fields are carried through untouched."""

    class Config:
        extra = "allow"


class ProximityRequest(BaseModel):
    items: List[ProximityItem] = []
    candidates: List[GeoPointSchema] = []


# ── Responses ─────────────────────────────────────────────────────────────────

class ZoneSchema(BaseModel):
    center_lat: float
    center_lng: float
    radius_meters: float
    cluster_points: List[GeoPointSchema]
    outlier_points: List[GeoPointSchema]
    clustering_applied: bool


class ZoneResponse(BaseModel):
    zone: Optional[ZoneSchema] = None
    circle: List[GeoPointSchema] = []


class ClusterSchema(BaseModel):
    id: int
    label: str
    color: str
    center: GeoPointSchema
    radius_meters: float
    points: List[GeoPointSchema]
    route: List[GeoPointSchema] = []


class ClusterResponse(BaseModel):
    clusters: List[ClusterSchema]


class BoundsResponse(BaseModel):
    inliers: List[GeoPointSchema]
    outlier_count: int
    bbox: Optional[Tuple[float, float, float, float]] = None


class CandidateVerdict(BaseModel):
    latitude: float
    longitude: float
    accepted: bool


class ProximityResponse(BaseModel):
    inliers: List[Dict[str, Any]]
    outliers: List[Dict[str, Any]]
    cluster_center: GeoPointSchema
    threshold_meters: Optional[float] = None
    candidates: List[CandidateVerdict] = []


# ── Stops ─────────────────────────────────────────────────────────────────────

class StopItem(GeoPointSchema):
    id: Optional[str] = None
    name: str = ""
    category: Optional[str] = None
    type: Optional[str] = None

    class Config:
        extra = "allow"


class StopsOverviewRequest(BaseModel):
    stops: List[StopItem] = []
    hotel: Optional[GeoPointSchema] = None
    favorite_names: List[str] = []
    max_clusters: int = Field(4, ge=2, le=8)


class StopBriefSchema(BaseModel):
    name: str
    category: str
    distance_from_hotel_m: Optional[int] = None
    is_favorite: bool = False


class ClusterSummarySchema(BaseModel):
    label: str
    stops: List[StopBriefSchema] = []
    walk_from_hotel_minutes: Optional[int] = None


class StopsOverviewResponse(BaseModel):
    clusters: List[ClusterSummarySchema]


class NearbyRequest(BaseModel):
    current: StopItem
    stops: List[StopItem] = []
    max_distance_m: Optional[float] = Field(None, gt=0, description="Defaults to ~10 min walk")


class NearbyStop(BaseModel):
    stop: Dict[str, Any]
    distance_meters: float


class NearbyResponse(BaseModel):
    nearby: List[NearbyStop]
