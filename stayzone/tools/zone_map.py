"""
Zone Map
========
Renders a hotel zone and its day-trip clusters for the map collaborator:
  1. An interactive HTML map (via Folium): translucent zone circle,
     coloured cluster markers, greyed-out outliers, legend.
  2. A GeoJSON FeatureCollection: zone polygon + one Point per stop.
"""
import logging
from typing import Dict, List, Sequence

import folium

from ..services.geo_clusterer import GeoCluster
from ..services.geometry import GeoPoint, circle_polygon
from ..services.hotel_zone import ZoneResult

logger = logging.getLogger(__name__)

ZONE_COLOR = "#E8335D"
OUTLIER_COLOR = "#999999"


class ZoneMapRenderer:
    # ── Map ───────────────────────────────────────────────────────────────────

    def build_map(
        self,
        zone: ZoneResult,
        clusters: Sequence[GeoCluster] = (),
        title: str = "Hotel zone",
    ) -> folium.Map:
        m = folium.Map(
            location=[zone.center_lat, zone.center_lng],
            zoom_start=14,
            tiles="CartoDB positron",
        )

        folium.Circle(
            location=[zone.center_lat, zone.center_lng],
            radius=zone.radius_meters,
            color=ZONE_COLOR,
            weight=2,
            fill=True,
            fill_color=ZONE_COLOR,
            fill_opacity=0.12,
            tooltip=f"{title} · {zone.radius_km:.1f} km",
        ).add_to(m)

        for cluster in clusters:
            for p in cluster.points:
                folium.CircleMarker(
                    [p.latitude, p.longitude],
                    radius=7,
                    color=cluster.color,
                    fill=True,
                    fill_color=cluster.color,
                    fill_opacity=0.9,
                    tooltip=cluster.label,
                ).add_to(m)

        for p in zone.outlier_points:
            folium.CircleMarker(
                [p.latitude, p.longitude],
                radius=6,
                color=OUTLIER_COLOR,
                fill=True,
                fill_opacity=0.5,
                tooltip="Outside main cluster",
            ).add_to(m)

        if clusters:
            legend_items = "".join(
                f'<div style="margin-top:5px;">'
                f'<span style="background:{c.color};color:white;'
                f'padding:2px 8px;border-radius:10px;font-size:11px;">{c.label}</span> '
                f'{len(c.points)} stops</div>'
                for c in clusters
            )
            m.get_root().html.add_child(folium.Element(
                f'<div style="position:fixed;bottom:30px;right:30px;background:white;'
                f'padding:14px;border-radius:10px;box-shadow:0 2px 10px rgba(0,0,0,.2);'
                f'font-family:sans-serif;z-index:1000;">'
                f'<div style="font-weight:bold;font-size:13px;color:{ZONE_COLOR};margin-bottom:6px;">'
                f'{title}</div>'
                f'{legend_items}</div>'
            ))

        return m

    def render_html(self, zone: ZoneResult, clusters: Sequence[GeoCluster] = (), title: str = "Hotel zone") -> str:
        return self.build_map(zone, clusters, title).get_root().render()

    # ── GeoJSON ───────────────────────────────────────────────────────────────

    def to_geojson(self, zone: ZoneResult, clusters: Sequence[GeoCluster] = ()) -> Dict:
        ring = circle_polygon(zone.center, zone.radius_meters)
        ring.append(ring[0])

        features: List[Dict] = [{
            "type": "Feature",
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[p.longitude, p.latitude] for p in ring]],
            },
            "properties": {
                "kind": "zone",
                "radius_meters": zone.radius_meters,
                "clustering_applied": zone.clustering_applied,
            },
        }]

        for cluster in clusters:
            features.extend(self._point_features(cluster.points, {
                "kind": "stop",
                "cluster_id": cluster.id,
                "label": cluster.label,
                "color": cluster.color,
            }))
        features.extend(self._point_features(zone.outlier_points, {"kind": "outlier"}))

        return {"type": "FeatureCollection", "features": features}

    # ── Internal helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _point_features(points: Sequence[GeoPoint], properties: Dict) -> List[Dict]:
        return [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [p.longitude, p.latitude]},
                "properties": dict(properties),
            }
            for p in points
        ]
