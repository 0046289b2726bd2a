"""
Text exports of a georeferencing result: control-point list and boundary polygons.

Two boundary exports are produced side by side:

* ``gcp_boundary_geojson`` traces the control points in their input order.
* ``extent_boundary_geojson`` is the rectangular raster extent.

Every ring is closed (first vertex repeated as last), as required by
RFC 7946 consumers.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Sequence

from geosnap.control_points import ControlPoint
from geosnap.extent import Extent


def format_control_point_list(points: Iterable[ControlPoint]) -> str:
    """Format control points as ``"pixelX pixelY lng lat"`` lines."""
    lines = [f"{p.pixel_x!r} {p.pixel_y!r} {p.lng!r} {p.lat!r}" for p in points]
    return "\n".join(lines) + "\n" if lines else ""


def close_ring(coordinates: Sequence[Sequence[float]]) -> list[list[float]]:
    """Return the ring as a list of ``[x, y]`` with the first vertex repeated at the end.

    A ring that is already closed is returned without adding a second copy.

    Raises:
        ValueError: If fewer than 3 distinct vertices are given
    """
    ring = [[float(x), float(y)] for x, y in coordinates]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    if len(ring) < 3:
        raise ValueError(f"A polygon ring needs at least 3 vertices, got {len(ring)}")
    ring.append(list(ring[0]))
    return ring


def _polygon_feature_collection(
    ring: list[list[float]], properties: dict[str, Any]
) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": properties,
                "geometry": {"type": "Polygon", "coordinates": [ring]},
            }
        ],
    }


def gcp_boundary_geojson(
    points: Sequence[ControlPoint], properties: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a FeatureCollection whose polygon traces the control points in order.

    Raises:
        ValueError: If fewer than 3 control points are given
    """
    ring = close_ring([(p.lng, p.lat) for p in points])
    props = {"source": "control_points", "count": len(points)}
    props.update(properties or {})
    return _polygon_feature_collection(ring, props)


def extent_boundary_geojson(
    extent: Extent, properties: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a FeatureCollection whose polygon is the rectangular extent."""
    ring = [[x, y] for x, y in extent.to_polygon()]
    props: dict[str, Any] = {"source": "extent"}
    props.update(properties or {})
    return _polygon_feature_collection(ring, props)


def to_geojson_text(collection: dict[str, Any], indent: int = 2) -> str:
    return json.dumps(collection, indent=indent)
