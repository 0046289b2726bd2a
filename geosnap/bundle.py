"""
GIS bundle assembly.

Packages a georeferencing result with its raster into one zip archive that
GIS desktop tools can open directly:

    raster_map.jpg              raster bytes as given
    raster_map.jgw              world file (extension follows the raster type)
    raster_map.prj              WKT of the source reference system
    raster_map_gcps.txt         "pixelX pixelY lng lat" per control point
    raster_map_boundary.geojson polygon tracing the control points
    raster_map_extent.geojson   rectangular raster extent
    raster_map_georef.json      result report (parameters, residuals, points)

Assembly performs no transformation logic. Errors raised by ``zipfile`` or
the file system propagate unchanged.
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
from pathlib import Path, PurePath

from geosnap.exports import (
    extent_boundary_geojson,
    format_control_point_list,
    gcp_boundary_geojson,
    to_geojson_text,
)
from geosnap.extent import compute_extent
from geosnap.projection import get_projection_wkt
from geosnap.transformation import GeoreferenceResult, TransformationType
from geosnap.world_file import format_world_file, world_file_extension

logger = logging.getLogger(__name__)

DEFAULT_RASTER_NAME = "raster_map.jpg"
BUNDLE_NAME_TEMPLATE = "GeoSnap_GIS_Bundle_{transformation}.zip"


def bundle_filename(transformation_type: TransformationType) -> str:
    """Return the archive file name for a transformation type."""
    return BUNDLE_NAME_TEMPLATE.format(transformation=transformation_type.value)


def bundle_entries(
    result: GeoreferenceResult,
    raster_bytes: bytes,
    raster_name: str = DEFAULT_RASTER_NAME,
) -> dict[str, bytes | str]:
    """Build the named archive entries for a result.

    Args:
        result: Georeferencing result to export
        raster_bytes: Encoded raster image
        raster_name: File name of the raster inside the archive; its stem
            names every sidecar

    Returns:
        Ordered mapping from entry name to content

    Raises:
        UnknownReferenceSystemError: If no WKT is registered for the result's code
        ValueError: If the result has fewer than 3 control points to trace
    """
    raster_path = PurePath(raster_name)
    stem = raster_path.stem
    extent = compute_extent(result.width, result.height, result.params)

    entries: dict[str, bytes | str] = {
        raster_path.name: raster_bytes,
        f"{stem}{world_file_extension(raster_path.name)}": format_world_file(result.params),
        f"{stem}.prj": get_projection_wkt(result.crs_code),
        f"{stem}_gcps.txt": format_control_point_list(result.control_points),
        f"{stem}_boundary.geojson": to_geojson_text(
            gcp_boundary_geojson(result.control_points, {"crs": result.crs_code})
        ),
        f"{stem}_extent.geojson": to_geojson_text(
            extent_boundary_geojson(extent, {"crs": result.crs_code})
        ),
        f"{stem}_georef.json": json.dumps(result.to_dict(), indent=2),
    }
    return entries


def assemble_bundle(
    result: GeoreferenceResult,
    raster_bytes: bytes,
    raster_name: str = DEFAULT_RASTER_NAME,
) -> bytes:
    """Assemble the GIS bundle and return the zip archive bytes."""
    entries = bundle_entries(result, raster_bytes, raster_name)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            archive.writestr(name, content)

    logger.info(
        f"Assembled GIS bundle with {len(entries)} entries "
        f"({result.transformation_type.value}, {len(result.control_points)} GCPs)"
    )
    return buffer.getvalue()


def write_bundle(
    output: str | Path,
    result: GeoreferenceResult,
    raster_bytes: bytes,
    raster_name: str = DEFAULT_RASTER_NAME,
) -> Path:
    """Write the GIS bundle to ``output``.

    If ``output`` is an existing directory the archive is written inside it
    under :func:`bundle_filename`.

    Returns:
        Path of the written archive
    """
    path = Path(output)
    if path.is_dir():
        path = path / bundle_filename(result.transformation_type)
    path.write_bytes(assemble_bundle(result, raster_bytes, raster_name))
    logger.info(f"Wrote GIS bundle to {path}")
    return path
