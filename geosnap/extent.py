"""
Geographic extent of a georeferenced raster.

The four raster corners are pushed through the affine map and the extent is
the componentwise min/max over all four. Using only the top-left and
bottom-right corners is wrong as soon as the map rotates, shears or flips an
axis, since any corner can then land on any edge of the bounding box.

Reprojection of the extent into a display reference system is delegated to
pyproj.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from geosnap.errors import ReprojectionError
from geosnap.projection import normalize_code, resolve_crs_input
from geosnap.transformation import TransformationParams
from geosnap.types import Degrees

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_CRS = "EPSG:3857"
DENSIFY_POINTS = 21


@dataclass(frozen=True)
class Extent:
    """Axis-aligned bounding box ``(min_x, min_y, max_x, max_y)``.

    For geographic reference systems x is longitude and y is latitude.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        """Validate ordering of the bounds."""
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(
                f"Extent bounds out of order: ({self.min_x}, {self.min_y}, "
                f"{self.max_x}, {self.max_y})"
            )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def to_polygon(self) -> list[tuple[float, float]]:
        """Return the closed counter-clockwise ring of the box (first vertex repeated)."""
        ring = [
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        ]
        ring.append(ring[0])
        return ring


def raster_corners(
    width: int, height: int, params: TransformationParams
) -> list[tuple[Degrees, Degrees]]:
    """Map the raster corners (0,0), (W,0), (W,H), (0,H) through ``params``."""
    return [
        params.apply(0, 0),
        params.apply(width, 0),
        params.apply(width, height),
        params.apply(0, height),
    ]


def compute_extent(width: int, height: int, params: TransformationParams) -> Extent:
    """Compute the bounding box of the raster in the source reference system.

    Args:
        width: Raster width in pixels
        height: Raster height in pixels
        params: Pixel to geographic transformation

    Returns:
        Extent with ``min <= max`` on both axes
    """
    corners = raster_corners(width, height, params)
    xs = [x for x, _ in corners]
    ys = [y for _, y in corners]
    return Extent(min(xs), min(ys), max(xs), max(ys))


def reproject_extent(extent: Extent, source_code: str, target_code: str) -> Extent:
    """Reproject an extent between reference systems.

    The box edges are densified before transforming so that curved edges in
    the target system are still enclosed.

    Args:
        extent: Extent in the source reference system
        source_code: Source reference-system code (e.g., "EPSG:6261")
        target_code: Target reference-system code (e.g., "EPSG:3857")

    Returns:
        Extent in the target reference system

    Raises:
        ReprojectionError: If either code is unknown to pyproj or the
            transformation fails or yields non-finite bounds
    """
    if normalize_code(source_code) == normalize_code(target_code):
        return extent

    try:
        source_crs = CRS.from_user_input(resolve_crs_input(source_code))
        target_crs = CRS.from_user_input(resolve_crs_input(target_code))
        transformer = Transformer.from_crs(source_crs, target_crs, always_xy=True)
        bounds = transformer.transform_bounds(
            *extent.as_tuple(), densify_pts=DENSIFY_POINTS
        )
    except (CRSError, ProjError) as e:
        raise ReprojectionError(
            f"Failed to reproject extent from {source_code} to {target_code}: {e}"
        ) from e

    if not all(math.isfinite(v) for v in bounds):
        raise ReprojectionError(
            f"Reprojection from {source_code} to {target_code} produced "
            f"non-finite bounds {bounds}"
        )

    min_x, min_y, max_x, max_y = bounds
    logger.debug(
        f"Reprojected extent {extent.as_tuple()} ({source_code}) -> "
        f"{bounds} ({target_code})"
    )
    return Extent(min(min_x, max_x), min(min_y, max_y), max(min_x, max_x), max(min_y, max_y))


def compute_display_extent(
    width: int,
    height: int,
    params: TransformationParams,
    source_code: str,
    target_code: str = DEFAULT_DISPLAY_CRS,
) -> Extent:
    """Compute the raster extent and reproject it into the display reference system."""
    return reproject_extent(compute_extent(width, height, params), source_code, target_code)
