"""
Transformation parameters and georeferencing results.

Coordinate Systems:
    - Pixel coordinates: (x, y), origin at the top-left of the raster,
      y increasing downward
    - Geographic coordinates: (X, Y) = (longitude, latitude) in decimal
      degrees of the source reference system

The six-parameter map used throughout the package is::

    X = A*x + B*y + C
    Y = D*x + E*y + F

which is the GDAL GeoTransform ``(C, A, B, F, D, E)`` written in world-file
naming.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from geosnap.control_points import ControlPoint
from geosnap.types import Degrees, Pixels

# Type alias for the 6-parameter GDAL geotransform
Geotransform = tuple[float, float, float, float, float, float]


class TransformationType(Enum):
    """Enumeration of transformation models a fit can be requested with."""

    AFFINE = "AFFINE"
    """Six-parameter least-squares affine (scale, rotation and shear per axis)."""

    HELMERT = "HELMERT"
    """Four-parameter similarity (uniform scale, rotation, translation)
    approximated from the fitted affine."""

    PROJECTIVE = "PROJECTIVE"
    """Declared for compatibility with existing bundles; has no fitting
    implementation and is rejected at fit time."""

    @classmethod
    def parse(cls, value: str | TransformationType) -> TransformationType:
        """Parse a case-insensitive name into a TransformationType.

        Raises:
            ValueError: If value is not a valid transformation type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = [t.value for t in cls]
            raise ValueError(
                f"Invalid transformation type '{value}'. Must be one of: {', '.join(valid)}"
            ) from None


@dataclass(frozen=True)
class TransformationParams:
    """Pixel to geographic affine coefficients.

    Attributes:
        A: x-scale (longitude change per pixel column)
        B: x-rotation (longitude change per pixel row)
        C: x-translation (longitude of pixel (0, 0))
        D: y-rotation (latitude change per pixel column)
        E: y-scale (latitude change per pixel row, usually negative)
        F: y-translation (latitude of pixel (0, 0))
    """

    A: float
    B: float
    C: float
    D: float
    E: float
    F: float

    def apply(self, x: float, y: float) -> tuple[Degrees, Degrees]:
        """Map a pixel position to ``(lng, lat)``."""
        return (
            Degrees(self.A * x + self.B * y + self.C),
            Degrees(self.D * x + self.E * y + self.F),
        )

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        """Return ``(A, B, C, D, E, F)``."""
        return (self.A, self.B, self.C, self.D, self.E, self.F)

    def to_geotransform(self) -> Geotransform:
        """Return the equivalent GDAL GeoTransform ``(C, A, B, F, D, E)``."""
        return (self.C, self.A, self.B, self.F, self.D, self.E)

    @classmethod
    def from_geotransform(cls, gt: Geotransform) -> TransformationParams:
        """Build parameters from a GDAL GeoTransform.

        Raises:
            ValueError: If gt does not have exactly 6 elements
        """
        if len(gt) != 6:
            raise ValueError(f"geotransform must have exactly 6 elements, got {len(gt)}")
        return cls(A=gt[1], B=gt[2], C=gt[0], D=gt[4], E=gt[5], F=gt[3])

    def to_dict(self) -> dict[str, float]:
        return {"A": self.A, "B": self.B, "C": self.C, "D": self.D, "E": self.E, "F": self.F}


@dataclass(frozen=True)
class AffineFit:
    """Fitted affine parameters with their residuals.

    Attributes:
        params: Fitted coefficients.
        residuals: Per-point ``(lng_residual, lat_residual)`` in degrees,
            observed minus predicted, in control point order.
        rms_lng: Root-mean-square longitude residual in degrees.
        rms_lat: Root-mean-square latitude residual in degrees.
    """

    params: TransformationParams
    residuals: tuple[tuple[float, float], ...]
    rms_lng: float
    rms_lat: float


@dataclass(frozen=True)
class GeoreferenceResult:
    """Immutable snapshot of one georeferencing fit.

    A new fit always produces a new result; results are never updated in place.

    Attributes:
        control_points: Control points the fit used, in input order.
        params: Fitted (or Helmert-derived) transformation parameters.
        transformation_type: Model that produced ``params``.
        width: Raster width in pixels.
        height: Raster height in pixels.
        crs_code: Reference-system code of the geographic coordinates (e.g., "EPSG:6261").
        projection_name: Human-readable reference-system name (e.g., "Merchich").
        rms_lng: RMS longitude residual of the affine fit, in degrees.
        rms_lat: RMS latitude residual of the affine fit, in degrees.
        description: Optional free-text description.
    """

    control_points: tuple[ControlPoint, ...]
    params: TransformationParams
    transformation_type: TransformationType
    width: Pixels
    height: Pixels
    crs_code: str
    projection_name: str
    rms_lng: float = 0.0
    rms_lat: float = 0.0
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON reports."""
        return {
            "controlPoints": [p.to_dict() for p in self.control_points],
            "projection": self.projection_name,
            "epsg": self.crs_code,
            "metadata": {
                "width": self.width,
                "height": self.height,
                "description": self.description,
            },
            "transformation": self.params.to_dict(),
            "transformationType": self.transformation_type.value,
            "residuals": {"rms_lng": self.rms_lng, "rms_lat": self.rms_lat},
        }
