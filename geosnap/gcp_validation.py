"""
Ground Control Point (GCP) validation module.

Provides validation functions for GCP records as produced by the detection
oracle or read from GCP files. Validates geographic coordinates, pixel
coordinates against the raster bounds, and detects duplicates.

A GCP record is a dictionary with the keys ``pixelX``, ``pixelY``, ``lat``
and ``lng`` plus optional ``id`` and ``label``.
"""

import logging
import math
import numbers
from typing import Any, Dict, List, Optional, Tuple

from geosnap.errors import ControlPointValidationError

logger = logging.getLogger(__name__)


# GCP validation constants
GPS_EPSILON = 1e-9  # Geographic coordinate comparison for duplicates (degrees)
PIXEL_EPSILON = 1e-6  # Pixel coordinate comparison for duplicates (pixels)
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MAX_GCP_COUNT = 1000  # Maximum number of GCPs to prevent O(n^2) duplicate scans
MAX_DESCRIPTION_LENGTH = 200  # Maximum length for description field in error messages
MAX_RASTER_DIMENSION = 100000

REQUIRED_FIELDS = ('pixelX', 'pixelY', 'lat', 'lng')


def _is_valid_finite_number(value: Any) -> bool:
    """Check if a value is a valid finite real number (int, float, or numpy numeric).

    Booleans are rejected even though Python treats them as integers.

    Args:
        value: Value to check

    Returns:
        True if value is a valid finite number, False otherwise
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Number):
        return False

    if isinstance(value, complex):
        return False

    try:
        if math.isnan(value) or math.isinf(value):
            return False
    except (TypeError, ValueError):
        return False

    return True


def _get_gcp_description(gcp: Dict[str, Any], index: int) -> str:
    """Get a sanitized description for a GCP for use in error messages.

    Args:
        gcp: Ground control point dictionary
        index: Index of the GCP in the list

    Returns:
        Sanitized description string
    """
    raw_description = gcp.get('id') or gcp.get('label') or f'index {index}'

    if not isinstance(raw_description, str):
        raw_description = str(raw_description)

    # Remove control characters and limit length
    sanitized = ''.join(
        char for char in raw_description
        if char.isprintable() or char == ' '
    )

    if len(sanitized) > MAX_DESCRIPTION_LENGTH:
        sanitized = sanitized[:MAX_DESCRIPTION_LENGTH] + '...'

    return sanitized


def _validate_numeric_field(
    value: Any,
    field_name: str,
    description: str,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    units: str = ""
) -> None:
    """Validate a numeric field with optional range checking.

    Args:
        value: Value to validate
        field_name: Name of the field for error messages
        description: GCP description for error messages
        min_value: Optional minimum allowed value (inclusive)
        max_value: Optional maximum allowed value (inclusive)
        units: Optional units string for error messages (e.g., "pixels")

    Raises:
        ControlPointValidationError: If value is invalid
    """
    if not _is_valid_finite_number(value):
        if isinstance(value, numbers.Number) and not isinstance(value, bool):
            raise ControlPointValidationError(
                f"GCP at {description}: {field_name} must be a finite number, "
                f"got {value} (NaN and Infinity are not allowed)"
            )
        raise ControlPointValidationError(
            f"GCP at {description}: {field_name} must be a number, "
            f"got {type(value).__name__}"
        )

    if min_value is not None and max_value is not None:
        if value < min_value or value > max_value:
            units_str = f" {units}" if units else ""
            raise ControlPointValidationError(
                f"GCP at {description}: {field_name} {value}{units_str} outside valid range "
                f"[{min_value}, {max_value}]"
            )


def validate_raster_dimension(dimension: Any, dimension_name: str) -> int:
    """Validate and normalize a raster dimension.

    Args:
        dimension: The dimension value to validate
        dimension_name: Name for error messages ('width' or 'height')

    Returns:
        Validated dimension as int

    Raises:
        ControlPointValidationError: If dimension is invalid
    """
    if not _is_valid_finite_number(dimension):
        raise ControlPointValidationError(
            f"Raster {dimension_name} must be a finite positive integer, got {dimension!r}"
        )

    dim_int = int(dimension)
    if dim_int != dimension:
        raise ControlPointValidationError(
            f"Raster {dimension_name} must be a whole number of pixels, got {dimension}"
        )

    if dim_int <= 0:
        raise ControlPointValidationError(
            f"Raster {dimension_name} must be positive, got {dim_int}"
        )

    if dim_int > MAX_RASTER_DIMENSION:
        raise ControlPointValidationError(
            f"Raster {dimension_name} {dim_int} exceeds maximum allowed value of "
            f"{MAX_RASTER_DIMENSION}"
        )

    return dim_int


def validate_gcp_geographic_coordinates(gcp: Dict[str, Any], index: int) -> None:
    """Validate the geographic coordinates of a ground control point.

    Args:
        gcp: Ground control point dictionary
        index: Index of the GCP in the list (for error messages)

    Raises:
        ControlPointValidationError: If lat or lng is missing or invalid
    """
    description = _get_gcp_description(gcp, index)

    for field_name, min_value, max_value in (
        ('lat', MIN_LATITUDE, MAX_LATITUDE),
        ('lng', MIN_LONGITUDE, MAX_LONGITUDE),
    ):
        if field_name not in gcp:
            raise ControlPointValidationError(
                f"GCP at {description} missing required '{field_name}' field"
            )
        _validate_numeric_field(
            gcp[field_name], field_name, description,
            min_value=min_value, max_value=max_value, units='degrees'
        )


def validate_gcp_pixel_coordinates(
    gcp: Dict[str, Any],
    index: int,
    raster_width: Optional[int] = None,
    raster_height: Optional[int] = None
) -> None:
    """Validate pixel coordinates of a ground control point.

    Pixel coordinates are continuous positions, so the far raster edges are
    valid: a grid intersection can sit exactly on ``x == width``.

    Args:
        gcp: Ground control point dictionary
        index: Index of the GCP in the list (for error messages)
        raster_width: Optional raster width in pixels for bounds checking
        raster_height: Optional raster height in pixels for bounds checking

    Raises:
        ControlPointValidationError: If pixel coordinates are invalid
    """
    description = _get_gcp_description(gcp, index)

    for field_name, limit in (('pixelX', raster_width), ('pixelY', raster_height)):
        if field_name not in gcp:
            raise ControlPointValidationError(
                f"GCP at {description} missing required '{field_name}' field"
            )
        value = gcp[field_name]
        if limit is None:
            _validate_numeric_field(value, field_name, description)
        else:
            _validate_numeric_field(
                value, field_name, description,
                min_value=0, max_value=limit, units='pixels'
            )


def detect_duplicate_gcps(
    gcps: List[Dict[str, Any]],
    gps_epsilon: float = GPS_EPSILON,
    pixel_epsilon: float = PIXEL_EPSILON
) -> None:
    """Detect duplicate ground control points.

    Two GCPs are considered duplicates if BOTH their geographic and pixel
    coordinates are within epsilon thresholds of each other. GCPs that share
    only a pixel position are left for the fitter, which reports them as a
    degenerate system when they leave too few distinct positions.

    Args:
        gcps: List of ground control points (must be pre-validated)
        gps_epsilon: Epsilon threshold for geographic comparison (degrees)
        pixel_epsilon: Epsilon threshold for pixel comparison (pixels)

    Raises:
        ControlPointValidationError: If duplicate GCPs are detected
    """
    coords: List[Tuple[float, float, float, float, str]] = [
        (gcp['lat'], gcp['lng'], gcp['pixelX'], gcp['pixelY'], _get_gcp_description(gcp, i))
        for i, gcp in enumerate(gcps)
    ]

    for i in range(len(coords)):
        lat_i, lng_i, x_i, y_i, desc_i = coords[i]

        for j in range(i + 1, len(coords)):
            lat_j, lng_j, x_j, y_j, desc_j = coords[j]

            geo_duplicate = (
                abs(lat_i - lat_j) < gps_epsilon and
                abs(lng_i - lng_j) < gps_epsilon
            )
            pixel_duplicate = (
                abs(x_i - x_j) < pixel_epsilon and
                abs(y_i - y_j) < pixel_epsilon
            )

            if geo_duplicate and pixel_duplicate:
                raise ControlPointValidationError(
                    f"Duplicate GCP detected at {desc_i} and {desc_j} "
                    f"(geographic coordinates within {gps_epsilon} degrees and "
                    f"pixel coordinates within {pixel_epsilon} pixels)"
                )


def validate_control_point_records(
    gcps: Any,
    raster_width: Optional[int] = None,
    raster_height: Optional[int] = None,
    min_gcp_count: int = 3
) -> List[Dict[str, Any]]:
    """Validate a list of GCP records.

    Args:
        gcps: List of GCP dictionaries
        raster_width: Optional raster width for pixel bounds validation
        raster_height: Optional raster height for pixel bounds validation
        min_gcp_count: Minimum recommended number of GCPs (default: 3)

    Returns:
        The validated list of GCP dictionaries

    Raises:
        ControlPointValidationError: If GCPs fail validation
    """
    if not isinstance(gcps, list):
        raise ControlPointValidationError(
            f"Control points must be a list, got {type(gcps).__name__}"
        )

    if len(gcps) > MAX_GCP_COUNT:
        raise ControlPointValidationError(
            f"Too many GCPs provided: {len(gcps)}. "
            f"Maximum allowed is {MAX_GCP_COUNT}"
        )

    if len(gcps) < min_gcp_count:
        logger.warning(
            f"Only {len(gcps)} GCPs provided, at least {min_gcp_count} "
            f"non-collinear points are needed for a stable affine fit"
        )

    if raster_width is None or raster_height is None:
        logger.debug("Raster dimensions not provided, skipping pixel bounds validation")

    for i, gcp in enumerate(gcps):
        if not isinstance(gcp, dict):
            raise ControlPointValidationError(
                f"GCP at index {i} must be a dictionary, got {type(gcp).__name__}"
            )
        validate_gcp_pixel_coordinates(gcp, i, raster_width, raster_height)
        validate_gcp_geographic_coordinates(gcp, i)

    if len(gcps) > 1:
        detect_duplicate_gcps(gcps)

    logger.debug(f"Validated {len(gcps)} ground control points")

    return gcps
