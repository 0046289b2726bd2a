"""
End-to-end georeferencing: control points in, GeoreferenceResult out.

Either a complete result is returned or an exception from
:mod:`geosnap.errors` is raised; there is no partially populated result.
"""

from __future__ import annotations

import logging
from typing import Iterable

from geosnap.affine_fitter import fit_affine
from geosnap.control_points import ControlPoint, ControlPointSet
from geosnap.errors import UnsupportedTransformationError
from geosnap.helmert import derive_helmert
from geosnap.oracle import DetectionOracle
from geosnap.projection import DEFAULT_CRS_CODE, DEFAULT_PROJECTION_NAME, normalize_code
from geosnap.transformation import GeoreferenceResult, TransformationType

logger = logging.getLogger(__name__)


def georeference(
    points: Iterable[ControlPoint] | ControlPointSet,
    width: int,
    height: int,
    transformation_type: TransformationType | str = TransformationType.AFFINE,
    crs_code: str = DEFAULT_CRS_CODE,
    projection_name: str = DEFAULT_PROJECTION_NAME,
    description: str | None = None,
) -> GeoreferenceResult:
    """Fit a transformation for one raster.

    Args:
        points: Control points for the raster
        width: Raster width in pixels
        height: Raster height in pixels
        transformation_type: AFFINE or HELMERT
        crs_code: Reference-system code of the control points' lat/lng
        projection_name: Name of that reference system
        description: Optional description stored on the result

    Returns:
        New GeoreferenceResult

    Raises:
        ControlPointValidationError: If the points are invalid for the raster
        InsufficientPointsError: If fewer than 2 points are given
        DegenerateSystemError: If the pixel positions are collinear or coincident
        UnsupportedTransformationError: If PROJECTIVE is requested
    """
    transformation_type = TransformationType.parse(transformation_type)
    if transformation_type is TransformationType.PROJECTIVE:
        raise UnsupportedTransformationError(
            "PROJECTIVE transformations are not supported; use AFFINE or HELMERT"
        )

    if isinstance(points, ControlPointSet):
        if (points.width, points.height) != (width, height):
            raise ValueError(
                f"Control point set is for a {points.width}x{points.height} raster, "
                f"not {width}x{height}"
            )
        point_set = points
    else:
        point_set = ControlPointSet.create(points, width, height)

    fit = fit_affine(point_set.points)
    params = fit.params
    if transformation_type is TransformationType.HELMERT:
        params = derive_helmert(params)

    result = GeoreferenceResult(
        control_points=point_set.points,
        params=params,
        transformation_type=transformation_type,
        width=point_set.width,
        height=point_set.height,
        crs_code=normalize_code(crs_code),
        projection_name=projection_name,
        rms_lng=fit.rms_lng,
        rms_lat=fit.rms_lat,
        description=description,
    )

    logger.info(
        f"Georeferenced {width}x{height} raster with {len(point_set)} GCPs "
        f"({transformation_type.value}, {result.crs_code})"
    )
    return result


def detect_and_georeference(
    oracle: DetectionOracle,
    image_bytes: bytes,
    mime_type: str,
    width: int,
    height: int,
    transformation_type: TransformationType | str = TransformationType.AFFINE,
) -> GeoreferenceResult:
    """Detect control points with ``oracle`` and fit a transformation.

    The oracle is called once. If it fails, OracleError propagates and no
    fit is attempted.
    """
    detection = oracle.detect(image_bytes, mime_type)
    return georeference(
        detection.control_points,
        width,
        height,
        transformation_type=transformation_type,
        crs_code=detection.crs_code,
        projection_name=detection.projection,
    )
