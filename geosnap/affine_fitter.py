"""
Least-squares affine fit from pixel coordinates to geographic coordinates.

Each geographic axis is fitted independently as an affine function of
``(pixel_x, pixel_y, 1)``::

    lng = A*x + B*y + C
    lat = D*x + E*y + F

For an observation vector ``o`` the 3x3 normal equations

    [Σx²   Σxy   Σx ]   [a]   [Σo·x]
    [Σxy   Σy²   Σy ] · [b] = [Σo·y]
    [Σx    Σy    N  ]   [c]   [Σo  ]

are solved by Cramer's rule. Three non-collinear points give an exact
solution; four or more give the ordinary least-squares solution.

A near-singular system (all pixel positions collinear or coincident) is
reported as DegenerateSystemError; the fitter never returns placeholder
zero coefficients. Two checks apply: the absolute ``|det| < 1e-12`` test on
the normal matrix, and a scale-free test on the centred pixel scatter, since
rounding leaves a nonzero determinant for collinear fractional pixels.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from geosnap.control_points import ControlPoint
from geosnap.errors import DegenerateSystemError, InsufficientPointsError
from geosnap.transformation import AffineFit, TransformationParams

logger = logging.getLogger(__name__)

MIN_POINTS = 2
DETERMINANT_EPSILON = 1e-12
# det / trace² of the centred scatter approximates minor/major eigenvalue ratio
COLLINEARITY_EPSILON = 1e-9


def _det3(m: Tuple[Tuple[float, float, float], ...]) -> float:
    """Determinant of a 3x3 matrix by cofactor expansion along the first row."""
    return (
        m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
        - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
        + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
    )


def _replace_column(
    m: Tuple[Tuple[float, float, float], ...],
    column: int,
    values: Tuple[float, float, float],
) -> Tuple[Tuple[float, float, float], ...]:
    return tuple(
        tuple(values[row] if col == column else m[row][col] for col in range(3))
        for row in range(3)
    )


def normal_matrix(px: np.ndarray, py: np.ndarray) -> Tuple[Tuple[float, float, float], ...]:
    """Build the 3x3 normal-equation matrix for design columns ``(px, py, 1)``."""
    n = float(len(px))
    sx = float(np.sum(px))
    sy = float(np.sum(py))
    sxx = float(np.sum(px * px))
    syy = float(np.sum(py * py))
    sxy = float(np.sum(px * py))
    return (
        (sxx, sxy, sx),
        (sxy, syy, sy),
        (sx, sy, n),
    )


def check_pixel_geometry(px: np.ndarray, py: np.ndarray) -> None:
    """Raise DegenerateSystemError if the pixel positions span no area.

    Uses the 2x2 scatter matrix of the mean-centred positions. Its
    determinant over its squared trace is zero for collinear or coincident
    points and is unaffected by translating or scaling the pixel grid.
    """
    dx = px - np.mean(px)
    dy = py - np.mean(py)
    sxx = float(np.sum(dx * dx))
    syy = float(np.sum(dy * dy))
    sxy = float(np.sum(dx * dy))

    spread = sxx + syy
    det = sxx * syy - sxy * sxy
    if det <= COLLINEARITY_EPSILON * spread * spread:
        raise DegenerateSystemError(
            f"Pixel scatter is singular (det={det:.3e}, trace={spread:.3e}): "
            f"control point pixel positions are collinear or coincident"
        )


def solve_axis(
    observations: np.ndarray,
    px: np.ndarray,
    py: np.ndarray,
    axis_name: str = "observation",
) -> Tuple[float, float, float]:
    """Solve ``o ≈ a*px + b*py + c`` by Cramer's rule on the normal equations.

    Args:
        observations: Observed values (longitudes or latitudes)
        px: Pixel x coordinates, same length as observations
        py: Pixel y coordinates, same length as observations
        axis_name: Name used in error messages

    Returns:
        Tuple ``(a, b, c)``

    Raises:
        DegenerateSystemError: If ``|det| < DETERMINANT_EPSILON``
    """
    m = normal_matrix(px, py)
    rhs = (
        float(np.sum(observations * px)),
        float(np.sum(observations * py)),
        float(np.sum(observations)),
    )

    det = _det3(m)
    if abs(det) < DETERMINANT_EPSILON:
        raise DegenerateSystemError(
            f"Normal equations for {axis_name} are singular (det={det:.3e}): "
            f"control point pixel positions are collinear or coincident"
        )

    a = _det3(_replace_column(m, 0, rhs)) / det
    b = _det3(_replace_column(m, 1, rhs)) / det
    c = _det3(_replace_column(m, 2, rhs)) / det
    return a, b, c


def fit_affine(points: Sequence[ControlPoint]) -> AffineFit:
    """Fit the six-parameter affine map pixel -> (lng, lat).

    Args:
        points: Control points (a ControlPointSet or any sequence of ControlPoint)

    Returns:
        AffineFit with coefficients and per-point residuals

    Raises:
        InsufficientPointsError: If fewer than 2 points are given
        DegenerateSystemError: If the pixel positions cannot determine an affine map

    Example:
        >>> fit = fit_affine([
        ...     ControlPoint("a", 0, 0, lat=34.0, lng=-7.0),
        ...     ControlPoint("b", 100, 0, lat=34.0, lng=-6.9),
        ...     ControlPoint("c", 0, 100, lat=33.9, lng=-7.0),
        ... ])
        >>> round(fit.params.A, 6), round(fit.params.E, 6)
        (0.001, -0.001)
    """
    points = list(points)
    if len(points) < MIN_POINTS:
        raise InsufficientPointsError(
            f"Need at least {MIN_POINTS} control points to fit an affine transform, "
            f"got {len(points)}"
        )

    px = np.array([p.pixel_x for p in points], dtype=np.float64)
    py = np.array([p.pixel_y for p in points], dtype=np.float64)
    lngs = np.array([p.lng for p in points], dtype=np.float64)
    lats = np.array([p.lat for p in points], dtype=np.float64)

    check_pixel_geometry(px, py)
    A, B, C = solve_axis(lngs, px, py, axis_name="longitude")
    D, E, F = solve_axis(lats, px, py, axis_name="latitude")
    params = TransformationParams(A=A, B=B, C=C, D=D, E=E, F=F)

    res_lng = lngs - (A * px + B * py + C)
    res_lat = lats - (D * px + E * py + F)
    rms_lng = float(np.sqrt(np.mean(res_lng ** 2)))
    rms_lat = float(np.sqrt(np.mean(res_lat ** 2)))

    logger.debug(
        f"Affine fit on {len(points)} points: RMS residual "
        f"lng={rms_lng:.3e}°, lat={rms_lat:.3e}°"
    )

    return AffineFit(
        params=params,
        residuals=tuple((float(rx), float(ry)) for rx, ry in zip(res_lng, res_lat)),
        rms_lng=rms_lng,
        rms_lat=rms_lat,
    )
