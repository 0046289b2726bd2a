"""
Helmert (similarity) approximation of a fitted affine transform.

The similarity is derived from an affine fit rather than fitted directly:
the two column scales and the two rotation estimates of the affine are
averaged::

    scale = (sqrt(A² + D²) + sqrt(B² + E²)) / 2
    angle = (atan2(D, A) + atan2(-B, E)) / 2

    A' = scale*cos(angle)    B' = -scale*sin(angle)
    D' = scale*sin(angle)    E' =  scale*cos(angle)

Translation (C, F) is passed through unchanged.

Known limitations:
    - This is not a constrained least-squares Helmert fit; residuals of the
      result are not minimised.
    - Rasters whose rows run north to south (A > 0, E < 0) are a reflection
      of a similarity, not a rotation of one. The two angle estimates then
      differ by roughly 180° and their average is not meaningful; use the
      AFFINE model for such rasters.
"""

import math

from geosnap.transformation import TransformationParams
from geosnap.types import Radians, Unitless


def similarity_components(params: TransformationParams) -> tuple[Unitless, Radians]:
    """Return the averaged ``(scale, angle)`` of an affine transform."""
    scale = (math.hypot(params.A, params.D) + math.hypot(params.B, params.E)) / 2
    angle = (math.atan2(params.D, params.A) + math.atan2(-params.B, params.E)) / 2
    return Unitless(scale), Radians(angle)


def derive_helmert(params: TransformationParams) -> TransformationParams:
    """Derive the four-parameter similarity approximation of ``params``.

    Args:
        params: Fitted affine parameters

    Returns:
        New TransformationParams with uniform scale and rotation
    """
    scale, angle = similarity_components(params)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return TransformationParams(
        A=scale * cos_a,
        B=-scale * sin_a,
        C=params.C,
        D=scale * sin_a,
        E=scale * cos_a,
        F=params.F,
    )


def similarity_params(
    scale: float, angle: float, tx: float, ty: float
) -> TransformationParams:
    """Build the exact similarity ``scale·R(angle) + (tx, ty)``."""
    return TransformationParams(
        A=scale * math.cos(angle),
        B=-scale * math.sin(angle),
        C=tx,
        D=scale * math.sin(angle),
        E=scale * math.cos(angle),
        F=ty,
    )
