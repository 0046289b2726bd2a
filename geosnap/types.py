"""
Unit type annotations for georeferencing parameters.

NewType aliases used across the geosnap codebase to document which numbers
are image-space pixels and which are geographic degrees. They cost nothing
at runtime and let static checkers flag a latitude passed where a pixel
coordinate is expected.

Usage Example:
    >>> from geosnap.types import Degrees, PixelsFloat
    >>>
    >>> def to_geo(px: PixelsFloat, py: PixelsFloat) -> tuple[Degrees, Degrees]:
    ...     pass
"""

from typing import NewType

# Angular units
Degrees = NewType('Degrees', float)
"""Angle or geographic coordinate in decimal degrees (latitude, longitude)"""

Radians = NewType('Radians', float)
"""Angle in radians (e.g., Helmert rotation angle)"""

# Image coordinate units
Pixels = NewType('Pixels', int)
"""Raster dimensions in pixels (width, height)"""

PixelsFloat = NewType('PixelsFloat', float)
"""Floating-point image coordinates in pixels (subpixel GCP positions)"""

# Dimensionless quantities
Unitless = NewType('Unitless', float)
"""Dimensionless scalar (e.g., Helmert scale in degrees per pixel ratio)"""
