"""
World file (``.jgw`` / ``.pgw`` / ``.tfw`` / ``.wld``) serialization.

A world file is six lines, one number per line, in the fixed order::

    A   x-scale
    D   y-rotation
    B   x-rotation
    E   y-scale
    C   x-translation
    F   y-translation

Raster georeferencing consumers read the lines positionally, so the order
must not change.
"""

from pathlib import PurePath

import numpy as np

from geosnap.transformation import TransformationParams

WORLD_FILE_ORDER = ("A", "D", "B", "E", "C", "F")

_EXTENSIONS = {
    ".jpg": ".jgw",
    ".jpeg": ".jgw",
    ".png": ".pgw",
    ".tif": ".tfw",
    ".tiff": ".tfw",
    ".gif": ".gfw",
    ".bmp": ".bpw",
}
DEFAULT_EXTENSION = ".wld"


def _format_value(value: float) -> str:
    return np.format_float_positional(float(value), unique=True, trim="-")


def format_world_file(params: TransformationParams) -> str:
    """Serialize parameters as world file text.

    Numbers are written in plain positional notation (no exponent) with the
    shortest digits that parse back to the identical float.
    """
    return "\n".join(_format_value(getattr(params, name)) for name in WORLD_FILE_ORDER) + "\n"


def parse_world_file(text: str) -> TransformationParams:
    """Parse world file text back into parameters.

    Blank lines are ignored.

    Raises:
        ValueError: If the text does not hold exactly six numbers
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) != 6:
        raise ValueError(f"World file must contain exactly 6 values, got {len(lines)}")

    try:
        values = [float(line) for line in lines]
    except ValueError as e:
        raise ValueError(f"World file contains a non-numeric line: {e}") from e

    return TransformationParams(**dict(zip(WORLD_FILE_ORDER, values)))


def world_file_extension(raster_name: str) -> str:
    """Return the conventional world file extension for a raster file name.

    >>> world_file_extension("raster_map.jpg")
    '.jgw'
    >>> world_file_extension("scan.jp2")
    '.wld'
    """
    return _EXTENSIONS.get(PurePath(raster_name).suffix.lower(), DEFAULT_EXTENSION)
