"""Loading and saving control point files (YAML or JSON)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from geosnap.control_points import ControlPointSet
from geosnap.errors import ControlPointValidationError


def _extract_records(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("controlPoints", "control_points", "gcps"):
            if key in data:
                return data[key]
    raise ControlPointValidationError(
        "Control point file must be a list or contain a 'controlPoints' list"
    )


def load_control_point_file(
    path: str | Path, width: int | None = None, height: int | None = None
) -> ControlPointSet:
    """Load control points from a YAML or JSON file.

    The file is either a bare list of points or a mapping with a
    ``controlPoints`` (or ``control_points``/``gcps``) list and optional
    ``width``/``height``. Explicit ``width``/``height`` arguments take
    precedence over the values in the file.

    Example file:
        width: 2000
        height: 1500
        controlPoints:
          - {pixelX: 120.0, pixelY: 95.5, lat: 33.8, lng: -7.25}
          - {pixelX: 1880.0, pixelY: 97.0, lat: 33.8, lng: -7.0}

    Raises:
        FileNotFoundError: If the file does not exist
        ControlPointValidationError: If the points or dimensions are invalid
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Control point file not found: {path}")

    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ControlPointValidationError(f"Failed to parse control point file: {e}") from e

    records = _extract_records(data)
    if isinstance(data, dict):
        width = width if width is not None else data.get("width")
        height = height if height is not None else data.get("height")

    if width is None or height is None:
        raise ControlPointValidationError(
            "Raster width and height are required (in the file or as arguments)"
        )

    return ControlPointSet.from_records(records, width, height)


def save_control_point_file(path: str | Path, point_set: ControlPointSet) -> None:
    """Save a control point set as JSON (``.json``) or YAML (any other suffix)."""
    file_path = Path(path)
    data = point_set.to_dict()
    if file_path.suffix.lower() == ".json":
        file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    else:
        file_path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
