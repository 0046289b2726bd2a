"""Control point and control point set representations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Sequence

import numpy as np

from geosnap.errors import ControlPointValidationError
from geosnap.gcp_validation import (
    validate_control_point_records,
    validate_raster_dimension,
)
from geosnap.types import Degrees, Pixels, PixelsFloat

logger = logging.getLogger(__name__)

GCP_ID_PREFIX = "GCP-"


def synthetic_gcp_id(index: int) -> str:
    """Return the sequential identifier for the zero-based ``index`` (``GCP-1``, ...)."""
    return f"{GCP_ID_PREFIX}{index + 1}"


@dataclass(frozen=True)
class ControlPoint:
    """A correspondence between a raster pixel and a geographic coordinate.

    Attributes:
        id: Unique identifier within a set (e.g., "GCP-1").
        pixel_x: Pixel column, origin at the top-left corner.
        pixel_y: Pixel row, increasing downward.
        lat: Latitude in decimal degrees of the source reference system.
        lng: Longitude in decimal degrees of the source reference system.
        label: Optional free-text label (e.g., "7°15'W / 33°48'N").
    """

    id: str
    pixel_x: PixelsFloat
    pixel_y: PixelsFloat
    lat: Degrees
    lng: Degrees
    label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary using the detection-oracle field names.

        Returns:
            Dictionary with id, pixelX, pixelY, lat, lng and (if set) label keys.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "pixelX": self.pixel_x,
            "pixelY": self.pixel_y,
            "lat": self.lat,
            "lng": self.lng,
        }
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_id: str | None = None) -> ControlPoint:
        """Create a ControlPoint from a dictionary.

        Args:
            data: Dictionary with pixelX, pixelY, lat, lng and optional id/label.
            default_id: Identifier used when ``data`` carries none.

        Returns:
            New ControlPoint instance.

        Raises:
            ControlPointValidationError: If no id is available.
            KeyError: If coordinate keys are missing.
        """
        point_id = data.get("id", default_id)
        if point_id is None:
            raise ControlPointValidationError("Control point has no 'id' and no default was given")
        label = data.get("label")
        return cls(
            id=str(point_id),
            pixel_x=PixelsFloat(float(data["pixelX"])),
            pixel_y=PixelsFloat(float(data["pixelY"])),
            lat=Degrees(float(data["lat"])),
            lng=Degrees(float(data["lng"])),
            label=str(label) if label is not None else None,
        )


@dataclass(frozen=True)
class ControlPointSet:
    """Validated, ordered, immutable collection of control points for one raster.

    Use :meth:`create` or :meth:`from_records` rather than the constructor;
    they run the field validation and ensure identifiers are unique.

    Attributes:
        points: Control points in input order.
        width: Raster width in pixels.
        height: Raster height in pixels.
    """

    points: tuple[ControlPoint, ...]
    width: Pixels
    height: Pixels
    _ids: frozenset[str] = field(default=frozenset(), repr=False, compare=False)

    @classmethod
    def create(cls, points: Iterable[ControlPoint], width: int, height: int) -> ControlPointSet:
        """Validate control points against the raster and build a set.

        Args:
            points: Control points, in the order they should be kept.
            width: Raster width in pixels.
            height: Raster height in pixels.

        Returns:
            New ControlPointSet.

        Raises:
            ControlPointValidationError: If any point or dimension is invalid
                or identifiers are not unique.
        """
        point_tuple = tuple(points)
        validated_width = validate_raster_dimension(width, "width")
        validated_height = validate_raster_dimension(height, "height")
        validate_control_point_records(
            [p.to_dict() for p in point_tuple],
            raster_width=validated_width,
            raster_height=validated_height,
        )

        ids = [p.id for p in point_tuple]
        seen: set[str] = set()
        for point_id in ids:
            if point_id in seen:
                raise ControlPointValidationError(f"Duplicate control point id '{point_id}'")
            seen.add(point_id)

        return cls(
            points=point_tuple,
            width=Pixels(validated_width),
            height=Pixels(validated_height),
            _ids=frozenset(ids),
        )

    @classmethod
    def from_records(
        cls, records: Sequence[dict[str, Any]], width: int, height: int
    ) -> ControlPointSet:
        """Build a set from GCP dictionaries, assigning ``GCP-n`` ids where missing.

        Raises:
            ControlPointValidationError: If any record is invalid.
        """
        validate_control_point_records(
            list(records), raster_width=width, raster_height=height
        )
        points = [
            ControlPoint.from_dict(record, default_id=synthetic_gcp_id(i))
            for i, record in enumerate(records)
        ]
        return cls.create(points, width, height)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[ControlPoint]:
        return iter(self.points)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._ids

    def get(self, point_id: str) -> ControlPoint:
        """Return the control point with ``point_id``.

        Raises:
            KeyError: If no point has that id.
        """
        for point in self.points:
            if point.id == point_id:
                return point
        raise KeyError(point_id)

    def pixel_array(self) -> np.ndarray:
        """Return an (N, 2) array of ``(pixel_x, pixel_y)``."""
        return np.array([[p.pixel_x, p.pixel_y] for p in self.points], dtype=np.float64).reshape(-1, 2)

    def geographic_array(self) -> np.ndarray:
        """Return an (N, 2) array of ``(lng, lat)``."""
        return np.array([[p.lng, p.lat] for p in self.points], dtype=np.float64).reshape(-1, 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON/YAML serialization."""
        return {
            "width": self.width,
            "height": self.height,
            "controlPoints": [p.to_dict() for p in self.points],
        }
