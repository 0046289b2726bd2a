"""Raster image loading for detection and bundling."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

from geosnap.types import Pixels


@dataclass(frozen=True)
class RasterImage:
    """Encoded raster with its decoded dimensions.

    Attributes:
        name: File name (used for the bundle entry and world file extension)
        data: Encoded image bytes, kept as read
        width: Width in pixels
        height: Height in pixels
        mime_type: MIME type guessed from the file name
    """

    name: str
    data: bytes
    width: Pixels
    height: Pixels
    mime_type: str


def decode_dimensions(data: bytes) -> tuple[Pixels, Pixels]:
    """Decode encoded image bytes and return ``(width, height)``.

    Raises:
        ValueError: If the bytes are not a decodable image
    """
    if not data:
        raise ValueError("Image data is empty")
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError("Could not decode image data")
    height, width = image.shape[:2]
    return Pixels(int(width)), Pixels(int(height))


def load_raster(path: str | Path) -> RasterImage:
    """Read a raster file and its dimensions.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a decodable image
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    data = file_path.read_bytes()
    width, height = decode_dimensions(data)
    mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    return RasterImage(
        name=file_path.name,
        data=data,
        width=width,
        height=height,
        mime_type=mime_type,
    )
