"""Shared fixtures for the georeferencing tests."""

import os
import sys

import cv2
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from geosnap.control_points import ControlPoint
from geosnap.pipeline import georeference

RASTER_WIDTH = 200
RASTER_HEIGHT = 150


@pytest.fixture
def reference_points():
    """Three points whose exact affine fit is A=0.001, E=-0.001, C=-7, F=34."""
    return [
        ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.0),
        ControlPoint("GCP-2", 100.0, 0.0, lat=34.0, lng=-6.9),
        ControlPoint("GCP-3", 0.0, 100.0, lat=33.9, lng=-7.0),
    ]


@pytest.fixture
def rectangle_points():
    """Corner points of a 200x150 raster covering 0.2° x 0.15°."""
    return [
        ControlPoint("GCP-1", 0.0, 0.0, lat=34.0, lng=-7.2),
        ControlPoint("GCP-2", 200.0, 0.0, lat=34.0, lng=-7.0),
        ControlPoint("GCP-3", 200.0, 150.0, lat=33.85, lng=-7.0),
        ControlPoint("GCP-4", 0.0, 150.0, lat=33.85, lng=-7.2),
    ]


@pytest.fixture
def rectangle_result(rectangle_points):
    return georeference(rectangle_points, RASTER_WIDTH, RASTER_HEIGHT)


@pytest.fixture
def jpeg_bytes():
    """A small encoded JPEG of RASTER_WIDTH x RASTER_HEIGHT pixels."""
    image = np.full((RASTER_HEIGHT, RASTER_WIDTH, 3), 200, dtype=np.uint8)
    cv2.line(image, (0, 75), (RASTER_WIDTH - 1, 75), (0, 0, 0), 1)
    ok, encoded = cv2.imencode(".jpg", image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def gcp_records():
    """Control point records as written in a GCP file."""
    return [
        {"pixelX": 0.0, "pixelY": 0.0, "lat": 34.0, "lng": -7.2},
        {"pixelX": 200.0, "pixelY": 0.0, "lat": 34.0, "lng": -7.0},
        {"pixelX": 200.0, "pixelY": 150.0, "lat": 33.85, "lng": -7.0},
        {"pixelX": 0.0, "pixelY": 150.0, "lat": 33.85, "lng": -7.2},
    ]
