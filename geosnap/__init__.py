"""
GeoSnap georeferencing package.

Fits pixel to geographic transformations from ground control points (GCPs)
detected on scanned maps and exports standard GIS sidecar files.

Example Usage:
    >>> from geosnap import ControlPoint, georeference, assemble_bundle
    >>>
    >>> points = [
    ...     ControlPoint("GCP-1", 0, 0, lat=34.0, lng=-7.0),
    ...     ControlPoint("GCP-2", 100, 0, lat=34.0, lng=-6.9),
    ...     ControlPoint("GCP-3", 0, 100, lat=33.9, lng=-7.0),
    ... ]
    >>> result = georeference(points, width=100, height=100)
    >>> result.params.A
    0.001...
    >>> archive = assemble_bundle(result, raster_bytes)

Available Classes:
    Data model:
        - ControlPoint, ControlPointSet
        - TransformationType, TransformationParams, AffineFit, GeoreferenceResult
        - Extent

    Operations:
        - fit_affine, derive_helmert, compute_extent, reproject_extent
        - format_world_file, parse_world_file, get_projection_wkt
        - georeference, detect_and_georeference, assemble_bundle
"""

from geosnap.affine_fitter import fit_affine
from geosnap.bundle import assemble_bundle, bundle_filename, write_bundle
from geosnap.config import GeorefConfig, get_default_config
from geosnap.control_points import ControlPoint, ControlPointSet
from geosnap.errors import (
    ControlPointValidationError,
    DegenerateSystemError,
    GeoreferenceError,
    InsufficientPointsError,
    OracleError,
    ReprojectionError,
    UnknownReferenceSystemError,
    UnsupportedTransformationError,
    user_message,
)
from geosnap.extent import Extent, compute_display_extent, compute_extent, reproject_extent
from geosnap.helmert import derive_helmert
from geosnap.oracle import DetectionResult, HttpDetectionOracle, parse_detection_response
from geosnap.pipeline import detect_and_georeference, georeference
from geosnap.projection import get_projection_wkt
from geosnap.transformation import (
    AffineFit,
    GeoreferenceResult,
    TransformationParams,
    TransformationType,
)
from geosnap.world_file import format_world_file, parse_world_file

__all__ = [
    # Data model
    'ControlPoint',
    'ControlPointSet',
    'TransformationType',
    'TransformationParams',
    'AffineFit',
    'GeoreferenceResult',
    'Extent',
    'DetectionResult',

    # Operations
    'fit_affine',
    'derive_helmert',
    'compute_extent',
    'compute_display_extent',
    'reproject_extent',
    'format_world_file',
    'parse_world_file',
    'get_projection_wkt',
    'georeference',
    'detect_and_georeference',
    'parse_detection_response',
    'HttpDetectionOracle',
    'assemble_bundle',
    'bundle_filename',
    'write_bundle',

    # Configuration
    'GeorefConfig',
    'get_default_config',

    # Errors
    'GeoreferenceError',
    'InsufficientPointsError',
    'DegenerateSystemError',
    'ControlPointValidationError',
    'UnsupportedTransformationError',
    'UnknownReferenceSystemError',
    'ReprojectionError',
    'OracleError',
    'user_message',
]

# Package metadata
__version__ = '0.1.0'
__description__ = 'Georeferencing of scanned maps from ground control points'
