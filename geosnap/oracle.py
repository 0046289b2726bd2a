"""
Control point detection oracle.

Detection of grid intersections on a scanned map is done by an external
service. This module defines the contract with that service and parses its
responses strictly: every returned point must carry finite numeric
``pixelX``, ``pixelY``, ``lat`` and ``lng`` or the whole response is
rejected with OracleError. Points that pass are given sequential ids
``GCP-1``, ``GCP-2``, ... in response order.

Request (JSON body posted by HttpDetectionOracle):
    {"image": "<base64>", "mimeType": "image/jpeg"}

Response:
    {
        "projection": "Merchich",
        "epsg": "6261",
        "controlPoints": [{"pixelX": 12.5, "pixelY": 40.0, "lat": 33.8, "lng": -7.25}, ...]
    }

The oracle is called exactly once per request; timeouts are supplied by the
caller and retries are the caller's business.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from geosnap.control_points import ControlPoint, synthetic_gcp_id
from geosnap.errors import ControlPointValidationError, OracleError
from geosnap.gcp_validation import validate_control_point_records
from geosnap.projection import DEFAULT_CRS_CODE, DEFAULT_PROJECTION_NAME, normalize_code

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 120.0
RESPONSE_FIELDS = ("pixelX", "pixelY", "lat", "lng")


@dataclass(frozen=True)
class DetectionResult:
    """Parsed, validated oracle response.

    Attributes:
        projection: Reference-system name reported by the oracle.
        crs_code: Normalized reference-system code (e.g., "EPSG:6261").
        control_points: Detected points with synthetic ids, in response order.
    """

    projection: str
    crs_code: str
    control_points: tuple[ControlPoint, ...]


class DetectionOracle(Protocol):
    """Protocol for control point detectors."""

    def detect(self, image_bytes: bytes, mime_type: str) -> DetectionResult:
        """Detect control points on an encoded raster image."""
        ...


def parse_detection_response(payload: dict[str, Any] | str | bytes) -> DetectionResult:
    """Parse an oracle response into a DetectionResult.

    Args:
        payload: Decoded JSON object, or JSON text

    Returns:
        DetectionResult with ids ``GCP-1..GCP-n``

    Raises:
        OracleError: If the payload is not JSON, is not an object, lacks a
            ``controlPoints`` list, or any point has a missing or
            non-finite field
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise OracleError(f"Detection response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise OracleError(
            f"Detection response must be a JSON object, got {type(payload).__name__}"
        )

    records = payload.get("controlPoints")
    if not isinstance(records, list):
        raise OracleError("Detection response is missing the 'controlPoints' array")

    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise OracleError(f"Control point {i} in detection response is not an object")
        missing = [name for name in RESPONSE_FIELDS if name not in record]
        if missing:
            raise OracleError(
                f"Control point {i} in detection response is missing {', '.join(missing)}"
            )

    try:
        validate_control_point_records(records, min_gcp_count=0)
    except ControlPointValidationError as e:
        raise OracleError(f"Detection response has an invalid control point: {e}") from e

    points = tuple(
        ControlPoint.from_dict(
            {name: record[name] for name in RESPONSE_FIELDS},
            default_id=synthetic_gcp_id(i),
        )
        for i, record in enumerate(records)
    )

    projection = payload.get("projection") or DEFAULT_PROJECTION_NAME
    epsg = payload.get("epsg")
    crs_code = normalize_code(str(epsg)) if epsg else DEFAULT_CRS_CODE

    logger.info(f"Detection oracle returned {len(points)} control points ({projection}, {crs_code})")
    return DetectionResult(projection=str(projection), crs_code=crs_code, control_points=points)


class HttpDetectionOracle:
    """Detection oracle reached over HTTP with ``requests``.

    Args:
        endpoint: URL accepting the JSON request described in the module docstring
        api_key: Optional bearer token
        timeout: Request timeout in seconds
        session: Optional ``requests.Session`` (for connection reuse or tests)
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ):
        if not endpoint:
            raise ValueError("Detection oracle endpoint must not be empty")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def detect(self, image_bytes: bytes, mime_type: str) -> DetectionResult:
        """Send the image to the oracle and parse its answer.

        Raises:
            OracleError: On transport failure, timeout, non-2xx status or a
                malformed response body
        """
        if not image_bytes:
            raise OracleError("Cannot run detection on an empty image")

        request_body = {
            "image": base64.b64encode(image_bytes).decode("ascii"),
            "mimeType": mime_type,
        }

        logger.debug(f"Posting {len(image_bytes)} byte {mime_type} image to {self.endpoint}")
        try:
            response = self._session.post(
                self.endpoint,
                json=request_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OracleError(f"Detection request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise OracleError(f"Detection service returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise OracleError(f"Detection service returned a non-JSON body: {e}") from e

        return parse_detection_response(payload)
