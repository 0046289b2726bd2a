"""
Error taxonomy for georeferencing.

Every failure of a fit attempt is terminal for that attempt and surfaces as
one of the exceptions below. Each class also derives from the builtin that
callers would naturally catch (ValueError for bad input, RuntimeError for
failing collaborators) so generic handlers keep working.
"""


class GeoreferenceError(Exception):
    """Base class for all georeferencing failures."""


class InsufficientPointsError(GeoreferenceError, ValueError):
    """Fewer control points than the fit requires."""


class DegenerateSystemError(GeoreferenceError, ValueError):
    """Normal equations are near-singular (collinear or duplicate pixel positions)."""


class ControlPointValidationError(GeoreferenceError, ValueError):
    """A control point has missing, non-finite or out-of-range fields."""


class UnsupportedTransformationError(GeoreferenceError, ValueError):
    """The requested transformation type has no fitting implementation."""


class UnknownReferenceSystemError(GeoreferenceError, KeyError):
    """No WKT definition is registered for the reference-system code."""


class ReprojectionError(GeoreferenceError, RuntimeError):
    """The external reprojection capability rejected the request."""


class OracleError(GeoreferenceError, RuntimeError):
    """The control-point detection oracle failed or returned malformed data."""


DETECTION_FAILURE_MESSAGE = (
    "Control point detection failed: the map could not be analysed or the "
    "detector returned unusable data."
)
CALIBRATION_FAILURE_MESSAGE = (
    "Insufficient or invalid calibration data: not enough well-distributed "
    "grid intersections to compute a transformation."
)


def user_message(exc: BaseException) -> str:
    """Return the user-facing text for a failed georeferencing attempt.

    Detection failures and fitting failures are reported differently so the
    user knows whether to retry the detection or fix the control points.
    """
    if isinstance(exc, OracleError):
        return DETECTION_FAILURE_MESSAGE
    if isinstance(exc, ReprojectionError):
        return f"Reprojection failed: {exc}"
    if isinstance(exc, UnknownReferenceSystemError):
        return f"Unknown reference system: {exc.args[0] if exc.args else exc}"
    return CALIBRATION_FAILURE_MESSAGE
