"""
Reference-system definitions for ``.prj`` sidecar files.

The registry maps an authority code (``"EPSG:6261"``) to a fixed WKT
definition. It is built once at import and exposed read-only; new reference
systems are added by extending ``_DEFINITIONS`` below.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from geosnap.errors import UnknownReferenceSystemError

DEFAULT_CRS_CODE = "EPSG:6261"
DEFAULT_PROJECTION_NAME = "Merchich"

_MERCHICH_WKT = (
    'GEOGCS["Merchich",'
    'DATUM["Merchich",'
    'SPHEROID["Clarke 1880 (IGN)",6378249.2,293.4660212936269,AUTHORITY["EPSG","7011"]],'
    'TOWGS84[31,146,47,0,0,0,0],'
    'AUTHORITY["EPSG","6261"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],'
    'AUTHORITY["EPSG","6261"]]'
)

_MERCHICH_GEOGCS_WKT = _MERCHICH_WKT.replace(
    'AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","6261"]]',
    'AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","4261"]]',
)

_WGS84_WKT = (
    'GEOGCS["WGS 84",'
    'DATUM["WGS_1984",'
    'SPHEROID["WGS 84",6378137,298.257223563,AUTHORITY["EPSG","7030"]],'
    'TOWGS84[0,0,0,0,0,0,0],'
    'AUTHORITY["EPSG","6326"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],'
    'AUTHORITY["EPSG","4326"]]'
)

_DEFINITIONS = {
    "EPSG:6261": _MERCHICH_WKT,
    "EPSG:4261": _MERCHICH_GEOGCS_WKT,
    "EPSG:4326": _WGS84_WKT,
}

PROJECTION_REGISTRY: Mapping[str, str] = MappingProxyType(dict(_DEFINITIONS))


def normalize_code(code: str) -> str:
    """Normalize a reference-system code to ``AUTHORITY:NUMBER`` form.

    Bare numbers are taken as EPSG codes: ``"6261"`` and ``"epsg:6261"``
    both become ``"EPSG:6261"``.
    """
    text = str(code).strip()
    if text.isdigit():
        return f"EPSG:{text}"
    authority, sep, number = text.partition(":")
    if sep:
        return f"{authority.strip().upper()}:{number.strip()}"
    return text.upper()


def is_registered(code: str) -> bool:
    return normalize_code(code) in PROJECTION_REGISTRY


def registered_codes() -> Tuple[str, ...]:
    """Return the registered reference-system codes in sorted order."""
    return tuple(sorted(PROJECTION_REGISTRY))


def get_projection_wkt(code: str) -> str:
    """Return the ``.prj`` WKT text for ``code``.

    Raises:
        UnknownReferenceSystemError: If no definition is registered for code
    """
    normalized = normalize_code(code)
    try:
        return PROJECTION_REGISTRY[normalized]
    except KeyError:
        raise UnknownReferenceSystemError(
            f"No projection definition registered for '{code}'. "
            f"Registered codes: {', '.join(registered_codes())}"
        ) from None


def resolve_crs_input(code: str) -> str:
    """Return input suitable for ``pyproj.CRS.from_user_input``.

    Registered codes resolve to their WKT so that datum codes such as
    EPSG:6261 (which name a datum, not a CRS, in the EPSG database) still
    describe a usable geographic CRS. Other codes are returned normalized.
    """
    normalized = normalize_code(code)
    return PROJECTION_REGISTRY.get(normalized, normalized)
