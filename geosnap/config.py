"""
Configuration for georeferencing runs.

Loaded from YAML files with a ``georeference`` section::

    georeference:
      source_crs: "EPSG:6261"
      display_crs: "EPSG:3857"
      transformation: affine
      projection_name: Merchich
      oracle:
        endpoint: https://detector.example/api/gcps
        timeout_s: 120
        api_key_env: GEOSNAP_ORACLE_KEY
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from geosnap.extent import DEFAULT_DISPLAY_CRS
from geosnap.oracle import DEFAULT_TIMEOUT_S, HttpDetectionOracle
from geosnap.projection import DEFAULT_CRS_CODE, DEFAULT_PROJECTION_NAME, normalize_code
from geosnap.transformation import TransformationType

logger = logging.getLogger(__name__)

DEFAULT_API_KEY_ENV = "GEOSNAP_ORACLE_KEY"


@dataclass(frozen=True)
class OracleConfig:
    """Connection settings for the detection oracle.

    Attributes:
        endpoint: Oracle URL; None disables detection
        timeout_s: Request timeout in seconds
        api_key_env: Environment variable holding the API key
    """
    endpoint: Optional[str] = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    api_key_env: str = DEFAULT_API_KEY_ENV

    def create_oracle(self) -> HttpDetectionOracle:
        """Build an HttpDetectionOracle from these settings.

        Raises:
            ValueError: If no endpoint is configured
        """
        if not self.endpoint:
            raise ValueError(
                "No detection oracle endpoint configured. "
                "Set georeference.oracle.endpoint in the configuration file"
            )
        return HttpDetectionOracle(
            self.endpoint,
            api_key=os.environ.get(self.api_key_env),
            timeout=self.timeout_s,
        )


@dataclass(frozen=True)
class GeorefConfig:
    """Configuration for a georeferencing run.

    Attributes:
        source_crs: Reference-system code of control point coordinates
        display_crs: Reference-system code extents are reprojected into
        transformation: Transformation model to fit
        projection_name: Human-readable name of the source reference system
        oracle: Detection oracle settings
    """
    source_crs: str = DEFAULT_CRS_CODE
    display_crs: str = DEFAULT_DISPLAY_CRS
    transformation: TransformationType = TransformationType.AFFINE
    projection_name: str = DEFAULT_PROJECTION_NAME
    oracle: OracleConfig = field(default_factory=OracleConfig)

    @classmethod
    def from_yaml(cls, path: str) -> 'GeorefConfig':
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            GeorefConfig instance loaded from file

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If configuration file is malformed or contains invalid values
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(
                f"Configuration file is empty: {path}\n"
                f"Expected a 'georeference' section"
            )

        if 'georeference' not in data:
            raise ValueError(
                f"Configuration file missing 'georeference' section: {path}\n"
                f"Expected structure: georeference:\n  source_crs: ...\n  ..."
            )

        return cls.from_dict(data['georeference'])

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'GeorefConfig':
        """Create configuration from dictionary.

        Missing keys take their defaults.

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        defaults = cls()
        oracle_data = config.get('oracle') or {}
        if not isinstance(oracle_data, dict):
            raise ValueError(f"'oracle' must be a mapping, got {type(oracle_data).__name__}")

        try:
            timeout_s = float(oracle_data.get('timeout_s', DEFAULT_TIMEOUT_S))
        except (TypeError, ValueError):
            raise ValueError(
                f"'oracle.timeout_s' must be a number, got {oracle_data.get('timeout_s')!r}"
            ) from None
        if timeout_s <= 0:
            raise ValueError(f"'oracle.timeout_s' must be positive, got {timeout_s}")

        oracle = OracleConfig(
            endpoint=oracle_data.get('endpoint'),
            timeout_s=timeout_s,
            api_key_env=str(oracle_data.get('api_key_env', DEFAULT_API_KEY_ENV)),
        )

        return cls(
            source_crs=normalize_code(config.get('source_crs', defaults.source_crs)),
            display_crs=normalize_code(config.get('display_crs', defaults.display_crs)),
            transformation=TransformationType.parse(
                config.get('transformation', defaults.transformation)
            ),
            projection_name=str(config.get('projection_name', defaults.projection_name)),
            oracle=oracle,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary suitable for YAML serialization."""
        return {
            'source_crs': self.source_crs,
            'display_crs': self.display_crs,
            'transformation': self.transformation.value,
            'projection_name': self.projection_name,
            'oracle': {
                'endpoint': self.oracle.endpoint,
                'timeout_s': self.oracle.timeout_s,
                'api_key_env': self.oracle.api_key_env,
            },
        }

    def to_yaml(self, path: str) -> None:
        """Save configuration to YAML file under a 'georeference' section."""
        with open(path, 'w') as f:
            yaml.safe_dump({'georeference': self.to_dict()}, f, default_flow_style=False)
        logger.info(f"Saved configuration to {path}")


def get_default_config() -> GeorefConfig:
    """Return the default configuration (Merchich source, Web Mercator display, affine)."""
    return GeorefConfig()
