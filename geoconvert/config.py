"""
Configuration for geoconvert.

Handles loading and saving settings from YAML files.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

from .elevation import DEFAULT_BASE_URL, ElevationClient
from .ellipsoids import DEFAULT_ELLIPSOID, ON_UNKNOWN_POLICIES, lookup
from .registry import CRSRegistry

logger = logging.getLogger(__name__)


@dataclass
class ElevationSettings:
    """Elevation service endpoint."""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0  # seconds


@dataclass
class Settings:
    """
    Main configuration.

    Attributes:
        default_ellipsoid: Ellipsoid used when a command does not name one
        on_unknown_ellipsoid: 'error' to reject unknown ellipsoid names,
            'default' to fall back to WGS84
        precision: Decimal places used by the CLI for printed values
        custom_crs: Name -> definition pairs registered at startup
        elevation: Elevation service settings
    """
    default_ellipsoid: str = DEFAULT_ELLIPSOID
    on_unknown_ellipsoid: str = 'error'
    precision: int = 8
    custom_crs: Dict[str, str] = field(default_factory=dict)
    elevation: ElevationSettings = field(default_factory=ElevationSettings)

    def __post_init__(self):
        if self.on_unknown_ellipsoid not in ON_UNKNOWN_POLICIES:
            raise ValueError(
                f"on_unknown_ellipsoid must be one of {ON_UNKNOWN_POLICIES}, "
                f"got {self.on_unknown_ellipsoid!r}"
            )
        # Fails early on a typo in the configured default
        lookup(self.default_ellipsoid, on_unknown=self.on_unknown_ellipsoid)
        if not isinstance(self.precision, int) or self.precision < 0:
            raise ValueError(f"precision must be a non-negative integer, got {self.precision!r}")

    @classmethod
    def from_yaml(cls, config_path: str) -> "Settings":
        """
        Load settings from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Settings with loaded parameters; missing keys keep their defaults

        Example YAML structure:
            default_ellipsoid: WGS84
            on_unknown_ellipsoid: error
            precision: 8
            custom_crs:
              BEIJING_UTM: "+proj=utm +zone=50 +datum=WGS84 +units=m +no_defs"
            elevation:
              base_url: "https://api.open-elevation.com"
              timeout: 10
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_path}")

        logger.info(f"Loading configuration from {config_path}")

        elev_data = data.get('elevation') or {}
        elevation = ElevationSettings(
            base_url=elev_data.get('base_url', DEFAULT_BASE_URL),
            timeout=float(elev_data.get('timeout', 10.0)),
        )

        custom_crs = data.get('custom_crs') or {}
        if not isinstance(custom_crs, dict):
            raise ValueError("custom_crs must be a mapping of name to definition")

        return cls(
            default_ellipsoid=data.get('default_ellipsoid', DEFAULT_ELLIPSOID),
            on_unknown_ellipsoid=data.get('on_unknown_ellipsoid', 'error'),
            precision=data.get('precision', 8),
            custom_crs={str(k): str(v) for k, v in custom_crs.items()},
            elevation=elevation,
        )

    def to_yaml(self, config_path: str) -> None:
        """Save settings to a YAML file."""
        data = {
            'default_ellipsoid': self.default_ellipsoid,
            'on_unknown_ellipsoid': self.on_unknown_ellipsoid,
            'precision': self.precision,
            'custom_crs': dict(self.custom_crs),
            'elevation': {
                'base_url': self.elevation.base_url,
                'timeout': self.elevation.timeout,
            },
        }

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")

    def build_registry(self) -> CRSRegistry:
        """Registry preloaded with ``custom_crs``."""
        return CRSRegistry(custom=self.custom_crs)

    def build_elevation_client(self) -> ElevationClient:
        return ElevationClient(base_url=self.elevation.base_url, timeout=self.elevation.timeout)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Settings from ``config_path``, or defaults when no path is given."""
    if config_path is None:
        return Settings()
    return Settings.from_yaml(config_path)
