"""
Reference ellipsoids.

Each ellipsoid is an immutable record built once from a static table.
Lookups are case-insensitive. What happens for an unknown name is chosen by
the caller:

    - ``on_unknown="error"`` (default): raise ``UnknownEllipsoidError``
    - ``on_unknown="default"``: fall back to WGS84 and log a warning

References:
    NIMA TR8350.2 (WGS84), Moritz 1980 (GRS80), CH2000 (CGCS2000)
"""

from dataclasses import dataclass
from typing import Dict, List, Union
import logging

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_ELLIPSOID = 'WGS84'
ON_UNKNOWN_POLICIES = ('error', 'default')


class UnknownEllipsoidError(ValueError):
    """Raised when an ellipsoid name is not in the table."""


@dataclass(frozen=True)
class Ellipsoid:
    """
    Reference ellipsoid.

    Attributes:
        name: Table key, e.g. 'WGS84'
        a: Semi-major axis (equatorial radius) in meters
        f: Flattening, f = (a - b) / a
        description: Human readable description
    """
    name: str
    a: float
    f: float
    description: str = ''

    @property
    def b(self) -> float:
        """Semi-minor axis (polar radius) in meters."""
        return self.a * (1 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared, e² = f(2 - f)."""
        return self.f * (2 - self.f)

    @property
    def ep2(self) -> float:
        """Second eccentricity squared, e'² = (a² - b²) / b²."""
        b = self.b
        return (self.a ** 2 - b ** 2) / b ** 2

    @property
    def inverse_flattening(self) -> float:
        return 1.0 / self.f

    def prime_vertical_radius(self, lat_rad: float) -> float:
        """
        Radius of curvature in the prime vertical.

        N = a / sqrt(1 - e² sin²(lat))

        Args:
            lat_rad: Geodetic latitude in radians

        Returns:
            N in meters
        """
        return self.a / np.sqrt(1 - self.e2 * np.sin(lat_rad) ** 2)

    def info(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'description': self.description,
            'a': self.a,
            'b': self.b,
            'f': self.f,
            'inverse_flattening': self.inverse_flattening,
            'e2': self.e2,
        }


ELLIPSOIDS: Dict[str, Ellipsoid] = {
    e.name.upper(): e for e in (
        Ellipsoid('WGS84', 6378137.0, 1 / 298.257223563,
                  'World Geodetic System 1984 (GPS)'),
        Ellipsoid('GRS80', 6378137.0, 1 / 298.257222101,
                  'Geodetic Reference System 1980'),
        Ellipsoid('CGCS2000', 6378137.0, 1 / 298.257222101,
                  'China Geodetic Coordinate System 2000'),
        Ellipsoid('Clarke1866', 6378206.4, 1 / 294.9786982,
                  'Clarke 1866 (NAD27)'),
        Ellipsoid('Krasovsky', 6378245.0, 1 / 298.3,
                  'Krasovsky 1940 (Beijing 1954, GCJ02 offset)'),
        Ellipsoid('International1924', 6378388.0, 1 / 297.0,
                  'International 1924 (Hayford)'),
    )
}


def list_ellipsoids() -> List[str]:
    """Names of all known ellipsoids, in table order."""
    return [e.name for e in ELLIPSOIDS.values()]


def lookup(name: Union[str, Ellipsoid] = DEFAULT_ELLIPSOID, on_unknown: str = 'error') -> Ellipsoid:
    """
    Find an ellipsoid by name.

    Args:
        name: Ellipsoid name, matched case-insensitively (anything that is
            not a string is an unknown name)
        on_unknown: 'error' to raise, 'default' to substitute WGS84

    Returns:
        The matching Ellipsoid

    Raises:
        UnknownEllipsoidError: If the name is unknown and on_unknown='error'
        ValueError: If on_unknown is not a recognised policy
    """
    if isinstance(name, Ellipsoid):
        return name
    if on_unknown not in ON_UNKNOWN_POLICIES:
        raise ValueError(
            f"on_unknown must be one of {ON_UNKNOWN_POLICIES}, got {on_unknown!r}"
        )

    key = name.strip().upper() if isinstance(name, str) else ''
    ellipsoid = ELLIPSOIDS.get(key)
    if ellipsoid is not None:
        return ellipsoid

    if on_unknown == 'default':
        logger.warning(f"Unknown ellipsoid '{name}', substituting {DEFAULT_ELLIPSOID}")
        return ELLIPSOIDS[DEFAULT_ELLIPSOID]

    raise UnknownEllipsoidError(
        f"Unknown ellipsoid '{name}'. Available: {', '.join(list_ellipsoids())}"
    )


def ellipsoid_info(name: str = DEFAULT_ELLIPSOID, on_unknown: str = 'error') -> Dict[str, object]:
    """Ellipsoid parameters as a JSON-friendly dict, or a failure dict."""
    try:
        ellipsoid = lookup(name, on_unknown=on_unknown)
    except UnknownEllipsoidError as e:
        return {'success': False, 'error': str(e)}
    data: Dict[str, object] = {'success': True}
    data.update(ellipsoid.info())
    return data
