"""
Terrain elevation lookup over HTTP.

Queries an Open-Elevation compatible service:

    GET {base_url}/api/v1/lookup?locations=39.915,116.404

    {"results": [{"latitude": 39.915, "longitude": 116.404, "elevation": 44.0}]}

One request per lookup, no retries. Network and decoding errors come back as
a failed ``ElevationResult``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import numpy as np
import requests

from .parsing import CoordinateError, validate_latitude, validate_point

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.open-elevation.com"


@dataclass
class ElevationResult:
    """Result of an elevation lookup."""
    latitude: float
    longitude: float
    elevation: float    # Meters above mean sea level
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {'success': False, 'error': self.error_message}
        return {
            'success': True,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'elevation': self.elevation,
        }


class ElevationClient:
    """
    Client for an Open-Elevation style lookup service.

    Args:
        base_url: Service root, without the /api/v1/lookup path
        timeout: Request timeout in seconds
        session: Optional pre-configured requests session
    """

    LOOKUP_PATH = "/api/v1/lookup"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'geoconvert/1.0',
        })

    def _failed(self, lat: float, lon: float, message: str) -> ElevationResult:
        return ElevationResult(
            latitude=lat,
            longitude=lon,
            elevation=np.nan,
            success=False,
            error_message=message,
        )

    def lookup(self, lat: Any, lon: Any) -> ElevationResult:
        """
        Elevation at a WGS84 position.

        Args:
            lat: Latitude in degrees
            lon: Longitude in degrees

        Returns:
            ElevationResult; ``success`` is False on invalid input, HTTP
            errors or an unexpected response body
        """
        try:
            lat, lon = validate_point([lat, lon], 2, label='[lat, lon]')
            validate_latitude(lat)
        except CoordinateError as e:
            return ElevationResult(np.nan, np.nan, np.nan, success=False,
                                   error_message=f"Elevation lookup failed: {e}")

        url = f"{self.base_url}{self.LOOKUP_PATH}"
        params = {'locations': f'{lat:.6f},{lon:.6f}'}

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Elevation request failed: {e}")
            return self._failed(lat, lon, f"Elevation lookup failed: {e}")
        except ValueError as e:
            return self._failed(lat, lon, f"Elevation service returned invalid JSON: {e}")

        try:
            elevation = float(data['results'][0]['elevation'])
        except (KeyError, IndexError, TypeError, ValueError):
            return self._failed(lat, lon, f"Unexpected elevation response: {data!r}")

        logger.debug(f"Elevation at ({lat}, {lon}): {elevation} m")
        return ElevationResult(latitude=lat, longitude=lon, elevation=elevation)
