"""
Chinese offset coordinate systems: WGS84 <-> GCJ02 <-> BD09.

GCJ02 is the obfuscated datum mandated for public maps in China (Gaode,
Tencent). BD09 adds a second polar offset on top of GCJ02 (Baidu).

Transform paths:
    WGS84 -> GCJ02    forward offset series
    GCJ02 -> WGS84    approximate inverse (offset evaluated at the GCJ02 point)
    GCJ02 -> BD09     polar offset
    BD09  -> GCJ02    polar offset removed (round trips drift by up to about 2e-6 degrees)
    WGS84 -> BD09     WGS84 -> GCJ02 -> BD09
    BD09  -> WGS84    BD09 -> GCJ02 -> WGS84

GCJ02 -> WGS84 is NOT a true inverse: round trips drift by about 1e-5
degrees. The formulas are the published ones and must not be refined.

All functions take and return (longitude, latitude) in degrees.
"""

from enum import Enum
from typing import Any, Optional, Tuple
import logging

import numpy as np

from .batch import apply_batch
from .parsing import CoordinateError, validate_point
from .projection import Projector
from .results import BatchResult, ConversionResult

logger = logging.getLogger(__name__)

# Krasovsky 1940 ellipsoid, as used by the GCJ02 offset
KRASOVSKY_A = 6378245.0
KRASOVSKY_EE = 0.00669342162296594323

# BD09 polar offset
X_PI = np.pi * 3000.0 / 180.0
BD09_DX = 0.0065
BD09_DY = 0.006


class UnsupportedCRSPair(ValueError):
    """Raised when a pair is not one of the six China offset paths."""


class ChinaCRS(Enum):
    """Coordinate systems handled by the offset codec."""
    WGS84 = 'WGS84'
    GCJ02 = 'GCJ02'
    BD09 = 'BD09'

    @classmethod
    def parse(cls, tag: Any) -> Optional["ChinaCRS"]:
        """Case-insensitive match ('gcj-02' works), None for anything else."""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return None
        key = tag.strip().upper().replace('-', '').replace('_', '')
        try:
            return cls(key)
        except ValueError:
            return None


def _offset_lat(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * np.sqrt(abs(x))
    ret += (20.0 * np.sin(6.0 * x * np.pi) + 20.0 * np.sin(2.0 * x * np.pi)) * 2.0 / 3.0
    ret += (20.0 * np.sin(y * np.pi) + 40.0 * np.sin(y / 3.0 * np.pi)) * 2.0 / 3.0
    ret += (160.0 * np.sin(y / 12.0 * np.pi) + 320 * np.sin(y * np.pi / 30.0)) * 2.0 / 3.0
    return ret


def _offset_lon(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * np.sqrt(abs(x))
    ret += (20.0 * np.sin(6.0 * x * np.pi) + 20.0 * np.sin(2.0 * x * np.pi)) * 2.0 / 3.0
    ret += (20.0 * np.sin(x * np.pi) + 40.0 * np.sin(x / 3.0 * np.pi)) * 2.0 / 3.0
    ret += (150.0 * np.sin(x / 12.0 * np.pi) + 300.0 * np.sin(x / 30.0 * np.pi)) * 2.0 / 3.0
    return ret


def china_offset(lon: float, lat: float) -> Tuple[float, float]:
    """
    GCJ02 offset at a point, in degrees.

    The series are centred at (105°E, 35°N) and scaled to degrees with the
    Krasovsky meridian and prime-vertical radii at the input latitude.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees

    Returns:
        (dlon, dlat) in degrees
    """
    d_lat = _offset_lat(lon - 105.0, lat - 35.0)
    d_lon = _offset_lon(lon - 105.0, lat - 35.0)

    rad_lat = lat / 180.0 * np.pi
    magic = np.sin(rad_lat)
    magic = 1 - KRASOVSKY_EE * magic * magic
    sqrt_magic = np.sqrt(magic)

    d_lat = (d_lat * 180.0) / ((KRASOVSKY_A * (1 - KRASOVSKY_EE)) / (magic * sqrt_magic) * np.pi)
    d_lon = (d_lon * 180.0) / (KRASOVSKY_A / sqrt_magic * np.cos(rad_lat) * np.pi)
    return float(d_lon), float(d_lat)


def wgs84_to_gcj02(lon: float, lat: float) -> Tuple[float, float]:
    """WGS84 -> GCJ02."""
    d_lon, d_lat = china_offset(lon, lat)
    return lon + d_lon, lat + d_lat


def gcj02_to_wgs84(lon: float, lat: float) -> Tuple[float, float]:
    """
    GCJ02 -> WGS84, approximate.

    Applies the forward offset at the GCJ02 point and reflects it:
    wgs = 2 * gcj - (gcj + offset(gcj)).
    """
    d_lon, d_lat = china_offset(lon, lat)
    mg_lon = lon + d_lon
    mg_lat = lat + d_lat
    return lon * 2 - mg_lon, lat * 2 - mg_lat


def gcj02_to_bd09(lon: float, lat: float) -> Tuple[float, float]:
    """GCJ02 -> BD09."""
    z = np.sqrt(lon * lon + lat * lat) + 0.00002 * np.sin(lat * X_PI)
    theta = np.arctan2(lat, lon) + 0.000003 * np.cos(lon * X_PI)
    return float(z * np.cos(theta) + BD09_DX), float(z * np.sin(theta) + BD09_DY)


def bd09_to_gcj02(lon: float, lat: float) -> Tuple[float, float]:
    """BD09 -> GCJ02."""
    x = lon - BD09_DX
    y = lat - BD09_DY
    z = np.sqrt(x * x + y * y) - 0.00002 * np.sin(y * X_PI)
    theta = np.arctan2(y, x) - 0.000003 * np.cos(x * X_PI)
    return float(z * np.cos(theta)), float(z * np.sin(theta))


def wgs84_to_bd09(lon: float, lat: float) -> Tuple[float, float]:
    """WGS84 -> GCJ02 -> BD09."""
    return gcj02_to_bd09(*wgs84_to_gcj02(lon, lat))


def bd09_to_wgs84(lon: float, lat: float) -> Tuple[float, float]:
    """BD09 -> GCJ02 -> WGS84."""
    return gcj02_to_wgs84(*bd09_to_gcj02(lon, lat))


_PATHS = {
    (ChinaCRS.WGS84, ChinaCRS.GCJ02): wgs84_to_gcj02,
    (ChinaCRS.GCJ02, ChinaCRS.WGS84): gcj02_to_wgs84,
    (ChinaCRS.GCJ02, ChinaCRS.BD09): gcj02_to_bd09,
    (ChinaCRS.BD09, ChinaCRS.GCJ02): bd09_to_gcj02,
    (ChinaCRS.WGS84, ChinaCRS.BD09): wgs84_to_bd09,
    (ChinaCRS.BD09, ChinaCRS.WGS84): bd09_to_wgs84,
}


def is_china_pair(from_crs: Any, to_crs: Any) -> bool:
    """True when both ends are one of WGS84, GCJ02, BD09."""
    return ChinaCRS.parse(from_crs) is not None and ChinaCRS.parse(to_crs) is not None


def convert(from_crs: Any, to_crs: Any, lon: float, lat: float) -> Tuple[float, float]:
    """
    Convert a point between two China offset systems.

    Identity pairs return the input unchanged.

    Raises:
        UnsupportedCRSPair: If either end is not WGS84, GCJ02 or BD09
    """
    src = ChinaCRS.parse(from_crs)
    dst = ChinaCRS.parse(to_crs)
    if src is None or dst is None:
        raise UnsupportedCRSPair(
            f"No China offset path from '{from_crs}' to '{to_crs}'"
        )
    if src is dst:
        return lon, lat
    return _PATHS[(src, dst)](lon, lat)


def transform_china(
    from_crs: str,
    to_crs: str,
    coordinates: Any,
    projector: Optional[Projector] = None,
) -> ConversionResult:
    """
    Transform a point, handling the China offset systems directly.

    Pairs where both ends are WGS84, GCJ02 or BD09 go through the offset
    formulas. Any other pair is handed to the generic projection engine.

    Args:
        from_crs: Source system ('WGS84', 'GCJ02', 'BD09' or any CRS name)
        to_crs: Target system
        coordinates: [lon, lat] as a sequence or text
        projector: Projection engine for non-China pairs (a default one is
            created when omitted)

    Returns:
        ConversionResult with 'longitude' and 'latitude' fields, or the
        generic projection result for delegated pairs
    """
    if not from_crs or not to_crs:
        return ConversionResult.failure('from, to, and coordinates are required')

    if not is_china_pair(from_crs, to_crs):
        logger.debug(f"{from_crs} -> {to_crs} is not a China offset pair, delegating to projection")
        if projector is None:
            projector = Projector()
        return projector.transform(from_crs, to_crs, coordinates)

    try:
        lon, lat = validate_point(coordinates, 2, label='[lon, lat]')
    except CoordinateError as e:
        return ConversionResult.failure(
            f"China coordinate transform failed: {e}", from_crs=from_crs, to_crs=to_crs
        )

    output = convert(from_crs, to_crs, lon, lat)
    return ConversionResult(
        input=(lon, lat),
        output=tuple(output),
        fields=('longitude', 'latitude'),
        from_crs=from_crs,
        to_crs=to_crs,
    )


def batch_transform_china(
    from_crs: str,
    to_crs: str,
    coordinates: Any,
    projector: Optional[Projector] = None,
) -> BatchResult:
    """Apply ``transform_china`` to every [lon, lat] in ``coordinates``."""
    if not from_crs or not to_crs:
        return BatchResult(success=False, error_message='from, to, and coordinates are required')
    if projector is None and not is_china_pair(from_crs, to_crs):
        projector = Projector()

    batch = apply_batch(
        coordinates,
        lambda point: transform_china(from_crs, to_crs, point, projector=projector),
        min_arity=2,
        max_arity=2 if is_china_pair(from_crs, to_crs) else 3,
        label='[lon, lat]',
    )
    batch.from_crs = from_crs
    batch.to_crs = to_crs
    return batch
