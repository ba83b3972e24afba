"""
Geodetic (BLH) <-> Earth-Centered Earth-Fixed (XYZ) conversion.

Coordinate System Definitions:
    - BLH: geodetic latitude B and longitude L in degrees, ellipsoidal
      height H in meters
    - ECEF: X towards 0° lon on the equator, Y towards 90°E, Z towards the
      North Pole, in meters

BLH -> XYZ uses the direct closed form. XYZ -> BLH uses Bowring's formula,
a single non-iterative step that is accurate to well below a millimeter for
heights near the Earth's surface.

Known limitations: at the exact poles (X = Y = 0) the latitude is still
recovered as ±90°, but the height term p / cos(lat) degenerates and the
returned height is not meaningful. Points closer to the polar axis than
a * e² (about 43 km, far below the surface) have no reliable Bowring
solution; their latitude is kept within [-90, 90] and the center of the
Earth (0, 0, 0) comes back as latitude 0, height -a.

Reference:
    Bowring, B.R. (1976). Transformation from spatial to geographical
    coordinates. Survey Review 23(181).
"""

from dataclasses import dataclass
from typing import Any, Union
import logging

import numpy as np

from .batch import apply_batch
from .ellipsoids import DEFAULT_ELLIPSOID, Ellipsoid, UnknownEllipsoidError, lookup
from .parsing import CoordinateError, validate_latitude, validate_point
from .results import BatchResult, ConversionResult

logger = logging.getLogger(__name__)

EllipsoidLike = Union[str, Ellipsoid]


def deg_to_rad(degrees: float) -> float:
    return float(np.deg2rad(degrees))


def rad_to_deg(radians: float) -> float:
    return float(np.rad2deg(radians))


def geodetic_to_ecef(
    lat: float, lon: float, h: float, ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID
) -> np.ndarray:
    """
    Convert geodetic coordinates to ECEF.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        h: Ellipsoidal height in meters
        ellipsoid: Ellipsoid or its name

    Returns:
        ECEF coordinates as (X, Y, Z) in meters
    """
    ell = lookup(ellipsoid)
    lat_rad = np.deg2rad(lat)
    lon_rad = np.deg2rad(lon)

    N = ell.prime_vertical_radius(lat_rad)

    X = (N + h) * np.cos(lat_rad) * np.cos(lon_rad)
    Y = (N + h) * np.cos(lat_rad) * np.sin(lon_rad)
    Z = (N * (1 - ell.e2) + h) * np.sin(lat_rad)

    return np.array([X, Y, Z])


def ecef_to_geodetic(
    x: float, y: float, z: float, ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID
) -> np.ndarray:
    """
    Convert ECEF coordinates to geodetic with Bowring's formula.

    Args:
        x, y, z: ECEF coordinates in meters
        ellipsoid: Ellipsoid or its name

    Returns:
        (latitude°, longitude°, height m)
    """
    ell = lookup(ellipsoid)
    a = ell.a
    b = ell.b

    p = np.sqrt(x ** 2 + y ** 2)
    lon = np.arctan2(y, x)

    # Parametric latitude seed
    theta = np.arctan2(z * a, p * b)
    # Negative only within a * e2 of the polar axis (deep inside the Earth);
    # its magnitude keeps the latitude within [-90, 90]
    denominator = np.abs(p - ell.e2 * a * np.cos(theta) ** 3)
    lat = np.arctan2(z + ell.ep2 * b * np.sin(theta) ** 3, denominator)

    N = ell.prime_vertical_radius(lat)
    height = p / np.cos(lat) - N

    return np.array([np.rad2deg(lat), np.rad2deg(lon), height])


@dataclass(frozen=True)
class GeodeticCoordinate:
    """
    Geodetic position.

    Attributes:
        latitude: Degrees, must lie in [-90, 90]
        longitude: Degrees, not wrapped
        height: Meters above the ellipsoid (may be negative)
    """
    latitude: float
    longitude: float
    height: float = 0.0

    def __post_init__(self):
        validate_latitude(self.latitude)

    def as_array(self) -> np.ndarray:
        return np.array([self.latitude, self.longitude, self.height])

    def to_ecef(self, ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID) -> "CartesianCoordinate":
        return CartesianCoordinate(*(float(v) for v in geodetic_to_ecef(
            self.latitude, self.longitude, self.height, ellipsoid)))


@dataclass(frozen=True)
class CartesianCoordinate:
    """ECEF position in meters."""
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def to_geodetic(self, ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID) -> GeodeticCoordinate:
        return GeodeticCoordinate(*(float(v) for v in ecef_to_geodetic(
            self.x, self.y, self.z, ellipsoid)))


def blh_to_xyz(
    lat: Any,
    lon: Any,
    height: Any = 0.0,
    ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID,
    on_unknown: str = 'error',
) -> ConversionResult:
    """
    Convert latitude, longitude, height to ECEF X, Y, Z.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        height: Ellipsoidal height in meters
        ellipsoid: Ellipsoid name (case-insensitive) or Ellipsoid
        on_unknown: Policy for unknown ellipsoid names ('error' or 'default')

    Returns:
        ConversionResult with fields X, Y, Z
    """
    try:
        ell = lookup(ellipsoid, on_unknown=on_unknown)
        point = validate_point([lat, lon, height], 3, label='[lat, lon, height]')
        validate_latitude(point[0])
    except (CoordinateError, UnknownEllipsoidError) as e:
        return ConversionResult.failure(f"BLH to XYZ conversion failed: {e}")

    xyz = geodetic_to_ecef(*point, ellipsoid=ell)
    return ConversionResult(
        input=point,
        output=tuple(float(v) for v in xyz),
        fields=('X', 'Y', 'Z'),
        ellipsoid=ell.name,
    )


def xyz_to_blh(
    x: Any,
    y: Any,
    z: Any,
    ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID,
    on_unknown: str = 'error',
) -> ConversionResult:
    """
    Convert ECEF X, Y, Z to latitude, longitude, height.

    Args:
        x, y, z: ECEF coordinates in meters
        ellipsoid: Ellipsoid name (case-insensitive) or Ellipsoid
        on_unknown: Policy for unknown ellipsoid names ('error' or 'default')

    Returns:
        ConversionResult with fields lat, lon, height
    """
    try:
        ell = lookup(ellipsoid, on_unknown=on_unknown)
        point = validate_point([x, y, z], 3, label='[X, Y, Z]')
    except (CoordinateError, UnknownEllipsoidError) as e:
        return ConversionResult.failure(f"XYZ to BLH conversion failed: {e}")

    blh = ecef_to_geodetic(*point, ellipsoid=ell)
    return ConversionResult(
        input=point,
        output=tuple(float(v) for v in blh),
        fields=('lat', 'lon', 'height'),
        ellipsoid=ell.name,
    )


def batch_blh_to_xyz(
    coordinates: Any,
    ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID,
    on_unknown: str = 'error',
) -> BatchResult:
    """Convert [[lat, lon, height], ...] to ECEF. Height may be omitted."""
    try:
        ell = lookup(ellipsoid, on_unknown=on_unknown)
    except UnknownEllipsoidError as e:
        return BatchResult(success=False, error_message=f"Batch conversion failed: {e}")

    batch = apply_batch(
        coordinates,
        lambda p: blh_to_xyz(*p, ellipsoid=ell),
        min_arity=2,
        max_arity=3,
        label='[lat, lon, height]',
    )
    batch.ellipsoid = ell.name
    return batch


def batch_xyz_to_blh(
    coordinates: Any,
    ellipsoid: EllipsoidLike = DEFAULT_ELLIPSOID,
    on_unknown: str = 'error',
) -> BatchResult:
    """Convert [[X, Y, Z], ...] to geodetic coordinates."""
    try:
        ell = lookup(ellipsoid, on_unknown=on_unknown)
    except UnknownEllipsoidError as e:
        return BatchResult(success=False, error_message=f"Batch conversion failed: {e}")

    batch = apply_batch(
        coordinates,
        lambda p: xyz_to_blh(*p, ellipsoid=ell),
        min_arity=3,
        label='[X, Y, Z]',
    )
    batch.ellipsoid = ell.name
    return batch
