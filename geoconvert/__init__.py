"""
geoconvert - coordinate conversion toolkit

Converts coordinates between the Chinese offset systems (WGS84, GCJ02,
BD09), between geodetic (BLH) and Earth-Centered Earth-Fixed (XYZ)
coordinates on a choice of reference ellipsoids, and between arbitrary CRS
definitions through pyproj.

Conventions:
    - Planar / China offset points are (longitude, latitude) or (x, y)
    - Geodetic points are (latitude, longitude, height)
    - Angles in degrees, lengths in meters

Every public conversion returns a ``ConversionResult`` or ``BatchResult``
instead of raising on bad input.
"""

__version__ = "1.0.0"

from .results import ConversionResult, BatchResult, BatchItem
from .parsing import CoordinateError, parse_coordinates, parse_multiple_coordinates
from .ellipsoids import (
    Ellipsoid,
    ELLIPSOIDS,
    UnknownEllipsoidError,
    ellipsoid_info,
    list_ellipsoids,
    lookup as lookup_ellipsoid,
)
from .batch import apply_batch
from .registry import CRSRegistry, CRSDefinitionError, PREDEFINED_CRS
from .projection import Projector, ProjectionError
from .china import (
    ChinaCRS,
    UnsupportedCRSPair,
    wgs84_to_gcj02,
    gcj02_to_wgs84,
    gcj02_to_bd09,
    bd09_to_gcj02,
    wgs84_to_bd09,
    bd09_to_wgs84,
    transform_china,
    batch_transform_china,
)
from .geodetic import (
    GeodeticCoordinate,
    CartesianCoordinate,
    geodetic_to_ecef,
    ecef_to_geodetic,
    blh_to_xyz,
    xyz_to_blh,
    batch_blh_to_xyz,
    batch_xyz_to_blh,
    deg_to_rad,
    rad_to_deg,
)
from .elevation import ElevationClient, ElevationResult
from .config import Settings, ElevationSettings
from .handler import SkillHandler

__all__ = [
    "ConversionResult",
    "BatchResult",
    "BatchItem",
    "CoordinateError",
    "parse_coordinates",
    "parse_multiple_coordinates",
    "Ellipsoid",
    "ELLIPSOIDS",
    "UnknownEllipsoidError",
    "ellipsoid_info",
    "list_ellipsoids",
    "lookup_ellipsoid",
    "apply_batch",
    "CRSRegistry",
    "CRSDefinitionError",
    "PREDEFINED_CRS",
    "Projector",
    "ProjectionError",
    "ChinaCRS",
    "UnsupportedCRSPair",
    "wgs84_to_gcj02",
    "gcj02_to_wgs84",
    "gcj02_to_bd09",
    "bd09_to_gcj02",
    "wgs84_to_bd09",
    "bd09_to_wgs84",
    "transform_china",
    "batch_transform_china",
    "GeodeticCoordinate",
    "CartesianCoordinate",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "blh_to_xyz",
    "xyz_to_blh",
    "batch_blh_to_xyz",
    "batch_xyz_to_blh",
    "deg_to_rad",
    "rad_to_deg",
    "ElevationClient",
    "ElevationResult",
    "Settings",
    "ElevationSettings",
    "SkillHandler",
]
