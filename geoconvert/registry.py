"""
Registry of named coordinate reference system definitions.

The registry is an explicit store object: create one and hand it to the
``Projector``, ``SkillHandler`` or CLI that needs it. Names resolve to a
definition string (PROJ string, 'EPSG:xxxx', WKT) that pyproj understands.

GCJ02 and BD09 are registered as plain WGS84 longlat placeholders so that
they can appear in generic projection requests. Their real offsets are only
applied by ``geoconvert.china``.
"""

from typing import Dict, List, Optional
import logging

from pyproj import CRS
from pyproj.exceptions import CRSError

logger = logging.getLogger(__name__)


PREDEFINED_CRS: Dict[str, str] = {
    # WGS84 - World Geodetic System 1984 (GPS coordinates)
    'WGS84': '+proj=longlat +datum=WGS84 +no_defs',
    'EPSG:4326': '+proj=longlat +datum=WGS84 +no_defs',

    # Web Mercator (Google Maps, OpenStreetMap)
    'EPSG:3857': '+proj=merc +a=6378137 +b=6378137 +lat_ts=0.0 +lon_0=0.0 +x_0=0.0 +y_0=0 +k=1.0 +units=m +nadgrids=@null +wktext +no_defs',
    'WEB_MERCATOR': '+proj=merc +a=6378137 +b=6378137 +lat_ts=0.0 +lon_0=0.0 +x_0=0.0 +y_0=0 +k=1.0 +units=m +nadgrids=@null +wktext +no_defs',

    # Offset systems, placeholders for generic projection requests
    'GCJ02': '+proj=longlat +datum=WGS84 +no_defs',
    'BD09': '+proj=longlat +datum=WGS84 +no_defs',

    # China Geodetic Coordinate System 2000
    'EPSG:4490': '+proj=longlat +ellps=GRS80 +no_defs',

    # UTM zones
    'EPSG:32633': '+proj=utm +zone=33 +datum=WGS84 +units=m +no_defs',
    'EPSG:32650': '+proj=utm +zone=50 +datum=WGS84 +units=m +no_defs',

    # Xian 1980 and Beijing 1954
    'EPSG:4214': '+proj=longlat +ellps=krass +towgs84=15.8,-154.4,-82.3,0,0,0,0 +no_defs',
    'EPSG:4610': '+proj=longlat +ellps=krass +towgs84=24.5,-123.1,-94.2,0.11,-0.52,0.76,0.61 +no_defs',

    # Lambert 93 (France)
    'EPSG:2154': '+proj=lcc +lat_1=49 +lat_2=44 +lat_0=46.5 +lon_0=3 +x_0=700000 +y_0=6600000 +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +units=m +no_defs',

    # World Mercator
    'EPSG:3395': '+proj=merc +lon_0=0 +k=1 +x_0=0 +y_0=0 +datum=WGS84 +units=m +no_defs',
}


class CRSDefinitionError(ValueError):
    """Raised when a CRS definition cannot be parsed."""


def parse_crs(definition: str) -> CRS:
    """
    Parse a definition string with pyproj.

    Raises:
        CRSDefinitionError: If pyproj rejects the definition
    """
    try:
        return CRS.from_user_input(definition)
    except CRSError as e:
        raise CRSDefinitionError(f"Invalid CRS definition '{definition}': {e}") from None


class CRSRegistry:
    """
    Name -> definition store with the predefined systems built in.

    Custom definitions shadow predefined ones of the same name.
    """

    def __init__(self, custom: Optional[Dict[str, str]] = None):
        self._custom: Dict[str, str] = {}
        for name, definition in (custom or {}).items():
            result = self.define(name, definition)
            if not result['success']:
                raise CRSDefinitionError(result['error'])

    def define(self, name: str, definition: str) -> Dict[str, object]:
        """
        Register a custom CRS after checking that pyproj can parse it.

        Returns:
            Dict with 'success' and either the stored entry or 'error'
        """
        if not name or not definition:
            return {'success': False, 'error': 'Both name and proj4def are required'}
        try:
            parse_crs(definition)
        except CRSDefinitionError as e:
            return {'success': False, 'error': f"Failed to define CRS: {e}"}

        self._custom[name] = definition
        logger.info(f"Defined custom CRS '{name}'")
        return {
            'success': True,
            'message': f"CRS '{name}' defined successfully",
            'name': name,
            'definition': definition,
        }

    def lookup(self, name: str) -> Optional[str]:
        """Definition for a registered name, or None."""
        if name in self._custom:
            return self._custom[name]
        if name in PREDEFINED_CRS:
            return PREDEFINED_CRS[name]
        return PREDEFINED_CRS.get(name.strip().upper()) if isinstance(name, str) else None

    def resolve(self, name: str) -> str:
        """Definition for a registered name, otherwise the name itself."""
        definition = self.lookup(name)
        return definition if definition is not None else name

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    @property
    def custom(self) -> Dict[str, str]:
        return dict(self._custom)

    def list(self) -> Dict[str, List[str]]:
        predefined = list(PREDEFINED_CRS)
        custom = list(self._custom)
        return {'predefined': predefined, 'custom': custom, 'all': predefined + custom}

    def info(self, name: str) -> Dict[str, object]:
        """
        Describe a CRS.

        Works for registered names and for anything pyproj accepts directly
        (e.g. 'EPSG:4979').
        """
        if not name:
            return {'success': False, 'error': 'crs is required'}
        definition = self.resolve(name)
        try:
            crs = parse_crs(definition)
        except CRSDefinitionError:
            return {'success': False, 'error': f"CRS '{name}' not found"}

        if crs.is_geographic:
            proj_name = 'longlat'
        elif crs.is_geocentric:
            proj_name = 'geocent'
        elif crs.coordinate_operation is not None:
            proj_name = crs.coordinate_operation.method_name
        else:
            proj_name = None
        units = crs.axis_info[0].unit_name if crs.axis_info else None

        return {
            'success': True,
            'crs': name,
            'definition': definition,
            'name': crs.name or name,
            'units': units,
            'proj_name': proj_name,
        }
