"""
Command dispatch for skill/agent integrations.

``SkillHandler.execute(command, args)`` takes a command name and a mapping of
arguments (strings or numbers, as they arrive from JSON or a command line)
and returns a JSON-serialisable dict that always has a 'success' key and,
on failure, an 'error' message.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

from . import __version__
from .china import batch_transform_china, transform_china
from .config import Settings
from .elevation import ElevationClient
from .ellipsoids import ellipsoid_info, list_ellipsoids
from .geodetic import batch_blh_to_xyz, batch_xyz_to_blh, blh_to_xyz, xyz_to_blh
from .projection import Projector
from .registry import CRSRegistry

logger = logging.getLogger(__name__)

COMMANDS = [
    ('transform', 'Transform coordinates between CRS'),
    ('transform-china', 'Transform Chinese coordinates (WGS84/GCJ02/BD09)'),
    ('batch-transform', 'Transform multiple coordinates'),
    ('batch-transform-china', 'Transform multiple Chinese coordinates'),
    ('list-crs', 'List all available coordinate systems'),
    ('define-crs', 'Define a custom CRS'),
    ('get-proj4-def', 'Get CRS definition'),
    ('inverse-transform', 'Get inverse transformation info'),
    ('blh-to-xyz', 'Convert BLH (lat,lon,height) to ECEF XYZ'),
    ('xyz-to-blh', 'Convert ECEF XYZ to BLH (lat,lon,height)'),
    ('batch-blh-to-xyz', 'Batch convert BLH to ECEF XYZ'),
    ('batch-xyz-to-blh', 'Batch convert ECEF XYZ to BLH'),
    ('ellipsoid-info', 'Get ellipsoid parameters'),
    ('list-ellipsoids', 'List known ellipsoids'),
    ('elevation', 'Look up terrain elevation at a WGS84 position'),
]

ALIASES = {
    'transform-coordinates': 'transform',
    'china-transform': 'transform-china',
    'china': 'transform-china',
    'batch': 'batch-transform',
    'list': 'list-crs',
    'define': 'define-crs',
    'crs-info': 'get-proj4-def',
    'info': 'get-proj4-def',
    'inverse': 'inverse-transform',
    'blh-to-ecef': 'blh-to-xyz',
    'ecef-to-blh': 'xyz-to-blh',
    'batch-blh-to-ecef': 'batch-blh-to-xyz',
    'batch-ecef-to-blh': 'batch-xyz-to-blh',
    'ellipsoid': 'ellipsoid-info',
}


class MissingArgument(ValueError):
    """Raised when a command is called without a required argument."""


def _require(args: Mapping[str, Any], *names: str) -> Any:
    """First present argument among ``names`` (aliases of one parameter)."""
    for name in names:
        value = args.get(name)
        if value is not None and value != '':
            return value
    raise MissingArgument(f"Missing required argument: {names[0]}")


class SkillHandler:
    """
    Dispatches named commands to the conversion functions.

    Args:
        settings: Defaults for ellipsoid and policies
        registry: CRS registry shared by all commands of this handler
        projector: Projection engine (built on ``registry`` when omitted)
        elevation: Elevation client (built from ``settings`` when omitted)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[CRSRegistry] = None,
        projector: Optional[Projector] = None,
        elevation: Optional[ElevationClient] = None,
    ):
        self.settings = settings if settings is not None else Settings()
        if registry is None:
            registry = projector.registry if projector is not None else self.settings.build_registry()
        self.registry = registry
        self.projector = projector if projector is not None else Projector(registry)
        self._elevation = elevation

        self._handlers: Dict[str, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
            'transform': self._transform,
            'transform-china': self._transform_china,
            'batch-transform': self._batch_transform,
            'batch-transform-china': self._batch_transform_china,
            'list-crs': self._list_crs,
            'define-crs': self._define_crs,
            'get-proj4-def': self._crs_info,
            'inverse-transform': self._inverse,
            'blh-to-xyz': self._blh_to_xyz,
            'xyz-to-blh': self._xyz_to_blh,
            'batch-blh-to-xyz': self._batch_blh_to_xyz,
            'batch-xyz-to-blh': self._batch_xyz_to_blh,
            'ellipsoid-info': self._ellipsoid_info,
            'list-ellipsoids': self._list_ellipsoids,
            'elevation': self._elevation_lookup,
        }

    @property
    def elevation(self) -> ElevationClient:
        if self._elevation is None:
            self._elevation = self.settings.build_elevation_client()
        return self._elevation

    def execute(self, command: str, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a command.

        Args:
            command: Command name or alias (see ``get_commands``)
            args: Command arguments

        Returns:
            JSON-serialisable dict with at least 'success'
        """
        args = args or {}
        name = ALIASES.get(command, command)
        handler = self._handlers.get(name)
        if handler is None:
            available = ', '.join(c for c, _ in COMMANDS)
            return {'success': False, 'error': f"Unknown command: {command}. Available commands: {available}"}

        logger.debug(f"Executing {name} with {dict(args)}")
        try:
            return handler(args)
        except ValueError as e:
            return {'success': False, 'error': str(e)}

    @staticmethod
    def get_commands() -> List[Dict[str, str]]:
        return [{'name': name, 'description': desc} for name, desc in COMMANDS]

    @staticmethod
    def get_metadata() -> Dict[str, str]:
        return {
            'name': 'geoconvert',
            'version': __version__,
            'description': 'Coordinate system transformation: China offsets, BLH/ECEF and pyproj projections',
            'license': 'MIT',
        }

    # Command implementations

    def _ellipsoid(self, args: Mapping[str, Any]) -> str:
        return args.get('ellipsoid') or self.settings.default_ellipsoid

    def _transform(self, args):
        return self.projector.transform(
            _require(args, 'from'), _require(args, 'to'), _require(args, 'coordinates')
        ).to_dict()

    def _transform_china(self, args):
        return transform_china(
            _require(args, 'from'), _require(args, 'to'), _require(args, 'coordinates'),
            projector=self.projector,
        ).to_dict()

    def _batch_transform(self, args):
        return self.projector.batch_transform(
            _require(args, 'from'), _require(args, 'to'), _require(args, 'coordinates')
        ).to_dict()

    def _batch_transform_china(self, args):
        return batch_transform_china(
            _require(args, 'from'), _require(args, 'to'), _require(args, 'coordinates'),
            projector=self.projector,
        ).to_dict()

    def _list_crs(self, args):
        data: Dict[str, Any] = {'success': True}
        data.update(self.registry.list())
        return data

    def _define_crs(self, args):
        return self.registry.define(_require(args, 'name'), _require(args, 'proj4def', 'definition'))

    def _crs_info(self, args):
        return self.registry.info(_require(args, 'crs'))

    def _inverse(self, args):
        test_point = args.get('test_point') or args.get('testPoint') or (0.0, 0.0)
        return self.projector.inverse_check(_require(args, 'from'), _require(args, 'to'), test_point)

    def _blh_to_xyz(self, args):
        return blh_to_xyz(
            _require(args, 'lat', 'latitude'),
            _require(args, 'lon', 'longitude'),
            args.get('height', 0.0),
            ellipsoid=self._ellipsoid(args),
            on_unknown=self.settings.on_unknown_ellipsoid,
        ).to_dict()

    def _xyz_to_blh(self, args):
        return xyz_to_blh(
            _require(args, 'X', 'x'),
            _require(args, 'Y', 'y'),
            _require(args, 'Z', 'z'),
            ellipsoid=self._ellipsoid(args),
            on_unknown=self.settings.on_unknown_ellipsoid,
        ).to_dict()

    def _batch_blh_to_xyz(self, args):
        return batch_blh_to_xyz(
            _require(args, 'coordinates'),
            ellipsoid=self._ellipsoid(args),
            on_unknown=self.settings.on_unknown_ellipsoid,
        ).to_dict()

    def _batch_xyz_to_blh(self, args):
        return batch_xyz_to_blh(
            _require(args, 'coordinates'),
            ellipsoid=self._ellipsoid(args),
            on_unknown=self.settings.on_unknown_ellipsoid,
        ).to_dict()

    def _ellipsoid_info(self, args):
        return ellipsoid_info(self._ellipsoid(args), on_unknown=self.settings.on_unknown_ellipsoid)

    def _list_ellipsoids(self, args):
        return {'success': True, 'ellipsoids': list_ellipsoids()}

    def _elevation_lookup(self, args):
        return self.elevation.lookup(
            _require(args, 'lat', 'latitude'), _require(args, 'lon', 'longitude')
        ).to_dict()
