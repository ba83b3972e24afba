"""
Generic CRS-to-CRS projection, delegated to pyproj.

Everything that is not a China offset pair or a BLH/XYZ conversion goes
through here: Web Mercator, UTM, Lambert, datum shifts and any custom
definition registered in a ``CRSRegistry``.

Axis order is always (x, y) = (easting, northing) or (longitude, latitude),
matching ``always_xy=True``.
"""

from functools import lru_cache
from typing import Any, Dict, Optional, Sequence, Tuple
import logging

import numpy as np
from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError

from .batch import apply_batch
from .parsing import CoordinateError, validate_point
from .registry import CRSRegistry
from .results import BatchResult, ConversionResult

logger = logging.getLogger(__name__)

ROUND_TRIP_TOLERANCE = 0.001


class ProjectionError(ValueError):
    """Raised when pyproj cannot build or apply a transformation."""


@lru_cache(maxsize=128)
def _transformer(src_def: str, dst_def: str) -> Transformer:
    logger.debug(f"Building transformer {src_def!r} -> {dst_def!r}")
    return Transformer.from_crs(src_def, dst_def, always_xy=True)


class Projector:
    """
    Transforms points between any two CRS known to the registry or pyproj.

    Args:
        registry: Name resolver; a fresh registry with only the predefined
            systems is used when omitted
    """

    def __init__(self, registry: Optional[CRSRegistry] = None):
        self.registry = registry if registry is not None else CRSRegistry()

    def project(self, from_def: str, to_def: str, point: Sequence[float]) -> Tuple[float, ...]:
        """
        Transform one point.

        Args:
            from_def: Source CRS name or definition
            to_def: Target CRS name or definition
            point: (x, y) or (x, y, z)

        Returns:
            Transformed point with the same arity

        Raises:
            ProjectionError: Unknown/malformed definition or a point outside
                the projection's domain
        """
        src = self.registry.resolve(from_def)
        dst = self.registry.resolve(to_def)
        try:
            transformer = _transformer(src, dst)
            result = transformer.transform(*point, errcheck=True)
        except (CRSError, ProjError) as e:
            raise ProjectionError(str(e)) from None

        result = tuple(float(v) for v in result)
        if not np.all(np.isfinite(result)):
            raise ProjectionError(f"Point {list(point)} has no finite image in '{to_def}'")
        return result

    def transform(self, from_crs: str, to_crs: str, coordinates: Any) -> ConversionResult:
        """
        Transform one coordinate and wrap the outcome.

        Returns:
            ConversionResult with fields x, y (and z for 3D input)
        """
        if not from_crs or not to_crs or coordinates is None:
            return ConversionResult.failure('from, to, and coordinates are required')
        try:
            point = validate_point(coordinates, 2, 3, label='[x, y]')
        except CoordinateError as e:
            return ConversionResult.failure(
                f"coordinates must be an array with at least 2 elements [x, y]: {e}",
                from_crs=from_crs,
                to_crs=to_crs,
            )

        try:
            output = self.project(from_crs, to_crs, point)
        except ProjectionError as e:
            return ConversionResult.failure(
                f"Transform failed: {e}", input=point, from_crs=from_crs, to_crs=to_crs
            )

        return ConversionResult(
            input=point,
            output=output,
            fields=('x', 'y', 'z')[:len(output)],
            from_crs=from_crs,
            to_crs=to_crs,
        )

    def batch_transform(self, from_crs: str, to_crs: str, coordinates: Any) -> BatchResult:
        """Transform every point of ``coordinates``; see ``apply_batch``."""
        if not from_crs or not to_crs:
            return BatchResult(success=False, error_message='from, to, and coordinates are required')
        batch = apply_batch(
            coordinates,
            lambda p: self.transform(from_crs, to_crs, p),
            min_arity=2,
            max_arity=3,
            label='[x, y]',
        )
        batch.from_crs = from_crs
        batch.to_crs = to_crs
        return batch

    def inverse_check(
        self,
        from_crs: str,
        to_crs: str,
        test_point: Sequence[float] = (0.0, 0.0),
    ) -> Dict[str, Any]:
        """
        Run a forward then inverse transformation and report the drift.

        Returns:
            Dict with 'forward', 'inverse', 'round_trip_accuracy' and
            'is_accurate' (both deltas below 0.001), or a failure dict
        """
        if not from_crs or not to_crs:
            return {'success': False, 'error': 'from and to are required'}
        try:
            point = validate_point(test_point, 2, label='test point')
            forward = self.project(from_crs, to_crs, point)
            inverse = self.project(to_crs, from_crs, forward)
        except (CoordinateError, ProjectionError) as e:
            return {'success': False, 'error': f"Failed to get inverse transformation: {e}"}

        x_delta = abs(point[0] - inverse[0])
        y_delta = abs(point[1] - inverse[1])
        return {
            'success': True,
            'forward': {'from': from_crs, 'to': to_crs, 'test_point': list(point), 'result': list(forward)},
            'inverse': {'from': to_crs, 'to': from_crs, 'test_point': list(forward), 'result': list(inverse)},
            'round_trip_accuracy': {'x_delta': x_delta, 'y_delta': y_delta},
            'is_accurate': x_delta < ROUND_TRIP_TOLERANCE and y_delta < ROUND_TRIP_TOLERANCE,
        }
