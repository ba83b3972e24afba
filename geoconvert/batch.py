"""
Batch application of single-point conversions.

Batches are all-or-nothing on shape and per-item on results:

    1. Every item is shape-checked before anything is computed. One item with
       the wrong arity or a non-numeric component rejects the whole batch with
       a single message naming its index.
    2. Each valid item is then converted independently. An item whose
       conversion fails is reported as a failed entry; the others still run.

Input order is preserved and every entry carries its original index.
"""

from typing import Any, Callable, List, Optional, Sequence, Tuple
import logging

from .parsing import CoordinateError, parse_multiple_coordinates, validate_point
from .results import BatchItem, BatchResult, ConversionResult

logger = logging.getLogger(__name__)


def _validate_items(
    items: Any,
    min_arity: int,
    max_arity: Optional[int],
    label: str,
) -> List[Tuple[float, ...]]:
    if isinstance(items, str):
        items = parse_multiple_coordinates(items)
    if not isinstance(items, Sequence):
        raise CoordinateError('coordinates must be an array of coordinate arrays')

    points = []
    for index, item in enumerate(items):
        try:
            points.append(validate_point(item, min_arity, max_arity, label=label))
        except CoordinateError as e:
            raise CoordinateError(f"Item {index}: {e}") from None
    return points


def apply_batch(
    items: Any,
    func: Callable[[Tuple[float, ...]], ConversionResult],
    min_arity: int,
    max_arity: Optional[int] = None,
    label: str = 'coordinate',
) -> BatchResult:
    """
    Apply a single-point conversion to an ordered sequence of points.

    Args:
        items: Sequence of coordinates, or a ';'-separated string
        func: Conversion applied to each validated point tuple
        min_arity: Minimum components per point
        max_arity: Maximum components per point (defaults to ``min_arity``)
        label: Name used in error messages

    Returns:
        BatchResult; ``success`` is False only if the shape check failed
    """
    if items is None:
        return BatchResult(success=False, error_message='coordinates are required')

    try:
        points = _validate_items(items, min_arity, max_arity, label)
    except CoordinateError as e:
        logger.debug(f"Batch rejected: {e}")
        return BatchResult(success=False, error_message=f"Batch conversion failed: {e}")

    results = []
    for index, point in enumerate(points):
        try:
            result = func(point)
        except ValueError as e:
            result = ConversionResult.failure(str(e), input=point)
        if not result.success:
            logger.debug(f"Batch item {index} failed: {result.error_message}")
        results.append(BatchItem(index=index, result=result))

    return BatchResult(results=results)
