"""
Coordinate parsing and shape validation.

Every conversion validates its input here before touching any arithmetic,
so a wrong-arity or non-numeric coordinate is reported as a descriptive
``CoordinateError`` instead of leaking NaN through the formulas.

Accepted text formats:
    Single point:    "116.404,39.915"  "116.404 39.915"  "[116.404, 39.915]"
    Multiple points: "116.404,39.915;121.473,31.230"
"""

import math
import re
from numbers import Real
from typing import Any, List, Optional, Sequence, Tuple

_SEPARATORS = re.compile(r'[,\s]+')


class CoordinateError(ValueError):
    """Raised when a coordinate has the wrong shape or a non-numeric value."""


def _to_float(value: Any, position: int) -> float:
    if isinstance(value, bool):
        raise CoordinateError(f"Component {position} is a boolean, expected a number")
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise CoordinateError(f"Component {position} is not a number: {value!r}") from None
    else:
        raise CoordinateError(
            f"Component {position} has unsupported type {type(value).__name__}"
        )
    if not math.isfinite(number):
        raise CoordinateError(f"Component {position} is not finite: {value!r}")
    return number


def parse_coordinates(coords: Any) -> List[float]:
    """
    Parse a single coordinate from text or a sequence.

    Args:
        coords: A string in one of the accepted formats, or a sequence of
            numbers / numeric strings

    Returns:
        List of floats (arity is not checked here, see ``validate_point``)

    Raises:
        CoordinateError: If a component is not a finite number
    """
    if isinstance(coords, str):
        cleaned = coords.replace('[', ' ').replace(']', ' ')
        parts = [p for p in _SEPARATORS.split(cleaned) if p]
        if not parts:
            raise CoordinateError(f"No coordinate values found in {coords!r}")
        return [_to_float(p, i) for i, p in enumerate(parts)]

    if isinstance(coords, Sequence) or hasattr(coords, '__array__'):
        return [_to_float(c, i) for i, c in enumerate(list(coords))]

    raise CoordinateError(
        f"Coordinates must be a string or a sequence, got {type(coords).__name__}"
    )


def parse_multiple_coordinates(coords: Any) -> List[List[float]]:
    """
    Parse several coordinates.

    Accepts a ';'-separated string or a sequence whose items are each
    accepted by ``parse_coordinates``.
    """
    if isinstance(coords, str):
        chunks = [c for c in coords.split(';') if c.strip()]
        if not chunks:
            raise CoordinateError(f"No coordinates found in {coords!r}")
        return [parse_coordinates(c) for c in chunks]

    if isinstance(coords, Sequence):
        return [parse_coordinates(c) for c in coords]

    raise CoordinateError(
        f"Coordinates must be a string or a list of coordinates, got {type(coords).__name__}"
    )


def validate_point(
    coords: Any,
    min_arity: int,
    max_arity: Optional[int] = None,
    label: str = 'coordinate',
) -> Tuple[float, ...]:
    """
    Parse a coordinate and check its arity.

    Args:
        coords: Raw coordinate (string or sequence)
        min_arity: Minimum number of components
        max_arity: Maximum number of components (defaults to ``min_arity``)
        label: Name used in error messages, e.g. '[lon, lat]'

    Returns:
        Tuple of floats

    Raises:
        CoordinateError: On wrong arity or non-numeric values
    """
    if max_arity is None:
        max_arity = min_arity

    values = parse_coordinates(coords)
    if not min_arity <= len(values) <= max_arity:
        if min_arity == max_arity:
            expected = f"{min_arity}"
        else:
            expected = f"{min_arity} to {max_arity}"
        raise CoordinateError(
            f"{label} must have {expected} components, got {len(values)}"
        )
    return tuple(values)


def validate_latitude(lat: float) -> None:
    """Latitude must lie in [-90, 90] degrees."""
    if not -90.0 <= lat <= 90.0:
        raise CoordinateError(f"Latitude {lat} is outside [-90, 90]")
