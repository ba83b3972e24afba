"""
Result types returned by every public conversion operation.

Conversions never raise for bad input. They return a ``ConversionResult``
(single point) or a ``BatchResult`` (sequence of points) that carries either
the computed values or a human-readable error message. Both serialise to the
JSON-shaped dictionaries used by the command handler and the CLI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass
class ConversionResult:
    """
    Outcome of converting a single coordinate.

    Attributes:
        input: Echo of the validated input values
        output: Converted values, in the order named by ``fields``
        fields: Names of the output components (e.g. ('X', 'Y', 'Z'))
        from_crs: Source coordinate system tag, when applicable
        to_crs: Target coordinate system tag, when applicable
        ellipsoid: Ellipsoid name used by geodetic conversions
        success: False when the conversion could not be performed
        error_message: Reason for failure
    """
    input: Tuple[float, ...] = ()
    output: Tuple[float, ...] = ()
    fields: Tuple[str, ...] = ()
    from_crs: Optional[str] = None
    to_crs: Optional[str] = None
    ellipsoid: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None

    @classmethod
    def failure(cls, message: str, **context: Any) -> "ConversionResult":
        """Build a failed result, keeping whatever context is known."""
        return cls(success=False, error_message=message, **context)

    @property
    def named(self) -> Dict[str, float]:
        """Output components keyed by field name."""
        return dict(zip(self.fields, self.output))

    def __getitem__(self, name: str) -> float:
        try:
            return self.named[name]
        except KeyError:
            raise KeyError(f"Result has no field '{name}' (fields: {', '.join(self.fields)})") from None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {'success': False, 'error': self.error_message}

        data: Dict[str, Any] = {'success': True}
        if self.from_crs is not None:
            data['from'] = self.from_crs
        if self.to_crs is not None:
            data['to'] = self.to_crs
        if self.ellipsoid is not None:
            data['ellipsoid'] = self.ellipsoid
        data['input'] = list(self.input)
        data['output'] = list(self.output)
        data.update({name: float(value) for name, value in self.named.items()})
        return data


@dataclass
class BatchItem:
    """One converted entry of a batch, tagged with its input position."""
    index: int
    result: ConversionResult

    def to_dict(self) -> Dict[str, Any]:
        data = {'index': self.index}
        data.update(self.result.to_dict())
        return data


@dataclass
class BatchResult:
    """
    Outcome of converting an ordered sequence of coordinates.

    ``success`` is False only when the batch as a whole was rejected; the
    per-item outcome lives on each ``BatchItem.result``.
    """
    results: List[BatchItem] = field(default_factory=list)
    from_crs: Optional[str] = None
    to_crs: Optional[str] = None
    ellipsoid: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def failed_indices(self) -> List[int]:
        return [item.index for item in self.results if not item.result.success]

    def outputs(self) -> Sequence[Tuple[float, ...]]:
        return [item.result.output for item in self.results]

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {'success': False, 'error': self.error_message}

        data: Dict[str, Any] = {'success': True}
        if self.from_crs is not None:
            data['from'] = self.from_crs
        if self.to_crs is not None:
            data['to'] = self.to_crs
        if self.ellipsoid is not None:
            data['ellipsoid'] = self.ellipsoid
        data['count'] = self.count
        data['results'] = [item.to_dict() for item in self.results]
        return data
