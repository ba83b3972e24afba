"""
Tests for coordinate parsing, batch application and result types.
"""

import pytest
import numpy as np

from geoconvert.batch import apply_batch
from geoconvert.parsing import (
    CoordinateError,
    parse_coordinates,
    parse_multiple_coordinates,
    validate_latitude,
    validate_point,
)
from geoconvert.results import BatchItem, BatchResult, ConversionResult


class TestParseCoordinates:
    """Tests for single coordinate parsing."""

    @pytest.mark.parametrize('text', [
        '116.404,39.915',
        '116.404, 39.915',
        '116.404 39.915',
        '[116.404, 39.915]',
        '  116.404 ,39.915  ',
    ])
    def test_text_formats(self, text):
        assert parse_coordinates(text) == [116.404, 39.915]

    def test_sequence(self):
        assert parse_coordinates([1, '2.5', 3.0]) == [1.0, 2.5, 3.0]

    def test_numpy_array(self):
        assert parse_coordinates(np.array([1.0, 2.0])) == [1.0, 2.0]

    def test_negative_and_exponent(self):
        assert parse_coordinates('-2.1e6,4.3e6') == [-2.1e6, 4.3e6]

    def test_empty_string(self):
        with pytest.raises(CoordinateError):
            parse_coordinates('  ')

    def test_non_numeric(self):
        with pytest.raises(CoordinateError, match='Component 1'):
            parse_coordinates('116.404,abc')

    def test_infinite(self):
        with pytest.raises(CoordinateError, match='not finite'):
            parse_coordinates([1.0, float('inf')])

    def test_boolean(self):
        with pytest.raises(CoordinateError):
            parse_coordinates([True, 1.0])

    def test_unsupported_type(self):
        with pytest.raises(CoordinateError):
            parse_coordinates(42)

    def test_is_value_error(self):
        """Callers can catch plain ValueError."""
        with pytest.raises(ValueError):
            parse_coordinates('x')


class TestParseMultiple:

    def test_semicolon_string(self):
        parsed = parse_multiple_coordinates('116.404,39.915;121.473,31.230')
        assert parsed == [[116.404, 39.915], [121.473, 31.230]]

    def test_trailing_semicolon(self):
        assert parse_multiple_coordinates('1,2;') == [[1.0, 2.0]]

    def test_nested_list(self):
        assert parse_multiple_coordinates([[1, 2], '3 4']) == [[1.0, 2.0], [3.0, 4.0]]

    def test_empty_string(self):
        with pytest.raises(CoordinateError):
            parse_multiple_coordinates(';')


class TestValidation:

    def test_exact_arity(self):
        assert validate_point([1, 2], 2) == (1.0, 2.0)

    def test_arity_range(self):
        assert validate_point([1, 2, 3], 2, 3) == (1.0, 2.0, 3.0)

    def test_arity_message(self):
        with pytest.raises(CoordinateError, match=r'\[lon, lat\] must have 2 components, got 3'):
            validate_point([1, 2, 3], 2, label='[lon, lat]')

    def test_arity_range_message(self):
        with pytest.raises(CoordinateError, match='2 to 3 components, got 1'):
            validate_point([1], 2, 3)

    @pytest.mark.parametrize('lat', [-90.0, 0.0, 90.0])
    def test_latitude_ok(self, lat):
        validate_latitude(lat)

    @pytest.mark.parametrize('lat', [-90.0001, 90.5, 180.0])
    def test_latitude_out_of_range(self, lat):
        with pytest.raises(CoordinateError):
            validate_latitude(lat)


class TestApplyBatch:
    """Tests for the batch policy."""

    @staticmethod
    def _double(point):
        return ConversionResult(input=point, output=tuple(2 * v for v in point), fields=('a', 'b'))

    def test_order_and_indices(self):
        batch = apply_batch([[1, 2], [3, 4], [5, 6]], self._double, min_arity=2)

        assert batch.success
        assert [item.index for item in batch.results] == [0, 1, 2]
        assert batch.outputs() == [(2.0, 4.0), (6.0, 8.0), (10.0, 12.0)]

    def test_shape_checked_before_conversion(self):
        """Nothing is converted when any item has the wrong shape."""
        calls = []

        def record(point):
            calls.append(point)
            return self._double(point)

        batch = apply_batch([[1, 2], [3, 4], [5]], record, min_arity=2)

        assert not batch.success
        assert 'Item 2' in batch.error_message
        assert calls == []

    def test_item_failure_is_isolated(self):
        def fail_on_negative(point):
            if point[0] < 0:
                return ConversionResult.failure('negative', input=point)
            return self._double(point)

        batch = apply_batch([[1, 2], [-1, 2], [3, 4]], fail_on_negative, min_arity=2)

        assert batch.success
        assert batch.failed_indices == [1]
        assert batch.results[2].result.output == (6.0, 8.0)

    def test_raised_value_error_becomes_failure(self):
        def explode(point):
            raise ValueError('boom')

        batch = apply_batch([[1, 2]], explode, min_arity=2)
        assert batch.success
        assert batch.results[0].result.error_message == 'boom'

    def test_none(self):
        batch = apply_batch(None, self._double, min_arity=2)
        assert not batch.success

    def test_empty(self):
        batch = apply_batch([], self._double, min_arity=2)
        assert batch.success
        assert batch.count == 0


class TestResults:

    def test_named_access(self):
        result = ConversionResult(input=(1.0,), output=(10.0, 20.0), fields=('x', 'y'))
        assert result['y'] == 20.0
        assert result.named == {'x': 10.0, 'y': 20.0}

    def test_missing_field(self):
        result = ConversionResult(output=(10.0,), fields=('x',))
        with pytest.raises(KeyError):
            result['z']

    def test_failure_dict(self):
        data = ConversionResult.failure('bad input').to_dict()
        assert data == {'success': False, 'error': 'bad input'}

    def test_batch_dict(self):
        item = BatchItem(index=0, result=ConversionResult(input=(1.0, 2.0), output=(3.0, 4.0),
                                                          fields=('x', 'y')))
        data = BatchResult(results=[item], from_crs='A', to_crs='B').to_dict()

        assert data['count'] == 1
        assert data['from'] == 'A'
        assert data['results'][0] == {
            'index': 0, 'success': True, 'input': [1.0, 2.0], 'output': [3.0, 4.0], 'x': 3.0, 'y': 4.0,
        }

    def test_rejected_batch_dict(self):
        data = BatchResult(success=False, error_message='nope').to_dict()
        assert data == {'success': False, 'error': 'nope'}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
