"""
Tests for geodetic <-> ECEF conversion.

These tests verify the correctness of:
    - BLH to ECEF at known anchor points
    - Bowring's ECEF to BLH recovery
    - Round trips over a wide range of positions and heights
    - Result wrapping, validation and batch conversion
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose

from geoconvert.ellipsoids import ELLIPSOIDS
from geoconvert.geodetic import (
    CartesianCoordinate,
    GeodeticCoordinate,
    batch_blh_to_xyz,
    batch_xyz_to_blh,
    blh_to_xyz,
    deg_to_rad,
    ecef_to_geodetic,
    geodetic_to_ecef,
    rad_to_deg,
    xyz_to_blh,
)
from geoconvert.parsing import CoordinateError

WGS84 = ELLIPSOIDS['WGS84']


class TestGeodeticToECEF:
    """Tests for BLH to ECEF conversion."""

    def test_equator_prime_meridian(self):
        """Point at equator/prime meridian should be on +X axis at distance a."""
        result = geodetic_to_ecef(0, 0, 0)

        assert_allclose(result[0], 6378137.0, rtol=1e-10)
        assert_allclose(result[1], 0, atol=1e-6)
        assert_allclose(result[2], 0, atol=1e-6)

    def test_equator_90_east(self):
        """Point at equator/90°E should be on +Y axis."""
        result = geodetic_to_ecef(0, 90, 0)

        assert_allclose(result[0], 0, atol=1e-6)
        assert_allclose(result[1], WGS84.a, rtol=1e-10)
        assert_allclose(result[2], 0, atol=1e-6)

    def test_north_pole(self):
        """North pole should be on +Z axis at the semi-minor axis."""
        result = geodetic_to_ecef(90, 0, 0)

        assert_allclose(result[0], 0, atol=1e-6)
        assert_allclose(result[1], 0, atol=1e-6)
        assert_allclose(result[2], WGS84.b, rtol=1e-10)

    def test_south_pole(self):
        result = geodetic_to_ecef(-90, 0, 0)
        assert_allclose(result[2], -WGS84.b, rtol=1e-10)

    def test_height_increases_distance(self):
        """Adding height should move the point outward along the normal."""
        result_0 = geodetic_to_ecef(45, 45, 0)
        result_1000 = geodetic_to_ecef(45, 45, 1000)

        dist = np.linalg.norm(result_1000 - result_0)
        assert dist == pytest.approx(1000, rel=1e-9)

    def test_negative_height(self):
        """Points below the ellipsoid are allowed."""
        result_0 = geodetic_to_ecef(39.915, 116.404, 0)
        result_neg = geodetic_to_ecef(39.915, 116.404, -100)
        assert np.linalg.norm(result_neg) < np.linalg.norm(result_0)

    def test_ellipsoid_changes_result(self):
        """Clarke 1866 has a larger equatorial radius than WGS84."""
        wgs = geodetic_to_ecef(0, 0, 0, 'WGS84')
        clarke = geodetic_to_ecef(0, 0, 0, 'Clarke1866')
        assert_allclose(clarke[0], 6378206.4, rtol=1e-10)
        assert clarke[0] > wgs[0]


class TestECEFToGeodetic:
    """Tests for Bowring's ECEF to BLH conversion."""

    def test_north_pole(self):
        """Pole anchor: latitude recovered as 90° without special-casing."""
        result = ecef_to_geodetic(0, 0, 6356752.314)
        assert abs(result[0] - 90) < 0.1

    def test_south_pole(self):
        result = ecef_to_geodetic(0, 0, -6356752.314)
        assert abs(result[0] + 90) < 0.1

    def test_pole_is_finite(self):
        """No division by zero when p = 0."""
        result = ecef_to_geodetic(0, 0, 6356752.314)
        assert np.all(np.isfinite(result))

    @pytest.mark.parametrize('xyz', [
        (0.0, 0.0, 0.0),
        (1000.0, 0.0, 0.0),
        (0.0, -20000.0, 0.0),
        (1000.0, 0.0, 500.0),
        (-1000.0, 0.0, -500.0),
    ])
    def test_near_center_latitude_in_range(self, xyz):
        """Points deep inside the Earth still give a finite latitude in [-90, 90]."""
        result = ecef_to_geodetic(*xyz)
        assert np.all(np.isfinite(result))
        assert -90.0 <= result[0] <= 90.0

    def test_center(self):
        lat, lon, h = ecef_to_geodetic(0, 0, 0)
        assert lat == 0.0
        assert h == pytest.approx(-WGS84.a)

    def test_near_center_keeps_hemisphere(self):
        assert ecef_to_geodetic(1000.0, 0.0, 500.0)[0] > 0
        assert ecef_to_geodetic(1000.0, 0.0, -500.0)[0] < 0

    def test_equator(self):
        result = ecef_to_geodetic(6378137.0 + 250.0, 0, 0)
        assert_allclose(result, [0, 0, 250.0], atol=1e-6)

    def test_southern_hemisphere(self):
        """Sydney round trip keeps the negative latitude."""
        xyz = geodetic_to_ecef(-33.8688, 151.2093, 50)
        lat, lon, h = ecef_to_geodetic(*xyz)

        assert lat < 0
        assert abs(lat + 33.8688) < 1e-4
        assert abs(lon - 151.2093) < 1e-4
        assert abs(h - 50) < 0.1

    def test_western_hemisphere(self):
        xyz = geodetic_to_ecef(40.7128, -74.0060, 10)
        lat, lon, h = ecef_to_geodetic(*xyz)
        assert_allclose([lat, lon, h], [40.7128, -74.0060, 10], atol=1e-6)


class TestRoundTrip:
    """BLH -> XYZ -> BLH must reproduce the input."""

    def test_random_points(self):
        rng = np.random.default_rng(20240601)
        lats = rng.uniform(-89, 89, 1000)
        lons = rng.uniform(-179, 179, 1000)
        heights = rng.uniform(-500, 20000, 1000)

        for lat, lon, h in zip(lats, lons, heights):
            xyz = geodetic_to_ecef(lat, lon, h)
            lat2, lon2, h2 = ecef_to_geodetic(*xyz)

            assert abs(lat2 - lat) < 1e-6, f"latitude drift at ({lat}, {lon}, {h})"
            assert abs(lon2 - lon) < 1e-6, f"longitude drift at ({lat}, {lon}, {h})"
            assert abs(h2 - h) < 1e-3, f"height drift at ({lat}, {lon}, {h})"

    @pytest.mark.parametrize('name', list(ELLIPSOIDS))
    def test_all_ellipsoids(self, name):
        xyz = geodetic_to_ecef(39.915, 116.404, 100, name)
        assert_allclose(ecef_to_geodetic(*xyz, ellipsoid=name), [39.915, 116.404, 100], atol=1e-6)

    def test_high_altitude(self):
        """Aircraft and low orbit heights stay within the contract bound."""
        for h in (10000.0, 100000.0):
            xyz = geodetic_to_ecef(52.0, 5.0, h)
            lat, lon, h2 = ecef_to_geodetic(*xyz)
            assert abs(lat - 52.0) < 1e-4
            assert abs(lon - 5.0) < 1e-4
            assert abs(h2 - h) < 0.1


class TestCoordinateTypes:
    """Tests for the value types."""

    def test_geodetic_to_ecef_and_back(self):
        point = GeodeticCoordinate(latitude=31.230, longitude=121.473, height=50)
        ecef = point.to_ecef()

        assert isinstance(ecef, CartesianCoordinate)
        back = ecef.to_geodetic()
        assert_allclose(back.as_array(), point.as_array(), atol=1e-6)

    def test_latitude_out_of_range(self):
        with pytest.raises(CoordinateError):
            GeodeticCoordinate(latitude=91.0, longitude=0.0)

    def test_longitude_not_wrapped(self):
        """Unwrapped longitudes are accepted and give the same ECEF point."""
        a = GeodeticCoordinate(10.0, 190.0).to_ecef().as_array()
        b = GeodeticCoordinate(10.0, -170.0).to_ecef().as_array()
        assert_allclose(a, b, atol=1e-6)

    @pytest.mark.parametrize('xyz', [(0.0, 0.0, 0.0), (1000.0, 0.0, 0.0)])
    def test_near_center_to_geodetic(self, xyz):
        """Numeric degeneracy gives a best-effort position instead of raising."""
        point = CartesianCoordinate(*xyz).to_geodetic()
        assert point.latitude == 0.0

    def test_immutable(self):
        point = CartesianCoordinate(1.0, 2.0, 3.0)
        with pytest.raises(AttributeError):
            point.x = 5.0


class TestBlhToXyz:
    """Tests for the result-returning BLH to XYZ operation."""

    def test_named_fields(self):
        result = blh_to_xyz(39.915, 116.404, 100)

        assert result.success
        assert result.fields == ('X', 'Y', 'Z')
        assert result.ellipsoid == 'WGS84'
        assert result['X'] < 0  # east of 90°E
        assert result['Y'] > 0
        assert result['Z'] > 0

    def test_zero_height_default(self):
        result = blh_to_xyz(0, 0)
        assert result.success
        assert 6370000 < result['X'] < 6380000
        assert abs(result['Y']) < 1000
        assert abs(result['Z']) < 1000

    def test_string_inputs(self):
        """Values arriving as text are parsed."""
        result = blh_to_xyz('39.915', '116.404', '100')
        assert result.success
        assert result.input == (39.915, 116.404, 100.0)

    def test_non_numeric_input(self):
        result = blh_to_xyz('abc', 116.404, 0)
        assert not result.success
        assert 'not a number' in result.error_message

    def test_nan_rejected(self):
        result = blh_to_xyz(float('nan'), 116.404, 0)
        assert not result.success

    def test_latitude_out_of_range(self):
        result = blh_to_xyz(95, 0, 0)
        assert not result.success
        assert 'Latitude' in result.error_message

    def test_unknown_ellipsoid_error(self):
        result = blh_to_xyz(39.915, 116.404, 100, ellipsoid='Mars2000')
        assert not result.success
        assert 'Mars2000' in result.error_message

    def test_unknown_ellipsoid_default(self):
        result = blh_to_xyz(39.915, 116.404, 100, ellipsoid='Mars2000', on_unknown='default')
        assert result.success
        assert result.ellipsoid == 'WGS84'

    def test_to_dict(self):
        data = blh_to_xyz(39.915, 116.404, 100).to_dict()
        assert data['success'] is True
        assert data['input'] == [39.915, 116.404, 100.0]
        assert set(['X', 'Y', 'Z']).issubset(data)


class TestXyzToBlh:
    """Tests for the result-returning XYZ to BLH operation."""

    def test_round_trip(self):
        xyz = blh_to_xyz(39.915, 116.404, 100)
        result = xyz_to_blh(xyz['X'], xyz['Y'], xyz['Z'])

        assert result.success
        assert result.fields == ('lat', 'lon', 'height')
        assert abs(result['lat'] - 39.915) < 1e-4
        assert abs(result['lon'] - 116.404) < 1e-4
        assert abs(result['height'] - 100) < 0.1

    def test_ellipsoid_case_insensitive(self):
        result = xyz_to_blh(-2175332.1, 4382498.5, 4070937.1, ellipsoid='grs80')
        assert result.success
        assert result.ellipsoid == 'GRS80'

    @pytest.mark.parametrize('xyz', [(0, 0, 0), (1000, 0, 0)])
    def test_near_center(self, xyz):
        result = xyz_to_blh(*xyz)
        assert result.success
        assert result['lat'] == 0.0
        assert np.isfinite(result['height'])

    def test_missing_component(self):
        result = xyz_to_blh(1.0, 2.0, None)
        assert not result.success


class TestBatchGeodetic:
    """Tests for batch BLH/XYZ conversion."""

    def test_batch_preserves_indices(self):
        coordinates = [[39.915, 116.404, 100], [31.230, 121.473, 50]]
        batch = batch_blh_to_xyz(coordinates)

        assert batch.success
        assert batch.count == 2
        assert [item.index for item in batch.results] == [0, 1]
        for item, (lat, lon, h) in zip(batch.results, coordinates):
            single = blh_to_xyz(lat, lon, h)
            assert item.result.output == single.output

    def test_height_optional(self):
        batch = batch_blh_to_xyz([[23.129, 113.264]])
        assert batch.success
        assert batch.results[0].result.input == (23.129, 113.264, 0.0)

    def test_batch_xyz_to_blh(self):
        xyz1 = blh_to_xyz(39.915, 116.404, 100)
        xyz2 = blh_to_xyz(31.230, 121.473, 50)
        batch = batch_xyz_to_blh([list(xyz1.output), list(xyz2.output)])

        assert batch.success
        assert batch.count == 2
        assert abs(batch.results[1].result['lat'] - 31.230) < 1e-6

    def test_bad_arity_rejects_batch(self):
        batch = batch_xyz_to_blh([[1.0, 2.0, 3.0], [1.0, 2.0]])
        assert not batch.success
        assert 'Item 1' in batch.error_message

    def test_bad_latitude_fails_one_item(self):
        """A structurally valid item with a bad value fails on its own."""
        batch = batch_blh_to_xyz([[39.915, 116.404, 100], [95.0, 0.0, 0.0]])

        assert batch.success
        assert batch.results[0].result.success
        assert not batch.results[1].result.success
        assert batch.failed_indices == [1]

    def test_unknown_ellipsoid_rejects_batch(self):
        batch = batch_blh_to_xyz([[0, 0, 0]], ellipsoid='nope')
        assert not batch.success

    def test_to_dict(self):
        data = batch_blh_to_xyz([[39.915, 116.404, 100]]).to_dict()
        assert data['count'] == 1
        assert data['ellipsoid'] == 'WGS84'
        assert data['results'][0]['index'] == 0
        assert data['results'][0]['success'] is True


class TestAngleHelpers:

    def test_deg_rad(self):
        assert abs(deg_to_rad(180) - np.pi) < 1e-12
        assert abs(rad_to_deg(deg_to_rad(123.456)) - 123.456) < 1e-12


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
