"""
Unit tests for feature derivation and normalization.
"""

import math

import numpy as np
import pytest

from satclass.core.exceptions import DegenerateInputError, DimensionMismatchError
from satclass.ml.features import (
    FeatureNormalizer,
    OrbitalSample,
    build_feature_vector,
    derive_features,
)
from satclass.utils.config_loader import PhysicalConstants, ScalerParams


@pytest.fixture
def sample():
    return OrbitalSample(
        latitude=10.0, longitude=20.0,
        x_eci_km=6000.0, y_eci_km=8000.0, z_eci_km=0.0,
        velocity_x=3.0, velocity_y=4.0, velocity_z=0.0,
    )


class TestOrbitalSample:
    def test_from_dict_accepts_aliases(self):
        s = OrbitalSample.from_dict({
            "lat": 1.0, "lon": 2.0,
            "x_eci": 3.0, "y_eci": 4.0, "z_eci": 5.0,
            "vel_x": 6.0, "vel_y": 7.0, "vel_z": 8.0,
        })
        assert s.latitude == 1.0
        assert s.z_eci_km == 5.0
        assert s.velocity_z == 8.0

    def test_from_dict_missing_fields_are_none(self):
        s = OrbitalSample.from_dict({"latitude": 1.0})
        assert s.longitude is None
        assert s.velocity_x is None

    def test_from_values_ignores_extra_columns(self):
        s = OrbitalSample.from_values([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
        assert s.velocity_z == 8

    def test_is_immutable(self, sample):
        with pytest.raises(AttributeError):
            sample.latitude = 0.0

    def test_as_vector_order(self, sample):
        np.testing.assert_array_equal(
            sample.as_vector(), [10.0, 20.0, 6000.0, 8000.0, 0.0, 3.0, 4.0, 0.0]
        )


class TestDeriveFeatures:
    def test_magnitudes(self, sample):
        derived = derive_features(sample)
        assert derived.total_velocity == pytest.approx(5.0)
        assert derived.radial_distance == pytest.approx(10000.0)
        assert derived.altitude == pytest.approx(10000.0 - 6371.0)

    def test_orbital_velocity(self, sample):
        derived = derive_features(sample)
        assert derived.orbital_velocity == pytest.approx(math.sqrt(398600.4418 / 10000.0))

    def test_custom_constants(self, sample):
        derived = derive_features(sample, PhysicalConstants(earth_radius_km=6000.0))
        assert derived.altitude == pytest.approx(4000.0)

    def test_zero_position_is_degenerate(self):
        s = OrbitalSample(0.0, 0.0, 0.0, 0.0, 0.0, 7.0, 0.0, 0.0)
        with pytest.raises(DegenerateInputError):
            derive_features(s)

    def test_infinite_position_is_degenerate(self):
        s = OrbitalSample(0.0, 0.0, float("inf"), 0.0, 0.0, 7.0, 0.0, 0.0)
        with pytest.raises(DegenerateInputError):
            derive_features(s)

    @pytest.mark.parametrize("state", [
        (0.0, 0.0, 1e200, 0.0, 0.0, 7.6, 0.0, 0.0),
        (0.0, 0.0, 6771.0, 0.0, 0.0, 1e200, 0.0, 0.0),
    ])
    def test_overflowing_magnitude_is_degenerate(self, state):
        with pytest.raises(DegenerateInputError):
            derive_features(OrbitalSample(*state))

    def test_feature_vector(self, sample):
        vector = build_feature_vector(sample, derive_features(sample))
        assert vector.shape == (10,)
        assert vector[8] == pytest.approx(5.0)
        assert vector[9] == pytest.approx(10000.0)


class TestNormalizer:
    def test_mean_maps_to_zero(self):
        scaler = ScalerParams()
        normalized = FeatureNormalizer(scaler).transform(scaler.mean)
        np.testing.assert_allclose(normalized, np.zeros(10))

    def test_zscore(self, sample):
        vector = build_feature_vector(sample, derive_features(sample))
        normalized = FeatureNormalizer().transform(vector)
        assert normalized[0] == pytest.approx(10.0 / 90.0)
        assert normalized[8] == pytest.approx((5.0 - 7.5) / 0.15)
        assert normalized[9] == pytest.approx((10000.0 - 6900.0) / 200.0)

    def test_inverse(self, sample):
        normalizer = FeatureNormalizer()
        vector = build_feature_vector(sample, derive_features(sample))
        np.testing.assert_allclose(normalizer.inverse_transform(normalizer.transform(vector)), vector)

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            FeatureNormalizer().transform([1.0] * 9)
        assert exc_info.value.expected == 10
        assert exc_info.value.actual == 9
