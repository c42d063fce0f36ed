"""
Tests for the respiration temperature response.
"""
import numpy as np
import pytest

from phenoforce.forcing.respiration import (
    respiration_temperature_response, soil_respiration_temperature_response
)


class TestRespirationResponse:
    """Test suite for the Lloyd & Taylor response"""

    def test_unity_at_ten_degrees(self):
        assert respiration_temperature_response(10.0) == pytest.approx(1.0)

    def test_increases_with_temperature(self):
        values = respiration_temperature_response(np.array([-10.0, 0.0, 10.0, 25.0]))
        assert np.all(np.diff(values) > 0)

    def test_zero_below_cutoff(self):
        assert respiration_temperature_response(-40.5) == 0.0
        assert respiration_temperature_response(-40.0) > 0.0

    def test_scalar_in_scalar_out(self):
        assert isinstance(respiration_temperature_response(5.0), float)


class TestSoilRespirationResponse:
    """Test suite for the frozen-soil variant"""

    def test_matches_air_response_without_freeze(self):
        assert soil_respiration_temperature_response(-2.0) == pytest.approx(
            respiration_temperature_response(-2.0)
        )

    def test_linear_ramp_in_frozen_soil(self):
        at_zero = respiration_temperature_response(0.0)
        value = soil_respiration_temperature_response(-2.0, carbon_freeze=True, min_decomp_temp=-4.0)
        assert value == pytest.approx(0.5 * at_zero)

    def test_no_decomposition_below_minimum(self):
        assert soil_respiration_temperature_response(-5.0, carbon_freeze=True) == 0.0

    def test_two_layer_soil_disables_ramp(self):
        value = soil_respiration_temperature_response(-2.0, carbon_freeze=True, two_layer_soil=True)
        assert value == pytest.approx(respiration_temperature_response(-2.0))
