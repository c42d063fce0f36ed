"""
Tests for mean- and total-conserving monthly to daily interpolation.
"""
import numpy as np
import pytest

from phenoforce.core.constants import DAYS_PER_MONTH, DAYS_PER_MONTH_LEAP
from phenoforce.core.exceptions import InvalidForcingError
from phenoforce.forcing.interpolation import (
    interp_monthly_means_conserve, interp_monthly_totals_conserve, interp_single_month
)


def monthly_means(dvals, ndaymonth=DAYS_PER_MONTH):
    bounds = np.cumsum((0,) + tuple(ndaymonth))
    return np.array([dvals[bounds[m]:bounds[m + 1]].mean() for m in range(12)])


class TestInterpSingleMonth:
    """Test suite for a single month"""

    @pytest.mark.parametrize("time_steps", [1, 2, 28, 30, 31])
    def test_conserves_mean(self, time_steps):
        result = interp_single_month(2.0, 8.0, 20.0, time_steps)
        assert len(result) == time_steps
        assert result.mean() == pytest.approx(8.0)

    def test_flat_neighbours_give_flat_month(self):
        result = interp_single_month(5.0, 5.0, 5.0, 31)
        np.testing.assert_allclose(result, 5.0)

    def test_shape_follows_neighbours(self):
        """Values rise through the month when the next month is warmer"""
        result = interp_single_month(0.0, 10.0, 20.0, 30)
        assert result[0] < result[-1]
        assert result[0] == pytest.approx(5.0 + (10.0 - 5.0) / 15.0 * 0.5)

    def test_lower_bound(self):
        result = interp_single_month(0.0, 1.0, 50.0, 31, minimum=0.0)
        assert result.min() >= 0.0
        assert result.mean() == pytest.approx(1.0)

    def test_upper_bound(self):
        result = interp_single_month(60.0, 98.0, 60.0, 30, minimum=0.0, maximum=100.0)
        assert result.max() <= 100.0
        assert result.mean() == pytest.approx(98.0)

    def test_zero_mean_at_lower_bound(self):
        result = interp_single_month(10.0, 0.0, 10.0, 30, minimum=0.0)
        np.testing.assert_allclose(result, 0.0, atol=1e-12)

    def test_all_values_clamped(self):
        """A mean below the bound collapses onto the bound without failing"""
        result = interp_single_month(-1.0, -1.0, -1.0, 30, minimum=0.0)
        np.testing.assert_array_equal(result, 0.0)

    def test_invalid_time_steps(self):
        with pytest.raises(ValueError):
            interp_single_month(1.0, 1.0, 1.0, 0)


class TestMonthlyDrivers:
    """Test suite for the whole-year interpolation"""

    @pytest.fixture
    def temperatures(self):
        return [-12.0, -9.5, -3.0, 4.5, 11.0, 16.0, 18.5, 17.0, 12.0, 5.5, -2.0, -8.0]

    def test_means_conserved(self, temperatures):
        dvals = interp_monthly_means_conserve(temperatures)
        assert len(dvals) == 365
        np.testing.assert_allclose(monthly_means(dvals), temperatures, atol=1e-9)

    def test_year_wraps_around(self, temperatures):
        """January starts halfway between December and January"""
        dvals = interp_monthly_means_conserve(temperatures)
        assert dvals[0] == pytest.approx(-10.0, abs=0.5)
        assert dvals[-1] == pytest.approx(-10.0, abs=0.5)

    def test_leap_year(self, temperatures):
        dvals = interp_monthly_means_conserve(temperatures, ndaymonth=DAYS_PER_MONTH_LEAP)
        assert len(dvals) == 366
        np.testing.assert_allclose(monthly_means(dvals, DAYS_PER_MONTH_LEAP), temperatures, atol=1e-9)

    def test_sunshine_within_bounds(self):
        sunshine = [20.0, 35.0, 60.0, 99.0, 100.0, 97.0, 80.0, 70.0, 50.0, 30.0, 10.0, 0.0]
        dvals = interp_monthly_means_conserve(sunshine, 0.0, 100.0)
        assert dvals.min() >= 0.0
        assert dvals.max() <= 100.0
        np.testing.assert_allclose(monthly_means(dvals), sunshine, atol=1e-9)

    def test_invalid_monthly_value(self):
        values = [10.0] * 12
        values[4] = -1.0
        with pytest.raises(InvalidForcingError, match="Invalid monthly value"):
            interp_monthly_means_conserve(values, minimum=0.0)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_non_finite_month_rejected(self, bad):
        values = [50.0] * 12
        values[3] = bad
        with pytest.raises(InvalidForcingError, match="non-finite"):
            interp_monthly_means_conserve(values, 0.0, 100.0)
        with pytest.raises(InvalidForcingError):
            interp_monthly_totals_conserve(values, 0.0)

    def test_wrong_number_of_months(self):
        with pytest.raises(InvalidForcingError):
            interp_monthly_means_conserve([1.0] * 11)

    def test_totals_conserved(self):
        totals = [10.0, 0.0, 50.0, 120.0, 5.0, 0.0, 0.0, 80.0, 30.0, 2.0, 60.0, 100.0]
        dvals = interp_monthly_totals_conserve(totals, 0.0)
        assert dvals.min() >= 0.0

        bounds = np.cumsum((0,) + DAYS_PER_MONTH)
        sums = [dvals[bounds[m]:bounds[m + 1]].sum() for m in range(12)]
        np.testing.assert_allclose(sums, totals, atol=1e-9)
