"""
Tests for the annual forcing pipeline and the climate driver.
"""
import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from phenoforce.core.calendar_context import CalendarContext
from phenoforce.core.config import CalendarConfig, PhenoforceConfig, PrecipitationConfig
from phenoforce.core.exceptions import CalendarError, InvalidForcingError, PhysicsModelError
from phenoforce.core.random import RandomStream
from phenoforce.data.contracts import MonthlyForcing, SiteDescription
from phenoforce.forcing.precipitation import PrecipitationDiagnostics
from phenoforce.pipeline.annual import (
    FORCING_COLUMNS, ClimateDriver, build_daily_forcing, validate_daily_forcing
)

TEMPERATURE = [-4.0, -2.5, 2.0, 7.5, 12.5, 16.0, 18.0, 17.5, 13.5, 8.5, 3.0, -1.5]
PRECIPITATION = [60.0, 45.0, 50.0, 48.0, 62.0, 75.0, 80.0, 70.0, 58.0, 66.0, 70.0, 68.0]
SUNSHINE = [15.0, 25.0, 35.0, 42.0, 48.0, 50.0, 52.0, 50.0, 40.0, 30.0, 18.0, 12.0]
WET_DAYS = [14.0, 12.0, 13.0, 12.0, 12.0, 12.0, 11.0, 11.0, 11.0, 13.0, 14.0, 15.0]


def monthly_sums(values):
    return pd.Series(values.to_numpy()).groupby(
        np.repeat(np.arange(12), (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31))
    ).sum().to_numpy()


@pytest.fixture
def monthly():
    return MonthlyForcing(
        temperature=TEMPERATURE,
        precipitation=PRECIPITATION,
        insolation=SUNSHINE,
        ndep_nh4_dry=[1e-6] * 12,
        ndep_nh4_wet=[2e-6] * 12,
    )


@pytest.fixture
def site():
    return SiteDescription(site_id="site-1", latitude=52.0, soil_wtot=150.0)


class TestMonthlyForcingContract:
    """Test suite for the monthly input model"""

    def test_wrong_length_rejected(self):
        with pytest.raises(ValidationError):
            MonthlyForcing(temperature=[1.0] * 11, precipitation=PRECIPITATION, insolation=SUNSHINE)

    def test_negative_precipitation_rejected(self):
        with pytest.raises(ValidationError):
            MonthlyForcing(temperature=TEMPERATURE, precipitation=[-1.0] * 12, insolation=SUNSHINE)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_values_rejected(self, bad):
        with pytest.raises(ValidationError):
            MonthlyForcing(temperature=[bad] + TEMPERATURE[1:], precipitation=PRECIPITATION, insolation=SUNSHINE)
        with pytest.raises(ValidationError):
            MonthlyForcing(temperature=TEMPERATURE, precipitation=PRECIPITATION, insolation=SUNSHINE,
                           ndep_nh4_wet=[bad] * 12)

    def test_latitude_range(self):
        with pytest.raises(ValidationError):
            SiteDescription(site_id="x", latitude=95.0)


class TestBuildDailyForcing:
    """Test suite for build_daily_forcing"""

    @pytest.fixture
    def config(self):
        return PhenoforceConfig()

    def test_columns_and_length(self, monthly, config):
        df = build_daily_forcing(monthly, CalendarContext(), RandomStream(1), config)
        assert list(df.columns) == FORCING_COLUMNS
        assert len(df) == 365
        assert df["day"].iloc[-1] == 364
        assert df["dayofmonth"].max() == 30

    def test_monthly_aggregates_conserved(self, monthly, config):
        df = build_daily_forcing(monthly, CalendarContext(), RandomStream(1), config)
        means = df.groupby("month")["temp"].mean().to_numpy()
        np.testing.assert_allclose(means, TEMPERATURE, atol=1e-9)
        np.testing.assert_allclose(monthly_sums(df["prec"]), PRECIPITATION, rtol=1e-9)
        assert df["insol"].between(0.0, 100.0).all()

    def test_stochastic_precipitation(self, monthly):
        config = PhenoforceConfig(precipitation=PrecipitationConfig(truncate=False))
        forcing = monthly.model_copy(update={"wet_days": WET_DAYS})
        diagnostics = PrecipitationDiagnostics()

        df = build_daily_forcing(forcing, CalendarContext(), RandomStream(1), config, diagnostics)

        np.testing.assert_allclose(monthly_sums(df["prec"]), PRECIPITATION, rtol=1e-9)
        assert (df["prec"] == 0.0).any()
        assert diagnostics.wet_days == pytest.approx(WET_DAYS)

    def test_deposition_totals(self, monthly, config):
        df = build_daily_forcing(monthly, CalendarContext(), RandomStream(1), config)
        assert df["ndep_nh4"].sum() == pytest.approx(3e-6 * 365)
        assert df["ndep_no3"].sum() == 0.0

    def test_leap_year(self, monthly, config):
        calendar = CalendarContext(first_calendar_year=2000, leap_years=True)
        df = build_daily_forcing(monthly, calendar, RandomStream(1), config)
        assert len(df) == 366

    def test_validation(self, monthly, config):
        df = validate_daily_forcing(
            build_daily_forcing(monthly, CalendarContext(), RandomStream(1), config)
        )
        assert df.attrs["validation_status"] == "validated"

        df.loc[5, "prec"] = -1.0
        with pytest.raises(InvalidForcingError):
            validate_daily_forcing(df)

    def test_validation_missing_column(self, monthly, config):
        df = build_daily_forcing(monthly, CalendarContext(), RandomStream(1), config)
        with pytest.raises(InvalidForcingError):
            validate_daily_forcing(df.drop(columns=["insol"]))


class TestClimateDriver:
    """Test suite for ClimateDriver"""

    def test_run_year(self, site, monthly):
        driver = ClimateDriver(site, PhenoforceConfig())
        daily = driver.run_year(monthly)

        assert len(daily) == 365
        assert (daily["year"] == 0).all()
        assert daily["daylength"].between(0.0, 24.0).all()
        assert daily["daylength"].iloc[172] > daily["daylength"].iloc[355]
        assert (daily["eet"] >= 0.0).all()
        assert driver.calendar.year == 1
        assert driver.metrics["days_run"] == 365

        summary = driver.annual_summary()
        assert summary["aprec"] == pytest.approx(sum(PRECIPITATION))
        assert summary["aNH4dep"] == pytest.approx(3e-6 * 365)
        assert summary["mtemp_min"] < summary["mtemp_max"]

    def test_run_several_years(self, site, monthly):
        driver = ClimateDriver(site, PhenoforceConfig())
        daily = driver.run([monthly, monthly])

        assert len(daily) == 730
        assert list(daily["year"].unique()) == [0, 1]
        assert driver.metrics["years_run"] == 2
        assert len(driver.gridcell.climate.agdd0_20) == 2

    def test_run_nothing(self, site):
        assert ClimateDriver(site, PhenoforceConfig()).run([]).empty

    def test_subdaily_calendar(self, site, monthly):
        config = PhenoforceConfig(calendar=CalendarConfig(subdaily=4))
        daily = ClimateDriver(site, config).run_year(monthly)
        assert len(daily) == 365
        assert (daily["gtemp"] > 0.0).all()

    def test_invalid_forcing_carries_site(self, site, monthly):
        hot = monthly.model_copy(update={"temperature": [150.0] * 12})
        driver = ClimateDriver(site, PhenoforceConfig())

        with pytest.raises(InvalidForcingError) as excinfo:
            driver.run_year(hot)
        assert excinfo.value.context.unit_id == "site-1"
        assert excinfo.value.context.year == 0

    def test_unexpected_error_wrapped_with_site(self, site, monthly):
        class BrokenRegistry:
            def km_volumes(self):
                raise RuntimeError("registry unavailable")

        driver = ClimateDriver(site, PhenoforceConfig(), pft_registry=BrokenRegistry())

        with pytest.raises(PhysicsModelError) as excinfo:
            driver.run_year(monthly)
        assert excinfo.value.context.unit_id == "site-1"
        assert excinfo.value.context.day == 0
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_must_start_on_first_day(self, site, monthly):
        driver = ClimateDriver(site, PhenoforceConfig())
        driver.calendar.set_day(0, 10)
        with pytest.raises(CalendarError):
            driver.run_year(monthly)
