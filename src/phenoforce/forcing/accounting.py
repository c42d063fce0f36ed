"""
Daily accounting of running climate statistics.

Called each simulation day before any other driver or process function.
Updates growing degree day sums, chill days and the temperature response
term, and maintains monthly, annual and 20-year records of the climate
variables that phenology and respiration depend on.
"""

import logging
from typing import Optional

import numpy as np

from phenoforce.core.calendar_context import CalendarContext
from phenoforce.core.config import AccountingConfig, get_config
from phenoforce.core.constants import (
    COLDEST_DAY_NHEMISPHERE, COLDEST_DAY_SHEMISPHERE, GDD_BASE_TEMPERATURE,
    HISTORY_YEARS, MAX_YEAR_LENGTH, W1DIV12, W11DIV12,
    WARMEST_DAY_NHEMISPHERE, WARMEST_DAY_SHEMISPHERE
)
from phenoforce.core.exceptions import ErrorContext, InvalidForcingError
from phenoforce.core.state import Climate, Gridcell, Patch
from phenoforce.core.types import PftRegistry, SeasonTrigger
from phenoforce.forcing.respiration import (
    respiration_temperature_response, soil_respiration_temperature_response
)
from phenoforce.forcing.solar import daylength_insol_eet

logger = logging.getLogger(__name__)


def season_trigger(latitude: float, day: int) -> SeasonTrigger:
    """
    Phenological event fired on this day of the year at this latitude.

    Midwinter resets the summergreen GDD counter; midsummer starts chill
    sensing. The days swap between hemispheres.
    """
    if latitude >= 0.0:
        coldest, warmest = COLDEST_DAY_NHEMISPHERE, WARMEST_DAY_NHEMISPHERE
    else:
        coldest, warmest = COLDEST_DAY_SHEMISPHERE, WARMEST_DAY_SHEMISPHERE

    if day == coldest:
        return SeasonTrigger.WINTER_RESET
    if day == warmest:
        return SeasonTrigger.SUMMER_SET
    return SeasonTrigger.NONE


def daily_accounting_gridcell(
    gridcell: Gridcell,
    calendar: CalendarContext,
    pft_registry: Optional[PftRegistry] = None,
    update_solar: bool = True
) -> None:
    """
    Update the daily climate statistics of one spatial unit.

    Args:
        gridcell: Spatial unit whose climate has today's temp/prec/insol set
        calendar: Current simulated day
        pft_registry: PFT parameters, used on the first simulation day
        update_solar: Compute today's daylength, radiation and EET first;
            pass False when the caller has already done so
    """
    climate = gridcell.climate

    if update_solar:
        daylength_insol_eet(climate, calendar)

    if calendar.day == 0:
        _start_of_year(gridcell, calendar, pft_registry)

    trigger = season_trigger(climate.lat, calendar.day)
    if trigger is SeasonTrigger.WINTER_RESET:
        climate.gdd5 = 0.0
        climate.chilldays = 0
        climate.ifsensechill = False
    elif trigger is SeasonTrigger.SUMMER_SET:
        climate.ifsensechill = True

    # GDD counters and chill day count
    excess5 = max(0.0, climate.temp - GDD_BASE_TEMPERATURE)
    climate.gdd5 += excess5
    climate.agdd5 += excess5
    if climate.temp < GDD_BASE_TEMPERATURE and climate.chilldays < MAX_YEAR_LENGTH:
        climate.chilldays += 1

    excess0 = max(0.0, climate.temp)
    climate.gdd0 += excess0
    climate.agdd0 += excess0

    # Temperature response, daily or per sub-daily step
    if calendar.diurnal():
        if len(climate.temps) < calendar.subdaily:
            raise InvalidForcingError(
                f"Expected {calendar.subdaily} sub-daily temperatures, got {len(climate.temps)}",
                ErrorContext(unit_id=gridcell.unit_id, day=calendar.day, year=calendar.year,
                             component="accounting", operation="daily_accounting_gridcell")
            )
        climate.gtemps = list(
            respiration_temperature_response(np.asarray(climate.temps[:calendar.subdaily]))
        )
    else:
        climate.gtemp = respiration_temperature_response(climate.temp)

    # Annual nitrogen and precipitation input
    gridcell.aNH4dep += gridcell.dNH4dep
    gridcell.aNO3dep += gridcell.dNO3dep
    climate.aprec += climate.prec

    mtemp_last = climate.mtemp

    climate.dtemp_31.add(climate.temp)
    climate.mtemp = climate.dtemp_31.mean()
    climate.dprec_31.add(climate.prec)
    climate.deet_31.add(climate.eet)

    # First cold spell after summer
    if mtemp_last >= GDD_BASE_TEMPERATURE and climate.mtemp < GDD_BASE_TEMPERATURE \
            and climate.ifsensechill:
        climate.gdd5 = 0.0
        climate.chilldays = 0

    if calendar.islastday:
        _end_of_month(climate, calendar)


def _start_of_year(
    gridcell: Gridcell,
    calendar: CalendarContext,
    pft_registry: Optional[PftRegistry]
) -> None:
    climate = gridcell.climate

    climate.agdd0 = 0.0
    climate.agdd5 = 0.0
    gridcell.aNH4dep = 0.0
    gridcell.aNO3dep = 0.0
    climate.aprec = 0.0

    if calendar.year == 0:
        # Running means are well defined from the first day
        for _ in range(climate.dtemp_31.capacity):
            climate.dtemp_31.add(climate.temp)
        climate.atemp_mean = climate.temp

        if pft_registry is not None:
            for pft, km_volume in pft_registry.km_volumes().items():
                gridcell.pft_km[pft] = km_volume * gridcell.soil_wtot

        logger.debug(f"{gridcell.unit_id}: initialised running means at {climate.temp:.2f} °C")

    for patch in gridcell.patches:
        patch.reset_annual_fluxes()


def _end_of_month(climate: Climate, calendar: CalendarContext) -> None:
    month = calendar.month

    climate.atemp_mean = climate.atemp_mean * W11DIV12 + climate.mtemp * W1DIV12

    if month == 0:
        climate.mtemp_min = climate.mtemp
        climate.mtemp_max = climate.mtemp
    else:
        climate.mtemp_min = min(climate.mtemp_min, climate.mtemp)
        climate.mtemp_max = max(climate.mtemp_max, climate.mtemp)

    if calendar.islastmonth:
        _update_twenty_year_records(climate, calendar.year)

    ndays = calendar.ndaymonth[month]
    climate.hmtemp_20[month].add(climate.dtemp_31.periodic_mean(ndays))
    climate.hmprec_20[month].add(climate.dprec_31.periodic_sum(ndays))
    climate.hmeet_20[month].add(climate.deet_31.periodic_sum(ndays))


def _update_twenty_year_records(climate: Climate, year: int) -> None:
    """Shift the 20-year min/max registers and average over the years simulated so far"""
    startyear = HISTORY_YEARS - min(HISTORY_YEARS - 1, year)

    # Entries startyear..19 hold the previous years; move them down one slot
    previous_min = climate.mtemp_min_20[startyear:].copy()
    previous_max = climate.mtemp_max_20[startyear:].copy()
    climate.mtemp_min_20[startyear - 1:HISTORY_YEARS - 1] = previous_min
    climate.mtemp_max_20[startyear - 1:HISTORY_YEARS - 1] = previous_max

    nyears = HISTORY_YEARS + 1 - startyear
    climate.mtemp_min20 = (climate.mtemp_min + previous_min.sum()) / nyears
    climate.mtemp_max20 = (climate.mtemp_max + previous_max.sum()) / nyears

    climate.mtemp_min_20[HISTORY_YEARS - 1] = climate.mtemp_min
    climate.mtemp_max_20[HISTORY_YEARS - 1] = climate.mtemp_max
    climate.agdd0_20.add(climate.agdd0)


def daily_accounting_patch(
    patch: Patch,
    calendar: CalendarContext,
    soil_temp_25: float,
    config: Optional[AccountingConfig] = None
) -> None:
    """
    Update patch flux accumulators and the soil respiration response.

    Args:
        patch: Patch to update
        calendar: Current simulated day
        soil_temp_25: Soil temperature at 25 cm depth (°C)
        config: Accounting options (defaults to the global configuration)
    """
    config = config or get_config().accounting

    if calendar.day == 0:
        patch.aaet = 0.0
        patch.aintercep = 0.0
        patch.apet = 0.0

    if calendar.dayofmonth == 0:
        patch.maet[calendar.month] = 0.0
        patch.mintercep[calendar.month] = 0.0
        patch.mpet[calendar.month] = 0.0

    patch.soil_gtemp = soil_respiration_temperature_response(
        soil_temp_25,
        carbon_freeze=config.carbon_freeze,
        min_decomp_temp=config.min_decomp_temp,
        two_layer_soil=config.two_layer_soil,
    )

    patch.soil_dtemp[calendar.dayofmonth] = soil_temp_25
    if calendar.islastday:
        patch.soil_mtemp = float(np.mean(patch.soil_dtemp[:calendar.ndaymonth[calendar.month]]))
