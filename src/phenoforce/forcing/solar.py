"""
Daylength, insolation and equilibrium evapotranspiration.

Called each simulation day after the daily air temperature has been updated
and before canopy exchange processes.

Net downward shortwave radiation (Prentice et al. 1993):

    (1)  rs = (c + d*ni) * (1 - beta) * Qo * cos Z * k
    (2)  Qo = Qoo * (1 + 2*0.01675 * cos(2*pi*(i+0.5)/365))
    (3)  cos Z = sin(lat) * sin(delta) + cos(lat) * cos(delta) * cos h
    (4)  delta = -23.4 * pi/180 * cos(2*pi*(i+10.5)/365)

With u = sin(lat) sin(delta) and v = cos(lat) cos(delta) the half-day length
is hh = acos(-u/v), and integrating (1) from -hh to hh gives the daily sum

    (14) rad = 2 * w * (u*hh + v*sin(hh)) * k,   w = (c + d*ni) * (1 - beta) * Qo

Equilibrium evapotranspiration integrates

    (15) eet = (s / (s + gamma)) * rn / lambda

over the part of the day where net radiation rn = rs - rl is non-negative,
with net longwave rl = (b + (1-b)*ni) * (a - temp).

References:
- Prentice, I.C., Sykes, M.T. & Cramer, W. (1993). A simulation model for the
  transient effects of climate change on forest landscapes. Ecological
  Modelling 65: 51-70.
- Haxeltine, A. & Prentice, I.C. (1996). BIOME3. Global Biogeochemical Cycles
  10: 693-709.
- Jarvis, P.G. & McNaughton, K.G. (1986). Stomatal control of transpiration:
  scaling up from leaf to region. Advances in Ecological Research 15: 1-49.
"""

import math
from dataclasses import dataclass

from phenoforce.core.calendar_context import CalendarContext
from phenoforce.core.constants import (
    DEG_TO_RAD, FRACTION_PAR, LONGWAVE_A, LONGWAVE_B, MAX_DECLINATION_DEG,
    ORBIT_ECCENTRICITY_TERM, POLAR_NIGHT_HH, SECONDS_PER_RADIAN,
    SHORTWAVE_ALBEDO, SOLAR_CONSTANT, TRANSMISSIVITY_C, TRANSMISSIVITY_D
)
from phenoforce.core.state import Climate
from phenoforce.core.types import InsolationType


@dataclass(frozen=True)
class SolarGeometry:
    """Astronomical quantities for one day of year at one latitude"""
    qo: float  # extraterrestrial radiation (W/m²)
    delta: float  # solar declination (radians)
    u: float
    v: float
    hh: float  # half-day length (radians)

    @property
    def sinehh(self) -> float:
        return math.sin(self.hh)

    @property
    def daylength(self) -> float:
        """Day length in hours"""
        return 24.0 * self.hh / math.pi


def half_period(u: float, v: float) -> float:
    """
    Solve u + v*cos(h) = 0 for h, with polar day/night branches.

    Returns pi when the expression is non-negative all day and 0 when it is
    negative all day.
    """
    if u >= v:
        return math.pi
    if u <= -v:
        return 0.0
    return math.acos(-u / v)


def solar_geometry(day: int, year_length: int, sinelat: float, cosinelat: float) -> SolarGeometry:
    """
    Compute the latitude and day-of-year dependent solar terms.

    Args:
        day: Day of year (0-based)
        year_length: Days in the current year
        sinelat: Sine of latitude
        cosinelat: Cosine of latitude
    """
    qo = SOLAR_CONSTANT * (
        1.0 + 2.0 * ORBIT_ECCENTRICITY_TERM * math.cos(2.0 * math.pi * (day + 0.5) / year_length)
    )  # Eqn 2
    delta = -MAX_DECLINATION_DEG * DEG_TO_RAD * math.cos(
        2.0 * math.pi * (day + 10.5) / year_length
    )  # Eqn 4
    u = sinelat * math.sin(delta)
    v = cosinelat * math.cos(delta)

    return SolarGeometry(qo=qo, delta=delta, u=u, v=v, hh=half_period(u, v))


def _update_solar_cache(climate: Climate, calendar: CalendarContext) -> None:
    """Fill today's cache slot once; the cache follows the year length"""
    year_length = calendar.year_length()
    if climate.cache_year_length != year_length:
        climate.doneday[:] = False
        climate.cache_year_length = year_length

    day = calendar.day
    if climate.doneday[day]:
        return

    geometry = solar_geometry(day, year_length, climate.sinelat, climate.cosinelat)
    climate.qo[day] = geometry.qo
    climate.u[day] = geometry.u
    climate.v[day] = geometry.v
    climate.hh[day] = geometry.hh
    climate.sinehh[day] = geometry.sinehh
    climate.daylength_save[day] = geometry.daylength
    climate.doneday[day] = True


def daylength_insol_eet(climate: Climate, calendar: CalendarContext) -> None:
    """
    Update daylength, radiation, PAR and equilibrium evapotranspiration.

    Reads climate.temp, climate.insol (and climate.insols in diurnal mode)
    and writes climate.daylength, climate.rad, climate.par, climate.eet (and
    climate.rads/climate.pars in diurnal mode).

    Args:
        climate: Climate record of the spatial unit
        calendar: Current simulated day
    """
    _update_solar_cache(climate, calendar)

    day = calendar.day
    qo = climate.qo[day]
    u = climate.u[day]
    v = climate.v[day]
    hh = climate.hh[day]
    sinehh = climate.sinehh[day]

    climate.daylength = climate.daylength_save[day]
    instype = InsolationType(climate.insolation_type)

    if not instype.is_flux:
        w = (TRANSMISSIVITY_C + TRANSMISSIVITY_D * climate.insol / 100.0) * \
            (1.0 - SHORTWAVE_ALBEDO) * qo  # Eqn 13
        climate.rad = 2.0 * w * (u * hh + v * sinehh) * SECONDS_PER_RADIAN  # Eqn 14
    else:
        averaging_period = 24.0 * 3600.0
        if instype.daylight_averaged:
            averaging_period = climate.daylength_save[day] * 3600.0

        net_coeff = 1.0 - SHORTWAVE_ALBEDO if instype.needs_albedo_correction else 1.0
        climate.rad = climate.insol * net_coeff * averaging_period

        if calendar.diurnal():
            climate.rads = [
                insol * net_coeff * averaging_period
                for insol in climate.insols[:calendar.subdaily]
            ]
            climate.pars = [rad * FRACTION_PAR for rad in climate.rads]

        if hh < POLAR_NIGHT_HH:
            w = 0.0
        else:
            w = climate.rad / 2.0 / (u * hh + v * sinehh) / SECONDS_PER_RADIAN  # from Eqn 14

    # Eqn A1, Haxeltine & Prentice 1996
    climate.par = climate.rad * FRACTION_PAR

    climate.eet = equilibrium_evapotranspiration(climate.temp, w, qo, u, v)


def equilibrium_evapotranspiration(temp: float, w: float, qo: float, u: float, v: float) -> float:
    """
    Daily equilibrium evapotranspiration (mm/day).

    Args:
        temp: Air temperature (°C)
        w: Shortwave term of Eqn 13 (W/m²)
        qo: Extraterrestrial radiation (W/m²)
        u: sin(lat) * sin(delta)
        v: cos(lat) * cos(delta)
    """
    # Eqn 19, instantaneous net upward longwave flux with ni recovered from w
    rl = (LONGWAVE_B + (1.0 - LONGWAVE_B) *
          (w / qo / (1.0 - SHORTWAVE_ALBEDO) - TRANSMISSIVITY_C) / TRANSMISSIVITY_D) * \
        (LONGWAVE_A - temp)

    # Psychrometer constant and latent heat, weakly temperature dependent
    gamma = 65.05 + temp * 0.064
    lam = 2.495e6 - temp * 2380.0

    ct = 237.3 + temp
    s = 2.503e6 * math.exp(17.269 * temp / ct) / ct / ct  # Eqn 16

    uu = w * u - rl  # Eqn 20
    vv = w * v  # Eqn 21

    # Half-period with non-negative net radiation, Eqn 25
    hn = half_period(uu, vv)

    return 2.0 * (s / (s + gamma) / lam) * (uu * hn + vv * math.sin(hn)) * SECONDS_PER_RADIAN  # Eqn 26
