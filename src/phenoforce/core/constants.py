"""
Physical constants, calendar constants and system-wide thresholds.
"""
import math
from typing import Final, Tuple

# Calendar
MONTHS_PER_YEAR: Final[int] = 12
MAX_YEAR_LENGTH: Final[int] = 366
DAYS_PER_MONTH: Final[Tuple[int, ...]] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
DAYS_PER_MONTH_LEAP: Final[Tuple[int, ...]] = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Day of year (0-based) of midwinter and midsummer in each hemisphere
COLDEST_DAY_NHEMISPHERE: Final[int] = 14
COLDEST_DAY_SHEMISPHERE: Final[int] = 195
WARMEST_DAY_NHEMISPHERE: Final[int] = 195
WARMEST_DAY_SHEMISPHERE: Final[int] = 14

# Numerical
NEGLIGIBLE_LIMIT: Final[float] = 1.0e-30

# Running statistics
RUNNING_WINDOW_DAYS: Final[int] = 31
HISTORY_YEARS: Final[int] = 20
GDD_BASE_TEMPERATURE: Final[float] = 5.0  # °C, also the chill day threshold

# Precipitation generator (Geng et al. 1986; Krysanova/Cramer exponential fit)
MIN_PRECIPITATION_MM: Final[float] = 0.1
RAIN_TRANSITION_DRY: Final[float] = 0.75
RAIN_TRANSITION_WET_OFFSET: Final[float] = 0.25
RAIN_DISTRIBUTION_C1: Final[float] = 1.0
RAIN_DISTRIBUTION_C2: Final[float] = 1.2

# Solar geometry (Prentice et al. 1993)
SOLAR_CONSTANT: Final[float] = 1360.0  # W/m², QOO
ORBIT_ECCENTRICITY_TERM: Final[float] = 0.01675
MAX_DECLINATION_DEG: Final[float] = 23.4
SHORTWAVE_ALBEDO: Final[float] = 0.17  # BETA
LONGWAVE_A: Final[float] = 107.0
LONGWAVE_B: Final[float] = 0.2
TRANSMISSIVITY_C: Final[float] = 0.25
TRANSMISSIVITY_D: Final[float] = 0.5
SECONDS_PER_RADIAN: Final[float] = 13750.98708  # K, 12/pi * 3600
FRACTION_PAR: Final[float] = 0.5
POLAR_NIGHT_HH: Final[float] = 0.001
DEG_TO_RAD: Final[float] = math.pi / 180.0

# Respiration temperature response (Lloyd & Taylor 1994)
LLOYD_TAYLOR_E0: Final[float] = 308.56
LLOYD_TAYLOR_TREF: Final[float] = 56.02
LLOYD_TAYLOR_T0: Final[float] = 46.02
MIN_RESPIRATION_TEMP: Final[float] = -40.0
MIN_DECOMP_TEMP: Final[float] = -4.0  # °C

# Running mean smoothing weights
W11DIV12: Final[float] = 11.0 / 12.0
W1DIV12: Final[float] = 1.0 / 12.0
