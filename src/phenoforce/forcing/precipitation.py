"""
Stochastic distribution of monthly precipitation totals to daily values.

Wet and dry days follow a first-order Markov chain with the transition
probabilities of Geng et al. (1986); wet-day amounts come from an exponential
distribution with the Krysanova/Cramer parameters. Each month is rescaled to
reproduce its prescribed total.

References:
- Geng, S., Penning de Vries, F.W.T. & Supit, I. (1986). A simple method for
  generating daily rainfall data. Agricultural and Forest Meteorology 36:
  363-376.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from phenoforce.core.constants import (
    DAYS_PER_MONTH, MIN_PRECIPITATION_MM, MONTHS_PER_YEAR,
    RAIN_DISTRIBUTION_C1, RAIN_DISTRIBUTION_C2,
    RAIN_TRANSITION_DRY, RAIN_TRANSITION_WET_OFFSET
)
from phenoforce.core.exceptions import ConvergenceError, ErrorContext, InvalidForcingError
from phenoforce.core.random import RandomStream
from phenoforce.core.types import MonthlyValues
from phenoforce.forcing.utils import negligible

logger = logging.getLogger(__name__)


@dataclass
class PrecipitationDiagnostics:
    """Bookkeeping of one prdaily call"""
    retries: List[int] = field(default_factory=lambda: [0] * MONTHS_PER_YEAR)
    wet_days: List[float] = field(default_factory=lambda: [0.0] * MONTHS_PER_YEAR)
    dry_months: List[int] = field(default_factory=list)

    @property
    def total_retries(self) -> int:
        return sum(self.retries)


def prdaily(
    mval_prec: MonthlyValues,
    mval_wet: MonthlyValues,
    rng: RandomStream,
    truncate: bool = True,
    ndaymonth: Optional[Sequence[int]] = None,
    max_retries: Optional[int] = None,
    diagnostics: Optional[PrecipitationDiagnostics] = None
) -> np.ndarray:
    """
    Distribute monthly precipitation totals to quasi-daily values.

    Args:
        mval_prec: Total rainfall (mm) for each month
        mval_wet: Expected number of rain days for each month
        rng: Random stream; its seed is advanced in place
        truncate: Set daily values below 0.1 mm to zero after rescaling
        ndaymonth: Days in each month (defaults to a 365-day year)
        max_retries: Maximum redraws of a month whose generated total is
            negligible (None = retry until a non-negligible total appears)
        diagnostics: Optional collector for retry counts and wet-day numbers

    Returns:
        Daily precipitation (mm) for the whole year

    Raises:
        ConvergenceError: If a month still has a negligible total after
            `max_retries` redraws
    """
    mval_prec = np.asarray(mval_prec, dtype=float)
    # The caller's expected wet-day counts are left untouched
    mval_wet = np.array(mval_wet, dtype=float)
    ndaymonth = tuple(ndaymonth) if ndaymonth is not None else DAYS_PER_MONTH

    for name, values in (("mval_prec", mval_prec), ("mval_wet", mval_wet)):
        if values.shape != (MONTHS_PER_YEAR,):
            raise InvalidForcingError(
                f"prdaily: expected {MONTHS_PER_YEAR} values for {name}, got shape {values.shape}",
                ErrorContext(component="precipitation", operation="prdaily")
            )
        if not np.all(np.isfinite(values)):
            raise InvalidForcingError(
                f"prdaily: non-finite value in {name}",
                ErrorContext(component="precipitation", operation="prdaily",
                             details={"months": np.flatnonzero(~np.isfinite(values)).tolist()})
            )

    dval_prec = np.zeros(sum(ndaymonth))
    daysum = 0

    for m in range(MONTHS_PER_YEAR):
        days = ndaymonth[m]

        if mval_prec[m] < MIN_PRECIPITATION_MM:
            # No rainfall expected for month
            dval_prec[daysum:daysum + days] = 0.0
            if diagnostics is not None:
                diagnostics.dry_months.append(m)
            daysum += days
            continue

        # At least one rain day, with at least 0.1 mm on each
        wet_days = max(mval_wet[m], 1.0)
        mprec = max(mval_prec[m] / wet_days, MIN_PRECIPITATION_MM)
        wet_days = mval_prec[m] / mprec
        prob_rain = wet_days / days

        if diagnostics is not None:
            diagnostics.wet_days[m] = wet_days

        attempts = 0
        mprec_sum = 0.0

        while negligible(mprec_sum):
            if max_retries is not None and attempts > max_retries:
                raise ConvergenceError(
                    f"prdaily: month {m} generated no precipitation after {max_retries} retries",
                    ErrorContext(
                        component="precipitation",
                        operation="prdaily",
                        details={"month": m, "total": float(mval_prec[m]), "seed": rng.seed}
                    )
                )
            if attempts > 0:
                logger.debug(f"Month {m}: generated total negligible, redraw {attempts}")
            attempts += 1

            mprec_sum = _generate_month(dval_prec, daysum, days, prob_rain, mprec, rng)

            if not negligible(mprec_sum):
                month_values = dval_prec[daysum:daysum + days]
                month_values *= mval_prec[m] / mprec_sum
                if truncate:
                    month_values[month_values < MIN_PRECIPITATION_MM] = 0.0

        if diagnostics is not None:
            diagnostics.retries[m] = attempts - 1

        daysum += days

    return dval_prec


def _generate_month(
    dval_prec: np.ndarray,
    start: int,
    days: int,
    prob_rain: float,
    mprec: float,
    rng: RandomStream
) -> float:
    """Draw one month of daily amounts in place and return their sum"""
    mprec_sum = 0.0

    for dy in range(start, start + days):
        # Transitional probabilities (Geng et al. 1986)
        if dy == 0 or dval_prec[dy - 1] < MIN_PRECIPITATION_MM:
            prob = RAIN_TRANSITION_DRY * prob_rain
        else:
            prob = RAIN_TRANSITION_WET_OFFSET + RAIN_TRANSITION_DRY * prob_rain

        if rng.randfrac() > prob:
            dval_prec[dy] = 0.0
        else:
            x = rng.randfrac()
            dval_prec[dy] = math.pow(-math.log(x), RAIN_DISTRIBUTION_C2) * mprec * RAIN_DISTRIBUTION_C1
            if dval_prec[dy] < MIN_PRECIPITATION_MM:
                dval_prec[dy] = 0.0

        mprec_sum += dval_prec[dy]

    return mprec_sum
