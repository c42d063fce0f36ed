"""
Distribution of monthly nitrogen deposition to daily values.

Dry deposition is spread evenly over all days. Wet deposition goes to the
days with precipitation, or evenly over all days of a month without any.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from phenoforce.core.constants import DAYS_PER_MONTH, MONTHS_PER_YEAR
from phenoforce.core.exceptions import ErrorContext, InvalidForcingError
from phenoforce.core.types import MonthlyValues
from phenoforce.forcing.utils import negligible


def distribute_ndep_single_month(
    NH4dry: float,
    NO3dry: float,
    NH4wet: float,
    NO3wet: float,
    time_steps: int,
    dprec: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Distribute a single month of N deposition over its days.

    All deposition inputs are monthly means of daily deposition.

    Args:
        NH4dry: Dry NH4 deposition
        NO3dry: Dry NO3 deposition
        NH4wet: Wet NH4 deposition
        NO3wet: Wet NO3 deposition
        time_steps: Number of days in the month
        dprec: Daily precipitation for the month

    Returns:
        Tuple of (daily NH4 deposition, daily NO3 deposition)
    """
    dprec = np.asarray(dprec, dtype=float)
    if dprec.shape != (time_steps,):
        raise InvalidForcingError(
            f"Expected {time_steps} daily precipitation values, got shape {dprec.shape}",
            ErrorContext(component="deposition", operation="distribute_ndep_single_month")
        )

    wet = ~negligible(dprec)
    raindays = int(np.count_nonzero(wet))

    dNH4dep = np.full(time_steps, float(NH4dry))
    dNO3dep = np.full(time_steps, float(NO3dry))

    if raindays == 0:
        dNH4dep += NH4wet
        dNO3dep += NO3wet
    else:
        dNH4dep[wet] += NH4wet * time_steps / raindays
        dNO3dep[wet] += NO3wet * time_steps / raindays

    return dNH4dep, dNO3dep


def distribute_ndep(
    mNH4dry: MonthlyValues,
    mNO3dry: MonthlyValues,
    mNH4wet: MonthlyValues,
    mNO3wet: MonthlyValues,
    dprec: np.ndarray,
    ndaymonth: Optional[Sequence[int]] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Distribute monthly mean N deposition values to daily values for a year.

    Args:
        mNH4dry: Monthly means of daily dry NH4 deposition
        mNO3dry: Monthly means of daily dry NO3 deposition
        mNH4wet: Monthly means of daily wet NH4 deposition
        mNO3wet: Monthly means of daily wet NO3 deposition
        dprec: Daily precipitation for the year
        ndaymonth: Days in each month (defaults to a 365-day year)

    Returns:
        Tuple of (daily NH4 deposition, daily NO3 deposition)
    """
    ndaymonth = tuple(ndaymonth) if ndaymonth is not None else DAYS_PER_MONTH
    dprec = np.asarray(dprec, dtype=float)

    if dprec.shape != (sum(ndaymonth),):
        raise InvalidForcingError(
            f"Expected {sum(ndaymonth)} daily precipitation values, got shape {dprec.shape}",
            ErrorContext(component="deposition", operation="distribute_ndep")
        )

    monthly = [np.asarray(v, dtype=float) for v in (mNH4dry, mNO3dry, mNH4wet, mNO3wet)]
    for values in monthly:
        if values.shape != (MONTHS_PER_YEAR,):
            raise InvalidForcingError(
                f"Expected {MONTHS_PER_YEAR} monthly deposition values, got shape {values.shape}",
                ErrorContext(component="deposition", operation="distribute_ndep")
            )
    nh4dry, no3dry, nh4wet, no3wet = monthly

    dNH4dep = np.empty(dprec.size)
    dNO3dep = np.empty(dprec.size)
    start_of_month = 0

    for m in range(MONTHS_PER_YEAR):
        days = ndaymonth[m]
        month_slice = slice(start_of_month, start_of_month + days)
        dNH4dep[month_slice], dNO3dep[month_slice] = distribute_ndep_single_month(
            nh4dry[m], no3dry[m], nh4wet[m], no3wet[m], days, dprec[month_slice]
        )
        start_of_month += days

    return dNH4dep, dNO3dep
