"""
Mean-conserving interpolation of monthly climate to quasi-daily values.

Daily values are generated by choosing values for the beginning, middle and
end of each month and interpolating linearly between them. The end points
take the neighbouring months into account; the middle point is then chosen
so that the monthly mean is conserved. Optional bounds are enforced by
clamping and redistributing the clamped amount over the remaining days, which
keeps the mean intact.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from phenoforce.core.constants import DAYS_PER_MONTH, MONTHS_PER_YEAR
from phenoforce.core.exceptions import ErrorContext, InvalidForcingError
from phenoforce.core.types import MonthlyValues

logger = logging.getLogger(__name__)


def interp_single_month(
    preceding_mean: float,
    this_mean: float,
    succeeding_mean: float,
    time_steps: int,
    minimum: float = -np.inf,
    maximum: float = np.inf
) -> np.ndarray:
    """
    Generate values for a single period that conserve the period mean.

    Could be used for other interpolations than monthly to daily, but the
    variable names assume months and days.

    Args:
        preceding_mean: Mean value for the preceding month
        this_mean: Mean value for the current month
        succeeding_mean: Mean value for the succeeding month
        time_steps: Number of days in the current month
        minimum: Lower bound for generated values
        maximum: Upper bound for generated values

    Returns:
        Array of `time_steps` daily values
    """
    if time_steps <= 0:
        raise ValueError(f"time_steps must be positive (got {time_steps})")

    first_value = 0.5 * (this_mean + preceding_mean)
    last_value = 0.5 * (this_mean + succeeding_mean)

    # If the end points are on average 2 degrees below the mean, the middle
    # point goes 2 degrees above it
    average_deviation = 0.5 * ((first_value - this_mean) + (last_value - this_mean))
    middle_value = this_mean - average_deviation

    half_time = time_steps / 2.0
    first_slope = (middle_value - first_value) / half_time
    second_slope = (last_value - middle_value) / half_time

    result = np.empty(time_steps)
    half = time_steps // 2
    odd = time_steps % 2 == 1

    # Sample at the middle of each day
    first_times = np.arange(half) + 0.5
    result[:half] = first_value + first_slope * first_times

    second_start = half + 1 if odd else half
    second_times = np.arange(second_start, time_steps) + 0.5
    result[second_start:] = middle_value + second_slope * (second_times - half_time)

    if odd:
        # The middle day takes whatever is needed to conserve the mean
        others = result[:half].sum() + result[second_start:].sum()
        result[half] = time_steps * this_mean - others

    _enforce_minimum(result, minimum)
    _enforce_maximum(result, maximum)

    return result


def _enforce_minimum(values: np.ndarray, minimum: float) -> None:
    """Raise values to `minimum`, taking the deficit from the values above it"""
    if not np.isfinite(minimum):
        return

    below = values < minimum
    added = float(np.sum(minimum - values[below]))
    values[below] = minimum
    sum_above = float(np.sum(values[~below] - minimum))

    if added > 0 and sum_above <= 0:
        logger.warning(
            f"All values at lower bound {minimum}; mean cannot be fully conserved"
        )

    fraction_to_remove = added / sum_above if sum_above > 0 else 0.0

    above = values > minimum
    values[above] -= fraction_to_remove * (values[above] - minimum)
    # Floating point may undershoot
    np.maximum(values, minimum, out=values)


def _enforce_maximum(values: np.ndarray, maximum: float) -> None:
    """Lower values to `maximum`, giving the excess to the values below it"""
    if not np.isfinite(maximum):
        return

    above = values > maximum
    removed = float(np.sum(values[above] - maximum))
    values[above] = maximum
    sum_below = float(np.sum(maximum - values[~above]))

    if removed > 0 and sum_below <= 0:
        logger.warning(
            f"All values at upper bound {maximum}; mean cannot be fully conserved"
        )

    fraction_to_add = removed / sum_below if sum_below > 0 else 0.0

    below = values < maximum
    values[below] += fraction_to_add * (maximum - values[below])
    np.minimum(values, maximum, out=values)


def _validate_monthly(mvals: MonthlyValues, operation: str) -> np.ndarray:
    mvals = np.asarray(mvals, dtype=float)
    if mvals.shape != (MONTHS_PER_YEAR,):
        raise InvalidForcingError(
            f"{operation}: expected {MONTHS_PER_YEAR} monthly values, got shape {mvals.shape}",
            ErrorContext(component="interpolation", operation=operation)
        )
    if not np.all(np.isfinite(mvals)):
        raise InvalidForcingError(
            f"{operation}: non-finite monthly value in {mvals.tolist()}",
            ErrorContext(component="interpolation", operation=operation,
                         details={"months": np.flatnonzero(~np.isfinite(mvals)).tolist()})
        )
    return mvals


def interp_monthly_means_conserve(
    mvals: MonthlyValues,
    minimum: float = -np.inf,
    maximum: float = np.inf,
    ndaymonth: Optional[Sequence[int]] = None
) -> np.ndarray:
    """
    Interpolate monthly means to daily values with the same monthly means.

    May be called by the input layer when raw data are on a monthly basis.

    Args:
        mvals: The 12 monthly means
        minimum: Lower bound for daily values
        maximum: Upper bound for daily values
        ndaymonth: Days in each month (defaults to a 365-day year)

    Returns:
        Daily values for the whole year

    Raises:
        InvalidForcingError: If a monthly mean lies outside [minimum, maximum]
    """
    mvals = _validate_monthly(mvals, "interp_monthly_means_conserve")
    ndaymonth = tuple(ndaymonth) if ndaymonth is not None else DAYS_PER_MONTH

    dvals = np.empty(sum(ndaymonth))
    start_of_month = 0

    for m in range(MONTHS_PER_YEAR):
        # Index of previous and next month, with wrap-around
        prev = (m + 11) % 12
        nxt = (m + 1) % 12

        # A broken mean cannot be repaired by the bound passes, so the
        # forcing data is rejected
        if mvals[m] < minimum or mvals[m] > maximum:
            raise InvalidForcingError(
                f"interp_monthly_means_conserve: Invalid monthly value given "
                f"({mvals[m]:g}), min = {minimum:g}, max = {maximum:g}",
                ErrorContext(
                    component="interpolation",
                    operation="interp_monthly_means_conserve",
                    details={"month": m, "value": float(mvals[m])}
                )
            )

        days = ndaymonth[m]
        dvals[start_of_month:start_of_month + days] = interp_single_month(
            mvals[prev], mvals[m], mvals[nxt], days, minimum, maximum
        )
        start_of_month += days

    return dvals


def interp_monthly_totals_conserve(
    mvals: MonthlyValues,
    minimum: float = -np.inf,
    maximum: float = np.inf,
    ndaymonth: Optional[Sequence[int]] = None
) -> np.ndarray:
    """
    Interpolate monthly totals to daily values with the same monthly totals.

    Args:
        mvals: The 12 monthly totals
        minimum: Lower bound for daily values
        maximum: Upper bound for daily values
        ndaymonth: Days in each month (defaults to a 365-day year)

    Returns:
        Daily values for the whole year
    """
    mvals = _validate_monthly(mvals, "interp_monthly_totals_conserve")
    ndaymonth = tuple(ndaymonth) if ndaymonth is not None else DAYS_PER_MONTH

    mvals_daily = mvals / np.asarray(ndaymonth, dtype=float)

    return interp_monthly_means_conserve(mvals_daily, minimum, maximum, ndaymonth)
