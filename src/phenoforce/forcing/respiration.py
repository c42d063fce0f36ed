"""
Temperature response of respiration.

Empirical relationship for the temperature response of soil respiration
across ecosystems, incorporating damping of the Q10 response due to
temperature acclimation (Eqn 11, Lloyd & Taylor 1994):

    r    = r10 * g(T)
    g(T) = exp[308.56 * (1/56.02 - 1/(T - 227.13))]   (T in Kelvin)

References:
- Lloyd, J. & Taylor, J.A. (1994). On the temperature dependence of soil
  respiration. Functional Ecology 8: 315-323.
- Koven, C.D. et al. (2011). Permafrost carbon-climate feedbacks accelerate
  global warming. PNAS 108: 14769-14774.
"""

import numpy as np

from phenoforce.core.constants import (
    LLOYD_TAYLOR_E0, LLOYD_TAYLOR_T0, LLOYD_TAYLOR_TREF,
    MIN_DECOMP_TEMP, MIN_RESPIRATION_TEMP
)


def respiration_temperature_response(temp):
    """
    Response of respiration rate to air or soil temperature.

    Args:
        temp: Temperature (°C), scalar or array

    Returns:
        g(T); zero below -40 °C
    """
    temp_arr = np.asarray(temp, dtype=float)
    active = temp_arr >= MIN_RESPIRATION_TEMP
    # Keep the masked-out branch away from the pole at -46.02 °C
    safe = np.where(active, temp_arr, 0.0)
    gtemp = np.where(
        active,
        np.exp(LLOYD_TAYLOR_E0 * (1.0 / LLOYD_TAYLOR_TREF - 1.0 / (safe + LLOYD_TAYLOR_T0))),
        0.0
    )
    if gtemp.ndim == 0:
        return float(gtemp)
    return gtemp


def soil_respiration_temperature_response(
    temp: float,
    carbon_freeze: bool = False,
    min_decomp_temp: float = MIN_DECOMP_TEMP,
    two_layer_soil: bool = False
) -> float:
    """
    Respiration response to soil temperature, with optional frozen-soil ramp.

    When carbon freezing is enabled, decomposition in frozen soil decreases
    linearly from its 0 °C rate to zero at `min_decomp_temp` (Koven et al.
    2011).

    Args:
        temp: Soil temperature at 25 cm (°C)
        carbon_freeze: Allow decomposition below 0 °C
        min_decomp_temp: Temperature at which decomposition stops (°C)
        two_layer_soil: Two-layer soil scheme in use (disables the ramp)

    Returns:
        Soil respiration temperature response
    """
    gtemp = respiration_temperature_response(temp)

    if carbon_freeze and temp <= 0.0 and not two_layer_soil:
        decomp_at_freezing_point = respiration_temperature_response(0.0)
        slope = decomp_at_freezing_point / abs(min_decomp_temp)

        if temp < min_decomp_temp:
            gtemp = 0.0
        else:
            gtemp = slope * temp + decomp_at_freezing_point

    return gtemp
