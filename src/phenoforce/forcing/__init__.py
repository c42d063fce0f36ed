"""Forcing generation and daily climate accounting."""
from phenoforce.forcing.interpolation import (
    interp_single_month,
    interp_monthly_means_conserve,
    interp_monthly_totals_conserve,
)
from phenoforce.forcing.deposition import (
    distribute_ndep_single_month,
    distribute_ndep,
)
from phenoforce.forcing.precipitation import (
    PrecipitationDiagnostics,
    prdaily,
)
from phenoforce.forcing.solar import (
    SolarGeometry,
    solar_geometry,
    daylength_insol_eet,
)
from phenoforce.forcing.respiration import (
    respiration_temperature_response,
    soil_respiration_temperature_response,
)
from phenoforce.forcing.accounting import (
    season_trigger,
    daily_accounting_gridcell,
    daily_accounting_patch,
)

__all__ = [
    # Monthly to daily interpolation
    "interp_single_month",
    "interp_monthly_means_conserve",
    "interp_monthly_totals_conserve",
    # Nitrogen deposition
    "distribute_ndep_single_month",
    "distribute_ndep",
    # Precipitation generator
    "PrecipitationDiagnostics",
    "prdaily",
    # Solar geometry and EET
    "SolarGeometry",
    "solar_geometry",
    "daylength_insol_eet",
    # Temperature response
    "respiration_temperature_response",
    "soil_respiration_temperature_response",
    # Accounting
    "season_trigger",
    "daily_accounting_gridcell",
    "daily_accounting_patch",
]
