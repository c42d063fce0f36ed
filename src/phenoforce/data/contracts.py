"""
Data contracts and schemas for the phenoforce system.
Ensures monthly forcing is well formed before it is disaggregated.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from phenoforce.core.constants import MONTHS_PER_YEAR
from phenoforce.core.types import UnitID


def _twelve_zeros() -> List[float]:
    return [0.0] * MONTHS_PER_YEAR


class MonthlyForcing(BaseModel):
    """One year of monthly climate and deposition forcing"""
    temperature: List[float]  # °C, monthly mean
    precipitation: List[float]  # mm, monthly total
    insolation: List[float]  # monthly mean, units per insolation type
    wet_days: Optional[List[float]] = None  # expected rain days per month

    # Monthly means of daily N deposition (kgN/m²/day)
    ndep_nh4_dry: List[float] = Field(default_factory=_twelve_zeros)
    ndep_no3_dry: List[float] = Field(default_factory=_twelve_zeros)
    ndep_nh4_wet: List[float] = Field(default_factory=_twelve_zeros)
    ndep_no3_wet: List[float] = Field(default_factory=_twelve_zeros)

    model_config = {"extra": "forbid", "allow_inf_nan": False}

    @field_validator(
        "temperature", "precipitation", "insolation", "wet_days",
        "ndep_nh4_dry", "ndep_no3_dry", "ndep_nh4_wet", "ndep_no3_wet"
    )
    @classmethod
    def validate_twelve_months(cls, v, info):
        """Every monthly series covers exactly one year"""
        if v is not None and len(v) != MONTHS_PER_YEAR:
            raise ValueError(f"{info.field_name} must have {MONTHS_PER_YEAR} values (got {len(v)})")
        return v

    @field_validator(
        "precipitation", "insolation", "wet_days",
        "ndep_nh4_dry", "ndep_no3_dry", "ndep_nh4_wet", "ndep_no3_wet"
    )
    @classmethod
    def validate_non_negative(cls, v, info):
        if v is not None and any(x < 0 for x in v):
            raise ValueError(f"{info.field_name} must be non-negative")
        return v


class SiteDescription(BaseModel):
    """Static description of a spatial unit"""
    site_id: UnitID
    latitude: float = Field(ge=-90, le=90)
    soil_wtot: float = Field(default=0.0, ge=0, description="Available soil water capacity (mm)")


class DailyForcingRow(BaseModel):
    """One day of disaggregated forcing"""
    day: int = Field(ge=0)
    month: int = Field(ge=0, lt=MONTHS_PER_YEAR)
    dayofmonth: int = Field(ge=0, lt=31)
    temp: float
    prec: float = Field(ge=0)
    insol: float = Field(ge=0)
    ndep_nh4: float = Field(ge=0)
    ndep_no3: float = Field(ge=0)

    model_config = {"allow_inf_nan": False}

    @model_validator(mode="after")
    def validate_day_in_month(self):
        if self.dayofmonth > self.day:
            raise ValueError("dayofmonth cannot exceed day of year")
        return self
