"""
phenoforce Data Package.

Provides data contracts for monthly and daily forcing.
"""

from phenoforce.data.contracts import (
    MonthlyForcing,
    SiteDescription,
    DailyForcingRow,
)

__all__ = [
    "MonthlyForcing",
    "SiteDescription",
    "DailyForcingRow",
]
