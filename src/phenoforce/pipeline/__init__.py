"""
phenoforce Pipeline Module.

Builds daily forcing from monthly inputs and runs spatial units through
simulation years.
"""

from phenoforce.pipeline.annual import (
    ClimateDriver,
    build_daily_forcing,
    validate_daily_forcing,
)

__all__ = [
    "ClimateDriver",
    "build_daily_forcing",
    "validate_daily_forcing",
]
