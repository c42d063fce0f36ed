"""
Type definitions and type aliases for the phenoforce system.
Provides strong typing throughout the codebase.
"""
from typing import Dict, Mapping, Protocol, Sequence, Union, runtime_checkable
from enum import Enum
from typing_extensions import TypeAlias
import numpy as np


# Type aliases for clarity
UnitID: TypeAlias = str
PftName: TypeAlias = str

MonthlyValues: TypeAlias = Union[Sequence[float], np.ndarray]  # Length 12


class InsolationType(str, Enum):
    """How the insolation input should be interpreted"""
    SUNSHINE = "sunshine"  # percentage of full sunshine
    NETSWRAD = "netswrad"  # net shortwave flux, averaged over daylight hours
    SWRAD = "swrad"  # downward shortwave flux, averaged over daylight hours
    NETSWRAD_TS = "netswrad_ts"  # net shortwave flux, averaged over whole time step
    SWRAD_TS = "swrad_ts"  # downward shortwave flux, averaged over whole time step

    @property
    def is_flux(self) -> bool:
        return self is not InsolationType.SUNSHINE

    @property
    def daylight_averaged(self) -> bool:
        """Flux is a mean over the daylight hours rather than the whole day"""
        return self in (InsolationType.NETSWRAD, InsolationType.SWRAD)

    @property
    def needs_albedo_correction(self) -> bool:
        """Downward (not net) flux, so the albedo still has to be removed"""
        return self in (InsolationType.SWRAD, InsolationType.SWRAD_TS)


class SeasonTrigger(Enum):
    """Phenological events fired on a fixed day of the year"""
    NONE = "none"
    WINTER_RESET = "winter_reset"  # midwinter: reset GDD5 and chill state
    SUMMER_SET = "summer_set"  # midsummer: start sensing chill


@runtime_checkable
class PftRegistry(Protocol):
    """Protocol for the plant functional type parameters read by accounting"""

    def km_volumes(self) -> Mapping[PftName, float]:
        """Michaelis-Menten Km per unit of soil water, per PFT"""
        ...


class StaticPftRegistry:
    """Plain mapping-backed PFT registry"""

    def __init__(self, km_volume: Mapping[PftName, float]):
        self._km_volume: Dict[PftName, float] = dict(km_volume)

    def km_volumes(self) -> Mapping[PftName, float]:
        return self._km_volume

    def __len__(self) -> int:
        return len(self._km_volume)
