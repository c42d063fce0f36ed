"""
State containers mutated by the daily forcing and accounting routines.

The framework owns these objects; this package only reads and writes the
numeric fields listed here.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from phenoforce.core.constants import (
    HISTORY_YEARS, MAX_YEAR_LENGTH, MONTHS_PER_YEAR, RUNNING_WINDOW_DAYS
)
from phenoforce.core.exceptions import BufferContractError, ErrorContext
from phenoforce.core.types import InsolationType, PftName


class RingBuffer:
    """
    Bounded circular buffer over the most recent `capacity` samples.

    Index 0 is the oldest stored value. Trailing-window statistics cover the
    newest `n` samples.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise BufferContractError(f"Capacity must be positive (got {capacity})")
        self.capacity = capacity
        self._values = np.zeros(capacity)
        self._next = 0
        self._size = 0

    def add(self, value: float) -> None:
        self._values[self._next] = value
        self._next = (self._next + 1) % self.capacity
        self._size = min(self._size + 1, self.capacity)

    push = add

    @property
    def size(self) -> int:
        return self._size

    @property
    def full(self) -> bool:
        return self._size == self.capacity

    def __len__(self) -> int:
        return self._size

    def to_array(self) -> np.ndarray:
        """Stored values, oldest first"""
        if not self.full:
            return self._values[:self._size].copy()
        return np.roll(self._values, -self._next)

    def __getitem__(self, index: int) -> float:
        if not -self._size <= index < self._size:
            raise BufferContractError(
                f"Index {index} outside buffer holding {self._size} values"
            )
        return float(self.to_array()[index])

    @property
    def lastadd(self) -> float:
        return self[-1]

    def _trailing(self, n: int) -> np.ndarray:
        if n <= 0 or n > self.capacity:
            raise BufferContractError(
                f"Trailing window of {n} outside buffer capacity {self.capacity}",
                ErrorContext(details={"capacity": self.capacity, "n": n})
            )
        if self._size == 0:
            raise BufferContractError("Statistics requested from an empty buffer")
        return self.to_array()[-min(n, self._size):]

    def periodic_sum(self, n: int) -> float:
        return float(np.sum(self._trailing(n)))

    def periodic_mean(self, n: int) -> float:
        return float(np.mean(self._trailing(n)))

    def sum(self) -> float:
        return self.periodic_sum(self.capacity)

    def mean(self) -> float:
        return self.periodic_mean(self.capacity)

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self.capacity}, size={self._size})"


def _monthly_histories() -> List[RingBuffer]:
    return [RingBuffer(HISTORY_YEARS) for _ in range(MONTHS_PER_YEAR)]


@dataclass
class Climate:
    """Climate record of one spatial unit"""
    lat: float = 0.0
    insolation_type: InsolationType = InsolationType.SUNSHINE

    # Instantaneous inputs
    temp: float = 0.0  # °C
    prec: float = 0.0  # mm
    insol: float = 0.0  # % sunshine or W/m² depending on insolation_type
    temps: List[float] = field(default_factory=list)
    insols: List[float] = field(default_factory=list)

    # Derived daily outputs
    daylength: float = 0.0  # hours
    rad: float = 0.0  # J/m²/day
    par: float = 0.0  # J/m²/day
    eet: float = 0.0  # mm/day
    gtemp: float = 0.0
    gtemps: List[float] = field(default_factory=list)
    rads: List[float] = field(default_factory=list)
    pars: List[float] = field(default_factory=list)

    # Per-day-of-year solar cache, valid for this latitude only
    qo: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    u: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    v: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    hh: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    sinehh: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    daylength_save: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH))
    doneday: np.ndarray = field(default_factory=lambda: np.zeros(MAX_YEAR_LENGTH, dtype=bool))
    cache_year_length: Optional[int] = None

    # 31-day windows
    dtemp_31: RingBuffer = field(default_factory=lambda: RingBuffer(RUNNING_WINDOW_DAYS))
    dprec_31: RingBuffer = field(default_factory=lambda: RingBuffer(RUNNING_WINDOW_DAYS))
    deet_31: RingBuffer = field(default_factory=lambda: RingBuffer(RUNNING_WINDOW_DAYS))

    # Degree days and chilling
    gdd0: float = 0.0
    agdd0: float = 0.0
    gdd5: float = 0.0
    agdd5: float = 0.0
    chilldays: int = 0
    ifsensechill: bool = False

    # Monthly and longer term temperature records
    mtemp: float = 0.0
    mtemp_min: float = 0.0
    mtemp_max: float = 0.0
    mtemp_min20: float = 0.0
    mtemp_max20: float = 0.0
    mtemp_min_20: np.ndarray = field(default_factory=lambda: np.zeros(HISTORY_YEARS))
    mtemp_max_20: np.ndarray = field(default_factory=lambda: np.zeros(HISTORY_YEARS))
    atemp_mean: float = 0.0
    agdd0_20: RingBuffer = field(default_factory=lambda: RingBuffer(HISTORY_YEARS))
    hmtemp_20: List[RingBuffer] = field(default_factory=_monthly_histories)
    hmprec_20: List[RingBuffer] = field(default_factory=_monthly_histories)
    hmeet_20: List[RingBuffer] = field(default_factory=_monthly_histories)

    aprec: float = 0.0

    def __post_init__(self):
        self.set_latitude(self.lat)

    def set_latitude(self, lat: float) -> None:
        """Set latitude (degrees) and invalidate the latitude-dependent solar cache"""
        self.lat = lat
        self.sinelat = math.sin(math.radians(lat))
        self.cosinelat = math.cos(math.radians(lat))
        self.invalidate_solar_cache()

    def invalidate_solar_cache(self) -> None:
        self.doneday[:] = False
        self.cache_year_length = None

    @property
    def agdd0_20_mean(self) -> float:
        return self.agdd0_20.mean()

    def hmtemp_20_mean(self, month: int) -> float:
        return self.hmtemp_20[month].mean()

    def hmprec_20_mean(self, month: int) -> float:
        return self.hmprec_20[month].mean()

    def hmeet_20_mean(self, month: int) -> float:
        return self.hmeet_20[month].mean()


@dataclass
class Patch:
    """Flux accumulators and soil respiration state of one patch"""
    fluxes: Dict[str, float] = field(default_factory=dict)
    anfix: float = 0.0
    aorgNleach: float = 0.0
    aorgCleach: float = 0.0
    aminleach: float = 0.0
    anfert: float = 0.0
    managed_this_year: bool = False
    plant_this_year: bool = False

    aaet: float = 0.0
    aintercep: float = 0.0
    apet: float = 0.0
    maet: np.ndarray = field(default_factory=lambda: np.zeros(MONTHS_PER_YEAR))
    mintercep: np.ndarray = field(default_factory=lambda: np.zeros(MONTHS_PER_YEAR))
    mpet: np.ndarray = field(default_factory=lambda: np.zeros(MONTHS_PER_YEAR))

    soil_gtemp: float = 0.0
    soil_dtemp: np.ndarray = field(default_factory=lambda: np.zeros(31))
    soil_mtemp: float = 0.0

    def reset_annual_fluxes(self) -> None:
        for key in self.fluxes:
            self.fluxes[key] = 0.0
        self.anfix = 0.0
        self.aorgNleach = 0.0
        self.aorgCleach = 0.0
        self.aminleach = 0.0
        self.anfert = 0.0
        self.managed_this_year = False
        self.plant_this_year = False


@dataclass
class Gridcell:
    """Spatial unit: climate record plus the deposition and PFT fields accounting touches"""
    unit_id: str = "gridcell"
    climate: Climate = field(default_factory=Climate)
    patches: List[Patch] = field(default_factory=list)

    dNH4dep: float = 0.0  # kgN/m²/day
    dNO3dep: float = 0.0
    aNH4dep: float = 0.0  # kgN/m²/year
    aNO3dep: float = 0.0

    soil_wtot: float = 0.0  # mm, total available soil water holding capacity
    pft_km: Dict[PftName, float] = field(default_factory=dict)
