"""
Simulation calendar passed explicitly into every daily operation.
"""
import calendar
from dataclasses import dataclass
from typing import Tuple

from phenoforce.core.constants import (
    DAYS_PER_MONTH, DAYS_PER_MONTH_LEAP, MONTHS_PER_YEAR
)
from phenoforce.core.exceptions import CalendarError, ErrorContext


@dataclass
class CalendarContext:
    """
    Current simulated day plus the rules for advancing it.

    Day, month and year indices are 0-based. Leap years follow the
    Gregorian calendar of `first_calendar_year + year` when `leap_years`
    is on; otherwise every year has 365 days.
    """
    first_calendar_year: int = 1901
    leap_years: bool = False
    subdaily: int = 0

    day: int = 0
    dayofmonth: int = 0
    month: int = 0
    year: int = 0

    def __post_init__(self):
        if self.subdaily < 0:
            raise CalendarError(
                f"Sub-daily step count must be >= 0 (got {self.subdaily})",
                ErrorContext(component="calendar")
            )

    @property
    def calendar_year(self) -> int:
        return self.first_calendar_year + self.year

    @property
    def is_leap(self) -> bool:
        return self.leap_years and calendar.isleap(self.calendar_year)

    @property
    def ndaymonth(self) -> Tuple[int, ...]:
        """Days in each month of the current year"""
        return DAYS_PER_MONTH_LEAP if self.is_leap else DAYS_PER_MONTH

    def year_length(self) -> int:
        return 366 if self.is_leap else 365

    def diurnal(self) -> bool:
        return self.subdaily > 0

    @property
    def isfirstday(self) -> bool:
        return self.dayofmonth == 0

    @property
    def isfirstmonth(self) -> bool:
        return self.month == 0

    @property
    def islastday(self) -> bool:
        return self.dayofmonth == self.ndaymonth[self.month] - 1

    @property
    def islastmonth(self) -> bool:
        return self.month == MONTHS_PER_YEAR - 1

    @property
    def month_start(self) -> int:
        """Day of year of the first day of the current month"""
        return sum(self.ndaymonth[:self.month])

    def next(self) -> None:
        """Advance one simulated day, rolling over months and years"""
        if self.islastday:
            if self.islastmonth:
                self.year += 1
                self.month = 0
                self.day = 0
            else:
                self.month += 1
                self.day += 1
            self.dayofmonth = 0
        else:
            self.day += 1
            self.dayofmonth += 1

    def reset(self) -> None:
        """Return to the first day of the simulation"""
        self.day = 0
        self.dayofmonth = 0
        self.month = 0
        self.year = 0

    def set_day(self, year: int, day: int) -> None:
        """Jump to a given simulation year and day of year"""
        self.year = year
        if not 0 <= day < self.year_length():
            raise CalendarError(
                f"Day {day} outside year of length {self.year_length()}",
                ErrorContext(year=year, day=day, component="calendar")
            )
        self.day = day
        remaining = day
        for month, ndays in enumerate(self.ndaymonth):
            if remaining < ndays:
                self.month = month
                self.dayofmonth = remaining
                return
            remaining -= ndays
