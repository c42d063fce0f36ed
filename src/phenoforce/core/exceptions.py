"""
Custom exception hierarchy for the phenoforce system.
Provides clear error categories and rich error information.
"""
from typing import Optional, Any, Dict
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Context information for errors"""
    unit_id: Optional[str] = None
    day: Optional[int] = None
    year: Optional[int] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class PhenoforceError(Exception):
    """Base exception for all phenoforce errors"""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        context_str = ""
        if self.context.unit_id:
            context_str += f" [Unit: {self.context.unit_id}]"
        if self.context.year is not None:
            context_str += f" [Year: {self.context.year}]"
        if self.context.day is not None:
            context_str += f" [Day: {self.context.day}]"
        if self.context.component:
            context_str += f" [Component: {self.context.component}]"

        return f"{self.__class__.__name__}: {self.message}{context_str}"


# Forcing data errors
class ForcingDataError(PhenoforceError):
    """Base class for forcing data errors"""
    pass


class InvalidForcingError(ForcingDataError):
    """Forcing value outside its physical bounds, or malformed forcing series"""
    pass


# Physics model errors
class PhysicsModelError(PhenoforceError):
    """Base class for physics model errors"""
    pass


class ConvergenceError(PhysicsModelError):
    """Iterative generation failed to produce a usable result"""
    pass


# Contract errors
class CalendarError(PhenoforceError):
    """Calendar contract violation"""
    pass


class BufferContractError(PhenoforceError):
    """Ring buffer used outside its capacity"""
    pass


# Configuration errors
class ConfigurationError(PhenoforceError):
    """Configuration error"""
    pass


def handle_exception(exc: Exception, context: Optional[ErrorContext] = None) -> PhenoforceError:
    """
    Wrap generic exceptions in PhenoforceError hierarchy.
    Useful for catching and categorizing third-party exceptions.
    """
    if isinstance(exc, PhenoforceError):
        return exc

    error_map = {
        ValueError: InvalidForcingError,
        IndexError: BufferContractError,
        FloatingPointError: PhysicsModelError,
        RuntimeError: PhysicsModelError,
    }

    for exc_type, wrapped_type in error_map.items():
        if isinstance(exc, exc_type):
            return wrapped_type(str(exc), context)

    return PhenoforceError(str(exc), context)
