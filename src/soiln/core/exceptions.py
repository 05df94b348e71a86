"""
Custom exception hierarchy for the soiln system.
Provides clear error categories and rich error information.

Missing dates in a date-keyed series are deliberately not part of this
hierarchy: a plain ``KeyError`` surfaces to the caller unchanged.
"""
from typing import Optional, Any, Dict
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Context information for errors"""
    date: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class SoilnError(Exception):
    """Base exception for all soiln errors"""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        context_str = ""
        if self.context.date:
            context_str += f" [Date: {self.context.date}]"
        if self.context.component:
            context_str += f" [Component: {self.context.component}]"
        if self.context.operation:
            context_str += f" [Operation: {self.context.operation}]"

        return f"{self.__class__.__name__}: {self.message}{context_str}"


# Nitrogen model errors
class NitrogenModelError(SoilnError):
    """Base class for nitrogen balance errors"""
    pass


class BalanceError(NitrogenModelError):
    """Soil mineral N balance could not be computed"""
    pass


class SchedulingError(NitrogenModelError):
    """Fertiliser schedule could not be determined"""
    pass


# Configuration errors
class ConfigurationError(SoilnError):
    """Configuration error"""
    pass


def handle_exception(exc: Exception, context: Optional[ErrorContext] = None) -> SoilnError:
    """
    Wrap generic exceptions in the SoilnError hierarchy.

    KeyError is not mapped; callers re-raise it unchanged.
    """
    if isinstance(exc, SoilnError):
        return exc

    error_map = {
        ZeroDivisionError: ConfigurationError,
        ValueError: BalanceError,
        TypeError: BalanceError,
        ArithmeticError: BalanceError,
    }

    for exc_type, soiln_exc_type in error_map.items():
        if isinstance(exc, exc_type):
            return soiln_exc_type(str(exc), context)

    return SoilnError(str(exc), context)
