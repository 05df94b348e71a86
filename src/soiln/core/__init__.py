"""Core configuration, types and errors."""
from soiln.core.config import (
    CropPeriod,
    FieldConfig,
    LogConfig,
    NBalanceConfig,
    configure_logging,
    get_config,
    set_config,
)
from soiln.core.exceptions import (
    SoilnError,
    NitrogenModelError,
    BalanceError,
    SchedulingError,
    ConfigurationError,
    ErrorContext,
)

__all__ = [
    "CropPeriod",
    "FieldConfig",
    "LogConfig",
    "NBalanceConfig",
    "configure_logging",
    "get_config",
    "set_config",
    "SoilnError",
    "NitrogenModelError",
    "BalanceError",
    "SchedulingError",
    "ConfigurationError",
    "ErrorContext",
]
