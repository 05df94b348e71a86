"""Soil mineral nitrogen balance and fertiliser scheduling."""
from soiln.core.config import CropPeriod, FieldConfig, NBalanceConfig
from soiln.nitrogen.scheduling import FertiliserSchedule
from soiln.pipeline.balance import MineralNBalance, NBalanceResult, run_nitrogen_balance

__version__ = "0.1.0"

__all__ = [
    "CropPeriod",
    "FieldConfig",
    "NBalanceConfig",
    "FertiliserSchedule",
    "MineralNBalance",
    "NBalanceResult",
    "run_nitrogen_balance",
]
