"""
soiln Pipeline Module.

Runs the nitrogen balance stages end to end for one crop.
"""
from soiln.pipeline.balance import (
    MineralNBalance,
    NBalanceResult,
    run_nitrogen_balance,
)

__all__ = [
    "MineralNBalance",
    "NBalanceResult",
    "run_nitrogen_balance",
]
