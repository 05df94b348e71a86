"""
Default values and system-wide constants.
"""
from typing import Final

# Field policy defaults
DEFAULT_TRIGGER: Final[float] = 30.0  # kg N/ha
DEFAULT_EFFICIENCY: Final[float] = 0.8  # fraction of applied N that is plant available
DEFAULT_SPLITS: Final[int] = 1

# Column names used when exporting a balance to pandas
SOIL_MINERAL_N_COLUMN: Final[str] = "soil_mineral_n"
FERTILISER_APPLIED_COLUMN: Final[str] = "fertiliser_applied"
LOST_N_COLUMN: Final[str] = "lost_n"

# Logging
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
