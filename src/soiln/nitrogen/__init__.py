"""Soil mineral nitrogen balance and fertiliser scheduling."""
from soiln.nitrogen.series import (
    date_series,
    dict_maker,
    zero_series,
    series_from_pandas,
    series_to_frame,
)
from soiln.nitrogen.mineral_n import (
    initial_balance,
    correct_to_tests,
    add_fertiliser,
    apply_existing_fertiliser,
)
from soiln.nitrogen.scheduling import (
    FertiliserSchedule,
    FertiliserScheduler,
    determine_fert_requirements,
)

__all__ = [
    "date_series",
    "dict_maker",
    "zero_series",
    "series_from_pandas",
    "series_to_frame",
    "initial_balance",
    "correct_to_tests",
    "add_fertiliser",
    "apply_existing_fertiliser",
    "FertiliserSchedule",
    "FertiliserScheduler",
    "determine_fert_requirements",
]
