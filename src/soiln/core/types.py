"""
Type definitions and type aliases for the soiln system.
"""
from datetime import date
from typing import Dict, Sequence

from typing_extensions import TypeAlias


# Date-keyed series (kg N/ha or kg N/ha/day). Key order is not chronological.
DateSeries: TypeAlias = Dict[date, float]

# Chronological simulation dates
SimDates: TypeAlias = Sequence[date]
