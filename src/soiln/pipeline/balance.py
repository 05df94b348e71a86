"""
Nitrogen balance pipeline.
Orchestrates the initial balance, test correction, existing fertiliser and
scheduling stages over one shared soil mineral N trajectory.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import numpy as np
import pandas as pd

from soiln.core.config import NBalanceConfig, get_config
from soiln.core.constants import (
    SOIL_MINERAL_N_COLUMN, FERTILISER_APPLIED_COLUMN, LOST_N_COLUMN
)
from soiln.core.exceptions import (
    BalanceError, ErrorContext, SchedulingError, handle_exception
)
from soiln.core.types import DateSeries, SimDates
from soiln.nitrogen.mineral_n import (
    initial_balance, correct_to_tests, apply_existing_fertiliser
)
from soiln.nitrogen.scheduling import FertiliserSchedule, FertiliserScheduler
from soiln.nitrogen.series import series_to_frame, zero_series


@dataclass
class NBalanceResult:
    """Final series of one nitrogen balance run"""
    dates: List[date]
    soil_n: DateSeries
    fertiliser: DateSeries
    lost_n: DateSeries
    schedule: FertiliserSchedule

    @property
    def total_fertiliser(self) -> float:
        """Product N applied over the run, existing and scheduled (kg N/ha)"""
        return float(np.sum([self.fertiliser[d] for d in self.dates]))

    @property
    def application_dates(self) -> List[date]:
        return [d for d in self.dates if self.fertiliser[d] > 0]

    def to_frame(self) -> pd.DataFrame:
        """Daily series as a DataFrame indexed by date"""
        return series_to_frame(
            self.dates,
            **{
                SOIL_MINERAL_N_COLUMN: self.soil_n,
                FERTILISER_APPLIED_COLUMN: self.fertiliser,
                LOST_N_COLUMN: self.lost_n,
            }
        )


class MineralNBalance:
    """
    Soil mineral N balance and fertiliser schedule for the current crop.

    Stages, each updating the soil N trajectory in place:
    1. Initial balance from initial N, uptake and mineralisation
    2. Correction to soil test results (chronological)
    3. Fertiliser already applied
    4. Scheduling of further split applications up to harvest
    """

    def __init__(self, config: Optional[NBalanceConfig] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.scheduler = FertiliserScheduler(self.config)

    def run(
        self,
        sim_dates: SimDates,
        initial_n: float,
        uptake: DateSeries,
        residue: DateSeries,
        som: DateSeries,
        crop_n: DateSeries,
        test_results: Optional[DateSeries] = None,
        n_applied: Optional[DateSeries] = None,
    ) -> NBalanceResult:
        """
        Run all stages.

        Args:
            sim_dates: Chronological dates covering both crop periods
            initial_n: Soil mineral N at the first simulation date (kg N/ha)
            uptake: Daily crop N uptake (kg N/ha/day)
            residue: Daily residue mineralisation (kg N/ha/day)
            som: Daily soil organic matter mineralisation (kg N/ha/day)
            crop_n: Standing crop N (kg N/ha)
            test_results: Measured soil mineral N on test dates
            n_applied: Fertiliser product already applied (kg N/ha)

        Returns:
            NBalanceResult with soil N, fertiliser applied and lost N

        Raises:
            KeyError: a date needed by a stage is missing from a series
        """
        sim_dates = list(sim_dates)
        test_results = test_results or {}
        n_applied = n_applied or {}

        self.logger.info(
            f"Running nitrogen balance from {sim_dates[0] if sim_dates else None} "
            f"to {sim_dates[-1] if sim_dates else None}: "
            f"{len(test_results)} tests, {len(n_applied)} existing applications"
        )

        stage = "initial_balance"
        try:
            soil_n = initial_balance(sim_dates, initial_n, uptake, residue, som)

            stage = "test_correction"
            correct_to_tests(test_results, soil_n)

            stage = "existing_fertiliser"
            lost_n = zero_series(sim_dates)
            fert = apply_existing_fertiliser(
                sim_dates, n_applied, test_results, soil_n, lost_n, self.config
            )

            stage = "scheduling"
            schedule = self.scheduler.schedule(
                fert, soil_n, lost_n, residue, som, crop_n, test_results
            )
        except KeyError:
            raise
        except Exception as e:
            self.logger.error(f"Nitrogen balance failed during {stage}: {e}")
            context = ErrorContext(component=self.__class__.__name__, operation=stage)
            error = handle_exception(e, context)
            if stage == "scheduling" and isinstance(error, BalanceError):
                error = SchedulingError(str(e), context)
            raise error from e

        result = NBalanceResult(
            dates=sim_dates,
            soil_n=soil_n,
            fertiliser=fert,
            lost_n=lost_n,
            schedule=schedule,
        )
        self.logger.info(
            f"Scheduled {len(schedule.applications)} applications of "
            f"{schedule.n_appn:.0f} kg N/ha; total fertiliser "
            f"{result.total_fertiliser:.1f} kg N/ha"
        )
        return result


def run_nitrogen_balance(
    sim_dates: SimDates,
    initial_n: float,
    uptake: DateSeries,
    residue: DateSeries,
    som: DateSeries,
    crop_n: DateSeries,
    test_results: Optional[DateSeries] = None,
    n_applied: Optional[DateSeries] = None,
    config: Optional[NBalanceConfig] = None,
) -> NBalanceResult:
    """One-shot convenience wrapper around :class:`MineralNBalance`"""
    return MineralNBalance(config).run(
        sim_dates, initial_n, uptake, residue, som, crop_n,
        test_results=test_results, n_applied=n_applied,
    )
