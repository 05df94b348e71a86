"""
Fertiliser N requirement and split application scheduling.

The requirement covers crop N demand from the start of scheduling to harvest
plus the trigger buffer, less soil mineral N at the start of scheduling,
mineralisation and fertiliser already applied in the window. It is delivered
in equal splits on the days soil mineral N falls below the trigger.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List

from soiln.core.config import NBalanceConfig
from soiln.core.types import DateSeries
from soiln.nitrogen.mineral_n import add_fertiliser
from soiln.nitrogen.series import date_series


@dataclass
class FertiliserSchedule:
    """Outcome of one scheduling pass (amounts in kg N/ha)"""
    start_date: date
    end_date: date
    mineralisation: float = 0.0
    fert_to_date: float = 0.0
    crop_demand: float = 0.0
    n_fert_req: float = 0.0  # product N, after efficiency
    n_appn: float = 0.0  # product N per split
    applications: Dict[date, float] = field(default_factory=dict)

    @property
    def total_applied(self) -> float:
        return float(sum(self.applications.values()))

    @property
    def application_dates(self) -> List[date]:
        return sorted(self.applications)

    @property
    def unmet_requirement(self) -> float:
        """Requirement left over when the trigger stopped firing"""
        return max(0.0, self.n_fert_req - self.total_applied)


class FertiliserScheduler:
    """
    Determines how much more fertiliser the current crop needs and when.

    Scheduling starts the day after the latest of the last soil test, the
    last recorded application and crop establishment, and ends at harvest.
    Applications stop once the requirement has been applied, even if soil N
    falls below the trigger again later in the window.
    """

    def __init__(self, config: NBalanceConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def start_date(self, fert: DateSeries, test_results: DateSeries) -> date:
        """Day after the last test, last positive application or establishment"""
        candidates = [self.config.current.establish_date]
        if test_results:
            candidates.append(max(test_results))
        applied = [d for d, amount in fert.items() if amount > 0]
        if applied:
            candidates.append(max(applied))
        return max(candidates) + timedelta(days=1)

    def requirement(
        self,
        fert: DateSeries,
        soil_n: DateSeries,
        residue_min: DateSeries,
        som_n: DateSeries,
        crop_n: DateSeries,
        test_results: DateSeries,
    ) -> FertiliserSchedule:
        """Size the requirement and the split amount without applying anything"""
        start = self.start_date(fert, test_results)
        harvest = self.config.current.harvest_date
        schedule = FertiliserSchedule(start_date=start, end_date=harvest)

        for d in date_series(start, harvest):
            schedule.mineralisation += residue_min[d] + som_n[d]
            schedule.fert_to_date += fert[d]

        schedule.crop_demand = crop_n[harvest] - crop_n[start]

        trigger = self.config.field.trigger
        efficiency = self.config.field.efficiency
        splits = self.config.field.splits

        n_fert_req = (
            schedule.crop_demand + trigger
            - soil_n[start]
            - schedule.mineralisation
            - schedule.fert_to_date
        )
        schedule.n_fert_req = max(0.0, n_fert_req / efficiency)
        if splits > 0:
            schedule.n_appn = float(math.ceil(schedule.n_fert_req / splits))

        return schedule

    def schedule(
        self,
        fert: DateSeries,
        soil_n: DateSeries,
        lost_n: DateSeries,
        residue_min: DateSeries,
        som_n: DateSeries,
        crop_n: DateSeries,
        test_results: DateSeries,
    ) -> FertiliserSchedule:
        """
        Schedule split applications, updating ``fert``, ``soil_n`` and
        ``lost_n`` in place.

        Returns:
            FertiliserSchedule describing the requirement and the
            applications made
        """
        schedule = self.requirement(
            fert, soil_n, residue_min, som_n, crop_n, test_results
        )
        self.logger.debug(
            "Scheduling %s to %s: demand=%.1f mineralisation=%.1f "
            "fert_to_date=%.1f requirement=%.1f split=%.1f",
            schedule.start_date, schedule.end_date, schedule.crop_demand,
            schedule.mineralisation, schedule.fert_to_date,
            schedule.n_fert_req, schedule.n_appn
        )

        if self.config.field.splits == 0:
            return schedule

        trigger = self.config.field.trigger
        efficiency = self.config.field.efficiency
        fert_applied = 0.0
        for d in date_series(schedule.start_date, schedule.end_date):
            if soil_n[d] < trigger and fert_applied < schedule.n_fert_req:
                add_fertiliser(soil_n, schedule.n_appn * efficiency, d, self.config)
                fert[d] += schedule.n_appn
                fert_applied += schedule.n_appn
                lost_n[d] = schedule.n_appn * (1 - efficiency)
                schedule.applications[d] = schedule.n_appn
                self.logger.debug("Applied %.1f kg N/ha on %s", schedule.n_appn, d)

        if schedule.unmet_requirement > 0:
            self.logger.warning(
                "%.1f kg N/ha of the %.1f kg N/ha requirement was not scheduled: "
                "soil N stayed above the trigger of %.1f kg N/ha",
                schedule.unmet_requirement, schedule.n_fert_req, trigger
            )

        return schedule


def determine_fert_requirements(
    fert: DateSeries,
    soil_n: DateSeries,
    lost_n: DateSeries,
    residue_min: DateSeries,
    som_n: DateSeries,
    crop_n: DateSeries,
    test_results: DateSeries,
    config: NBalanceConfig,
) -> FertiliserSchedule:
    """Functional entry point for :class:`FertiliserScheduler`"""
    return FertiliserScheduler(config).schedule(
        fert, soil_n, lost_n, residue_min, som_n, crop_n, test_results
    )
