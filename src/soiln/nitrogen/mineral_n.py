"""
Daily soil mineral N balance.

Builds the baseline soil mineral N trajectory from crop uptake and
mineralisation, corrects it to measured soil tests, and folds fertiliser
applications into it. All functions take the trajectory by reference,
update it in place and return it.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from soiln.core.config import NBalanceConfig
from soiln.core.types import DateSeries, SimDates
from soiln.nitrogen.series import date_series, last_date, zero_series

logger = logging.getLogger(__name__)


def initial_balance(
    sim_dates: SimDates,
    initial_n: float,
    uptake: DateSeries,
    residue: DateSeries,
    som: DateSeries,
) -> DateSeries:
    """
    Soil mineral N from an initial value, crop uptake and mineralisation.

    Args:
        sim_dates: Chronological dates over the duration of the simulation
        initial_n: Assumed mineral N at the start of the rotation (kg N/ha)
        uptake: Daily crop N uptake (kg N/ha/day)
        residue: Daily N released from residue mineralisation (kg N/ha/day)
        som: Daily N released from soil organic matter (kg N/ha/day)

    Returns:
        Date indexed series of estimated soil mineral N. Values are not
        clamped, a negative balance marks a crop N deficit.
    """
    soil_n = zero_series(sim_dates)
    if not sim_dates:
        return soil_n

    soil_n[sim_dates[0]] = initial_n
    for previous, d in zip(sim_dates, sim_dates[1:]):
        soil_n[d] = soil_n[previous] + residue[d] + som[d] - uptake[d]

    logger.debug(
        "Initial balance over %d days: start=%.1f end=%.1f kg N/ha",
        len(sim_dates), soil_n[sim_dates[0]], soil_n[sim_dates[-1]]
    )
    return soil_n


def correct_to_tests(test_results: DateSeries, soil_n: DateSeries) -> DateSeries:
    """
    Shift the trajectory so that it matches soil test values on their dates.

    Tests are processed in chronological order. Each correction is measured
    against the trajectory already shifted by earlier tests and is added to
    the test date and every later date in ``soil_n``.
    """
    if not test_results:
        return soil_n

    dates = sorted(soil_n)
    for test_date in sorted(test_results):
        correction = test_results[test_date] - soil_n[test_date]
        logger.debug("Correcting soil N by %.2f from %s", correction, test_date)
        for d in dates:
            if d >= test_date:
                soil_n[d] += correction

    return soil_n


def add_fertiliser(
    soil_n: DateSeries,
    fert_n: float,
    fert_date: date,
    config: NBalanceConfig,
) -> DateSeries:
    """
    Add plant available fertiliser N to every day from ``fert_date`` through
    the harvest of the following crop.

    Args:
        soil_n: Date indexed soil mineral N, updated in place
        fert_n: Available N to add, already adjusted for efficiency
        fert_date: Date of application
        config: Supplies the following crop harvest date
    """
    for d in date_series(fert_date, config.following.harvest_date):
        soil_n[d] += fert_n
    return soil_n


def schedule_cutoff(test_results: DateSeries, config: NBalanceConfig) -> date:
    """Day after the last soil test, or after establishment if untested"""
    start: Optional[date] = last_date(test_results)
    if start is None:
        start = config.current.establish_date
    return start + timedelta(days=1)


def apply_existing_fertiliser(
    sim_dates: SimDates,
    n_applied: DateSeries,
    test_results: DateSeries,
    soil_n: DateSeries,
    lost_n: DateSeries,
    config: NBalanceConfig,
) -> DateSeries:
    """
    Fold fertiliser that has already been applied into the soil N balance.

    Applications on or before the cutoff (the day after the last test, or
    after establishment) are already reflected in the tested soil N and are
    recorded without being added again. Later ones are added at field
    efficiency.

    Returns:
        New date indexed series of fertiliser applied over ``sim_dates``.
        ``soil_n`` and ``lost_n`` are updated in place.
    """
    fert = zero_series(sim_dates)
    cutoff = schedule_cutoff(test_results, config)
    efficiency = config.field.efficiency

    for d in sorted(n_applied):
        if d > cutoff:
            add_fertiliser(soil_n, n_applied[d] * efficiency, d, config)
        fert[d] = n_applied[d]
        if config.field.lost_n_as_quantity:
            lost_n[d] = n_applied[d] * (1 - efficiency)
        else:
            lost_n[d] = 1 - efficiency

    logger.debug(
        "Recorded %d existing applications, cutoff %s", len(n_applied), cutoff
    )
    return fert
