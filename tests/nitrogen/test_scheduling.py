"""
Tests for fertiliser requirement and split scheduling.
"""
from datetime import date

import pytest

from soiln.nitrogen.mineral_n import initial_balance, apply_existing_fertiliser
from soiln.nitrogen.scheduling import FertiliserScheduler, determine_fert_requirements
from soiln.nitrogen.series import date_series, dict_maker, zero_series


JAN = [date(2024, 1, day) for day in range(1, 11)]


def cumulative(dates, uptake):
    """Standing crop N accumulated from daily uptake"""
    total = 0.0
    values = []
    for d in dates:
        total += uptake[d] if d != dates[0] else 0.0
        values.append(total)
    return dict_maker(dates, values)


class TestTenDayScenario:
    """Initial N 50, no fluxes, trigger 100, efficiency 0.8, two splits, demand 80"""

    @pytest.fixture
    def config(self, make_config):
        return make_config(
            following_establish=date(2024, 1, 10),
            following_harvest=date(2024, 1, 10),
            trigger=100.0, efficiency=0.8, splits=2,
        )

    @pytest.fixture
    def inputs(self, constant_series):
        zeros = constant_series(JAN, 0.0)
        soil_n = initial_balance(JAN, 50.0, zeros, zeros, zeros)
        crop_n = dict_maker(JAN, [10.0 * i for i in range(len(JAN))])
        return {
            "fert": zero_series(JAN),
            "soil_n": soil_n,
            "lost_n": zero_series(JAN),
            "residue_min": zeros,
            "som_n": zeros,
            "crop_n": crop_n,
            "test_results": {},
        }

    def test_requirement_and_split(self, config, inputs):
        schedule = FertiliserScheduler(config).requirement(
            inputs["fert"], inputs["soil_n"], inputs["residue_min"],
            inputs["som_n"], inputs["crop_n"], inputs["test_results"]
        )

        assert schedule.start_date == date(2024, 1, 2)
        assert schedule.end_date == date(2024, 1, 10)
        assert schedule.crop_demand == pytest.approx(80.0)
        assert schedule.n_fert_req == pytest.approx(162.5)
        assert schedule.n_appn == 82.0
        assert schedule.applications == {}

    def test_first_split_on_window_start(self, config, inputs):
        schedule = determine_fert_requirements(config=config, **inputs)
        soil_n = inputs["soil_n"]

        assert inputs["fert"][date(2024, 1, 2)] == 82.0
        assert soil_n[date(2024, 1, 1)] == 50.0
        assert soil_n[date(2024, 1, 2)] == pytest.approx(50.0 + 82 * 0.8)
        assert inputs["lost_n"][date(2024, 1, 2)] == pytest.approx(82 * 0.2)

        # Soil N stays above the trigger without uptake, so the second
        # split never fires
        assert schedule.application_dates == [date(2024, 1, 2)]
        assert schedule.unmet_requirement == pytest.approx(162.5 - 82.0)

    def test_unmet_requirement_is_logged(self, config, inputs, caplog):
        with caplog.at_level("WARNING", logger="soiln"):
            determine_fert_requirements(config=config, **inputs)

        assert "was not scheduled" in caplog.text


class TestSplitScheduling:

    @pytest.fixture
    def drawdown(self, constant_series):
        """Soil N drawn down 20 kg N/ha a day by crop uptake"""
        def _make(initial_n):
            zeros = constant_series(JAN, 0.0)
            uptake = constant_series(JAN, 20.0)
            return {
                "fert": zero_series(JAN),
                "soil_n": initial_balance(JAN, initial_n, uptake, zeros, zeros),
                "lost_n": zero_series(JAN),
                "residue_min": zeros,
                "som_n": zeros,
                "crop_n": cumulative(JAN, uptake),
                "test_results": {},
            }
        return _make

    @pytest.fixture
    def config(self, make_config):
        return make_config(
            following_establish=date(2024, 1, 10),
            following_harvest=date(2024, 1, 10),
            trigger=100.0, efficiency=0.8, splits=2,
        )

    def test_second_split_when_soil_n_falls_below_trigger(self, config, drawdown):
        inputs = drawdown(50.0)

        schedule = determine_fert_requirements(config=config, **inputs)

        assert schedule.crop_demand == pytest.approx(160.0)
        assert schedule.n_fert_req == pytest.approx(287.5)
        assert schedule.n_appn == 144.0
        assert schedule.applications == {date(2024, 1, 2): 144.0, date(2024, 1, 5): 144.0}
        assert schedule.unmet_requirement == 0.0

        soil_n = inputs["soil_n"]
        assert soil_n[date(2024, 1, 4)] == pytest.approx(105.2)
        assert soil_n[date(2024, 1, 5)] == pytest.approx(200.4)
        assert soil_n[date(2024, 1, 10)] == pytest.approx(100.4)

    def test_applied_n_covers_demand_and_trigger(self, config, drawdown):
        inputs = drawdown(50.0)
        soil_at_start = inputs["soil_n"][date(2024, 1, 2)]

        schedule = determine_fert_requirements(config=config, **inputs)

        supplied = schedule.total_applied * 0.8 + schedule.mineralisation + soil_at_start
        assert supplied >= schedule.crop_demand + config.field.trigger

    def test_no_replenishment_once_requirement_applied(self, make_config, drawdown):
        config = make_config(
            following_establish=date(2024, 1, 10),
            following_harvest=date(2024, 1, 10),
            trigger=100.0, efficiency=0.8, splits=1,
        )
        inputs = drawdown(50.0)
        inputs["crop_n"] = zero_series(JAN)

        schedule = determine_fert_requirements(config=config, **inputs)

        assert schedule.n_fert_req == pytest.approx(87.5)
        assert schedule.applications == {date(2024, 1, 2): 88.0}
        assert inputs["soil_n"][date(2024, 1, 3)] < 100.0

    def test_zero_splits_schedule_nothing(self, make_config, drawdown):
        config = make_config(
            following_establish=date(2024, 1, 10),
            following_harvest=date(2024, 1, 10),
            trigger=100.0, efficiency=0.8, splits=0,
        )
        inputs = drawdown(50.0)
        fert_before = dict(inputs["fert"])
        soil_before = dict(inputs["soil_n"])

        schedule = determine_fert_requirements(config=config, **inputs)

        assert schedule.n_fert_req > 0
        assert schedule.n_appn == 0.0
        assert schedule.applications == {}
        assert inputs["fert"] == fert_before
        assert inputs["soil_n"] == soil_before

    def test_no_requirement_no_application(self, config, drawdown):
        inputs = drawdown(50.0)
        # Standing crop N falls, so there is no demand left
        inputs["crop_n"] = dict_maker(JAN, [400.0 - 40.0 * i for i in range(len(JAN))])

        schedule = determine_fert_requirements(config=config, **inputs)

        assert schedule.n_fert_req == 0.0
        assert schedule.applications == {}
        assert all(v == 0.0 for v in inputs["fert"].values())


class TestSchedulingWindow:

    @pytest.fixture
    def scheduler(self, make_config):
        return FertiliserScheduler(make_config())

    def test_starts_day_after_establishment(self, scheduler):
        assert scheduler.start_date({}, {}) == date(2024, 1, 2)

    def test_starts_day_after_last_test(self, scheduler):
        tests = {date(2024, 1, 4): 30.0, date(2024, 1, 3): 40.0}
        assert scheduler.start_date({}, tests) == date(2024, 1, 5)

    def test_starts_day_after_last_positive_application(self, scheduler):
        fert = {date(2024, 1, 6): 50.0, date(2024, 1, 8): 0.0}
        tests = {date(2024, 1, 4): 30.0}
        assert scheduler.start_date(fert, tests) == date(2024, 1, 7)

    def test_missing_crop_n_raises_key_error(self, scheduler, rotation_dates, constant_series):
        zeros = constant_series(rotation_dates, 0.0)
        with pytest.raises(KeyError):
            scheduler.schedule(
                zero_series(rotation_dates), constant_series(rotation_dates, 10.0),
                zero_series(rotation_dates), zeros, zeros, {}, {}
            )


class TestExistingScheduleRoundTrip:
    """Recording a schedule as existing fertiliser reproduces its soil N"""

    @pytest.fixture
    def config(self, make_config):
        return make_config(
            following_establish=date(2024, 1, 10),
            following_harvest=date(2024, 1, 10),
            trigger=100.0, efficiency=0.8, splits=2, lost_n_as_quantity=True,
        )

    @pytest.fixture
    def flows(self, constant_series):
        zeros = constant_series(JAN, 0.0)
        uptake = constant_series(JAN, 20.0)
        return uptake, zeros, zeros

    def test_same_trajectory(self, config, flows):
        uptake, residue, som = flows

        scheduled_soil_n = initial_balance(JAN, 150.0, uptake, residue, som)
        scheduled_fert = zero_series(JAN)
        scheduled_lost = zero_series(JAN)
        schedule = determine_fert_requirements(
            scheduled_fert, scheduled_soil_n, scheduled_lost,
            residue, som, cumulative(JAN, uptake), {}, config
        )
        assert schedule.application_dates == [date(2024, 1, 4), date(2024, 1, 7)]

        replayed_soil_n = initial_balance(JAN, 150.0, uptake, residue, som)
        replayed_lost = zero_series(JAN)
        replayed_fert = apply_existing_fertiliser(
            JAN, schedule.applications, {}, replayed_soil_n, replayed_lost, config
        )

        for d in JAN:
            assert replayed_soil_n[d] == pytest.approx(scheduled_soil_n[d])
            assert replayed_fert[d] == scheduled_fert[d]
            assert replayed_lost[d] == pytest.approx(scheduled_lost[d])
