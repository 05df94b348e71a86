"""Shared fixtures for the nitrogen balance tests."""
from datetime import date

import pytest

from soiln.core.config import CropPeriod, FieldConfig, NBalanceConfig
from soiln.nitrogen.series import date_series, dict_maker


def build_config(
    establish=date(2024, 1, 1),
    harvest=date(2024, 1, 10),
    following_establish=date(2024, 1, 11),
    following_harvest=date(2024, 1, 20),
    **field_values,
) -> NBalanceConfig:
    return NBalanceConfig(
        current=CropPeriod(establish_date=establish, harvest_date=harvest),
        following=CropPeriod(
            establish_date=following_establish, harvest_date=following_harvest
        ),
        field=FieldConfig(**field_values),
    )


@pytest.fixture
def make_config():
    """Factory for configs over the January 2024 test rotation"""
    return build_config


@pytest.fixture
def rotation_dates():
    """Both crops: 1-10 Jan current, 11-20 Jan following"""
    return date_series(date(2024, 1, 1), date(2024, 1, 20))


@pytest.fixture
def constant_series():
    """Factory for a series holding one value on every date"""
    def _make(dates, value):
        return dict_maker(dates, [value] * len(dates))
    return _make
