"""
Date-indexed series helpers.

Every series in the nitrogen balance is a plain ``dict`` keyed by
``datetime.date``. These helpers build fresh, caller-owned series for a date
range and convert them to and from pandas.
"""
from datetime import date
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from soiln.core.types import DateSeries


def date_series(start: date, end: date) -> List[date]:
    """Ordered daily dates from ``start`` to ``end``, both inclusive.

    Returns an empty list when ``end`` is before ``start``.
    """
    if end < start:
        return []
    return [ts.date() for ts in pd.date_range(start, end, freq="D")]


def dict_maker(dates: Sequence[date], values: Iterable[float]) -> DateSeries:
    """Pair dates with values in a new series"""
    values = np.asarray(list(values), dtype=float)
    if values.size != len(dates):
        raise ValueError(
            f"Got {values.size} values for {len(dates)} dates"
        )
    return {d: float(v) for d, v in zip(dates, values)}


def zero_series(dates: Sequence[date]) -> DateSeries:
    """New series holding 0.0 for every date"""
    return dict_maker(dates, np.zeros(len(dates)))


def last_date(series: DateSeries) -> Optional[date]:
    """Chronologically last key, or None for an empty series"""
    return max(series) if series else None


def series_from_pandas(values: pd.Series) -> DateSeries:
    """Convert a datetime- or date-indexed pandas Series"""
    index = pd.to_datetime(values.index)
    return {ts.date(): float(v) for ts, v in zip(index, values.to_numpy(dtype=float))}


def series_to_frame(dates: Optional[Sequence[date]] = None, **series: DateSeries) -> pd.DataFrame:
    """Combine named series into one DataFrame indexed by date.

    With ``dates`` given, rows follow that order and dates missing from a
    series become NaN; otherwise the union of keys is used, sorted.
    """
    if dates is None:
        keys = set()
        for s in series.values():
            keys.update(s)
        dates = sorted(keys)

    index = pd.DatetimeIndex(pd.to_datetime(list(dates)), name="date")
    data = {
        name: [s.get(d, np.nan) for d in dates]
        for name, s in series.items()
    }
    return pd.DataFrame(data, index=index)
