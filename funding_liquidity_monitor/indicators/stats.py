"""Pure statistics over metric series.

Every function here is total: missing data resolves to 0, None or an empty
result instead of raising, so callers (the derivation engine and the detail
view) can use them on whatever history is available.
"""

import math
from datetime import timedelta
from typing import Sequence

import numpy as np
import pandas as pd

from funding_liquidity_monitor.models.market_data import DataPoint, Series, sort_series


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for empty input."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def sample_std_dev(values: Sequence[float]) -> float:
    """Standard deviation with Bessel's correction; 0 when fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def rolling_std_dev(series: Sequence[DataPoint], window_size: int) -> Series:
    """
    Rolling population standard deviation.

    For each index i >= window_size of the date-sorted series, the std dev of
    the preceding window [i - window_size, i) is emitted dated at point i.
    Population variance (divide by window_size) is intentional: this
    characterizes a fixed window, unlike sample_std_dev.

    Returns:
        Series of len(series) - window_size points, empty if too short
    """
    if window_size <= 0 or len(series) < window_size:
        return []

    ordered = sort_series(series)
    values = pd.Series([p.value for p in ordered], dtype=float)

    # Window ending at i-1, reported at i
    vol = values.rolling(window=window_size).std(ddof=0).shift(1)

    return [
        DataPoint(date=ordered[i].date, value=float(vol.iloc[i]))
        for i in range(window_size, len(ordered))
    ]


def z_score(value: float, mean_value: float, std_dev: float) -> float:
    """Standardized distance from the mean; 0 when std_dev is 0."""
    if std_dev == 0:
        return 0.0
    return (value - mean_value) / std_dev


def percentile(values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile.

    Sorts ascending and picks index ceil(p / 100 * n) - 1; 0 for empty input.
    """
    n = len(values)
    if n == 0:
        return 0.0
    ordered = np.sort(np.asarray(values, dtype=float))
    index = math.ceil((p / 100) * n) - 1
    index = min(max(index, 0), n - 1)
    return float(ordered[index])


def lookback_value(series: Sequence[DataPoint], days_ago: int) -> float | None:
    """
    Value of the point nearest to `days_ago` calendar days before the last date.

    Scans backward from the most recent point and stops once it has passed
    the target date without improving on the closest candidate. Best effort
    for sparse series (e.g. weekly data): it is not a global nearest search.
    """
    if not series:
        return None

    ordered = sort_series(series)
    target = ordered[-1].date - timedelta(days=days_ago)

    closest: DataPoint | None = None
    min_diff: int | None = None

    for point in reversed(ordered):
        diff = abs((point.date - target).days)
        if min_diff is None or diff < min_diff:
            min_diff = diff
            closest = point
        elif point.date < target:
            break

    return closest.value if closest is not None else None


def velocity(series: Sequence[DataPoint], days: int) -> float:
    """Change over the last `days` calendar days."""
    if len(series) < 2:
        return 0.0

    ordered = sort_series(series)
    past = lookback_value(ordered, days)
    if past is None:
        return 0.0
    return ordered[-1].value - past


def acceleration(series: Sequence[DataPoint], days: int) -> float:
    """
    Change in velocity between two successive `days` horizons.

    v1 = p0 - p(days), v2 = p(days) - p(2 * days), result = v1 - v2.
    """
    if len(series) < 2:
        return 0.0

    ordered = sort_series(series)
    p1 = lookback_value(ordered, days)
    p2 = lookback_value(ordered, days * 2)
    if p1 is None or p2 is None:
        return 0.0

    p0 = ordered[-1].value
    return (p0 - p1) - (p1 - p2)
