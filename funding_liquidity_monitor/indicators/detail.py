"""Detail view statistics: time-range overlays and momentum.

These are recomputed over the range selected in the detail view rather than
the full history, so z-scores are relative to what is on screen.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Sequence

from funding_liquidity_monitor.indicators import stats
from funding_liquidity_monitor.models.market_data import DataPoint, Series, sort_series


class TimeRange(Enum):
    """Chart ranges, as a count of most recent points."""
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"
    TWO_YEARS = "2Y"
    FIVE_YEARS = "5Y"
    MAX = "MAX"

    @property
    def points(self) -> int | None:
        return _RANGE_POINTS[self]


_RANGE_POINTS = {
    TimeRange.ONE_MONTH: 30,
    TimeRange.THREE_MONTHS: 90,
    TimeRange.ONE_YEAR: 365,
    TimeRange.TWO_YEARS: 730,
    TimeRange.FIVE_YEARS: 1825,
    TimeRange.MAX: None,
}

# Momentum horizons in calendar days
MOMENTUM_HORIZONS: dict[str, int] = {
    "1M": 30,
    "3M": 90,
    "1Y": 365,
    "4Y": 365 * 4,
}

VOLATILITY_WINDOW = 30


@dataclass(frozen=True)
class OverlayPoint:
    """Chart point with z-score and rolling volatility overlays."""

    date: date
    value: float
    z_score: float
    volatility: float


@dataclass(frozen=True)
class Overlay:
    mean: float
    std_dev: float
    points: tuple[OverlayPoint, ...]


@dataclass(frozen=True)
class Momentum:
    velocity: float
    acceleration: float


@dataclass(frozen=True)
class MetricDetail:
    """Everything the detail view shows for one metric."""

    metric_id: str
    time_range: TimeRange
    overlay: Overlay
    momentum: dict[str, Momentum]
    current_z_score: float


def slice_range(history: Sequence[DataPoint], time_range: TimeRange) -> Series:
    """Most recent points for the range (all points for MAX)."""
    ordered = sort_series(history)
    limit = time_range.points
    if limit is None:
        return ordered
    return ordered[max(0, len(ordered) - limit):]


def compute_overlay(history: Sequence[DataPoint], time_range: TimeRange) -> Overlay:
    """Mean, sample std dev, per-point z-score and 30-point rolling vol for the range."""
    window = slice_range(history, time_range)
    if not window:
        return Overlay(mean=0.0, std_dev=0.0, points=())

    values = [p.value for p in window]
    avg = stats.mean(values)
    std = stats.sample_std_dev(values)

    vol_by_date = {
        p.date: p.value for p in stats.rolling_std_dev(window, VOLATILITY_WINDOW)
    }

    points = tuple(
        OverlayPoint(
            date=p.date,
            value=p.value,
            z_score=stats.z_score(p.value, avg, std),
            volatility=vol_by_date.get(p.date, 0.0),
        )
        for p in window
    )
    return Overlay(mean=avg, std_dev=std, points=points)


def momentum_table(history: Sequence[DataPoint]) -> dict[str, Momentum]:
    """Velocity and acceleration per horizon, over the full history."""
    ordered = sort_series(history)
    return {
        label: Momentum(
            velocity=stats.velocity(ordered, days),
            acceleration=stats.acceleration(ordered, days),
        )
        for label, days in MOMENTUM_HORIZONS.items()
    }


def build_detail(
    metric_id: str,
    history: Sequence[DataPoint],
    time_range: TimeRange = TimeRange.ONE_YEAR,
) -> MetricDetail:
    overlay = compute_overlay(history, time_range)
    ordered = sort_series(history)
    current = ordered[-1].value if ordered else None

    return MetricDetail(
        metric_id=metric_id,
        time_range=time_range,
        overlay=overlay,
        momentum=momentum_table(ordered),
        current_z_score=(
            stats.z_score(current, overlay.mean, overlay.std_dev)
            if current is not None
            else 0.0
        ),
    )
