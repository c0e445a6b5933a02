"""Data models for metric series and their definitions."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


@dataclass(frozen=True)
class DataPoint:
    """Single observation of a metric."""

    date: date
    value: float


Series = list[DataPoint]


def sort_series(series: Iterable[DataPoint]) -> Series:
    """Return a copy of the series ordered ascending by date."""
    return sorted(series, key=lambda point: point.date)


class MetricCategory(Enum):
    """Whether a metric is ingested or computed."""
    PRIMARY = "Primary Raw Data"
    SECONDARY = "Secondary Calculated Metrics"


class LiquidityType(Enum):
    CASH_FUNDING = "Cash Funding"
    COLLATERAL = "Collateral"
    MARKET = "Market"


class FormatHint(Enum):
    PERCENT = "percent"
    CURRENCY = "currency"
    NUMBER = "number"
    SPREAD = "spread"
    RATIO = "ratio"


class DerivationKind(Enum):
    """Computation strategies for secondary metrics."""
    PAIR_OP = "pair_op"  # Aligned binary operation over two series
    ROLLING_STAT = "rolling_stat"  # Rolling population std dev
    PERCENTILE_WINDOW = "percentile_window"  # Subsampled rolling percentile
    LAG_DIFF = "lag_diff"  # Point-to-point change


@dataclass(frozen=True)
class Derivation:
    """How a secondary metric is computed from its input series."""

    kind: DerivationKind
    inputs: tuple[str, ...]
    params: Mapping = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "inputs", tuple(self.inputs))


@dataclass(frozen=True)
class MetricDefinition:
    """Static catalog entry for one dashboard metric."""

    id: str
    name: str
    category: MetricCategory
    description: str
    liquidity_type: LiquidityType
    format: FormatHint
    section: str | None = None
    source_url: str | None = None
    fred_id: str | None = None  # FRED series required for primary metrics
    transform_scale: float | None = None  # e.g. 0.001 converts millions to billions
    derivation: Derivation | None = None


class ResolutionStatus(Enum):
    SUCCESS = "success"
    FAILURE = "error"


@dataclass(frozen=True)
class MetricView:
    """Snapshot of a metric for the dashboard."""

    definition: MetricDefinition
    current_value: float | None
    previous_value: float | None
    daily_change: float | None
    history: tuple[DataPoint, ...]
    status: ResolutionStatus

    @property
    def is_resolved(self) -> bool:
        return self.status is ResolutionStatus.SUCCESS
