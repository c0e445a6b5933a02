"""Series and metric data models."""

from funding_liquidity_monitor.models.market_data import (
    DataPoint,
    Derivation,
    DerivationKind,
    FormatHint,
    LiquidityType,
    MetricCategory,
    MetricDefinition,
    MetricView,
    ResolutionStatus,
    Series,
    sort_series,
)

__all__ = [
    "DataPoint",
    "Derivation",
    "DerivationKind",
    "FormatHint",
    "LiquidityType",
    "MetricCategory",
    "MetricDefinition",
    "MetricView",
    "ResolutionStatus",
    "Series",
    "sort_series",
]
