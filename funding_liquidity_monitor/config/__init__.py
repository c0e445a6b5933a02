"""Settings and the static metric catalog."""

from funding_liquidity_monitor.config.settings import Settings
from funding_liquidity_monitor.config.catalog import (
    METRICS,
    get_definition,
    primary_metrics,
    secondary_metrics,
)

__all__ = ["Settings", "METRICS", "get_definition", "primary_metrics", "secondary_metrics"]
