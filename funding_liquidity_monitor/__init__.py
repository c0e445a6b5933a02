"""Funding liquidity monitor: derived series and analytics for the dashboard."""

from funding_liquidity_monitor.session import MonitorSession

__all__ = ["MonitorSession"]
