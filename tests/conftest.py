"""
Shared pytest fixtures for the funding liquidity test suite.

Provides small synthetic series builders so every test module can exercise
statistics, derivation and assembly without network access.
"""

import os
from datetime import date, timedelta

# Keep tests independent of any local .env
os.environ["FRED_API_KEY"] = ""
os.environ["FRED_MIN_DELAY"] = "0"
os.environ["FRED_MAX_DELAY"] = "0"

import pytest

from funding_liquidity_monitor.models.market_data import DataPoint


def _series(values, start=date(2024, 1, 1), step_days=1):
    """Build a daily (or every `step_days`) series from a list of values."""
    return [
        DataPoint(date=start + timedelta(days=i * step_days), value=float(v))
        for i, v in enumerate(values)
    ]


@pytest.fixture()
def make_series():
    return _series


@pytest.fixture()
def sofr_fed_csv() -> str:
    return (
        "DATE,SOFR,FEDFUNDS\n"
        "2024-01-03,5.31,5.33\n"
        "2024-01-01,5.30,5.33\n"
        "2024-01-02,5.32,5.33\n"
    )
