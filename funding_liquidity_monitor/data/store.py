"""In-memory keyed store of raw and derived series."""

from collections.abc import Mapping
from typing import Iterable

from funding_liquidity_monitor.models.market_data import DataPoint, Series, sort_series


class SeriesStore:
    """
    Mapping from metric id to series for one loaded dataset.

    A store is owned by a session and rebuilt from scratch on each load.
    It also tracks which ids already carry their definition's scale factor
    so that scaling happens exactly once.
    """

    def __init__(
        self,
        raw: Mapping[str, Iterable[DataPoint]] | None = None,
        scaled: Iterable[str] = (),
    ) -> None:
        self._series: dict[str, Series] = {}
        self._scaled: set[str] = set()
        if raw:
            for series_id, points in raw.items():
                self.put(series_id, points)
        self._scaled.update(scaled)

    def get(self, series_id: str) -> Series:
        """Get a copy of the series in insertion order (empty if absent)."""
        return list(self._series.get(series_id, []))

    def get_sorted(self, series_id: str) -> Series:
        """Get the series ordered ascending by date."""
        return sort_series(self._series.get(series_id, []))

    def put(self, series_id: str, points: Iterable[DataPoint], scaled: bool = False) -> None:
        """Store a series, replacing any existing entry."""
        self._series[series_id] = list(points)
        if scaled:
            self._scaled.add(series_id)
        else:
            self._scaled.discard(series_id)

    def is_scaled(self, series_id: str) -> bool:
        return series_id in self._scaled

    def __contains__(self, series_id: object) -> bool:
        return series_id in self._series

    def __len__(self) -> int:
        return len(self._series)

    def get_status(self) -> dict[str, dict]:
        """Get observation count and date range for each stored series."""
        status = {}
        for series_id, points in self._series.items():
            dates = [p.date for p in points]
            status[series_id] = {
                "observation_count": len(points),
                "first_date": min(dates).isoformat() if dates else None,
                "last_date": max(dates).isoformat() if dates else None,
                "scaled": series_id in self._scaled,
            }
        return status
