"""Dashboard session: owns the series store for one user session."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from funding_liquidity_monitor.config import METRICS, Settings
from funding_liquidity_monitor.config.catalog import get_definition
from funding_liquidity_monitor.data.csv_loader import CsvFormatError, parse_csv
from funding_liquidity_monitor.data.fred_fetcher import FredFetcher, ProgressCallback
from funding_liquidity_monitor.data.store import SeriesStore
from funding_liquidity_monitor.indicators.assembler import assemble
from funding_liquidity_monitor.indicators.derivation import DerivationEngine
from funding_liquidity_monitor.indicators.detail import MetricDetail, TimeRange, build_detail
from funding_liquidity_monitor.models.market_data import (
    DataPoint,
    MetricCategory,
    MetricDefinition,
    MetricView,
    Series,
)


logger = logging.getLogger(__name__)


class MonitorSession:
    """
    Load → derive → assemble for one dashboard session.

    Each load builds a new store and swaps it in only once derivation has
    finished, so a failed load leaves the previous data untouched.
    """

    def __init__(
        self,
        catalog: list[MetricDefinition] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.catalog = list(catalog if catalog is not None else METRICS)
        self.engine = DerivationEngine(self.catalog)
        self.store = SeriesStore()
        self.loaded_at: datetime | None = None

    def _apply_scale(self, store: SeriesStore) -> None:
        """Scale raw primary series that were not scaled upstream."""
        for definition in self.catalog:
            if definition.category is not MetricCategory.PRIMARY:
                continue
            if not definition.transform_scale or definition.id not in store:
                continue
            if store.is_scaled(definition.id):
                continue
            scale = definition.transform_scale
            store.put(
                definition.id,
                [DataPoint(date=p.date, value=p.value * scale) for p in store.get(definition.id)],
                scaled=True,
            )

    def load(
        self,
        raw: Mapping[str, Iterable[DataPoint]],
        prescaled: Iterable[str] = (),
    ) -> None:
        """
        Replace the store with a new raw dataset and derive secondary series.

        Args:
            raw: Metric id to series, in any order
            prescaled: Ids whose values already carry their scale factor
        """
        store = SeriesStore(raw, scaled=prescaled)
        self._apply_scale(store)
        result = self.engine.run(store)

        self.store = store
        self.loaded_at = datetime.now()
        logger.info(
            f"Loaded {len(raw)} raw series, derived {len(result.computed)} secondary series"
        )

    def load_csv(self, text: str) -> bool:
        """
        Load a CSV export (DATE plus one column per metric id).

        Returns:
            True if loaded; False if the CSV was rejected (store unchanged)
        """
        try:
            raw = parse_csv(text)
        except CsvFormatError as e:
            logger.error(f"Error parsing CSV: {e}")
            return False

        self.load(raw)
        return True

    def load_live(
        self, fetcher: FredFetcher, on_progress: ProgressCallback | None = None
    ) -> None:
        """Fetch every primary metric from FRED, then load the result."""
        raw = fetcher.fetch_all(self.catalog, on_progress=on_progress)
        if on_progress:
            on_progress("Calibrating secondary liquidity metrics...")
        # Fetcher applies scale factors
        self.load(raw, prescaled=raw.keys())

    def metrics(self) -> list[MetricView]:
        """View models for the whole catalog."""
        return assemble(self.catalog, self.store)

    def series(self, metric_id: str) -> Series:
        """Date-sorted series for charting (empty if absent)."""
        return self.store.get_sorted(metric_id)

    def detail(self, metric_id: str, time_range: TimeRange = TimeRange.ONE_YEAR) -> MetricDetail:
        """Detail statistics for one metric."""
        get_definition(metric_id, self.catalog)
        return build_detail(metric_id, self.series(metric_id), time_range)
