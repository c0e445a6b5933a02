"""FRED data fetcher for primary funding liquidity metrics."""

import io
import logging
import random
import time
from datetime import datetime
from typing import Callable

import httpx
import pandas as pd

from funding_liquidity_monitor.config import Settings
from funding_liquidity_monitor.config.catalog import METRICS, primary_metrics
from funding_liquidity_monitor.models.market_data import DataPoint, MetricDefinition, Series


logger = logging.getLogger(__name__)


ProgressCallback = Callable[[str], None]


class FredFetcher:
    """
    Fetches primary series from FRED.

    Uses the public fredgraph.csv export by default; if a FRED API key is
    configured, uses the JSON observations API instead.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.settings.request_timeout)
        return self._client

    def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FredFetcher":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _fetch_graph_csv(self, fred_id: str) -> pd.DataFrame:
        """Fetch the public CSV export (DATE,VALUE; '.' marks missing)."""
        response = self.client.get(
            self.settings.fred_graph_url,
            # Cache buster so intermediaries do not serve stale data
            params={"id": fred_id, "_t": int(datetime.now().timestamp() * 1000)},
        )
        response.raise_for_status()

        df = pd.read_csv(io.StringIO(response.text), dtype=str)
        if df.empty or len(df.columns) < 2:
            return pd.DataFrame(columns=["date", "value"])

        # Header varies between DATE/observation_date and the series id
        df = df.iloc[:, :2].copy()
        df.columns = ["date", "value"]
        return df

    def _fetch_observations(self, fred_id: str) -> pd.DataFrame:
        """Fetch observations from the FRED JSON API."""
        response = self.client.get(
            f"{self.settings.fred_api_url}/series/observations",
            params={
                "series_id": fred_id,
                "api_key": self.settings.fred_api_key,
                "file_type": "json",
            },
        )
        response.raise_for_status()
        data = response.json()

        observations = data.get("observations", [])
        if not observations:
            return pd.DataFrame(columns=["date", "value"])

        return pd.DataFrame(observations)[["date", "value"]].copy()

    def fetch_series(self, fred_id: str, scale: float | None = None) -> Series:
        """
        Fetch a single FRED series.

        Args:
            fred_id: FRED series ID
            scale: Optional multiplier, applied once here

        Returns:
            Series in provider order; empty on any fetch or parse failure
        """
        try:
            if self.settings.has_api_key():
                df = self._fetch_observations(fred_id)
            else:
                df = self._fetch_graph_csv(fred_id)
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP error fetching {fred_id}: {e.response.status_code}")
            return []
        except (httpx.HTTPError, ValueError, KeyError, pd.errors.ParserError) as e:
            logger.warning(f"Error fetching {fred_id}: {e}")
            return []

        if df.empty:
            return []

        df["date"] = pd.to_datetime(df["date"], format="mixed", errors="coerce")
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df = df.dropna(subset=["date", "value"])

        if scale:
            df["value"] = df["value"] * scale

        return [
            DataPoint(date=ts.date(), value=float(val))
            for ts, val in zip(df["date"], df["value"])
        ]

    def fetch_all(
        self,
        catalog: list[MetricDefinition] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Series]:
        """
        Fetch every primary metric that has a FRED id, one at a time.

        Scale factors are applied here, so the returned series are final.

        Returns:
            Dict mapping metric id to series (only non-empty series)
        """
        metrics = [m for m in primary_metrics(catalog if catalog is not None else METRICS) if m.fred_id]
        results: dict[str, Series] = {}
        failed: list[str] = []

        for i, metric in enumerate(metrics):
            message = f"[{i + 1}/{len(metrics)}] Fetching {metric.name}..."
            logger.info(message)
            if on_progress:
                on_progress(message)

            # Randomized pause to avoid rate limiting
            if i > 0:
                self._sleep(
                    random.uniform(
                        self.settings.min_request_delay, self.settings.max_request_delay
                    )
                )

            data = self.fetch_series(metric.fred_id, metric.transform_scale)
            if data:
                results[metric.id] = data
            else:
                failed.append(metric.id)

        if failed:
            logger.warning(f"No data for {len(failed)} series: {failed}")

        return results


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: load data and print the metric summary."""
    import argparse
    import sys

    from funding_liquidity_monitor.config.catalog import get_definition
    from funding_liquidity_monitor.data.csv_loader import CsvFormatError, load_csv_file
    from funding_liquidity_monitor.session import MonitorSession

    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Funding liquidity metrics")
    parser.add_argument(
        "--csv",
        type=str,
        help="Load a local CSV export instead of fetching from FRED",
    )
    parser.add_argument(
        "--series",
        type=str,
        help="Show momentum detail for one metric id",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show observation counts and date ranges of the loaded series",
    )
    args = parser.parse_args(argv)

    session = MonitorSession(settings=settings)

    if args.csv:
        try:
            raw = load_csv_file(args.csv)
        except OSError as e:
            print(f"Could not read {args.csv}: {e}")
            sys.exit(1)
        except CsvFormatError as e:
            print(f"CSV could not be loaded: {e}")
            sys.exit(1)
        session.load(raw)
    else:
        with FredFetcher(settings) as fetcher:
            session.load_live(fetcher, on_progress=print)

    if args.status:
        print(f"\nLoaded Series ({len(session.store)}):")
        print("-" * 72)
        for series_id, info in sorted(session.store.get_status().items()):
            last = info["last_date"] or "N/A"
            print(f"{series_id:22} | {info['observation_count']:6} obs | Last: {last:10}")
        return

    print(f"\nFunding Liquidity Monitor - {session.loaded_at:%Y-%m-%d %H:%M}")
    print("=" * 72)
    for view in session.metrics():
        if view.current_value is None:
            print(f"  {view.definition.id:22} | {'N/A':>12} |")
            continue
        change = f"{view.daily_change:+.4f}" if view.daily_change is not None else "N/A"
        print(
            f"  {view.definition.id:22} | {view.current_value:>12.4f} | {change:>10} "
            f"| {len(view.history):6} obs"
        )

    if args.series:
        try:
            get_definition(args.series, session.catalog)
        except KeyError:
            print(f"Unknown series: {args.series}")
            sys.exit(1)

        detail = session.detail(args.series)
        print("\n" + "-" * 72)
        print(f"{args.series}: mean {detail.overlay.mean:.4f}, "
              f"std {detail.overlay.std_dev:.4f}, z {detail.current_z_score:.2f}")
        for horizon, row in detail.momentum.items():
            print(f"  {horizon:3} velocity {row.velocity:+.4f} | acceleration {row.acceleration:+.4f}")


if __name__ == "__main__":
    main()
