"""Series storage and ingestion."""

from .store import SeriesStore
from .csv_loader import CsvFormatError, parse_csv
from .fred_fetcher import FredFetcher

__all__ = ["SeriesStore", "CsvFormatError", "parse_csv", "FredFetcher"]
