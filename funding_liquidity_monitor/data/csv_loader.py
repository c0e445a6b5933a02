"""Parse wide-format CSV exports into raw metric series."""

import io
import logging
from pathlib import Path

import pandas as pd

from funding_liquidity_monitor.models.market_data import DataPoint, Series


logger = logging.getLogger(__name__)


DATE_COLUMN = "DATE"


class CsvFormatError(ValueError):
    """CSV cannot be interpreted as DATE plus one column per metric."""


def parse_csv(text: str) -> dict[str, Series]:
    """
    Parse CSV text with a DATE column and one value column per metric id.

    Headers are trimmed and upper-cased. Rows may be in any order, and each
    date is parsed on its own so formats may differ between rows. Cells that
    are missing or non-numeric (including FRED's '.') are skipped, as are rows
    without a parseable date. A duplicate date within a column keeps the last row.

    Returns:
        Dict mapping metric id to series in file order

    Raises:
        CsvFormatError: If there is no DATE column or no data rows
    """
    if not text or not text.strip():
        raise CsvFormatError("CSV is empty")

    try:
        df = pd.read_csv(
            io.StringIO(text), dtype=str, skip_blank_lines=True, skipinitialspace=True
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CsvFormatError(f"Could not parse CSV: {e}") from e

    df.columns = [str(c).strip().upper() for c in df.columns]

    if DATE_COLUMN not in df.columns:
        raise CsvFormatError(f'CSV missing "{DATE_COLUMN}" column')
    if df.empty:
        raise CsvFormatError("CSV has no data rows")

    dates = pd.to_datetime(
        df[DATE_COLUMN].str.strip(), format="mixed", errors="coerce"
    )
    valid_rows = dates.notna()
    skipped = int((~valid_rows).sum())
    if skipped:
        logger.warning(f"Skipping {skipped} rows without a valid date")

    result: dict[str, Series] = {}
    for column in df.columns:
        if column == DATE_COLUMN:
            continue

        values = pd.to_numeric(df[column].str.strip(), errors="coerce")
        frame = pd.DataFrame({"date": dates, "value": values})[valid_rows].dropna()
        frame = frame.drop_duplicates(subset="date", keep="last")

        result[column] = [
            DataPoint(date=ts.date(), value=float(val))
            for ts, val in zip(frame["date"], frame["value"])
        ]

    logger.info(
        f"Parsed {len(result)} series from CSV ({len(df)} rows): "
        + ", ".join(f"{k}={len(v)}" for k, v in result.items())
    )
    return result


def load_csv_file(path: Path) -> dict[str, Series]:
    """Read and parse a CSV file."""
    return parse_csv(Path(path).read_text(encoding="utf-8"))
