"""Tests for CSV ingestion."""

from datetime import date

import pytest

from funding_liquidity_monitor.data.csv_loader import CsvFormatError, load_csv_file, parse_csv
from funding_liquidity_monitor.models.market_data import DataPoint


class TestParseCsv:
    def test_parses_columns_in_file_order(self, sofr_fed_csv) -> None:
        result = parse_csv(sofr_fed_csv)

        assert set(result) == {"SOFR", "FEDFUNDS"}
        assert result["SOFR"] == [
            DataPoint(date(2024, 1, 3), 5.31),
            DataPoint(date(2024, 1, 1), 5.30),
            DataPoint(date(2024, 1, 2), 5.32),
        ]

    def test_headers_are_normalized(self) -> None:
        result = parse_csv(" date , sofr \n2024-01-01,5.3\n")
        assert result["SOFR"] == [DataPoint(date(2024, 1, 1), 5.3)]

    def test_skips_missing_and_non_numeric_cells(self) -> None:
        text = (
            "DATE,SOFR,IORB\n"
            "2024-01-01,5.30,.\n"
            "2024-01-02,,5.40\n"
            "2024-01-03,n/a,5.40\n"
        )
        result = parse_csv(text)

        assert [p.date.day for p in result["SOFR"]] == [1]
        assert [p.date.day for p in result["IORB"]] == [2, 3]

    def test_skips_rows_without_date(self) -> None:
        result = parse_csv("DATE,SOFR\n2024-01-01,5.3\n,5.4\nnot-a-date,5.5\n")
        assert len(result["SOFR"]) == 1

    def test_duplicate_dates_keep_last(self) -> None:
        result = parse_csv("DATE,SOFR\n2024-01-01,5.3\n2024-01-01,5.4\n")
        assert result["SOFR"] == [DataPoint(date(2024, 1, 1), 5.4)]

    def test_windows_line_endings_and_blank_lines(self) -> None:
        result = parse_csv("DATE,SOFR\r\n2024-01-01,5.3\r\n\r\n2024-01-02,5.4\r\n")
        assert len(result["SOFR"]) == 2

    def test_missing_date_column(self) -> None:
        with pytest.raises(CsvFormatError, match="DATE"):
            parse_csv("DAY,SOFR\n2024-01-01,5.3\n")

    @pytest.mark.parametrize("text", ["", "   \n", "DATE,SOFR\n"])
    def test_no_data_rows(self, text) -> None:
        with pytest.raises(CsvFormatError):
            parse_csv(text)

    def test_format_error_is_value_error(self) -> None:
        assert issubclass(CsvFormatError, ValueError)

    def test_load_csv_file(self, tmp_path, sofr_fed_csv) -> None:
        path = tmp_path / "export.csv"
        path.write_text(sofr_fed_csv, encoding="utf-8")

        assert len(load_csv_file(path)["FEDFUNDS"]) == 3

    def test_date_formats_may_differ_between_rows(self) -> None:
        result = parse_csv("DATE,SOFR\n2024-01-01,5.3\n01/02/2024,5.4\n")

        assert result["SOFR"] == [
            DataPoint(date(2024, 1, 1), 5.3),
            DataPoint(date(2024, 1, 2), 5.4),
        ]
