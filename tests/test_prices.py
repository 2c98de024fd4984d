"""
test_prices.py – Tests for the CSV price-history source.
"""

from __future__ import annotations

import datetime
from pathlib import Path

import pytest

from fundamental_ratios.prices import CsvPriceHistory
from fundamental_ratios.types import SplitEvent

D = datetime.date


@pytest.fixture()
def prices_csv(tmp_path: Path) -> Path:
    path = tmp_path / "prices.csv"
    path.write_text(
        "Ticker,Date,Open,High,Low,Close,Volume\n"
        "AAPL,2024-01-03,10,11,9,10.5,100\n"
        "AAPL,2024-01-02,10,11,9,10,100\n"
        "MSFT,2024-01-02,300,310,290,305,50\n"
        "AAPL,2024-01-04,10,11,9,,100\n"
    )
    return path


class TestCsvPriceHistory:
    def test_filters_sorts_and_drops_missing_close(self, prices_csv: Path) -> None:
        bars = CsvPriceHistory(prices_csv).get_prices("aapl")
        assert [b.date for b in bars] == [D(2024, 1, 2), D(2024, 1, 3)]
        assert bars[1].close == 10.5

    def test_no_splits_file(self, prices_csv: Path) -> None:
        assert CsvPriceHistory(prices_csv).get_splits("AAPL") == []

    def test_splits(self, prices_csv: Path, tmp_path: Path) -> None:
        splits = tmp_path / "splits.csv"
        splits.write_text("date,factor\n2020-08-31,4\n2014-06-09,7\n")
        events = CsvPriceHistory(prices_csv, splits).get_splits("AAPL")
        assert events == [SplitEvent(D(2014, 6, 9), 7.0), SplitEvent(D(2020, 8, 31), 4.0)]

    def test_missing_columns(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_text("date,close\n2024-01-02,10\n")
        with pytest.raises(ValueError, match="missing columns"):
            CsvPriceHistory(path).get_prices("AAPL")
