"""
prices.py – Price-history collaborator interface and a CSV-backed implementation.

The engine never fetches prices itself. Any object with ``get_prices`` and
``get_splits`` can be handed to the pipeline; prices must be fully
split-adjusted to the current share basis.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import pandas as pd

from fundamental_ratios.types import PricePoint, SplitEvent

logger = logging.getLogger(__name__)

PRICE_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
SPLIT_COLUMNS = ["date", "factor"]


class PriceHistorySource(Protocol):
    """Daily split-adjusted bars and the split history for a ticker."""

    def get_prices(self, ticker: str) -> list[PricePoint]:
        ...

    def get_splits(self, ticker: str) -> list[SplitEvent]:
        ...


def _read_csv(path: Path, columns: list[str], ticker: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "ticker" in df.columns:
        df = df[df["ticker"].astype(str).str.upper() == ticker.upper()]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {missing}")
    df = df[columns].copy()
    df["date"] = pd.to_datetime(df["date"]).dt.date
    return df.sort_values("date").reset_index(drop=True)


class CsvPriceHistory:
    """
    Price and split history read from CSV files.

    Parameters
    ----------
    prices_path:
        CSV with columns ``date,open,high,low,close,volume``.
    splits_path:
        Optional CSV with columns ``date,factor``. No file means no splits.

    Either file may carry a ``ticker`` column holding several tickers; rows
    are then filtered to the requested ticker.
    """

    def __init__(self, prices_path: Path, splits_path: Path | None = None) -> None:
        self._prices_path = Path(prices_path)
        self._splits_path = Path(splits_path) if splits_path is not None else None

    def get_prices(self, ticker: str) -> list[PricePoint]:
        df = _read_csv(self._prices_path, PRICE_COLUMNS, ticker)
        # bars without a close cannot be priced
        df = df.dropna(subset=["close"])
        points = [
            PricePoint(
                date=row.date,
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for row in df.itertuples(index=False)
        ]
        logger.info("Loaded %d price bars for %s from %s", len(points), ticker, self._prices_path)
        return points

    def get_splits(self, ticker: str) -> list[SplitEvent]:
        if self._splits_path is None:
            return []
        df = _read_csv(self._splits_path, SPLIT_COLUMNS, ticker)
        return [SplitEvent(date=row.date, factor=float(row.factor)) for row in df.itertuples(index=False)]
