"""
run_dynamic_ratios.py – Example: annual statements and daily TTM ratios for a few tickers.

Usage:
  python examples/run_dynamic_ratios.py prices.csv [splits.csv]

The prices CSV needs columns date,open,high,low,close,volume,ticker with
split-adjusted closes. The optional splits CSV needs date,factor,ticker.

Note: Requires SEC_USER_AGENT to be set in environment or .env file.
"""

from __future__ import annotations

import sys
from pathlib import Path

from fundamental_ratios.config import EngineConfig
from fundamental_ratios.data.outputs import result_tables, write_results
from fundamental_ratios.pipeline import FundamentalsPipeline
from fundamental_ratios.prices import CsvPriceHistory
from fundamental_ratios.utils.logging import configure_logging

# ── Configuration ─────────────────────────────────────────────────────────────
TICKERS = ["AAPL", "MSFT", "NVDA"]
OUTPUT_DIR = Path("out/ratios_example")
FORMAT = "parquet"  # or "csv"

configure_logging("INFO")


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    prices = CsvPriceHistory(Path(sys.argv[1]), Path(sys.argv[2]) if len(sys.argv) > 2 else None)

    # reads SEC_USER_AGENT and the ratio ceilings from .env or environment
    config = EngineConfig.from_env()

    print(f"\n📊 Building fundamentals for {TICKERS}\n")
    with FundamentalsPipeline.from_config(config, prices=prices) as pipeline:
        for ticker in TICKERS:
            result = pipeline.run(ticker)
            if result.cik is None:
                print(f"   ⚠️  {ticker}: not in the SEC ticker directory")
                continue

            ratios = result_tables(result)["dynamic_ratios"]
            if not ratios.empty:
                print(f"\n{ticker} (CIK {result.cik}) latest ratios:")
                print(ratios[["date", "price", "pe", "ev_ebitda", "pb", "ps"]].tail())

            written = write_results(result, OUTPUT_DIR, fmt=FORMAT, validate=True)
            for table, path in written.items():
                print(f"   {table}: {path}")


if __name__ == "__main__":
    main()
