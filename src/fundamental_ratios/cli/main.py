"""
main.py – CLI entry points for the fundamental ratio engine.

Commands:
  fr_resolve   Print the SEC CIK for each ticker.
  fr_annual    Build annual statement series.
  fr_ratios    Build daily dynamic ratio series against a price history.

Usage:
  fr_resolve AAPL MSFT --user-agent "Proj/1.0 a@b.com"
  fr_annual --ticker AAPL --out out/ --fmt csv
  fr_ratios --ticker AAPL --prices aapl_prices.csv --splits aapl_splits.csv --out out/
"""

from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import Callable

import click

from fundamental_ratios.config import EngineConfig
from fundamental_ratios.data.outputs import write_results
from fundamental_ratios.exceptions import FetchError, FilerNotFoundError
from fundamental_ratios.pipeline import FundamentalsPipeline
from fundamental_ratios.prices import CsvPriceHistory
from fundamental_ratios.types import TickerResult
from fundamental_ratios.utils.logging import configure_logging, get_logger
from fundamental_ratios.utils.retry import with_retry

logger = get_logger(__name__)


# ── Shared options ────────────────────────────────────────────────────────────

def _common_options(func: Callable) -> Callable:
    func = click.option(
        "--user-agent",
        required=True,
        envvar="SEC_USER_AGENT",
        help='SEC User-Agent header. Format: "Name/1.0 email@example.com"',
    )(func)
    func = click.option(
        "--retries",
        default=1,
        type=click.IntRange(min=1),
        show_default=True,
        help="Attempts per ticker; 429/5xx and network faults are retried.",
    )(func)
    func = click.option("--log-level", default="INFO", show_default=True)(func)
    func = click.option("--log-json", is_flag=True, help="Emit log records as JSON lines.")(func)
    return func


def _output_options(func: Callable) -> Callable:
    func = click.option(
        "--ticker",
        "ticker_args",
        multiple=True,
        help="Ticker symbol. Repeat for several.",
    )(func)
    func = click.option(
        "--tickers",
        "tickers_file",
        type=click.Path(exists=True, path_type=Path),
        help="Path to a CSV file with a 'ticker' column.",
    )(func)
    func = click.option(
        "--out",
        required=True,
        type=click.Path(path_type=Path),
        help="Output directory.",
    )(func)
    func = click.option(
        "--fmt",
        default="parquet",
        type=click.Choice(["parquet", "csv"]),
        show_default=True,
        help="Output file format.",
    )(func)
    return func


def _build_config(user_agent: str, log_level: str, out: Path | None = None) -> EngineConfig:
    try:
        if out is None:
            return EngineConfig(user_agent=user_agent, log_level=log_level)
        return EngineConfig(user_agent=user_agent, output_dir=out, log_level=log_level)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--user-agent")


def _collect_tickers(ticker_args: tuple[str, ...], tickers_file: Path | None) -> list[str]:
    tickers = [t.strip().upper() for t in ticker_args if t.strip()]
    if tickers_file is not None:
        tickers.extend(_load_tickers(tickers_file))
    # keep first occurrence order
    return list(dict.fromkeys(tickers))


def _run_all(
    pipeline: FundamentalsPipeline,
    tickers: list[str],
    out: Path,
    fmt: str,
    retries: int,
    include_ratios: bool,
) -> None:
    @with_retry(max_attempts=retries)
    def run_one(ticker: str) -> TickerResult:
        return pipeline.run(ticker, include_annual=True, include_ratios=include_ratios)

    failed: list[str] = []
    for ticker in tickers:
        try:
            result = run_one(ticker)
        except FetchError as exc:
            logger.error("Failed ticker=%s: %s", ticker, exc)
            failed.append(ticker)
            continue

        paths = write_results(result, out, fmt=fmt, validate=True)
        click.echo(f"{ticker}: {len(result.annual)} annual rows, {len(result.ratios)} ratio days")
        for table, path in paths.items():
            click.echo(f"  {table}: {path}")

    if failed:
        click.echo(f"ERROR: fetch failed for {', '.join(failed)}", err=True)
        sys.exit(1)


# ── fr_resolve ────────────────────────────────────────────────────────────────

@click.command("fr_resolve")
@click.argument("tickers", nargs=-1, required=True)
@_common_options
def fr_resolve(
    tickers: tuple[str, ...], user_agent: str, retries: int, log_level: str, log_json: bool
) -> None:
    """Print the 10-digit SEC CIK for each TICKER."""
    configure_logging(log_level, json_output=log_json)
    config = _build_config(user_agent, log_level)

    with FundamentalsPipeline.from_config(config) as pipeline:
        resolve = with_retry(max_attempts=retries)(pipeline.directory.resolve)
        missing = 0
        for ticker in tickers:
            try:
                cik = resolve(ticker)
            except FilerNotFoundError:
                click.echo(f"{ticker.upper()}\tNOT FOUND")
                missing += 1
                continue
            except FetchError as exc:
                click.echo(f"ERROR: {exc}", err=True)
                sys.exit(1)
            name = pipeline.directory.company_name(ticker) or ""
            click.echo(f"{ticker.upper()}\t{cik}\t{name}")

    if missing == len(tickers):
        sys.exit(1)


# ── fr_annual ─────────────────────────────────────────────────────────────────

@click.command("fr_annual")
@_output_options
@_common_options
def fr_annual(
    ticker_args: tuple[str, ...],
    tickers_file: Path | None,
    out: Path,
    fmt: str,
    user_agent: str,
    retries: int,
    log_level: str,
    log_json: bool,
) -> None:
    """Build annual financial-statement series from SEC EDGAR."""
    configure_logging(log_level, json_output=log_json)
    tickers = _collect_tickers(ticker_args, tickers_file)
    if not tickers:
        click.echo("ERROR: No tickers given (use --ticker or --tickers).", err=True)
        sys.exit(1)

    click.echo(f"fr_annual: {len(tickers)} tickers | fmt={fmt}")
    config = _build_config(user_agent, log_level, out)
    with FundamentalsPipeline.from_config(config) as pipeline:
        _run_all(pipeline, tickers, out, fmt, retries, include_ratios=False)


# ── fr_ratios ─────────────────────────────────────────────────────────────────

@click.command("fr_ratios")
@click.option(
    "--prices",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="CSV of split-adjusted daily bars: date,open,high,low,close,volume[,ticker].",
)
@click.option(
    "--splits",
    type=click.Path(exists=True, path_type=Path),
    help="CSV of split events: date,factor[,ticker].",
)
@_output_options
@_common_options
def fr_ratios(
    prices: Path,
    splits: Path | None,
    ticker_args: tuple[str, ...],
    tickers_file: Path | None,
    out: Path,
    fmt: str,
    user_agent: str,
    retries: int,
    log_level: str,
    log_json: bool,
) -> None:
    """Build daily dynamic valuation ratios aligned to closing prices."""
    configure_logging(log_level, json_output=log_json)
    tickers = _collect_tickers(ticker_args, tickers_file)
    if not tickers:
        click.echo("ERROR: No tickers given (use --ticker or --tickers).", err=True)
        sys.exit(1)

    click.echo(f"fr_ratios: {len(tickers)} tickers | prices={prices} | fmt={fmt}")
    config = _build_config(user_agent, log_level, out)
    source = CsvPriceHistory(prices, splits)
    with FundamentalsPipeline.from_config(config, prices=source) as pipeline:
        _run_all(pipeline, tickers, out, fmt, retries, include_ratios=True)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_tickers(csv_path: Path) -> list[str]:
    """Load ticker symbols from a CSV file with a 'ticker' column."""
    tickers: list[str] = []
    with csv_path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        if reader.fieldnames is None:
            return []
        col = next(
            (c for c in reader.fieldnames if c.lower() == "ticker"),
            reader.fieldnames[0] if reader.fieldnames else None,
        )
        if col is None:
            return []
        for row in reader:
            val = (row.get(col) or "").strip().upper()
            if val:
                tickers.append(val)
    return tickers


if __name__ == "__main__":
    # Allow running individual commands: python -m fundamental_ratios.cli.main
    fr_ratios()
