"""
outputs.py – Assembles and writes per-ticker result tables to disk.

Tables land under ``{output_dir}/{ticker}/`` as Parquet (pyarrow) or CSV,
next to a ``run_summary.json`` describing the run.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any

import pandas as pd

from fundamental_ratios.data.schema import annual_to_dataframe, ratios_to_dataframe
from fundamental_ratios.data.validation import assert_valid_table
from fundamental_ratios.exceptions import SchemaValidationError
from fundamental_ratios.types import TickerResult

logger = logging.getLogger(__name__)

SUMMARY_FILE = "run_summary.json"


def result_tables(result: TickerResult) -> dict[str, pd.DataFrame]:
    """Convert a TickerResult into its output tables keyed by table name."""
    return {
        "annual_statements": annual_to_dataframe(result.ticker, result.annual),
        "dynamic_ratios": ratios_to_dataframe(result.ticker, result.ratios),
    }


def build_run_summary(result: TickerResult) -> dict[str, Any]:
    """Row counts, date coverage and EBITDA derivation mix for one run."""
    paths = Counter(s.ebitda_path.value if s.ebitda_path is not None else "none" for s in result.ttm)
    return {
        "ticker": result.ticker,
        "cik": result.cik,
        "annual_rows": len(result.annual),
        "ttm_snapshots": len(result.ttm),
        "ratio_rows": len(result.ratios),
        "first_date": result.ratios[0].date if result.ratios else None,
        "last_date": result.ratios[-1].date if result.ratios else None,
        "ebitda_paths": dict(paths),
        "shares_estimated": any(p.shares_estimated for p in result.ratios),
    }


def write_results(
    result: TickerResult,
    output_dir: Path,
    fmt: str = "parquet",
    validate: bool = True,
) -> dict[str, Path]:
    """
    Write the tables of a TickerResult to disk.

    Parameters
    ----------
    result:
        The pipeline output to persist.
    output_dir:
        Root output directory. Tables are written under
        ``{output_dir}/{ticker}/``.
    fmt:
        'parquet' or 'csv'.
    validate:
        If True, run schema validation before writing.

    Returns
    -------
    dict mapping table_name → written file path.
    """
    if fmt not in ("parquet", "csv"):
        raise ValueError(f"Unsupported output format: {fmt!r}")

    ticker_dir = output_dir / result.ticker
    ticker_dir.mkdir(parents=True, exist_ok=True)

    written: dict[str, Path] = {}

    for table_name, df in result_tables(result).items():
        if df.empty:
            logger.warning("Table '%s' is empty; skipping write.", table_name)
            continue

        if validate:
            try:
                assert_valid_table(df, table_name)
            except SchemaValidationError as exc:
                logger.warning("Validation warning for '%s': %s", table_name, exc)

        path = _write_table(df, ticker_dir / f"{table_name}.{fmt}")
        written[table_name] = path
        logger.info("Wrote table '%s': %d rows → %s", table_name, len(df), path)

    summary_path = ticker_dir / SUMMARY_FILE
    # dates in the summary serialize as ISO strings
    summary_path.write_text(json.dumps(build_run_summary(result), indent=2, default=str), encoding="utf-8")
    logger.info("Run summary written → %s", summary_path)

    return written


def _write_table(df: pd.DataFrame, path: Path) -> Path:
    if path.suffix == ".parquet":
        df.to_parquet(path, index=False, engine="pyarrow")
    else:
        df.to_csv(path, index=False)
    return path
