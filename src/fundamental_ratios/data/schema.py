"""
schema.py – Canonical DataFrame schema definitions for the output tables.

Each table is represented as a SchemaDefinition with:
- Required columns and their dtypes
- Key columns forming a unique row identifier
- Nullability per column

This is the source of truth for what a 'valid' output looks like. The
``*_to_dataframe`` helpers turn engine records into tables in this layout.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Sequence

import pandas as pd

from fundamental_ratios.constants import ANNUAL_COLS, DYNAMIC_RATIO_COLS
from fundamental_ratios.types import AnnualRecord, DynamicRatioPoint


@dataclass
class ColumnSpec:
    """
    Specification for a single DataFrame column.

    Attributes
    ----------
    name:
        Column name.
    dtype:
        Expected pandas dtype (as a string or numpy dtype).
    required:
        If True, column must be present.
    nullable:
        If True, NaN/None values are permitted.
    """

    name: str
    dtype: str
    required: bool = True
    nullable: bool = True


@dataclass
class SchemaDefinition:
    """
    Full schema for a named output table.

    Attributes
    ----------
    table_name:
        Canonical name (e.g. 'dynamic_ratios').
    key_columns:
        Columns that together form a unique row identifier.
    columns:
        All column specifications.
    """

    table_name: str
    key_columns: list[str]
    columns: list[ColumnSpec]

    @property
    def required_columns(self) -> list[str]:
        return [c.name for c in self.columns if c.required]

    @property
    def all_column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def empty_dataframe(self) -> pd.DataFrame:
        """Return an empty DataFrame with the correct column types."""
        dtype_map: dict[str, Any] = {c.name: _pandas_dtype(c.dtype) for c in self.columns}
        return pd.DataFrame(columns=list(dtype_map.keys())).astype(dtype_map)


def _pandas_dtype(dtype_str: str) -> Any:
    """Map a string dtype spec to a pandas-compatible dtype."""
    mapping: dict[str, Any] = {
        "str": "object",
        "string": "object",
        "float": "float64",
        "int": "Int64",   # nullable integer
        "date": "object",
        "bool": "bool",
    }
    return mapping.get(dtype_str, dtype_str)


def _float_columns(names: Sequence[str], skip: set[str]) -> list[ColumnSpec]:
    return [ColumnSpec(name, "float", nullable=True) for name in names if name not in skip]


# ── Schema Instances ──────────────────────────────────────────────────────────

ANNUAL_SCHEMA = SchemaDefinition(
    table_name="annual_statements",
    key_columns=["ticker", "period"],
    columns=[
        ColumnSpec("ticker", "str", nullable=False),
        ColumnSpec("period", "str", nullable=False),
        ColumnSpec("period_date", "date", nullable=False),
        *_float_columns(ANNUAL_COLS, skip={"ticker", "period", "period_date"}),
    ],
)

DYNAMIC_RATIO_SCHEMA = SchemaDefinition(
    table_name="dynamic_ratios",
    key_columns=["ticker", "date"],
    columns=[
        ColumnSpec("ticker", "str", nullable=False),
        ColumnSpec("date", "date", nullable=False),
        ColumnSpec("price", "float", nullable=False),
        *_float_columns(DYNAMIC_RATIO_COLS, skip={"ticker", "date", "price", "shares_estimated"}),
        ColumnSpec("shares_estimated", "bool", nullable=False),
    ],
)

ALL_SCHEMAS: dict[str, SchemaDefinition] = {
    "annual_statements": ANNUAL_SCHEMA,
    "dynamic_ratios": DYNAMIC_RATIO_SCHEMA,
}


# ── Record → DataFrame ────────────────────────────────────────────────────────

def _records_to_dataframe(
    ticker: str,
    records: Sequence[Any],
    schema: SchemaDefinition,
) -> pd.DataFrame:
    if not records:
        return schema.empty_dataframe()
    rows = [{"ticker": ticker.upper(), **dataclasses.asdict(r)} for r in records]
    df = pd.DataFrame(rows)
    return df[schema.all_column_names]


def annual_to_dataframe(ticker: str, records: Sequence[AnnualRecord]) -> pd.DataFrame:
    """Annual records as a table in ANNUAL_SCHEMA column order (newest first)."""
    return _records_to_dataframe(ticker, records, ANNUAL_SCHEMA)


def ratios_to_dataframe(ticker: str, points: Sequence[DynamicRatioPoint]) -> pd.DataFrame:
    """Dynamic ratio points as a table in DYNAMIC_RATIO_SCHEMA column order."""
    df = _records_to_dataframe(ticker, points, DYNAMIC_RATIO_SCHEMA)
    return df.astype({"shares_estimated": "bool"})
