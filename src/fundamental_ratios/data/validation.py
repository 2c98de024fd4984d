"""
validation.py – Runtime schema validation for output tables.

Validates DataFrames against their SchemaDefinition: required columns,
nullability, key uniqueness and, for the daily ratio table, date ordering.
"""

from __future__ import annotations

import logging

import pandas as pd

from fundamental_ratios.data.schema import ALL_SCHEMAS, SchemaDefinition
from fundamental_ratios.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)

# Tables whose rows must be in ascending date order per ticker
_ORDERED_TABLES: dict[str, str] = {"dynamic_ratios": "date"}


def validate_table(df: pd.DataFrame, table_name: str) -> list[str]:
    """
    Validate a DataFrame against its registered schema.

    Parameters
    ----------
    df:
        DataFrame to validate.
    table_name:
        Name of the table (must exist in ALL_SCHEMAS).

    Returns
    -------
    List of violation strings. Empty list means valid.

    Raises
    ------
    KeyError: if ``table_name`` is not in ALL_SCHEMAS.
    """
    schema: SchemaDefinition = ALL_SCHEMAS[table_name]
    violations: list[str] = []

    for col in schema.required_columns:
        if col not in df.columns:
            violations.append(f"Missing required column: '{col}'")

    for spec in schema.columns:
        if spec.name in df.columns and not spec.nullable:
            null_count = df[spec.name].isna().sum()
            if null_count > 0:
                violations.append(
                    f"Column '{spec.name}' is non-nullable but has {null_count} null values"
                )

    key_cols = [c for c in schema.key_columns if c in df.columns]
    if key_cols and df.duplicated(subset=key_cols).any():
        dup_count = df.duplicated(subset=key_cols).sum()
        violations.append(
            f"Key columns {key_cols} are not unique: {dup_count} duplicate rows"
        )

    order_col = _ORDERED_TABLES.get(table_name)
    if order_col in df.columns and "ticker" in df.columns:
        for ticker, group in df.groupby("ticker", sort=False):
            if not group[order_col].is_monotonic_increasing:
                violations.append(f"Rows for '{ticker}' are not in ascending '{order_col}' order")

    return violations


def assert_valid_table(df: pd.DataFrame, table_name: str) -> None:
    """
    Validate a table and raise SchemaValidationError if there are violations.

    Raises
    ------
    SchemaValidationError: on any validation failure.
    """
    violations = validate_table(df, table_name)
    if violations:
        raise SchemaValidationError(table_name, violations)
    logger.debug("Table '%s' passed schema validation (%d rows)", table_name, len(df))
