"""
test_schema_validation.py – Tests for output schemas and table validation.
"""

from __future__ import annotations

import datetime

import pandas as pd
import pytest

from fundamental_ratios.data.schema import (
    ANNUAL_SCHEMA,
    DYNAMIC_RATIO_SCHEMA,
    annual_to_dataframe,
    ratios_to_dataframe,
)
from fundamental_ratios.data.validation import assert_valid_table, validate_table
from fundamental_ratios.exceptions import SchemaValidationError
from fundamental_ratios.types import AnnualRecord, DynamicRatioPoint

D = datetime.date


def _points(*dates: datetime.date) -> list[DynamicRatioPoint]:
    return [DynamicRatioPoint(date=d, price=50.0, market_cap=500.0, pe=9.6) for d in dates]


class TestToDataFrame:
    def test_ratio_table_layout(self) -> None:
        df = ratios_to_dataframe("aapl", _points(D(2024, 1, 2), D(2024, 1, 3)))
        assert list(df.columns) == DYNAMIC_RATIO_SCHEMA.all_column_names
        assert (df["ticker"] == "AAPL").all()
        assert df["shares_estimated"].dtype == bool
        assert df["ev_ebitda"].isna().all()

    def test_annual_table_layout(self) -> None:
        records = [AnnualRecord(period="2023-FY", period_date=D(2023, 12, 31), revenue=460.0)]
        df = annual_to_dataframe("msft", records)
        assert list(df.columns) == ANNUAL_SCHEMA.all_column_names
        assert df.loc[0, "period"] == "2023-FY"
        assert df.loc[0, "revenue"] == 460.0

    def test_no_records_gives_empty_typed_frame(self) -> None:
        df = ratios_to_dataframe("AAPL", [])
        assert df.empty
        assert list(df.columns) == DYNAMIC_RATIO_SCHEMA.all_column_names


class TestValidateTable:
    def test_valid_ratio_table_passes(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 2), D(2024, 1, 3)))
        assert validate_table(df, "dynamic_ratios") == []

    def test_missing_required_column(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 2))).drop(columns=["pe"])
        violations = validate_table(df, "dynamic_ratios")
        assert any("'pe'" in v for v in violations)

    def test_null_in_non_nullable_column(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 2)))
        df["price"] = None
        violations = validate_table(df, "dynamic_ratios")
        assert any("non-nullable" in v for v in violations)

    def test_duplicate_keys(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 2), D(2024, 1, 2)))
        violations = validate_table(df, "dynamic_ratios")
        assert any("not unique" in v for v in violations)

    def test_descending_dates_flagged(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 3), D(2024, 1, 2)))
        violations = validate_table(df, "dynamic_ratios")
        assert any("ascending" in v for v in violations)

    def test_annual_table_newest_first_is_fine(self) -> None:
        records = [
            AnnualRecord(period="2023-FY", period_date=D(2023, 12, 31)),
            AnnualRecord(period="2022-FY", period_date=D(2022, 12, 31)),
        ]
        assert validate_table(annual_to_dataframe("AAPL", records), "annual_statements") == []

    def test_unknown_table(self) -> None:
        with pytest.raises(KeyError):
            validate_table(pd.DataFrame(), "statements_income")


class TestAssertValidTable:
    def test_raises_with_violations(self) -> None:
        df = ratios_to_dataframe("AAPL", _points(D(2024, 1, 2), D(2024, 1, 2)))
        with pytest.raises(SchemaValidationError) as info:
            assert_valid_table(df, "dynamic_ratios")
        assert info.value.table_name == "dynamic_ratios"
        assert info.value.violations

    def test_valid_table_passes_silently(self) -> None:
        assert_valid_table(ratios_to_dataframe("AAPL", _points(D(2024, 1, 2))), "dynamic_ratios")
