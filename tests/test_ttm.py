"""
test_ttm.py – Tests for quarterly snapshots, TTM windows and EBITDA paths.
"""

from __future__ import annotations

import datetime

import pytest

from fundamental_ratios.edgar.facts import parse_fact_document
from fundamental_ratios.quarters.splits import SplitAdjuster
from fundamental_ratios.ttm.aggregate import (
    build_ttm_snapshot,
    build_ttm_snapshots,
    resolve_ebitda,
    sum_partial,
    sum_strict,
)
from fundamental_ratios.ttm.snapshots import build_quarterly_snapshots, share_counts
from fundamental_ratios.types import EbitdaPath, FactPoint, FinancialSnapshot, SharesSource, SplitEvent

D = datetime.date
QUARTER_ENDS = [D(2023, 3, 31), D(2023, 6, 30), D(2023, 9, 30), D(2023, 12, 31)]


def _quarters(**fields: list) -> list[FinancialSnapshot]:
    """Four snapshots with per-quarter values given as lists."""
    return [
        FinancialSnapshot(date=end, **{name: values[i] for name, values in fields.items()})
        for i, end in enumerate(QUARTER_ENDS)
    ]


class TestSums:
    def test_strict_requires_all_four(self) -> None:
        assert sum_strict([1.0, 2.0, 3.0, 4.0]) == 10.0
        assert sum_strict([1.0, None, 3.0, 4.0]) is None

    def test_partial_accepts_any(self) -> None:
        assert sum_partial([1.0, None, None, 4.0]) == 5.0
        assert sum_partial([None, None, None, None]) is None


class TestResolveEbitda:
    def test_primary_path(self) -> None:
        assert resolve_ebitda(100.0, 20.0, 50.0, 30.0, 10.0) == (120.0, EbitdaPath.OPERATING_INCOME)

    def test_secondary_path(self) -> None:
        ebitda, path = resolve_ebitda(None, 20.0, 50.0, 30.0, -10.0)
        assert ebitda == 110.0
        assert path == EbitdaPath.NET_INCOME

    def test_secondary_path_missing_addbacks_are_zero(self) -> None:
        assert resolve_ebitda(None, 20.0, 50.0, None, None) == (70.0, EbitdaPath.NET_INCOME)

    def test_no_depreciation_no_ebitda(self) -> None:
        assert resolve_ebitda(100.0, None, 50.0, 30.0, 10.0) == (None, None)

    def test_nothing_to_start_from(self) -> None:
        assert resolve_ebitda(None, 20.0, None, 30.0, 10.0) == (None, None)


class TestBuildTTMSnapshot:
    def test_fields_present_only_with_full_coverage(self) -> None:
        window = _quarters(
            revenue=[100.0, 110.0, 120.0, 130.0],
            net_income=[10.0, None, 14.0, 16.0],
        )
        snap = build_ttm_snapshot(window)
        assert snap.revenue_ttm == 460.0
        assert snap.net_income_ttm is None

    def test_balance_fields_from_latest_quarter(self) -> None:
        window = _quarters(
            revenue=[1.0] * 4,
            total_equity=[100.0, 200.0, 300.0, 400.0],
            total_debt=[1.0, 2.0, 3.0, None],
            shares=[5.0, 5.0, 5.0, 6.0],
        )
        snap = build_ttm_snapshot(window)
        assert snap.date == QUARTER_ENDS[-1]
        assert snap.total_equity == 400.0
        assert snap.total_debt is None
        assert snap.shares == 6.0

    def test_secondary_ebitda_tolerates_partial_tax_and_interest(self) -> None:
        window = _quarters(
            revenue=[1.0] * 4,
            net_income=[10.0, 10.0, 10.0, 10.0],
            depreciation=[2.0, 2.0, 2.0, 2.0],
            income_tax=[3.0, None, 3.0, None],
            interest_expense=[None, 1.0, None, None],
        )
        snap = build_ttm_snapshot(window)
        assert snap.operating_income_ttm is None
        assert snap.income_tax_ttm == 6.0
        assert snap.ebitda_ttm == 40.0 + 6.0 + 1.0 + 8.0
        assert snap.ebitda_path == EbitdaPath.NET_INCOME

    def test_fcf_is_ocf_plus_negative_capex(self) -> None:
        window = _quarters(
            revenue=[1.0] * 4,
            operating_cash_flow=[20.0] * 4,
            capex=[-4.0] * 4,
        )
        assert build_ttm_snapshot(window).fcf_ttm == 64.0

    def test_window_size_enforced(self) -> None:
        with pytest.raises(ValueError):
            build_ttm_snapshot(_quarters(revenue=[1.0] * 4)[:3])


class TestBuildTTMSnapshots:
    def test_rolling_windows(self) -> None:
        ends = [D(2022, 3, 31), D(2022, 6, 30), D(2022, 9, 30), D(2022, 12, 31), D(2023, 3, 31)]
        quarters = [FinancialSnapshot(date=d, revenue=float(i + 1)) for i, d in enumerate(ends)]
        ttm = build_ttm_snapshots(quarters)
        assert [s.date for s in ttm] == ends[3:]
        assert [s.revenue_ttm for s in ttm] == [10.0, 14.0]

    def test_meaningless_snapshots_dropped(self) -> None:
        quarters = _quarters(revenue=[1.0] * 4)
        quarters.insert(2, FinancialSnapshot(date=D(2023, 8, 15), cash=5.0))
        ttm = build_ttm_snapshots(quarters)
        assert len(ttm) == 1
        assert ttm[0].revenue_ttm == 4.0

    def test_fewer_than_four_quarters(self) -> None:
        assert build_ttm_snapshots(_quarters(revenue=[1.0] * 4)[:3]) == []


class TestQuarterlySnapshots:
    def test_from_companyfacts(self, companyfacts_payload: dict) -> None:
        document = parse_fact_document(companyfacts_payload, "0001234567")
        snapshots = build_quarterly_snapshots(document, SplitAdjuster([]))
        assert [s.date for s in snapshots] == QUARTER_ENDS
        assert [s.revenue for s in snapshots] == [100, 110, 120, 130]
        assert [s.net_income for s in snapshots] == [10, 12, 14, 16]
        assert [s.capex for s in snapshots] == [-4, -4, -4, -4]
        assert all(s.shares == 10 for s in snapshots)
        assert all(s.shares_source == SharesSource.REPORTED for s in snapshots)

        ttm = build_ttm_snapshots(snapshots)
        assert len(ttm) == 1
        assert ttm[0].ebitda_ttm == 72 + 20
        assert ttm[0].ebitda_path == EbitdaPath.OPERATING_INCOME
        assert ttm[0].fcf_ttm == 64

    def test_shares_and_eps_split_adjusted(self, companyfacts_payload: dict) -> None:
        us_gaap = companyfacts_payload["facts"]["us-gaap"]
        us_gaap["EarningsPerShareDiluted"] = {"units": {"USD/shares": [
            {"start": "2023-01-01", "end": "2023-03-31", "val": 1.0, "fp": "Q1",
             "form": "10-Q", "filed": "2023-05-01"},
            {"start": "2023-01-01", "end": "2023-12-31", "val": 5.2, "fp": "FY",
             "form": "10-K", "filed": "2024-02-01"},
        ]}}
        document = parse_fact_document(companyfacts_payload, "0001234567")
        # 5:1 after every filing in the payload
        adjuster = SplitAdjuster([SplitEvent(D(2024, 6, 1), 5.0)])
        first = build_quarterly_snapshots(document, adjuster)[0]
        assert first.shares == 50
        assert first.eps == pytest.approx(0.2)

    def test_public_float_fallback(self) -> None:
        end = D(2023, 6, 30)
        document = {
            "dei": {"EntityPublicFloat": {"USD": [
                FactPoint(end=end, start=None, filed=D(2024, 2, 1), fp="FY", form="10-K", value=1_000.0),
            ]}},
            "us-gaap": {"SharePrice": {"USD/shares": [
                FactPoint(end=D(2023, 6, 1), start=None, filed=D(2024, 2, 1), fp="FY", form="10-K", value=20.0),
            ]}},
        }
        counts = share_counts(document)
        assert counts[end].value == 50.0
        assert counts[end].filed == end
        assert counts[end].source == SharesSource.PUBLIC_FLOAT

    def test_reported_shares_suppress_fallback(self, companyfacts_payload: dict) -> None:
        document = parse_fact_document(companyfacts_payload, "0001234567")
        document["dei"] = {"EntityPublicFloat": {"USD": [
            FactPoint(end=D(2023, 6, 30), start=None, filed=D(2024, 2, 1), fp="FY", form="10-K", value=1.0),
        ]}}
        assert all(c.source == SharesSource.REPORTED for c in share_counts(document).values())
