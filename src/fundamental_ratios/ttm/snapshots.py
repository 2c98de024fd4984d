"""
snapshots.py – Builds per-quarter FinancialSnapshots from a FactDocument.

Income-statement and cash-flow concepts go through the quarter isolator;
balance-sheet concepts are point-in-time and looked up as of each quarter end.
Share counts and EPS are put on the split-adjusted price basis here, so every
downstream ratio can be computed directly against historical closes.
"""

from __future__ import annotations

import datetime
import logging
from typing import Mapping, NamedTuple

from fundamental_ratios.constants import ANNUAL_MIN_DAYS
from fundamental_ratios.quarters.isolate import isolate_quarters
from fundamental_ratios.quarters.splits import SplitAdjuster
from fundamental_ratios.types import FactDocument, FinancialSnapshot, QuarterValues, SharesSource
from fundamental_ratios.utils.dates import latest_on_or_before
from fundamental_ratios.xbrl import concepts
from fundamental_ratios.xbrl.concepts import ConceptChain
from fundamental_ratios.xbrl.extract import (
    accumulated_depreciation_deltas,
    combine_depreciation,
    instant_series,
    instant_series_with_filed,
    quarterly_points,
)

logger = logging.getLogger(__name__)


class ShareCount(NamedTuple):
    """An as-filed share count and the date it was filed."""

    value: float
    filed: datetime.date
    source: SharesSource


def _quarters(document: FactDocument, chain: ConceptChain, annual_min_days: int) -> QuarterValues:
    return isolate_quarters(quarterly_points(document, chain), annual_min_days)


def quarterly_depreciation(document: FactDocument, annual_min_days: int = ANNUAL_MIN_DAYS) -> QuarterValues:
    """
    Single-quarter D&A, reconciling combined and split tags.

    The company's own combined D&A tag wins; otherwise depreciation plus
    amortization of intangibles; otherwise the change in accumulated
    depreciation (for filers that tag no D&A expense line at all).
    """
    combined = _quarters(document, concepts.DEPRECIATION_COMBINED, annual_min_days)
    dep_only = _quarters(document, concepts.DEPRECIATION_ONLY, annual_min_days)
    amort_only = _quarters(document, concepts.AMORTIZATION_ONLY, annual_min_days)
    deltas = accumulated_depreciation_deltas(
        instant_series(document, concepts.ACCUMULATED_DEPRECIATION)
    )
    return combine_depreciation(combined, dep_only, amort_only, fallback=deltas)


def share_counts(document: FactDocument) -> dict[datetime.date, ShareCount]:
    """
    Share counts per balance-sheet date with their filing dates.

    Falls back to ``EntityPublicFloat / SharePrice`` when no share-count tag
    exists at all. Public float excludes insider holdings, so the implied
    count understates shares outstanding; such counts are flagged as
    ``SharesSource.PUBLIC_FLOAT``.
    """
    reported = instant_series_with_filed(document, concepts.SHARES_QUARTERLY)
    if reported:
        return {
            end: ShareCount(p.value, p.filed, SharesSource.REPORTED)
            for end, p in reported.items()
        }

    public_float = instant_series(document, concepts.PUBLIC_FLOAT)
    share_price = instant_series(document, concepts.SHARE_PRICE)
    implied: dict[datetime.date, ShareCount] = {}
    for end, float_value in public_float.items():
        price = latest_on_or_before(share_price, end)
        if price is not None and price > 0:
            # filed = end: the implied count is treated as contemporaneous
            implied[end] = ShareCount(float_value / price, end, SharesSource.PUBLIC_FLOAT)
    if implied:
        logger.info("No share-count tags; using %d public-float estimates", len(implied))
    return implied


def build_quarterly_snapshots(
    document: FactDocument,
    adjuster: SplitAdjuster,
    annual_min_days: int = ANNUAL_MIN_DAYS,
) -> list[FinancialSnapshot]:
    """
    Assemble one FinancialSnapshot per quarter end, ascending by date.

    Parameters
    ----------
    document:
        Parsed companyfacts for one filer.
    adjuster:
        Split-factor lookup built from the ticker's split history.
    annual_min_days:
        Passed through to the quarter isolator.
    """
    revenue = _quarters(document, concepts.REVENUE, annual_min_days)
    net_income = _quarters(document, concepts.NET_INCOME_QUARTERLY, annual_min_days)
    gross_profit = _quarters(document, concepts.GROSS_PROFIT, annual_min_days)
    operating_income = _quarters(document, concepts.OPERATING_INCOME, annual_min_days)
    income_tax = _quarters(document, concepts.INCOME_TAX, annual_min_days)
    interest_expense = _quarters(document, concepts.INTEREST_EXPENSE, annual_min_days)
    operating_cf = _quarters(document, concepts.OPERATING_CASH_FLOW, annual_min_days)
    capex = _quarters(document, concepts.CAPEX, annual_min_days)
    eps = _quarters(document, concepts.EPS, annual_min_days)
    depreciation = quarterly_depreciation(document, annual_min_days)

    total_assets = instant_series(document, concepts.TOTAL_ASSETS)
    total_equity = instant_series(document, concepts.TOTAL_EQUITY)
    total_debt = instant_series(document, concepts.TOTAL_DEBT)
    cash = instant_series(document, concepts.CASH)
    shares = share_counts(document)

    quarter_ends: set[datetime.date] = set()
    for series in (revenue, net_income, gross_profit, operating_income, total_assets, total_equity):
        quarter_ends.update(series)

    snapshots: list[FinancialSnapshot] = []
    for end in sorted(quarter_ends):
        count = latest_on_or_before(shares, end)
        # EPS uses the share count's filing date as a proxy for its own
        factor = adjuster.factor(end, count.filed if count is not None else None)
        raw_eps = eps.get(end)
        raw_capex = capex.get(end)

        snapshots.append(
            FinancialSnapshot(
                date=end,
                revenue=revenue.get(end),
                net_income=net_income.get(end),
                gross_profit=gross_profit.get(end),
                operating_income=operating_income.get(end),
                operating_cash_flow=operating_cf.get(end),
                capex=-raw_capex if raw_capex is not None else None,
                depreciation=depreciation.get(end),
                eps=raw_eps / factor if raw_eps is not None else None,
                income_tax=income_tax.get(end),
                interest_expense=interest_expense.get(end),
                total_assets=_as_of(total_assets, end),
                total_equity=_as_of(total_equity, end),
                total_debt=_as_of(total_debt, end),
                cash=_as_of(cash, end),
                shares=count.value * factor if count is not None else None,
                shares_source=count.source if count is not None else None,
            )
        )

    logger.debug("Built %d quarterly snapshots", len(snapshots))
    return snapshots


def _as_of(series: Mapping[datetime.date, float], end: datetime.date) -> float | None:
    return latest_on_or_before(series, end)
