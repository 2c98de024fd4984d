"""
annual.py – Annual financial-statement series from 10-K facts.

One AnnualRecord per fiscal year, newest first. Values are as disclosed in the
most recent 10-K covering each fiscal-year end; no split adjustment is applied
to annual share counts or EPS.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging

from fundamental_ratios.types import AnnualRecord, ConceptSeries, FactDocument
from fundamental_ratios.xbrl import concepts
from fundamental_ratios.xbrl.extract import annual_series, combine_depreciation

logger = logging.getLogger(__name__)


def annual_depreciation(document: FactDocument) -> ConceptSeries:
    """Annual D&A from the combined tags, else depreciation + amortization."""
    return combine_depreciation(
        annual_series(document, concepts.DEPRECIATION_COMBINED),
        annual_series(document, concepts.DEPRECIATION_ONLY),
        annual_series(document, concepts.AMORTIZATION_ONLY),
    )


def growth_rate(current: float | None, previous: float | None) -> float | None:
    """Change relative to ``|previous|``; None if either is missing or previous is 0."""
    if current is None or previous is None or previous == 0:
        return None
    return (current - previous) / abs(previous)


def _build_record(end: datetime.date, series: dict[str, ConceptSeries]) -> AnnualRecord | None:
    values = {name: s.get(end) for name, s in series.items()}
    revenue = values["revenue"]
    net_income = values["net_income"]
    gross_profit = values["gross_profit"]
    operating_income = values["operating_income"]
    depreciation = values["depreciation"]
    operating_cf = values["operating_cash_flow"]
    equity = values["total_equity"]
    debt = values["total_debt"]
    shares = values["shares"]
    capex = -values["capex"] if values["capex"] is not None else None

    if revenue is None and net_income is None and values["total_assets"] is None and operating_cf is None:
        return None

    return AnnualRecord(
        period=f"{end.year}-FY",
        period_date=end,
        revenue=revenue,
        net_income=net_income,
        ebitda=operating_income + depreciation
        if operating_income is not None and depreciation is not None else None,
        eps=values["eps"],
        free_cash_flow=operating_cf + capex if operating_cf is not None and capex is not None else None,
        operating_cash_flow=operating_cf,
        capital_expenditure=capex,
        total_debt=debt,
        total_equity=equity,
        total_assets=values["total_assets"],
        book_value_per_share=equity / shares if equity is not None and shares and shares > 0 else None,
        roe=net_income / equity if equity and net_income is not None else None,
        debt_to_equity=debt / equity if equity and debt is not None else None,
        gross_margin=gross_profit / revenue if revenue and gross_profit is not None else None,
        operating_margin=operating_income / revenue if revenue and operating_income is not None else None,
        net_margin=net_income / revenue if revenue and net_income is not None else None,
    )


def build_annual_statements(document: FactDocument) -> list[AnnualRecord]:
    """
    Build the annual statement series for one filer.

    Fiscal-year ends are the union of every annual concept's end dates. Years
    without revenue, net income, total assets or operating cash flow are
    skipped. When two ends share a calendar year (a fiscal-year-end change),
    the later end keeps the ``YYYY-FY`` label.

    Returns
    -------
    list of AnnualRecord, newest first, with revenue and EPS growth filled in
    against the next-older record.
    """
    series: dict[str, ConceptSeries] = {
        "revenue": annual_series(document, concepts.REVENUE),
        "net_income": annual_series(document, concepts.NET_INCOME_ANNUAL),
        "eps": annual_series(document, concepts.EPS),
        "gross_profit": annual_series(document, concepts.GROSS_PROFIT),
        "operating_income": annual_series(document, concepts.OPERATING_INCOME),
        "total_assets": annual_series(document, concepts.TOTAL_ASSETS),
        "total_equity": annual_series(document, concepts.TOTAL_EQUITY),
        "total_debt": annual_series(document, concepts.TOTAL_DEBT),
        "shares": annual_series(document, concepts.SHARES_ANNUAL),
        "operating_cash_flow": annual_series(document, concepts.OPERATING_CASH_FLOW),
        "capex": annual_series(document, concepts.CAPEX),
        "depreciation": annual_depreciation(document),
    }

    ends: set[datetime.date] = set()
    for s in series.values():
        ends.update(s)

    by_period: dict[str, AnnualRecord] = {}
    for end in sorted(ends):
        record = _build_record(end, series)
        if record is None:
            continue
        # ascending iteration: a later end in the same calendar year replaces
        by_period[record.period] = record

    records = sorted(by_period.values(), key=lambda r: r.period_date, reverse=True)
    with_growth = [
        dataclasses.replace(
            current,
            revenue_growth=growth_rate(current.revenue, previous.revenue),
            eps_growth=growth_rate(current.eps, previous.eps),
        )
        for current, previous in zip(records, records[1:])
    ]
    if records:
        with_growth.append(records[-1])

    logger.debug("Built %d annual records", len(with_growth))
    return with_growth
