"""
types.py – Shared domain types and dataclasses.
All data flowing through the engine uses these types. Every record is frozen:
results handed to a caller are never mutated afterwards.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


# ── Enumerations ──────────────────────────────────────────────────────────────

class SharesSource(str, Enum):
    """Where a snapshot's share count came from."""
    REPORTED = "reported"
    PUBLIC_FLOAT = "public_float"


class EbitdaPath(str, Enum):
    """Which derivation produced a TTM EBITDA figure."""
    OPERATING_INCOME = "operating_income"
    NET_INCOME = "net_income"


# ── Raw disclosure types ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class FactPoint:
    """
    One disclosed XBRL data point from the SEC companyfacts endpoint.

    Attributes
    ----------
    end:
        Period end date (or instant date for balance-sheet items).
    start:
        Period start date for duration facts; None for instants.
    filed:
        Date the filing containing this fact was filed.
    fp:
        Fiscal-period label: Q1, Q2, Q3, Q4 or FY.
    form:
        Source form type, e.g. '10-Q' or '10-K/A'.
    value:
        Numeric value as disclosed.
    tag:
        Concept name, e.g. 'Revenues'.
    unit:
        Unit string ('USD', 'shares', ...).
    """

    end: datetime.date
    start: datetime.date | None
    filed: datetime.date
    fp: str
    form: str
    value: float
    tag: str = ""
    unit: str = ""

    @property
    def span_days(self) -> int | None:
        """Length of the reporting period in days, or None for instants."""
        if self.start is None:
            return None
        return (self.end - self.start).days


# namespace → concept → unit → points, exactly as disclosed
FactDocument = Dict[str, Dict[str, Dict[str, List[FactPoint]]]]

# period end → value; at most one value per date
ConceptSeries = Dict[datetime.date, float]

# quarter end → single-quarter (non-cumulative) value
QuarterValues = Dict[datetime.date, float]


# ── Price collaborator types ──────────────────────────────────────────────────

@dataclass(frozen=True)
class SplitEvent:
    """
    A stock split.

    Attributes
    ----------
    date:
        Effective (ex-) date of the split.
    factor:
        New shares per old share (7.0 for a 7:1 split).
    """

    date: datetime.date
    factor: float


@dataclass(frozen=True)
class PricePoint:
    """One daily bar from the price-history collaborator (split-adjusted)."""

    date: datetime.date
    open: float
    high: float
    low: float
    close: float
    volume: float


# ── Derived types ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FinancialSnapshot:
    """
    One quarter's reconciled point-in-time bundle. Every field is nullable.

    Income-statement and cash-flow fields are single-quarter values. Capex is
    stored as a negative outflow. Shares and EPS are already split-adjusted.
    """

    date: datetime.date
    revenue: float | None = None
    net_income: float | None = None
    gross_profit: float | None = None
    operating_income: float | None = None
    operating_cash_flow: float | None = None
    capex: float | None = None
    depreciation: float | None = None
    eps: float | None = None
    income_tax: float | None = None
    interest_expense: float | None = None
    total_assets: float | None = None
    total_equity: float | None = None
    total_debt: float | None = None
    cash: float | None = None
    shares: float | None = None
    shares_source: SharesSource | None = None

    @property
    def is_meaningful(self) -> bool:
        """True if the snapshot carries any headline income or balance data."""
        return (
            self.revenue is not None
            or self.net_income is not None
            or self.total_assets is not None
        )


@dataclass(frozen=True)
class TTMSnapshot:
    """
    Trailing-twelve-month aggregates anchored at the latest contributing quarter.

    Summed fields are None unless all four quarters contributed. Balance-sheet
    fields come from the anchor quarter.
    """

    date: datetime.date
    revenue_ttm: float | None = None
    net_income_ttm: float | None = None
    gross_profit_ttm: float | None = None
    operating_income_ttm: float | None = None
    depreciation_ttm: float | None = None
    operating_cash_flow_ttm: float | None = None
    capex_ttm: float | None = None
    eps_ttm: float | None = None
    income_tax_ttm: float | None = None
    interest_expense_ttm: float | None = None
    ebitda_ttm: float | None = None
    ebitda_path: EbitdaPath | None = None
    fcf_ttm: float | None = None
    total_assets: float | None = None
    total_equity: float | None = None
    total_debt: float | None = None
    cash: float | None = None
    shares: float | None = None
    shares_source: SharesSource | None = None


@dataclass(frozen=True)
class DynamicRatioPoint:
    """Valuation, profitability and leverage ratios for one trading day."""

    date: datetime.date
    price: float
    market_cap: float | None = None
    pe: float | None = None
    ev_ebitda: float | None = None
    pb: float | None = None
    ps: float | None = None
    net_debt_to_ebitda: float | None = None
    revenue_ttm: float | None = None
    net_income_ttm: float | None = None
    ebitda_ttm: float | None = None
    fcf_ttm: float | None = None
    roe: float | None = None
    gross_margin: float | None = None
    operating_margin: float | None = None
    net_margin: float | None = None
    debt_to_equity: float | None = None
    shares_estimated: bool = False


@dataclass(frozen=True)
class AnnualRecord:
    """
    One fiscal year of the annual financial-statement series.

    Valuation fields (pe, ev_ebitda, pb, ps) and roic, current_ratio,
    dividend_yield are filled in by downstream valuation collaborators; the
    engine publishes them as None.
    """

    period: str
    period_date: datetime.date
    revenue: float | None = None
    net_income: float | None = None
    ebitda: float | None = None
    eps: float | None = None
    free_cash_flow: float | None = None
    operating_cash_flow: float | None = None
    capital_expenditure: float | None = None
    total_debt: float | None = None
    total_equity: float | None = None
    total_assets: float | None = None
    book_value_per_share: float | None = None
    pe: float | None = None
    ev_ebitda: float | None = None
    pb: float | None = None
    ps: float | None = None
    roe: float | None = None
    roic: float | None = None
    debt_to_equity: float | None = None
    current_ratio: float | None = None
    gross_margin: float | None = None
    operating_margin: float | None = None
    net_margin: float | None = None
    revenue_growth: float | None = None
    eps_growth: float | None = None
    dividend_yield: float | None = None


# ── Pipeline output ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TickerResult:
    """
    Everything one pipeline run produced for a ticker.

    Attributes
    ----------
    ticker:
        Uppercased ticker symbol.
    cik:
        Resolved 10-digit CIK, or None if the ticker is unknown to EDGAR.
    annual:
        Annual statement records, newest first.
    ratios:
        Daily dynamic ratio points, ascending by date.
    ttm:
        TTM snapshots the ratios were projected from, ascending by date.
    """

    ticker: str
    cik: str | None
    annual: List[AnnualRecord] = field(default_factory=list)
    ratios: List[DynamicRatioPoint] = field(default_factory=list)
    ttm: List[TTMSnapshot] = field(default_factory=list)
