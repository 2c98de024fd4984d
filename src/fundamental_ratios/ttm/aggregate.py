"""
aggregate.py – Trailing-twelve-month windows and EBITDA resolution.

A TTM field is summed only when all four quarters in the window report it.
Partial coverage is accepted in exactly one place: the income-tax and
interest add-backs of the secondary EBITDA path, which refine an estimate
rather than define it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fundamental_ratios.types import EbitdaPath, FinancialSnapshot, TTMSnapshot

logger = logging.getLogger(__name__)

TTM_QUARTERS = 4


def sum_strict(values: Sequence[float | None]) -> float | None:
    """Sum of exactly ``TTM_QUARTERS`` known values, else None."""
    known = [v for v in values if v is not None]
    if len(known) != TTM_QUARTERS:
        return None
    return sum(known)


def sum_partial(values: Iterable[float | None]) -> float | None:
    """Sum of whatever values are known; None only if none are."""
    known = [v for v in values if v is not None]
    if not known:
        return None
    return sum(known)


def resolve_ebitda(
    operating_income_ttm: float | None,
    depreciation_ttm: float | None,
    net_income_ttm: float | None = None,
    income_tax_ttm: float | None = None,
    interest_expense_ttm: float | None = None,
) -> tuple[float | None, EbitdaPath | None]:
    """
    EBITDA with a primary and a secondary derivation.

    1. operating income + D&A
    2. net income + income tax + |interest expense| + D&A, when operating
       income is unavailable. Missing tax/interest count as zero.

    Returns
    -------
    (ebitda, path) or (None, None) when neither path has its inputs.
    """
    if depreciation_ttm is None:
        return None, None
    if operating_income_ttm is not None:
        return operating_income_ttm + depreciation_ttm, EbitdaPath.OPERATING_INCOME
    if net_income_ttm is not None:
        tax = income_tax_ttm if income_tax_ttm is not None else 0.0
        # InterestIncomeExpenseNet is negative-when-expense; the add-back is the magnitude
        interest = abs(interest_expense_ttm) if interest_expense_ttm is not None else 0.0
        return net_income_ttm + tax + interest + depreciation_ttm, EbitdaPath.NET_INCOME
    return None, None


def build_ttm_snapshot(window: Sequence[FinancialSnapshot]) -> TTMSnapshot:
    """Aggregate one window of four consecutive quarterly snapshots."""
    if len(window) != TTM_QUARTERS:
        raise ValueError(f"TTM window needs {TTM_QUARTERS} snapshots, got {len(window)}")

    def strict(field: str) -> float | None:
        return sum_strict([getattr(s, field) for s in window])

    def partial(field: str) -> float | None:
        return sum_partial(getattr(s, field) for s in window)

    revenue = strict("revenue")
    net_income = strict("net_income")
    operating_income = strict("operating_income")
    depreciation = strict("depreciation")
    operating_cf = strict("operating_cash_flow")
    capex = strict("capex")
    income_tax = partial("income_tax")
    interest = partial("interest_expense")

    ebitda, path = resolve_ebitda(operating_income, depreciation, net_income, income_tax, interest)
    # capex is stored negative, so FCF is a plain sum
    fcf = operating_cf + capex if operating_cf is not None and capex is not None else None

    latest = window[-1]
    return TTMSnapshot(
        date=latest.date,
        revenue_ttm=revenue,
        net_income_ttm=net_income,
        gross_profit_ttm=strict("gross_profit"),
        operating_income_ttm=operating_income,
        depreciation_ttm=depreciation,
        operating_cash_flow_ttm=operating_cf,
        capex_ttm=capex,
        eps_ttm=strict("eps"),
        income_tax_ttm=income_tax,
        interest_expense_ttm=interest,
        ebitda_ttm=ebitda,
        ebitda_path=path,
        fcf_ttm=fcf,
        total_assets=latest.total_assets,
        total_equity=latest.total_equity,
        total_debt=latest.total_debt,
        cash=latest.cash,
        shares=latest.shares,
        shares_source=latest.shares_source,
    )


def build_ttm_snapshots(snapshots: Iterable[FinancialSnapshot]) -> list[TTMSnapshot]:
    """
    Rolling TTM snapshots over consecutive quarters, ascending by date.

    Snapshots without revenue, net income or total assets are dropped before
    windowing.
    """
    meaningful = sorted((s for s in snapshots if s.is_meaningful), key=lambda s: s.date)
    ttm = [
        build_ttm_snapshot(meaningful[i - TTM_QUARTERS + 1: i + 1])
        for i in range(TTM_QUARTERS - 1, len(meaningful))
    ]
    logger.debug("Built %d TTM snapshots from %d quarters", len(ttm), len(meaningful))
    return ttm
