"""
projector.py – Aligns daily closes with TTM fundamentals and derives ratios.

Prices come from the collaborator fully split-adjusted, and TTM share counts
were put on the same basis in ttm/snapshots.py. Every valuation ratio is
therefore derived from market cap against aggregate dollar figures (net income,
equity, revenue), which splits do not affect.

Ratio sanity bounds
-------------------
P/E, EV/EBITDA, P/B and P/S beyond ``ratio_max`` (default 500x) are dropped
rather than published; they come from mis-isolated quarters, stale share
counts or near-zero denominators. Net Debt/EBITDA gets a separate ceiling
(default 50x) and may be negative for net-cash companies.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from fundamental_ratios.constants import NET_DEBT_EBITDA_MAX, RATIO_MAX
from fundamental_ratios.types import DynamicRatioPoint, PricePoint, SharesSource, TTMSnapshot
from fundamental_ratios.utils.dates import index_on_or_before

logger = logging.getLogger(__name__)


def bounded(value: float | None, ceiling: float) -> float | None:
    """Return ``value`` if finite and within ±``ceiling``, else None."""
    if value is None or not math.isfinite(value) or abs(value) > ceiling:
        return None
    return value


def _ratio(numerator: float | None, denominator: float | None) -> float | None:
    """Plain division, None when either side is missing or the denominator is 0."""
    if numerator is None or not denominator:
        return None
    return numerator / denominator


def ratios_for_snapshot(
    snap: TTMSnapshot,
    price: float,
    ratio_max: float = RATIO_MAX,
    net_debt_ebitda_max: float = NET_DEBT_EBITDA_MAX,
) -> dict[str, float | None]:
    """
    Every ratio for one closing price against one TTM snapshot.

    Returns
    -------
    dict keyed by DynamicRatioPoint field name.
    """
    market_cap = price * snap.shares if snap.shares is not None and snap.shares > 0 else None
    net_income = snap.net_income_ttm
    revenue = snap.revenue_ttm
    ebitda = snap.ebitda_ttm
    equity = snap.total_equity
    net_debt = (snap.total_debt or 0.0) - (snap.cash or 0.0)

    pe = None
    if market_cap is not None and net_income is not None and net_income > 0:
        pe = bounded(market_cap / net_income, ratio_max)

    ev_ebitda = None
    if market_cap and ebitda is not None and ebitda > 0:
        ev_ebitda = bounded((market_cap + net_debt) / ebitda, ratio_max)

    pb = None
    if market_cap is not None and equity is not None and equity > 0:
        pb = bounded(market_cap / equity, ratio_max)

    ps = bounded(_ratio(market_cap, revenue), ratio_max) if market_cap else None

    net_debt_to_ebitda = None
    if ebitda is not None and ebitda > 0:
        net_debt_to_ebitda = bounded(net_debt / ebitda, net_debt_ebitda_max)

    # zero numerators publish no margin
    return {
        "market_cap": market_cap,
        "pe": pe,
        "ev_ebitda": ev_ebitda,
        "pb": pb,
        "ps": ps,
        "net_debt_to_ebitda": net_debt_to_ebitda,
        "gross_margin": _ratio(snap.gross_profit_ttm or None, revenue),
        "operating_margin": _ratio(snap.operating_income_ttm or None, revenue),
        "net_margin": _ratio(net_income or None, revenue),
        "roe": _ratio(net_income, equity),
        "debt_to_equity": _ratio(snap.total_debt, equity),
    }


def project_ratios(
    prices: Iterable[PricePoint],
    ttm_snapshots: Sequence[TTMSnapshot],
    ratio_max: float = RATIO_MAX,
    net_debt_ebitda_max: float = NET_DEBT_EBITDA_MAX,
) -> list[DynamicRatioPoint]:
    """
    Project TTM fundamentals onto a daily price series.

    Parameters
    ----------
    prices:
        Daily bars, split-adjusted. Order does not matter.
    ttm_snapshots:
        TTM snapshots in ascending date order.
    ratio_max, net_debt_ebitda_max:
        Absolute ceilings; ratios beyond them are published as None.

    Returns
    -------
    One DynamicRatioPoint per price day on or after the first TTM snapshot,
    ascending by date.
    """
    snapshot_dates = [s.date for s in ttm_snapshots]
    result: list[DynamicRatioPoint] = []
    skipped = 0

    for bar in sorted(prices, key=lambda p: p.date):
        idx = index_on_or_before(snapshot_dates, bar.date)
        if idx is None:
            skipped += 1
            continue
        snap = ttm_snapshots[idx]
        result.append(
            DynamicRatioPoint(
                date=bar.date,
                price=bar.close,
                revenue_ttm=snap.revenue_ttm,
                net_income_ttm=snap.net_income_ttm,
                ebitda_ttm=snap.ebitda_ttm,
                fcf_ttm=snap.fcf_ttm,
                shares_estimated=snap.shares_source == SharesSource.PUBLIC_FLOAT,
                **ratios_for_snapshot(snap, bar.close, ratio_max, net_debt_ebitda_max),
            )
        )

    if skipped:
        logger.debug("Skipped %d price days before the first TTM snapshot", skipped)
    return result
