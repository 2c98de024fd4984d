"""
extract.py – Pulls concept series out of a FactDocument.

Three extraction modes:

- **annual**: FY-labelled points from 10-K / 10-K/A, one value per end date
  (most recently filed wins).
- **quarterly raw**: every Q1/Q2/Q3/Q4/FY point from 10-Q and 10-K forms with
  no deduplication. Conflict resolution is deferred to the quarter isolator,
  which needs to compare candidate periods rather than just end dates.
- **instant**: balance-sheet values from any supported form, one value per
  end date (most recently filed wins), optionally keeping the filing date.

Absent namespaces, concepts or units simply produce empty results.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable, Iterable, Mapping

from fundamental_ratios.constants import (
    ACCUMULATED_DA_MAX_GAP_DAYS,
    ALL_SUPPORTED_FORMS,
    ANNUAL_FORM_TYPES,
    UNIT_PREFERENCE,
)
from fundamental_ratios.types import ConceptSeries, FactDocument, FactPoint
from fundamental_ratios.xbrl.concepts import ConceptChain
from fundamental_ratios.xbrl.dedup import best_by, latest_filed

logger = logging.getLogger(__name__)


# ── Raw access ────────────────────────────────────────────────────────────────

def select_unit(units: Mapping[str, list[FactPoint]]) -> list[FactPoint]:
    """Pick the preferred unit's points: USD, then shares, then USD/shares, then any."""
    for unit in UNIT_PREFERENCE:
        if unit in units:
            return units[unit]
    for points in units.values():
        return points
    return []


def tag_points(document: FactDocument, tag: str, namespace: str) -> list[FactPoint]:
    """All points disclosed for one tag in its preferred unit."""
    units = document.get(namespace, {}).get(tag)
    if not units:
        return []
    return select_unit(units)


def merge_by_priority(
    tags: Iterable[str],
    extractor: Callable[[str], Mapping[datetime.date, float]],
) -> ConceptSeries:
    """
    Merge per-tag series so that, for every end date, the value from the
    highest-priority tag that reports that date is kept.

    Parameters
    ----------
    tags:
        Tag names, index 0 = highest priority.
    extractor:
        Maps a tag name to its date → value series.
    """
    merged: ConceptSeries = {}
    for tag in tags:
        for end, value in extractor(tag).items():
            if end not in merged:
                merged[end] = value
    return dict(sorted(merged.items()))


# ── Annual mode ───────────────────────────────────────────────────────────────

def annual_tag_series(document: FactDocument, tag: str, namespace: str) -> ConceptSeries:
    """FY 10-K values for one tag, deduplicated by end date (latest filed)."""
    fy_points = [
        p for p in tag_points(document, tag, namespace)
        if p.fp == "FY" and p.form in ANNUAL_FORM_TYPES
    ]
    best = best_by(fy_points, lambda p: p.end, latest_filed)
    return {end: p.value for end, p in best.items()}


def annual_series(document: FactDocument, chain: ConceptChain) -> ConceptSeries:
    """Annual values for a concept, merged across its tag chain."""
    return merge_by_priority(
        chain.tags, lambda tag: annual_tag_series(document, tag, chain.namespace)
    )


# ── Quarterly raw mode ────────────────────────────────────────────────────────

def quarterly_points(document: FactDocument, chain: ConceptChain) -> list[FactPoint]:
    """
    Every quarterly/annual point for a concept, without deduplication.

    Points are concatenated highest-priority tag first; the isolator keeps the
    first candidate on a complete tie, so tag priority is the last tiebreak.
    """
    points: list[FactPoint] = []
    for tag in chain.tags:
        points.extend(
            p for p in tag_points(document, tag, chain.namespace)
            if p.form in ALL_SUPPORTED_FORMS
        )
    return points


# ── Instant (balance sheet) mode ──────────────────────────────────────────────

def instant_tag_points(document: FactDocument, tag: str, namespace: str) -> dict[datetime.date, FactPoint]:
    """Most recently filed point per end date for one tag."""
    points = [p for p in tag_points(document, tag, namespace) if p.form in ALL_SUPPORTED_FORMS]
    return best_by(points, lambda p: p.end, latest_filed)


def instant_series_with_filed(
    document: FactDocument,
    chain: ConceptChain,
) -> dict[datetime.date, FactPoint]:
    """
    Balance-sheet points per end date, keeping the filing date alongside.

    Share counts need the filing date to tell whether a later refiling has
    already restated the value for a split.
    """
    merged: dict[datetime.date, FactPoint] = {}
    for tag in chain.tags:
        for end, point in instant_tag_points(document, tag, chain.namespace).items():
            if end not in merged:
                merged[end] = point
    return dict(sorted(merged.items()))


def instant_series(document: FactDocument, chain: ConceptChain) -> ConceptSeries:
    """Balance-sheet values per end date for a concept."""
    return {end: p.value for end, p in instant_series_with_filed(document, chain).items()}


# ── Depreciation reconciliation ───────────────────────────────────────────────

def combine_depreciation(
    combined: Mapping[datetime.date, float],
    depreciation_only: Mapping[datetime.date, float],
    amortization_only: Mapping[datetime.date, float],
    fallback: Mapping[datetime.date, float] | None = None,
) -> ConceptSeries:
    """
    Reconcile D&A reported as one combined tag or as two separate lines.

    Per period, in order of precedence:
    1. the combined tag;
    2. depreciation + amortization (either alone when the other is missing);
    3. ``fallback`` (e.g. accumulated-depreciation deltas).
    """
    result: ConceptSeries = dict(fallback or {})
    for end in set(depreciation_only) | set(amortization_only):
        dep = depreciation_only.get(end)
        amort = amortization_only.get(end)
        if dep is not None and amort is not None:
            result[end] = dep + amort
        elif dep is not None:
            result[end] = dep
        elif amort is not None:
            result[end] = amort
    result.update(combined)
    return dict(sorted(result.items()))


def accumulated_depreciation_deltas(
    balances: Mapping[datetime.date, float],
    max_gap_days: int = ACCUMULATED_DA_MAX_GAP_DAYS,
) -> ConceptSeries:
    """
    Approximate period D&A from changes in accumulated depreciation.

    Only positive deltas between balances at most ``max_gap_days`` apart are
    kept: a negative delta means disposals outweighed depreciation, and a wide
    gap spans several quarters. The result is net of disposals, so it can
    understate gross D&A.
    """
    result: ConceptSeries = {}
    dates = sorted(balances)
    for prev, cur in zip(dates, dates[1:]):
        delta = balances[cur] - balances[prev]
        if delta > 0 and (cur - prev).days <= max_gap_days:
            result[cur] = delta
    return result
