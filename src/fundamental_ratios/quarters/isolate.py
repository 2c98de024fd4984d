"""
isolate.py – Converts cumulative year-to-date XBRL figures into single quarters.

10-Q income-statement and cash-flow values are YTD cumulative:

    Q1 = Q1_YTD
    Q2 = Q2_YTD - Q1_YTD
    Q3 = Q3_YTD - Q2_YTD
    Q4 = Annual - Q3_YTD        (from the 10-K)

Key design decisions
--------------------
- Quarters are grouped by fiscal-year window ``(previous annual end, annual
  end]``, never by calendar year. Fiscal years that straddle a calendar
  boundary would otherwise be split and the subtraction chain broken.

- An annual anchor must come from a 10-K, carry fp=FY (or fp=Q4, used by some
  filers for the annual total), and span at least ``annual_min_days`` when a
  start date is present. 10-Ks often re-publish comparative quarters with
  fp=FY; their ~90-day span gives them away.

- Q4 is emitted only when Q3_YTD is known. Publishing the full annual total as
  a single quarter would triple that quarter and corrupt every TTM window
  containing it.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable

from fundamental_ratios.constants import ANNUAL_FORM_TYPES, ANNUAL_LABELS, ANNUAL_MIN_DAYS, INTERIM_LABELS
from fundamental_ratios.types import FactPoint, QuarterValues
from fundamental_ratios.xbrl.dedup import (
    best_by,
    earliest_start,
    latest_end,
    latest_filed,
    prefer_quarterly_form,
)

logger = logging.getLogger(__name__)


def is_annual_anchor(point: FactPoint, annual_min_days: int = ANNUAL_MIN_DAYS) -> bool:
    """True if ``point`` is a genuine full-year total from an annual report."""
    if point.form not in ANNUAL_FORM_TYPES:
        return False
    if point.fp not in ANNUAL_LABELS:
        return False
    span = point.span_days
    if span is not None and span < annual_min_days:
        return False
    return True


def annual_anchors(
    points: Iterable[FactPoint],
    annual_min_days: int = ANNUAL_MIN_DAYS,
) -> dict[datetime.date, FactPoint]:
    """Genuine annual totals keyed by fiscal-year end, latest filing per end."""
    candidates = [p for p in points if is_annual_anchor(p, annual_min_days)]
    anchors = best_by(candidates, lambda p: p.end, latest_filed)
    return dict(sorted(anchors.items()))


def resolve_end_label_duplicates(points: Iterable[FactPoint]) -> dict[tuple[datetime.date, str], FactPoint]:
    """
    Collapse points sharing an (end date, fiscal label) pair.

    Preference: 10-Q over 10-K; then the earlier start (YTD cumulative over a
    standalone quarter tagged with the same label); then latest filed.
    """
    return best_by(
        points,
        lambda p: (p.end, p.fp),
        prefer_quarterly_form,
        earliest_start,
        latest_filed,
    )


def _chain(q1: FactPoint | None, q2: FactPoint | None, q3: FactPoint | None) -> QuarterValues:
    """Apply the Q1/Q2/Q3 YTD subtraction chain."""
    out: QuarterValues = {}
    if q1 is not None:
        out[q1.end] = q1.value
    if q2 is not None:
        out[q2.end] = q2.value - q1.value if q1 is not None else q2.value
    if q3 is not None:
        out[q3.end] = q3.value - q2.value if q2 is not None else q3.value
    return out


def isolate_quarters(
    points: Iterable[FactPoint],
    annual_min_days: int = ANNUAL_MIN_DAYS,
) -> QuarterValues:
    """
    Derive single-quarter values from raw, undeduplicated quarterly/annual points.

    Parameters
    ----------
    points:
        Every Q1/Q2/Q3/Q4/FY point for one concept, from 10-Q and 10-K forms.
    annual_min_days:
        Minimum span for an FY-labelled point to count as an annual total.

    Returns
    -------
    dict mapping quarter end date → single-quarter value, ascending.
    """
    points = list(points)
    anchors = annual_anchors(points, annual_min_days)
    clean = resolve_end_label_duplicates(points)
    interim = [p for (_, fp), p in clean.items() if fp in INTERIM_LABELS]

    result: QuarterValues = {}
    prev_end: datetime.date | None = None

    for fy_end, anchor in anchors.items():
        window = [
            p for p in interim
            if (prev_end is None or p.end > prev_end) and p.end <= fy_end
        ]
        by_label = best_by(window, lambda p: p.fp, latest_end, latest_filed)
        q1, q2, q3 = (by_label.get(label) for label in INTERIM_LABELS)

        result.update(_chain(q1, q2, q3))
        if q3 is not None:
            result[fy_end] = anchor.value - q3.value
        else:
            logger.debug("No Q3 for fiscal year ending %s; Q4 not isolated", fy_end)
        prev_end = fy_end

    # Open fiscal year: quarters reported after the last annual anchor.
    if prev_end is not None:
        trailing = [p for p in interim if p.end > prev_end]
        by_label = best_by(trailing, lambda p: p.fp, latest_end, latest_filed)
        result.update(_chain(*(by_label.get(label) for label in INTERIM_LABELS)))

    return dict(sorted(result.items()))
