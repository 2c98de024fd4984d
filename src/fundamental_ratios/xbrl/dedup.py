"""
dedup.py – One reducer for choosing the best of several duplicate facts.

Every extraction path has to collapse duplicates (restatements, amended
filings, comparative columns re-published in later reports), but each path
breaks ties differently. ``pick_best`` performs the reduction; the tiebreak
keys below describe the rules. Keys are compared in order; the candidate with
the highest key tuple wins, and on a full tie the earliest candidate is kept.
"""

from __future__ import annotations

import datetime
from typing import Callable, Hashable, Iterable, TypeVar

from fundamental_ratios.constants import QUARTERLY_FORM_TYPES
from fundamental_ratios.types import FactPoint

K = TypeVar("K", bound=Hashable)

Tiebreak = Callable[[FactPoint], object]


def latest_filed(p: FactPoint) -> datetime.date:
    """More recently filed wins (restatements supersede originals)."""
    return p.filed


def earliest_start(p: FactPoint) -> int:
    """
    Earlier period start wins: a longer span is the cumulative YTD figure,
    not a standalone-quarter value tagged with the same label.
    Points without a start date rank as the earliest start.
    """
    if p.start is None:
        return 1
    return -p.start.toordinal()


def latest_end(p: FactPoint) -> datetime.date:
    """Later period end wins (a real Q3 ends after a Q2 value mislabelled Q3)."""
    return p.end


def prefer_quarterly_form(p: FactPoint) -> bool:
    """10-Q values beat 10-K comparatives, which are sometimes mislabelled."""
    return p.form in QUARTERLY_FORM_TYPES


def pick_best(candidates: Iterable[FactPoint], *tiebreaks: Tiebreak) -> FactPoint | None:
    """
    Return the best candidate under ``tiebreaks``, or None if empty.
    """
    best: FactPoint | None = None
    best_key: tuple[object, ...] | None = None
    for p in candidates:
        key = tuple(tb(p) for tb in tiebreaks)
        if best_key is None or key > best_key:  # type: ignore[operator]
            best, best_key = p, key
    return best


def best_by(
    points: Iterable[FactPoint],
    key: Callable[[FactPoint], K],
    *tiebreaks: Tiebreak,
) -> dict[K, FactPoint]:
    """
    Group ``points`` by ``key`` and keep the best of each group.

    Insertion order of the result follows first appearance of each key.
    """
    groups: dict[K, list[FactPoint]] = {}
    for p in points:
        groups.setdefault(key(p), []).append(p)
    result: dict[K, FactPoint] = {}
    for k, group in groups.items():
        chosen = pick_best(group, *tiebreaks)
        if chosen is not None:
            result[k] = chosen
    return result
