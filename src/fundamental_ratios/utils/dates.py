"""
dates.py – Date parsing and as-of lookup utilities.

All "most recent value on or before a date" lookups flow through this module
so the comparison semantics (inclusive on the target date) stay in one place.
"""

from __future__ import annotations

import bisect
import datetime
from typing import Mapping, Sequence, TypeVar

V = TypeVar("V")

def parse_date(value: str | datetime.date | datetime.datetime | None) -> datetime.date | None:
    """
    Parse various date representations to a ``datetime.date``.

    Handles:
    - ISO strings: '2023-12-31'
    - Compact strings: '20231231'
    - Datetime objects (extracts date part)
    - None or empty string (returns None)

    Raises
    ------
    ValueError: on an unparseable string.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        for fmt in ("%Y-%m-%d", "%Y%m%d", "%m/%d/%Y"):
            try:
                return datetime.datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Cannot parse date string: {value!r}")
    raise TypeError(f"Unsupported date type: {type(value)}")


def latest_on_or_before(
    series: Mapping[datetime.date, V],
    target: datetime.date,
) -> V | None:
    """
    Return the value whose key is the most recent date ``<= target``.

    Parameters
    ----------
    series:
        Date-keyed mapping (any order).
    target:
        Upper boundary (inclusive).
    """
    keys = sorted(series)
    idx = bisect.bisect_right(keys, target)
    if idx == 0:
        return None
    return series[keys[idx - 1]]

def index_on_or_before(dates: Sequence[datetime.date], target: datetime.date) -> int | None:
    """
    Index of the last element of ascending ``dates`` that is ``<= target``.

    Returns None when every date is after ``target``.
    """
    idx = bisect.bisect_right(dates, target)
    return idx - 1 if idx > 0 else None
