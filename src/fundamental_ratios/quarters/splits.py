"""
splits.py – Puts as-disclosed share counts on the split-adjusted price basis.

Historical prices from the price collaborator are retroactively adjusted: each
price is divided by the product of all later split factors. EDGAR share counts
need the matching multiplication, but with one trap: filers sometimes restate
older periods in later filings after a split (a 2020 share count re-reported in
a 2023 10-K already reflects a 2022 20:1 split). Re-applying that split would
double-count it.

So for a value with period end D filed on F:

- F unknown or F <= D: apply every split dated after D.
- F > D: apply only splits dated on or after F; anything between D and F is
  already baked into the filed value.
"""

from __future__ import annotations

import bisect
import datetime
import logging
from typing import Sequence

from fundamental_ratios.types import SplitEvent

logger = logging.getLogger(__name__)


class SplitAdjuster:
    """
    Cumulative split-factor lookup over an ascending list of split events.

    Parameters
    ----------
    splits:
        Split events. Sorted by date on construction; events with a
        non-positive factor are ignored.
    """

    def __init__(self, splits: Sequence[SplitEvent]) -> None:
        valid = sorted((s for s in splits if s.factor > 0), key=lambda s: s.date)
        dropped = len(splits) - len(valid)
        if dropped:
            logger.warning("Ignoring %d split events with non-positive factor", dropped)
        self._dates: list[datetime.date] = [s.date for s in valid]
        # suffix[i] = product of factors of splits[i:]
        suffix = [1.0] * (len(valid) + 1)
        for i in range(len(valid) - 1, -1, -1):
            suffix[i] = valid[i].factor * suffix[i + 1]
        self._suffix = suffix

    def factor(self, period_end: datetime.date, filing_date: datetime.date | None = None) -> float:
        """
        Multiplicative factor converting an as-filed share count to the
        current split-adjusted basis.
        """
        if filing_date is None or filing_date <= period_end:
            return self._suffix[bisect.bisect_right(self._dates, period_end)]
        return self._suffix[bisect.bisect_left(self._dates, filing_date)]

    def adjust_shares(
        self,
        shares: float | None,
        period_end: datetime.date,
        filing_date: datetime.date | None = None,
    ) -> float | None:
        """Multiply a share count by the split factor."""
        if shares is None:
            return None
        return shares * self.factor(period_end, filing_date)

    def adjust_per_share(
        self,
        value: float | None,
        period_end: datetime.date,
        filing_date: datetime.date | None = None,
    ) -> float | None:
        """Divide a per-share value (EPS) by the split factor."""
        if value is None:
            return None
        return value / self.factor(period_end, filing_date)

    def __len__(self) -> int:
        return len(self._dates)
