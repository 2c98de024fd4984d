"""
directory.py – Ticker → CIK resolution using the SEC's company_tickers.json endpoint.

The bulk directory document is held in a ``TTLCache`` and refreshed once its
24h freshness window lapses. CIKs are zero-padded to 10 digits as required by
SEC API endpoints.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fundamental_ratios.constants import DAY_SECONDS, EDGAR_TICKER_CIK_URL
from fundamental_ratios.edgar.client import EdgarClient
from fundamental_ratios.exceptions import FilerNotFoundError
from fundamental_ratios.utils.cache import TTLCache

logger = logging.getLogger(__name__)

_CACHE_KEY = "edgar:company_tickers"


@dataclass(frozen=True)
class DirectoryIndex:
    """Parsed directory: uppercased ticker → CIK and ticker → company name."""

    ciks: dict[str, str]
    names: dict[str, str]


def parse_directory(raw: Any) -> DirectoryIndex:
    """
    Index the raw company_tickers.json payload.

    The JSON is a dict of integer index → {cik_str, ticker, title}. Entries
    missing a ticker or CIK are skipped.
    """
    ciks: dict[str, str] = {}
    names: dict[str, str] = {}
    if not isinstance(raw, dict):
        logger.warning("Unexpected directory payload type: %s", type(raw).__name__)
        return DirectoryIndex(ciks=ciks, names=names)

    for entry in raw.values():
        if not isinstance(entry, dict):
            continue
        ticker = str(entry.get("ticker") or "").strip().upper()
        cik_value = entry.get("cik_str")
        cik_raw = str(cik_value).strip() if cik_value is not None else ""
        if ticker and cik_raw:
            ciks[ticker] = cik_raw.zfill(10)
            names[ticker] = str(entry.get("title") or "").strip()
    return DirectoryIndex(ciks=ciks, names=names)


class FilerDirectory:
    """
    Resolves equity tickers to their SEC CIK numbers.

    Parameters
    ----------
    client:
        Configured EdgarClient instance.
    cache:
        Process-wide TTL cache.
    ttl_seconds:
        Freshness window for the bulk directory (default 24h).
    """

    def __init__(
        self,
        client: EdgarClient,
        cache: TTLCache,
        ttl_seconds: float = DAY_SECONDS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl_seconds

    def _index(self) -> DirectoryIndex:
        return self._cache.get_or_fetch(_CACHE_KEY, self._ttl, self._load)

    def _load(self) -> DirectoryIndex:
        raw = self._client.get_json(EDGAR_TICKER_CIK_URL)
        index = parse_directory(raw)
        logger.info("CIK directory loaded: %d entries", len(index.ciks))
        return index

    def resolve(self, ticker: str) -> str:
        """
        Resolve a ticker to a zero-padded 10-digit CIK string.

        Raises
        ------
        FilerNotFoundError: if the ticker is not in the directory.
        FetchError: if the directory could not be downloaded.
        """
        cik = self._index().ciks.get(ticker.strip().upper())
        if cik is None:
            raise FilerNotFoundError(ticker)
        return cik

    def resolve_many(self, tickers: list[str]) -> dict[str, str]:
        """
        Resolve multiple tickers at once.

        Returns a dict of ticker → CIK for tickers that resolved. Logs a
        warning for each unresolvable ticker rather than raising.
        """
        result: dict[str, str] = {}
        for t in tickers:
            try:
                result[t] = self.resolve(t)
            except FilerNotFoundError:
                logger.warning("Could not resolve ticker '%s' to CIK; skipping.", t)
        return result

    def company_name(self, ticker: str) -> str | None:
        """Return the SEC-registered company name for a ticker, or None."""
        return self._index().names.get(ticker.strip().upper())
