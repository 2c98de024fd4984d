"""
facts.py – Fetches and caches XBRL companyfacts documents from SEC EDGAR.

The companyfacts endpoint returns ALL historical XBRL data for a company in a
single JSON blob. We parse it into a ``FactDocument``:
namespace → concept → unit → [FactPoint], preserving disclosure order and
applying no filtering beyond dropping entries that cannot be parsed.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from fundamental_ratios.constants import DAY_SECONDS, EDGAR_COMPANY_FACTS_URL
from fundamental_ratios.edgar.client import EdgarClient
from fundamental_ratios.exceptions import FactsNotFoundError, FetchError, MalformedDataError
from fundamental_ratios.types import FactDocument, FactPoint
from fundamental_ratios.utils.cache import TTLCache
from fundamental_ratios.utils.dates import parse_date

logger = logging.getLogger(__name__)


def parse_fact_document(raw: Any, cik: str) -> FactDocument:
    """
    Convert a raw companyfacts payload into a FactDocument.

    Raises
    ------
    MalformedDataError: if the payload is not a JSON object.

    Concepts or units with unexpected nesting are skipped; the rest of the
    document is still returned.
    """
    if not isinstance(raw, dict):
        raise MalformedDataError(cik, f"expected object, got {type(raw).__name__}")

    facts_raw = raw.get("facts")
    document: FactDocument = {}
    if not isinstance(facts_raw, dict):
        logger.warning("No 'facts' mapping in companyfacts for CIK=%s", cik)
        return document

    total = 0
    for namespace, ns_data in facts_raw.items():
        if not isinstance(ns_data, dict):
            continue
        concepts: dict[str, dict[str, list[FactPoint]]] = {}
        for tag, tag_data in ns_data.items():
            units_data = tag_data.get("units") if isinstance(tag_data, dict) else None
            if not isinstance(units_data, dict):
                continue
            units: dict[str, list[FactPoint]] = {}
            for unit, entries in units_data.items():
                if not isinstance(entries, list):
                    continue
                points = _parse_entries(tag, unit, entries)
                if points:
                    units[unit] = points
                    total += len(points)
            if units:
                concepts[tag] = units
        document[namespace] = concepts

    logger.info(
        "Parsed %d concepts (%d facts) for CIK=%s",
        sum(len(c) for c in document.values()), total, cik,
    )
    return document


def _parse_entries(tag: str, unit: str, entries: list[Any]) -> list[FactPoint]:
    """Parse a list of fact entries for a single tag/unit combination."""
    points: list[FactPoint] = []

    for entry in entries:
        try:
            val_raw = entry.get("val")
            if val_raw is None:
                continue
            value = float(val_raw)
            if not math.isfinite(value):
                continue

            end_date = parse_date(entry.get("end"))
            filed_date = parse_date(entry.get("filed"))
            if end_date is None or filed_date is None:
                continue

            points.append(
                FactPoint(
                    end=end_date,
                    start=parse_date(entry.get("start")),
                    filed=filed_date,
                    fp=str(entry.get("fp") or ""),
                    form=str(entry.get("form") or ""),
                    value=value,
                    tag=tag,
                    unit=unit,
                )
            )
        except (AttributeError, ValueError, TypeError) as exc:
            logger.debug("Skipping malformed fact tag=%s: %s", tag, exc)
            continue

    return points


class FactStore:
    """
    Per-CIK accessor for companyfacts documents, cached for 24h.

    Parameters
    ----------
    client:
        Configured EdgarClient instance.
    cache:
        Process-wide TTL cache.
    ttl_seconds:
        Freshness window for each document.
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

    def get_facts(self, cik: str) -> FactDocument:
        """
        Return the parsed fact document for a CIK.

        Raises
        ------
        FactsNotFoundError: if SEC has no companyfacts document (HTTP 404).
        FetchError: on any other failed request.
        """
        return self._cache.get_or_fetch(f"edgar:companyfacts:{cik}", self._ttl, lambda: self._load(cik))

    def _load(self, cik: str) -> FactDocument:
        url = EDGAR_COMPANY_FACTS_URL.format(cik=int(cik))
        try:
            raw = self._client.get_json(url)
        except FetchError as exc:
            if exc.status_code == 404:
                raise FactsNotFoundError(cik) from exc
            raise

        try:
            return parse_fact_document(raw, cik)
        except MalformedDataError as exc:
            logger.warning("%s; treating as empty", exc)
            return {}
