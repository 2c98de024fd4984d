"""
pipeline.py – Per-ticker orchestration of the normalization engine.

For one ticker it:
1. Resolves ticker → CIK (Filer Directory)
2. Loads the companyfacts document (Fact Store)
3. Builds the annual statement series
4. Builds split-adjusted quarterly snapshots and rolling TTM aggregates
5. Projects the TTM aggregates onto the daily price series

Unknown tickers and filers without a facts document produce empty results
with a warning. Fetch failures propagate to the caller.
"""

from __future__ import annotations

import logging

from fundamental_ratios.config import EngineConfig
from fundamental_ratios.constants import ANNUAL_MIN_DAYS, NET_DEBT_EBITDA_MAX, RATIO_MAX
from fundamental_ratios.edgar.client import EdgarClient
from fundamental_ratios.edgar.directory import FilerDirectory
from fundamental_ratios.edgar.facts import FactStore
from fundamental_ratios.exceptions import NotFoundError
from fundamental_ratios.prices import PriceHistorySource
from fundamental_ratios.quarters.splits import SplitAdjuster
from fundamental_ratios.ratios.projector import project_ratios
from fundamental_ratios.statements.annual import build_annual_statements
from fundamental_ratios.ttm.aggregate import build_ttm_snapshots
from fundamental_ratios.ttm.snapshots import build_quarterly_snapshots
from fundamental_ratios.types import AnnualRecord, DynamicRatioPoint, FactDocument, TickerResult, TTMSnapshot
from fundamental_ratios.utils.cache import DiskTTLCache, TTLCache
from fundamental_ratios.utils.logging import TickerAdapter
from fundamental_ratios.utils.rate_limit import RequestGate, shared_gate

logger = logging.getLogger(__name__)


class FundamentalsPipeline:
    """
    Ticker-level entry point tying the engine components together.

    Parameters
    ----------
    directory:
        Ticker → CIK resolver.
    facts:
        Companyfacts accessor.
    prices:
        Price/split collaborator. Required only for dynamic ratios.
    ratio_max, net_debt_ebitda_max:
        Ratio sanity ceilings.
    annual_min_days:
        Minimum span for an FY fact to anchor quarter isolation.
    """

    def __init__(
        self,
        directory: FilerDirectory,
        facts: FactStore,
        prices: PriceHistorySource | None = None,
        ratio_max: float = RATIO_MAX,
        net_debt_ebitda_max: float = NET_DEBT_EBITDA_MAX,
        annual_min_days: int = ANNUAL_MIN_DAYS,
        cache: TTLCache | None = None,
    ) -> None:
        self.directory = directory
        self.facts = facts
        self.prices = prices
        self._ratio_max = ratio_max
        self._net_debt_ebitda_max = net_debt_ebitda_max
        self._annual_min_days = annual_min_days
        self._cache = cache

    @classmethod
    def from_config(
        cls,
        config: EngineConfig | None = None,
        prices: PriceHistorySource | None = None,
        gate: RequestGate | None = None,
    ) -> "FundamentalsPipeline":
        """
        Wire a pipeline from an EngineConfig.

        Parameters
        ----------
        config:
            Engine configuration. If None, loads from environment.
        prices:
            Price/split collaborator.
        gate:
            Request gate to share. Defaults to the process-wide SEC gate.
        """
        cfg = config or EngineConfig.from_env()
        gate = gate or shared_gate(cfg.min_request_interval)
        client = EdgarClient(cfg.user_agent, gate)
        cache: TTLCache = DiskTTLCache(cfg.cache_dir) if cfg.persist_cache else TTLCache()
        return cls(
            directory=FilerDirectory(client, cache, ttl_seconds=cfg.directory_ttl_seconds),
            facts=FactStore(client, cache, ttl_seconds=cfg.facts_ttl_seconds),
            prices=prices,
            ratio_max=cfg.ratio_max,
            net_debt_ebitda_max=cfg.net_debt_ebitda_max,
            annual_min_days=cfg.annual_min_days,
            cache=cache,
        )

    # ── Loading ───────────────────────────────────────────────────────────────

    def _load(self, ticker: str) -> tuple[str | None, FactDocument]:
        """Resolve and fetch; (None, {}) when the ticker or its facts are unknown."""
        log = TickerAdapter(logger, ticker)
        try:
            cik = self.directory.resolve(ticker)
        except NotFoundError as exc:
            log.warning("%s", exc)
            return None, {}
        log = log.with_cik(cik)
        try:
            return cik, self.facts.get_facts(cik)
        except NotFoundError as exc:
            log.warning("%s", exc)
            return cik, {}

    def _ttm(self, ticker: str, document: FactDocument) -> list[TTMSnapshot]:
        if self.prices is None:
            raise ValueError("A price history source is required for TTM and ratio series")
        adjuster = SplitAdjuster(self.prices.get_splits(ticker))
        quarters = build_quarterly_snapshots(document, adjuster, self._annual_min_days)
        return build_ttm_snapshots(quarters)

    # ── Public operations ─────────────────────────────────────────────────────

    def annual_statements(self, ticker: str) -> list[AnnualRecord]:
        """Annual statement series for ``ticker``, newest first."""
        _, document = self._load(ticker)
        return build_annual_statements(document) if document else []

    def ttm_snapshots(self, ticker: str) -> list[TTMSnapshot]:
        """Rolling TTM snapshots for ``ticker``, ascending by date."""
        _, document = self._load(ticker)
        return self._ttm(ticker, document) if document else []

    def dynamic_ratios(self, ticker: str) -> list[DynamicRatioPoint]:
        """Daily ratio series for ``ticker``, ascending by date."""
        return self.run(ticker, include_annual=False, include_ratios=True).ratios

    def run(
        self,
        ticker: str,
        include_annual: bool = True,
        include_ratios: bool | None = None,
    ) -> TickerResult:
        """
        Build every requested series for one ticker from a single facts load.

        ``include_ratios`` defaults to whether a price source is configured.

        Returns
        -------
        TickerResult; empty series when the ticker or its facts are unknown.
        """
        symbol = ticker.strip().upper()
        logger.info("Processing ticker=%s", symbol)
        cik, document = self._load(symbol)
        if not document:
            return TickerResult(ticker=symbol, cik=cik)

        if include_ratios is None:
            include_ratios = self.prices is not None
        annual = build_annual_statements(document) if include_annual else []
        ttm: list[TTMSnapshot] = []
        ratios: list[DynamicRatioPoint] = []
        if include_ratios:
            ttm = self._ttm(symbol, document)
            if ttm:
                ratios = project_ratios(
                    self.prices.get_prices(symbol),  # type: ignore[union-attr]
                    ttm,
                    ratio_max=self._ratio_max,
                    net_debt_ebitda_max=self._net_debt_ebitda_max,
                )

        TickerAdapter(logger, symbol, cik).info(
            "annual=%d ttm=%d ratio_days=%d", len(annual), len(ttm), len(ratios)
        )
        return TickerResult(ticker=symbol, cik=cik, annual=annual, ratios=ratios, ttm=ttm)

    def close(self) -> None:
        """Release cache resources."""
        if self._cache is not None:
            self._cache.close()

    def __enter__(self) -> "FundamentalsPipeline":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
