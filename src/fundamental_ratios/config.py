"""
config.py – Central configuration using environment variables and/or explicit overrides.
All settings are immutable after construction (frozen dataclass).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable engine configuration.

    Parameters
    ----------
    user_agent:
        HTTP header value required by SEC EDGAR. Format: "Name/Version email".
    cache_dir:
        Directory for disk-backed caches (used when ``persist_cache`` is True).
    output_dir:
        Default output directory for result tables.
    min_request_interval:
        Minimum spacing in seconds between outbound SEC requests.
        0.11s keeps us at ~9 requests/second, under the SEC's 10 RPS policy.
    directory_ttl_seconds:
        Freshness window for the ticker → CIK directory.
    facts_ttl_seconds:
        Freshness window for each per-CIK companyfacts document.
    ratio_max:
        Absolute ceiling for P/E, EV/EBITDA, P/B and P/S. Larger values are dropped.
    net_debt_ebitda_max:
        Absolute ceiling for Net Debt / EBITDA.
    annual_min_days:
        Minimum start→end span for an FY-labelled fact to count as an annual total.
    persist_cache:
        If True, caches are backed by diskcache under ``cache_dir``.
    log_level:
        Python logging level string.
    """

    user_agent: str = field(
        default_factory=lambda: os.getenv("SEC_USER_AGENT", "FundamentalRatios/1.0 researcher@example.com")
    )
    cache_dir: Path = field(
        default_factory=lambda: Path(os.getenv("CACHE_DIR", ".cache"))
    )
    output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("OUTPUT_DIR", "out"))
    )
    min_request_interval: float = field(
        default_factory=lambda: float(os.getenv("SEC_MIN_REQUEST_INTERVAL", "0.11"))
    )
    directory_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("DIRECTORY_TTL_SECONDS", "86400"))
    )
    facts_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("FACTS_TTL_SECONDS", "86400"))
    )
    ratio_max: float = field(
        default_factory=lambda: float(os.getenv("RATIO_MAX", "500"))
    )
    net_debt_ebitda_max: float = field(
        default_factory=lambda: float(os.getenv("NET_DEBT_EBITDA_MAX", "50"))
    )
    annual_min_days: int = field(
        default_factory=lambda: int(os.getenv("ANNUAL_MIN_DAYS", "270"))
    )
    persist_cache: bool = field(
        default_factory=lambda: os.getenv("PERSIST_CACHE", "false").lower() == "true"
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    def __post_init__(self) -> None:
        if not self.user_agent or " " not in self.user_agent:
            raise ValueError(
                "SEC_USER_AGENT must be set and follow format: 'Name/Version email'"
            )
        if self.min_request_interval < 0.1:
            raise ValueError("SEC request spacing cannot be below 0.1s (10 RPS SEC policy).")
        if self.ratio_max <= 0 or self.net_debt_ebitda_max <= 0:
            raise ValueError("Ratio ceilings must be positive.")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Construct config entirely from environment variables."""
        return cls()
