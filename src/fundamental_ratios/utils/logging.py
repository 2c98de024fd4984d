"""
logging.py – Logging setup for the fundamental ratio engine.

Every module logs through ``get_logger(__name__)`` under the
``fundamental_ratios`` namespace. Per-ticker work is logged through a
``TickerAdapter`` so that each line carries the ticker (and CIK, once
resolved): as a ``[TICKER]`` prefix in text output and as fields in JSON.
"""

from __future__ import annotations

import datetime
import json
import logging
import sys
from typing import Any, MutableMapping

_ROOT = "fundamental_ratios"

# LogRecord attributes copied into JSON output when present
_CONTEXT_FIELDS = ("ticker", "cik")


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure the package root logger.

    Call once at application entrypoint (CLI or script). Replaces any
    handlers installed by an earlier call.

    Parameters
    ----------
    level:
        Logging level string: DEBUG, INFO, WARNING, ERROR.
    json_output:
        If True, emit one JSON object per line.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if json_output:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger(_ROOT)
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger scoped within the fundamental_ratios namespace."""
    if not name.startswith(_ROOT):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


class TickerAdapter(logging.LoggerAdapter):
    """
    Logger adapter binding a ticker and optional CIK to every record.

    Parameters
    ----------
    logger:
        Module logger to wrap.
    ticker:
        Uppercased ticker symbol.
    cik:
        Resolved 10-digit CIK, if known.
    """

    def __init__(self, logger: logging.Logger, ticker: str, cik: str | None = None) -> None:
        super().__init__(logger, {"ticker": ticker, "cik": cik})

    def with_cik(self, cik: str | None) -> "TickerAdapter":
        """Same ticker, now tagged with its resolved CIK."""
        return TickerAdapter(self.logger, self.extra["ticker"], cik)  # type: ignore[index]

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}  # type: ignore[dict-item]
        return f"[{self.extra['ticker']}] {msg}", kwargs  # type: ignore[index]


class _JsonFormatter(logging.Formatter):
    """JSON log formatter; includes ticker/cik when the record carries them."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)
