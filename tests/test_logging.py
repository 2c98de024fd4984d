"""
test_logging.py – Tests for per-ticker log context and JSON output.
"""

from __future__ import annotations

import json
import logging

import pytest

from fundamental_ratios.utils.logging import TickerAdapter, _JsonFormatter, configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    root = logging.getLogger("fundamental_ratios")
    root.handlers.clear()
    root.propagate = True


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("fundamental_ratios.pipeline", logging.INFO, __file__, 1, "annual=%d", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestTickerAdapter:
    def test_prefixes_ticker_and_sets_extras(self, caplog: pytest.LogCaptureFixture) -> None:
        log = TickerAdapter(logging.getLogger("fundamental_ratios.test"), "AAPL").with_cik("0000320193")
        with caplog.at_level(logging.INFO, logger="fundamental_ratios.test"):
            log.info("annual=%d", 3)

        record = caplog.records[-1]
        assert record.getMessage() == "[AAPL] annual=3"
        assert record.ticker == "AAPL"
        assert record.cik == "0000320193"

    def test_cik_unknown_before_resolution(self, caplog: pytest.LogCaptureFixture) -> None:
        log = TickerAdapter(logging.getLogger("fundamental_ratios.test"), "ZZZZ")
        with caplog.at_level(logging.WARNING, logger="fundamental_ratios.test"):
            log.warning("not found")
        assert caplog.records[-1].cik is None


class TestJsonFormatter:
    def test_includes_ticker_context(self) -> None:
        payload = json.loads(_JsonFormatter().format(_record(ticker="AAPL", cik="0000320193")))
        assert payload["msg"] == "annual=3"
        assert payload["ticker"] == "AAPL"
        assert payload["cik"] == "0000320193"
        assert payload["level"] == "INFO"

    def test_omits_missing_context(self) -> None:
        payload = json.loads(_JsonFormatter().format(_record(ticker="ZZZZ", cik=None)))
        assert payload["ticker"] == "ZZZZ"
        assert "cik" not in payload


class TestConfigureLogging:
    def test_json_handler_installed_once(self) -> None:
        configure_logging("DEBUG", json_output=True)
        configure_logging("DEBUG", json_output=True)
        root = logging.getLogger("fundamental_ratios")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonFormatter)
        assert root.level == logging.DEBUG

    def test_get_logger_namespaced(self) -> None:
        assert get_logger("edgar.client").name == "fundamental_ratios.edgar.client"
        assert get_logger("fundamental_ratios.pipeline").name == "fundamental_ratios.pipeline"
