"""
test_fact_store.py – Tests for companyfacts fetching, parsing and caching.
"""

from __future__ import annotations

import datetime
from unittest.mock import MagicMock

import pytest
import requests

from fundamental_ratios.edgar.client import EdgarClient
from fundamental_ratios.edgar.facts import FactStore, parse_fact_document
from fundamental_ratios.exceptions import FactsNotFoundError, FetchError, MalformedDataError
from fundamental_ratios.utils.cache import TTLCache
from fundamental_ratios.utils.rate_limit import RequestGate


class TestParseFactDocument:
    def test_parses_points(self, companyfacts_payload: dict) -> None:
        document = parse_fact_document(companyfacts_payload, "0001234567")
        points = document["us-gaap"]["Revenues"]["USD"]
        assert len(points) == 4
        first = points[0]
        assert first.end == datetime.date(2023, 3, 31)
        assert first.start == datetime.date(2023, 1, 1)
        assert first.filed == datetime.date(2023, 5, 1)
        assert first.fp == "Q1"
        assert first.form == "10-Q"
        assert first.value == 100.0
        assert first.tag == "Revenues"
        assert first.unit == "USD"

    def test_instant_points_have_no_start(self, companyfacts_payload: dict) -> None:
        document = parse_fact_document(companyfacts_payload, "0001234567")
        point = document["us-gaap"]["Assets"]["USD"][0]
        assert point.start is None
        assert point.span_days is None

    def test_skips_malformed_entries(self) -> None:
        raw = {"facts": {"us-gaap": {"Revenues": {"units": {"USD": [
            {"end": "2023-03-31", "val": None, "filed": "2023-05-01"},
            {"end": "2023-03-31", "val": "abc", "filed": "2023-05-01"},
            {"end": "2023-03-31", "val": float("nan"), "filed": "2023-05-01"},
            {"end": "not-a-date", "val": 1, "filed": "2023-05-01"},
            {"val": 1, "filed": "2023-05-01"},
            "garbage",
            {"end": "2023-03-31", "val": 7, "fp": "Q1", "form": "10-Q", "filed": "2023-05-01"},
        ]}}}}}
        points = parse_fact_document(raw, "1")["us-gaap"]["Revenues"]["USD"]
        assert [p.value for p in points] == [7.0]

    def test_bad_nesting_skips_only_that_concept(self) -> None:
        raw = {"facts": {
            "us-gaap": {
                "Broken": {"units": "nope"},
                "Assets": {"units": {"USD": [{"end": "2023-12-31", "val": 5, "filed": "2024-02-01"}]}},
            },
            "dei": "not a mapping",
        }}
        document = parse_fact_document(raw, "1")
        assert "Broken" not in document["us-gaap"]
        assert "Assets" in document["us-gaap"]
        assert "dei" not in document

    def test_missing_facts_is_empty(self) -> None:
        assert parse_fact_document({"cik": 1}, "1") == {}

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(MalformedDataError):
            parse_fact_document([1, 2, 3], "1")


class TestFactStore:
    def test_get_facts_caches_per_cik(self, mock_client: MagicMock) -> None:
        store = FactStore(mock_client, TTLCache())
        first = store.get_facts("0001234567")
        second = store.get_facts("0001234567")
        assert first is second
        assert mock_client.get_json.call_count == 1

    def test_requests_zero_padded_url(self, mock_client: MagicMock) -> None:
        FactStore(mock_client, TTLCache()).get_facts("0001234567")
        url = mock_client.get_json.call_args[0][0]
        assert url == "https://data.sec.gov/api/xbrl/companyfacts/CIK0001234567.json"

    def test_404_becomes_facts_not_found(self) -> None:
        client = MagicMock()
        client.get_json.side_effect = FetchError("u", status_code=404)
        with pytest.raises(FactsNotFoundError) as exc_info:
            FactStore(client, TTLCache()).get_facts("0000000001")
        assert exc_info.value.cik == "0000000001"

    def test_other_fetch_errors_propagate(self) -> None:
        client = MagicMock()
        client.get_json.side_effect = FetchError("u", status_code=500)
        with pytest.raises(FetchError) as exc_info:
            FactStore(client, TTLCache()).get_facts("0000000001")
        assert exc_info.value.status_code == 500

    def test_malformed_document_treated_as_empty(self) -> None:
        client = MagicMock()
        client.get_json.return_value = "oops"
        assert FactStore(client, TTLCache()).get_facts("0000000001") == {}


class TestEdgarClient:
    def _client(self, response: MagicMock) -> tuple[EdgarClient, MagicMock, MagicMock]:
        session = MagicMock()
        session.get.return_value = response
        gate = MagicMock(spec=RequestGate)
        return EdgarClient("Test/1.0 test@example.com", gate, session=session), session, gate

    def test_returns_json_and_waits_on_gate(self) -> None:
        response = MagicMock(status_code=200)
        response.json.return_value = {"ok": True}
        client, session, gate = self._client(response)
        assert client.get_json("https://x") == {"ok": True}
        gate.wait.assert_called_once()
        session.get.assert_called_once_with("https://x", timeout=30.0)

    def test_non_2xx_raises_fetch_error(self) -> None:
        response = MagicMock(status_code=429, reason="Too Many Requests")
        client, _, _ = self._client(response)
        with pytest.raises(FetchError) as exc_info:
            client.get_json("https://x")
        assert exc_info.value.status_code == 429

    def test_network_fault_raises_fetch_error(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("boom")
        client = EdgarClient("Test/1.0 test@example.com", MagicMock(spec=RequestGate), session=session)
        with pytest.raises(FetchError) as exc_info:
            client.get_json("https://x")
        assert exc_info.value.status_code is None

    def test_no_automatic_retry(self) -> None:
        response = MagicMock(status_code=503, reason="Unavailable")
        client, session, _ = self._client(response)
        with pytest.raises(FetchError):
            client.get_json("https://x")
        assert session.get.call_count == 1
