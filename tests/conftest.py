"""
tests/conftest.py – Shared fixtures for all tests.
"""
import datetime
from unittest.mock import MagicMock

import pytest

from fundamental_ratios.constants import EDGAR_TICKER_CIK_URL
from fundamental_ratios.types import PricePoint


def _duration(start: str, end: str, val: float, fp: str, form: str, filed: str) -> dict:
    return {"start": start, "end": end, "val": val, "fp": fp, "form": form, "filed": filed}


def _instant(end: str, val: float, fp: str, form: str, filed: str) -> dict:
    return {"end": end, "val": val, "fp": fp, "form": form, "filed": filed}


def _ytd_series(values: tuple[float, float, float, float]) -> list[dict]:
    """Fiscal 2023 as filed: three YTD 10-Q values and the 10-K annual total."""
    q1, q2, q3, fy = values
    return [
        _duration("2023-01-01", "2023-03-31", q1, "Q1", "10-Q", "2023-05-01"),
        _duration("2023-01-01", "2023-06-30", q2, "Q2", "10-Q", "2023-08-01"),
        _duration("2023-01-01", "2023-09-30", q3, "Q3", "10-Q", "2023-11-01"),
        _duration("2023-01-01", "2023-12-31", fy, "FY", "10-K", "2024-02-01"),
    ]


def _balance_series(value: float) -> list[dict]:
    return [
        _instant("2023-03-31", value, "Q1", "10-Q", "2023-05-01"),
        _instant("2023-06-30", value, "Q2", "10-Q", "2023-08-01"),
        _instant("2023-09-30", value, "Q3", "10-Q", "2023-11-01"),
        _instant("2023-12-31", value, "FY", "10-K", "2024-02-01"),
    ]


@pytest.fixture()
def tickers_payload() -> dict:
    """Sample response matching SEC company_tickers.json structure."""
    return {
        "0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."},
        "1": {"cik_str": 789019, "ticker": "MSFT", "title": "Microsoft Corp"},
        "2": {"cik_str": 1234567, "ticker": "TEST", "title": "Test Industries"},
    }


@pytest.fixture()
def companyfacts_payload() -> dict:
    """
    One fiscal year (calendar 2023) for CIK 1234567.

    Quarterly revenue 100/110/120/130 and net income 10/12/14/16, reported
    cumulatively; 10 shares outstanding at every quarter end.
    """
    return {
        "cik": 1234567,
        "entityName": "Test Industries",
        "facts": {
            "us-gaap": {
                "Revenues": {"units": {"USD": _ytd_series((100, 210, 330, 460))}},
                "NetIncomeLoss": {"units": {"USD": _ytd_series((10, 22, 36, 52))}},
                "OperatingIncomeLoss": {"units": {"USD": _ytd_series((15, 32, 51, 72))}},
                "DepreciationDepletionAndAmortization": {"units": {"USD": _ytd_series((5, 10, 15, 20))}},
                "NetCashProvidedByUsedInOperatingActivities": {"units": {"USD": _ytd_series((20, 40, 60, 80))}},
                "PaymentsToAcquirePropertyPlantAndEquipment": {"units": {"USD": _ytd_series((4, 8, 12, 16))}},
                "Assets": {"units": {"USD": _balance_series(1_000)}},
                "StockholdersEquity": {"units": {"USD": _balance_series(400)}},
                "LongTermDebtNoncurrent": {"units": {"USD": _balance_series(200)}},
                "CashAndCashEquivalentsAtCarryingValue": {"units": {"USD": _balance_series(50)}},
                "CommonStockSharesOutstanding": {"units": {"shares": _balance_series(10)}},
            },
        },
    }


@pytest.fixture()
def mock_client(tickers_payload: dict, companyfacts_payload: dict) -> MagicMock:
    """EdgarClient stand-in serving the directory and the TEST companyfacts."""
    def get_json(url: str) -> dict:
        if url == EDGAR_TICKER_CIK_URL:
            return tickers_payload
        if url.endswith("CIK0001234567.json"):
            return companyfacts_payload
        raise AssertionError(f"unexpected URL {url}")

    client = MagicMock()
    client.get_json.side_effect = get_json
    return client


@pytest.fixture()
def fiscal_2023_closes() -> list[PricePoint]:
    """Closes around the 2023-12-31 TTM anchor; the first day precedes it."""
    days = [datetime.date(2023, 12, 29), datetime.date(2023, 12, 31), datetime.date(2024, 1, 2)]
    return [PricePoint(date=d, open=50.0, high=51.0, low=49.0, close=50.0, volume=1_000.0) for d in days]
