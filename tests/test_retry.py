"""
test_retry.py – Tests for caller-side retry classification.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from fundamental_ratios.exceptions import FactsNotFoundError, FetchError
from fundamental_ratios.utils.retry import is_retryable, with_retry


class TestIsRetryable:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, None])
    def test_transient(self, status) -> None:
        assert is_retryable(FetchError("u", status_code=status)) is True

    @pytest.mark.parametrize("status", [400, 403, 404])
    def test_permanent(self, status: int) -> None:
        assert is_retryable(FetchError("u", status_code=status)) is False

    def test_other_errors(self) -> None:
        assert is_retryable(FactsNotFoundError("0000000001")) is False
        assert is_retryable(ValueError()) is False


class TestWithRetry:
    def test_retries_transient_then_succeeds(self) -> None:
        func = MagicMock(side_effect=[FetchError("u", status_code=503), "ok"])
        wrapped = with_retry(max_attempts=3, min_wait=0, max_wait=0)(func)
        assert wrapped() == "ok"
        assert func.call_count == 2

    def test_permanent_error_raised_immediately(self) -> None:
        func = MagicMock(side_effect=FetchError("u", status_code=403))
        wrapped = with_retry(max_attempts=3, min_wait=0, max_wait=0)(func)
        with pytest.raises(FetchError):
            wrapped()
        assert func.call_count == 1

    def test_single_attempt_disables_retry(self) -> None:
        func = MagicMock(side_effect=FetchError("u", status_code=503))
        with pytest.raises(FetchError):
            with_retry(max_attempts=1)(func)()
        assert func.call_count == 1

    def test_invalid_attempts(self) -> None:
        with pytest.raises(ValueError):
            with_retry(max_attempts=0)
