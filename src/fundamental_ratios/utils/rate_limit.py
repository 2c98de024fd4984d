"""
rate_limit.py – SEC-compliant request spacing (maximum 10 RPS per SEC policy).

A single ``RequestGate`` is created per process and injected into every
``EdgarClient``. It owns the "time of last request" and updates it under a
``threading.Lock`` so the spacing holds under concurrent callers.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from fundamental_ratios.utils.logging import get_logger

logger = get_logger(__name__)


class RequestGate:
    """
    Thread-safe minimum-interval gate.

    Each caller atomically reserves the next free slot (``last + interval`` or
    now, whichever is later), then sleeps until that slot outside the lock.
    Callers never busy-spin.

    Parameters
    ----------
    min_interval:
        Minimum number of seconds between two successive requests.
    clock:
        Monotonic time source (injectable for tests).
    sleep:
        Sleep function (injectable for tests).
    """

    def __init__(
        self,
        min_interval: float = 0.11,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")
        self._interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = threading.Lock()

    @property
    def min_interval(self) -> float:
        return self._interval

    def widen(self, min_interval: float) -> None:
        """Raise the spacing to ``min_interval`` if it is larger; never lowers it."""
        with self._lock:
            if min_interval > self._interval:
                logger.info("Request gate spacing widened %.3fs → %.3fs", self._interval, min_interval)
                self._interval = min_interval

    def wait(self) -> float:
        """
        Block until this caller may issue a request.

        Returns
        -------
        float: seconds slept (0.0 when the gate was already open).
        """
        with self._lock:
            now = self._clock()
            if self._last_request is None:
                slot = now
            else:
                slot = max(now, self._last_request + self._interval)
            self._last_request = slot

        delay = slot - now
        if delay > 0:
            logger.debug("Request gate sleeping %.3fs to respect %.3fs spacing", delay, self._interval)
            self._sleep(delay)
            return delay
        return 0.0


class SECRequestGate(RequestGate):
    """
    Pre-configured gate for SEC EDGAR.

    SEC allows at most 10 requests per second. We default to 0.11s spacing
    (~9 RPS) to leave a safety margin and avoid 429 responses.

    Parameters
    ----------
    min_interval:
        Seconds between requests. Must be >= 0.1 (SEC hard limit).
    """

    def __init__(self, min_interval: float = 0.11) -> None:
        if min_interval < 0.1:
            raise ValueError(
                f"SEC EDGAR rate limit is 10 RPS maximum. Got spacing {min_interval}s. "
                "See: https://www.sec.gov/developer"
            )
        super().__init__(min_interval=min_interval)
        logger.info("SEC request gate configured at %.3fs spacing", min_interval)


# The single gate shared by every pipeline in the process.
_SHARED_GATE: SECRequestGate | None = None
_SHARED_LOCK = threading.Lock()


def shared_gate(min_interval: float = 0.11) -> SECRequestGate:
    """
    Return the process-wide SEC gate, creating it on first use.

    Later callers asking for a different spacing get the same gate; its
    spacing is widened to the largest interval requested so far.
    """
    global _SHARED_GATE
    with _SHARED_LOCK:
        if _SHARED_GATE is None:
            _SHARED_GATE = SECRequestGate(min_interval)
        elif min_interval < 0.1:
            raise ValueError(f"SEC EDGAR rate limit is 10 RPS maximum. Got spacing {min_interval}s.")
        else:
            _SHARED_GATE.widen(min_interval)
        return _SHARED_GATE
