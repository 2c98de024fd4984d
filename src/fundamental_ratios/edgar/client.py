"""
client.py – Low-level HTTP client for SEC EDGAR.

Wraps requests with:
- User-Agent injection (required by SEC)
- Request spacing through a shared ``RequestGate``
- Typed ``FetchError`` on any non-2xx response or network fault

The client does not retry and does not cache. Caching is owned by the
directory and fact store (``TTLCache``); retries are the caller's choice
(``utils.retry.with_retry``).

Each EdgarClient instance shares the HTTP session with other instances that
use the same user_agent, so connections are reused without mixing headers.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from fundamental_ratios.exceptions import FetchError
from fundamental_ratios.utils.rate_limit import RequestGate

logger = logging.getLogger(__name__)

# Module-level cache keyed by user_agent so distinct configs reuse connections
# but never share a session with a different User-Agent.
_SESSION_POOL: dict[str, requests.Session] = {}


def _get_session(user_agent: str) -> requests.Session:
    """Return a per-user-agent requests.Session (cached at module level)."""
    if user_agent not in _SESSION_POOL:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept-Encoding": "gzip, deflate",
            }
        )
        _SESSION_POOL[user_agent] = session
        logger.debug("Created new HTTP session for user_agent=%r", user_agent)
    return _SESSION_POOL[user_agent]


class EdgarClient:
    """
    SEC EDGAR HTTP client with shared request spacing.

    Parameters
    ----------
    user_agent:
        Descriptive User-Agent ("Name/Version email") per SEC access policy.
    gate:
        Process-wide request gate. All clients in a process should share one.
    session:
        Optional pre-built session (tests inject a mock here).
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        user_agent: str,
        gate: RequestGate,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._gate = gate
        self._session = session if session is not None else _get_session(user_agent)
        self._timeout = timeout

    def get_json(self, url: str) -> Any:
        """
        Fetch a JSON endpoint from EDGAR, returning the parsed object.

        Raises
        ------
        FetchError: on a non-2xx status, network fault, or undecodable body.
        """
        self._gate.wait()
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FetchError(url, detail=str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            raise FetchError(url, status_code=resp.status_code, detail=resp.reason)

        try:
            data = resp.json()
        except ValueError as exc:
            raise FetchError(url, status_code=resp.status_code, detail=f"invalid JSON: {exc}") from exc

        logger.debug("Fetched: %s", url)
        return data
