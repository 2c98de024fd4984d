"""
exceptions.py – Custom exception hierarchy for the fundamental ratio engine.

All exceptions carry enough context to diagnose what went wrong at which stage.
Missing data is never an exception: a ratio or TTM field that cannot be
computed is simply ``None``.
"""

from __future__ import annotations


class FundamentalEngineError(Exception):
    """Base exception for the engine. All engine errors inherit from this."""


class NotFoundError(FundamentalEngineError):
    """
    Base for "no data available" outcomes.

    The pipeline converts these into empty result sets rather than failing.
    """


class FilerNotFoundError(NotFoundError):
    """
    Raised when a ticker cannot be resolved to a CIK number.

    Attributes
    ----------
    ticker:
        The ticker that was looked up.
    """

    def __init__(self, ticker: str) -> None:
        self.ticker = ticker
        super().__init__(f"CIK resolution failed for ticker='{ticker}'")


class FactsNotFoundError(NotFoundError):
    """
    Raised when SEC has no companyfacts document for a CIK.

    Attributes
    ----------
    cik:
        Zero-padded 10-digit CIK.
    """

    def __init__(self, cik: str) -> None:
        self.cik = cik
        super().__init__(f"No XBRL company facts for cik='{cik}'")


class FetchError(FundamentalEngineError):
    """
    Raised when an outbound request fails (non-2xx status or network fault).

    Attributes
    ----------
    url:
        The URL that was requested.
    status_code:
        HTTP status code, or None for network-level faults.
    detail:
        Additional diagnostic information.
    """

    def __init__(self, url: str, status_code: int | None = None, detail: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        self.detail = detail
        if status_code is not None:
            msg = f"HTTP {status_code} fetching {url}"
        else:
            msg = f"Network failure fetching {url}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class MalformedDataError(FundamentalEngineError):
    """
    Raised when a facts document does not have the expected nesting.

    Attributes
    ----------
    cik:
        The CIK whose document was being parsed.
    detail:
        Additional diagnostic information.
    """

    def __init__(self, cik: str, detail: str) -> None:
        self.cik = cik
        self.detail = detail
        super().__init__(f"Malformed facts document for cik='{cik}': {detail}")


class SchemaValidationError(FundamentalEngineError):
    """
    Raised when a DataFrame does not comply with the expected output schema.

    Attributes
    ----------
    table_name:
        Name of the table that failed validation.
    violations:
        List of human-readable violation descriptions.
    """

    def __init__(self, table_name: str, violations: list[str]) -> None:
        self.table_name = table_name
        self.violations = violations
        joined = "; ".join(violations)
        super().__init__(f"Schema validation failed for table='{table_name}': {joined}")
