"""
Fundamental Ratios
==================
SEC XBRL fundamentals normalization engine: annual statement series and
daily TTM valuation ratios aligned to closing prices.
"""

from fundamental_ratios.config import EngineConfig
from fundamental_ratios.exceptions import (
    FactsNotFoundError,
    FetchError,
    FilerNotFoundError,
    FundamentalEngineError,
    MalformedDataError,
    NotFoundError,
    SchemaValidationError,
)
from fundamental_ratios.pipeline import FundamentalsPipeline

__version__ = "0.1.0"
__all__ = [
    "EngineConfig",
    "FundamentalsPipeline",
    "FundamentalEngineError",
    "NotFoundError",
    "FilerNotFoundError",
    "FactsNotFoundError",
    "FetchError",
    "MalformedDataError",
    "SchemaValidationError",
]
