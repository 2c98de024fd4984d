"""
constants.py – Immutable project-wide constants.
Do NOT modify these at runtime. Tag fallback chains live in xbrl/concepts.py.
"""

from __future__ import annotations

# ── SEC EDGAR endpoints ──────────────────────────────────────────────────────
EDGAR_BASE_URL = "https://data.sec.gov"
EDGAR_COMPANY_FACTS_URL = f"{EDGAR_BASE_URL}/api/xbrl/companyfacts/CIK{{cik:010d}}.json"
EDGAR_TICKER_CIK_URL = "https://www.sec.gov/files/company_tickers.json"

# ── Supported filing types ───────────────────────────────────────────────────
ANNUAL_FORM_TYPES: frozenset[str] = frozenset({"10-K", "10-K/A"})
QUARTERLY_FORM_TYPES: frozenset[str] = frozenset({"10-Q", "10-Q/A"})
ALL_SUPPORTED_FORMS: frozenset[str] = ANNUAL_FORM_TYPES | QUARTERLY_FORM_TYPES

# ── Fiscal period labels ─────────────────────────────────────────────────────
INTERIM_LABELS: tuple[str, ...] = ("Q1", "Q2", "Q3")
ANNUAL_LABELS: frozenset[str] = frozenset({"FY", "Q4"})

# ── Taxonomy namespaces ──────────────────────────────────────────────────────
US_GAAP = "us-gaap"
DEI = "dei"

# Unit preference when a concept reports several units
UNIT_PREFERENCE: tuple[str, ...] = ("USD", "shares", "USD/shares")

# ── Quarter isolation / D&A fallback ─────────────────────────────────────────
ANNUAL_MIN_DAYS = 270
# Balance-sheet deltas spanning more than this cover several quarters
ACCUMULATED_DA_MAX_GAP_DAYS = 200

# ── Ratio sanity bounds ──────────────────────────────────────────────────────
RATIO_MAX = 500.0
NET_DEBT_EBITDA_MAX = 50.0

# ── Cache freshness ──────────────────────────────────────────────────────────
DAY_SECONDS = 24 * 60 * 60

# ── Standard output column ordering ─────────────────────────────────────────
ANNUAL_COLS: list[str] = [
    "ticker", "period", "period_date",
    "revenue", "net_income", "ebitda", "eps",
    "free_cash_flow", "operating_cash_flow", "capital_expenditure",
    "total_debt", "total_equity", "total_assets", "book_value_per_share",
    "pe", "ev_ebitda", "pb", "ps",
    "roe", "roic", "debt_to_equity", "current_ratio",
    "gross_margin", "operating_margin", "net_margin",
    "revenue_growth", "eps_growth", "dividend_yield",
]

DYNAMIC_RATIO_COLS: list[str] = [
    "ticker", "date", "price", "market_cap",
    "pe", "ev_ebitda", "pb", "ps", "net_debt_to_ebitda",
    "revenue_ttm", "net_income_ttm", "ebitda_ttm", "fcf_ttm",
    "roe", "gross_margin", "operating_margin", "net_margin", "debt_to_equity",
    "shares_estimated",
]
