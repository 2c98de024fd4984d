"""
concepts.py – Logical quantities and their XBRL tag fallback chains.

The same economic quantity has been tagged under several names as the GAAP
taxonomy evolved (revenue alone has at least four). Each ``ConceptChain``
lists the acceptable tags with **index 0 = highest priority**; extraction
merges every tag so the most standards-current tag wins on shared dates while
periods only covered by a legacy tag are still kept.

To extend coverage: add tag variants to the chains below.
"""

from __future__ import annotations

from typing import NamedTuple

from fundamental_ratios.constants import DEI, US_GAAP


class ConceptChain(NamedTuple):
    """
    A logical quantity and its prioritized tag synonyms.

    Attributes
    ----------
    name:
        Standardized field name.
    tags:
        Tag names, highest priority first.
    namespace:
        Taxonomy namespace the tags live in.
    """

    name: str
    tags: tuple[str, ...]
    namespace: str = US_GAAP


# ── Income statement ──────────────────────────────────────────────────────────

REVENUE = ConceptChain(
    "revenue",
    (
        "RevenueFromContractWithCustomerExcludingAssessedTax",  # ASC 606, 2018+
        "Revenues",
        "SalesRevenueNet",
        "RevenuesNetOfInterestExpense",         # banks and financial firms
        "InterestAndDividendIncomeOperating",
        "SalesRevenueServicesNet",
        "SalesRevenueGoodsNet",
    ),
)

# Annual statements accept broader net income variants than the quarterly path.
NET_INCOME_ANNUAL = ConceptChain(
    "net_income",
    (
        "NetIncomeLoss",
        "ProfitLoss",
        "NetIncomeLossAvailableToCommonStockholdersBasic",
        "IncomeLossFromContinuingOperations",
    ),
)

# Excludes the common-stockholder and continuing-ops variants: mixing them with
# NetIncomeLoss across quarters of one TTM window gives inconsistent sums.
NET_INCOME_QUARTERLY = ConceptChain(
    "net_income",
    ("NetIncomeLoss", "ProfitLoss"),
)

GROSS_PROFIT = ConceptChain("gross_profit", ("GrossProfit",))

OPERATING_INCOME = ConceptChain(
    "operating_income",
    (
        "OperatingIncomeLoss",
        "IncomeLossFromContinuingOperationsBeforeIncomeTaxesExtraordinaryItemsNoncontrollingInterest",
    ),
)

INCOME_TAX = ConceptChain("income_tax", ("IncomeTaxExpenseBenefit",))

# InterestIncomeExpenseNet is negative when expense exceeds income; consumers
# take the absolute value.
INTEREST_EXPENSE = ConceptChain(
    "interest_expense",
    ("InterestExpense", "InterestExpenseDebt", "InterestIncomeExpenseNet"),
)

EPS = ConceptChain(
    "eps",
    ("EarningsPerShareDiluted", "EarningsPerShareBasic"),
)

# ── Depreciation & amortization ───────────────────────────────────────────────

DEPRECIATION_COMBINED = ConceptChain(
    "depreciation_amortization",
    (
        "DepreciationDepletionAndAmortization",     # 2015+
        "DepreciationAmortizationAndAccretionNet",  # 2007-2017
        "DepreciationAndAmortization",
    ),
)

DEPRECIATION_ONLY = ConceptChain("depreciation", ("Depreciation",))

AMORTIZATION_ONLY = ConceptChain("amortization", ("AmortizationOfIntangibleAssets",))

ACCUMULATED_DEPRECIATION = ConceptChain(
    "accumulated_depreciation",
    (
        "PropertyPlantAndEquipmentAndFinanceLeaseRightOfUseAssetAccumulatedDepreciationAndAmortization",
        "AccumulatedDepreciationDepletionAndAmortizationPropertyPlantAndEquipment",
    ),
)

# ── Cash flow ─────────────────────────────────────────────────────────────────

OPERATING_CASH_FLOW = ConceptChain(
    "operating_cash_flow",
    ("NetCashProvidedByUsedInOperatingActivities",),
)

# Reported as a positive payment; stored downstream as a negative outflow.
CAPEX = ConceptChain("capex", ("PaymentsToAcquirePropertyPlantAndEquipment",))

# ── Balance sheet ─────────────────────────────────────────────────────────────

TOTAL_ASSETS = ConceptChain("total_assets", ("Assets",))

TOTAL_EQUITY = ConceptChain("total_equity", ("StockholdersEquity",))

TOTAL_DEBT = ConceptChain("total_debt", ("LongTermDebtNoncurrent", "LongTermDebt"))

CASH = ConceptChain("cash", ("CashAndCashEquivalentsAtCarryingValue",))

# Annual records prefer the period-end count; the quarterly path prefers the
# diluted weighted average that matches the EPS denominator.
SHARES_ANNUAL = ConceptChain(
    "shares",
    ("CommonStockSharesOutstanding", "WeightedAverageNumberOfDilutedSharesOutstanding"),
)

SHARES_QUARTERLY = ConceptChain(
    "shares",
    ("WeightedAverageNumberOfDilutedSharesOutstanding", "CommonStockSharesOutstanding"),
)

# ── Share-count fallback inputs ───────────────────────────────────────────────

PUBLIC_FLOAT = ConceptChain("public_float", ("EntityPublicFloat",), namespace=DEI)

SHARE_PRICE = ConceptChain("share_price", ("SharePrice",))
