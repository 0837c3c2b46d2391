"""
Canonical records used by the matching engine.
Feed rows and stored rows are turned into these by procurement/ingest.py.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class TenderRecord:
    # ── Identity ─────────────────────────────────────────────────────────────
    tender_id: str = ""
    reference: str = ""

    # ── Organisation ─────────────────────────────────────────────────────────
    entity: str = ""
    region: str = ""
    city: str = ""

    # ── Financials ───────────────────────────────────────────────────────────
    budget: Optional[float] = None   # COP, None if missing or unparseable
    budget_raw: str = ""             # Original value from the feed

    # ── Process ──────────────────────────────────────────────────────────────
    contract_type: str = ""
    modality: str = ""
    phase: str = ""
    status: str = ""
    published_date: Optional[datetime] = None

    # ── Category & description ───────────────────────────────────────────────
    category_codes: Tuple[str, ...] = ()   # primary first, as published
    description: str = ""

    # ── Link ─────────────────────────────────────────────────────────────────
    url: str = ""

    @property
    def location(self) -> str:
        return self.region or self.city

    def display_budget(self) -> str:
        if self.budget is not None:
            return format_cop(self.budget)
        if self.budget_raw:
            return self.budget_raw
        return "Not disclosed"

    def display_published(self) -> str:
        if self.published_date:
            return self.published_date.strftime("%d %b %Y")
        return "—"


@dataclass(frozen=True)
class ContractRecord:
    contract_id: str = ""
    client_name: str = ""
    value: float = 0.0
    execution_date: Optional[datetime] = None
    category_codes: Tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class FinancialIndicators:
    liquidity_index: float = 0.0
    indebtedness_index: float = 0.0
    working_capital: float = 0.0
    equity: float = 0.0


@dataclass(frozen=True)
class BidderProfile:
    name: str = ""
    category_codes: Tuple[str, ...] = ()
    financial_indicators: Optional[FinancialIndicators] = None
    capacity: Optional[float] = None   # pre-computed elsewhere; None = derive from indicators


def format_cop(amount: float) -> str:
    """Whole-peso currency string, e.g. ``$50,000,000``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"
