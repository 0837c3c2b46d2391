"""
Pillar scorer — the weighted part of the match score.

Scoring breakdown (default weights, see matching/rules.py):
  +30 pts  — Legal: a registered category code shares a 4-char prefix
             with one of the tender's categories
  +30 pts  — Financial: contracting capacity covers the tender budget
  +40 pts  — Experience: at least one past contract in a matching category
  +5 pts   — Location: the tender names a department/city

The total is returned uncapped (up to 105). The analyzer subtracts the
non-corporate penalty from it and caps the result at 100.

Every pillar leaves exactly one reason (pass) or warning (fail). The
location bonus only leaves a reason when it applies.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from matching.categories import matching_codes
from matching.experience import aggregate_experience, count_matching_contracts
from matching.rules import DEFAULT_RULES, MatchingRules
from procurement.models import BidderProfile, ContractRecord, TenderRecord, format_cop

logger = logging.getLogger(__name__)

LEGAL_OK          = "Legal pillar: compatible category codes ({code})"
LEGAL_MISSING     = "Legal pillar: none of the category codes in your profile match this process"
FINANCIAL_OK      = "Financial pillar: contracting capacity is sufficient ({percentage}% of the budget)"
FINANCIAL_SHORT   = "Financial pillar: insufficient capacity, {missing} short of the budget"
FINANCIAL_NO_DATA = (
    "Financial pillar: you have not configured your financial indicators "
    "(liquidity, indebtedness, equity)"
)
FINANCIAL_NO_K    = "Financial pillar: contracting capacity could not be derived from your financial indicators"
FINANCIAL_NO_BUDGET = "Financial pillar: the process does not publish a usable budget"
EXPERIENCE_OK     = "Experience pillar: you have {count} similar contract(s) in this sector"
EXPERIENCE_NONE   = "Experience pillar: no previous contracts match the category codes of this process"
LOCATION_OK       = "Location: process in {region}, a favourable area"

MAX_PERCENTAGE = 999_999


@dataclass(frozen=True)
class FinancialCheck:
    passed: bool
    required: float
    available: float
    percentage: int
    message: str


@dataclass(frozen=True)
class PillarOutcome:
    legal: bool
    financial: bool
    experience: bool
    location: bool
    score: int
    matched_codes: Tuple[str, ...]
    contract_count: int
    reasons: Tuple[str, ...]
    warnings: Tuple[str, ...]


def check_financial(
    budget: Optional[float],
    capacity: Optional[float],
    indicators_configured: bool,
) -> FinancialCheck:
    """
    Compare capacity with the budget. The failure message tells apart
    "no indicators", "no capacity figure", "no budget" and "not enough".
    """
    if budget is not None and not math.isfinite(budget):
        budget = None
    required = budget or 0.0

    if not indicators_configured and capacity is None:
        return FinancialCheck(False, required, 0.0, 0, FINANCIAL_NO_DATA)
    if capacity is None or not math.isfinite(capacity):
        return FinancialCheck(False, required, 0.0, 0, FINANCIAL_NO_K)
    if not budget:
        return FinancialCheck(False, 0.0, capacity, 0, FINANCIAL_NO_BUDGET)

    ratio = capacity / budget * 100
    percentage = int(round(ratio)) if ratio < MAX_PERCENTAGE else MAX_PERCENTAGE
    if capacity >= budget:
        return FinancialCheck(True, budget, capacity, percentage,
                              FINANCIAL_OK.format(percentage=percentage))
    missing = format_cop(budget - capacity)
    return FinancialCheck(False, budget, capacity, percentage,
                          FINANCIAL_SHORT.format(missing=missing))


def score_pillars(
    tender: TenderRecord,
    categories: Sequence[str],
    profile: BidderProfile,
    capacity: Optional[float],
    contracts: Optional[Sequence[ContractRecord]] = None,
    rules: MatchingRules = DEFAULT_RULES,
) -> PillarOutcome:
    score = 0
    reasons: List[str] = []
    warnings: List[str] = []

    # ── Legal ─────────────────────────────────────────────────────────────────
    matched = matching_codes(profile.category_codes, categories, rules) if categories else []
    legal = bool(matched)
    if legal:
        score += rules.legal_weight
        reasons.append(LEGAL_OK.format(code=matched[0]))
    else:
        warnings.append(LEGAL_MISSING)

    # ── Financial ─────────────────────────────────────────────────────────────
    financial = check_financial(
        tender.budget,
        capacity,
        indicators_configured=profile.financial_indicators is not None,
    )
    if financial.passed:
        score += rules.financial_weight
        reasons.append(financial.message)
    else:
        warnings.append(financial.message)

    # ── Experience ────────────────────────────────────────────────────────────
    contract_count = 0
    if categories:
        experience = aggregate_experience(contracts, rules)
        contract_count = count_matching_contracts(categories, experience, rules)
    has_experience = contract_count > 0
    if has_experience:
        score += rules.experience_weight
        reasons.append(EXPERIENCE_OK.format(count=contract_count))
    else:
        warnings.append(EXPERIENCE_NONE)

    # ── Location bonus ────────────────────────────────────────────────────────
    region = tender.location
    if region:
        score += rules.location_bonus
        reasons.append(LOCATION_OK.format(region=region))

    logger.debug(
        "Pillars for %s: legal=%s financial=%s experience=%s location=%s raw=%d",
        tender.tender_id, legal, financial.passed, has_experience, bool(region), score,
    )

    return PillarOutcome(
        legal=legal,
        financial=financial.passed,
        experience=has_experience,
        location=bool(region),
        score=score,
        matched_codes=tuple(matched),
        contract_count=contract_count,
        reasons=tuple(reasons),
        warnings=tuple(warnings),
    )
