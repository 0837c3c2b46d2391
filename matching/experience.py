"""
Experience aggregation — past contracts grouped by category code.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from matching.categories import category_prefix, strip_code_prefix
from matching.rules import DEFAULT_RULES, MatchingRules
from procurement.models import ContractRecord

logger = logging.getLogger(__name__)


@dataclass
class ExperienceStat:
    count: int = 0
    total_value: float = 0.0


def _contract_value(contract) -> float:
    value = getattr(contract, "value", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return float(value)


def aggregate_experience(
    contracts: Optional[Iterable[ContractRecord]],
    rules: MatchingRules = DEFAULT_RULES,
) -> Dict[str, ExperienceStat]:
    """
    Count contracts and sum their values per category code.
    A contract listing several codes counts once under each of them.
    Entries without a usable code list are skipped one by one.
    """
    by_code: Dict[str, ExperienceStat] = {}

    for contract in contracts or ():
        codes = getattr(contract, "category_codes", None)
        if not isinstance(codes, (list, tuple)):
            logger.debug("Skipping contract without category codes: %r", contract)
            continue

        value = _contract_value(contract)
        for raw in codes:
            if not isinstance(raw, str) or not raw.strip():
                continue
            code = strip_code_prefix(raw, rules)
            stat = by_code.setdefault(code, ExperienceStat())
            stat.count += 1
            stat.total_value += value

    return by_code


def count_matching_contracts(
    tender_categories: Iterable[str],
    experience: Dict[str, ExperienceStat],
    rules: MatchingRules = DEFAULT_RULES,
) -> int:
    """
    Sum contract counts over every aggregated code sharing a category
    prefix with each tender category.
    """
    total = 0
    for tender_code in tender_categories:
        prefix = category_prefix(tender_code, rules)
        for code, stat in experience.items():
            if category_prefix(code, rules) == prefix:
                total += stat.count
    return total
