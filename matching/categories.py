"""
Category extraction and comparison.

Two codes are the same category when their first four characters match
(e.g. 80111600 and 80111601 are both "8011"). This is the only comparison
used by the pillar scorer and the experience aggregator.
"""

import logging
from typing import Iterable, List, Mapping, Union

from matching.rules import DEFAULT_RULES, MatchingRules
from procurement.ingest import tender_from_feed
from procurement.models import TenderRecord

logger = logging.getLogger(__name__)


def strip_code_prefix(code: str, rules: MatchingRules = DEFAULT_RULES) -> str:
    """Remove a version tag such as "V1." from the front of a code."""
    code = code.strip()
    for prefix in rules.code_prefixes:
        if code.startswith(prefix):
            return code[len(prefix):].strip()
    return code


def category_prefix(code: str, rules: MatchingRules = DEFAULT_RULES) -> str:
    return code[:rules.category_prefix_length]


def same_category(a: str, b: str, rules: MatchingRules = DEFAULT_RULES) -> bool:
    return category_prefix(a, rules) == category_prefix(b, rules)


def extract_categories(
    tender: Union[TenderRecord, Mapping],
    rules: MatchingRules = DEFAULT_RULES,
) -> List[str]:
    """
    Return the tender's usable category keys, primary code first.
    An empty list means "no category information", not an error.
    """
    if not isinstance(tender, TenderRecord):
        tender = tender_from_feed(tender)

    categories: List[str] = []
    for raw in tender.category_codes:
        code = strip_code_prefix(str(raw), rules)
        if len(code) < rules.min_code_length:
            logger.debug("Discarding short category code %r on %s", raw, tender.tender_id)
            continue
        if code not in categories:
            categories.append(code)
    return categories


def matching_codes(
    bidder_codes: Iterable[str],
    tender_categories: Iterable[str],
    rules: MatchingRules = DEFAULT_RULES,
) -> List[str]:
    """Bidder codes that share a category prefix with any tender category."""
    tender_prefixes = {category_prefix(c, rules) for c in tender_categories}
    matched = []
    for code in bidder_codes:
        cleaned = strip_code_prefix(str(code), rules)
        if cleaned and category_prefix(cleaned, rules) in tender_prefixes:
            matched.append(cleaned)
    return matched
