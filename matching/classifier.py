"""
Corporate-vs-individual classification and actionability detection.
A present hint field replaces the rule for that decision entirely.
"""

import logging
from typing import Optional

from matching.hints import ClassificationHint
from matching.rules import DEFAULT_RULES, MatchingRules
from procurement.models import TenderRecord

logger = logging.getLogger(__name__)

NON_CORPORATE_WARNING = "Focus: this contract looks aimed at a natural person (personal services)"


def is_corporate_type(contract_type: str, rules: MatchingRules = DEFAULT_RULES) -> bool:
    label = (contract_type or "").lower()
    return any(t.lower() in label for t in rules.corporate_contract_types)


def mentions_personal_services(description: str, rules: MatchingRules = DEFAULT_RULES) -> bool:
    text = (description or "").lower()
    return any(phrase.lower() in text for phrase in rules.personal_services_phrases)


def classify_corporate(
    tender: TenderRecord,
    hint: Optional[ClassificationHint] = None,
    rules: MatchingRules = DEFAULT_RULES,
) -> bool:
    if hint is not None and hint.corporate is not None:
        return hint.corporate
    if is_corporate_type(tender.contract_type, rules):
        return True
    return not mentions_personal_services(tender.description, rules)


def apply_non_corporate_penalty(score: int, rules: MatchingRules = DEFAULT_RULES) -> int:
    return max(0, score - rules.non_corporate_penalty)


def is_closed(tender: TenderRecord, rules: MatchingRules = DEFAULT_RULES) -> bool:
    # Phase and status vocabularies overlap; both checks stay independent.
    return tender.phase in rules.closed_phases or tender.status in rules.closed_statuses


def detect_actionable(
    tender: TenderRecord,
    hint: Optional[ClassificationHint] = None,
    rules: MatchingRules = DEFAULT_RULES,
) -> bool:
    """True while the process still accepts offers."""
    if hint is not None and hint.actionable is not None:
        return hint.actionable
    return tender.phase == rules.open_phase and not is_closed(tender, rules)
