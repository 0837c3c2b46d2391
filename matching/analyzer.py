"""
Match analyzer — the single entry point of the matching engine.

    analyze(tender, profile, contracts=None, hint=None) -> MatchAnalysis

Steps: categories → pillars → corporate classification (and penalty) →
actionability → advice. The function is pure: no I/O, no shared state, the
same inputs always give the same result, and missing data turns into
warnings rather than exceptions. That makes it safe to map over long
tender lists in parallel (see ``analyze_all``).
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from matching.advice import generate_advice
from matching.capacity import CapacitySource, contracting_capacity
from matching.categories import extract_categories
from matching.classifier import (
    NON_CORPORATE_WARNING,
    apply_non_corporate_penalty,
    classify_corporate,
    detect_actionable,
)
from matching.hints import ClassificationHint, parse_hint
from matching.pillars import score_pillars
from matching.rules import DEFAULT_RULES, MatchingRules
from procurement.ingest import contracts_from_rows, tender_from_feed
from procurement.models import BidderProfile, ContractRecord, TenderRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchAnalysis:
    score: int
    match: bool
    reasons: tuple
    warnings: tuple
    advice: str
    corporate: bool
    actionable: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "match": self.match,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
            "advice": self.advice,
            "corporate": self.corporate,
            "actionable": self.actionable,
        }


@dataclass(frozen=True)
class AnalyzedTender:
    tender: TenderRecord
    analysis: MatchAnalysis


def resolve_capacity(
    profile: BidderProfile,
    capacity_source: CapacitySource = contracting_capacity,
) -> Optional[float]:
    """
    The profile's pre-computed capacity if it has one, otherwise whatever
    the capacity source derives from its indicators. A failing source or a
    non-finite figure counts as "unavailable".
    """
    if profile.capacity is not None:
        return profile.capacity
    try:
        capacity = capacity_source(profile.financial_indicators)
    except Exception as exc:
        logger.warning("Capacity source failed for %r, treating as unavailable: %s",
                       profile.name, exc)
        return None
    if capacity is not None and not math.isfinite(capacity):
        logger.warning("Capacity source returned %r for %r, treating as unavailable",
                       capacity, profile.name)
        return None
    return capacity


def analyze(
    tender: Union[TenderRecord, Mapping],
    profile: Optional[BidderProfile],
    contracts: Optional[Iterable[Union[ContractRecord, Mapping]]] = None,
    hint: Optional[Union[ClassificationHint, Mapping]] = None,
    rules: MatchingRules = DEFAULT_RULES,
    capacity_source: CapacitySource = contracting_capacity,
) -> MatchAnalysis:
    """
    Score one tender against one bidder.

    Args:
        tender:          A TenderRecord, or a raw feed row (normalised here).
        profile:         The bidder. None is treated as an empty profile.
        contracts:       The bidder's past contracts; may be empty.
        hint:            Optional external-classifier answer. Present fields
                         win over the rules; absent fields leave them alone.
        rules:           Vocabularies, weights and thresholds.
        capacity_source: Indicators → capacity callable, used when the
                         profile carries no pre-computed capacity.
    """
    if not isinstance(tender, TenderRecord):
        tender = tender_from_feed(tender)
    profile = profile or BidderProfile()
    hint = parse_hint(hint) if hint is not None else None
    contracts = contracts_from_rows(contracts)

    categories = extract_categories(tender, rules)
    capacity = resolve_capacity(profile, capacity_source)
    pillars = score_pillars(tender, categories, profile, capacity, contracts, rules)

    score = pillars.score
    warnings = list(pillars.warnings)

    # Penalty comes off the raw total; the cap applies afterwards.
    corporate = classify_corporate(tender, hint, rules)
    if not corporate:
        score = apply_non_corporate_penalty(score, rules)
        warnings.append(NON_CORPORATE_WARNING)
    score = min(100, score)

    actionable = detect_actionable(tender, hint, rules)
    advice = generate_advice(score, pillars, actionable, tender.phase, hint, rules)

    return MatchAnalysis(
        score=score,
        match=corporate and score >= rules.match_threshold,
        reasons=pillars.reasons,
        warnings=tuple(warnings),
        advice=advice,
        corporate=corporate,
        actionable=actionable,
    )


def analyze_all(
    tenders: Sequence[Union[TenderRecord, Mapping]],
    profile: Optional[BidderProfile],
    contracts: Optional[Iterable[Union[ContractRecord, Mapping]]] = None,
    hints: Optional[Mapping[str, ClassificationHint]] = None,
    rules: MatchingRules = DEFAULT_RULES,
    capacity_source: CapacitySource = contracting_capacity,
    max_workers: Optional[int] = None,
) -> List[AnalyzedTender]:
    """
    Analyse a batch of tenders against one profile.

    The contract list is snapshotted once up front so every tender in the
    batch sees the same history. Results come back in input order.
    """
    records = [t if isinstance(t, TenderRecord) else tender_from_feed(t) for t in tenders]
    snapshot = tuple(contracts_from_rows(contracts))
    hints = hints or {}

    def _one(tender: TenderRecord) -> AnalyzedTender:
        analysis = analyze(
            tender, profile, snapshot, hints.get(tender.tender_id),
            rules=rules, capacity_source=capacity_source,
        )
        return AnalyzedTender(tender=tender, analysis=analysis)

    logger.info("Analysing %d tender(s) …", len(records))

    if max_workers and max_workers > 1 and len(records) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(_one, records))
    return [_one(t) for t in records]
