"""
Strategic advice — one short recommendation per analysed tender.

Decision order:
  1. hint advice, verbatim
  2. process closed            → market-analysis only
  3. score below match band    → first failing pillar (legal, financial,
                                 experience), else a generic alliance tip
  4. score below excellent     → financial partner tip or "good candidate"
  5. otherwise                 → compete on price
"""

from typing import Optional

from matching.hints import ClassificationHint
from matching.pillars import PillarOutcome
from matching.rules import DEFAULT_RULES, MatchingRules

CLOSED = (
    "Strategy: this process no longer accepts offers (phase: {phase}). "
    "Use it only for market or historical analysis."
)
LOW_LEGAL = (
    "Strategy: this process requires category codes you have not registered. "
    "Consider updating your bidder registry or finding a partner who already holds these codes."
)
LOW_FINANCIAL = (
    "Strategy: your financial capacity (K) is insufficient for this amount. "
    "Look for a partner with more capital and bid as a consortium or temporary union."
)
LOW_EXPERIENCE = (
    "Strategy: you have the codes but no demonstrable technical experience. "
    "Seek a strategic alliance with a company that brings the required contracts."
)
LOW_GENERIC = (
    "Strategy: this process profile is challenging. "
    "An alliance with a strategic partner would greatly improve your chances."
)
MID_FINANCIAL = (
    "Tip: you have the experience but your K capacity is tight. "
    "A financial partner could strengthen your offer."
)
MID_GENERIC = (
    "Tip: you are a good candidate. "
    "Make sure to highlight your specific experience in the technical deliverables."
)
EXCELLENT = (
    "Tip: your profile is excellent for this process. "
    "Focus on making your economic offer competitive."
)

DEFAULT_PHASE = "Iniciada"


def generate_advice(
    score: int,
    pillars: PillarOutcome,
    actionable: bool,
    phase: str = "",
    hint: Optional[ClassificationHint] = None,
    rules: MatchingRules = DEFAULT_RULES,
) -> str:
    if hint is not None and hint.advice:
        return hint.advice

    if not actionable:
        return CLOSED.format(phase=phase or DEFAULT_PHASE)

    if score < rules.match_threshold:
        if not pillars.legal:
            return LOW_LEGAL
        if not pillars.financial:
            return LOW_FINANCIAL
        if not pillars.experience:
            return LOW_EXPERIENCE
        return LOW_GENERIC

    if score < rules.excellent_threshold:
        return MID_FINANCIAL if not pillars.financial else MID_GENERIC

    return EXCELLENT
