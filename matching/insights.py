"""
Listing helpers built on top of finished analyses: the one-line headline,
portfolio counters, risk flags and suggested deliverables.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from procurement.models import TenderRecord, format_cop

OPPORTUNITY_SCORE = 70
RISK_SCORE_MIN = 30
RISK_CAPACITY_FACTOR = 1.5

MAX_DELIVERABLES = 6
_DELIVERABLE_SPLIT = re.compile(r";|\.| y | e |,| incluyendo | para | con ", re.IGNORECASE)
_DELIVERABLE_STOP_WORDS = {
    "el", "la", "los", "las", "de", "del", "en", "a", "que", "objeto", "contratar",
}


def headline(analysis) -> str:
    """Short reason shown next to a tender in ranked lists."""
    if analysis.score >= 90:
        return "Excellent capacity and sector experience"
    if analysis.score >= 80:
        return "Strong financial and technical fit"
    if analysis.score >= 60:
        return "Suitable profile according to your registered indicators"
    if analysis.reasons:
        return analysis.reasons[0]
    if analysis.warnings:
        return analysis.warnings[0]
    return "Compatible with your profile"


def portfolio_stats(analyses: Iterable) -> dict:
    """
    Counters for a batch of analyses:
      opportunities — score >= 70
      avg_score     — rounded mean score
      risks         — 30 <= score < 70 (interesting but needs work)
    """
    scores = [getattr(a, "analysis", a).score for a in analyses]
    if not scores:
        return {"opportunities": 0, "avg_score": 0, "risks": 0}
    return {
        "opportunities": sum(1 for s in scores if s >= OPPORTUNITY_SCORE),
        "avg_score": int(round(sum(scores) / len(scores))),
        "risks": sum(1 for s in scores if RISK_SCORE_MIN <= s < OPPORTUNITY_SCORE),
    }


@dataclass(frozen=True)
class Risk:
    tender_id: str
    title: str
    description: str
    severity: str   # "high" | "medium"


def identify_risk(tender: TenderRecord, analysis, capacity: Optional[float]) -> Optional[Risk]:
    """Flag mid-band tenders (30-69) with the most likely reason they may be lost."""
    if not RISK_SCORE_MIN <= analysis.score < OPPORTUNITY_SCORE:
        return None

    budget = tender.budget or 0.0
    if budget > (capacity or 0.0) * RISK_CAPACITY_FACTOR:
        return Risk(
            tender_id=tender.tender_id,
            title="Insufficient financial capacity",
            description=f"The required amount ({format_cop(budget)}) is well above your K capacity",
            severity="high",
        )
    if analysis.warnings:
        return Risk(
            tender_id=tender.tender_id,
            title=analysis.warnings[0],
            description=f"Process: {tender.description[:100]}...",
            severity="medium",
        )
    return Risk(
        tender_id=tender.tender_id,
        title="Limited sector experience",
        description="Little experience in the category codes this process requires",
        severity="medium",
    )


def suggested_deliverables(description: str) -> List[str]:
    """Pull up to six deliverable-like phrases out of a process description."""
    text = re.sub(r"\s+", " ", description or "").strip()
    if not text:
        return []

    deliverables: List[str] = []
    for part in _DELIVERABLE_SPLIT.split(text):
        part = part.strip()
        if not 4 <= len(part) <= 100:
            continue
        if part.lower() in _DELIVERABLE_STOP_WORDS:
            continue
        item = part[0].upper() + part[1:].lower()
        if item not in deliverables:
            deliverables.append(item)
        if len(deliverables) == MAX_DELIVERABLES:
            break
    return deliverables
