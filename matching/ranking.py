"""
Ranking policy shared by every listing (console summary, Excel report,
web API): open processes first, then corporate ones, then by score.
"""

from typing import Any, List, Sequence, Tuple


def _analysis_of(item: Any):
    return getattr(item, "analysis", item)


def rank_key(item: Any) -> Tuple[bool, bool, int]:
    """Sort key for a MatchAnalysis or anything carrying ``.analysis``."""
    analysis = _analysis_of(item)
    return (not analysis.actionable, not analysis.corporate, -analysis.score)


def rank(items: Sequence[Any]) -> List[Any]:
    """
    Return a new list in ranking order. The sort is stable: items that tie
    on all three keys keep their input order.
    """
    return sorted(items, key=rank_key)
