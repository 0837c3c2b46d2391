"""
External classifier hints.

A hint can override three rule-based decisions: corporate, actionable and
advice. Each field is optional on its own. ``None`` means the classifier
said nothing and the rules decide; ``False`` is an answer and wins.

The classifier itself lives outside this project. ``collect_hints`` only
drives an injected batch callable and makes sure that whatever goes wrong
there turns into "no hint" instead of an error.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from procurement.models import TenderRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 20

# batch of tenders in → {tender_id: {"corporate": .., "actionable": .., "advice": ..}} out
BatchClassifier = Callable[[Sequence[TenderRecord]], Mapping[str, Any]]


@dataclass(frozen=True)
class ClassificationHint:
    corporate: Optional[bool] = None
    actionable: Optional[bool] = None
    advice: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.corporate is None and self.actionable is None and not self.advice


NO_HINT = ClassificationHint()


def parse_hint(raw: Any) -> ClassificationHint:
    """
    Keep only well-typed fields of a raw classifier answer.
    Flags must be real booleans and advice a non-blank string; anything
    else (including a non-mapping answer) is dropped as absent.
    """
    if isinstance(raw, ClassificationHint):
        return raw
    if not isinstance(raw, Mapping):
        return NO_HINT

    corporate = raw.get("corporate", raw.get("isCorporate"))
    actionable = raw.get("actionable", raw.get("isActionable"))
    advice = raw.get("advice")

    return ClassificationHint(
        corporate=corporate if isinstance(corporate, bool) else None,
        actionable=actionable if isinstance(actionable, bool) else None,
        advice=advice.strip() if isinstance(advice, str) and advice.strip() else None,
    )


def _chunks(items: List[TenderRecord], size: int) -> Iterable[List[TenderRecord]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def collect_hints(
    tenders: Iterable[TenderRecord],
    classify_batch: BatchClassifier,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Dict[str, ClassificationHint]:
    """
    Ask the external classifier about tenders in batches of ``batch_size``.

    Returns hints keyed by tender id. Tenders the classifier failed on, or
    did not answer for, are simply absent from the result.
    """
    tenders = [t for t in tenders if t.tender_id]
    batch_size = max(1, int(batch_size))
    hints: Dict[str, ClassificationHint] = {}

    for batch in _chunks(tenders, batch_size):
        try:
            answers = classify_batch(batch)
        except Exception as exc:
            logger.warning(
                "Classifier failed for a batch of %d tender(s), using rules only: %s",
                len(batch), exc,
            )
            continue

        if not isinstance(answers, Mapping):
            logger.warning("Classifier returned %s instead of a mapping; ignoring batch",
                           type(answers).__name__)
            continue

        wanted = {t.tender_id for t in batch}
        for tender_id, raw in answers.items():
            if tender_id not in wanted:
                continue
            hint = parse_hint(raw)
            if not hint.is_empty:
                hints[tender_id] = hint

    logger.info("Classifier hints collected for %d/%d tender(s).", len(hints), len(tenders))
    return hints


def hints_from_mapping(data: Optional[Mapping]) -> Dict[str, ClassificationHint]:
    """Parse a stored {tender_id: raw_hint} mapping (e.g. a JSON file)."""
    if not isinstance(data, Mapping):
        return {}
    hints = {}
    for tender_id, raw in data.items():
        hint = parse_hint(raw)
        if not hint.is_empty:
            hints[str(tender_id)] = hint
    return hints
