"""
Matching rules — every vocabulary, weight and threshold the engine uses.

The defaults mirror the SECOP II labels (Spanish, as published by the feed).
Any field can be overridden from the ``matching_rules:`` section of
my_profile.yaml; see ``MatchingRules.from_dict``.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchingRules:
    # ── Pillar weights ───────────────────────────────────────────────────────
    legal_weight: int = 30
    financial_weight: int = 30
    experience_weight: int = 40
    location_bonus: int = 5
    non_corporate_penalty: int = 40

    # ── Score bands ──────────────────────────────────────────────────────────
    match_threshold: int = 60
    excellent_threshold: int = 90

    # ── Category codes ───────────────────────────────────────────────────────
    category_prefix_length: int = 4
    min_code_length: int = 4
    code_prefixes: Tuple[str, ...] = ("V1.",)

    # ── Classifier vocabularies ──────────────────────────────────────────────
    corporate_contract_types: Tuple[str, ...] = (
        "Obra",
        "Suministro",
        "Compraventa",
        "Consultoría",
        "Interventoría",
    )
    personal_services_phrases: Tuple[str, ...] = (
        "apoyo a la gestión",
        "persona natural",
        "servicios personales",
        "auxiliar de",
        "apoyo administrativo",
    )

    # ── Actionability vocabularies (checked independently, may overlap) ──────
    open_phase: str = "Presentación de oferta"
    closed_phases: Tuple[str, ...] = ("Adjudicado", "Celebrado", "Liquidado", "Finalizado")
    closed_statuses: Tuple[str, ...] = ("Adjudicado", "Celebrado", "Liquidado", "No Adjudicado")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MatchingRules":
        """
        Build rules from a YAML section, keeping defaults for anything
        missing. Unknown keys are logged and ignored; list values become
        tuples so the result stays hashable and immutable.
        """
        rules = cls()
        if not data:
            return rules

        known = {f.name: f for f in fields(cls)}
        overrides = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown matching rule %r", key)
                continue
            default = getattr(rules, key)
            if isinstance(default, tuple):
                if isinstance(value, str):
                    value = (value,)
                value = tuple(str(v) for v in (value or ()))
            elif isinstance(default, int):
                value = int(value)
            else:
                value = str(value)
            overrides[key] = value
        return replace(rules, **overrides)


DEFAULT_RULES = MatchingRules()
