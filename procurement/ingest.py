"""
Ingestion boundary — turns loosely-shaped rows into canonical records.

SECOP II rows are inconsistent: fields go missing, the process link is
sometimes a bare string and sometimes {"url": "..."}, amounts arrive as
strings or numbers, and the category code may be a string, a number or a
list. Everything is normalised here once so the engine only ever sees
procurement.models types.

Each canonical field accepts the SECOP column name first, then the
canonical name, so JSON written by this project reads back the same way.
"""

import logging
import math
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from procurement.models import BidderProfile, ContractRecord, FinancialIndicators, TenderRecord

logger = logging.getLogger(__name__)

# canonical field → accepted source keys, in lookup order
TENDER_FIELDS = {
    "tender_id":      ("id_del_proceso", "tender_id", "id"),
    "reference":      ("referencia_del_proceso", "reference"),
    "entity":         ("entidad", "entity"),
    "region":         ("departamento_entidad", "region"),
    "city":           ("ciudad_entidad", "city"),
    "budget":         ("precio_base", "budget"),
    "contract_type":  ("tipo_de_contrato", "contract_type"),
    "modality":       ("modalidad_de_contratacion", "modality"),
    "phase":          ("fase", "phase"),
    "status":         ("estado_del_proceso", "status"),
    "published_date": ("fecha_de_publicacion_del", "published_date"),
    "category_codes": ("codigo_principal_de_categoria", "category_codes"),
    "description":    ("descripci_n_del_procedimiento", "description"),
    "url":            ("urlproceso", "url"),
}

CONTRACT_FIELDS = {
    "contract_id":    ("contract_number", "id", "contract_id"),
    "client_name":    ("client_name",),
    "value":          ("contract_value", "value"),
    "execution_date": ("execution_date",),
    "category_codes": ("unspsc_codes", "category_codes"),
    "description":    ("description",),
}

INDICATOR_FIELDS = ("liquidity_index", "indebtedness_index", "working_capital", "equity")


# ── Scalar helpers ────────────────────────────────────────────────────────────

def _pick(row: Mapping, keys: Iterable[str]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Mapping):
        # Structured link values: {"url": "..."}
        return _text(value.get("url"))
    return str(value).strip()


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a currency amount from strings like "50000000", "$ 50,000,000"
    or "1200.50", or from a plain number.
    Returns None for anything missing, negative or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip().replace("COP", "").replace("$", "")
        text = text.replace(",", "").replace(" ", "")
        if not text:
            return None
        try:
            amount = float(text)
        except ValueError:
            return None
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        return None
    return amount


def parse_date(value: Any) -> Optional[datetime]:
    """ISO dates as published by Socrata ("2024-03-01T00:00:00.000")."""
    if isinstance(value, datetime):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text[:19])
    except ValueError:
        return None


def parse_codes(value: Any) -> Tuple[str, ...]:
    """Category codes as a tuple of stripped strings; order kept, blanks dropped."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    codes = []
    for item in items:
        if item is None or isinstance(item, (bool, Mapping, list, tuple)):
            continue
        code = str(item).strip()
        if code:
            codes.append(code)
    return tuple(codes)


# ── Records ───────────────────────────────────────────────────────────────────

def tender_from_feed(row: Mapping) -> TenderRecord:
    """Normalise one feed row into a TenderRecord. Never raises for bad fields."""
    if isinstance(row, TenderRecord):
        return row
    if not isinstance(row, Mapping):
        logger.debug("Tender row is not a mapping: %r", type(row).__name__)
        return TenderRecord()

    def field(name: str) -> Any:
        return _pick(row, TENDER_FIELDS[name])

    raw_budget = field("budget")
    return TenderRecord(
        tender_id=_text(field("tender_id")),
        reference=_text(field("reference")),
        entity=_text(field("entity")),
        region=_text(field("region")),
        city=_text(field("city")),
        budget=parse_amount(raw_budget),
        budget_raw=_text(raw_budget),
        contract_type=_text(field("contract_type")),
        modality=_text(field("modality")),
        phase=_text(field("phase")),
        status=_text(field("status")),
        published_date=parse_date(field("published_date")),
        category_codes=parse_codes(field("category_codes")),
        description=_text(field("description")),
        url=_text(field("url")),
    )


def tenders_from_feed(rows: Iterable[Mapping]) -> List[TenderRecord]:
    return [tender_from_feed(r) for r in rows]


def contract_from_row(row: Mapping) -> Optional[ContractRecord]:
    """
    Normalise one stored contract row. Returns None when the row is not a
    mapping at all; a bad value becomes 0 and bad codes become ().
    """
    if isinstance(row, ContractRecord):
        return row
    if not isinstance(row, Mapping):
        return None

    def field(name: str) -> Any:
        return _pick(row, CONTRACT_FIELDS[name])

    return ContractRecord(
        contract_id=_text(field("contract_id")),
        client_name=_text(field("client_name")),
        value=parse_amount(field("value")) or 0.0,
        execution_date=parse_date(field("execution_date")),
        category_codes=parse_codes(field("category_codes")),
        description=_text(field("description")),
    )


def contracts_from_rows(rows: Iterable[Mapping]) -> List[ContractRecord]:
    contracts = []
    for row in rows or ():
        contract = contract_from_row(row)
        if contract is None:
            logger.debug("Skipping contract row of type %s", type(row).__name__)
            continue
        contracts.append(contract)
    return contracts


def indicators_from_dict(data: Any) -> Optional[FinancialIndicators]:
    """
    Financial indicators from a dict. Missing keys count as 0; a dict with no
    usable number at all, or with a non-numeric value, is treated as absent.
    """
    if not isinstance(data, Mapping) or not data:
        return None

    values = {}
    for key in INDICATOR_FIELDS:
        raw = data.get(key)
        if raw is None:
            values[key] = 0.0
            continue
        if isinstance(raw, bool):
            logger.warning("Financial indicator %s is not a number: %r", key, raw)
            return None
        try:
            values[key] = float(raw)
        except (TypeError, ValueError):
            logger.warning("Financial indicator %s is not a number: %r", key, raw)
            return None

    if all(data.get(key) is None for key in INDICATOR_FIELDS):
        return None
    return FinancialIndicators(**values)


def profile_from_dict(data: Optional[Mapping]) -> BidderProfile:
    """Build a BidderProfile from the YAML profile section (or an API body)."""
    data = data or {}
    capacity = data.get("capacity")
    return BidderProfile(
        name=_text(_pick(data, ("name", "company_name"))),
        category_codes=parse_codes(_pick(data, ("category_codes", "unspsc_codes"))),
        financial_indicators=indicators_from_dict(data.get("financial_indicators")),
        capacity=parse_amount(capacity) if capacity is not None else None,
    )
