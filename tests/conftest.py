"""Shared pytest fixtures: tender, profile and contract builders."""
from dataclasses import replace

import pytest

from procurement.models import BidderProfile, ContractRecord, FinancialIndicators, TenderRecord

OPEN_PHASE = "Presentación de oferta"


@pytest.fixture
def base_tender():
    """An open, corporate works process in category 8011 for 50M COP."""
    return TenderRecord(
        tender_id="CO1.REQ.1001",
        reference="LP-001-2024",
        entity="Alcaldía de Neiva",
        region="Huila",
        city="Neiva",
        budget=50_000_000.0,
        budget_raw="50000000",
        contract_type="Obra",
        modality="Licitación pública",
        phase=OPEN_PHASE,
        status="Publicado",
        category_codes=("V1.80111601",),
        description="Mejoramiento de la vía terciaria del municipio",
        url="https://community.secop.gov.co/Public/Tendering/OpportunityDetail/Index?noticeUID=CO1.NTC.1",
    )


@pytest.fixture
def make_tender(base_tender):
    def _make(**overrides):
        return replace(base_tender, **overrides)
    return _make


@pytest.fixture
def indicators():
    return FinancialIndicators(
        liquidity_index=1.8,
        indebtedness_index=0.35,
        working_capital=400_000_000,
        equity=900_000_000,
    )


@pytest.fixture
def profile():
    """Registered in 8011 with a fixed capacity of 100M COP."""
    return BidderProfile(
        name="Constructora Andina S.A.S.",
        category_codes=("80111600",),
        capacity=100_000_000.0,
    )


@pytest.fixture
def make_profile(profile):
    def _make(**overrides):
        return replace(profile, **overrides)
    return _make


@pytest.fixture
def contracts():
    """Two past contracts in category 8011, one in an unrelated category."""
    return [
        ContractRecord(contract_id="C-1", value=30_000_000, category_codes=("80111600",)),
        ContractRecord(contract_id="C-2", value=45_000_000, category_codes=("80111500",)),
        ContractRecord(contract_id="C-3", value=12_000_000, category_codes=("43211500",)),
    ]
