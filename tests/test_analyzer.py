"""
Tests for the analyze() entry point: the four reference scenarios, the
score/match invariants and the hint override semantics.
"""

import itertools

import pytest

from matching.advice import CLOSED, EXCELLENT
from matching.analyzer import AnalyzedTender, MatchAnalysis, analyze, analyze_all
from matching.classifier import NON_CORPORATE_WARNING
from matching.hints import ClassificationHint
from matching.pillars import FINANCIAL_NO_DATA, FINANCIAL_NO_K
from procurement.models import BidderProfile, ContractRecord, FinancialIndicators

PERSONAL = "Prestación de servicios profesionales de apoyo a la gestión"


@pytest.mark.unit
class TestScenarios:

    def test_a_full_match_is_capped_at_100(self, make_tender, make_profile):
        tender = make_tender(category_codes=("V1.80111601",), budget=50_000_000)
        profile = make_profile(category_codes=("80111600",), capacity=100_000_000)
        history = [
            ContractRecord(value=20_000_000, category_codes=("80111600",)),
            ContractRecord(value=25_000_000, category_codes=("80111650",)),
        ]
        result = analyze(tender, profile, history)

        assert result.score == 100
        assert result.match is True
        assert result.corporate is True
        assert result.actionable is True
        assert result.warnings == ()
        assert result.advice == EXCELLENT

    def test_b_missing_indicators_warn_not_configured(self, base_tender):
        profile = BidderProfile(category_codes=("80111600",))
        result = analyze(base_tender, profile)

        assert FINANCIAL_NO_DATA in result.warnings
        assert not any("short of the budget" in w for w in result.warnings)

    def test_c_closed_phase_never_actionable(self, make_tender, profile, contracts):
        tender = make_tender(phase="Adjudicado")
        result = analyze(tender, profile, contracts)

        assert result.score == 100
        assert result.actionable is False
        assert result.advice == CLOSED.format(phase="Adjudicado")

    def test_d_personal_services_penalised(self, make_tender, profile, contracts):
        tender = make_tender(contract_type="Prestación de servicios", description=PERSONAL)
        result = analyze(tender, profile, contracts)

        assert result.corporate is False
        assert result.score == 65      # 105 raw, minus 40
        assert result.match is False   # never a match when not corporate
        assert result.warnings[-1] == NON_CORPORATE_WARNING


@pytest.mark.unit
class TestInvariants:

    @pytest.mark.parametrize(
        "legal, financial, experience, location, corporate",
        list(itertools.product([True, False], repeat=5)),
    )
    def test_every_pillar_combination(
        self, make_tender, make_profile, legal, financial, experience, location, corporate,
    ):
        tender = make_tender(
            region="Huila" if location else "",
            city="",
            contract_type="Obra" if corporate else "Prestación de servicios",
            description="Pavimentación" if corporate else PERSONAL,
        )
        profile = make_profile(
            category_codes=("80111600",) if legal else ("43211500",),
            capacity=100_000_000 if financial else 10_000_000,
        )
        history = [ContractRecord(value=1, category_codes=("80111699",))] if experience else []

        result = analyze(tender, profile, history)

        raw = 30 * legal + 30 * financial + 40 * experience + 5 * location
        penalized = raw if corporate else max(0, raw - 40)
        expected = min(penalized, 100)

        assert 0 <= result.score <= 100
        assert result.score == expected
        assert result.corporate is corporate
        assert result.match == (corporate and result.score >= 60)

    @pytest.mark.parametrize("region, raw", [("Huila", 105), ("", 100)])
    def test_penalty_subtracts_40_from_the_raw_total(self, make_tender, profile, contracts, region, raw):
        tender = make_tender(region=region, city="")
        corporate = analyze(tender, profile, contracts)
        personal = analyze(tender, profile, contracts, ClassificationHint(corporate=False))
        assert corporate.score == 100
        assert personal.score == raw - 40

    def test_penalty_never_goes_negative(self, make_tender, make_profile):
        tender = make_tender(contract_type="", description=PERSONAL, region="", city="")
        result = analyze(tender, make_profile(category_codes=(), capacity=None))
        assert result.score == 0

    def test_result_is_immutable(self, base_tender, profile):
        result = analyze(base_tender, profile)
        with pytest.raises(AttributeError):
            result.score = 5

    def test_same_inputs_same_result(self, base_tender, profile, contracts):
        assert analyze(base_tender, profile, contracts) == analyze(base_tender, profile, contracts)

    def test_to_dict(self, base_tender, profile):
        data = analyze(base_tender, profile).to_dict()
        assert set(data) == {"score", "match", "reasons", "warnings", "advice", "corporate", "actionable"}
        assert isinstance(data["reasons"], list)


@pytest.mark.unit
class TestHintOverrides:

    @pytest.mark.parametrize("value", [True, False])
    def test_corporate_present(self, make_tender, profile, value):
        for tender in (make_tender(), make_tender(contract_type="Otro", description=PERSONAL)):
            result = analyze(tender, profile, hint=ClassificationHint(corporate=value))
            assert result.corporate is value

    def test_corporate_absent(self, make_tender, profile):
        tender = make_tender(contract_type="Otro", description=PERSONAL)
        assert analyze(tender, profile, hint=ClassificationHint()).corporate is False
        assert analyze(make_tender(), profile, hint=ClassificationHint()).corporate is True

    @pytest.mark.parametrize("value", [True, False])
    def test_actionable_present(self, make_tender, profile, value):
        for tender in (make_tender(), make_tender(phase="Celebrado")):
            result = analyze(tender, profile, hint=ClassificationHint(actionable=value))
            assert result.actionable is value

    def test_actionable_absent(self, make_tender, profile):
        assert analyze(make_tender(), profile, hint=ClassificationHint()).actionable is True
        assert analyze(make_tender(phase="Celebrado"), profile,
                       hint=ClassificationHint()).actionable is False

    def test_advice_present(self, base_tender, profile):
        result = analyze(base_tender, profile, hint=ClassificationHint(advice="Bid with a partner."))
        assert result.advice == "Bid with a partner."

    def test_advice_absent(self, base_tender, profile):
        plain = analyze(base_tender, profile)
        assert analyze(base_tender, profile, hint=ClassificationHint()).advice == plain.advice

    def test_raw_mapping_hint(self, base_tender, profile):
        result = analyze(base_tender, profile, hint={"corporate": False, "actionable": "yes"})
        assert result.corporate is False
        assert result.actionable is True   # malformed field treated as absent

    def test_corporate_hint_removes_penalty(self, make_tender, profile, contracts):
        tender = make_tender(contract_type="Otro", description=PERSONAL)
        result = analyze(tender, profile, contracts, ClassificationHint(corporate=True))
        assert result.score == 100
        assert NON_CORPORATE_WARNING not in result.warnings


@pytest.mark.unit
class TestDegradedInputs:

    def test_empty_everything(self):
        result = analyze({}, None)
        assert isinstance(result, MatchAnalysis)
        assert result.score == 0
        assert result.match is False
        assert result.actionable is False
        assert "Iniciada" in result.advice

    def test_non_mapping_tender(self):
        assert analyze("not a tender", None).score == 0

    def test_raw_feed_row(self, profile):
        row = {
            "id_del_proceso": "CO1.REQ.77",
            "precio_base": "50000000",
            "tipo_de_contrato": "Suministro",
            "fase": "Presentación de oferta",
            "departamento_entidad": "Cundinamarca",
            "codigo_principal_de_categoria": "V1.80111620",
            "urlproceso": {"url": "https://community.secop.gov.co/x"},
        }
        result = analyze(row, profile, [{"unspsc_codes": ["80111600"], "contract_value": "1000"}])
        assert result.score == 100
        assert result.match

    def test_invalid_budget_fails_financial_only(self, make_tender, profile):
        result = analyze(make_tender(budget=None), profile)
        assert result.score == 35
        assert any("usable budget" in w for w in result.warnings)

    def test_failing_capacity_source(self, base_tender, indicators):
        def broken(_):
            raise ZeroDivisionError("bad indicators")

        profile = BidderProfile(category_codes=("80111600",), financial_indicators=indicators)
        result = analyze(base_tender, profile, capacity_source=broken)
        assert FINANCIAL_NO_K in result.warnings

    def test_tiny_budget_does_not_overflow(self, profile, contracts):
        row = {
            "id_del_proceso": "CO1.REQ.88",
            "precio_base": "1e-300",
            "tipo_de_contrato": "Obra",
            "fase": "Presentación de oferta",
            "codigo_principal_de_categoria": "V1.80111601",
        }
        result = analyze(row, profile, contracts)
        assert result.score == 100
        assert any(r.startswith("Financial pillar: contracting capacity is sufficient")
                   for r in result.reasons)

    def test_overflowing_indicators_mean_no_capacity(self, base_tender):
        huge = FinancialIndicators(
            liquidity_index=2.0, indebtedness_index=0.1, working_capital=1e308, equity=1e308,
        )
        profile = BidderProfile(category_codes=("80111600",), financial_indicators=huge)
        result = analyze(base_tender, profile)
        assert FINANCIAL_NO_K in result.warnings
        assert result.score == 35

    @pytest.mark.parametrize("capacity", [float("inf"), float("nan")])
    def test_non_finite_capacity_source(self, base_tender, indicators, capacity):
        profile = BidderProfile(category_codes=("80111600",), financial_indicators=indicators)
        result = analyze(base_tender, profile, capacity_source=lambda _: capacity)
        assert FINANCIAL_NO_K in result.warnings
        assert 0 <= result.score <= 100

    def test_capacity_derived_from_indicators(self, base_tender, indicators):
        profile = BidderProfile(category_codes=("80111600",), financial_indicators=indicators)
        result = analyze(base_tender, profile)
        assert any(r.startswith("Financial pillar: contracting capacity is sufficient")
                   for r in result.reasons)

    def test_malformed_contracts_skipped(self, base_tender, profile):
        history = [None, "junk", ContractRecord(category_codes=None),
                   ContractRecord(value=1, category_codes=("80111600",))]
        assert analyze(base_tender, profile, history).score == 100


@pytest.mark.unit
class TestAnalyzeAll:

    def _tenders(self, make_tender):
        return [
            make_tender(tender_id=f"T-{i}", budget=float(10_000_000 * (i + 1)))
            for i in range(15)
        ]

    def test_preserves_input_order(self, make_tender, profile, contracts):
        tenders = self._tenders(make_tender)
        results = analyze_all(tenders, profile, contracts)
        assert [r.tender.tender_id for r in results] == [t.tender_id for t in tenders]
        assert all(isinstance(r, AnalyzedTender) for r in results)

    def test_parallel_matches_sequential(self, make_tender, profile, contracts):
        tenders = self._tenders(make_tender)
        assert analyze_all(tenders, profile, contracts, max_workers=4) == \
            analyze_all(tenders, profile, contracts)

    def test_hints_looked_up_by_id(self, make_tender, profile):
        tenders = [make_tender(tender_id="A"), make_tender(tender_id="B")]
        results = analyze_all(tenders, profile, hints={"B": ClassificationHint(actionable=False)})
        assert [r.analysis.actionable for r in results] == [True, False]

    def test_contract_snapshot_taken_once(self, make_tender, profile):
        history = [ContractRecord(value=1, category_codes=("80111600",))]
        tenders = [make_tender(tender_id=str(i)) for i in range(3)]
        results = analyze_all(iter(tenders), profile, iter(history))
        assert all(r.analysis.score == 100 for r in results)
