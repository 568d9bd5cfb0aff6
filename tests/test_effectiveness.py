"""
Tests for the effectiveness scorer.

Only applicable ALTA deficiencies count; each domain counts once no matter
how many questions hit it.
"""
import pytest

from pldaudit.engine import EffectivenessScorer, deficiency_context, verdict_for_hits
from pldaudit.models import ComplianceDomain, Criticality, EffectivenessVerdict

from tests.conftest import make_deficient_question, make_question, make_section


def msac_section(criticality=Criticality.ALTA, **kwargs):
    return make_section("Monitoramento", questions=[
        make_deficient_question("Há regras de monitoramento?", criticality=criticality, **kwargs),
    ])


def csnu_section(criticality=Criticality.ALTA):
    return make_section("Sanções CSNU", order=1, questions=[
        make_deficient_question("A lista é verificada diariamente?", criticality=criticality),
    ])


def csc_section(criticality=Criticality.ALTA):
    return make_section("Conheça seu Cliente", order=2, questions=[
        make_deficient_question("O cadastro é atualizado?", criticality=criticality),
    ])


class TestVerdictForHits:

    @pytest.mark.parametrize("hits,verdict", [
        (0, EffectivenessVerdict.EFETIVO),
        (1, EffectivenessVerdict.EFETIVO),
        (2, EffectivenessVerdict.PARCIALMENTE_EFETIVO),
        (3, EffectivenessVerdict.POUCO_EFETIVO),
    ])
    def test_thresholds(self, hits, verdict):
        assert verdict_for_hits(hits) is verdict


class TestEffectivenessScorer:

    def test_no_deficiencies_is_efetivo(self, policy):
        sections = [make_section(questions=[make_question()])]
        result = EffectivenessScorer(policy).evaluate(sections)
        assert result.verdict is EffectivenessVerdict.EFETIVO
        assert result.hit_count == 0
        assert result.sentence == policy.copy_for(EffectivenessVerdict.EFETIVO).sentence

    def test_single_domain_is_still_efetivo(self, policy):
        result = EffectivenessScorer(policy).evaluate([msac_section()])
        assert result.domain_hits[ComplianceDomain.MSAC] is True
        assert result.verdict is EffectivenessVerdict.EFETIVO

    def test_two_domains_partially_effective(self, policy):
        result = EffectivenessScorer(policy).evaluate([msac_section(), csc_section()])
        assert result.domain_hits == {
            ComplianceDomain.MSAC: True,
            ComplianceDomain.CSNU: False,
            ComplianceDomain.CSC: True,
        }
        assert result.verdict is EffectivenessVerdict.PARCIALMENTE_EFETIVO

    def test_three_domains_pouco_efetivo(self, policy):
        result = EffectivenessScorer(policy).evaluate([msac_section(), csnu_section(), csc_section()])
        assert result.verdict is EffectivenessVerdict.POUCO_EFETIVO
        assert result.sentence.startswith("O programa de PLD/FTP não atingiu")

    def test_media_deficiencies_do_not_count(self, policy):
        sections = [
            msac_section(Criticality.MEDIA),
            csnu_section(Criticality.BAIXA),
            csc_section(Criticality.MEDIA),
        ]
        result = EffectivenessScorer(policy).evaluate(sections)
        assert result.hit_count == 0

    def test_non_applicable_alta_does_not_count(self, policy):
        sections = [msac_section(is_applicable=False), csnu_section(), csc_section()]
        result = EffectivenessScorer(policy).evaluate(sections)
        assert result.domain_hits[ComplianceDomain.MSAC] is False
        assert result.verdict is EffectivenessVerdict.PARCIALMENTE_EFETIVO

    def test_domain_counted_once(self, policy):
        section = make_section("Monitoramento", questions=[
            make_deficient_question("Regra 1 de monitoramento"),
            make_deficient_question("Regra 2 de monitoramento"),
        ])
        result = EffectivenessScorer(policy).evaluate([section])
        assert result.hit_count == 1
        assert len(result.triggers[ComplianceDomain.MSAC]) == 2

    def test_keyword_in_deficiency_text_matches(self, policy):
        section = make_section("Governança", questions=[
            make_deficient_question(deficiency_text="Falhas no processo KYC"),
        ])
        result = EffectivenessScorer(policy).evaluate([section])
        assert result.domain_hits[ComplianceDomain.CSC] is True

    def test_deterministic(self, policy):
        sections = [msac_section(), csnu_section()]
        scorer = EffectivenessScorer(policy)
        assert scorer.evaluate(sections) == scorer.evaluate(sections)

    def test_adding_domains_never_improves_verdict(self, policy):
        ranking = [
            EffectivenessVerdict.EFETIVO,
            EffectivenessVerdict.PARCIALMENTE_EFETIVO,
            EffectivenessVerdict.POUCO_EFETIVO,
        ]
        scorer = EffectivenessScorer(policy)
        sections = [make_section(questions=[make_question()])]
        seen = [scorer.evaluate(sections).verdict]
        for build in (msac_section, csnu_section, csc_section):
            sections = sections + [build()]
            seen.append(scorer.evaluate(sections).verdict)
            # a repeated hit in an already counted domain changes nothing
            assert scorer.evaluate(sections + [build()]).verdict is seen[-1]

        assert seen == [
            EffectivenessVerdict.EFETIVO,
            EffectivenessVerdict.EFETIVO,
            EffectivenessVerdict.PARCIALMENTE_EFETIVO,
            EffectivenessVerdict.POUCO_EFETIVO,
        ]
        ranks = [ranking.index(v) for v in seen]
        assert ranks == sorted(ranks)
        assert all(later - earlier <= 1 for earlier, later in zip(ranks, ranks[1:]))


class TestDeficiencyContext:

    def test_context_is_normalized(self):
        section = make_section("Análise", custom_label="Comunicação")
        question = make_question("Há SELEÇÃO de alertas?")
        context = deficiency_context(section, question)
        assert "analise - comunicacao" in context
        assert "selecao" in context
