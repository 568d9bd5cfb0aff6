"""
Tests for deficiency classification and aggregation.

Tests cover:
- Response and criticality normalization
- Deficiency predicate (applicability honored)
- Per-section/per-criticality conclusion table
"""
import pytest

from pldaudit.engine import (
    aggregate_by_section_and_criticality,
    collect_deficiencies,
    is_deficiency,
    normalize_criticality,
    parse_response,
)
from pldaudit.models import Criticality, Response

from tests.conftest import make_deficient_question, make_question, make_section


class TestNormalization:

    @pytest.mark.parametrize("raw", ["Não", "não", "NAO", "nao", "n", " N "])
    def test_negative_spellings(self, raw):
        assert parse_response(raw) is Response.NAO

    @pytest.mark.parametrize("raw", ["Sim", "SIM", "s"])
    def test_positive_spellings(self, raw):
        assert parse_response(raw) is Response.SIM

    def test_unknown_response_is_empty(self):
        assert parse_response("talvez") is Response.EMPTY
        assert parse_response(None) is Response.EMPTY

    def test_criticality_accepts_accented_media(self):
        assert normalize_criticality("MÉDIA") is Criticality.MEDIA
        assert normalize_criticality("alta") is Criticality.ALTA

    def test_unknown_criticality_is_none(self):
        assert normalize_criticality("CRITICA") is None
        assert normalize_criticality("") is None


class TestIsDeficiency:

    def test_nao_with_criticality(self):
        assert is_deficiency("Não", "ALTA") is True

    def test_nao_without_criticality_is_not_deficiency(self):
        """Unadjudicated answers do not count."""
        assert is_deficiency("Não", None) is False
        assert is_deficiency("Não", "") is False

    def test_sim_is_never_deficiency(self):
        assert is_deficiency("Sim", "ALTA") is False

    def test_not_applicable_is_never_deficiency(self):
        assert is_deficiency("Não", "ALTA", applicable=False) is False


class TestAggregation:

    def test_counts_per_section_and_total(self):
        sections = [
            make_section("Governança", order=0, questions=[
                make_deficient_question(criticality=Criticality.ALTA),
                make_deficient_question(criticality=Criticality.BAIXA),
                make_question(response=Response.SIM),
            ]),
            make_section("Treinamento", order=1, questions=[
                make_deficient_question(criticality=Criticality.MEDIA),
            ]),
        ]

        rows = aggregate_by_section_and_criticality(sections)

        assert [r.label for r in rows] == ["Governança", "Treinamento", "TOTAL"]
        assert (rows[0].baixa, rows[0].media, rows[0].alta, rows[0].total) == (1, 0, 1, 2)
        assert (rows[1].baixa, rows[1].media, rows[1].alta) == (0, 1, 0)
        assert rows[-1].to_dict() == {
            "label": "TOTAL", "baixa": 1, "media": 1, "alta": 1, "total": 3,
        }

    def test_total_equals_sum_of_rows(self):
        sections = [
            make_section(f"Item {i}", order=i, questions=[
                make_deficient_question(criticality=c)
                for c in (Criticality.ALTA, Criticality.MEDIA)[: i % 3]
            ])
            for i in range(4)
        ]
        rows = aggregate_by_section_and_criticality(sections)
        assert rows[-1].total == sum(r.total for r in rows[:-1])

    def test_non_applicable_questions_are_skipped(self):
        section = make_section(questions=[
            make_deficient_question(is_applicable=False),
        ])
        rows = aggregate_by_section_and_criticality([section])
        assert rows[-1].total == 0

    def test_sections_follow_sort_order(self):
        sections = [
            make_section("B", order=1),
            make_section("A", order=0),
        ]
        rows = aggregate_by_section_and_criticality(sections)
        assert [r.label for r in rows[:-1]] == ["A", "B"]


class TestCollectDeficiencies:

    def test_blank_deficiency_text_becomes_dash(self):
        section = make_section(questions=[make_deficient_question(deficiency_text="  ")])
        [found] = collect_deficiencies([section])
        assert found.deficiency_text == "-"
        assert found.section_id == section.id

    def test_order_follows_sections_then_questions(self):
        first = make_deficient_question(text="primeira")
        second = make_deficient_question(text="segunda")
        third = make_deficient_question(text="terceira")
        sections = [
            make_section("B", order=1, questions=[third]),
            make_section("A", order=0, questions=[first, second]),
        ]
        found = collect_deficiencies(sections)
        assert [d.question_text for d in found] == ["primeira", "segunda", "terceira"]
