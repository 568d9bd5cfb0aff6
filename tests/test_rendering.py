"""
Tests for the Markdown renderer.

The renderer only lays out what the assembler decided; these tests check
part order, escaping and the optional blocks.
"""
import pytest
from datetime import datetime, timezone

from pldaudit.engine import EffectivenessScorer, ReportAssembler
from pldaudit.models import Criticality, ReportOptions, Response, TestStatus
from pldaudit.rendering import DocumentRenderer, MarkdownRenderer, render_markdown

from tests.conftest import make_attachment, make_deficient_question, make_question, make_section


@pytest.fixture
def assembler(policy):
    return ReportAssembler(scorer=EffectivenessScorer(policy))


def build(assembler, sections, **kwargs):
    kwargs.setdefault("generated_at", datetime(2025, 6, 30, tzinfo=timezone.utc))
    kwargs.setdefault("base_url", "https://pld.example.com")
    return assembler.assemble("form-1", "PLD | 2025", sections, ReportOptions(**kwargs))


def sample_tree():
    evidence = make_attachment(path="uploads/1700-ev.pdf", original_name="ev.pdf", question_id="q-tested")
    return [
        make_section("Governança", order=0, id="sec-gov", questions=[
            make_question("Existe política?", response=Response.SIM, id="q-tested",
                          test_status=TestStatus.SIM, attachments=[evidence]),
            make_deficient_question("Há treinamento?", criticality=Criticality.MEDIA,
                                    deficiency_text="Treinamento\nausente"),
        ]),
        make_section("Sanções", order=1, id="sec-csnu", questions=[
            make_question("Lista CSNU é verificada?", response=Response.SIM, is_applicable=False),
        ]),
    ]


class TestMarkdownRenderer:

    def test_satisfies_protocol(self):
        renderer: DocumentRenderer = MarkdownRenderer()
        assert hasattr(renderer, "render")

    def test_parts_in_order(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))

        headings = [line for line in md.splitlines() if line.startswith("## ")]
        assert headings == [
            "## 1- Introdução",
            "## 2- Metodologia de Avaliação",
            "## 3- Qualificação do Avaliador",
            "## 4- Execução",
            "## 5- CONCLUSÃO",
            "## Resultado da Avaliação",
            "## 6- ANEXO EVIDÊNCIAS",
        ]
        assert md.startswith("# Relatório PLD\n")

    def test_effectiveness_block_omitted(self, assembler):
        md = render_markdown(build(assembler, sample_tree(), show_effectiveness=False))
        assert "## Resultado da Avaliação" not in md

    def test_escapes_table_and_newlines(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))

        assert "PLD \\| 2025" in md
        assert "[MEDIA] Treinamento ausente" in md

    def test_non_applicable_card(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))
        assert "**1. Lista CSNU é verificada?**\n\n> Não aplicável" in md

    def test_evidence_links(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))

        assert "- Evidências: [ev.pdf](https://pld.example.com/uploads/1700-ev.pdf)" in md
        assert "| 4.1 Governança | [ev.pdf](https://pld.example.com/uploads/1700-ev.pdf) |" in md
        assert "| 4.2 Sanções | - |" in md

    def test_conclusion_rows(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))

        assert "| Governança | 0 | 1 | 0 | 1 |" in md
        assert "| TOTAL | 0 | 1 | 0 | 1 |" in md

    def test_empty_findings_text(self, assembler):
        md = render_markdown(build(assembler, sample_tree()))
        assert "#### 4.2.1 Apontamentos\n\nNenhuma deficiência identificada." in md
