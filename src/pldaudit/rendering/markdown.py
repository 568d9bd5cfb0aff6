"""Markdown renderer for the assembled report.

Accepts a DocumentModel and returns the complete Markdown string. No
business logic lives here, only presentation.
"""
from __future__ import annotations

from typing import Protocol

from ..engine.report_assembler import format_date_br
from ..models import (
    ConclusionPart,
    DocumentModel,
    EffectivenessPart,
    EvidenceAnnexPart,
    ExecutionSection,
    IntroductionPart,
    MethodologyPart,
    QuestionCard,
)


class DocumentRenderer(Protocol):
    """Anything that lays out a DocumentModel."""

    def render(self, document: DocumentModel) -> str: ...


# ── Markdown helpers ─────────────────────────────────────────────────────────

def _md_escape(value: object) -> str:
    if value is None:
        return ""
    text = str(value)
    return text.replace("\r", " ").replace("\n", " ").replace("|", "\\|").replace("`", "\\`")


def _bullets(items: list[str]) -> str:
    return "".join(f"- {_md_escape(item)}\n" for item in items)


# ── Parts ────────────────────────────────────────────────────────────────────

def _introduction(part: IntroductionPart) -> str:
    out = f"## {part.title}\n\n"
    for paragraph in part.paragraphs:
        out += f"{paragraph}\n\n"
    return out


def _methodology(part: MethodologyPart) -> str:
    out = f"## {part.title}\n\n{part.lead}\n\n"
    out += _bullets(part.document_checks) + "\n"
    out += _bullets(part.required_documents) + "\n"
    out += _bullets(part.procedures) + "\n"
    out += f"{part.evaluated_items_lead}\n\n"
    out += _bullets(part.evaluated_items) + "\n"
    for paragraph in part.closing:
        out += f"{paragraph}\n\n"

    out += "| Criticidade | Critério |\n|---|---|\n"
    for row in part.criticality_table:
        out += f"| {_md_escape(row.label)} | {_md_escape(row.description)} |\n"
    out += f"\n{part.effectiveness_lead}\n\n"
    out += "| Resultado | Critério |\n|---|---|\n"
    for row in part.effectiveness_table:
        out += f"| {_md_escape(row.label)} | {_md_escape(row.description)} |\n"
    return out + "\n"


def _card(card: QuestionCard) -> str:
    out = f"**{card.ordinal}. {_md_escape(card.text)}**\n\n"
    if not card.is_applicable:
        return out + "> Não aplicável\n\n"
    out += f"- Resposta: {_md_escape(card.response or '-')}\n"
    if card.criticality is not None:
        out += f"- Criticidade: {card.criticality.value}\n"
    if card.show_test_details:
        out += f"- Teste: {_md_escape(card.test_description or '-')}\n"
        out += f"- Requisição: {_md_escape(card.requisition_ref or '-')}\n"
        out += f"- Resposta ao teste: {_md_escape(card.test_response_ref or '-')}\n"
        out += f"- Amostra: {_md_escape(card.sample_ref or '-')}\n"
        out += f"- Evidências: {_md_escape(card.evidence_ref or '-')}\n"
        for group in card.attachment_groups:
            links = ", ".join(f"[{_md_escape(f.name)}]({f.url})" for f in group.files)
            out += f"- {group.label}: {links}\n"
    return out + "\n"


def _execution(title: str, sections: list[ExecutionSection]) -> str:
    out = f"## {title}\n\n"
    for section in sections:
        out += f"### {section.number} {_md_escape(section.label)}\n\n"
        if section.description:
            out += f"{section.description}\n\n"
        for card in section.cards:
            out += _card(card)
        out += f"#### {section.findings_title}\n\n"
        if not section.findings:
            out += f"{section.empty_findings_text}\n\n"
            continue
        for finding in section.findings:
            out += f"{finding.ordinal}. [{finding.criticality.value}] {_md_escape(finding.deficiency_text)}\n"
            if finding.recommendation:
                out += f"   - Recomendação: {_md_escape(finding.recommendation)}\n"
        out += "\n"
    return out


def _conclusion(part: ConclusionPart) -> str:
    out = f"## {part.title}\n\n{part.lead}\n\n"
    out += "| Item | BAIXA | MEDIA | ALTA | Total |\n|---|---:|---:|---:|---:|\n"
    for row in part.rows:
        out += f"| {_md_escape(row.label)} | {row.baixa} | {row.media} | {row.alta} | {row.total} |\n"
    return out + "\n"


def _effectiveness(part: EffectivenessPart) -> str:
    return f"## {part.title}\n\n**{part.verdict.value}**\n\n{part.sentence}\n\n"


def _annex(part: EvidenceAnnexPart) -> str:
    out = f"## {part.title}\n\n{part.lead}\n\n"
    out += "| Item | Arquivos |\n|---|---|\n"
    for row in part.rows:
        links = "<br>".join(f"[{_md_escape(f.name)}]({f.url})" for f in row.files) or "-"
        out += f"| {_md_escape(row.item_label)} | {links} |\n"
    return out


# ── Entry point ──────────────────────────────────────────────────────────────

class MarkdownRenderer:
    """Render a DocumentModel as a single Markdown document."""

    def render(self, document: DocumentModel) -> str:
        md = f"# {document.title}\n\n"
        md += f"*{_md_escape(document.form_name)} · {document.report_type.value} · "
        md += f"gerado em {format_date_br(document.generated_at.date())}*\n\n"

        for name, part in document.parts():
            if name == "introduction":
                md += _introduction(part)
            elif name == "methodology":
                md += _methodology(part)
            elif name == "evaluator":
                md += f"## {part.title}\n\n{part.text or '-'}\n\n"
            elif name == "execution":
                md += _execution(document.execution_title, part)
            elif name == "conclusion":
                md += _conclusion(part)
            elif name == "effectiveness":
                md += _effectiveness(part)
            elif name == "evidence_annex":
                md += _annex(part)
        return md


def render_markdown(document: DocumentModel) -> str:
    return MarkdownRenderer().render(document)
