"""
Report Assembler

Builds the renderer-agnostic DocumentModel from a resolved section tree.

Assembly is all-or-nothing: structural problems raise InvalidContentError
and an incomplete FULL report raises IncompleteAssessmentError before any
part is built. Who may request a report is decided by the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from ..config import normalize_base_url
from ..exceptions import IncompleteAssessmentError, InvalidContentError
from ..models import (
    AnnexRow,
    Attachment,
    AttachmentCategory,
    AttachmentGroup,
    AttachmentRef,
    ConclusionPart,
    CriteriaRow,
    DocumentModel,
    EffectivenessPart,
    EffectivenessVerdict,
    EvaluatorPart,
    EvidenceAnnexPart,
    ExecutionSection,
    Finding,
    IntroductionPart,
    MethodologyPart,
    Question,
    QuestionCard,
    ReportOptions,
    ReportType,
    Section,
)
from . import report_text as text
from .classification import aggregate_by_section_and_criticality, collect_deficiencies
from .effectiveness import EffectivenessScorer
from .progress import calculate_progress

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def format_date_br(value: Optional[date]) -> str:
    """DD/MM/AAAA, or "-"."""
    return value.strftime("%d/%m/%Y") if value else "-"


def build_evidence_link(attachment: Attachment, base_url: str) -> str:
    """
    Public link to a stored file.

    Paths containing "uploads/" are linked from that segment on. Any other
    stored path is taken as relative to uploads/, falling back to the bare
    filename when no path was recorded.
    """
    normalized = (attachment.path or "").replace("\\", "/")
    index = normalized.lower().find("uploads/")
    if index >= 0:
        relative = normalized[index:]
    else:
        stored = (normalized or attachment.filename or "").lstrip("/")
        relative = f"uploads/{stored}"
    return f"{normalize_base_url(base_url)}/{relative}"


def _attachment_ref(attachment: Attachment, base_url: str) -> AttachmentRef:
    return AttachmentRef(
        category=attachment.category.value,
        name=attachment.display_name,
        path=attachment.path,
        url=build_evidence_link(attachment, base_url),
    )


def _dedupe(attachments: Iterable[Attachment], *fields: str) -> list[Attachment]:
    """
    Drop duplicates by the given fields.

    The first occurrence keeps its position; the last one wins the value.
    """
    unique: dict[tuple, Attachment] = {}
    for att in attachments:
        key = tuple(
            att.category.value if name == "category" else getattr(att, name)
            for name in fields
        )
        unique[key] = att
    return list(unique.values())


def check_structure(sections: Optional[list[Section]], form_id: str) -> list[Section]:
    """Reject content that cannot be laid out."""
    if sections is None:
        raise InvalidContentError(
            message="Conteúdo do formulário inválido",
            details={"reason": "missing"},
            entity_id=form_id,
        )
    problems: list[str] = []
    for section in sections:
        if not isinstance(section, Section):
            problems.append(f"Not a section: {type(section).__name__}")
            continue
        for question in section.questions:
            if not isinstance(question, Question):
                problems.append(f"Section '{section.id}' holds a non-question entry")
            elif question.section_id != section.id:
                problems.append(
                    f"Question '{question.id}' belongs to '{question.section_id}', "
                    f"found under '{section.id}'"
                )
    if problems:
        raise InvalidContentError(
            message="Conteúdo do formulário inválido",
            details={"reason": "structure", "errors": problems},
            entity_id=form_id,
        )
    return sorted(sections, key=lambda s: s.order)


# =============================================================================
# Assembler
# =============================================================================

@dataclass
class ReportAssembler:
    """
    Assembles the effectiveness evaluation report.

    Usage:
        assembler = ReportAssembler(scorer=EffectivenessScorer(policy))
        model = assembler.assemble("form-1", "PLD 2025", sections, ReportOptions())
    """

    scorer: EffectivenessScorer

    def assemble(
        self,
        form_id: str,
        form_name: str,
        sections: Optional[list[Section]],
        options: ReportOptions,
    ) -> DocumentModel:
        """
        Build the document model.

        Args:
            form_id: Form being reported
            form_name: Display name of the form
            sections: Resolved tree (answers overlaid), or None if missing
            options: Report type, toggles and metadata

        Raises:
            InvalidContentError: If the tree is missing or malformed
            IncompleteAssessmentError: If FULL and not every applicable
                question is answered
        """
        ordered = check_structure(sections, form_id)
        if options.section_ids is not None:
            wanted = set(options.section_ids)
            ordered = [s for s in ordered if s.id in wanted]

        if options.report_type is ReportType.FULL:
            progress = calculate_progress(ordered)
            if not progress.is_complete:
                raise IncompleteAssessmentError(
                    message=(
                        f"Full report requires every applicable question answered "
                        f"({progress.answered}/{progress.applicable})"
                    ),
                    details={
                        "answered": progress.answered,
                        "applicable": progress.applicable,
                        "percent": progress.percent,
                    },
                    entity_id=form_id,
                )

        generated_at = options.generated_at or datetime.now(timezone.utc)
        as_of = options.as_of or generated_at.date()

        model = DocumentModel(
            title=text.REPORT_TITLE,
            form_id=form_id,
            form_name=form_name,
            report_type=options.report_type,
            generated_at=generated_at,
            introduction=self._introduction(options, as_of),
            methodology=self._methodology(ordered),
            evaluator=EvaluatorPart(
                title=text.EVALUATOR_TITLE,
                text=(options.evaluator_qualification or "").strip() or "-",
            ),
            execution_title=text.EXECUTION_TITLE,
            execution=self._execution(ordered, options),
            conclusion=ConclusionPart(
                title=text.CONCLUSION_TITLE,
                lead=text.CONCLUSION_LEAD,
                rows=aggregate_by_section_and_criticality(ordered),
            ),
            effectiveness=self._effectiveness(ordered) if options.show_effectiveness else None,
            evidence_annex=self._annex(ordered, options.base_url),
        )
        logger.info(
            "Assembled %s report for form %s (%d sections)",
            options.report_type.value, form_id, len(ordered),
        )
        return model

    # -------------------------------------------------------------------------
    # Parts
    # -------------------------------------------------------------------------

    def _introduction(self, options: ReportOptions, as_of: date) -> IntroductionPart:
        inline = ", ".join(i.inline for i in options.institutions) or "-"
        return IntroductionPart(
            title=text.INTRODUCTION_TITLE,
            paragraphs=[
                text.INTRODUCTION_LEGAL_BASIS,
                text.INTRODUCTION_SCOPE.format(institutions=inline),
                text.INTRODUCTION_NAMING,
                text.INTRODUCTION_CONTENTS,
                text.INTRODUCTION_AS_OF.format(as_of=format_date_br(as_of)),
            ],
            institutions=list(options.institutions),
            institutions_inline=inline,
            as_of=as_of,
        )

    def _methodology(self, sections: list[Section]) -> MethodologyPart:
        policy = self.scorer.policy
        return MethodologyPart(
            title=text.METHODOLOGY_TITLE,
            lead=text.METHODOLOGY_LEAD,
            document_checks=list(text.METHODOLOGY_DOCUMENT_CHECKS),
            required_documents=list(text.METHODOLOGY_REQUIRED_DOCUMENTS),
            procedures=list(text.METHODOLOGY_PROCEDURES),
            evaluated_items_lead=text.METHODOLOGY_ITEMS_LEAD,
            evaluated_items=[f"{i + 1}. {s.label}" for i, s in enumerate(sections)],
            closing=list(text.METHODOLOGY_CLOSING),
            criticality_table=[CriteriaRow(label, desc) for label, desc in text.CRITICALITY_CRITERIA],
            effectiveness_lead=text.EFFECTIVENESS_CRITERIA_LEAD,
            effectiveness_table=[
                CriteriaRow(verdict.value, policy.copy_for(verdict).criterion)
                for verdict in EffectivenessVerdict
            ],
        )

    def _execution(self, sections: list[Section], options: ReportOptions) -> list[ExecutionSection]:
        deficiencies = collect_deficiencies(sections)
        entries: list[ExecutionSection] = []
        for index, section in enumerate(sections):
            number = f"{text.EXECUTION_PREFIX}.{index + 1}"
            findings = [
                Finding(
                    ordinal=n + 1,
                    question_id=d.question_id,
                    deficiency_text=d.deficiency_text,
                    criticality=d.criticality,
                    recommendation=(
                        d.recommendation
                        if options.include_recommendations and d.recommendation
                        else None
                    ),
                )
                for n, d in enumerate(x for x in deficiencies if x.section_id == section.id)
            ]
            entries.append(ExecutionSection(
                number=number,
                label=section.label,
                description=(section.description or "-") if options.privileged else None,
                cards=[
                    self._card(i + 1, q, options.base_url)
                    for i, q in enumerate(sorted(section.questions, key=lambda q: q.order))
                ],
                findings_title=f"{number}.1 {text.FINDINGS_TITLE}",
                findings=findings,
                empty_findings_text=None if findings else text.NO_FINDINGS_TEXT,
            ))
        return entries

    def _card(self, ordinal: int, question: Question, base_url: str) -> QuestionCard:
        show = question.test.was_executed
        groups: list[AttachmentGroup] = []
        if show:
            unique = _dedupe(question.attachments, "category", "path")
            for label, category in text.ATTACHMENT_GROUPS:
                files = [
                    _attachment_ref(a, base_url)
                    for a in unique
                    if a.category is AttachmentCategory(category)
                ]
                if files:
                    groups.append(AttachmentGroup(label=label, files=files))
        return QuestionCard(
            ordinal=ordinal,
            question_id=question.id,
            text=question.text,
            is_applicable=question.is_applicable,
            response=question.response.value,
            criticality=question.criticality,
            show_test_details=show,
            test_status=question.test.status.value if question.test.status else None,
            test_description=question.test.description or "-",
            requisition_ref=question.test.requisition_ref or "-",
            test_response_ref=question.test.response_ref or "-",
            sample_ref=question.test.sample_ref or "-",
            evidence_ref=question.test.evidence_ref or "-",
            attachment_groups=groups,
        )

    def _effectiveness(self, sections: list[Section]) -> EffectivenessPart:
        result = self.scorer.evaluate(sections)
        return EffectivenessPart(
            title=text.EFFECTIVENESS_TITLE,
            verdict=result.verdict,
            sentence=result.sentence,
            domain_hits=result.domain_hits,
        )

    def _annex(self, sections: list[Section], base_url: str) -> EvidenceAnnexPart:
        rows: list[AnnexRow] = []
        for index, section in enumerate(sections):
            reachable = list(section.attachments)
            for question in sorted(section.questions, key=lambda q: q.order):
                reachable.extend(question.attachments)
            unique = _dedupe(reachable, "category", "path", "original_name", "filename")
            rows.append(AnnexRow(
                item_label=f"{text.EXECUTION_PREFIX}.{index + 1} {section.label}",
                files=[_attachment_ref(a, base_url) for a in unique],
            ))
        return EvidenceAnnexPart(title=text.ANNEX_TITLE, lead=text.ANNEX_LEAD, rows=rows)
