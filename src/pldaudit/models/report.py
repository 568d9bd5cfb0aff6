"""
pldaudit Report Document Model

Renderer-agnostic description of the effectiveness evaluation report.
Renderers (Markdown here, paginated/fixed-layout elsewhere) only lay these
parts out; every decision about content and order is made upstream.

Part order is fixed:
1. Introduction
2. Methodology
3. Evaluator qualification
4. Execution (one entry per section)
5. Conclusion table
6. Effectiveness verdict (optional)
7. Evidence annex
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from .enums import ComplianceDomain, Criticality, EffectivenessVerdict, ReportType
from .form import Institution


# =============================================================================
# Options
# =============================================================================

@dataclass
class ReportOptions:
    """
    Inputs to report assembly besides the section tree.

    Attributes:
        report_type: FULL or PARTIAL
        section_ids: Restrict the report to these sections (None = all)
        privileged: Caller may see section descriptions
        include_recommendations: Show recommendation text in findings
        show_effectiveness: Emit the verdict block
        institutions: Evaluated institutions
        evaluator_qualification: Free text, verbatim
        as_of: Date the evaluated program was in force
        base_url: Public base URL for evidence links
        generated_at: Timestamp recorded on the document
    """
    report_type: ReportType = ReportType.PARTIAL
    section_ids: Optional[list[str]] = None
    privileged: bool = False
    include_recommendations: bool = True
    show_effectiveness: bool = True
    institutions: list[Institution] = field(default_factory=list)
    evaluator_qualification: str = ""
    as_of: Optional[date] = None
    base_url: str = "http://localhost:3001"
    generated_at: Optional[datetime] = None


# =============================================================================
# Parts 1-3
# =============================================================================

@dataclass
class CriteriaRow:
    label: str
    description: str


@dataclass
class IntroductionPart:
    title: str
    paragraphs: list[str]
    institutions: list[Institution]
    institutions_inline: str
    as_of: date


@dataclass
class MethodologyPart:
    title: str
    lead: str
    document_checks: list[str]
    required_documents: list[str]
    procedures: list[str]
    evaluated_items_lead: str
    evaluated_items: list[str]
    closing: list[str]
    criticality_table: list[CriteriaRow]
    effectiveness_lead: str
    effectiveness_table: list[CriteriaRow]


@dataclass
class EvaluatorPart:
    title: str
    text: str


# =============================================================================
# Part 4: Execution
# =============================================================================

@dataclass
class AttachmentRef:
    """File reference as shown in a question card or the annex."""
    category: str
    name: str
    path: str
    url: str


@dataclass
class AttachmentGroup:
    label: str
    files: list[AttachmentRef]


@dataclass
class QuestionCard:
    """
    Summary of one question's test execution.

    Test fields and attachment groups are meaningful only when
    show_test_details is true (test status SIM).
    """
    ordinal: int
    question_id: str
    text: str
    is_applicable: bool
    response: str
    criticality: Optional[Criticality]
    show_test_details: bool
    test_status: Optional[str]
    test_description: str
    requisition_ref: str
    test_response_ref: str
    sample_ref: str
    evidence_ref: str
    attachment_groups: list[AttachmentGroup] = field(default_factory=list)


@dataclass
class Finding:
    ordinal: int
    question_id: str
    deficiency_text: str
    criticality: Criticality
    recommendation: Optional[str] = None


@dataclass
class ExecutionSection:
    """
    Execution entry for one section.

    empty_findings_text is set exactly when findings is empty.
    """
    number: str
    label: str
    description: Optional[str]
    cards: list[QuestionCard]
    findings_title: str
    findings: list[Finding]
    empty_findings_text: Optional[str] = None


# =============================================================================
# Parts 5-7
# =============================================================================

@dataclass
class ConclusionRow:
    """Deficiency counts for one section, or the TOTAL row."""
    label: str
    baixa: int = 0
    media: int = 0
    alta: int = 0

    @property
    def total(self) -> int:
        return self.baixa + self.media + self.alta

    def add(self, criticality: Criticality) -> None:
        if criticality is Criticality.BAIXA:
            self.baixa += 1
        elif criticality is Criticality.MEDIA:
            self.media += 1
        else:
            self.alta += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "baixa": self.baixa,
            "media": self.media,
            "alta": self.alta,
            "total": self.total,
        }


@dataclass
class ConclusionPart:
    title: str
    lead: str
    rows: list[ConclusionRow]

    @property
    def total_row(self) -> ConclusionRow:
        return self.rows[-1]


@dataclass
class EffectivenessPart:
    title: str
    verdict: EffectivenessVerdict
    sentence: str
    domain_hits: dict[ComplianceDomain, bool]


@dataclass
class AnnexRow:
    item_label: str
    files: list[AttachmentRef]


@dataclass
class EvidenceAnnexPart:
    title: str
    lead: str
    rows: list[AnnexRow]


# =============================================================================
# Document
# =============================================================================

@dataclass
class DocumentModel:
    """The assembled report, ready for any renderer."""
    title: str
    form_id: str
    form_name: str
    report_type: ReportType
    generated_at: datetime
    introduction: IntroductionPart
    methodology: MethodologyPart
    evaluator: EvaluatorPart
    execution_title: str
    execution: list[ExecutionSection]
    conclusion: ConclusionPart
    effectiveness: Optional[EffectivenessPart]
    evidence_annex: EvidenceAnnexPart

    def parts(self) -> list[tuple[str, Any]]:
        """Parts in document order; the verdict is omitted when disabled."""
        ordered: list[tuple[str, Any]] = [
            ("introduction", self.introduction),
            ("methodology", self.methodology),
            ("evaluator", self.evaluator),
            ("execution", self.execution),
            ("conclusion", self.conclusion),
        ]
        if self.effectiveness is not None:
            ordered.append(("effectiveness", self.effectiveness))
        ordered.append(("evidence_annex", self.evidence_annex))
        return ordered

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict (enums and dates are left for canonical_json)."""
        data = asdict(self)
        data["conclusion"]["rows"] = [row.to_dict() for row in self.conclusion.rows]
        if self.effectiveness is not None:
            data["effectiveness"]["domain_hits"] = {
                domain.value: hit for domain, hit in self.effectiveness.domain_hits.items()
            }
        return data
