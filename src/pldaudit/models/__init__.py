"""
pldaudit domain models.

Re-exports all model classes for convenient importing:
    from pldaudit.models import Section, Question, WorkflowStatus
"""
from .enums import (
    AttachmentCategory,
    ComplianceDomain,
    Criticality,
    EffectivenessVerdict,
    ReportType,
    Response,
    Role,
    TestStatus,
    WorkflowAction,
    WorkflowStatus,
)
from .assessment import (
    Answer,
    Attachment,
    CorrectiveAction,
    Question,
    Section,
    TestExecution,
)
from .form import (
    Form,
    FormArchive,
    FormMetadata,
    Institution,
    User,
)
from .policy import (
    DomainRule,
    EffectivenessPolicy,
    VerdictCopy,
)
from .report import (
    AnnexRow,
    AttachmentGroup,
    AttachmentRef,
    ConclusionPart,
    ConclusionRow,
    CriteriaRow,
    DocumentModel,
    EffectivenessPart,
    EvaluatorPart,
    EvidenceAnnexPart,
    ExecutionSection,
    Finding,
    IntroductionPart,
    MethodologyPart,
    QuestionCard,
    ReportOptions,
)

__all__ = [
    # Enums
    "AttachmentCategory",
    "ComplianceDomain",
    "Criticality",
    "EffectivenessVerdict",
    "ReportType",
    "Response",
    "Role",
    "TestStatus",
    "WorkflowAction",
    "WorkflowStatus",
    # Assessment tree
    "Answer",
    "Attachment",
    "CorrectiveAction",
    "Question",
    "Section",
    "TestExecution",
    # Forms
    "Form",
    "FormArchive",
    "FormMetadata",
    "Institution",
    "User",
    # Policy
    "DomainRule",
    "EffectivenessPolicy",
    "VerdictCopy",
    # Report
    "AnnexRow",
    "AttachmentGroup",
    "AttachmentRef",
    "ConclusionPart",
    "ConclusionRow",
    "CriteriaRow",
    "DocumentModel",
    "EffectivenessPart",
    "EvaluatorPart",
    "EvidenceAnnexPart",
    "ExecutionSection",
    "Finding",
    "IntroductionPart",
    "MethodologyPart",
    "QuestionCard",
    "ReportOptions",
]
