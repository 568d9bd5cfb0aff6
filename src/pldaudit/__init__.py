"""
pldaudit - PLD/FTP Effectiveness Self-Assessment Core

pldaudit drives an anti-money-laundering (PLD/FTP) self-assessment from
authoring to the final evaluation report. Reviewers build a questionnaire,
assign it to a filler, review the answers and approve; the report states
which deficiencies were found and how effective the program is.

Core Principle: "The evaluator concludes. pldaudit classifies and documents."

Key Features:
- Workflow state machine (assign, answer, submit, return, approve)
- Deficiency classification by criticality (BAIXA / MEDIA / ALTA)
- Effectiveness verdict from high-criticality hits per compliance domain
- Renderer-agnostic report document model (Markdown renderer included)
- Archived, hash-verified snapshots of concluded forms

Quick Start:
    from pldaudit import AssessmentService, InMemoryRepository, Role
    from pldaudit.packs import load_default_policy

    service = AssessmentService(InMemoryRepository(), load_default_policy())
    admin = service.register_user("admin@example.com", role=Role.ADMIN)
    filler = service.register_user("filler@example.com")

    form = service.create_form(admin.id, "Avaliação PLD 2025")
    section = service.create_section(form.id, admin.id, {"item": "Política"})
    question = service.create_question(section.id, admin.id, {"text": "Existe política?"})

    service.assign_form(form.id, admin.id, filler.email)
    service.record_answer(question.id, filler.id, {"response": "Sim"})
    service.submit(form.id, filler.id)
    service.approve(form.id, admin.id)

    document = service.assemble_report(form.id, admin.id)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "pldaudit Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
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
    # Entities
    Answer,
    Attachment,
    Form,
    FormMetadata,
    Institution,
    Question,
    Section,
    User,
    # Report
    DocumentModel,
    ReportOptions,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    ForbiddenError,
    IncompleteAssessmentError,
    InvalidContentError,
    InvalidStateError,
    NotFoundError,
    PldAuditError,
    ValidationFailedError,
)

# =============================================================================
# Services
# =============================================================================
from .config import Settings
from .repository import InMemoryRepository, Repository
from .service import AssessmentService
from .rendering import MarkdownRenderer, render_markdown

__all__ = [
    "__version__",
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
    # Entities
    "Answer",
    "Attachment",
    "Form",
    "FormMetadata",
    "Institution",
    "Question",
    "Section",
    "User",
    # Report
    "DocumentModel",
    "ReportOptions",
    # Exceptions
    "ForbiddenError",
    "IncompleteAssessmentError",
    "InvalidContentError",
    "InvalidStateError",
    "NotFoundError",
    "PldAuditError",
    "ValidationFailedError",
    # Services
    "AssessmentService",
    "InMemoryRepository",
    "MarkdownRenderer",
    "Repository",
    "Settings",
    "render_markdown",
]
