"""
pldaudit Assessment Tree Models

Typed records for the Section → Question → Attachment tree and the filler's
Answer to each Question.

Key components:
- Section: ordered unit of assessment with an optional internal norm
- Question: assessable statement with response, criticality and test record
- Attachment: file reference owned by exactly one Section or Question
- Answer: a filler's response to one Question, keyed by (question, filler)

Invariant: deficiency and recommendation texts only exist while the response
is "Não"; every setter that changes the response clears them otherwise.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from .enums import AttachmentCategory, Criticality, Response, TestStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Attachment
# =============================================================================

@dataclass
class Attachment:
    """
    File reference attached to a Section or a Question (never both).

    Binary storage is external; this only records where the file lives.

    Attributes:
        id: Unique identifier
        category: Category tag (one attachment per owner and category)
        original_name: File name as uploaded
        filename: Stored file name
        path: Stored path (relative to the uploads root or absolute)
        mime_type: Content type
        size: Size in bytes
        section_id: Owning section, if section-level
        question_id: Owning question, if question-level
        reference_text: Optional free-text reference
    """
    id: str
    category: AttachmentCategory
    original_name: str
    filename: str
    path: str
    mime_type: str = "application/octet-stream"
    size: int = 0
    section_id: Optional[str] = None
    question_id: Optional[str] = None
    reference_text: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def owner_id(self) -> str:
        return self.section_id or self.question_id or ""

    @property
    def display_name(self) -> str:
        """Name shown in reports."""
        return (
            self.original_name
            or self.filename
            or posixpath.basename((self.path or "").replace("\\", "/"))
            or "Arquivo"
        )


# =============================================================================
# Question Sub-records
# =============================================================================

@dataclass
class TestExecution:
    """
    Compliance test executed for a question.

    Details are only reported when status is SIM.
    """
    __test__ = False  # not a pytest class

    status: Optional[TestStatus] = None
    description: str = ""
    requisition_ref: str = ""
    response_ref: str = ""
    sample_ref: str = ""
    evidence_ref: str = ""

    @property
    def was_executed(self) -> bool:
        return self.status is TestStatus.SIM


@dataclass
class CorrectiveAction:
    """Corrective action tracked against a question."""
    origin: str = ""
    owner: str = ""
    description: str = ""
    reported_on: Optional[date] = None
    original_deadline: Optional[date] = None
    current_deadline: Optional[date] = None
    comments: str = ""


# =============================================================================
# Question
# =============================================================================

@dataclass
class Question:
    """
    Single assessable statement within a Section.

    Attributes:
        id: Unique identifier
        section_id: Owning section
        text: Statement being assessed
        order: Dense 0-based position within the section
        description: Guidance for the filler
        is_applicable: False excludes the question from scoring and progress
        response: Sim / Não / empty
        response_text: Justification of the response
        criticality: Severity when answered Não (unset = not adjudicated)
        deficiency_text: Deficiency found (only when response is Não)
        recommendation_text: Recommendation (only when response is Não)
        test: Test execution record
        corrective_action: Corrective action record
        attachments: Question-level attachments
    """
    id: str
    section_id: str
    text: str
    order: int = 0
    description: str = ""
    is_applicable: bool = True
    template_ref: str = ""
    capitulation: str = ""
    response: Response = Response.EMPTY
    response_text: str = ""
    criticality: Optional[Criticality] = None
    deficiency_text: str = ""
    recommendation_text: str = ""
    test: TestExecution = field(default_factory=TestExecution)
    corrective_action: CorrectiveAction = field(default_factory=CorrectiveAction)
    attachments: list[Attachment] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, section_id: str, text: str, order: int = 0) -> Question:
        """Factory method to create a new Question."""
        return cls(id=str(uuid4()), section_id=section_id, text=text, order=order)

    @property
    def is_answered(self) -> bool:
        return self.response is not Response.EMPTY

    def set_response(
        self,
        response: Response,
        deficiency_text: str = "",
        recommendation_text: str = "",
    ) -> None:
        """Set the response, keeping deficiency fields only for Não."""
        self.response = response
        if response is Response.NAO:
            self.deficiency_text = deficiency_text
            self.recommendation_text = recommendation_text
        else:
            self.deficiency_text = ""
            self.recommendation_text = ""
        self.updated_at = _utcnow()

    def with_answer(self, answer: Optional[Answer]) -> Question:
        """Return a copy with the filler's answer overlaid."""
        if answer is None:
            return replace(self)
        resolved = replace(
            self,
            response_text=answer.response_text or self.response_text,
            criticality=answer.criticality or self.criticality,
            test=replace(answer.test) if answer.test.status else replace(self.test),
        )
        resolved.set_response(
            answer.response,
            answer.deficiency_text,
            answer.recommendation_text,
        )
        resolved.updated_at = answer.updated_at
        return resolved


# =============================================================================
# Section
# =============================================================================

@dataclass
class Section:
    """
    Ordered unit of assessment.

    Attributes:
        id: Unique identifier
        form_id: Owning form
        item: Item code (e.g. "Política de PLD/FTP")
        order: Dense 0-based position within the form
        custom_label: Optional label shown after the item code
        has_norm: Whether an internal norm governs this item
        norm_reference: Reference of the internal norm
        description: Free-text description of the evaluated item
        questions: Questions in sort order
        attachments: Section-level attachments (NORMA)
    """
    id: str
    form_id: str
    item: str
    order: int = 0
    custom_label: str = ""
    has_norm: bool = False
    norm_reference: str = ""
    description: str = ""
    created_by_id: Optional[str] = None
    questions: list[Question] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, form_id: str, item: str, order: int = 0, **kwargs) -> Section:
        """Factory method to create a new Section."""
        return cls(id=str(uuid4()), form_id=form_id, item=item, order=order, **kwargs)

    @property
    def label(self) -> str:
        """Display label: "item - custom label", the item alone, or "-"."""
        if (self.custom_label or "").strip():
            return f"{self.item} - {self.custom_label}"
        return self.item or "-"

    @property
    def applicable_questions(self) -> list[Question]:
        return [q for q in self.questions if q.is_applicable]


# =============================================================================
# Answer
# =============================================================================

@dataclass
class Answer:
    """
    A filler's response to one Question.

    Unique per (question_id, user_id): answering again updates in place.
    """
    id: str
    question_id: str
    user_id: str
    response: Response = Response.EMPTY
    response_text: str = ""
    criticality: Optional[Criticality] = None
    deficiency_text: str = ""
    recommendation_text: str = ""
    test: TestExecution = field(default_factory=TestExecution)
    corrective_action_plan: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, question_id: str, user_id: str) -> Answer:
        """Factory method to create an empty Answer."""
        return cls(id=str(uuid4()), question_id=question_id, user_id=user_id)

    @property
    def key(self) -> tuple[str, str]:
        return (self.question_id, self.user_id)
