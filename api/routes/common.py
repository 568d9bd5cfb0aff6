"""Shared route helpers: actor resolution and domain-to-response mapping."""

from datetime import datetime
from typing import Optional

from fastapi import Header

from api.schemas.responses import (
    AnswerResponse,
    AttachmentResponse,
    FormResponse,
    QuestionResponse,
    SectionResponse,
    UserResponse,
)
from pldaudit.models import Answer, Attachment, Form, Question, Section, User


def actor_id(x_actor_id: str = Header(..., description="Id of the acting user")) -> str:
    """The acting user; authentication happens upstream of this service."""
    return x_actor_id


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name, role=user.role.value)


def form_response(form: Form) -> FormResponse:
    return FormResponse(
        id=form.id,
        name=form.name,
        status=form.status.value,
        created_by_id=form.created_by_id,
        assigned_to_id=form.assigned_to_id,
        assigned_email=form.assigned_email,
        concluded=form.is_concluded,
        content_hash=form.archive.content_hash if form.archive else None,
        created_at=form.created_at.isoformat(),
        updated_at=form.updated_at.isoformat(),
        sent_at=_iso(form.sent_at),
        submitted_at=_iso(form.submitted_at),
        reviewed_at=_iso(form.reviewed_at),
    )


def section_response(section: Section) -> SectionResponse:
    return SectionResponse(
        id=section.id,
        form_id=section.form_id,
        item=section.item,
        label=section.label,
        order=section.order,
        has_norm=section.has_norm,
        norm_reference=section.norm_reference,
        description=section.description,
    )


def question_response(question: Question) -> QuestionResponse:
    return QuestionResponse(
        id=question.id,
        section_id=question.section_id,
        text=question.text,
        order=question.order,
        description=question.description,
        is_applicable=question.is_applicable,
        response=question.response.value,
        criticality=question.criticality.value if question.criticality else None,
        deficiency_text=question.deficiency_text,
        recommendation_text=question.recommendation_text,
        test_status=question.test.status.value if question.test.status else None,
    )


def answer_response(answer: Answer) -> AnswerResponse:
    return AnswerResponse(
        id=answer.id,
        question_id=answer.question_id,
        user_id=answer.user_id,
        response=answer.response.value,
        criticality=answer.criticality.value if answer.criticality else None,
        deficiency_text=answer.deficiency_text,
        recommendation_text=answer.recommendation_text,
        test_status=answer.test.status.value if answer.test.status else None,
        updated_at=answer.updated_at.isoformat(),
    )


def attachment_response(attachment: Attachment) -> AttachmentResponse:
    return AttachmentResponse(
        id=attachment.id,
        category=attachment.category.value,
        original_name=attachment.original_name,
        filename=attachment.filename,
        path=attachment.path,
        mime_type=attachment.mime_type,
        size=attachment.size,
        section_id=attachment.section_id,
        question_id=attachment.question_id,
        reference_text=attachment.reference_text,
    )
