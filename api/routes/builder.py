"""Form builder endpoints: sections, questions, attachments and ordering."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from api.routes.common import actor_id, attachment_response, question_response, section_response
from api.schemas.requests import ReorderRequest
from api.schemas.responses import AttachmentResponse, QuestionResponse, SectionResponse
from pldaudit.service import AssessmentService

router = APIRouter(tags=["Builder"])

# Shared service instance (set by main.py)
service: AssessmentService = None


def set_service(s: AssessmentService):
    global service
    service = s


# ── Sections ─────────────────────────────────────────────────────────────────

@router.post("/forms/{form_id}/sections", response_model=SectionResponse, status_code=201)
async def create_section(form_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    return section_response(service.create_section(form_id, actor, payload))


@router.get("/forms/{form_id}/sections", response_model=list[SectionResponse])
async def list_sections(form_id: str):
    return [section_response(s) for s in service.list_sections(form_id)]


@router.patch("/sections/{section_id}", response_model=SectionResponse)
async def update_section(section_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    return section_response(service.update_section(section_id, actor, payload))


@router.delete("/sections/{section_id}", status_code=204)
async def delete_section(section_id: str, actor: str = Depends(actor_id)):
    service.delete_section(section_id, actor)


# ── Questions ────────────────────────────────────────────────────────────────

@router.post("/sections/{section_id}/questions", response_model=QuestionResponse, status_code=201)
async def create_question(section_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    return question_response(service.create_question(section_id, actor, payload))


@router.get("/sections/{section_id}/questions", response_model=list[QuestionResponse])
async def list_questions(section_id: str):
    return [question_response(q) for q in service.list_questions(section_id)]


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(question_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    """Partial update; a response other than "Não" clears deficiency and recommendation."""
    return question_response(service.update_question(question_id, actor, payload))


@router.delete("/questions/{question_id}", status_code=204)
async def delete_question(question_id: str, actor: str = Depends(actor_id)):
    service.delete_question(question_id, actor)


# ── Ordering ─────────────────────────────────────────────────────────────────

@router.put("/reorder/{parent_id}", status_code=204)
async def reorder(parent_id: str, request: ReorderRequest, actor: str = Depends(actor_id)):
    """Reorder a form's sections or a section's questions in one batch."""
    service.reorder(parent_id, request.ordered_ids, actor)


# ── Attachments ──────────────────────────────────────────────────────────────

@router.post("/sections/{section_id}/attachments", response_model=AttachmentResponse, status_code=201)
async def attach_to_section(section_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    return attachment_response(service.add_attachment(actor, payload, section_id=section_id))


@router.post("/questions/{question_id}/attachments", response_model=AttachmentResponse, status_code=201)
async def attach_to_question(question_id: str, payload: dict[str, Any] = Body(...), actor: str = Depends(actor_id)):
    return attachment_response(service.add_attachment(actor, payload, question_id=question_id))


@router.delete("/attachments/{attachment_id}", status_code=204)
async def delete_attachment(attachment_id: str, actor: str = Depends(actor_id)):
    service.delete_attachment(attachment_id, actor)
