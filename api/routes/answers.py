"""Answer and applicability endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from api.routes.common import actor_id, answer_response, question_response
from api.schemas.requests import ApplicableRequest
from api.schemas.responses import AnswerResponse, QuestionResponse
from pldaudit.service import AssessmentService

router = APIRouter(prefix="/questions", tags=["Answers"])

# Shared service instance (set by main.py)
service: AssessmentService = None


def set_service(s: AssessmentService):
    global service
    service = s


@router.put("/{question_id}/answer", response_model=AnswerResponse)
async def record_answer(
    question_id: str,
    payload: dict[str, Any] = Body(...),
    actor: str = Depends(actor_id),
):
    """
    Record the filler's answer.

    The first answer on an ASSIGNED or RETURNED form moves it to IN_PROGRESS.
    """
    return answer_response(service.record_answer(question_id, actor, payload))


@router.put("/{question_id}/review", response_model=AnswerResponse)
async def review_answer(
    question_id: str,
    payload: dict[str, Any] = Body(...),
    actor: str = Depends(actor_id),
):
    return answer_response(service.review_answer(question_id, actor, payload))


@router.put("/{question_id}/applicable", response_model=QuestionResponse)
async def toggle_applicable(
    question_id: str,
    request: ApplicableRequest,
    actor: str = Depends(actor_id),
):
    return question_response(service.toggle_applicable(question_id, actor, request.value))
