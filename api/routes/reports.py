"""Report endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import PlainTextResponse

from api.routes.common import actor_id
from pldaudit.models import ReportType
from pldaudit.rendering import MarkdownRenderer
from pldaudit.service import AssessmentService

router = APIRouter(prefix="/forms/{form_id}/report", tags=["Reports"])

# Shared service instance (set by main.py)
service: AssessmentService = None
renderer = MarkdownRenderer()


def set_service(s: AssessmentService):
    global service
    service = s


def _assemble(form_id, actor, report_type, section_ids, include_recommendations, show_effectiveness, as_of):
    return service.assemble_report(
        form_id,
        actor,
        report_type=ReportType(report_type),
        section_ids=section_ids or None,
        include_recommendations=include_recommendations,
        show_effectiveness=show_effectiveness,
        as_of=as_of,
    )


@router.get("")
async def get_report(
    form_id: str,
    report_type: str = Query("PARTIAL", pattern="^(FULL|PARTIAL)$"),
    section_ids: Optional[list[str]] = Query(None),
    include_recommendations: Optional[bool] = None,
    show_effectiveness: Optional[bool] = None,
    as_of: Optional[date] = None,
    actor: str = Depends(actor_id),
):
    """
    Assemble the report document model as JSON.

    FULL requires every applicable question to be answered; PARTIAL may be
    restricted to a subset of sections.
    """
    document = _assemble(
        form_id, actor, report_type, section_ids, include_recommendations, show_effectiveness, as_of
    )
    return jsonable_encoder(document.to_dict())


@router.get("/markdown", response_class=PlainTextResponse)
async def get_report_markdown(
    form_id: str,
    report_type: str = Query("PARTIAL", pattern="^(FULL|PARTIAL)$"),
    section_ids: Optional[list[str]] = Query(None),
    include_recommendations: Optional[bool] = None,
    show_effectiveness: Optional[bool] = None,
    as_of: Optional[date] = None,
    actor: str = Depends(actor_id),
):
    document = _assemble(
        form_id, actor, report_type, section_ids, include_recommendations, show_effectiveness, as_of
    )
    return PlainTextResponse(renderer.render(document), media_type="text/markdown")
