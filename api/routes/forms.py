"""Form lifecycle and workflow endpoints."""

from fastapi import APIRouter, Depends

from api.routes.common import actor_id, form_response
from api.schemas.requests import AssignRequest, CreateFormRequest, MetadataInput, ReturnAllRequest
from api.schemas.responses import BulkResponse, FormResponse, ProgressResponse, SectionProgressResponse
from pldaudit.models import FormMetadata, Institution
from pldaudit.service import AssessmentService

router = APIRouter(prefix="/forms", tags=["Forms"])

# Shared service instance (set by main.py)
service: AssessmentService = None


def set_service(s: AssessmentService):
    global service
    service = s


def _metadata(data: MetadataInput) -> FormMetadata:
    return FormMetadata(
        institutions=[Institution(name=i.name, cnpj=i.cnpj) for i in data.institutions],
        evaluator_qualification=data.evaluator_qualification,
        include_recommendations=data.include_recommendations,
        show_effectiveness=data.show_effectiveness,
    )


# ── Forms ────────────────────────────────────────────────────────────────────

@router.post("", response_model=FormResponse, status_code=201)
async def create_form(request: CreateFormRequest, actor: str = Depends(actor_id)):
    """Create an empty form (reviewers only)."""
    metadata = _metadata(request.metadata) if request.metadata else None
    return form_response(service.create_form(actor, request.name, metadata))


@router.get("", response_model=list[FormResponse])
async def list_forms(actor: str = Depends(actor_id)):
    """Forms the actor created (reviewers) or was assigned (fillers)."""
    return [form_response(f) for f in service.list_forms(actor)]


@router.get("/{form_id}", response_model=FormResponse)
async def get_form(form_id: str):
    return form_response(service.get_form(form_id))


@router.put("/{form_id}/metadata", response_model=FormResponse)
async def update_metadata(form_id: str, request: MetadataInput, actor: str = Depends(actor_id)):
    return form_response(service.update_form_metadata(form_id, actor, _metadata(request)))


@router.delete("/{form_id}", status_code=204)
async def delete_form(form_id: str, actor: str = Depends(actor_id)):
    service.delete_form(form_id, actor)


# ── Workflow ─────────────────────────────────────────────────────────────────

@router.post("/assign-all", response_model=BulkResponse)
async def assign_all(request: AssignRequest, actor: str = Depends(actor_id)):
    return service.assign_all(actor, request.target).to_dict()


@router.post("/submit-all", response_model=BulkResponse)
async def submit_all(actor: str = Depends(actor_id)):
    """Submit every form assigned to the actor; ineligible ones are reported, not dropped."""
    return service.submit_all(actor).to_dict()


@router.post("/return-all", response_model=BulkResponse)
async def return_all(request: ReturnAllRequest, actor: str = Depends(actor_id)):
    return service.return_all(actor, request.assignee_id).to_dict()


@router.post("/{form_id}/assign", response_model=FormResponse)
async def assign_form(form_id: str, request: AssignRequest, actor: str = Depends(actor_id)):
    """Assign to a filler by id or email; starts a new cycle."""
    return form_response(service.assign_form(form_id, actor, request.target))


@router.post("/{form_id}/submit", response_model=FormResponse)
async def submit(form_id: str, actor: str = Depends(actor_id)):
    return form_response(service.submit(form_id, actor))


@router.post("/{form_id}/return", response_model=FormResponse)
async def return_form(form_id: str, actor: str = Depends(actor_id)):
    return form_response(service.return_form(form_id, actor))


@router.post("/{form_id}/approve", response_model=FormResponse)
async def approve(form_id: str, actor: str = Depends(actor_id)):
    return form_response(service.approve(form_id, actor))


@router.post("/{form_id}/conclude", response_model=FormResponse)
async def conclude(form_id: str, actor: str = Depends(actor_id)):
    """Archive the resolved tree and clear the live builder tree."""
    return form_response(service.conclude_form(form_id, actor))


@router.get("/{form_id}/progress", response_model=ProgressResponse)
async def progress(form_id: str):
    result = service.calculate_progress(form_id)
    return ProgressResponse(
        form_id=form_id,
        total_questions=result.total_questions,
        applicable=result.applicable,
        answered=result.answered,
        percent=result.percent,
        is_complete=result.is_complete,
        sections=[
            SectionProgressResponse(
                section_id=s.section_id,
                label=s.label,
                applicable=s.applicable,
                answered=s.answered,
            )
            for s in result.sections
        ],
    )
