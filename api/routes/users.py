"""User directory endpoints."""

from fastapi import APIRouter, HTTPException

from api.routes.common import user_response
from api.schemas.requests import RegisterUserRequest
from api.schemas.responses import UserResponse
from pldaudit.models import Role
from pldaudit.service import AssessmentService

router = APIRouter(prefix="/users", tags=["Users"])

# Shared service instance (set by main.py)
service: AssessmentService = None


def set_service(s: AssessmentService):
    global service
    service = s


@router.post("", response_model=UserResponse, status_code=201)
async def register_user(request: RegisterUserRequest):
    """Register an actor. Roles: ADMIN, TRIAL_ADMIN, USER."""
    try:
        role = Role(request.role.strip().upper())
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown role '{request.role}'")
    return user_response(service.register_user(request.email, request.name, role))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
    user = service.repository.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return user_response(user)
