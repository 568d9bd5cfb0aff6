"""Response schemas for the API."""

from pydantic import BaseModel
from typing import Any, Optional


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str


class FormResponse(BaseModel):
    """Form header and workflow state."""
    id: str
    name: str
    status: str
    created_by_id: str
    assigned_to_id: Optional[str] = None
    assigned_email: Optional[str] = None
    concluded: bool = False
    content_hash: Optional[str] = None
    created_at: str
    updated_at: str
    sent_at: Optional[str] = None
    submitted_at: Optional[str] = None
    reviewed_at: Optional[str] = None


class AttachmentResponse(BaseModel):
    id: str
    category: str
    original_name: str
    filename: str
    path: str
    mime_type: str
    size: int
    section_id: Optional[str] = None
    question_id: Optional[str] = None
    reference_text: Optional[str] = None


class QuestionResponse(BaseModel):
    id: str
    section_id: str
    text: str
    order: int
    description: str
    is_applicable: bool
    response: str
    criticality: Optional[str] = None
    deficiency_text: str
    recommendation_text: str
    test_status: Optional[str] = None


class SectionResponse(BaseModel):
    id: str
    form_id: str
    item: str
    label: str
    order: int
    has_norm: bool
    norm_reference: str
    description: str


class AnswerResponse(BaseModel):
    id: str
    question_id: str
    user_id: str
    response: str
    criticality: Optional[str] = None
    deficiency_text: str
    recommendation_text: str
    test_status: Optional[str] = None
    updated_at: str


class SectionProgressResponse(BaseModel):
    section_id: str
    label: str
    applicable: int
    answered: int


class ProgressResponse(BaseModel):
    """Completion of a form."""
    form_id: str
    total_questions: int
    applicable: int
    answered: int
    percent: int
    is_complete: bool
    sections: list[SectionProgressResponse]


class BulkOutcomeResponse(BaseModel):
    entity_id: str
    succeeded: bool
    previous_state: Optional[str] = None
    new_state: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


class BulkResponse(BaseModel):
    """Per-form outcome of a bulk workflow action."""
    action: str
    succeeded: int
    skipped: int
    outcomes: list[BulkOutcomeResponse]


class ErrorResponse(BaseModel):
    """Structured error response."""
    error: str
    code: str
    details: Optional[dict[str, Any]] = None
    entity_id: Optional[str] = None
    request_id: str
