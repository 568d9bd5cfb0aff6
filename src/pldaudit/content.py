"""
Form content codec.

Serializes a resolved Section/Question/Attachment tree to a plain dict (the
payload archived when a form is concluded) and parses it back, validating
against ``schemas/form_content.schema.json`` first. Anything missing or
malformed raises InvalidContentError before a single Section is built.
"""
from __future__ import annotations

import json
import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from jsonschema import Draft202012Validator

from .exceptions import InvalidContentError
from .models import (
    Attachment,
    AttachmentCategory,
    CorrectiveAction,
    Criticality,
    Question,
    Response,
    Section,
    TestExecution,
    TestStatus,
)

logger = logging.getLogger(__name__)

CONTENT_VERSION = 1
CONTENT_SCHEMA_PATH = Path(__file__).parent / "schemas" / "form_content.schema.json"
INVALID_CONTENT_MESSAGE = "Conteúdo do formulário inválido"
MAX_REPORTED_ERRORS = 10


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    with open(CONTENT_SCHEMA_PATH, "r", encoding="utf-8") as f:
        return Draft202012Validator(json.load(f))


# =============================================================================
# Serialization
# =============================================================================

def _attachment_to_dict(att: Attachment) -> dict[str, Any]:
    return {
        "id": att.id,
        "category": att.category.value,
        "original_name": att.original_name,
        "filename": att.filename,
        "path": att.path,
        "mime_type": att.mime_type,
        "size": att.size,
        "reference_text": att.reference_text,
    }


def _date_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _question_to_dict(q: Question) -> dict[str, Any]:
    action = q.corrective_action
    return {
        "id": q.id,
        "text": q.text,
        "order": q.order,
        "description": q.description,
        "is_applicable": q.is_applicable,
        "template_ref": q.template_ref,
        "capitulation": q.capitulation,
        "response": q.response.value,
        "response_text": q.response_text,
        "criticality": q.criticality.value if q.criticality else None,
        "deficiency_text": q.deficiency_text,
        "recommendation_text": q.recommendation_text,
        "test": {
            "status": q.test.status.value if q.test.status else None,
            "description": q.test.description,
            "requisition_ref": q.test.requisition_ref,
            "response_ref": q.test.response_ref,
            "sample_ref": q.test.sample_ref,
            "evidence_ref": q.test.evidence_ref,
        },
        "corrective_action": {
            "origin": action.origin,
            "owner": action.owner,
            "description": action.description,
            "reported_on": _date_or_none(action.reported_on),
            "original_deadline": _date_or_none(action.original_deadline),
            "current_deadline": _date_or_none(action.current_deadline),
            "comments": action.comments,
        },
        "attachments": [_attachment_to_dict(a) for a in q.attachments],
    }


def serialize_tree(sections: list[Section]) -> dict[str, Any]:
    """Dict form of a resolved tree, sections and questions in sort order."""
    return {
        "version": CONTENT_VERSION,
        "sections": [
            {
                "id": s.id,
                "item": s.item,
                "order": s.order,
                "custom_label": s.custom_label,
                "has_norm": s.has_norm,
                "norm_reference": s.norm_reference,
                "description": s.description,
                "questions": [
                    _question_to_dict(q) for q in sorted(s.questions, key=lambda q: q.order)
                ],
                "attachments": [_attachment_to_dict(a) for a in s.attachments],
            }
            for s in sorted(sections, key=lambda s: s.order)
        ],
    }


# =============================================================================
# Parsing
# =============================================================================

def _parse_attachment(data: dict[str, Any], **owner: Optional[str]) -> Attachment:
    return Attachment(
        id=data["id"],
        category=AttachmentCategory.parse(data["category"]),
        original_name=data.get("original_name") or "",
        filename=data.get("filename") or "",
        path=data.get("path") or "",
        mime_type=data.get("mime_type") or "application/octet-stream",
        size=data.get("size") or 0,
        reference_text=data.get("reference_text"),
        **owner,
    )


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _parse_question(data: dict[str, Any], section_id: str) -> Question:
    test = data.get("test") or {}
    action = data.get("corrective_action") or {}
    question = Question(
        id=data["id"],
        section_id=section_id,
        text=data["text"],
        order=data["order"],
        description=data.get("description") or "",
        is_applicable=data.get("is_applicable", True),
        template_ref=data.get("template_ref") or "",
        capitulation=data.get("capitulation") or "",
        response_text=data.get("response_text") or "",
        criticality=Criticality(data["criticality"]) if data.get("criticality") else None,
        test=TestExecution(
            status=TestStatus(test["status"]) if test.get("status") else None,
            description=test.get("description") or "",
            requisition_ref=test.get("requisition_ref") or "",
            response_ref=test.get("response_ref") or "",
            sample_ref=test.get("sample_ref") or "",
            evidence_ref=test.get("evidence_ref") or "",
        ),
        corrective_action=CorrectiveAction(
            origin=action.get("origin") or "",
            owner=action.get("owner") or "",
            description=action.get("description") or "",
            reported_on=_parse_date(action.get("reported_on")),
            original_deadline=_parse_date(action.get("original_deadline")),
            current_deadline=_parse_date(action.get("current_deadline")),
            comments=action.get("comments") or "",
        ),
        attachments=[
            _parse_attachment(a, question_id=data["id"]) for a in data.get("attachments", [])
        ],
    )
    question.set_response(
        Response(data.get("response") or ""),
        data.get("deficiency_text") or "",
        data.get("recommendation_text") or "",
    )
    return question


def parse_content(
    raw: Union[str, bytes, dict[str, Any], None],
    form_id: str = "",
) -> list[Section]:
    """
    Parse archived content into typed sections.

    Args:
        raw: JSON text or an already-decoded dict
        form_id: Form the content belongs to (for error context)

    Raises:
        InvalidContentError: If content is missing, not JSON or fails the schema
    """
    if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
        raise InvalidContentError(
            message=INVALID_CONTENT_MESSAGE,
            details={"reason": "missing"},
            entity_id=form_id or None,
        )

    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidContentError(
                message=INVALID_CONTENT_MESSAGE,
                details={"reason": "not_json", "error": str(e)},
                entity_id=form_id or None,
            ) from e
    else:
        data = raw

    errors = list(_validator().iter_errors(data))
    if errors:
        messages = []
        for error in errors[:MAX_REPORTED_ERRORS]:
            path = " -> ".join(str(p) for p in error.absolute_path)
            messages.append(f"{path}: {error.message}" if path else error.message)
        logger.warning("Rejected form content for %s: %d schema errors", form_id, len(errors))
        raise InvalidContentError(
            message=INVALID_CONTENT_MESSAGE,
            details={"reason": "schema", "errors": messages},
            entity_id=form_id or None,
        )

    sections: list[Section] = []
    for s in data["sections"]:
        sections.append(Section(
            id=s["id"],
            form_id=form_id,
            item=s["item"],
            order=s["order"],
            custom_label=s.get("custom_label") or "",
            has_norm=s.get("has_norm", False),
            norm_reference=s.get("norm_reference") or "",
            description=s.get("description") or "",
            questions=sorted(
                (_parse_question(q, s["id"]) for q in s["questions"]),
                key=lambda q: q.order,
            ),
            attachments=[_parse_attachment(a, section_id=s["id"]) for a in s.get("attachments", [])],
        ))
    return sorted(sections, key=lambda s: s.order)
