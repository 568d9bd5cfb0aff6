"""
pldaudit Form and Actor Models

A Form wraps the Section/Question tree for one assignment cycle. It is
created by a reviewer, assigned to exactly one filler at a time and ends
either by deletion or by being concluded into an immutable archive.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from .enums import Role, WorkflowStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Actors
# =============================================================================

@dataclass
class User:
    """Directory entry for an actor. Credentials are managed elsewhere."""
    id: str
    email: str
    name: str = ""
    role: Role = Role.USER

    @classmethod
    def create(cls, email: str, name: str = "", role: Role = Role.USER) -> User:
        return cls(id=str(uuid4()), email=email.strip().lower(), name=name, role=role)

    @property
    def is_privileged(self) -> bool:
        return self.role.is_privileged


# =============================================================================
# Report Metadata
# =============================================================================

@dataclass
class Institution:
    """Evaluated institution listed in the report introduction."""
    name: str
    cnpj: str = ""

    @property
    def inline(self) -> str:
        name = (self.name or "-").strip() or "-"
        return f"{name} (CNPJ: {self.cnpj})" if self.cnpj else name


@dataclass
class FormMetadata:
    """
    Report settings stored with the form.

    Attributes:
        institutions: Evaluated institutions
        evaluator_qualification: Free text, reproduced verbatim
        include_recommendations: Show recommendations in findings
        show_effectiveness: Emit the effectiveness verdict block
    """
    institutions: list[Institution] = field(default_factory=list)
    evaluator_qualification: str = ""
    include_recommendations: bool = True
    show_effectiveness: bool = True


# =============================================================================
# Archive
# =============================================================================

@dataclass(frozen=True)
class FormArchive:
    """Immutable snapshot written when a form is concluded."""
    content: str                   # canonical JSON of the resolved tree
    content_hash: str              # SHA-256 of content
    concluded_at: datetime
    concluded_by_id: str


# =============================================================================
# Form
# =============================================================================

@dataclass
class Form:
    """
    One assessment cycle.

    Attributes:
        id: Unique identifier
        name: Display name
        created_by_id: Reviewer who built the form (only they may assign it)
        status: Workflow state
        assigned_to_id: Current filler
        assigned_email: Email the form was sent to
        metadata: Report settings
        archive: Snapshot set by conclude
    """
    id: str
    name: str
    created_by_id: str
    status: WorkflowStatus = WorkflowStatus.DRAFT
    assigned_to_id: Optional[str] = None
    assigned_email: Optional[str] = None
    metadata: FormMetadata = field(default_factory=FormMetadata)
    archive: Optional[FormArchive] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    sent_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        name: str,
        created_by_id: str,
        metadata: Optional[FormMetadata] = None,
    ) -> Form:
        """Factory method to create a new unassigned Form."""
        return cls(
            id=str(uuid4()),
            name=name,
            created_by_id=created_by_id,
            metadata=metadata or FormMetadata(),
        )

    @property
    def is_concluded(self) -> bool:
        return self.archive is not None

    def is_assigned_to(self, user_id: str) -> bool:
        return self.assigned_to_id is not None and self.assigned_to_id == user_id
