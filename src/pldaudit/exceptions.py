"""
pldaudit Exception Hierarchy

Domain-specific exceptions for the PLD/FTP effectiveness assessment core.
All exceptions carry a machine-readable code plus enough context (entity id,
current state, required states) for callers to render a precise message.

Exception codes follow the pattern: PA_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass
class PldAuditError(Exception):
    """
    Base exception for all pldaudit errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (PA_*)
        details: Additional context about the error
        entity_id: Id of the entity the error refers to, if any
    """
    message: str
    code: str = "PA_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    entity_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.entity_id:
            parts.append(f"(entity: {self.entity_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


# =============================================================================
# Lookup / Permission Errors
# =============================================================================

@dataclass
class NotFoundError(PldAuditError):
    """Referenced entity does not exist."""
    code: str = "PA_NOT_FOUND"


@dataclass
class ForbiddenError(PldAuditError):
    """Actor lacks permission for the action given ownership or state."""
    code: str = "PA_FORBIDDEN"


# =============================================================================
# Workflow Errors
# =============================================================================

@dataclass
class InvalidStateError(PldAuditError):
    """Action is not legal for the entity's current workflow state."""
    code: str = "PA_INVALID_STATE"

    @classmethod
    def for_action(
        cls,
        entity_id: str,
        action: str,
        current_state: str,
        required_states: Iterable[str],
    ) -> InvalidStateError:
        """Build the error for an illegal (state, action) pair."""
        required = sorted(required_states)
        return cls(
            message=(
                f"Cannot {action.lower()} while in {current_state}; "
                f"requires one of {', '.join(required)}"
            ),
            details={
                "action": action,
                "current_state": current_state,
                "required_states": required,
            },
            entity_id=entity_id,
        )


# =============================================================================
# Payload / Content Errors
# =============================================================================

@dataclass
class ValidationFailedError(PldAuditError):
    """Payload shape or content was rejected."""
    code: str = "PA_VALIDATION_FAILED"


@dataclass
class InvalidContentError(PldAuditError):
    """Stored form content is missing or not well-formed."""
    code: str = "PA_INVALID_CONTENT"


@dataclass
class IncompleteAssessmentError(PldAuditError):
    """Full report requested before every applicable question was answered."""
    code: str = "PA_INCOMPLETE_ASSESSMENT"


# =============================================================================
# Policy Pack Errors
# =============================================================================

@dataclass
class PolicyLoadError(PldAuditError):
    """Failed to load policy pack from file."""
    code: str = "PA_POLICY_LOAD_ERROR"


@dataclass
class PolicyValidationError(PldAuditError):
    """Policy pack schema validation failed."""
    code: str = "PA_POLICY_VALIDATION_ERROR"


@dataclass
class PolicyVersionMismatch(PldAuditError):
    """Policy pack schema version is not supported."""
    code: str = "PA_POLICY_VERSION_MISMATCH"
