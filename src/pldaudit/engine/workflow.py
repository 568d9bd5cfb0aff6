"""
Form Workflow State Machine

Transition legality is a pure lookup in ALLOWED_TRANSITIONS, separate from
persistence. Callers first plan a transition (which raises InvalidStateError
for illegal pairs and changes nothing), then apply the plan while holding
the form's lock.

    ASSIGNED -> IN_PROGRESS -> SUBMITTED -> COMPLETED
                     ^             |
                     +-- RETURNED <+
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import InvalidStateError, PldAuditError
from ..models import Form, WorkflowAction, WorkflowStatus

ALL_STATES = frozenset(WorkflowStatus)
EDITABLE_STATES = frozenset({
    WorkflowStatus.ASSIGNED,
    WorkflowStatus.IN_PROGRESS,
    WorkflowStatus.RETURNED,
})

# action -> (allowed source states, target state or None to keep the state)
ALLOWED_TRANSITIONS: dict[WorkflowAction, tuple[frozenset[WorkflowStatus], Optional[WorkflowStatus]]] = {
    WorkflowAction.ASSIGN: (ALL_STATES, WorkflowStatus.ASSIGNED),
    WorkflowAction.FIRST_ANSWER: (
        frozenset({WorkflowStatus.ASSIGNED, WorkflowStatus.RETURNED}),
        WorkflowStatus.IN_PROGRESS,
    ),
    WorkflowAction.RECORD_ANSWER: (EDITABLE_STATES, None),
    WorkflowAction.SUBMIT: (
        frozenset({WorkflowStatus.IN_PROGRESS, WorkflowStatus.RETURNED}),
        WorkflowStatus.SUBMITTED,
    ),
    WorkflowAction.RETURN: (frozenset({WorkflowStatus.SUBMITTED}), WorkflowStatus.RETURNED),
    WorkflowAction.APPROVE: (frozenset({WorkflowStatus.SUBMITTED}), WorkflowStatus.COMPLETED),
    WorkflowAction.TOGGLE_APPLICABLE: (EDITABLE_STATES, None),
}


def is_allowed(state: WorkflowStatus, action: WorkflowAction) -> bool:
    allowed, _ = ALLOWED_TRANSITIONS[action]
    return state in allowed


@dataclass(frozen=True)
class TransitionPlan:
    """A legal transition, ready to be applied."""
    entity_id: str
    action: WorkflowAction
    from_state: WorkflowStatus
    to_state: WorkflowStatus

    @property
    def changes_state(self) -> bool:
        return self.from_state is not self.to_state


def plan_transition(
    entity_id: str,
    state: WorkflowStatus,
    action: WorkflowAction,
) -> TransitionPlan:
    """
    Check an action against the transition table.

    Raises:
        InvalidStateError: If the action is not allowed from state
    """
    allowed, target = ALLOWED_TRANSITIONS[action]
    if state not in allowed:
        raise InvalidStateError.for_action(
            entity_id=entity_id,
            action=action.value,
            current_state=state.value,
            required_states=[s.value for s in allowed],
        )
    return TransitionPlan(
        entity_id=entity_id,
        action=action,
        from_state=state,
        to_state=target or state,
    )


def plan_answer_transition(entity_id: str, state: WorkflowStatus) -> TransitionPlan:
    """
    Plan for recording an answer.

    The first answer while ASSIGNED or RETURNED moves the form to
    IN_PROGRESS; later answers keep the state.
    """
    plan = plan_transition(entity_id, state, WorkflowAction.RECORD_ANSWER)
    if is_allowed(state, WorkflowAction.FIRST_ANSWER):
        return plan_transition(entity_id, state, WorkflowAction.FIRST_ANSWER)
    return plan


def apply_transition(form: Form, plan: TransitionPlan, now: Optional[datetime] = None) -> Form:
    """Apply a plan to a form in place and stamp the matching timestamp."""
    if form.status is not plan.from_state:
        raise InvalidStateError.for_action(
            entity_id=form.id,
            action=plan.action.value,
            current_state=form.status.value,
            required_states=[plan.from_state.value],
        )
    now = now or datetime.now(timezone.utc)
    form.status = plan.to_state
    form.updated_at = now
    if plan.action is WorkflowAction.ASSIGN:
        form.sent_at = now
        form.submitted_at = None
        form.reviewed_at = None
    elif plan.action is WorkflowAction.SUBMIT:
        form.submitted_at = now
    elif plan.action in (WorkflowAction.RETURN, WorkflowAction.APPROVE):
        form.reviewed_at = now
    return form


# =============================================================================
# Bulk Results
# =============================================================================

@dataclass(frozen=True)
class BulkOutcome:
    """Result for one member of a bulk action."""
    entity_id: str
    succeeded: bool
    previous_state: Optional[WorkflowStatus] = None
    new_state: Optional[WorkflowStatus] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def success(cls, entity_id: str, previous: WorkflowStatus, new: WorkflowStatus) -> BulkOutcome:
        return cls(entity_id=entity_id, succeeded=True, previous_state=previous, new_state=new)

    @classmethod
    def skipped(cls, entity_id: str, previous: WorkflowStatus, error: PldAuditError) -> BulkOutcome:
        return cls(
            entity_id=entity_id,
            succeeded=False,
            previous_state=previous,
            new_state=previous,
            error_code=error.code,
            error_message=error.message,
        )


@dataclass
class BulkResult:
    """Per-entity outcomes of a bulk action; nothing is dropped silently."""
    action: WorkflowAction
    outcomes: list[BulkOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[BulkOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def skipped(self) -> list[BulkOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "succeeded": len(self.succeeded),
            "skipped": len(self.skipped),
            "outcomes": [
                {
                    "entity_id": o.entity_id,
                    "succeeded": o.succeeded,
                    "previous_state": o.previous_state.value if o.previous_state else None,
                    "new_state": o.new_state.value if o.new_state else None,
                    "error_code": o.error_code,
                    "error_message": o.error_message,
                }
                for o in self.outcomes
            ],
        }
