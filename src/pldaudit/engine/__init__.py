"""
pldaudit engine components.

Pure decision logic: workflow legality, deficiency classification,
effectiveness scoring, progress and report assembly.
"""
from .classification import (
    Deficiency,
    aggregate_by_section_and_criticality,
    collect_deficiencies,
    is_deficiency,
    normalize_criticality,
    normalize_response,
    parse_response,
    question_is_deficiency,
)
from .effectiveness import (
    EffectivenessResult,
    EffectivenessScorer,
    deficiency_context,
    verdict_for_hits,
)
from .progress import Progress, SectionProgress, calculate_progress
from .report_assembler import ReportAssembler, build_evidence_link, format_date_br
from .workflow import (
    ALLOWED_TRANSITIONS,
    EDITABLE_STATES,
    BulkOutcome,
    BulkResult,
    TransitionPlan,
    apply_transition,
    is_allowed,
    plan_answer_transition,
    plan_transition,
)

__all__ = [
    # Classification
    "Deficiency",
    "aggregate_by_section_and_criticality",
    "collect_deficiencies",
    "is_deficiency",
    "normalize_criticality",
    "normalize_response",
    "parse_response",
    "question_is_deficiency",
    # Effectiveness
    "EffectivenessResult",
    "EffectivenessScorer",
    "deficiency_context",
    "verdict_for_hits",
    # Progress
    "Progress",
    "SectionProgress",
    "calculate_progress",
    # Report
    "ReportAssembler",
    "build_evidence_link",
    "format_date_br",
    # Workflow
    "ALLOWED_TRANSITIONS",
    "EDITABLE_STATES",
    "BulkOutcome",
    "BulkResult",
    "TransitionPlan",
    "apply_transition",
    "is_allowed",
    "plan_answer_transition",
    "plan_transition",
]
