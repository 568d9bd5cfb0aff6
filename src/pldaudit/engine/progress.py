"""
Assessment progress.

A question counts toward progress only while applicable; it is answered
once its resolved response is non-empty.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..models import Section


@dataclass(frozen=True)
class SectionProgress:
    section_id: str
    label: str
    applicable: int
    answered: int

    @property
    def percent(self) -> int:
        return round(self.answered * 100 / self.applicable) if self.applicable else 0


@dataclass(frozen=True)
class Progress:
    """
    Completion of an assessment.

    Attributes:
        total_questions: All questions, applicable or not
        applicable: Applicable questions
        answered: Applicable questions with a response
        sections: Per-section breakdown in sort order
    """
    total_questions: int
    applicable: int
    answered: int
    sections: tuple[SectionProgress, ...] = field(default_factory=tuple)

    @property
    def percent(self) -> int:
        return round(self.answered * 100 / self.applicable) if self.applicable else 0

    @property
    def is_complete(self) -> bool:
        """Exact completion; a rounded 100% with one question open is not complete."""
        return self.applicable > 0 and self.answered == self.applicable

    @property
    def missing(self) -> int:
        return self.applicable - self.answered


def calculate_progress(sections: Iterable[Section]) -> Progress:
    """Compute overall and per-section progress."""
    breakdown: list[SectionProgress] = []
    total = applicable = answered = 0
    for section in sorted(sections, key=lambda s: s.order):
        section_applicable = [q for q in section.questions if q.is_applicable]
        section_answered = sum(1 for q in section_applicable if q.is_answered)
        total += len(section.questions)
        applicable += len(section_applicable)
        answered += section_answered
        breakdown.append(SectionProgress(
            section_id=section.id,
            label=section.label,
            applicable=len(section_applicable),
            answered=section_answered,
        ))
    return Progress(
        total_questions=total,
        applicable=applicable,
        answered=answered,
        sections=tuple(breakdown),
    )
