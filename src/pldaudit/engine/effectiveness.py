"""
Effectiveness Scorer

Derives the tri-level effectiveness verdict of a PLD/FTP program from the
high-criticality deficiencies found in the assessment.

Algorithm:
1. For every applicable question that is a deficiency with criticality ALTA,
   build its context (section label + description, question text +
   description + deficiency text) and normalize it.
2. Test the context against each domain's keyword set. Matches are
   independent: one deficiency can hit several domains.
3. Count the domains hit across the whole assessment.
4. 0 or 1 domain -> EFETIVO, 2 -> PARCIALMENTE EFETIVO, 3 -> POUCO EFETIVO.

The keyword table and verdict copy come from an injected policy pack.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..canon import normalize_text
from ..models import (
    ComplianceDomain,
    Criticality,
    EffectivenessPolicy,
    EffectivenessVerdict,
    Question,
    Section,
)
from .classification import normalize_criticality, question_is_deficiency


def verdict_for_hits(hit_count: int) -> EffectivenessVerdict:
    """Map the number of domains hit to a verdict."""
    if hit_count <= 1:
        return EffectivenessVerdict.EFETIVO
    if hit_count == 2:
        return EffectivenessVerdict.PARCIALMENTE_EFETIVO
    return EffectivenessVerdict.POUCO_EFETIVO


def deficiency_context(section: Section, question: Question) -> str:
    """Normalized text searched for domain keywords."""
    parts = [
        section.label,
        section.description,
        question.text,
        question.description,
        question.deficiency_text,
    ]
    return normalize_text(" ".join(p for p in parts if p))


@dataclass
class EffectivenessResult:
    """
    Outcome of scoring.

    Attributes:
        verdict: Tri-level verdict
        sentence: Fixed explanatory sentence for the verdict
        domain_hits: Hit flag per domain, in policy order
        triggers: Question ids that hit each domain
    """
    verdict: EffectivenessVerdict
    sentence: str
    domain_hits: dict[ComplianceDomain, bool] = field(default_factory=dict)
    triggers: dict[ComplianceDomain, list[str]] = field(default_factory=dict)

    @property
    def hit_count(self) -> int:
        return sum(1 for hit in self.domain_hits.values() if hit)


@dataclass
class EffectivenessScorer:
    """
    Scores an assessment tree against an effectiveness policy.

    Usage:
        scorer = EffectivenessScorer(policy=load_default_policy())
        result = scorer.evaluate(sections)
        print(result.verdict.value, result.sentence)
    """

    policy: EffectivenessPolicy

    def evaluate(self, sections: Iterable[Section]) -> EffectivenessResult:
        """
        Score the tree.

        Args:
            sections: Resolved sections with their questions

        Returns:
            EffectivenessResult (deterministic for the same input)
        """
        triggers: dict[ComplianceDomain, list[str]] = {
            rule.domain: [] for rule in self.policy.domains
        }

        for section in sorted(sections, key=lambda s: s.order):
            for question in sorted(section.questions, key=lambda q: q.order):
                if not self._is_high_deficiency(question):
                    continue
                context = deficiency_context(section, question)
                for rule in self.policy.domains:
                    if rule.matches(context):
                        triggers[rule.domain].append(question.id)

        domain_hits = {domain: bool(ids) for domain, ids in triggers.items()}
        verdict = verdict_for_hits(sum(domain_hits.values()))
        return EffectivenessResult(
            verdict=verdict,
            sentence=self.policy.copy_for(verdict).sentence,
            domain_hits=domain_hits,
            triggers=triggers,
        )

    @staticmethod
    def _is_high_deficiency(question: Question) -> bool:
        return (
            question_is_deficiency(question)
            and normalize_criticality(question.criticality) is Criticality.ALTA
        )
