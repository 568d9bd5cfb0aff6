"""
pldaudit Effectiveness Policy Models

Domain model of an effectiveness policy pack: the keyword table that maps
high-criticality deficiencies to compliance domains, and the fixed copy
attached to each verdict.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from ..canon import normalize_text
from .enums import ComplianceDomain, EffectivenessVerdict


@dataclass(frozen=True)
class DomainRule:
    """
    Keyword set identifying one compliance domain.

    Keywords are stored normalized (lowercase, no diacritics).
    """
    domain: ComplianceDomain
    name: str
    keywords: tuple[str, ...]

    def matches(self, normalized_context: str) -> bool:
        """Substring match against already-normalized text."""
        return any(keyword in normalized_context for keyword in self.keywords)

    @classmethod
    def build(cls, domain: ComplianceDomain, name: str, keywords: list[str]) -> DomainRule:
        normalized = tuple(k for k in (normalize_text(kw) for kw in keywords) if k)
        return cls(domain=domain, name=name, keywords=normalized)


@dataclass(frozen=True)
class VerdictCopy:
    """Fixed text attached to a verdict."""
    verdict: EffectivenessVerdict
    sentence: str                  # Shown in the verdict block
    criterion: str                 # Shown in the methodology criteria table


@dataclass
class EffectivenessPolicy:
    """
    Loaded effectiveness policy pack.

    Attributes:
        id: Pack identifier
        version: Pack version
        domains: Domain rules in evaluation order
        verdicts: Copy per verdict
    """
    id: str
    version: str
    domains: list[DomainRule] = field(default_factory=list)
    verdicts: dict[EffectivenessVerdict, VerdictCopy] = field(default_factory=dict)

    def copy_for(self, verdict: EffectivenessVerdict) -> VerdictCopy:
        return self.verdicts[verdict]
