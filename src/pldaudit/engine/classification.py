"""
Deficiency Classification

Pure functions that decide whether a question is a deficiency and aggregate
deficiencies per section and criticality for the conclusion table.

A deficiency is a question answered "Não" with an explicit criticality.
A blank criticality means "not yet adjudicated" and is never counted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..canon import normalize_text
from ..models import ConclusionRow, Criticality, Question, Response, Section

NEGATIVE_RESPONSES = frozenset({"nao", "n"})
POSITIVE_RESPONSES = frozenset({"sim", "s"})
TOTAL_LABEL = "TOTAL"


def normalize_response(value: Union[Response, str, None]) -> str:
    """Lowercase, accent-free form of a response ("Não" -> "nao")."""
    if isinstance(value, Response):
        value = value.value
    return normalize_text(value)


def normalize_criticality(value: Union[Criticality, str, None]) -> Optional[Criticality]:
    """
    Parse a criticality tag.

    Accepts any case and the accented "MÉDIA". Returns None for blank or
    unknown values.
    """
    if isinstance(value, Criticality):
        return value
    raw = normalize_text(value).upper()
    try:
        return Criticality(raw)
    except ValueError:
        return None


def parse_response(value: Union[Response, str, None]) -> Response:
    """Parse a response; "n"/"nao"/"Não" -> NAO, "s"/"sim" -> SIM, else EMPTY."""
    normalized = normalize_response(value)
    if normalized in NEGATIVE_RESPONSES:
        return Response.NAO
    if normalized in POSITIVE_RESPONSES:
        return Response.SIM
    return Response.EMPTY


def is_deficiency(
    response: Union[Response, str, None],
    criticality: Union[Criticality, str, None],
    applicable: Optional[bool] = None,
) -> bool:
    """
    Decide whether an answer is a deficiency.

    Args:
        response: Raw or parsed response
        criticality: Raw or parsed criticality
        applicable: When given, a non-applicable question never counts

    Returns:
        True iff the response normalizes to "nao"/"n" and the criticality is
        one of BAIXA, MEDIA, ALTA (and the question is applicable, if asked)
    """
    if applicable is False:
        return False
    if normalize_response(response) not in NEGATIVE_RESPONSES:
        return False
    return normalize_criticality(criticality) is not None


def question_is_deficiency(question: Question) -> bool:
    """is_deficiency applied to a question, honoring its applicability."""
    return is_deficiency(question.response, question.criticality, question.is_applicable)


# =============================================================================
# Collection
# =============================================================================

@dataclass(frozen=True)
class Deficiency:
    """One deficiency found in the tree, in section/question order."""
    section_id: str
    section_label: str
    question_id: str
    question_text: str
    deficiency_text: str
    criticality: Criticality
    recommendation: str


def collect_deficiencies(sections: Iterable[Section]) -> list[Deficiency]:
    """List every deficiency, sections and questions in sort order."""
    found: list[Deficiency] = []
    for section in sorted(sections, key=lambda s: s.order):
        for question in sorted(section.questions, key=lambda q: q.order):
            if not question_is_deficiency(question):
                continue
            found.append(Deficiency(
                section_id=section.id,
                section_label=section.label,
                question_id=question.id,
                question_text=question.text,
                deficiency_text=(question.deficiency_text or "").strip() or "-",
                criticality=normalize_criticality(question.criticality),
                recommendation=(question.recommendation_text or "").strip(),
            ))
    return found


def aggregate_by_section_and_criticality(sections: Iterable[Section]) -> list[ConclusionRow]:
    """
    Count deficiencies per section and criticality.

    Returns:
        One row per section in sort order, then a TOTAL row summing them
    """
    rows: list[ConclusionRow] = []
    total = ConclusionRow(label=TOTAL_LABEL)
    for section in sorted(sections, key=lambda s: s.order):
        row = ConclusionRow(label=section.label)
        for question in section.questions:
            if question_is_deficiency(question):
                criticality = normalize_criticality(question.criticality)
                row.add(criticality)
                total.add(criticality)
        rows.append(row)
    rows.append(total)
    return rows
