"""
pldaudit Enumerations

All enumeration types used by the assessment core, grouped by domain area.

All enums inherit from (str, Enum) for JSON serialization compatibility.
Values are the wire spellings used by the assessment UI (Portuguese).
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


# =============================================================================
# Workflow
# =============================================================================

class WorkflowStatus(str, Enum):
    """
    Lifecycle state of a form within one assignment cycle.

    SUBMITTED is the only pre-decision state; there is no separate review state.
    """
    DRAFT = "DRAFT"                # Built, never assigned
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    RETURNED = "RETURNED"
    COMPLETED = "COMPLETED"        # Terminal for the cycle


class WorkflowAction(str, Enum):
    """Actions checked against the transition table."""
    ASSIGN = "ASSIGN"
    FIRST_ANSWER = "FIRST_ANSWER"
    RECORD_ANSWER = "RECORD_ANSWER"
    SUBMIT = "SUBMIT"
    RETURN = "RETURN"
    APPROVE = "APPROVE"
    TOGGLE_APPLICABLE = "TOGGLE_APPLICABLE"


class Role(str, Enum):
    """Actor role. ADMIN and TRIAL_ADMIN act as reviewer and builder."""
    ADMIN = "ADMIN"
    TRIAL_ADMIN = "TRIAL_ADMIN"
    USER = "USER"                  # Filler

    @property
    def is_privileged(self) -> bool:
        return self in (Role.ADMIN, Role.TRIAL_ADMIN)


# =============================================================================
# Answers
# =============================================================================

class Response(str, Enum):
    """Answer to an assessable statement."""
    SIM = "Sim"
    NAO = "Não"
    EMPTY = ""


class Criticality(str, Enum):
    """Severity tag on a deficiency."""
    BAIXA = "BAIXA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"


class TestStatus(str, Enum):
    """Whether a compliance test was executed for the question."""
    __test__ = False  # not a pytest class

    SIM = "SIM"
    NAO = "NAO"
    NAO_PLANO = "NAO_PLANO"        # Not executed, covered by an action plan


# =============================================================================
# Attachments
# =============================================================================

class AttachmentCategory(str, Enum):
    """Category tag of an attachment. One attachment per (owner, category)."""
    NORMA = "NORMA"                        # Section-level internal norm
    TEMPLATE = "TEMPLATE"
    RESPOSTA = "RESPOSTA"
    DEFICIENCIA = "DEFICIENCIA"
    TEST_REQUISICAO = "TEST_REQUISICAO"
    TEST_RESPOSTA = "TEST_RESPOSTA"
    TEST_AMOSTRA = "TEST_AMOSTRA"
    TEST_EVIDENCIAS = "TEST_EVIDENCIAS"

    @classmethod
    def parse(cls, value: str) -> Optional[AttachmentCategory]:
        """Parse a category, accepting the legacy ``TESTE_*`` spellings."""
        raw = (value or "").strip().upper()
        if raw.startswith("TESTE_"):
            raw = "TEST_" + raw[len("TESTE_"):]
        try:
            return cls(raw)
        except ValueError:
            return None

    @property
    def is_test_reference(self) -> bool:
        return self.value.startswith("TEST_")

    @property
    def is_section_level(self) -> bool:
        return self is AttachmentCategory.NORMA


# =============================================================================
# Reporting
# =============================================================================

class ReportType(str, Enum):
    """FULL reports require every applicable question to be answered."""
    FULL = "FULL"
    PARTIAL = "PARTIAL"


class EffectivenessVerdict(str, Enum):
    """Tri-level effectiveness rating of the PLD/FTP program."""
    EFETIVO = "EFETIVO"
    PARCIALMENTE_EFETIVO = "PARCIALMENTE EFETIVO"
    POUCO_EFETIVO = "POUCO EFETIVO"


class ComplianceDomain(str, Enum):
    """Domains whose high-criticality deficiencies drive the verdict."""
    MSAC = "MSAC"                  # Suspicious activity monitoring/reporting
    CSNU = "CSNU"                  # UN Security Council sanctions screening
    CSC = "CSC"                    # Know your customer
