"""
Pytest configuration and fixtures for pldaudit tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest
from datetime import datetime, timezone
from uuid import uuid4

from pldaudit.config import Settings
from pldaudit.models import (
    Attachment,
    AttachmentCategory,
    Criticality,
    Question,
    Response,
    Role,
    Section,
    TestExecution,
    TestStatus,
)
from pldaudit.packs import load_default_policy
from pldaudit.repository import InMemoryRepository
from pldaudit.service import AssessmentService


FIXED_NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_question(
    text: str = "Existe política aprovada pela diretoria?",
    section_id: str = "sec-1",
    order: int = 0,
    response: Response = Response.EMPTY,
    criticality: Criticality = None,
    deficiency_text: str = "",
    recommendation_text: str = "",
    is_applicable: bool = True,
    test_status: TestStatus = None,
    attachments: list = None,
    id: str = None,
    description: str = "",
) -> Question:
    """Create a Question with required fields."""
    question = Question(
        id=id or f"q-{uuid4().hex[:8]}",
        section_id=section_id,
        text=text,
        order=order,
        description=description,
        is_applicable=is_applicable,
        criticality=criticality,
        test=TestExecution(status=test_status),
        attachments=attachments or [],
    )
    question.set_response(response, deficiency_text, recommendation_text)
    return question


def make_deficient_question(
    text: str = "Existe política aprovada pela diretoria?",
    criticality: Criticality = Criticality.ALTA,
    section_id: str = "sec-1",
    order: int = 0,
    deficiency_text: str = "Política desatualizada",
    recommendation_text: str = "Atualizar a política",
    **kwargs,
) -> Question:
    """Create a question answered "Não" with a criticality."""
    return make_question(
        text=text,
        section_id=section_id,
        order=order,
        response=Response.NAO,
        criticality=criticality,
        deficiency_text=deficiency_text,
        recommendation_text=recommendation_text,
        **kwargs,
    )


def make_section(
    item: str = "Governança",
    questions: list = None,
    order: int = 0,
    id: str = None,
    custom_label: str = "",
    description: str = "",
    attachments: list = None,
    form_id: str = "form-1",
) -> Section:
    """Create a Section; questions are re-parented to it."""
    section_id = id or f"sec-{uuid4().hex[:8]}"
    questions = questions or []
    for index, question in enumerate(questions):
        question.section_id = section_id
        question.order = index
    return Section(
        id=section_id,
        form_id=form_id,
        item=item,
        order=order,
        custom_label=custom_label,
        description=description,
        questions=questions,
        attachments=attachments or [],
    )


def make_attachment(
    category: AttachmentCategory = AttachmentCategory.TEST_EVIDENCIAS,
    path: str = "/srv/app/uploads/evidencia.pdf",
    original_name: str = "evidencia.pdf",
    filename: str = "1700000000-evidencia.pdf",
    question_id: str = None,
    section_id: str = None,
    id: str = None,
) -> Attachment:
    """Create an Attachment with required fields."""
    return Attachment(
        id=id or f"att-{uuid4().hex[:8]}",
        category=category,
        original_name=original_name,
        filename=filename,
        path=path,
        mime_type="application/pdf",
        size=1024,
        question_id=question_id,
        section_id=section_id,
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def policy():
    """Default effectiveness policy pack."""
    return load_default_policy()


@pytest.fixture
def settings():
    return Settings(now=FIXED_NOW, public_base_url="https://pld.example.com")


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def service(repository, policy, settings):
    return AssessmentService(repository, policy, settings=settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def admin(service):
    return service.register_user("revisor@banco.com.br", "Revisora", Role.ADMIN)


@pytest.fixture
def other_admin(service):
    return service.register_user("outro@banco.com.br", "Outro Revisor", Role.ADMIN)


@pytest.fixture
def filler(service):
    return service.register_user("preenchedor@banco.com.br", "Preenchedor", Role.USER)


@pytest.fixture
def other_filler(service):
    return service.register_user("terceiro@banco.com.br", "Terceiro", Role.USER)


@pytest.fixture
def built_form(service, admin):
    """A form with two sections and three questions, not yet assigned."""
    form = service.create_form(admin.id, "Avaliação PLD 2025")
    governance = service.create_section(form.id, admin.id, {"item": "Governança"})
    monitoring = service.create_section(
        form.id, admin.id, {"item": "Monitoramento", "custom_label": "Operações atípicas"}
    )
    q1 = service.create_question(governance.id, admin.id, {"text": "Existe política aprovada?"})
    q2 = service.create_question(governance.id, admin.id, {"text": "Há treinamento anual?"})
    q3 = service.create_question(monitoring.id, admin.id, {"text": "Há regras de monitoramento?"})
    return {
        "form": form,
        "sections": [governance, monitoring],
        "questions": [q1, q2, q3],
    }


@pytest.fixture
def assigned_form(service, admin, filler, built_form):
    """The built form assigned to the filler."""
    built_form["form"] = service.assign_form(built_form["form"].id, admin.id, filler.email)
    return built_form
