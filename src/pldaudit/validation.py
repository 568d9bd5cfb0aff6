"""
Payload validation.

Pydantic models for every write payload accepted by the service. Limits and
the allowed character set mirror the assessment UI. Settings (minimum year,
clock) are injected through the pydantic validation context, never read from
the environment here.

Errors surface as ValidationFailedError with one compact message per field.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .config import Settings
from .engine.classification import normalize_criticality, normalize_response
from .exceptions import ValidationFailedError
from .models import AttachmentCategory, Criticality, Response, TestStatus

PayloadT = TypeVar("PayloadT", bound=BaseModel)

ALLOWED_PUNCTUATION = frozenset(".,;:()!?\"'ºª-_/\\")
MAX_ERROR_LENGTH = 180
EMPTY_UPDATE_MESSAGE = "Informe ao menos um campo para atualizar"

# Maximum lengths
ITEM_MAX = 100
LABEL_MAX = 100
DESCRIPTION_MAX = 600
QUESTION_TEXT_MAX = 300
RESPONSE_TEXT_MAX = 500
DEFICIENCY_MAX = 500
RECOMMENDATION_MAX = 300
TEST_REF_MAX = 300
TEST_DESCRIPTION_MAX = 600
EXECUTED_TEST_DESCRIPTION_MAX = 300
CORRECTIVE_PLAN_MAX = 200
ACTION_SHORT_MAX = 300
ACTION_LONG_MAX = 600
CAPITULATION_MAX = 200


def is_allowed_text(value: str) -> bool:
    """Letters, digits, whitespace and simple punctuation only."""
    return all(ch.isalnum() or ch.isspace() or ch in ALLOWED_PUNCTUATION for ch in value)


def compact_message(message: str) -> str:
    """First line only, capped for display."""
    first = (message or "").strip().splitlines()[0] if (message or "").strip() else "Erro"
    if len(first) > MAX_ERROR_LENGTH:
        return first[: MAX_ERROR_LENGTH - 1].rstrip() + "…"
    return first


def _settings(info: ValidationInfo) -> Settings:
    context = info.context or {}
    return context.get("settings") or Settings()


def parse_bounded_date(value: Any, settings: Settings) -> Optional[date]:
    """
    Parse a date field.

    Accepts "YYYY-MM-DD" or an ISO datetime; blank means unset. The year must
    fall between settings.min_allowed_year and the current year.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        raw = str(value).strip()
        if not raw:
            return None
        try:
            parsed = (
                date.fromisoformat(raw)
                if len(raw) == 10
                else datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
            )
        except ValueError as e:
            raise ValueError("Data inválida") from e
    if parsed.year < settings.min_allowed_year:
        raise ValueError(f"Ano muito antigo (mínimo {settings.min_allowed_year})")
    if parsed.year > settings.max_allowed_year:
        raise ValueError(f"Ano não pode ser maior que {settings.max_allowed_year}")
    return parsed


class _Payload(BaseModel):
    """Shared config: strip strings, reject unknown fields, restrict free text."""

    # Fields exempt from the free-text character rules
    raw_fields: ClassVar[frozenset[str]] = frozenset()

    model_config = {
        "str_strip_whitespace": True,
        "extra": "forbid",
    }

    @model_validator(mode="before")
    @classmethod
    def null_text_as_blank(cls, data: Any) -> Any:
        """Explicit null on a plain text field means blank."""
        if not isinstance(data, dict):
            return data
        text_fields = {name for name, field in cls.model_fields.items() if field.annotation is str}
        return {
            key: "" if value is None and key in text_fields else value
            for key, value in data.items()
        }

    @model_validator(mode="after")
    def check_characters(self) -> "_Payload":
        for name in type(self).model_fields:
            if name in self.raw_fields:
                continue
            value = getattr(self, name)
            if isinstance(value, str) and not isinstance(value, Enum):
                if not is_allowed_text(value):
                    raise ValueError(
                        f"{name}: Deve conter apenas caracteres alfanuméricos "
                        f"(com espaços) e pontuação simples"
                    )
        return self


# =============================================================================
# Answers
# =============================================================================

class _AnswerFields(_Payload):
    """Response, criticality and test fields shared by answers and question updates."""
    response: Response = Response.EMPTY
    response_text: str = Field("", max_length=RESPONSE_TEXT_MAX)
    criticality: Optional[Criticality] = None
    deficiency_text: str = Field("", max_length=DEFICIENCY_MAX)
    recommendation_text: str = Field("", max_length=RECOMMENDATION_MAX)
    test_status: Optional[TestStatus] = None
    test_description: str = Field("", max_length=TEST_DESCRIPTION_MAX)
    requisition_ref: str = Field("", max_length=TEST_REF_MAX)
    test_response_ref: str = Field("", max_length=TEST_REF_MAX)
    sample_ref: str = Field("", max_length=TEST_REF_MAX)
    evidence_ref: str = Field("", max_length=TEST_REF_MAX)
    corrective_action_plan: str = Field("", max_length=CORRECTIVE_PLAN_MAX)

    @field_validator("response", mode="before")
    @classmethod
    def parse_response_value(cls, v: Any) -> Response:
        """Accept booleans and any case/accent spelling of Sim/Não."""
        if v is None:
            return Response.EMPTY
        if isinstance(v, bool):
            return Response.SIM if v else Response.NAO
        normalized = normalize_response(v)
        if normalized in {"nao", "n"}:
            return Response.NAO
        if normalized in {"sim", "s"}:
            return Response.SIM
        if normalized == "":
            return Response.EMPTY
        raise ValueError("Resposta deve ser Sim, Não ou vazia")

    @field_validator("criticality", mode="before")
    @classmethod
    def parse_criticality_value(cls, v: Any) -> Optional[Criticality]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        parsed = normalize_criticality(v)
        if parsed is None:
            raise ValueError("Criticidade deve ser BAIXA, MEDIA ou ALTA")
        return parsed

    @field_validator("test_status", mode="before")
    @classmethod
    def parse_test_status(cls, v: Any) -> Optional[TestStatus]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            return TestStatus(str(v).strip().upper())
        except ValueError as e:
            raise ValueError("Status do teste deve ser SIM, NAO ou NAO_PLANO") from e

    @model_validator(mode="after")
    def check_test_fields(self) -> "_AnswerFields":
        if self.test_status is TestStatus.SIM and len(self.test_description) > EXECUTED_TEST_DESCRIPTION_MAX:
            raise ValueError(
                f"Descrição do teste deve ter no máximo {EXECUTED_TEST_DESCRIPTION_MAX} caracteres"
            )
        return self


class AnswerPayload(_AnswerFields):
    """
    Filler's answer to a question.

    A "Não" response requires deficiency text. Test status NAO_PLANO
    requires a corrective action plan.
    """

    @model_validator(mode="after")
    def check_deficiency(self) -> "AnswerPayload":
        if self.response is Response.NAO and not self.deficiency_text:
            raise ValueError('Para resposta "Não", deficiência é obrigatória')
        if self.test_status is TestStatus.NAO_PLANO and not self.corrective_action_plan:
            raise ValueError("Plano de ação corretiva é obrigatório quando o teste não foi realizado")
        return self


class ReviewAnswerPayload(AnswerPayload):
    """Reviewer's edit of an answer; "Não" also requires a recommendation."""

    @model_validator(mode="after")
    def check_recommendation(self) -> "ReviewAnswerPayload":
        if self.response is Response.NAO and not self.recommendation_text:
            raise ValueError('Para resposta "Não", recomendação é obrigatória')
        return self


# =============================================================================
# Builder
# =============================================================================

class SectionPayload(_Payload):
    """New section."""
    item: str = Field(..., min_length=1, max_length=ITEM_MAX)
    custom_label: str = Field("", max_length=LABEL_MAX)
    has_norm: bool = False
    norm_reference: str = Field("", max_length=DESCRIPTION_MAX)
    description: str = Field("", max_length=DESCRIPTION_MAX)


class SectionUpdate(_Payload):
    """Partial section update; only fields sent are applied."""
    item: Optional[str] = Field(None, min_length=1, max_length=ITEM_MAX)
    custom_label: Optional[str] = Field(None, max_length=LABEL_MAX)
    has_norm: Optional[bool] = None
    norm_reference: Optional[str] = Field(None, max_length=DESCRIPTION_MAX)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX)

    @model_validator(mode="after")
    def check_not_empty(self) -> "SectionUpdate":
        if not self.model_fields_set:
            raise ValueError(EMPTY_UPDATE_MESSAGE)
        return self


class QuestionPayload(_Payload):
    """New question."""
    text: str = Field("", max_length=QUESTION_TEXT_MAX)
    description: str = Field("", max_length=DESCRIPTION_MAX)


class QuestionUpdate(_AnswerFields):
    """
    Partial builder update of a question.

    Carries the answer fields plus authoring and corrective-action fields.
    Only fields present in model_fields_set are applied.
    """
    text: Optional[str] = Field(None, max_length=QUESTION_TEXT_MAX)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX)
    is_applicable: Optional[bool] = None
    template_ref: Optional[str] = Field(None, max_length=TEST_REF_MAX)
    capitulation: Optional[str] = Field(None, max_length=CAPITULATION_MAX)
    action_origin: Optional[str] = Field(None, max_length=ACTION_SHORT_MAX)
    action_owner: Optional[str] = Field(None, max_length=ACTION_SHORT_MAX)
    action_description: Optional[str] = Field(None, max_length=ACTION_LONG_MAX)
    action_reported_on: Optional[date] = None
    action_original_deadline: Optional[date] = None
    action_current_deadline: Optional[date] = None
    action_comments: Optional[str] = Field(None, max_length=ACTION_LONG_MAX)

    @field_validator(
        "action_reported_on",
        "action_original_deadline",
        "action_current_deadline",
        mode="before",
    )
    @classmethod
    def parse_action_dates(cls, v: Any, info: ValidationInfo) -> Optional[date]:
        return parse_bounded_date(v, _settings(info))

    @model_validator(mode="after")
    def check_not_empty(self) -> "QuestionUpdate":
        if not self.model_fields_set:
            raise ValueError(EMPTY_UPDATE_MESSAGE)
        return self


class AttachmentPayload(_Payload):
    """Metadata of an uploaded file; the bytes are stored elsewhere."""
    raw_fields: ClassVar[frozenset[str]] = frozenset({"original_name", "filename", "path", "mime_type"})

    category: AttachmentCategory
    original_name: str = Field(..., min_length=1, max_length=255)
    filename: str = Field(..., min_length=1, max_length=255)
    path: str = Field(..., min_length=1, max_length=1024)
    mime_type: str = Field("application/octet-stream", max_length=255)
    size: int = Field(0, ge=0)
    reference_text: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v: Any) -> AttachmentCategory:
        parsed = AttachmentCategory.parse(str(v or ""))
        if parsed is None:
            raise ValueError(f"Categoria de anexo inválida: {v}")
        return parsed

    @model_validator(mode="after")
    def check_reference_length(self) -> "AttachmentPayload":
        limit = TEST_REF_MAX if self.category.is_test_reference else DESCRIPTION_MAX
        if len(self.reference_text) > limit:
            raise ValueError(f"reference_text: Deve ter no máximo {limit} caracteres")
        return self


# =============================================================================
# Entry Point
# =============================================================================

def validate_payload(
    model: type[PayloadT],
    data: Union[dict[str, Any], BaseModel],
    settings: Optional[Settings] = None,
    entity_id: Optional[str] = None,
) -> PayloadT:
    """
    Validate raw data into a payload model.

    Raises:
        ValidationFailedError: With one compact message per offending field
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data, context={"settings": settings or Settings()})
    except ValidationError as e:
        errors = []
        for err in e.errors(include_url=False, include_context=False, include_input=False):
            location = ".".join(str(p) for p in err["loc"])
            message = compact_message(str(err["msg"]).removeprefix("Value error, "))
            errors.append({"field": location or None, "message": message})
        raise ValidationFailedError(
            message=errors[0]["message"] if errors else "Payload inválido",
            details={"errors": errors},
            entity_id=entity_id,
        ) from e
