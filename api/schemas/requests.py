"""Request schemas for the API.

Answer, section, question and attachment bodies are passed through to the
service as plain dicts; their rules live in pldaudit.validation.
"""

from pydantic import BaseModel, Field
from typing import Optional


class RegisterUserRequest(BaseModel):
    """New actor."""
    email: str = Field(..., description="Login email (unique, case-insensitive)")
    name: str = Field(default="", description="Display name")
    role: str = Field(default="USER", description="ADMIN|TRIAL_ADMIN|USER")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"email": "revisor@banco.com.br", "name": "Revisora", "role": "ADMIN"},
            ]
        }
    }


class InstitutionInput(BaseModel):
    """Evaluated institution."""
    name: str
    cnpj: str = ""


class MetadataInput(BaseModel):
    """Report settings stored with a form."""
    institutions: list[InstitutionInput] = Field(default=[])
    evaluator_qualification: str = ""
    include_recommendations: bool = True
    show_effectiveness: bool = True


class CreateFormRequest(BaseModel):
    """New form."""
    name: str = Field(..., description="Form name")
    metadata: Optional[MetadataInput] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Avaliação de Efetividade PLD/FTP 2025",
                    "metadata": {
                        "institutions": [{"name": "Banco Exemplo S.A.", "cnpj": "00.000.000/0001-00"}],
                        "evaluator_qualification": "Auditoria Interna",
                    },
                }
            ]
        }
    }


class AssignRequest(BaseModel):
    """Assignment target, by user id or email."""
    target: str = Field(..., description="Filler user id or email")


class ReturnAllRequest(BaseModel):
    """Return every submitted form of one filler."""
    assignee_id: str


class ApplicableRequest(BaseModel):
    """Applicability toggle."""
    value: bool


class ReorderRequest(BaseModel):
    """New order of a form's sections or a section's questions."""
    ordered_ids: list[str] = Field(..., description="Child ids in the desired order")
