"""
Tests for the exception hierarchy.
"""
import pytest

from pldaudit.exceptions import (
    ForbiddenError,
    IncompleteAssessmentError,
    InvalidContentError,
    InvalidStateError,
    NotFoundError,
    PldAuditError,
    PolicyLoadError,
    PolicyValidationError,
    PolicyVersionMismatch,
    ValidationFailedError,
)


@pytest.mark.parametrize("error_class, code", [
    (NotFoundError, "PA_NOT_FOUND"),
    (ForbiddenError, "PA_FORBIDDEN"),
    (InvalidStateError, "PA_INVALID_STATE"),
    (ValidationFailedError, "PA_VALIDATION_FAILED"),
    (InvalidContentError, "PA_INVALID_CONTENT"),
    (IncompleteAssessmentError, "PA_INCOMPLETE_ASSESSMENT"),
    (PolicyLoadError, "PA_POLICY_LOAD_ERROR"),
    (PolicyValidationError, "PA_POLICY_VALIDATION_ERROR"),
    (PolicyVersionMismatch, "PA_POLICY_VERSION_MISMATCH"),
])
def test_codes(error_class, code):
    error = error_class(message="boom")
    assert isinstance(error, PldAuditError)
    assert error.code == code


def test_str_includes_code_and_entity():
    error = NotFoundError(message="Formulário não encontrado", entity_id="form-1")
    assert str(error) == "[PA_NOT_FOUND] Formulário não encontrado (entity: form-1)"


def test_to_dict_omits_empty_context():
    assert ForbiddenError(message="nope").to_dict() == {"code": "PA_FORBIDDEN", "message": "nope"}


def test_to_dict_with_details():
    error = ValidationFailedError(
        message="Obrigatório",
        details={"errors": [{"field": "name", "message": "Obrigatório"}]},
        entity_id="form-1",
    )
    data = error.to_dict()
    assert data["details"]["errors"][0]["field"] == "name"
    assert data["entity_id"] == "form-1"


def test_invalid_state_for_action():
    error = InvalidStateError.for_action(
        entity_id="form-1",
        action="SUBMIT",
        current_state="ASSIGNED",
        required_states=["RETURNED", "IN_PROGRESS"],
    )
    assert error.details == {
        "action": "SUBMIT",
        "current_state": "ASSIGNED",
        "required_states": ["IN_PROGRESS", "RETURNED"],
    }
    assert "submit" in error.message
    assert error.entity_id == "form-1"


def test_raise_and_catch_as_base():
    with pytest.raises(PldAuditError) as exc_info:
        raise IncompleteAssessmentError(message="9/10", details={"answered": 9, "applicable": 10})
    assert exc_info.value.details["applicable"] == 10
