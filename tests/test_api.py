"""
Tests for the HTTP API.

Uses FastAPI's TestClient against the app with the test service installed,
so no startup pack loading is involved.
"""
import pytest
from fastapi.testclient import TestClient

from api.main import app, install_service


@pytest.fixture
def client(service):
    install_service(service)
    return TestClient(app)


def as_user(user):
    return {"X-Actor-Id": user.id}


def build_over_http(client, admin):
    form = client.post("/forms", json={"name": "PLD 2025"}, headers=as_user(admin)).json()
    section = client.post(
        f"/forms/{form['id']}/sections",
        json={"item": "Conheça seu Cliente"},
        headers=as_user(admin),
    ).json()
    question = client.post(
        f"/sections/{section['id']}/questions",
        json={"text": "Cadastro atualizado?"},
        headers=as_user(admin),
    ).json()
    return form, section, question


class TestHealth:

    def test_health(self, client, policy):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["policy_id"] == policy.id

    def test_request_id_header(self, client):
        assert client.get("/health").headers.get("X-Request-ID")


class TestUsers:

    def test_register(self, client):
        response = client.post("/users", json={"email": "nova@banco.com.br", "role": "trial_admin"})
        assert response.status_code == 201
        assert response.json()["role"] == "TRIAL_ADMIN"

    def test_unknown_role(self, client):
        response = client.post("/users", json={"email": "nova@banco.com.br", "role": "ROOT"})
        assert response.status_code == 422

    def test_duplicate_email(self, client, filler):
        response = client.post("/users", json={"email": filler.email.upper()})
        assert response.status_code == 422
        assert response.json()["code"] == "PA_VALIDATION_FAILED"

    def test_get_unknown_user(self, client):
        assert client.get("/users/ghost").status_code == 404


class TestErrors:

    def test_missing_actor_header(self, client):
        assert client.post("/forms", json={"name": "PLD"}).status_code == 422

    def test_forbidden_body(self, client, filler):
        response = client.post("/forms", json={"name": "PLD"}, headers=as_user(filler))
        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "PA_FORBIDDEN"
        assert set(body) == {"error", "code", "details", "entity_id", "request_id"}
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_not_found(self, client):
        response = client.get("/forms/ghost")
        assert response.status_code == 404
        assert response.json()["entity_id"] == "ghost"

    def test_questions_of_unknown_section(self, client):
        response = client.get("/sections/ghost/questions")
        assert response.status_code == 404
        assert response.json()["code"] == "PA_NOT_FOUND"

    def test_sections_of_unknown_form(self, client):
        assert client.get("/forms/ghost/sections").status_code == 404

    def test_empty_section_patch(self, client, admin, built_form):
        section = built_form["sections"][0]
        response = client.patch(f"/sections/{section.id}", json={}, headers=as_user(admin))
        assert response.status_code == 422

    def test_invalid_state(self, client, filler, assigned_form):
        response = client.post(f"/forms/{assigned_form['form'].id}/submit", headers=as_user(filler))
        assert response.status_code == 409
        assert response.json()["details"]["current_state"] == "ASSIGNED"

    def test_validation_errors_listed(self, client, filler, assigned_form):
        question = assigned_form["questions"][0]
        response = client.put(
            f"/questions/{question.id}/answer",
            json={"response": "Não"},
            headers=as_user(filler),
        )
        assert response.status_code == 422
        errors = response.json()["details"]["errors"]
        assert errors and "deficiência" in errors[0]["message"]


class TestWorkflowOverHttp:

    def test_full_cycle(self, client, admin, filler):
        form, _, question = build_over_http(client, admin)

        assigned = client.post(
            f"/forms/{form['id']}/assign", json={"target": filler.email}, headers=as_user(admin),
        )
        assert assigned.json()["status"] == "ASSIGNED"

        answered = client.put(
            f"/questions/{question['id']}/answer",
            json={"response": "sim"},
            headers=as_user(filler),
        )
        assert answered.status_code == 200
        assert answered.json()["response"] == "Sim"
        assert client.get(f"/forms/{form['id']}").json()["status"] == "IN_PROGRESS"

        submitted = client.post(f"/forms/{form['id']}/submit", headers=as_user(filler))
        assert submitted.json()["status"] == "SUBMITTED"

        returned = client.post(f"/forms/{form['id']}/return", headers=as_user(admin))
        assert returned.json()["status"] == "RETURNED"

        client.post(f"/forms/{form['id']}/submit", headers=as_user(filler))
        approved = client.post(f"/forms/{form['id']}/approve", headers=as_user(admin))
        assert approved.json()["status"] == "COMPLETED"
        assert approved.json()["reviewed_at"] is not None

    def test_progress(self, client, filler, assigned_form):
        question = assigned_form["questions"][0]
        client.put(f"/questions/{question.id}/answer", json={"response": "Sim"}, headers=as_user(filler))

        data = client.get(f"/forms/{assigned_form['form'].id}/progress").json()
        assert data["answered"] == 1
        assert data["applicable"] == 3
        assert data["percent"] == 33
        assert len(data["sections"]) == 2

    def test_submit_all_reports_skipped(self, client, filler, assigned_form):
        response = client.post("/forms/submit-all", headers=as_user(filler))
        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"] == 0
        assert data["skipped"] == 1
        assert data["outcomes"][0]["error_code"] == "PA_INVALID_STATE"

    def test_toggle_applicable(self, client, filler, assigned_form):
        question = assigned_form["questions"][2]
        response = client.put(
            f"/questions/{question.id}/applicable", json={"value": False}, headers=as_user(filler),
        )
        assert response.status_code == 200
        assert response.json()["is_applicable"] is False

    def test_reorder(self, client, admin, built_form):
        governance, monitoring = built_form["sections"]
        response = client.put(
            f"/reorder/{built_form['form'].id}",
            json={"ordered_ids": [monitoring.id, governance.id]},
            headers=as_user(admin),
        )
        assert response.status_code == 204

        listed = client.get(f"/forms/{built_form['form'].id}/sections").json()
        assert [s["id"] for s in listed] == [monitoring.id, governance.id]
        assert [s["order"] for s in listed] == [0, 1]

    def test_list_questions(self, client, built_form):
        governance = built_form["sections"][0]
        listed = client.get(f"/sections/{governance.id}/questions").json()
        assert [q["text"] for q in listed] == ["Existe política aprovada?", "Há treinamento anual?"]


class TestReportsOverHttp:

    def test_full_report_incomplete(self, client, admin, assigned_form):
        response = client.get(
            f"/forms/{assigned_form['form'].id}/report",
            params={"report_type": "FULL"},
            headers=as_user(admin),
        )
        assert response.status_code == 409
        assert response.json()["code"] == "PA_INCOMPLETE_ASSESSMENT"

    def test_report_json(self, client, admin, filler):
        form, _, question = build_over_http(client, admin)
        client.post(f"/forms/{form['id']}/assign", json={"target": filler.id}, headers=as_user(admin))
        client.put(
            f"/questions/{question['id']}/answer",
            json={"response": "Não", "criticality": "alta", "deficiency_text": "Cadastro desatualizado"},
            headers=as_user(filler),
        )

        response = client.get(
            f"/forms/{form['id']}/report", params={"report_type": "FULL"}, headers=as_user(admin),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["report_type"] == "FULL"
        assert data["conclusion"]["rows"][-1] == {
            "label": "TOTAL", "baixa": 0, "media": 0, "alta": 1, "total": 1,
        }
        assert data["effectiveness"]["verdict"] == "EFETIVO"
        assert data["effectiveness"]["domain_hits"]["CSC"] is True

    def test_invalid_report_type(self, client, admin, assigned_form):
        response = client.get(
            f"/forms/{assigned_form['form'].id}/report",
            params={"report_type": "DRAFT"},
            headers=as_user(admin),
        )
        assert response.status_code == 422

    def test_markdown(self, client, admin, assigned_form):
        response = client.get(
            f"/forms/{assigned_form['form'].id}/report/markdown", headers=as_user(admin),
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert response.text.startswith("# Relatório PLD")

    def test_unrelated_actor(self, client, other_filler, assigned_form):
        response = client.get(
            f"/forms/{assigned_form['form'].id}/report", headers=as_user(other_filler),
        )
        assert response.status_code == 403
