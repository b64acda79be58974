"""REST API tests.

Runs the FastAPI app through TestClient with the DB session and the
service dependency overridden, so routes, status-code mapping and header
handling are exercised without a database.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from compliance_navigator.errors import TreeLoadError
from compliance_navigator.service import AssessmentService
from compliance_server.app import _load_tree, create_app
from compliance_server.config import ServerSettings
from compliance_server.dependencies import get_db, get_service, get_store

from helpers.mocks import MockRepository

HEADERS = {"X-User-ID": "user1"}
BASE = "/api/v1/assessments"


def _build_client(store, settings=None):
    app = create_app(settings or ServerSettings())
    service = AssessmentService(store)
    service._repo = MockRepository()

    async def override_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)


@pytest.fixture
def client(store):
    return _build_client(store)


@pytest.fixture
def created(client):
    resp = client.post(BASE, json={"assessment_id": "a1"}, headers=HEADERS)
    assert resp.status_code == 201, resp.text
    return client


# =====================================================================
# Assessments
# =====================================================================


class TestAssessments:
    def test_create_and_get(self, created):
        resp = created.get(f"{BASE}/a1", headers=HEADERS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["assessment_id"] == "a1"
        assert body["status"] == "in_progress"
        assert body["current_question_id"] == "q1_human_subjects"

    def test_missing_user_header_is_401(self, client):
        resp = client.post(BASE, json={"assessment_id": "a1"})
        assert resp.status_code == 401

    def test_duplicate_is_409(self, created):
        resp = created.post(BASE, json={"assessment_id": "a1"}, headers=HEADERS)
        assert resp.status_code == 409

    def test_unknown_is_404(self, client):
        resp = client.get(f"{BASE}/nope", headers=HEADERS)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Resource not found"

    def test_other_users_assessment_is_404(self, created):
        resp = created.get(f"{BASE}/a1", headers={"X-User-ID": "someone-else"})
        assert resp.status_code == 404

    def test_list(self, created):
        created.post(BASE, json={"assessment_id": "a2"}, headers=HEADERS)
        resp = created.get(BASE, headers=HEADERS)
        assert resp.status_code == 200
        assert {a["assessment_id"] for a in resp.json()} == {"a1", "a2"}

        resp = created.get(BASE, params={"status": "completed"}, headers=HEADERS)
        assert resp.json() == []

    def test_list_rejects_bad_limit(self, client):
        resp = client.get(BASE, params={"limit": 0}, headers=HEADERS)
        assert resp.status_code == 422

    def test_delete(self, created):
        resp = created.delete(f"{BASE}/a1", headers=HEADERS)
        assert resp.status_code == 204
        assert created.get(f"{BASE}/a1", headers=HEADERS).status_code == 404

    def test_restart(self, created):
        created.post(f"{BASE}/a1/answer", json={"value": "No"}, headers=HEADERS)
        created.post(f"{BASE}/a1/advance", headers=HEADERS)
        resp = created.post(f"{BASE}/a1/restart", headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json()["type"] == "question"


# =====================================================================
# Steps
# =====================================================================


class TestSteps:
    def test_current_step(self, created):
        resp = created.get(f"{BASE}/a1/step", headers=HEADERS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["type"] == "question"
        assert body["question"]["id"] == "q1_human_subjects"
        assert body["navigation"]["can_advance"] is False

    def test_answer_then_advance(self, created):
        resp = created.post(f"{BASE}/a1/answer", json={"value": "Yes"}, headers=HEADERS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["answer"] == "Yes"
        assert body["checklist"][0]["text"] == "Complete CITI Human Subjects Research training"

        resp = created.post(f"{BASE}/a1/advance", headers=HEADERS)
        assert resp.json()["question"]["id"] == "q2_funding"

        resp = created.post(f"{BASE}/a1/retreat", headers=HEADERS)
        assert resp.json()["question"]["id"] == "q1_human_subjects"

    def test_invalid_answer_is_400_with_message(self, created):
        resp = created.post(f"{BASE}/a1/answer", json={"value": "Maybe"}, headers=HEADERS)
        assert resp.status_code == 400
        assert "Maybe" in resp.json()["detail"]

    def test_unknown_question_is_404(self, created):
        resp = created.post(
            f"{BASE}/a1/answer", json={"question_id": "ghost", "value": "Yes"}, headers=HEADERS
        )
        assert resp.status_code == 404

    def test_retreat_on_first_question_is_400(self, created):
        resp = created.post(f"{BASE}/a1/retreat", headers=HEADERS)
        assert resp.status_code == 400

    def test_finish_and_answer_after_completion(self, created):
        resp = created.post(f"{BASE}/a1/finish", headers=HEADERS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["type"] == "completed"
        assert body["terminal"] == "summary"
        assert body["summary"]["timeline"]["display"] == "1-3 months"

        resp = created.post(f"{BASE}/a1/answer", json={"value": "Yes"}, headers=HEADERS)
        assert resp.status_code == 409

    def test_checklist_and_summary(self, created):
        created.post(f"{BASE}/a1/answer", json={"value": "Yes"}, headers=HEADERS)
        resp = created.get(f"{BASE}/a1/checklist", headers=HEADERS)
        assert resp.status_code == 200
        assert [e["text"] for e in resp.json()] == [
            "Complete CITI Human Subjects Research training",
        ]

        resp = created.get(f"{BASE}/a1/summary", headers=HEADERS)
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()["phases"]] == [1, 2, 4]


# =====================================================================
# Tree
# =====================================================================


class TestTree:
    def test_metadata(self, client):
        resp = client.get("/api/v1/tree/metadata")
        assert resp.status_code == 200
        body = resp.json()
        assert body["title"] == "Research Compliance Navigator"
        assert body["question_count"] == 15
        assert body["substantive_question_count"] == 12

    def test_phases(self, client):
        resp = client.get("/api/v1/tree/phases")
        assert [p["id"] for p in resp.json()] == [1, 2, 3, 4]

    def test_questions_exclude_endpoints(self, client):
        ids = [q["id"] for q in client.get("/api/v1/tree/questions").json()]
        assert len(ids) == 13
        assert "q_qi" not in ids and "q_contact_irb" not in ids


# =====================================================================
# Proxy secret
# =====================================================================


class TestProxySecret:
    @pytest.fixture
    def secured(self, store):
        return _build_client(store, ServerSettings(trusted_proxy_secret="s3cret"))

    def test_missing_secret_is_403(self, secured):
        resp = secured.get(BASE, headers=HEADERS)
        assert resp.status_code == 403

    def test_wrong_secret_is_403(self, secured):
        resp = secured.get(BASE, headers={**HEADERS, "X-Proxy-Secret": "nope"})
        assert resp.status_code == 403

    def test_matching_secret_passes(self, secured):
        resp = secured.get(BASE, headers={**HEADERS, "X-Proxy-Secret": "s3cret"})
        assert resp.status_code == 200


# =====================================================================
# Health
# =====================================================================


class TestHealth:
    def test_ok_when_database_answers(self, client, monkeypatch):
        async def ping():
            return None

        monkeypatch.setattr("compliance_server.app.ping_database", ping)
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_error_when_database_unreachable(self, client, monkeypatch):
        async def ping():
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr("compliance_server.app.ping_database", ping)
        body = client.get("/health").json()
        assert body["status"] == "error"
        assert "connection refused" in body["detail"]


def test_missing_tree_stops_startup(tmp_path, caplog):
    settings = ServerSettings(tree_path=str(tmp_path / "missing.yaml"))
    with pytest.raises(TreeLoadError, match="Missing decision tree"):
        _load_tree(settings)
    assert "refusing to start" in caplog.text
