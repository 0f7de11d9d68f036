# tests/test_api.py
"""
HTTP adapter tests for the MedIntake API.
Covers routing, error mapping and security headers.
"""

import random
import time

import pytest
from fastapi.testclient import TestClient

import medintake.core.orchestrator as orchestrator_module
from medintake.core.config import Settings
from medintake.core.flow_engine import WorkflowEngine, build_evaluators
from medintake.main import app, limiter


@pytest.fixture
def client():
    limiter.enabled = False
    with TestClient(app) as client:
        config = Settings(PROCESSING_DELAY_SECONDS=0, _env_file=None)
        orchestrator_module.init_orchestrator(
            workflow_engine=WorkflowEngine(
                evaluators=build_evaluators(config, random.Random(42)),
                processing_delay=0,
            ),
            config=config,
        )
        yield client
    limiter.enabled = True


def wait_for_stage(client, session_id, stage, attempts=100):
    for _ in range(attempts):
        body = client.get(f"/workflows/{session_id}").json()
        if body["stage"] == stage:
            return body
        time.sleep(0.01)
    pytest.fail(f"Session {session_id} never reached {stage}")


def start(client, kind):
    response = client.post(f"/workflows/{kind}")
    assert response.status_code == 201
    return response.json()["session_id"]


class TestPublicEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "medintake"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_headers(self, client):
        response = client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_catalog(self, client):
        response = client.get("/i18n/de")

        assert response.status_code == 200
        assert "notify.location_found.title" in response.json()

    def test_unknown_catalog(self, client):
        assert client.get("/i18n/xx").status_code == 404


class TestWorkflowEndpoints:

    def test_start_unknown_kind(self, client):
        assert client.post("/workflows/pharmacy").status_code == 422

    def test_unknown_session(self, client):
        response = client.get("/workflows/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "SessionError"

    def test_update_fields(self, client):
        session_id = start(client, "verification")

        response = client.put(
            f"/workflows/{session_id}/fields",
            json={"values": {"first_name": "Ada", "last_name": "Okafor",
                             "email": "ada@example.org", "phone": "+1 555 0100"}},
        )

        assert response.status_code == 200
        assert response.json()["completeness"] == 33
        assert response.json()["sections"]["personal"] is True

    def test_wrong_field_type(self, client):
        session_id = start(client, "triage")

        response = client.put(f"/workflows/{session_id}/fields", json={"values": {"symptoms": 12}})

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "symptoms"

    def test_incomplete_submit(self, client):
        session_id = start(client, "dispatch")

        response = client.post(f"/workflows/{session_id}/submit")

        assert response.status_code == 422
        assert response.json()["details"]["sections"] == ["location", "emergency"]
        assert client.get(f"/workflows/{session_id}").json()["stage"] == "collecting"

    def test_location_unsupported(self, client):
        session_id = start(client, "dispatch")

        response = client.post(f"/workflows/{session_id}/location")

        assert response.status_code == 424
        assert response.json()["details"]["reason"] == "unsupported"

        notifications = client.get(f"/workflows/{session_id}/notifications").json()
        assert notifications[-1]["title"] == "Location not supported"

    def test_manual_location(self, client):
        session_id = start(client, "dispatch")

        response = client.put(
            f"/workflows/{session_id}/location",
            json={"address": "1 Main St", "latitude": 40.7128, "longitude": -74.006},
        )

        assert response.status_code == 200
        assert response.json()["address"] == "1 Main St"

    def test_document_upload(self, client):
        session_id = start(client, "verification")

        response = client.post(
            f"/workflows/{session_id}/documents/government_id",
            json={"reference": "uploads/id.png"},
        )

        assert response.status_code == 200
        assert response.json()["fields"]["government_id"] == "uploads/id.png"

    def test_restart_and_discard(self, client):
        session_id = start(client, "triage")

        restarted = client.post(f"/workflows/{session_id}/restart")
        assert restarted.status_code == 201
        new_id = restarted.json()["session_id"]
        assert new_id != session_id
        assert client.get(f"/workflows/{session_id}").status_code == 404

        assert client.delete(f"/workflows/{new_id}").status_code == 204
        assert client.delete(f"/workflows/{new_id}").status_code == 404


@pytest.mark.integration
class TestCompleteWorkflows:

    def test_triage_workflow(self, client):
        session_id = start(client, "triage")
        client.put(
            f"/workflows/{session_id}/fields",
            json={"values": {"symptoms": "Chest pain when climbing stairs", "severity": "high", "duration": "hours"}},
        )

        response = client.post(f"/workflows/{session_id}/submit")
        assert response.status_code == 202
        assert response.json()["request_id"].startswith("TRI-")

        body = wait_for_stage(client, session_id, "resolved")
        assert body["result"]["severity"] == "emergency"
        assert body["flow_complete"] is True

        again = client.post(f"/workflows/{session_id}/submit")
        assert again.status_code == 409

    def test_dispatch_workflow(self, client):
        session_id = start(client, "dispatch")
        client.put(
            f"/workflows/{session_id}/location",
            json={"address": "1 Main St", "latitude": 40.7128, "longitude": -74.006},
        )
        client.put(f"/workflows/{session_id}/fields", json={"values": {"emergency_tier": "urgent"}})

        assert client.post(f"/workflows/{session_id}/submit").status_code == 202

        body = wait_for_stage(client, session_id, "resolved")
        assert body["request_id"].startswith("AMB-")
        assert 5 <= body["result"]["eta_minutes"] <= 20

    def test_verification_review(self, client, verification_values):
        session_id = start(client, "verification")
        client.put(f"/workflows/{session_id}/fields", json={"values": verification_values})

        assert client.post(f"/workflows/{session_id}/submit").status_code == 202
        body = wait_for_stage(client, session_id, "resolved")
        assert body["result"]["status"] == "pending"

        response = client.post(
            f"/workflows/{session_id}/review",
            json={"status": "rejected", "note": "License expired"},
        )

        assert response.status_code == 200
        assert response.json()["result"]["status"] == "rejected"
        assert response.json()["result"]["review_note"] == "License expired"
