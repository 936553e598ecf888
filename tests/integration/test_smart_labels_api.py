"""API tests for smart label rule management and backfill."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from labelq.api.app import app
from labelq.api.routes.smart_labels import get_smart_label_service


@pytest.fixture
def client(temp_db):
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client, **overrides):
    body = {"label_id": "L1", "ai_description": "Messages from the boss", "criteria": {"from": "boss"}}
    body.update(overrides)
    return client.post("/api/accounts/acct-1/smart-labels", json=body)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_and_list(client):
    created = _create(client)
    assert created.status_code == 201
    rule = created.json()
    assert rule["criteria"] == {"from": "boss"}
    assert rule["is_enabled"] is True

    listed = client.get("/api/accounts/acct-1/smart-labels").json()
    assert [r["id"] for r in listed] == [rule["id"]]
    assert client.get("/api/accounts/acct-2/smart-labels").json() == []


def test_create_rejects_blank_description(client):
    response = _create(client, ai_description="   ")
    assert response.status_code == 422
    assert "ai_description" in response.json()["invalid_fields"]


def test_update_partial_and_clear_criteria(client):
    rule_id = _create(client).json()["id"]

    renamed = client.put(f"/api/smart-labels/{rule_id}", json={"ai_description": "Leadership"})
    assert renamed.status_code == 200
    assert renamed.json()["criteria"] == {"from": "boss"}

    cleared = client.put(f"/api/smart-labels/{rule_id}", json={"criteria": None})
    assert cleared.json()["criteria"] is None
    assert cleared.json()["ai_description"] == "Leadership"


def test_update_missing_rule(client):
    response = client.put("/api/smart-labels/nope", json={"is_enabled": False})
    assert response.status_code == 404


def test_delete(client):
    rule_id = _create(client).json()["id"]
    assert client.delete(f"/api/smart-labels/{rule_id}").status_code == 204
    assert client.delete(f"/api/smart-labels/{rule_id}").status_code == 404


def test_backfill(client):
    service = Mock()
    service.backfill.return_value = 7
    app.dependency_overrides[get_smart_label_service] = lambda: service

    response = client.post("/api/accounts/acct-1/smart-labels/backfill", json={"batch_size": 25})

    assert response.status_code == 200
    assert response.json() == {"account_id": "acct-1", "labels_applied": 7}
    service.backfill.assert_called_once_with("acct-1", 25)


def test_backfill_default_batch_size(client):
    service = Mock()
    service.backfill.return_value = 0
    app.dependency_overrides[get_smart_label_service] = lambda: service

    assert client.post("/api/accounts/acct-1/smart-labels/backfill").status_code == 200
    service.backfill.assert_called_once_with("acct-1", 50)


def test_backfill_rejects_bad_batch_size(client):
    response = client.post("/api/accounts/acct-1/smart-labels/backfill", json={"batch_size": 0})
    assert response.status_code == 422


def test_backfill_failure_is_sanitized(client):
    service = Mock()
    service.backfill.side_effect = RuntimeError("sqlite3.OperationalError: disk I/O error at /srv/x.py")
    app.dependency_overrides[get_smart_label_service] = lambda: service

    response = client.post("/api/accounts/acct-1/smart-labels/backfill")

    assert response.status_code == 500
    assert response.json()["detail"] == "Smart label backfill failed"
