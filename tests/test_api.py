"""HTTP surface: error payloads from the lead queue endpoints."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from lead_engine.db.session import get_db
from lead_engine.errors import LeadQueueConflictError
from lead_engine.main import app
from lead_engine.routers import lead_queue as lead_queue_router


pytestmark = pytest.mark.unit


class EmptyResult:
    def scalar_one_or_none(self):
        return None


class FakeSession:
    async def execute(self, *args, **kwargs):
        return EmptyResult()


async def fake_db():
    yield FakeSession()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_missing_queue_returns_404(client):
    response = client.get("/lead-queue/2025-06-04")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "lead_queue_not_found"


def test_duplicate_run_returns_409(client, monkeypatch, engine_config):
    class StaticConfigRepository:
        def __init__(self, db):
            pass

        async def load(self, settings):
            return engine_config

    class ConflictingService:
        def __init__(self, **kwargs):
            pass

        async def run(self, run_date=None, dry_run=False):
            raise LeadQueueConflictError(run_date)

    monkeypatch.setattr(lead_queue_router, "EngineConfigRepository", StaticConfigRepository)
    monkeypatch.setattr(lead_queue_router, "ScoringService", ConflictingService)

    response = client.post("/lead-queue/runs", json={"run_date": "2025-06-04"})

    assert response.status_code == 409
    body = response.json()["error"]
    assert body["code"] == "lead_queue_exists"
    assert body["details"] == {"run_date": date(2025, 6, 4).isoformat()}
