"""Tests for the dashboard API."""

import pytest
from fastapi.testclient import TestClient

from skillforge import __version__
from skillforge.dashboard import create_app
from skillforge.db import utcnow
from skillforge.models.ledger import EventModule, LifecycleEvent, RunSample


@pytest.fixture
def client(ledger):
    """Test client over a ledger with one profiled skill."""
    ledger.register_skill("summarize", "/skills/summarize/SKILL.md")
    ledger.register_skill("idle", "/skills/idle/SKILL.md")
    for ms in (100.0, 200.0, 300.0):
        ledger.record_run(
            RunSample(
                skill_id="summarize",
                elapsed_ms=ms,
                tokens_in=500,
                tokens_out=100,
                success=True,
                timestamp=utcnow(),
            )
        )
    ledger.record_event(
        LifecycleEvent(
            timestamp=utcnow(),
            module=EventModule.PROFILER,
            action="batch-complete",
            skill_id="summarize",
            details="Profiled 3 iterations (0 failed)",
        )
    )
    return TestClient(create_app(ledger.db_path))


class TestDashboardAPI:
    """Tests for the read-only endpoints."""

    def test_health(self, client):
        """Test health check reports the package version."""
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    def test_export(self, client):
        """Test the snapshot endpoint."""
        response = client.get("/api/export")

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["skills_tracked"] == 1
        assert data["summary"]["total_runs"] == 3
        assert data["summary"]["avg_runtime_ms"] == pytest.approx(200.0)
        assert data["events"][0]["action"] == "batch-complete"

    def test_list_skills(self, client):
        """Test the registry listing includes skills without runs."""
        response = client.get("/api/skills")

        assert response.status_code == 200
        assert [s["skill_id"] for s in response.json()] == ["idle", "summarize"]

    def test_skill_detail(self, client):
        """Test one skill's aggregate, score and events."""
        response = client.get("/api/skills/summarize")

        assert response.status_code == 200
        data = response.json()
        assert data["entry"]["state"] == "pending"
        assert data["aggregate"]["total_runs"] == 3
        assert data["score"]["recommendation"] == "ok"
        assert len(data["events"]) == 1

    def test_skill_detail_event_limit(self, client):
        """Test the events query parameter."""
        response = client.get("/api/skills/summarize", params={"events": 0})

        assert response.status_code == 200
        assert response.json()["events"] == []

    def test_registered_skill_without_runs(self, client):
        """Test a registered skill with no samples has an empty aggregate."""
        response = client.get("/api/skills/idle")

        assert response.status_code == 200
        assert response.json()["aggregate"]["total_runs"] == 0

    def test_unknown_skill(self, client):
        """Test 404 for a skill the ledger has never seen."""
        response = client.get("/api/skills/ghost")

        assert response.status_code == 404
