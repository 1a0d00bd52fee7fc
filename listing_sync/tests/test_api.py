"""API endpoint tests"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from listing_sync.core.config import REQUIRED_SYNC_SETTINGS, settings
from listing_sync.core.exceptions import ConfigurationError
from listing_sync.main import app
from listing_sync.schemas.sync import SyncRunResult, TablePassResult
from listing_sync.services import run_history as run_history_module
from listing_sync.services.run_history import RunHistory


def _result(failed=()):
    now = datetime.now(timezone.utc)
    table_pass = TablePassResult(label="internal", table_id="internal-1", processed=2)
    return SyncRunResult(
        started_at=now, ended_at=now, fetched=2, active=2, tables=[table_pass], failed_listings=list(failed)
    )


class TestAPI:
    """Test API endpoints"""

    @pytest.fixture
    def client(self):
        """Create test client"""
        return TestClient(app)

    @pytest.fixture(autouse=True)
    def fresh_history(self, monkeypatch):
        history = RunHistory()
        for module in ("listing_sync.api.routes.sync", "listing_sync.api.routes.health",
                       "listing_sync.api.routes.stats", "listing_sync.services.run_history"):
            monkeypatch.setattr(f"{module}.run_history", history)
        return history

    @pytest.fixture
    def fake_sync(self, monkeypatch):
        results = []

        async def fake_run():
            result = results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result

        monkeypatch.setattr(run_history_module, "run_configured_sync", fake_run)
        return results

    def test_health_before_any_run(self, client):
        """Test health check endpoint"""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["last_sync_success"] is None

    def test_trigger_sync_records_history(self, client, fake_sync):
        """Test a triggered run is returned and shows up in stats and health"""
        fake_sync.append(_result(failed=["1 Broken Way"]))

        response = client.post("/sync/run")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["result"]["failed_listings"] == ["1 Broken Way"]

        stats = client.get("/stats").json()
        assert len(stats) == 1
        assert stats[0]["processed"] == {"internal": 2}
        assert client.get("/health").json()["last_sync_success"] is False

    def test_trigger_sync_without_configuration(self, client, fake_sync):
        fake_sync.append(ConfigurationError("Missing required environment variables"))

        response = client.post("/sync/run")

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert "Missing" in response.json()["error"]

    def test_readiness_reports_missing_settings(self, client, monkeypatch):
        for name in REQUIRED_SYNC_SETTINGS:
            monkeypatch.setattr(settings, name, "value")
        monkeypatch.setattr(settings, "HUBDB_TABLE_ID", None)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["missing"] == ["HUBDB_TABLE_ID"]

    def test_invalid_endpoint(self, client):
        """Test invalid endpoint returns 404"""
        response = client.get("/invalid")
        assert response.status_code == 404


class TestRunHistory:
    """In-memory run history"""

    def test_recent_is_newest_first_and_bounded(self):
        history = RunHistory(maxlen=2)
        first, second, third = _result(), _result(failed=["x"]), _result()
        for result in (first, second, third):
            history.record(result)

        assert history.recent() == [third, second]
        assert history.last is third

    @pytest.mark.asyncio
    async def test_running_while_locked(self):
        history = RunHistory()
        assert not history.running
        async with history.lock:
            assert history.running
