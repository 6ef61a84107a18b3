"""Unit tests for health check endpoints."""

from unittest.mock import AsyncMock

from timeboard import __version__
from timeboard.api.dependencies import get_snapshot_store


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    def test_health_returns_200_when_healthy(self, api) -> None:
        response = api.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        names = [c["name"] for c in data["components"]]
        assert names == ["snapshot_store", "idempotency_store", "time_entry_store", "upstream"]

    def test_health_does_not_call_upstream(self, api) -> None:
        api.client.get("/health")

        api.toggl.list_entries.assert_not_awaited()
        api.toggl.get_current_entry.assert_not_awaited()

    def test_failing_snapshot_store_degrades(self, api) -> None:
        """A broken durable tier degrades health but reads still work."""
        broken = AsyncMock()
        broken.get_latest.side_effect = ConnectionError("refused")
        api.app.dependency_overrides[get_snapshot_store] = lambda: broken

        data = api.client.get("/health").json()

        assert data["status"] == "degraded"
        snapshot = next(c for c in data["components"] if c["name"] == "snapshot_store")
        assert snapshot["message"] == "refused"


class TestMetricsEndpoint:
    """Tests for GET /metrics endpoint."""

    def test_metrics_returns_prometheus_format(self, api) -> None:
        api.client.get("/v1/entries", params={"member": "Ana", "date": "2024-05-01"})

        response = api.client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "timeboard_degraded_responses_total" in response.text
