"""Tests for the FastAPI application."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from landingpage import api
from landingpage.api import app, initialize_collector
from landingpage.errors import ScanFailed
from landingpage.models import ClusterEntry, GroupEntry, RouteEntry
from landingpage.scheduler import SnapshotHandle


@pytest.fixture
def snapshot():
    return (
        GroupEntry(name="local", clusters=(
            ClusterEntry(name="local", description="Home", routes=(
                RouteEntry(name="Grafana", description="Dashboards", url="https://grafana.example.com/"),
                RouteEntry(name="<script>", description="", url="https://evil.example.com/"),
            )),
        )),
        GroupEntry(name="production", clusters=()),
    )


@pytest.fixture
def client(snapshot):
    """Test client with a published snapshot and no background refresh."""
    with patch.object(api, "handle", SnapshotHandle(snapshot)):
        yield TestClient(app)


@pytest.fixture
def reset_api_state():
    yield
    api._config = None
    api._home_client = None
    api.scheduler = None
    api.handle = None


class TestEndpoints:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "OK"

    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Grafana" in response.text
        assert "https://grafana.example.com/" in response.text
        assert "Dashboards" in response.text
        assert "production" in response.text
        assert "No clusters available." in response.text

    def test_index_escapes_annotation_values(self, client):
        response = client.get("/")
        assert 'rel="noopener">&lt;script&gt;</a>' in response.text

    def test_groups(self, client):
        response = client.get("/api/groups")

        assert response.status_code == 200
        data = response.json()
        assert [g["name"] for g in data] == ["local", "production"]
        assert data[0]["clusters"][0]["routes"][0] == {
            "name": "Grafana",
            "description": "Dashboards",
            "url": "https://grafana.example.com/",
        }
        assert data[1]["clusters"] == []

    def test_status(self, client):
        response = client.get("/api/status")

        assert response.status_code == 200
        data = response.json()
        assert data["generation"] == 1
        assert data["groups"] == 2

    def test_not_ready(self):
        with patch.object(api, "handle", None):
            test_client = TestClient(app)
            assert test_client.get("/api/groups").status_code == 503
            assert test_client.get("/api/status").status_code == 503


class TestLifecycle:
    """Tests for the startup and shutdown hooks."""

    @patch("landingpage.scheduler.build_snapshot", new_callable=AsyncMock)
    def test_startup_publishes_snapshot(self, mock_build, snapshot, sample_config, home_client, reset_api_state):
        mock_build.return_value = snapshot
        initialize_collector(sample_config, home_client)

        with TestClient(app) as test_client:
            response = test_client.get("/api/groups")
            assert response.status_code == 200
            assert [g["name"] for g in response.json()] == ["local", "production"]

        mock_build.assert_awaited_once_with(sample_config, home_client)

    @patch("landingpage.scheduler.build_snapshot", new_callable=AsyncMock)
    def test_startup_failure_is_fatal(self, mock_build, sample_config, home_client, reset_api_state):
        mock_build.side_effect = ScanFailed("home cluster down")
        initialize_collector(sample_config, home_client)

        with pytest.raises(ScanFailed):
            with TestClient(app):
                pass

    def test_startup_without_config(self, reset_api_state):
        with TestClient(app) as test_client:
            assert test_client.get("/health").status_code == 200
            assert test_client.get("/").status_code == 503
