"""Unit tests for API endpoints."""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from megasquirt_logger.api.dependencies import app_state
from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.config import Settings
from megasquirt_logger.core.models import ChannelValue, RecordSnapshot
from megasquirt_logger.main import app
from megasquirt_logger.protocol.frames import hex_dump
from megasquirt_logger.serial.session import ConnectionState, SerialSession

from conftest import build_record


@pytest.fixture
def client(schema_file):
    """Create test client running the real lifespan against a missing port."""
    app_state.settings = Settings(schema_file=str(schema_file), serial_port="/dev/nonexistent-ms3")
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app_state.settings = None


@pytest.fixture
def mock_app_state():
    """Swap in a mock session and a fresh cache."""
    orig_session = app_state.session
    orig_cache = app_state.cache

    session = MagicMock(spec=SerialSession)
    session.state = ConnectionState.POLLING
    cache = RecordCache()

    app_state.session = session
    app_state.cache = cache

    yield {"session": session, "cache": cache}

    # Restore original state for lifespan teardown
    app_state.session = orig_session
    app_state.cache = orig_cache


def publish(cache: RecordCache, raw: bytes) -> RecordSnapshot:
    snapshot = RecordSnapshot(
        raw=raw,
        values={
            "rpm": ChannelValue(name="rpm", value=850.0, unit="RPM"),
            "coolant": ChannelValue(name="coolant", value=180.5, unit="°F"),
        },
        errors={"egt": "Channel egt reads 2 byte(s) at offset 300, payload is only 212 bytes"},
    )
    asyncio.run(cache.update(snapshot))
    return snapshot


class TestRootEndpoint:
    """Tests for GET / endpoint."""

    def test_root_empty(self, client, mock_app_state):
        """Test root is empty before the first record."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == ""

    def test_root_hex_dump(self, client, mock_app_state):
        """Test root shows a hex dump of the latest raw record."""
        raw = build_record()
        publish(mock_app_state["cache"], raw)

        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == hex_dump(raw)
        assert response.text.startswith("00000000  00 00 78 ")


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    def test_health_not_initialized(self, client, mock_app_state):
        """Test health when app is not initialized."""
        app_state.session = None
        app_state.cache = None

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["state"] == "closed"
        assert data["records_count"] == 0

    def test_health_no_device(self, client):
        """Test health while the serial port cannot be opened."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["state"] in ("closed", "opening")

    def test_health_polling_without_records(self, client, mock_app_state):
        """Test health is degraded until a record arrives."""
        response = client.get("/health")

        data = response.json()
        assert data["status"] == "degraded"
        assert data["state"] == "polling"
        assert data["last_update"] is None

    def test_health_polling_with_records(self, client, mock_app_state):
        """Test health is healthy once records are flowing."""
        publish(mock_app_state["cache"], build_record())

        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["records_count"] == 1
        assert data["last_update"] is not None

    def test_health_failing(self, client, mock_app_state):
        """Test health is unhealthy while the session recovers."""
        mock_app_state["session"].state = ConnectionState.FAILING
        publish(mock_app_state["cache"], build_record())

        data = client.get("/health").json()

        assert data["status"] == "unhealthy"
        assert data["state"] == "failing"


class TestRecordEndpoint:
    """Tests for GET /api/record endpoint."""

    def test_no_record(self, client, mock_app_state):
        """Test 503 before the first record."""
        response = client.get("/api/record")

        assert response.status_code == 503
        assert response.json()["detail"] == "No record received yet"

    def test_record(self, client, mock_app_state):
        """Test the latest decoded values are returned."""
        publish(mock_app_state["cache"], build_record())

        response = client.get("/api/record")

        assert response.status_code == 200
        data = response.json()
        assert data["values"]["rpm"] == {"value": 850.0, "unit": "RPM"}
        assert data["values"]["coolant"]["unit"] == "°F"
        assert "egt" in data["errors"]


class TestChannelsEndpoint:
    """Tests for GET /api/channels endpoint."""

    def test_channels(self, client):
        """Test compiled channels from the loaded schema are listed."""
        response = client.get("/api/channels")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 8
        assert data["channels"]["rpm"]["kind"] == "scalar"
        assert data["channels"]["rpm"]["offset"] == 7
        assert data["channels"]["ready"]["kind"] == "bits"
        assert data["channels"]["ready"]["bit"] == 0
        assert data["channels"]["time"]["kind"] == "time"
        assert "accDecEnrich" not in data["channels"]


class TestDatalogEndpoint:
    """Tests for GET /api/datalog endpoint."""

    def test_datalog(self, client):
        """Test datalog entries are returned in schema order."""
        response = client.get("/api/datalog")

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert len(entries) == 3
        assert entries[1].startswith("rpm,")
