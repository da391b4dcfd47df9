"""
Pytest configuration and shared fixtures for ActivityWatch MCP Server tests.

The backend is simulated with ``httpx.MockTransport``: ``FakeActivityWatch``
answers the three aw-server resource paths and records every request so tests
can assert how many calls reached the network.
"""
from __future__ import annotations

import copy
from typing import Any
from urllib.parse import unquote

import httpx
import pytest

from mcp_server_aw.config import reset_config
from mcp_server_aw.core.client import ActivityWatchClient, reset_client

BASE_URL = "http://aw.test/api/0"
WINDOW_BUCKET = "aw-watcher-window_test"
AFK_BUCKET = "aw-watcher-afk_test"


@pytest.fixture
def mock_buckets() -> dict[str, dict[str, Any]]:
    """Bucket payloads as aw-server returns them from GET /buckets/."""
    return {
        WINDOW_BUCKET: {
            "id": WINDOW_BUCKET,
            "name": None,
            "type": "currentwindow",
            "client": "aw-watcher-window",
            "hostname": "testhost",
            "created": "2024-01-01T00:00:00+00:00",
            "last_updated": "2024-01-02T12:00:00+00:00",
            "data": {},
        },
        AFK_BUCKET: {
            "id": AFK_BUCKET,
            "type": "afkstatus",
            "client": "aw-watcher-afk",
            "hostname": "testhost",
            "created": "2024-01-01T00:00:00Z",
        },
    }


@pytest.fixture
def mock_events() -> dict[str, list[dict[str, Any]]]:
    """Events per bucket, newest first."""
    return {
        WINDOW_BUCKET: [
            {
                "id": 3,
                "timestamp": "2024-01-01T12:02:00+00:00",
                "duration": 30.0,
                "data": {"app": "Firefox", "title": "ActivityWatch docs"},
            },
            {
                "id": 2,
                "timestamp": "2024-01-01T12:01:00+00:00",
                "duration": 60.5,
                "data": {"app": "Terminal", "title": "pytest"},
            },
            {
                "id": 1,
                "timestamp": "2024-01-01T12:00:00+00:00",
                "duration": 4000.0,
                "data": {"app": "Code", "title": "client.py"},
            },
        ],
        AFK_BUCKET: [],
    }


class FakeActivityWatch:
    """Minimal aw-server: bucket list, bucket detail, events with limit."""

    def __init__(self, buckets: dict[str, dict], events: dict[str, list[dict]]):
        self.buckets = buckets
        self.events = events
        self.requests: list[httpx.Request] = []
        self.fail_with: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.raw_path.split(b"?")[0].decode()
        prefix = "/api/0/buckets/"
        if not path.startswith(prefix):
            return httpx.Response(404, text="Not Found")

        rest = path[len(prefix):]
        if rest == "":
            return httpx.Response(200, json=self.buckets)

        if rest.endswith("/events"):
            bucket_id = unquote(rest[:-len("/events")])
            if bucket_id not in self.buckets:
                return httpx.Response(404, json={"message": f"There's no bucket named {bucket_id}"})
            events = copy.deepcopy(self.events.get(bucket_id, []))
            limit = request.url.params.get("limit")
            if limit is not None and int(limit) >= 0:
                events = events[:int(limit)]
            return httpx.Response(200, json=events)

        bucket_id = unquote(rest)
        if bucket_id not in self.buckets:
            return httpx.Response(404, json={"message": f"There's no bucket named {bucket_id}"})
        return httpx.Response(200, json=self.buckets[bucket_id])

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def aw_backend(mock_buckets, mock_events) -> FakeActivityWatch:
    """Recording fake aw-server."""
    return FakeActivityWatch(mock_buckets, mock_events)


@pytest.fixture
def aw_client(aw_backend) -> ActivityWatchClient:
    """Client wired to the fake backend."""
    return ActivityWatchClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(aw_backend))


@pytest.fixture
def client_factory():
    """Build a client whose every request is answered by ``handler``."""
    def make_client(handler) -> ActivityWatchClient:
        return ActivityWatchClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(handler))
    return make_client


@pytest.fixture(autouse=True)
def reset_globals():
    """Start every test with fresh config and client singletons."""
    reset_config()
    reset_client()
    yield
    reset_config()
    reset_client()


# Markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Tests that drive the MCP server in memory")


# Collection hooks
def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
