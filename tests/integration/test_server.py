"""
Integration tests for the MCP server.

The FastMCP server is driven in memory through ``fastmcp.Client``; the
global ActivityWatch client is swapped for one wired to the fake aw-server.
"""
from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from mcp_server_aw.core import client as client_module
from mcp_server_aw.server import mcp

EXPECTED_TOOLS = {"aw_list_buckets", "aw_get_bucket", "aw_get_events", "aw_get_event_count"}


@pytest.fixture
def use_fake_backend(monkeypatch, aw_client):
    monkeypatch.setattr(client_module, "_client", aw_client)
    return aw_client


def call(name, arguments):
    async def _call():
        async with Client(mcp) as client:
            return await client.call_tool_mcp(name, arguments)
    return asyncio.run(_call())


class TestServerInitialization:
    """Tests for server initialization."""

    def test_server_name(self):
        assert mcp.name == "activitywatch-mcp"

    def test_lifespan_builds_global_client(self):
        async def _connect():
            async with Client(mcp):
                return client_module._client

        assert isinstance(asyncio.run(_connect()), client_module.ActivityWatchClient)

    def test_exactly_four_tools_registered(self, use_fake_backend):
        async def _list():
            async with Client(mcp) as client:
                return await client.list_tools()

        tools = asyncio.run(_list())

        assert {tool.name for tool in tools} == EXPECTED_TOOLS

    def test_tools_are_read_only(self, use_fake_backend):
        async def _list():
            async with Client(mcp) as client:
                return await client.list_tools()

        for tool in asyncio.run(_list()):
            assert tool.annotations.readOnlyHint is True
            assert tool.annotations.destructiveHint is False

    def test_bucket_id_required_in_schema(self, use_fake_backend):
        async def _list():
            async with Client(mcp) as client:
                return await client.list_tools()

        schemas = {tool.name: tool.inputSchema for tool in asyncio.run(_list())}

        assert "bucket_id" in schemas["aw_get_events"]["required"]
        assert "response_format" not in schemas["aw_get_event_count"]["properties"]
        assert not schemas["aw_list_buckets"].get("required")


class TestToolCalls:
    """Tool calls over the MCP protocol."""

    def test_list_buckets(self, use_fake_backend):
        result = call("aw_list_buckets", {})

        assert result.isError is False
        assert "# ActivityWatch Buckets" in result.content[0].text

    def test_get_events_json(self, use_fake_backend, aw_backend):
        result = call(
            "aw_get_events",
            {"bucket_id": "aw-watcher-window_test", "limit": 2, "response_format": "json"}
        )

        assert result.isError is False
        assert len(json.loads(result.content[0].text)) == 2
        assert aw_backend.requests[0].url.params["limit"] == "2"

    def test_event_count(self, use_fake_backend):
        result = call("aw_get_event_count", {"bucket_id": "aw-watcher-window_test"})
        assert result.content[0].text == "Bucket `aw-watcher-window_test` contains 3 events.\n"

    def test_not_found_is_error_result(self, use_fake_backend):
        result = call("aw_get_bucket", {"bucket_id": "nonexistent", "response_format": "json"})

        assert result.isError is True
        data = json.loads(result.content[0].text)
        assert data["category"] == "not_found"

    def test_invalid_params_is_error_result(self, use_fake_backend, aw_backend):
        result = call("aw_get_events", {"bucket_id": "   "})

        assert result.isError is True
        assert "invalid_params" in result.content[0].text
        assert aw_backend.call_count == 0


class TestArgumentValidation:
    """Arguments the registered signatures would reject are still invalid_params."""

    @pytest.mark.parametrize("name, arguments", [
        ("aw_list_buckets", {"response_format": "xml"}),
        ("aw_list_buckets", {"hostname": "testhost"}),
        ("aw_get_bucket", {}),
        ("aw_get_events", {"bucket_id": "aw-watcher-window_test", "limit": "abc"}),
        ("aw_get_events", {"bucket_id": "aw-watcher-window_test", "limit": True}),
        ("aw_get_events", {"bucket_id": "aw-watcher-window_test", "limit": -1}),
        ("aw_get_event_count", {"bucket_id": "aw-watcher-window_test", "response_format": "json"}),
    ])
    def test_reported_as_invalid_params(self, use_fake_backend, aw_backend, name, arguments):
        result = call(name, arguments)

        assert result.isError is True
        text = result.content[0].text
        assert "**Category:** invalid_params" in text
        assert "**Suggestion:**" in text
        assert aw_backend.call_count == 0

    def test_error_as_json_when_requested(self, use_fake_backend):
        result = call("aw_get_bucket", {"response_format": "json"})

        assert result.isError is True
        data = json.loads(result.content[0].text)
        assert data["category"] == "invalid_params"
        assert "bucket_id" in data["error"]

    def test_valid_string_limit_still_accepted(self, use_fake_backend, aw_backend):
        result = call("aw_get_events", {"bucket_id": "aw-watcher-window_test", "limit": "2"})

        assert result.isError is False
        assert aw_backend.requests[0].url.params["limit"] == "2"
