"""
ActivityWatch REST API client.

Read-only access to aw-server's bucket and event endpoints:

- GET {base_url}/buckets/
- GET {base_url}/buckets/{bucket_id}
- GET {base_url}/buckets/{bucket_id}/events?start=&end=&limit=

Every call opens its own short-lived ``httpx.AsyncClient`` and issues exactly
one request, so an instance carries no per-call state and can serve
concurrent tool calls.

Environment Variables:
- ACTIVITYWATCH_URL: aw-server API base URL (default: http://localhost:5600/api/0)
- ACTIVITYWATCH_TIMEOUT: Per-request timeout in seconds (default: 30)
"""
from __future__ import annotations

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from mcp_server_aw.config import DEFAULT_ACTIVITYWATCH_URL, get_config

from .errors import (
    BackendError,
    BackendUnavailableError,
    NotFoundError,
    ParseError,
)
from .models import Bucket, Event
from .observability import get_logger

T = TypeVar("T")

_BUCKET_MAP = TypeAdapter(dict[str, Bucket])
_BUCKET = TypeAdapter(Bucket)
_EVENTS = TypeAdapter(list[Event])

# Longest response body echoed back in error details
_MAX_ERROR_BODY = 500


class ActivityWatchClient:
    """Async client for the aw-server REST API.

    Example:
        client = ActivityWatchClient("http://localhost:5600/api/0")
        buckets = await client.list_buckets()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_ACTIVITYWATCH_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        """Initialize the client.

        Args:
            base_url: aw-server API base URL, including the /api/0 prefix
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._logger = get_logger("aw-mcp.client")

    async def list_buckets(self) -> dict[str, Bucket]:
        """Get all buckets, keyed by bucket ID."""
        payload = await self._get("/buckets/")
        return self._parse(_BUCKET_MAP, payload, "bucket list")

    async def get_bucket(self, bucket_id: str) -> Bucket:
        """Get a single bucket by ID."""
        payload = await self._get(_bucket_path(bucket_id), bucket_id=bucket_id)
        return self._parse(_BUCKET, payload, f"bucket '{bucket_id}'")

    async def get_events(
        self,
        bucket_id: str,
        start: str | None = None,
        end: str | None = None,
        limit: int | None = None
    ) -> list[Event]:
        """Get events from a bucket, in the order aw-server returns them.

        A ``limit`` of None sends no limit, which aw-server treats as unbounded.
        """
        params: dict[str, Any] = {}
        if start is not None:
            params["start"] = start
        if end is not None:
            params["end"] = end
        if limit is not None:
            params["limit"] = limit

        payload = await self._get(
            f"{_bucket_path(bucket_id)}/events",
            params=params,
            bucket_id=bucket_id
        )
        return self._parse(_EVENTS, payload, f"events of '{bucket_id}'")

    async def get_event_count(
        self,
        bucket_id: str,
        start: str | None = None,
        end: str | None = None
    ) -> int:
        """Count the events of a bucket within an optional time range.

        Fetches the full event list for the range and counts it. No limit is
        ever sent here: a capped fetch would under-count.
        """
        events = await self.get_events(bucket_id, start=start, end=end, limit=None)
        return len(events)

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        bucket_id: str | None = None
    ) -> Any:
        """Issue one GET request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport
            ) as client:
                response = await client.get(url, params=params or None)
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(
                f"Request to ActivityWatch timed out after {self.timeout}s",
                details={"url": url}
            ) from e
        except httpx.ConnectError as e:
            raise BackendUnavailableError(
                f"Failed to connect to ActivityWatch at {self.base_url}. Is aw-server running?",
                details={"url": url}
            ) from e
        except httpx.TransportError as e:
            raise BackendUnavailableError(
                f"Network error talking to ActivityWatch: {e}",
                details={"url": url}
            ) from e

        self._logger.debug(
            "ActivityWatch request",
            path=path,
            params=params or {},
            status=response.status_code
        )

        if response.status_code == 404:
            if bucket_id is not None:
                message = f"Bucket not found: {bucket_id}"
            else:
                message = f"Resource not found: {path}"
            raise NotFoundError(
                message,
                details={"status": 404, "body": _clip(response.text)}
            )

        if not response.is_success:
            raise BackendError(
                f"ActivityWatch request failed with status {response.status_code}",
                details={
                    "status": response.status_code,
                    "path": path,
                    "body": _clip(response.text),
                }
            )

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(
                f"ActivityWatch returned a response that is not valid JSON: {e}",
                details={"path": path, "body": _clip(response.text)}
            ) from e

    @staticmethod
    def _parse(adapter: TypeAdapter[T], payload: Any, what: str) -> T:
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise ParseError(
                f"Unexpected response shape for {what}: {e.error_count()} validation error(s)",
                details={"errors": _summarize_validation(e)}
            ) from e


def _bucket_path(bucket_id: str) -> str:
    return f"/buckets/{quote(bucket_id, safe='')}"


def _clip(text: str) -> str:
    if len(text) > _MAX_ERROR_BODY:
        return text[:_MAX_ERROR_BODY] + "..."
    return text


def _summarize_validation(e: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in e.errors()[:5]
    ]


# Global client instance
_client: ActivityWatchClient | None = None


def get_client() -> ActivityWatchClient:
    """Get the global ActivityWatch client built from configuration."""
    global _client
    if _client is None:
        config = get_config()
        _client = ActivityWatchClient(
            base_url=config.activitywatch.base_url,
            timeout=config.activitywatch.timeout,
        )
    return _client


def reset_client() -> None:
    """Drop the global client (useful for testing)."""
    global _client
    _client = None
