"""Async client for the Toggl Track v9 API.

Usage:
    async with TogglClient() as client:
        entries = await client.list_entries(token, start, end)
        current = await client.get_current_entry(token)

Every failure surfaces as an UpstreamError classified by kind; transport
errors, timeouts and malformed bodies are hard failures.
"""

import time
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import UPSTREAM_CALLS, UPSTREAM_LATENCY
from timeboard.upstream.errors import UpstreamError
from timeboard.upstream.models import TimeEntry
from timeboard.utils.dates import to_rfc3339

logger = get_logger(__name__)

TOGGL_API_BASE = "https://api.track.toggl.com/api/v9"


class TogglClient:
    """Async client for the upstream time-tracking API.

    Attributes:
        base_url: Base URL of the API
    """

    def __init__(
        self,
        base_url: str = TOGGL_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the API
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "TogglClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        token: str,
        operation: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Issue an authenticated GET and decode the JSON body."""
        start = time.perf_counter()
        try:
            response = await self._client.get(
                path,
                params=params,
                auth=httpx.BasicAuth(token, "api_token"),
            )
        except httpx.TimeoutException as e:
            UPSTREAM_CALLS.labels(operation=operation, outcome="timeout").inc()
            raise UpstreamError.hard(f"Toggl {operation} timed out") from e
        except httpx.HTTPError as e:
            UPSTREAM_CALLS.labels(operation=operation, outcome="network_error").inc()
            raise UpstreamError.hard(f"Toggl {operation} failed: {e}") from e
        finally:
            UPSTREAM_LATENCY.labels(operation=operation).observe(time.perf_counter() - start)

        if response.is_error:
            error = UpstreamError.from_response(response, f"Toggl {operation} failed")
            UPSTREAM_CALLS.labels(operation=operation, outcome=error.kind.value).inc()
            logger.warning(
                "upstream_request_failed",
                operation=operation,
                status_code=response.status_code,
                kind=error.kind.value,
                retry_after=error.retry_after,
                quota_resets_in=error.quota_resets_in,
            )
            raise error

        try:
            data = response.json()
        except ValueError as e:
            UPSTREAM_CALLS.labels(operation=operation, outcome="malformed").inc()
            raise UpstreamError.hard(
                f"Toggl {operation} returned a malformed body", response.status_code
            ) from e

        UPSTREAM_CALLS.labels(operation=operation, outcome="success").inc()
        return data

    async def list_entries(self, token: str, start: datetime, end: datetime) -> list[TimeEntry]:
        """List time entries starting inside ``[start, end]``."""
        data = await self._get(
            "/me/time_entries",
            token,
            "list_entries",
            params={"start_date": to_rfc3339(start), "end_date": to_rfc3339(end)},
        )
        if not isinstance(data, list):
            raise UpstreamError.hard("Toggl list_entries returned a non-list body")
        try:
            return [TimeEntry.model_validate(item) for item in data]
        except ValidationError as e:
            raise UpstreamError.hard(f"Toggl list_entries returned an invalid entry: {e}") from e

    async def get_current_entry(self, token: str) -> TimeEntry | None:
        """Get the running entry, if any."""
        data = await self._get("/me/time_entries/current", token, "get_current_entry")
        if data is None:
            return None
        try:
            return TimeEntry.model_validate(data)
        except ValidationError as e:
            raise UpstreamError.hard(f"Toggl get_current_entry returned an invalid entry: {e}") from e

    async def get_project_names(self, token: str) -> dict[int, str]:
        """Map project ids visible to the token onto their names."""
        data = await self._get("/me/projects", token, "get_project_names")
        if not isinstance(data, list):
            return {}
        names: dict[int, str] = {}
        for project in data:
            if isinstance(project, dict) and isinstance(project.get("id"), int):
                name = project.get("name")
                if isinstance(name, str):
                    names[project["id"]] = name
        return names
