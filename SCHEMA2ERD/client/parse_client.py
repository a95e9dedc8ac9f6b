"""Async HTTP client for the parse and share endpoints.

Every parse request takes the next sequence number. When a response comes
back after a newer request has been issued it is reported as cancelled and
must not be rendered.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx

from SCHEMA2ERD.interaction.frames import TimerHandle
from SCHEMA2ERD.ir.models import Graph
from SCHEMA2ERD.share import encode_snapshot
from SCHEMA2ERD.utils.error_handling import ErrorContext, ErrorKind, log_error_with_context
from SCHEMA2ERD.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=30.0, pool=5.0)
PARSE_PATH = "/erd/parse"
SHORTEN_PATH = "/erd/shorten"


class ShareError(Exception):
    """Creating a short share link failed."""


@dataclass
class ParseOutcome:
    cancelled: bool
    ok: bool
    status_code: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class ParseClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.AsyncClient] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._last_request_id = 0

    async def __aenter__(self) -> "ParseClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def last_request_id(self) -> int:
        return self._last_request_id

    async def parse_schema(self, schema: str) -> ParseOutcome:
        self._last_request_id += 1
        request_id = self._last_request_id

        try:
            response = await self._client.post(PARSE_PATH, json={"schema": schema})
        except httpx.HTTPError as e:
            if request_id != self._last_request_id:
                return ParseOutcome(cancelled=True, ok=False, error=ErrorKind.STALE_RESPONSE)
            log_error_with_context(
                e, ErrorContext(stage="client", operation="parse_schema",
                                additional_context={"request_id": request_id}),
                level="warning",
            )
            return ParseOutcome(cancelled=False, ok=False, error=ErrorKind.NETWORK_ERROR)

        json_ok = True
        try:
            data = response.json()
        except ValueError:
            json_ok = False
            data = {}
        if not isinstance(data, dict):
            json_ok = False
            data = {}

        if request_id != self._last_request_id:
            logger.debug(f"Dropping stale parse response #{request_id} (latest #{self._last_request_id})")
            return ParseOutcome(cancelled=True, ok=False, status_code=response.status_code,
                                error=ErrorKind.STALE_RESPONSE)

        ok = response.is_success and json_ok
        error = None
        if not ok:
            error = data.get("error") or ErrorKind.NETWORK_ERROR
            logger.info(f"Parse request #{request_id} failed with status {response.status_code}")
        return ParseOutcome(cancelled=False, ok=ok, status_code=response.status_code, data=data, error=error)

    async def shorten(self, graph: Union[Graph, Dict[str, Any]], schema: str = "") -> str:
        """Store an encoded snapshot and return its short URL."""
        payload = encode_snapshot(graph, schema)
        try:
            response = await self._client.post(SHORTEN_PATH, json={"payload": payload})
        except httpx.HTTPError as e:
            log_error_with_context(e, ErrorContext(stage="client", operation="shorten"), level="warning")
            raise ShareError("shorten failed") from e
        if not response.is_success:
            raise ShareError(f"shorten failed with status {response.status_code}")
        try:
            return response.json()["url"]
        except (ValueError, KeyError, TypeError) as e:
            raise ShareError("shorten response has no url") from e


async def refresh_diagram(client: ParseClient, session, schema: str) -> bool:
    """Parse `schema` and draw the result into a `RenderSession`.

    Blank input clears to the empty state without a request. A stale
    response leaves the session untouched. Returns True when a graph was
    drawn. Every call sends a request; editors that refresh on each
    keystroke go through `DebouncedRefresh`.
    """
    if not (schema or "").strip():
        session.clear(True)
        return False
    outcome = await client.parse_schema(schema)
    if outcome.cancelled:
        return False
    if not outcome.ok:
        session.clear(True)
        return False
    return session.render_response(outcome.status_code, outcome.data)


class DebouncedRefresh:
    """Refreshes the diagram once the schema text has been still for
    `parse_debounce_ms`.

    Timers run on the session's `FrameScheduler`, so `on_input` and the
    host's `tick` must be called from inside the running event loop that
    owns `client`.
    """

    def __init__(self, client: ParseClient, session, delay_ms: Optional[float] = None):
        self.client = client
        self.session = session
        self.delay_ms = session.config.parse_debounce_ms if delay_ms is None else delay_ms
        self._timer: Optional[TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def on_input(self, schema: str) -> None:
        """Restart the quiet period with the latest text."""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.session.scheduler.call_later(self.delay_ms, lambda: self._fire(schema))

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, schema: str) -> None:
        self._timer = None
        self._task = asyncio.get_running_loop().create_task(refresh_diagram(self.client, self.session, schema))

    async def wait(self) -> Optional[bool]:
        """Result of the last refresh started, or None if none has started."""
        if self._task is None:
            return None
        return await self._task
