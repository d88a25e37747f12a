"""Remote inspection service client — implements the RemoteInspectionApi port.

Talks to the authoritative inspection service over HTTP using httpx:
``POST`` to create a record and a long-lived ``text/event-stream`` GET for
the authoritative list.
"""

import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from fieldlogger.application.interfaces import RemoteInspectionApi
from fieldlogger.application.schemas.stream import StreamSnapshot
from fieldlogger.domain.entities import Inspection
from fieldlogger.domain.exceptions import NetworkError, RemoteRejectedError

logger = logging.getLogger(__name__)

HEARTBEAT = ":heartbeat"


class HttpInspectionApiClient(RemoteInspectionApi):
    """Infrastructure adapter — connects to the remote inspection API.

    Transport failures surface as ``NetworkError``; non-2xx answers as
    ``RemoteRejectedError``. Callers never see raw httpx exceptions.
    """

    def __init__(
        self,
        base_url: str,
        *,
        create_path: str = "/inspections",
        stream_path: str = "/inspections/events/stream",
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._create_path = create_path
        self._stream_path = stream_path
        self._timeout = timeout_seconds
        self._http_client = http_client

    def _get_client(self, *, streaming: bool = False) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        if streaming:
            # No read timeout: the stream idles between server pushes
            return httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, read=None))
        return httpx.AsyncClient(timeout=self._timeout)

    async def create_inspection(self, inspection: Inspection) -> dict[str, Any]:
        """POST one inspection. Returns the server's representation."""
        url = f"{self._base_url}{self._create_path}"
        client = self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.post(
                url,
                headers={"Content-Type": "application/json"},
                json=inspection.to_push_payload(),
            )
        except httpx.HTTPError as exc:
            raise NetworkError(f"POST {url} failed: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if not response.is_success:
            self._raise_rejected(response.status_code, response.content)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning("Remote accepted %s with a non-JSON body", inspection.id)
            return {}

    async def stream_snapshots(
        self,
        on_open: Callable[[], Awaitable[None]] | None = None,
    ) -> AsyncIterator[StreamSnapshot]:
        """Yield authoritative snapshots from the server-push stream.

        Blank lines, SSE comments and ``:heartbeat`` keepalives are dropped.
        Malformed payloads are logged and skipped; the connection stays open.
        """
        url = f"{self._base_url}{self._stream_path}"
        client = self._get_client(streaming=True)
        should_close = self._http_client is None

        try:
            async with client.stream(
                "GET", url, headers={"Accept": "text/event-stream"}
            ) as response:
                if response.status_code != 200:
                    body = await response.aread()
                    self._raise_rejected(response.status_code, body)
                if on_open is not None:
                    await on_open()

                async for line in response.aiter_lines():
                    snapshot = self._parse_line(line)
                    if snapshot is not None:
                        yield snapshot
        except httpx.HTTPError as exc:
            raise NetworkError(f"Stream {url} failed: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    def _parse_line(line: str) -> StreamSnapshot | None:
        """Decode one SSE line into a snapshot, or None for anything else."""
        line = line.strip()
        if not line or line.startswith(":"):
            return None
        if not line.startswith("data:"):
            # event:/id:/retry: fields carry nothing we use
            return None

        data = line[len("data:"):].strip()
        if data == HEARTBEAT:
            return None

        try:
            return StreamSnapshot.model_validate_json(data)
        except (PydanticValidationError, ValueError) as exc:
            logger.warning("Skipping malformed stream message: %s", exc)
            return None

    @staticmethod
    def _raise_rejected(status_code: int, body: bytes) -> None:
        """Raise RemoteRejectedError from raw response bytes."""
        try:
            data = json.loads(body)
            message = data.get("message") or data.get("error") or body.decode()
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
        except Exception:
            message = body.decode(errors="replace")

        raise RemoteRejectedError(status_code=status_code, message=str(message))
