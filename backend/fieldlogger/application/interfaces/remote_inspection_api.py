"""Abstract interface (port) for the remote authoritative inspection service."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from fieldlogger.application.schemas.stream import StreamSnapshot
from fieldlogger.domain.entities import Inspection


class RemoteInspectionApi(ABC):
    """Port for the remote service — implemented in the infrastructure layer.

    Implementations raise ``NetworkError`` for transport failures and
    ``RemoteRejectedError`` for non-2xx answers.
    """

    @abstractmethod
    async def create_inspection(self, inspection: Inspection) -> dict[str, Any]:
        """Push one inspection. The remote must treat its id as an idempotency key."""
        ...

    @abstractmethod
    def stream_snapshots(
        self,
        on_open: Callable[[], Awaitable[None]] | None = None,
    ) -> AsyncIterator[StreamSnapshot]:
        """Open the server-push stream and yield full snapshots until it ends.

        ``on_open`` is awaited once the server has accepted the connection,
        before any message arrives. Heartbeats are consumed by the
        implementation and never yielded.
        """
        ...
