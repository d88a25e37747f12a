"""Live Merge View — authoritative stream plus locally pending inspections."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from fieldlogger.application.interfaces import (
    InspectionStore,
    RemoteInspectionApi,
    StoreChange,
)
from fieldlogger.application.schemas.stream import StreamSnapshot
from fieldlogger.domain.entities import Inspection, InspectionStatus
from fieldlogger.domain.exceptions import RemoteSyncError
from fieldlogger.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)

# Seconds to wait before reopening a failed stream
RECONNECT_DELAY = 3.0


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class MergedView:
    """One render of the live list."""

    inspections: list[Inspection]
    connection_state: ConnectionState
    last_update: datetime | None = None
    # Ids absent from the previous render
    added_ids: frozenset[str] = field(default_factory=frozenset)


ViewListener = Callable[[MergedView], Awaitable[None] | None]


def merge_inspections(
    remote: Iterable[Inspection],
    local_pending: Iterable[Inspection],
) -> list[Inspection]:
    """Dedupe by id with local pending entries overriding remote ones,
    newest first.

    A record accepted by the remote but not yet flipped locally shows up
    in both inputs; it appears once, as the local copy.
    """
    merged: dict[str, Inspection] = {item.id: item for item in remote}
    for item in local_pending:
        merged[item.id] = item
    return sorted(merged.values(), key=lambda item: item.created_at, reverse=True)


class LiveMergeView:
    """Keeps a merged, ordered list current for observers.

    The remote stream is consumed in a reconnect loop that runs between
    ``start()`` and ``stop()``: ``connecting -> connected -> disconnected``
    and back to ``connecting`` after the reconnect delay. The local pending
    set is re-read on every store change.
    """

    def __init__(
        self,
        store: InspectionStore,
        remote: RemoteInspectionApi,
        *,
        reconnect_delay_seconds: float = RECONNECT_DELAY,
    ) -> None:
        self._store = store
        self._remote = remote
        self._reconnect_delay = reconnect_delay_seconds

        self._remote_inspections: list[Inspection] = []
        self._local_pending: list[Inspection] = []
        self._state = ConnectionState.DISCONNECTED
        self._last_update: datetime | None = None
        self._current = MergedView(inspections=[], connection_state=self._state)
        self._listeners: list[ViewListener] = []

        self._task: asyncio.Task | None = None
        self._unsubscribe_store: Callable[[], None] | None = None
        self._running = False
        self._log = SyncLogger("LiveMergeView")

        # Refresh ordering: results of a query issued before the last applied one are stale
        self._refresh_issued = 0
        self._refresh_applied = 0

    @property
    def current(self) -> MergedView:
        return self._current

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    def add_listener(self, listener: ViewListener) -> Callable[[], None]:
        """Register a render listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._unsubscribe_store = self._store.subscribe(self._on_store_change)
        await self.refresh_local()
        self._task = asyncio.create_task(self._stream_loop())
        logger.info("LiveMergeView started")

    async def stop(self) -> None:
        """Close the stream, cancel any reconnect wait and detach from the store."""
        self._running = False
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._state = ConnectionState.DISCONNECTED
        logger.info("LiveMergeView stopped")

    # ── Inputs ───────────────────────────────────────────────────────

    async def refresh_local(self) -> MergedView:
        """Re-read the pending set from the store and re-render.

        Overlapping refreshes may finish out of order; a result older than
        the one already rendered is dropped.
        """
        self._refresh_issued += 1
        ticket = self._refresh_issued
        pending = await self._store.query_by_status(InspectionStatus.PENDING)
        if ticket < self._refresh_applied:
            logger.debug("Dropping stale pending read (%d < %d)", ticket, self._refresh_applied)
            return self._current
        self._refresh_applied = ticket
        self._local_pending = pending
        return await self._render()

    async def apply_snapshot(self, snapshot: StreamSnapshot) -> MergedView:
        """Replace the authoritative list with the snapshot's full contents."""
        self._remote_inspections = [item.to_entity() for item in snapshot.inspections]
        self._last_update = datetime.now(timezone.utc)
        logger.debug(
            "Stream %s message: %d inspection(s)", snapshot.type, len(snapshot.inspections)
        )
        return await self._render()

    async def _on_store_change(self, change: StoreChange) -> None:
        await self.refresh_local()

    # ── Stream ───────────────────────────────────────────────────────

    async def _stream_loop(self) -> None:
        while self._running:
            await self._set_state(ConnectionState.CONNECTING)
            try:
                stream = self._remote.stream_snapshots(on_open=self._on_stream_open)
                async with aclosing(stream):
                    async for snapshot in stream:
                        # A snapshot implies an open stream
                        await self._on_stream_open()
                        await self.apply_snapshot(snapshot)
                self._log.step_start(SyncStage.STREAM, "Live stream closed by the server")
            except RemoteSyncError as exc:
                self._log.step_failed(SyncStage.STREAM, "Live stream dropped", error=exc)
            except Exception:
                logger.exception("Live stream crashed")

            await self._set_state(ConnectionState.DISCONNECTED)
            if not self._running:
                break
            self._log.detail("Reconnecting live stream", delay=f"{self._reconnect_delay:.1f}s")
            await asyncio.sleep(self._reconnect_delay)

    async def _on_stream_open(self) -> None:
        if self._state == ConnectionState.CONNECTED:
            return
        self._log.step_complete(SyncStage.STREAM, "Live stream connected")
        await self._set_state(ConnectionState.CONNECTED)

    async def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        self._state = state
        await self._render()

    # ── Render ───────────────────────────────────────────────────────

    async def _render(self) -> MergedView:
        merged = merge_inspections(self._remote_inspections, self._local_pending)
        previous_ids = {item.id for item in self._current.inspections}
        view = MergedView(
            inspections=merged,
            connection_state=self._state,
            last_update=self._last_update,
            added_ids=frozenset(item.id for item in merged if item.id not in previous_ids),
        )
        self._current = view

        for listener in list(self._listeners):
            try:
                result = listener(view)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("LiveMergeView listener failed")
        return view
