"""Sync Engine — asyncio daemon pushing pending inspections to the remote service."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from fieldlogger.application.interfaces import (
    ConnectivityMonitor,
    InspectionStore,
    RemoteInspectionApi,
)
from fieldlogger.application.services.push_backoff import PushBackoff
from fieldlogger.domain.entities import Inspection, InspectionStatus
from fieldlogger.domain.exceptions import NotFoundError, RemoteSyncError
from fieldlogger.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)

# Periodic sync interval in seconds
SYNC_INTERVAL = 30.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


@dataclass
class SyncReport:
    """Outcome of one pass over the pending inspections."""

    reason: str
    started_at: datetime
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    skipped: int = 0  # held back by backoff
    finished_at: datetime | None = None


@dataclass(frozen=True)
class SyncStatus:
    online: bool
    state: SyncState
    pending_count: int
    last_pass_at: datetime | None
    last_report: SyncReport | None

    @property
    def badge(self) -> str:
        if self.state == SyncState.SYNCING:
            return "syncing"
        if not self.online:
            return "offline"
        if self.pending_count > 0:
            return "pending"
        return "online"


class SyncEngine:
    """Converges the local store with the remote service.

    Passes run on three triggers: a connectivity transition to online, a
    periodic timer while online, and ``request_sync`` (used right after a
    record is created). Only one pass is in flight per engine; a trigger
    that arrives meanwhile makes the running pass scan once more when it
    finishes instead of starting a second pass.

    Without a connectivity monitor the engine assumes it is online and
    relies on the timer alone.
    """

    def __init__(
        self,
        store: InspectionStore,
        remote: RemoteInspectionApi,
        connectivity: ConnectivityMonitor | None = None,
        *,
        interval_seconds: float = SYNC_INTERVAL,
        backoff: PushBackoff | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._remote = remote
        self._connectivity = connectivity
        self._interval = interval_seconds
        self._backoff = backoff
        self._clock = clock
        self._log = SyncLogger("SyncEngine")

        self._state = SyncState.IDLE
        self._pass_lock = asyncio.Lock()
        self._pass_task: asyncio.Task | None = None
        self._rescan_requested = False
        self._timer_task: asyncio.Task | None = None
        self._remove_listener: Callable[[], None] | None = None
        self._running = False
        self._stopped = False
        self._last_report: SyncReport | None = None

    # ── Properties ───────────────────────────────────────────────────

    @property
    def is_online(self) -> bool:
        if self._connectivity is None:
            return True
        return self._connectivity.is_online

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def last_report(self) -> SyncReport | None:
        return self._last_report

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Attach to connectivity, start the timer and sync once if online."""
        if self._running:
            return
        self._running = True
        self._stopped = False

        if self._connectivity is not None:
            self._remove_listener = self._connectivity.add_listener(
                self._on_connectivity_change
            )
        if self._interval > 0:
            self._timer_task = asyncio.create_task(self._timer_loop())

        logger.info(
            "SyncEngine started (interval=%ss, backoff=%s)",
            self._interval,
            "on" if self._backoff else "off",
        )

        if self.is_online:
            self.request_sync("startup")

    async def stop(self) -> None:
        """Stop the timer, cancel any in-flight pass and detach from connectivity."""
        self._running = False
        self._stopped = True

        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

        for task in (self._timer_task, self._pass_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._timer_task = None
        self._pass_task = None
        self._state = SyncState.IDLE
        logger.info("SyncEngine stopped")

    # ── Triggers ─────────────────────────────────────────────────────

    def request_sync(self, reason: str = "manual") -> asyncio.Task | None:
        """Schedule a pass without waiting for it.

        Usable without ``start()`` (the pass then runs once, with no timer);
        refused after ``stop()`` so nothing outlives a shutdown.

        Returns the task running the pass (an already-running one when the
        request joins it), or None when offline or stopped.
        """
        if self._stopped:
            logger.debug("Sync request (%s) ignored: engine stopped", reason)
            return None
        if not self.is_online:
            logger.debug("Sync request (%s) ignored — offline", reason)
            return None

        if self._pass_task is not None and not self._pass_task.done():
            self._rescan_requested = True
            logger.debug("Sync request (%s) joined the running pass", reason)
            return self._pass_task

        self._pass_task = asyncio.create_task(self._run_passes(reason))
        return self._pass_task

    async def wait_for_pass(self) -> None:
        """Wait until the currently scheduled pass (if any) has finished."""
        task = self._pass_task
        if task is not None and not task.done():
            await asyncio.shield(task)

    async def _run_passes(self, reason: str) -> None:
        while True:
            self._rescan_requested = False
            try:
                await self.sync_pending(reason)
            except Exception:
                logger.exception("Sync pass (%s) failed", reason)
            if self._stopped or not (self._rescan_requested and self.is_online):
                return
            reason = "rescan"

    async def _on_connectivity_change(self, online: bool) -> None:
        if online:
            self._log.step_start(SyncStage.CONNECTIVITY, "Network detected, syncing")
            self.request_sync("online")
        else:
            self._log.step_start(SyncStage.CONNECTIVITY, "Network lost, records stay pending")

    async def _timer_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                if self.is_online:
                    self.request_sync("timer")
            except Exception:
                logger.exception("SyncEngine timer error")

    # ── Pass ─────────────────────────────────────────────────────────

    async def sync_pending(self, reason: str = "manual") -> SyncReport:
        """Push every pending inspection, oldest first, one at a time.

        A failed push leaves the record pending and the pass moves on.
        Concurrent callers are serialized, so each one re-reads the pending
        set and never re-pushes what the previous pass already synced.
        """
        async with self._pass_lock:
            self._state = SyncState.SYNCING
            report = SyncReport(reason=reason, started_at=self._clock())
            try:
                with self._log.timed_step(SyncStage.PASS, "Sync pass", reason=reason):
                    pending = await self._store.query_by_status(InspectionStatus.PENDING)
                    self._log.step_start(
                        SyncStage.SCAN, f"{len(pending)} pending inspection(s)"
                    )

                    for inspection in pending:
                        if self._backoff is not None and not self._backoff.ready(inspection.id):
                            report.skipped += 1
                            self._log.detail("Backing off", record_id=inspection.id)
                            continue

                        report.attempted += 1
                        if await self._push(inspection):
                            report.synced += 1
                        else:
                            report.failed += 1
            finally:
                report.finished_at = self._clock()
                self._last_report = report
                self._state = SyncState.IDLE

            self._log.stats(
                attempted=report.attempted,
                synced=report.synced,
                failed=report.failed,
                skipped=report.skipped,
            )
            return report

    async def _push(self, inspection: Inspection) -> bool:
        """Push one inspection and flip it to synced on acceptance."""
        try:
            await self._remote.create_inspection(inspection)
        except RemoteSyncError as exc:
            self._log.step_failed(
                SyncStage.PUSH, "Push failed, will retry", error=exc, record_id=inspection.id
            )
            self._register_failure(inspection.id)
            return False
        except Exception as exc:
            logger.exception("Unexpected error pushing inspection %s", inspection.id)
            self._log.step_error(SyncStage.PUSH, "Push crashed", error=exc)
            self._register_failure(inspection.id)
            return False

        if self._backoff is not None:
            self._backoff.record_success(inspection.id)

        try:
            await self._store.update_status(inspection.id, self._clock())
        except NotFoundError as exc:
            self._log.step_error(
                SyncStage.STATUS, "Accepted inspection is missing locally", error=exc
            )
            return False

        self._log.step_complete(SyncStage.STATUS, "Synced", record_id=inspection.id)
        return True

    def _register_failure(self, inspection_id: str) -> None:
        if self._backoff is not None:
            delay = self._backoff.record_failure(inspection_id)
            self._log.detail("Next attempt delayed", record_id=inspection_id, seconds=f"{delay:.1f}")

    # ── Status ───────────────────────────────────────────────────────

    async def status(self) -> SyncStatus:
        pending_count = await self._store.count_by_status(InspectionStatus.PENDING)
        return SyncStatus(
            online=self.is_online,
            state=self._state,
            pending_count=pending_count,
            last_pass_at=self._last_report.finished_at if self._last_report else None,
            last_report=self._last_report,
        )
