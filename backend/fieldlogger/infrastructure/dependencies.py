"""Runtime wiring — builds the sync core from settings and exposes it to FastAPI."""

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from fieldlogger.application.interfaces import ConnectivityMonitor, RemoteInspectionApi
from fieldlogger.application.schemas import InspectionSchema, MergedViewResponse
from fieldlogger.application.services import (
    InspectionFactory,
    LiveMergeView,
    MergedView,
    PushBackoff,
    SSEManager,
    SyncEngine,
)
from fieldlogger.config import Settings
from fieldlogger.infrastructure.connectivity import (
    HttpConnectivityMonitor,
    ManualConnectivityMonitor,
)
from fieldlogger.infrastructure.database import (
    SQLAlchemyInspectionStore,
    create_engine_for,
    create_session_factory,
    create_tables,
)
from fieldlogger.infrastructure.remote import HttpInspectionApiClient

logger = logging.getLogger(__name__)


def merged_view_payload(view: MergedView) -> dict[str, Any]:
    """JSON-ready body for a merged view, shared by the REST and SSE endpoints."""
    return MergedViewResponse(
        connection_state=view.connection_state.value,
        last_update=view.last_update,
        count=len(view.inspections),
        inspections=[InspectionSchema.from_entity(item) for item in view.inspections],
    ).model_dump(mode="json", by_alias=True)


@dataclass
class SyncRuntime:
    """Everything the sync core needs, with one start/stop lifecycle."""

    settings: Settings
    db_engine: AsyncEngine
    store: SQLAlchemyInspectionStore
    remote: RemoteInspectionApi
    connectivity: ConnectivityMonitor | None
    sync_engine: SyncEngine
    factory: InspectionFactory
    live_view: LiveMergeView
    sse: SSEManager
    _detach: list = field(default_factory=list)

    async def start(self) -> None:
        await create_tables(self.db_engine)
        self._detach.append(self.live_view.add_listener(self._broadcast_view))
        if self.connectivity is not None:
            await self.connectivity.start()
        await self.sync_engine.start()
        await self.live_view.start()
        logger.info("Sync runtime started")

    async def stop(self) -> None:
        await self.live_view.stop()
        await self.sync_engine.stop()
        if self.connectivity is not None:
            await self.connectivity.stop()
        for detach in self._detach:
            detach()
        self._detach.clear()
        await self.sse.shutdown()
        await self.db_engine.dispose()
        logger.info("Sync runtime stopped")

    async def _broadcast_view(self, view: MergedView) -> None:
        await self.sse.broadcast(merged_view_payload(view))


def _build_connectivity(settings: Settings) -> ConnectivityMonitor | None:
    if settings.connectivity_mode == "none":
        return None
    if settings.connectivity_mode == "manual":
        return ManualConnectivityMonitor(initially_online=False)
    base_url = settings.remote_api_url.rstrip("/")
    return HttpConnectivityMonitor(
        f"{base_url}{settings.remote_health_path}",
        interval_seconds=settings.connectivity_probe_interval_seconds,
        timeout_seconds=min(settings.remote_timeout_seconds, 5.0),
    )


def build_runtime(
    settings: Settings,
    *,
    remote: RemoteInspectionApi | None = None,
    connectivity: ConnectivityMonitor | None = None,
) -> SyncRuntime:
    """Assemble the sync core. ``remote`` and ``connectivity`` override the
    settings-driven defaults (tests, embedding hosts)."""
    db_engine = create_engine_for(
        settings.database_url, echo=(settings.log_level_sql.upper() == "DEBUG")
    )
    store = SQLAlchemyInspectionStore(create_session_factory(db_engine))

    if remote is None:
        remote = HttpInspectionApiClient(
            settings.remote_api_url,
            create_path=settings.remote_create_path,
            stream_path=settings.remote_stream_path,
            timeout_seconds=settings.remote_timeout_seconds,
        )
    if connectivity is None:
        connectivity = _build_connectivity(settings)

    backoff = None
    if settings.sync_backoff_enabled:
        backoff = PushBackoff(
            base_seconds=settings.sync_backoff_base_seconds,
            cap_seconds=settings.sync_backoff_cap_seconds,
            jitter_seconds=settings.sync_backoff_jitter_seconds,
        )

    sync_engine = SyncEngine(
        store,
        remote,
        connectivity,
        interval_seconds=settings.sync_interval_seconds,
        backoff=backoff,
    )
    return SyncRuntime(
        settings=settings,
        db_engine=db_engine,
        store=store,
        remote=remote,
        connectivity=connectivity,
        sync_engine=sync_engine,
        factory=InspectionFactory(store, sync_engine),
        live_view=LiveMergeView(
            store,
            remote,
            reconnect_delay_seconds=settings.stream_reconnect_delay_seconds,
        ),
        sse=SSEManager(heartbeat_seconds=settings.sse_heartbeat_seconds),
    )


# ── FastAPI dependencies ────────────────────────────────────────────


def get_runtime(request: Request) -> SyncRuntime:
    return request.app.state.runtime


def get_inspection_factory(request: Request) -> InspectionFactory:
    return get_runtime(request).factory


def get_inspection_store(request: Request) -> SQLAlchemyInspectionStore:
    return get_runtime(request).store


def get_sync_engine(request: Request) -> SyncEngine:
    return get_runtime(request).sync_engine


def get_live_view(request: Request) -> LiveMergeView:
    return get_runtime(request).live_view


def get_sse_manager(request: Request) -> SSEManager:
    return get_runtime(request).sse


def get_connectivity(request: Request) -> ConnectivityMonitor | None:
    return get_runtime(request).connectivity
