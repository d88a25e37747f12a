"""Sync endpoints — network badge status, manual trigger and host connectivity."""

from fastapi import APIRouter, Depends, HTTPException, status

from fieldlogger.application.interfaces import ConnectivityMonitor
from fieldlogger.application.schemas import (
    ConnectivityUpdate,
    SyncReportSchema,
    SyncRequestAccepted,
    SyncStatusResponse,
)
from fieldlogger.application.services import SyncEngine
from fieldlogger.infrastructure.connectivity import ManualConnectivityMonitor
from fieldlogger.infrastructure.dependencies import get_connectivity, get_sync_engine

router = APIRouter(tags=["Sync"])


async def _status_response(engine: SyncEngine) -> SyncStatusResponse:
    snapshot = await engine.status()
    report = snapshot.last_report
    return SyncStatusResponse(
        online=snapshot.online,
        state=snapshot.state.value,
        badge=snapshot.badge,
        pending_count=snapshot.pending_count,
        last_pass_at=snapshot.last_pass_at,
        last_report=SyncReportSchema(
            reason=report.reason,
            attempted=report.attempted,
            synced=report.synced,
            failed=report.failed,
            skipped=report.skipped,
            started_at=report.started_at,
            finished_at=report.finished_at,
        ) if report else None,
    )


@router.get("/sync/status", response_model=SyncStatusResponse)
async def sync_status(
    engine: SyncEngine = Depends(get_sync_engine),
) -> SyncStatusResponse:
    """Online/offline/syncing state and the number of records still pending."""
    return await _status_response(engine)


@router.post("/sync", response_model=SyncRequestAccepted, status_code=status.HTTP_202_ACCEPTED)
async def request_sync(
    engine: SyncEngine = Depends(get_sync_engine),
) -> SyncRequestAccepted:
    """Ask for an immediate sync pass. Refused (accepted=false) while offline."""
    task = engine.request_sync("api")
    if task is None:
        return SyncRequestAccepted(accepted=False, reason="offline")
    return SyncRequestAccepted(accepted=True, reason="scheduled")


@router.put("/connectivity", response_model=SyncStatusResponse)
async def report_connectivity(
    data: ConnectivityUpdate,
    engine: SyncEngine = Depends(get_sync_engine),
    connectivity: ConnectivityMonitor | None = Depends(get_connectivity),
) -> SyncStatusResponse:
    """Feed the platform's online/offline notification (manual connectivity mode)."""
    if not isinstance(connectivity, ManualConnectivityMonitor):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Connectivity is detected automatically; set CONNECTIVITY_MODE=manual to report it",
        )
    await connectivity.set_online(data.online)
    return await _status_response(engine)
