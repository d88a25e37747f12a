"""Pydantic DTOs for sync status and the merged live view."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fieldlogger.application.schemas.inspection import InspectionSchema


class SyncReportSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reason: str
    attempted: int
    synced: int
    failed: int
    skipped: int
    started_at: datetime
    finished_at: datetime | None = None


class SyncStatusResponse(BaseModel):
    """Everything the network badge needs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    online: bool
    state: str
    badge: str
    pending_count: int
    last_pass_at: datetime | None = None
    last_report: SyncReportSchema | None = None


class SyncRequestAccepted(BaseModel):
    accepted: bool
    reason: str


class MergedViewResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    connection_state: str
    last_update: datetime | None = None
    count: int
    inspections: list[InspectionSchema]


class ConnectivityUpdate(BaseModel):
    """Host-reported platform connectivity (manual connectivity mode)."""

    online: bool
