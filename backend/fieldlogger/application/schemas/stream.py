"""Pydantic DTOs for the server-pushed authoritative inspection stream."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from fieldlogger.application.schemas.inspection import InspectionSchema


class StreamSnapshot(BaseModel):
    """One stream message — always the full current list, never a delta."""

    type: Literal["initial", "update"]
    count: int = 0
    inspections: list[InspectionSchema] = Field(default_factory=list)
    timestamp: datetime | None = None
