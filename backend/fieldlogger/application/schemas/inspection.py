"""Pydantic DTOs for inspections — camelCase on the wire, snake_case in Python."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fieldlogger.domain.entities import Inspection, InspectionStatus


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class InspectionCreate(BaseModel):
    """Raw form input. Length rules live in InspectionFactory so the
    messages and their order stay in one place."""

    location: str = ""
    technician: str = ""
    findings: str = ""


class InspectionSchema(BaseModel):
    """Wire representation shared by the local API and the remote stream."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    location: str
    technician: str
    findings: str
    # Records on the authoritative stream are synced by definition
    status: InspectionStatus = InspectionStatus.SYNCED
    created_at: datetime
    synced_at: datetime | None = None

    @classmethod
    def from_entity(cls, inspection: Inspection) -> "InspectionSchema":
        return cls(
            id=inspection.id,
            location=inspection.location,
            technician=inspection.technician,
            findings=inspection.findings,
            status=inspection.status,
            created_at=inspection.created_at,
            synced_at=inspection.synced_at,
        )

    def to_entity(self) -> Inspection:
        return Inspection(
            id=self.id,
            location=self.location,
            technician=self.technician,
            findings=self.findings,
            status=self.status,
            created_at=_as_utc(self.created_at),
            synced_at=_as_utc(self.synced_at) if self.synced_at else None,
        )


class ValidationErrorResponse(BaseModel):
    field: str
    message: str
