"""Domain entity — a field inspection report recorded on the device."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class InspectionStatus(str, Enum):
    """Sync state of a locally recorded inspection."""

    PENDING = "pending"
    SYNCED = "synced"


@dataclass
class Inspection:
    """Core domain entity for an inspection report.

    Content fields are immutable once created. The only state change an
    inspection ever goes through is ``pending -> synced``, performed by
    ``mark_synced``.
    """

    location: str
    technician: str
    findings: str
    id: str = field(default_factory=lambda: str(uuid4()))
    status: InspectionStatus = InspectionStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    synced_at: datetime | None = None

    @property
    def is_synced(self) -> bool:
        return self.status == InspectionStatus.SYNCED

    def mark_synced(self, synced_at: datetime | None = None) -> bool:
        """Flip to synced. Returns False when the inspection was already synced."""
        if self.is_synced:
            return False
        self.status = InspectionStatus.SYNCED
        self.synced_at = synced_at or datetime.now(timezone.utc)
        return True

    def to_push_payload(self) -> dict[str, Any]:
        """Body sent to the remote create endpoint — never includes the local status."""
        return {
            "id": self.id,
            "location": self.location,
            "technician": self.technician,
            "findings": self.findings,
            "createdAt": self.created_at.isoformat(),
        }
