"""Application service (use case) for recording a new inspection offline."""

import logging
from typing import TYPE_CHECKING

from fieldlogger.application.interfaces import InspectionStore
from fieldlogger.domain.entities import Inspection
from fieldlogger.domain.exceptions import ValidationError

if TYPE_CHECKING:
    from fieldlogger.application.services.sync_engine import SyncEngine

logger = logging.getLogger(__name__)

MIN_LOCATION_LENGTH = 3
MIN_TECHNICIAN_LENGTH = 2
MIN_FINDINGS_LENGTH = 10


def validate_inspection_input(
    location: str | None,
    technician: str | None,
    findings: str | None,
) -> ValidationError | None:
    """Check the form fields in their fixed order; the first failure wins."""
    if len(location or "") < MIN_LOCATION_LENGTH:
        return ValidationError(
            "location",
            f"Location must be at least {MIN_LOCATION_LENGTH} characters",
        )
    if len(technician or "") < MIN_TECHNICIAN_LENGTH:
        return ValidationError(
            "technician",
            f"Technician name must be at least {MIN_TECHNICIAN_LENGTH} characters",
        )
    if len(findings or "") < MIN_FINDINGS_LENGTH:
        return ValidationError(
            "findings",
            f"Findings must be at least {MIN_FINDINGS_LENGTH} characters",
        )
    return None


class InspectionFactory:
    """Validates input and writes a new pending inspection to the local store.

    Creation never touches the network. When a sync engine is wired in and
    reports online, an immediate sync is requested after the write instead
    of waiting for the next timer tick.
    """

    def __init__(self, store: InspectionStore, sync_engine: "SyncEngine | None" = None):
        self._store = store
        self._sync_engine = sync_engine

    async def create(
        self,
        location: str | None,
        technician: str | None,
        findings: str | None,
    ) -> Inspection | ValidationError:
        error = validate_inspection_input(location, technician, findings)
        if error is not None:
            logger.info("Rejected inspection input: %s", error.message)
            return error

        inspection = Inspection(
            location=location or "",
            technician=technician or "",
            findings=findings or "",
        )
        stored = await self._store.put(inspection)
        logger.info("Inspection saved locally: %s", stored.id)

        if self._sync_engine is not None and self._sync_engine.is_online:
            self._sync_engine.request_sync("created")

        return stored
