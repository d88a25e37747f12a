"""Abstract store interface (port) for locally recorded inspections."""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fieldlogger.domain.entities import Inspection, InspectionStatus

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    CREATED = "created"
    SYNCED = "synced"


@dataclass(frozen=True)
class StoreChange:
    """A committed write, published to store subscribers."""

    kind: ChangeKind
    inspection: Inspection


ChangeListener = Callable[[StoreChange], Awaitable[None] | None]


class InspectionStore(ABC):
    """Port for the local durable inspection table.

    Implementations must publish a ``StoreChange`` to every subscriber after
    each committed write, before the write call returns.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    @abstractmethod
    async def put(self, inspection: Inspection) -> Inspection:
        """Insert a new inspection. Raises DuplicateIdError if the id exists."""
        ...

    @abstractmethod
    async def update_status(self, inspection_id: str, synced_at: datetime) -> Inspection:
        """Mark an inspection synced.

        Raises NotFoundError if the id is absent. Already-synced inspections
        are returned unchanged and no change is published.
        """
        ...

    @abstractmethod
    async def get(self, inspection_id: str) -> Inspection | None:
        """Retrieve a single inspection by id."""
        ...

    @abstractmethod
    async def query_by_status(self, status: InspectionStatus) -> list[Inspection]:
        """Inspections with the given status, oldest first."""
        ...

    @abstractmethod
    async def count_by_status(self, status: InspectionStatus) -> int:
        ...

    @abstractmethod
    async def all(self) -> list[Inspection]:
        """Every stored inspection, newest first."""
        ...

    # ── Change notification ─────────────────────────────────────────

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _publish(self, change: StoreChange) -> None:
        """Deliver a committed change to all listeners, in registration order."""
        for listener in list(self._listeners):
            try:
                result = listener(change)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Store listener failed on %s for inspection %s",
                    change.kind.value,
                    change.inspection.id,
                )
