"""Shared fixtures: a real SQLite-backed store and an in-memory fake remote."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from fieldlogger.application.interfaces import RemoteInspectionApi
from fieldlogger.application.schemas import StreamSnapshot
from fieldlogger.domain.entities import Inspection, InspectionStatus
from fieldlogger.domain.exceptions import NetworkError, RemoteRejectedError
from fieldlogger.infrastructure.database import (
    SQLAlchemyInspectionStore,
    create_engine_for,
    create_session_factory,
    create_tables,
)

BASE_TIME = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


class FakeRemoteApi(RemoteInspectionApi):
    """In-memory fake of the remote inspection service.

    * ``failures_before_success``: every record fails that many pushes first
    * ``fail_ids``: records that always fail with a network error
    * ``reject_status``: answer every push with this non-2xx status
    * ``gate``: when set, pushes block until the event is set
    * ``stream_queue``: snapshots to yield (an Exception is raised, None ends the stream)
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.accepted: dict[str, dict] = {}
        self.failures_before_success = 0
        self.fail_ids: set[str] = set()
        self.reject_status: int | None = None
        self.gate: asyncio.Event | None = None
        self.stream_queue: asyncio.Queue = asyncio.Queue()
        self.streams_opened = 0
        self._failures: dict[str, int] = {}

    async def create_inspection(self, inspection: Inspection) -> dict:
        self.calls.append(inspection.id)
        if self.gate is not None:
            await self.gate.wait()

        if inspection.id in self.fail_ids:
            raise NetworkError("connection refused")
        seen = self._failures.get(inspection.id, 0)
        if seen < self.failures_before_success:
            self._failures[inspection.id] = seen + 1
            raise NetworkError("connection reset")
        if self.reject_status is not None:
            raise RemoteRejectedError(self.reject_status, "rejected by server")

        payload = inspection.to_push_payload()
        self.accepted[inspection.id] = payload
        return {**payload, "status": "synced"}

    async def stream_snapshots(self, on_open=None):
        self.streams_opened += 1
        if on_open is not None:
            await on_open()
        while True:
            item = await self.stream_queue.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item


def build_inspection(
    inspection_id: str,
    *,
    minutes: int = 0,
    status: InspectionStatus = InspectionStatus.PENDING,
    location: str = "Pump house 3",
) -> Inspection:
    created_at = BASE_TIME + timedelta(minutes=minutes)
    return Inspection(
        id=inspection_id,
        location=location,
        technician="Ana",
        findings="Valve seal leaking under pressure",
        status=status,
        created_at=created_at,
        synced_at=created_at if status == InspectionStatus.SYNCED else None,
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll the event loop until ``predicate`` holds or fail after ``timeout``."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def snapshot_of(*inspections: Inspection, message_type: str = "update") -> StreamSnapshot:
    from fieldlogger.application.schemas import InspectionSchema

    return StreamSnapshot(
        type=message_type,
        count=len(inspections),
        inspections=[InspectionSchema.from_entity(item) for item in inspections],
    )


@pytest.fixture
def make_inspection():
    return build_inspection


@pytest.fixture
def make_snapshot():
    return snapshot_of


@pytest.fixture
def eventually():
    return wait_until


@pytest.fixture
def fake_remote() -> FakeRemoteApi:
    return FakeRemoteApi()


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'inspections.db'}"


@pytest_asyncio.fixture
async def store(database_url):
    engine = create_engine_for(database_url)
    await create_tables(engine)
    yield SQLAlchemyInspectionStore(create_session_factory(engine))
    await engine.dispose()
