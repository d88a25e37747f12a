"""End-to-end: record offline, come back online, record again while online."""

import pytest

from fieldlogger.application.services import InspectionFactory, LiveMergeView, SyncEngine
from fieldlogger.domain.entities import InspectionStatus
from fieldlogger.infrastructure.connectivity import ManualConnectivityMonitor
from fieldlogger.infrastructure.database import (
    SQLAlchemyInspectionStore,
    create_engine_for,
    create_session_factory,
    create_tables,
)


@pytest.mark.asyncio
async def test_offline_records_sync_once_online(store, fake_remote, make_snapshot):
    monitor = ManualConnectivityMonitor(initially_online=False)
    engine = SyncEngine(store, fake_remote, monitor, interval_seconds=30)
    factory = InspectionFactory(store, engine)
    view = LiveMergeView(store, fake_remote, reconnect_delay_seconds=0.01)
    await engine.start()
    await view.start()

    first = await factory.create("Pump house 3", "Ana", "Valve seal leaking under pressure")
    assert first.status == InspectionStatus.PENDING
    assert fake_remote.calls == []
    assert [item.id for item in view.current.inspections] == [first.id]

    await monitor.set_online(True)
    await engine.wait_for_pass()

    assert fake_remote.calls == [first.id]
    assert (await store.get(first.id)).status == InspectionStatus.SYNCED

    # Online creation syncs right away, no timer tick needed
    second = await factory.create("Cooling tower", "Luis", "Fan blade vibration above limit")
    await engine.wait_for_pass()

    assert fake_remote.calls == [first.id, second.id]
    assert await store.count_by_status(InspectionStatus.PENDING) == 0

    # The authoritative list brings both back as synced
    await view.apply_snapshot(
        make_snapshot(await store.get(second.id), await store.get(first.id))
    )
    assert [item.id for item in view.current.inspections] == [second.id, first.id]
    assert all(item.is_synced for item in view.current.inspections)

    await view.stop()
    await engine.stop()


@pytest.mark.asyncio
async def test_records_created_offline_survive_a_restart(database_url, fake_remote):
    db_engine = create_engine_for(database_url)
    await create_tables(db_engine)
    factory = InspectionFactory(SQLAlchemyInspectionStore(create_session_factory(db_engine)))
    created = await factory.create("Pump house 3", "Ana", "Valve seal leaking under pressure")
    await db_engine.dispose()

    db_engine = create_engine_for(database_url)
    reopened = SQLAlchemyInspectionStore(create_session_factory(db_engine))
    engine = SyncEngine(reopened, fake_remote, interval_seconds=0)

    report = await engine.sync_pending("startup")

    assert report.synced == 1
    assert fake_remote.calls == [created.id]
    await db_engine.dispose()
