"""Unit tests for the SyncEngine."""

import asyncio

import pytest

from fieldlogger.application.services import InspectionFactory, PushBackoff, SyncEngine, SyncState
from fieldlogger.domain.entities import InspectionStatus
from fieldlogger.infrastructure.connectivity import ManualConnectivityMonitor


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_pass_pushes_pending_oldest_first(store, fake_remote, make_inspection):
    await store.put(make_inspection("late", minutes=20))
    await store.put(make_inspection("early", minutes=1))
    await store.put(make_inspection("done", minutes=5, status=InspectionStatus.SYNCED))
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    report = await engine.sync_pending("manual")

    assert fake_remote.calls == ["early", "late"]
    assert report.attempted == 2
    assert report.synced == 2
    assert report.failed == 0
    assert await store.count_by_status(InspectionStatus.PENDING) == 0
    synced = await store.get("early")
    assert synced.synced_at is not None


@pytest.mark.asyncio
async def test_push_body_carries_no_status(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    await engine.sync_pending()

    assert "status" not in fake_remote.accepted["r1"]


@pytest.mark.asyncio
async def test_failed_push_does_not_stop_the_batch(store, fake_remote, make_inspection):
    await store.put(make_inspection("a", minutes=1))
    await store.put(make_inspection("b", minutes=2))
    await store.put(make_inspection("c", minutes=3))
    fake_remote.fail_ids = {"b"}
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    report = await engine.sync_pending()

    assert fake_remote.calls == ["a", "b", "c"]
    assert (report.synced, report.failed) == (2, 1)
    assert (await store.get("a")).status == InspectionStatus.SYNCED
    assert (await store.get("b")).status == InspectionStatus.PENDING
    assert (await store.get("c")).status == InspectionStatus.SYNCED


@pytest.mark.asyncio
async def test_rejected_push_leaves_record_pending(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    fake_remote.reject_status = 500
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    report = await engine.sync_pending()

    assert report.failed == 1
    assert (await store.get("r1")).status == InspectionStatus.PENDING


@pytest.mark.asyncio
async def test_retries_converge_once_the_remote_recovers(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    fake_remote.failures_before_success = 2
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    for _ in range(3):
        await engine.request_sync("timer")

    assert fake_remote.calls == ["r1", "r1", "r1"]
    stored = await store.get("r1")
    assert stored.status == InspectionStatus.SYNCED
    assert stored.synced_at is not None


@pytest.mark.asyncio
async def test_overlapping_triggers_share_one_pass(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    fake_remote.gate = asyncio.Event()
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    first = engine.request_sync("online")
    second = engine.request_sync("timer")
    third = engine.request_sync("created")
    fake_remote.gate.set()
    await first

    assert second is first
    assert third is first
    assert fake_remote.calls == ["r1"]


@pytest.mark.asyncio
async def test_trigger_during_pass_rescans_for_new_records(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1", minutes=1))
    fake_remote.gate = asyncio.Event()
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    task = engine.request_sync("online")
    while not fake_remote.calls:
        await asyncio.sleep(0.01)
    # r2 arrives while r1 is still in flight
    await store.put(make_inspection("r2", minutes=2))
    engine.request_sync("created")
    fake_remote.gate.set()
    await task

    assert fake_remote.calls == ["r1", "r2"]
    assert await store.count_by_status(InspectionStatus.PENDING) == 0


@pytest.mark.asyncio
async def test_concurrent_direct_passes_never_double_push(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    first, second = await asyncio.gather(engine.sync_pending("a"), engine.sync_pending("b"))

    assert fake_remote.calls == ["r1"]
    assert first.synced + second.synced == 1


@pytest.mark.asyncio
async def test_request_sync_is_ignored_while_offline(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    monitor = ManualConnectivityMonitor(initially_online=False)
    engine = SyncEngine(store, fake_remote, monitor, interval_seconds=0)

    assert engine.request_sync("manual") is None
    assert fake_remote.calls == []


@pytest.mark.asyncio
async def test_going_online_triggers_a_pass(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    monitor = ManualConnectivityMonitor(initially_online=False)
    engine = SyncEngine(store, fake_remote, monitor, interval_seconds=0)
    await engine.start()

    assert fake_remote.calls == []

    await monitor.set_online(True)
    await engine.wait_for_pass()

    assert fake_remote.calls == ["r1"]
    assert (await store.get("r1")).status == InspectionStatus.SYNCED
    await engine.stop()


@pytest.mark.asyncio
async def test_start_while_online_syncs_immediately(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    await engine.start()
    await engine.wait_for_pass()

    assert fake_remote.calls == ["r1"]
    await engine.stop()


@pytest.mark.asyncio
async def test_timer_retries_while_online(store, fake_remote, make_inspection, eventually):
    engine = SyncEngine(store, fake_remote, interval_seconds=0.05)
    await engine.start()
    await engine.wait_for_pass()

    # Written behind the engine's back, only the timer can pick it up
    await store.put(make_inspection("r1"))
    await eventually(lambda: "r1" in fake_remote.calls)
    await engine.wait_for_pass()

    assert (await store.get("r1")).status == InspectionStatus.SYNCED
    await engine.stop()


@pytest.mark.asyncio
async def test_stop_detaches_from_connectivity(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    monitor = ManualConnectivityMonitor(initially_online=False)
    engine = SyncEngine(store, fake_remote, monitor, interval_seconds=0.05)
    await engine.start()

    await engine.stop()
    await monitor.set_online(True)
    await asyncio.sleep(0.1)

    assert not engine.is_running
    assert fake_remote.calls == []


@pytest.mark.asyncio
async def test_status_badge_follows_connectivity_and_backlog(store, fake_remote, make_inspection):
    monitor = ManualConnectivityMonitor(initially_online=False)
    engine = SyncEngine(store, fake_remote, monitor, interval_seconds=0)
    await store.put(make_inspection("r1"))

    offline = await engine.status()
    assert offline.badge == "offline"
    assert offline.pending_count == 1

    await monitor.set_online(True)
    pending = await engine.status()
    assert pending.badge == "pending"

    await engine.sync_pending()
    settled = await engine.status()
    assert settled.badge == "online"
    assert settled.pending_count == 0
    assert settled.state == SyncState.IDLE
    assert settled.last_pass_at is not None
    assert settled.last_report.synced == 1


@pytest.mark.asyncio
async def test_status_reports_syncing_during_pass(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    fake_remote.gate = asyncio.Event()
    engine = SyncEngine(store, fake_remote, interval_seconds=0)

    task = engine.request_sync("manual")
    while not fake_remote.calls:
        await asyncio.sleep(0.01)

    assert engine.state == SyncState.SYNCING
    assert (await engine.status()).badge == "syncing"

    fake_remote.gate.set()
    await task
    assert engine.state == SyncState.IDLE


@pytest.mark.asyncio
async def test_backoff_holds_back_failing_records(store, fake_remote, make_inspection):
    await store.put(make_inspection("r1"))
    fake_remote.fail_ids = {"r1"}
    clock = FakeClock()
    backoff = PushBackoff(base_seconds=30, cap_seconds=900, jitter_seconds=0, clock=clock)
    engine = SyncEngine(store, fake_remote, interval_seconds=0, backoff=backoff)

    first = await engine.sync_pending()
    held = await engine.sync_pending()
    clock.now = 31
    fake_remote.fail_ids.clear()
    retried = await engine.sync_pending()

    assert (first.attempted, first.failed) == (1, 1)
    assert (held.attempted, held.skipped) == (0, 1)
    assert retried.synced == 1
    assert fake_remote.calls == ["r1", "r1"]
    assert backoff.failures("r1") == 0


@pytest.mark.asyncio
async def test_request_sync_is_refused_after_stop(store, fake_remote, make_inspection):
    engine = SyncEngine(store, fake_remote, interval_seconds=0)
    await engine.start()
    await engine.wait_for_pass()
    await engine.stop()

    await store.put(make_inspection("r1"))

    assert engine.request_sync("created") is None
    assert fake_remote.calls == []


@pytest.mark.asyncio
async def test_create_after_stop_stays_pending(store, fake_remote):
    engine = SyncEngine(store, fake_remote, interval_seconds=0)
    factory = InspectionFactory(store, engine)
    await engine.start()
    await engine.stop()

    created = await factory.create("Pump house 3", "Ana", "Valve seal leaking under pressure")
    await engine.wait_for_pass()

    assert fake_remote.calls == []
    assert (await store.get(created.id)).status == InspectionStatus.PENDING


@pytest.mark.asyncio
async def test_restart_accepts_requests_again(store, fake_remote, make_inspection):
    engine = SyncEngine(store, fake_remote, interval_seconds=0)
    await engine.start()
    await engine.stop()
    await store.put(make_inspection("r1"))

    await engine.start()
    await engine.wait_for_pass()

    assert fake_remote.calls == ["r1"]
    await engine.stop()
