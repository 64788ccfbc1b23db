"""Tests for the bounded-concurrency transfer engine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import RecordingStore
from s3deploy.core.engine import DEFAULT_MAX_PARALLEL, TransferEngine
from s3deploy.core.exceptions import ConfigurationError, TransferFailedError
from s3deploy.core.models import TransferOperation, TransferSpec

pytestmark = pytest.mark.asyncio


def _specs(count: int, operation: TransferOperation = TransferOperation.UPLOAD):
    return [
        TransferSpec(local_path=f"/out/f{i}.txt", remote_key=f"p/f{i}.txt", operation=operation)
        for i in range(count)
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    "max_parallel,count",
    [(1, 1), (1, 7), (2, 5), (3, 3), (3, 20), (10, 4), (10, 50), (25, 100)],
)
async def test_peak_concurrency_never_exceeds_limit(max_parallel, count):
    store = RecordingStore(delay=0.002)
    engine = TransferEngine(store, max_parallel=max_parallel)

    report = await engine.run(_specs(count))

    assert len(report) == count
    assert report.ok
    assert store.peak <= max_parallel
    assert engine.limiter.peak <= max_parallel
    # With enough work queued the pool is actually used up to its bound.
    assert store.peak == min(max_parallel, count)


@pytest.mark.unit
@pytest.mark.parametrize("max_parallel", [1, 4])
async def test_dry_run_keeps_concurrency_bound(max_parallel):
    store = RecordingStore()
    engine = TransferEngine(store, max_parallel=max_parallel, dry_run=True)

    report = await engine.run(_specs(30))

    assert len(report) == 30
    assert all(o.ok and o.dry_run for o in report)
    assert store.calls == []
    assert 1 <= engine.limiter.peak <= max_parallel
    assert engine.limiter.in_flight == 0


@pytest.mark.unit
async def test_all_transfers_finish_before_run_returns():
    store = RecordingStore(delay=0.01)
    engine = TransferEngine(store, max_parallel=3)

    await engine.run(_specs(9))

    assert store.active == 0
    assert len(store.calls) == 9
    assert set(store.objects) == {f"p/f{i}.txt" for i in range(9)}
    assert engine.limiter.in_flight == 0


@pytest.mark.unit
async def test_empty_spec_set_returns_empty_report():
    store = RecordingStore()
    engine = TransferEngine(store, max_parallel=2)

    report = await engine.run([])

    assert len(report) == 0
    assert report.ok
    assert store.calls == []


@pytest.mark.unit
async def test_outcomes_follow_dispatch_order():
    store = RecordingStore(delay=0.001)
    engine = TransferEngine(store, max_parallel=4)
    specs = _specs(12)

    report = await engine.run(specs)

    assert [o.spec for o in report] == specs


@pytest.mark.unit
async def test_failure_is_isolated_to_its_spec():
    specs = _specs(3)
    store = RecordingStore(missing=(specs[1].local_path,))
    engine = TransferEngine(store, max_parallel=2)

    report = await engine.run(specs)

    assert report.outcomes[0].ok
    assert report.outcomes[2].ok
    assert isinstance(report.outcomes[1].error, FileNotFoundError)
    assert report.failed == (report.outcomes[1],)
    assert not report.ok
    assert len(store.calls) == 3

    with pytest.raises(TransferFailedError) as excinfo:
        report.raise_for_failures()
    assert excinfo.value.failures == (report.outcomes[1],)
    assert "p/f1.txt" in str(excinfo.value)


@pytest.mark.unit
async def test_every_failure_releases_its_permit():
    store = AsyncMock()
    store.put.side_effect = RuntimeError("network down")
    engine = TransferEngine(store, max_parallel=2)

    report = await engine.run(_specs(6))

    assert len(report.failed) == 6
    assert engine.limiter.in_flight == 0
    assert store.put.await_count == 6


@pytest.mark.unit
async def test_delete_goes_to_store_delete():
    store = RecordingStore()
    engine = TransferEngine(store, max_parallel=2)

    report = await engine.run(_specs(3, TransferOperation.DELETE))

    assert report.ok
    assert [c[0] for c in store.calls] == ["delete"] * 3
    assert all(o.bytes_transferred == 0 for o in report)


@pytest.mark.unit
async def test_upload_records_bytes_sent():
    store = AsyncMock()
    store.put.return_value = 42
    engine = TransferEngine(store)

    report = await engine.run(_specs(1))

    assert report.outcomes[0].bytes_transferred == 42
    assert engine.max_parallel == DEFAULT_MAX_PARALLEL


@pytest.mark.unit
async def test_peers_not_cancelled_by_slow_failure():
    started = asyncio.Event()

    class Store(RecordingStore):
        async def put(self, local_path: str, key: str) -> int:
            if key.endswith("f0.txt"):
                started.set()
                raise RuntimeError("fails first")
            await started.wait()
            return await super().put(local_path, key)

    store = Store()
    engine = TransferEngine(store, max_parallel=3)

    report = await engine.run(_specs(5))

    assert len(report.failed) == 1
    assert len(report.succeeded) == 4


@pytest.mark.unit
async def test_invalid_max_parallel_rejected():
    with pytest.raises(ConfigurationError):
        TransferEngine(RecordingStore(), max_parallel=0)
