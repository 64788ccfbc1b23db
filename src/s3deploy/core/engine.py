"""Bounded-concurrency executor for upload/delete transfer specs."""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, List

from s3deploy.core.limiter import ConcurrencyLimiter, Permit
from s3deploy.core.models import (
    TransferOperation,
    TransferOutcome,
    TransferReport,
    TransferSpec,
)
from s3deploy.core.storage import ObjectStore
from s3deploy.monitoring.metrics import (
    TRANSFER_BYTES,
    TRANSFER_DURATION,
    TRANSFERS_IN_FLIGHT,
    TRANSFERS_TOTAL,
)
from s3deploy.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_PARALLEL = 10


class TransferEngine:
    """
    Runs a set of TransferSpecs with at most ``max_parallel`` in flight.

    For every spec the engine acquires a permit, then dispatches the transfer
    as a task of one TaskGroup; the task returns the permit when it finishes.
    ``run`` returns only once every task has finished. A failing spec never
    cancels its peers: its error is recorded in its own outcome.
    """

    def __init__(
        self,
        store: ObjectStore,
        max_parallel: int = DEFAULT_MAX_PARALLEL,
        dry_run: bool = False,
    ):
        self.store = store
        self.max_parallel = max_parallel
        self.dry_run = dry_run
        self.limiter = ConcurrencyLimiter(max_parallel)

    async def run(self, specs: Iterable[TransferSpec]) -> TransferReport:
        specs = list(specs)
        if not specs:
            return TransferReport()

        started = time.perf_counter()
        tasks: List[asyncio.Task[TransferOutcome]] = []
        async with asyncio.TaskGroup() as tg:
            for spec in specs:
                permit = await self.limiter.acquire()
                tasks.append(tg.create_task(self._execute(spec, permit)))

        report = TransferReport(tuple(task.result() for task in tasks))
        logger.info(
            "transfer_run_finished",
            total=len(report),
            succeeded=len(report.succeeded),
            failed=len(report.failed),
            dry_run=self.dry_run,
            max_parallel=self.max_parallel,
            peak_in_flight=self.limiter.peak,
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return report

    async def _execute(self, spec: TransferSpec, permit: Permit) -> TransferOutcome:
        with permit:
            TRANSFERS_IN_FLIGHT.inc()
            start = time.perf_counter()
            try:
                outcome = await self._perform(spec)
            finally:
                TRANSFERS_IN_FLIGHT.dec()
                TRANSFER_DURATION.labels(operation=spec.operation.value).observe(
                    time.perf_counter() - start
                )

        status = "ok" if outcome.ok else "error"
        TRANSFERS_TOTAL.labels(operation=spec.operation.value, status=status).inc()
        if outcome.bytes_transferred:
            TRANSFER_BYTES.labels(operation=spec.operation.value).inc(
                outcome.bytes_transferred
            )
        return outcome

    async def _perform(self, spec: TransferSpec) -> TransferOutcome:
        if self.dry_run:
            # Same permit path as a real run, without touching the store.
            await asyncio.sleep(0)
            logger.debug(
                "transfer_skipped_dry_run",
                operation=spec.operation.value,
                path=spec.local_path,
                key=spec.remote_key,
            )
            return TransferOutcome(spec=spec, dry_run=True)

        try:
            if spec.operation is TransferOperation.UPLOAD:
                sent = await self.store.put(spec.local_path, spec.remote_key)
            else:
                await self.store.delete(spec.local_path, spec.remote_key)
                sent = 0
        except Exception as exc:
            logger.warning(
                "transfer_failed",
                operation=spec.operation.value,
                path=spec.local_path,
                key=spec.remote_key,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return TransferOutcome(spec=spec, error=exc)

        logger.debug(
            "transfer_done",
            operation=spec.operation.value,
            path=spec.local_path,
            key=spec.remote_key,
            size_bytes=sent,
        )
        return TransferOutcome(spec=spec, bytes_transferred=sent or 0)


__all__ = ["TransferEngine", "DEFAULT_MAX_PARALLEL"]
