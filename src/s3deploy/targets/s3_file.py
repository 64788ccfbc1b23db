"""The ``s3_file`` target kind: build, deploy and remove lifecycle."""

from __future__ import annotations

import asyncio
import posixpath
from pathlib import Path
from typing import Any, Callable, List, Optional

from s3deploy.config.config import S3FileConfig, TargetMode
from s3deploy.core.endpoint import EndpointResolver
from s3deploy.core.engine import TransferEngine
from s3deploy.core.exceptions import ConfigurationError
from s3deploy.core.keys import archive_key, map_key
from s3deploy.core.models import (
    TransferOperation,
    TransferReport,
    TransferSpec,
)
from s3deploy.core.storage import ObjectStore, S3ObjectStore
from s3deploy.packer.archive import ArchivePackager
from s3deploy.targets.context import RuntimeContext
from s3deploy.utils.logging import get_logger, log_context

logger = get_logger(__name__)

ClientFactory = Callable[[EndpointResolver], Any]


def _default_client_factory(resolver: EndpointResolver) -> Any:
    return resolver.build_client()


class _DryRunStore:
    """Stands in for the S3 store when no client may be built."""

    async def put(self, local_path: str, key: str) -> int:
        raise RuntimeError("dry run must not reach the object store")

    async def delete(self, local_path: str, key: str) -> None:
        raise RuntimeError("dry run must not reach the object store")


class S3FileTarget:
    """
    Lifecycle adapter for one ``s3_file`` declaration.

    ``build`` produces the outputs, ``deploy`` uploads them and ``remove``
    deletes the same keys. Both transfer operations fail the invocation as a
    whole when any single file failed, after every file was attempted.
    """

    kind = "s3_file"

    def __init__(
        self,
        config: S3FileConfig,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config
        self.client_factory = client_factory or _default_client_factory

    @classmethod
    def from_dict(cls, data: dict) -> "S3FileTarget":
        return cls(S3FileConfig.from_dict(data))

    @property
    def name(self) -> str:
        return self.config.name

    def outs(self) -> List[str]:
        """Declared outputs, relative to the working directory."""
        if self.config.mode is TargetMode.ARCHIVE:
            return [posixpath.basename(self.config.bucket_key)]
        return list(self.config.srcs)

    # build

    def build(self, ctx: RuntimeContext) -> List[str]:
        outs = self.outs()
        if self.config.mode is TargetMode.DIRECT:
            ctx.debug("direct mode, %d output(s) declared", len(outs))
            return outs

        ctx.status("Packing archive (%s)", outs[0])
        ArchivePackager(ctx.cwd).build(self.config.srcs, ctx.dep_outs, outs[0])
        return outs

    # deploy / remove

    def deploy(self, ctx: RuntimeContext) -> TransferReport:
        return asyncio.run(self.adeploy(ctx))

    def remove(self, ctx: RuntimeContext) -> TransferReport:
        return asyncio.run(self.aremove(ctx))

    async def adeploy(self, ctx: RuntimeContext) -> TransferReport:
        ctx.status("Uploading to s3 (%s)", self.name)
        return await self._transfer(ctx, TransferOperation.UPLOAD)

    async def aremove(self, ctx: RuntimeContext) -> TransferReport:
        ctx.status("Removing from s3 (%s)", self.name)
        return await self._transfer(ctx, TransferOperation.DELETE)

    async def _transfer(
        self, ctx: RuntimeContext, operation: TransferOperation
    ) -> TransferReport:
        with log_context(target=self.name, operation=operation.value):
            bucket = ctx.interpolate(self.config.target.bucket_template).strip()
            ctx.debug("Bucket: %s", bucket)
            if not bucket:
                raise ConfigurationError(
                    f"{self.name}: bucket template resolved to an empty name"
                )
            key = ctx.interpolate(self.config.target.key_template)
            ctx.debug("Bucket key: %s", key)

            specs = self._specs(ctx, key, operation)

            resolver = EndpointResolver(ctx.env)
            endpoint = resolver.resolve()
            ctx.debug("Endpoint: %s (path-style)", endpoint.service_url)

            store: ObjectStore
            if ctx.dry_run:
                store = _DryRunStore()
            else:
                store = S3ObjectStore(self.client_factory(resolver), bucket)

            engine = TransferEngine(
                store, max_parallel=self.config.max_parallel, dry_run=ctx.dry_run
            )
            report = await engine.run(specs)

            for outcome in report:
                if outcome.ok:
                    ctx.debug(
                        "%s %s -> s3://%s/%s%s",
                        operation.value,
                        outcome.spec.local_path,
                        bucket,
                        outcome.spec.remote_key,
                        " (dry run)" if outcome.dry_run else "",
                    )
                else:
                    ctx.debug(
                        "%s %s failed: %s",
                        operation.value,
                        outcome.spec.local_path,
                        outcome.error,
                    )

            logger.info(
                "target_transfer_finished",
                bucket=bucket,
                total=len(report),
                failed=len(report.failed),
                dry_run=ctx.dry_run,
            )
            report.raise_for_failures()
            return report

    def _specs(
        self, ctx: RuntimeContext, key: str, operation: TransferOperation
    ) -> List[TransferSpec]:
        root = Path(ctx.cwd)

        if self.config.mode is TargetMode.ARCHIVE:
            outs = list(ctx.outs) or self.outs()
            if len(outs) != 1:
                raise ConfigurationError(
                    f"{self.name}: archive mode expects exactly one output, got {len(outs)}"
                )
            if not key.strip():
                raise ConfigurationError(f"{self.name}: bucket key resolved to an empty key")
            return [
                TransferSpec(
                    local_path=str(root / outs[0]),
                    remote_key=archive_key(key),
                    operation=operation,
                )
            ]

        specs = []
        for out in ctx.outs:
            local_path = root / out
            specs.append(
                TransferSpec(
                    local_path=str(local_path),
                    remote_key=map_key(root, local_path, key),
                    operation=operation,
                )
            )
        return specs


__all__ = ["S3FileTarget"]
