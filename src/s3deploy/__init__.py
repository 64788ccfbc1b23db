"""s3deploy - bounded-concurrency S3 deployment of build outputs."""

__version__ = "0.3.0"

from .core import (  # noqa: E402
    ConcurrencyLimiter,
    EndpointResolver,
    S3ObjectStore,
    TransferEngine,
    TransferOperation,
    TransferReport,
    TransferSpec,
    map_key,
)
from .packer import ArchivePackager  # noqa: E402
from .targets import KNOWN_TARGETS, RunContext, S3FileTarget, create_target  # noqa: E402

__all__ = [
    "TransferEngine",
    "ConcurrencyLimiter",
    "EndpointResolver",
    "S3ObjectStore",
    "TransferOperation",
    "TransferReport",
    "TransferSpec",
    "map_key",
    "ArchivePackager",
    "S3FileTarget",
    "RunContext",
    "KNOWN_TARGETS",
    "create_target",
]
