"""s3deploy core functionality."""

from .endpoint import EndpointResolver
from .engine import TransferEngine
from .exceptions import (
    ArchiveError,
    ConfigurationError,
    EndpointError,
    InterpolationError,
    KeyMappingError,
    S3DeployError,
    TransferFailedError,
)
from .keys import archive_key, map_key
from .limiter import ConcurrencyLimiter
from .models import (
    BucketTarget,
    EndpointConfig,
    TransferOperation,
    TransferOutcome,
    TransferReport,
    TransferSpec,
)
from .storage import ObjectStore, S3ObjectStore

__all__ = [
    "EndpointResolver",
    "TransferEngine",
    "ConcurrencyLimiter",
    "ObjectStore",
    "S3ObjectStore",
    "map_key",
    "archive_key",
    "BucketTarget",
    "EndpointConfig",
    "TransferOperation",
    "TransferOutcome",
    "TransferReport",
    "TransferSpec",
    "S3DeployError",
    "ConfigurationError",
    "InterpolationError",
    "EndpointError",
    "KeyMappingError",
    "ArchiveError",
    "TransferFailedError",
]
