"""Error taxonomy for s3deploy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from s3deploy.core.models import TransferOutcome


class S3DeployError(Exception):
    """Base class for every error surfaced to the orchestrator."""


class ConfigurationError(S3DeployError):
    """Raised before any transfer starts when the target is misconfigured."""


class InterpolationError(ConfigurationError):
    """Raised when a bucket/key template references an unknown variable."""


class EndpointError(S3DeployError):
    """Raised when the S3 client configuration cannot be built."""


class KeyMappingError(S3DeployError, ValueError):
    """Raised when a local file does not live under the mapping root."""


class ArchiveError(S3DeployError):
    """Raised when the archive could not be produced. No archive exists."""


class TransferFailedError(S3DeployError):
    """One or more transfers of an invocation failed."""

    def __init__(self, failures: Sequence["TransferOutcome"]):
        self.failures = tuple(failures)
        lines = [
            f"{outcome.spec.remote_key}: {outcome.error}" for outcome in self.failures
        ]
        super().__init__(
            f"{len(self.failures)} transfer(s) failed:\n" + "\n".join(lines)
        )


__all__ = [
    "S3DeployError",
    "ConfigurationError",
    "InterpolationError",
    "EndpointError",
    "KeyMappingError",
    "ArchiveError",
    "TransferFailedError",
]
