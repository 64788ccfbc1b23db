"""Data models for transfers and endpoint resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from s3deploy.core.exceptions import TransferFailedError


class TransferOperation(str, Enum):
    """Operation applied to a single remote key."""

    UPLOAD = "upload"
    DELETE = "delete"


@dataclass(frozen=True)
class TransferSpec:
    """One local file mapped to one remote key."""

    local_path: str
    remote_key: str
    operation: TransferOperation


@dataclass(frozen=True)
class TransferOutcome:
    """Result of executing a single TransferSpec."""

    spec: TransferSpec
    error: Optional[BaseException] = None
    dry_run: bool = False
    bytes_transferred: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class TransferReport:
    """Joined outcomes of one engine run, in dispatch order."""

    outcomes: Tuple[TransferOutcome, ...] = ()

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    @property
    def succeeded(self) -> Tuple[TransferOutcome, ...]:
        return tuple(o for o in self.outcomes if o.ok)

    @property
    def failed(self) -> Tuple[TransferOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        """Raise a single combined error if any outcome carries an error."""
        failures = self.failed
        if failures:
            raise TransferFailedError(failures)


@dataclass(frozen=True)
class EndpointConfig:
    """Network address and addressing style of the remote store."""

    service_url: str
    signing_region: str
    path_style_addressing: bool = True


@dataclass(frozen=True)
class BucketTarget:
    """
    Bucket and key templates of a deployable unit.

    Templates are resolved at dispatch time against the invocation's
    variables, so one declaration can be reused across environments.
    """

    bucket_template: str
    key_template: str = ""


__all__ = [
    "TransferOperation",
    "TransferSpec",
    "TransferOutcome",
    "TransferReport",
    "EndpointConfig",
    "BucketTarget",
]
