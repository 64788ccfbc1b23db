"""Static table of target kinds this package provides."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from s3deploy.core.exceptions import ConfigurationError
from s3deploy.targets.s3_file import S3FileTarget

TargetConstructor = Callable[[dict], S3FileTarget]

KNOWN_TARGETS: Mapping[str, TargetConstructor] = MappingProxyType(
    {
        S3FileTarget.kind: S3FileTarget.from_dict,
    }
)


def create_target(kind: str, data: dict) -> S3FileTarget:
    """Build a target of ``kind`` from its raw configuration."""
    try:
        constructor = KNOWN_TARGETS[kind]
    except KeyError:
        known = ", ".join(sorted(KNOWN_TARGETS))
        raise ConfigurationError(
            f"unknown target kind {kind!r} (known: {known})"
        ) from None
    return constructor(data)


__all__ = ["KNOWN_TARGETS", "create_target"]
