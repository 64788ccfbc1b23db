"""Configuration models for s3_file targets."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from s3deploy.core.exceptions import ConfigurationError
from s3deploy.core.models import BucketTarget


class TargetMode(str, Enum):
    """How the declared sources reach the bucket."""
    ARCHIVE = "archive"
    DIRECT = "direct"


class S3FileConfig(BaseModel):
    """
    One deployable unit.

    Example:
        S3FileConfig(
            name="site",
            srcs=["index.html", "css/main.css"],
            bucket="web-${ENV}",
            bucket_key="releases/${VERSION}",
            mode="direct",
        )
    """

    name: str = Field(..., min_length=1, description="Target name")
    srcs: List[str] = Field(default_factory=list, description="Declared source files")
    deps: List[str] = Field(
        default_factory=list,
        description="Targets whose outputs are packed (resolved by the orchestrator)"
    )

    bucket: str = Field(..., min_length=1, description="Bucket name template")
    bucket_key: str = Field(
        "",
        description="Object key (archive mode) or key prefix (direct mode) template"
    )

    mode: TargetMode = Field(TargetMode.ARCHIVE, description="archive or direct")
    max_parallel: int = Field(10, ge=1, description="Maximum transfers in flight")

    # Per-environment variable overlays
    environments: Dict[str, Dict[str, str]] = Field(
        default_factory=dict,
        description="Variables added to the context when deploying to an environment"
    )

    @field_validator("srcs", "deps", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        if v is None:
            return []
        return v

    @model_validator(mode="after")
    def archive_needs_key(self) -> "S3FileConfig":
        if self.mode is TargetMode.ARCHIVE and not self.bucket_key.strip():
            raise ValueError("bucket_key is required in archive mode")
        return self

    @property
    def target(self) -> BucketTarget:
        return BucketTarget(bucket_template=self.bucket, key_template=self.bucket_key)

    @classmethod
    def from_dict(cls, data: dict) -> "S3FileConfig":
        """Load configuration from dictionary."""
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @classmethod
    def from_yaml(cls, path: str) -> "S3FileConfig":
        """Load a single target from YAML."""
        return cls.from_dict(_load_yaml(path))


class TargetsConfig(BaseModel):
    """All targets declared in one YAML file."""

    targets: List[S3FileConfig] = Field(..., description="Declared s3_file targets")

    @classmethod
    def from_yaml(cls, path: str) -> "TargetsConfig":
        """Load multiple target configurations from YAML."""
        data = _load_yaml(path)
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def get_target(self, name: str) -> Optional[S3FileConfig]:
        """Get target configuration by name."""
        for target in self.targets:
            if target.name == name:
                return target
        return None


def _load_yaml(path: str) -> Dict[str, Any]:
    import yaml

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"reading {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")
    return data


@dataclass
class Settings:
    log_level: str = "INFO"
    json_logs: bool = False
    metrics_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        metrics_file = os.getenv("S3DEPLOY_METRICS_FILE")
        return cls(
            log_level=os.getenv("S3DEPLOY_LOG_LEVEL", "INFO"),
            json_logs=os.getenv("S3DEPLOY_LOG_JSON", "false").lower() == "true",
            metrics_file=metrics_file if metrics_file else None,
        )


__all__ = ["TargetMode", "S3FileConfig", "TargetsConfig", "Settings"]
