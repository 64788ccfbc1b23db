"""
Target configuration for s3deploy.
"""

from .config import S3FileConfig, Settings, TargetMode, TargetsConfig

__all__ = ["S3FileConfig", "TargetsConfig", "TargetMode", "Settings"]
