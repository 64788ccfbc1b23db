"""
Target kinds exposed to the build orchestrator.
"""

from .context import RunContext, RuntimeContext
from .registry import KNOWN_TARGETS, create_target
from .s3_file import S3FileTarget

__all__ = [
    "RuntimeContext",
    "RunContext",
    "S3FileTarget",
    "KNOWN_TARGETS",
    "create_target",
]
