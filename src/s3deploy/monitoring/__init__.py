"""
Monitoring utilities for s3deploy.
"""

from s3deploy.monitoring.metrics import (
    TRANSFER_BYTES,
    TRANSFER_DURATION,
    TRANSFERS_IN_FLIGHT,
    TRANSFERS_TOTAL,
    export_textfile,
)

__all__ = [
    "TRANSFERS_TOTAL",
    "TRANSFER_BYTES",
    "TRANSFERS_IN_FLIGHT",
    "TRANSFER_DURATION",
    "export_textfile",
]
