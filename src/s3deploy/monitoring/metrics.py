"""Prometheus metrics for s3deploy transfers."""

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

# Counters
TRANSFERS_TOTAL = Counter(
    "s3deploy_transfers_total",
    "Transfers finished, by operation and outcome",
    ["operation", "status"],
)
TRANSFER_BYTES = Counter(
    "s3deploy_transfer_bytes_total",
    "Bytes streamed to the object store",
    ["operation"],
)

# Gauges
TRANSFERS_IN_FLIGHT = Gauge(
    "s3deploy_transfers_in_flight",
    "Transfers currently holding a concurrency permit",
)

TRANSFER_DURATION = Histogram(
    "s3deploy_transfer_duration_seconds",
    "Duration of a single transfer",
    ["operation"],
)


def export_textfile(path: str) -> None:
    """Write the default registry for a node-exporter textfile collector."""
    write_to_textfile(path, REGISTRY)


__all__ = [
    "TRANSFERS_TOTAL",
    "TRANSFER_BYTES",
    "TRANSFERS_IN_FLIGHT",
    "TRANSFER_DURATION",
    "export_textfile",
]
