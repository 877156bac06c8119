"""Monitoring subpackage: logging and Prometheus counters."""

from cc_batcher.monitoring.logging_utils import get_event_logger, get_logger, log_event
from cc_batcher.monitoring.metrics import (
    BATCHES_PUBLISHED,
    CDX_ENTRIES_KEPT,
    CDX_FILES,
    CDX_LINES,
    CDX_LINES_INVALID,
    ENTRIES_PUBLISHED,
    record_batch,
    record_file,
    record_invalid_line,
    record_kept,
    record_lines,
)
from cc_batcher.monitoring.metrics_server import start_metrics_server

__all__ = [
    # logging
    "get_event_logger",
    "get_logger",
    "log_event",
    # metrics
    "BATCHES_PUBLISHED",
    "CDX_ENTRIES_KEPT",
    "CDX_FILES",
    "CDX_LINES",
    "CDX_LINES_INVALID",
    "ENTRIES_PUBLISHED",
    "record_batch",
    "record_file",
    "record_invalid_line",
    "record_kept",
    "record_lines",
    # metrics_server
    "start_metrics_server",
]
