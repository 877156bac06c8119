from prometheus_client import start_http_server

from cc_batcher.config import Settings
from cc_batcher.monitoring.logging_utils import get_event_logger

log_event = get_event_logger("metrics")


def start_metrics_server(port: int | None = None) -> bool:
    port = Settings.metrics_port if port is None else port
    if port <= 0:
        return False
    start_http_server(port)
    log_event("metrics", port=port)
    return True
