"""
Exception hierarchy for the batch producer.

Every stage raises a subclass of BatcherError and leaves the abort/skip
decision to the caller. Broker failures are split by operation so a log
line says which step of the channel setup went wrong, and timeouts get
their own type so "broker unreachable" never reads as "broker rejected".
"""

from __future__ import annotations


class BatcherError(Exception):
    """Base exception for all batcher errors."""


class ConfigError(BatcherError):
    """Raised at startup when a required setting is missing or invalid."""

    def __init__(self, key: str, reason: str = "missing or empty"):
        self.key = key
        super().__init__(f"Configuration error for '{key}': {reason}")


class FetchError(BatcherError):
    """Raised when an HTTP fetch does not return 200 OK."""

    def __init__(self, url: str, status: int | None, detail: str = ""):
        self.url = url
        self.status = status
        shown = status if status is not None else "error"
        message = f"Fetch failed for {url}: status={shown}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DecodeError(BatcherError):
    """Raised when a fetched body is not valid gzip or not valid UTF-8."""

    def __init__(self, url: str, detail: str):
        self.url = url
        super().__init__(f"Decode failed for {url}: {detail}")


class ParseError(BatcherError):
    """Raised when a CDX line or its JSON metadata is malformed."""

    def __init__(self, detail: str, line: str = "", line_no: int | None = None):
        self.detail = detail
        self.line = line
        self.line_no = line_no
        location = f" at line {line_no}" if line_no is not None else ""
        super().__init__(f"CDX parse error{location}: {detail}")


class BrokerError(BatcherError):
    """Base exception for AMQP broker failures."""

    operation = "broker"

    def __init__(self, detail: str):
        super().__init__(f"Broker {self.operation} failed: {detail}")


class ConnectError(BrokerError):
    operation = "connect"


class ChannelError(BrokerError):
    operation = "open_channel"


class QosError(BrokerError):
    operation = "set_qos"


class DeclareError(BrokerError):
    operation = "declare_queue"


class PublishError(BrokerError):
    operation = "publish"


class OperationTimeoutError(BatcherError, TimeoutError):
    """Raised when a bounded operation exceeds its wall-clock limit.

    ``kind`` is the error class the operation raises on a non-timeout
    failure, so callers can still tell which step stalled.
    """

    def __init__(self, operation: str, timeout_s: float, kind: type[BatcherError]):
        self.operation = operation
        self.timeout_s = timeout_s
        self.kind = kind
        super().__init__(f"Timed out after {timeout_s:g}s during {operation}")
