"""AMQP publisher for CDX batches.

pika's BlockingConnection is not thread safe, so every call for one
publisher runs on one daemon worker thread. That keeps the channel
single-writer while the event loop stays free for HTTP downloads, and
lets each broker step be bounded with ``asyncio.wait_for``. The thread is
a daemon so a call stuck past its bound never holds the process open.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Future
from contextlib import suppress
from enum import Enum
from functools import partial
import json
import queue
import threading
from typing import Any, Callable, Sequence
from urllib.parse import urlparse

import pika
import pika.exceptions

from cc_batcher.config import PublisherConfig
from cc_batcher.errors import (
    BatcherError,
    BrokerError,
    ChannelError,
    ConnectError,
    DeclareError,
    OperationTimeoutError,
    PublishError,
    QosError,
)
from cc_batcher.ingest.cdx import CdxEntry
from cc_batcher.monitoring.logging_utils import get_event_logger
from cc_batcher.monitoring.metrics import record_batch

log_event = get_event_logger("queue")

BROKER_ERRORS = (pika.exceptions.AMQPError, OSError, ValueError)


class PublisherState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CHANNEL_READY = "channel_ready"
    CONFIGURED = "configured"
    READY = "ready"
    CLOSED = "closed"


def encode_batch(batch: Sequence[CdxEntry]) -> bytes:
    return json.dumps(
        [entry.to_dict() for entry in batch],
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def _open_connection(
    connection_string: str, timeout_s: float
) -> pika.BlockingConnection:
    parameters = pika.URLParameters(connection_string)
    parameters.socket_timeout = timeout_s
    parameters.stack_timeout = timeout_s
    parameters.blocked_connection_timeout = timeout_s
    return pika.BlockingConnection(parameters)


class BrokerThread:
    """Runs submitted calls one at a time on a single daemon thread."""

    def __init__(self, name: str = "amqp") -> None:
        self._calls: queue.SimpleQueue = queue.SimpleQueue()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while True:
            item = self._calls.get()
            if item is None:
                return
            future, func = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(func())
            except Exception as exc:
                future.set_exception(exc)

    def submit(self, func: Callable[[], Any]) -> Future:
        future: Future = Future()
        self._calls.put((future, func))
        return future

    def stop(self) -> None:
        self._calls.put(None)


class QueuePublisher:
    def __init__(self, config: PublisherConfig) -> None:
        self.config = config
        self.state = PublisherState.DISCONNECTED
        self.queue_name: str | None = None
        self._connection: Any = None
        self._channel: Any = None
        self._worker = BrokerThread()
        self._stalled = False
        self._keepalive_task: asyncio.Task | None = None

    async def __aenter__(self) -> QueuePublisher:
        try:
            await self.setup()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _require(self, kind: type[BrokerError], *states: PublisherState) -> None:
        if self.state not in states:
            expected = "/".join(state.value for state in states)
            raise kind(f"publisher is {self.state.value}, expected {expected}")

    async def _call(
        self,
        operation: str,
        kind: type[BrokerError],
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        future = asyncio.wrap_future(
            self._worker.submit(partial(func, *args, **kwargs))
        )
        try:
            return await asyncio.wait_for(future, self.config.timeout_s)
        except asyncio.TimeoutError as exc:
            self._stalled = True
            log_event("timeout", op=operation, after_s=self.config.timeout_s)
            raise OperationTimeoutError(operation, self.config.timeout_s, kind) from exc
        except BROKER_ERRORS as exc:
            log_event("fail", op=operation, error_type=type(exc).__name__)
            raise kind(f"{type(exc).__name__}: {exc}") from exc

    async def connect(self) -> None:
        self._require(ConnectError, PublisherState.DISCONNECTED)
        self._connection = await self._call(
            "connect",
            ConnectError,
            _open_connection,
            self.config.connection_string,
            self.config.timeout_s,
        )
        self.state = PublisherState.CONNECTED
        log_event("connect", host=urlparse(self.config.connection_string).hostname)
        if self.config.keepalive_s > 0:
            self._keepalive_task = asyncio.create_task(self._keepalive())

    async def open_channel(self) -> None:
        self._require(ChannelError, PublisherState.CONNECTED)
        self._channel = await self._call(
            "open_channel", ChannelError, self._connection.channel
        )
        if self.config.confirm_delivery:
            await self._call(
                "open_channel", ChannelError, self._channel.confirm_delivery
            )
        self.state = PublisherState.CHANNEL_READY
        log_event("channel", confirms=self.config.confirm_delivery)

    async def set_qos(self, prefetch: int | None = None) -> None:
        self._require(QosError, PublisherState.CHANNEL_READY)
        prefetch = self.config.prefetch_count if prefetch is None else prefetch
        await self._call(
            "set_qos", QosError, self._channel.basic_qos, prefetch_count=prefetch
        )
        self.state = PublisherState.CONFIGURED
        log_event("qos", prefetch=prefetch)

    async def declare_queue(self, name: str | None = None) -> None:
        self._require(DeclareError, PublisherState.CONFIGURED, PublisherState.READY)
        name = name or self.config.queue_name
        result = await self._call(
            "declare_queue",
            DeclareError,
            self._channel.queue_declare,
            queue=name,
            durable=self.config.durable,
        )
        self.queue_name = name
        self.state = PublisherState.READY
        log_event(
            "declare",
            queue=name,
            durable=self.config.durable,
            messages=result.method.message_count,
        )

    async def setup(self) -> None:
        await self.connect()
        await self.open_channel()
        await self.set_qos()
        await self.declare_queue()

    async def publish(self, batch: Sequence[CdxEntry]) -> None:
        self._require(PublishError, PublisherState.READY)
        if not batch:
            raise PublishError("refusing to publish an empty batch")
        body = encode_batch(batch)
        log_event("publish", queue=self.queue_name, entries=len(batch), bytes=len(body))
        await self._call(
            "publish",
            PublishError,
            self._channel.basic_publish,
            exchange="",
            routing_key=self.queue_name,
            body=body,
            properties=pika.BasicProperties(),
            mandatory=self.config.confirm_delivery,
        )
        record_batch(len(batch))

    async def _keepalive(self) -> None:
        while True:
            await asyncio.sleep(self.config.keepalive_s)
            try:
                await self._call(
                    "keepalive",
                    ConnectError,
                    self._connection.process_data_events,
                    time_limit=0,
                )
            except BatcherError as exc:
                log_event("keepalive", error=exc)
                return

    async def close(self) -> None:
        if self.state is PublisherState.CLOSED:
            return
        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._keepalive_task
            self._keepalive_task = None
        if self._stalled:
            # The worker is still inside the call that timed out.
            log_event("close", queue=self.queue_name, skipped="stalled")
            self.state = PublisherState.CLOSED
            self._worker.stop()
            return
        try:
            if self._channel is not None and self._channel.is_open:
                await self._call("close", ChannelError, self._channel.close)
            if self._connection is not None and self._connection.is_open:
                await self._call("close", ConnectError, self._connection.close)
        except BatcherError as exc:
            log_event("close", error=exc)
        finally:
            self.state = PublisherState.CLOSED
            self._worker.stop()
        log_event("closed", queue=self.queue_name)
