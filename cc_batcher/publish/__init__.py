"""Publish subpackage: AMQP delivery of CDX batches."""

from cc_batcher.publish.queue import PublisherState, QueuePublisher, encode_batch

__all__ = [
    "PublisherState",
    "QueuePublisher",
    "encode_batch",
]
