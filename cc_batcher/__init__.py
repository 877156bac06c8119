"""Common Crawl CDX batch producer."""

from cc_batcher.config import PipelinePolicy, PublisherConfig, Settings
from cc_batcher.errors import (
    BatcherError,
    BrokerError,
    ChannelError,
    ConfigError,
    ConnectError,
    DecodeError,
    DeclareError,
    FetchError,
    OperationTimeoutError,
    ParseError,
    PublishError,
    QosError,
)
from cc_batcher.ingest.batching import batched
from cc_batcher.ingest.cdx import (
    CdxEntry,
    CdxMetadata,
    filter_language,
    is_cdx_path,
    keep_language,
    parse_cdx_line,
    parse_cdx_lines,
)
from cc_batcher.ingest.fetcher import decode_lines, download_and_decompress, split_lines
from cc_batcher.pipeline import (
    RunSummary,
    list_cdx_paths,
    publish_cdx_file,
    publish_entries,
    run_batcher,
)
from cc_batcher.publish.queue import PublisherState, QueuePublisher, encode_batch

__all__ = [
    # config
    "PipelinePolicy",
    "PublisherConfig",
    "Settings",
    # errors
    "BatcherError",
    "BrokerError",
    "ChannelError",
    "ConfigError",
    "ConnectError",
    "DecodeError",
    "DeclareError",
    "FetchError",
    "OperationTimeoutError",
    "ParseError",
    "PublishError",
    "QosError",
    # ingest
    "CdxEntry",
    "CdxMetadata",
    "batched",
    "decode_lines",
    "download_and_decompress",
    "filter_language",
    "is_cdx_path",
    "keep_language",
    "parse_cdx_line",
    "parse_cdx_lines",
    "split_lines",
    # pipeline
    "RunSummary",
    "list_cdx_paths",
    "publish_cdx_file",
    "publish_entries",
    "run_batcher",
    # publish
    "PublisherState",
    "QueuePublisher",
    "encode_batch",
]
