"""Ingest subpackage: fetch, parse, filter and batch CDX records."""

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

__all__ = [
    # batching
    "batched",
    # cdx
    "CdxEntry",
    "CdxMetadata",
    "filter_language",
    "is_cdx_path",
    "keep_language",
    "parse_cdx_line",
    "parse_cdx_lines",
    # fetcher
    "decode_lines",
    "download_and_decompress",
    "split_lines",
]
