from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import aiohttp

from cc_batcher.config import (
    PipelinePolicy,
    PublisherConfig,
    Settings,
    data_url,
    path_index_url,
)
from cc_batcher.ingest.batching import batched
from cc_batcher.ingest.cdx import filter_language, is_cdx_path, parse_cdx_lines
from cc_batcher.ingest.fetcher import download_and_decompress
from cc_batcher.monitoring.logging_utils import get_event_logger
from cc_batcher.monitoring.metrics import record_file, record_lines
from cc_batcher.publish.queue import QueuePublisher

log_event = get_event_logger("pipeline")


@dataclass
class RunSummary:
    files: int = 0
    lines: int = 0
    batches: int = 0
    entries: int = 0


async def publish_entries(
    lines: Iterable[str],
    publisher: QueuePublisher,
    policy: PipelinePolicy,
    summary: RunSummary | None = None,
) -> RunSummary:
    """Parses, filters and batches CDX lines, publishing each batch as it fills."""
    summary = summary if summary is not None else RunSummary()
    entries = parse_cdx_lines(lines, skip_invalid=policy.skip_invalid_lines)
    kept = filter_language(
        entries, policy.language, exact=policy.language_exact_match
    )
    for batch in batched(kept, policy.batch_size):
        await publisher.publish(batch)
        summary.batches += 1
        summary.entries += len(batch)
    return summary


async def publish_cdx_file(
    session: aiohttp.ClientSession,
    publisher: QueuePublisher,
    path: str,
    policy: PipelinePolicy,
    summary: RunSummary | None = None,
) -> RunSummary:
    summary = summary if summary is not None else RunSummary()
    lines = await download_and_decompress(session, data_url(path))
    record_file()
    record_lines(len(lines))
    summary.files += 1
    summary.lines += len(lines)
    batches_before = summary.batches
    await publish_entries(lines, publisher, policy, summary)
    log_event(
        "file",
        path=path,
        lines=len(lines),
        batches=summary.batches - batches_before,
    )
    return summary


async def list_cdx_paths(
    session: aiohttp.ClientSession,
    policy: PipelinePolicy,
    crawl_id: str | None = None,
) -> list[str]:
    paths = await download_and_decompress(session, path_index_url(crawl_id))
    return [path for path in paths if is_cdx_path(path, policy.cdx_path_marker)]


async def run_batcher(
    config: PublisherConfig,
    policy: PipelinePolicy,
    crawl_id: str | None = None,
) -> RunSummary:
    """Publishes language-filtered CDX batches for one crawl.

    The publisher is fully set up before anything is downloaded so a
    broken broker fails the run without spending a download. With
    ``process_first_match_only`` the scan stops after the first CDX path.
    """
    summary = RunSummary()
    async with QueuePublisher(config) as publisher:
        async with aiohttp.ClientSession(
            headers={"User-Agent": Settings.user_agent}
        ) as session:
            paths = await download_and_decompress(session, path_index_url(crawl_id))
            for path in paths:
                if not is_cdx_path(path, policy.cdx_path_marker):
                    log_event("pass", path=path)
                    continue
                await publish_cdx_file(session, publisher, path, policy, summary)
                if policy.process_first_match_only:
                    break
    log_event(
        "done",
        files=summary.files,
        lines=summary.lines,
        batches=summary.batches,
        entries=summary.entries,
    )
    return summary
