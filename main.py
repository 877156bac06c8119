import argparse
import asyncio
from dataclasses import replace
import sys

import aiohttp

from cc_batcher.config import PipelinePolicy, PublisherConfig, Settings
from cc_batcher.errors import BatcherError, OperationTimeoutError
from cc_batcher.monitoring.logging_utils import get_event_logger
from cc_batcher.monitoring.metrics_server import start_metrics_server
from cc_batcher.pipeline import list_cdx_paths, run_batcher

log_event = get_event_logger("main")


async def print_paths(policy: PipelinePolicy, crawl_id: str | None) -> None:
    async with aiohttp.ClientSession(
        headers={"User-Agent": Settings.user_agent}
    ) as session:
        for path in await list_cdx_paths(session, policy, crawl_id):
            print(path)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Common Crawl CDX batch producer")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Publish English CDX batches to the queue")
    run.add_argument("--crawl-id", default=None, help="Crawl id, e.g. CC-MAIN-2024-30")
    run.add_argument(
        "--all-files",
        action="store_true",
        help="Process every CDX file instead of stopping after the first.",
    )
    run.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Log and skip malformed CDX lines instead of aborting.",
    )
    paths = sub.add_parser("paths", help="List CDX paths in the crawl index")
    paths.add_argument("--crawl-id", default=None)

    args = parser.parse_args(argv)

    try:
        policy = PipelinePolicy.from_settings()
        if args.command == "paths":
            asyncio.run(print_paths(policy, args.crawl_id))
            return 0
        if args.all_files:
            policy = replace(policy, process_first_match_only=False)
        if args.skip_invalid:
            policy = replace(policy, skip_invalid_lines=True)
        config = PublisherConfig.from_settings()
        start_metrics_server()
        asyncio.run(run_batcher(config, policy, args.crawl_id))
    except OperationTimeoutError as exc:
        log_event("abort", op=exc.operation, kind=exc.kind.__name__, error=exc)
        return 1
    except BatcherError as exc:
        log_event("abort", kind=type(exc).__name__, error=exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
