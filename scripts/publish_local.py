import argparse
import asyncio
from dataclasses import replace
from pathlib import Path
import sys


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cc_batcher.config import PipelinePolicy, PublisherConfig
from cc_batcher.ingest.fetcher import decode_lines, split_lines
from cc_batcher.pipeline import publish_entries
from cc_batcher.publish.queue import QueuePublisher


def read_lines(path: Path) -> list[str]:
    data = path.read_bytes()
    if path.suffix == ".gz":
        return decode_lines(data, str(path))
    return split_lines(data.decode("utf-8"))


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Publish batches from a local CDX file (plain or .gz)."
    )
    parser.add_argument("path", help="CDX file to publish")
    parser.add_argument("--batch", type=int, default=None, help="Batch size override.")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip malformed lines instead of aborting.",
    )
    args = parser.parse_args()

    policy = PipelinePolicy.from_settings()
    if args.batch:
        policy = replace(policy, batch_size=args.batch)
    if args.skip_invalid:
        policy = replace(policy, skip_invalid_lines=True)

    lines = read_lines(Path(args.path))
    async with QueuePublisher(PublisherConfig.from_settings()) as publisher:
        summary = await publish_entries(lines, publisher, policy)
    print(
        f"Published {summary.entries} entries in {summary.batches} batches "
        f"to {publisher.queue_name}."
    )


if __name__ == "__main__":
    asyncio.run(main())
