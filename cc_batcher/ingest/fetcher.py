import asyncio
import gzip
import zlib

import aiohttp

from cc_batcher.config import Settings
from cc_batcher.errors import DecodeError, FetchError, OperationTimeoutError
from cc_batcher.monitoring.logging_utils import get_event_logger

log_event = get_event_logger("fetcher")


def split_lines(text: str) -> list[str]:
    # Only "\n" delimits records; JSON payloads may carry raw U+2028.
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    while lines and not lines[-1]:
        lines.pop()
    return lines


def decode_lines(body: bytes, url: str = "<memory>") -> list[str]:
    """Gunzips a fetched body and returns its lines.

    Common Crawl index files are concatenated gzip members; every member
    is decoded, not just the first.
    """
    try:
        raw = gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecodeError(url, f"gzip: {exc}") from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(url, f"utf-8: {exc}") from exc
    return split_lines(text)


async def download_and_decompress(
    session: aiohttp.ClientSession, url: str, timeout_s: float | None = None
) -> list[str]:
    timeout_s = Settings.request_timeout_s if timeout_s is None else timeout_s
    log_event("fetch", url=url)
    try:
        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=timeout_s)
        ) as response:
            if response.status != 200:
                log_event("fail", url=url, status=response.status)
                raise FetchError(url, response.status)
            body = await response.read()
    except asyncio.TimeoutError as exc:
        log_event("timeout", url=url, after_s=timeout_s)
        raise OperationTimeoutError("fetch", timeout_s, FetchError) from exc
    except aiohttp.ClientError as exc:
        log_event("fail", url=url, status="error", error_type=type(exc).__name__)
        raise FetchError(url, None, str(exc)) from exc
    lines = decode_lines(body, url)
    log_event("fetched", url=url, bytes=len(body), lines=len(lines))
    return lines
