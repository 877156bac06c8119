"""Shared fixtures: sample CDX lines and fakes for aiohttp and pika."""

from __future__ import annotations

import gzip
import json
from unittest.mock import MagicMock

import pika
import pytest

from cc_batcher.config import Settings


SAMPLE_CDX = """0,100,22,165)/ 20240722120756 {"url": "http://165.22.100.0/", "mime": "text/html", "mime-detected": "text/html", "status": "301", "digest": "DCNYNIFG5SBRCVS5PCUY4YY2UM2WAQ4R", "length": "689", "offset": "3499", "filename": "crawl-data/CC-MAIN-2024-30/segments/1720763517846.73/crawldiagnostics/CC-MAIN-20240722095039-20240722125039-00443.warc.gz", "redirect": "https://157.245.55.71/"}
0,100,22,165)/robots.txt 20240722120755 {"url": "http://165.22.100.0/robots.txt", "mime": "text/html", "mime-detected": "text/html", "status": "301", "digest": "LYEE2BXON4MCQCP5FDVDNILOWBKCZZ6G", "length": "700", "offset": "4656", "filename": "crawl-data/CC-MAIN-2024-30/segments/1720763517846.73/robotstxt/CC-MAIN-20240722095039-20240722125039-00410.warc.gz", "redirect": "https://157.245.55.71/robots.txt"}
0,100,59,139)/ 20240723213521 {"url": "https://139.59.100.0/", "mime": "text/html", "mime-detected": "text/html", "status": "200", "digest": "5JOQMMSNM6N7UCLGGYXDSPSB3FYAQS2C", "length": "16650", "offset": "64016172", "filename": "crawl-data/CC-MAIN-2024-30/segments/1720763518115.82/warc/CC-MAIN-20240723194208-20240723224208-00279.warc.gz", "charset": "UTF-8", "languages": "ind,eng"}"""


def make_cdx_line(index: int, languages: str | None = "eng") -> str:
    metadata = {
        "url": f"https://example.com/{index}",
        "status": "200",
        "length": "100",
        "offset": str(index * 100),
        "filename": "crawl-data/CC-MAIN-2024-30/segments/1/warc/x.warc.gz",
    }
    if languages is not None:
        metadata["languages"] = languages
    return f"com,example)/{index} 20240722120756 {json.dumps(metadata)}"


class FakeResponse:
    def __init__(self, status: int, body: bytes = b"") -> None:
        self.status = status
        self.body = body
        self.read_called = False

    async def read(self) -> bytes:
        self.read_called = True
        return self.body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


class FakeSession:
    """Serves canned responses by URL and records every GET."""

    def __init__(self, responses: dict[str, FakeResponse]) -> None:
        self.responses = responses
        self.requested: list[str] = []

    def get(self, url: str, timeout: object = None) -> FakeResponse:
        self.requested.append(url)
        return self.responses[url]

    async def __aenter__(self) -> FakeSession:
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


@pytest.fixture(autouse=True)
def quiet_events(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Settings, "event_log", False)


@pytest.fixture
def sample_lines() -> list[str]:
    return SAMPLE_CDX.splitlines()


@pytest.fixture
def gz_response():
    def build(text: str, status: int = 200) -> FakeResponse:
        return FakeResponse(status, gzip.compress(text.encode("utf-8")))

    return build


@pytest.fixture
def fake_pika(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replaces pika.BlockingConnection; returns the fake connection."""
    connection = MagicMock(name="connection")
    connection.is_open = True
    channel = connection.channel.return_value
    channel.is_open = True
    channel.queue_declare.return_value.method.message_count = 0
    factory = MagicMock(return_value=connection)
    monkeypatch.setattr(pika, "BlockingConnection", factory)
    return connection
