import os
from dataclasses import dataclass

from dotenv import load_dotenv

from cc_batcher.errors import ConfigError


load_dotenv("secrets.env", override=False)


def env(name: str, default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise ConfigError(name)
    return value


def env_bool(name: str, default: str = "false") -> bool:
    value = os.getenv(name, default).strip().lower()
    return value in {"1", "true", "yes", "y", "on"}


class Settings:
    rabbitmq_connection_string = os.getenv("RABBITMQ_CONNECTION_STRING", "")
    queue_name = env("CC_QUEUE_NAME", "batches")
    queue_durable = env_bool("QUEUE_DURABLE", "false")
    rabbitmq_timeout_s = float(os.getenv("RABBITMQ_TIMEOUT_S", 20))
    publisher_confirms = env_bool("AMQP_PUBLISHER_CONFIRMS", "false")
    amqp_keepalive_s = float(os.getenv("AMQP_KEEPALIVE_S", 10))
    cc_base_url = env("CC_BASE_URL", "https://data.commoncrawl.org")
    cc_crawl_id = os.getenv("CC_CRAWL_ID", "CC-MAIN-2024-30")
    cdx_path_marker = os.getenv("CDX_PATH_MARKER", "cdx-")
    language = os.getenv("CDX_LANGUAGE", "eng")
    language_exact_match = env_bool("LANGUAGE_EXACT_MATCH", "false")
    batch_size = int(os.getenv("BATCH_SIZE", 1000))
    process_first_match_only = env_bool("PROCESS_FIRST_MATCH_ONLY", "true")
    skip_invalid_lines = env_bool("CDX_SKIP_INVALID", "false")
    request_timeout_s = float(os.getenv("REQUEST_TIMEOUT_S", 600))
    user_agent = os.getenv("CC_USER_AGENT", "cc-batcher/0.1")
    event_log = env_bool("EVENT_LOG", "true")
    metrics_port = int(os.getenv("METRICS_PORT", 0))


def path_index_url(crawl_id: str | None = None, base_url: str | None = None) -> str:
    base = (base_url or Settings.cc_base_url).rstrip("/")
    return f"{base}/crawl-data/{crawl_id or Settings.cc_crawl_id}/cc-index.paths.gz"


def data_url(path: str, base_url: str | None = None) -> str:
    base = (base_url or Settings.cc_base_url).rstrip("/")
    return f"{base}/{path.lstrip('/')}"


@dataclass(frozen=True)
class PublisherConfig:
    connection_string: str
    queue_name: str = "batches"
    durable: bool = False
    timeout_s: float = 20.0
    prefetch_count: int = 1
    confirm_delivery: bool = False
    keepalive_s: float = 10.0

    def __post_init__(self) -> None:
        if not self.connection_string:
            raise ConfigError("RABBITMQ_CONNECTION_STRING")
        if not self.queue_name:
            raise ConfigError("CC_QUEUE_NAME", "must not be empty")
        if self.timeout_s <= 0:
            raise ConfigError("RABBITMQ_TIMEOUT_S", "must be positive")

    @classmethod
    def from_settings(cls) -> "PublisherConfig":
        return cls(
            connection_string=Settings.rabbitmq_connection_string,
            queue_name=Settings.queue_name,
            durable=Settings.queue_durable,
            timeout_s=Settings.rabbitmq_timeout_s,
            confirm_delivery=Settings.publisher_confirms,
            keepalive_s=Settings.amqp_keepalive_s,
        )


@dataclass(frozen=True)
class PipelinePolicy:
    batch_size: int = 1000
    language: str = "eng"
    language_exact_match: bool = False
    cdx_path_marker: str = "cdx-"
    process_first_match_only: bool = True
    skip_invalid_lines: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigError("BATCH_SIZE", "must be at least 1")

    @classmethod
    def from_settings(cls) -> "PipelinePolicy":
        return cls(
            batch_size=Settings.batch_size,
            language=Settings.language,
            language_exact_match=Settings.language_exact_match,
            cdx_path_marker=Settings.cdx_path_marker,
            process_first_match_only=Settings.process_first_match_only,
            skip_invalid_lines=Settings.skip_invalid_lines,
        )
