from prometheus_client import Counter


CDX_FILES = Counter("cdx_files_total", "CDX files fetched and processed")
CDX_LINES = Counter("cdx_lines_total", "CDX lines read from fetched files")
CDX_LINES_INVALID = Counter(
    "cdx_lines_invalid_total", "CDX lines skipped because they failed to parse"
)
CDX_ENTRIES_KEPT = Counter(
    "cdx_entries_kept_total", "CDX entries that passed the language filter"
)
BATCHES_PUBLISHED = Counter("batches_published_total", "Batches published to the queue")
ENTRIES_PUBLISHED = Counter(
    "entries_published_total", "CDX entries published inside batches"
)


def record_file() -> None:
    CDX_FILES.inc()


def record_lines(count: int) -> None:
    CDX_LINES.inc(count)


def record_invalid_line() -> None:
    CDX_LINES_INVALID.inc()


def record_kept() -> None:
    CDX_ENTRIES_KEPT.inc()


def record_batch(size: int) -> None:
    BATCHES_PUBLISHED.inc()
    ENTRIES_PUBLISHED.inc(size)
