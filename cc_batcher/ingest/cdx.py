from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Iterable, Iterator

from cc_batcher.errors import ParseError
from cc_batcher.monitoring.logging_utils import get_event_logger
from cc_batcher.monitoring.metrics import record_invalid_line, record_kept

log_event = get_event_logger("cdx")

REQUIRED_FIELDS = ("url", "status", "length", "offset", "filename")


@dataclass(frozen=True)
class CdxMetadata:
    url: str
    status: str
    length: str
    offset: str
    filename: str
    languages: str | None = None
    # Source fields outside the published schema, e.g. mime or digest.
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    # True when the source carried a "languages" key, even as null.
    languages_present: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def from_json(cls, payload: Any) -> CdxMetadata:
        if not isinstance(payload, dict):
            raise ParseError(
                f"metadata must be a JSON object, got {type(payload).__name__}"
            )
        values: dict[str, str] = {}
        for name in REQUIRED_FIELDS:
            if name not in payload:
                raise ParseError(f"metadata missing required field '{name}'")
            value = payload[name]
            if not isinstance(value, str):
                raise ParseError(f"metadata field '{name}' must be a string")
            values[name] = value
        languages = payload.get("languages")
        if languages is not None and not isinstance(languages, str):
            raise ParseError("metadata field 'languages' must be a string")
        extra = {
            key: value
            for key, value in payload.items()
            if key not in REQUIRED_FIELDS and key != "languages"
        }
        return cls(
            **values,
            languages=languages,
            extra=extra,
            languages_present="languages" in payload,
        )

    def to_dict(self) -> dict[str, str | None]:
        return {
            "url": self.url,
            "status": self.status,
            "length": self.length,
            "offset": self.offset,
            "filename": self.filename,
            "languages": self.languages,
        }

    def source_fields(self) -> dict[str, Any]:
        """Rebuilds the original JSON object, extras included."""
        fields = self.to_dict()
        if self.languages is None and not self.languages_present:
            del fields["languages"]
        fields.update(self.extra)
        return fields


@dataclass(frozen=True)
class CdxEntry:
    surt_url: str
    timestamp: str
    metadata: CdxMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "surt_url": self.surt_url,
            "timestamp": self.timestamp,
            "metadata": self.metadata.to_dict(),
        }


def parse_cdx_line(line: str) -> CdxEntry:
    parts = line.split(maxsplit=2)
    if len(parts) < 3:
        raise ParseError(f"expected 3 fields, got {len(parts)}", line=line)
    surt_url, timestamp, payload = parts
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid metadata JSON: {exc.msg}", line=line) from exc
    try:
        metadata = CdxMetadata.from_json(raw)
    except ParseError as exc:
        raise ParseError(exc.detail, line=line) from exc
    return CdxEntry(surt_url=surt_url, timestamp=timestamp, metadata=metadata)


def parse_cdx_lines(
    lines: Iterable[str], *, skip_invalid: bool = False
) -> Iterator[CdxEntry]:
    for line_no, line in enumerate(lines, start=1):
        try:
            yield parse_cdx_line(line)
        except ParseError as exc:
            if not skip_invalid:
                raise ParseError(exc.detail, line=line, line_no=line_no) from exc
            record_invalid_line()
            log_event("skip", line=line_no, reason=exc.detail)


def keep_language(entry: CdxEntry, code: str = "eng", *, exact: bool = False) -> bool:
    languages = entry.metadata.languages
    if languages is None:
        return False
    if exact:
        return code in {part.strip() for part in languages.split(",")}
    return code in languages


def filter_language(
    entries: Iterable[CdxEntry], code: str = "eng", *, exact: bool = False
) -> Iterator[CdxEntry]:
    for entry in entries:
        if keep_language(entry, code, exact=exact):
            record_kept()
            yield entry


def is_cdx_path(path: str, marker: str = "cdx-") -> bool:
    return marker in path
