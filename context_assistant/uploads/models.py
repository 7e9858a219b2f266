from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class FileCategory(str, Enum):
    DOCUMENT = "document"
    TEXT = "text"
    CODE = "code"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    UNKNOWN = "unknown"


class ExtractionStatus(str, Enum):
    OK = "ok"
    NO_TEXT = "no_text"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


class CatalogError(Exception):
    """Base class for catalog-level failures."""


class RecordNotFoundError(CatalogError, LookupError):
    def __init__(self, record_id: str):
        super().__init__(f"File not found: {record_id}")
        self.record_id = record_id


class BlobMissingError(CatalogError, FileNotFoundError):
    """The index references an id whose blob is gone from disk."""

    def __init__(self, record_id: str, path: str):
        super().__init__(f"File not found on filesystem: {path}")
        self.record_id = record_id
        self.path = path


class BlobStorageError(CatalogError, OSError):
    pass


class ExtractionError(RuntimeError):
    pass


class MalformedDocumentError(ExtractionError):
    pass


@dataclass
class ExtractionResult:
    """
    Outcome of a single extraction attempt. Callers that need a plain string
    use `as_text()`, which renders failures as bracketed inline diagnostics.
    """

    status: ExtractionStatus
    text: str = ""
    error: Optional[str] = None
    source_name: str = "unknown"
    label: str = "File"

    @classmethod
    def ok(cls, text: str, source_name: str, label: str = "File") -> "ExtractionResult":
        return cls(ExtractionStatus.OK, text=text, source_name=source_name, label=label)

    @classmethod
    def no_text(cls, source_name: str, label: str = "File") -> "ExtractionResult":
        return cls(ExtractionStatus.NO_TEXT, source_name=source_name, label=label)

    @classmethod
    def failed(cls, error: str, source_name: str, label: str = "File") -> "ExtractionResult":
        return cls(ExtractionStatus.FAILED, error=error, source_name=source_name, label=label)

    @classmethod
    def unsupported(cls, source_name: str) -> "ExtractionResult":
        return cls(ExtractionStatus.UNSUPPORTED, source_name=source_name)

    @property
    def succeeded(self) -> bool:
        return self.status == ExtractionStatus.OK

    def as_text(self) -> str:
        if self.status == ExtractionStatus.OK:
            return self.text
        if self.status == ExtractionStatus.NO_TEXT:
            return f"[{self.label} appears to contain no selectable text - likely scanned images: {self.source_name}]"
        if self.status == ExtractionStatus.FAILED:
            return f"[{self.label}: {self.source_name} - text extraction failed: {self.error}]"
        return ""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FileRecord:
    id: str
    name: str
    file_type: str
    size: int
    upload_date: str = field(default_factory=utc_now_iso)
    content: str = ""
    is_context_enabled: bool = True
    summary: str = ""
    conversation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        # Older index files predate `summary` and `conversation_id`; a missing
        # `upload_date` stays empty until `FileCatalog.list()` stamps and persists one.
        return cls(
            id=str(data["id"]),
            name=data["name"],
            file_type=data["file_type"],
            size=int(data["size"]),
            upload_date=data.get("upload_date") or "",
            content=data.get("content") or "",
            is_context_enabled=bool(data.get("is_context_enabled", True)),
            summary=data.get("summary") or "",
            conversation_id=data.get("conversation_id"),
        )
