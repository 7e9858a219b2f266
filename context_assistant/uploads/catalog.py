from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

from .classifier import categorize, file_type_from_name, is_extractable
from .config import CatalogConfig
from .context import ContextAssembler, WordWindowChunker
from .extractors import extract_text, truncate_content
from .models import (
    BlobMissingError,
    ExtractionResult,
    ExtractionStatus,
    FileCategory,
    FileRecord,
    RecordNotFoundError,
    utc_now_iso,
)
from .repository import FileIndexRepository, JsonFileIndex
from .storage import LocalBlobStorage, StoragePaths

logger = logging.getLogger(__name__)

_CATEGORY_LABELS = {
    FileCategory.DOCUMENT: "Document",
    FileCategory.TEXT: "Text document",
    FileCategory.CODE: "Code file",
    FileCategory.IMAGE: "Image file",
    FileCategory.VIDEO: "Video file",
    FileCategory.AUDIO: "Audio file",
    FileCategory.ARCHIVE: "Archive file",
    FileCategory.UNKNOWN: "Unknown file type",
}


def summarize(name: str, file_type: str, size: int, content: str, snippet_chars: int = 400) -> str:
    """Cheap, non-LLM digest: header plus a whitespace-collapsed snippet."""
    snippet = " ".join(content.strip()[:snippet_chars].split())
    return f"{name} [{file_type} | {size} bytes] - {snippet}"


class FileCatalog:
    """
    Durable catalog of uploaded files.

    Blobs live in the uploads directory named by record id; the index
    repository holds every record and is authoritative. Each mutation reads
    the whole index, changes it, and writes it back. All of those cycles run
    under one re-entrant lock so this object is the single in-process writer
    of its index; separate processes sharing a storage root are not
    coordinated.

    Note that `list()` writes: records loaded without a summary or upload
    date get one synthesized and persisted before the list is returned.
    """

    def __init__(
        self,
        storage: LocalBlobStorage,
        repository: FileIndexRepository,
        config: Optional[CatalogConfig] = None,
    ):
        self.storage = storage
        self.repo = repository
        self.config = config or CatalogConfig(storage_root=storage.paths.root)
        self.assembler = ContextAssembler(
            self,
            WordWindowChunker(self.config.chunk_window, self.config.chunk_overlap),
            char_threshold=self.config.context_char_threshold,
        )
        self._lock = threading.RLock()
        self.storage.ensure_base_dirs()

    @classmethod
    def from_config(cls, config: CatalogConfig) -> "FileCatalog":
        paths = StoragePaths(Path(config.storage_root))
        return cls(LocalBlobStorage(paths), JsonFileIndex(paths.index_path), config)

    # region Upload
    def upload(self, data: bytes, filename: str) -> FileRecord:
        record_id = str(uuid.uuid4())
        file_type = file_type_from_name(filename)
        blob_path = self.storage.write_blob(record_id, data)

        result = extract_text(blob_path, file_type, name=filename)
        content = truncate_content(result.as_text(), self.config.max_content_chars)
        record = FileRecord(
            id=record_id,
            name=filename,
            file_type=file_type,
            size=len(data),
            content=content,
            summary=self._summarize(filename, file_type, len(data), content),
        )
        self._save_record(record)
        logger.info(
            "New file uploaded: name=%r type=%s size=%d id=%s status=%s",
            filename, file_type, record.size, record_id, result.status.value,
        )
        return record

    def upload_from_path(self, source_path: str, filename: str, file_type: Optional[str] = None) -> FileRecord:
        if not source_path:
            raise ValueError("File path is empty")
        if not filename:
            raise ValueError("File name is empty")
        source = Path(source_path)
        if not source.is_file():
            raise FileNotFoundError(f"File does not exist: {source_path}")

        file_type = (file_type or file_type_from_name(filename)).lower()
        record_id = str(uuid.uuid4())
        blob_path = self.storage.copy_blob(record_id, source)
        size = self.storage.blob_size(record_id)

        content, summary = self._extract_by_category(blob_path, filename, file_type, size)
        record = FileRecord(
            id=record_id,
            name=filename,
            file_type=file_type,
            size=size,
            content=content,
            summary=summary,
        )
        self._save_record(record)
        logger.info("Stored file from %s: %s (%d bytes) id=%s", source_path, filename, size, record_id)
        return record

    def _extract_by_category(self, blob_path: Path, filename: str, file_type: str, size: int) -> Tuple[str, str]:
        category = categorize(file_type)
        label = _CATEGORY_LABELS[category]
        if category == FileCategory.DOCUMENT:
            label = f"{file_type.upper()} document"

        if not is_extractable(file_type):
            return "", f"{label}: {filename} [{size} bytes] - Binary content not extractable"

        result = extract_text(blob_path, file_type, name=filename)
        header = f"{label}: {filename} [{size} bytes]"
        if result.status == ExtractionStatus.FAILED:
            return "", f"{header} - Content extraction failed: {result.error}"
        if result.status == ExtractionStatus.NO_TEXT:
            return "", f"{header} - No selectable text"
        content = truncate_content(result.text, self.config.max_content_chars)
        return content, f"{header} - Text extracted: {len(content)} chars"

    # endregion

    # region Queries
    def list(self) -> List[FileRecord]:
        with self._lock:
            records = self.repo.load_records()
            changed = False
            for record in records:
                if not record.summary.strip():
                    record.summary = self._summarize(record.name, record.file_type, record.size, record.content)
                    logger.info("Backfilled summary for id=%s name=%r", record.id, record.name)
                    changed = True
                if not record.upload_date:
                    record.upload_date = utc_now_iso()
                    logger.info("Backfilled upload date for id=%s name=%r", record.id, record.name)
                    changed = True
            if changed:
                self.repo.save_records(records)
            return records

    def get(self, record_id: str) -> FileRecord:
        for record in self.list():
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def count_by_conversation(self, conversation_id: str) -> int:
        return sum(1 for r in self.list() if r.conversation_id == conversation_id)

    # endregion

    # region Mutations
    def delete(self, record_id: str) -> None:
        with self._lock:
            records = self.list()
            index = self._position(records, record_id)
            if index is None:
                logger.warning("File with id %s not found in index", record_id)
                raise RecordNotFoundError(record_id)

            # Raises if the blob exists but cannot be removed; the index is left as is.
            self.storage.remove_blob(record_id)
            del records[index]
            self.repo.save_records(records)
            logger.info("Removed file %s from index. New count: %d", record_id, len(records))

    def delete_by_conversation(self, conversation_id: str) -> int:
        with self._lock:
            records = self.list()
            doomed = [r for r in records if r.conversation_id == conversation_id]
            self.storage.remove_blobs_best_effort(r.id for r in doomed)
            remaining = [r for r in records if r.conversation_id != conversation_id]
            self.repo.save_records(remaining)
            logger.info("Deleted %d files for conversation %s", len(doomed), conversation_id)
            return len(doomed)

    def link_enabled_to_conversation(self, conversation_id: str) -> int:
        with self._lock:
            records = self.list()
            updated = 0
            for record in records:
                if record.is_context_enabled and record.conversation_id != conversation_id:
                    record.conversation_id = conversation_id
                    updated += 1
            if updated:
                self.repo.save_records(records)
            return updated

    def toggle_context(self, record_id: str) -> FileRecord:
        with self._lock:
            records = self.list()
            index = self._position(records, record_id)
            if index is None:
                raise RecordNotFoundError(record_id)
            record = records[index]
            record.is_context_enabled = not record.is_context_enabled
            self.repo.save_records(records)
            return record

    def wipe_all(self) -> None:
        with self._lock:
            self.storage.wipe()
            self.repo.save_records([])
            logger.info("Cleared file index")

    # endregion

    # region Extraction and context
    def extract_result(self, record_id: str) -> ExtractionResult:
        return self.extract_record(self.get(record_id))

    def extract_record(self, record: FileRecord) -> ExtractionResult:
        blob_path = self.storage.paths.blob_path(record.id)
        if not self.storage.blob_exists(record.id):
            raise BlobMissingError(record.id, str(blob_path))
        return extract_text(blob_path, record.file_type, name=record.name)

    def extract_content(self, record_id: str) -> str:
        return self.extract_result(record_id).as_text()

    def get_context(self) -> List[str]:
        return self.assembler.get_context()

    def get_optimized_context(self) -> List[str]:
        return self.assembler.get_optimized_context()

    # endregion

    def _save_record(self, new_record: FileRecord) -> None:
        with self._lock:
            records = self.list()
            index = self._position(records, new_record.id)
            if index is None:
                records.append(new_record)
            else:
                records[index] = new_record
            self.repo.save_records(records)

    def _summarize(self, name: str, file_type: str, size: int, content: str) -> str:
        return summarize(name, file_type, size, content, self.config.summary_snippet_chars)

    @staticmethod
    def _position(records: List[FileRecord], record_id: str) -> Optional[int]:
        for i, record in enumerate(records):
            if record.id == record_id:
                return i
        return None
