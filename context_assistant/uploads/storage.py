from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple

from .models import BlobStorageError

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"


@dataclass
class StoragePaths:
    root: Path

    @property
    def uploads_dir(self) -> Path:
        return self.root / "uploads"

    @property
    def index_path(self) -> Path:
        return self.uploads_dir / INDEX_FILENAME

    def blob_path(self, record_id: str) -> Path:
        # Blobs carry no extension; the id is the whole file name.
        return self.uploads_dir / str(record_id)


class LocalBlobStorage:
    """
    Manages the uploads directory: one opaque blob per record, named by id.
    The index file lives in the same directory but is owned by the repository.
    """

    def __init__(self, storage_paths: StoragePaths):
        self.paths = storage_paths

    def ensure_base_dirs(self) -> None:
        self.paths.uploads_dir.mkdir(parents=True, exist_ok=True)

    def write_blob(self, record_id: str, data: bytes) -> Path:
        self.ensure_base_dirs()
        target = self.paths.blob_path(record_id)
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise BlobStorageError(f"Failed to write blob {record_id}: {exc}") from exc
        return target

    def copy_blob(self, record_id: str, source: Path) -> Path:
        self.ensure_base_dirs()
        target = self.paths.blob_path(record_id)
        try:
            shutil.copy2(source, target)
        except OSError as exc:
            raise BlobStorageError(f"Failed to copy file: {exc}") from exc
        return target

    def blob_exists(self, record_id: str) -> bool:
        return self.paths.blob_path(record_id).is_file()

    def blob_size(self, record_id: str) -> int:
        return self.paths.blob_path(record_id).stat().st_size

    def remove_blob(self, record_id: str) -> bool:
        """
        Remove a blob. Returns False when it was already gone; raises
        BlobStorageError when it exists but cannot be removed.
        """
        path = self.paths.blob_path(record_id)
        if not path.exists():
            logger.warning("Blob not found on filesystem: %s", path)
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise BlobStorageError(f"Failed to remove file from filesystem: {exc}") from exc
        return True

    def remove_blobs_best_effort(self, record_ids: Iterable[str]) -> int:
        removed = 0
        for record_id in record_ids:
            try:
                if self.remove_blob(record_id):
                    removed += 1
            except BlobStorageError as exc:
                logger.warning("Skipping blob %s: %s", record_id, exc)
        return removed

    def wipe(self) -> Tuple[int, int]:
        """
        Delete every regular file in the uploads directory except the index.
        Failures are logged and skipped. Returns (deleted, failed).
        """
        uploads_dir = self.paths.uploads_dir
        if not uploads_dir.exists():
            return 0, 0

        deleted = failed = 0
        for path in uploads_dir.iterdir():
            if not path.is_file() or path.name == INDEX_FILENAME:
                continue
            try:
                path.unlink()
                deleted += 1
                logger.debug("Deleted file: %s", path)
            except OSError as exc:
                failed += 1
                logger.warning("Failed to delete file %s: %s", path, exc)
        logger.info("Deleted %d files from %s (%d failures)", deleted, uploads_dir, failed)
        return deleted, failed
