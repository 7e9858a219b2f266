from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import List

from .models import FileRecord

logger = logging.getLogger(__name__)


class FileIndexRepository:
    """
    Abstract persistence boundary for the file index. The index is always
    read and written whole; there is no per-record update.
    """

    def load_records(self) -> List[FileRecord]:
        raise NotImplementedError

    def save_records(self, records: List[FileRecord]) -> None:
        raise NotImplementedError


class InMemoryFileIndex(FileIndexRepository):
    """
    Simple in-memory index for tests. Keeps copies so callers mutating the
    returned records do not change the stored state.
    """

    def __init__(self):
        self.records: List[FileRecord] = []

    def load_records(self) -> List[FileRecord]:
        return deepcopy(self.records)

    def save_records(self, records: List[FileRecord]) -> None:
        self.records = deepcopy(list(records))


class JsonFileIndex(FileIndexRepository):
    """
    Pretty-printed JSON array on disk. A missing file reads as an empty index.
    Writes go to a sibling temp file that replaces the index atomically.
    """

    def __init__(self, index_path: Path):
        self.index_path = Path(index_path)

    def load_records(self) -> List[FileRecord]:
        if not self.index_path.exists():
            return []
        with self.index_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"Index at {self.index_path} is not a JSON array")
        return [FileRecord.from_dict(item) for item in raw]

    def save_records(self, records: List[FileRecord]) -> None:
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.index_path.with_name(self.index_path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in records], f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.index_path)
        logger.debug("Wrote %d records to %s", len(records), self.index_path)
