from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CatalogConfig:
    storage_root: Path
    max_content_chars: int = 10_000
    summary_snippet_chars: int = 400
    context_char_threshold: int = 2000
    chunk_window: int = 1500
    chunk_overlap: int = 200
