from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, List

from .models import CatalogError

if TYPE_CHECKING:
    from .catalog import FileCatalog

logger = logging.getLogger(__name__)


class WordWindowChunker:
    """
    Sliding window over whitespace-delimited words. Consecutive chunks share
    `overlap` words so each chunk carries some of its predecessor's context.
    Requires window > overlap >= 0.
    """

    def __init__(self, window: int = 1500, overlap: int = 200):
        if overlap < 0 or window <= overlap:
            raise ValueError(f"chunk window ({window}) must exceed overlap ({overlap}) and overlap must be >= 0")
        self.window = window
        self.overlap = overlap

    def total_parts(self, word_count: int) -> int:
        return math.ceil(word_count / (self.window - self.overlap))

    def split(self, content: str) -> List[List[str]]:
        words = content.split()
        if len(words) <= self.window:
            return [words]

        windows: List[List[str]] = []
        start = 0
        while start < len(words):
            end = min(start + self.window, len(words))
            windows.append(words[start:end])
            next_start = end - self.overlap
            if end == len(words) or next_start <= start:
                break
            start = next_start
        return windows

    def chunk(self, name: str, content: str) -> List[str]:
        words = content.split()
        if len(words) <= self.window:
            return [f"Document: {name}\nContent:\n{content}"]

        total = self.total_parts(len(words))
        return [
            f"Document: {name} (Part {part}/{total})\nContent:\n{' '.join(window)}"
            for part, window in enumerate(self.split(content), start=1)
        ]


class ContextAssembler:
    """
    Turns the enabled catalog records into context blocks for the assistant.
    """

    def __init__(self, catalog: "FileCatalog", chunker: WordWindowChunker, char_threshold: int = 2000):
        self.catalog = catalog
        self.chunker = chunker
        self.char_threshold = char_threshold

    def get_context(self) -> List[str]:
        return [
            f"File: {record.name}\nContent:\n{record.content}"
            for record in self.catalog.list()
            if record.is_context_enabled
        ]

    def get_optimized_context(self) -> List[str]:
        blocks: List[str] = []
        for record in self.catalog.list():
            if not record.is_context_enabled:
                continue
            try:
                content = self.catalog.extract_record(record).as_text()
            except (CatalogError, OSError) as exc:
                logger.warning("Failed to extract content for %s: %s", record.name, exc)
                blocks.append(f"Document: {record.name} [Content extraction failed: {exc}]")
                continue

            if not content:
                continue
            if len(content) > self.char_threshold:
                blocks.extend(self.chunker.chunk(record.name, content))
            else:
                blocks.append(f"Document: {record.name}\nContent:\n{content}")
        return blocks
