from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import List

from context_assistant.uploads import CatalogConfig, FileCatalog

logger = logging.getLogger(__name__)

ROOT_MARKERS = ("uploads", "sidecar", "pyproject.toml")


def _candidate_roots() -> List[Path]:
    candidates: List[Path] = []
    override = os.getenv("FILE_STORAGE_ROOT")
    if override:
        candidates.append(Path(override))
    # Repository root when running from a checkout.
    candidates.append(Path(__file__).resolve().parent.parent)
    cwd = Path.cwd()
    candidates.extend([cwd, cwd.parent, cwd.parent.parent])
    # Packaged installs: walk up from the interpreter.
    exe_dir = Path(sys.executable).resolve().parent
    candidates.extend([exe_dir, *list(exe_dir.parents)[:4]])
    return candidates


def resolve_project_root() -> Path:
    """
    Pick the first candidate directory that already holds an uploads dir or a
    project marker. Falls back to the current directory.
    """
    for base in _candidate_roots():
        if any((base / marker).exists() for marker in ROOT_MARKERS):
            logger.info("Using storage root %s", base)
            return base
    return Path(".")


@lru_cache(maxsize=1)
def get_config() -> CatalogConfig:
    return CatalogConfig(
        storage_root=resolve_project_root(),
        max_content_chars=int(os.getenv("MAX_CONTENT_CHARS", "10000")),
        context_char_threshold=int(os.getenv("CONTEXT_CHAR_THRESHOLD", "2000")),
        chunk_window=int(os.getenv("CHUNK_WINDOW_WORDS", "1500")),
        chunk_overlap=int(os.getenv("CHUNK_OVERLAP_WORDS", "200")),
    )


@lru_cache(maxsize=1)
def get_catalog() -> FileCatalog:
    return FileCatalog.from_config(get_config())
