from __future__ import annotations

import mimetypes
from pathlib import Path, PurePath
from typing import Union

from .models import FileCategory

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

DOCUMENT_TYPES = frozenset({"pdf", "docx"})
TEXT_TYPES = frozenset({"txt", "md", "json", "csv", "xml", "yaml", "yml", "log", "rtf"})
CODE_TYPES = frozenset(
    {
        "py", "js", "ts", "jsx", "tsx", "java", "cpp", "c", "cc", "cxx", "h", "hpp",
        "go", "rs", "php", "rb", "swift", "kt", "scala", "html", "htm", "css", "scss",
        "sass", "less", "sql", "sh", "bash", "zsh", "fish", "ps1", "bat", "cmd",
    }
)
IMAGE_TYPES = frozenset({"png", "jpg", "jpeg", "gif", "bmp", "svg", "webp"})
VIDEO_TYPES = frozenset({"mp4", "avi", "mov", "wmv", "flv", "webm", "mkv"})
AUDIO_TYPES = frozenset({"mp3", "wav", "flac", "aac", "ogg"})
ARCHIVE_TYPES = frozenset({"zip", "rar", "7z", "tar", "gz"})

# Everything decoded verbatim as UTF-8.
PLAIN_TEXT_TYPES = TEXT_TYPES | CODE_TYPES

PathLike = Union[str, PurePath]


def _extension(path: PathLike) -> str:
    suffix = PurePath(str(path)).suffix
    return suffix[1:].lower() if suffix else ""


def detect_file_type(path: PathLike) -> str:
    """
    Map a path or file name to a type tag. The extension wins when present;
    otherwise a MIME guess decides between pdf, docx, txt and bin.
    """
    ext = _extension(path)
    if ext:
        return ext

    mime, _ = mimetypes.guess_type(str(path), strict=False)
    if mime == "application/pdf":
        return "pdf"
    if mime == DOCX_MIME:
        return "docx"
    if mime and mime.startswith("text/"):
        return "txt"
    return "bin"


def file_type_from_name(filename: str) -> str:
    return _extension(filename) or "unknown"


def categorize(file_type: str) -> FileCategory:
    file_type = (file_type or "").lower()
    if file_type in DOCUMENT_TYPES:
        return FileCategory.DOCUMENT
    if file_type in TEXT_TYPES:
        return FileCategory.TEXT
    if file_type in CODE_TYPES:
        return FileCategory.CODE
    if file_type in IMAGE_TYPES:
        return FileCategory.IMAGE
    if file_type in VIDEO_TYPES:
        return FileCategory.VIDEO
    if file_type in AUDIO_TYPES:
        return FileCategory.AUDIO
    if file_type in ARCHIVE_TYPES:
        return FileCategory.ARCHIVE
    return FileCategory.UNKNOWN


def is_extractable(file_type: str) -> bool:
    return categorize(file_type) in (FileCategory.DOCUMENT, FileCategory.TEXT, FileCategory.CODE)


def display_name(path: Path) -> str:
    return path.name or "unknown"
