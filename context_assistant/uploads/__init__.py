"""
Uploads subsystem exports.
"""

from .catalog import FileCatalog, summarize
from .classifier import categorize, detect_file_type, file_type_from_name
from .config import CatalogConfig
from .context import ContextAssembler, WordWindowChunker
from .extractors import (
    DocxTextExtractor,
    PdfTextExtractor,
    PlainTextExtractor,
    TextExtractor,
    extract_text,
    extract_text_for_context,
    truncate_content,
)
from .models import (
    BlobMissingError,
    BlobStorageError,
    CatalogError,
    ExtractionError,
    ExtractionResult,
    ExtractionStatus,
    FileCategory,
    FileRecord,
    MalformedDocumentError,
    RecordNotFoundError,
)
from .repository import FileIndexRepository, InMemoryFileIndex, JsonFileIndex
from .storage import LocalBlobStorage, StoragePaths

__all__ = [
    "BlobMissingError",
    "BlobStorageError",
    "CatalogConfig",
    "CatalogError",
    "ContextAssembler",
    "DocxTextExtractor",
    "ExtractionError",
    "ExtractionResult",
    "ExtractionStatus",
    "FileCatalog",
    "FileCategory",
    "FileIndexRepository",
    "FileRecord",
    "InMemoryFileIndex",
    "JsonFileIndex",
    "LocalBlobStorage",
    "MalformedDocumentError",
    "PdfTextExtractor",
    "PlainTextExtractor",
    "RecordNotFoundError",
    "StoragePaths",
    "TextExtractor",
    "WordWindowChunker",
    "categorize",
    "detect_file_type",
    "extract_text",
    "extract_text_for_context",
    "file_type_from_name",
    "summarize",
    "truncate_content",
]
