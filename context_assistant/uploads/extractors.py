from __future__ import annotations

import logging
import os
import tempfile
import xml.sax
import zipfile
import zlib
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.sax.handler import ContentHandler

from pypdf import PdfReader

from .classifier import PLAIN_TEXT_TYPES, detect_file_type, display_name
from .models import ExtractionResult, ExtractionStatus, MalformedDocumentError

logger = logging.getLogger(__name__)

Source = Union[bytes, Path]

DEFAULT_MAX_CONTENT_CHARS = 10_000
DOCX_BODY_PART = "word/document.xml"
_CONTAINER_ERRORS = (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError)


def _read_bytes(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    return Path(source).read_bytes()


def _source_name(source: Source, name: Optional[str]) -> str:
    if name:
        return name
    if isinstance(source, (bytes, bytearray)):
        return "unknown"
    return display_name(Path(source))


def truncate_content(text: str, limit: int = DEFAULT_MAX_CONTENT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [Truncated - {len(text)} characters total]"


class TextExtractor:
    """
    Abstract extractor. Implementations are stateless and never raise for
    content problems; they report them through the returned result.
    """

    label = "File"

    def extract(self, source: Source, name: Optional[str] = None) -> ExtractionResult:
        raise NotImplementedError


class PlainTextExtractor(TextExtractor):
    label = "Text"

    def extract(self, source: Source, name: Optional[str] = None) -> ExtractionResult:
        source_name = _source_name(source, name)
        try:
            text = _read_bytes(source).decode("utf-8")
        except (UnicodeDecodeError, OSError) as exc:
            logger.warning("Could not read %s as text: %s", source_name, exc)
            return ExtractionResult.failed(
                f"could not read file as text: {exc}", source_name=source_name, label=self.label
            )
        return ExtractionResult.ok(text, source_name=source_name, label=self.label)


class PdfTextExtractor(TextExtractor):
    """
    Two-phase PDF extractor.

    Phase 1 reads from an in-memory buffer with pypdf. Whitespace-only output
    is trusted: the document has no selectable text and nothing else is tried.
    Only when phase 1 raises do we fall back to PyMuPDF reading from a path.
    """

    label = "PDF"

    def extract(self, source: Source, name: Optional[str] = None) -> ExtractionResult:
        source_name = _source_name(source, name)
        try:
            data = _read_bytes(source)
        except OSError as exc:
            return ExtractionResult.failed(str(exc), source_name=source_name, label=self.label)
        logger.debug("Extracting PDF %s (%d bytes)", source_name, len(data))

        try:
            text = self._extract_from_memory(data)
        except Exception as exc:  # noqa: BLE001
            logger.warning("In-memory PDF extraction failed for %s: %s; trying path-based", source_name, exc)
        else:
            if not text.strip():
                logger.info("PDF %s appears to have no selectable text", source_name)
                return ExtractionResult.no_text(source_name=source_name, label=self.label)
            logger.debug("Extracted %d chars from %s", len(text), source_name)
            return ExtractionResult.ok(text, source_name=source_name, label=self.label)

        try:
            if isinstance(source, (bytes, bytearray)):
                text = self._extract_from_spilled_bytes(data)
            else:
                text = self._extract_from_path(Path(source))
        except Exception as exc:  # noqa: BLE001
            logger.error("Both PDF extraction strategies failed for %s: %s", source_name, exc)
            return ExtractionResult.failed(str(exc), source_name=source_name, label=self.label)

        if not text.strip():
            return ExtractionResult.no_text(source_name=source_name, label=self.label)
        logger.debug("Path-based extraction succeeded for %s: %d chars", source_name, len(text))
        return ExtractionResult.ok(text, source_name=source_name, label=self.label)

    def _extract_from_memory(self, data: bytes) -> str:
        reader = PdfReader(BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _extract_from_path(self, pdf_path: Path) -> str:
        try:
            import fitz  # PyMuPDF
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError("PyMuPDF is required for path-based PDF extraction. Please install 'pymupdf'.") from exc

        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found for extraction: {pdf_path}")

        # Catalog blobs carry no extension, so the format cannot be guessed from the name.
        doc = fitz.open(pdf_path, filetype="pdf")
        try:
            return "\n".join(page.get_text() for page in doc)
        finally:
            doc.close()

    def _extract_from_spilled_bytes(self, data: bytes) -> str:
        tmp_fd, tmp_path_str = tempfile.mkstemp(suffix=".pdf")
        tmp_path = Path(tmp_path_str)
        with os.fdopen(tmp_fd, "wb") as tmp_file:
            tmp_file.write(data)
        try:
            return self._extract_from_path(tmp_path)
        finally:
            tmp_path.unlink(missing_ok=True)


class _RunWalker(ContentHandler):
    """
    Collects the text of `w:t` runs. Paragraph starts become newlines; text
    outside a run (instructions, field codes, whitespace) is ignored.
    """

    def __init__(self):
        super().__init__()
        self.in_text_run = False
        self.parts: List[str] = []

    @staticmethod
    def _local(name: str) -> str:
        return name.rsplit(":", 1)[-1]

    def startElement(self, name, attrs):
        local = self._local(name)
        if local == "t":
            self.in_text_run = True
        elif local == "p":
            self.parts.append("\n")

    def endElement(self, name):
        if self._local(name) == "t":
            self.in_text_run = False

    def characters(self, content):
        if self.in_text_run:
            self.parts.append(content)


class DocxTextExtractor(TextExtractor):
    label = "DOCX"

    def extract(self, source: Source, name: Optional[str] = None) -> ExtractionResult:
        source_name = _source_name(source, name)
        try:
            text = self.extract_text(_read_bytes(source))
        except (MalformedDocumentError, OSError) as exc:
            logger.warning("DOCX extraction failed for %s: %s", source_name, exc)
            return ExtractionResult.failed(str(exc), source_name=source_name, label=self.label)
        return ExtractionResult.ok(text, source_name=source_name, label=self.label)

    def extract_text(self, data: bytes) -> str:
        """
        Raises MalformedDocumentError for anything wrong with the container or
        its body part, including entries that fail to decompress.
        """
        try:
            with zipfile.ZipFile(BytesIO(data)) as archive:
                try:
                    xml_bytes = archive.read(DOCX_BODY_PART)
                except KeyError as exc:
                    raise MalformedDocumentError(f"DOCX missing {DOCX_BODY_PART}") from exc
        except _CONTAINER_ERRORS as exc:
            # zlib.error: damaged deflate stream; RuntimeError: encrypted entry.
            raise MalformedDocumentError(f"unreadable zip container: {exc}") from exc

        walker = _RunWalker()
        try:
            xml.sax.parseString(xml_bytes, walker)
        except xml.sax.SAXException as exc:
            raise MalformedDocumentError(f"XML parse error: {exc}") from exc

        lines = (line.strip() for line in "".join(walker.parts).splitlines())
        return "\n".join(line for line in lines if line)


_PLAIN_TEXT = PlainTextExtractor()
_EXTRACTORS: Dict[str, TextExtractor] = {"pdf": PdfTextExtractor(), "docx": DocxTextExtractor()}


def get_extractor(file_type: str) -> Optional[TextExtractor]:
    file_type = (file_type or "").lower()
    if file_type in PLAIN_TEXT_TYPES:
        return _PLAIN_TEXT
    return _EXTRACTORS.get(file_type)


def extract_text(source: Source, file_type: str, name: Optional[str] = None) -> ExtractionResult:
    extractor = get_extractor(file_type)
    if extractor is None:
        return ExtractionResult.unsupported(_source_name(source, name))
    return extractor.extract(source, name=name)


def extract_text_for_context(path: Path) -> str:
    """
    Give it a path and it yields display-ready text, wrapped with the file
    name. Types without an extractor get a note instead of empty content.
    """
    path = Path(path)
    name = display_name(path)
    file_type = detect_file_type(path)
    result = extract_text(path, file_type, name=name)
    if result.status == ExtractionStatus.UNSUPPORTED:
        text = f"[{name} - no text extractor implemented for *.{file_type} yet]"
    else:
        text = result.as_text()
    return f"File: {name}\nContent:\n{text}"
