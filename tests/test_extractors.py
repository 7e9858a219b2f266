import zipfile
from io import BytesIO

import pytest
from pypdf import PdfWriter

from context_assistant.uploads import (
    DocxTextExtractor,
    ExtractionStatus,
    FileCategory,
    MalformedDocumentError,
    PdfTextExtractor,
    categorize,
    detect_file_type,
    extract_text,
    extract_text_for_context,
    file_type_from_name,
    truncate_content,
)


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def test_detect_file_type_prefers_extension():
    assert detect_file_type("Report.PDF") == "pdf"
    assert detect_file_type("notes.Md") == "md"
    assert detect_file_type("archive.tar.gz") == "gz"


def test_detect_file_type_without_extension_defaults_to_bin():
    assert detect_file_type("README") == "bin"
    assert detect_file_type("some/dir/Makefile") == "bin"


def test_file_type_from_name_and_categories():
    assert file_type_from_name("script.PY") == "py"
    assert file_type_from_name("LICENSE") == "unknown"
    assert categorize("docx") == FileCategory.DOCUMENT
    assert categorize("yaml") == FileCategory.TEXT
    assert categorize("rs") == FileCategory.CODE
    assert categorize("webp") == FileCategory.IMAGE
    assert categorize("mkv") == FileCategory.VIDEO
    assert categorize("flac") == FileCategory.AUDIO
    assert categorize("7z") == FileCategory.ARCHIVE
    assert categorize("unknown") == FileCategory.UNKNOWN


def test_plain_text_passthrough_and_decode_failure():
    ok = extract_text("héllo\nworld".encode("utf-8"), "txt", name="a.txt")
    assert ok.status == ExtractionStatus.OK
    assert ok.as_text() == "héllo\nworld"

    bad = extract_text(b"\xff\xfe\x00bad", "csv", name="b.csv")
    assert bad.status == ExtractionStatus.FAILED
    assert bad.as_text().startswith("[Text: b.csv - text extraction failed: could not read file as text")


def test_unsupported_type_yields_empty_text():
    result = extract_text(b"\x89PNG", "png", name="pic.png")
    assert result.status == ExtractionStatus.UNSUPPORTED
    assert result.as_text() == ""


def test_docx_paragraphs_become_lines(docx_factory):
    text = DocxTextExtractor().extract_text(docx_factory(["Hello", "World"]))
    assert text.split("\n") == ["Hello", "World"]


def test_docx_collapses_whitespace_and_ignores_non_run_text():
    xml = (
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"><w:body>'
        "<w:p><w:r><w:instrText>PAGE</w:instrText></w:r><w:r><w:t>  first  </w:t></w:r>"
        "<w:r><w:t>half</w:t></w:r></w:p>"
        "<w:p></w:p>"
        "<w:p><w:r><w:t>second</w:t></w:r></w:p>"
        "</w:body></w:document>"
    )
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("word/document.xml", xml)
    text = DocxTextExtractor().extract_text(buf.getvalue())
    assert text == "first  half\nsecond"


def test_docx_missing_body_is_malformed(docx_factory):
    data = docx_factory(["Hello"], body_part="word/other.xml")
    with pytest.raises(MalformedDocumentError, match="word/document.xml"):
        DocxTextExtractor().extract_text(data)

    result = extract_text(data, "docx", name="broken.docx")
    assert result.status == ExtractionStatus.FAILED
    assert "broken.docx" in result.as_text()


def test_docx_not_a_zip_is_reported_as_failure():
    result = extract_text(b"plain bytes", "docx", name="fake.docx")
    assert result.status == ExtractionStatus.FAILED


@pytest.mark.parametrize("how", ["deflate", "encrypt"])
def test_docx_unreadable_body_entry_is_malformed(damaged_docx, how):
    data = damaged_docx(how)
    with pytest.raises(MalformedDocumentError, match="unreadable zip container"):
        DocxTextExtractor().extract_text(data)

    result = extract_text(data, "docx", name="damaged.docx")
    assert result.status == ExtractionStatus.FAILED


def test_docx_sax_errors_beyond_parse_errors_are_malformed(monkeypatch, docx_factory):
    import xml.sax

    def refuse(*args, **kwargs):
        raise xml.sax.SAXNotSupportedException("feature not supported")

    monkeypatch.setattr(xml.sax, "parseString", refuse)
    with pytest.raises(MalformedDocumentError, match="XML parse error"):
        DocxTextExtractor().extract_text(docx_factory(["Hello"]))


def test_pdf_without_text_does_not_fall_back(monkeypatch):
    extractor = PdfTextExtractor()
    fallback_calls = []
    monkeypatch.setattr(extractor, "_extract_from_path", lambda path: fallback_calls.append(path) or "text")

    result = extractor.extract(_blank_pdf(), name="scan.pdf")

    assert result.status == ExtractionStatus.NO_TEXT
    assert fallback_calls == []
    assert "no selectable text" in result.as_text()
    assert "scan.pdf" in result.as_text()


def test_pdf_falls_back_to_path_on_error(monkeypatch, tmp_path):
    extractor = PdfTextExtractor()
    pdf_path = tmp_path / "doc.pdf"
    pdf_path.write_bytes(b"%PDF-1.4 broken")

    def boom(data):
        raise ValueError("bad xref")

    monkeypatch.setattr(extractor, "_extract_from_memory", boom)
    monkeypatch.setattr(extractor, "_extract_from_path", lambda path: "recovered text")

    result = extractor.extract(pdf_path)
    assert result.status == ExtractionStatus.OK
    assert result.text == "recovered text"


def test_pdf_fallback_empty_is_no_text(monkeypatch):
    extractor = PdfTextExtractor()

    def boom(data):
        raise ValueError("bad xref")

    monkeypatch.setattr(extractor, "_extract_from_memory", boom)
    monkeypatch.setattr(extractor, "_extract_from_path", lambda path: "  \n ")

    result = extractor.extract(b"%PDF-1.4", name="x.pdf")
    assert result.status == ExtractionStatus.NO_TEXT


def test_pdf_both_strategies_failing_is_distinct_from_no_text(monkeypatch):
    extractor = PdfTextExtractor()

    def broken(path):
        raise RuntimeError("cannot open broken document")

    monkeypatch.setattr(extractor, "_extract_from_path", broken)
    result = extractor.extract(b"definitely not a pdf", name="junk.pdf")
    assert result.status == ExtractionStatus.FAILED
    assert result.error
    assert result.as_text().startswith("[PDF: junk.pdf - text extraction failed:")


def test_pdf_with_text_layer():
    fitz = pytest.importorskip("fitz")
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Hello from page one")
    data = doc.tobytes()
    doc.close()

    result = PdfTextExtractor().extract(data, name="hello.pdf")
    assert result.status == ExtractionStatus.OK
    assert "Hello from page one" in result.text


def test_truncate_content_marks_total_length():
    assert truncate_content("short", limit=10) == "short"
    text = "x" * 25
    assert truncate_content(text, limit=10) == "x" * 10 + "... [Truncated - 25 characters total]"


def test_extract_text_for_context_wraps_with_name(tmp_path):
    note = tmp_path / "note.md"
    note.write_text("# Title", encoding="utf-8")
    assert extract_text_for_context(note) == "File: note.md\nContent:\n# Title"

    blob = tmp_path / "photo.heic"
    blob.write_bytes(b"\x00\x01")
    assert "no text extractor implemented for *.heic" in extract_text_for_context(blob)
