import pytest

from context_assistant.uploads import WordWindowChunker


def _words(n):
    return [f"w{i}" for i in range(n)]


@pytest.mark.parametrize("count", [1501, 2000, 2800, 3900, 5555])
def test_chunk_windows_cover_text_with_fixed_overlap(count):
    chunker = WordWindowChunker()
    words = _words(count)
    windows = chunker.split(" ".join(words))

    assert all(len(w) == 1500 for w in windows[:-1])
    for prev, nxt in zip(windows, windows[1:]):
        assert prev[-200:] == nxt[:200]

    rebuilt = list(windows[0])
    for window in windows[1:]:
        rebuilt.extend(window[200:])
    assert rebuilt == words


def test_small_word_count_is_a_single_titled_chunk():
    content = "alpha  beta\ngamma"
    assert WordWindowChunker().chunk("notes.txt", content) == ["Document: notes.txt\nContent:\nalpha  beta\ngamma"]


def test_chunk_titles_carry_part_numbers():
    chunks = WordWindowChunker().chunk("big.txt", " ".join(_words(3900)))
    assert len(chunks) == 3
    assert chunks[0].startswith("Document: big.txt (Part 1/3)\nContent:\nw0 w1 ")
    assert chunks[2].startswith("Document: big.txt (Part 3/3)\nContent:\nw2600 ")
    assert chunks[2].endswith("w3899")


def test_chunker_rejects_overlap_not_below_window():
    with pytest.raises(ValueError):
        WordWindowChunker(window=100, overlap=100)
    with pytest.raises(ValueError):
        WordWindowChunker(window=100, overlap=-1)


def test_get_context_uses_stored_content_of_enabled_files(catalog):
    a = catalog.upload(b"first", "a.txt")
    b = catalog.upload(b"second", "b.txt")
    catalog.toggle_context(b.id)

    assert catalog.get_context() == ["File: a.txt\nContent:\nfirst"]
    assert a.id != b.id


def test_optimized_context_passes_small_documents_through(catalog):
    text = ("word " * 399).strip()
    assert len(text) <= 2000
    catalog.upload(text.encode(), "small.txt")

    assert catalog.get_optimized_context() == [f"Document: small.txt\nContent:\n{text}"]


def test_optimized_context_chunks_large_documents_from_blob(catalog):
    words = _words(3000)
    record = catalog.upload(" ".join(words).encode(), "large.md")
    assert "Truncated" in record.content

    blocks = catalog.get_optimized_context()

    assert len(blocks) == 3
    assert blocks[0].startswith("Document: large.md (Part 1/3)")
    assert blocks[-1].endswith("w2999")


def test_optimized_context_skips_empty_and_reports_failures(catalog):
    catalog.upload(b"\x00\x01", "blob.bin")
    broken = catalog.upload(b"gone soon", "gone.txt")
    catalog.upload(b"still here", "ok.txt")
    catalog.storage.paths.blob_path(broken.id).unlink()

    blocks = catalog.get_optimized_context()

    assert len(blocks) == 2
    assert blocks[0].startswith("Document: gone.txt [Content extraction failed: File not found on filesystem:")
    assert blocks[1] == "Document: ok.txt\nContent:\nstill here"


@pytest.mark.parametrize("how", ["deflate", "encrypt"])
def test_optimized_context_survives_damaged_docx(catalog, damaged_docx, how):
    catalog.upload(damaged_docx(how), "x.docx")
    catalog.upload(b"still here", "ok.txt")

    blocks = catalog.get_optimized_context()

    assert len(blocks) == 2
    assert blocks[0].startswith("Document: x.docx\nContent:\n[DOCX: x.docx - text extraction failed:")
    assert blocks[1] == "Document: ok.txt\nContent:\nstill here"
