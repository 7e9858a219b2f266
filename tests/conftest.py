import struct
import zipfile
from io import BytesIO

import pytest

from context_assistant.uploads import (
    CatalogConfig,
    FileCatalog,
    InMemoryFileIndex,
    LocalBlobStorage,
    StoragePaths,
)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def make_docx(paragraphs, body_part="word/document.xml", compression=zipfile.ZIP_STORED):
    body = "".join(
        f"<w:p><w:pPr><w:jc w:val=\"left\"/></w:pPr><w:r><w:t xml:space=\"preserve\">{text}</w:t></w:r></w:p>"
        for text in paragraphs
    )
    xml = f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?><w:document xmlns:w="{W_NS}"><w:body>{body}</w:body></w:document>'
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr(body_part, xml)
    return buf.getvalue()


def damage_docx_body(data, how):
    """
    Return a copy of a deflated DOCX with its body entry damaged. "deflate" overwrites the
    compressed stream with an invalid block type; "encrypt" sets the encryption
    flag in both the local and the central header.
    """
    buf = bytearray(data)
    with zipfile.ZipFile(BytesIO(data)) as archive:
        info = archive.getinfo("word/document.xml")
    start = info.header_offset
    if how == "deflate":
        name_len, extra_len = struct.unpack("<HH", buf[start + 26 : start + 30])
        data_start = start + 30 + name_len + extra_len
        buf[data_start : data_start + info.compress_size] = b"\xff" * info.compress_size
    elif how == "encrypt":
        buf[start + 6] |= 0x01
        pos = buf.find(b"PK\x01\x02")
        while pos != -1:
            (name_len,) = struct.unpack("<H", buf[pos + 28 : pos + 30])
            if bytes(buf[pos + 46 : pos + 46 + name_len]) == b"word/document.xml":
                buf[pos + 8] |= 0x01
            pos = buf.find(b"PK\x01\x02", pos + 4)
    else:
        raise ValueError(how)
    return bytes(buf)


@pytest.fixture
def catalog(tmp_path):
    return FileCatalog.from_config(CatalogConfig(storage_root=tmp_path))


@pytest.fixture
def memory_catalog(tmp_path):
    storage = LocalBlobStorage(StoragePaths(tmp_path))
    return FileCatalog(storage, InMemoryFileIndex())


@pytest.fixture
def docx_factory():
    return make_docx


@pytest.fixture
def damaged_docx():
    def build(how):
        healthy = make_docx(["never read"], compression=zipfile.ZIP_DEFLATED)
        return damage_docx_body(healthy, how)

    return build
