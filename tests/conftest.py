from __future__ import annotations

import zipfile

import pytest

DOCX_ENTRIES = {
    "[Content_Types].xml": b'<?xml version="1.0" encoding="UTF-8"?><Types/>',
    "_rels/.rels": b'<?xml version="1.0" encoding="UTF-8"?><Relationships/>',
    "docProps/core.xml": b"<cp:coreProperties><dc:creator>Alice</dc:creator></cp:coreProperties>",
    "docProps/app.xml": b"<Properties><Application>Word</Application></Properties>",
    "word/document.xml": b"<w:document><w:body>hello</w:body></w:document>",
}

ODT_ENTRIES = {
    "mimetype": b"application/vnd.oasis.opendocument.text",
    "META-INF/manifest.xml": b"<manifest:manifest/>",
    "meta.xml": b"<office:document-meta><meta:initial-creator>Bob</meta:initial-creator></office:document-meta>",
    "content.xml": b"<office:document-content>hi</office:document-content>",
    "styles.xml": b"<office:document-styles/>",
}


def write_zip(path, entries, *, compression=zipfile.ZIP_DEFLATED):
    with zipfile.ZipFile(path, "w", compression=compression) as z:
        for name, data in entries.items():
            z.writestr(name, data)
    return path


@pytest.fixture
def make_zip():
    return write_zip


@pytest.fixture
def docx_entries():
    return dict(DOCX_ENTRIES)


@pytest.fixture
def odt_entries():
    return dict(ODT_ENTRIES)
