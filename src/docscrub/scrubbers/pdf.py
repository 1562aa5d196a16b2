from __future__ import annotations

from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import ArrayObject, DictionaryObject, IndirectObject, NameObject

from ..errors import FileIOError, FormatError
from ..models import Strategy
from .base import Scrubber

# Removed wherever they appear: catalog, pages, image XObjects, forms.
_METADATA_KEYS = frozenset({"/Metadata", "/PieceInfo", "/LastModified"})


class PdfScrubber(Scrubber):
    """Removes the document info dictionary and every XMP metadata stream from a PDF.

    Only registered when PDF support is enabled for the run.
    """

    strategy = Strategy.PDF

    def stage(self, src: Path, staged: Path) -> None:
        try:
            reader = PdfReader(str(src))
            if reader.is_encrypted:
                raise FormatError("encrypted PDFs are not supported", path=src)

            # Strip the source objects before pages are cloned so the
            # metadata streams never reach the writer's object table.
            _deep_delete_keys(reader.trailer["/Root"], _METADATA_KEYS, set())

            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)
        except PdfReadError as e:
            raise FormatError(f"PDF parse failed: {e}", path=src) from e

        _deep_delete_keys(writer._root_object, _METADATA_KEYS, set())  # type: ignore[attr-defined]
        # Without this pypdf emits a default /Producer.
        writer._info = None  # type: ignore[attr-defined]

        try:
            with open(staged, "wb") as f:
                writer.write(f)
        except OSError as e:
            raise FileIOError(f"cannot write staged PDF: {e}", path=src) from e


def _deep_delete_keys(obj, keys: frozenset[str], seen: set[int]) -> None:
    if isinstance(obj, IndirectObject):
        obj = obj.get_object()
    if not isinstance(obj, (DictionaryObject, ArrayObject)) or id(obj) in seen:
        return
    seen.add(id(obj))

    if isinstance(obj, DictionaryObject):
        for k in [k for k in obj.keys() if k in keys]:
            del obj[NameObject(k)]
        children = list(obj.values())
    else:
        children = list(obj)

    for child in children:
        _deep_delete_keys(child, keys, seen)
