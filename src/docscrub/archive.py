"""Entry-filtering rewrite of zip-structured containers.

Kept entries are copied under their original name with the same compression
method, mode bits and timestamp, in the source's directory order. Dropped
entries are omitted entirely. Nothing is recompressed with a different method
and entry content is copied byte for byte.
"""

from __future__ import annotations

import io
import logging
import lzma
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Callable

from .errors import FileIOError, FormatError
from .utils import discard, write_bytes_durably

logger = logging.getLogger(__name__)

EntryDecision = Callable[[str], bool]

# Errors zipfile and its codecs raise for damaged, encrypted or exotic entries.
_ENTRY_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    lzma.LZMAError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    ValueError,
    OSError,
)


def rewrite_archive(source: bytes, keep: EntryDecision) -> bytes:
    """Return a new archive holding only the entries of ``source`` that ``keep`` accepts."""

    try:
        zin = zipfile.ZipFile(io.BytesIO(source), "r")
    except (zipfile.BadZipFile, OSError, ValueError) as e:
        raise FormatError(f"not a valid zip archive: {e}") from e

    buf = io.BytesIO()
    dropped = 0
    with zin:
        with zipfile.ZipFile(buf, "w") as zout:
            zout.comment = zin.comment
            for info in zin.infolist():
                if not keep(info.filename):
                    dropped += 1
                    continue
                try:
                    _copy_entry(zin, zout, info)
                except _ENTRY_ERRORS as e:
                    raise FormatError(f"cannot copy entry {info.filename!r}: {e}") from e

    logger.debug("Rewrote archive: dropped %d entries", dropped)
    return buf.getvalue()


def rewrite_archive_file(src: Path, staged: Path, keep: EntryDecision) -> None:
    """Rewrite ``src`` into ``staged``; ``staged`` does not survive a failure."""

    try:
        source = src.read_bytes()
    except OSError as e:
        raise FileIOError(f"cannot read archive: {e}", path=src) from e

    try:
        data = rewrite_archive(source, keep)
    except FormatError as e:
        e.path = src
        raise

    try:
        write_bytes_durably(staged, data)
    except OSError as e:
        discard(staged)
        raise FileIOError(f"cannot write staged archive {staged}: {e}", path=src) from e


def _copy_entry(zin: zipfile.ZipFile, zout: zipfile.ZipFile, info: zipfile.ZipInfo) -> None:
    zi = zipfile.ZipInfo(filename=info.filename, date_time=info.date_time)
    zi.compress_type = info.compress_type
    zi.external_attr = info.external_attr
    zi.create_system = info.create_system
    zi.comment = info.comment

    if info.is_dir():
        zout.writestr(zi, b"")
        return

    force_zip64 = info.file_size >= zipfile.ZIP64_LIMIT
    with zin.open(info, "r") as src, zout.open(zi, "w", force_zip64=force_zip64) as dst:
        shutil.copyfileobj(src, dst)
