from __future__ import annotations

import contextlib
import os
import shutil
import stat
import time
from pathlib import Path

STAGED_SUFFIX = ".tmp"
BACKUP_SUFFIX = ".bak"

_COPY_CHUNK = 1024 * 1024


def staged_path_for(path: Path) -> Path:
    """Staging location for the cleaned copy of ``path``, in the same directory."""

    return path.with_name(path.name + STAGED_SUFFIX)


def backup_path_for(path: Path, *, now: float | None = None) -> Path:
    """Return ``<path>.bak``, or ``<path>.<unix-ts>.bak`` if the former exists."""

    bak = path.with_name(path.name + BACKUP_SUFFIX)
    if not bak.exists():
        return bak
    ts = int(time.time() if now is None else now)
    return path.with_name(f"{path.name}.{ts}{BACKUP_SUFFIX}")


def write_bytes_durably(dst: Path, data: bytes) -> None:
    with open(dst, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def copy_bytes(src: Path, dst: Path, *, exclusive: bool = False) -> None:
    """Copy file content and fsync ``dst`` before returning.

    With ``exclusive`` the copy refuses to touch an existing ``dst``
    (raises FileExistsError).
    """

    mode = "xb" if exclusive else "wb"
    with open(src, "rb") as fin, open(dst, mode) as fout:
        shutil.copyfileobj(fin, fout, _COPY_CHUNK)
        fout.flush()
        os.fsync(fout.fileno())


def preserve_mode(src: Path, dst: Path) -> None:
    os.chmod(dst, stat.S_IMODE(src.stat().st_mode))


def discard(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink()
