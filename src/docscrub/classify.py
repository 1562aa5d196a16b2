from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Iterable

from .errors import UnsupportedError
from .models import Strategy

EXTENSIONS: dict[str, Strategy] = {
    "docx": Strategy.OPENXML,
    "xlsx": Strategy.OPENXML,
    "pptx": Strategy.OPENXML,
    "odt": Strategy.OPENDOCUMENT,
    "ods": Strategy.OPENDOCUMENT,
    "odp": Strategy.OPENDOCUMENT,
    "jpg": Strategy.IMAGE,
    "jpeg": Strategy.IMAGE,
    "png": Strategy.IMAGE,
    "pdf": Strategy.PDF,
}


def normalize_ext(ext: str) -> str:
    return ext.strip().lower().lstrip(".")


def parse_ext_set(values: str | Iterable[str] | None) -> frozenset[str]:
    """Build an extension set from ``"docx, .XLSX"`` or an iterable of such strings."""

    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    exts: set[str] = set()
    for chunk in values:
        for part in chunk.split(","):
            ext = normalize_ext(part)
            if ext:
                exts.add(ext)
    return frozenset(exts)


def classify(
    path: Path,
    include: AbstractSet[str] = frozenset(),
    exclude: AbstractSet[str] = frozenset(),
) -> Strategy | None:
    """Pick the scrub strategy for ``path``; None for files a directory walk skips."""

    strategy, _reason = _resolve(path, include, exclude)
    return strategy


def classify_explicit(
    path: Path,
    include: AbstractSet[str] = frozenset(),
    exclude: AbstractSet[str] = frozenset(),
) -> Strategy:
    """Like classify, for a file the user named directly: skips raise UnsupportedError."""

    strategy, reason = _resolve(path, include, exclude)
    if strategy is None:
        raise UnsupportedError(reason, path=path)
    return strategy


def _resolve(
    path: Path,
    include: AbstractSet[str],
    exclude: AbstractSet[str],
) -> tuple[Strategy | None, str]:
    ext = normalize_ext(path.suffix)

    if include and ext not in include:
        return None, f"extension {ext!r} is not in the include list"
    if ext in exclude:
        return None, f"extension {ext!r} is in the exclude list"

    strategy = EXTENSIONS.get(ext)
    if strategy is None:
        return None, f"unsupported file type {ext!r}"
    return strategy, ""
