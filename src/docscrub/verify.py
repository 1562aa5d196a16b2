"""Read-only inspection of metadata left in supported files."""

from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from defusedxml import ElementTree as DefusedET
from PIL import ExifTags, Image
from pypdf import PdfReader

from .classify import classify
from .core import discover
from .models import Strategy
from .scrubbers.containers import keep_opendocument_entry, keep_openxml_entry

_PDF_PAGE_KEYS = ("/Metadata", "/PieceInfo")


class VerifyStatus(str, Enum):
    CLEAN = "clean"
    METADATA_FOUND = "metadata_found"
    UNSUPPORTED = "unsupported"
    ERROR = "error"


@dataclass(frozen=True)
class VerifyResult:
    path: Path
    status: VerifyStatus
    kind: Strategy | None = None
    details: dict[str, Any] = field(default_factory=dict)
    message: str | None = None


def verify_paths(paths: Iterable[Path]) -> list[VerifyResult]:
    results: list[VerifyResult] = []
    for root in paths:
        if root.is_file():
            results.append(verify_file(root))
            continue
        for job in discover(root):
            results.append(verify_file(job.path))
    return results


def verify_file(path: Path) -> VerifyResult:
    strategy = classify(path)
    try:
        if strategy == Strategy.OPENXML:
            return _verify_container(path, strategy, keep_openxml_entry)
        if strategy == Strategy.OPENDOCUMENT:
            return _verify_container(path, strategy, keep_opendocument_entry)
        if strategy == Strategy.IMAGE:
            return _verify_image(path)
        if strategy == Strategy.PDF:
            return _verify_pdf(path)
        return VerifyResult(path=path, status=VerifyStatus.UNSUPPORTED)

    except Exception as e:  # noqa: BLE001
        return VerifyResult(path=path, status=VerifyStatus.ERROR, kind=strategy, message=str(e))


def _verify_container(path: Path, strategy: Strategy, keep) -> VerifyResult:
    with zipfile.ZipFile(path, "r") as z:
        leftover = [name for name in z.namelist() if not keep(name)]

        fields: dict[str, list[str]] = {}
        for name in leftover:
            if name.lower().endswith(".xml"):
                fields[name] = _xml_fields(z.read(name))

    status = VerifyStatus.METADATA_FOUND if leftover else VerifyStatus.CLEAN
    details = {"metadata_entries": leftover, "fields": fields}
    return VerifyResult(path=path, kind=strategy, status=status, details=details)


def _xml_fields(raw: bytes) -> list[str]:
    try:
        root = DefusedET.fromstring(raw)
    except Exception:  # noqa: BLE001
        return ["<unreadable>"]

    found: set[str] = set()
    for el in root.iter():
        if (el.text or "").strip() == "":
            continue
        # Element tags are namespaced: {ns}local
        found.add(el.tag.split("}", 1)[-1])
    return sorted(found)


def _verify_image(path: Path) -> VerifyResult:
    with Image.open(path) as img:
        exif_tags = sorted(ExifTags.TAGS.get(tag_id, str(tag_id)) for tag_id in img.getexif())
        info_keys = sorted(img.info.keys())

    interesting = [
        k
        for k in info_keys
        if k.lower() in {"exif", "xmp", "icc_profile", "comment", "xml", "author", "description"}
        or k.lower().startswith("text")
    ]
    found = bool(exif_tags) or bool(interesting)
    status = VerifyStatus.METADATA_FOUND if found else VerifyStatus.CLEAN
    details = {"exif_tags": exif_tags, "info_keys": info_keys, "interesting_info_keys": interesting}
    return VerifyResult(path=path, kind=Strategy.IMAGE, status=status, details=details)


def _verify_pdf(path: Path) -> VerifyResult:
    r = PdfReader(str(path))
    md_keys = sorted((r.metadata or {}).keys())
    root = r.trailer["/Root"]
    has_xmp = "/Metadata" in root

    # Pages carry their own XMP streams and application data.
    page_metadata = [
        i
        for i, page in enumerate(r.pages, start=1)
        if any(key in page for key in _PDF_PAGE_KEYS)
    ]

    found = bool(md_keys) or has_xmp or bool(page_metadata)
    status = VerifyStatus.METADATA_FOUND if found else VerifyStatus.CLEAN
    details = {"metadata_keys": md_keys, "has_xmp": has_xmp, "pages_with_metadata": page_metadata}
    return VerifyResult(path=path, kind=Strategy.PDF, status=status, details=details)
