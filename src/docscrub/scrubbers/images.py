from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import FileIOError, FormatError
from ..models import Strategy
from ..utils import write_bytes_durably
from .base import Scrubber


class ImageScrubber(Scrubber):
    """Decode then re-encode; only pixel data survives the round trip."""

    strategy = Strategy.IMAGE

    def stage(self, src: Path, staged: Path) -> None:
        ext = src.suffix.lower()

        try:
            img = Image.open(src)
        except UnidentifiedImageError as e:
            raise FormatError(f"image decode failed: {e}", path=src) from e
        except OSError as e:
            raise FileIOError(f"cannot read image: {e}", path=src) from e

        with img:
            try:
                # If we remove EXIF, we should also bake in its orientation.
                clean = ImageOps.exif_transpose(img)
                clean = clean.copy()
            except (OSError, SyntaxError, ValueError) as e:
                raise FormatError(f"image decode failed: {e}", path=src) from e

        clean.info = {}

        save_kwargs: dict[str, object] = {}
        if ext in {".jpg", ".jpeg"}:
            if clean.mode not in {"RGB", "L", "CMYK"}:
                clean = clean.convert("RGB")
            save_kwargs.update({"format": "JPEG", "quality": 95})
        elif ext == ".png":
            save_kwargs.update({"format": "PNG", "optimize": True})
        else:
            raise FormatError(f"unknown image type {ext!r}", path=src)

        # Encode in memory: encoder rejections are format problems, the
        # staged write is the only real I/O.
        buf = io.BytesIO()
        try:
            clean.save(buf, **save_kwargs)
        except (OSError, KeyError, ValueError) as e:
            raise FormatError(f"image encode failed: {e}", path=src) from e

        try:
            write_bytes_durably(staged, buf.getvalue())
        except OSError as e:
            raise FileIOError(f"cannot write staged image: {e}", path=src) from e
