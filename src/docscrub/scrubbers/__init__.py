from __future__ import annotations

from ..errors import UnsupportedError
from ..models import Strategy
from .base import Scrubber
from .containers import ContainerScrubber
from .images import ImageScrubber
from .pdf import PdfScrubber


class ScrubberRegistry:
    """Strategy -> scrubber lookup, built once per run."""

    def __init__(self, scrubbers: list[Scrubber]) -> None:
        self._by_strategy = {s.strategy: s for s in scrubbers}

    def __contains__(self, strategy: Strategy) -> bool:
        return strategy in self._by_strategy

    def get(self, strategy: Strategy) -> Scrubber:
        try:
            return self._by_strategy[strategy]
        except KeyError:
            if strategy == Strategy.PDF:
                raise UnsupportedError("PDF support is not enabled (rerun with --with-pdf)") from None
            raise UnsupportedError(f"no scrubber registered for {strategy.value}") from None


def default_scrubbers(*, with_pdf: bool = False) -> ScrubberRegistry:
    scrubbers: list[Scrubber] = [
        ContainerScrubber(Strategy.OPENXML),
        ContainerScrubber(Strategy.OPENDOCUMENT),
        ImageScrubber(),
    ]

    # Optional capability
    if with_pdf:
        scrubbers.append(PdfScrubber())

    return ScrubberRegistry(scrubbers)


__all__ = [
    "ContainerScrubber",
    "ImageScrubber",
    "PdfScrubber",
    "Scrubber",
    "ScrubberRegistry",
    "default_scrubbers",
]
