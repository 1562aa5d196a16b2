from __future__ import annotations

from pathlib import Path

from ..archive import EntryDecision, rewrite_archive_file
from ..models import Strategy
from .base import Scrubber

OPENXML_PROPS_PREFIX = "docprops/"
OPENDOCUMENT_META = "meta.xml"


def keep_openxml_entry(name: str) -> bool:
    # docProps/ holds core.xml, app.xml, custom.xml and thumbnails.
    return not name.lower().startswith(OPENXML_PROPS_PREFIX)


def keep_opendocument_entry(name: str) -> bool:
    return name.lower() != OPENDOCUMENT_META


_PREDICATES: dict[Strategy, EntryDecision] = {
    Strategy.OPENXML: keep_openxml_entry,
    Strategy.OPENDOCUMENT: keep_opendocument_entry,
}


class ContainerScrubber(Scrubber):
    """Drops the metadata entries of an Office OpenXML or OpenDocument package."""

    def __init__(self, strategy: Strategy) -> None:
        if strategy not in _PREDICATES:
            raise ValueError(f"not a container strategy: {strategy}")
        self.strategy = strategy
        self.keep = _PREDICATES[strategy]

    def stage(self, src: Path, staged: Path) -> None:
        rewrite_archive_file(src, staged, self.keep)
