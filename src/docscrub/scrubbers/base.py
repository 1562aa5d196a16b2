from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..errors import FileIOError, ScrubError
from ..models import CommitResult, Strategy
from ..replace import AtomicReplacer
from ..utils import discard, preserve_mode, staged_path_for


class Scrubber(ABC):
    strategy: Strategy

    @abstractmethod
    def stage(self, src: Path, staged: Path) -> None:
        """Write a scrubbed version of src to staged."""
        raise NotImplementedError

    def scrub(self, path: Path, replacer: AtomicReplacer) -> CommitResult:
        staged = staged_path_for(path)
        try:
            self.stage(path, staged)
            preserve_mode(path, staged)
        except ScrubError as e:
            discard(staged)
            if e.path is None:
                e.path = path
            raise
        except OSError as e:
            discard(staged)
            raise FileIOError(str(e), path=path) from e

        return replacer.commit(path, staged)
