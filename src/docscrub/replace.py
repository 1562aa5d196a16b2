"""Backup-then-replace commit of a staged file over its original.

Commit runs as an explicit sequence of steps::

    backup -> ATOMIC_MOVE -> RETRY -> FALLBACK_COPY -> FAILED

The backup, when requested, is fully written and fsynced before any step
touches the original. ``FALLBACK_COPY`` overwrites the original in place and
is not atomic: a crash during it can leave a truncated original (the backup
still holds the old content). Commits that took that path are reported with
``CommitResult.degraded`` set.
"""

from __future__ import annotations

import logging
import os
import time
from enum import Enum
from pathlib import Path
from typing import Callable

from .errors import FileIOError
from .models import CommitResult
from .utils import backup_path_for, copy_bytes, discard

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 0.3


class ReplaceStep(str, Enum):
    ATOMIC_MOVE = "atomic_move"
    RETRY = "retry"
    FALLBACK_COPY = "fallback_copy"
    FAILED = "failed"


class AtomicReplacer:
    def __init__(
        self,
        *,
        keep_backup: bool = True,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        move: Callable[[Path, Path], None] = os.replace,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.keep_backup = keep_backup
        self.retry_delay = retry_delay
        self._move = move
        self._sleep = sleep

    def commit(self, original: Path, staged: Path) -> CommitResult:
        backup = self.make_backup(original) if self.keep_backup else None

        step = ReplaceStep.ATOMIC_MOVE
        last_error: OSError | None = None
        while True:
            if step == ReplaceStep.ATOMIC_MOVE:
                last_error = self._try_move(staged, original)
                if last_error is None:
                    return CommitResult(path=original, backup=backup)
                step = ReplaceStep.RETRY

            elif step == ReplaceStep.RETRY:
                logger.debug("Rename onto %s failed (%s); retrying", original, last_error)
                self._sleep(self.retry_delay)
                last_error = self._try_move(staged, original)
                if last_error is None:
                    return CommitResult(path=original, backup=backup)
                step = ReplaceStep.FALLBACK_COPY

            elif step == ReplaceStep.FALLBACK_COPY:
                last_error = self._try_copy_over(staged, original)
                if last_error is None:
                    logger.warning(
                        "Replaced %s by non-atomic copy (rename failed); durability is degraded",
                        original,
                    )
                    return CommitResult(path=original, backup=backup, degraded=True)
                step = ReplaceStep.FAILED

            else:
                raise FileIOError(
                    f"cannot replace original: {last_error}",
                    path=original,
                    staged=staged,
                    backup=backup,
                ) from last_error

    def make_backup(self, original: Path) -> Path:
        """Copy ``original`` to a fresh backup path; never overwrites an existing file."""

        bak = backup_path_for(original)
        try:
            copy_bytes(original, bak, exclusive=True)
        except FileExistsError as e:
            raise FileIOError(f"backup already exists: {bak}", path=original) from e
        except OSError as e:
            discard(bak)
            raise FileIOError(f"cannot create backup {bak}: {e}", path=original) from e
        return bak

    def _try_move(self, staged: Path, original: Path) -> OSError | None:
        try:
            self._move(staged, original)
        except OSError as e:
            return e
        return None

    def _try_copy_over(self, staged: Path, original: Path) -> OSError | None:
        try:
            copy_bytes(staged, original)
        except OSError as e:
            return e
        discard(staged)
        return None
