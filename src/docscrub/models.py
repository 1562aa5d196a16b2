from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Strategy(str, Enum):
    OPENXML = "openxml"
    OPENDOCUMENT = "opendocument"
    IMAGE = "image"
    PDF = "pdf"


class ScrubStatus(str, Enum):
    SCRUBBED = "scrubbed"
    SCRUBBED_DEGRADED = "scrubbed_degraded"
    FAILED = "failed"


@dataclass(frozen=True)
class ScrubJob:
    path: Path
    strategy: Strategy


@dataclass(frozen=True)
class CommitResult:
    path: Path
    backup: Path | None = None
    # True when the original was overwritten by a non-atomic copy.
    degraded: bool = False


@dataclass(frozen=True)
class ScrubOutcome:
    job: ScrubJob
    status: ScrubStatus
    message: str | None = None
    backup: Path | None = None
    # Left on disk by a failed replace; the user recovers from these.
    staged: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status != ScrubStatus.FAILED


@dataclass
class BatchReport:
    candidates: list[ScrubJob] = field(default_factory=list)
    dry_run: bool = False
    succeeded: int = 0
    failed: int = 0
    degraded: list[ScrubOutcome] = field(default_factory=list)
    failures: list[ScrubOutcome] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)

    def record(self, outcome: ScrubOutcome) -> None:
        if outcome.backup is not None:
            self.backups.append(outcome.backup)
        if outcome.ok:
            self.succeeded += 1
            if outcome.status == ScrubStatus.SCRUBBED_DEGRADED:
                self.degraded.append(outcome)
        else:
            self.failed += 1
            self.failures.append(outcome)

    @property
    def counts(self) -> tuple[int, int]:
        return self.succeeded, self.failed
