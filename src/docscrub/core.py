"""Discovery and concurrent dispatch of scrub jobs.

Workers pull jobs from a queue closed with one sentinel per worker and push
exactly one outcome per job onto a results queue. The calling thread is the
only consumer of that queue, so it owns the counters outright.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from dataclasses import dataclass
from pathlib import Path
from queue import Queue
from typing import AbstractSet

from .classify import classify, classify_explicit
from .errors import ConfigError, FileIOError, ScrubError
from .models import BatchReport, ScrubJob, ScrubOutcome, ScrubStatus
from .replace import DEFAULT_RETRY_DELAY, AtomicReplacer
from .scrubbers import ScrubberRegistry, default_scrubbers

logger = logging.getLogger(__name__)

MIN_WORKERS = 2

_STOP = object()


def default_workers() -> int:
    return max(MIN_WORKERS, os.cpu_count() or 1)


@dataclass(frozen=True)
class RunOptions:
    backup: bool = True
    dry_run: bool = False
    workers: int | None = None
    with_pdf: bool = False

    include: AbstractSet[str] = frozenset()
    exclude: AbstractSet[str] = frozenset()

    retry_delay: float = DEFAULT_RETRY_DELAY

    def resolved_workers(self) -> int:
        if self.workers is None:
            return default_workers()
        if self.workers < MIN_WORKERS:
            raise ConfigError(f"workers must be at least {MIN_WORKERS}, got {self.workers}")
        return self.workers


def scrub_path(root: Path, options: RunOptions) -> BatchReport:
    """Scrub a file or directory tree; raises only for fatal errors at ``root``."""

    workers = options.resolved_workers()
    jobs = discover(root, options.include, options.exclude)
    registry = default_scrubbers(with_pdf=options.with_pdf)
    replacer = AtomicReplacer(keep_backup=options.backup, retry_delay=options.retry_delay)
    return run_jobs(jobs, registry, replacer, workers=workers, dry_run=options.dry_run)


def discover(
    root: Path,
    include: AbstractSet[str] = frozenset(),
    exclude: AbstractSet[str] = frozenset(),
) -> list[ScrubJob]:
    root = root.expanduser()
    try:
        st = os.stat(root)
    except OSError as e:
        raise FileIOError(f"cannot access input path: {e}", path=root) from e

    if not stat.S_ISDIR(st.st_mode):
        strategy = classify_explicit(root, include, exclude)
        return [ScrubJob(path=root, strategy=strategy)]

    def on_walk_error(err: OSError) -> None:
        if err.filename is not None and Path(err.filename) == root:
            raise FileIOError(f"cannot read input directory: {err}", path=root) from err
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    jobs: list[ScrubJob] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
        dirnames.sort()
        base = Path(dirpath)
        for fn in sorted(filenames):
            p = base / fn
            strategy = classify(p, include, exclude)
            if strategy is not None:
                jobs.append(ScrubJob(path=p, strategy=strategy))

    logger.debug("Discovered %d candidate files under %s", len(jobs), root)
    return jobs


def run_jobs(
    jobs: list[ScrubJob],
    registry: ScrubberRegistry,
    replacer: AtomicReplacer,
    *,
    workers: int = MIN_WORKERS,
    dry_run: bool = False,
) -> BatchReport:
    report = BatchReport(candidates=list(jobs), dry_run=dry_run)
    if dry_run or not jobs:
        return report

    if workers < MIN_WORKERS:
        raise ConfigError(f"workers must be at least {MIN_WORKERS}, got {workers}")

    work: Queue = Queue()
    results: Queue = Queue()
    for job in jobs:
        work.put(job)
    for _ in range(workers):
        work.put(_STOP)

    threads = [
        threading.Thread(
            target=_worker_main,
            args=(work, results, registry, replacer),
            name=f"docscrub-worker-{i}",
            daemon=True,
        )
        for i in range(workers)
    ]
    for t in threads:
        t.start()

    for _ in range(len(jobs)):
        outcome: ScrubOutcome = results.get()
        report.record(outcome)
        if outcome.status == ScrubStatus.FAILED:
            logger.error("[FAIL] %s: %s", outcome.job.path, outcome.message)
        else:
            logger.debug("[OK] %s", outcome.job.path)

    for t in threads:
        t.join()

    logger.info("Finished: %d succeeded, %d failed", report.succeeded, report.failed)
    return report


def _worker_main(
    work: Queue,
    results: Queue,
    registry: ScrubberRegistry,
    replacer: AtomicReplacer,
) -> None:
    while True:
        job = work.get()
        if job is _STOP:
            return
        results.put(scrub_job(job, registry, replacer))


def scrub_job(job: ScrubJob, registry: ScrubberRegistry, replacer: AtomicReplacer) -> ScrubOutcome:
    """Scrub one file; every exception becomes a FAILED outcome."""

    try:
        scrubber = registry.get(job.strategy)
        result = scrubber.scrub(job.path, replacer)
    except ScrubError as e:
        return ScrubOutcome(
            job=job,
            status=ScrubStatus.FAILED,
            message=_describe(e),
            backup=e.context.get("backup"),
            staged=e.context.get("staged"),
        )
    except Exception as e:  # noqa: BLE001
        return ScrubOutcome(job=job, status=ScrubStatus.FAILED, message=_describe(e))

    status = ScrubStatus.SCRUBBED_DEGRADED if result.degraded else ScrubStatus.SCRUBBED
    return ScrubOutcome(job=job, status=status, backup=result.backup)


def _describe(e: Exception) -> str:
    # ScrubError already carries the path; the outcome is reported next to it.
    message = getattr(e, "message", None)
    if message:
        return f"{type(e).__name__}: {message}"
    return f"{type(e).__name__}: {e}"
