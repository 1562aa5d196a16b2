from __future__ import annotations

import os

import pytest

from docscrub import utils
from docscrub.errors import FileIOError
from docscrub.replace import AtomicReplacer


def _setup(tmp_path):
    original = tmp_path / "report.docx"
    staged = tmp_path / "report.docx.tmp"
    original.write_bytes(b"original bytes")
    staged.write_bytes(b"scrubbed bytes")
    return original, staged


class FlakyMove:
    """os.replace stand-in that fails a fixed number of times first."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self, src, dst) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise PermissionError(13, "file is locked", str(dst))
        os.replace(src, dst)


def test_commit_writes_backup_before_replacing(tmp_path):
    original, staged = _setup(tmp_path)

    result = AtomicReplacer(keep_backup=True, retry_delay=0).commit(original, staged)

    assert result.backup == tmp_path / "report.docx.bak"
    assert result.backup.read_bytes() == b"original bytes"
    assert original.read_bytes() == b"scrubbed bytes"
    assert not staged.exists()
    assert not result.degraded


def test_commit_without_backup(tmp_path):
    original, staged = _setup(tmp_path)

    result = AtomicReplacer(keep_backup=False).commit(original, staged)

    assert result.backup is None
    assert sorted(p.name for p in tmp_path.iterdir()) == ["report.docx"]


def test_second_backup_gets_timestamp_suffix(tmp_path, monkeypatch):
    original, staged = _setup(tmp_path)
    existing = tmp_path / "report.docx.bak"
    existing.write_bytes(b"older backup")
    monkeypatch.setattr(utils.time, "time", lambda: 1700000000.5)

    result = AtomicReplacer(retry_delay=0).commit(original, staged)

    assert result.backup == tmp_path / "report.docx.1700000000.bak"
    assert result.backup.read_bytes() == b"original bytes"
    assert existing.read_bytes() == b"older backup"


def test_backup_failure_leaves_original_and_staged_untouched(tmp_path, monkeypatch):
    original, staged = _setup(tmp_path)
    (tmp_path / "report.docx.bak").write_bytes(b"first")
    (tmp_path / "report.docx.42.bak").write_bytes(b"second")
    monkeypatch.setattr(utils.time, "time", lambda: 42.0)
    move = FlakyMove(failures=0)

    with pytest.raises(FileIOError, match="backup"):
        AtomicReplacer(move=move).commit(original, staged)

    assert move.calls == 0
    assert original.read_bytes() == b"original bytes"
    assert staged.read_bytes() == b"scrubbed bytes"
    assert (tmp_path / "report.docx.42.bak").read_bytes() == b"second"


def test_commit_retries_once_after_failed_move(tmp_path):
    original, staged = _setup(tmp_path)
    move = FlakyMove(failures=1)
    sleeps: list[float] = []

    result = AtomicReplacer(keep_backup=False, retry_delay=0.3, move=move, sleep=sleeps.append).commit(
        original, staged
    )

    assert move.calls == 2
    assert sleeps == [0.3]
    assert not result.degraded
    assert original.read_bytes() == b"scrubbed bytes"
    assert not staged.exists()


def test_commit_falls_back_to_copy_when_move_keeps_failing(tmp_path):
    original, staged = _setup(tmp_path)
    move = FlakyMove(failures=2)

    result = AtomicReplacer(keep_backup=True, move=move, sleep=lambda s: None).commit(original, staged)

    assert move.calls == 2
    assert result.degraded
    assert original.read_bytes() == b"scrubbed bytes"
    assert result.backup.read_bytes() == b"original bytes"
    assert not staged.exists()


def test_total_failure_keeps_staged_file(tmp_path):
    original = tmp_path / "target"
    original.mkdir()
    staged = tmp_path / "target.tmp"
    staged.write_bytes(b"scrubbed bytes")
    move = FlakyMove(failures=2)

    with pytest.raises(FileIOError) as excinfo:
        AtomicReplacer(keep_backup=False, move=move, sleep=lambda s: None).commit(original, staged)

    assert excinfo.value.path == original
    assert staged.read_bytes() == b"scrubbed bytes"
    assert original.is_dir()
