from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .classify import parse_ext_set
from .core import RunOptions, default_workers, scrub_path
from .errors import ScrubError
from .logging_config import setup_logging
from .models import ScrubOutcome


def main(
    path: Path = typer.Argument(..., help="File or directory to scrub"),
    backup: bool = typer.Option(True, "--backup/--no-backup", help="Keep a .bak copy of each original"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List the files that would be scrubbed"),
    workers: int = typer.Option(default_workers(), "--workers", "-w", help="Concurrent workers (min 2)"),
    with_pdf: bool = typer.Option(False, "--with-pdf", help="Enable PDF metadata removal"),
    include: str = typer.Option(
        "",
        "--include",
        help="Only process these extensions (comma separated, e.g. docx,xlsx,png)",
    ),
    exclude: str = typer.Option("", "--exclude", help="Skip these extensions (comma separated)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every processed file"),
) -> None:
    setup_logging(verbose)
    console = Console()

    opts = RunOptions(
        backup=backup,
        dry_run=dry_run,
        workers=workers,
        with_pdf=with_pdf,
        include=parse_ext_set(include),
        exclude=parse_ext_set(exclude),
    )

    try:
        report = scrub_path(path, opts)
    except ScrubError as e:
        console.print(f"[red]error:[/red] {e}")
        raise typer.Exit(code=2)

    if not report.candidates:
        console.print("No matching files found.")
        return

    console.print(f"Found {len(report.candidates)} file(s) to scrub.")
    if report.dry_run:
        for job in report.candidates:
            console.print(f"- {job.path}  [dim]({job.strategy.value})[/dim]", soft_wrap=True)
        return

    table = Table(title="Metadata Scrub Results")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    table.add_row("succeeded", str(report.succeeded))
    if report.degraded:
        table.add_row("  non-atomic replace", str(len(report.degraded)))
    table.add_row("failed", str(report.failed))
    if report.backups:
        table.add_row("backups written", str(len(report.backups)))
    console.print(table)

    if report.failures:
        err_table = Table(title="Errors", show_lines=False)
        err_table.add_column("Path")
        err_table.add_column("Type")
        err_table.add_column("Message")
        shown = report.failures[:50]
        hints = [recovery_hint(o) for o in shown]
        with_recovery = any(hints)
        if with_recovery:
            err_table.add_column("Recovery")
        for o, hint in zip(shown, hints):
            row = [str(o.job.path), o.job.strategy.value, o.message or ""]
            if with_recovery:
                row.append(hint)
            err_table.add_row(*row)
        console.print(err_table)
        raise typer.Exit(code=1)


def recovery_hint(outcome: ScrubOutcome) -> str:
    """Where the original and the scrubbed copy of a failed file now live."""

    parts = []
    if outcome.backup is not None:
        parts.append(f"backup: {outcome.backup}")
    if outcome.staged is not None:
        parts.append(f"staged: {outcome.staged}")
    return "; ".join(parts)


def app() -> None:
    """Console script entrypoint."""

    typer.run(main)


if __name__ == "__main__":
    app()
