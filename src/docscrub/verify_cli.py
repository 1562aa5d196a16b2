from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Callable

import typer
from rich.console import Console
from rich.table import Table

from .models import Strategy
from .verify import VerifyResult, VerifyStatus, verify_paths

MAX_FINDINGS = 200


def main(
    paths: list[Path] = typer.Argument(..., exists=True, readable=True, resolve_path=True),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
    fail_on_metadata: bool = typer.Option(
        False,
        "--fail-on-metadata",
        help="Exit 1 when any file still carries metadata",
    ),
) -> None:
    """Report metadata left in supported files without modifying them."""

    results = verify_paths(paths)

    if json_output:
        typer.echo(json.dumps([to_json(r) for r in results], indent=2, sort_keys=True))
    else:
        _print_report(Console(), results)

    if any(r.status == VerifyStatus.ERROR for r in results):
        raise typer.Exit(code=2)
    if fail_on_metadata and any(r.status == VerifyStatus.METADATA_FOUND for r in results):
        raise typer.Exit(code=1)


def app() -> None:
    typer.run(main)


def to_json(r: VerifyResult) -> dict:
    return {
        "path": str(r.path),
        "status": r.status.value,
        "strategy": r.kind.value if r.kind else None,
        "details": r.details,
        "message": r.message,
    }


def status_grid(results: list[VerifyResult]) -> Counter:
    """Count results per (strategy, status); unsupported files have strategy None."""

    return Counter((r.kind, r.status) for r in results)


def _print_report(console: Console, results: list[VerifyResult]) -> None:
    grid = status_grid(results)

    table = Table(title="Metadata Verify Results")
    table.add_column("Strategy")
    for st in VerifyStatus:
        table.add_column(st.value, justify="right")

    rows: list[Strategy | None] = [*Strategy, None]
    for kind in rows:
        counts = [grid[(kind, st)] for st in VerifyStatus]
        if not any(counts):
            continue
        label = kind.value if kind else "(unsupported)"
        table.add_row(label, *(str(n) if n else "-" for n in counts))
    console.print(table)

    findings = [r for r in results if r.status in {VerifyStatus.METADATA_FOUND, VerifyStatus.ERROR}]
    if not findings:
        return

    ft = Table(title=f"Findings (first {MAX_FINDINGS})")
    ft.add_column("Path")
    ft.add_column("Strategy")
    ft.add_column("Summary")
    for r in findings[:MAX_FINDINGS]:
        ft.add_row(str(r.path), r.kind.value if r.kind else "-", _summarize(r))
    console.print(ft)


def _summarize_container(details: dict) -> str:
    return "entries=" + ",".join(details.get("metadata_entries") or [])


def _summarize_image(details: dict) -> str:
    exif = details.get("exif_tags") or []
    interesting = details.get("interesting_info_keys") or []
    return f"exif_tags={len(exif)} info_keys={','.join(interesting) or '-'}"


def _summarize_pdf(details: dict) -> str:
    md_keys = details.get("metadata_keys") or []
    pages = details.get("pages_with_metadata") or []
    return (
        f"docinfo_keys={len(md_keys)} catalog_xmp={bool(details.get('has_xmp'))} "
        f"pages={','.join(map(str, pages)) or '-'}"
    )


_SUMMARIES: dict[Strategy, Callable[[dict], str]] = {
    Strategy.OPENXML: _summarize_container,
    Strategy.OPENDOCUMENT: _summarize_container,
    Strategy.IMAGE: _summarize_image,
    Strategy.PDF: _summarize_pdf,
}


def _summarize(r: VerifyResult) -> str:
    if r.status == VerifyStatus.ERROR or r.kind is None:
        return r.message or ""
    return _SUMMARIES[r.kind](r.details)
