from __future__ import annotations

from collections import Counter
from pathlib import Path

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .io import ReadResult
from .stream import DocumentWarnings
from .validation import ValidationWarnings

console = Console()

# ── Palette ────────────────────────────────────────────────────────────────────
_ACCENT  = "#4d9fff"
_GREEN   = "#3ecf8e"
_AMBER   = "#f0a500"
_RED     = "#f05c5c"
_TEXT    = "#c9d1e0"
_MID     = "#8896af"
_DIM     = "#546075"
_BORDER  = "#2a3347"


def _stat_panel(value: str, label: str, colour: str) -> Panel:
    body = Text()
    body.append(f"{value}\n", style=f"bold {colour}")
    body.append(label, style=f"dim {_DIM}")
    return Panel(body, border_style=_BORDER, padding=(0, 2), expand=True)


def _label(result: ReadResult, position: int) -> str:
    fn = result.vcard.formatted_name
    return f"{result.source} #{position}" + (f"  {fn}" if fn else "")


def source_breakdown(results: list[ReadResult]) -> dict[str, tuple[int, int]]:
    """source label -> (vCards read, read warnings), sorted by label."""
    cards = Counter(r.source for r in results)
    warned: Counter[str] = Counter()
    for r in results:
        warned[r.source] += len(r.warnings)
    return {src: (cards[src], warned[src]) for src in sorted(cards)}


def print_summary(
    *,
    results: list[ReadResult],
    output_count: int,
    write_warnings: list[DocumentWarnings],
    out_path: Path,
    syntax: str,
) -> None:
    read_warnings = sum(len(r.warnings) for r in results)
    written_warnings = sum(len(w) for w in write_warnings)

    console.print()
    console.print(Text("  CONVERSION SUMMARY", style=f"dim {_DIM}"))
    console.print()

    # ── Stat grid ─────────────────────────────────────────────────────────────
    console.print(Columns([
        _stat_panel(str(len(results)),   "vCards read",     _ACCENT),
        _stat_panel(str(output_count),   f"written ({syntax})", _GREEN),
    ], equal=True, expand=True))
    console.print(Columns([
        _stat_panel(str(read_warnings),    "read warnings",  _AMBER if read_warnings else _TEXT),
        _stat_panel(str(written_warnings), "write warnings", _AMBER if written_warnings else _TEXT),
    ], equal=True, expand=True))
    console.print()

    # ── Per-source breakdown (if multiple) ────────────────────────────────────
    per_source = source_breakdown(results)
    if len(per_source) > 1:
        table = Table(box=None, padding=(0, 2), header_style=f"dim {_DIM}")
        table.add_column("source", style=_MID)
        table.add_column("vCards", justify="right", style=f"bold {_TEXT}")
        table.add_column("warnings", justify="right")
        for src, (cards, warned) in per_source.items():
            table.add_row(src, str(cards), Text(str(warned), style=_AMBER if warned else _DIM))
        console.print(Panel(table, title=Text("SOURCES READ", style=f"dim {_DIM}"),
                            title_align="left", border_style=_BORDER))
        console.print()

    # ── Success banner ─────────────────────────────────────────────────────────
    body = Text()
    body.append("✓  Written successfully\n", style=f"bold {_GREEN}")
    body.append(str(out_path), style=f"dim {_MID}")
    console.print(Panel(body, border_style=_GREEN, padding=(0, 2)))


def print_warnings(results: list[ReadResult], write_warnings: list[DocumentWarnings] | None = None) -> None:
    """Print every read (and optionally write) warning, grouped per vCard."""
    write_warnings = write_warnings or []
    shown = 0
    for i, result in enumerate(results):
        messages = list(result.warnings)
        if i < len(write_warnings):
            messages += [f"write: {m}" for m in write_warnings[i]]
        if not messages:
            continue
        shown += 1
        console.print(Text(f"  {_label(result, i + 1)}", style=f"bold {_TEXT}"))
        for message in messages:
            console.print(Text(f"    · {message}", style=f"dim {_AMBER}"))
    if not shown:
        console.print(Text("  No warnings.", style=f"dim {_DIM}"))
    console.print()


def print_validation(result: ReadResult, position: int, warnings: ValidationWarnings) -> None:
    header = Text()
    if warnings:
        header.append("  ✗ ", style=f"bold {_RED}")
    else:
        header.append("  ✓ ", style=f"bold {_GREEN}")
    header.append(_label(result, position), style=_TEXT)
    console.print(header)
    for line in str(warnings).splitlines():
        console.print(Text(f"    · {line}", style=f"dim {_MID}"))


def write_warnings_file(
    results: list[ReadResult],
    write_warnings: list[DocumentWarnings],
    path: Path,
) -> None:
    lines: list[str] = [
        "vcard-scribe: warnings log",
        "=" * 40,
        f"vCards read: {len(results)}",
        "",
    ]
    for i, result in enumerate(results):
        messages = list(result.warnings)
        if i < len(write_warnings):
            messages += [f"write: {m}" for m in write_warnings[i]]
        if not messages:
            continue
        lines.append(f"{_label(result, i + 1)}:")
        for message in messages:
            lines.append(f"  - {message}")
        lines.append("")
    path.write_text("\n".join(lines), encoding="utf-8")
