from __future__ import annotations

import glob
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import DEFAULT_CONFIG_PATH, ensure_config, load_settings
from .exporter import OUTPUT_SYNTAXES, export_vcards
from .io import collect_sources, read_vcards_from_files, syntax_of
from .report import print_summary, print_validation, print_warnings, write_warnings_file
from .validation import validate as validate_vcard
from .version import VCardVersion

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="vcard-scribe: read, validate and convert vCards between 2.1, 3.0, 4.0, xCard, jCard and hCard.",
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ── Shared helpers ─────────────────────────────────────────────────────────────

def _expand_inputs(inputs: list[str]) -> list[Path]:
    """Files, directories and glob patterns, in the order given."""
    files: list[Path] = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            files.extend(collect_sources(path))
        elif path.is_file():
            files.append(path)
        else:
            files.extend(sorted(Path(p) for p in glob.glob(item) if syntax_of(Path(p)) is not None))
    return files


def _require_files(files: list[Path], inputs: list[str]) -> None:
    if files:
        return
    console.print(Panel(
        "[bold red]No readable vCard files found.[/bold red]\n\n"
        f"Looked in: [dim]{', '.join(inputs)}[/dim]\n"
        "Supported: .vcf .vcard .xml .json .html .htm",
        title="Nothing to read",
        border_style="red",
    ))
    raise typer.Exit(code=2)


def _parse_version(value: str | None) -> VCardVersion | None:
    if value is None:
        return None
    version = VCardVersion.get(value)
    if version is None:
        raise typer.BadParameter(f"{value!r} is not one of 2.1, 3.0, 4.0")
    return version


def _show_files(files: list[Path]) -> None:
    file_table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    file_table.add_column("Source file")
    file_table.add_column("Syntax")
    file_table.add_column("Size")
    for f in files:
        file_table.add_row(f.name, syntax_of(f) or "?", f"{f.stat().st_size / 1024:.1f} KB")
    console.print(file_table)


# ── `convert` command ──────────────────────────────────────────────────────────

@app.command()
def convert(
    inputs: list[str] = typer.Argument(..., help="Files, directories or glob patterns to read"),
    output: Path = typer.Option(..., "--output", "-o", help="File to write"),
    to: str = typer.Option("text", "--to", "-t", help=f"Output syntax: {', '.join(OUTPUT_SYNTAXES)}"),
    target_version: str | None = typer.Option(
        None, "--target-version", "-V",
        help="Version for text output (2.1, 3.0 or 4.0). Falls back to the config file.",
    ),
    strict: bool = typer.Option(False, "--strict", help="Drop what the target version cannot hold"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent xCard and jCard output"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="TOML settings file"),
    show_warnings: bool = typer.Option(False, "--warnings", "-w", help="Print every warning"),
    warnings_log: Path | None = typer.Option(None, "--warnings-log", help="Write warnings to a text file"),
) -> None:
    """Read vCards in any supported syntax and write them in one syntax."""
    if to not in OUTPUT_SYNTAXES:
        raise typer.BadParameter(f"{to!r} is not one of {', '.join(OUTPUT_SYNTAXES)}", param_hint="--to")

    # ── Settings: flags win over the config file ───────────────────────────────
    settings = load_settings(config)
    if target_version is not None:
        settings.target_version = _parse_version(target_version).version
    settings.strict = settings.strict or strict
    settings.pretty = settings.pretty or pretty

    files = _expand_inputs(inputs)
    _require_files(files, inputs)

    console.print(f"\n[bold]Reading {len(files)} file(s)…[/bold]")
    _show_files(files)

    results = read_vcards_from_files(files)
    count, write_warnings = export_vcards(
        [r.vcard for r in results], output, syntax=to, **settings.writer_options()
    )

    if show_warnings:
        print_warnings(results, write_warnings)
    if warnings_log is not None:
        write_warnings_file(results, write_warnings, warnings_log)
    print_summary(
        results=results,
        output_count=count,
        write_warnings=write_warnings,
        out_path=output,
        syntax=to,
    )


# ── `validate` command ─────────────────────────────────────────────────────────

@app.command()
def validate(
    inputs: list[str] = typer.Argument(..., help="Files, directories or glob patterns to read"),
    version: str | None = typer.Option(
        None, "--version", "-V", help="Validate against this version instead of each vCard's own",
    ),
) -> None:
    """Parse vCards and report read and validation warnings.

    Exits with code 1 when any vCard has a problem.
    """
    against = _parse_version(version)
    files = _expand_inputs(inputs)
    _require_files(files, inputs)

    results = read_vcards_from_files(files)
    console.print()
    problems = 0
    for i, result in enumerate(results, start=1):
        warnings = validate_vcard(result.vcard, against)
        print_validation(result, i, warnings)
        for message in result.warnings:
            console.print(f"    [dim]· read: {escape(message)}[/dim]")
        if warnings or result.warnings:
            problems += 1
    console.print()
    console.print(f"  [bold]{len(results)}[/bold] vCard(s) checked, [bold]{problems}[/bold] with problems")
    if problems:
        raise typer.Exit(code=1)


# ── `init-config` command ──────────────────────────────────────────────────────

@app.command("init-config")
def init_config(
    path: Path = typer.Argument(DEFAULT_CONFIG_PATH, help="Where to write the config file"),
) -> None:
    """Write a commented default config file (leaves an existing one alone)."""
    existed = path.exists()
    ensure_config(path)
    if existed:
        console.print(f"[dim]{path} already exists; left unchanged.[/dim]")
    else:
        console.print(f"[green]Wrote {path}[/green]")


if __name__ == "__main__":
    app()
