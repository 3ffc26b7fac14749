from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .hcard import HCardReader
from .jcard import JCardReader
from .model import VCard
from .scribes.registry import ScribeIndex
from .stream import DocumentWarnings, StreamReader
from .text import VCardReader
from .xcard import XCardReader

logger = logging.getLogger(__name__)

# ── Pre-parse sanitisation ─────────────────────────────────────────────────────
#
# Apple iCloud exports contain group prefixes the content-line grammar
# rejects. They are fixed in plain text first, keeping the group:
#
#   item1..ADR   double-dot group prefix  → item1.ADR
#   .ADR         bare leading dot         → ADR

_ITEM_DOUBLE_DOT = re.compile(r"^(item\d+)\.\.", re.IGNORECASE | re.MULTILINE)
_BARE_DOT = re.compile(r"^\.(?=[A-Z])", re.IGNORECASE | re.MULTILINE)

SYNTAXES = {
    ".vcf": "text",
    ".vcard": "text",
    ".xml": "xcard",
    ".json": "jcard",
    ".html": "hcard",
    ".htm": "hcard",
}


def sanitise_vcf(data: str, source_label: str = "<string>") -> str:
    """Clean up known malformed group prefixes before tokenising."""
    data, doubled = _ITEM_DOUBLE_DOT.subn(r"\1.", data)
    data, bare = _BARE_DOT.subn("", data)
    if doubled or bare:
        logger.debug("%s: %d line(s) fixed", source_label, doubled + bare)
    return data


@dataclass
class ReadResult:
    vcard: VCard
    source: str
    warnings: DocumentWarnings


def syntax_of(path: Path) -> str | None:
    return SYNTAXES.get(path.suffix.lower())


def reader_for(path: Path, index: ScribeIndex | None = None) -> StreamReader:
    """A reader for a file, chosen by its suffix."""
    syntax = syntax_of(path)
    if syntax is None:
        raise ValueError(f"Unrecognised file type: {path.name}")
    if syntax == "xcard":
        return XCardReader(path.read_bytes(), index=index)
    raw = path.read_text(encoding="utf-8", errors="replace")
    if syntax == "jcard":
        return JCardReader(raw, index=index)
    if syntax == "hcard":
        return HCardReader(raw, base_url=path.resolve().as_uri(), index=index)
    return VCardReader(sanitise_vcf(raw, path.name), index=index)


# ── Public API ─────────────────────────────────────────────────────────────────

def read_vcards_from_files(paths: list[Path], index: ScribeIndex | None = None) -> list[ReadResult]:
    """Parse every file and return one result per vCard, in file order."""
    results: list[ReadResult] = []
    for p in paths:
        reader = reader_for(p, index)
        before = len(results)
        for vcard in reader:
            results.append(ReadResult(vcard, p.stem, reader.warnings))
        logger.debug("%s: read %d vCard(s)", p.name, len(results) - before)
    return results


def collect_sources(source_dir: Path) -> list[Path]:
    """Return all readable files found directly inside source_dir, sorted by name."""
    if not source_dir.is_dir():
        return []
    return sorted(p for p in source_dir.iterdir() if p.is_file() and syntax_of(p) is not None)
