from __future__ import annotations

import logging
from pathlib import Path

from .jcard import JCardWriter
from .model import VCard
from .stream import DocumentWarnings, StreamWriter
from .text import VCardWriter
from .version import VCardVersion
from .xcard import XCardWriter

logger = logging.getLogger(__name__)

OUTPUT_SYNTAXES = ("text", "xcard", "jcard")


def writer_for(
    syntax: str,
    target_version: VCardVersion | None = None,
    strict: bool = False,
    add_prodid: bool = True,
    line_length: int | None = 75,
    pretty: bool = False,
) -> StreamWriter:
    if syntax == "text":
        return VCardWriter(
            target_version=target_version, strict=strict, add_prodid=add_prodid, line_length=line_length
        )
    if syntax == "xcard":
        return XCardWriter(strict=strict, add_prodid=add_prodid, pretty=pretty)
    if syntax == "jcard":
        return JCardWriter(strict=strict, add_prodid=add_prodid, pretty=pretty)
    raise ValueError(f"Unknown output syntax {syntax!r}; expected one of {', '.join(OUTPUT_SYNTAXES)}")


def export_vcards(
    vcards: list[VCard],
    path: Path,
    syntax: str = "text",
    target_version: VCardVersion | None = None,
    strict: bool = False,
    add_prodid: bool = True,
    line_length: int | None = 75,
    pretty: bool = False,
) -> tuple[int, list[DocumentWarnings]]:
    """Write vcards to path in one syntax.

    xCard and jCard are always written at 4.0; target_version only applies
    to the text syntax. Returns the number of documents written and the
    write warnings of each.
    """
    writer = writer_for(syntax, target_version, strict, add_prodid, line_length, pretty)
    warnings = writer.write_all(vcards)
    path.parent.mkdir(parents=True, exist_ok=True)
    # CRLF line endings are already part of the text syntax
    path.write_text(writer.getvalue(), encoding="utf-8", newline="")
    logger.debug("Wrote %d vCard(s) to %s as %s", len(vcards), path, syntax)
    return len(vcards), warnings
