"""Value escaping and splitting shared by the text and jCard scribes."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .version import VCardVersion


# ── Escaping ──────────────────────────────────────────────────────────────────

def escape(text: str, version: VCardVersion = VCardVersion.V4_0) -> str:
    """Escape a value component for the plain-text syntax.

    2.1 only knows backslash and semicolon escapes; newlines are left alone
    and the writer falls back to quoted-printable for them.
    """
    out = []
    for ch in text:
        if ch in "\\;":
            out.append("\\" + ch)
        elif version is VCardVersion.V2_1:
            out.append(ch)
        elif ch == ",":
            out.append("\\,")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            continue
        else:
            out.append(ch)
    return "".join(out)


def unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt is None:
            out.append("\\")
        elif nxt in "nN":
            out.append("\n")
        elif nxt in "\\,;:":
            out.append(nxt)
        else:
            # unknown escape: keep it as written
            out.append("\\" + nxt)
    return "".join(out)


def split_escaped(text: str, delimiter: str, limit: int = -1) -> list[str]:
    """Split on a delimiter that is not preceded by a backslash.

    The pieces are returned still escaped.
    """
    parts: list[str] = []
    buf: list[str] = []
    escaped = False
    for ch in text:
        if escaped:
            buf.append(ch)
            escaped = False
        elif ch == "\\":
            buf.append(ch)
            escaped = True
        elif ch == delimiter and (limit < 0 or len(parts) < limit - 1):
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    parts.append("".join(buf))
    return parts


# ── Lists and structured values ───────────────────────────────────────────────

def parse_list(text: str) -> list[str]:
    """Parse a comma-separated list; an empty value is an empty list."""
    if text == "":
        return []
    return [unescape(part) for part in split_escaped(text, ",")]


def write_list(values: Iterable[str | None], version: VCardVersion) -> str:
    return ",".join(escape(v or "", version) for v in values)


def parse_semi_structured(text: str, limit: int = -1) -> list[str]:
    """Parse a `;`-separated value whose components are plain text."""
    return [unescape(part) for part in split_escaped(text, ";", limit)]


def parse_structured(text: str) -> list[list[str]]:
    """Parse a `;`-separated value whose components may be `,` lists."""
    return [parse_list(part) for part in split_escaped(text, ";")]


def write_structured(
    components: Sequence[str | Iterable[str] | None],
    version: VCardVersion,
    include_trailing_semicolons: bool = True,
) -> str:
    pieces = []
    for component in components:
        if component is None:
            pieces.append("")
        elif isinstance(component, str):
            pieces.append(escape(component, version))
        else:
            pieces.append(write_list(component, version))
    if not include_trailing_semicolons:
        while len(pieces) > 1 and pieces[-1] == "":
            pieces.pop()
    return ";".join(pieces)


class StructuredIterator:
    """Walks the components of a parsed structured value.

    Missing trailing components read as None (or an empty list).
    """

    def __init__(self, components: Sequence[Any]):
        self._components = list(components)
        self._pos = 0

    def next_value(self) -> str | None:
        component = self._next()
        if component is None:
            return None
        if isinstance(component, list):
            component = ",".join(component)
        return component or None

    def next_list(self) -> list[str]:
        component = self._next()
        if component is None:
            return []
        if isinstance(component, str):
            return [component] if component else []
        return [c for c in component if c != ""]

    def has_next(self) -> bool:
        return self._pos < len(self._components)

    def _next(self) -> Any:
        if self._pos >= len(self._components):
            return None
        component = self._components[self._pos]
        self._pos += 1
        return component


# ── jCard values ──────────────────────────────────────────────────────────────

@dataclass
class JCardValue:
    """The value portion of a jCard property entry.

    `values` holds everything after the datatype slot. A structured value is
    a single entry that is itself a list (one item per component; a component
    may be a nested list).
    """

    values: list[Any] = field(default_factory=list)
    structured: bool = False

    @classmethod
    def single(cls, value: Any) -> JCardValue:
        return cls([value])

    @classmethod
    def multi(cls, *values: Any) -> JCardValue:
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        return cls(list(values))

    @classmethod
    def structured_of(cls, *components: Any) -> JCardValue:
        out: list[Any] = []
        for component in components:
            if component is None:
                out.append("")
            elif isinstance(component, (list, tuple)):
                items = ["" if c is None else c for c in component]
                if not items:
                    out.append("")
                elif len(items) == 1:
                    out.append(items[0])
                else:
                    out.append(items)
            else:
                out.append(component)
        return cls([out], structured=True)

    def as_single(self) -> str:
        if not self.values:
            return ""
        first = self.values[0]
        if isinstance(first, list):
            first = first[0] if first else ""
            if isinstance(first, list):
                first = first[0] if first else ""
        return "" if first is None else str(first)

    def as_multi(self) -> list[str]:
        if len(self.values) == 1 and isinstance(self.values[0], list):
            return [_jstr(v) for v in self.values[0] if not isinstance(v, list)]
        return [_jstr(v) for v in self.values if not isinstance(v, list)]

    def as_structured(self) -> list[list[str]]:
        if not self.values:
            return []
        first = self.values[0]
        if len(self.values) == 1 and isinstance(first, list):
            out = []
            for component in first:
                if isinstance(component, list):
                    out.append([_jstr(c) for c in component])
                else:
                    text = _jstr(component)
                    out.append([text] if text else [])
            return out
        # a plain string value: treat it as one `;` structured text value
        if len(self.values) == 1 and isinstance(first, str):
            return parse_structured(first)
        return [[_jstr(v)] if _jstr(v) else [] for v in self.values]


def _jstr(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
