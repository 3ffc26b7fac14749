"""Plain-text vCard syntax (2.1, 3.0, 4.0).

Line unfolding, content-line tokenising and quoted-printable decoding are
done by `vobject`; everything that depends on the property's meaning is
delegated to the scribes.
"""
from __future__ import annotations

import binascii
import io
import logging
import re
from collections.abc import Iterator
from typing import TextIO

import vobject.base

from .datatype import VCardDataType
from .errors import CannotParseError, SkipMeError
from .model import VCard
from .parameters import CHARSET, ENCODING, TYPE, VALUE, VCardParameters
from .scribes.registry import ScribeIndex
from .stream import DocumentWarnings, PreparedProperty, StreamReader, StreamWriter
from .version import VCardVersion

logger = logging.getLogger(__name__)

V2_1 = VCardVersion.V2_1

_QP_TOKEN_RE = re.compile(r"=[0-9A-F]{2}|.", re.DOTALL)

# 2.1 allows parameter values without a name (`TEL;HOME;VOICE:`)
_NAMELESS_ENCODINGS = {"BASE64", "B", "7BIT", "8BIT", "QUOTED-PRINTABLE"}
_NAMELESS_VALUES = {"URL", "CONTENT-ID", "INLINE"}

_LINE_ERRORS = (vobject.base.VObjectError, ValueError, LookupError)


# ── Reading ───────────────────────────────────────────────────────────────────

class VCardReader(StreamReader):
    """Reads plain-text vCards from a string or text stream.

    Documents without a VERSION property are read as `default_version`.
    """

    def __init__(
        self,
        source: str | TextIO,
        index: ScribeIndex | None = None,
        default_version: VCardVersion = V2_1,
    ):
        super().__init__(index)
        self.source = source
        self.default_version = default_version

    def _read_documents(self) -> Iterator[VCard]:
        text = self.source if isinstance(self.source, str) else self.source.read()
        current: VCard | None = None
        warnings = self.warnings
        nested = 0

        for line, line_number in vobject.base.getLogicalLines(io.StringIO(text), allowQP=True):
            if not line.strip():
                continue
            try:
                content_line = vobject.base.textLineToContentLine(line, line_number)
            except _LINE_ERRORS as e:
                logger.debug("Skipping line %s: %s", line_number, e)
                if current is not None:
                    warnings.add(f"Skipped a line that could not be tokenised: {e}", line_number)
                continue

            name = content_line.name.upper()
            value = content_line.value
            if name == "BEGIN" and value.strip().upper() == "VCARD":
                if current is None:
                    current = VCard(version=self.default_version)
                    warnings = self._start_document()
                else:
                    nested += 1
                    warnings.add("Nested vCards are not supported; skipped.", line_number)
                continue
            if name == "END" and value.strip().upper() == "VCARD":
                if nested:
                    nested -= 1
                elif current is not None:
                    yield current
                    current = None
                continue
            if current is None or nested:
                continue

            if name == "VERSION":
                version = VCardVersion.get(value)
                if version is None:
                    warnings.add(f'Unknown version "{value}"; reading as {current.version}.', line_number)
                else:
                    current.version = version
                continue

            self._read_property(current, content_line, line_number, warnings)

        if current is not None:
            warnings.add("Missing END:VCARD.")
            yield current

    def _read_property(self, vcard: VCard, content_line, line_number: int, warnings: DocumentWarnings) -> None:
        name = content_line.name.upper()
        params = _parameters_of(content_line)
        data_type = VCardDataType.get(params.first(VALUE))
        params.remove_all(VALUE)

        scribe = self.index.scribe_or_raw(name)
        if data_type is None:
            data_type = scribe.default_data_type(vcard.version)

        entry = warnings.start_property(name, line_number)
        try:
            result = scribe.parse_text(content_line.value, data_type, vcard.version, params)
        except CannotParseError as e:
            entry.messages.append(f"Property could not be parsed and was skipped: {e}")
            logger.debug("Line %s: cannot parse %s: %s", line_number, name, e)
            return
        result.property.group = content_line.group
        entry.messages.extend(result.warnings)
        vcard.add(result.property)


def _parameters_of(content_line) -> VCardParameters:
    params = VCardParameters()
    for name, values in content_line.params.items():
        for value in values:
            params.put(name, value)
    for value in content_line.singletonparams:
        upper = value.upper()
        if upper in _NAMELESS_ENCODINGS:
            params.put(ENCODING, value)
        elif upper in _NAMELESS_VALUES:
            params.put(VALUE, value)
        else:
            params.put(TYPE, value)
    # vobject has already decoded quoted-printable values into text
    params.remove_all(CHARSET)
    params.remove(ENCODING, "QUOTED-PRINTABLE")
    return params


# ── Writing ───────────────────────────────────────────────────────────────────

class VCardWriter(StreamWriter):
    """Writes plain-text vCards with CRLF line endings.

    line_length: fold lines longer than this many octets (None disables
    folding).
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        target_version: VCardVersion | None = None,
        strict: bool = False,
        add_prodid: bool = True,
        line_length: int | None = 75,
        index: ScribeIndex | None = None,
    ):
        super().__init__(target_version, strict, add_prodid, index)
        self.stream = stream if stream is not None else io.StringIO()
        self.line_length = line_length

    def write(self, vcard: VCard) -> DocumentWarnings:
        version = self.version_for(vcard)
        self._write_line("BEGIN:VCARD")
        self._write_line(f"VERSION:{version}")
        for prepared in self._prepare(vcard, version):
            try:
                value = prepared.scribe.write_text(prepared.prop, version)
            except SkipMeError as e:
                self._skipped(prepared, e)
                continue
            self._write_property(prepared, value, version)
        self._write_line("END:VCARD")
        return self.warnings

    def write_all(self, vcards) -> list[DocumentWarnings]:
        return [self.write(vcard) for vcard in vcards]

    def getvalue(self) -> str:
        """The written text; only available with the default in-memory buffer."""
        if not isinstance(self.stream, io.StringIO):
            raise TypeError(
                "getvalue() needs the default in-memory buffer; "
                "read the text back from the stream passed to VCardWriter instead."
            )
        return self.stream.getvalue()

    def _write_property(self, prepared: PreparedProperty, value: str, version: VCardVersion) -> None:
        params = prepared.parameters
        quoted_printable = version is V2_1 and _needs_quoted_printable(value)
        if quoted_printable:
            params = params.copy()
            params.encoding = "QUOTED-PRINTABLE"
            params.charset = "UTF-8"
            value = _quoted_printable(value)

        line = prepared.name
        if prepared.prop.group:
            line = f"{prepared.prop.group}.{line}"
        line += _parameter_text(params, version) + ":"

        if quoted_printable:
            # folded with soft line breaks instead of leading whitespace
            self.stream.write(_soft_wrap(line, value, self.line_length) + "\r\n")
        else:
            self._write_line(line + value)

    def _write_line(self, line: str) -> None:
        if self.line_length:
            vobject.base.foldOneLine(self.stream, line, self.line_length)
        else:
            self.stream.write(line + "\r\n")


def _parameter_text(params: VCardParameters, version: VCardVersion) -> str:
    out = []
    for name, values in params.items():
        if version is V2_1 and name == TYPE:
            out.extend(f";TYPE={_parameter_value(v)}" for v in values)
        else:
            out.append(f";{name}=" + ",".join(_parameter_value(v) for v in values))
    return "".join(out)


def _parameter_value(value: str) -> str:
    value = value.replace('"', "'").replace("\r\n", " ").replace("\n", " ")
    return vobject.base.dquoteEscape(value)


def _needs_quoted_printable(value: str) -> bool:
    return "\n" in value or "\r" in value or not value.isascii()


def _quoted_printable(value: str) -> str:
    encoded = binascii.b2a_qp(value.encode("utf-8"), istext=False).decode("ascii")
    # drop the 76-column soft breaks; _soft_wrap places its own
    return encoded.replace("=\n", "")


def _soft_wrap(prefix: str, encoded: str, limit: int | None) -> str:
    """Join a property prefix and its quoted-printable value, breaking the
    value with soft line breaks so no physical line exceeds `limit`.

    Escapes (`=XX`) are never split. The prefix itself is not broken.
    """
    if not limit:
        return prefix + encoded
    lines: list[str] = []
    line, start = prefix, len(prefix)
    for token in _QP_TOKEN_RE.findall(encoded):
        # leave room for the trailing "="
        if len(line) + len(token) >= limit and len(line) > start:
            lines.append(line + "=")
            line, start = "", 0
        line += token
    lines.append(line)
    return "\r\n".join(lines)
