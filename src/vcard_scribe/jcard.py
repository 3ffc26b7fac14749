"""jCard: the JSON representation of vCard 4.0 (RFC 7095)."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any, TextIO

from .datatype import VCardDataType
from .errors import CannotParseError, SkipMeError
from .model import VCard
from .parameters import VALUE, VCardParameters
from .scribes.registry import ScribeIndex
from .stream import DocumentWarnings, StreamReader, StreamWriter
from .values import JCardValue
from .version import VCardVersion

logger = logging.getLogger(__name__)

V4_0 = VCardVersion.V4_0


# ── Reading ───────────────────────────────────────────────────────────────────

class JCardReader(StreamReader):
    """Reads one `["vcard", [...]]` array or a list of them.

    Malformed JSON raises `json.JSONDecodeError`; JSON that is not jCard
    raises `ValueError`.
    """

    def __init__(self, source: str | TextIO | list, index: ScribeIndex | None = None):
        super().__init__(index)
        self.source = source

    def _data(self) -> Any:
        if isinstance(self.source, list):
            return self.source
        if isinstance(self.source, str):
            return json.loads(self.source)
        return json.load(self.source)

    def _read_documents(self) -> Iterator[VCard]:
        data = self._data()
        if _is_jcard(data):
            documents = [data]
        elif isinstance(data, list) and all(_is_jcard(d) for d in data):
            documents = data
        else:
            raise ValueError('Not a jCard document: expected ["vcard", [...]].')

        for document in documents:
            warnings = self._start_document()
            vcard = VCard(version=V4_0)
            for entry in document[1]:
                self._read_property(entry, vcard, warnings)
            yield vcard

    def _read_property(self, entry: Any, vcard: VCard, warnings: DocumentWarnings) -> None:
        if not (isinstance(entry, list) and len(entry) >= 4 and isinstance(entry[0], str)):
            warnings.add(f"Malformed property entry skipped: {json.dumps(entry)[:60]}")
            return
        name, raw_params, type_name, *values = entry
        if name.lower() == "version":
            if values != ["4.0"]:
                warnings.add(f"jCard version must be 4.0, found {values!r}.")
            return

        params = VCardParameters()
        group = None
        for key, value in (raw_params or {}).items():
            if key.lower() == "group":
                group = str(value)
                continue
            for item in value if isinstance(value, list) else [value]:
                params.put(key, str(item))

        scribe = self.index.scribe_or_raw(name)
        data_type = None
        if isinstance(type_name, str) and type_name.lower() != "unknown":
            data_type = VCardDataType.get(type_name)
        if data_type is None:
            data_type = scribe.default_data_type(V4_0)

        prop_warnings = warnings.start_property(name.upper())
        try:
            result = scribe.parse_json(JCardValue(values), data_type, params)
        except CannotParseError as e:
            prop_warnings.messages.append(f"Property could not be parsed and was skipped: {e}")
            logger.debug("Cannot parse %s: %s", name, e)
            return
        result.property.group = group
        prop_warnings.messages.extend(result.warnings)
        vcard.add(result.property)


def _is_jcard(data: Any) -> bool:
    return (
        isinstance(data, list)
        and len(data) == 2
        and data[0] == "vcard"
        and isinstance(data[1], list)
    )


# ── Writing ───────────────────────────────────────────────────────────────────

class JCardWriter(StreamWriter):
    """Collects jCard arrays; jCard is always written at 4.0.

    More than one document is wrapped in an outer array.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        strict: bool = False,
        add_prodid: bool = True,
        pretty: bool = False,
        index: ScribeIndex | None = None,
    ):
        super().__init__(V4_0, strict, add_prodid, index)
        self.stream = stream
        self.pretty = pretty
        self.documents: list[list] = []

    def write(self, vcard: VCard) -> DocumentWarnings:
        entries: list[list] = [["version", {}, "text", "4.0"]]
        for prepared in self._prepare(vcard, V4_0):
            try:
                value = prepared.scribe.write_json(prepared.prop)
            except SkipMeError as e:
                self._skipped(prepared, e)
                continue
            params: dict[str, Any] = {}
            for name, values in prepared.parameters.items():
                if name == VALUE:
                    continue
                params[name.lower()] = values[0] if len(values) == 1 else values
            if prepared.prop.group:
                params["group"] = prepared.prop.group
            data_type = prepared.scribe.data_type(prepared.prop, V4_0)
            entries.append([
                prepared.name.lower(),
                params,
                data_type.name if data_type else "unknown",
                *value.values,
            ])
        self.documents.append(["vcard", entries])
        return self.warnings

    def write_all(self, vcards) -> list[DocumentWarnings]:
        return [self.write(vcard) for vcard in vcards]

    def to_data(self) -> list:
        return self.documents[0] if len(self.documents) == 1 else list(self.documents)

    def getvalue(self) -> str:
        return json.dumps(self.to_data(), indent=2 if self.pretty else None, ensure_ascii=False)

    def close(self) -> None:
        if self.stream is not None:
            self.stream.write(self.getvalue())
