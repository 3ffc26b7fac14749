"""Shared reader/writer plumbing and the warning containers they fill."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .errors import ScribeNotFoundError, SkipMeError
from .model import ProductId, VCard, VCardProperty
from .normalize import preferred_by_kind, property_name
from .parameters import VCardParameters
from .scribes.base import VCardPropertyScribe
from .scribes.registry import ScribeIndex
from .version import VCardVersion

logger = logging.getLogger(__name__)

PRODID = "-//vcard-scribe//EN"


# ── Warnings ──────────────────────────────────────────────────────────────────

@dataclass
class PropertyWarnings:
    property_name: str | None
    line_number: int | None = None
    messages: list[str] = field(default_factory=list)

    def formatted(self) -> list[str]:
        prefix = ""
        if self.line_number is not None:
            prefix = f"Line {self.line_number}"
            if self.property_name:
                prefix += f" ({self.property_name})"
        elif self.property_name:
            prefix = self.property_name
        return [f"{prefix}: {m}" if prefix else m for m in self.messages]


@dataclass
class DocumentWarnings:
    """Warnings for one document: one entry per processed property, in order."""

    properties: list[PropertyWarnings] = field(default_factory=list)
    general: list[str] = field(default_factory=list)

    def start_property(self, name: str | None, line_number: int | None = None) -> PropertyWarnings:
        entry = PropertyWarnings(name, line_number)
        self.properties.append(entry)
        return entry

    def add(self, message: str, line_number: int | None = None) -> None:
        self.general.append(f"Line {line_number}: {message}" if line_number is not None else message)

    def as_lists(self) -> list[list[str]]:
        return [list(p.messages) for p in self.properties]

    def __iter__(self) -> Iterator[str]:
        yield from self.general
        for entry in self.properties:
            yield from entry.formatted()

    def __len__(self) -> int:
        return len(self.general) + sum(len(p.messages) for p in self.properties)

    def __bool__(self) -> bool:
        return len(self) > 0


# ── Reading ───────────────────────────────────────────────────────────────────

class StreamReader:
    """Pull-based reader: documents are parsed one at a time, on demand.

    `warnings` holds the warnings of the document most recently returned.
    The sequence is forward-only; a consumed document cannot be re-read.
    """

    def __init__(self, index: ScribeIndex | None = None):
        self.index = index or ScribeIndex()
        self.warnings = DocumentWarnings()
        self._documents: Iterator[VCard] | None = None

    def _read_documents(self) -> Iterator[VCard]:
        raise NotImplementedError

    def _start_document(self) -> DocumentWarnings:
        self.warnings = DocumentWarnings()
        return self.warnings

    def read_next(self) -> VCard | None:
        if self._documents is None:
            self._documents = self._read_documents()
        return next(self._documents, None)

    def read_all(self) -> list[VCard]:
        return list(self)

    def __iter__(self) -> Iterator[VCard]:
        while True:
            vcard = self.read_next()
            if vcard is None:
                return
            yield vcard


# ── Writing ───────────────────────────────────────────────────────────────────

@dataclass
class PreparedProperty:
    prop: VCardProperty
    scribe: VCardPropertyScribe
    name: str
    parameters: VCardParameters
    warnings: PropertyWarnings


class StreamWriter:
    """Base for the text, xCard and jCard writers.

    target_version: None writes each document at its own version.
    strict: drop properties, TYPE values and parameters the target version
    does not support instead of writing them best-effort.
    add_prodid: add a PRODID property (3.0 and 4.0) if the document has none.
    """

    def __init__(
        self,
        target_version: VCardVersion | None = None,
        strict: bool = False,
        add_prodid: bool = True,
        index: ScribeIndex | None = None,
    ):
        self.target_version = target_version
        self.strict = strict
        self.add_prodid = add_prodid
        self.index = index or ScribeIndex()
        self.warnings = DocumentWarnings()

    def version_for(self, vcard: VCard) -> VCardVersion:
        return self.target_version or vcard.version

    def _properties(self, vcard: VCard, version: VCardVersion) -> list[VCardProperty]:
        props = list(vcard.properties)
        if (
            self.add_prodid
            and version is not VCardVersion.V2_1
            and not any(isinstance(p, ProductId) for p in props)
        ):
            props.insert(0, ProductId(PRODID))
        return props

    def _prepare(self, vcard: VCard, version: VCardVersion) -> Iterator[PreparedProperty]:
        """Resolve scribes and parameters for every property to be written.

        Starts a fresh `warnings` container for the document.
        """
        self.warnings = DocumentWarnings()
        props = self._properties(vcard, version)
        preferred = preferred_by_kind(props)
        for prop in props:
            scribe = self.index.get_property_scribe_for(prop)
            if scribe is None:
                raise ScribeNotFoundError(
                    f"No scribe found for property class {type(prop).__name__}. "
                    "Register one with ScribeIndex.register()."
                )
            name = property_name(scribe, prop)
            entry = self.warnings.start_property(name)
            if not scribe.is_supported(version):
                if self.strict:
                    entry.messages.append(f"Property is not supported in version {version}; skipped.")
                    logger.debug("Skipping %s: not supported in %s", name, version)
                    continue
                entry.messages.append(f"Property is not supported in version {version}; written anyway.")
            params, messages = scribe.prepare_parameters(prop, version, props, self.strict, preferred)
            entry.messages.extend(messages)
            yield PreparedProperty(prop, scribe, name, params, entry)

    @staticmethod
    def _skipped(prepared: PreparedProperty, error: SkipMeError) -> None:
        prepared.warnings.messages.append(f"Property skipped: {error}")
        logger.debug("Skipping %s: %s", prepared.name, error)
