"""hCard: vCards embedded in HTML with microformat class names (read only)."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TextIO

from lxml import html as lxml_html

from .elements import HCardElement
from .errors import CannotParseError
from .model import RawProperty, VCard
from .scribes.registry import ScribeIndex
from .stream import DocumentWarnings, StreamReader
from .version import VCardVersion

logger = logging.getLogger(__name__)

# hCard class names that differ from the vCard property name
_ALIASES = {
    "category": "CATEGORIES",
    "class": "CLASS",
}


class HCardReader(StreamReader):
    """Reads every element classed `vcard` in an HTML page.

    Relative links are resolved against `base_url`, or the page's own
    `<base href>`. hCards are read as vCard 3.0.
    """

    def __init__(self, source: str | bytes | TextIO, base_url: str | None = None, index: ScribeIndex | None = None):
        super().__init__(index)
        self.source = source
        self.base_url = base_url

    def _read_documents(self) -> Iterator[VCard]:
        text = self.source if isinstance(self.source, (str, bytes)) else self.source.read()
        document = lxml_html.document_fromstring(text)
        base_url = self.base_url
        if base_url is None:
            for base in document.iter("base"):
                base_url = base.get("href") or None
                break

        for vcard_element in document.find_class("vcard"):
            if _owner(vcard_element) is not None:
                logger.debug("Skipping nested hCard")
                continue
            warnings = self._start_document()
            vcard = VCard(version=VCardVersion.V3_0)
            for element in vcard_element.iterdescendants():
                if not isinstance(element.tag, str) or _owner(element) is not vcard_element:
                    continue
                for class_name in (element.get("class") or "").split():
                    self._read_property(element, class_name, vcard, warnings, base_url)
            yield vcard

    def _read_property(self, element, class_name: str, vcard: VCard, warnings: DocumentWarnings, base_url: str | None) -> None:
        name = _ALIASES.get(class_name.lower(), class_name.upper())
        scribe = self.index.get_property_scribe(name)
        if scribe is None or scribe.property_class is RawProperty:
            return
        entry = warnings.start_property(name)
        try:
            result = scribe.parse_html(HCardElement(element, base_url))
        except CannotParseError as e:
            entry.messages.append(f"Property could not be parsed and was skipped: {e}")
            logger.debug("Cannot parse hCard %s: %s", name, e)
            return
        entry.messages.extend(result.warnings)
        vcard.add(result.property)


def _owner(element):
    """The nearest enclosing `.vcard` element, or None."""
    for ancestor in element.iterancestors():
        if "vcard" in (ancestor.get("class") or "").split():
            return ancestor
    return None
