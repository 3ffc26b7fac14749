"""xCard: the XML representation of vCard 4.0 (RFC 6351)."""
from __future__ import annotations

import copy
import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from typing import BinaryIO, TextIO

from lxml import etree

from .elements import XCardElement, local_name, namespace_of
from .errors import CannotParseError, SkipMeError
from .model import VCard, Xml
from .parameters import GEO, INDEX, LANGUAGE, PREF, TZ, VALUE, VCardParameters
from .scribes.raw import RawPropertyScribe
from .scribes.registry import ScribeIndex
from .stream import DocumentWarnings, StreamReader, StreamWriter
from .version import XCARD_NAMESPACE, VCardVersion

logger = logging.getLogger(__name__)

V4_0 = VCardVersion.V4_0

_PARAMETER_TYPES = {
    PREF: "integer",
    INDEX: "integer",
    GEO: "uri",
    TZ: "uri",
    LANGUAGE: "language-tag",
}


def _q(name: str) -> str:
    return f"{{{XCARD_NAMESPACE}}}{name}"


# ── Reading ───────────────────────────────────────────────────────────────────

class XCardReader(StreamReader):
    """Reads every `<vcard>` element of an xCard document.

    Malformed XML raises `xml.etree.ElementTree.ParseError`.
    """

    def __init__(self, source: str | bytes | TextIO | BinaryIO | ET.Element, index: ScribeIndex | None = None):
        super().__init__(index)
        self.source = source

    def _root(self) -> ET.Element:
        if isinstance(self.source, ET.Element):
            return self.source
        if isinstance(self.source, (str, bytes)):
            return ET.fromstring(self.source)
        return ET.parse(self.source).getroot()

    def _read_documents(self) -> Iterator[VCard]:
        root = self._root()
        if root.tag == _q("vcard"):
            vcard_elements = [root]
        else:
            vcard_elements = list(root.iter(_q("vcard")))
        for vcard_element in vcard_elements:
            warnings = self._start_document()
            vcard = VCard(version=V4_0)
            for child in vcard_element:
                self._read_child(child, vcard, warnings, None)
            yield vcard

    def _read_child(self, child: ET.Element, vcard: VCard, warnings: DocumentWarnings, group: str | None) -> None:
        if not isinstance(child.tag, str):
            return
        namespace, name = namespace_of(child.tag), local_name(child.tag)

        if namespace == XCARD_NAMESPACE and name == "group":
            for grandchild in child:
                self._read_child(grandchild, vcard, warnings, child.get("name"))
            return

        if namespace != XCARD_NAMESPACE:
            element = copy.copy(child)
            element.tail = None
            warnings.start_property("XML")
            prop = Xml(ET.tostring(element, encoding="unicode"))
            prop.group = group
            vcard.add(prop)
            return

        scribe = self.index.get_property_scribe_by_qname(namespace, name)
        if scribe is None:
            scribe = RawPropertyScribe(name.upper())
        entry = warnings.start_property(scribe.property_name)
        try:
            result = scribe.parse_xml(XCardElement(child), _read_parameters(child))
        except CannotParseError as e:
            entry.messages.append(f"Property could not be parsed and was skipped: {e}")
            logger.debug("Cannot parse <%s>: %s", name, e)
            return
        result.property.group = group
        entry.messages.extend(result.warnings)
        vcard.add(result.property)


def _read_parameters(element: ET.Element) -> VCardParameters:
    params = VCardParameters()
    parameters = element.find(_q("parameters"))
    if parameters is None:
        return params
    for param in parameters:
        name = local_name(param.tag).upper()
        for value in param:
            params.put(name, value.text or "")
    return params


# ── Writing ───────────────────────────────────────────────────────────────────

class XCardWriter(StreamWriter):
    """Builds one `<vcards>` document; xCard is always written at 4.0.

    The tree is an `lxml.etree` tree with the xCard namespace as the default
    namespace. Call `getvalue()` for the XML text, or `close()` to write it
    to `stream`.
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
        self.root = etree.Element(_q("vcards"), nsmap={None: XCARD_NAMESPACE})

    def write(self, vcard: VCard) -> DocumentWarnings:
        vcard_element = etree.SubElement(self.root, _q("vcard"))
        groups: dict[str, etree._Element] = {}

        def parent_for(group: str | None) -> etree._Element:
            if not group:
                return vcard_element
            if group not in groups:
                groups[group] = etree.SubElement(vcard_element, _q("group"), name=group)
            return groups[group]

        for prepared in self._prepare(vcard, V4_0):
            prop = prepared.prop
            if isinstance(prop, Xml):
                try:
                    foreign = etree.fromstring((prop.value or "").encode("utf-8"))
                except etree.XMLSyntaxError as e:
                    self._skipped(prepared, SkipMeError(f"Invalid XML value: {e}"))
                    continue
                if namespace_of(foreign.tag) is None:
                    self._skipped(prepared, SkipMeError("XML value must be in a namespace."))
                    continue
                parent_for(prop.group).append(foreign)
                continue

            namespace, name = prepared.scribe.qname
            try:
                element = etree.Element(f"{{{namespace}}}{name}")
                _write_parameters(element, prepared.parameters)
                prepared.scribe.write_xml(prop, XCardElement(element))
            except SkipMeError as e:
                self._skipped(prepared, e)
                continue
            except ValueError as e:
                # lxml rejects names and text that are not valid XML
                self._skipped(prepared, SkipMeError(f"Not representable in XML: {e}"))
                continue
            parent_for(prop.group).append(element)
        return self.warnings

    def write_all(self, vcards) -> list[DocumentWarnings]:
        return [self.write(vcard) for vcard in vcards]

    def getvalue(self) -> str:
        data = etree.tostring(
            self.root, encoding="utf-8", xml_declaration=True, pretty_print=self.pretty
        )
        return data.decode("utf-8")

    def close(self) -> None:
        if self.stream is not None:
            self.stream.write(self.getvalue())


def _write_parameters(element: etree._Element, params: VCardParameters) -> None:
    # the data type is the name of the value element
    items = [(name, values) for name, values in params.items() if name != VALUE]
    if not items:
        return
    parameters = etree.SubElement(element, _q("parameters"))
    for name, values in items:
        param = etree.SubElement(parameters, _q(name.lower()))
        value_type = _PARAMETER_TYPES.get(name, "text")
        for value in values:
            etree.SubElement(param, _q(value_type)).text = value
