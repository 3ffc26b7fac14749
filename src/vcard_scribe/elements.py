"""Thin wrappers around the XML and HTML elements handed to scribes."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from urllib.parse import urljoin

from lxml import html as lxml_html

from .version import XCARD_NAMESPACE


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def namespace_of(tag: str) -> str | None:
    return tag[1:].split("}", 1)[0] if tag.startswith("{") else None


# ── xCard ─────────────────────────────────────────────────────────────────────

class XCardElement:
    """A property element inside `<vcard>`; children are named by datatype.

    Readers hand in `xml.etree` elements, the writer hands in `lxml.etree` ones.
    """

    def __init__(self, element: ET.Element, namespace: str = XCARD_NAMESPACE):
        self.element = element
        self.namespace = namespace

    @property
    def name(self) -> str:
        return local_name(self.element.tag)

    def _qname(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}"

    def children(self) -> list[ET.Element]:
        return [c for c in self.element if namespace_of(c.tag) == self.namespace]

    def first(self, *names: str) -> str | None:
        """Text of the first child with one of the given names ("" if empty)."""
        wanted = set(names)
        for child in self.children():
            if local_name(child.tag) in wanted:
                return child.text or ""
        return None

    def all(self, name: str) -> list[str]:
        return [c.text or "" for c in self.children() if local_name(c.tag) == name]

    def first_child(self) -> tuple[str, str] | None:
        """(local name, text) of the first value child, skipping `<parameters>`."""
        for child in self.children():
            tag = local_name(child.tag)
            if tag != "parameters":
                return tag, child.text or ""
        return None

    def append(self, name: str, value: str | None):
        # the child must come from the same library as the parent
        child = self.element.makeelement(self._qname(name), {})
        child.text = value or ""
        self.element.append(child)
        return child

    def append_all(self, name: str, values: list[str]) -> None:
        for value in values:
            self.append(name, value)

    def append_datatype(self, datatype_name: str | None, value: str | None):
        return self.append(datatype_name or "unknown", value)


# ── hCard ─────────────────────────────────────────────────────────────────────

_SKIP_TEXT_TAGS = {"script", "style", "del"}
_WS_RE = re.compile(r"\s+")


class HCardElement:
    """An HTML element classed with a property name inside a `.vcard`."""

    def __init__(self, element: lxml_html.HtmlElement, base_url: str | None = None):
        self.element = element
        self.base_url = base_url

    @property
    def tag(self) -> str:
        return str(self.element.tag).lower()

    def classes(self) -> list[str]:
        return (self.element.get("class") or "").split()

    def attr(self, name: str) -> str:
        return self.element.get(name) or ""

    def absolute_url(self, name: str) -> str:
        """An href/src attribute resolved against the page URL."""
        value = self.attr(name).strip()
        if not value:
            return ""
        return urljoin(self.base_url, value) if self.base_url else value

    def value(self) -> str:
        """The property value following the microformat value rules."""
        return _element_value(self.element)

    def first_value(self, class_name: str) -> str | None:
        for el in self.element.find_class(class_name):
            return _element_value(el)
        return None

    def all_values(self, class_name: str) -> list[str]:
        return [_element_value(el) for el in self.element.find_class(class_name)]

    def types(self) -> list[str]:
        return [v.lower() for v in self.all_values("type") if v]

    def find(self, class_name: str) -> list[HCardElement]:
        return [HCardElement(el, self.base_url) for el in self.element.find_class(class_name)]


def _element_value(el: lxml_html.HtmlElement) -> str:
    values = el.find_class("value")
    if values:
        return "".join(_element_value_no_value_class(v) for v in values)
    return _element_value_no_value_class(el)


def _element_value_no_value_class(el: lxml_html.HtmlElement) -> str:
    tag = str(el.tag).lower()
    if tag in ("abbr", "acronym") and el.get("title") is not None:
        return el.get("title", "").strip()
    if tag in ("img", "area") and el.get("alt") is not None:
        return el.get("alt", "").strip()
    if tag in ("data", "input") and el.get("value") is not None:
        return el.get("value", "").strip()
    return _visible_text(el).strip()


def _visible_text(el: lxml_html.HtmlElement) -> str:
    out: list[str] = []

    def walk(node, root: bool) -> None:
        if not isinstance(node.tag, str):
            # comments and processing instructions
            out.append(_WS_RE.sub(" ", node.tail or ""))
            return
        tag = node.tag.lower()
        if not root and (tag in _SKIP_TEXT_TAGS or "type" in (node.get("class") or "").split()):
            out.append(_WS_RE.sub(" ", node.tail or ""))
            return
        if tag == "br":
            out.append("\n")
        else:
            out.append(_WS_RE.sub(" ", node.text or ""))
            for child in node:
                walk(child, False)
        if not root:
            out.append(_WS_RE.sub(" ", node.tail or ""))

    walk(el, True)
    return "\n".join(line.strip() for line in "".join(out).split("\n"))
