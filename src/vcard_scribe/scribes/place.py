"""Properties holding either a URI or free text: BIRTHPLACE, DEATHPLACE, RELATED."""
from __future__ import annotations

from .. import datatype
from ..errors import SkipMeError
from ..model import Related
from ..values import JCardValue, escape, unescape
from ..version import VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V4_0 = VCardVersion.V4_0


class _UriOrTextScribe(VCardPropertyScribe):
    supported_versions = frozenset({V4_0})
    _default = datatype.TEXT

    def _default_data_type(self, version):
        return self._default

    def _data_type(self, prop, version):
        if prop.text is not None:
            return datatype.TEXT
        if prop.uri is not None:
            return datatype.URI
        return self._default

    def _value(self, prop) -> tuple[str, str]:
        if prop.text is not None:
            return "text", prop.text
        if prop.uri is not None:
            return "uri", prop.uri
        raise SkipMeError("Property has neither a URI nor a text value.")

    def _write_text(self, prop, version):
        kind, value = self._value(prop)
        return escape(value, version) if kind == "text" else value

    def _parse_text(self, value, data_type, version, params, warnings):
        value = unescape(value)
        if data_type == datatype.URI:
            return self.property_class(uri=value)
        return self.property_class(text=value)

    def _write_xml(self, prop, element):
        element.append(*self._value(prop))

    def _parse_xml(self, element, params, warnings):
        uri = element.first("uri")
        if uri is not None:
            return self.property_class(uri=uri)
        text = element.first("text")
        if text is not None:
            return self.property_class(text=text)
        raise missing_xml_elements("uri", "text")

    def _parse_html(self, element, params, warnings):
        href = element.absolute_url("href")
        if element.tag == "a" and href:
            return self.property_class(uri=href)
        return self.property_class(text=element.value())

    def _write_json(self, prop):
        return JCardValue.single(self._value(prop)[1])

    def _parse_json(self, value, data_type, params, warnings):
        if data_type == datatype.URI:
            return self.property_class(uri=value.as_single())
        return self.property_class(text=value.as_single())

    def _validate(self, prop, version, vcard, warnings):
        if prop.uri is None and prop.text is None:
            warnings.append(f"{self.property_name} has neither a URI nor a text value.")


class PlacePropertyScribe(_UriOrTextScribe):
    """BIRTHPLACE and DEATHPLACE; text wins when both are set."""


class RelatedScribe(_UriOrTextScribe):
    """RELATED defaults to a URI (`urn:uuid:` of another vCard)."""

    property_class = Related
    property_name = "RELATED"
    _default = datatype.URI

    def _data_type(self, prop, version):
        if prop.uri is not None:
            return datatype.URI
        if prop.text is not None:
            return datatype.TEXT
        return self._default

    def _value(self, prop):
        if prop.uri is not None:
            return "uri", prop.uri
        if prop.text is not None:
            return "text", prop.text
        raise SkipMeError("Property has neither a URI nor a text value.")

    def _parse_text(self, value, data_type, version, params, warnings):
        value = unescape(value)
        if data_type == datatype.TEXT:
            return Related(text=value)
        return Related(uri=value)

    def _parse_json(self, value, data_type, params, warnings):
        if data_type == datatype.TEXT:
            return Related(text=value.as_single())
        return Related(uri=value.as_single())
