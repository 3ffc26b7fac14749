from __future__ import annotations

from .. import datatype
from ..errors import SkipMeError
from ..model import Telephone
from ..uris import TelUri
from ..values import JCardValue, escape, unescape
from ..version import VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V4_0 = VCardVersion.V4_0


class TelephoneScribe(VCardPropertyScribe[Telephone]):
    """TEL: free text, or a `tel:` URI at 4.0.

    Below 4.0 a URI is flattened to its number with an " x" extension.
    """

    property_class = Telephone
    property_name = "TEL"

    def _default_data_type(self, version):
        return datatype.TEXT

    def _data_type(self, prop, version):
        if prop.text is None and prop.uri is not None and version is V4_0:
            return datatype.URI
        return datatype.TEXT

    def _write_text(self, prop, version):
        if prop.text is not None:
            return escape(prop.text, version)
        if prop.uri is not None:
            if version is V4_0:
                return str(prop.uri)
            return self._flatten(prop.uri)
        raise SkipMeError("Property has neither a text nor a tel URI value.")

    def _parse_text(self, value, data_type, version, params, warnings):
        return self._parse(unescape(value), data_type, warnings)

    def _write_xml(self, prop, element):
        if prop.text is not None:
            element.append("text", prop.text)
        elif prop.uri is not None:
            element.append("uri", str(prop.uri))
        else:
            raise SkipMeError("Property has neither a text nor a tel URI value.")

    def _parse_xml(self, element, params, warnings):
        uri = element.first("uri")
        if uri is not None:
            return self._parse(uri, datatype.URI, warnings)
        text = element.first("text")
        if text is not None:
            return Telephone(text=text)
        raise missing_xml_elements("uri", "text")

    def _parse_html(self, element, params, warnings):
        for t in element.types():
            params.add_type(t)
        href = element.attr("href").strip()
        if element.tag == "a" and href.lower().startswith("tel:"):
            try:
                return Telephone(uri=TelUri.parse(href))
            except ValueError:
                return Telephone(text=href[len("tel:"):])
        return Telephone(text=element.value())

    def _write_json(self, prop):
        if prop.text is not None:
            return JCardValue.single(prop.text)
        if prop.uri is not None:
            return JCardValue.single(str(prop.uri))
        raise SkipMeError("Property has neither a text nor a tel URI value.")

    def _parse_json(self, value, data_type, params, warnings):
        return self._parse(value.as_single(), data_type, warnings)

    def _validate(self, prop, version, vcard, warnings):
        if prop.text is None and prop.uri is None:
            warnings.append("TEL has neither a text nor a tel URI value.")
        elif prop.text is None and version is not V4_0:
            warnings.append(f"tel URIs are not supported in version {version}; the number is written as text.")

    # ──────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _flatten(uri: TelUri) -> str:
        number = uri.number
        if uri.extension is not None:
            number += " x" + uri.extension
        return number

    @staticmethod
    def _parse(value: str, data_type, warnings: list[str]) -> Telephone:
        if data_type == datatype.URI:
            try:
                return Telephone(uri=TelUri.parse(value))
            except ValueError:
                warnings.append(f'Could not parse "{value}" as a tel URI. Treating it as text.')
        return Telephone(text=value)
