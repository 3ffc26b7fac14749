"""Scribes for properties whose value is a single text, uri or list."""
from __future__ import annotations

from .. import datatype
from ..datatype import VCardDataType
from ..errors import CannotParseError
from ..model import (
    ClientPidMap,
    Email,
    Gender,
    Impp,
    TextListProperty,
    TextProperty,
    UriProperty,
    Url,
    Xml,
)
from ..values import (
    JCardValue,
    escape,
    parse_list,
    parse_semi_structured,
    unescape,
    write_list,
    write_structured,
)
from ..version import ALL_VERSIONS, VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0


# ── Single text ───────────────────────────────────────────────────────────────

class TextPropertyScribe(VCardPropertyScribe[TextProperty]):
    """FN, NOTE, TITLE and every other property holding one text value."""

    def __init__(
        self,
        property_class: type[TextProperty],
        property_name: str,
        versions: frozenset[VCardVersion] = ALL_VERSIONS,
        data_type: VCardDataType = datatype.TEXT,
    ):
        super().__init__(property_class, property_name)
        self.supported_versions = versions
        self._fixed_data_type = data_type

    def _default_data_type(self, version):
        return self._fixed_data_type

    def _write_text(self, prop, version):
        return escape(prop.value or "", version)

    def _parse_text(self, value, data_type, version, params, warnings):
        return self.property_class(unescape(value))

    def _write_json(self, prop):
        return JCardValue.single(prop.value or "")

    def _validate(self, prop, version, vcard, warnings):
        if prop.value is None:
            warnings.append(f"{self.property_name} has no value.")


class EmailScribe(TextPropertyScribe):
    def __init__(self):
        super().__init__(Email, "EMAIL")

    def _parse_html(self, element, params, warnings):
        href = element.attr("href").strip()
        if element.tag == "a" and href.lower().startswith("mailto:"):
            # drop "?subject=..." style headers
            value = href[len("mailto:"):].split("?", 1)[0]
        else:
            value = element.value()
        for t in element.types():
            params.add_type(t)
        return Email(value)


class XmlScribe(TextPropertyScribe):
    """XML: serialized XML element. In xCard the element is written in place."""

    def __init__(self):
        super().__init__(Xml, "XML", frozenset({V4_0}))

    def _parse_html(self, element, params, warnings):
        raise CannotParseError("XML properties cannot be read from hCard.")


# ── Single uri ────────────────────────────────────────────────────────────────

class UriPropertyScribe(VCardPropertyScribe[UriProperty]):
    def __init__(
        self,
        property_class: type[UriProperty],
        property_name: str,
        versions: frozenset[VCardVersion] = ALL_VERSIONS,
    ):
        super().__init__(property_class, property_name)
        self.supported_versions = versions

    def _default_data_type(self, version):
        return datatype.URI

    def _write_text(self, prop, version):
        return escape(prop.value or "", version)

    def _parse_text(self, value, data_type, version, params, warnings):
        return self.property_class(unescape(value))

    def _write_json(self, prop):
        return JCardValue.single(prop.value or "")

    def _parse_html(self, element, params, warnings):
        url = ""
        if element.tag in ("a", "area", "link"):
            url = element.absolute_url("href")
        elif element.tag in ("img", "object", "audio", "video", "source", "embed"):
            url = element.absolute_url("src") or element.absolute_url("data")
        return self.property_class(url or element.value())

    def _validate(self, prop, version, vcard, warnings):
        if prop.value is None:
            warnings.append(f"{self.property_name} has no value.")


class UrlScribe(UriPropertyScribe):
    def __init__(self):
        super().__init__(Url, "URL")

    def _default_data_type(self, version):
        return datatype.URL if version is V2_1 else datatype.URI


class UidScribe(UriPropertyScribe):
    """UID is free text before 4.0 and a URI (usually `urn:uuid:`) at 4.0."""

    def _default_data_type(self, version):
        return datatype.URI if version is V4_0 else datatype.TEXT


class ImppScribe(UriPropertyScribe):
    """IMPP; hCard links use the protocol as the href scheme (`xmpp:`, `aim:`)."""

    def __init__(self):
        super().__init__(Impp, "IMPP", frozenset({V3_0, V4_0}))

    def _parse_html(self, element, params, warnings):
        href = element.attr("href").strip()
        if not href:
            raise CannotParseError("No href attribute found.")
        for t in element.types():
            params.add_type(t)
        return Impp(href)

    def _validate(self, prop, version, vcard, warnings):
        super()._validate(prop, version, vcard, warnings)
        if prop.value is not None and ":" not in prop.value:
            warnings.append(f'IMPP value "{prop.value}" has no protocol scheme.')


# ── Text lists ────────────────────────────────────────────────────────────────

class TextListPropertyScribe(VCardPropertyScribe[TextListProperty]):
    """CATEGORIES and NICKNAME: comma-separated text values."""

    def __init__(
        self,
        property_class: type[TextListProperty],
        property_name: str,
        versions: frozenset[VCardVersion] = frozenset({V3_0, V4_0}),
    ):
        super().__init__(property_class, property_name)
        self.supported_versions = versions

    def _default_data_type(self, version):
        return datatype.TEXT

    def _write_text(self, prop, version):
        return write_list(prop.values, version)

    def _parse_text(self, value, data_type, version, params, warnings):
        return self.property_class(parse_list(value))

    def _write_xml(self, prop, element):
        element.append_all("text", prop.values)

    def _parse_xml(self, element, params, warnings):
        values = element.all("text")
        if not values:
            raise missing_xml_elements("text")
        return self.property_class(values)

    def _write_json(self, prop):
        if not prop.values:
            return JCardValue.single("")
        return JCardValue.multi(list(prop.values))

    def _parse_json(self, value, data_type, params, warnings):
        return self.property_class([v for v in value.as_multi() if v != ""])

    def _validate(self, prop, version, vcard, warnings):
        if not prop.values:
            warnings.append(f"{self.property_name} has no values.")


# ── Gender ────────────────────────────────────────────────────────────────────

class GenderScribe(VCardPropertyScribe[Gender]):
    property_class = Gender
    property_name = "GENDER"
    supported_versions = frozenset({V4_0})

    def _default_data_type(self, version):
        return datatype.TEXT

    def _write_text(self, prop, version):
        out = escape(prop.sex or "", version)
        if prop.identity is not None:
            out += ";" + escape(prop.identity, version)
        return out

    def _parse_text(self, value, data_type, version, params, warnings):
        parts = parse_semi_structured(value, 2)
        sex = parts[0] or None
        identity = parts[1] if len(parts) > 1 else None
        return Gender(sex.upper() if sex else None, identity)

    def _write_xml(self, prop, element):
        if prop.sex is not None:
            element.append("sex", prop.sex)
        if prop.identity is not None:
            element.append("identity", prop.identity)

    def _parse_xml(self, element, params, warnings):
        sex = element.first("sex")
        identity = element.first("identity")
        if sex is None and identity is None:
            raise missing_xml_elements("sex", "identity")
        return Gender(sex.upper() if sex else None, identity)

    def _write_json(self, prop):
        if prop.identity is None:
            return JCardValue.single(prop.sex or "")
        return JCardValue.structured_of(prop.sex, prop.identity)

    def _parse_json(self, value, data_type, params, warnings):
        components = value.as_structured()
        sex = components[0][0] if components and components[0] else None
        identity = components[1][0] if len(components) > 1 and components[1] else None
        return Gender(sex.upper() if sex else None, identity)

    def _validate(self, prop, version, vcard, warnings):
        if prop.sex is not None and prop.sex not in ("M", "F", "O", "N", "U"):
            warnings.append(f'Unknown sex value "{prop.sex}".')


# ── CLIENTPIDMAP ──────────────────────────────────────────────────────────────

class ClientPidMapScribe(VCardPropertyScribe[ClientPidMap]):
    property_class = ClientPidMap
    property_name = "CLIENTPIDMAP"
    supported_versions = frozenset({V4_0})

    def _default_data_type(self, version):
        return datatype.TEXT

    def _write_text(self, prop, version):
        return write_structured([str(prop.pid) if prop.pid is not None else None, prop.uri], version)

    def _parse_text(self, value, data_type, version, params, warnings):
        parts = parse_semi_structured(value, 2)
        if len(parts) < 2:
            raise CannotParseError(f'Incorrect data format. Expected "pid;uri", got "{value}".')
        return self._build(parts[0], parts[1])

    def _write_xml(self, prop, element):
        element.append("sourceid", "" if prop.pid is None else str(prop.pid))
        element.append("uri", prop.uri)

    def _parse_xml(self, element, params, warnings):
        pid = element.first("sourceid")
        uri = element.first("uri")
        if pid is None or uri is None:
            raise missing_xml_elements("sourceid", "uri")
        return self._build(pid, uri)

    def _write_json(self, prop):
        return JCardValue.structured_of(prop.pid, prop.uri)

    def _parse_json(self, value, data_type, params, warnings):
        components = value.as_structured()
        if len(components) < 2 or not components[0] or not components[1]:
            raise CannotParseError("Incorrect data format. Expected a [pid, uri] structured value.")
        return self._build(components[0][0], components[1][0])

    @staticmethod
    def _build(pid: str, uri: str) -> ClientPidMap:
        try:
            number = int(pid.strip())
        except ValueError as e:
            raise CannotParseError(f'Could not parse the pid "{pid}" as an integer.') from e
        return ClientPidMap(number, uri)

    def _validate(self, prop, version, vcard, warnings):
        if prop.pid is None:
            warnings.append("CLIENTPIDMAP has no pid.")
        if prop.uri is None:
            warnings.append("CLIENTPIDMAP has no URI.")
