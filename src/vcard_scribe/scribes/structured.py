"""N, ADR and ORG: values made of `;`-separated components."""
from __future__ import annotations

from .. import datatype
from ..errors import CannotParseError
from ..model import Address, Organization, StructuredName
from ..parameters import LABEL
from ..values import (
    JCardValue,
    StructuredIterator,
    escape,
    parse_semi_structured,
    parse_structured,
    write_structured,
)
from ..version import VCardVersion
from .base import VCardPropertyScribe

V4_0 = VCardVersion.V4_0


# ── N ─────────────────────────────────────────────────────────────────────────

_NAME_XML = ("surname", "given", "additional", "prefix", "suffix")
_NAME_HTML = ("family-name", "given-name", "additional-name", "honorific-prefix", "honorific-suffix")


class StructuredNameScribe(VCardPropertyScribe[StructuredName]):
    property_class = StructuredName
    property_name = "N"

    def _default_data_type(self, version):
        return datatype.TEXT

    def _write_text(self, prop, version):
        return write_structured(
            [prop.family, prop.given, prop.additional, prop.prefixes, prop.suffixes], version
        )

    def _parse_text(self, value, data_type, version, params, warnings):
        it = StructuredIterator(parse_structured(value))
        return StructuredName(
            family=it.next_value(),
            given=it.next_value(),
            additional=it.next_list(),
            prefixes=it.next_list(),
            suffixes=it.next_list(),
        )

    def _write_xml(self, prop, element):
        element.append(_NAME_XML[0], prop.family)
        element.append(_NAME_XML[1], prop.given)
        for name, values in zip(_NAME_XML[2:], (prop.additional, prop.prefixes, prop.suffixes)):
            if values:
                element.append_all(name, values)
            else:
                element.append(name, "")

    def _parse_xml(self, element, params, warnings):
        return StructuredName(
            family=element.first("surname") or None,
            given=element.first("given") or None,
            additional=[v for v in element.all("additional") if v],
            prefixes=[v for v in element.all("prefix") if v],
            suffixes=[v for v in element.all("suffix") if v],
        )

    def _parse_html(self, element, params, warnings):
        return StructuredName(
            family=element.first_value("family-name") or None,
            given=element.first_value("given-name") or None,
            additional=[v for v in element.all_values("additional-name") if v],
            prefixes=[v for v in element.all_values("honorific-prefix") if v],
            suffixes=[v for v in element.all_values("honorific-suffix") if v],
        )

    def _write_json(self, prop):
        return JCardValue.structured_of(
            prop.family, prop.given, prop.additional, prop.prefixes, prop.suffixes
        )

    def _parse_json(self, value, data_type, params, warnings):
        it = StructuredIterator(value.as_structured())
        return StructuredName(
            family=it.next_value(),
            given=it.next_value(),
            additional=it.next_list(),
            prefixes=it.next_list(),
            suffixes=it.next_list(),
        )


# ── ADR ───────────────────────────────────────────────────────────────────────

_ADR_FIELDS = ("po_box", "extended", "street", "locality", "region", "postal_code", "country")
_ADR_XML = ("pobox", "ext", "street", "locality", "region", "code", "country")
_ADR_HTML = (
    "post-office-box", "extended-address", "street-address", "locality",
    "region", "postal-code", "country-name",
)


class AddressScribe(VCardPropertyScribe[Address]):
    """ADR: always seven components, never fewer on the wire."""

    property_class = Address
    property_name = "ADR"

    def _default_data_type(self, version):
        return datatype.TEXT

    def _prepare_parameters(self, prop, params, version, siblings):
        # 2.1 and 3.0 carry the label as a separate LABEL property
        if version is not V4_0:
            params.remove_all(LABEL)

    def _write_text(self, prop, version):
        return write_structured(prop.components(), version)

    def _parse_text(self, value, data_type, version, params, warnings):
        if value == "":
            return Address()
        parts = parse_semi_structured(value)
        return self._from_components(parts)

    def _write_xml(self, prop, element):
        for name, component in zip(_ADR_XML, prop.components()):
            element.append(name, component)

    def _parse_xml(self, element, params, warnings):
        return self._from_components([element.first(name) for name in _ADR_XML])

    def _parse_html(self, element, params, warnings):
        for t in element.types():
            params.add_type(t)
        return self._from_components([element.first_value(name) for name in _ADR_HTML])

    def _write_json(self, prop):
        return JCardValue.structured_of(*prop.components())

    def _parse_json(self, value, data_type, params, warnings):
        components = value.as_structured()
        return self._from_components([",".join(c) for c in components])

    @staticmethod
    def _from_components(parts: list[str | None]) -> Address:
        values = [(p or None) for p in parts[: len(_ADR_FIELDS)]]
        values += [None] * (len(_ADR_FIELDS) - len(values))
        return Address(**dict(zip(_ADR_FIELDS, values)))

    def _validate(self, prop, version, vcard, warnings):
        if all(c is None for c in prop.components()):
            warnings.append("ADR has no address components.")


# ── ORG ───────────────────────────────────────────────────────────────────────

class OrganizationScribe(VCardPropertyScribe[Organization]):
    property_class = Organization
    property_name = "ORG"

    def _default_data_type(self, version):
        return datatype.TEXT

    def _write_text(self, prop, version):
        return ";".join(escape(v, version) for v in prop.values)

    def _parse_text(self, value, data_type, version, params, warnings):
        return Organization(parse_semi_structured(value))

    def _write_xml(self, prop, element):
        element.append_all("text", prop.values or [""])

    def _parse_xml(self, element, params, warnings):
        values = element.all("text")
        if not values:
            raise CannotParseError("Property value missing. Expected one of: <text>")
        return Organization(values)

    def _parse_html(self, element, params, warnings):
        name = element.first_value("organization-name")
        if name is None:
            return Organization([element.value()])
        values = [name]
        values.extend(element.all_values("organization-unit"))
        return Organization(values)

    def _write_json(self, prop):
        if len(prop.values) <= 1:
            return JCardValue.single(prop.values[0] if prop.values else "")
        return JCardValue.structured_of(*prop.values)

    def _parse_json(self, value, data_type, params, warnings):
        components = value.as_structured()
        return Organization([",".join(c) for c in components])

    def _validate(self, prop, version, vcard, warnings):
        if not prop.values:
            warnings.append("ORG has no values.")
