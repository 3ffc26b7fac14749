from __future__ import annotations

import re

from ..datatype import VCardDataType
from ..errors import CannotParseError
from ..model import RawProperty
from ..values import JCardValue
from .base import VCardPropertyScribe

_NAME_RE = re.compile(r"^[A-Za-z0-9-]+$")


class RawPropertyScribe(VCardPropertyScribe[RawProperty]):
    """Pass-through scribe for properties with no registered scribe.

    The value is kept exactly as it appeared on the wire and written back
    untouched; the data type comes from the VALUE parameter, if any.
    """

    property_class = RawProperty

    def __init__(self, property_name: str):
        super().__init__(RawProperty, property_name)

    def _default_data_type(self, version):
        return None

    def _data_type(self, prop, version):
        return prop.datatype

    def _write_text(self, prop, version):
        return prop.value

    def _parse_text(self, value, data_type, version, params, warnings):
        return RawProperty(name=self.property_name, value=value, datatype=data_type)

    def _write_xml(self, prop, element):
        element.append_datatype(prop.datatype.name if prop.datatype else None, prop.value)

    def _parse_xml(self, element, params, warnings):
        child = element.first_child()
        if child is None:
            raise CannotParseError("Property value missing.")
        tag, text = child
        data_type = None if tag == "unknown" else VCardDataType.get(tag)
        return RawProperty(name=self.property_name, value=text, datatype=data_type)

    def _parse_html(self, element, params, warnings):
        return RawProperty(name=self.property_name, value=element.value())

    def _write_json(self, prop):
        return JCardValue.single(prop.value)

    def _parse_json(self, value, data_type, params, warnings):
        if len(value.values) == 1 and isinstance(value.values[0], list):
            text = ";".join(",".join(c) for c in value.as_structured())
        elif len(value.values) > 1:
            text = ",".join(value.as_multi())
        else:
            text = value.as_single()
        return RawProperty(name=self.property_name, value=text, datatype=data_type)

    def _validate(self, prop, version, vcard, warnings):
        if not _NAME_RE.match(prop.name):
            warnings.append(f'Property name "{prop.name}" contains invalid characters.')
