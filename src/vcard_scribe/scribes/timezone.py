from __future__ import annotations

from .. import datatype
from ..dates import UtcOffset
from ..errors import CannotParseError, SkipMeError
from ..model import Timezone
from ..values import JCardValue, escape, unescape
from ..version import VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0


class TimezoneScribe(VCardPropertyScribe[Timezone]):
    """TZ: a UTC offset or a text value (usually an Olson id).

    2.1 only knows offsets (basic format). 3.0 prefers the offset in
    extended format. 4.0 prefers the text value.
    """

    property_class = Timezone
    property_name = "TZ"

    def _default_data_type(self, version):
        return datatype.TEXT if version is V4_0 else datatype.UTC_OFFSET

    def _data_type(self, prop, version):
        if version is V2_1:
            return datatype.UTC_OFFSET
        if version is V3_0:
            return datatype.UTC_OFFSET if prop.offset is not None else datatype.TEXT
        return datatype.TEXT if prop.text is not None else datatype.UTC_OFFSET

    def _write_text(self, prop, version):
        if version is V2_1:
            if prop.offset is None:
                raise SkipMeError("vCard 2.1 requires a UTC offset for TZ.")
            return prop.offset.format(extended=False)
        if version is V3_0:
            if prop.offset is not None:
                return prop.offset.format(extended=True)
            if prop.text is not None:
                return escape(prop.text, version)
        else:
            if prop.text is not None:
                return escape(prop.text, version)
            if prop.offset is not None:
                return prop.offset.format(extended=False)
        raise SkipMeError("Property has neither a UTC offset nor a text value.")

    def _parse_text(self, value, data_type, version, params, warnings):
        value = unescape(value)
        if version is V2_1:
            return Timezone(offset=_offset(value))
        if version is V3_0:
            if data_type == datatype.TEXT:
                return Timezone(text=value)
            try:
                return Timezone(offset=UtcOffset.parse(value))
            except ValueError:
                warnings.append(f'Could not parse "{value}" as a UTC offset. Treating it as text.')
                return Timezone(text=value)
        if data_type == datatype.UTC_OFFSET:
            return Timezone(offset=_offset(value))
        return Timezone(text=value)

    def _write_xml(self, prop, element):
        if prop.text is not None:
            element.append("text", prop.text)
        elif prop.offset is not None:
            element.append("utc-offset", prop.offset.format(extended=False))
        else:
            raise SkipMeError("Property has neither a UTC offset nor a text value.")

    def _parse_xml(self, element, params, warnings):
        text = element.first("text")
        if text is not None:
            return Timezone(text=text)
        offset = element.first("utc-offset")
        if offset is not None:
            return Timezone(offset=_offset(offset))
        raise missing_xml_elements("text", "utc-offset")

    def _parse_html(self, element, params, warnings):
        value = element.value()
        try:
            return Timezone(offset=UtcOffset.parse(value))
        except ValueError:
            warnings.append(f'Could not parse "{value}" as a UTC offset. Treating it as text.')
            return Timezone(text=value)

    def _write_json(self, prop):
        if prop.text is not None:
            return JCardValue.single(prop.text)
        if prop.offset is not None:
            return JCardValue.single(prop.offset.format(extended=True))
        raise SkipMeError("Property has neither a UTC offset nor a text value.")

    def _parse_json(self, value, data_type, params, warnings):
        text = value.as_single()
        if data_type == datatype.TEXT:
            return Timezone(text=text)
        try:
            return Timezone(offset=UtcOffset.parse(text))
        except ValueError:
            return Timezone(text=text)

    def _validate(self, prop, version, vcard, warnings):
        if prop.offset is None and prop.text is None:
            warnings.append("TZ has neither a UTC offset nor a text value.")
        if version is V2_1 and prop.offset is None:
            warnings.append("vCard 2.1 requires a UTC offset for TZ; a text value cannot be written.")


def _offset(value: str) -> UtcOffset:
    try:
        return UtcOffset.parse(value)
    except ValueError as e:
        raise CannotParseError(f'Could not parse "{value}" as a UTC offset.') from e
