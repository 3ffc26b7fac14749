"""BDAY, ANNIVERSARY, DEATHDATE and REV."""
from __future__ import annotations

from datetime import datetime

from .. import datatype
from ..dates import PartialDate, format_date, format_timestamp, parse_date
from ..errors import CannotParseError, SkipMeError
from ..model import DateOrTimeProperty, Revision
from ..values import JCardValue, escape, unescape
from ..version import ALL_VERSIONS, VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V4_0 = VCardVersion.V4_0

_DATE_ELEMENTS = ("date", "date-time", "date-and-or-time", "time")


class DateOrTimePropertyScribe(VCardPropertyScribe[DateOrTimeProperty]):
    """A full date, a 4.0 partial date (`--0412`), or 4.0 free text.

    Before 4.0 only full dates can be written, in extended format. 4.0 text
    and xCard use the basic format; jCard uses the extended one.
    """

    def __init__(
        self,
        property_class: type[DateOrTimeProperty],
        property_name: str,
        versions: frozenset[VCardVersion] = ALL_VERSIONS,
    ):
        super().__init__(property_class, property_name)
        self.supported_versions = versions

    def _default_data_type(self, version):
        return datatype.DATE_AND_OR_TIME if version is V4_0 else datatype.DATE

    def _data_type(self, prop, version):
        if version is V4_0:
            if prop.date is None and prop.partial_date is None and prop.text is not None:
                return datatype.TEXT
            return datatype.DATE_AND_OR_TIME
        if isinstance(prop.date, datetime):
            return datatype.DATE_TIME
        return datatype.DATE

    def _write_text(self, prop, version):
        if prop.date is not None:
            return format_date(prop.date, extended=version is not V4_0)
        if version is not V4_0:
            if prop.partial_date is not None or prop.text is not None:
                raise SkipMeError(f"Partial dates and text values are not supported in version {version}.")
        elif prop.partial_date is not None:
            return prop.partial_date.format(extended=False)
        elif prop.text is not None:
            return escape(prop.text, version)
        raise SkipMeError("Property has no date, partial date or text value.")

    def _parse_text(self, value, data_type, version, params, warnings):
        value = unescape(value)
        if data_type == datatype.TEXT:
            if version is not V4_0:
                warnings.append(f"Text values are not supported in version {version}.")
            return self.property_class(text=value)
        return self._parse_date(value, version, warnings)

    def _write_xml(self, prop, element):
        if prop.date is not None:
            name = "date-time" if isinstance(prop.date, datetime) else "date"
            element.append(name, format_date(prop.date, extended=False))
        elif prop.partial_date is not None:
            element.append("date-and-or-time", prop.partial_date.format(extended=False))
        elif prop.text is not None:
            element.append("text", prop.text)
        else:
            raise SkipMeError("Property has no date, partial date or text value.")

    def _parse_xml(self, element, params, warnings):
        value = element.first(*_DATE_ELEMENTS)
        if value is not None:
            return self._parse_date(value, V4_0, warnings)
        text = element.first("text")
        if text is not None:
            return self.property_class(text=text)
        raise missing_xml_elements(*_DATE_ELEMENTS, "text")

    def _parse_html(self, element, params, warnings):
        return self._parse_date(element.value(), V4_0, warnings)

    def _write_json(self, prop):
        if prop.date is not None:
            return JCardValue.single(format_date(prop.date, extended=True))
        if prop.partial_date is not None:
            return JCardValue.single(prop.partial_date.format(extended=True))
        if prop.text is not None:
            return JCardValue.single(prop.text)
        raise SkipMeError("Property has no date, partial date or text value.")

    def _parse_json(self, value, data_type, params, warnings):
        text = value.as_single()
        if data_type == datatype.TEXT:
            return self.property_class(text=text)
        return self._parse_date(text, V4_0, warnings)

    def _validate(self, prop, version, vcard, warnings):
        if prop.date is None and prop.partial_date is None and prop.text is None:
            warnings.append(f"{self.property_name} has no date, partial date or text value.")
        elif prop.date is None and version is not V4_0:
            warnings.append(f"Partial dates and text values are not supported in version {version}.")

    # ──────────────────────────────────────────────────────────────────────────

    def _parse_date(self, value: str, version: VCardVersion, warnings: list[str]) -> DateOrTimeProperty:
        try:
            return self.property_class(date=parse_date(value))
        except ValueError:
            pass
        if version is not V4_0:
            raise CannotParseError(f'Could not parse "{value}" as a date.')
        try:
            return self.property_class(partial_date=PartialDate.parse(value))
        except ValueError:
            warnings.append(f'Could not parse "{value}" as a date. Treating it as text.')
            return self.property_class(text=value)


class RevisionScribe(VCardPropertyScribe[Revision]):
    property_class = Revision
    property_name = "REV"

    def _default_data_type(self, version):
        return datatype.TIMESTAMP if version is V4_0 else datatype.DATE_TIME

    def _write_text(self, prop, version):
        if prop.timestamp is None:
            raise SkipMeError("Property has no timestamp.")
        return format_timestamp(prop.timestamp, extended=version is not V4_0)

    def _parse_text(self, value, data_type, version, params, warnings):
        return Revision(_timestamp(unescape(value)))

    def _write_xml(self, prop, element):
        if prop.timestamp is None:
            raise SkipMeError("Property has no timestamp.")
        element.append("timestamp", format_timestamp(prop.timestamp))

    def _parse_xml(self, element, params, warnings):
        value = element.first("timestamp", "date-time")
        if value is None:
            raise missing_xml_elements("timestamp")
        return Revision(_timestamp(value))

    def _write_json(self, prop):
        if prop.timestamp is None:
            raise SkipMeError("Property has no timestamp.")
        return JCardValue.single(format_timestamp(prop.timestamp, extended=True))

    def _parse_json(self, value, data_type, params, warnings):
        return Revision(_timestamp(value.as_single()))

    def _validate(self, prop, version, vcard, warnings):
        if prop.timestamp is None:
            warnings.append("REV has no timestamp.")


def _timestamp(value: str) -> datetime:
    try:
        parsed = parse_date(value)
    except ValueError as e:
        raise CannotParseError(f'Could not parse "{value}" as a timestamp.') from e
    if not isinstance(parsed, datetime):
        parsed = datetime(parsed.year, parsed.month, parsed.day)
    return parsed
