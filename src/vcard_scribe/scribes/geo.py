from __future__ import annotations

from .. import datatype
from ..errors import CannotParseError, SkipMeError
from ..model import Geo
from ..uris import GeoUri, format_coordinate
from ..values import JCardValue, unescape
from ..version import VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V4_0 = VCardVersion.V4_0


class GeoScribe(VCardPropertyScribe[Geo]):
    """GEO: `lat;long` before 4.0, a `geo:` URI at 4.0.

    Both coordinates are required; a value missing either one is dropped.
    """

    property_class = Geo
    property_name = "GEO"

    def _default_data_type(self, version):
        return datatype.URI if version is V4_0 else None

    def _write_text(self, prop, version):
        self._require_coordinates(prop)
        if version is V4_0:
            return str(GeoUri(prop.latitude, prop.longitude))
        return f"{format_coordinate(prop.latitude)};{format_coordinate(prop.longitude)}"

    def _parse_text(self, value, data_type, version, params, warnings):
        return self._parse(unescape(value))

    def _write_xml(self, prop, element):
        self._require_coordinates(prop)
        element.append("uri", str(GeoUri(prop.latitude, prop.longitude)))

    def _parse_xml(self, element, params, warnings):
        uri = element.first("uri")
        if uri is None:
            raise missing_xml_elements("uri")
        return self._parse(uri)

    def _parse_html(self, element, params, warnings):
        latitude = element.first_value("latitude")
        longitude = element.first_value("longitude")
        if latitude is None:
            raise CannotParseError('Latitude missing (no element with class "latitude").')
        if longitude is None:
            raise CannotParseError('Longitude missing (no element with class "longitude").')
        return Geo(_coordinate(latitude, "latitude"), _coordinate(longitude, "longitude"))

    def _write_json(self, prop):
        self._require_coordinates(prop)
        return JCardValue.single(str(GeoUri(prop.latitude, prop.longitude)))

    def _parse_json(self, value, data_type, params, warnings):
        return self._parse(value.as_single())

    def _validate(self, prop, version, vcard, warnings):
        if prop.latitude is None:
            warnings.append("GEO latitude is missing.")
        elif not -90 <= prop.latitude <= 90:
            warnings.append(f"GEO latitude {prop.latitude} is out of range.")
        if prop.longitude is None:
            warnings.append("GEO longitude is missing.")
        elif not -180 <= prop.longitude <= 180:
            warnings.append(f"GEO longitude {prop.longitude} is out of range.")

    # ──────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _require_coordinates(prop: Geo) -> None:
        if prop.latitude is None or prop.longitude is None:
            raise SkipMeError("Property is missing its latitude or longitude.")

    @staticmethod
    def _parse(value: str) -> Geo:
        value = value.strip()
        if value.lower().startswith("geo:"):
            try:
                uri = GeoUri.parse(value)
            except ValueError as e:
                raise CannotParseError(str(e)) from e
            return Geo(uri.latitude, uri.longitude)

        latitude, sep, longitude = value.partition(";")
        if not sep:
            raise CannotParseError(f'Incorrect data format. Expected "lat;long", got "{value}".')
        return Geo(_coordinate(latitude, "latitude"), _coordinate(longitude, "longitude"))


def _coordinate(text: str, name: str) -> float:
    try:
        return float(text.strip())
    except ValueError as e:
        raise CannotParseError(f'Could not parse {name} "{text}".') from e
