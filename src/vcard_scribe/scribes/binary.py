"""PHOTO, LOGO, SOUND and KEY: inline data or a URL."""
from __future__ import annotations

import base64
import binascii
from urllib.parse import unquote_to_bytes

from .. import datatype
from ..errors import CannotParseError, SkipMeError
from ..model import BinaryProperty
from ..parameters import ENCODING, MEDIATYPE, TYPE
from ..values import JCardValue, unescape
from ..version import VCardVersion
from .base import VCardPropertyScribe, missing_xml_elements

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

# TYPE values (2.1/3.0) that do not follow the "major/SUBTYPE" pattern
_MEDIA_TYPES = {
    "WAVE": "audio/wav",
    "PCM": "audio/x-pcm",
    "AIFF": "audio/aiff",
    "PGP": "application/pgp-keys",
    "X509": "application/x-x509-ca-cert",
    "MPEG": "video/mpeg",
    "QTIME": "video/quicktime",
}
_TYPE_NAMES = {mime: name for name, mime in _MEDIA_TYPES.items()}
_NOT_MEDIA = {"pref", "home", "work"}


def parse_data_uri(uri: str) -> tuple[str | None, bytes]:
    """Split a `data:` URI into (content type, bytes); raises ValueError."""
    if not uri.lower().startswith("data:"):
        raise ValueError(f"Not a data URI: {uri[:30]}")
    header, sep, payload = uri[5:].partition(",")
    if not sep:
        raise ValueError("Data URI has no comma.")
    pieces = header.split(";")
    content_type = pieces[0] or None
    if any(p.lower() == "base64" for p in pieces[1:]):
        try:
            return content_type, base64.b64decode(payload, validate=False)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 data: {e}") from e
    return content_type, unquote_to_bytes(payload)


def data_uri(content_type: str | None, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


class BinaryPropertyScribe(VCardPropertyScribe[BinaryProperty]):
    """2.1 writes `ENCODING=BASE64` and 3.0 `ENCODING=b`, both with a
    `TYPE=JPEG` style media type. 4.0 inlines data as a `data:` URI and puts
    the media type of a URL in MEDIATYPE.
    """

    def __init__(self, property_class: type[BinaryProperty], property_name: str, media_major: str):
        super().__init__(property_class, property_name)
        self.media_major = media_major

    def _default_data_type(self, version):
        if version is V2_1:
            return None
        if version is V3_0:
            return datatype.BINARY
        return datatype.URI

    def _data_type(self, prop, version):
        if prop.url is not None and prop.data is None:
            return datatype.URL if version is V2_1 else datatype.URI
        return self.default_data_type(version)

    def _prepare_parameters(self, prop, params, version, siblings):
        params.remove_all(ENCODING)
        params.remove_all(MEDIATYPE)
        inline = prop.data is not None
        if version is V4_0:
            if not inline and prop.content_type:
                params.mediatype = prop.content_type
            return
        if inline:
            params.encoding = "BASE64" if version is V2_1 else "b"
        if prop.content_type:
            name = self.type_name(prop.content_type)
            if not params.has_type(name):
                params.put(TYPE, name)

    def _write_text(self, prop, version):
        if prop.data is not None:
            if version is V4_0:
                return data_uri(prop.content_type, prop.data)
            return base64.b64encode(prop.data).decode("ascii")
        if prop.url is not None:
            return prop.url
        raise SkipMeError("Property has neither inline data nor a URL.")

    def _parse_text(self, value, data_type, version, params, warnings):
        encoding = params.encoding
        if encoding is not None and encoding.lower() in ("b", "base64"):
            params.remove_all(ENCODING)
            try:
                data = base64.b64decode("".join(value.split()), validate=False)
            except binascii.Error as e:
                raise CannotParseError(f"Invalid base64 data: {e}") from e
            return self.property_class(data=data, content_type=self._consume_media_type(params))
        value = unescape(value)
        if value.lower().startswith("data:"):
            return self._from_uri(value, params)
        if data_type is not None and data_type not in (datatype.URL, datatype.URI):
            warnings.append("No ENCODING parameter for inline data; treating the value as a URL.")
        return self.property_class(url=value, content_type=self._consume_media_type(params))

    def _write_xml(self, prop, element):
        element.append("uri", self._uri(prop))

    def _parse_xml(self, element, params, warnings):
        uri = element.first("uri")
        if uri is None:
            raise missing_xml_elements("uri")
        return self._from_uri(uri, params)

    def _parse_html(self, element, params, warnings):
        if element.tag in ("img", "object", "audio", "video", "source", "embed"):
            url = element.absolute_url("src") or element.absolute_url("data")
        elif element.tag in ("a", "link"):
            url = element.absolute_url("href")
        else:
            url = element.value()
        if not url:
            raise CannotParseError("No URL or data found in the element.")
        if element.attr("type"):
            params.mediatype = element.attr("type")
        return self._from_uri(url, params)

    def _write_json(self, prop):
        return JCardValue.single(self._uri(prop))

    def _parse_json(self, value, data_type, params, warnings):
        return self._from_uri(value.as_single(), params)

    def _validate(self, prop, version, vcard, warnings):
        if prop.data is None and prop.url is None:
            warnings.append(f"{self.property_name} has neither inline data nor a URL.")

    # ──────────────────────────────────────────────────────────────────────────

    def type_name(self, content_type: str) -> str:
        """`image/jpeg` -> `JPEG`."""
        if content_type in _TYPE_NAMES:
            return _TYPE_NAMES[content_type]
        return content_type.rpartition("/")[2].upper()

    def content_type_of(self, type_name: str) -> str:
        """`JPEG` -> `image/jpeg` for this property's media family."""
        if "/" in type_name:
            return type_name.lower()
        return _MEDIA_TYPES.get(type_name.upper(), f"{self.media_major}/{type_name.lower()}")

    def _uri(self, prop: BinaryProperty) -> str:
        if prop.data is not None:
            return data_uri(prop.content_type, prop.data)
        if prop.url is not None:
            return prop.url
        raise SkipMeError("Property has neither inline data nor a URL.")

    def _from_uri(self, uri: str, params) -> BinaryProperty:
        if uri.lower().startswith("data:"):
            try:
                content_type, data = parse_data_uri(uri)
            except ValueError as e:
                raise CannotParseError(str(e)) from e
            params.remove_all(MEDIATYPE)
            return self.property_class(data=data, content_type=content_type)
        return self.property_class(url=uri, content_type=self._consume_media_type(params))

    def _consume_media_type(self, params) -> str | None:
        mediatype = params.mediatype
        if mediatype is not None:
            params.remove_all(MEDIATYPE)
            return mediatype
        for t in params.types:
            if t.lower() not in _NOT_MEDIA:
                params.remove_type(t)
                return self.content_type_of(t)
        return None
