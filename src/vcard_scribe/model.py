from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TypeVar

from .dates import PartialDate, UtcOffset
from .datatype import VCardDataType
from .parameters import VCardParameters
from .uris import TelUri
from .version import VCardVersion


@dataclass
class VCardProperty:
    """Base class of every property kind."""

    parameters: VCardParameters = field(default_factory=VCardParameters, kw_only=True)
    group: str | None = field(default=None, kw_only=True)


P = TypeVar("P", bound=VCardProperty)


# ── Single text / uri values ──────────────────────────────────────────────────

@dataclass
class TextProperty(VCardProperty):
    value: str | None = None


class FormattedName(TextProperty): pass
class Note(TextProperty): pass
class Title(TextProperty): pass
class Role(TextProperty): pass
class ProductId(TextProperty): pass
class Email(TextProperty): pass
class Label(TextProperty): pass
class Mailer(TextProperty): pass
class Classification(TextProperty): pass
class SortString(TextProperty): pass
class SourceDisplayText(TextProperty): pass
class Kind(TextProperty): pass
class Language(TextProperty): pass
class Expertise(TextProperty): pass
class Hobby(TextProperty): pass
class Interest(TextProperty): pass


@dataclass
class UriProperty(VCardProperty):
    value: str | None = None


class Url(UriProperty): pass
class Source(UriProperty): pass
class FreeBusyUrl(UriProperty): pass
class CalendarUri(UriProperty): pass
class CalendarRequestUri(UriProperty): pass
class OrgDirectory(UriProperty): pass
class Impp(UriProperty): pass
class Member(UriProperty): pass
class Uid(UriProperty): pass


@dataclass
class Xml(VCardProperty):
    """An XML element kept as its serialized text."""

    value: str | None = None


# ── Lists and structured values ───────────────────────────────────────────────

@dataclass
class TextListProperty(VCardProperty):
    values: list[str] = field(default_factory=list)


class Categories(TextListProperty): pass
class Nickname(TextListProperty): pass


@dataclass
class Organization(VCardProperty):
    values: list[str] = field(default_factory=list)


@dataclass
class StructuredName(VCardProperty):
    family: str | None = None
    given: str | None = None
    additional: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)


@dataclass
class Address(VCardProperty):
    po_box: str | None = None
    extended: str | None = None
    street: str | None = None
    locality: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def components(self) -> list[str | None]:
        return [
            self.po_box, self.extended, self.street, self.locality,
            self.region, self.postal_code, self.country,
        ]


@dataclass
class Gender(VCardProperty):
    sex: str | None = None
    identity: str | None = None


@dataclass
class ClientPidMap(VCardProperty):
    pid: int | None = None
    uri: str | None = None


# ── Dual-representation values ────────────────────────────────────────────────

@dataclass
class Telephone(VCardProperty):
    text: str | None = None
    uri: TelUri | None = None


@dataclass
class Geo(VCardProperty):
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class Timezone(VCardProperty):
    offset: UtcOffset | None = None
    text: str | None = None


@dataclass
class Related(VCardProperty):
    uri: str | None = None
    text: str | None = None


@dataclass
class PlaceProperty(VCardProperty):
    text: str | None = None
    uri: str | None = None


class Birthplace(PlaceProperty): pass
class Deathplace(PlaceProperty): pass


# ── Dates ─────────────────────────────────────────────────────────────────────

@dataclass
class DateOrTimeProperty(VCardProperty):
    """A full date/date-time, a 4.0 partial date, or 4.0 free text."""

    date: date | datetime | None = None
    partial_date: PartialDate | None = None
    text: str | None = None


class Birthday(DateOrTimeProperty): pass
class Anniversary(DateOrTimeProperty): pass
class Deathdate(DateOrTimeProperty): pass


@dataclass
class Revision(VCardProperty):
    timestamp: datetime | None = None


# ── Binary ────────────────────────────────────────────────────────────────────

@dataclass
class BinaryProperty(VCardProperty):
    """Inline data or a URL; `content_type` is a MIME type like `image/jpeg`."""

    data: bytes | None = None
    url: str | None = None
    content_type: str | None = None


class Photo(BinaryProperty): pass
class Logo(BinaryProperty): pass
class Sound(BinaryProperty): pass
class Key(BinaryProperty): pass


# ── Unknown properties ────────────────────────────────────────────────────────

@dataclass
class RawProperty(VCardProperty):
    name: str = ""
    value: str = ""
    datatype: VCardDataType | None = None


# ── Document ──────────────────────────────────────────────────────────────────

@dataclass
class VCard:
    version: VCardVersion = VCardVersion.V3_0
    properties: list[VCardProperty] = field(default_factory=list)

    def add(self, prop: VCardProperty) -> None:
        self.properties.append(prop)

    def remove(self, prop: VCardProperty) -> bool:
        """Remove one property instance (by identity)."""
        for i, p in enumerate(self.properties):
            if p is prop:
                del self.properties[i]
                return True
        return False

    def get_properties(self, cls: type[P]) -> list[P]:
        return [p for p in self.properties if type(p) is cls]

    def get_property(self, cls: type[P]) -> P | None:
        for p in self.properties:
            if type(p) is cls:
                return p  # type: ignore[return-value]
        return None

    def set_property(self, cls: type[P], prop: P | None) -> None:
        """Replace every property of a class with `prop` (or remove them)."""
        self.remove_properties(cls)
        if prop is not None:
            self.add(prop)

    def remove_properties(self, cls: type[VCardProperty]) -> list[VCardProperty]:
        removed = [p for p in self.properties if type(p) is cls]
        self.properties = [p for p in self.properties if type(p) is not cls]
        return removed

    def get_raw_properties(self, name: str) -> list[RawProperty]:
        name = name.upper()
        return [p for p in self.properties if isinstance(p, RawProperty) and p.name.upper() == name]

    def add_raw_property(self, name: str, value: str) -> RawProperty:
        prop = RawProperty(name=name, value=value)
        self.add(prop)
        return prop

    @property
    def formatted_name(self) -> str | None:
        fn = self.get_property(FormattedName)
        return fn.value if fn else None

    def __iter__(self) -> Iterator[VCardProperty]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)
