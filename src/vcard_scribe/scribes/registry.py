"""Lookup of scribes by wire name, property class and xCard element name.

Built-in scribes are shared by every index. Scribes registered on an index
take priority over the built-ins for both reading and writing. Register
before reading or writing starts; an index is not meant to change while a
reader or writer is using it.
"""
from __future__ import annotations

import logging

from .. import model as m
from ..datatype import LANGUAGE_TAG
from ..model import RawProperty, VCardProperty
from ..version import VCardVersion
from .base import VCardPropertyScribe
from .binary import BinaryPropertyScribe
from .geo import GeoScribe
from .place import PlacePropertyScribe, RelatedScribe
from .raw import RawPropertyScribe
from .simple import (
    ClientPidMapScribe,
    EmailScribe,
    GenderScribe,
    ImppScribe,
    TextListPropertyScribe,
    TextPropertyScribe,
    UidScribe,
    UriPropertyScribe,
    UrlScribe,
    XmlScribe,
)
from .structured import AddressScribe, OrganizationScribe, StructuredNameScribe
from .telephone import TelephoneScribe
from .temporal import DateOrTimePropertyScribe, RevisionScribe
from .timezone import TimezoneScribe

logger = logging.getLogger(__name__)

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0
_V3 = frozenset({V3_0})
_V3_UP = frozenset({V3_0, V4_0})
_V4 = frozenset({V4_0})
_OLD = frozenset({V2_1, V3_0})


def _standard_scribes() -> list[VCardPropertyScribe]:
    return [
        # text
        TextPropertyScribe(m.FormattedName, "FN"),
        TextPropertyScribe(m.Note, "NOTE"),
        TextPropertyScribe(m.Title, "TITLE"),
        TextPropertyScribe(m.Role, "ROLE"),
        TextPropertyScribe(m.ProductId, "PRODID", _V3_UP),
        EmailScribe(),
        TextPropertyScribe(m.Label, "LABEL", _OLD),
        TextPropertyScribe(m.Mailer, "MAILER", _OLD),
        TextPropertyScribe(m.Classification, "CLASS", _V3),
        TextPropertyScribe(m.SortString, "SORT-STRING", _V3),
        TextPropertyScribe(m.SourceDisplayText, "NAME", _V3),
        TextPropertyScribe(m.Kind, "KIND", _V4),
        TextPropertyScribe(m.Language, "LANG", _V4, data_type=LANGUAGE_TAG),
        TextPropertyScribe(m.Expertise, "EXPERTISE", _V4),
        TextPropertyScribe(m.Hobby, "HOBBY", _V4),
        TextPropertyScribe(m.Interest, "INTEREST", _V4),
        XmlScribe(),
        # uri
        UrlScribe(),
        UriPropertyScribe(m.Source, "SOURCE"),
        UriPropertyScribe(m.FreeBusyUrl, "FBURL", _V4),
        UriPropertyScribe(m.CalendarUri, "CALURI", _V4),
        UriPropertyScribe(m.CalendarRequestUri, "CALADRURI", _V4),
        UriPropertyScribe(m.OrgDirectory, "ORG-DIRECTORY", _V4),
        UriPropertyScribe(m.Member, "MEMBER", _V4),
        ImppScribe(),
        UidScribe(m.Uid, "UID"),
        # lists and structured values
        TextListPropertyScribe(m.Categories, "CATEGORIES"),
        TextListPropertyScribe(m.Nickname, "NICKNAME"),
        StructuredNameScribe(),
        AddressScribe(),
        OrganizationScribe(),
        GenderScribe(),
        ClientPidMapScribe(),
        # dual representations
        TelephoneScribe(),
        GeoScribe(),
        TimezoneScribe(),
        RelatedScribe(),
        PlacePropertyScribe(m.Birthplace, "BIRTHPLACE"),
        PlacePropertyScribe(m.Deathplace, "DEATHPLACE"),
        # dates
        DateOrTimePropertyScribe(m.Birthday, "BDAY"),
        DateOrTimePropertyScribe(m.Anniversary, "ANNIVERSARY", _V4),
        DateOrTimePropertyScribe(m.Deathdate, "DEATHDATE", _V4),
        RevisionScribe(),
        # binary
        BinaryPropertyScribe(m.Photo, "PHOTO", "image"),
        BinaryPropertyScribe(m.Logo, "LOGO", "image"),
        BinaryPropertyScribe(m.Sound, "SOUND", "audio"),
        BinaryPropertyScribe(m.Key, "KEY", "application"),
    ]


class _Catalog:
    def __init__(self, scribes: list[VCardPropertyScribe]):
        self.by_name: dict[str, VCardPropertyScribe] = {}
        self.by_class: dict[type, VCardPropertyScribe] = {}
        self.by_qname: dict[tuple[str, str], VCardPropertyScribe] = {}
        for scribe in scribes:
            self.add(scribe)

    def add(self, scribe: VCardPropertyScribe) -> None:
        self.by_name[scribe.property_name.upper()] = scribe
        self.by_class[scribe.property_class] = scribe
        self.by_qname[scribe.qname] = scribe

    def remove(self, scribe: VCardPropertyScribe) -> None:
        name = scribe.property_name.upper()
        if self.by_name.get(name) is scribe:
            del self.by_name[name]
        if self.by_class.get(scribe.property_class) is scribe:
            del self.by_class[scribe.property_class]
        if self.by_qname.get(scribe.qname) is scribe:
            del self.by_qname[scribe.qname]


_STANDARD = _Catalog(_standard_scribes())


class ScribeIndex:
    def __init__(self) -> None:
        self._extended = _Catalog([])

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get_property_scribe(self, name: str) -> VCardPropertyScribe | None:
        """The scribe for a wire property name (case-insensitive), if any."""
        key = name.upper()
        return self._extended.by_name.get(key) or _STANDARD.by_name.get(key)

    def get_property_scribe_for(self, prop: VCardProperty | type[VCardProperty]) -> VCardPropertyScribe | None:
        """The scribe that writes a property (or property class)."""
        if isinstance(prop, RawProperty):
            scribe = self.get_property_scribe(prop.name)
            if scribe is not None and scribe.property_class is RawProperty:
                return scribe
            return RawPropertyScribe(prop.name)
        cls = prop if isinstance(prop, type) else type(prop)
        return self._extended.by_class.get(cls) or _STANDARD.by_class.get(cls)

    def get_property_scribe_by_qname(self, namespace: str, local_name: str) -> VCardPropertyScribe | None:
        key = (namespace, local_name)
        return self._extended.by_qname.get(key) or _STANDARD.by_qname.get(key)

    def scribe_or_raw(self, name: str) -> VCardPropertyScribe:
        """Resolve a name for reading; unknown names get a pass-through scribe."""
        scribe = self.get_property_scribe(name)
        if scribe is None:
            scribe = RawPropertyScribe(name)
        return scribe

    def has_property_scribe(self, name: str) -> bool:
        return self.get_property_scribe(name) is not None

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, scribe: VCardPropertyScribe) -> None:
        """Add a scribe, replacing any scribe with the same name or class."""
        logger.debug("Registering scribe %r", scribe)
        self._extended.add(scribe)

    def unregister(self, scribe: VCardPropertyScribe) -> None:
        logger.debug("Unregistering scribe %r", scribe)
        self._extended.remove(scribe)

    @staticmethod
    def standard_scribes() -> list[VCardPropertyScribe]:
        return list(_STANDARD.by_name.values())
