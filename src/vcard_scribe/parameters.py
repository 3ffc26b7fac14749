"""Property parameters.

A parameter set is an ordered multimap: names compare case-insensitively and
are stored upper-cased, values keep their insertion order.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator

from .datatype import VCardDataType
from .version import ALL_VERSIONS, VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

ALTID = "ALTID"
CALSCALE = "CALSCALE"
CHARSET = "CHARSET"
ENCODING = "ENCODING"
GEO = "GEO"
INDEX = "INDEX"
LABEL = "LABEL"
LANGUAGE = "LANGUAGE"
LEVEL = "LEVEL"
MEDIATYPE = "MEDIATYPE"
PID = "PID"
PREF = "PREF"
SORT_AS = "SORT-AS"
TYPE = "TYPE"
TZ = "TZ"
VALUE = "VALUE"

# Parameters that only exist in some versions. PREF and LABEL are rewritten
# rather than checked, so they are not listed.
PARAMETER_VERSIONS: dict[str, frozenset[VCardVersion]] = {
    ALTID: frozenset({V4_0}),
    CALSCALE: frozenset({V4_0}),
    CHARSET: frozenset({V2_1}),
    ENCODING: frozenset({V2_1, V3_0}),
    GEO: frozenset({V4_0}),
    INDEX: frozenset({V4_0}),
    LEVEL: frozenset({V4_0}),
    MEDIATYPE: frozenset({V4_0}),
    PID: frozenset({V4_0}),
    SORT_AS: frozenset({V4_0}),
    TZ: frozenset({V4_0}),
}

_OLD = frozenset({V2_1, V3_0})
_V3_UP = frozenset({V3_0, V4_0})
_V4 = frozenset({V4_0})

# Registered TYPE values per property and the versions that define them.
TYPE_VALUES: dict[str, dict[str, frozenset[VCardVersion]]] = {
    "TEL": {
        "home": ALL_VERSIONS, "work": ALL_VERSIONS, "voice": ALL_VERSIONS,
        "fax": ALL_VERSIONS, "cell": ALL_VERSIONS, "video": ALL_VERSIONS,
        "pager": ALL_VERSIONS, "pref": ALL_VERSIONS,
        "msg": _OLD, "bbs": _OLD, "modem": _OLD, "car": _OLD, "isdn": _OLD,
        "pcs": frozenset({V3_0}),
        "text": _V4, "textphone": _V4,
    },
    "ADR": {
        "home": ALL_VERSIONS, "work": ALL_VERSIONS, "pref": ALL_VERSIONS,
        "dom": _OLD, "intl": _OLD, "postal": _OLD, "parcel": _OLD,
    },
    "LABEL": {
        "home": _OLD, "work": _OLD, "pref": _OLD,
        "dom": _OLD, "intl": _OLD, "postal": _OLD, "parcel": _OLD,
    },
    "EMAIL": {
        "internet": _OLD, "x400": _OLD, "pref": ALL_VERSIONS,
        "aol": frozenset({V2_1}), "applelink": frozenset({V2_1}),
        "attmail": frozenset({V2_1}), "cis": frozenset({V2_1}),
        "eworld": frozenset({V2_1}), "ibmmail": frozenset({V2_1}),
        "mcimail": frozenset({V2_1}), "powershare": frozenset({V2_1}),
        "prodigy": frozenset({V2_1}), "tlx": frozenset({V2_1}),
        "home": _V4, "work": _V4,
    },
    "IMPP": {
        "personal": _V3_UP, "business": _V3_UP, "home": _V3_UP,
        "work": _V3_UP, "mobile": _V3_UP, "pref": _V3_UP,
    },
    "RELATED": {
        value: _V4 for value in (
            "contact", "acquaintance", "friend", "met", "co-worker", "colleague",
            "co-resident", "neighbor", "child", "parent", "sibling", "spouse",
            "kin", "muse", "crush", "date", "sweetheart", "me", "agent",
            "emergency",
        )
    },
}


class VCardParameters:
    """Ordered, case-insensitive multimap of parameter name to values."""

    def __init__(self, items: Iterable[tuple[str, str]] | None = None):
        self._data: dict[str, list[str]] = {}
        for name, value in items or ():
            self.put(name, value)

    # ── Generic multimap ──────────────────────────────────────────────────────

    def get(self, name: str) -> list[str]:
        return list(self._data.get(name.upper(), ()))

    def first(self, name: str) -> str | None:
        values = self._data.get(name.upper())
        return values[0] if values else None

    def put(self, name: str, value: str) -> None:
        self._data.setdefault(name.upper(), []).append(value)

    def put_all(self, name: str, values: Iterable[str]) -> None:
        for value in values:
            self.put(name, value)

    def replace(self, name: str, value: str | None) -> None:
        """Set a single value, or remove the parameter when value is None."""
        key = name.upper()
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = [value]

    def remove(self, name: str, value: str) -> bool:
        """Remove one value (case-insensitive). Returns True if one was removed."""
        key = name.upper()
        values = self._data.get(key)
        if not values:
            return False
        for i, v in enumerate(values):
            if v.lower() == value.lower():
                del values[i]
                if not values:
                    del self._data[key]
                return True
        return False

    def remove_all(self, name: str) -> list[str]:
        return self._data.pop(name.upper(), [])

    def names(self) -> list[str]:
        return list(self._data)

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for name, values in self._data.items():
            yield name, list(values)

    def copy(self) -> VCardParameters:
        clone = VCardParameters()
        clone._data = {name: list(values) for name, values in self._data.items()}
        return clone

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._data

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for name, values in self._data.items():
            for value in values:
                yield name, value

    def __len__(self) -> int:
        return sum(len(v) for v in self._data.values())

    def __bool__(self) -> bool:
        return bool(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VCardParameters):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"VCardParameters({list(self)!r})"

    # ── TYPE ──────────────────────────────────────────────────────────────────

    @property
    def types(self) -> list[str]:
        return self.get(TYPE)

    def add_type(self, value: str) -> None:
        if not self.has_type(value):
            self.put(TYPE, value)

    def remove_type(self, value: str) -> bool:
        return self.remove(TYPE, value)

    def has_type(self, value: str) -> bool:
        return any(t.lower() == value.lower() for t in self.get(TYPE))

    @property
    def type(self) -> str | None:
        return self.first(TYPE)

    @type.setter
    def type(self, value: str | None) -> None:
        self.replace(TYPE, value)

    # ── PREF ──────────────────────────────────────────────────────────────────

    @property
    def pref(self) -> int | None:
        """The PREF value, or None when absent or not an integer."""
        raw = self.first(PREF)
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None

    @pref.setter
    def pref(self, value: int | None) -> None:
        self.replace(PREF, None if value is None else str(value))

    # ── VALUE ─────────────────────────────────────────────────────────────────

    @property
    def value(self) -> VCardDataType | None:
        return VCardDataType.get(self.first(VALUE))

    @value.setter
    def value(self, data_type: VCardDataType | None) -> None:
        self.replace(VALUE, None if data_type is None else data_type.name)

    # ── PID ───────────────────────────────────────────────────────────────────

    @property
    def pids(self) -> list[tuple[int, int | None]]:
        """PID values as (local id, CLIENTPIDMAP reference) pairs.

        Malformed values are left out; validation reports them.
        """
        out: list[tuple[int, int | None]] = []
        for raw in self.get(PID):
            local, _, ref = raw.partition(".")
            try:
                out.append((int(local), int(ref) if ref else None))
            except ValueError:
                continue
        return out

    def add_pid(self, local_id: int, clientpidmap_ref: int | None = None) -> None:
        value = str(local_id) if clientpidmap_ref is None else f"{local_id}.{clientpidmap_ref}"
        self.put(PID, value)

    # ── INDEX ─────────────────────────────────────────────────────────────────

    @property
    def index(self) -> int | None:
        raw = self.first(INDEX)
        try:
            return None if raw is None else int(raw)
        except ValueError:
            return None

    @index.setter
    def index(self, value: int | None) -> None:
        self.replace(INDEX, None if value is None else str(value))

    # ── SORT-AS ───────────────────────────────────────────────────────────────

    @property
    def sort_as(self) -> list[str]:
        return self.get(SORT_AS)

    @sort_as.setter
    def sort_as(self, values: Iterable[str]) -> None:
        self.remove_all(SORT_AS)
        self.put_all(SORT_AS, values)


def _single_value_accessor(name: str) -> property:
    def getter(self: VCardParameters) -> str | None:
        return self.first(name)

    def setter(self: VCardParameters, value: str | None) -> None:
        self.replace(name, value)

    return property(getter, setter, doc=f"The {name} parameter.")


for _attr, _name in (
    ("altid", ALTID),
    ("calscale", CALSCALE),
    ("charset", CHARSET),
    ("encoding", ENCODING),
    ("geo", GEO),
    ("label", LABEL),
    ("language", LANGUAGE),
    ("level", LEVEL),
    ("mediatype", MEDIATYPE),
    ("tz", TZ),
):
    setattr(VCardParameters, _attr, _single_value_accessor(_name))
del _attr, _name


def parameter_supported(name: str, version: VCardVersion) -> bool:
    versions = PARAMETER_VERSIONS.get(name.upper())
    return versions is None or version in versions


def type_versions(property_name: str, type_value: str) -> frozenset[VCardVersion] | None:
    """Versions defining a TYPE value for a property, None if unregistered."""
    table = TYPE_VALUES.get(property_name.upper())
    if table is None:
        return None
    return table.get(type_value.lower())
