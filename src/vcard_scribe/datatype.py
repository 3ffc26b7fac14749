"""Value data types (the VALUE parameter and the xCard/jCard type names)."""
from __future__ import annotations

from .version import ALL_VERSIONS, VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0


class VCardDataType:
    """An interned, case-insensitive data type name."""

    _predefined: dict[str, VCardDataType] = {}
    _custom: dict[str, VCardDataType] = {}

    __slots__ = ("name", "versions")

    def __init__(self, name: str, versions: frozenset[VCardVersion] = ALL_VERSIONS):
        self.name = name.lower()
        self.versions = versions

    @classmethod
    def _define(cls, name: str, *versions: VCardVersion) -> VCardDataType:
        dt = cls(name, frozenset(versions) if versions else ALL_VERSIONS)
        cls._predefined[dt.name] = dt
        return dt

    @classmethod
    def find(cls, name: str | None) -> VCardDataType | None:
        if name is None:
            return None
        return cls._predefined.get(name.lower())

    @classmethod
    def get(cls, name: str | None) -> VCardDataType | None:
        if name is None:
            return None
        key = name.lower()
        found = cls._predefined.get(key) or cls._custom.get(key)
        if found is None:
            found = cls._custom[key] = cls(key)
        return found

    @classmethod
    def all(cls) -> list[VCardDataType]:
        return list(cls._predefined.values())

    def is_supported_by(self, version: VCardVersion) -> bool:
        return version in self.versions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VCardDataType):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"VCardDataType({self.name!r})"

    def __str__(self) -> str:
        return self.name


URL = VCardDataType._define("url", V2_1)
CONTENT_ID = VCardDataType._define("content-id", V2_1)
BINARY = VCardDataType._define("binary", V3_0)
URI = VCardDataType._define("uri", V3_0, V4_0)
TEXT = VCardDataType._define("text")
DATE = VCardDataType._define("date")
TIME = VCardDataType._define("time")
DATE_TIME = VCardDataType._define("date-time")
DATE_AND_OR_TIME = VCardDataType._define("date-and-or-time", V4_0)
TIMESTAMP = VCardDataType._define("timestamp", V4_0)
BOOLEAN = VCardDataType._define("boolean", V3_0, V4_0)
INTEGER = VCardDataType._define("integer", V3_0, V4_0)
FLOAT = VCardDataType._define("float", V3_0, V4_0)
UTC_OFFSET = VCardDataType._define("utc-offset")
LANGUAGE_TAG = VCardDataType._define("language-tag", V4_0)
