from __future__ import annotations

from enum import Enum

XCARD_NAMESPACE = "urn:ietf:params:xml:ns:vcard-4.0"


class VCardVersion(Enum):
    V2_1 = "2.1"
    V3_0 = "3.0"
    V4_0 = "4.0"

    @property
    def version(self) -> str:
        return self.value

    @property
    def xml_namespace(self) -> str | None:
        """Only 4.0 has an XML representation (RFC 6351)."""
        return XCARD_NAMESPACE if self is VCardVersion.V4_0 else None

    @classmethod
    def get(cls, text: str | None) -> VCardVersion | None:
        if text is None:
            return None
        text = text.strip()
        for v in cls:
            if v.value == text:
                return v
        return None

    def __str__(self) -> str:
        return self.value


ALL_VERSIONS = frozenset(VCardVersion)
