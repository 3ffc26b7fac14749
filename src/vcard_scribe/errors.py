from __future__ import annotations


class VCardError(Exception):
    """Base class for everything raised by vcard_scribe."""


class SkipMeError(VCardError):
    """A property cannot be written at the requested version or syntax."""


class CannotParseError(VCardError):
    """The raw wire data of a property cannot be decoded."""


class ScribeNotFoundError(VCardError, KeyError):
    """No scribe is registered for a property class."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
