"""`geo:` (RFC 5870) and `tel:` (RFC 3966) URIs."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import quote, unquote


def format_coordinate(value: float) -> str:
    """Up to six decimals, no trailing zeros."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# ── geo: ──────────────────────────────────────────────────────────────────────

@dataclass
class GeoUri:
    latitude: float
    longitude: float
    altitude: float | None = None
    crs: str | None = None
    uncertainty: float | None = None
    parameters: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, uri: str) -> GeoUri:
        """Raises ValueError for anything that is not a `geo:` URI."""
        scheme, sep, rest = uri.strip().partition(":")
        if not sep or scheme.lower() != "geo":
            raise ValueError(f"Invalid geo URI: {uri}")
        coords, *params = rest.split(";")
        parts = coords.split(",")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid geo URI: {uri}")
        try:
            numbers = [float(p) for p in parts]
        except ValueError as e:
            raise ValueError(f"Invalid geo URI: {uri}") from e

        geo = cls(numbers[0], numbers[1], numbers[2] if len(numbers) == 3 else None)
        for param in params:
            if not param:
                continue
            name, _, value = param.partition("=")
            name = name.lower()
            value = unquote(value)
            if name == "crs":
                geo.crs = value
            elif name == "u":
                try:
                    geo.uncertainty = float(value)
                except ValueError as e:
                    raise ValueError(f"Invalid geo URI: {uri}") from e
            else:
                geo.parameters[name] = value
        return geo

    def __str__(self) -> str:
        out = f"geo:{format_coordinate(self.latitude)},{format_coordinate(self.longitude)}"
        if self.altitude is not None:
            out += f",{format_coordinate(self.altitude)}"
        if self.crs is not None:
            out += f";crs={quote(self.crs, safe='')}"
        if self.uncertainty is not None:
            out += f";u={format_coordinate(self.uncertainty)}"
        for name, value in self.parameters.items():
            out += f";{name}={quote(value, safe='')}"
        return out


# ── tel: ──────────────────────────────────────────────────────────────────────

_GLOBAL_NUMBER_RE = re.compile(r"^\+[\d\-.()]*\d[\d\-.()]*$")
_LOCAL_NUMBER_RE = re.compile(r"^[\d*#A-Fa-f\-.()p]*[\d*#A-Fa-f][\d*#A-Fa-f\-.()p]*$")


@dataclass
class TelUri:
    number: str
    extension: str | None = None
    isdn_subaddress: str | None = None
    phone_context: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.number.startswith("+"):
            if not _GLOBAL_NUMBER_RE.match(self.number):
                raise ValueError(f"Invalid global phone number: {self.number}")
        else:
            if not _LOCAL_NUMBER_RE.match(self.number):
                raise ValueError(f"Invalid local phone number: {self.number}")
            if self.phone_context is None:
                raise ValueError("A local phone number requires a phone-context")

    @classmethod
    def parse(cls, uri: str) -> TelUri:
        """Raises ValueError for anything that is not a `tel:` URI."""
        scheme, sep, rest = uri.strip().partition(":")
        if not sep or scheme.lower() != "tel":
            raise ValueError(f"Invalid tel URI: {uri}")
        number, *params = rest.split(";")
        fields: dict[str, object] = {"number": unquote(number), "parameters": {}}
        for param in params:
            if not param:
                continue
            name, _, value = param.partition("=")
            name = name.lower()
            value = unquote(value)
            if name == "ext":
                fields["extension"] = value
            elif name == "isub":
                fields["isdn_subaddress"] = value
            elif name == "phone-context":
                fields["phone_context"] = value
            else:
                fields["parameters"][name] = value  # type: ignore[index]
        return cls(**fields)  # type: ignore[arg-type]

    def __str__(self) -> str:
        out = f"tel:{self.number}"
        if self.extension is not None:
            out += f";ext={self.extension}"
        if self.isdn_subaddress is not None:
            out += f";isub={quote(self.isdn_subaddress, safe='')}"
        if self.phone_context is not None:
            out += f";phone-context={self.phone_context}"
        for name, value in self.parameters.items():
            out += f";{name}={quote(value, safe='')}"
        return out
