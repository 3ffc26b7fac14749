from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .model import FormattedName, StructuredName, VCard, VCardProperty
from .normalize import property_name
from .parameters import LABEL, PREF, parameter_supported, type_versions
from .scribes.registry import ScribeIndex
from .version import VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

_REQUIRED: dict[VCardVersion, tuple[tuple[type[VCardProperty], str], ...]] = {
    V2_1: ((StructuredName, "N"),),
    V3_0: ((StructuredName, "N"), (FormattedName, "FN")),
    V4_0: ((FormattedName, "FN"),),
}


@dataclass
class ValidationWarnings:
    """(property or None, message) pairs in document order."""

    items: list[tuple[VCardProperty | None, str]] = field(default_factory=list)

    def add(self, prop: VCardProperty | None, message: str) -> None:
        self.items.append((prop, message))

    def for_property(self, prop: VCardProperty) -> list[str]:
        return [m for p, m in self.items if p is prop]

    def __iter__(self) -> Iterator[tuple[VCardProperty | None, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def __str__(self) -> str:
        lines = []
        for prop, message in self.items:
            label = type(prop).__name__ if prop is not None else "vCard"
            lines.append(f"[{label}] {message}")
        return "\n".join(lines)


def validate(vcard: VCard, version: VCardVersion | None = None, index: ScribeIndex | None = None) -> ValidationWarnings:
    """Advisory checks of a document against a vCard version."""
    version = version or vcard.version
    index = index or ScribeIndex()
    warnings = ValidationWarnings()

    for cls, name in _REQUIRED[version]:
        if vcard.get_property(cls) is None:
            warnings.add(None, f"{name} is required in version {version}.")

    for prop in vcard.properties:
        scribe = index.get_property_scribe_for(prop)
        if scribe is None:
            warnings.add(prop, f"No scribe is registered for {type(prop).__name__}.")
            continue
        for message in scribe.validate(prop, version, vcard):
            warnings.add(prop, message)
        _validate_parameters(prop, property_name(scribe, prop), version, warnings)

    return warnings


def _validate_parameters(prop: VCardProperty, name: str, version: VCardVersion, warnings: ValidationWarnings) -> None:
    params = prop.parameters

    raw_pref = params.first(PREF)
    if raw_pref is not None:
        pref = params.pref
        if pref is None or not 1 <= pref <= 100:
            warnings.add(prop, f'Invalid PREF value "{raw_pref}": must be an integer between 1 and 100.')
        elif version is not V4_0:
            warnings.add(prop, f"PREF is not supported in version {version}; it is written as TYPE=pref.")

    if LABEL in params and version is not V4_0:
        warnings.add(prop, f"The LABEL parameter is not supported in version {version} and is dropped.")

    for param_name in params.names():
        if not parameter_supported(param_name, version):
            warnings.add(prop, f"Parameter {param_name} is not supported in version {version}.")

    for type_value in params.types:
        versions = type_versions(name, type_value)
        if versions is not None and version not in versions:
            warnings.add(prop, f'TYPE value "{type_value}" is not supported in version {version}.')
