"""The scribe protocol: one strategy object per property kind.

A scribe knows how to write its property to each syntax and read it back.
The public methods handle the bookkeeping shared by every kind (parameter
attachment, warning collection, version checks) and call the underscore
hooks that subclasses override.

Writers raise `SkipMeError` when a property cannot be represented; parsers
raise `CannotParseError` when raw data cannot be decoded. Both are caught
by the stream reader/writer and never abort a whole document.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ..datatype import VCardDataType
from ..elements import HCardElement, XCardElement
from ..errors import CannotParseError
from ..model import VCardProperty
from ..normalize import prepare_parameters
from ..parameters import VCardParameters
from ..values import JCardValue, escape, unescape
from ..version import ALL_VERSIONS, XCARD_NAMESPACE, VCardVersion

P = TypeVar("P", bound=VCardProperty)


@dataclass
class ParseResult(Generic[P]):
    property: P
    warnings: list[str] = field(default_factory=list)


class VCardPropertyScribe(Generic[P]):
    property_class: type[P]
    property_name: str
    supported_versions: frozenset[VCardVersion] = ALL_VERSIONS

    def __init__(self, property_class: type[P] | None = None, property_name: str | None = None):
        if property_class is not None:
            self.property_class = property_class
        if property_name is not None:
            self.property_name = property_name.upper()

    @property
    def qname(self) -> tuple[str, str]:
        """(namespace, local name) of the xCard element."""
        return XCARD_NAMESPACE, self.property_name.lower()

    def is_supported(self, version: VCardVersion) -> bool:
        return version in self.supported_versions

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.property_name})"

    # ── Data types ────────────────────────────────────────────────────────────

    def default_data_type(self, version: VCardVersion) -> VCardDataType | None:
        """The data type assumed when there is no VALUE parameter."""
        return self._default_data_type(version)

    def data_type(self, prop: P, version: VCardVersion) -> VCardDataType | None:
        """The data type the property's current value is written as."""
        return self._data_type(prop, version)

    # ── Parameters ────────────────────────────────────────────────────────────

    def prepare_parameters(
        self,
        prop: P,
        version: VCardVersion,
        siblings: Sequence[VCardProperty] | None = None,
        strict: bool = False,
        preferred: Mapping[Hashable, VCardProperty] | None = None,
    ) -> tuple[VCardParameters, list[str]]:
        return prepare_parameters(self, prop, version, siblings, strict, preferred)

    # ── Writing ───────────────────────────────────────────────────────────────

    def write_text(self, prop: P, version: VCardVersion) -> str:
        """The escaped plain-text value."""
        return self._write_text(prop, version)

    def write_xml(self, prop: P, element: XCardElement) -> None:
        self._write_xml(prop, element)

    def write_json(self, prop: P) -> JCardValue:
        return self._write_json(prop)

    # ── Parsing ───────────────────────────────────────────────────────────────

    def parse_text(
        self,
        value: str,
        data_type: VCardDataType | None,
        version: VCardVersion,
        parameters: VCardParameters | None = None,
    ) -> ParseResult[P]:
        """Decode an escaped plain-text value."""
        params = parameters if parameters is not None else VCardParameters()
        warnings: list[str] = []
        prop = self._parse_text(value, data_type, version, params, warnings)
        prop.parameters = params
        return ParseResult(prop, warnings)

    def parse_xml(
        self, element: XCardElement, parameters: VCardParameters | None = None
    ) -> ParseResult[P]:
        params = parameters if parameters is not None else VCardParameters()
        warnings: list[str] = []
        prop = self._parse_xml(element, params, warnings)
        prop.parameters = params
        return ParseResult(prop, warnings)

    def parse_html(self, element: HCardElement) -> ParseResult[P]:
        params = VCardParameters()
        warnings: list[str] = []
        prop = self._parse_html(element, params, warnings)
        prop.parameters = params
        return ParseResult(prop, warnings)

    def parse_json(
        self,
        value: JCardValue,
        data_type: VCardDataType | None,
        parameters: VCardParameters | None = None,
    ) -> ParseResult[P]:
        params = parameters if parameters is not None else VCardParameters()
        warnings: list[str] = []
        prop = self._parse_json(value, data_type, params, warnings)
        prop.parameters = params
        return ParseResult(prop, warnings)

    # ── Validation ────────────────────────────────────────────────────────────

    def validate(self, prop: P, version: VCardVersion, vcard=None) -> list[str]:
        """Advisory checks; never changes what gets written."""
        warnings: list[str] = []
        if not self.is_supported(version):
            supported = ", ".join(sorted(v.version for v in self.supported_versions))
            warnings.append(
                f"{self.property_name} is not supported in version {version} "
                f"(supported: {supported})."
            )
        self._validate(prop, version, vcard, warnings)
        return warnings

    # ── Hooks ─────────────────────────────────────────────────────────────────

    def _default_data_type(self, version: VCardVersion) -> VCardDataType | None:
        raise NotImplementedError

    def _data_type(self, prop: P, version: VCardVersion) -> VCardDataType | None:
        return self.default_data_type(version)

    def _prepare_parameters(
        self,
        prop: P,
        params: VCardParameters,
        version: VCardVersion,
        siblings: Sequence[VCardProperty],
    ) -> None:
        pass

    def _write_text(self, prop: P, version: VCardVersion) -> str:
        raise NotImplementedError

    def _parse_text(
        self,
        value: str,
        data_type: VCardDataType | None,
        version: VCardVersion,
        params: VCardParameters,
        warnings: list[str],
    ) -> P:
        raise NotImplementedError

    def _write_xml(self, prop: P, element: XCardElement) -> None:
        data_type = self.data_type(prop, VCardVersion.V4_0)
        value = unescape(self.write_text(prop, VCardVersion.V4_0))
        element.append_datatype(data_type.name if data_type else None, value)

    def _parse_xml(
        self, element: XCardElement, params: VCardParameters, warnings: list[str]
    ) -> P:
        child = element.first_child()
        if child is None:
            raise missing_xml_elements()
        tag, text = child
        data_type = None if tag == "unknown" else VCardDataType.get(tag)
        return self._parse_text(
            escape(text, VCardVersion.V4_0), data_type, VCardVersion.V4_0, params, warnings
        )

    def _parse_html(
        self, element: HCardElement, params: VCardParameters, warnings: list[str]
    ) -> P:
        return self._parse_text(
            escape(element.value(), VCardVersion.V3_0),
            self.default_data_type(VCardVersion.V3_0),
            VCardVersion.V3_0,
            params,
            warnings,
        )

    def _write_json(self, prop: P) -> JCardValue:
        return JCardValue.single(unescape(self.write_text(prop, VCardVersion.V4_0)))

    def _parse_json(
        self,
        value: JCardValue,
        data_type: VCardDataType | None,
        params: VCardParameters,
        warnings: list[str],
    ) -> P:
        return self._parse_text(
            escape(value.as_single(), VCardVersion.V4_0), data_type, VCardVersion.V4_0, params, warnings
        )

    def _validate(self, prop: P, version: VCardVersion, vcard, warnings: list[str]) -> None:
        pass


def missing_xml_elements(*names: str) -> CannotParseError:
    if names:
        return CannotParseError("Property value missing. Expected one of: " + ", ".join(f"<{n}>" for n in names))
    return CannotParseError("Property value missing.")
