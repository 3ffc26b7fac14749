"""Version-aware parameter preparation shared by every writer.

`prepare_parameters` works on a copy of the property's parameters; the
stored property is never touched, so one document can be written at several
versions in a row.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from typing import TYPE_CHECKING

from .model import RawProperty, VCardProperty
from .parameters import PREF, VALUE, VCardParameters, parameter_supported, type_versions
from .version import VCardVersion

if TYPE_CHECKING:
    from .scribes.base import VCardPropertyScribe


def prepare_parameters(
    scribe: VCardPropertyScribe,
    prop: VCardProperty,
    version: VCardVersion,
    siblings: Sequence[VCardProperty] | None = None,
    strict: bool = False,
    preferred: Mapping[Hashable, VCardProperty] | None = None,
) -> tuple[VCardParameters, list[str]]:
    """Return the parameters to put on the wire and any warnings raised.

    `preferred` is the result of `preferred_by_kind` over `siblings`; writers
    build it once per document. It is computed here when omitted.
    """
    params = prop.parameters.copy()
    warnings: list[str] = []
    siblings = siblings if siblings is not None else [prop]
    name = property_name(scribe, prop)

    # VALUE only when it differs from the default
    params.remove_all(VALUE)
    data_type = scribe.data_type(prop, version)
    if data_type is not None and data_type != scribe.default_data_type(version):
        params.value = data_type

    scribe._prepare_parameters(prop, params, version, siblings)

    if version is VCardVersion.V4_0:
        had_pref_type = False
        while params.remove_type("pref"):
            had_pref_type = True
        if had_pref_type:
            params.pref = 1
    else:
        params.remove_all(PREF)
        if preferred is None:
            preferred = preferred_by_kind(siblings)
        if preferred.get(kind_key(prop)) is prop:
            params.add_type("pref")

    for type_value in params.types:
        if type_value.lower() == "pref":
            continue
        versions = type_versions(name, type_value)
        if versions is not None and version not in versions:
            warnings.append(f'TYPE value "{type_value}" is not supported in version {version}.')
            if strict:
                params.remove_type(type_value)

    for param_name in params.names():
        if not parameter_supported(param_name, version):
            warnings.append(f"Parameter {param_name} is not supported in version {version}.")
            if strict:
                params.remove_all(param_name)

    return params, warnings


def property_name(scribe: VCardPropertyScribe, prop: VCardProperty) -> str:
    if isinstance(prop, RawProperty):
        return prop.name.upper()
    return scribe.property_name


def kind_key(prop: VCardProperty) -> Hashable:
    """Properties with equal keys are the same kind for PREF election."""
    if isinstance(prop, RawProperty):
        return prop.name.upper()
    return type(prop)


def preferred_by_kind(props: Sequence[VCardProperty]) -> dict[Hashable, VCardProperty]:
    """The lowest-PREF property of each kind; the first one wins ties.

    Kinds where no property carries a usable PREF are left out.
    """
    best: dict[Hashable, VCardProperty] = {}
    best_pref: dict[Hashable, int] = {}
    for prop in props:
        pref = prop.parameters.pref
        if pref is None:
            continue
        key = kind_key(prop)
        if key not in best_pref or pref < best_pref[key]:
            best[key], best_pref[key] = prop, pref
    return best


def elect_preferred(
    prop: VCardProperty, siblings: Sequence[VCardProperty]
) -> VCardProperty | None:
    """The same-kind sibling with the lowest PREF."""
    return preferred_by_kind(siblings).get(kind_key(prop))
