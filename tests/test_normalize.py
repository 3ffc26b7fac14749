from vcard_scribe import datatype
from vcard_scribe.model import Email, RawProperty, Telephone
from vcard_scribe.normalize import elect_preferred, kind_key, preferred_by_kind, prepare_parameters
from vcard_scribe.parameters import VCardParameters
from vcard_scribe.scribes.registry import ScribeIndex
from vcard_scribe.uris import TelUri
from vcard_scribe.version import VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

INDEX = ScribeIndex()


def _tel(text: str, *params: tuple[str, str]) -> Telephone:
    return Telephone(text=text, parameters=VCardParameters(params))


def _prepare(prop, version, siblings=None, strict=False, preferred=None):
    scribe = INDEX.get_property_scribe_for(prop)
    return prepare_parameters(scribe, prop, version, siblings, strict, preferred)


# ── PREF / TYPE=pref ───────────────────────────────────────────────────────────

def test_type_pref_becomes_pref_1_at_4_0():
    tel = _tel("555", ("TYPE", "work"), ("TYPE", "pref"))
    params, warnings = _prepare(tel, V4_0)
    assert params.types == ["work"]
    assert params.pref == 1
    assert warnings == []


def test_type_pref_overrides_existing_pref_at_4_0():
    tel = _tel("555", ("TYPE", "pref"), ("PREF", "3"))
    params, _ = _prepare(tel, V4_0)
    assert params.pref == 1
    assert params.get("PREF") == ["1"]
    assert not params.has_type("pref")


def test_lowest_pref_sibling_gets_type_pref_below_4_0():
    first = _tel("1", ("PREF", "2"))
    second = _tel("2", ("PREF", "1"))
    siblings = [first, second]

    params, _ = _prepare(first, V3_0, siblings)
    assert "PREF" not in params
    assert not params.has_type("pref")

    params, _ = _prepare(second, V3_0, siblings)
    assert "PREF" not in params
    assert params.types == ["pref"]


def test_pref_ties_go_to_the_first_sibling():
    a, b = _tel("1", ("PREF", "1")), _tel("2", ("PREF", "1"))
    assert elect_preferred(b, [a, b]) is a


def test_pref_election_is_per_kind():
    tel = _tel("1", ("PREF", "5"))
    email = Email("a@example.com", parameters=VCardParameters([("PREF", "1")]))
    assert elect_preferred(tel, [email, tel]) is tel


def test_raw_properties_are_compared_by_name():
    a = RawProperty(name="X-A", value="1", parameters=VCardParameters([("PREF", "2")]))
    b = RawProperty(name="x-a", value="2", parameters=VCardParameters([("PREF", "1")]))
    c = RawProperty(name="X-B", value="3", parameters=VCardParameters([("PREF", "1")]))
    assert elect_preferred(a, [a, b, c]) is b


def test_preferred_by_kind_maps_each_kind_to_its_lowest_pref():
    a, b = _tel("1", ("PREF", "2")), _tel("2", ("PREF", "1"))
    email = Email("a@example.com", parameters=VCardParameters([("PREF", "7")]))
    raw = RawProperty(name="x-a", value="1", parameters=VCardParameters([("PREF", "1")]))
    plain = _tel("3")

    preferred = preferred_by_kind([a, email, b, raw, plain])
    assert preferred == {Telephone: b, Email: email, "X-A": raw}
    assert kind_key(plain) is Telephone


def test_given_preferred_index_is_used():
    a, b = _tel("1", ("PREF", "2")), _tel("2", ("PREF", "1"))
    # an index naming a as preferred wins over re-scanning the siblings
    params, _ = _prepare(a, V3_0, [a, b], preferred={Telephone: a})
    assert params.types == ["pref"]


def test_stored_parameters_are_not_mutated():
    tel = _tel("555", ("TYPE", "pref"), ("PREF", "1"))
    before = tel.parameters.copy()
    _prepare(tel, V4_0)
    _prepare(tel, V3_0)
    _prepare(tel, V2_1)
    assert tel.parameters == before


# ── VALUE ──────────────────────────────────────────────────────────────────────

def test_value_only_when_datatype_differs_from_default():
    tel = Telephone(uri=TelUri("+1-555-555-0100"), parameters=VCardParameters([("VALUE", "text")]))
    params, _ = _prepare(tel, V4_0)
    assert params.value is datatype.URI

    params, _ = _prepare(_tel("555", ("VALUE", "uri")), V4_0)
    assert "VALUE" not in params


# ── Unsupported TYPE values and parameters ─────────────────────────────────────

def test_unsupported_type_warns_and_is_kept_when_lenient():
    tel = _tel("555", ("TYPE", "textphone"))
    params, warnings = _prepare(tel, V3_0)
    assert params.types == ["textphone"]
    assert len(warnings) == 1
    assert "textphone" in warnings[0]


def test_unsupported_type_is_dropped_when_strict():
    tel = _tel("555", ("TYPE", "textphone"), ("TYPE", "cell"))
    params, warnings = _prepare(tel, V3_0, strict=True)
    assert params.types == ["cell"]
    assert warnings


def test_unsupported_parameter_is_dropped_when_strict():
    tel = _tel("555", ("ALTID", "1"))
    params, warnings = _prepare(tel, V3_0)
    assert params.altid == "1"
    assert warnings == ["Parameter ALTID is not supported in version 3.0."]

    params, _ = _prepare(tel, V3_0, strict=True)
    assert "ALTID" not in params
