from datetime import date, datetime

import pytest

from vcard_scribe import datatype
from vcard_scribe.dates import PartialDate, UtcOffset
from vcard_scribe.errors import CannotParseError, SkipMeError
from vcard_scribe.model import (
    Address,
    Birthday,
    Categories,
    ClientPidMap,
    Gender,
    Geo,
    Organization,
    Photo,
    RawProperty,
    Revision,
    StructuredName,
    Telephone,
    Timezone,
)
from vcard_scribe.parameters import VCardParameters
from vcard_scribe.scribes.registry import ScribeIndex
from vcard_scribe.uris import TelUri
from vcard_scribe.values import JCardValue
from vcard_scribe.version import VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

INDEX = ScribeIndex()


def _scribe(name: str):
    return INDEX.get_property_scribe(name)


# ── ADR ────────────────────────────────────────────────────────────────────────

def test_address_with_escaped_semicolon():
    scribe = _scribe("ADR")
    params = VCardParameters([("TYPE", "home")])
    result = scribe.parse_text("P.O. Box 1234\\;;;;Austin;TX;12345;USA", datatype.TEXT, V3_0, params)
    adr = result.property
    assert adr.po_box == "P.O. Box 1234;"
    assert adr.extended is None
    assert adr.street is None
    assert (adr.locality, adr.region, adr.postal_code, adr.country) == ("Austin", "TX", "12345", "USA")
    assert adr.parameters.types == ["home"]
    assert result.warnings == []

    prepared, warnings = scribe.prepare_parameters(adr, V4_0, [adr])
    assert prepared.types == ["home"]
    assert "PREF" not in prepared
    assert warnings == []
    assert scribe.write_text(adr, V4_0) == "P.O. Box 1234\\;;;;Austin;TX;12345;USA"


def test_address_always_writes_seven_components():
    scribe = _scribe("ADR")
    adr = Address(locality="Austin")
    assert scribe.write_text(adr, V3_0) == ";;;Austin;;;"
    assert scribe.write_json(adr).values == [["", "", "", "Austin", "", "", ""]]


def test_address_label_parameter_dropped_below_4_0():
    scribe = _scribe("ADR")
    adr = Address(street="1 Main St", parameters=VCardParameters([("LABEL", "1 Main St")]))
    params, _ = scribe.prepare_parameters(adr, V3_0)
    assert "LABEL" not in params
    params, _ = scribe.prepare_parameters(adr, V4_0)
    assert params.label == "1 Main St"


def test_address_from_jcard():
    scribe = _scribe("ADR")
    value = JCardValue([["", "", ["123 Main St", "Apt 4"], "Austin", "TX", "12345", "USA"]])
    adr = scribe.parse_json(value, datatype.TEXT).property
    assert adr.street == "123 Main St,Apt 4"
    assert adr.po_box is None


# ── N / ORG / CATEGORIES ───────────────────────────────────────────────────────

def test_structured_name_text():
    scribe = _scribe("N")
    name = scribe.parse_text("Perreault;Simon;;;ing. jr,M.Sc.", datatype.TEXT, V4_0).property
    assert name == StructuredName("Perreault", "Simon", [], [], ["ing. jr", "M.Sc."])
    assert scribe.write_text(name, V4_0) == "Perreault;Simon;;;ing. jr,M.Sc."
    assert scribe.write_json(name).values == [["Perreault", "Simon", "", "", ["ing. jr", "M.Sc."]]]


def test_organization_units():
    scribe = _scribe("ORG")
    org = scribe.parse_text("ABC\\, Inc.;North American Division;Marketing", datatype.TEXT, V3_0).property
    assert org.values == ["ABC, Inc.", "North American Division", "Marketing"]
    assert scribe.write_text(org, V3_0) == "ABC\\, Inc.;North American Division;Marketing"
    assert scribe.write_json(Organization(["Acme"])).values == ["Acme"]


def test_categories_list():
    scribe = _scribe("CATEGORIES")
    cats = scribe.parse_text("work,a\\,b", datatype.TEXT, V3_0).property
    assert cats.values == ["work", "a,b"]
    assert scribe.write_json(Categories(["x", "y"])).values == ["x", "y"]


# ── TEL ────────────────────────────────────────────────────────────────────────

def test_telephone_text_and_uri():
    scribe = _scribe("TEL")
    uri = TelUri.parse("tel:+1-555-555-5555;ext=5555")
    tel = Telephone(uri=uri)
    assert scribe.data_type(tel, V4_0) is datatype.URI
    assert scribe.write_text(tel, V4_0) == "tel:+1-555-555-5555;ext=5555"
    assert scribe.data_type(tel, V3_0) is datatype.TEXT
    assert scribe.write_text(tel, V3_0) == "+1-555-555-5555 x5555"


def test_telephone_uri_parse_failure_falls_back_to_text():
    result = _scribe("TEL").parse_text("not a uri", datatype.URI, V4_0)
    assert result.property == Telephone(text="not a uri")
    assert len(result.warnings) == 1


def test_empty_telephone_is_skipped():
    with pytest.raises(SkipMeError):
        _scribe("TEL").write_text(Telephone(), V4_0)


# ── GEO ────────────────────────────────────────────────────────────────────────

def test_geo_by_version():
    scribe = _scribe("GEO")
    geo = Geo(46.772673, -71.282945)
    assert scribe.write_text(geo, V3_0) == "46.772673;-71.282945"
    assert scribe.write_text(geo, V4_0) == "geo:46.772673,-71.282945"
    assert scribe.parse_text("37.386013;-122.082932", None, V2_1).property == Geo(37.386013, -122.082932)
    assert scribe.parse_text("geo:1.5,2.5", datatype.URI, V4_0).property == Geo(1.5, 2.5)


def test_geo_needs_both_coordinates():
    scribe = _scribe("GEO")
    with pytest.raises(CannotParseError):
        scribe.parse_text("37.386013", None, V3_0)
    with pytest.raises(SkipMeError):
        scribe.write_text(Geo(latitude=1.0), V3_0)


def test_geo_validation_checks_range():
    warnings = _scribe("GEO").validate(Geo(91.0, 0.0), V4_0)
    assert warnings == ["GEO latitude 91.0 is out of range."]


# ── TZ ─────────────────────────────────────────────────────────────────────────

def test_timezone_by_version():
    scribe = _scribe("TZ")
    tz = Timezone(offset=UtcOffset(False, 5), text="America/New_York")
    assert scribe.write_text(tz, V2_1) == "-0500"
    assert scribe.write_text(tz, V3_0) == "-05:00"
    assert scribe.write_text(tz, V4_0) == "America/New_York"
    assert scribe.data_type(tz, V4_0) is datatype.TEXT
    assert scribe.data_type(Timezone(offset=UtcOffset(True, 1)), V4_0) is datatype.UTC_OFFSET


def test_timezone_text_cannot_be_written_at_2_1():
    with pytest.raises(SkipMeError):
        _scribe("TZ").write_text(Timezone(text="Europe/Paris"), V2_1)


def test_timezone_parse():
    scribe = _scribe("TZ")
    assert scribe.parse_text("-05:00", datatype.UTC_OFFSET, V3_0).property.offset == UtcOffset(False, 5)
    result = scribe.parse_text("EST", datatype.UTC_OFFSET, V3_0)
    assert result.property == Timezone(text="EST")
    assert result.warnings
    with pytest.raises(CannotParseError):
        scribe.parse_text("EST", datatype.UTC_OFFSET, V2_1)


# ── Dates ──────────────────────────────────────────────────────────────────────

def test_birthday_full_date():
    scribe = _scribe("BDAY")
    bday = Birthday(date=date(1996, 4, 15))
    assert scribe.write_text(bday, V3_0) == "1996-04-15"
    assert scribe.write_text(bday, V4_0) == "19960415"
    assert scribe.write_json(bday).values == ["1996-04-15"]
    assert scribe.data_type(Birthday(date=datetime(1996, 4, 15, 10, 0)), V3_0) is datatype.DATE_TIME


def test_birthday_partial_and_text_only_at_4_0():
    scribe = _scribe("BDAY")
    partial = scribe.parse_text("--0415", datatype.DATE_AND_OR_TIME, V4_0).property
    assert partial.partial_date == PartialDate(month=4, day=15)
    assert scribe.write_text(partial, V4_0) == "--0415"
    with pytest.raises(SkipMeError):
        scribe.write_text(partial, V3_0)
    with pytest.raises(CannotParseError):
        scribe.parse_text("--0415", datatype.DATE, V3_0)


def test_birthday_unparseable_date_becomes_text_at_4_0():
    result = _scribe("BDAY").parse_text("circa 1800", datatype.DATE_AND_OR_TIME, V4_0)
    assert result.property.text == "circa 1800"
    assert len(result.warnings) == 1


def test_revision_timestamp():
    scribe = _scribe("REV")
    rev = scribe.parse_text("19951031T222710Z", datatype.TIMESTAMP, V4_0).property
    assert isinstance(rev, Revision)
    assert scribe.write_text(rev, V4_0) == "19951031T222710Z"
    assert scribe.write_text(rev, V3_0) == "1995-10-31T22:27:10Z"


# ── Binary ─────────────────────────────────────────────────────────────────────

def test_photo_inline_data_by_version():
    scribe = _scribe("PHOTO")
    photo = Photo(data=b"abc", content_type="image/jpeg")

    params, _ = scribe.prepare_parameters(photo, V3_0)
    assert params.encoding == "b"
    assert params.types == ["JPEG"]
    assert scribe.write_text(photo, V3_0) == "YWJj"

    params, _ = scribe.prepare_parameters(photo, V2_1)
    assert params.encoding == "BASE64"

    params, _ = scribe.prepare_parameters(photo, V4_0)
    assert "ENCODING" not in params
    assert scribe.write_text(photo, V4_0) == "data:image/jpeg;base64,YWJj"


def test_photo_parse_base64():
    params = VCardParameters([("ENCODING", "b"), ("TYPE", "JPEG")])
    photo = _scribe("PHOTO").parse_text("YW Jj", datatype.BINARY, V3_0, params).property
    assert photo.data == b"abc"
    assert photo.content_type == "image/jpeg"
    assert not photo.parameters


def test_photo_url_gets_mediatype_at_4_0():
    scribe = _scribe("PHOTO")
    photo = Photo(url="http://example.com/me.png", content_type="image/png")
    params, _ = scribe.prepare_parameters(photo, V4_0)
    assert params.mediatype == "image/png"
    params, _ = scribe.prepare_parameters(photo, V2_1)
    assert params.value is datatype.URL
    assert params.types == ["PNG"]


# ── Other kinds ────────────────────────────────────────────────────────────────

def test_gender():
    scribe = _scribe("GENDER")
    gender = scribe.parse_text("f;female", datatype.TEXT, V4_0).property
    assert gender == Gender("F", "female")
    assert scribe.write_text(gender, V4_0) == "F;female"


def test_clientpidmap_requires_both_values():
    scribe = _scribe("CLIENTPIDMAP")
    pidmap = scribe.parse_text("1;urn:uuid:3df403f4-5924-4bb7-b077-3c711d9eb34b", datatype.TEXT, V4_0).property
    assert pidmap == ClientPidMap(1, "urn:uuid:3df403f4-5924-4bb7-b077-3c711d9eb34b")
    with pytest.raises(CannotParseError):
        scribe.parse_text("one;urn:x", datatype.TEXT, V4_0)
    with pytest.raises(CannotParseError):
        scribe.parse_text("1", datatype.TEXT, V4_0)


def test_raw_value_is_kept_verbatim():
    scribe = INDEX.scribe_or_raw("X-CUSTOM")
    raw = scribe.parse_text("a\\,b;c", None, V3_0).property
    assert raw == RawProperty(name="X-CUSTOM", value="a\\,b;c")
    assert scribe.write_text(raw, V3_0) == "a\\,b;c"


def test_unsupported_version_is_reported_by_validate():
    warnings = _scribe("GENDER").validate(Gender("M"), V3_0)
    assert warnings == ["GENDER is not supported in version 3.0 (supported: 4.0)."]
