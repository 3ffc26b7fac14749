import io
import re

import pytest

from vcard_scribe.model import (
    Address,
    FormattedName,
    Kind,
    Note,
    Photo,
    RawProperty,
    StructuredName,
    Telephone,
    Timezone,
    VCard,
)
from vcard_scribe.parameters import VCardParameters
from vcard_scribe.stream import PRODID
from vcard_scribe.text import VCardReader, VCardWriter
from vcard_scribe.version import VCardVersion

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0


def _read(text: str):
    reader = VCardReader(text)
    vcard = reader.read_next()
    return vcard, reader.warnings


def _write(vcard: VCard, **kwargs) -> tuple[str, list[str]]:
    writer = VCardWriter(**kwargs)
    warnings = writer.write(vcard)
    return writer.getvalue(), list(warnings)


# ── Reading ────────────────────────────────────────────────────────────────────

def test_read_basic_vcard():
    vcard, warnings = _read(
        "BEGIN:VCARD\r\n"
        "VERSION:3.0\r\n"
        "N:Doe;John;;;\r\n"
        "FN:John Doe\r\n"
        "TEL;TYPE=work,voice:+1 555 0100\r\n"
        "item1.ADR;TYPE=home:;;1 Main St;Springfield;;;\r\n"
        "END:VCARD\r\n"
    )
    assert vcard.version is V3_0
    assert vcard.formatted_name == "John Doe"
    assert vcard.get_property(StructuredName).given == "John"
    tel = vcard.get_property(Telephone)
    assert tel.text == "+1 555 0100"
    assert tel.parameters.types == ["work", "voice"]
    adr = vcard.get_property(Address)
    assert adr.group == "item1"
    assert adr.street == "1 Main St"
    assert not warnings


def test_read_folded_lines():
    vcard, _ = _read("BEGIN:VCARD\r\nVERSION:4.0\r\nNOTE:This is a long\r\n  note\r\nEND:VCARD\r\n")
    assert vcard.get_property(Note).value == "This is a long note"


def test_read_2_1_nameless_parameters_and_quoted_printable():
    vcard, _ = _read(
        "BEGIN:VCARD\r\n"
        "VERSION:2.1\r\n"
        "TEL;HOME;VOICE:555-0100\r\n"
        "NOTE;ENCODING=QUOTED-PRINTABLE;CHARSET=UTF-8:line1=0D=0Aline2\r\n"
        "END:VCARD\r\n"
    )
    assert vcard.version is V2_1
    assert vcard.get_property(Telephone).parameters.types == ["HOME", "VOICE"]
    note = vcard.get_property(Note)
    assert "line1" in note.value and "line2" in note.value
    assert "ENCODING" not in note.parameters
    assert "CHARSET" not in note.parameters


def test_read_missing_version_uses_default():
    vcard, _ = _read("BEGIN:VCARD\r\nFN:A\r\nEND:VCARD\r\n")
    assert vcard.version is V2_1


def test_unparseable_property_is_skipped_with_warning():
    vcard, warnings = _read(
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:A\r\nGEO:not-a-coordinate\r\nEND:VCARD\r\n"
    )
    assert vcard.formatted_name == "A"
    assert len(vcard) == 1
    assert warnings.as_lists() == [[], ["Property could not be parsed and was skipped: "
                                        'Incorrect data format. Expected "lat;long", got "not-a-coordinate".']]
    assert list(warnings)[0].startswith("Line 4 (GEO): ")


def test_unknown_version_is_warned():
    vcard, warnings = _read("BEGIN:VCARD\r\nVERSION:5.0\r\nFN:A\r\nEND:VCARD\r\n")
    assert vcard.version is V2_1
    assert any("Unknown version" in w for w in warnings)


def test_nested_vcards_are_skipped():
    vcard, warnings = _read(
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Outer\r\n"
        "BEGIN:VCARD\r\nFN:Inner\r\nEND:VCARD\r\n"
        "NOTE:after\r\nEND:VCARD\r\n"
    )
    assert [p.value for p in vcard.get_properties(FormattedName)] == ["Outer"]
    assert vcard.get_property(Note).value == "after"
    assert warnings.general


def test_reader_yields_every_document():
    text = "".join(f"BEGIN:VCARD\r\nVERSION:4.0\r\nFN:{n}\r\nEND:VCARD\r\n" for n in "ABC")
    reader = VCardReader(io.StringIO(text))
    assert [v.formatted_name for v in reader] == ["A", "B", "C"]
    assert reader.read_next() is None


def test_unknown_property_round_trips_without_warnings():
    vcard, read_warnings = _read(
        "BEGIN:VCARD\r\nVERSION:3.0\r\nX-CUSTOM-FOO;X-PARAM=abc:some\\,value;here\r\nEND:VCARD\r\n"
    )
    raw = vcard.get_raw_properties("x-custom-foo")[0]
    assert raw.value == "some\\,value;here"
    text, write_warnings = _write(vcard, add_prodid=False)
    assert "X-CUSTOM-FOO;X-PARAM=abc:some\\,value;here\r\n" in text
    assert not read_warnings
    assert write_warnings == []


# ── Writing ────────────────────────────────────────────────────────────────────

def test_write_adds_prodid_at_3_0_and_4_0_only():
    vcard = VCard(version=V3_0, properties=[FormattedName("A")])
    text, _ = _write(vcard)
    assert text == f"BEGIN:VCARD\r\nVERSION:3.0\r\nPRODID:{PRODID}\r\nFN:A\r\nEND:VCARD\r\n"

    text, _ = _write(vcard, target_version=V2_1)
    assert "PRODID" not in text
    assert "VERSION:2.1" in text


def test_write_converts_pref_between_versions():
    vcard = VCard(version=V3_0, properties=[
        Telephone(text="1", parameters=VCardParameters([("TYPE", "work"), ("TYPE", "pref")])),
        Telephone(text="2", parameters=VCardParameters([("TYPE", "home")])),
    ])
    text, _ = _write(vcard, target_version=V4_0, add_prodid=False)
    assert "TEL;TYPE=work;PREF=1:1\r\n" in text
    assert "TEL;TYPE=home:2\r\n" in text

    # the stored document is untouched, so it can be written again
    text, _ = _write(vcard, target_version=V3_0, add_prodid=False)
    assert "TEL;TYPE=work,pref:1\r\n" in text


def test_write_pref_across_three_siblings():
    vcard = VCard(version=V4_0, properties=[
        Telephone(text="a", parameters=VCardParameters([("PREF", "2")])),
        Telephone(text="b", parameters=VCardParameters([("PREF", "1")])),
        Telephone(text="c"),
    ])
    text, _ = _write(vcard, target_version=V3_0, add_prodid=False)
    assert "TEL:a\r\nTEL;TYPE=pref:b\r\nTEL:c\r\n" in text

    text, _ = _write(vcard, target_version=V4_0, add_prodid=False)
    assert "TEL;PREF=2:a\r\nTEL;PREF=1:b\r\nTEL:c\r\n" in text


def test_type_pref_wins_over_pref_value_at_4_0():
    vcard, _ = _read("BEGIN:VCARD\r\nVERSION:3.0\r\nTEL;TYPE=pref;PREF=3:1\r\nEND:VCARD\r\n")
    text, _ = _write(vcard, target_version=V4_0, add_prodid=False)
    assert "TEL;PREF=1:1\r\n" in text


def test_write_2_1_uses_quoted_printable_and_repeated_types():
    vcard = VCard(version=V2_1, properties=[
        Note("a\nb"),
        Telephone(text="555", parameters=VCardParameters([("TYPE", "home"), ("TYPE", "voice")])),
    ])
    text, _ = _write(vcard)
    assert "NOTE;ENCODING=QUOTED-PRINTABLE;CHARSET=UTF-8:a=0Ab\r\n" in text
    assert "TEL;TYPE=home;TYPE=voice:555\r\n" in text


def test_write_folds_long_lines():
    vcard = VCard(version=V4_0, properties=[Note("x" * 200)])
    text, _ = _write(vcard, add_prodid=False)
    lines = text.split("\r\n")
    assert all(len(line) <= 75 for line in lines)
    assert any(line.startswith(" ") for line in lines)

    text, _ = _write(vcard, add_prodid=False, line_length=None)
    assert "NOTE:" + "x" * 200 + "\r\n" in text


def test_quoted_printable_lines_respect_line_length():
    note = " ".join(["caf\u00e9"] * 40)
    vcard = VCard(version=V2_1, properties=[Note(note)])
    text, _ = _write(vcard)
    lines = text.split("\r\n")
    assert all(len(line) <= 75 for line in lines)

    start = next(i for i, line in enumerate(lines) if line.startswith("NOTE;"))
    assert lines[start].endswith("=")
    assert len(lines[start]) > len("NOTE;ENCODING=QUOTED-PRINTABLE;CHARSET=UTF-8:")
    # escapes are never split across a soft break
    assert all(not re.search(r"=[0-9A-F]?=$", line) for line in lines)

    again, _ = _read(text)
    assert again.get_property(Note).value == note


def test_getvalue_needs_the_default_buffer(tmp_path):
    stream = io.StringIO()
    writer = VCardWriter(stream)
    writer.write(VCard(version=V4_0, properties=[FormattedName("A")]))
    assert "FN:A\r\n" in writer.getvalue()

    path = tmp_path / "out.vcf"
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = VCardWriter(f)
        writer.write(VCard(version=V4_0, properties=[FormattedName("A")]))
        with pytest.raises(TypeError):
            writer.getvalue()
    assert "FN:A\r\n" in path.read_text(encoding="utf-8", newline="")


def test_quotes_parameter_values_with_special_characters():
    vcard = VCard(version=V4_0, properties=[
        Address(street="1 Main St", parameters=VCardParameters([("LABEL", 'Main St: "HQ"')])),
    ])
    text, _ = _write(vcard, add_prodid=False)
    assert "ADR;LABEL=\"Main St: 'HQ'\":;;1 Main St;;;;\r\n" in text


def test_property_unsupported_at_target_version():
    vcard = VCard(version=V4_0, properties=[RawProperty(name="X-A", value="1"), Timezone(text="Europe/Paris")])
    text, warnings = _write(vcard, target_version=V2_1)
    assert "TZ" not in text
    assert any("TZ" in w and "skipped" in w for w in warnings)


def test_strict_mode_skips_unsupported_properties():
    vcard = VCard(version=V4_0, properties=[FormattedName("A"), Kind("individual")])
    text, warnings = _write(vcard, target_version=V3_0, add_prodid=False)
    assert "KIND:individual" in text
    assert warnings

    text, _ = _write(vcard, target_version=V3_0, add_prodid=False, strict=True)
    assert "KIND" not in text


def test_photo_written_as_base64_at_3_0():
    vcard = VCard(version=V3_0, properties=[Photo(data=b"abc", content_type="image/jpeg")])
    text, _ = _write(vcard, add_prodid=False)
    assert "PHOTO;ENCODING=b;TYPE=JPEG:YWJj\r\n" in text
