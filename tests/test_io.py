import json
from pathlib import Path

import pytest

from vcard_scribe.exporter import export_vcards
from vcard_scribe.io import collect_sources, read_vcards_from_files, reader_for, sanitise_vcf
from vcard_scribe.jcard import JCardReader
from vcard_scribe.model import Email, FormattedName, Telephone, VCard
from vcard_scribe.report import source_breakdown
from vcard_scribe.version import XCARD_NAMESPACE, VCardVersion
from vcard_scribe.xcard import XCardReader

APPLE_VCF = (
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "N:Doe;Jo;;;\r\n"
    "FN:Jo Doe\r\n"
    "item1..EMAIL;type=INTERNET:jo@example.com\r\n"
    "item1.X-ABLabel:work\r\n"
    ".TEL:555-0100\r\n"
    "END:VCARD\r\n"
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "N:Roe;Ann;;;\r\n"
    "FN:Ann Roe\r\n"
    "END:VCARD\r\n"
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8", newline="")
    return path


# ── Sanitisation ───────────────────────────────────────────────────────────────

def test_sanitise_fixes_group_prefixes():
    cleaned = sanitise_vcf("item1..ADR:;;1 Main St;;;;\r\n.TEL:1\r\nNOTE:a..b\r\n")
    assert cleaned == "item1.ADR:;;1 Main St;;;;\r\nTEL:1\r\nNOTE:a..b\r\n"


def test_sanitise_leaves_clean_input_alone():
    clean = "BEGIN:VCARD\r\nitem2.URL:http://example.com/..\r\nEND:VCARD\r\n"
    assert sanitise_vcf(clean) == clean


# ── Reading files ──────────────────────────────────────────────────────────────

def test_reads_every_syntax_by_suffix(tmp_path: Path):
    _write(tmp_path / "apple.vcf", APPLE_VCF)
    _write(tmp_path / "one.json", json.dumps(
        ["vcard", [["version", {}, "text", "4.0"], ["fn", {}, "text", "Json Card"]]]
    ))
    _write(tmp_path / "two.xml", (
        f'<vcards xmlns="{XCARD_NAMESPACE}"><vcard><fn><text>Xml Card</text></fn></vcard></vcards>'
    ))
    _write(tmp_path / "three.html", '<div class="vcard"><span class="fn">Html Card</span></div>')

    results = read_vcards_from_files(collect_sources(tmp_path))
    assert [(r.source, r.vcard.formatted_name) for r in results] == [
        ("apple", "Jo Doe"),
        ("apple", "Ann Roe"),
        ("one", "Json Card"),
        ("three", "Html Card"),
        ("two", "Xml Card"),
    ]


def test_apple_groups_survive_sanitisation(tmp_path: Path):
    path = _write(tmp_path / "apple.vcf", APPLE_VCF)
    result = read_vcards_from_files([path])[0]
    email = result.vcard.get_property(Email)
    assert email.value == "jo@example.com"
    assert email.group == "item1"
    assert result.vcard.get_raw_properties("X-ABLABEL")[0].group == "item1"
    assert result.vcard.get_property(Telephone).text == "555-0100"
    assert not result.warnings


def test_each_result_keeps_its_own_warnings(tmp_path: Path):
    path = _write(tmp_path / "mixed.vcf", (
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Bad\r\nGEO:nowhere\r\nEND:VCARD\r\n"
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Good\r\nEND:VCARD\r\n"
    ))
    bad, good = read_vcards_from_files([path])
    assert len(bad.warnings) == 1
    assert not good.warnings


def test_unknown_suffix_is_rejected(tmp_path: Path):
    path = _write(tmp_path / "notes.txt", "hello")
    with pytest.raises(ValueError):
        reader_for(path)


def test_collect_sources_skips_other_files(tmp_path: Path):
    _write(tmp_path / "b.vcf", "")
    _write(tmp_path / "a.VCF", "")
    _write(tmp_path / "readme.txt", "")
    (tmp_path / "sub.vcf").mkdir()
    assert [p.name for p in collect_sources(tmp_path)] == ["a.VCF", "b.vcf"]
    assert collect_sources(tmp_path / "missing") == []


# ── Export ─────────────────────────────────────────────────────────────────────

def _cards() -> list[VCard]:
    return [
        VCard(version=VCardVersion.V3_0, properties=[FormattedName("A")]),
        VCard(version=VCardVersion.V4_0, properties=[FormattedName("B")]),
    ]


def test_export_text_keeps_crlf(tmp_path: Path):
    out = tmp_path / "nested" / "out.vcf"
    count, warnings = export_vcards(_cards(), out, target_version=VCardVersion.V4_0)
    assert count == 2
    assert len(warnings) == 2
    data = out.read_bytes()
    assert data.count(b"VERSION:4.0\r\n") == 2
    assert b"\r\r\n" not in data


def test_export_text_keeps_each_version_without_target(tmp_path: Path):
    out = tmp_path / "out.vcf"
    export_vcards(_cards(), out, add_prodid=False)
    text = out.read_text(encoding="utf-8")
    assert "VERSION:3.0" in text
    assert "VERSION:4.0" in text


def test_export_xcard_and_jcard(tmp_path: Path):
    xml_out = tmp_path / "out.xml"
    export_vcards(_cards(), xml_out, syntax="xcard", pretty=True)
    assert [v.formatted_name for v in XCardReader(xml_out.read_bytes())] == ["A", "B"]

    json_out = tmp_path / "out.json"
    export_vcards(_cards(), json_out, syntax="jcard")
    assert [v.formatted_name for v in JCardReader(json_out.read_text(encoding="utf-8"))] == ["A", "B"]


def test_export_unknown_syntax(tmp_path: Path):
    with pytest.raises(ValueError):
        export_vcards(_cards(), tmp_path / "out.csv", syntax="csv")


def test_source_breakdown_counts_cards_and_warnings(tmp_path: Path):
    path = _write(tmp_path / "mixed.vcf", (
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Bad\r\nGEO:nowhere\r\nEND:VCARD\r\n"
        "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Good\r\nEND:VCARD\r\n"
    ))
    other = _write(tmp_path / "apple.vcf", APPLE_VCF)
    results = read_vcards_from_files([path, other])
    assert source_breakdown(results) == {"apple": (2, 0), "mixed": (2, 1)}
