import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from vcard_scribe.cli import app

runner = CliRunner()

GOOD = "BEGIN:VCARD\r\nVERSION:3.0\r\nN:Doe;Jo;;;\r\nFN:Jo Doe\r\nTEL;TYPE=home,pref:555-0100\r\nEND:VCARD\r\n"
NO_FN = "BEGIN:VCARD\r\nVERSION:4.0\r\nN:Roe;Ann;;;\r\nEND:VCARD\r\n"


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in").mkdir()
    (tmp_path / "in" / "good.vcf").write_text(GOOD, encoding="utf-8", newline="")
    return tmp_path


# ── convert ────────────────────────────────────────────────────────────────────

def test_convert_to_text_at_target_version(workdir: Path):
    result = runner.invoke(app, ["convert", "in", "-o", "out.vcf", "--target-version", "4.0"])
    assert result.exit_code == 0, result.output
    text = (workdir / "out.vcf").read_text(encoding="utf-8")
    assert "VERSION:4.0" in text
    assert "TEL;TYPE=home;PREF=1:555-0100" in text


def test_convert_to_jcard(workdir: Path):
    result = runner.invoke(app, ["convert", "in/good.vcf", "-o", "out.json", "--to", "jcard"])
    assert result.exit_code == 0, result.output
    data = json.loads((workdir / "out.json").read_text(encoding="utf-8"))
    assert data[0] == "vcard"


def test_convert_uses_config_file(workdir: Path):
    (workdir / "vcard-scribe.toml").write_text('target_version = "2.1"\n')
    result = runner.invoke(app, ["convert", "in", "-o", "out.vcf"])
    assert result.exit_code == 0, result.output
    assert "VERSION:2.1" in (workdir / "out.vcf").read_text(encoding="utf-8")


def test_convert_writes_warnings_log(workdir: Path):
    result = runner.invoke(app, [
        "convert", "in", "-o", "out.vcf", "-V", "2.1", "--warnings-log", "warnings.txt",
    ])
    assert result.exit_code == 0, result.output
    log = (workdir / "warnings.txt").read_text(encoding="utf-8")
    assert log.startswith("vcard-scribe: warnings log")


def test_convert_rejects_unknown_syntax(workdir: Path):
    result = runner.invoke(app, ["convert", "in", "-o", "out.csv", "--to", "csv"])
    assert result.exit_code != 0
    assert not (workdir / "out.csv").exists()


def test_convert_rejects_unknown_version(workdir: Path):
    result = runner.invoke(app, ["convert", "in", "-o", "out.vcf", "-V", "5.0"])
    assert result.exit_code != 0


def test_convert_without_inputs_exits_2(workdir: Path):
    result = runner.invoke(app, ["convert", "missing/*.vcf", "-o", "out.vcf"])
    assert result.exit_code == 2
    assert "No readable vCard files found" in result.output


# ── validate ───────────────────────────────────────────────────────────────────

def test_validate_clean_file(workdir: Path):
    result = runner.invoke(app, ["validate", "in"])
    assert result.exit_code == 0, result.output
    assert "0 with problems" in result.output


def test_validate_reports_problems(workdir: Path):
    (workdir / "in" / "bad.vcf").write_text(NO_FN, encoding="utf-8", newline="")
    result = runner.invoke(app, ["validate", "in"])
    assert result.exit_code == 1
    assert "FN is required in version 4.0." in result.output
    assert "1 with problems" in result.output


def test_validate_against_other_version(workdir: Path):
    result = runner.invoke(app, ["validate", "in", "--version", "4.0"])
    assert result.exit_code == 0, result.output


# ── init-config ────────────────────────────────────────────────────────────────

def test_init_config_is_idempotent(workdir: Path):
    result = runner.invoke(app, ["init-config"])
    assert result.exit_code == 0
    assert "Wrote vcard-scribe.toml" in result.output
    assert (workdir / "vcard-scribe.toml").exists()

    result = runner.invoke(app, ["init-config"])
    assert "already exists" in result.output
