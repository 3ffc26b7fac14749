import logging
from pathlib import Path

from vcard_scribe.config import DEFAULT_CONF, Settings, ensure_config, load_settings
from vcard_scribe.version import VCardVersion


def test_missing_file_gives_defaults(tmp_path: Path):
    settings = load_settings(tmp_path / "nope.toml")
    assert settings == Settings()
    assert settings.version is None
    assert settings.writer_options() == {
        "target_version": None,
        "strict": False,
        "add_prodid": True,
        "line_length": 75,
        "pretty": False,
    }


def test_ensure_config_writes_defaults_once(tmp_path: Path):
    conf = tmp_path / "local" / "vcard-scribe.toml"

    assert ensure_config(conf) == conf
    assert conf.exists()
    txt = conf.read_text()
    assert "strict = false" in txt
    assert "line_length = 75" in txt
    assert '# target_version = "4.0"' in txt

    conf.write_text("strict = true\n")
    ensure_config(conf)
    assert conf.read_text() == "strict = true\n"


def test_default_config_loads_as_defaults(tmp_path: Path):
    conf = tmp_path / "vcard-scribe.toml"
    conf.write_text(DEFAULT_CONF)
    assert load_settings(conf) == Settings()


def test_values_are_read(tmp_path: Path):
    conf = tmp_path / "vcard-scribe.toml"
    conf.write_text('target_version = "4.0"\nstrict = true\nline_length = 0\npretty = true\nadd_prodid = false\n')
    settings = load_settings(conf)
    assert settings.version is VCardVersion.V4_0
    assert settings.strict is True
    # 0 disables folding
    assert settings.line_length is None
    assert settings.pretty is True
    assert settings.add_prodid is False


def test_unknown_version_is_ignored(tmp_path: Path, caplog):
    conf = tmp_path / "vcard-scribe.toml"
    conf.write_text('target_version = "5.0"\n')
    with caplog.at_level(logging.WARNING, logger="vcard_scribe.config"):
        settings = load_settings(conf)
    assert settings.target_version is None
    assert "5.0" in caplog.text


def test_malformed_file_falls_back_to_defaults(tmp_path: Path, caplog):
    conf = tmp_path / "vcard-scribe.toml"
    conf.write_text("strict = [\n")
    with caplog.at_level(logging.WARNING, logger="vcard_scribe.config"):
        settings = load_settings(conf)
    assert settings == Settings()
    assert "malformed" in caplog.text
