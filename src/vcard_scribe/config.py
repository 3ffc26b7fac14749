from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .version import VCardVersion

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("vcard-scribe.toml")


@dataclass
class Settings:
    target_version: str | None = None
    strict: bool = False
    line_length: int | None = 75
    add_prodid: bool = True
    pretty: bool = False

    @property
    def version(self) -> VCardVersion | None:
        return VCardVersion.get(self.target_version) if self.target_version else None

    def writer_options(self) -> dict[str, Any]:
        """Keyword arguments for exporter.export_vcards."""
        return {
            "target_version": self.version,
            "strict": self.strict,
            "add_prodid": self.add_prodid,
            "line_length": self.line_length,
            "pretty": self.pretty,
        }


DEFAULT_CONF = """# vcard-scribe local config (TOML)

# Version to write text vCards at: "2.1", "3.0" or "4.0".
# Leave unset to keep each vCard's own version.
# target_version = "4.0"

# Drop properties and parameters the target version does not support.
strict = false

# Fold text lines longer than this many octets (0 disables folding).
line_length = 75

# Add a PRODID to 3.0 and 4.0 vCards that have none.
add_prodid = true

# Indent xCard and jCard output.
pretty = false
"""


def load_settings(path: Path | None = None) -> Settings:
    """Read settings from a TOML file; a missing file gives the defaults."""
    path = Path(path or DEFAULT_CONFIG_PATH)
    settings = Settings()
    if not path.exists():
        return settings
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        logger.warning("Ignoring malformed config %s: %s", path, e)
        return settings

    version = data.get("target_version")
    if version is not None:
        if VCardVersion.get(str(version)) is None:
            logger.warning("Ignoring unknown target_version %r in %s", version, path)
        else:
            settings.target_version = str(version)
    settings.strict = bool(data.get("strict", settings.strict))
    line_length = data.get("line_length", settings.line_length)
    settings.line_length = (int(line_length) or None) if line_length is not None else None
    settings.add_prodid = bool(data.get("add_prodid", settings.add_prodid))
    settings.pretty = bool(data.get("pretty", settings.pretty))
    return settings


def ensure_config(path: Path | None = None) -> Path:
    """Write the commented default config if none exists yet."""
    path = Path(path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONF, encoding="utf-8")
        logger.debug("Wrote default config to %s", path)
    return path
