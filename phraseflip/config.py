"""
Project-wide configuration for the phraseflip command line.

The core (options, resolve, region) never reads this module: it receives
explicit values. The CLI uses load_settings() to pick defaults from the
environment and an optional JSON file, then assembles TranslationOptions.

Module Contents:
    APP_NAME: Application name for display purposes
    CONFIG_DIR: Per-user directory (~/.phraseflip)
    CONFIG_FILE: Optional JSON settings file
    Settings: Values the CLI falls back to when a flag is omitted
    load_settings: Merge file and environment settings
    setup_logging: Configure logging with a rich handler

Environment variables:
    PHRASEFLIP_TARGET_LANG, PHRASEFLIP_PROMPT, PHRASEFLIP_BACKENDS (comma
    separated), PHRASEFLIP_LIBRETRANSLATE_URL, PHRASEFLIP_LOG_LEVEL

Example:
    >>> from phraseflip.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.backends)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Application name for display and identification
APP_NAME = "phraseflip"

# Per-user directory for keys and settings
CONFIG_DIR = Path.home() / ".phraseflip"

# Optional settings file
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_PREFIX = "PHRASEFLIP_"

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """CLI-level defaults. The target language has no default."""
    target_lang: Optional[str] = None
    prompt: str = "Translate"
    backends: list[str] = field(default_factory=lambda: ["google-free"])
    libretranslate_url: Optional[str] = None
    log_level: str = "WARNING"

    def to_dict(self) -> dict:
        return {
            "target_lang": self.target_lang,
            "prompt": self.prompt,
            "backends": list(self.backends),
            "libretranslate_url": self.libretranslate_url,
            "log_level": self.log_level,
        }


def _read_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return {}
    return data


def load_settings(path: Optional[Path] = None, environ: Optional[dict] = None) -> Settings:
    """Load settings; environment variables override the JSON file."""
    env = os.environ if environ is None else environ
    data = _read_file(path or CONFIG_FILE)

    settings = Settings()
    for key in ("target_lang", "prompt", "libretranslate_url", "log_level"):
        value = env.get(ENV_PREFIX + key.upper()) or data.get(key)
        if value:
            setattr(settings, key, value)

    backends = env.get(ENV_PREFIX + "BACKENDS") or data.get("backends")
    if isinstance(backends, str):
        backends = [name.strip() for name in backends.split(",") if name.strip()]
    if backends:
        settings.backends = list(backends)

    return settings


def setup_logging(level: str = "WARNING") -> None:
    """Route logging through rich, the way the CLI prints everything else."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
