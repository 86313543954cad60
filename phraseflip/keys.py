"""
API key management for phraseflip backends.

Keys are looked up in this order:
1. Environment variables (preferred for CI/production)
2. OS keychain via keyring (secure local storage)
3. ~/.phraseflip/keys.json (fallback)

Usage:
    from phraseflip.keys import KeyManager

    km = KeyManager()
    km.set_key("deepl", "xxxxxxxx:fx")
    key = km.get_key("deepl")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from phraseflip.config import CONFIG_DIR

logger = logging.getLogger(__name__)


# Services that take a key, and their env var names
SERVICES = {
    "deepl": "DEEPL_API_KEY",
    "libretranslate": "LIBRETRANSLATE_API_KEY",
}


@dataclass
class KeyInfo:
    """Where a key was found, without revealing it."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "abcd...:fx"


def env_var_for(service: str) -> str:
    return SERVICES.get(service, f"{service.upper()}_API_KEY")


class KeyManager:
    """Manage API keys across environment, keychain and a JSON file."""

    SERVICE_NAME = "phraseflip"

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or CONFIG_DIR / "keys.json"
        self._keyring_available = self._check_keyring()

    def _check_keyring(self) -> bool:
        try:
            import keyring
            keyring.get_keyring()
            return True
        except Exception as e:
            logger.debug("Keyring unavailable: %s", e)
            return False

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s: %s", self.config_file, e)
            return {}

    def _write_config(self, config: dict) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2))
        self.config_file.chmod(0o600)  # Restrict permissions

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        service = service.lower()

        if env_val := os.getenv(env_var_for(service)):
            return env_val, "env"

        if self._keyring_available:
            import keyring
            from keyring.errors import KeyringError
            try:
                if key := keyring.get_password(self.SERVICE_NAME, service):
                    return key, "keyring"
            except KeyringError as e:
                logger.debug("Keyring lookup for %s failed: %s", service, e)

        if key := self._read_config().get(service):
            return key, "config"

        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Get API key for a service, or None if not found."""
        return self._lookup(service)[0]

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Store API key for a service.

        Returns:
            Storage location used ('keyring' or 'config')
        """
        service = service.lower()

        if use_keyring and self._keyring_available:
            import keyring
            from keyring.errors import KeyringError
            try:
                keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning("Keyring refused the key, using %s: %s", self.config_file, e)

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Delete a stored key from the keychain and the config file."""
        service = service.lower()
        deleted = False

        if self._keyring_available:
            import keyring
            from keyring.errors import KeyringError, PasswordDeleteError
            try:
                keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except PasswordDeleteError:
                pass  # nothing stored there
            except KeyringError as e:
                logger.debug("Keyring delete for %s failed: %s", service, e)

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        key, source = self._lookup(service)
        return KeyInfo(
            service=service.lower(),
            is_set=key is not None,
            source=source,
            masked_value=self._mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        return [self.get_key_info(service) for service in SERVICES]

    def _mask_key(self, key: str) -> str:
        """Mask a key for display (show first 4 and last 4 chars)."""
        if len(key) <= 12:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"


def get_key(service: str) -> Optional[str]:
    """Convenience function to get an API key."""
    return KeyManager().get_key(service)


def require_key(service: str) -> str:
    """Get API key or raise error if not found."""
    key = get_key(service)
    if not key:
        raise ValueError(
            f"API key for '{service}' not found. "
            f"Set {env_var_for(service)} environment variable "
            f"or run: phraseflip keys set {service}"
        )
    return key
