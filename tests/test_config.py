"""
Tests for settings loading and API key management.

Run with: pytest tests/test_config.py -v
"""

import json

import pytest

from phraseflip.config import Settings, load_settings
from phraseflip.keys import KeyManager, env_var_for, require_key


class TestLoadSettings:
    """Environment overrides the JSON file."""

    def test_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.json", environ={})
        assert settings == Settings()
        assert settings.target_lang is None
        assert settings.backends == ["google-free"]

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"target_lang": "de", "backends": ["deepl", "google-free"]}))
        settings = load_settings(path, environ={})
        assert settings.target_lang == "de"
        assert settings.backends == ["deepl", "google-free"]

    def test_environment_wins(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"target_lang": "de", "prompt": "Übersetzen"}))
        environ = {
            "PHRASEFLIP_TARGET_LANG": "en",
            "PHRASEFLIP_BACKENDS": "libretranslate, dummy",
        }
        settings = load_settings(path, environ=environ)
        assert settings.target_lang == "en"
        assert settings.prompt == "Übersetzen"
        assert settings.backends == ["libretranslate", "dummy"]

    def test_broken_file_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        settings = load_settings(path, environ={})
        assert settings == Settings()
        assert "Ignoring unreadable settings file" in caplog.text

    def test_non_object_file_is_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        assert load_settings(path, environ={}) == Settings()

    def test_to_dict(self):
        assert Settings(target_lang="en").to_dict()["target_lang"] == "en"


class TestKeyManager:
    """Key lookup order: env, keyring, config file."""

    @pytest.fixture
    def manager(self, tmp_path, monkeypatch):
        for var in ("DEEPL_API_KEY", "LIBRETRANSLATE_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        km = KeyManager(config_file=tmp_path / "keys.json")
        km._keyring_available = False
        return km

    def test_env_var_names(self):
        assert env_var_for("deepl") == "DEEPL_API_KEY"
        assert env_var_for("custom") == "CUSTOM_API_KEY"

    def test_missing_key(self, manager):
        assert manager.get_key("deepl") is None
        info = manager.get_key_info("deepl")
        assert not info.is_set
        assert info.source == "none"

    def test_set_falls_back_to_config(self, manager):
        assert manager.set_key("DeepL", "abcd1234efgh5678") == "config"
        assert manager.get_key("deepl") == "abcd1234efgh5678"
        assert json.loads(manager.config_file.read_text()) == {"deepl": "abcd1234efgh5678"}

    def test_env_overrides_config(self, manager, monkeypatch):
        manager.set_key("deepl", "from-config")
        monkeypatch.setenv("DEEPL_API_KEY", "from-env")
        assert manager.get_key("deepl") == "from-env"
        assert manager.get_key_info("deepl").source == "env"

    def test_masking(self, manager):
        manager.set_key("deepl", "abcd1234efgh5678")
        assert manager.get_key_info("deepl").masked_value == "abcd...5678"
        manager.set_key("libretranslate", "short")
        assert manager.get_key_info("libretranslate").masked_value == "*****"

    def test_delete(self, manager):
        manager.set_key("deepl", "abcd1234efgh5678")
        assert manager.delete_key("deepl")
        assert manager.get_key("deepl") is None
        assert not manager.delete_key("deepl")

    def test_list_keys_covers_services(self, manager):
        assert [info.service for info in manager.list_keys()] == ["deepl", "libretranslate"]

    def test_require_key_explains_setup(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DEEPL_API_KEY", raising=False)
        monkeypatch.setattr("phraseflip.keys.CONFIG_DIR", tmp_path)
        monkeypatch.setattr(KeyManager, "_check_keyring", lambda self: False)
        with pytest.raises(ValueError, match="DEEPL_API_KEY"):
            require_key("deepl")
