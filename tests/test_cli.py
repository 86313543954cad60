"""
Tests for the command line interface.

Uses typer's CliRunner with the offline dummy backend.

Run with: pytest tests/test_cli.py -v
"""

import pytest
from typer.testing import CliRunner

from phraseflip import __version__
from phraseflip import config, keys
from phraseflip.cli import _parse_preference, app, build_options, build_registry
from phraseflip.options import Behavior, ConfigurationError


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep the user's settings, keys and environment out of CLI runs."""
    monkeypatch.setattr(config, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr(keys, "CONFIG_DIR", tmp_path)
    for name in ("TARGET_LANG", "PROMPT", "BACKENDS", "LIBRETRANSLATE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(config.ENV_PREFIX + name, raising=False)


DUMMY_FR = ["--backend", "dummy", "--assume-language", "fr"]


class TestShow:

    def test_prompt_view(self):
        result = runner.invoke(app, ["show", "Bonjour", "--target", "en", *DUMMY_FR])
        assert result.exit_code == 0
        assert "Bonjour" in result.output
        assert "Translate" in result.output

    def test_toggle_shows_translation(self):
        result = runner.invoke(app, ["show", "Bonjour", "--target", "en", "--toggle", *DUMMY_FR])
        assert result.exit_code == 0
        assert "Translated from French" in result.output
        assert "[en] Bonjour" in result.output

    def test_same_language_has_nothing_to_translate(self):
        result = runner.invoke(app, ["show", "Bonjour", "--target", "fr", "--toggle", *DUMMY_FR])
        assert result.exit_code == 0
        assert "Nothing to translate" in result.output

    def test_missing_target_fails(self):
        result = runner.invoke(app, ["show", "Bonjour", *DUMMY_FR])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_behavior_fails(self):
        result = runner.invoke(
            app, ["show", "Bonjour", "--target", "en", "--behavior", "sparkle", *DUMMY_FR]
        )
        assert result.exit_code == 1

    def test_target_from_environment(self, monkeypatch):
        monkeypatch.setenv("PHRASEFLIP_TARGET_LANG", "en")
        result = runner.invoke(app, ["show", "Bonjour", "--toggle", *DUMMY_FR])
        assert result.exit_code == 0
        assert "[en] Bonjour" in result.output


class TestOtherCommands:

    def test_detect(self):
        result = runner.invoke(app, ["detect", "Bonjour", *DUMMY_FR])
        assert result.exit_code == 0
        assert "French" in result.output

    def test_detect_inconclusive(self):
        result = runner.invoke(app, ["detect", "Bonjour", "--backend", "dummy"])
        assert result.exit_code == 0
        assert "could not be determined" in result.output

    def test_resolve_reports_reason(self):
        result = runner.invoke(
            app, ["resolve", "Bonjour", "--target", "en", "--exclude", "fr", *DUMMY_FR]
        )
        assert result.exit_code == 0
        assert "excluded-source" in result.output

    def test_translate_once(self):
        result = runner.invoke(app, ["translate", "Bonjour", "--target", "en", *DUMMY_FR])
        assert result.exit_code == 0
        assert "[en] Bonjour" in result.output
        assert "via dummy-prefix" in result.output

    def test_translate_passthrough(self):
        result = runner.invoke(app, ["translate", "Bonjour", "--target", "fr", *DUMMY_FR])
        assert result.exit_code == 0
        assert "Bonjour" in result.output
        assert "Not translated" in result.output

    def test_backends(self):
        result = runner.invoke(app, ["backends"])
        assert result.exit_code == 0
        assert "google-free" in result.output
        assert "libretranslate" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_interactive_toggle_and_quit(self):
        result = runner.invoke(
            app,
            ["interactive", "Bonjour", "--target", "en", *DUMMY_FR],
            input="\n\nq\n",
        )
        assert result.exit_code == 0
        assert "[en] Bonjour" in result.output

    def test_keys_list_reports_source(self, monkeypatch):
        monkeypatch.setenv("DEEPL_API_KEY", "env-key-1234567890")
        monkeypatch.setenv("LIBRETRANSLATE_API_KEY", "short")
        result = runner.invoke(app, ["keys", "list"])
        assert result.exit_code == 0
        assert "deepl" in result.output
        assert "env" in result.output


class TestAssembly:
    """Registry and options assembly from flags."""

    def test_parse_preference(self):
        assert _parse_preference("fr=deepl") == ("fr", "deepl", ["*"])
        assert _parse_preference("fr=deepl:en, de") == ("fr", "deepl", ["en", "de"])

    def test_parse_preference_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            _parse_preference("deepl")

    def test_registry_order(self):
        registry = build_registry(["dummy", "google-free"])
        assert registry.names() == ["dummy-prefix", "google-free"]

    def test_registry_from_settings(self, monkeypatch):
        monkeypatch.setenv("PHRASEFLIP_BACKENDS", "echo")
        assert build_registry([]).names() == ["dummy-echo"]

    def test_options_preference_uses_registered_backend(self):
        registry = build_registry(["dummy", "google-free"])
        options = build_options(
            registry, "en", "Translate", ["hide-signature"], ["de"], ["fr=google-free"],
        )
        assert options.source_preferences.get("fr").backend is registry.get("google-free")
        assert Behavior.HIDE_SIGNATURE in options.behaviors
        assert options.exclude_sources == frozenset({"de"})
