"""
Shared fixtures for phraseflip tests.

RecordingBackend is an offline backend that counts calls and can be made
to block or fail, so region tests can observe exactly how often a backend
is consulted.
"""

import threading

import pytest

from phraseflip.models import DetectedLanguage, TranslationResult
from phraseflip.options import OptionsBuilder
from phraseflip.translate.base import Backend, language_name
from phraseflip.translate.registry import BackendRegistry


class RecordingBackend(Backend):
    """Backend with scripted detection that records every call."""

    def __init__(self, name, detections=None, translations=None, fail_with=None):
        self._name = name
        self.detections = dict(detections or {})
        self.translations = dict(translations or {})
        self.fail_with = fail_with
        self.detect_calls = []
        self.detect_threads = []
        self.translate_calls = []
        self.gate = None

    @property
    def name(self):
        return self._name

    def hold(self):
        """Make translate() block until release() is called."""
        self.gate = threading.Event()
        return self

    def release(self):
        if self.gate is not None:
            self.gate.set()

    def detect(self, text):
        self.detect_calls.append(text)
        self.detect_threads.append(threading.get_ident())
        code = self.detections.get(text, self.detections.get("*"))
        if code is None:
            return None
        return DetectedLanguage(text, code, language_name(code), self._name)

    def translate(self, text, target_language_code):
        self.translate_calls.append((text, target_language_code))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail_with is not None:
            raise self.fail_with
        return self.translations.get(text, f"{text} ({target_language_code})")


def caption(result: TranslationResult) -> str:
    source = result.detected_source.language_name if result.detected_source else "unknown"
    return f"Translated from {source}"


@pytest.fixture
def make_backend():
    """Factory for RecordingBackend instances."""
    return RecordingBackend


@pytest.fixture
def google_like():
    return RecordingBackend(
        "GoogleLike",
        detections={"Bonjour": "fr", "Hello": "en", "Hola": "es", "Hallo": "de"},
        translations={"Bonjour": "Hello", "Hola": "Hello", "Hallo": "Hello"},
    )


@pytest.fixture
def deep_like():
    return RecordingBackend(
        "DeepLike",
        detections={"Bonjour": "fr", "Hola": "es"},
        translations={"Bonjour": "Good day", "Hola": "Hi"},
    )


@pytest.fixture
def registry(google_like, deep_like):
    return BackendRegistry(google_like, deep_like)


@pytest.fixture
def build_options():
    """Build TranslationOptions with the test caption formatter."""
    def build(target="en", prompt="Translate", **kwargs):
        builder = OptionsBuilder(target)
        if "exclude" in kwargs:
            builder.exclude_sources(kwargs["exclude"])
        if "detection" in kwargs:
            builder.preferred_detection(kwargs["detection"])
        for source, backend, targets in kwargs.get("prefer", []):
            builder.specify_source_translation(source, backend, targets)
        builder.include_behaviors(*kwargs.get("behaviors", []))
        return builder.build(prompt, caption)
    return build
