"""
Base backend interface and offline implementations.

This module defines:
- Abstract Backend interface that every detection/translation service implements
- DummyBackend for testing (deterministic detection, echo-style translation)
- DictionaryBackend for offline word-level translation

Design Philosophy:
- Backends are stateless from a region's point of view: text in, text out
- Failures propagate as exceptions; nothing here retries
- Easy to add new services (DeepL, LibreTranslate, on-device models)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Mapping, Optional

from phraseflip.models import DetectedLanguage


# Display names for the codes the offline backends report
LANGUAGE_NAMES = {
    "ar": "Arabic",
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nl": "Dutch",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


class Backend(ABC):
    """Abstract base class for all detection/translation backends.

    All backends must implement:
    - name: Identifier shown in signatures and logs
    - detect(): Classify the language of a text, or None if unsure
    - translate(): Translate a text into a target language
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend name (e.g., 'google-free', 'deepl', 'dummy')."""
        pass

    @abstractmethod
    def detect(self, text: str) -> Optional[DetectedLanguage]:
        """Detect the language of a text.

        Returns:
            DetectedLanguage, or None when the text cannot be classified
        """
        pass

    @abstractmethod
    def translate(self, text: str, target_language_code: str) -> str:
        """Translate text into the target language.

        Raises:
            Any error from the underlying service, unchanged or wrapped
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class DummyBackend(Backend):
    """A dummy backend for testing and demos.

    Detection looks the exact text up in ``detections`` (falling back to the
    '*' key); unknown text is inconclusive.

    Modes:
    - 'echo': Return the input unchanged
    - 'upper': Return uppercase version
    - 'prefix': Add [<target>] prefix
    - 'reverse': Reverse the text (for debugging)
    """

    def __init__(
        self,
        mode: str = "prefix",
        detections: Optional[Mapping[str, str]] = None,
        name: Optional[str] = None,
    ):
        self.mode = mode
        self.detections = dict(detections or {})
        self._name = name

    @property
    def name(self) -> str:
        return self._name or f"dummy-{self.mode}"

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        code = self.detections.get(text, self.detections.get("*"))
        if code is None:
            return None
        return DetectedLanguage(
            text=text,
            language_code=code,
            language_name=language_name(code),
            detection_backend_name=self.name,
        )

    def translate(self, text: str, target_language_code: str) -> str:
        if self.mode == "echo":
            return text
        elif self.mode == "upper":
            return text.upper()
        elif self.mode == "reverse":
            return text[::-1]
        else:  # prefix
            return f"[{target_language_code}] {text}"


class DictionaryBackend(Backend):
    """Offline translator using word-level lookups.

    The dictionary is keyed by (source word, target code). Unknown words
    are left unchanged. Detection reports ``language_code`` when at least
    one word of the text is in the dictionary.
    """

    _WORD = re.compile(r"\w+", re.UNICODE)

    def __init__(self, entries: Mapping[str, Mapping[str, str]], language_code: str):
        # entries: {target_code: {source_word: target_word}}
        self.entries = {
            target.lower(): {src.lower(): tgt for src, tgt in words.items()}
            for target, words in entries.items()
        }
        self.language_code = language_code.lower()

    @property
    def name(self) -> str:
        return f"dictionary-{self.language_code}"

    def _known_words(self) -> set[str]:
        known = set()
        for words in self.entries.values():
            known.update(words)
        return known

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        known = self._known_words()
        if not any(word.lower() in known for word in self._WORD.findall(text)):
            return None
        return DetectedLanguage(
            text=text,
            language_code=self.language_code,
            language_name=language_name(self.language_code),
            detection_backend_name=self.name,
        )

    def translate(self, text: str, target_language_code: str) -> str:
        words = self.entries.get(target_language_code.lower())
        if words is None:
            raise RuntimeError(
                f"{self.name} has no dictionary for target '{target_language_code}'"
            )

        def replace_with_case(match):
            matched = match.group(0)
            target = words.get(matched.lower())
            if target is None:
                return matched
            if matched[0].isupper():
                target = target[0].upper() + target[1:]
            return target

        return self._WORD.sub(replace_with_case, text)


def create_backend(backend: str, **kwargs) -> Backend:
    """Factory function to create a backend by name.

    Args:
        backend: Backend name ('dummy', 'google-free', 'deepl', ...)
        **kwargs: Backend-specific arguments

    Returns:
        Configured Backend instance

    Supported backends and aliases:
        - dummy, echo, test: Deterministic offline backend
        - googlefree, google-free, google: Google Translate via deep-translator
        - deepl: DeepL via deep-translator (needs an API key)
        - libretranslate, libre: LibreTranslate HTTP API
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("dummy", "echo", "test"):
        mode = kwargs.get("mode", "echo" if backend_lower == "echo" else "prefix")
        return DummyBackend(mode=mode, detections=kwargs.get("detections"))

    elif backend_lower in ("googlefree", "google-free", "google"):
        from phraseflip.translate.google_free import GoogleFreeBackend
        return GoogleFreeBackend(detector=kwargs.get("detector"))

    elif backend_lower in ("deepl",):
        from phraseflip.translate.deepl import DeeplBackend
        return DeeplBackend(
            api_key=kwargs.get("api_key"),
            use_free_api=kwargs.get("use_free_api", True),
            detector=kwargs.get("detector"),
        )

    elif backend_lower in ("libretranslate", "libre"):
        from phraseflip.translate.libretranslate import LibreTranslateBackend
        params = {k: v for k, v in kwargs.items() if k in ("base_url", "api_key", "timeout")}
        return LibreTranslateBackend(**params)

    else:
        available = ["dummy", "google-free", "deepl", "libretranslate"]
        raise ValueError(
            f"Unknown backend: {backend}. "
            f"Available backends: {', '.join(available)}"
        )


AVAILABLE_BACKENDS = {
    "dummy": "Offline test backend (no network)",
    "google-free": "Google Translate via deep-translator, detection via lingua",
    "deepl": "DeepL via deep-translator (DEEPL_API_KEY), detection via lingua",
    "libretranslate": "LibreTranslate HTTP API with server-side detection",
}
