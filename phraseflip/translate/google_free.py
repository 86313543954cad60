"""
Google Free backend using the deep-translator library.

This backend uses the public Google Translate web endpoint through
deep-translator. It doesn't require an API key but has rate limits and may
break if Google changes their interface. Detection runs on-device with
lingua, so a region can decide whether to offer translation without a
network round trip.
"""

from __future__ import annotations

from typing import Optional

from phraseflip.models import DetectedLanguage
from phraseflip.translate.base import Backend
from phraseflip.translate.detection import LinguaDetector, shared_detector


class GoogleFreeBackend(Backend):
    """Free Google Translate via deep-translator.

    Usage:
        backend = GoogleFreeBackend()
        backend.translate("Bonjour", "en")
    """

    def __init__(self, detector: Optional[LinguaDetector] = None):
        self._detector = detector
        self._translator_cls = None

    @property
    def name(self) -> str:
        return "google-free"

    def _get_translator_cls(self):
        """Lazy import of deep-translator's GoogleTranslator."""
        if self._translator_cls is None:
            from deep_translator import GoogleTranslator
            self._translator_cls = GoogleTranslator
        return self._translator_cls

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        detector = self._detector or shared_detector()
        return detector.detect(text, backend_name=self.name)

    def translate(self, text: str, target_language_code: str) -> str:
        translator_cls = self._get_translator_cls()
        try:
            translator = translator_cls(source="auto", target=self._normalize_lang(target_language_code))
            translated = translator.translate(text)
        except Exception as e:
            raise RuntimeError(f"Google Free translation failed: {e}") from e

        if translated is None:
            raise RuntimeError("Google Free translation failed: empty response")
        return translated

    def _normalize_lang(self, lang: str) -> str:
        """Normalize language code for Google.

        Google uses ISO 639-1 codes, except for Chinese which needs a script.
        """
        lang_lower = lang.lower().strip()
        if lang_lower == "zh":
            return "zh-CN"
        return lang_lower
