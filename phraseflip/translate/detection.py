"""
On-device language detection using lingua.

Backends whose translation service has no detection endpoint share this
detector. Building the lingua models is slow, so the detector is built
lazily on first use and then only read.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from phraseflip.models import DetectedLanguage

logger = logging.getLogger(__name__)


class LinguaDetector:
    """Language detection via lingua-language-detector.

    Usage:
        detector = LinguaDetector(languages=["en", "fr", "de"])
        detected = detector.detect("Bonjour tout le monde", backend_name="google-free")
    """

    def __init__(
        self,
        languages: Optional[Iterable[str]] = None,
        minimum_relative_distance: float = 0.0,
        preload: bool = False,
    ):
        self.languages = [code.lower() for code in languages] if languages else None
        self.minimum_relative_distance = minimum_relative_distance
        self.preload = preload
        self._detector = None

    def _get_detector(self):
        """Lazy initialization of the lingua detector."""
        if self._detector is None:
            from lingua import IsoCode639_1, Language, LanguageDetectorBuilder

            if self.languages:
                selected = [
                    Language.from_iso_code_639_1(getattr(IsoCode639_1, code.upper()))
                    for code in self.languages
                ]
                builder = LanguageDetectorBuilder.from_languages(*selected)
            else:
                builder = LanguageDetectorBuilder.from_all_languages()

            if self.minimum_relative_distance:
                builder = builder.with_minimum_relative_distance(self.minimum_relative_distance)
            if self.preload:
                builder = builder.with_preloaded_language_models()

            logger.debug("Building lingua detector (languages=%s)", self.languages or "all")
            self._detector = builder.build()

        return self._detector

    def detect(self, text: str, backend_name: str) -> Optional[DetectedLanguage]:
        """Classify text; None when lingua cannot decide."""
        if not text.strip():
            return None

        language = self._get_detector().detect_language_of(text)
        if language is None or language.iso_code_639_1 is None:
            logger.debug("Lingua could not classify %r", text[:40])
            return None

        code = language.iso_code_639_1.name.lower()
        return DetectedLanguage(
            text=text,
            language_code=code,
            language_name=language.name.title(),
            detection_backend_name=backend_name,
        )


_shared: Optional[LinguaDetector] = None


def shared_detector() -> LinguaDetector:
    """Detector used by backends that were not given their own."""
    global _shared
    if _shared is None:
        _shared = LinguaDetector()
    return _shared
