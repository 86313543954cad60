"""
Detection and backend resolution.

Given a text, its options and the backend registry, decide which language
the text is in and which backend (if any) should translate it:

1. Detection is skipped when IGNORE_DETECTION is set or the text is empty;
   the source is then unknown.
2. Otherwise the preferred detection backend, or the registry default,
   classifies the text. An inconclusive answer also means unknown.
3. For a known source:
   - same language as the target, or an excluded source: no backend
   - TRANSLATE_PREFERRED_SOURCE_ONLY: the matching preference or no backend
   - otherwise: the matching preference or the registry default
4. For an unknown source: the registry default.

A resolution without a backend is a normal outcome, not an error.
translate() wraps all of this in one call for hosts that need no toggling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from phraseflip.models import DetectedLanguage, TranslationResult
from phraseflip.options import TranslationOptions
from phraseflip.translate.base import Backend
from phraseflip.translate.registry import BackendRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one text.

    Attributes:
        detected: Detected source language, None when unknown
        backend: Backend to translate with, None to not offer translation
        reason: Short machine-readable reason for the decision
    """
    detected: Optional[DetectedLanguage]
    backend: Optional[Backend]
    reason: str = ""

    @property
    def translatable(self) -> bool:
        return self.backend is not None


def detect(
    text: str,
    options: TranslationOptions,
    registry: BackendRegistry,
) -> Optional[DetectedLanguage]:
    """Detect the source language of text, or None when unknown/skipped."""
    if options.behaviors.ignore_detection or not text:
        return None

    detector = options.preferred_detection or registry.default
    detected = detector.detect(text)
    if detected is None:
        logger.debug("Detection by %s was inconclusive", detector.name)
    return detected


def resolve(
    text: str,
    options: TranslationOptions,
    registry: BackendRegistry,
) -> Resolution:
    """Decide the detected source and the backend to translate with."""
    detected = detect(text, options, registry)

    if detected is None:
        resolution = Resolution(None, registry.default, "unknown-source")
        _log(resolution)
        return resolution

    code = detected.language_code.lower()
    target = options.target_language_code

    if code == target:
        resolution = Resolution(detected, None, "same-language")
    elif code in options.exclude_sources:
        resolution = Resolution(detected, None, "excluded-source")
    else:
        preference = options.source_preferences.find(code, target)
        if preference is not None:
            resolution = Resolution(detected, preference.backend, "source-preference")
        elif options.behaviors.translate_preferred_source_only:
            resolution = Resolution(detected, None, "not-a-preferred-source")
        else:
            resolution = Resolution(detected, registry.default, "default-backend")

    _log(resolution)
    return resolution


def _log(resolution: Resolution) -> None:
    logger.debug(
        "Resolved source=%s backend=%s (%s)",
        resolution.detected.language_code if resolution.detected else "unknown",
        resolution.backend.name if resolution.backend else "none",
        resolution.reason,
    )


def translate(
    text: str,
    options: TranslationOptions,
    registry: BackendRegistry,
) -> TranslationResult:
    """Detect, resolve and translate in one blocking call.

    When nothing resolves (same language, excluded or not a preferred
    source) the text comes back unchanged as a pass-through result with no
    backend name.

    Args:
        text: Text to translate
        options: Translation options
        registry: Backends to resolve against

    Returns:
        TranslationResult carrying the detected source, if any

    Raises:
        Whatever the detecting or translating backend raised
    """
    resolution = resolve(text, options, registry)
    if resolution.backend is None:
        return TranslationResult.passthrough(text, resolution.detected)

    backend = resolution.backend
    translated = backend.translate(text, options.target_language_code)
    return TranslationResult(
        translated_text=translated,
        backend_name=backend.name,
        detected_source=resolution.detected,
    )
