"""
phraseflip: inline, user-togglable translation for blocks of text.

Detects the language of a text, decides whether and through which backend
to offer a translation, and keeps an annotated buffer that flips between
"original + prompt" and "translated + caption" views.

License: MIT
"""

__version__ = "0.1.0"

from phraseflip.models import AnnotatedText, DetectedLanguage, Phase, SpanStyle, TranslationResult
from phraseflip.options import (
    Behavior,
    BehaviorSet,
    ConfigurationError,
    OptionsBuilder,
    SourcePreferenceEntry,
    SourcePreferenceTable,
    TranslationOptions,
    translated_from,
)
from phraseflip.region import RegionContext, RegionListener, ToggleableRegion
from phraseflip.resolve import Resolution
from phraseflip.translate.base import Backend
from phraseflip.translate.registry import BackendRegistry

__all__ = [
    "AnnotatedText",
    "Backend",
    "BackendRegistry",
    "Behavior",
    "BehaviorSet",
    "ConfigurationError",
    "DetectedLanguage",
    "OptionsBuilder",
    "Phase",
    "RegionContext",
    "RegionListener",
    "Resolution",
    "SourcePreferenceEntry",
    "SourcePreferenceTable",
    "SpanStyle",
    "ToggleableRegion",
    "TranslationOptions",
    "TranslationResult",
    "translated_from",
]
