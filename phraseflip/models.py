"""
Core data models for phraseflip.

These models describe what a detection or translation produced and what a
region currently shows. They are plain values handed between the resolver,
the region state machine and whatever host draws the result.

Design Philosophy:
- Immutable: all models are frozen dataclasses or enums
- Host-agnostic: a buffer is a sequence of styled spans, not a widget
- Serializable: buffers can be dumped to dicts for debugging
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional


@dataclass(frozen=True)
class DetectedLanguage:
    """Outcome of one detection call.

    Attributes:
        text: The text that was classified
        language_code: ISO 639-1 code (e.g. 'fr')
        language_name: Human readable name (e.g. 'French')
        detection_backend_name: Name of the backend that ran detection
    """
    text: str
    language_code: str
    language_name: str
    detection_backend_name: str


@dataclass(frozen=True)
class TranslationResult:
    """Result of translating one region.

    Attributes:
        translated_text: The translated text (or the source on pass-through)
        backend_name: Backend that translated; None when nothing was attempted
        detected_source: Detection that led to this translation, if any
    """
    translated_text: str
    backend_name: Optional[str]
    detected_source: Optional[DetectedLanguage] = None

    @classmethod
    def passthrough(cls, text: str, detected: Optional[DetectedLanguage] = None) -> TranslationResult:
        return cls(translated_text=text, backend_name=None, detected_source=detected)

    @property
    def is_passthrough(self) -> bool:
        return self.backend_name is None


class Phase(Enum):
    """Phases of a toggleable region."""
    SHOWING_ORIGINAL = auto()
    TRANSLATING = auto()
    SHOWING_TRANSLATION = auto()


class SpanStyle(Enum):
    """How a host should treat a span of the buffer."""
    PLAIN = auto()          # Ordinary text
    AFFORDANCE = auto()     # Interactive: prompt or caption
    SIGNATURE = auto()      # Styled backend credit, not interactive


@dataclass(frozen=True)
class Span:
    text: str
    style: SpanStyle = SpanStyle.PLAIN

    @property
    def interactive(self) -> bool:
        return self.style is SpanStyle.AFFORDANCE


@dataclass(frozen=True)
class AnnotatedText:
    """Immutable snapshot of a region's rendered buffer.

    A host consumes this as (range, style) pairs; it never mutates it.
    Regions build a new snapshot on every render and swap it in whole.
    """
    spans: tuple[Span, ...] = ()

    @classmethod
    def plain(cls, text: str) -> AnnotatedText:
        return cls((Span(text),)) if text else cls()

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)

    def __len__(self) -> int:
        return sum(len(span.text) for span in self.spans)

    def __str__(self) -> str:
        return self.text

    def ranges(self) -> Iterator[tuple[int, int, SpanStyle]]:
        """Yield (start, end, style) for every non-empty span."""
        offset = 0
        for span in self.spans:
            end = offset + len(span.text)
            if end > offset:
                yield (offset, end, span.style)
            offset = end

    @property
    def styled_ranges(self) -> list[tuple[int, int, SpanStyle]]:
        return [r for r in self.ranges() if r[2] is not SpanStyle.PLAIN]

    @property
    def interactive_ranges(self) -> list[tuple[int, int]]:
        return [(start, end) for start, end, style in self.ranges() if style is SpanStyle.AFFORDANCE]

    def span_at(self, offset: int) -> Optional[Span]:
        """Return the span covering a character offset, if any."""
        position = 0
        for span in self.spans:
            if position <= offset < position + len(span.text):
                return span
            position += len(span.text)
        return None

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "ranges": [
                {"start": start, "end": end, "style": style.name}
                for start, end, style in self.ranges()
            ],
        }
