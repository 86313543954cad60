"""
Buffer rendering for toggleable regions.

Three views exist:
- plain: the source text alone (nothing to offer)
- prompt: the source text, a blank line and the interactive prompt
- translated: the source text (unless replaced), the interactive caption
  with the backend signature, a blank line and the translation

Every function returns a fresh AnnotatedText; nothing is edited in place.
to_rich_text() converts a buffer for terminal hosts.
"""

from __future__ import annotations

from typing import Mapping, Optional

from rich.style import Style
from rich.text import Text

from phraseflip.models import AnnotatedText, Span, SpanStyle, TranslationResult
from phraseflip.options import TranslationOptions

SEPARATOR = "\n\n"

DEFAULT_STYLES: dict[SpanStyle, Style] = {
    SpanStyle.PLAIN: Style(),
    SpanStyle.AFFORDANCE: Style(color="cyan", underline=True),
    SpanStyle.SIGNATURE: Style(dim=True, italic=True),
}


def render_plain(source: str) -> AnnotatedText:
    return AnnotatedText.plain(source)


def render_prompt(source: str, options: TranslationOptions) -> AnnotatedText:
    if options.behaviors.hide_translate_prompt:
        return AnnotatedText.plain(source)
    return _buffer([
        Span(source),
        Span(SEPARATOR),
        Span(options.prompt_text, SpanStyle.AFFORDANCE),
    ])


def render_translation(
    source: str,
    result: TranslationResult,
    options: TranslationOptions,
) -> AnnotatedText:
    behaviors = options.behaviors
    spans: list[Span] = []

    if not behaviors.replace_source_text:
        spans += [Span(source), Span(SEPARATOR)]

    if not behaviors.hide_translate_prompt:
        spans.append(Span(options.caption(result), SpanStyle.AFFORDANCE))
        if not behaviors.hide_signature and result.backend_name:
            spans += [Span(" "), Span(result.backend_name, SpanStyle.SIGNATURE)]
        spans.append(Span(SEPARATOR))

    spans.append(Span(result.translated_text))
    return _buffer(spans)


def _buffer(spans: list[Span]) -> AnnotatedText:
    return AnnotatedText(tuple(span for span in spans if span.text))


def to_rich_text(
    buffer: AnnotatedText,
    styles: Optional[Mapping[SpanStyle, Style]] = None,
) -> Text:
    """Convert a buffer to rich Text, one styled run per span."""
    palette = {**DEFAULT_STYLES, **(styles or {})}
    text = Text()
    for span in buffer.spans:
        text.append(span.text, style=palette[span.style])
    return text
