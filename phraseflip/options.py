"""
Translation options: behavior flags, per-source preferences and the resolved
configuration a region is built with.

A TranslationOptions value is immutable once built. Callers swap a whole new
value into a region instead of mutating an old one.

Usage:
    options = (
        OptionsBuilder("en")
        .exclude_sources(["de"])
        .specify_source_translation("fr", deepl)
        .include_behaviors(Behavior.HIDE_SIGNATURE)
        .build("Translate", translated_from)
    )
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Optional

from phraseflip.models import TranslationResult

if TYPE_CHECKING:
    from phraseflip.translate.base import Backend


WILDCARD = "*"

CaptionFormatter = Callable[[TranslationResult], str]


class ConfigurationError(ValueError):
    """Required configuration is missing or invalid."""


class Behavior(Enum):
    """Optional behaviors of a region. Flags are independent of each other."""
    REPLACE_SOURCE_TEXT = "replace-source-text"
    TRANSLATE_PREFERRED_SOURCE_ONLY = "translate-preferred-source-only"
    IGNORE_DETECTION = "ignore-detection"
    HIDE_SIGNATURE = "hide-signature"
    HIDE_TRANSLATE_PROMPT = "hide-translate-prompt"

    @classmethod
    def from_name(cls, name: str) -> Behavior:
        key = name.strip().lower().replace("_", "-")
        for behavior in cls:
            if behavior.value == key:
                return behavior
        available = ", ".join(b.value for b in cls)
        raise ConfigurationError(f"Unknown behavior: {name}. Available behaviors: {available}")


class BehaviorSet:
    """Immutable, presence-only set of Behavior flags."""

    __slots__ = ("_flags",)

    def __init__(self, *behaviors: Behavior):
        for behavior in behaviors:
            if not isinstance(behavior, Behavior):
                raise ConfigurationError(f"Not a behavior flag: {behavior!r}")
        self._flags = frozenset(behaviors)

    @classmethod
    def of(cls, behaviors: Iterable[Behavior]) -> BehaviorSet:
        return cls(*behaviors)

    @classmethod
    def parse(cls, names: Iterable[str]) -> BehaviorSet:
        """Build a set from names such as 'hide-signature' or 'IGNORE_DETECTION'."""
        return cls(*(Behavior.from_name(name) for name in names))

    def with_(self, *behaviors: Behavior) -> BehaviorSet:
        return BehaviorSet(*self._flags, *behaviors)

    def __contains__(self, behavior: object) -> bool:
        return behavior in self._flags

    def __iter__(self) -> Iterator[Behavior]:
        return iter(sorted(self._flags, key=lambda b: b.value))

    def __len__(self) -> int:
        return len(self._flags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BehaviorSet):
            return NotImplemented
        return self._flags == other._flags

    def __hash__(self) -> int:
        return hash(self._flags)

    def __repr__(self) -> str:
        return f"BehaviorSet({', '.join(b.name for b in self)})"

    @property
    def replace_source_text(self) -> bool:
        return Behavior.REPLACE_SOURCE_TEXT in self._flags

    @property
    def translate_preferred_source_only(self) -> bool:
        return Behavior.TRANSLATE_PREFERRED_SOURCE_ONLY in self._flags

    @property
    def ignore_detection(self) -> bool:
        return Behavior.IGNORE_DETECTION in self._flags

    @property
    def hide_signature(self) -> bool:
        return Behavior.HIDE_SIGNATURE in self._flags

    @property
    def hide_translate_prompt(self) -> bool:
        return Behavior.HIDE_TRANSLATE_PROMPT in self._flags


def _normalize_code(code: str) -> str:
    return code.strip().lower()


def _code_set(codes: Iterable[str]) -> frozenset[str]:
    """Normalize language codes; a bare string is one code, not characters."""
    if isinstance(codes, str):
        codes = [codes]
    return frozenset(_normalize_code(code) for code in codes)


@dataclass(frozen=True)
class SourcePreferenceEntry:
    """Route a detected source language to a specific backend.

    Attributes:
        source_language_code: Detected code this entry applies to
        backend: Backend to translate with
        target_language_codes: Targets this entry covers; '*' means any
    """
    source_language_code: str
    backend: Backend
    target_language_codes: frozenset[str] = frozenset({WILDCARD})

    def __post_init__(self):
        object.__setattr__(self, "source_language_code", _normalize_code(self.source_language_code))
        targets = _code_set(self.target_language_codes)
        if not targets:
            raise ConfigurationError(
                f"Source preference for '{self.source_language_code}' needs at least one target"
            )
        object.__setattr__(self, "target_language_codes", targets)

    def matches(self, source_code: str, target_code: str) -> bool:
        if self.source_language_code != _normalize_code(source_code):
            return False
        return WILDCARD in self.target_language_codes or _normalize_code(target_code) in self.target_language_codes


class SourcePreferenceTable:
    """Ordered source-code → backend table with unique source codes.

    Inserting an existing source code replaces that entry in place.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[SourcePreferenceEntry] = ()):
        ordered: list[SourcePreferenceEntry] = []
        for entry in entries:
            _upsert(ordered, entry)
        self._entries = tuple(ordered)

    def with_entry(self, entry: SourcePreferenceEntry) -> SourcePreferenceTable:
        """Return a new table with entry added.

        Args:
            entry: Preference to add; replaces an entry for the same source

        Returns:
            New SourcePreferenceTable (this one is unchanged)
        """
        return SourcePreferenceTable((*self._entries, entry))

    def find(self, source_code: str, target_code: str) -> Optional[SourcePreferenceEntry]:
        """Find the entry that routes source_code when translating to target_code.

        Args:
            source_code: Detected source language
            target_code: Target language of the options

        Returns:
            Matching entry, or None if no entry covers this pair
        """
        for entry in self._entries:
            if entry.matches(source_code, target_code):
                return entry
        return None

    def get(self, source_code: str) -> Optional[SourcePreferenceEntry]:
        code = _normalize_code(source_code)
        return next((e for e in self._entries if e.source_language_code == code), None)

    @property
    def entries(self) -> tuple[SourcePreferenceEntry, ...]:
        return self._entries

    @property
    def source_codes(self) -> list[str]:
        return [entry.source_language_code for entry in self._entries]

    def __iter__(self) -> Iterator[SourcePreferenceEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{e.source_language_code}->{e.backend.name}" for e in self._entries)
        return f"SourcePreferenceTable({pairs})"


def _upsert(entries: list[SourcePreferenceEntry], entry: SourcePreferenceEntry) -> None:
    for index, existing in enumerate(entries):
        if existing.source_language_code == entry.source_language_code:
            entries[index] = entry
            return
    entries.append(entry)


@dataclass(frozen=True)
class TranslationOptions:
    """Resolved settings for one translatable region.

    target_language_code, prompt_text and caption are required; nothing
    here falls back to an invented default.
    """
    target_language_code: str
    prompt_text: str
    caption: CaptionFormatter
    exclude_sources: frozenset[str] = frozenset()
    preferred_detection: Optional[Backend] = None
    source_preferences: SourcePreferenceTable = field(default_factory=SourcePreferenceTable)
    behaviors: BehaviorSet = field(default_factory=BehaviorSet)

    def __post_init__(self):
        if not isinstance(self.target_language_code, str) or not self.target_language_code.strip():
            raise ConfigurationError("target_language_code is required")
        if not isinstance(self.prompt_text, str) or not self.prompt_text.strip():
            raise ConfigurationError("prompt_text is required")
        if not callable(self.caption):
            raise ConfigurationError("caption must be a callable taking a TranslationResult")
        object.__setattr__(self, "target_language_code", _normalize_code(self.target_language_code))
        object.__setattr__(
            self, "exclude_sources", _code_set(self.exclude_sources)
        )

    def replace(self, **changes) -> TranslationOptions:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize options for logging/debugging."""
        return {
            "target_language_code": self.target_language_code,
            "prompt_text": self.prompt_text,
            "exclude_sources": sorted(self.exclude_sources),
            "preferred_detection": self.preferred_detection.name if self.preferred_detection else None,
            "source_preferences": {
                e.source_language_code: {
                    "backend": e.backend.name,
                    "targets": sorted(e.target_language_codes),
                }
                for e in self.source_preferences
            },
            "behaviors": [b.value for b in self.behaviors],
        }


class OptionsBuilder:
    """Fluent assembly of TranslationOptions."""

    def __init__(self, target_language_code: str):
        self._target = target_language_code
        self._exclude: frozenset[str] = frozenset()
        self._preferred_detection: Optional[Backend] = None
        self._preferences: list[SourcePreferenceEntry] = []
        self._behaviors: list[Behavior] = []

    def exclude_sources(self, codes: Iterable[str]) -> OptionsBuilder:
        """Never offer translation for these source languages.

        Args:
            codes: Language codes, or a single code as a string
        """
        self._exclude = _code_set(codes)
        return self

    def preferred_detection(self, backend: Backend) -> OptionsBuilder:
        self._preferred_detection = backend
        return self

    def specify_source_translation(
        self,
        source: str,
        backend: Backend,
        targets: Iterable[str] = (WILDCARD,),
    ) -> OptionsBuilder:
        """Route a source language to a backend.

        Args:
            source: Detected source code
            backend: Backend to translate with
            targets: Target codes the route covers ('*' for any); a bare
                string is a single code
        """
        _upsert(self._preferences, SourcePreferenceEntry(source, backend, _code_set(targets)))
        return self

    def include_behaviors(self, *behaviors: Behavior) -> OptionsBuilder:
        self._behaviors.extend(behaviors)
        return self

    def build(self, prompt_text: str, caption: CaptionFormatter) -> TranslationOptions:
        return TranslationOptions(
            target_language_code=self._target,
            prompt_text=prompt_text,
            caption=caption,
            exclude_sources=self._exclude,
            preferred_detection=self._preferred_detection,
            source_preferences=SourcePreferenceTable(self._preferences),
            behaviors=BehaviorSet(*self._behaviors),
        )


def translated_from(result: TranslationResult) -> str:
    """Caption formatter: 'Translated from French'."""
    if result.detected_source is None:
        return "Translated"
    return f"Translated from {result.detected_source.language_name}"
