"""
Detection and translation backends.

- base: Backend interface, offline backends and the create_backend factory
- registry: ordered backend registry with fallback semantics
- detection: on-device language detection (lingua)
- google_free, deepl, libretranslate: network backends
"""

from phraseflip.translate.base import Backend, DictionaryBackend, DummyBackend, create_backend
from phraseflip.translate.registry import BackendRegistry

__all__ = [
    "Backend",
    "BackendRegistry",
    "DictionaryBackend",
    "DummyBackend",
    "create_backend",
]
