"""
Ordered registry of translation backends with fallback semantics.

The first registered backend is the default: it detects when no preferred
detection backend is configured, and it translates whenever no source
preference applies.

Re-including a backend that is already registered moves it to the END of
the list. Since resolution always falls back to the first entry, this
demotes the backend rather than promoting it.
"""

from __future__ import annotations

from typing import Iterator, Optional

from phraseflip.options import ConfigurationError
from phraseflip.translate.base import Backend


class BackendRegistry:
    """Ordered, identity-unique list of backends. Never empty.

    Usage:
        registry = BackendRegistry(google, deepl)
        registry.include_fallback(google)   # now [deepl, google]
        registry.default                    # deepl
    """

    def __init__(self, first: Backend, *fallbacks: Backend):
        if first is None:
            raise ConfigurationError("A backend registry needs at least one backend")
        self._backends: list[Backend] = [first]
        for backend in fallbacks:
            self.include_fallback(backend)

    def include_fallback(self, backend: Backend) -> BackendRegistry:
        """Append a backend; an already registered one is moved to the end.

        Args:
            backend: Backend to add, compared by identity

        Returns:
            This registry, for chaining

        Raises:
            ConfigurationError: If backend is not a Backend
        """
        if not isinstance(backend, Backend):
            raise ConfigurationError(f"Not a backend: {backend!r}")
        self._backends = [b for b in self._backends if b is not backend]
        self._backends.append(backend)
        return self

    @property
    def default(self) -> Backend:
        return self._backends[0]

    def get(self, name: str) -> Optional[Backend]:
        return next((b for b in self._backends if b.name == name), None)

    def names(self) -> list[str]:
        return [b.name for b in self._backends]

    def __iter__(self) -> Iterator[Backend]:
        return iter(list(self._backends))

    def __len__(self) -> int:
        return len(self._backends)

    def __contains__(self, backend: object) -> bool:
        return any(b is backend for b in self._backends)

    def __repr__(self) -> str:
        return f"BackendRegistry({', '.join(self.names())})"
