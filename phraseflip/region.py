"""
Toggleable translation region.

A region owns one piece of source text and the buffer a host draws for it.
It flips between two views when the user activates the interactive span:

    SHOWING_ORIGINAL --activate--> TRANSLATING --done--> SHOWING_TRANSLATION
           ^                                                    |
           +----------------------activate----------------------+

Detection and translation run in an executor so the host's event loop stays
free. Each in-flight call is tagged with the region's generation; updating
the source or the options bumps the generation, and a completion carrying an
older generation is dropped instead of being rendered over the new content.

Usage:
    context = RegionContext(BackendRegistry(GoogleFreeBackend()))
    region = await ToggleableRegion.create("Bonjour", options, context, listener)
    await region.activate()      # translated view
    await region.activate()      # back to the prompt view
    await region.update_source("Hola")
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Optional

from phraseflip.models import AnnotatedText, Phase, TranslationResult
from phraseflip.options import ConfigurationError, TranslationOptions
from phraseflip.render import render_plain, render_prompt, render_translation
from phraseflip.resolve import Resolution, resolve
from phraseflip.translate.registry import BackendRegistry

logger = logging.getLogger(__name__)


@dataclass
class RegionContext:
    """Collaborators shared by the regions a caller creates.

    Attributes:
        registry: Backends available for detection and translation
        executor: Runs blocking backend calls; None uses the loop's default
    """
    registry: BackendRegistry
    executor: Optional[Executor] = None


class RegionListener:
    """Callbacks a host can override. All of them default to no-ops."""

    def on_affordance_activated(self, previous_phase: Phase) -> None:
        pass

    def on_translating(self) -> None:
        pass

    def on_translated(self, result: TranslationResult) -> None:
        pass

    def on_content_changed(self, buffer: AnnotatedText) -> None:
        pass


def _check_context(options: TranslationOptions, context: RegionContext) -> None:
    if options is None:
        raise ConfigurationError("A region needs translation options")
    if context is None or context.registry is None:
        raise ConfigurationError("A region needs a context with a backend registry")


class ToggleableRegion:
    """Annotated text that can flip between original and translated views.

    The constructor resolves on the calling thread, which suits hosts that
    build regions before starting a loop. Code running inside an event loop
    should use ``await ToggleableRegion.create(...)`` instead.
    """

    def __init__(
        self,
        text: str,
        options: TranslationOptions,
        context: RegionContext,
        listener: Optional[RegionListener] = None,
        resolution: Optional[Resolution] = None,
    ):
        _check_context(options, context)

        self._text = text
        self._options = options
        self._context = context
        self._listener = listener or RegionListener()

        self._generation = 0
        self._cached: Optional[tuple[int, TranslationResult]] = None
        self._restoring = False
        self._phase = Phase.SHOWING_ORIGINAL
        self._buffer = AnnotatedText()
        self._resolution = Resolution(None, None)

        if resolution is None:
            resolution = resolve(text, options, context.registry)
        self._apply_resolution(resolution)

    @classmethod
    async def create(
        cls,
        text: str,
        options: TranslationOptions,
        context: RegionContext,
        listener: Optional[RegionListener] = None,
    ) -> ToggleableRegion:
        """Build a region, running detection in the context's executor.

        Args:
            text: Source text of the region
            options: Translation options
            context: Registry and executor
            listener: Optional notification sink

        Returns:
            A region in SHOWING_ORIGINAL

        Raises:
            ConfigurationError: If options or the registry are missing
        """
        _check_context(options, context)
        loop = asyncio.get_running_loop()
        resolution = await loop.run_in_executor(
            context.executor, resolve, text, options, context.registry
        )
        return cls(text, options, context, listener, resolution=resolution)

    # -- state -------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def options(self) -> TranslationOptions:
        return self._options

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def buffer(self) -> AnnotatedText:
        return self._buffer

    @property
    def resolution(self) -> Resolution:
        return self._resolution

    @property
    def translatable(self) -> bool:
        return self._resolution.translatable

    @property
    def cached_result(self) -> Optional[TranslationResult]:
        """Last translation, if it belongs to the current text and options."""
        if self._cached is None or self._cached[0] != self._generation:
            return None
        return self._cached[1]

    # -- rendering ---------------------------------------------------------

    def _apply_resolution(self, resolution: Resolution) -> None:
        self._resolution = resolution
        if resolution.translatable:
            buffer = render_prompt(self._text, self._options)
        else:
            buffer = render_plain(self._text)
        self._set_view(buffer, Phase.SHOWING_ORIGINAL)

    def _set_view(self, buffer: AnnotatedText, phase: Phase) -> None:
        if phase is not self._phase:
            logger.debug("Region phase %s -> %s", self._phase.name, phase.name)
        self._buffer = buffer
        self._phase = phase

    def _show_translation(self, result: TranslationResult) -> None:
        self._set_view(
            render_translation(self._text, result, self._options),
            Phase.SHOWING_TRANSLATION,
        )
        self._listener.on_translated(result)
        self._listener.on_content_changed(self._buffer)

    async def _resolve(self) -> Resolution:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._context.executor,
            resolve,
            self._text,
            self._options,
            self._context.registry,
        )

    # -- entry points ------------------------------------------------------

    async def activate(self) -> Phase:
        """Handle a user activation of the interactive span.

        Returns:
            The phase after handling the activation

        Raises:
            Whatever the backend raised while translating
        """
        previous = self._phase
        self._listener.on_affordance_activated(previous)

        if previous is Phase.TRANSLATING:
            logger.debug("Activation ignored: translation already in flight")
            return self._phase

        if previous is Phase.SHOWING_TRANSLATION:
            if self._restoring:
                logger.debug("Activation ignored: already switching back")
                return self._phase
            await self._restore_original()
            return self._phase

        if not self._resolution.translatable:
            return self._phase

        cached = self.cached_result
        if cached is not None:
            logger.debug("Reusing cached translation from %s", cached.backend_name)
            self._show_translation(cached)
            return self._phase

        await self._translate()
        return self._phase

    toggle = activate

    async def _restore_original(self) -> None:
        generation = self._generation
        self._restoring = True
        try:
            resolution = await self._resolve()
        finally:
            self._restoring = False
        if generation != self._generation:
            # An update already rebuilt the region
            return
        self._apply_resolution(resolution)
        self._listener.on_content_changed(self._buffer)

    async def _translate(self) -> None:
        generation = self._generation
        resolution = self._resolution
        backend = resolution.backend
        text = self._text
        target = self._options.target_language_code

        self._phase = Phase.TRANSLATING
        self._listener.on_translating()
        logger.debug("Translating %d chars to %s with %s", len(text), target, backend.name)

        loop = asyncio.get_running_loop()
        try:
            translated = await loop.run_in_executor(
                self._context.executor, backend.translate, text, target
            )
        except asyncio.CancelledError:
            if generation == self._generation:
                logger.info("Translation with %s was cancelled", backend.name)
                self._set_view(self._buffer, Phase.SHOWING_ORIGINAL)
            raise
        except Exception:
            if generation == self._generation:
                logger.warning("Translation with %s failed", backend.name, exc_info=True)
                self._set_view(self._buffer, Phase.SHOWING_ORIGINAL)
            raise

        if generation != self._generation:
            logger.info("Discarding stale translation from %s", backend.name)
            return

        result = TranslationResult(
            translated_text=translated,
            backend_name=backend.name,
            detected_source=resolution.detected,
        )
        self._cached = (generation, result)
        self._show_translation(result)

    async def update_source(self, text: str) -> None:
        """Replace the source text and rebuild the region.

        Detection runs in the context's executor. Until it finishes the
        buffer shows the new text without a prompt. Unchanged text keeps
        the current view and cache.

        Args:
            text: New source text
        """
        if text != self._text:
            self._text = text
            self._invalidate()
            if not await self._rebuild():
                return
        self._listener.on_content_changed(self._buffer)

    async def update_options(self, options: TranslationOptions) -> None:
        """Swap in new options wholesale and rebuild the region.

        Args:
            options: Replacement options; the cache is always dropped

        Raises:
            ConfigurationError: If options is None
        """
        if options is None:
            raise ConfigurationError("A region needs translation options")
        self._options = options
        self._invalidate()
        if await self._rebuild():
            self._listener.on_content_changed(self._buffer)

    async def _rebuild(self) -> bool:
        """Re-resolve; False when a newer update superseded this one."""
        generation = self._generation
        resolution = await self._resolve()
        if generation != self._generation:
            return False
        self._apply_resolution(resolution)
        return True

    def _invalidate(self) -> None:
        self._generation += 1
        self._cached = None
        self._resolution = Resolution(None, None, "pending")
        self._set_view(render_plain(self._text), Phase.SHOWING_ORIGINAL)
