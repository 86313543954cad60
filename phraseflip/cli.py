"""
Command-line interface for phraseflip.

The CLI is a terminal host for toggleable regions: it assembles a backend
registry and translation options from flags (falling back to settings from
the environment), renders the region buffer with rich, and wires Enter key
presses to region activation.

Usage:
    phraseflip detect "Bonjour tout le monde"
    phraseflip resolve "Bonjour" --target en --backend google-free
    phraseflip translate "Bonjour" --target en
    phraseflip show "Bonjour" --target en --toggle
    phraseflip interactive "Hola amigos" --target en --behavior hide-signature
    phraseflip keys set deepl
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from phraseflip import __version__
from phraseflip.config import load_settings, setup_logging
from phraseflip.keys import KeyManager, SERVICES
from phraseflip.models import AnnotatedText, Phase, TranslationResult
from phraseflip.options import (
    BehaviorSet,
    ConfigurationError,
    OptionsBuilder,
    TranslationOptions,
    translated_from,
)
from phraseflip.region import RegionContext, RegionListener, ToggleableRegion
from phraseflip.render import to_rich_text
from phraseflip.resolve import resolve as resolve_backend
from phraseflip.resolve import translate as translate_text
from phraseflip.translate.base import AVAILABLE_BACKENDS, Backend, create_backend
from phraseflip.translate.registry import BackendRegistry

app = typer.Typer(
    name="phraseflip",
    help="phraseflip: inline, togglable translation of text regions",
    add_completion=False,
)
keys_app = typer.Typer(help="Manage API keys for translation backends")
app.add_typer(keys_app, name="keys")
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"phraseflip v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    ),
):
    """phraseflip: inline, togglable translation."""
    setup_logging(log_level or load_settings().log_level)


# ----------------------------------------------------------------------------
# Assembly helpers
# ----------------------------------------------------------------------------

def _make_backend(name: str, assume_language: Optional[str] = None) -> Backend:
    kwargs = {}
    lowered = name.lower()
    if lowered in ("dummy", "echo", "test") and assume_language:
        kwargs["detections"] = {"*": assume_language}
    if lowered in ("libretranslate", "libre"):
        settings = load_settings()
        if settings.libretranslate_url:
            kwargs["base_url"] = settings.libretranslate_url
        key = KeyManager().get_key("libretranslate")
        if key:
            kwargs["api_key"] = key
    return create_backend(name, **kwargs)


def build_registry(names: List[str], assume_language: Optional[str] = None) -> BackendRegistry:
    """Create the registry; the first name is the default backend."""
    if not names:
        names = load_settings().backends
    if not names:
        raise ConfigurationError("No backends configured")
    backends = [_make_backend(name, assume_language) for name in names]
    return BackendRegistry(backends[0], *backends[1:])


def _parse_preference(value: str) -> tuple[str, str, list[str]]:
    """Parse 'fr=deepl' or 'fr=deepl:en,de'."""
    if "=" not in value:
        raise ConfigurationError(f"Invalid preference '{value}', expected SOURCE=BACKEND[:TARGETS]")
    source, rest = value.split("=", 1)
    backend, _, targets = rest.partition(":")
    target_list = [t.strip() for t in targets.split(",") if t.strip()] or ["*"]
    return source.strip(), backend.strip(), target_list


def build_options(
    registry: BackendRegistry,
    target: Optional[str],
    prompt: Optional[str],
    behaviors: List[str],
    exclude: List[str],
    prefer: List[str],
    detect_with: Optional[str] = None,
) -> TranslationOptions:
    settings = load_settings()
    builder = OptionsBuilder(target or settings.target_lang or "")
    builder.exclude_sources(exclude)
    builder.include_behaviors(*BehaviorSet.parse(behaviors))

    for value in prefer:
        source, backend_name, targets = _parse_preference(value)
        backend = registry.get(backend_name) or _make_backend(backend_name)
        builder.specify_source_translation(source, backend, targets)

    if detect_with:
        builder.preferred_detection(registry.get(detect_with) or _make_backend(detect_with))

    return builder.build(prompt or settings.prompt or "", translated_from)


class ConsoleListener(RegionListener):
    """Prints region notifications."""

    def on_translating(self) -> None:
        console.print("[dim]Translating...[/]")

    def on_translated(self, result: TranslationResult) -> None:
        console.print(f"[dim]Translated by {result.backend_name}[/]")


def _print_buffer(buffer: AnnotatedText) -> None:
    console.print(to_rich_text(buffer))
    console.print()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/] {message}", style="bold")
    raise typer.Exit(1)


# ----------------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------------

BACKEND_OPTION = typer.Option(
    [], "--backend", "-b",
    help="Backend to register (repeatable; the first one is the default)",
)
ASSUME_OPTION = typer.Option(
    None, "--assume-language",
    help="Language the dummy backend reports for every text",
)


@app.command()
def detect(
    text: str = typer.Argument(..., help="Text to classify"),
    backend: List[str] = BACKEND_OPTION,
    assume_language: Optional[str] = ASSUME_OPTION,
):
    """Detect the language of a text."""
    try:
        registry = build_registry(backend, assume_language)
        detected = registry.default.detect(text) if text else None
    except (ConfigurationError, ValueError, RuntimeError) as e:
        _fail(str(e))

    if detected is None:
        console.print("[yellow]Language could not be determined[/]")
        return
    console.print(
        f"[green]{detected.language_name}[/] ({detected.language_code}) "
        f"[dim]via {detected.detection_backend_name}[/]"
    )


@app.command()
def resolve(
    text: str = typer.Argument(..., help="Text to resolve"),
    target: Optional[str] = typer.Option(None, "--target", "-l", help="Target language code"),
    backend: List[str] = BACKEND_OPTION,
    behavior: List[str] = typer.Option([], "--behavior", help="Behavior flag (repeatable)"),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Source language to exclude"),
    prefer: List[str] = typer.Option([], "--prefer", help="SOURCE=BACKEND[:TARGETS] preference"),
    detect_with: Optional[str] = typer.Option(None, "--detect-with", help="Backend used for detection"),
    assume_language: Optional[str] = ASSUME_OPTION,
):
    """Show which backend would translate a text, if any."""
    try:
        registry = build_registry(backend, assume_language)
        options = build_options(registry, target, "Translate", behavior, exclude, prefer, detect_with)
        resolution = resolve_backend(text, options, registry)
    except (ConfigurationError, ValueError, RuntimeError) as e:
        _fail(str(e))

    table = Table(title="Resolution")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    detected = resolution.detected
    table.add_row("Detected", f"{detected.language_name} ({detected.language_code})" if detected else "unknown")
    table.add_row("Target", options.target_language_code)
    table.add_row("Backend", resolution.backend.name if resolution.backend else "[yellow]none[/]")
    table.add_row("Reason", resolution.reason)
    console.print(table)


@app.command()
def translate(
    text: str = typer.Argument(..., help="Text to translate"),
    target: Optional[str] = typer.Option(None, "--target", "-l", help="Target language code"),
    backend: List[str] = BACKEND_OPTION,
    behavior: List[str] = typer.Option([], "--behavior", help="Behavior flag (repeatable)"),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Source language to exclude"),
    prefer: List[str] = typer.Option([], "--prefer", help="SOURCE=BACKEND[:TARGETS] preference"),
    assume_language: Optional[str] = ASSUME_OPTION,
):
    """Translate a text once; untranslatable text is printed unchanged."""
    try:
        registry = build_registry(backend, assume_language)
        options = build_options(registry, target, "Translate", behavior, exclude, prefer)
        result = translate_text(text, options, registry)
    except (ConfigurationError, ValueError, RuntimeError) as e:
        _fail(str(e))

    console.print(result.translated_text, markup=False)
    if result.is_passthrough:
        console.print("[dim]Not translated[/]")
    else:
        console.print(f"[dim]via {result.backend_name}[/]")


@app.command()
def show(
    text: str = typer.Argument(..., help="Source text of the region"),
    target: Optional[str] = typer.Option(None, "--target", "-l", help="Target language code"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Prompt shown under the text"),
    backend: List[str] = BACKEND_OPTION,
    behavior: List[str] = typer.Option([], "--behavior", help="Behavior flag (repeatable)"),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Source language to exclude"),
    prefer: List[str] = typer.Option([], "--prefer", help="SOURCE=BACKEND[:TARGETS] preference"),
    detect_with: Optional[str] = typer.Option(None, "--detect-with", help="Backend used for detection"),
    toggle: bool = typer.Option(False, "--toggle", "-t", help="Activate once and show the translation"),
    assume_language: Optional[str] = ASSUME_OPTION,
):
    """Render a region, optionally toggled to its translation."""
    try:
        registry = build_registry(backend, assume_language)
        options = build_options(registry, target, prompt, behavior, exclude, prefer, detect_with)
        region = ToggleableRegion(text, options, RegionContext(registry), ConsoleListener())
    except (ConfigurationError, ValueError, RuntimeError) as e:
        _fail(str(e))

    _print_buffer(region.buffer)
    if not toggle:
        return
    if not region.translatable:
        console.print("[yellow]Nothing to translate for this text[/]")
        return
    try:
        asyncio.run(region.activate())
    except RuntimeError as e:
        _fail(str(e))
    _print_buffer(region.buffer)


@app.command()
def interactive(
    text: str = typer.Argument(..., help="Initial source text"),
    target: Optional[str] = typer.Option(None, "--target", "-l", help="Target language code"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Prompt shown under the text"),
    backend: List[str] = BACKEND_OPTION,
    behavior: List[str] = typer.Option([], "--behavior", help="Behavior flag (repeatable)"),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Source language to exclude"),
    prefer: List[str] = typer.Option([], "--prefer", help="SOURCE=BACKEND[:TARGETS] preference"),
    assume_language: Optional[str] = ASSUME_OPTION,
):
    """Toggle a region with Enter; ':new text' replaces the source, 'q' quits."""
    try:
        registry = build_registry(backend, assume_language)
        options = build_options(registry, target, prompt, behavior, exclude, prefer)
        region = ToggleableRegion(text, options, RegionContext(registry), ConsoleListener())
    except (ConfigurationError, ValueError, RuntimeError) as e:
        _fail(str(e))

    while True:
        _print_buffer(region.buffer)
        command = typer.prompt("[Enter] toggle, :text edit, q quit", default="", show_default=False)
        if command.strip().lower() == "q":
            break
        if command.startswith(":"):
            asyncio.run(region.update_source(command[1:].strip()))
            continue
        if region.phase is Phase.SHOWING_ORIGINAL and not region.translatable:
            console.print("[yellow]Nothing to translate for this text[/]")
            continue
        try:
            asyncio.run(region.activate())
        except RuntimeError as e:
            console.print(f"[red]Error:[/] {e}")


@app.command()
def backends():
    """List available backends."""
    table = Table(title="Backends")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name, description in AVAILABLE_BACKENDS.items():
        table.add_row(name, description)
    console.print(table)


@keys_app.command("list")
def keys_list():
    """Show which services have a key configured."""
    table = Table(title="API keys")
    table.add_column("Service", style="cyan")
    table.add_column("Set")
    table.add_column("Source")
    table.add_column("Key", style="dim")
    for info in KeyManager().list_keys():
        table.add_row(info.service, "✓" if info.is_set else "✗", info.source, info.masked_value)
    console.print(table)


@keys_app.command("set")
def keys_set(
    service: str = typer.Argument(..., help=f"Service ({', '.join(SERVICES)})"),
    key: str = typer.Option(..., prompt=True, hide_input=True, help="API key"),
    no_keyring: bool = typer.Option(False, "--no-keyring", help="Store in the config file"),
):
    """Store an API key."""
    location = KeyManager().set_key(service, key, use_keyring=not no_keyring)
    console.print(f"[green]✓[/] Stored {service} key in {location}")


@keys_app.command("delete")
def keys_delete(service: str = typer.Argument(..., help="Service name")):
    """Delete a stored API key."""
    if KeyManager().delete_key(service):
        console.print(f"[green]✓[/] Deleted {service} key")
    else:
        console.print(f"[yellow]No stored key for {service}[/]")


if __name__ == "__main__":
    app()
