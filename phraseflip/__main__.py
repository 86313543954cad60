"""
Entry point for running phraseflip as a module.

Usage:
    python -m phraseflip --help
    python -m phraseflip show "Bonjour" --target en --toggle
"""
from .cli import app


if __name__ == "__main__":
    app()
