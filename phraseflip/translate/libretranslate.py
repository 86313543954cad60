"""
LibreTranslate backend (open source, self-hostable).

LibreTranslate exposes both a /detect and a /translate endpoint, so this
backend detects server-side instead of through lingua.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from phraseflip.models import DetectedLanguage
from phraseflip.translate.base import Backend, language_name

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://libretranslate.com"


class LibreTranslateBackend(Backend):
    """LibreTranslate HTTP API backend.

    Usage:
        backend = LibreTranslateBackend(base_url="http://localhost:5000")
        detected = backend.detect("Bonjour")
        backend.translate("Bonjour", "en")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        min_confidence: float = 0.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.min_confidence = min_confidence

    @property
    def name(self) -> str:
        return "libretranslate"

    def _post(self, endpoint: str, payload: dict):
        if self.api_key:
            payload = {**payload, "api_key": self.api_key}
        response = requests.post(
            f"{self.base_url}/{endpoint}",
            json=payload,
            headers={"User-Agent": "phraseflip/0.1.0"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        if not text.strip():
            return None

        try:
            candidates = self._post("detect", {"q": text})
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"LibreTranslate detection failed: {e}") from e

        if not isinstance(candidates, list) or not candidates:
            logger.debug("LibreTranslate returned no detection candidates")
            return None

        best = max(candidates, key=lambda c: c.get("confidence", 0))
        code = best.get("language")
        if not code or best.get("confidence", 0) < self.min_confidence:
            return None

        return DetectedLanguage(
            text=text,
            language_code=code.lower(),
            language_name=language_name(code),
            detection_backend_name=self.name,
        )

    def translate(self, text: str, target_language_code: str) -> str:
        try:
            result = self._post(
                "translate",
                {
                    "q": text,
                    "source": "auto",
                    "target": target_language_code.lower(),
                    "format": "text",
                },
            )
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"LibreTranslate translation failed: {e}") from e

        translation = result.get("translatedText") if isinstance(result, dict) else None
        if translation is None:
            raise RuntimeError(f"LibreTranslate translation failed: malformed response {result!r}")
        return translation
