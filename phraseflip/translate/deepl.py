"""
DeepL backend using the deep-translator library.

Requires a DeepL API key, looked up through phraseflip.keys (environment
variable DEEPL_API_KEY, OS keychain, or ~/.phraseflip/keys.json).
"""

from __future__ import annotations

from typing import Optional

from phraseflip.keys import require_key
from phraseflip.models import DetectedLanguage
from phraseflip.translate.base import Backend
from phraseflip.translate.detection import LinguaDetector, shared_detector


class DeeplBackend(Backend):
    """DeepL translation via deep-translator's DeeplTranslator."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        use_free_api: bool = True,
        detector: Optional[LinguaDetector] = None,
    ):
        self.api_key = api_key or require_key("deepl")
        self.use_free_api = use_free_api
        self._detector = detector

    @property
    def name(self) -> str:
        return "deepl"

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        detector = self._detector or shared_detector()
        return detector.detect(text, backend_name=self.name)

    def translate(self, text: str, target_language_code: str) -> str:
        try:
            from deep_translator import DeeplTranslator
        except ImportError:
            raise ImportError(
                "deep-translator required. Install with: pip install deep-translator"
            )

        try:
            translator = DeeplTranslator(
                api_key=self.api_key,
                source="auto",
                target=target_language_code.lower(),
                use_free_api=self.use_free_api,
            )
            return translator.translate(text)
        except Exception as e:
            raise RuntimeError(f"DeepL translation failed: {e}") from e
