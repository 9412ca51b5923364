"""Translation backend implementations.

Importing this package registers every backend with ``TransInterface.registered``.

Modules:
- DeeplTranslation: DeepL through the official ``deepl`` SDK.
- GeminiTranslation: Google Gemini ``generateContent`` with API key rotation.
- LibreTranslateTranslation: LibreTranslate ``/translate`` endpoint.
"""

from core.trans.engines.trans_deepl import DeeplTranslation
from core.trans.engines.trans_gemini import GeminiTranslation
from core.trans.engines.trans_libretranslate import LibreTranslateTranslation

__all__: list[str] = [
    "DeeplTranslation",
    "GeminiTranslation",
    "LibreTranslateTranslation",
]
