from __future__ import annotations
from typing import Dict, Optional

import httpx

from ..errors import ConfigurationError, ProviderError
from ..schemas import TranslatorSettings
from ..utils.debug_buffer import record as dbg_record

DEEPL_PRO_URL = "https://api.deepl.com"
DEEPL_FREE_URL = "https://api-free.deepl.com"

# ISO-639-1 -> DeepL target_lang
DEEPL_TARGETS: Dict[str, str] = {
    "bg": "BG", "cs": "CS", "da": "DA", "de": "DE", "el": "EL",
    "en": "EN", "es": "ES", "et": "ET", "fi": "FI", "fr": "FR",
    "hu": "HU", "id": "ID", "it": "IT", "ja": "JA", "lt": "LT",
    "lv": "LV", "nl": "NL", "pl": "PL", "pt": "PT", "ro": "RO",
    "ru": "RU", "sk": "SK", "sl": "SL", "sv": "SV", "tr": "TR",
    "uk": "UK", "zh": "ZH",
}


def deepl_target(lang: str) -> str:
    code = DEEPL_TARGETS.get((lang or "").lower())
    if code is None:
        raise ConfigurationError(f"Unsupported language for DeepL: {lang}")
    return code


def deepl_base_url(api_key: str, api_base: Optional[str] = None) -> str:
    if api_base:
        return api_base.rstrip("/")
    # Free-plan keys carry a ":fx" suffix and live on a separate host
    return DEEPL_FREE_URL if api_key.endswith(":fx") else DEEPL_PRO_URL


class DeepLTranslator:
    name = "deepl"

    def __init__(
        self,
        settings: TranslatorSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.api_key:
            raise ConfigurationError(
                'DeepL API key is not specified, please specify it via "-k" option '
                "or POTR_API_KEY_DEEPL environment variable."
            )
        self.target_lang = deepl_target(settings.target_lang)
        self.url = f"{deepl_base_url(settings.api_key, settings.api_base)}/v2/translate"
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"DeepL-Auth-Key {settings.api_key}",
        }
        self.transport = transport
        self.timeout = httpx.Timeout(
            timeout=None,
            connect=30.0,
            read=float(settings.timeout_seconds),
            write=60.0,
            pool=60.0,
        )

    async def translate(self, text: str) -> str:
        body = {"text": [text], "target_lang": self.target_lang}
        dbg_record({"provider": self.name, "dir": "request", "chars": len(text), "snippet": text[:120]})

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                r = await client.post(self.url, headers=self.headers, json=body)
            except httpx.TimeoutException as e:
                raise ProviderError(f"Timeout contacting DeepL: {e}") from e
            except httpx.HTTPError as e:
                raise ProviderError(f"HTTP error contacting DeepL: {e}") from e

        if r.status_code == 456:
            raise ProviderError("DeepL quota exceeded (HTTP 456)")
        if r.status_code >= 400:
            dbg_record({"provider": self.name, "dir": "error", "status": r.status_code, "snippet": r.text[:200]})
            raise ProviderError(f"DeepL HTTP {r.status_code}: {r.text[:500]}")

        try:
            translations = r.json()["translations"]
            result = translations[0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected DeepL response: {r.text[:300]}") from e

        dbg_record({"provider": self.name, "dir": "response", "snippet": str(result)[:200]})
        return str(result)
