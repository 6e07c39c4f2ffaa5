from __future__ import annotations
from typing import Dict, Optional, Protocol, Type

import httpx

from ..errors import ConfigurationError
from ..schemas import TranslatorSettings
from .deepl import DeepLTranslator
from .local import ClearTranslator, CloneTranslator
from .openai_compat import AzureOpenAITranslator, OpenAICompatTranslator


class Translator(Protocol):
    name: str

    async def translate(self, text: str) -> str:
        ...


_REMOTE: Dict[str, Type] = {
    "openai": OpenAICompatTranslator,
    "azure-openai": AzureOpenAITranslator,
    "deepl": DeepLTranslator,
}

_LOCAL: Dict[str, Type] = {
    "clear": ClearTranslator,
    "clone": CloneTranslator,
}


def build_translator(
    settings: TranslatorSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Translator:
    """
    Build the engine named by settings.engine. Called once per run.

    Raises ConfigurationError for missing credentials or unsupported options,
    so a misconfigured run fails before the catalog is touched.
    """
    engine = settings.engine
    if engine in _LOCAL:
        return _LOCAL[engine](settings)
    if engine in _REMOTE:
        return _REMOTE[engine](settings, transport=transport)
    raise ConfigurationError(f"Unsupported engine '{engine}'")


__all__ = [
    "Translator",
    "build_translator",
    "ClearTranslator",
    "CloneTranslator",
    "OpenAICompatTranslator",
    "AzureOpenAITranslator",
    "DeepLTranslator",
]
