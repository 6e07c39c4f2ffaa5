from __future__ import annotations

from ..schemas import TranslatorSettings


class ClearTranslator:
    """Returns an empty string, wiping the translation of every accepted entry."""

    name = "clear"

    def __init__(self, settings: TranslatorSettings):
        pass

    async def translate(self, text: str) -> str:
        return ""


class CloneTranslator:
    """Echoes the source text back as its own translation."""

    name = "clone"

    def __init__(self, settings: TranslatorSettings):
        pass

    async def translate(self, text: str) -> str:
        return text
