"""Translation loop: load, classify, translate, count, write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import polib

from .analyzers.message_filter import SOURCE_TOKEN_RE, should_translate
from .providers import Translator
from .schemas import RunSettings
from .utils.cancellation import CancellationToken
from .utils.catalog import apply_translation, load_catalog, plural_count, write_catalog
from .utils.debug_buffer import recent as debug_recent

log = logging.getLogger("potr.runner")

PROGRESS_EVERY = 10

Loader = Callable[[str], polib.POFile]
Writer = Callable[[polib.POFile, str], None]


@dataclass
class RunCounters:
    processed: int = 0
    translated: int = 0
    failed: int = 0

    def __str__(self) -> str:
        return f"processed={self.processed} translated={self.translated} failed={self.failed}"


class CatalogTranslator:
    """
    Drives one run over one catalog.

    Messages are translated strictly one at a time. A failing translation is
    counted and skipped; only load and write failures abort the run.
    """

    def __init__(
        self,
        settings: RunSettings,
        translator: Translator,
        token: Optional[CancellationToken] = None,
        *,
        loader: Loader = load_catalog,
        writer: Writer = write_catalog,
    ) -> None:
        self.settings = settings
        self.filters = settings.filters
        self.translator = translator
        self.token = token or CancellationToken()
        self.loader = loader
        self.writer = writer
        self.counters = RunCounters()

    async def run(self) -> RunCounters:
        catalog = self.loader(self.settings.po_file_path)
        log.info("Loaded %s (%d entries)", self.settings.po_file_path, len(catalog))

        if self.filters.skip_translation:
            log.info("Translation skipped, writing catalog back unchanged")
        else:
            await self._translate_catalog(catalog)

        self.writer(catalog, self.settings.output_file_path)
        log.info("Wrote %s (%s)", self.settings.output_file_path, str(self.counters))
        return self.counters

    async def _translate_catalog(self, catalog: polib.POFile) -> None:
        limit = self.filters.message_limit
        nplurals = plural_count(catalog, self.settings.translator.target_lang)

        for entry in catalog:
            if self.token.cancelled:
                log.info("Cancelled, leaving the remaining entries untouched")
                break
            if entry.obsolete:
                continue
            if not should_translate(entry, self.filters, SOURCE_TOKEN_RE):
                continue

            await self._translate_entry(entry, nplurals)

            if self.counters.processed % PROGRESS_EVERY == 0:
                log.info("Progress: %s", str(self.counters))

            if limit > 0 and self.counters.translated >= limit:
                log.info("Message limit %d reached", limit)
                break

    async def _translate_entry(self, entry: polib.POEntry, nplurals: int) -> None:
        self.counters.processed += 1
        try:
            singular = await self.translator.translate(entry.msgid)
            plural = None
            if entry.msgid_plural:
                plural = await self.translator.translate(entry.msgid_plural)
        except Exception as e:
            self.counters.failed += 1
            log.warning("Failed to translate %r: %s", entry.msgid[:80], e)
            log.debug("Recent provider exchanges: %s", debug_recent(3))
            return

        apply_translation(entry, singular, plural, nplurals)
        self.counters.translated += 1
        log.debug("Translated %r -> %r", entry.msgid[:60], singular[:60])
