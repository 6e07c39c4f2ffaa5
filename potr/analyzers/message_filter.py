# potr/analyzers/message_filter.py
"""
Decide, per catalog entry, whether it goes to the translation engine.

Rules are checked top-down and the first one that fires decides. The order is
the contract:

  1. already translated (when skip_translated)
  2. content shape of msgid: code block, single character, formula block,
     markdown image, plain text (exactly one applies)
  3. source location filter
  4. include filter
  5. exclude filter (so exclude wins over include)
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import polib

from ..schemas import FilterSettings
from ..utils.catalog import is_translated, source_locations

log = logging.getLogger("potr.filter")

# "path:line" references inside the packed #: string
SOURCE_TOKEN_RE = re.compile(r"[^:]+:\d+")

CODE_BLOCK_MARKER = "```"
FORMULA_BLOCK_MARKER = "$$"
EMPTY_ALT_IMAGE_PREFIX = "![]("
MARKDOWN_IMAGE_RE = re.compile(r"!\[.*\)", re.DOTALL)


@dataclass(frozen=True)
class Decision:
    translate: bool
    reason: str


ACCEPT = Decision(True, "accepted")

Rule = Callable[[polib.POEntry, FilterSettings, re.Pattern], Optional[Decision]]


# -----------------------------------------------------------------------------
# Content shape
# -----------------------------------------------------------------------------
def is_markdown_image(text: str) -> bool:
    return text.startswith(EMPTY_ALT_IMAGE_PREFIX) or bool(MARKDOWN_IMAGE_RE.fullmatch(text))


def content_shape(text: str) -> str:
    """One of 'code', 'single-char', 'formula', 'image', 'text'."""
    if text.startswith(CODE_BLOCK_MARKER):
        return "code"
    if len(text) == 1:
        return "single-char"
    if text.startswith(FORMULA_BLOCK_MARKER):
        return "formula"
    if is_markdown_image(text):
        return "image"
    return "text"


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------
def _translated_rule(entry: polib.POEntry, filters: FilterSettings, _tokens: re.Pattern) -> Optional[Decision]:
    if filters.skip_translated and is_translated(entry):
        return Decision(False, "already translated")
    return None


def _shape_rule(entry: polib.POEntry, filters: FilterSettings, _tokens: re.Pattern) -> Optional[Decision]:
    shape = content_shape(entry.msgid or "")
    if shape == "code" and filters.skip_code_blocks:
        return Decision(False, "code block")
    if shape == "single-char":
        return Decision(False, "single character")
    if shape == "formula" and filters.skip_formula_blocks:
        return Decision(False, "formula block")
    if shape == "image" and filters.skip_markdown_images:
        return Decision(False, "markdown image")
    if shape == "text" and filters.skip_text:
        return Decision(False, "plain text")
    return None


def _source_rule(entry: polib.POEntry, filters: FilterSettings, tokens: re.Pattern) -> Optional[Decision]:
    if filters.source_regex is None:
        return None
    refs = tokens.findall(source_locations(entry))
    if any(filters.source_regex.search(ref.strip()) for ref in refs):
        return None
    return Decision(False, "source filter")


def _include_rule(entry: polib.POEntry, filters: FilterSettings, _tokens: re.Pattern) -> Optional[Decision]:
    if filters.include_regex is not None and not filters.include_regex.search(entry.msgid or ""):
        return Decision(False, "not included")
    return None


def _exclude_rule(entry: polib.POEntry, filters: FilterSettings, _tokens: re.Pattern) -> Optional[Decision]:
    if filters.exclude_regex is not None and filters.exclude_regex.search(entry.msgid or ""):
        return Decision(False, "excluded")
    return None


RULES: List[Tuple[str, Rule]] = [
    ("translated", _translated_rule),
    ("shape", _shape_rule),
    ("source", _source_rule),
    ("include", _include_rule),
    ("exclude", _exclude_rule),
]


def classify(
    entry: polib.POEntry,
    filters: FilterSettings,
    source_token_re: re.Pattern = SOURCE_TOKEN_RE,
) -> Decision:
    for name, rule in RULES:
        decision = rule(entry, filters, source_token_re)
        if decision is not None:
            log.debug("Skipping %r (%s rule: %s)", (entry.msgid or "")[:60], name, decision.reason)
            return decision
    return ACCEPT


def should_translate(
    entry: polib.POEntry,
    filters: FilterSettings,
    source_token_re: re.Pattern = SOURCE_TOKEN_RE,
) -> bool:
    return classify(entry, filters, source_token_re).translate
