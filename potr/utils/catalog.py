from __future__ import annotations

import logging
import os
import pathlib
from typing import Dict, Optional, Union

import polib

from ..errors import CatalogError
from .plurals import nplurals_for_language, nplurals_from_header

log = logging.getLogger("potr.catalog")

PathLike = Union[str, os.PathLike]


# -----------------------------------------------------------------------------
# Load / write
# -----------------------------------------------------------------------------
def load_catalog(path: PathLike) -> polib.POFile:
    """
    Parse a PO file from disk.

    polib treats a non-existent path as inline PO text, so the existence check
    has to happen here or a typo in the path would load an empty catalog.
    """
    p = pathlib.Path(path)
    if not p.is_file():
        raise CatalogError(f"PO file not found: {p}")
    try:
        catalog = polib.pofile(str(p), wrapwidth=78)
    except (OSError, ValueError) as e:
        raise CatalogError(f"Invalid PO file {p}: {e}") from e
    log.debug("Loaded %s (%d entries)", p, len(catalog))
    return catalog


def write_catalog(catalog: polib.POFile, path: PathLike) -> None:
    p = pathlib.Path(path)
    try:
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)
        catalog.save(str(p))
    except OSError as e:
        raise CatalogError(f"Failed to write PO file {p}: {e}") from e
    log.debug("Wrote %s (%d entries)", p, len(catalog))


# -----------------------------------------------------------------------------
# Entry helpers
# -----------------------------------------------------------------------------
def is_translated(entry: polib.POEntry) -> bool:
    """True when the entry already carries a non-empty translation."""
    if entry.msgid_plural:
        return any(v for v in (entry.msgstr_plural or {}).values())
    return bool(entry.msgstr)


def source_locations(entry: polib.POEntry) -> str:
    """Pack the entry's #: references into one space-separated 'path:line' string."""
    refs = []
    for path, line in entry.occurrences or []:
        refs.append(f"{path}:{line}" if line else str(path))
    return " ".join(refs)


def plural_count(catalog: polib.POFile, target_lang: str) -> int:
    header = (catalog.metadata or {}).get("Plural-Forms")
    return nplurals_from_header(header) or nplurals_for_language(target_lang)


def apply_translation(
    entry: polib.POEntry,
    singular: str,
    plural: Optional[str] = None,
    nplurals: int = 2,
) -> None:
    """
    Store a translation on the entry and drop its fuzzy flag.

    Plural entries get form 0 from the singular text and every other form from
    the plural text.
    """
    if entry.msgid_plural:
        forms: Dict[int, str] = {0: singular}
        for i in range(1, max(1, nplurals)):
            forms[i] = plural if plural is not None else singular
        entry.msgstr_plural = forms
    else:
        entry.msgstr = singular
    if "fuzzy" in entry.flags:
        entry.flags.remove("fuzzy")
